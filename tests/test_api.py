"""Tests for the HTTP API."""

import pytest

API = "/api/v1"

CONTACT = {
    "name": "John Doe",
    "company_name": "Acme",
    "source_system": "INVOICE",
    "source_record_id": "INV-1",
    "mobile": "+919876543210",
    "email": "john@acme.com",
    "relationship_type": "CLIENT",
}


async def create_contact(client, **overrides) -> dict:
    response = await client.post(f"{API}/contacts", json={**CONTACT, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_contact_crud(client):
    created = await create_contact(client)
    assert created["data_quality_score"] == 100
    assert created["owners"] == []

    duplicate = await client.post(f"{API}/contacts", json={**CONTACT, "source_record_id": "INV-2"})
    assert duplicate.status_code == 409
    assert duplicate.json() == {"detail": "Contact with same name and mobile number already exists"}

    fetched = await client.get(f"{API}/contacts/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "John Doe"

    patched = await client.patch(f"{API}/contacts/{created['id']}", json={"email": None})
    assert patched.status_code == 200
    assert patched.json()["email"] is None
    assert patched.json()["data_quality_score"] == 80

    deleted = await client.delete(f"{API}/contacts/{created['id']}")
    assert deleted.status_code == 204

    missing = await client.get(f"{API}/contacts/{created['id']}")
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Contact not found"}


@pytest.mark.asyncio
async def test_create_contact_rejects_unknown_source(client):
    response = await client.post(f"{API}/contacts", json={**CONTACT, "source_system": "FAX"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_contacts(client):
    await create_contact(client, name="Alice", mobile=None, source_record_id="a")
    await create_contact(client, name="Bob", mobile=None, relationship_type="VENDOR", source_record_id="b")

    response = await client.get(f"{API}/contacts", params={"relationship_type": "VENDOR"})
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["data"][0]["name"] == "Bob"
    assert body["limit"] == 20

    invalid = await client.get(f"{API}/contacts", params={"limit": 0})
    assert invalid.status_code == 422
    assert "limit" in invalid.json()["detail"]


@pytest.mark.asyncio
async def test_owner_endpoints(client):
    contact = await create_contact(client)
    owner = (await client.post(f"{API}/owners", json={"name": "Zoho"})).json()

    added = await client.post(f"{API}/owners/contacts/{contact['id']}/owners/{owner['id']}")
    assert added.status_code == 204
    again = await client.post(f"{API}/owners/contacts/{contact['id']}/owners/{owner['id']}")
    assert again.status_code == 409

    fetched = (await client.get(f"{API}/contacts/{contact['id']}")).json()
    assert [o["name"] for o in fetched["owners"]] == ["Zoho"]

    owner_contacts = await client.get(f"{API}/owners/{owner['id']}/contacts")
    assert [c["id"] for c in owner_contacts.json()] == [contact["id"]]

    removed = await client.request(
        "DELETE", f"{API}/owners/{owner['id']}/contacts", json={"ids": [contact["id"], "ghost"]}
    )
    assert removed.status_code == 200
    assert removed.json() == {
        "succeeded": 1,
        "skipped": [{"id": "ghost", "reason": "contact_not_found"}],
    }


@pytest.mark.asyncio
async def test_tag_endpoints(client):
    contact = await create_contact(client)
    tag = (await client.post(f"{API}/tags", json={"name": "VIP"})).json()
    assert tag["color"] == "#3B82F6"
    assert tag["contact_count"] == 0

    bulk = await client.post(
        f"{API}/tags/contacts/{contact['id']}/tags", json={"ids": [tag["id"], tag["id"]]}
    )
    assert bulk.json() == {
        "succeeded": 1,
        "skipped": [{"id": tag["id"], "reason": "duplicate_in_request"}],
    }

    blocked = await client.delete(f"{API}/tags/{tag['id']}")
    assert blocked.status_code == 409
    assert blocked.json()["blocking_references"] == 1

    popular = await client.get(f"{API}/tags/popular")
    assert [(t["name"], t["contact_count"]) for t in popular.json()] == [("VIP", 1)]

    search = await client.get(f"{API}/tags/search", params={"q": "vi"})
    assert [t["name"] for t in search.json()] == ["VIP"]

    emails = await client.get(f"{API}/tags/{tag['id']}/contacts/email")
    assert [c["email"] for c in emails.json()] == ["john@acme.com"]

    untagged = await client.delete(f"{API}/tags/contacts/{contact['id']}/tags/{tag['id']}")
    assert untagged.status_code == 204

    deleted = await client.delete(f"{API}/tags/{tag['id']}")
    assert deleted.status_code == 200
    assert (await client.get(f"{API}/tags/{tag['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_merge_endpoints(client):
    primary = await create_contact(client, email=None, relationship_type=None)
    secondary = await create_contact(
        client,
        name="J. Doe",
        mobile=None,
        source_system="GMAIL",
        source_record_id="msg-1",
    )

    preview = await client.post(
        f"{API}/contacts/merge/preview", json={"contact_ids": [primary["id"], secondary["id"]]}
    )
    assert preview.status_code == 200
    assert [c["field"] for c in preview.json()["conflicts"]] == ["name"]
    assert preview.json()["suggested_primary_id"] == primary["id"]

    merged = await client.post(
        f"{API}/contacts/{primary['id']}/merge",
        json={
            "secondary_contact_ids": [secondary["id"]],
            "field_resolutions": {"email": secondary["id"]},
            "merged_by": "alice",
        },
    )
    assert merged.status_code == 200
    assert merged.json()["email"] == "john@acme.com"

    history = await client.get(f"{API}/merge-history", params={"contact_id": secondary["id"]})
    body = history.json()
    assert body["total"] == 1
    assert body["data"][0]["merge_type"] == "MANUAL_MERGE"
    assert body["data"][0]["merged_by"] == "alice"
    assert body["filters"] == {"contact_id": secondary["id"], "email_only": False}

    email_only = await client.get(f"{API}/merge-history", params={"email_only": "true"})
    assert email_only.json()["total"] == 1

    by_sources = await client.get(
        f"{API}/merge-history", params=[("source_system", "INVOICE"), ("source_system", "OUTLOOK")]
    )
    assert by_sources.json()["total"] == 0

    stats = await client.get(f"{API}/merge-history/statistics")
    assert stats.json()["total_merges"] == 1
    assert stats.json()["email_source_stats"] == {"GMAIL": 1}

    for_contact = await client.get(f"{API}/merge-history/contact/{primary['id']}")
    assert len(for_contact.json()) == 1

    sources = await client.get(f"{API}/merge-history/email-sources")
    assert "GMAIL" in sources.json()


@pytest.mark.asyncio
async def test_merge_history_rejects_bad_pagination(client):
    response = await client.get(f"{API}/merge-history", params={"limit": 0})

    assert response.status_code == 422
