"""Tests for enum parsing."""

import pytest

from contact_ledger.core.enums import (
    MergeReason,
    MergeType,
    RelationshipType,
    SourceSystem,
    parse_merge_reason,
    parse_merge_type,
    parse_relationship_type,
    parse_source_system,
)
from contact_ledger.core.errors import InvalidInputError


@pytest.mark.parametrize(
    "parse, enum_cls",
    [
        (parse_source_system, SourceSystem),
        (parse_relationship_type, RelationshipType),
        (parse_merge_type, MergeType),
        (parse_merge_reason, MergeReason),
    ],
)
def test_parse_accepts_every_member(parse, enum_cls):
    for member in enum_cls:
        assert parse(member.value) is member
        assert parse(member) is member


@pytest.mark.parametrize(
    "parse",
    [parse_source_system, parse_relationship_type, parse_merge_type, parse_merge_reason],
)
def test_parse_rejects_unknown_value(parse):
    with pytest.raises(InvalidInputError) as exc_info:
        parse("NOT_A_MEMBER")
    assert "NOT_A_MEMBER" in exc_info.value.message


def test_parse_is_case_sensitive():
    with pytest.raises(InvalidInputError):
        parse_source_system("zoho")


def test_optional_relationship_type_maps_empty_to_none():
    assert parse_relationship_type(None) is None
    assert parse_relationship_type("") is None


def test_required_enums_reject_none():
    with pytest.raises(InvalidInputError):
        parse_source_system(None)
    with pytest.raises(InvalidInputError):
        parse_merge_type(None)
