"""Database models."""

from contact_ledger.persistence.models.contact import Contact
from contact_ledger.persistence.models.merge_history import MergeHistory
from contact_ledger.persistence.models.owner import ContactOwner, Owner
from contact_ledger.persistence.models.tag import ContactTag, Tag

__all__ = [
    "Contact",
    "ContactOwner",
    "ContactTag",
    "MergeHistory",
    "Owner",
    "Tag",
]
