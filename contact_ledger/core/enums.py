"""Enumerations shared across the contact ledger.

Values are persisted as plain strings; ``parse_*`` converts a stored or
caller-supplied value back into its enum member, raising
``InvalidInputError`` for anything that is not a member.
"""

from enum import Enum
from typing import TypeVar

from contact_ledger.core.errors import InvalidInputError

EnumType = TypeVar("EnumType", bound=Enum)


class SourceSystem(str, Enum):
    """Systems that feed contacts into the ledger."""

    INVOICE = "INVOICE"
    GMAIL = "GMAIL"
    OUTLOOK = "OUTLOOK"
    YAHOO = "YAHOO"
    ZOHO = "ZOHO"
    ASHISH = "ASHISH"
    MOBILE = "MOBILE"


class RelationshipType(str, Enum):
    """Business relationship with a contact."""

    CLIENT = "CLIENT"
    VENDOR = "VENDOR"
    LEAD = "LEAD"
    OTHER = "OTHER"


class MergeType(str, Enum):
    """How a consolidation was triggered."""

    AUTO_MERGE = "AUTO_MERGE"
    MANUAL_MERGE = "MANUAL_MERGE"
    DEDUPLICATION = "DEDUPLICATION"


class MergeReason(str, Enum):
    """Why two identities were consolidated."""

    SAME_PHONE = "SAME_PHONE"
    SIMILAR_NAME = "SIMILAR_NAME"
    EXACT_MATCH = "EXACT_MATCH"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"


def parse_enum(enum_cls: type[EnumType], raw: object) -> EnumType:
    """Convert a raw value into a member of ``enum_cls``.

    Args:
        enum_cls: Target enumeration
        raw: Enum member or its string value

    Returns:
        The matching enum member

    Raises:
        InvalidInputError: If ``raw`` is not a value of ``enum_cls``
    """
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInputError(
            f"Invalid {enum_cls.__name__} value {raw!r}; expected one of: {allowed}"
        ) from None


def parse_source_system(raw: object) -> SourceSystem:
    return parse_enum(SourceSystem, raw)


def parse_relationship_type(raw: object) -> RelationshipType | None:
    """Parse an optional relationship type; empty values map to None."""
    if raw is None or raw == "":
        return None
    return parse_enum(RelationshipType, raw)


def parse_merge_type(raw: object) -> MergeType:
    return parse_enum(MergeType, raw)


def parse_merge_reason(raw: object) -> MergeReason:
    return parse_enum(MergeReason, raw)
