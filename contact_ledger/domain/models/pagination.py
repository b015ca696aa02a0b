"""Pagination result type."""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from contact_ledger.core.errors import InvalidInputError

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of results. ``total`` counts every match, not just this page."""

    data: list[T]
    total: int
    page: int
    limit: int
    filters: dict[str, Any] = field(default_factory=dict)


def resolve_page(
    page: int,
    limit: int | None,
    default_limit: int,
    max_limit: int,
) -> tuple[int, int]:
    """Validate 1-based pagination and return ``(limit, skip)``.

    A limit below 1 or above ``max_limit`` is rejected rather than coerced.

    Raises:
        InvalidInputError: If page or limit is out of range
    """
    if limit is None:
        limit = default_limit
    if page < 1:
        raise InvalidInputError(f"page must be >= 1, got {page}")
    if limit < 1:
        raise InvalidInputError(f"limit must be >= 1, got {limit}")
    if limit > max_limit:
        raise InvalidInputError(f"limit must be <= {max_limit}, got {limit}")
    return limit, (page - 1) * limit
