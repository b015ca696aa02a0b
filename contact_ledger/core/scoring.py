"""Data-quality scoring for contacts.

The score is additive over five fields and the weights sum to 100, so the
result is always within [0, 100] without clamping.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

MOBILE_WEIGHT = 40
EMAIL_WEIGHT = 20
COMPANY_WEIGHT = 15
RELATIONSHIP_WEIGHT = 15
TRUSTED_SOURCE_WEIGHT = 10

DEFAULT_TRUSTED_SOURCES = ("INVOICE", "ZOHO")
DEFAULT_UNKNOWN_COMPANY = "Unknown"


def _value(raw: Any) -> Any:
    return raw.value if isinstance(raw, Enum) else raw


def _present(raw: Any) -> bool:
    return raw is not None and str(raw).strip() != ""


@dataclass(frozen=True)
class ScoringPolicy:
    """Scores how complete a contact record is."""

    trusted_sources: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_TRUSTED_SOURCES))
    unknown_company: str = DEFAULT_UNKNOWN_COMPANY

    @classmethod
    def from_names(cls, trusted_sources: Iterable[str], unknown_company: str = DEFAULT_UNKNOWN_COMPANY) -> "ScoringPolicy":
        return cls(
            trusted_sources=frozenset(str(_value(s)).upper() for s in trusted_sources),
            unknown_company=unknown_company,
        )

    def calculate(
        self,
        *,
        mobile: str | None,
        email: str | None,
        company_name: str | None,
        relationship_type: Any,
        source_system: Any,
    ) -> int:
        """Calculate the score from the five contributing fields."""
        score = 0
        if _present(mobile):
            score += MOBILE_WEIGHT
        if _present(email):
            score += EMAIL_WEIGHT
        if _present(company_name) and company_name != self.unknown_company:
            score += COMPANY_WEIGHT
        if _present(_value(relationship_type)):
            score += RELATIONSHIP_WEIGHT
        if _value(source_system) in self.trusted_sources:
            score += TRUSTED_SOURCE_WEIGHT
        return score

    def score(self, contact: Any) -> int:
        """Score any object exposing the contact attributes (ORM row, snapshot)."""
        return self.calculate(
            mobile=getattr(contact, "mobile", None),
            email=getattr(contact, "email", None),
            company_name=getattr(contact, "company_name", None),
            relationship_type=getattr(contact, "relationship_type", None),
            source_system=getattr(contact, "source_system", None),
        )
