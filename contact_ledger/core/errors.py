"""Error taxonomy raised by the domain services.

The transport layer translates these into protocol-specific responses
(see ``contact_ledger.main``).
"""


class LedgerError(Exception):
    """Base class for all contact ledger errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LedgerError):
    """A referenced contact, owner or tag does not exist."""


class ConflictError(LedgerError):
    """A uniqueness rule would be violated.

    ``blocking_references`` is set when a delete is refused because other
    rows still reference the target.
    """

    def __init__(self, message: str, blocking_references: int | None = None):
        super().__init__(message)
        self.blocking_references = blocking_references


class InvalidInputError(LedgerError):
    """Malformed enum value or missing required field."""


class StorageFailureError(LedgerError):
    """The underlying store is unreachable or rejected a write."""
