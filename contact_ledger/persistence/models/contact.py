"""Contact model."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from contact_ledger.persistence.database import Base

if TYPE_CHECKING:
    from contact_ledger.persistence.models.owner import Owner


def generate_id() -> str:
    """Generate an opaque identifier for a new row."""
    return str(uuid.uuid4())


class Contact(Base):
    """A deduplicated person or organization contact.

    ``(name, mobile)`` is the identity key: the unique constraint backs up the
    duplicate check done by the service. Rows with a NULL mobile never collide.
    """

    __tablename__ = "contacts"
    __table_args__ = (
        UniqueConstraint("name", "mobile", name="uq_contacts_name_mobile"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False, index=True)
    company_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    mobile = Column(String(32), nullable=True, index=True)  # canonical format, e.g. E.164
    relationship_type = Column(String(20), nullable=True)
    source_system = Column(String(32), nullable=False, index=True)
    source_record_id = Column(String(255), nullable=False)
    is_whatsapp_reachable = Column(Boolean, default=False, nullable=False)
    data_quality_score = Column(Integer, default=0, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Read-only view over the join table (OwnerService owns writes)
    owners = relationship(
        "Owner",
        secondary="contact_owners",
        viewonly=True,
        order_by="Owner.name",
    )

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, name={self.name}, mobile={self.mobile}, score={self.data_quality_score})>"
