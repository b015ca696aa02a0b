"""Owner and contact-owner association models."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String

from contact_ledger.persistence.database import Base
from contact_ledger.persistence.models.contact import generate_id


class Owner(Base):
    """A named data-owning entity, e.g. a CRM or a sales owner."""

    __tablename__ = "owners"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False, unique=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Owner(id={self.id}, name={self.name}, is_active={self.is_active})>"


class ContactOwner(Base):
    """Join row linking a contact to an owner. At most one per pair."""

    __tablename__ = "contact_owners"

    contact_id = Column(String(36), ForeignKey("contacts.id", ondelete="CASCADE"), primary_key=True)
    owner_id = Column(String(36), ForeignKey("owners.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<ContactOwner(contact_id={self.contact_id}, owner_id={self.owner_id})>"
