"""Tag and contact-tag association models."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String

from contact_ledger.persistence.database import Base
from contact_ledger.persistence.models.contact import generate_id


class Tag(Base):
    """A label that can be attached to many contacts."""

    __tablename__ = "tags"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(100), nullable=False, unique=True)
    color = Column(String(20), nullable=False)
    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)  # soft-delete flag
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name={self.name}, is_active={self.is_active})>"


class ContactTag(Base):
    """Join row linking a contact to a tag. At most one per pair."""

    __tablename__ = "contact_tags"

    contact_id = Column(String(36), ForeignKey("contacts.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<ContactTag(contact_id={self.contact_id}, tag_id={self.tag_id})>"
