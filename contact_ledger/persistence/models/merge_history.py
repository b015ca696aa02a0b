"""MergeHistory model for the consolidation audit trail."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String

from contact_ledger.persistence.database import Base
from contact_ledger.persistence.models.contact import generate_id


class MergeHistory(Base):
    """Append-only record of an automatic or manual consolidation.

    Contact ids are stored without foreign keys: a row must outlive the
    contacts it describes.
    """

    __tablename__ = "merge_history"

    id = Column(String(36), primary_key=True, default=generate_id)
    merge_type = Column(String(32), nullable=False, index=True)

    # Surviving identity
    primary_contact_id = Column(String(36), nullable=False, index=True)
    primary_contact_name = Column(String(255), nullable=False)

    # Superseded identity (absent for field-conflict resolutions)
    merged_contact_id = Column(String(36), nullable=True, index=True)
    merged_contact_name = Column(String(255), nullable=True)

    source_system = Column(String(32), nullable=False, index=True)
    source_record_id = Column(String(255), nullable=True)
    merge_reason = Column(String(32), nullable=False, index=True)
    merge_details = Column(JSON, nullable=True)
    merged_by = Column(String(255), nullable=False)

    # Snapshots of the primary contact around the merge
    # Example: {"name": "John Doe", "mobile": "+919876543210", "data_quality_score": 60}
    before_merge_data = Column(JSON, nullable=True)
    after_merge_data = Column(JSON, nullable=True)
    before_quality_score = Column(Integer, nullable=False, default=0)
    after_quality_score = Column(Integer, nullable=False, default=0)

    # Ordered list, e.g. ["INVOICE", "GMAIL"]
    involved_source_systems = Column(JSON, nullable=False, default=list)

    merged_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return (
            f"<MergeHistory(id={self.id}, type={self.merge_type}, "
            f"primary={self.primary_contact_id}, merged={self.merged_contact_id}, at={self.merged_at})>"
        )
