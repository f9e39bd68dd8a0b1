from sqlalchemy import Column, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from .base import Base, now_utc


class InvoiceCollectionMembership(Base):
    """Links an invoice to an externally managed collection (tag/grouping)."""
    __tablename__ = 'invoice_collection_memberships'
    invoice_key = Column(UUID(as_uuid=True), ForeignKey('invoices.key'), primary_key=True)
    collection_key = Column(UUID(as_uuid=True), primary_key=True)
    create_date = Column(DateTime(timezone=True), default=now_utc)
    update_date = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_invoice_collection_memberships_collection_key', 'collection_key'),
    )
