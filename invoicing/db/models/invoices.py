import uuid
from sqlalchemy import (
    Column, String, DateTime, Integer, Numeric, Boolean, ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class InvoiceStatus(Base):
    __tablename__ = 'invoice_statuses'
    key = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    alias = Column(String(255), nullable=False, unique=True)
    reportable = Column(Boolean, nullable=False, default=True)
    active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    create_date = Column(DateTime(timezone=True), default=now_utc)
    update_date = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class Invoice(Base):
    __tablename__ = 'invoices'
    key = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    customer_key = Column(UUID(as_uuid=True), nullable=True)
    invoice_number_prefix = Column(String(255), nullable=True)
    invoice_number = Column(Integer, nullable=False)
    invoice_date = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    invoice_status_key = Column(UUID(as_uuid=True), ForeignKey('invoice_statuses.key'), nullable=False)
    version_key = Column(UUID(as_uuid=True), nullable=False, default=uuid.uuid4)
    bill_to_name = Column(String(255), nullable=True)
    bill_to_address1 = Column(String(255), nullable=True)
    bill_to_locality = Column(String(255), nullable=True)
    bill_to_postal_code = Column(String(255), nullable=True)
    bill_to_country_code = Column(String(255), nullable=True)
    bill_to_email = Column(String(255), nullable=True)
    bill_to_phone = Column(String(255), nullable=True)
    bill_to_company = Column(String(255), nullable=True)
    po_number = Column(String(255), nullable=True)
    currency_code = Column(String(3), nullable=True)
    total = Column(Numeric(18, 2), nullable=False, default=0)
    exported = Column(Boolean, nullable=False, default=False)
    archived = Column(Boolean, nullable=False, default=False)
    create_date = Column(DateTime(timezone=True), default=now_utc)
    update_date = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    status = relationship("InvoiceStatus", lazy="joined")
    index_row = relationship("InvoiceIndex", uselist=False, lazy="joined", viewonly=True)

    __table_args__ = (
        UniqueConstraint('invoice_number', name='uq_invoices_invoice_number'),
        Index('idx_invoices_invoice_date', 'invoice_date'),
        Index('idx_invoices_invoice_status_key', 'invoice_status_key'),
        Index('idx_invoices_bill_to_email', 'bill_to_email'),
    )


class InvoiceIndex(Base):
    """Denormalized search row maintained alongside each invoice header."""
    __tablename__ = 'invoice_index'
    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_key = Column(UUID(as_uuid=True), ForeignKey('invoices.key'), nullable=False, unique=True)
    create_date = Column(DateTime(timezone=True), default=now_utc)
    update_date = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class InvoiceItem(Base):
    __tablename__ = 'invoice_items'
    key = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    container_key = Column(UUID(as_uuid=True), ForeignKey('invoices.key'), nullable=False)
    line_item_type = Column(String(50), nullable=False, default='product')
    sku = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Numeric(18, 2), nullable=False, default=0)
    exported = Column(Boolean, nullable=False, default=False)
    extended_data = Column(JSONB, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    create_date = Column(DateTime(timezone=True), default=now_utc)
    update_date = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_invoice_items_container_key', 'container_key', 'sort_order'),
    )


class AppliedPayment(Base):
    __tablename__ = 'applied_payments'
    key = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    payment_key = Column(UUID(as_uuid=True), nullable=False)
    invoice_key = Column(UUID(as_uuid=True), ForeignKey('invoices.key'), nullable=False)
    description = Column(String(500), nullable=True)
    amount = Column(Numeric(18, 2), nullable=False, default=0)
    exported = Column(Boolean, nullable=False, default=False)
    create_date = Column(DateTime(timezone=True), default=now_utc)
    update_date = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_applied_payments_invoice_key', 'invoice_key'),
    )


class OfferRedeemed(Base):
    __tablename__ = 'offers_redeemed'
    key = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    offer_code = Column(String(255), nullable=False)
    offer_settings_key = Column(UUID(as_uuid=True), nullable=True)
    customer_key = Column(UUID(as_uuid=True), nullable=True)
    invoice_key = Column(UUID(as_uuid=True), ForeignKey('invoices.key'), nullable=True)
    extended_data = Column(JSONB, nullable=True)
    create_date = Column(DateTime(timezone=True), default=now_utc)
    update_date = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        Index('idx_offers_redeemed_invoice_key', 'invoice_key'),
    )
