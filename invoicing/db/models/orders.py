import uuid
from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class OrderStatus(Base):
    __tablename__ = 'order_statuses'
    key = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    alias = Column(String(255), nullable=False, unique=True)
    reportable = Column(Boolean, nullable=False, default=True)
    active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    create_date = Column(DateTime(timezone=True), default=now_utc)
    update_date = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class Order(Base):
    __tablename__ = 'orders'
    key = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    invoice_key = Column(UUID(as_uuid=True), ForeignKey('invoices.key'), nullable=False)
    order_number_prefix = Column(String(255), nullable=True)
    order_number = Column(Integer, nullable=False)
    order_date = Column(DateTime(timezone=True), nullable=False, default=now_utc)
    order_status_key = Column(UUID(as_uuid=True), ForeignKey('order_statuses.key'), nullable=False)
    version_key = Column(UUID(as_uuid=True), nullable=False, default=uuid.uuid4)
    exported = Column(Boolean, nullable=False, default=False)
    create_date = Column(DateTime(timezone=True), default=now_utc)
    update_date = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    status = relationship("OrderStatus", lazy="joined")

    __table_args__ = (
        Index('idx_orders_invoice_key', 'invoice_key'),
        Index('idx_orders_order_status_key', 'order_status_key'),
    )
