import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from .statuses import OrderStatus


class Order(BaseModel):
    key: Optional[uuid.UUID] = None
    invoice_key: uuid.UUID
    order_number_prefix: Optional[str] = None
    order_number: int
    order_date: Optional[datetime] = None
    order_status_key: uuid.UUID
    order_status: Optional[OrderStatus] = None
    version_key: Optional[uuid.UUID] = None
    exported: bool = False
    create_date: Optional[datetime] = None
    update_date: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
