import uuid
from pydantic import BaseModel, ConfigDict


class InvoiceStatus(BaseModel):
    key: uuid.UUID
    name: str
    alias: str
    reportable: bool = True
    active: bool = True
    sort_order: int = 0
    model_config = ConfigDict(from_attributes=True)


class OrderStatus(BaseModel):
    key: uuid.UUID
    name: str
    alias: str
    reportable: bool = True
    active: bool = True
    sort_order: int = 0
    model_config = ConfigDict(from_attributes=True)
