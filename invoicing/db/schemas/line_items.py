import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


class LineItem(BaseModel):
    key: Optional[uuid.UUID] = None
    container_key: Optional[uuid.UUID] = None
    line_item_type: str = 'product'
    sku: str
    name: str
    quantity: int = 1
    price: Decimal = Decimal('0')
    exported: bool = False
    extended_data: Dict[str, Any] = Field(default_factory=dict)
    create_date: Optional[datetime] = None
    update_date: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
