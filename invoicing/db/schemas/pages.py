from typing import Generic, List, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a paged query together with the totals of the full result."""
    items: List[T] = Field(default_factory=list)
    current_page: int
    items_per_page: int
    total_items: int
    total_pages: int
