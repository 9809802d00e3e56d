"""
Item schemas for the inventory ledger.
"""
from decimal import Decimal
from typing import Optional

from pydantic import Field

from kasir.schemas.common import CamelModel, Money


DEFAULT_CATEGORY = "uncategorized"


class Item(CamelModel):
    """A stocked item as persisted in the ``items`` document."""
    id: str
    name: str
    category: str = DEFAULT_CATEGORY
    price: Money = Field(..., ge=0)
    discount: Money = Field(Decimal("0"), ge=0, le=100, description="Percent off list price")
    stock: int = Field(0, ge=0)
    photo_ref: Optional[str] = None


class ItemCreate(CamelModel):
    """Create-or-restock request. ``price`` is only required for a new name."""
    name: str = Field(..., min_length=1)
    price: Optional[Decimal] = Field(None, ge=0)
    stock: int = Field(0, ge=0)
    category: Optional[str] = None


class ItemUpdate(CamelModel):
    """Partial update. Omitted, null and blank-string fields are left alone."""
    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    discount: Optional[Decimal] = Field(None, ge=0, le=100)
    stock: Optional[int] = Field(None, ge=0)
