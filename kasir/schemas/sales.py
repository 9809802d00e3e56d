"""
Sale request and record schemas.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from kasir.schemas.common import CamelModel, Money


class SaleLineRequest(BaseModel):
    """One requested basket line. Accepts ``{id, qty}`` and ``{itemId, quantity}``."""
    item_id: Optional[str] = Field(None, validation_alias=AliasChoices("id", "itemId", "item_id"))
    quantity: Optional[int] = Field(None, validation_alias=AliasChoices("qty", "quantity"))


class SaleRequest(CamelModel):
    """
    Inbound sale. Fields are optional here so the commit pipeline can reject
    a malformed basket with its own validation error.
    """
    buyer: Optional[str] = None
    items: Optional[List[SaleLineRequest]] = None
    payment_amount: Optional[Decimal] = None


class LineItem(CamelModel):
    """Snapshot of a sold line; decoupled from later item edits or deletes."""
    item_id: str
    name: str
    quantity: int = Field(..., gt=0)
    unit_price: Money
    discount: Money = Decimal("0")
    unit_price_after_discount: Money
    line_total: Money


class Sale(CamelModel):
    """A committed, immutable sale."""
    id: str
    timestamp: datetime
    cashier_user: str
    buyer: str
    line_items: List[LineItem]
    total: Money
    payment_amount: Money
    change: Money
