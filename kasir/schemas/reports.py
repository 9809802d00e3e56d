"""
Report schemas. Reports are caches derived from the sales bucket.
"""
from decimal import Decimal
from typing import List

from pydantic import Field

from kasir.schemas.common import CamelModel, Money
from kasir.schemas.sales import Sale


class CustomerSpend(CamelModel):
    customer: str
    total: Money


class PopularItem(CamelModel):
    id: str
    name: str
    quantity: int


class DailyReport(CamelModel):
    date: str
    total_revenue: Money = Decimal("0")
    transaction_count: int = 0
    transactions: List[Sale] = Field(default_factory=list)


class MonthlyReport(CamelModel):
    year_month: str
    total_revenue: Money = Decimal("0")
    transaction_count: int = 0
    top_customers: List[CustomerSpend] = Field(default_factory=list)
    popular_items: List[PopularItem] = Field(default_factory=list)
    transactions: List[Sale] = Field(default_factory=list)
