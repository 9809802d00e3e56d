"""
Pure aggregation over lists of committed sales.

Rankings order by amount descending and break ties by key ascending
(normalized customer name, item id), so equal spenders always come out in
the same order regardless of scan order.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from kasir.schemas.reports import CustomerSpend, PopularItem
from kasir.schemas.sales import Sale


def normalize_customer(name: str) -> str:
    return name.strip().lower()


def summarize_revenue(transactions: List[Sale]) -> Tuple[Decimal, int]:
    """(total revenue, transaction count), recomputed from scratch."""
    revenue = sum((sale.total for sale in transactions), Decimal("0"))
    return revenue, len(transactions)


def customer_totals(transactions: Iterable[Sale]) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = {}
    for sale in transactions:
        customer = normalize_customer(sale.buyer)
        totals[customer] = totals.get(customer, Decimal("0")) + sale.total
    return totals


def item_quantities(transactions: Iterable[Sale]) -> Dict[str, Tuple[str, int]]:
    """Item id -> (latest snapshot name, quantity sold)."""
    quantities: Dict[str, Tuple[str, int]] = {}
    for sale in transactions:
        for line in sale.line_items:
            _, qty = quantities.get(line.item_id, (line.name, 0))
            quantities[line.item_id] = (line.name, qty + line.quantity)
    return quantities


def rank_customers(totals: Dict[str, Decimal], top_n: int) -> List[CustomerSpend]:
    ranked = sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))
    return [CustomerSpend(customer=name, total=total) for name, total in ranked[:top_n]]


def rank_items(quantities: Dict[str, Tuple[str, int]], top_n: int) -> List[PopularItem]:
    ranked = sorted(quantities.items(), key=lambda kv: (-kv[1][1], kv[0]))
    return [
        PopularItem(id=item_id, name=name, quantity=qty)
        for item_id, (name, qty) in ranked[:top_n]
    ]


def top_customers(transactions: Iterable[Sale], top_n: int) -> List[CustomerSpend]:
    return rank_customers(customer_totals(transactions), top_n)


def popular_items(transactions: Iterable[Sale], top_n: int) -> List[PopularItem]:
    return rank_items(item_quantities(transactions), top_n)
