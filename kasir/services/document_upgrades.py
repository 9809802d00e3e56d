"""
Schema versions and upgrades for persisted documents.

Every document row carries a ``schema_version``. Version 1 is the shape the
earlier JSON-file service wrote; version 2 is the current shape. Reading a
document runs it through the upgrade chain for its kind, one version step at
a time, and the next write stores it back at the current version.
"""
import logging
from typing import Any, Callable, Dict, List

from kasir.core.config import get_settings
from kasir.core.money import quantize_money, to_decimal
from kasir.core.security import hash_api_key
from kasir.schemas.items import DEFAULT_CATEGORY
from kasir.schemas.reports import DailyReport, MonthlyReport
from kasir.schemas.sales import LineItem, Sale
from kasir.services import aggregates

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 2

Upgrader = Callable[[str, Any], Any]


def document_kind(key: str) -> str:
    """
    Map a document key to its kind.

    Examples:
        >>> document_kind("sales-2024-05")
        'sales'
        >>> document_kind("reports/daily/2024-05-20")
        'daily_report'
    """
    if key.startswith("sales-"):
        return "sales"
    if key.startswith("reports/daily/"):
        return "daily_report"
    if key.startswith("reports/monthly/"):
        return "monthly_report"
    if key.startswith("sequences/"):
        return "sequence"
    return key


# ---------------------------------------------------------------------------
# Version 1 -> 2
# ---------------------------------------------------------------------------


def upgrade_legacy_sale(sale: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a legacy sale ``{id, timestamp, cashier, buyer, items: [{id, name,
    qty, price, discount, total}], total, paymentAmount, change}``.
    """
    if "lineItems" in sale:
        return sale

    lines = []
    for line in sale.get("items") or []:
        quantity = int(line.get("qty") or line.get("quantity") or 0)
        price = to_decimal(line.get("price") or 0)
        line_total = quantize_money(to_decimal(line.get("total") or 0))
        unit_after = quantize_money(line_total / quantity) if quantity else quantize_money(price)
        lines.append(LineItem(
            item_id=str(line.get("id")),
            name=line.get("name") or "",
            quantity=quantity,
            unit_price=price,
            discount=to_decimal(line.get("discount") or 0),
            unit_price_after_discount=unit_after,
            line_total=line_total,
        ))

    total = quantize_money(to_decimal(sale.get("total") or 0))
    payment = to_decimal(sale.get("paymentAmount") or 0)
    return Sale(
        id=str(sale["id"]),
        timestamp=sale["timestamp"],
        cashier_user=sale.get("cashier") or "Unknown",
        buyer=sale.get("buyer") or "",
        line_items=lines,
        total=total,
        payment_amount=payment,
        change=to_decimal(sale.get("change") or (payment - total)),
    ).to_document()


def _upgrade_items(key: str, body: Any) -> Any:
    if not isinstance(body, list):
        return []
    upgraded = []
    for item in body:
        item = dict(item)
        if "photo" in item:
            item.setdefault("photoRef", item.pop("photo"))
        item["category"] = item.get("category") or DEFAULT_CATEGORY
        item["discount"] = item.get("discount") or 0
        item["stock"] = max(int(item.get("stock") or 0), 0)
        upgraded.append(item)
    return upgraded


def _upgrade_sales(key: str, body: Any) -> Any:
    if not isinstance(body, list):
        return []
    return [upgrade_legacy_sale(sale) for sale in body]


def _upgrade_daily_report(key: str, body: Any) -> Any:
    day = key.rsplit("/", 1)[-1]
    transactions = []
    if isinstance(body, dict):
        transactions = [Sale.model_validate(upgrade_legacy_sale(s)) for s in body.get("transactions") or []]
    revenue, count = aggregates.summarize_revenue(transactions)
    return DailyReport(
        date=day,
        total_revenue=revenue,
        transaction_count=count,
        transactions=transactions,
    ).to_document()


def _upgrade_monthly_report(key: str, body: Any) -> Any:
    year_month = key.rsplit("/", 1)[-1]
    transactions = []
    if isinstance(body, dict):
        transactions = [Sale.model_validate(upgrade_legacy_sale(s)) for s in body.get("transactions") or []]
    top_n = get_settings().REPORT_TOP_N
    revenue, count = aggregates.summarize_revenue(transactions)
    return MonthlyReport(
        year_month=year_month,
        total_revenue=revenue,
        transaction_count=count,
        top_customers=aggregates.top_customers(transactions, top_n),
        popular_items=aggregates.popular_items(transactions, top_n),
        transactions=transactions,
    ).to_document()


def _upgrade_api_keys(key: str, body: Any) -> Any:
    if not isinstance(body, list):
        return []
    upgraded: List[Dict[str, str]] = []
    for entry in body:
        if "keyHash" in entry:
            upgraded.append(entry)
        elif entry.get("key"):
            upgraded.append({"keyHash": hash_api_key(entry["key"]), "user": entry.get("user") or "unknown"})
    return upgraded


def _upgrade_logs(key: str, body: Any) -> Any:
    return body if isinstance(body, list) else []


def _upgrade_store(key: str, body: Any) -> Any:
    return body if isinstance(body, dict) else {}


UPGRADES: Dict[str, Dict[int, Upgrader]] = {
    "items": {1: _upgrade_items},
    "sales": {1: _upgrade_sales},
    "daily_report": {1: _upgrade_daily_report},
    "monthly_report": {1: _upgrade_monthly_report},
    "api-keys": {1: _upgrade_api_keys},
    "logs": {1: _upgrade_logs},
    "store": {1: _upgrade_store},
}


def upgrade_document(key: str, schema_version: int, body: Any) -> Any:
    """Bring ``body`` from ``schema_version`` up to the current version."""
    kind = document_kind(key)
    version = schema_version or 1
    if version > CURRENT_SCHEMA_VERSION:
        raise ValueError(
            f"Document '{key}' has schema version {version}, newer than supported {CURRENT_SCHEMA_VERSION}"
        )
    while version < CURRENT_SCHEMA_VERSION:
        step = UPGRADES.get(kind, {}).get(version)
        if step is not None:
            body = step(key, body)
            logger.debug(f"Upgraded '{key}' from schema v{version}")
        version += 1
    return body
