"""
Sale commit pipeline.

A sale touches five documents: the item ledger, the month's sales bucket,
the day's purchase sequence, and the daily and monthly reports. They are
read, validated and written inside one unit of work and committed together,
so a rejected or failed sale leaves no trace, and a sale that raced another
one for the same documents is replayed against fresh data instead of
overwriting it.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, List, Optional

from kasir.core.business_day import date_from_purchase_id, store_now, to_store_time
from kasir.core.config import Settings, get_settings
from kasir.core.errors import InsufficientPaymentError, NotFoundError, ValidationError
from kasir.core.money import discounted_unit_price
from kasir.schemas.sales import LineItem, Sale, SaleRequest
from kasir.schemas.store import StoreProfile
from kasir.services.action_log import ActionLog
from kasir.services.document_store import STORE_PROFILE, DocumentStore
from kasir.services.inventory import InventoryLedger
from kasir.services.reports import ReportAggregator, load_sales_bucket, sales_bucket_key
from kasir.services.sequence import next_purchase_id

logger = logging.getLogger(__name__)


def validate_sale_request(request: SaleRequest) -> None:
    """Reject a malformed basket before any document is read."""
    if not request.buyer or not request.buyer.strip():
        raise ValidationError("Buyer is required")
    if not request.items:
        raise ValidationError("Items must be a non-empty list")
    if request.payment_amount is None:
        raise ValidationError("paymentAmount is required")
    if request.payment_amount < 0:
        raise ValidationError("paymentAmount cannot be negative", {"paymentAmount": str(request.payment_amount)})

    for position, line in enumerate(request.items, start=1):
        if not line.item_id:
            raise ValidationError(f"Line {position} is missing an item id", {"line": position})
        if line.quantity is None or line.quantity <= 0:
            raise ValidationError(
                f"Line {position} quantity must be a positive integer",
                {"line": position, "quantity": line.quantity},
            )


class SaleCommitPipeline:
    """Validates, prices and commits sales."""

    def __init__(
        self,
        store: DocumentStore,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.clock = clock or (lambda: store_now(self.settings.TIMEZONE))
        self.action_log = ActionLog(store, self.settings)

    def commit(self, request: SaleRequest, caller: str) -> Sale:
        """
        Commit a sale and return it with its total and change.

        Raises:
            ValidationError: malformed request
            NotFoundError: a line names an unknown item
            InsufficientStockError: a line asks for more than is in stock
            InsufficientPaymentError: payment is below the total
            StorageError: the store failed or kept conflicting; nothing was written
        """
        validate_sale_request(request)

        sale = self.store.run(
            lambda store: self._commit_once(store, request, caller),
            retries=self.settings.COMMIT_RETRIES,
            label="sale commit",
        )

        logger.info(
            f"Sale {sale.id} committed: {len(sale.line_items)} lines, "
            f"total {sale.total}, change {sale.change}"
        )
        self.action_log.append(caller, f"New sale: {sale.id}")
        return sale

    def _commit_once(self, store: DocumentStore, request: SaleRequest, caller: str) -> Sale:
        now = to_store_time(self.clock(), self.settings.TIMEZONE)
        today = now.date()

        ledger = InventoryLedger.load(store)
        bucket = load_sales_bucket(store, today)

        lines: List[LineItem] = []
        total = Decimal("0")
        for line in request.items:
            item = ledger.find_by_id(line.item_id)
            if item is None:
                raise NotFoundError(f"Item {line.item_id} not found", {"item_id": line.item_id})
            ledger.debit(item.id, line.quantity)

            unit_price = discounted_unit_price(item.price, item.discount)
            line_total = unit_price * line.quantity
            lines.append(LineItem(
                item_id=item.id,
                name=item.name,
                quantity=line.quantity,
                unit_price=item.price,
                discount=item.discount,
                unit_price_after_discount=unit_price,
                line_total=line_total,
            ))
            total += line_total

        change = request.payment_amount - total
        if change < 0:
            raise InsufficientPaymentError(total, request.payment_amount)

        sale = Sale(
            id=next_purchase_id(store, today),
            timestamp=now,
            cashier_user=self._cashier(store, caller),
            buyer=request.buyer.strip(),
            line_items=lines,
            total=total,
            payment_amount=request.payment_amount,
            change=change,
        )

        ledger.save(store)
        bucket.append(sale)
        store.write(sales_bucket_key(today), [s.to_document() for s in bucket])
        ReportAggregator(store, self.settings).record(sale, today)
        return sale

    @staticmethod
    def _cashier(store: DocumentStore, caller: str) -> str:
        profile = StoreProfile.model_validate(store.read(STORE_PROFILE, {}))
        return profile.cashier or caller


class SalesQueryService:
    """Read-only access to the sales buckets."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def list_month(self, day: date) -> List[Sale]:
        return load_sales_bucket(self.store, day)

    def get_sale(self, purchase_id: str) -> Sale:
        try:
            day = date_from_purchase_id(purchase_id)
        except ValueError:
            raise NotFoundError(f"Sale {purchase_id} not found", {"sale_id": purchase_id})
        for sale in load_sales_bucket(self.store, day):
            if sale.id == purchase_id:
                return sale
        raise NotFoundError(f"Sale {purchase_id} not found", {"sale_id": purchase_id})

    def all_sales(self, month: Optional[date] = None) -> List[Sale]:
        """Every committed sale, oldest bucket first, or just one month's."""
        if month is not None:
            return self.list_month(month)
        sales: List[Sale] = []
        for key in self.store.list_keys("sales-"):
            sales.extend(Sale.model_validate(raw) for raw in self.store.read(key, []))
        return sales
