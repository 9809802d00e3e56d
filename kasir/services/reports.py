"""
Daily and monthly rollups of committed sales.

Reports are caches: each write recomputes revenue and counts (and, for a
month, the top-N rankings) from the full list of stored transactions, so a
report never drifts from the sales it holds. Any report can be rebuilt from
its month's sales bucket.

Recomputing the monthly rankings costs one pass over the month's sales per
commit. That is fine for a single store; a bounded heap per ranking would be
the next step if monthly volume grew large.
"""
from datetime import date
from typing import Dict, List, Optional, Tuple

from kasir.core.business_day import day_key, get_business_date, month_key
from kasir.core.config import Settings, get_settings
from kasir.schemas.reports import CustomerSpend, DailyReport, MonthlyReport, PopularItem
from kasir.schemas.sales import Sale
from kasir.services import aggregates
from kasir.services.document_store import DocumentStore

DAILY_PREFIX = "reports/daily/"
MONTHLY_PREFIX = "reports/monthly/"


def daily_report_key(day: date) -> str:
    return f"{DAILY_PREFIX}{day_key(day)}"


def monthly_report_key(day: date) -> str:
    return f"{MONTHLY_PREFIX}{month_key(day)}"


def sales_bucket_key(day: date) -> str:
    return f"sales-{month_key(day)}"


def load_sales_bucket(store: DocumentStore, day: date) -> List[Sale]:
    return [Sale.model_validate(raw) for raw in store.read(sales_bucket_key(day), [])]


class ReportAggregator:
    """Maintains and serves the report documents."""

    def __init__(self, store: DocumentStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or get_settings()

    @property
    def top_n(self) -> int:
        return self.settings.REPORT_TOP_N

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def get_daily(self, day: date) -> DailyReport:
        """Stored report for ``day``, or an empty one if nothing sold."""
        raw = self.store.read(daily_report_key(day))
        if raw is None:
            return DailyReport(date=day_key(day))
        return DailyReport.model_validate(raw)

    def get_monthly(self, day: date) -> MonthlyReport:
        """Stored report for the month containing ``day``, or an empty one."""
        raw = self.store.read(monthly_report_key(day))
        if raw is None:
            return MonthlyReport(year_month=month_key(day))
        return MonthlyReport.model_validate(raw)

    # ------------------------------------------------------------------
    # Recording (inside the sale's unit of work)
    # ------------------------------------------------------------------

    def _summarize_daily(self, day: date, transactions: List[Sale]) -> DailyReport:
        revenue, count = aggregates.summarize_revenue(transactions)
        return DailyReport(
            date=day_key(day),
            total_revenue=revenue,
            transaction_count=count,
            transactions=transactions,
        )

    def _summarize_monthly(self, day: date, transactions: List[Sale]) -> MonthlyReport:
        revenue, count = aggregates.summarize_revenue(transactions)
        return MonthlyReport(
            year_month=month_key(day),
            total_revenue=revenue,
            transaction_count=count,
            top_customers=aggregates.top_customers(transactions, self.top_n),
            popular_items=aggregates.popular_items(transactions, self.top_n),
            transactions=transactions,
        )

    def record_daily(self, sale: Sale, day: date) -> DailyReport:
        current = self.get_daily(day)
        report = self._summarize_daily(day, current.transactions + [sale])
        self.store.write(daily_report_key(day), report.to_document())
        return report

    def record_monthly(self, sale: Sale, day: date) -> MonthlyReport:
        current = self.get_monthly(day)
        report = self._summarize_monthly(day, current.transactions + [sale])
        self.store.write(monthly_report_key(day), report.to_document())
        return report

    def record(self, sale: Sale, day: date) -> Tuple[DailyReport, MonthlyReport]:
        return self.record_daily(sale, day), self.record_monthly(sale, day)

    # ------------------------------------------------------------------
    # Rebuilding from the sales bucket
    # ------------------------------------------------------------------

    def rebuild_daily(self, day: date) -> DailyReport:
        def _work(store: DocumentStore) -> DailyReport:
            tz = self.settings.TIMEZONE
            sales = [s for s in load_sales_bucket(store, day) if get_business_date(s.timestamp, tz) == day]
            report = self._summarize_daily(day, sales)
            store.write(daily_report_key(day), report.to_document())
            return report

        return self.store.run(_work, retries=self.settings.COMMIT_RETRIES, label="daily rebuild")

    def rebuild_monthly(self, day: date) -> MonthlyReport:
        def _work(store: DocumentStore) -> MonthlyReport:
            report = self._summarize_monthly(day, load_sales_bucket(store, day))
            store.write(monthly_report_key(day), report.to_document())
            return report

        return self.store.run(_work, retries=self.settings.COMMIT_RETRIES, label="monthly rebuild")

    # ------------------------------------------------------------------
    # Cross-period rankings
    # ------------------------------------------------------------------

    def _monthly_reports(self) -> List[MonthlyReport]:
        return [
            MonthlyReport.model_validate(self.store.read(key))
            for key in self.store.list_keys(MONTHLY_PREFIX)
        ]

    def popular_items(self) -> List[PopularItem]:
        """All-time best sellers, summed over every monthly report once."""
        totals: Dict[str, Tuple[str, int]] = {}
        for report in self._monthly_reports():
            for item_id, (name, qty) in aggregates.item_quantities(report.transactions).items():
                _, so_far = totals.get(item_id, (name, 0))
                totals[item_id] = (name, so_far + qty)
        return aggregates.rank_items(totals, self.top_n)

    def top_customers(self) -> List[CustomerSpend]:
        """All-time biggest spenders, summed over every monthly report once."""
        totals = {}
        for report in self._monthly_reports():
            for customer, spend in aggregates.customer_totals(report.transactions).items():
                totals[customer] = totals.get(customer, 0) + spend
        return aggregates.rank_customers(totals, self.top_n)
