"""
Reports router: daily/monthly rollups, rankings and CSV export.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from kasir.core.deps import get_current_user, get_store, parse_day_param, parse_month_param
from kasir.schemas.reports import CustomerSpend, DailyReport, MonthlyReport, PopularItem
from kasir.services.document_store import DocumentStore
from kasir.services.export import render_sales_csv
from kasir.services.reports import ReportAggregator
from kasir.services.sales import SalesQueryService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/popular", response_model=List[PopularItem])
def popular_items(
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Top items by quantity sold across all months."""
    return ReportAggregator(store).popular_items()


@router.get("/top-customers", response_model=List[CustomerSpend])
def top_customers(
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Top customers by total spend across all months."""
    return ReportAggregator(store).top_customers()


@router.get("/daily/{day}", response_model=DailyReport)
def daily_report(
    day: str,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Report for one day. A day without sales returns an empty report."""
    return ReportAggregator(store).get_daily(parse_day_param(day))


@router.post("/daily/{day}/rebuild", response_model=DailyReport)
def rebuild_daily_report(
    day: str,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Recompute a daily report from the month's sales bucket."""
    return ReportAggregator(store).rebuild_daily(parse_day_param(day))


@router.get("/monthly/{year_month}", response_model=MonthlyReport)
def monthly_report(
    year_month: str,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    return ReportAggregator(store).get_monthly(parse_month_param(year_month))


@router.post("/monthly/{year_month}/rebuild", response_model=MonthlyReport)
def rebuild_monthly_report(
    year_month: str,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Recompute a monthly report, rankings included, from its sales bucket."""
    return ReportAggregator(store).rebuild_monthly(parse_month_param(year_month))


@router.get("/download")
def download_sales(
    month: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """
    Export sold lines as CSV, one row per line item.

    Columns: Timestamp, Buyer, Item Name, Quantity, Unit Price, Line Total.
    Pass ``?month=YYYY-MM`` to export a single month.
    """
    month_day = parse_month_param(month) if month else None
    sales = SalesQueryService(store).all_sales(month_day)
    filename = f"sales-report-{month}.csv" if month else "sales-report.csv"
    return Response(
        content=render_sales_csv(sales),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
