"""
Sales router: commit a sale and browse committed sales.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from kasir.core.business_day import store_now
from kasir.core.config import get_settings
from kasir.core.deps import get_current_user, get_store, parse_month_param
from kasir.schemas.sales import Sale, SaleRequest
from kasir.services.document_store import DocumentStore
from kasir.services.sales import SaleCommitPipeline, SalesQueryService

router = APIRouter(prefix="/sales", tags=["sales"])


@router.post("", response_model=Sale, status_code=status.HTTP_201_CREATED)
def create_sale(
    request: SaleRequest,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """
    Commit a sale.

    Body: ``{"buyer": "...", "items": [{"id": "...", "qty": 2}], "paymentAmount": 50000}``.
    Stock is debited, the sale is appended to this month's bucket and the
    daily and monthly reports are updated, all at once or not at all.
    """
    return SaleCommitPipeline(store).commit(request, current_user)


@router.get("", response_model=List[Sale])
def list_sales(
    month: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Sales of one month (``?month=YYYY-MM``), defaulting to the current month."""
    day = parse_month_param(month) if month else store_now(get_settings().TIMEZONE).date()
    return SalesQueryService(store).list_month(day)


@router.get("/{sale_id}", response_model=Sale)
def get_sale(
    sale_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    return SalesQueryService(store).get_sale(sale_id)
