"""
Stock router: read-only views of the ledger, lowest stock first.
"""
from typing import List

from fastapi import APIRouter, Depends

from kasir.core.deps import get_current_user, get_store
from kasir.schemas.items import Item
from kasir.services.document_store import DocumentStore
from kasir.services.inventory import InventoryService

router = APIRouter(prefix="/stock", tags=["stock"])


@router.get("", response_model=List[Item])
def get_stock(
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    return InventoryService(store).stock()


@router.get("/category/{category}", response_model=List[Item])
def get_stock_by_category(
    category: str,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Items in one category (case-insensitive), lowest stock first."""
    return InventoryService(store).stock(category)
