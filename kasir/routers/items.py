"""
Items router: create/restock, update, delete and photo upload.
"""
from typing import List

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from kasir.core.config import get_settings
from kasir.core.deps import get_current_user, get_store
from kasir.schemas.common import MessageResponse
from kasir.schemas.items import Item, ItemCreate, ItemUpdate
from kasir.services.document_store import DocumentStore
from kasir.services.inventory import InventoryService
from kasir.services.uploads import discard_image, save_image

router = APIRouter(prefix="/items", tags=["items"])


@router.get("", response_model=List[Item])
def list_items(
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """List every item in ledger order."""
    return InventoryService(store).list_items()


@router.get("/{item_id}", response_model=Item)
def get_item(
    item_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    return InventoryService(store).get_item(item_id)


@router.post("", response_model=Item, status_code=status.HTTP_201_CREATED)
def create_or_restock_item(
    data: ItemCreate,
    response: Response,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """
    Create an item, or add stock to the item with the same name.

    Names match case-insensitively after trimming. Returns 201 when a new
    item was created and 200 when an existing one was restocked.
    """
    item, created = InventoryService(store).create_or_restock(data, current_user)
    if not created:
        response.status_code = status.HTTP_200_OK
    return item


@router.put("/{item_id}", response_model=Item)
def update_item(
    item_id: str,
    changes: ItemUpdate,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Partially update an item. Renaming onto another item's name is a 409."""
    return InventoryService(store).update_item(item_id, changes, current_user)


@router.delete("/{item_id}", response_model=MessageResponse)
def delete_item(
    item_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    InventoryService(store).delete_item(item_id, current_user)
    return MessageResponse(message="Item deleted successfully")


@router.post("/{item_id}/photo", response_model=Item)
def upload_item_photo(
    item_id: str,
    photo: UploadFile = File(...),
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Attach an image to an item and return the item with its ``photoRef``."""
    service = InventoryService(store)
    service.get_item(item_id)
    settings = get_settings()
    photo_ref = save_image(photo.filename, photo.file, settings)
    try:
        return service.attach_photo(item_id, photo_ref, current_user)
    except Exception:
        discard_image(photo_ref, settings)
        raise
