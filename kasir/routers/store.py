"""
Store profile router.
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, File, UploadFile

from kasir.core.config import get_settings
from kasir.core.deps import get_current_user, get_store
from kasir.schemas.store import StoreProfile
from kasir.services.document_store import DocumentStore
from kasir.services.store_profile import StoreProfileService
from kasir.services.uploads import discard_image, save_image

router = APIRouter(prefix="/store", tags=["store"])


@router.get("", response_model=StoreProfile)
def get_store_profile(
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    return StoreProfileService(store).get()


@router.put("", response_model=StoreProfile)
def update_store_profile(
    changes: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Merge settings (cashier name, display options) into the profile."""
    return StoreProfileService(store).update(changes, current_user)


@router.post("/logo", response_model=StoreProfile)
def upload_logo(
    logo: UploadFile = File(...),
    store: DocumentStore = Depends(get_store),
    current_user: str = Depends(get_current_user),
):
    """Store a logo image; the profile's ``logo`` becomes its ``/uploads/...`` path."""
    settings = get_settings()
    logo_ref = save_image(logo.filename, logo.file, settings)
    try:
        return StoreProfileService(store).set_logo(logo_ref, current_user)
    except Exception:
        discard_image(logo_ref, settings)
        raise
