"""
Image uploads (store logo, item photos) saved under the upload directory.
"""
import logging
import secrets
import time
from pathlib import Path
from typing import BinaryIO, Optional

from kasir.core.config import Settings, get_settings
from kasir.core.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}
PUBLIC_PREFIX = "/uploads"


def save_image(filename: Optional[str], stream: BinaryIO, settings: Optional[Settings] = None) -> str:
    """
    Store an uploaded image and return its public reference path.

    Args:
        filename: Client-supplied file name; only its extension is used
        stream: File object to read the image bytes from

    Returns:
        Reference such as ``/uploads/1716182400000-a1b2c3.png``
    """
    settings = settings or get_settings()

    extension = Path(filename or "").suffix.lower()
    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError(
            "File must be an image (png, jpg, jpeg, gif, webp)",
            {"filename": filename},
        )

    content = stream.read(settings.MAX_UPLOAD_BYTES + 1)
    if not content:
        raise ValidationError("Uploaded file is empty", {"filename": filename})
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"File exceeds the {settings.MAX_UPLOAD_BYTES} byte limit",
            {"filename": filename},
        )

    stored_name = f"{int(time.time() * 1000)}-{secrets.token_hex(3)}{extension}"
    upload_dir = Path(settings.UPLOAD_DIR)
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / stored_name).write_bytes(content)
    except OSError as e:
        logger.error(f"Could not save upload {stored_name}: {e}")
        raise StorageError("Could not save uploaded file") from e

    logger.info(f"Saved upload {stored_name} ({len(content)} bytes)")
    return f"{PUBLIC_PREFIX}/{stored_name}"


def discard_image(ref: str, settings: Optional[Settings] = None) -> None:
    """Remove a stored upload by its public reference; missing files are ignored."""
    settings = settings or get_settings()
    stored_name = ref.rsplit("/", 1)[-1]
    try:
        (Path(settings.UPLOAD_DIR) / stored_name).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove upload {stored_name}: {e}")
        return
    logger.info(f"Removed upload {stored_name}")
