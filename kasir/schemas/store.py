"""
Store profile, access key and action log schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict

from kasir.schemas.common import CamelModel


class StoreProfile(CamelModel):
    """Store settings. Unknown display settings are kept as-is."""
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    cashier: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    currency: Optional[str] = None
    receipt_footer: Optional[str] = None
    logo: Optional[str] = None


class ApiKeyEntry(CamelModel):
    key_hash: str
    user: str


class LogEntry(CamelModel):
    timestamp: datetime
    user: str
    action: str
