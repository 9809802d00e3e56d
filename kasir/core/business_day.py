"""
Store-local calendar logic for Kasir.

Sales, purchase ids and reports are bucketed by the calendar day and month
in the store's own timezone, not the server's. A sale rung up at 00:30 in
Jakarta belongs to that Jakarta date even though it is still the previous
day in UTC.
"""
from datetime import date, datetime
from typing import Optional

import pytz


def store_now(store_timezone: str) -> datetime:
    """Current time as a timezone-aware datetime in the store's timezone."""
    return datetime.now(pytz.timezone(store_timezone))


def to_store_time(dt: datetime, store_timezone: Optional[str] = None) -> datetime:
    """
    Convert a datetime to store local time.

    Args:
        dt: The datetime to convert. Naive values are assumed to be UTC.
        store_timezone: IANA timezone string (e.g., "Asia/Jakarta").
                        If None, dt is assumed to already be store local time.

    Examples:
        >>> dt = datetime(2024, 5, 19, 17, 30, tzinfo=pytz.UTC)
        >>> to_store_time(dt, "Asia/Jakarta").date()
        datetime.date(2024, 5, 20)
    """
    if not store_timezone:
        return dt
    if dt.tzinfo is None:
        dt = pytz.UTC.localize(dt)
    return dt.astimezone(pytz.timezone(store_timezone))


def get_business_date(dt: datetime, store_timezone: Optional[str] = None) -> date:
    """Calendar date a sale at ``dt`` belongs to."""
    return to_store_time(dt, store_timezone).date()


def day_key(d: date) -> str:
    """ISO date used in document keys: 2024-05-20."""
    return d.strftime("%Y-%m-%d")


def month_key(d: date) -> str:
    """Year-month used in document keys: 2024-05."""
    return d.strftime("%Y-%m")


def purchase_id_prefix(d: date) -> str:
    """DDMMYY prefix of a purchase id: 20 May 2024 -> 200524."""
    return d.strftime("%d%m%y")


def parse_day(value: str) -> date:
    """Parse a YYYY-MM-DD path value. Raises ValueError when malformed."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_month(value: str) -> date:
    """Parse a YYYY-MM path value to the first day of that month."""
    return datetime.strptime(value, "%Y-%m").date()


def date_from_purchase_id(purchase_id: str) -> date:
    """
    Recover the sale date from a purchase id.

    Examples:
        >>> date_from_purchase_id("200524001")
        datetime.date(2024, 5, 20)
    """
    if len(purchase_id) < 9 or not purchase_id.isdigit():
        raise ValueError(f"'{purchase_id}' is not a purchase id")
    return datetime.strptime(purchase_id[:6], "%d%m%y").date()
