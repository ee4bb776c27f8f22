"""
RIF Field Formatting Utilities.

Date and currency renderings used by every RIF record type.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Union

CENTS = Decimal("0.01")
FRIDAY = 4


def to_cents(amount: Union[Decimal, int, str]) -> Decimal:
    """Round an amount to cents using banker's rounding."""
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_EVEN)


def format_rif_amount(amount: Union[Decimal, int, str]) -> str:
    """Format a currency amount with exactly two decimal places."""
    return f"{to_cents(amount):.2f}"


def format_rif_date(value: Union[date, datetime]) -> str:
    """Format a date as RIF CCYYMMDD."""
    return value.strftime("%Y%m%d")


def next_weekday(value: Union[date, datetime], weekday: int = FRIDAY) -> date:
    """
    Return the first date strictly after ``value`` falling on ``weekday``.

    NCH weekly processing runs on Fridays, so a claim that ends on a
    Friday is processed the following week.
    """
    day = value.date() if isinstance(value, datetime) else value
    days_ahead = (weekday - day.weekday()) % 7 or 7
    return day + timedelta(days=days_ahead)


def whole_days(start: datetime, stop: datetime) -> int:
    """Number of whole days elapsed between two timestamps."""
    return (stop - start).days


def apportion_daily_rate(cost: Decimal, days: int) -> Decimal:
    """Split a line cost evenly across the stay, rounded half-even to cents."""
    return (Decimal(cost) / Decimal(max(1, days))).quantize(CENTS, rounding=ROUND_HALF_EVEN)


def truncate(value: str | None, width: int) -> str | None:
    """Truncate a value to a fixed field width."""
    if value is None:
        return None
    return value[:width]


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
