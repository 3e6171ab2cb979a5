"""
Display helpers for amounts and timestamps in the storefront's id-ID conventions.

Amounts are Indonesian Rupiah without decimals ("Rp 250.000", with a
non-breaking space after the symbol). Dates are rendered in the configured
display timezone with Indonesian month names.
"""
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union
from zoneinfo import ZoneInfo

from florist_cart.core.config import settings

MONTHS = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]
SHORT_MONTHS = [
    "Jan", "Feb", "Mar", "Apr", "Mei", "Jun",
    "Jul", "Agu", "Sep", "Okt", "Nov", "Des",
]

INVALID_DATE = "Tanggal tidak valid"
INVALID_SHORT_DATE = "Tgl tidak valid"


def format_rupiah(amount: Union[Decimal, int, float]) -> str:
    try:
        value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Cannot format {amount!r} as an amount")
    sign = "-" if value < 0 else ""
    grouped = f"{abs(int(value)):,}".replace(",", ".")
    return f"{sign}{settings.CURRENCY_SYMBOL}\u00a0{grouped}"


def _to_local(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        moment = value
    else:
        moment = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(ZoneInfo(settings.DISPLAY_TIMEZONE))


def format_date(value: Union[str, datetime]) -> str:
    """15 Januari 2025"""
    try:
        moment = _to_local(value)
    except (TypeError, ValueError):
        return INVALID_DATE
    return f"{moment.day} {MONTHS[moment.month - 1]} {moment.year}"


def format_short_date(value: Union[str, datetime]) -> str:
    """05 Jan 2025"""
    try:
        moment = _to_local(value)
    except (TypeError, ValueError):
        return INVALID_SHORT_DATE
    return f"{moment.day:02d} {SHORT_MONTHS[moment.month - 1]} {moment.year}"


def format_time(value: Union[str, datetime]) -> str:
    """24-hour clock with the id-ID separator, e.g. 14.30"""
    try:
        moment = _to_local(value)
    except (TypeError, ValueError):
        return ""
    return f"{moment.hour:02d}.{moment.minute:02d}"


def format_date_time(value: Union[str, datetime]) -> str:
    date = format_date(value)
    time = format_time(value)
    return f"{date} {time}" if time else date
