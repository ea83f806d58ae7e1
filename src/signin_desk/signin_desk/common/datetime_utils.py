from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Any, Optional
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import ValidationError

YMD_FORMAT = "%Y-%m-%d"

_YMD_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_MDY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s+.*)?$")
# Spreadsheet serial day numbers count from 1899-12-30.
_SERIAL_EPOCH = datetime(1899, 12, 30)


def get_zone(name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(name or DEFAULT_TIMEZONE)


def now_local(tz: Optional[ZoneInfo] = None) -> datetime:
    """Current time in the program time zone."""
    return datetime.now(tz or get_zone())


def parse_loose_datetime(value: Any) -> Optional[datetime]:
    """Best-effort parse of a stored cell into a datetime.

    Accepts datetime/date objects, spreadsheet serial numbers, ``YYYY-MM-DD``,
    ``M/D/YYYY`` and ISO-8601 strings. Returns None for blanks and garbage.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        return _SERIAL_EPOCH + timedelta(days=float(value))

    text = str(value).strip()
    if not text:
        return None

    m = _YMD_RE.match(text)
    if m:
        try:
            return datetime(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None

    m = _MDY_RE.match(text)
    if m:
        try:
            return datetime(int(m.group(3)), int(m.group(1)), int(m.group(2)))
        except ValueError:
            return None

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def calendar_day(value: Any, tz: ZoneInfo) -> Optional[date]:
    """Calendar day of ``value`` as seen in ``tz``. Naive values are taken as local already."""
    dt = parse_loose_datetime(value)
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(tz)
    return dt.date()


def ymd(value: Any, tz: ZoneInfo) -> str:
    day = calendar_day(value, tz)
    return day.strftime(YMD_FORMAT) if day else ""


def day_or_today(value: Any, tz: ZoneInfo, now: datetime) -> str:
    """Normalize an operation's date argument, falling back to today when blank or unparsable."""
    return ymd(value, tz) or ymd(now, tz)


def require_day(value: Any, tz: ZoneInfo) -> str:
    day = ymd(value, tz)
    if not day:
        raise ValidationError("Missing or invalid date.")
    return day


def to_iso(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def as_aware(value: Optional[datetime], tz: ZoneInfo) -> Optional[datetime]:
    """Attach ``tz`` to naive datetimes so stamps from different tables compare safely."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=tz)
