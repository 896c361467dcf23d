"""
Turn loosely typed dates/times into the service's canonical strings.

    normalize_date("mañana")   -> "2025-08-09"     (relative to today)
    normalize_date("15/3")     -> "2025-03-15"
    normalize_time("19hs")     -> "19:00"

Every command goes through these two functions, so they are the only place
that knows about user-facing date/time spellings.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Optional

from dateutil import parser as dtparser
from dateutil import tz

from booker.errors import InvalidDate, InvalidTime

TODAY_WORDS = frozenset({"", "today", "hoy"})
TOMORROW_WORDS = frozenset({"tomorrow", "mañana", "manana"})

# Full calendar date at the start: 2024-03-15 or 20240315 (optionally followed by a time)
_ISO_DATE_RE = re.compile(r"^\d{4}-?\d{2}-?\d{2}(?:[T ].*)?$")
_DMY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})(?:/(\d{2}|\d{4}))?$")

_HOUR_RE = re.compile(r"^(\d{1,2})(?:hs?)?$", re.IGNORECASE)
_HOUR_MIN_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def today(tz_name: Optional[str] = None) -> dt.date:
    """Current date in `tz_name` (local time when None or unknown)."""
    zone = tz.gettz(tz_name) if tz_name else None
    return dt.datetime.now(zone or tz.tzlocal()).date()


def normalize_date(value: Optional[str], base: Optional[dt.date] = None) -> str:
    """
    Resolve a user date into YYYY-MM-DD.

    Order (first match wins):
      1) empty / today / hoy
      2) tomorrow / mañana / manana
      3) ISO-8601 calendar date
      4) D/M or D/M/Y (year defaults to the current one; YY means 20YY)

    `base` defaults to today() in the local zone; callers pass the date in
    their configured zone.

    raises: InvalidDate when nothing matches or the date does not exist.
    """
    base = base or today()
    raw = (value or "").strip()
    word = raw.lower()

    if word in TODAY_WORDS:
        return base.isoformat()
    if word in TOMORROW_WORDS:
        return (base + dt.timedelta(days=1)).isoformat()

    if _ISO_DATE_RE.match(raw):
        try:
            return dtparser.isoparse(raw).date().isoformat()
        except ValueError:
            raise InvalidDate(raw) from None

    m = _DMY_RE.match(raw)
    if m:
        day, month = int(m.group(1)), int(m.group(2))
        year = int(m.group(3)) if m.group(3) else base.year
        if year < 100:
            year += 2000
        try:
            return dt.date(year, month, day).isoformat()
        except ValueError:
            raise InvalidDate(raw) from None

    raise InvalidDate(raw)


def normalize_time(value: Optional[str]) -> Optional[str]:
    """
    Resolve a user time into HH:MM.

    Accepts "19", "19h", "19hs" and "H:MM"/"HH:MM". Returns None for absent
    input so the caller can apply its own default.
    """
    if value is None or not value.strip():
        return None
    raw = value.strip()

    m = _HOUR_RE.match(raw)
    if m:
        hour = int(m.group(1))
        if 0 <= hour <= 23:
            return f"{hour:02d}:00"
        raise InvalidTime(raw)

    m = _HOUR_MIN_RE.match(raw)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return f"{hour:02d}:{minute:02d}"

    raise InvalidTime(raw)


# ---- Helpers for building API windows ---------------------------------------

def add_days(iso_date: str, days: int) -> str:
    return (dt.date.fromisoformat(iso_date) + dt.timedelta(days=days)).isoformat()



def to_utc_instant(iso_date: str, hhmm: str) -> str:
    """
    Glue a canonical date and time into the instant string the API expects.

    The wall-clock time is sent as UTC ("Z"), matching how bookings are
    created by the service's own integrations.
    """
    return f"{iso_date}T{hhmm}:00.000Z"
