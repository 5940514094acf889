"""Calendar utilities.

Time-zone-free date arithmetic over plain ``datetime.date`` values.
Dates cross the API and storage boundaries as ISO ``YYYY-MM-DD`` keys and
months as ``YYYY-MM`` keys; both are zero padded so string order matches
chronological order.
"""

import calendar
import re
from datetime import date, timedelta

DAY_HEADERS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_KEY_RE = re.compile(r"^\d{4}-\d{2}$")


def parse_date_key(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` key into a date."""
    if not _DATE_KEY_RE.match(value):
        raise ValueError(f"Invalid date key: {value!r}")
    return date.fromisoformat(value)


def to_date_key(d: date) -> str:
    return d.isoformat()


def parse_month_key(value: str) -> date:
    """Parse a ``YYYY-MM`` key into the first day of that month."""
    if not _MONTH_KEY_RE.match(value):
        raise ValueError(f"Invalid month key: {value!r}")
    year, month = (int(part) for part in value.split("-"))
    return date(year, month, 1)


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def is_weekend(d: date) -> bool:
    """True on Saturday and Sunday."""
    return d.weekday() >= 5


def days_in_range(start: date, end: date) -> list[date]:
    """All dates in ``[start, end]``; empty when ``start > end``."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def month_range(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month."""
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def this_month_range(today: date | None = None) -> tuple[date, date]:
    today = today or date.today()
    return month_range(today.year, today.month)


def last_month_range(today: date | None = None) -> tuple[date, date]:
    previous = add_months(today or date.today(), -1)
    return month_range(previous.year, previous.month)


def add_months(d: date, delta: int) -> date:
    """Shift by ``delta`` months, always landing on the 1st."""
    index = d.year * 12 + (d.month - 1) + delta
    return date(index // 12, index % 12 + 1, 1)


def calendar_grid(year: int, month: int, spill: bool = False) -> list[date | None]:
    """Monday-first grid of full weeks covering a month.

    Slots before the 1st and after the last day are ``None``, or, with
    ``spill=True``, the neighbouring months' dates.
    """
    first, last = month_range(year, month)
    lead = first.weekday()
    trail = (7 - (lead + last.day) % 7) % 7

    if spill:
        return days_in_range(first - timedelta(days=lead), last + timedelta(days=trail))
    return [None] * lead + days_in_range(first, last) + [None] * trail


# ---------------------------------------------------------------------------
# Display helpers (en-GB)
# ---------------------------------------------------------------------------

def format_month_year(d: date) -> str:
    """"February 2026"."""
    return f"{calendar.month_name[d.month]} {d.year}"


def format_short_date(d: date) -> str:
    """"18 Feb"."""
    return f"{d.day} {calendar.month_abbr[d.month]}"


def format_day_date(d: date) -> str:
    """"Thu, 1 Jan"."""
    return f"{calendar.day_abbr[d.weekday()]}, {format_short_date(d)}"


def format_range_label(start: date, end: date) -> str:
    """"1 Feb 2026 – 28 Feb 2026"."""
    return f"{format_short_date(start)} {start.year} – {format_short_date(end)} {end.year}"
