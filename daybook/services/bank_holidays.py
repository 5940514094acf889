"""Bank Holiday lookup.

The England & Wales bank holidays are a hand-maintained JSON data asset,
not computed from Easter rules. The table declares the years it covers;
any date outside that span is treated as "not a bank holiday" and callers
can ask :func:`covers` to tell the two cases apart.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from functools import lru_cache
from pathlib import Path

from daybook.config import settings

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).resolve().parent.parent / "data" / "bank_holidays_england_wales.json"
GENERIC_NAME = "Bank Holiday"


class BankHolidayDataError(ValueError):
    """The bank holiday data asset is malformed."""


@dataclass(frozen=True)
class BankHolidayTable:
    division: str
    version: str
    first_year: int
    last_year: int
    names: dict[date, str] = field(default_factory=dict)

    @property
    def dates(self) -> frozenset[date]:
        return frozenset(self.names)

    def is_bank_holiday(self, d: date) -> bool:
        return d in self.names

    def holiday_name(self, d: date) -> str:
        return self.names.get(d, GENERIC_NAME)

    def covers(self, d: date) -> bool:
        return self.first_year <= d.year <= self.last_year

    def for_year(self, year: int) -> list[tuple[date, str]]:
        return sorted((d, name) for d, name in self.names.items() if d.year == year)


def parse_table(raw: dict) -> BankHolidayTable:
    """Build a table from the GOV.UK-shaped JSON payload."""
    try:
        first_year = int(raw["first_year"])
        last_year = int(raw["last_year"])
        names = {date.fromisoformat(e["date"]): e["title"] for e in raw["events"]}
    except (KeyError, TypeError, ValueError) as exc:
        raise BankHolidayDataError(f"Malformed bank holiday data: {exc}") from exc

    outside = sorted(d for d in names if not first_year <= d.year <= last_year)
    if outside:
        raise BankHolidayDataError(
            f"Events outside declared years {first_year}-{last_year}: {outside[0].isoformat()}"
        )

    return BankHolidayTable(
        division=raw.get("division", "england-and-wales"),
        version=str(raw.get("version", "unversioned")),
        first_year=first_year,
        last_year=last_year,
        names=names,
    )


def load_table(path: Path) -> BankHolidayTable:
    table = parse_table(json.loads(path.read_text(encoding="utf-8")))
    logger.info(
        "Loaded %d bank holidays (%s %s, %d-%d)",
        len(table.names), table.division, table.version, table.first_year, table.last_year,
    )
    return table


@lru_cache(maxsize=1)
def get_table() -> BankHolidayTable:
    """The process-wide table, loaded on first use."""
    path = Path(settings.BANK_HOLIDAY_DATA_FILE) if settings.BANK_HOLIDAY_DATA_FILE else DEFAULT_DATA_FILE
    return load_table(path)


def is_bank_holiday(d: date) -> bool:
    return get_table().is_bank_holiday(d)


def holiday_name(d: date) -> str:
    return get_table().holiday_name(d)


def covers(d: date) -> bool:
    return get_table().covers(d)


def bank_holidays_for_year(year: int) -> list[tuple[date, str]]:
    """Sorted ``(date, name)`` pairs for one year."""
    return get_table().for_year(year)
