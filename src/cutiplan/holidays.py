"""Holiday records, the date-keyed holiday index, and built-in presets.

Holiday data arrives as plain ``{"date": "YYYY-MM-DD", "name": ...}``
records, the shape published by the public Indonesian holiday API.  Records
may also carry an explicit ``type`` and ``description``; when they don't, the
type is derived from the name (``"Cuti Bersama"`` marks joint leave days).
"""

from __future__ import annotations

import datetime
import enum
import json
import logging
import pathlib
from collections.abc import Iterable, Mapping
from typing import NamedTuple

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class HolidayType(enum.Enum):
    NATIONAL = "NATIONAL"
    CUTI_BERSAMA = "CUTI_BERSAMA"
    # Regional or religious days that are not national red dates
    OBSERVANCE = "OBSERVANCE"


class Holiday(NamedTuple):
    """A single holiday entry, keyed by its ISO date string."""

    date: str
    name: str
    type: HolidayType
    description: str


HolidayIndex = dict[str, list[Holiday]]
"""Mapping of ``YYYY-MM-DD`` to the holidays falling on that date."""


class HolidayStyle(NamedTuple):
    label: str
    marker: str


_STYLES: dict[HolidayType, HolidayStyle] = {
    HolidayType.NATIONAL: HolidayStyle("National Holiday", "H"),
    HolidayType.CUTI_BERSAMA: HolidayStyle("Cuti Bersama", "C"),
    HolidayType.OBSERVANCE: HolidayStyle("Observance", "o"),
}

_DESCRIPTIONS: dict[HolidayType, str] = {
    HolidayType.NATIONAL: "Official National Holiday (Tanggal Merah).",
    HolidayType.CUTI_BERSAMA: "Joint Leave Holiday (Cuti Bersama) - Government offices closed.",
    HolidayType.OBSERVANCE: "Observance - not an official day off.",
}


def holiday_style(holiday_type: HolidayType) -> HolidayStyle:
    """Return the display label and calendar marker for *holiday_type*."""
    return _STYLES[holiday_type]


def default_description(holiday_type: HolidayType) -> str:
    return _DESCRIPTIONS[holiday_type]


def classify_holiday_type(name: str) -> HolidayType:
    """Derive the holiday type from its published name."""
    if "cuti bersama" in name.lower():
        return HolidayType.CUTI_BERSAMA
    return HolidayType.NATIONAL


# ---------------------------------------------------------------------------
# Parsing and indexing
# ---------------------------------------------------------------------------


def _parse_record(raw: Mapping[str, object]) -> Holiday:
    if not isinstance(raw, Mapping):
        raise ValueError(f"Holiday record must be an object, got {type(raw).__name__}")

    date_value = raw.get("date")
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise ValueError(f"Holiday record is missing a name: {dict(raw)!r}")
    try:
        date = datetime.date.fromisoformat(str(date_value)).isoformat()
    except ValueError:
        raise ValueError(f"Invalid holiday date {date_value!r} for {name!r}") from None

    raw_type = raw.get("type")
    if raw_type is None:
        holiday_type = classify_holiday_type(name)
    else:
        try:
            holiday_type = HolidayType(str(raw_type).upper())
        except ValueError:
            raise ValueError(f"Unknown holiday type {raw_type!r} for {name!r}") from None

    description = raw.get("description")
    if not isinstance(description, str):
        description = default_description(holiday_type)

    return Holiday(date=date, name=name, type=holiday_type, description=description)


def parse_holiday_records(records: Iterable[Mapping[str, object]]) -> list[Holiday]:
    """Convert raw ``{date, name[, type, description]}`` records to holidays.

    Raises ``ValueError`` on a record with a bad date, name, or type.
    """
    return [_parse_record(raw) for raw in records]


def load_holidays(path: str | pathlib.Path) -> list[Holiday]:
    """Load holiday records from a JSON file.

    The file holds either a list of records or an object with a
    ``holidays`` list.  Raises ``FileNotFoundError`` if the file is missing
    and ``ValueError`` on malformed content.
    """
    p = pathlib.Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in holidays file {str(p)!r}: {exc}") from None

    if isinstance(data, dict):
        data = data.get("holidays")
    if not isinstance(data, list):
        raise ValueError(f"Holidays file {str(p)!r} must contain a list of records.")

    holidays = parse_holiday_records(data)
    logger.debug("Loaded %d holiday records from %s", len(holidays), p)
    return holidays


def build_holiday_index(holidays: Iterable[Holiday]) -> HolidayIndex:
    """Group holidays by date, dropping repeated names on the same date."""
    index: HolidayIndex = {}
    for h in holidays:
        day = index.setdefault(h.date, [])
        if any(existing.name == h.name for existing in day):
            logger.debug("Skipping duplicate holiday %r on %s", h.name, h.date)
            continue
        day.append(h)
    return index


def holidays_by_month(index: Mapping[str, list[Holiday]], year: int) -> dict[int, list[Holiday]]:
    """Return the holidays of *year* grouped by month number (1-12), sorted by date."""
    months: dict[int, list[Holiday]] = {}
    for key in sorted(index):
        d = datetime.date.fromisoformat(key)
        if d.year != year:
            continue
        months.setdefault(d.month, []).extend(index[key])
    return months


# ---------------------------------------------------------------------------
# Country presets
# ---------------------------------------------------------------------------

PRESETS: dict[str, str] = {
    "id": "Indonesia fixed-date national holidays only; moving holidays need --holidays-file",
}


def fixed_holidays(year: int) -> list[Holiday]:
    """Indonesian national holidays that fall on the same date every year.

    Lunar and religious holidays (Idul Fitri, Nyepi, Waisak, ...) move each
    year and must come from a holidays file.
    """
    fixed = [
        (1, 1, "Tahun Baru Masehi"),
        (5, 1, "Hari Buruh Internasional"),
        (6, 1, "Hari Lahir Pancasila"),
        (8, 17, "Hari Proklamasi Kemerdekaan RI"),
        (12, 25, "Hari Raya Natal"),
    ]
    return [
        Holiday(
            date=datetime.date(year, month, day).isoformat(),
            name=name,
            type=HolidayType.NATIONAL,
            description=default_description(HolidayType.NATIONAL),
        )
        for month, day, name in fixed
    ]


_PRESET_FNS = {
    "id": fixed_holidays,
}


def get_holidays(country: str, year: int) -> list[Holiday]:
    """Return the preset holidays for *country* and *year*.

    Raises ``KeyError`` if the country is not supported.
    """
    fn = _PRESET_FNS.get(country)
    if fn is None:
        supported = ", ".join(sorted(PRESETS))
        msg = f"Unknown country preset {country!r}. Supported: {supported}"
        raise KeyError(msg)
    return fn(year)
