"""Remote path construction for the PPS IMERG GeoTIFF archive.

Each day folder on the archive looks like::

    sm/730/gpmdata/2011/08/01/gis/

and holds 48 half-hourly snapshots (``3B-HHR-...``), one daily accumulation
(``3B-DAY-...``) and, in the first day's folder of each month only, the
monthly accumulation (``3B-MO-...``). All builders here are pure: no I/O,
same input, same string.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from imergfetch.config.models import NamingConfig
from imergfetch.errors import InvalidDate

SLOTS_PER_DAY = 48
SLOT_MINUTES = 30


class ProductKind(str, Enum):
    """File kinds served from the day folders."""

    DAY = "day"
    MONTH = "month"
    HALF_HOUR = "half-hour"


def coerce_date(value: date | datetime | str) -> date:
    """Return ``value`` as a :class:`date`, raising :class:`InvalidDate` otherwise."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidDate(f"Not a calendar date: {value!r}") from exc
    raise InvalidDate(f"Not a calendar date: {value!r}")


def day_of_year_token(day: date) -> str:
    """Return the daily file index: 30 x zero-based day of year, at least 4 digits.

    The archive numbers daily files as if they were the first half-hour slot
    of the day counted from Jan 1, which is where the factor of 30 comes
    from. Only daily files follow this rule.
    """

    index = day.timetuple().tm_yday - 1
    return f"{index * SLOT_MINUTES:04d}"


def compact_date(day: date) -> str:
    return f"{day.year:04d}{day.month:02d}{day.day:02d}"


def directory_for(day: date, naming: NamingConfig) -> str:
    return f"{naming.directory_prefix}{day.year:04d}/{day.month:02d}/{day.day:02d}{naming.directory_suffix}"


def build_daily_path(day: date | datetime | str, naming: NamingConfig | None = None) -> str:
    """Return the remote URL of the daily accumulation for ``day``."""

    naming = naming or NamingConfig()
    day = coerce_date(day)
    return (
        f"{directory_for(day, naming)}"
        f"{naming.file_prefix}{compact_date(day)}{naming.file_time}"
        f".{day_of_year_token(day)}.{naming.file_version}.{naming.file_extension}"
    )


def build_monthly_path(day: date | datetime | str, naming: NamingConfig | None = None) -> str:
    """Return the remote URL of the monthly accumulation covering ``day``.

    Monthly files only exist in the folder of the first day of the month,
    so any day of the month resolves to the same path.
    """

    naming = naming or NamingConfig()
    first = coerce_date(day).replace(day=1)
    return (
        f"{directory_for(first, naming)}"
        f"{naming.monthly_file_prefix}{compact_date(first)}{naming.monthly_file_time}"
        f".{first.month:02d}.{naming.file_version}.{naming.file_extension}"
    )


def half_hour_window(slot: int) -> tuple[str, str]:
    """Return ``(time_window, index_token)`` for a half-hour slot (0-47)."""

    if isinstance(slot, bool) or not isinstance(slot, int) or not 0 <= slot < SLOTS_PER_DAY:
        raise InvalidDate(f"Half-hour slot must be in 0..{SLOTS_PER_DAY - 1}, got {slot!r}")
    start = slot * SLOT_MINUTES
    end = start + SLOT_MINUTES - 1
    window = f"-S{start // 60:02d}{start % 60:02d}00-E{end // 60:02d}{end % 60:02d}59"
    return window, f"{start:04d}"


def build_half_hourly_path(
    day: date | datetime | str, slot: int, naming: NamingConfig | None = None
) -> str:
    """Return the remote URL of one half-hourly snapshot."""

    naming = naming or NamingConfig()
    day = coerce_date(day)
    window, token = half_hour_window(slot)
    return (
        f"{directory_for(day, naming)}"
        f"{naming.half_hourly_file_prefix}{compact_date(day)}{window}"
        f".{token}.{naming.file_version}.{naming.file_extension}"
    )


def build_path(
    kind: ProductKind | str,
    day: date | datetime | str,
    naming: NamingConfig | None = None,
    *,
    slot: int | None = None,
) -> str:
    """Dispatch to the builder for ``kind``."""

    kind = ProductKind(kind)
    if kind is not ProductKind.HALF_HOUR and slot is not None:
        raise InvalidDate(f"A half-hour slot only applies to half-hourly files, not {kind.value!r}.")
    if kind is ProductKind.DAY:
        return build_daily_path(day, naming)
    if kind is ProductKind.MONTH:
        return build_monthly_path(day, naming)
    if slot is None:
        raise InvalidDate("Half-hourly files need a slot (0-47).")
    return build_half_hourly_path(day, slot, naming)


__all__ = [
    "ProductKind",
    "SLOTS_PER_DAY",
    "build_daily_path",
    "build_half_hourly_path",
    "build_monthly_path",
    "build_path",
    "coerce_date",
    "compact_date",
    "day_of_year_token",
    "directory_for",
    "half_hour_window",
]
