"""Local output naming for downloaded archive files."""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path

from imergfetch.errors import InvalidDate
from imergfetch.services.naming import ProductKind, half_hour_window

_DAY_NAME = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:T\d{4})?\.")
_MONTH_NAME = re.compile(r"^(\d{4})-(\d{2})\.")


def output_name_for(
    day: date,
    *,
    extension: str = "tif",
    kind: ProductKind | str = ProductKind.DAY,
    slot: int | None = None,
) -> str:
    """Return the local file name for one archive file.

    Daily files become ``YYYY-MM-DD.tif``, monthly ``YYYY-MM.tif`` and
    half-hourly ``YYYY-MM-DDTHHMM.tif``.
    """
    kind = ProductKind(kind)
    stem = f"{day.year:04d}-{day.month:02d}-{day.day:02d}"
    if kind is ProductKind.MONTH:
        stem = f"{day.year:04d}-{day.month:02d}"
    elif kind is ProductKind.HALF_HOUR:
        if slot is None:
            raise InvalidDate("Half-hourly files need a slot (0-47).")
        _, token = half_hour_window(slot)
        minutes = int(token)
        stem = f"{stem}T{minutes // 60:02d}{minutes % 60:02d}"
    return f"{stem}.{extension}"


def output_path_for(
    day: date,
    *,
    root: Path,
    extension: str = "tif",
    kind: ProductKind | str = ProductKind.DAY,
    slot: int | None = None,
) -> Path:
    """Return where a downloaded file should be stored under ``root``."""
    return root / output_name_for(day, extension=extension, kind=kind, slot=slot)


def date_from_output_name(name: str | Path) -> date:
    """Recover the calendar date encoded in a local output file name."""

    base = Path(name).name
    try:
        match = _DAY_NAME.match(base)
        if match:
            return date.fromisoformat(match.group(1))
        match = _MONTH_NAME.match(base)
        if match:
            return date(int(match.group(1)), int(match.group(2)), 1)
    except ValueError as exc:
        raise InvalidDate(f"File name {base!r} does not encode a valid date.") from exc
    raise InvalidDate(f"File name {base!r} does not encode a date.")


__all__ = ["date_from_output_name", "output_name_for", "output_path_for"]
