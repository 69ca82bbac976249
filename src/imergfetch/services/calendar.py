"""Calendar helpers for walking download ranges."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator

from imergfetch.errors import InvalidRange
from imergfetch.services.naming import coerce_date


def resolve_range(
    start: date | datetime | str, end: date | datetime | str
) -> tuple[date, date]:
    """Return ``(start, end)`` as dates, refusing ranges that run backwards."""

    first = coerce_date(start)
    last = coerce_date(end)
    if last < first:
        raise InvalidRange(
            f"Range end {last.isoformat()} precedes start {first.isoformat()}."
        )
    return first, last


def iter_days(start: date | datetime | str, end: date | datetime | str) -> Iterator[date]:
    """Yield every calendar day from ``start`` to ``end`` inclusive."""

    first, last = resolve_range(start, end)
    current = first
    while True:
        yield current
        if current == last:
            return
        current += timedelta(days=1)


def iter_months(start: date | datetime | str, end: date | datetime | str) -> Iterator[date]:
    """Yield the first day of every month touched by the inclusive range."""

    first, last = resolve_range(start, end)
    current = first.replace(day=1)
    while True:
        yield current
        if (current.year, current.month) == (last.year, last.month):
            return
        if current.month == 12:
            current = current.replace(year=current.year + 1, month=1)
        else:
            current = current.replace(month=current.month + 1)


__all__ = ["iter_days", "iter_months", "resolve_range"]
