"""Download orchestration: single files and inclusive date ranges."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from imergfetch.config import MAX_PARALLELISM, ImergConfig, require_credentials
from imergfetch.errors import ImergFetchError
from imergfetch.io.cache import output_path_for
from imergfetch.io.fetcher import fetch_file
from imergfetch.services.calendar import iter_days, iter_months, resolve_range
from imergfetch.services.naming import SLOTS_PER_DAY, ProductKind, build_path, coerce_date
from imergfetch.util.paths import output_root_from_config

LOGGER = logging.getLogger(__name__)


class DownloadResult(BaseModel):
    """A file that was fetched and committed to disk."""

    day: date
    slot: Optional[int] = None
    url: str
    path: Path


class DownloadFailure(BaseModel):
    """A file whose download failed in keep-going mode."""

    day: date
    slot: Optional[int] = None
    url: str
    error: str


class RangeReport(BaseModel):
    """Outcome of a range download."""

    start: date
    end: date
    kind: ProductKind
    succeeded: List[DownloadResult] = Field(default_factory=list)
    failed: List[DownloadFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def download_one(
    day: date | datetime | str,
    config: ImergConfig,
    *,
    kind: ProductKind | str = ProductKind.DAY,
    slot: int | None = None,
) -> DownloadResult:
    """Fetch one archive file and store it under the configured output dir."""

    credentials = require_credentials(config)
    kind = ProductKind(kind)
    day = coerce_date(day)
    if kind is ProductKind.MONTH:
        day = day.replace(day=1)

    url = build_path(kind, day, config.naming, slot=slot)
    dest = output_path_for(
        day,
        root=output_root_from_config(config.runtime.output_dir),
        extension=config.naming.file_extension,
        kind=kind,
        slot=slot,
    )
    fetch_file(
        url,
        dest,
        credentials,
        timeout_seconds=config.runtime.timeout_seconds,
        force_ipv4=config.runtime.force_ipv4,
    )
    return DownloadResult(day=day, slot=slot, url=url, path=dest)


def download_day(day: date | datetime | str, config: ImergConfig) -> DownloadResult:
    """Fetch the daily accumulation for ``day``."""
    return download_one(day, config, kind=ProductKind.DAY)


def download_range(
    start: date | datetime | str,
    end: date | datetime | str,
    config: ImergConfig,
    *,
    kind: ProductKind | str = ProductKind.DAY,
    fail_fast: bool | None = None,
    parallelism: int | None = None,
) -> RangeReport:
    """Download every file of ``kind`` between ``start`` and ``end`` inclusive.

    In fail-fast mode (the default from config) the first failure propagates
    and downloads not yet started are cancelled. Otherwise failures are
    collected in the returned report and the remaining days still run.
    Monthly ranges fetch one file per month touched; half-hourly ranges
    fetch all 48 slots of each day.
    """

    require_credentials(config)
    kind = ProductKind(kind)
    first, last = resolve_range(start, end)
    fail_fast = config.runtime.fail_fast if fail_fast is None else fail_fast
    workers = min(parallelism or config.runtime.parallelism, MAX_PARALLELISM)

    targets = _targets(first, last, kind)
    report = RangeReport(start=first, end=last, kind=kind)
    LOGGER.info(
        "Downloading %d %s file(s) from %s to %s with %d worker(s)",
        len(targets),
        kind.value,
        first.isoformat(),
        last.isoformat(),
        workers,
    )

    if workers <= 1:
        for day, slot in targets:
            _run_one(day, slot, config, kind, report, fail_fast=fail_fast)
        return report

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="imergfetch") as executor:
        futures = {
            executor.submit(download_one, day, config, kind=kind, slot=slot): (day, slot)
            for day, slot in targets
        }
        try:
            for future in as_completed(futures):
                day, slot = futures[future]
                try:
                    report.succeeded.append(future.result())
                except ImergFetchError as exc:
                    _record_failure(day, slot, config, kind, report, exc, fail_fast=fail_fast)
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise

    report.succeeded.sort(key=lambda item: (item.day, item.slot or 0))
    report.failed.sort(key=lambda item: (item.day, item.slot or 0))
    return report


def _targets(first: date, last: date, kind: ProductKind) -> list[tuple[date, int | None]]:
    if kind is ProductKind.MONTH:
        return [(month, None) for month in iter_months(first, last)]
    if kind is ProductKind.HALF_HOUR:
        return [(day, slot) for day in iter_days(first, last) for slot in range(SLOTS_PER_DAY)]
    return [(day, None) for day in iter_days(first, last)]


def _run_one(
    day: date,
    slot: int | None,
    config: ImergConfig,
    kind: ProductKind,
    report: RangeReport,
    *,
    fail_fast: bool,
) -> None:
    try:
        report.succeeded.append(download_one(day, config, kind=kind, slot=slot))
    except ImergFetchError as exc:
        _record_failure(day, slot, config, kind, report, exc, fail_fast=fail_fast)


def _record_failure(
    day: date,
    slot: int | None,
    config: ImergConfig,
    kind: ProductKind,
    report: RangeReport,
    exc: ImergFetchError,
    *,
    fail_fast: bool,
) -> None:
    label = day.isoformat() if slot is None else f"{day.isoformat()} slot {slot}"
    LOGGER.error("Download failed for %s: %s", label, exc)
    if fail_fast:
        raise exc
    url = getattr(exc, "url", None) or build_path(kind, day, config.naming, slot=slot)
    report.failed.append(DownloadFailure(day=day, slot=slot, url=url, error=str(exc)))


__all__ = [
    "DownloadFailure",
    "DownloadResult",
    "RangeReport",
    "download_day",
    "download_one",
    "download_range",
]
