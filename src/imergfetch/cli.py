"""Command-line entry points for imergfetch."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any, Iterator, Optional

import typer

from imergfetch.config import ConfigError, ImergConfig, dump_example_config, load_config
from imergfetch.errors import ImergFetchError, InvalidDate
from imergfetch.services.downloader import DownloadResult, download_one, download_range
from imergfetch.services.naming import ProductKind, build_path, coerce_date
from imergfetch.util.logging import configure_logging
from imergfetch.util.manifest import write_manifest
from imergfetch.util.paths import output_root_from_config

app = typer.Typer(add_completion=False, help="Download IMERG precipitation GeoTIFFs from the PPS archive")


def _parse_date(value: str) -> date:
    return coerce_date(value)


def _parse_month(value: str) -> date:
    try:
        year, month = value.strip().split("-")
        return date(int(year), int(month), 1)
    except ValueError as exc:
        raise InvalidDate(f"Expected YYYY-MM, got {value!r}") from exc


def _load(ctx: typer.Context, **overrides: Any) -> ImergConfig:
    options = ctx.obj or {}
    merged: dict[str, Any] = {}
    if options.get("output_dir") is not None:
        merged["runtime.output_dir"] = str(options["output_dir"])
    merged.update({key.replace("__", "."): value for key, value in overrides.items() if value is not None})
    return load_config(options.get("config"), overrides=merged)


def _logger(ctx: typer.Context, cfg: ImergConfig) -> logging.Logger:
    options = ctx.obj or {}
    return configure_logging(log_path=cfg.runtime.log_path, verbose=bool(options.get("verbose")))


@contextmanager
def _reported_errors() -> Iterator[None]:
    """Turn library failures into a logged message and exit code 1."""
    try:
        yield
    except (ImergFetchError, ConfigError) as exc:
        logging.getLogger("imergfetch").error("%s: %s", type(exc).__name__, exc)
        raise typer.Exit(code=1) from exc


def _record_single(cfg: ImergConfig, step: str, result: DownloadResult) -> None:
    root = output_root_from_config(cfg.runtime.output_dir)
    write_manifest(result.model_dump(mode="json"), root=root, step=step)


@app.callback()
def main_options(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML/TOML/JSON config file"),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Directory for downloaded files"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    ctx.obj = {"config": config, "output_dir": output_dir, "verbose": verbose}


@app.command()
def path(
    ctx: typer.Context,
    day_arg: str = typer.Argument(..., metavar="DATE", help="Date YYYY-MM-DD"),
    kind: ProductKind = typer.Option(ProductKind.DAY, help="File kind"),
    slot: Optional[int] = typer.Option(None, help="Half-hour slot 0-47 (half-hour kind only)"),
) -> None:
    """Print the remote URL for a date without downloading anything."""

    with _reported_errors():
        cfg = _load(ctx)
        typer.echo(build_path(kind, _parse_date(day_arg), cfg.naming, slot=slot))


@app.command()
def day(
    ctx: typer.Context,
    day_arg: str = typer.Argument(..., metavar="DATE", help="Date YYYY-MM-DD"),
) -> None:
    """Download the daily accumulation for one date."""

    with _reported_errors():
        cfg = _load(ctx)
        _logger(ctx, cfg)
        result = download_one(_parse_date(day_arg), cfg, kind=ProductKind.DAY)
        _record_single(cfg, "day", result)
        typer.echo(f"Wrote {result.path}")


@app.command()
def month(
    ctx: typer.Context,
    year_month: str = typer.Argument(..., metavar="YYYY-MM", help="Month YYYY-MM"),
) -> None:
    """Download the monthly accumulation for one month."""

    with _reported_errors():
        cfg = _load(ctx)
        _logger(ctx, cfg)
        result = download_one(_parse_month(year_month), cfg, kind=ProductKind.MONTH)
        _record_single(cfg, "month", result)
        typer.echo(f"Wrote {result.path}")


@app.command("half-hour")
def half_hour(
    ctx: typer.Context,
    day_arg: str = typer.Argument(..., metavar="DATE", help="Date YYYY-MM-DD"),
    slot: int = typer.Option(..., "--slot", help="Half-hour slot 0-47 (0 = 00:00-00:29 UTC)"),
) -> None:
    """Download one half-hourly snapshot."""

    with _reported_errors():
        cfg = _load(ctx)
        _logger(ctx, cfg)
        result = download_one(_parse_date(day_arg), cfg, kind=ProductKind.HALF_HOUR, slot=slot)
        _record_single(cfg, "half_hour", result)
        typer.echo(f"Wrote {result.path}")


@app.command("range")
def range_(
    ctx: typer.Context,
    from_date: str = typer.Option(..., "--from", help="Start date YYYY-MM-DD"),
    to_date: str = typer.Option(..., "--to", help="End date YYYY-MM-DD (inclusive)"),
    kind: ProductKind = typer.Option(ProductKind.DAY, help="File kind"),
    keep_going: bool = typer.Option(False, "--keep-going", help="Continue past failed days and report them"),
    parallelism: Optional[int] = typer.Option(None, min=1, max=4, help="Simultaneous connections (1-4)"),
) -> None:
    """Download every file between two dates, inclusive."""

    with _reported_errors():
        cfg = _load(
            ctx,
            runtime__parallelism=parallelism,
            runtime__fail_fast=False if keep_going else None,
        )
        logger = _logger(ctx, cfg)
        report = download_range(_parse_date(from_date), _parse_date(to_date), cfg, kind=kind)

        root = output_root_from_config(cfg.runtime.output_dir)
        write_manifest(report.model_dump(mode="json"), root=root, step="range")
        logger.info("Downloaded %d file(s), %d failed", len(report.succeeded), len(report.failed))
        for failure in report.failed:
            typer.echo(f"FAILED {failure.day.isoformat()} {failure.url}: {failure.error}", err=True)
        if not report.ok:
            raise typer.Exit(code=1)


@app.command("dump-config")
def dump_config(
    dest: Path = typer.Argument(..., help="Destination .yaml or .json file"),
) -> None:
    """Write the default configuration as a starting point."""

    with _reported_errors():
        dump_example_config(dest)
        typer.echo(f"Wrote {dest}")


def main() -> None:
    app()


__all__ = ["main", "app"]
