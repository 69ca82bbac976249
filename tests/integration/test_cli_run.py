from __future__ import annotations

import json
from datetime import date

from typer.testing import CliRunner

from imergfetch import cli
from imergfetch.config import PASSWORD_ENV, USERNAME_ENV
from imergfetch.services.naming import build_daily_path

from tests.helpers import PASSWORD, USERNAME, fake_ftps, remote_path

runner = CliRunner()


def _archive(days: list[date]) -> dict[str, bytes]:
    return {remote_path(build_daily_path(day)): f"tif {day}".encode() for day in days}


def _env(monkeypatch) -> None:
    monkeypatch.setenv(USERNAME_ENV, USERNAME)
    monkeypatch.setenv(PASSWORD_ENV, PASSWORD)


def test_path_prints_remote_url_without_credentials(monkeypatch) -> None:
    monkeypatch.delenv(USERNAME_ENV, raising=False)
    monkeypatch.delenv(PASSWORD_ENV, raising=False)

    result = runner.invoke(cli.app, ["path", "2011-08-01"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == (
        "ftp://arthurhouftps.pps.eosdis.nasa.gov/sm/730/gpmdata/2011/08/01/gis/"
        "3B-DAY-GIS.MS.MRG.3IMERG.20110801-S000000-E235959.6360.V07B.tif"
    )


def test_path_rejects_invalid_date() -> None:
    result = runner.invoke(cli.app, ["path", "2011-02-30"])

    assert result.exit_code == 1


def test_cli_range_downloads_each_day(monkeypatch, tmp_path) -> None:
    _env(monkeypatch)
    days = [date(2011, 12, 28 + offset) for offset in range(4)] + [date(2012, 1, day) for day in (1, 2, 3)]
    fake = fake_ftps(_archive(days))
    monkeypatch.setattr("imergfetch.io.fetcher.FTP_TLS", fake)

    result = runner.invoke(
        cli.app,
        ["--output-dir", str(tmp_path), "range", "--from", "2011-12-28", "--to", "2012-01-03"],
    )

    assert result.exit_code == 0, result.output
    written = sorted(p.name for p in tmp_path.glob("*.tif"))
    assert written == [f"{day.isoformat()}.tif" for day in days]
    assert (tmp_path / "2012-01-01.tif").read_bytes() == b"tif 2012-01-01"
    assert len(fake.instances) == 7
    assert all(session.calls[1] == ("login", USERNAME, PASSWORD) for session in fake.instances)

    manifests = list((tmp_path / "logs" / "run_manifests").glob("range_*.json"))
    assert len(manifests) == 1
    payload = json.loads(manifests[0].read_text(encoding="utf-8"))
    assert payload["start"] == "2011-12-28"
    assert payload["end"] == "2012-01-03"
    assert len(payload["succeeded"]) == 7
    assert payload["failed"] == []


def test_cli_range_keep_going_reports_failures(monkeypatch, tmp_path) -> None:
    _env(monkeypatch)
    fake = fake_ftps(_archive([date(2011, 8, 1), date(2011, 8, 3)]))
    monkeypatch.setattr("imergfetch.io.fetcher.FTP_TLS", fake)

    result = runner.invoke(
        cli.app,
        [
            "--output-dir",
            str(tmp_path),
            "range",
            "--from",
            "2011-08-01",
            "--to",
            "2011-08-03",
            "--keep-going",
            "--parallelism",
            "2",
        ],
    )

    assert result.exit_code == 1
    assert sorted(p.name for p in tmp_path.glob("*.tif")) == ["2011-08-01.tif", "2011-08-03.tif"]
    manifest = next((tmp_path / "logs" / "run_manifests").glob("range_*.json"))
    payload = json.loads(manifest.read_text(encoding="utf-8"))
    assert [item["day"] for item in payload["failed"]] == ["2011-08-02"]


def test_cli_range_fails_fast_by_default(monkeypatch, tmp_path) -> None:
    _env(monkeypatch)
    fake = fake_ftps(_archive([date(2011, 8, 1), date(2011, 8, 3)]))
    monkeypatch.setattr("imergfetch.io.fetcher.FTP_TLS", fake)

    result = runner.invoke(
        cli.app,
        ["--output-dir", str(tmp_path), "range", "--from", "2011-08-01", "--to", "2011-08-03"],
    )

    assert result.exit_code == 1
    assert sorted(p.name for p in tmp_path.glob("*.tif")) == ["2011-08-01.tif"]
    assert len(fake.instances) == 2


def test_cli_range_rejects_backwards_dates(monkeypatch, tmp_path) -> None:
    _env(monkeypatch)
    fake = fake_ftps({})
    monkeypatch.setattr("imergfetch.io.fetcher.FTP_TLS", fake)

    result = runner.invoke(
        cli.app,
        ["--output-dir", str(tmp_path), "range", "--from", "2012-01-03", "--to", "2011-12-28"],
    )

    assert result.exit_code == 1
    assert fake.instances == []


def test_cli_day_requires_credentials(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv(USERNAME_ENV, raising=False)
    monkeypatch.delenv(PASSWORD_ENV, raising=False)

    result = runner.invoke(cli.app, ["--output-dir", str(tmp_path), "day", "2011-08-01"])

    assert result.exit_code == 1
    assert list(tmp_path.glob("*.tif")) == []


def test_cli_month_and_half_hour(monkeypatch, tmp_path) -> None:
    _env(monkeypatch)
    files = {
        "/sm/730/gpmdata/2011/08/01/gis/3B-MO-GIS.MS.MRG.3IMERG.20110801-S000000-E235959.08.V07B.tif": b"mo",
        "/sm/730/gpmdata/2011/08/01/gis/3B-HHR-GIS.MS.MRG.3IMERG.20110801-S003000-E005959.0030.V07B.tif": b"hhr",
    }
    monkeypatch.setattr("imergfetch.io.fetcher.FTP_TLS", fake_ftps(files))

    month = runner.invoke(cli.app, ["--output-dir", str(tmp_path), "month", "2011-08"])
    half = runner.invoke(cli.app, ["--output-dir", str(tmp_path), "half-hour", "2011-08-01", "--slot", "1"])

    assert month.exit_code == 0, month.output
    assert half.exit_code == 0, half.output
    assert (tmp_path / "2011-08.tif").read_bytes() == b"mo"
    assert (tmp_path / "2011-08-01T0030.tif").read_bytes() == b"hhr"


def test_cli_dump_config(tmp_path) -> None:
    dest = tmp_path / "imergfetch.yaml"

    result = runner.invoke(cli.app, ["dump-config", str(dest)])

    assert result.exit_code == 0, result.output
    assert "directory_prefix" in dest.read_text(encoding="utf-8")


def test_path_rejects_slot_for_daily_kind() -> None:
    result = runner.invoke(cli.app, ["path", "2011-08-01", "--kind", "day", "--slot", "3"])

    assert result.exit_code == 1


def test_path_half_hour_with_slot() -> None:
    result = runner.invoke(cli.app, ["path", "2011-08-01", "--kind", "half-hour", "--slot", "1"])

    assert result.exit_code == 0, result.output
    assert result.output.strip().endswith(
        "3B-HHR-GIS.MS.MRG.3IMERG.20110801-S003000-E005959.0030.V07B.tif"
    )
