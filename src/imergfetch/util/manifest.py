"""Run manifest helpers."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping


def write_manifest(payload: Mapping[str, Any], *, root: Path, step: str = "run") -> Path:
    """Record a JSON summary of a CLI run under ``root/logs/run_manifests``.

    The file is named after ``step`` and the UTC time the run finished.
    """

    manifests_dir = root / "logs" / "run_manifests"
    manifests_dir.mkdir(parents=True, exist_ok=True)
    finished = datetime.now(timezone.utc)
    dest = manifests_dir / f"{step}_{finished:%Y%m%dT%H%M%S%fZ}.json"
    document = {"step": step, "finished_at": finished.isoformat(), **payload}
    dest.write_text(json.dumps(document, indent=2, default=str), encoding="utf-8")
    return dest


__all__ = ["write_manifest"]
