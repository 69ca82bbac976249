"""Path utilities centralising local layout decisions."""

from __future__ import annotations

from pathlib import Path


def output_root_from_config(output_dir: str | Path) -> Path:
    """Return the resolved output directory."""
    return Path(output_dir).expanduser().resolve()


__all__ = ["output_root_from_config"]
