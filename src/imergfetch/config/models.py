"""Pydantic models describing imergfetch configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

MAX_PARALLELISM = 4


class NamingConfig(BaseModel):
    """Archive naming convention used to derive remote paths.

    Every field is an opaque string; no cross-field validation is done.
    The defaults describe the final-run daily GeoTIFF product.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    directory_prefix: str = "ftp://arthurhouftps.pps.eosdis.nasa.gov/sm/730/gpmdata/"
    directory_suffix: str = "/gis/"
    file_prefix: str = "3B-DAY-GIS.MS.MRG.3IMERG."
    file_time: str = "-S000000-E235959"
    file_version: str = "V07B"
    file_extension: str = "tif"
    monthly_file_prefix: str = "3B-MO-GIS.MS.MRG.3IMERG."
    monthly_file_time: str = "-S000000-E235959"
    half_hourly_file_prefix: str = "3B-HHR-GIS.MS.MRG.3IMERG."


class Credentials(BaseModel):
    """Archive account.

    PPS issues the registered e-mail address as both username and password,
    so values routinely contain ``@`` and must never be embedded in a URL.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    username: str
    password: SecretStr

    def as_pair(self) -> tuple[str, str]:
        return self.username, self.password.get_secret_value()


class RuntimeConfig(BaseModel):
    """Execution-time settings such as output location and concurrency."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    output_dir: Path = Path(".")
    parallelism: int = Field(default=1, ge=1, le=MAX_PARALLELISM)
    fail_fast: bool = True
    timeout_seconds: float = Field(default=60.0, gt=0)
    force_ipv4: bool = True
    log_path: Optional[Path] = None

    @field_validator("output_dir", mode="before")
    @classmethod
    def _expand_user(cls, value: object) -> object:
        if isinstance(value, str):
            return Path(value).expanduser()
        return value


class ImergConfig(BaseModel):
    """Root configuration object for imergfetch."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    naming: NamingConfig = Field(default_factory=NamingConfig)
    credentials: Optional[Credentials] = None
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)


__all__ = [
    "Credentials",
    "ImergConfig",
    "MAX_PARALLELISM",
    "NamingConfig",
    "RuntimeConfig",
]
