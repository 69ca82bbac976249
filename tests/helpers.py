from __future__ import annotations

import ftplib
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping
from unittest.mock import patch

from imergfetch.config import PASSWORD_ENV, USERNAME_ENV, ImergConfig, load_config

# PPS issues the account e-mail as both username and password.
USERNAME = "someone@example.org"
PASSWORD = "someone@example.org"
ARCHIVE_HOST = "arthurhouftps.pps.eosdis.nasa.gov"


@contextmanager
def clean_env() -> Iterator[None]:
    """Hide any real archive credentials from the environment."""
    with patch.dict(os.environ, {USERNAME_ENV: "", PASSWORD_ENV: ""}, clear=False):
        yield


def make_config(output_dir: Path, **overrides: object) -> ImergConfig:
    """Load defaults with test credentials and ``output_dir`` applied."""

    merged = {
        "credentials": {"username": USERNAME, "password": PASSWORD},
        "runtime.output_dir": str(output_dir),
    }
    merged.update(overrides)
    with clean_env():
        return load_config(overrides=merged)


def remote_path(url: str) -> str:
    """Return the server-side path of an ``ftp://host/...`` URL."""
    return "/" + url.split("://", 1)[1].split("/", 1)[1]


def fake_ftps(files: Mapping[str, bytes], *, fail_on: str | None = None):
    """Build a stand-in for ``ftplib.FTP_TLS`` serving ``files`` by remote path.

    Every instance is recorded on ``FakeFTPS.instances`` so tests can
    inspect how the connection was driven. ``fail_on`` names the step
    (``connect``, ``login`` or ``retr``) that should break the session.
    """

    class FakeFTPS:
        instances: list["FakeFTPS"] = []

        def __init__(self, *, context=None, timeout=None, source_address=None) -> None:
            self.context = context
            self.timeout = timeout
            self.source_address = source_address
            self.sock = None
            self.calls: list[tuple] = []
            FakeFTPS.instances.append(self)

        def connect(self, host, port):
            self.calls.append(("connect", host, port))
            if fail_on == "connect":
                raise OSError("Network is unreachable")
            self.sock = object()
            return "220 welcome"

        def login(self, user, passwd):
            self.calls.append(("login", user, passwd))
            if fail_on == "login":
                raise ftplib.error_perm("530 Login incorrect.")
            return "230 Login successful."

        def prot_p(self):
            self.calls.append(("prot_p",))
            return "200 PROT now Private."

        def retrbinary(self, cmd, callback):
            self.calls.append(("retrbinary", cmd))
            if fail_on == "retr":
                raise EOFError("connection dropped")
            name = cmd[len("RETR "):]
            if name not in files:
                raise ftplib.error_perm("550 Failed to open file.")
            payload = files[name]
            for idx in range(0, len(payload), 4):
                callback(payload[idx : idx + 4])
            return "226 Transfer complete."

        def quit(self):
            self.calls.append(("quit",))
            self.sock = None

        def close(self):
            self.calls.append(("close",))
            self.sock = None

    return FakeFTPS
