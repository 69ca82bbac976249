"""Remote fetch and local store for archive files.

``ftp://`` URLs are retrieved over explicit FTPS (``AUTH TLS`` with a
protected data channel), the equivalent of ``curl -4 --ftp-ssl``.
``https://`` URLs, used by the near-real-time host, go through
``requests`` with HTTP basic auth. Credentials always travel through the
protocol's login step and never inside the URL.
"""

from __future__ import annotations

import ftplib
import logging
import ssl
from ftplib import FTP_TLS
from io import BytesIO
from pathlib import Path
from urllib.parse import unquote, urlsplit

import requests

from imergfetch.config.models import Credentials
from imergfetch.errors import RemoteFileMissing, TransferError, WriteError

LOGGER = logging.getLogger(__name__)

FTP_PORT = 21
# Binding to the IPv4 wildcard makes socket.create_connection skip AAAA results.
IPV4_SOURCE_ADDRESS = ("0.0.0.0", 0)


def fetch_bytes(
    url: str,
    credentials: Credentials,
    *,
    timeout_seconds: float = 60.0,
    force_ipv4: bool = True,
) -> bytes:
    """Retrieve ``url`` in full and return its payload."""

    parts = urlsplit(url)
    if parts.username is not None or parts.password is not None:
        raise TransferError("Credentials must not be embedded in the URL.", url=_redact(url))

    LOGGER.info("Downloading %s", url)

    if parts.scheme == "ftp":
        return _fetch_ftps(url, credentials, timeout_seconds=timeout_seconds, force_ipv4=force_ipv4)
    if parts.scheme == "https":
        return _fetch_https(url, credentials, timeout_seconds=timeout_seconds)
    raise TransferError(f"Unsupported URL scheme {parts.scheme!r}", url=url)


def store_bytes(payload: bytes, dest: Path) -> Path:
    """Write ``payload`` to ``dest``, replacing any existing file.

    The bytes land in a sibling ``.download`` file first and are renamed
    into place, so ``dest`` is never left half-written.
    """

    tmp_path = dest.with_name(dest.name + ".download")
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_bytes(payload)
        tmp_path.replace(dest)
    except OSError as exc:
        _discard(tmp_path)
        raise WriteError(f"Could not write {dest}: {exc}", path=dest) from exc
    return dest


def fetch_file(
    url: str,
    dest: Path,
    credentials: Credentials,
    *,
    timeout_seconds: float = 60.0,
    force_ipv4: bool = True,
) -> Path:
    """Download ``url`` to ``dest`` and return ``dest``."""

    payload = fetch_bytes(url, credentials, timeout_seconds=timeout_seconds, force_ipv4=force_ipv4)
    stored = store_bytes(payload, dest)
    LOGGER.info("Saved %s (%d bytes)", stored, len(payload))
    return stored


def _fetch_ftps(url: str, credentials: Credentials, *, timeout_seconds: float, force_ipv4: bool) -> bytes:
    parts = urlsplit(url)
    if not parts.hostname:
        raise TransferError("URL has no host", url=url)

    username, password = credentials.as_pair()
    buffer = BytesIO()
    ftps = FTP_TLS(
        context=ssl.create_default_context(),
        timeout=timeout_seconds,
        source_address=IPV4_SOURCE_ADDRESS if force_ipv4 else None,
    )
    try:
        ftps.connect(parts.hostname, parts.port or FTP_PORT)
        ftps.login(username, password)
        ftps.prot_p()
        ftps.retrbinary(f"RETR {unquote(parts.path)}", buffer.write)
    except ftplib.error_perm as exc:
        if str(exc).startswith("550"):
            raise RemoteFileMissing(f"Remote file not found: {exc}", url=url) from exc
        raise TransferError(f"Server refused request: {exc}", url=url) from exc
    except ftplib.all_errors as exc:
        raise TransferError(f"FTPS transfer failed: {exc}", url=url) from exc
    finally:
        _close(ftps)
    return buffer.getvalue()


def _fetch_https(url: str, credentials: Credentials, *, timeout_seconds: float) -> bytes:
    try:
        response = requests.get(url, auth=credentials.as_pair(), timeout=timeout_seconds)
    except requests.RequestException as exc:
        raise TransferError(f"HTTPS transfer failed: {exc}", url=url) from exc

    if response.status_code == 404:
        raise RemoteFileMissing(f"Remote file not found at {url}", url=url)
    try:
        response.raise_for_status()
    except requests.HTTPError as exc:
        raise TransferError(f"HTTPS transfer failed: {exc}", url=url) from exc
    return response.content


def _close(ftps: FTP_TLS) -> None:
    if ftps.sock is None:
        return
    try:
        ftps.quit()
    except ftplib.all_errors:
        ftps.close()


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        LOGGER.warning("Could not remove partial download %s", path)


def _redact(url: str) -> str:
    parts = urlsplit(url)
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return parts._replace(netloc=netloc).geturl()


__all__ = ["fetch_bytes", "fetch_file", "store_bytes"]
