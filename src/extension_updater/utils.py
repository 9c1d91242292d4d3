"""Utility helpers for the extension updater.

Small, dependency-free helpers shared by the registry backends, the
downloader and the CLI:
 - Version discovery for the installed updater build
 - JSON fetch for registry queries
 - Streaming download of an artifact into an open file
 - Publication timestamp parsing and formatting

HTTP helpers raise the project's error types instead of returning error
strings: a registry query that cannot be answered is a failed cycle.
"""

from __future__ import annotations

import json
import math
import socket
import urllib.error
import urllib.request
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import IO, Any, Dict, Optional

from .errors import DownloadError, RegistryError, TransportError

try:  # pragma: no cover
    from importlib.metadata import version as pkg_version
except Exception:  # pragma: no cover

    def pkg_version(_: str) -> str:  # type: ignore
        raise LookupError


DIST_NAME = "extension-updater"
CHUNK_SIZE = 1024 * 128
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# Epoch-millisecond bounds representable as a datetime.
_MIN_MS = (datetime.min.replace(tzinfo=timezone.utc) - _EPOCH) // timedelta(milliseconds=1)
_MAX_MS = (datetime.max.replace(tzinfo=timezone.utc) - _EPOCH) // timedelta(milliseconds=1)


def get_version() -> str:
    """Return the updater's own version string.

    Lookup order: installed distribution metadata, then ``project.version``
    from a source checkout's ``pyproject.toml``, then ``"0.0.0+unknown"``.
    """
    try:
        return pkg_version(DIST_NAME)
    except Exception:
        pass

    pyproj = Path(__file__).resolve().parents[2] / "pyproject.toml"
    if pyproj.exists():
        import re

        m = re.search(
            r"(?ms)^\[project\].*?^version\s*=\s*\"([^\"]+)\"",
            pyproj.read_text(encoding="utf-8"),
        )
        if m:
            return m.group(1)
    return "0.0.0+unknown"


def user_agent() -> str:
    return f"{DIST_NAME}/{get_version()}"


def http_get_json(
    url: str, timeout: float = 20.0, headers: Optional[Dict[str, str]] = None
) -> Any:
    """GET ``url`` and decode the JSON body.

    Raises
    - ``RegistryError`` for an HTTP error status or a body that is not JSON.
    - ``TransportError`` when no response could be obtained at all.
    """
    req = urllib.request.Request(
        url,
        headers={
            "Accept": "application/json",
            "User-Agent": user_agent(),
            **(headers or {}),
        },
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            status = getattr(resp, "status", 200)
            if status >= 300:
                raise RegistryError(f"HTTP {status}", url=url, status=status)
            body = resp.read()
    except urllib.error.HTTPError as e:
        raise RegistryError(f"HTTP {e.code}: {e.reason}", url=url, status=e.code)
    except (urllib.error.URLError, socket.timeout, OSError) as e:
        raise TransportError(f"Request to {url} failed: {e}", url=url) from e
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise RegistryError(f"Malformed JSON from {url}: {e}", url=url) from e


def http_stream_to_file(
    url: str,
    fh: IO[bytes],
    timeout: float = 60.0,
    chunk_size: int = CHUNK_SIZE,
) -> int:
    """Stream the body of ``url`` verbatim into ``fh``.

    Returns the number of bytes written. Any status of 300 or above is a
    ``DownloadError``; so is a read that breaks off mid-stream. Failing to
    connect at all is a ``TransportError``.
    """
    req = urllib.request.Request(url, headers={"User-Agent": user_agent()})
    try:
        resp = urllib.request.urlopen(req, timeout=timeout)
    except urllib.error.HTTPError as e:
        raise DownloadError(
            f"Download failed with status code: {e.code}", url=url, status=e.code
        )
    except (urllib.error.URLError, socket.timeout, OSError) as e:
        raise TransportError(f"Download from {url} failed: {e}", url=url) from e
    with resp:
        status = getattr(resp, "status", 200)
        if status >= 300:
            raise DownloadError(
                f"Download failed with status code: {status}", url=url, status=status
            )
        written = 0
        try:
            while True:
                chunk = resp.read(chunk_size)
                if not chunk:
                    break
                fh.write(chunk)
                written += len(chunk)
        except (OSError, ValueError) as e:
            raise DownloadError(f"Download stream broke off: {e}", url=url) from e
    return written


def parse_timestamp(value: object) -> int:
    """Return ``value`` as epoch milliseconds, or ``0`` when unparsable.

    Accepts ISO-8601 strings (a trailing ``Z`` is read as UTC; naive values
    are taken as UTC) and plain numbers, which are assumed to already be
    milliseconds.
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        if not _MIN_MS <= value <= _MAX_MS:
            return 0
        return int(value)
    if not isinstance(value, str) or not value.strip():
        return 0
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return 0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH) // timedelta(milliseconds=1)


def format_timestamp(ms: int) -> str:
    """Render epoch milliseconds as ISO-8601 UTC; ``0`` renders as ``""``."""
    if not ms:
        return ""
    try:
        dt = _EPOCH + timedelta(milliseconds=int(ms))
    except (OverflowError, ValueError):
        return ""
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


__all__ = [
    "CHUNK_SIZE",
    "DIST_NAME",
    "format_timestamp",
    "get_version",
    "http_get_json",
    "http_stream_to_file",
    "parse_timestamp",
    "pkg_version",
    "user_agent",
]
