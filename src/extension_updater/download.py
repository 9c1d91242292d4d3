"""Artifact download into a scoped temporary file.

The downloader owns one temporary directory for its lifetime; every artifact
it fetches lands there and is removed when :meth:`HttpDownloader.cleanup`
runs (or when the directory object is finalized). The core never deletes an
artifact it has handed on for installation.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Optional, Protocol

from .logging_utils import log_event
from .types import DownloadedArtifact, ExtensionIdentity
from .utils import CHUNK_SIZE, http_stream_to_file

logger = logging.getLogger(__name__)

# Without a short pause the freshly written package has been seen to install
# as a truncated file.
SETTLE_DELAY = 1.0


class Downloader(Protocol):
    async def download(
        self, url: str, identity: ExtensionIdentity
    ) -> DownloadedArtifact:
        ...


class HttpDownloader:
    """Streams an artifact over HTTP(S) into a private temp directory."""

    def __init__(
        self,
        *,
        settle_delay: float = SETTLE_DELAY,
        timeout: float = 60.0,
        chunk_size: int = CHUNK_SIZE,
        temp_root: Optional[str] = None,
    ) -> None:
        self.settle_delay = settle_delay
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.temp_root = temp_root
        self._tmpdir: Optional[tempfile.TemporaryDirectory] = None

    @property
    def workdir(self) -> Path:
        if self._tmpdir is None:
            self._tmpdir = tempfile.TemporaryDirectory(
                prefix="extension-updater-", dir=self.temp_root
            )
        return Path(self._tmpdir.name)

    def cleanup(self) -> None:
        if self._tmpdir is not None:
            self._tmpdir.cleanup()
            self._tmpdir = None

    def __enter__(self) -> "HttpDownloader":
        return self

    def __exit__(self, *exc) -> None:
        self.cleanup()

    async def download(
        self, url: str, identity: ExtensionIdentity
    ) -> DownloadedArtifact:
        """Fetch ``url`` and return the local artifact once it is safe to use.

        Raises ``DownloadError`` for a status of 300 or above or a broken
        stream, ``TransportError`` when the server cannot be reached. A
        partially written file is removed before the error propagates.
        """
        path = self._new_file(identity)
        logger.info("Downloading extension from %s", url)
        log_event(
            "update_download_started",
            extension=identity.display_name,
            url=url,
            path=str(path),
        )
        start = time.perf_counter()
        try:
            size = await asyncio.to_thread(self._fetch, url, path)
        except BaseException:
            path.unlink(missing_ok=True)
            raise
        await asyncio.sleep(self.settle_delay)
        log_event(
            "update_download_finished",
            extension=identity.display_name,
            path=str(path),
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        logger.info("Done downloading extension package to %s", path)
        return DownloadedArtifact(path=path, size=size, source_url=url)

    def _new_file(self, identity: ExtensionIdentity) -> Path:
        stem = re.sub(r"[^0-9A-Za-z._-]+", "-", identity.display_name).strip("-")
        fd, name = tempfile.mkstemp(
            prefix=(stem or "extension") + "-", suffix=".vsix", dir=str(self.workdir)
        )
        os.close(fd)
        os.chmod(name, 0o644)
        return Path(name)

    def _fetch(self, url: str, path: Path) -> int:
        with open(path, "wb") as fh:
            size = http_stream_to_file(
                url, fh, timeout=self.timeout, chunk_size=self.chunk_size
            )
            fh.flush()
            os.fsync(fh.fileno())
        return size


__all__ = ["Downloader", "HttpDownloader", "SETTLE_DELAY"]
