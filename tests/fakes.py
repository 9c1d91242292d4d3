"""Test doubles shared by the suite: HTTP responses, registry, host, downloader."""

from __future__ import annotations

import contextlib
import io
import urllib.error
from pathlib import Path
from typing import List, Optional

from extension_updater.errors import DownloadError
from extension_updater.types import (
    DownloadedArtifact,
    ExtensionIdentity,
    VersionDescriptor,
)


class FakeResponse(io.BytesIO):
    def __init__(self, body: bytes = b"", status: int = 200):
        super().__init__(body)
        self.status = status


def fake_urlopen(body: bytes = b"", status: int = 200, calls: Optional[list] = None):
    def _urlopen(req, timeout=None):
        if calls is not None:
            calls.append((req, timeout))
        return FakeResponse(body, status)

    return _urlopen


def failing_urlopen(exc: BaseException):
    def _urlopen(req, timeout=None):
        raise exc

    return _urlopen


def http_error(url: str, code: int, reason: str = "Not Found"):
    return urllib.error.HTTPError(url, code, reason, {}, None)


class FakeRegistry:
    name = "fake"

    def __init__(self, latest: Optional[VersionDescriptor] = None, error=None):
        self.latest = latest
        self.error = error
        self.calls = 0

    def fetch_latest(self, identity: ExtensionIdentity) -> VersionDescriptor:
        self.calls += 1
        if self.error is not None:
            raise self.error
        assert self.latest is not None
        return self.latest

    def file_name(self, identity: ExtensionIdentity) -> str:
        return identity.package_name + ".vsix"


class FakeHost:
    """Records every interaction; answers prompts from a scripted list."""

    def __init__(self, answers: Optional[List[bool]] = None, install_error=None):
        self.answers = list(answers or [])
        self.install_error = install_error
        self.prompts: List[tuple] = []
        self.notices: List[str] = []
        self.installed: List[Path] = []
        self.reloads = 0
        self.progress_titles: List[str] = []

    async def confirm(self, message: str, accept: str, decline: str) -> bool:
        self.prompts.append((message, accept, decline))
        return self.answers.pop(0) if self.answers else False

    async def notify(self, message: str) -> None:
        self.notices.append(message)

    async def install(self, path: Path) -> None:
        if self.install_error is not None:
            raise self.install_error
        self.installed.append(path)

    async def reload(self) -> None:
        self.reloads += 1

    @contextlib.contextmanager
    def progress(self, title: str):
        self.progress_titles.append(title)
        yield

    @property
    def side_effects(self) -> int:
        return len(self.prompts) + len(self.notices) + len(self.installed) + self.reloads


class FakeDownloader:
    def __init__(self, tmp_path: Path, status: int = 200):
        self.tmp_path = tmp_path
        self.status = status
        self.urls: List[str] = []

    async def download(self, url: str, identity: ExtensionIdentity) -> DownloadedArtifact:
        self.urls.append(url)
        if self.status >= 300:
            raise DownloadError(
                f"Download failed with status code: {self.status}",
                url=url,
                status=self.status,
            )
        path = self.tmp_path / f"{identity.display_name}.vsix"
        path.write_bytes(b"PK\x03\x04")
        return DownloadedArtifact(path=path, size=4, source_url=url)
