"""Typed containers for one update cycle.

``VersionDescriptor`` is what a registry backend produces for the newest
release; ``ExtensionIdentity`` and ``UpdateOptions`` are the read-only inputs
an orchestrator is built with; ``DownloadedArtifact`` and ``CycleResult``
describe what a cycle did. Descriptors render to and parse from a plain dict
via ``to_display``/``from_display`` for reports and JSON output.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .utils import format_timestamp, parse_timestamp


@dataclass(frozen=True)
class VersionDescriptor:
    """Latest release as reported by a registry backend."""

    version: str
    published_at: int
    download_url: str
    tags: Tuple[str, ...] = ()

    def to_display(self) -> dict:
        return {
            "version": self.version,
            "published_at": format_timestamp(self.published_at),
            "download_url": self.download_url,
            "tags": list(self.tags),
        }

    @classmethod
    def from_display(cls, data: object) -> "VersionDescriptor":
        if not isinstance(data, dict):
            raise ValueError("descriptor must be a mapping")
        version = data.get("version")
        if not isinstance(version, str) or not version:
            raise ValueError("descriptor has no version")
        url = data.get("download_url")
        tags = data.get("tags") or ()
        return cls(
            version=version,
            published_at=parse_timestamp(data.get("published_at")),
            download_url=url if isinstance(url, str) else "",
            tags=tuple(str(t) for t in tags),
        )


@dataclass(frozen=True)
class ExtensionIdentity:
    """Snapshot of the installed extension taken from its manifest."""

    display_name: str
    installed_version: str
    name: str = ""

    @property
    def package_name(self) -> str:
        return self.name or self.display_name

    @property
    def full_name(self) -> str:
        return f"{self.display_name}-{self.installed_version}"


@dataclass(frozen=True)
class UpdateOptions:
    show_up_to_date_confirmation: bool = False
    reinstall: bool = False


@dataclass(frozen=True)
class DownloadedArtifact:
    """Local copy of a fetched package. The file belongs to its temp dir."""

    path: Path
    size: int
    source_url: str


class CycleState(enum.Enum):
    IDLE = "idle"
    CHECKING = "checking"
    UP_TO_DATE = "up_to_date"
    AWAITING_INSTALL_CONSENT = "awaiting_install_consent"
    DOWNLOADING = "downloading"
    INSTALLING = "installing"
    AWAITING_RELOAD_CONSENT = "awaiting_reload_consent"
    DONE = "done"

    @property
    def terminal(self) -> bool:
        return self in (CycleState.UP_TO_DATE, CycleState.DONE)


@dataclass
class CycleResult:
    """Outcome of a finished cycle."""

    identity: ExtensionIdentity
    state: CycleState = CycleState.IDLE
    latest: Optional[VersionDescriptor] = None
    artifact: Optional[DownloadedArtifact] = None
    installed: bool = False
    reload_requested: bool = False
    history: List[CycleState] = field(default_factory=list)

    @property
    def update_available(self) -> bool:
        return CycleState.AWAITING_INSTALL_CONSENT in self.history

    @property
    def declined(self) -> bool:
        return (
            self.state is CycleState.DONE
            and self.update_available
            and CycleState.DOWNLOADING not in self.history
        )


__all__ = [
    "VersionDescriptor",
    "ExtensionIdentity",
    "UpdateOptions",
    "DownloadedArtifact",
    "CycleState",
    "CycleResult",
]
