"""Error taxonomy for the update cycle.

Every stage of a cycle fails fast by raising one of these. Nothing in the
core catches them; the caller of :meth:`UpdateOrchestrator.run_update_cycle`
decides how to present them (the CLI prints a one-line message and exits
non-zero).
"""

from __future__ import annotations

from typing import Optional


class UpdaterError(Exception):
    """Base class for all update failures."""


class TransportError(UpdaterError):
    """Low-level network failure (DNS, refused connection, socket timeout)."""

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class RegistryError(UpdaterError):
    """The registry query failed or returned nothing usable."""

    def __init__(
        self, message: str, url: str = "", status: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class DownloadError(UpdaterError):
    """The artifact could not be fetched or streamed to disk."""

    def __init__(
        self, message: str, url: str = "", status: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class InstallError(UpdaterError):
    """The host rejected the downloaded package."""


class ConfigError(UpdaterError):
    """Settings or the extension manifest are missing or invalid."""


class CycleInProgressError(UpdaterError):
    """Another cycle for the same extension is still running."""


__all__ = [
    "UpdaterError",
    "TransportError",
    "RegistryError",
    "DownloadError",
    "InstallError",
    "ConfigError",
    "CycleInProgressError",
]
