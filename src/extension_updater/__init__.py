"""Self-update for an installable editor extension.

Checks a package registry for a newer release of one extension, asks for
consent, downloads the ``.vsix`` artifact, installs it through the host and
offers a reload. The public surface is re-exported here.
"""

from __future__ import annotations

from .errors import (
    ConfigError,
    CycleInProgressError,
    DownloadError,
    InstallError,
    RegistryError,
    TransportError,
    UpdaterError,
)
from .orchestrator import UpdateOrchestrator, run_update_cycle
from .registry import (
    GitHubReleasesRegistry,
    GitLabRegistry,
    RegistryClient,
    create_registry,
)
from .types import (
    CycleResult,
    CycleState,
    DownloadedArtifact,
    ExtensionIdentity,
    UpdateOptions,
    VersionDescriptor,
)
from .version import Comparison, compare, compare_versions, is_version_newer


def main() -> int:
    """Console entrypoint (``extension-updater``)."""
    from .cli import main as _main

    return _main()


__all__ = [
    "Comparison",
    "ConfigError",
    "CycleInProgressError",
    "CycleResult",
    "CycleState",
    "DownloadError",
    "DownloadedArtifact",
    "ExtensionIdentity",
    "GitHubReleasesRegistry",
    "GitLabRegistry",
    "InstallError",
    "RegistryClient",
    "RegistryError",
    "TransportError",
    "UpdateOptions",
    "UpdateOrchestrator",
    "UpdaterError",
    "VersionDescriptor",
    "compare",
    "compare_versions",
    "create_registry",
    "is_version_newer",
    "main",
    "run_update_cycle",
]
