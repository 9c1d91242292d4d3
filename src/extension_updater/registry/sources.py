"""Registry backend selection.

Translates the configured backend name into a ready registry client. This
keeps the choice of backend a configuration matter: the orchestrator only
ever sees the :class:`RegistryClient` it is handed.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from ..config import UpdaterSettings
from ..errors import ConfigError
from .base import RegistryClient
from .github import GitHubReleasesRegistry
from .gitlab import GitLabRegistry


def _create_gitlab(settings: UpdaterSettings) -> RegistryClient:
    missing = [
        flag
        for flag, value in (
            ("gitlab_host", settings.gitlab_host),
            ("project_id", settings.project_id),
            ("package_name", settings.package_name),
        )
        if not value
    ]
    if missing:
        raise ConfigError(f"GitLab backend requires: {', '.join(missing)}")
    return GitLabRegistry(
        settings.gitlab_host,
        int(settings.project_id),
        settings.package_name,
        settings.package_type or "generic",
        timeout=settings.timeout,
    )


def _create_github(settings: UpdaterSettings) -> RegistryClient:
    if not settings.github_repo or "/" not in settings.github_repo:
        raise ConfigError("GitHub backend requires github_repo as 'owner/name'")
    return GitHubReleasesRegistry(
        settings.github_repo,
        settings.github_api_url or "https://api.github.com",
        timeout=settings.timeout,
    )


_FACTORIES: Dict[str, Callable[[UpdaterSettings], RegistryClient]] = {
    "gitlab": _create_gitlab,
    "github": _create_github,
}


def available_backends() -> List[str]:
    return sorted(_FACTORIES)


def create_registry(settings: UpdaterSettings) -> RegistryClient:
    """Return the registry client named by ``settings.backend``."""
    key = (settings.backend or "").strip().lower()
    factory = _FACTORIES.get(key)
    if factory is None:
        raise ConfigError(
            f"Unknown registry backend '{settings.backend}'"
            f" (expected one of: {', '.join(available_backends())})"
        )
    return factory(settings)


__all__ = ["available_backends", "create_registry"]
