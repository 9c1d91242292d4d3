"""Registry backends split into small modules.

Each backend module holds one concrete client; ``base`` defines the shared
capability and ``sources`` picks a backend by configured name. Everything is
re-exported here for easy import.
"""

from __future__ import annotations

from .base import FileNameStrategy, RegistryClient, default_file_name
from .github import GitHubReleasesRegistry
from .gitlab import GitLabRegistry
from .sources import available_backends, create_registry

__all__ = [
    "FileNameStrategy",
    "GitHubReleasesRegistry",
    "GitLabRegistry",
    "RegistryClient",
    "available_backends",
    "create_registry",
    "default_file_name",
]
