"""The capability every registry backend provides.

A backend turns an :class:`ExtensionIdentity` into the newest
:class:`VersionDescriptor` the registry knows about. The orchestrator only
depends on this protocol; concrete backends are plain classes selected by
configuration (see :mod:`.sources`).

Contract
- The first record by the backend's own ordering is the latest; callers do
  not re-sort.
- ``download_url`` must be directly fetchable. Listings that do not embed one
  synthesize it from identity, version and :meth:`file_name`.
- One call is one network round trip; nothing is cached between calls.
- Unparsable publication times become ``0`` rather than an error.
- Empty or malformed responses raise ``RegistryError``.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, runtime_checkable

from ..types import ExtensionIdentity, VersionDescriptor

FileNameStrategy = Callable[[ExtensionIdentity], str]


@runtime_checkable
class RegistryClient(Protocol):
    name: str

    def fetch_latest(self, identity: ExtensionIdentity) -> VersionDescriptor:
        ...

    def file_name(self, identity: ExtensionIdentity) -> str:
        ...


def default_file_name(identity: ExtensionIdentity) -> str:
    """``<package name>.vsix``, the name the packaging step publishes."""
    return identity.package_name + ".vsix"


def resolve_file_name(
    identity: ExtensionIdentity, strategy: Optional[FileNameStrategy]
) -> str:
    return (strategy or default_file_name)(identity)


__all__ = [
    "FileNameStrategy",
    "RegistryClient",
    "default_file_name",
    "resolve_file_name",
]
