"""GitLab package registry backend.

Queries the project packages API for the newest package matching a (fuzzy)
package name. The API orders by version, newest first, and skips packages in
error states. Package records carry no download link, so the URL of the
generic package file is built from host, project, package type, record name,
version and the file-name strategy.

API reference: https://docs.gitlab.com/ee/api/packages.html
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import List, Optional

from ..errors import RegistryError
from ..logging_utils import log_event
from ..types import ExtensionIdentity, VersionDescriptor
from ..utils import http_get_json, parse_timestamp
from .base import FileNameStrategy, resolve_file_name

logger = logging.getLogger(__name__)


class GitLabRegistry:
    """Latest-version lookup against a GitLab package registry."""

    name = "gitlab"

    def __init__(
        self,
        host: str,
        project_id: int,
        package_name: str,
        package_type: str = "generic",
        *,
        file_name_strategy: Optional[FileNameStrategy] = None,
        timeout: float = 20.0,
    ) -> None:
        """
        Parameters
        - ``host``: GitLab host, e.g. ``git.example.com`` (no scheme).
        - ``project_id``: numeric project id (Settings > General).
        - ``package_name``: registry package name, matched fuzzily.
        - ``package_type``: registry package type, e.g. ``generic``.
        - ``file_name_strategy``: maps identity to the artifact file name;
          defaults to ``<name>.vsix``.
        """
        self.host = host
        self.project_id = project_id
        self.package_name = package_name
        self.package_type = package_type
        self.file_name_strategy = file_name_strategy
        self.timeout = timeout

    def _api_root(self) -> str:
        return f"https://{self.host}/api/v4/projects/{self.project_id}/packages"

    def version_url(self) -> str:
        query = urllib.parse.urlencode(
            {
                "sort": "desc",
                "status": "default",
                "order_by": "version",
                "package_name": self.package_name,
            }
        )
        return f"{self._api_root()}?{query}"

    def download_url(
        self, identity: ExtensionIdentity, package_name: str, version: str
    ) -> str:
        parts = (
            self.package_type,
            package_name,
            version,
            self.file_name(identity),
        )
        return self._api_root() + "/" + "/".join(
            urllib.parse.quote(p, safe="") for p in parts
        )

    def file_name(self, identity: ExtensionIdentity) -> str:
        return resolve_file_name(identity, self.file_name_strategy)

    def fetch_latest(self, identity: ExtensionIdentity) -> VersionDescriptor:
        url = self.version_url()
        logger.info("Checking for new versions at %s", url)
        results = http_get_json(url, timeout=self.timeout)
        if not isinstance(results, list) or not results:
            logger.debug("Unexpected response from GitLab: %r", results)
            raise RegistryError(
                "Unexpected response from GitLab: no packages listed", url=url
            )
        record = results[0]
        if not isinstance(record, dict):
            raise RegistryError("Unexpected package record from GitLab", url=url)
        version = record.get("version")
        name = record.get("name") or self.package_name
        if not isinstance(version, str) or not version.strip():
            raise RegistryError("GitLab package record has no version", url=url)
        version = version.strip()
        descriptor = VersionDescriptor(
            version=version,
            published_at=parse_timestamp(record.get("created_at")),
            download_url=self.download_url(identity, str(name), version),
            tags=tuple(_tag_names(record.get("tags"))),
        )
        log_event(
            "update_latest_fetched",
            backend=self.name,
            extension=identity.display_name,
            version=version,
            url=descriptor.download_url,
        )
        return descriptor


def _tag_names(raw: object) -> List[str]:
    """GitLab lists tags as strings or as ``{"name": ...}`` objects."""
    if not isinstance(raw, list):
        return []
    names: List[str] = []
    for tag in raw:
        if isinstance(tag, dict):
            tag = tag.get("name")
        if isinstance(tag, str) and tag:
            names.append(tag)
    return names


__all__ = ["GitLabRegistry"]
