"""GitHub releases backend.

Lists the repository's releases (newest first) and takes the first one that
is not a draft. The artifact is the release asset matching the file-name
strategy, else the first ``.vsix`` asset; when the release has neither the
conventional ``releases/download`` URL is synthesized.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import RegistryError
from ..logging_utils import log_event
from ..types import ExtensionIdentity, VersionDescriptor
from ..utils import http_get_json, parse_timestamp
from .base import FileNameStrategy, resolve_file_name

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"


class GitHubReleasesRegistry:
    name = "github"

    def __init__(
        self,
        repo: str,
        api_url: str = GITHUB_API,
        *,
        file_name_strategy: Optional[FileNameStrategy] = None,
        timeout: float = 20.0,
    ) -> None:
        self.repo = repo.strip("/")
        self.api_url = api_url.rstrip("/")
        self.file_name_strategy = file_name_strategy
        self.timeout = timeout

    def releases_url(self) -> str:
        return f"{self.api_url}/repos/{self.repo}/releases"

    def file_name(self, identity: ExtensionIdentity) -> str:
        return resolve_file_name(identity, self.file_name_strategy)

    def fetch_latest(self, identity: ExtensionIdentity) -> VersionDescriptor:
        url = self.releases_url()
        logger.info("Checking for new versions at %s", url)
        releases = http_get_json(
            url, timeout=self.timeout, headers={"Accept": "application/vnd.github+json"}
        )
        if not isinstance(releases, list):
            raise RegistryError("Unexpected response from GitHub", url=url)
        release = next(
            (r for r in releases if isinstance(r, dict) and not r.get("draft")), None
        )
        if release is None:
            raise RegistryError("No published releases on GitHub", url=url)

        tag = release.get("tag_name") or release.get("name")
        if not isinstance(tag, str) or not tag.strip():
            raise RegistryError("GitHub release has no tag", url=url)
        tag = tag.strip()
        version = tag[1:] if tag[:1] in ("v", "V") else tag

        descriptor = VersionDescriptor(
            version=version,
            published_at=parse_timestamp(
                release.get("published_at") or release.get("created_at")
            ),
            download_url=self._asset_url(identity, release, tag),
            tags=("prerelease",) if release.get("prerelease") else (),
        )
        log_event(
            "update_latest_fetched",
            backend=self.name,
            extension=identity.display_name,
            version=version,
            url=descriptor.download_url,
        )
        return descriptor

    def _asset_url(self, identity: ExtensionIdentity, release: dict, tag: str) -> str:
        wanted = self.file_name(identity)
        assets = [a for a in release.get("assets") or [] if isinstance(a, dict)]
        asset = next((a for a in assets if a.get("name") == wanted), None)
        if asset is None:
            asset = next(
                (a for a in assets if str(a.get("name", "")).lower().endswith(".vsix")),
                None,
            )
        if asset and isinstance(asset.get("browser_download_url"), str):
            return asset["browser_download_url"]
        return f"https://github.com/{self.repo}/releases/download/{tag}/{wanted}"


__all__ = ["GITHUB_API", "GitHubReleasesRegistry"]
