"""Update cycle driver.

:class:`UpdateOrchestrator` runs one cycle per call of
:meth:`~UpdateOrchestrator.run_update_cycle`: it asks the pure
:func:`~extension_updater.machine.transition` function what to do next,
performs that single effect (registry query, prompt, download, install,
reload) and feeds the outcome back as the next event. Effects run strictly
one after another; each awaits the previous one.

Errors are never swallowed here. A failing stage raises and the cycle ends;
presenting the error is the caller's job.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional, Set, Tuple

from .download import Downloader, HttpDownloader
from .errors import (
    ConfigError,
    CycleInProgressError,
    InstallError,
    RegistryError,
    UpdaterError,
)
from .host import Host
from .logging_utils import log_event
from .machine import Effect, Event, Step, transition
from .registry.base import RegistryClient
from .types import (
    CycleResult,
    CycleState,
    ExtensionIdentity,
    UpdateOptions,
    VersionDescriptor,
)
from .version import compare_versions, is_valid_version

logger = logging.getLogger(__name__)

# Extensions with a cycle in flight; guards against two concurrent cycles
# downloading and installing over each other.
_IN_FLIGHT: Set[str] = set()
_IN_FLIGHT_LOCK = threading.Lock()


def _require_latest(result: CycleResult, effect: Effect) -> VersionDescriptor:
    if result.latest is None:
        raise UpdaterError(f"{effect.value} requested before a release was fetched")
    return result.latest


class UpdateOrchestrator:
    """Checks for a new version, downloads, installs and offers a reload."""

    def __init__(
        self,
        identity: ExtensionIdentity,
        registry: RegistryClient,
        host: Host,
        *,
        downloader: Optional[Downloader] = None,
        options: Optional[UpdateOptions] = None,
    ) -> None:
        self.identity = identity
        self.registry = registry
        self.host = host
        self.downloader = downloader or HttpDownloader()
        self.options = options or UpdateOptions()

    async def run_update_cycle(self) -> CycleResult:
        """Run one full cycle and return what happened.

        Raises ``CycleInProgressError`` if a cycle for the same extension is
        already running, otherwise whatever error the failing stage raised.
        """
        key = self.identity.display_name
        with _IN_FLIGHT_LOCK:
            if key in _IN_FLIGHT:
                raise CycleInProgressError(
                    f"An update of '{key}' is already in progress"
                )
            _IN_FLIGHT.add(key)
        try:
            return await self._run()
        finally:
            with _IN_FLIGHT_LOCK:
                _IN_FLIGHT.discard(key)

    async def check(self) -> Tuple[VersionDescriptor, int]:
        """Fetch the latest descriptor and compare it, with no side effects."""
        latest = await asyncio.to_thread(self.registry.fetch_latest, self.identity)
        return latest, self._compare(latest)

    async def _run(self) -> CycleResult:
        result = CycleResult(identity=self.identity)
        log_event(
            "update_check_started",
            extension=self.identity.display_name,
            version=self.identity.installed_version,
            backend=getattr(self.registry, "name", type(self.registry).__name__),
        )
        step = transition(CycleState.IDLE, Event.STARTED, self.options)
        while True:
            self._enter(result, step)
            event, cmp = await self._perform(step.effect, result)
            if event is None:
                return result
            step = transition(step.state, event, self.options, cmp)

    def _enter(self, result: CycleResult, step: Step) -> None:
        result.state = step.state
        result.history.append(step.state)
        log_event(
            "update_state",
            level=logging.DEBUG,
            extension=self.identity.display_name,
            state=step.state.value,
        )

    async def _perform(
        self, effect: Effect, result: CycleResult
    ) -> Tuple[Optional[Event], Optional[int]]:
        name = self.identity.display_name

        if effect is Effect.FETCH_LATEST:
            with self.host.progress(f"Checking for updates for {name}"):
                latest, cmp = await self.check()
            result.latest = latest
            if cmp > 0:
                logger.info("Newer version found: %s", latest.version)
            return Event.LATEST_FETCHED, cmp

        if effect is Effect.NOTIFY_UP_TO_DATE:
            await self.host.notify(
                f"Extension up to date: '{name} v{self.identity.installed_version}'"
            )
            logger.info("Extension up to date")
            return None, None

        if effect is Effect.ASK_INSTALL:
            latest = _require_latest(result, effect)
            accepted = await self.host.confirm(
                f"New version {latest.version} of '{name}' is available.",
                "Download and Install",
                "Later",
            )
            return (Event.CONSENT_GIVEN if accepted else Event.CONSENT_DENIED), None

        if effect is Effect.AUTO_CONSENT:
            return Event.CONSENT_GIVEN, None

        if effect is Effect.DOWNLOAD:
            latest = _require_latest(result, effect)
            with self.host.progress(f"Downloading {name}"):
                result.artifact = await self.downloader.download(
                    latest.download_url, self.identity
                )
            return Event.DOWNLOADED, None

        if effect is Effect.INSTALL:
            with self.host.progress(f"Installing {name}"):
                await self._install(result)
            return Event.INSTALLED, None

        if effect is Effect.ASK_RELOAD:
            accepted = await self.host.confirm(
                f"New version of '{name}' was installed.", "Reload", "Later"
            )
            return (Event.CONSENT_GIVEN if accepted else Event.CONSENT_DENIED), None

        if effect is Effect.RELOAD:
            await self.host.reload()
            result.reload_requested = True
            log_event("reload_requested", extension=name)
            return None, None

        if result.state is CycleState.UP_TO_DATE:
            logger.info("No update found for '%s'", name)
            log_event("update_not_found", extension=name)
        elif result.declined:
            logger.info("Update of '%s' postponed by the user", name)
        return None, None

    async def _install(self, result: CycleResult) -> None:
        artifact = result.artifact
        if artifact is None:
            raise UpdaterError(
                f"{Effect.INSTALL.value} requested before a download finished"
            )
        try:
            await self.host.install(artifact.path)
        except UpdaterError:
            raise
        except Exception as e:
            raise InstallError(f"Install of {artifact.path.name} failed: {e}") from e
        result.installed = True
        log_event(
            "update_installed",
            extension=self.identity.display_name,
            version=result.latest.version if result.latest else "",
            path=str(artifact.path),
        )

    def _compare(self, latest: VersionDescriptor) -> int:
        installed = self.identity.installed_version
        if not is_valid_version(latest.version):
            raise RegistryError(
                f"Registry reported an invalid version: {latest.version!r}"
            )
        if not is_valid_version(installed):
            raise ConfigError(f"Installed version is invalid: {installed!r}")
        return compare_versions(latest.version, installed)


async def run_update_cycle(
    identity: ExtensionIdentity,
    registry: RegistryClient,
    host: Host,
    *,
    downloader: Optional[Downloader] = None,
    options: Optional[UpdateOptions] = None,
) -> CycleResult:
    """Convenience wrapper: build an orchestrator and run a single cycle."""
    return await UpdateOrchestrator(
        identity, registry, host, downloader=downloader, options=options
    ).run_update_cycle()


__all__ = ["UpdateOrchestrator", "run_update_cycle"]
