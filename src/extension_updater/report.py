"""Human-readable summaries of update checks and cycles."""

from __future__ import annotations

from typing import Optional

from .types import CycleResult, CycleState, ExtensionIdentity, VersionDescriptor
from .ui import info, ok, warn


def _describe(latest: VersionDescriptor) -> str:
    """One-line rendering: version, then publish time and tags when known."""
    shown = latest.to_display()
    parts = [shown["version"]]
    if shown["published_at"]:
        parts.append(f"published {shown['published_at']}")
    if shown["tags"]:
        parts.append("tags: " + ", ".join(shown["tags"]))
    return parts[0] + (f" ({'; '.join(parts[1:])})" if len(parts) > 1 else "")


def report_check(
    identity: ExtensionIdentity,
    latest: VersionDescriptor,
    cmp: int,
    *,
    verbose: bool = False,
) -> None:
    """Human-readable summary for ``--check-only``.

    Prints the installed and latest versions, the artifact URL when
    ``verbose``, and whether an update is available (``cmp > 0``).
    """
    info(f"Installed: {identity.display_name} {identity.installed_version}")
    info(f"Latest: {_describe(latest)}")
    if verbose and latest.download_url:
        info(f"Artifact: {latest.download_url}")
    if cmp > 0:
        warn(
            f"Update available ({latest.version}); "
            f"current version is {identity.installed_version}."
        )
    else:
        ok(f"{identity.display_name} is up to date.")


def report_cycle(result: CycleResult, *, verbose: bool = False) -> None:
    """Summary printed after a cycle finished without raising.

    Up-to-date cycles stay quiet unless ``verbose``. Postponed and installed
    cycles always get one line; ``verbose`` adds the state history.
    """
    name = result.identity.display_name
    latest: Optional[VersionDescriptor] = result.latest
    if verbose and latest is not None:
        info(f"Latest {name}: {_describe(latest)}")
        info("States: " + " -> ".join(s.value for s in result.history))
    if result.state is CycleState.UP_TO_DATE:
        if verbose:
            ok(f"{name} {result.identity.installed_version} is up to date.")
        return
    if result.declined:
        info(f"Update of {name} to {latest.version if latest else '?'} postponed.")
        return
    if result.installed and latest is not None:
        ok(f"Installed {name} {latest.version}.")
        if not result.reload_requested:
            info("The new version is active after the next editor reload.")


__all__ = ["report_check", "report_cycle"]
