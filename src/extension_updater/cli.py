"""Command-line entry point.

Wires settings, manifest, registry backend and the terminal host together and
runs one update cycle. This is the top-level reporter for cycle failures:
the core raises, this module prints a short message, logs a structured
``update_cycle_failed`` event and turns the failure into an exit code.

Exit codes: ``0`` success (including up to date or postponed), ``1`` update
failure, ``2`` configuration error, ``130`` interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from .args import parse_args
from .config import UpdaterSettings, load_manifest
from .download import HttpDownloader
from .errors import ConfigError, UpdaterError
from .host import CommandHost, find_code_binary
from .logging_utils import configure_logging, log_event
from .orchestrator import UpdateOrchestrator
from .registry import create_registry
from .report import report_check, report_cycle
from .ui import err, warn
from .utils import get_version


def build_settings(ns: argparse.Namespace) -> UpdaterSettings:
    """Settings file, then environment, then explicit CLI options."""
    settings = UpdaterSettings.load(Path(ns.config) if ns.config else None)
    settings.apply_env()
    known = set(settings.to_dict())
    settings.update(
        {k: getattr(ns, k) for k in getattr(ns, "_explicit", set()) if k in known}
    )
    return settings


def _fail(exc: UpdaterError, name: str) -> int:
    err(f"Update of {name} failed: {exc}" if name else str(exc))
    log_event(
        "update_cycle_failed",
        level=logging.ERROR,
        extension=name,
        error_type=type(exc).__name__,
    )
    return 2 if isinstance(exc, ConfigError) else 1


def main(argv: Optional[List[str]] = None) -> int:
    ns = parse_args(argv)
    if ns.version:
        print(get_version())
        return 0
    configure_logging(ns.verbose, ns.log_file, ns.log_json, ns.log_level)

    try:
        settings = build_settings(ns)
        identity = load_manifest(Path(ns.manifest))
        registry = create_registry(settings)
    except ConfigError as e:
        return _fail(e, "")

    host = CommandHost(settings.code_binary, assume_yes=ns.yes)
    if not ns.check_only and not find_code_binary(settings.code_binary):
        warn(f"Editor command '{settings.code_binary}' not found on PATH.")

    with HttpDownloader(
        settle_delay=settings.settle_delay, timeout=max(settings.timeout, 60.0)
    ) as downloader:
        orchestrator = UpdateOrchestrator(
            identity,
            registry,
            host,
            downloader=downloader,
            options=settings.options(),
        )
        try:
            if ns.check_only:
                latest, cmp = asyncio.run(orchestrator.check())
                report_check(identity, latest, cmp, verbose=ns.verbose)
                return 0
            result = asyncio.run(orchestrator.run_update_cycle())
        except KeyboardInterrupt:
            err("Interrupted.")
            return 130
        except UpdaterError as e:
            return _fail(e, identity.display_name)

    report_cycle(result, verbose=ns.verbose)
    return 0


__all__ = ["build_settings", "main"]
