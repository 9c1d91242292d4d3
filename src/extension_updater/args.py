"""Argument parsing for the ``extension-updater`` command.

Option groups mirror the settings layers: extension/registry options map onto
:class:`~extension_updater.config.UpdaterSettings` fields (same ``dest``
names), cycle flags onto :class:`~extension_updater.types.UpdateOptions`.
``ns._explicit`` records which options were given on the command line so that
only those override the settings file and environment.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .registry import available_backends


def _add_extension_args(p: argparse.ArgumentParser) -> None:
    ext = p.add_argument_group("Extension")
    ext.add_argument(
        "-m",
        "--manifest",
        default="package.json",
        help="Path to the extension's package.json",
    )
    ext.add_argument("-c", "--config", help="JSON settings file")
    ext.add_argument(
        "--code-binary",
        dest="code_binary",
        help="Editor CLI used to install the package (default: code)",
    )


def _add_registry_args(p: argparse.ArgumentParser) -> None:
    reg = p.add_argument_group("Registry")
    reg.add_argument(
        "-b", "--backend", choices=available_backends(), help="Registry backend"
    )
    reg.add_argument("--gitlab-host", dest="gitlab_host", help="GitLab host name")
    reg.add_argument("--project-id", dest="project_id", type=int, help="GitLab project id")
    reg.add_argument(
        "--package-type", dest="package_type", help="GitLab package type (generic)"
    )
    reg.add_argument(
        "--package-name", dest="package_name", help="GitLab package name to search"
    )
    reg.add_argument("--github-repo", dest="github_repo", help="GitHub owner/name")
    reg.add_argument("--github-api-url", dest="github_api_url", help="GitHub API root")
    reg.add_argument("--timeout", type=float, help="Registry request timeout (seconds)")


def _add_cycle_args(p: argparse.ArgumentParser) -> None:
    cyc = p.add_argument_group("Update cycle")
    cyc.add_argument(
        "--reinstall",
        action="store_true",
        help="Download and install the latest version even if it is not newer",
    )
    cyc.add_argument(
        "--show-up-to-date",
        dest="show_up_to_date_confirmation",
        action="store_true",
        help="Print a confirmation when no newer version exists",
    )
    cyc.add_argument(
        "-y", "--yes", action="store_true", help="Answer every prompt with yes"
    )
    cyc.add_argument(
        "--check-only",
        dest="check_only",
        action="store_true",
        help="Only report the latest version; never download or install",
    )


def _add_logging_args(p: argparse.ArgumentParser) -> None:
    lg = p.add_argument_group("Logging")
    lg.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    lg.add_argument("--log-file", dest="log_file", help="Also write logs to a file")
    lg.add_argument(
        "--log-json", dest="log_json", action="store_true", help="JSON logs on stdout"
    )
    lg.add_argument(
        "--log-level",
        dest="log_level",
        choices=["debug", "info", "warning", "error"],
        help="Explicit log level (overrides --verbose)",
    )
    lg.add_argument(
        "-V", "--version", action="store_true", help="Print the updater version"
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse ``argv`` (defaults to ``sys.argv[1:]``) and track explicit options."""
    p = argparse.ArgumentParser(
        prog="extension-updater",
        allow_abbrev=False,
        description="Check a package registry for a newer extension release and install it.",
    )
    _add_extension_args(p)
    _add_registry_args(p)
    _add_cycle_args(p)
    _add_logging_args(p)

    if argv is None:
        argv = sys.argv[1:]
    ns = p.parse_args(argv)
    defaults = p.parse_args([])
    # Option strings seen in argv, plus any dest whose value moved off its
    # default (attached short values such as ``-bgithub``).
    ns._explicit = {
        a.dest
        for a in p._actions
        if any(
            opt in argv or any(arg.startswith(opt + "=") for arg in argv)
            for opt in a.option_strings
        )
        or getattr(ns, a.dest, None) != getattr(defaults, a.dest, None)
    }
    return ns


__all__ = ["parse_args"]
