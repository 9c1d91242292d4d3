"""Updater settings and extension manifest loading.

Settings come from three layers, later ones winning: a JSON settings file,
``EXTENSION_UPDATER_*`` environment variables, then explicit CLI flags. The
extension's identity is read once from its ``package.json`` manifest and
handed to the orchestrator as an immutable snapshot.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigError
from .types import ExtensionIdentity, UpdateOptions

ENV_PREFIX = "EXTENSION_UPDATER_"
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass
class UpdaterSettings:
    """Everything needed to build a registry client and run a cycle."""

    backend: str = "gitlab"
    gitlab_host: str = ""
    project_id: int = 0
    package_type: str = "generic"
    package_name: str = ""
    github_repo: str = ""
    github_api_url: str = "https://api.github.com"
    reinstall: bool = False
    show_up_to_date_confirmation: bool = False
    code_binary: str = "code"
    timeout: float = 20.0
    settle_delay: float = 1.0

    def options(self) -> UpdateOptions:
        return UpdateOptions(
            show_up_to_date_confirmation=self.show_up_to_date_confirmation,
            reinstall=self.reinstall,
        )

    def update(self, values: Mapping[str, object]) -> None:
        """Set known fields from ``values``, coercing to each field's type."""
        for f in fields(self):
            if f.name in values and values[f.name] is not None:
                setattr(self, f.name, _coerce(f.name, f.default, values[f.name]))

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> None:
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(self):
            key = ENV_PREFIX + f.name.upper()
            if key in environ:
                overrides[f.name] = environ[key]
        self.update(overrides)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def load(cls, path: Optional[Path]) -> "UpdaterSettings":
        """Read settings from a JSON file; a missing file yields defaults.

        Unknown keys are ignored. A file that exists but is not a JSON object
        is a ``ConfigError``.
        """
        settings = cls()
        if path is None or not path.exists():
            return settings
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigError(f"Could not load settings from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Could not load settings from {path}: invalid format")
        settings.update(data)
        return settings


def load_manifest(path: Path) -> ExtensionIdentity:
    """Build the extension identity from its ``package.json``."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"Extension manifest not found: {path}")
    except (OSError, ValueError) as e:
        raise ConfigError(f"Could not read extension manifest {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Extension manifest {path} is not a JSON object")
    name = data.get("name") if isinstance(data.get("name"), str) else ""
    display_name = data.get("displayName")
    if not isinstance(display_name, str) or not display_name:
        display_name = name
    version = data.get("version")
    if not display_name:
        raise ConfigError(f"Extension manifest {path} has no displayName or name")
    if not isinstance(version, str) or not version:
        raise ConfigError(f"Extension manifest {path} has no version")
    return ExtensionIdentity(
        display_name=display_name, installed_version=version, name=name
    )


def _coerce(name: str, default: object, value: object) -> object:
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUTHY:
            return True
        if text in _FALSY:
            return False
        raise ConfigError(f"Setting '{name}' expects a boolean, got {value!r}")
    try:
        if isinstance(default, int):
            return int(value)  # type: ignore[arg-type]
        if isinstance(default, float):
            return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ConfigError(f"Setting '{name}' expects a number, got {value!r}")
    return str(value)


__all__ = ["ENV_PREFIX", "UpdaterSettings", "load_manifest"]
