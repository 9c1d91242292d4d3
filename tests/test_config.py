import json
import unittest
from pathlib import Path
import tempfile

import pytest

from extension_updater.config import UpdaterSettings, load_manifest
from extension_updater.errors import ConfigError
from extension_updater.types import UpdateOptions


class SettingsLoadTests(unittest.TestCase):
    def test_missing_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            settings = UpdaterSettings.load(Path(tmp) / "absent.json")
        self.assertEqual(settings, UpdaterSettings())
        self.assertEqual(settings.settle_delay, 1.0)
        self.assertEqual(settings.options(), UpdateOptions())

    def test_known_keys_loaded_unknown_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "updater.json"
            path.write_text(
                json.dumps(
                    {
                        "backend": "gitlab",
                        "gitlab_host": "git.example.com",
                        "project_id": "31775",
                        "reinstall": "yes",
                        "surprise": 1,
                    }
                ),
                encoding="utf-8",
            )
            settings = UpdaterSettings.load(path)
        self.assertEqual(settings.gitlab_host, "git.example.com")
        self.assertEqual(settings.project_id, 31775)
        self.assertTrue(settings.reinstall)
        self.assertEqual(settings.options(), UpdateOptions(reinstall=True))

    def test_invalid_json_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "updater.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(ConfigError):
                UpdaterSettings.load(path)
            path.write_text("[1, 2]", encoding="utf-8")
            with self.assertRaises(ConfigError):
                UpdaterSettings.load(path)


def test_env_overrides():
    settings = UpdaterSettings(gitlab_host="file.example.com")
    settings.apply_env(
        {
            "EXTENSION_UPDATER_GITLAB_HOST": "env.example.com",
            "EXTENSION_UPDATER_SHOW_UP_TO_DATE_CONFIRMATION": "1",
            "EXTENSION_UPDATER_TIMEOUT": "2.5",
            "UNRELATED": "x",
        }
    )
    assert settings.gitlab_host == "env.example.com"
    assert settings.show_up_to_date_confirmation is True
    assert settings.timeout == 2.5


def test_bad_values_raise():
    with pytest.raises(ConfigError):
        UpdaterSettings().update({"reinstall": "maybe"})
    with pytest.raises(ConfigError):
        UpdaterSettings().update({"project_id": "abc"})


def test_load_manifest(tmp_path):
    manifest = tmp_path / "package.json"
    manifest.write_text(
        json.dumps({"name": "ade-source-control", "displayName": "ADE Source Control", "version": "0.0.1"}),
        encoding="utf-8",
    )
    ident = load_manifest(manifest)
    assert ident.display_name == "ADE Source Control"
    assert ident.installed_version == "0.0.1"
    assert ident.package_name == "ade-source-control"


def test_load_manifest_falls_back_to_name(tmp_path):
    manifest = tmp_path / "package.json"
    manifest.write_text(json.dumps({"name": "ade", "version": "1.0.0"}), encoding="utf-8")
    assert load_manifest(manifest).display_name == "ade"


@pytest.mark.parametrize(
    "content",
    ["{}", '{"displayName": "x"}', '{"version": "1.0.0"}', "[]", "nope"],
)
def test_load_manifest_rejects_incomplete(tmp_path, content):
    manifest = tmp_path / "package.json"
    manifest.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_manifest(manifest)


def test_load_manifest_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_manifest(tmp_path / "package.json")
