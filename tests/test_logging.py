import json
import logging

import pytest

from extension_updater.logging_utils import JSONFormatter, configure_logging, log_event


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        if getattr(h, "_added_by_configure_logging", False):
            root.removeHandler(h)
            h.close()


def test_logging_default_level(caplog):
    configure_logging(False)
    logging.debug("debug")
    logging.info("info")
    logging.warning("warn")
    assert [r.getMessage() for r in caplog.records] == ["warn"]


def test_logging_verbose_level(caplog):
    configure_logging(True)
    logging.debug("debug")
    logging.info("info")
    logging.warning("warn")
    assert [r.getMessage() for r in caplog.records] == ["debug", "info", "warn"]


def test_explicit_level_wins(caplog):
    configure_logging(True, log_level="error")
    logging.warning("warn")
    logging.error("boom")
    assert [r.getMessage() for r in caplog.records] == ["boom"]


def test_repeated_configuration_is_idempotent():
    configure_logging(False)
    configure_logging(False, log_json=True)
    ours = [
        h for h in logging.getLogger().handlers if getattr(h, "_added_by_configure_logging", False)
    ]
    assert len(ours) == 2


def test_log_file_handler(tmp_path):
    log_path = tmp_path / "updater.log"
    configure_logging(True, log_file=str(log_path))
    log_event("update_check_started", extension="ade")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "update_check_started" in log_path.read_text(encoding="utf-8")


def test_json_formatter_includes_event_fields():
    record = logging.LogRecord("extension_updater", logging.INFO, __file__, 1, "update_installed", None, None)
    record.event = "update_installed"
    record.extension = "ade"
    record.version = "2.0.0"
    payload = json.loads(JSONFormatter().format(record))
    assert payload == {
        "level": "INFO",
        "logger": "extension_updater",
        "message": "update_installed",
        "event": "update_installed",
        "extension": "ade",
        "version": "2.0.0",
    }


def test_json_output_on_stdout(capsys):
    configure_logging(False, log_json=True, log_level="info")
    log_event("update_not_found", extension="ade")
    lines = [l for l in capsys.readouterr().out.splitlines() if l.strip()]
    assert json.loads(lines[-1])["event"] == "update_not_found"


def test_log_event_never_raises():
    # "message" collides with a LogRecord attribute; the call must still return
    log_event("bad_fields", message="clash")
