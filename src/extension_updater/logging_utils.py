"""Logging configuration helpers (human + JSON + file).

Centralizes logging setup for the updater CLI:
 - Plain human-readable logs to stderr
 - Optional JSON lines to stdout (for piping/collection)
 - Optional file logs

Repeated calls replace the handlers added by earlier calls, so tests and
long-lived hosts can reconfigure freely. Structured update events go through
:func:`log_event`, which never raises.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Structured fields copied from ``extra=...`` into JSON output
_EVENT_FIELDS = (
    "event",
    "extension",
    "version",
    "backend",
    "url",
    "path",
    "state",
    "duration_ms",
    "error_type",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per record with ``level``, ``message`` and event fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for k in _EVENT_FIELDS:
            if hasattr(record, k):
                payload[k] = getattr(record, k)
        return json.dumps(payload, default=str)


def configure_logging(
    verbose: bool,
    log_file: Optional[str] = None,
    log_json: bool = False,
    log_level: Optional[str] = None,
) -> None:
    """Configure the root logger according to CLI flags.

    ``verbose`` selects ``DEBUG`` (otherwise ``WARNING``) unless
    ``log_level`` names a level explicitly.
    """
    if log_level:
        level = _LEVELS.get(log_level.lower(), logging.WARNING)
    else:
        level = logging.DEBUG if verbose else logging.WARNING

    logger = logging.getLogger()
    logger.setLevel(level)

    for h in list(logger.handlers):
        if getattr(h, "_added_by_configure_logging", False):
            logger.removeHandler(h)
            h.close()

    fmt = "%(levelname)s: %(message)s"
    handlers = []
    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter(fmt))
    handlers.append(stream)

    if log_json:
        json_handler = logging.StreamHandler(sys.stdout)
        json_handler.setFormatter(JSONFormatter())
        handlers.append(json_handler)

    if log_file:
        fh = logging.FileHandler(log_file)
        fh.setFormatter(logging.Formatter("%(asctime)s " + fmt))
        handlers.append(fh)

    for handler in handlers:
        setattr(handler, "_added_by_configure_logging", True)
        handler.setLevel(level)
        logger.addHandler(handler)


def log_event(event: str, level: int = logging.INFO, **fields) -> None:
    """Emit a structured event log at the given level.

    Common ``fields`` include ``extension``, ``version``, ``backend``,
    ``url``, ``path``, ``state``, ``duration_ms`` and ``error_type``.
    """
    try:
        logging.getLogger("extension_updater").log(
            level, event, extra={"event": event, **fields}
        )
    except Exception:
        # Never let logging break an update cycle
        pass


__all__ = ["JSONFormatter", "configure_logging", "log_event"]
