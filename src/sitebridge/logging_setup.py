"""Process-wide logging configuration for the API server and CLI."""

from __future__ import annotations

import json
import logging
import sys


class JSONFormatter(logging.Formatter):
    """Emit one JSON object per record, with a ``severity`` key for log collectors."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str | None = None, json_format: bool | None = None) -> None:
    """Set up root logging on stderr.

    Args:
        level: Log level name; defaults to ``settings.logging.level``.
        json_format: Emit JSON lines instead of plain text; defaults to
            ``settings.logging.json_format``.
    """
    from sitebridge.settings import get_settings

    settings = get_settings()
    log_level = (level or settings.logging.level).upper()
    use_json = settings.logging.json_format if json_format is None else json_format

    if use_json:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JSONFormatter())
        logging.root.handlers.clear()
        logging.root.addHandler(handler)
        logging.root.setLevel(getattr(logging, log_level, logging.INFO))
    else:
        logging.basicConfig(
            level=getattr(logging, log_level, logging.INFO),
            format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            stream=sys.stderr,
        )

    # Quieten noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
