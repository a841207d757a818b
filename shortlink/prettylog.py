"""Human-friendly log formatting with coloured levels and JSON attributes."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from termcolor import colored

_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
}
_LEVEL_COLORS = {
    logging.DEBUG: "magenta",
    logging.INFO: "blue",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
}


class PrettyFormatter(logging.Formatter):
    """Formats records as ``[time] LEVEL: message {attrs}``.

    Structured attributes are read from the record's ``attrs`` mapping,
    e.g. ``logger.info("msg", extra={"attrs": {"key": "value"}})``.
    """

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def _paint(self, text: str, color: str | None) -> str:
        if not self.use_color or color is None:
            return text
        return colored(text, color, force_color=True)

    def format(self, record: logging.LogRecord) -> str:
        level = _LEVEL_NAMES.get(record.levelno, record.levelname) + ":"
        level = self._paint(level, _LEVEL_COLORS.get(record.levelno))

        fields: dict[str, Any] = dict(getattr(record, "attrs", None) or {})
        body = json.dumps(fields, indent=2, sort_keys=True, default=str) if fields else ""

        stamp = time.strftime("%H:%M:%S", time.localtime(record.created))
        time_str = f"[{stamp}.{int(record.msecs):03d}]"

        return " ".join(
            [
                time_str,
                level,
                self._paint(record.getMessage(), "cyan"),
                self._paint(body, "white"),
            ]
        )


def err_attr(err: BaseException) -> dict[str, str]:
    """Return the ``error`` attribute describing ``err``."""
    return {"error": str(err)}