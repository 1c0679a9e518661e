"""Logger setup for the ``monok`` hierarchy.

monok only logs from the pipeline rewriter, at DEBUG, once per decorated
function. Nothing is emitted unless the application configures logging,
either through its own root config or via configure_logging().

Example:
    from monok.log import configure_logging
    configure_logging(level="DEBUG")  # or MONOK_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal, TextIO

import orjson

from .settings import get_settings

if TYPE_CHECKING:
    from .settings import LoggingSettings

ROOT = "monok"

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logging.getLogger(ROOT).addHandler(logging.NullHandler())


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        doc: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if record.exc_info:
            doc["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(doc, default=str).decode()


def get_logger(name: str = "") -> logging.Logger:
    """Logger under the monok hierarchy, e.g. get_logger("rewrite") → ``monok.rewrite``."""
    return logging.getLogger(f"{ROOT}.{name}" if name else ROOT)


def configure_logging(
    level: str | None = None,
    format: Literal["json", "text"] | None = None,
    output: TextIO | None = None,
) -> logging.Logger:
    """Attach a stream handler to the ``monok`` logger.

    Unset arguments fall back to MonokSettings.logging. Calling it again
    replaces the handler installed by the previous call.
    """
    cfg: LoggingSettings = get_settings().logging
    logger = logging.getLogger(ROOT)
    for h in [h for h in logger.handlers if getattr(h, "_monok_managed", False)]:
        logger.removeHandler(h)

    handler = logging.StreamHandler(output or sys.stderr)
    handler.setFormatter(JsonFormatter() if (format or cfg.format) == "json" else logging.Formatter(_TEXT_FORMAT))
    handler._monok_managed = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel((level or cfg.level).upper())
    return logger
