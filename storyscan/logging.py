"""Logging helpers shared by the storyscan passes and entry points."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, Tuple

_LOGGER_NAME = "storyscan"
_CONSOLE_FORMAT = "[storyscan] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``storyscan`` hierarchy."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


class DocumentLogger(logging.LoggerAdapter):
    """Prefix every message with the stories file it concerns."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        filename = (self.extra or {}).get("filename")
        return (f"{filename}: {msg}" if filename else msg), kwargs


def document_logger(name: str, filename: str | None) -> DocumentLogger:
    return DocumentLogger(get_logger(name), {"filename": filename})


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Send storyscan records to stderr, and to ``log_file`` when given."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        fmt = _FILE_FORMAT if isinstance(handler, logging.FileHandler) else _CONSOLE_FORMAT
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
    return logger


__all__ = ["DocumentLogger", "configure_logging", "document_logger", "get_logger"]
