"""Plugin logging helpers."""

from __future__ import annotations

import logging as py_logging
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

LOG_LEVELS = {
    "DEBUG": py_logging.DEBUG,
    "INFO": py_logging.INFO,
    "WARN": py_logging.WARNING,
    "WARNING": py_logging.WARNING,
    "ERROR": py_logging.ERROR,
}
LOGGER_NAME = "geminicli"
NOTIFIED = "geminicli_notified"
_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_DISPLAY_NAMES = {"WARNING": "WARN", "CRITICAL": "ERROR"}

Notifier = Callable[[str, int], None]


def default_log_path() -> Path:
    data_home = os.environ.get("XDG_DATA_HOME", "").strip()
    try:
        base = Path(data_home) if data_home else Path("~/.local/share").expanduser()
    except RuntimeError:
        base = Path.cwd() / ".geminicli"
    return (base / "nvim" / "geminicli.log").resolve()


class LevelFormatter(py_logging.Formatter):
    """Formatter that prints WARNING as WARN to match the plugin's level names."""

    def format(self, record: py_logging.LogRecord) -> str:
        original = record.levelname
        record.levelname = _DISPLAY_NAMES.get(original, original)
        try:
            return super().format(record)
        finally:
            record.levelname = original


class NotifyHandler(py_logging.Handler):
    """Forward log records to the editor notification area."""

    def __init__(self, notifier: Notifier, level: int = py_logging.NOTSET) -> None:
        super().__init__(level)
        self._notifier = notifier

    def emit(self, record: py_logging.LogRecord) -> None:
        if getattr(record, NOTIFIED, False):
            return
        try:
            self._notifier(record.getMessage(), record.levelno)
        except Exception:
            self.handleError(record)


def resolve_level(level: str) -> int:
    return LOG_LEVELS.get(level.upper(), py_logging.INFO)


def configure_logging(
    level: str = "info",
    stream: TextIO | None = None,
    *,
    log_file: str | Path | None = None,
    notifier: Notifier | None = None,
) -> py_logging.Logger:
    resolved = resolve_level(level)

    logger = py_logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    formatter = LevelFormatter(_FORMAT, datefmt=_DATE_FORMAT)

    sink: py_logging.Handler
    if notifier is not None:
        # Popups for WARN and above only.
        sink = NotifyHandler(notifier)
        sink.setLevel(max(resolved, py_logging.WARNING))
    else:
        sink = py_logging.StreamHandler(stream or sys.stderr)
        sink.setFormatter(formatter)
        sink.setLevel(resolved)
    logger.addHandler(sink)

    if log_file:
        try:
            log_path = Path(log_file).expanduser()
        except RuntimeError:
            log_path = Path(log_file)
        if not log_path.is_absolute():
            log_path = log_path.resolve()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = py_logging.FileHandler(log_path, mode="a", encoding="utf-8")
        except OSError:
            pass
        else:
            file_handler.setLevel(resolved)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    logger.propagate = False
    return logger
