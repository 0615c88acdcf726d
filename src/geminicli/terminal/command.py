"""Startup command and split geometry resolution."""

from __future__ import annotations

import logging as py_logging
import math
import shlex

from geminicli.config import TerminalConfig
from geminicli.errors import ErrorKind, GeminiCliError
from geminicli.host import EditorHost
from geminicli.terminal.models import SplitGeometry, SplitSide

logger = py_logging.getLogger(__name__)

PLACEHOLDER_SHELL = "sh"


def split_terminal_cmd(terminal_cmd: str | list[str]) -> list[str]:
    parts = shlex.split(terminal_cmd) if isinstance(terminal_cmd, str) else list(terminal_cmd)
    if not parts or not parts[0]:
        raise GeminiCliError(
            "Terminal command cannot be empty.",
            kind=ErrorKind.CONFIG,
            hint="Set terminal.terminal_cmd to the assistant executable.",
        )
    return parts


def placeholder_command(executable: str) -> list[str]:
    warning = f"Warning: {executable} command not found. Please install {executable} first."
    script = f'echo {shlex.quote(warning)}; exec "${{SHELL:-sh}}"'
    return [PLACEHOLDER_SHELL, "-c", script]


def resolve_startup_command(host: EditorHost, terminal_cmd: str | list[str]) -> list[str]:
    parts = split_terminal_cmd(terminal_cmd)
    if host.is_executable(parts[0]):
        return parts
    logger.warning("%s not found on PATH; starting a placeholder shell", parts[0])
    return placeholder_command(parts[0])


def compute_geometry(config: TerminalConfig, columns: int, lines: int) -> SplitGeometry:
    side = SplitSide(config.split_side)
    if side.vertical:
        size = math.floor(columns * config.split_width_percentage)
    else:
        size = math.floor(lines * config.split_height_percentage)
    return SplitGeometry(side=side, size=max(size, 1))
