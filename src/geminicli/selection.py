"""Visual-selection extraction and formatting for outgoing prompts."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from geminicli.host import EditorHost

NO_NAME = "[No Name]"
BLOCK_MODE = "\x16"


class RangeKind(str, Enum):
    CHARACTER = "character"
    LINE = "line"
    BLOCK = "block"


VISUAL_MODES: dict[str, RangeKind] = {
    "v": RangeKind.CHARACTER,
    "V": RangeKind.LINE,
    BLOCK_MODE: RangeKind.BLOCK,
}

Position = tuple[int, int]


@dataclass(frozen=True)
class Selection:
    source_path: str
    start_line: int
    end_line: int
    start_col: int
    end_col: int
    kind: RangeKind
    text: str

    @property
    def has_source(self) -> bool:
        return bool(self.source_path) and self.source_path != NO_NAME


def is_visual_mode(mode: str) -> bool:
    return mode in VISUAL_MODES


def order_positions(anchor: Position, cursor: Position) -> tuple[Position, Position]:
    """Return ``(start, end)`` so that start is not after end by line, then column."""
    if anchor[0] > cursor[0] or (anchor[0] == cursor[0] and anchor[1] > cursor[1]):
        return cursor, anchor
    return anchor, cursor


def slice_lines(lines: list[str], start_col: int, end_col: int, kind: RangeKind) -> str:
    """Cut the selected text out of ``lines``.

    ``lines`` holds the buffer lines from the first to the last selected line.
    Columns are 0-indexed; ``end_col`` is exclusive.
    """
    if not lines:
        return ""

    if kind == RangeKind.BLOCK:
        pieces = []
        for line in lines:
            left = min(start_col, len(line))
            right = min(end_col, len(line))
            pieces.append(line[left:right] if left <= right else "")
        return "\n".join(pieces)

    if len(lines) == 1:
        return lines[0][start_col:end_col]

    head = lines[0][start_col:]
    tail = lines[-1][:end_col]
    return "\n".join([head, *lines[1:-1], tail])


def build_selection(
    lines: list[str],
    *,
    source_path: str,
    start_line: int,
    end_line: int,
    start_col: int,
    end_col: int,
    kind: RangeKind,
) -> Selection:
    if kind == RangeKind.LINE:
        start_col = 0
        end_col = len(lines[-1]) if lines else 0
    return Selection(
        source_path=source_path or NO_NAME,
        start_line=start_line,
        end_line=end_line,
        start_col=start_col,
        end_col=end_col,
        kind=kind,
        text=slice_lines(lines, start_col, end_col, kind),
    )


def extract_visual(host: EditorHost) -> Selection | None:
    kind = VISUAL_MODES.get(host.mode())
    if kind is None:
        return None

    buffer = host.current_buffer()
    source_path = host.buffer_name(buffer) or NO_NAME
    anchor = host.position("v")
    cursor = host.position(".")
    start, end = order_positions(anchor, cursor)

    start_line = start[0] - 1
    end_line = end[0] - 1
    if kind == RangeKind.BLOCK:
        # The block spans the same columns on every line, whichever corner the anchor is.
        start_col = min(anchor[1], cursor[1]) - 1
        end_col = max(anchor[1], cursor[1])
    else:
        start_col = start[1] - 1
        end_col = end[1]
    start_col = max(start_col, 0)

    lines = host.buffer_lines(buffer, start_line, end_line + 1)
    if not lines:
        return None
    return build_selection(
        lines,
        source_path=source_path,
        start_line=start_line,
        end_line=end_line,
        start_col=start_col,
        end_col=end_col,
        kind=kind,
    )


def extract_range(host: EditorHost, line1: int, line2: int) -> Selection | None:
    """Selection for an ex range such as ``:'<,'>``; bounds are 1-indexed and inclusive."""
    if line1 < 1 or line2 < line1:
        return None

    buffer = host.current_buffer()
    source_path = host.buffer_name(buffer) or NO_NAME
    start_line = line1 - 1
    end_line = line2 - 1
    lines = host.buffer_lines(buffer, start_line, end_line + 1)
    if not lines:
        return None
    return build_selection(
        lines,
        source_path=source_path,
        start_line=start_line,
        end_line=end_line,
        start_col=0,
        end_col=len(lines[-1]),
        kind=RangeKind.LINE,
    )


def relative_path(absolute_path: str, cwd: str) -> str:
    if absolute_path == cwd:
        return "."
    prefix = cwd if cwd.endswith(os.sep) else cwd + os.sep
    if cwd and absolute_path.startswith(prefix):
        return absolute_path[len(prefix):] or "."
    return absolute_path


def format_for_send(selection: Selection, cwd: str) -> str:
    if not selection.has_source:
        return selection.text
    display_path = relative_path(selection.source_path, cwd)
    return (
        f"From {display_path} (lines {selection.start_line + 1}-{selection.end_line + 1}):\n"
        f"{selection.text}"
    )


def exit_visual_mode(host: EditorHost) -> None:
    if is_visual_mode(host.mode()):
        host.feed_escape()
