"""Terminal session domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class BackendKind(str, Enum):
    NATIVE = "native"
    ENHANCED = "enhanced"


class SplitSide(str, Enum):
    RIGHT = "right"
    LEFT = "left"
    BOTTOM = "bottom"
    TOP = "top"

    @property
    def vertical(self) -> bool:
        return self in (SplitSide.RIGHT, SplitSide.LEFT)


@dataclass(frozen=True)
class SplitGeometry:
    side: SplitSide
    size: int

    @property
    def split_command(self) -> str:
        # Explicit modifiers so 'splitright'/'splitbelow' do not move the pane.
        modifier = "botright" if self.side in (SplitSide.RIGHT, SplitSide.BOTTOM) else "topleft"
        split = "vsplit" if self.side.vertical else "split"
        return f"{modifier} {self.size}{split}"


@dataclass(frozen=True)
class TerminalEvent:
    step: str
    message: str


@dataclass
class NativeHandle:
    buffer: int
    window: int
    job_id: int
    command: tuple[str, ...]
    geometry: SplitGeometry


@dataclass
class EnhancedHandle:
    buffer: int
    command: tuple[str, ...]
    options: dict[str, object] = field(default_factory=dict)


SessionHandle = NativeHandle | EnhancedHandle
