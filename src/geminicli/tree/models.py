"""File-tree plugin kinds and probe payloads."""

from __future__ import annotations

from enum import Enum

from typing_extensions import NotRequired, TypedDict


class TreeKind(str, Enum):
    NVIM_TREE = "NvimTree"
    NEO_TREE = "neo-tree"
    OIL = "oil"
    MINI_FILES = "minifiles"

    @classmethod
    def from_filetype(cls, filetype: str) -> TreeKind | None:
        for kind in cls:
            if kind.value == filetype:
                return kind
        return None


class OilEntry(TypedDict):
    name: str
    type: NotRequired[str]


class TreeProbe(TypedDict):
    available: bool
    state: NotRequired[bool]
    directory: NotRequired[str]
    visual: NotRequired[list[object]]
    selected: NotRequired[list[object]]
    cursor: NotRequired[object]
