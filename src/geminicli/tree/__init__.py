"""File-tree plugin integrations."""

from .adapters import (
    ADAPTERS,
    MiniFilesAdapter,
    NeoTreeAdapter,
    NvimTreeAdapter,
    OilAdapter,
    TreeAdapter,
    get_selected_paths,
)
from .models import OilEntry, TreeKind, TreeProbe

__all__ = [
    "ADAPTERS",
    "get_selected_paths",
    "MiniFilesAdapter",
    "NeoTreeAdapter",
    "NvimTreeAdapter",
    "OilAdapter",
    "OilEntry",
    "TreeAdapter",
    "TreeKind",
    "TreeProbe",
]
