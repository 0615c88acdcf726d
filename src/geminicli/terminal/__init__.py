"""Assistant terminal domain package."""

from .command import compute_geometry, placeholder_command, resolve_startup_command, split_terminal_cmd
from .enhanced import EnhancedBackend, snacks_available
from .models import (
    BackendKind,
    EnhancedHandle,
    NativeHandle,
    SessionHandle,
    SplitGeometry,
    SplitSide,
    TerminalEvent,
)
from .native import NativeBackend
from .service import TerminalBackend, TerminalSession, create_backend, resolve_backend_kind

__all__ = [
    "BackendKind",
    "compute_geometry",
    "create_backend",
    "EnhancedBackend",
    "EnhancedHandle",
    "NativeBackend",
    "NativeHandle",
    "placeholder_command",
    "resolve_backend_kind",
    "resolve_startup_command",
    "SessionHandle",
    "snacks_available",
    "split_terminal_cmd",
    "SplitGeometry",
    "SplitSide",
    "TerminalBackend",
    "TerminalEvent",
    "TerminalSession",
]
