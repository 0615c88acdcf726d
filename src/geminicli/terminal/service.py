"""Terminal session ownership and backend selection."""

from __future__ import annotations

import logging as py_logging
from typing import Protocol

from geminicli.config import TerminalConfig
from geminicli.errors import ErrorKind, GeminiCliError
from geminicli.host import EditorHost
from geminicli.terminal.command import resolve_startup_command
from geminicli.terminal.enhanced import EnhancedBackend, snacks_available
from geminicli.terminal.models import BackendKind, SessionHandle, TerminalEvent
from geminicli.terminal.native import NativeBackend

logger = py_logging.getLogger(__name__)


class TerminalBackend(Protocol):
    kind: BackendKind

    def open(self, config: TerminalConfig, command: list[str]) -> SessionHandle: ...

    def get_or_create(self, config: TerminalConfig, command: list[str]) -> SessionHandle: ...

    def close(self, handle: SessionHandle) -> None: ...

    def focus(self, handle: SessionHandle) -> None: ...

    def hide(self, handle: SessionHandle) -> None: ...

    def is_valid(self, handle: SessionHandle) -> bool: ...

    def is_visible(self, handle: SessionHandle) -> bool: ...

    def send(self, handle: SessionHandle, text: str) -> None: ...


_BACKENDS: dict[BackendKind, type[NativeBackend] | type[EnhancedBackend]] = {
    BackendKind.NATIVE: NativeBackend,
    BackendKind.ENHANCED: EnhancedBackend,
}


def resolve_backend_kind(provider: str, host: EditorHost) -> BackendKind:
    if provider == BackendKind.NATIVE.value:
        return BackendKind.NATIVE
    available = snacks_available(host)
    if provider == BackendKind.ENHANCED.value and not available:
        logger.warning("snacks.nvim is not installed; falling back to the native terminal")
        return BackendKind.NATIVE
    return BackendKind.ENHANCED if available else BackendKind.NATIVE


def create_backend(kind: BackendKind, host: EditorHost) -> TerminalBackend:
    return _BACKENDS[kind](host)


class TerminalSession:
    """Owner of the single assistant terminal.

    Validity is never cached: every call asks the backend whether the buffer
    behind the held handle still exists.
    """

    def __init__(
        self,
        backend: TerminalBackend,
        config: TerminalConfig,
        command: list[str],
    ) -> None:
        self._backend = backend
        self._config = config
        self._command = list(command)
        self._handle: SessionHandle | None = None
        self._events: list[TerminalEvent] = []

    @classmethod
    def for_config(cls, host: EditorHost, config: TerminalConfig) -> TerminalSession:
        kind = resolve_backend_kind(config.provider, host)
        command = resolve_startup_command(host, config.terminal_cmd)
        logger.debug("Using %s terminal backend with command %s", kind.value, command)
        return cls(create_backend(kind, host), config, command)

    @property
    def kind(self) -> BackendKind:
        return self._backend.kind

    @property
    def command(self) -> list[str]:
        return list(self._command)

    @property
    def handle(self) -> SessionHandle | None:
        return self._handle

    def list_events(self) -> list[TerminalEvent]:
        return list(self._events)

    def is_valid(self) -> bool:
        return self._handle is not None and self._backend.is_valid(self._handle)

    def owns_buffer(self, buffer: int) -> bool:
        handle = self._handle
        return handle is not None and handle.buffer == buffer and self._backend.is_valid(handle)

    def is_visible(self) -> bool:
        handle = self._handle
        return handle is not None and self._backend.is_valid(handle) and self._backend.is_visible(handle)

    def open(self) -> SessionHandle:
        if self._handle is not None and self.is_valid():
            self._backend.focus(self._handle)
            self._record("reuse", "Focused existing terminal.")
            return self._handle
        self._handle = self._backend.open(self._config, self._command)
        self._record("open", f"Opened {self.kind.value} terminal.")
        return self._handle

    def get_or_create(self) -> SessionHandle:
        if self._handle is not None and self.is_valid():
            return self._handle
        self._handle = self._backend.get_or_create(self._config, self._command)
        self._record("create", f"Created hidden {self.kind.value} terminal.")
        return self._handle

    def focus(self) -> None:
        handle = self._require_valid()
        self._backend.focus(handle)
        self._record("focus", "Terminal focused.")

    def hide(self) -> None:
        handle = self._require_valid()
        self._backend.hide(handle)
        self._record("hide", "Terminal hidden; process kept alive.")

    def close(self) -> None:
        if self._handle is None:
            return
        handle = self._handle
        self._handle = None
        self._backend.close(handle)
        self._record("close", "Terminal closed.")

    def send(self, text: str) -> bool:
        try:
            handle = self._require_valid()
            self._backend.send(handle, text)
        except GeminiCliError as exc:
            self._record("send-failed", exc.message)
            logger.error("Failed to send to terminal: %s", exc)
            return False
        self._record("send", f"Sent {len(text)} characters.")
        return True

    def _require_valid(self) -> SessionHandle:
        if self._handle is None:
            raise GeminiCliError(
                "Terminal not initialized",
                kind=ErrorKind.STATE,
                hint="Run :Gemini to open the terminal.",
            )
        if not self._backend.is_valid(self._handle):
            raise GeminiCliError(
                "Terminal buffer invalid",
                kind=ErrorKind.STATE,
                hint="Run :Gemini to start a new terminal.",
            )
        return self._handle

    def _record(self, step: str, message: str) -> None:
        self._events.append(TerminalEvent(step=step, message=message))
        logger.debug("terminal-event backend=%s step=%s message=%s", self.kind.value, step, message)
