"""Editor API seam used by every plugin component.

The core only talks to :class:`EditorHost`. :class:`NvimHost` implements it on
top of a ``pynvim`` connection; tests provide an in-memory fake.
"""

from __future__ import annotations

import logging as py_logging
from collections.abc import Callable
from typing import Any, Protocol

from pynvim.api import Nvim, NvimError

from geminicli.errors import ErrorKind, GeminiCliError

logger = py_logging.getLogger(__name__)

TERMINAL_EXIT_EVENT = "geminicli_terminal_exit"
NOTIFY_TITLE = "geminicli.nvim"

ExitCallback = Callable[[int, int], None]

# Python logging levels -> vim.log.levels
_VIM_LOG_LEVELS = {
    py_logging.DEBUG: 1,
    py_logging.INFO: 2,
    py_logging.WARNING: 3,
    py_logging.ERROR: 4,
    py_logging.CRITICAL: 4,
}

_TERMOPEN_LUA = """
local cmd, chan, event = ...
return vim.fn.termopen(cmd, {
  on_exit = function(job_id, exit_code)
    vim.rpcnotify(chan, event, job_id, exit_code)
  end,
})
"""

_NOTIFY_LUA = """
local message, level, title = ...
vim.notify(message, level, { title = title })
"""


class EditorHost(Protocol):
    def mode(self) -> str: ...

    def position(self, expr: str) -> tuple[int, int]: ...

    def current_buffer(self) -> int: ...

    def current_window(self) -> int: ...

    def buffer_name(self, buffer: int) -> str: ...

    def buffer_lines(self, buffer: int, start: int, end: int) -> list[str]: ...

    def current_line(self) -> str: ...

    def filetype(self) -> str: ...

    def cwd(self) -> str: ...

    def expand(self, expr: str) -> str: ...

    def is_readable_file(self, path: str) -> bool: ...

    def is_executable(self, name: str) -> bool: ...

    def screen_size(self) -> tuple[int, int]: ...

    def command(self, command: str) -> None: ...

    def create_scratch_buffer(self) -> int: ...

    def set_current_buffer(self, buffer: int) -> None: ...

    def set_current_window(self, window: int) -> None: ...

    def start_terminal(self, command: list[str], on_exit: ExitCallback) -> int: ...

    def buffer_option(self, buffer: int, name: str) -> Any: ...

    def set_buffer_option(self, buffer: int, name: str, value: object) -> None: ...

    def is_buffer_valid(self, buffer: int) -> bool: ...

    def is_window_valid(self, window: int) -> bool: ...

    def close_window(self, window: int) -> None: ...

    def hide_window(self, window: int) -> None: ...

    def delete_buffer(self, buffer: int) -> None: ...

    def stop_job(self, job_id: int) -> None: ...

    def send_to_channel(self, channel: int, text: str) -> int: ...

    def notify(self, message: str, level: int) -> None: ...

    def exec_lua(self, code: str, *args: object) -> Any: ...

    def schedule(self, callback: Callable[[], None]) -> None: ...

    def feed_escape(self) -> None: ...


def _handle_id(value: object) -> int:
    handle = getattr(value, "handle", value)
    return int(handle)  # type: ignore[call-overload]


class NvimHost:
    """:class:`EditorHost` backed by a live ``pynvim`` session."""

    def __init__(self, nvim: Nvim) -> None:
        self._nvim = nvim
        self._exit_callbacks: dict[int, ExitCallback] = {}

    def mode(self) -> str:
        return str(self._nvim.api.get_mode()["mode"])

    def position(self, expr: str) -> tuple[int, int]:
        # getcharpos reports columns in characters, not bytes.
        _bufnum, lnum, col, _off = self._nvim.funcs.getcharpos(expr)
        return int(lnum), int(col)

    def current_buffer(self) -> int:
        return _handle_id(self._nvim.api.get_current_buf())

    def current_window(self) -> int:
        return _handle_id(self._nvim.api.get_current_win())

    def buffer_name(self, buffer: int) -> str:
        return str(self._nvim.api.buf_get_name(buffer))

    def buffer_lines(self, buffer: int, start: int, end: int) -> list[str]:
        return list(self._nvim.api.buf_get_lines(buffer, start, end, False))

    def current_line(self) -> str:
        return str(self._nvim.api.get_current_line())

    def filetype(self) -> str:
        return str(self._nvim.api.get_option_value("filetype", {"buf": 0}))

    def cwd(self) -> str:
        return str(self._nvim.funcs.getcwd())

    def expand(self, expr: str) -> str:
        return str(self._nvim.funcs.expand(expr))

    def is_readable_file(self, path: str) -> bool:
        return self._nvim.funcs.filereadable(path) == 1

    def is_executable(self, name: str) -> bool:
        return self._nvim.funcs.executable(name) == 1

    def screen_size(self) -> tuple[int, int]:
        return int(self._nvim.options["columns"]), int(self._nvim.options["lines"])

    def command(self, command: str) -> None:
        self._nvim.command(command)

    def create_scratch_buffer(self) -> int:
        return _handle_id(self._nvim.api.create_buf(False, True))

    def set_current_buffer(self, buffer: int) -> None:
        self._nvim.api.set_current_buf(buffer)

    def set_current_window(self, window: int) -> None:
        self._nvim.api.set_current_win(window)

    def start_terminal(self, command: list[str], on_exit: ExitCallback) -> int:
        job_id = int(
            self._nvim.exec_lua(_TERMOPEN_LUA, command, self._nvim.channel_id, TERMINAL_EXIT_EVENT)
        )
        if job_id <= 0:
            raise GeminiCliError(
                f"Failed to start terminal job for {command[0]!r}",
                kind=ErrorKind.BACKEND_UNAVAILABLE,
                hint="Check terminal_cmd in the plugin configuration.",
            )
        self._exit_callbacks[job_id] = on_exit
        return job_id

    def handle_terminal_exit(self, job_id: int, exit_code: int) -> None:
        callback = self._exit_callbacks.pop(int(job_id), None)
        if callback is None:
            logger.debug("Ignoring exit of unknown job %s", job_id)
            return
        callback(int(job_id), int(exit_code))

    def buffer_option(self, buffer: int, name: str) -> Any:
        return self._nvim.api.get_option_value(name, {"buf": buffer})

    def set_buffer_option(self, buffer: int, name: str, value: object) -> None:
        self._nvim.api.set_option_value(name, value, {"buf": buffer})

    def is_buffer_valid(self, buffer: int) -> bool:
        return bool(self._nvim.api.buf_is_valid(buffer))

    def is_window_valid(self, window: int) -> bool:
        return bool(self._nvim.api.win_is_valid(window))

    def close_window(self, window: int) -> None:
        self._nvim.api.win_close(window, True)

    def hide_window(self, window: int) -> None:
        self._nvim.api.win_hide(window)

    def delete_buffer(self, buffer: int) -> None:
        self._nvim.api.buf_delete(buffer, {"force": True})

    def stop_job(self, job_id: int) -> None:
        self._nvim.funcs.jobstop(job_id)

    def send_to_channel(self, channel: int, text: str) -> int:
        try:
            return int(self._nvim.funcs.chansend(channel, text))
        except NvimError as exc:
            raise GeminiCliError(
                f"Failed to write to channel {channel}",
                kind=ErrorKind.TRANSPORT,
                hint=str(exc),
            ) from exc

    def notify(self, message: str, level: int) -> None:
        vim_level = _VIM_LOG_LEVELS.get(level, 2)
        self._nvim.exec_lua(_NOTIFY_LUA, message, vim_level, NOTIFY_TITLE)

    def exec_lua(self, code: str, *args: object) -> Any:
        return self._nvim.exec_lua(code, *args)

    def schedule(self, callback: Callable[[], None]) -> None:
        self._nvim.async_call(callback)

    def feed_escape(self) -> None:
        keys = self._nvim.api.replace_termcodes("<Esc>", True, False, True)
        self._nvim.api.feedkeys(keys, "n", False)
