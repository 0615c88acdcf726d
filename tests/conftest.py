from __future__ import annotations

import logging as py_logging
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from geminicli.host import ExitCallback
from geminicli.logging import LOGGER_NAME


class FakeEditorHost:
    """In-memory editor: buffers, windows, terminal jobs and Lua answers."""

    def __init__(self) -> None:
        self.mode_value = "n"
        self.positions: dict[str, tuple[int, int]] = {}
        self.buffers: dict[int, list[str]] = {1: []}
        self.names: dict[int, str] = {1: ""}
        self.windows: dict[int, int] = {1000: 1}
        self.current_win = 1000
        self.line = ""
        self.filetype_value = ""
        self.cwd_value = "/work"
        self.expansions: dict[str, str] = {}
        self.readable: set[str] = set()
        self.executables: set[str] = {"gemini"}
        self.columns = 200
        self.lines = 50
        self.commands: list[str] = []
        self.options: dict[tuple[int, str], object] = {}
        self.jobs: dict[int, list[str]] = {}
        self.exit_callbacks: dict[int, ExitCallback] = {}
        self.stopped_jobs: list[int] = []
        self.channel_writes: list[tuple[int, str]] = []
        self.channel_result: int | None = None
        self.notifications: list[tuple[str, int]] = []
        self.lua_results: dict[str, Any] = {}
        self.lua_calls: list[tuple[str, tuple[object, ...]]] = []
        self.scheduled: list[Callable[[], None]] = []
        self.escapes = 0
        self._next_buffer = 2
        self._next_window = 1001
        self._next_job = 3

    # helpers for tests

    def add_buffer(self, lines: list[str], name: str = "") -> int:
        buffer = self._next_buffer
        self._next_buffer += 1
        self.buffers[buffer] = list(lines)
        self.names[buffer] = name
        return buffer

    def show(self, buffer: int) -> None:
        self.windows[self.current_win] = buffer

    def run_scheduled(self) -> None:
        pending, self.scheduled = self.scheduled, []
        for callback in pending:
            callback()

    def finish_job(self, job_id: int, exit_code: int = 0) -> None:
        self.exit_callbacks.pop(job_id)(job_id, exit_code)

    # EditorHost

    def mode(self) -> str:
        return self.mode_value

    def position(self, expr: str) -> tuple[int, int]:
        return self.positions.get(expr, (0, 0))

    def current_buffer(self) -> int:
        return self.windows[self.current_win]

    def current_window(self) -> int:
        return self.current_win

    def buffer_name(self, buffer: int) -> str:
        return self.names.get(buffer, "")

    def buffer_lines(self, buffer: int, start: int, end: int) -> list[str]:
        return self.buffers[buffer][start:end]

    def current_line(self) -> str:
        return self.line

    def filetype(self) -> str:
        return self.filetype_value

    def cwd(self) -> str:
        return self.cwd_value

    def expand(self, expr: str) -> str:
        return self.expansions.get(expr, expr)

    def is_readable_file(self, path: str) -> bool:
        return path in self.readable

    def is_executable(self, name: str) -> bool:
        return name in self.executables

    def screen_size(self) -> tuple[int, int]:
        return self.columns, self.lines

    def command(self, command: str) -> None:
        self.commands.append(command)
        if "split" in command:
            window = self._next_window
            self._next_window += 1
            self.windows[window] = self.current_buffer()
            self.current_win = window

    def create_scratch_buffer(self) -> int:
        return self.add_buffer([])

    def set_current_buffer(self, buffer: int) -> None:
        self.windows[self.current_win] = buffer

    def set_current_window(self, window: int) -> None:
        self.current_win = window

    def start_terminal(self, command: list[str], on_exit: ExitCallback) -> int:
        job_id = self._next_job
        self._next_job += 1
        self.jobs[job_id] = list(command)
        self.exit_callbacks[job_id] = on_exit
        self.options[(self.current_buffer(), "channel")] = job_id
        return job_id

    def buffer_option(self, buffer: int, name: str) -> Any:
        return self.options.get((buffer, name))

    def set_buffer_option(self, buffer: int, name: str, value: object) -> None:
        self.options[(buffer, name)] = value

    def is_buffer_valid(self, buffer: int) -> bool:
        return buffer in self.buffers

    def is_window_valid(self, window: int) -> bool:
        return window in self.windows

    def close_window(self, window: int) -> None:
        self._drop_window(window)

    def hide_window(self, window: int) -> None:
        self._drop_window(window)

    def delete_buffer(self, buffer: int) -> None:
        self.buffers.pop(buffer, None)
        for window in [win for win, shown in self.windows.items() if shown == buffer]:
            self._drop_window(window)

    def stop_job(self, job_id: int) -> None:
        self.stopped_jobs.append(job_id)

    def send_to_channel(self, channel: int, text: str) -> int:
        self.channel_writes.append((channel, text))
        if self.channel_result is not None:
            return self.channel_result
        return len(text.encode("utf-8"))

    def notify(self, message: str, level: int) -> None:
        self.notifications.append((message, level))

    def exec_lua(self, code: str, *args: object) -> Any:
        self.lua_calls.append((code, args))
        result = self.lua_results.get(code)
        if callable(result):
            return result(*args)
        return result

    def schedule(self, callback: Callable[[], None]) -> None:
        self.scheduled.append(callback)

    def feed_escape(self) -> None:
        self.escapes += 1
        self.mode_value = "n"

    def _drop_window(self, window: int) -> None:
        self.windows.pop(window, None)
        if window == self.current_win and self.windows:
            self.current_win = next(iter(self.windows))
        elif not self.windows:
            # Neovim always keeps one window around.
            self.windows[window] = 1
            self.buffers.setdefault(1, [])


@pytest.fixture
def host() -> FakeEditorHost:
    return FakeEditorHost()


@pytest.fixture(autouse=True)
def _reset_plugin_logger() -> Iterator[None]:
    yield
    logger = py_logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(py_logging.NOTSET)
    logger.propagate = True
