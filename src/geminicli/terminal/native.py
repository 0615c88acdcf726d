"""Terminal backend built on Neovim's own :terminal."""

from __future__ import annotations

import logging as py_logging

from geminicli.config import TerminalConfig
from geminicli.errors import ErrorKind, GeminiCliError
from geminicli.host import EditorHost
from geminicli.terminal.command import compute_geometry
from geminicli.terminal.models import BackendKind, NativeHandle, SplitGeometry

logger = py_logging.getLogger(__name__)


class NativeBackend:
    kind = BackendKind.NATIVE

    def __init__(self, host: EditorHost) -> None:
        self._host = host

    def open(self, config: TerminalConfig, command: list[str]) -> NativeHandle:
        handle = self._spawn(config, command)
        self._host.command("startinsert")
        return handle

    def get_or_create(self, config: TerminalConfig, command: list[str]) -> NativeHandle:
        previous = self._host.current_window()
        handle = self._spawn(config, command)
        self._host.hide_window(handle.window)
        if self._host.is_window_valid(previous):
            self._host.set_current_window(previous)
        return handle

    def close(self, handle: NativeHandle) -> None:
        self._host.stop_job(handle.job_id)
        if self._host.is_window_valid(handle.window):
            self._host.close_window(handle.window)
        if self._host.is_buffer_valid(handle.buffer):
            self._host.delete_buffer(handle.buffer)

    def focus(self, handle: NativeHandle) -> None:
        if not self._host.is_window_valid(handle.window):
            self._open_split(handle.geometry)
            self._host.set_current_buffer(handle.buffer)
            handle.window = self._host.current_window()
        self._host.set_current_window(handle.window)
        self._host.command("startinsert")

    def hide(self, handle: NativeHandle) -> None:
        if self._host.is_window_valid(handle.window):
            self._host.hide_window(handle.window)

    def is_valid(self, handle: NativeHandle) -> bool:
        return self._host.is_buffer_valid(handle.buffer)

    def is_visible(self, handle: NativeHandle) -> bool:
        return self._host.is_window_valid(handle.window)

    def send(self, handle: NativeHandle, text: str) -> None:
        written = self._host.send_to_channel(handle.job_id, text)
        if written <= 0:
            raise GeminiCliError(
                f"No bytes written to terminal job {handle.job_id}",
                kind=ErrorKind.TRANSPORT,
                hint="The assistant process may have exited.",
            )
        logger.debug("Wrote %s bytes to job %s", written, handle.job_id)

    def _open_split(self, geometry: SplitGeometry) -> None:
        self._host.command(geometry.split_command)

    def _spawn(self, config: TerminalConfig, command: list[str]) -> NativeHandle:
        columns, lines = self._host.screen_size()
        geometry = compute_geometry(config, columns, lines)
        self._open_split(geometry)

        buffer = self._host.create_scratch_buffer()
        self._host.set_current_buffer(buffer)

        def on_exit(job_id: int, exit_code: int) -> None:
            logger.info("Terminal job %s exited with code %s", job_id, exit_code)
            if self._host.is_buffer_valid(buffer):
                self._host.delete_buffer(buffer)

        job_id = self._host.start_terminal(command, on_exit)
        window = self._host.current_window()
        self._host.set_buffer_option(buffer, "bufhidden", "hide")
        self._host.set_buffer_option(buffer, "buflisted", False)
        return NativeHandle(
            buffer=buffer,
            window=window,
            job_id=job_id,
            command=tuple(command),
            geometry=geometry,
        )
