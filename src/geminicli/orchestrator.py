"""Command-level policy: decide what to send and route it to the terminal."""

from __future__ import annotations

import logging as py_logging

from geminicli.errors import GeminiCliError, user_facing_error
from geminicli.host import EditorHost
from geminicli.logging import NOTIFIED
from geminicli.selection import (
    exit_visual_mode,
    extract_range,
    extract_visual,
    format_for_send,
    is_visual_mode,
    relative_path,
)
from geminicli.terminal import TerminalSession
from geminicli.tree import TreeKind, get_selected_paths

logger = py_logging.getLogger(__name__)


class Orchestrator:
    def __init__(self, host: EditorHost, session: TerminalSession) -> None:
        self._host = host
        self._session = session

    @property
    def session(self) -> TerminalSession:
        return self._session

    def open_terminal(self) -> None:
        self._session.open()

    def close_terminal(self) -> None:
        self._session.close()

    def toggle_terminal(self) -> None:
        if not self._session.is_valid():
            self._session.open()
            return
        if self._session.owns_buffer(self._host.current_buffer()):
            self._session.hide()
        else:
            self._session.focus()

    def relative_path(self, absolute_path: str) -> str:
        return relative_path(absolute_path, self._host.cwd())

    def send(self, args: str = "", line_range: tuple[int, int] | None = None) -> None:
        if args.strip():
            self._send_argument(args)
            return

        kind = TreeKind.from_filetype(self._host.filetype())
        if kind is not None:
            try:
                paths = get_selected_paths(self._host, kind)
            except GeminiCliError as exc:
                self._surface(py_logging.WARNING, user_facing_error(exc.message))
                return
            if paths:
                for path in paths:
                    self.send_text(f"@{self.relative_path(path)}")
                self._host.schedule(lambda: exit_visual_mode(self._host))
                logger.info("Sent %d file(s) to Gemini", len(paths))
                return

        if is_visual_mode(self._host.mode()):
            selection = extract_visual(self._host)
        elif line_range is not None:
            selection = extract_range(self._host, *line_range)
        else:
            selection = None
        if selection is not None:
            logger.info("Sending visual selection to Gemini")
            self.send_text(format_for_send(selection, self._host.cwd()))
            self._host.schedule(lambda: exit_visual_mode(self._host))
            return

        current_line = self._host.current_line()
        if current_line:
            logger.info("Sending current line to Gemini")
            self.send_text(current_line)
            return

        if self._send_current_file():
            return

        self._surface(py_logging.WARNING, "Nothing to send: no selection, no content, no file")

    def add_file(self) -> None:
        if not self._send_current_file():
            self._surface(py_logging.WARNING, "No file to add: current buffer has no file path")

    def send_text(self, text: str) -> bool:
        if not text or not text.strip():
            self._surface(py_logging.WARNING, user_facing_error("Nothing to send (empty text)"))
            return False

        if not text.endswith("\n"):
            text += "\n"

        if self._session.is_valid():
            logger.debug("Terminal is valid")
        else:
            logger.debug("Getting or creating terminal...")
            self._session.get_or_create()

        logger.debug("Attempting to send to Gemini terminal: %r", text)
        if not self._session.send(text):
            return False
        logger.info("Sent text to Gemini terminal")
        return True

    def _send_argument(self, args: str) -> None:
        expanded = self._host.expand(args)
        if self._host.is_readable_file(expanded):
            self.send_text(f"@{self.relative_path(expanded)}")
        else:
            self.send_text(expanded)

    def _send_current_file(self) -> bool:
        name = self._host.buffer_name(self._host.current_buffer())
        if not name:
            return False
        logger.info("Sending current file path to Gemini")
        self.send_text(f"@{self.relative_path(name)}")
        return True

    def _surface(self, level: int, message: str) -> None:
        self._host.notify(message, level)
        logger.log(level, message, extra={NOTIFIED: True})
