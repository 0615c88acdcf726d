"""Terminal backend delegating to snacks.nvim's terminal module."""

from __future__ import annotations

import logging as py_logging

from geminicli.config import TerminalConfig
from geminicli.errors import ErrorKind, GeminiCliError
from geminicli.host import EditorHost
from geminicli.terminal.models import BackendKind, EnhancedHandle

logger = py_logging.getLogger(__name__)

_AVAILABLE_LUA = 'return (pcall(require, "snacks"))'

# Every snippet receives (cmd, opts); snacks keys terminals by cmd, cwd and env,
# so the same pair always resolves to the same terminal.
_OPEN_LUA = """
local cmd, opts = ...
local term, created = require("snacks").terminal.get(cmd, opts)
if not term then
  return nil
end
if not created then
  term:show()
end
term:focus()
return term.buf
"""

_GET_OR_CREATE_LUA = """
local cmd, opts = ...
local terminal = require("snacks").terminal
local term = terminal.get(cmd, vim.tbl_extend("force", opts, { create = false }))
if not term then
  term = terminal.get(cmd, opts)
  if term and term:win_valid() then
    term:hide()
  end
end
return term and term.buf or nil
"""

_FOCUS_LUA = """
local cmd, opts = ...
local term = require("snacks").terminal.get(cmd, vim.tbl_extend("force", opts, { create = false }))
if not term then
  return false
end
if not term:win_valid() then
  term:show()
end
term:focus()
vim.cmd("startinsert")
return true
"""

_HIDE_LUA = """
local cmd, opts = ...
local term = require("snacks").terminal.get(cmd, vim.tbl_extend("force", opts, { create = false }))
if term and term:win_valid() then
  term:hide()
end
"""

_CLOSE_LUA = """
local cmd, opts = ...
local term = require("snacks").terminal.get(cmd, vim.tbl_extend("force", opts, { create = false }))
if term then
  term:close()
end
"""

_VISIBLE_LUA = """
local cmd, opts = ...
local term = require("snacks").terminal.get(cmd, vim.tbl_extend("force", opts, { create = false }))
return term ~= nil and term:win_valid()
"""


def snacks_available(host: EditorHost) -> bool:
    return bool(host.exec_lua(_AVAILABLE_LUA))


def build_options(config: TerminalConfig, cwd: str) -> dict[str, object]:
    return {
        "win": {
            "position": config.split_side,
            "width": config.split_width_percentage,
            "height": config.split_height_percentage,
        },
        "env": {"EDITOR": "nvim"},
        "cwd": cwd,
    }


class EnhancedBackend:
    kind = BackendKind.ENHANCED

    def __init__(self, host: EditorHost) -> None:
        self._host = host

    def open(self, config: TerminalConfig, command: list[str]) -> EnhancedHandle:
        options = build_options(config, self._host.cwd())
        buffer = self._host.exec_lua(_OPEN_LUA, command, options)
        return self._handle(buffer, command, options)

    def get_or_create(self, config: TerminalConfig, command: list[str]) -> EnhancedHandle:
        options = build_options(config, self._host.cwd())
        previous = self._host.current_window()
        buffer = self._host.exec_lua(_GET_OR_CREATE_LUA, command, options)
        # snacks focuses a new terminal before it is hidden again.
        if self._host.current_window() != previous and self._host.is_window_valid(previous):
            self._host.set_current_window(previous)
        return self._handle(buffer, command, options)

    def close(self, handle: EnhancedHandle) -> None:
        self._host.exec_lua(_CLOSE_LUA, list(handle.command), handle.options)
        if self._host.is_buffer_valid(handle.buffer):
            self._host.delete_buffer(handle.buffer)

    def focus(self, handle: EnhancedHandle) -> None:
        if not self._host.exec_lua(_FOCUS_LUA, list(handle.command), handle.options):
            raise GeminiCliError(
                "snacks terminal no longer exists",
                kind=ErrorKind.STATE,
                hint="Run :Gemini to start a new terminal.",
            )

    def hide(self, handle: EnhancedHandle) -> None:
        self._host.exec_lua(_HIDE_LUA, list(handle.command), handle.options)

    def is_valid(self, handle: EnhancedHandle) -> bool:
        return self._host.is_buffer_valid(handle.buffer)

    def is_visible(self, handle: EnhancedHandle) -> bool:
        return bool(self._host.exec_lua(_VISIBLE_LUA, list(handle.command), handle.options))

    def send(self, handle: EnhancedHandle, text: str) -> None:
        channel = self._host.buffer_option(handle.buffer, "channel")
        if not isinstance(channel, int) or channel <= 0:
            raise GeminiCliError(
                "No channel found for terminal",
                kind=ErrorKind.TRANSPORT,
                hint="Reopen the terminal with :Gemini.",
            )
        logger.debug("Sending to channel %s: %r", channel, text)
        written = self._host.send_to_channel(channel, text)
        if written <= 0:
            raise GeminiCliError(
                "Failed to send to terminal channel",
                kind=ErrorKind.TRANSPORT,
                hint="The assistant process may have exited.",
            )
        logger.debug("Wrote %s bytes via channel %s", written, channel)

    def _handle(self, buffer: object, command: list[str], options: dict[str, object]) -> EnhancedHandle:
        if not isinstance(buffer, int) or buffer <= 0:
            raise GeminiCliError(
                "snacks.nvim did not create a terminal",
                kind=ErrorKind.BACKEND_UNAVAILABLE,
                hint="Check that snacks.nvim is set up.",
            )
        return EnhancedHandle(buffer=buffer, command=tuple(command), options=options)
