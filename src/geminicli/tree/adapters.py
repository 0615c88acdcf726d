"""Selected-path lookups for the supported file-tree plugins.

Each adapter runs one Lua probe that collects the raw tree state, then decides
in Python which source wins: an explicit multi-selection first, the entry
under the cursor second.
"""

from __future__ import annotations

import logging as py_logging
from collections.abc import Mapping
from typing import Protocol, cast

from geminicli.errors import ErrorKind, GeminiCliError
from geminicli.host import EditorHost
from geminicli.tree.models import OilEntry, TreeKind, TreeProbe

logger = py_logging.getLogger(__name__)

NOT_FOUND = "No file found under cursor"

_NVIM_TREE_LUA = """
local ok, api = pcall(require, "nvim-tree.api")
if not ok then
  return { available = false }
end
local selected = {}
for _, mark in ipairs(api.marks.list() or {}) do
  if (mark.type == "file" or mark.type == "directory") and mark.absolute_path and mark.absolute_path ~= "" then
    table.insert(selected, mark.absolute_path)
  end
end
local node = api.tree.get_node_under_cursor()
return { available = true, selected = selected, cursor = node and node.absolute_path or nil }
"""

_NEO_TREE_LUA = """
local ok, manager = pcall(require, "neo-tree.sources.manager")
if not ok then
  return { available = false }
end
local state = manager.get_state("filesystem")
if not state or not state.tree then
  return { available = true, state = false }
end
local function path_of(node)
  if node and node.path and node.path ~= "" then
    return node.path
  end
  return nil
end
local visual = {}
local mode = vim.fn.mode()
if (mode == "v" or mode == "V" or mode == "\\22") and state.winid == vim.api.nvim_get_current_win() then
  local first, last = vim.fn.line("v"), vim.fn.line(".")
  if first > last then
    first, last = last, first
  end
  for lnum = first, last do
    local path = path_of(state.tree:get_node(lnum))
    if path then
      table.insert(visual, path)
    end
  end
end
local nodes = state.tree.get_selection and state.tree:get_selection() or nil
if not nodes or #nodes == 0 then
  nodes = state.selected_nodes or {}
end
local selected = {}
for _, node in ipairs(nodes) do
  local path = path_of(node)
  if path then
    table.insert(selected, path)
  end
end
return {
  available = true,
  state = true,
  visual = visual,
  selected = selected,
  cursor = path_of(state.tree:get_node()),
}
"""

_OIL_LUA = """
local ok, oil = pcall(require, "oil")
if not ok then
  return { available = false }
end
local directory = oil.get_current_dir()
if not directory then
  return { available = true }
end
local function describe(entry)
  if entry and entry.name then
    return { name = entry.name, type = entry.type }
  end
  return nil
end
local visual = {}
local mode = vim.fn.mode()
if mode == "v" or mode == "V" then
  local first, last = vim.fn.line("v"), vim.fn.line(".")
  if first > last then
    first, last = last, first
  end
  for lnum = first, last do
    local entry = describe(oil.get_entry_on_line(0, lnum))
    if entry then
      table.insert(visual, entry)
    end
  end
end
return {
  available = true,
  directory = directory,
  visual = visual,
  cursor = describe(oil.get_cursor_entry()),
}
"""

_MINI_FILES_LUA = """
local ok, mini_files = pcall(require, "mini.files")
if not ok then
  return { available = false }
end
local entry = mini_files.get_fs_entry()
return { available = true, cursor = entry and entry.path or nil }
"""


def _as_list(value: object) -> list[object]:
    # Lua sends an empty table as either [] or {}.
    if isinstance(value, list):
        return value
    if isinstance(value, Mapping):
        return list(value.values())
    return []


def _paths(values: object) -> list[str]:
    return [item for item in _as_list(values) if isinstance(item, str) and item]


def _not_found() -> GeminiCliError:
    return GeminiCliError(NOT_FOUND, kind=ErrorKind.STATE)


class TreeAdapter(Protocol):
    kind: TreeKind

    def get_selected_paths(self, host: EditorHost) -> list[str]: ...


class _ProbeAdapter:
    kind: TreeKind
    plugin_name: str
    probe_lua: str

    def _probe(self, host: EditorHost) -> TreeProbe:
        raw = host.exec_lua(self.probe_lua)
        if not isinstance(raw, Mapping) or not raw.get("available"):
            raise GeminiCliError(
                f"{self.plugin_name} not available",
                kind=ErrorKind.BACKEND_UNAVAILABLE,
            )
        return cast(TreeProbe, dict(raw))


class NvimTreeAdapter(_ProbeAdapter):
    kind = TreeKind.NVIM_TREE
    plugin_name = "nvim-tree"
    probe_lua = _NVIM_TREE_LUA

    def get_selected_paths(self, host: EditorHost) -> list[str]:
        probe = self._probe(host)
        marked = _paths(probe.get("selected"))
        if marked:
            return marked
        cursor = _paths([probe.get("cursor")])
        if cursor:
            return cursor
        raise _not_found()


class NeoTreeAdapter(_ProbeAdapter):
    kind = TreeKind.NEO_TREE
    plugin_name = "neo-tree"
    probe_lua = _NEO_TREE_LUA

    def get_selected_paths(self, host: EditorHost) -> list[str]:
        probe = self._probe(host)
        if not probe.get("state"):
            raise GeminiCliError(
                "neo-tree filesystem state not available",
                kind=ErrorKind.STATE,
            )
        for source in (probe.get("visual"), probe.get("selected"), [probe.get("cursor")]):
            paths = _paths(source)
            if paths:
                return paths
        raise _not_found()


class OilAdapter(_ProbeAdapter):
    kind = TreeKind.OIL
    plugin_name = "oil.nvim"
    probe_lua = _OIL_LUA

    def get_selected_paths(self, host: EditorHost) -> list[str]:
        probe = self._probe(host)
        directory = probe.get("directory")
        if not isinstance(directory, str) or not directory:
            raise GeminiCliError(
                "Could not get current directory from oil",
                kind=ErrorKind.STATE,
            )
        for source in (probe.get("visual"), [probe.get("cursor")]):
            paths = [
                _entry_path(directory, cast(OilEntry, entry))
                for entry in _as_list(source)
                if isinstance(entry, Mapping) and entry.get("name")
            ]
            if paths:
                return paths
        raise _not_found()


class MiniFilesAdapter(_ProbeAdapter):
    kind = TreeKind.MINI_FILES
    plugin_name = "mini.files"
    probe_lua = _MINI_FILES_LUA

    def get_selected_paths(self, host: EditorHost) -> list[str]:
        cursor = _paths([self._probe(host).get("cursor")])
        if cursor:
            return cursor
        raise _not_found()


def _entry_path(directory: str, entry: OilEntry) -> str:
    path = f"{directory}{entry['name']}"
    if entry.get("type") == "directory":
        path += "/"
    return path


ADAPTERS: dict[TreeKind, TreeAdapter] = {
    TreeKind.NVIM_TREE: NvimTreeAdapter(),
    TreeKind.NEO_TREE: NeoTreeAdapter(),
    TreeKind.OIL: OilAdapter(),
    TreeKind.MINI_FILES: MiniFilesAdapter(),
}


def get_selected_paths(host: EditorHost, kind: TreeKind) -> list[str]:
    paths = ADAPTERS[kind].get_selected_paths(host)
    logger.debug("Selected %d path(s) from %s", len(paths), kind.value)
    return paths
