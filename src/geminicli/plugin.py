"""Neovim remote plugin exposing the Gemini commands."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Callable, Mapping, Sequence

import pynvim
from pynvim.api import Nvim

from geminicli.config import PluginConfig, load_user_options, merge_config
from geminicli.errors import GeminiCliError, user_facing_error
from geminicli.host import TERMINAL_EXIT_EVENT, EditorHost, NvimHost
from geminicli.logging import NOTIFIED, configure_logging
from geminicli.orchestrator import Orchestrator
from geminicli.terminal import TerminalSession

logger = py_logging.getLogger(__name__)

SessionFactory = Callable[[EditorHost, PluginConfig], TerminalSession]


def explicit_range(
    line_range: Sequence[int] | None,
    visual_marks: tuple[int, int],
    cursor_line: int,
) -> tuple[int, int] | None:
    """Return the command range when the user actually typed one.

    A rangeless ``:GeminiSend`` reports the cursor line as ``line1,line2``, so a
    single-line range on the cursor line only counts when it matches the last
    visual marks. Any other range (``:5GeminiSend``, ``:3,7GeminiSend``) counts.
    """
    if not line_range or len(line_range) < 2:
        return None
    line1, line2 = int(line_range[0]), int(line_range[1])
    if line1 == line2 == cursor_line and (line1, line2) != visual_marks:
        return None
    return line1, line2


class GeminiCli:
    """Plugin state: configuration plus the orchestrator built from it."""

    def __init__(self, host: EditorHost, *, session_factory: SessionFactory | None = None) -> None:
        self._host = host
        self._session_factory = session_factory or (
            lambda target, config: TerminalSession.for_config(target, config.terminal)
        )
        self._config: PluginConfig | None = None
        self._orchestrator: Orchestrator | None = None

    @property
    def initialized(self) -> bool:
        return self._orchestrator is not None

    @property
    def config(self) -> PluginConfig | None:
        return self._config

    def setup(self, opts: Mapping[str, object] | None = None) -> None:
        if self.initialized:
            logger.warning("geminicli.nvim already initialized")
            return

        configure_logging(notifier=self._host.notify)
        config = merge_config(opts)
        configure_logging(config.log.level, log_file=config.log.file, notifier=self._host.notify)

        self._config = config
        self._orchestrator = Orchestrator(self._host, self._session_factory(self._host, config))
        logger.debug("geminicli.nvim initialized with %s", config.model_dump())

    def orchestrator(self) -> Orchestrator:
        if self._orchestrator is None:
            self.setup(load_user_options())
        if self._orchestrator is None:
            raise GeminiCliError("Plugin setup did not complete")
        return self._orchestrator

    def run(self, action: Callable[[Orchestrator], None]) -> None:
        try:
            action(self.orchestrator())
        except GeminiCliError as exc:
            message = user_facing_error(exc.message, hint=exc.hint)
            self._host.notify(message, py_logging.ERROR)
            logger.error("%s", message, extra={NOTIFIED: True})


@pynvim.plugin
class GeminiCliPlugin:
    def __init__(self, nvim: Nvim) -> None:
        self._nvim = nvim
        self._host = NvimHost(nvim)
        self._cli = GeminiCli(self._host)

    @pynvim.function("GeminiSetup", sync=True)
    def setup_function(self, args: list[object]) -> None:
        opts = args[0] if args and isinstance(args[0], Mapping) else None
        self._cli.setup(opts)

    @pynvim.autocmd("VimEnter", pattern="*", sync=True)
    def on_vim_enter(self) -> None:
        if not self._cli.initialized:
            self._cli.setup(load_user_options())

    @pynvim.command("Gemini", nargs=0, sync=True)
    def open_command(self) -> None:
        self._cli.run(lambda orchestrator: orchestrator.open_terminal())

    @pynvim.command("GeminiClose", nargs=0, sync=True)
    def close_command(self) -> None:
        self._cli.run(lambda orchestrator: orchestrator.close_terminal())

    @pynvim.command("GeminiToggle", nargs=0, sync=True)
    def toggle_command(self) -> None:
        self._cli.run(lambda orchestrator: orchestrator.toggle_terminal())

    @pynvim.command("GeminiSend", nargs="?", range="", complete="file", sync=True)
    def send_command(self, args: list[str], line_range: list[int]) -> None:
        text = args[0] if args else ""
        marks = (self._host.position("'<")[0], self._host.position("'>")[0])
        selected = explicit_range(line_range, marks, self._host.position(".")[0])
        self._cli.run(lambda orchestrator: orchestrator.send(text, selected))

    @pynvim.command("GeminiAdd", nargs=0, sync=True)
    def add_command(self) -> None:
        self._cli.run(lambda orchestrator: orchestrator.add_file())

    @pynvim.rpc_export(TERMINAL_EXIT_EVENT, sync=False)
    def on_terminal_exit(self, job_id: int, exit_code: int) -> None:
        self._host.handle_terminal_exit(job_id, exit_code)
