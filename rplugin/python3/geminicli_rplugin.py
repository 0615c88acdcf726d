"""Remote-plugin entry point loaded by Neovim's python3 host."""

from geminicli.plugin import GeminiCliPlugin

__all__ = ["GeminiCliPlugin"]
