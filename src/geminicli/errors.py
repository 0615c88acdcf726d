"""Error model shared by every plugin layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    CONFIG = "config"
    BACKEND_UNAVAILABLE = "backend-unavailable"
    STATE = "state"
    TRANSPORT = "transport"


@dataclass
class GeminiCliError(Exception):
    message: str
    kind: ErrorKind = ErrorKind.STATE
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


def user_facing_error(message: str, *, hint: str = "") -> str:
    sentence = message if message.endswith((".", "!", "?")) else f"{message}."
    if hint:
        return f"Gemini: {sentence} Next step: {hint}"
    return f"Gemini: {sentence}"
