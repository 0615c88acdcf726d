"""Plugin option defaults, merging and validation."""

from __future__ import annotations

import logging as py_logging
import shlex
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from geminicli.logging import default_log_path

logger = py_logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/geminicli/config.toml").expanduser()
DEFAULT_TERMINAL_CMD = "gemini"
DEFAULT_SPLIT_PERCENTAGE = 0.30

_VALID_PROVIDERS = {"auto", "native", "enhanced"}
_PROVIDER_ALIASES = {"snacks": "enhanced"}
_VALID_SIDES = {"right", "left", "bottom", "top"}
_VALID_LEVELS = {"debug", "info", "warn", "error"}


class TerminalConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    provider: Literal["auto", "native", "enhanced"] = "auto"
    split_side: Literal["right", "left", "bottom", "top"] = "right"
    split_width_percentage: float = DEFAULT_SPLIT_PERCENTAGE
    split_height_percentage: float = DEFAULT_SPLIT_PERCENTAGE
    terminal_cmd: str | list[str] = DEFAULT_TERMINAL_CMD

    @field_validator("provider", mode="before")
    @classmethod
    def _validate_provider(cls, value: object) -> object:
        if isinstance(value, str):
            value = _PROVIDER_ALIASES.get(value, value)
        if not isinstance(value, str) or value not in _VALID_PROVIDERS:
            raise ValueError(f"Invalid terminal provider: {value}")
        return value

    @field_validator("split_side", mode="before")
    @classmethod
    def _validate_side(cls, value: object) -> object:
        if not isinstance(value, str) or value not in _VALID_SIDES:
            raise ValueError(f"Invalid terminal position: {value}")
        return value

    @field_validator("split_width_percentage", "split_height_percentage")
    @classmethod
    def _validate_percentage(cls, value: float, info: ValidationInfo) -> float:
        if value <= 0 or value >= 1:
            name = info.field_name or "percentage"
            raise ValueError(f"{name} must be between 0 and 1")
        return value

    @field_validator("terminal_cmd")
    @classmethod
    def _validate_terminal_cmd(cls, value: str | list[str]) -> str | list[str]:
        if isinstance(value, str):
            if not value.strip():
                raise ValueError("terminal_cmd must be a non-empty string")
            try:
                words = shlex.split(value)
            except ValueError as exc:
                raise ValueError(f"terminal_cmd is not a valid shell command: {exc}") from exc
            if not words or not words[0]:
                raise ValueError("terminal_cmd must name an executable")
            return value
        if not value or any(not isinstance(part, str) or not part for part in value):
            raise ValueError("terminal_cmd must be a non-empty list of non-empty strings")
        return value


class LogConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    level: Literal["debug", "info", "warn", "error"] = "info"
    file: str = Field(default_factory=lambda: str(default_log_path()))

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: object) -> object:
        if not isinstance(value, str) or value not in _VALID_LEVELS:
            raise ValueError(f"Invalid log level: {value}")
        return value


class PluginConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    terminal: TerminalConfig = Field(default_factory=TerminalConfig)
    log: LogConfig = Field(default_factory=LogConfig)


def default_options() -> dict[str, object]:
    return PluginConfig().model_dump()


def deep_merge(base: Mapping[str, object], override: Mapping[str, object]) -> dict[str, object]:
    result: dict[str, object] = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def _describe(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        message = str(error.get("msg", ""))
        messages.append(message.removeprefix("Value error, "))
    return "; ".join(messages) or str(exc)


def merge_config(opts: Mapping[str, object] | None = None) -> PluginConfig:
    merged = deep_merge(default_options(), opts or {})
    try:
        return PluginConfig.model_validate(merged)
    except ValidationError as exc:
        logger.error("geminicli: Invalid configuration: %s", _describe(exc))
        return PluginConfig()


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def load_user_options(path: str | Path | None = None) -> dict[str, object]:
    resolved = get_config_path(path)
    if not resolved.exists():
        return {}
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", resolved, exc)
        return {}
    if not isinstance(raw, dict):
        return {}
    return {key: value for key, value in raw.items() if key in {"terminal", "log"}}
