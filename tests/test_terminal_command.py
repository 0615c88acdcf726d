from __future__ import annotations

import logging as py_logging
from typing import TYPE_CHECKING

import pytest

from geminicli.config import TerminalConfig
from geminicli.errors import ErrorKind, GeminiCliError
from geminicli.terminal import (
    SplitGeometry,
    SplitSide,
    compute_geometry,
    placeholder_command,
    resolve_startup_command,
    split_terminal_cmd,
)

if TYPE_CHECKING:
    from conftest import FakeEditorHost


def test_split_terminal_cmd_uses_shell_words() -> None:
    assert split_terminal_cmd("gemini --model 'gemini pro'") == ["gemini", "--model", "gemini pro"]


def test_split_terminal_cmd_keeps_lists() -> None:
    assert split_terminal_cmd(["gemini", "-y"]) == ["gemini", "-y"]


def test_split_terminal_cmd_rejects_empty() -> None:
    with pytest.raises(GeminiCliError) as exc:
        split_terminal_cmd("")

    assert exc.value.kind == ErrorKind.CONFIG


def test_placeholder_prints_warning_then_stays_interactive() -> None:
    command = placeholder_command("gemini")

    assert command[:2] == ["sh", "-c"]
    assert "Warning: gemini command not found. Please install gemini first." in command[2]
    assert command[2].endswith('exec "${SHELL:-sh}"')


def test_resolve_startup_command_uses_executable_when_present(host: FakeEditorHost) -> None:
    assert resolve_startup_command(host, "gemini --yolo") == ["gemini", "--yolo"]


def test_resolve_startup_command_falls_back_to_placeholder(
    host: FakeEditorHost, caplog: pytest.LogCaptureFixture
) -> None:
    host.executables = set()

    with caplog.at_level(py_logging.WARNING, logger="geminicli"):
        command = resolve_startup_command(host, "gemini")

    assert command == placeholder_command("gemini")
    assert "gemini not found on PATH" in caplog.text


@pytest.mark.parametrize(
    ("side", "expected_size", "expected_command"),
    [
        ("right", 60, "botright 60vsplit"),
        ("left", 60, "topleft 60vsplit"),
        ("bottom", 15, "botright 15split"),
        ("top", 15, "topleft 15split"),
    ],
)
def test_compute_geometry_floors_fraction_of_screen(side: str, expected_size: int, expected_command: str) -> None:
    config = TerminalConfig(split_side=side)

    geometry = compute_geometry(config, columns=200, lines=50)

    assert geometry == SplitGeometry(side=SplitSide(side), size=expected_size)
    assert geometry.split_command == expected_command


def test_compute_geometry_never_returns_zero_size() -> None:
    config = TerminalConfig(split_side="bottom", split_height_percentage=0.01)

    assert compute_geometry(config, columns=80, lines=10).size == 1
