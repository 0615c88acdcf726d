from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from geminicli.selection import (
    BLOCK_MODE,
    NO_NAME,
    RangeKind,
    build_selection,
    exit_visual_mode,
    extract_range,
    extract_visual,
    format_for_send,
    is_visual_mode,
    relative_path,
    slice_lines,
)

if TYPE_CHECKING:
    from conftest import FakeEditorHost

_LINES = ["def greet(name):", "    message = f'hi {name}'", "    return message"]


def _visual(host: FakeEditorHost, mode: str, anchor: tuple[int, int], cursor: tuple[int, int]) -> None:
    buffer = host.add_buffer(_LINES, "/work/src/greet.py")
    host.show(buffer)
    host.mode_value = mode
    host.positions = {"v": anchor, ".": cursor}


@pytest.mark.parametrize("mode", ["v", "V", BLOCK_MODE])
def test_visual_modes_are_recognised(mode: str) -> None:
    assert is_visual_mode(mode)


@pytest.mark.parametrize("mode", ["n", "i", "t", "no", ""])
def test_other_modes_are_not_visual(mode: str) -> None:
    assert not is_visual_mode(mode)


def test_extract_visual_outside_visual_mode_returns_none(host: FakeEditorHost) -> None:
    assert extract_visual(host) is None


def test_characterwise_selection_across_lines(host: FakeEditorHost) -> None:
    _visual(host, "v", anchor=(1, 5), cursor=(2, 11))

    selection = extract_visual(host)

    assert selection is not None
    assert selection.kind == RangeKind.CHARACTER
    assert selection.text == "greet(name):\n    message"
    assert (selection.start_line, selection.end_line) == (0, 1)
    assert (selection.start_col, selection.end_col) == (4, 11)
    assert selection.source_path == "/work/src/greet.py"


def test_backwards_selection_matches_forwards(host: FakeEditorHost) -> None:
    _visual(host, "v", anchor=(2, 11), cursor=(1, 5))

    selection = extract_visual(host)

    assert selection is not None
    assert selection.text == "greet(name):\n    message"


def test_single_line_characterwise_selection(host: FakeEditorHost) -> None:
    _visual(host, "v", anchor=(3, 12), cursor=(3, 5))

    selection = extract_visual(host)

    assert selection is not None
    assert selection.text == "return m"


def test_linewise_selection_covers_whole_lines(host: FakeEditorHost) -> None:
    _visual(host, "V", anchor=(2, 9), cursor=(3, 3))

    selection = extract_visual(host)

    assert selection is not None
    assert selection.kind == RangeKind.LINE
    assert selection.text == "\n".join(_LINES[1:])
    assert selection.start_col == 0
    assert selection.end_col == len(_LINES[2])


def test_blockwise_selection_uses_column_rectangle(host: FakeEditorHost) -> None:
    # Anchor right of cursor: the block still spans columns 5..8 on every line.
    _visual(host, BLOCK_MODE, anchor=(1, 8), cursor=(3, 5))

    selection = extract_visual(host)

    assert selection is not None
    assert selection.kind == RangeKind.BLOCK
    assert selection.text == "\n".join(line[4:8] for line in _LINES)


def test_blockwise_selection_pads_short_lines_with_empty_text() -> None:
    text = slice_lines(["abcdef", "ab", "abcdefgh"], 3, 6, RangeKind.BLOCK)

    assert text == "def\n\ndef"


def test_unnamed_buffer_uses_no_name_marker(host: FakeEditorHost) -> None:
    buffer = host.add_buffer(["scratch"])
    host.show(buffer)
    host.mode_value = "V"
    host.positions = {"v": (1, 1), ".": (1, 1)}

    selection = extract_visual(host)

    assert selection is not None
    assert selection.source_path == NO_NAME
    assert not selection.has_source


def test_extract_range_is_linewise(host: FakeEditorHost) -> None:
    buffer = host.add_buffer(_LINES, "/work/src/greet.py")
    host.show(buffer)

    selection = extract_range(host, 1, 2)

    assert selection is not None
    assert selection.kind == RangeKind.LINE
    assert selection.text == "\n".join(_LINES[:2])


@pytest.mark.parametrize("bounds", [(0, 1), (3, 2)])
def test_extract_range_rejects_invalid_bounds(host: FakeEditorHost, bounds: tuple[int, int]) -> None:
    assert extract_range(host, *bounds) is None


def test_build_selection_linewise_ignores_columns() -> None:
    selection = build_selection(
        ["alpha", "beta"],
        source_path="/work/a.txt",
        start_line=0,
        end_line=1,
        start_col=3,
        end_col=1,
        kind=RangeKind.LINE,
    )

    assert selection.text == "alpha\nbeta"
    assert (selection.start_col, selection.end_col) == (0, 4)


@pytest.mark.parametrize(
    ("absolute", "cwd", "expected"),
    [
        ("/work/src/a.py", "/work", "src/a.py"),
        ("/work/src/a.py", "/work/", "src/a.py"),
        ("/work", "/work", "."),
        ("/workspace/a.py", "/work", "/workspace/a.py"),
        ("/elsewhere/a.py", "/work", "/elsewhere/a.py"),
    ],
)
def test_relative_path(absolute: str, cwd: str, expected: str) -> None:
    assert relative_path(absolute, cwd) == expected


def test_format_for_send_includes_header_with_one_based_lines(host: FakeEditorHost) -> None:
    _visual(host, "V", anchor=(2, 1), cursor=(3, 1))
    selection = extract_visual(host)
    assert selection is not None

    message = format_for_send(selection, "/work")

    assert message == "From src/greet.py (lines 2-3):\n" + "\n".join(_LINES[1:])


def test_format_for_send_without_source_is_bare_text() -> None:
    selection = build_selection(
        ["loose text"],
        source_path="",
        start_line=0,
        end_line=0,
        start_col=0,
        end_col=5,
        kind=RangeKind.CHARACTER,
    )

    assert format_for_send(selection, "/work") == "loose"


def test_exit_visual_mode_only_escapes_from_visual(host: FakeEditorHost) -> None:
    exit_visual_mode(host)
    assert host.escapes == 0

    host.mode_value = "V"
    exit_visual_mode(host)

    assert host.escapes == 1
    assert host.mode_value == "n"
