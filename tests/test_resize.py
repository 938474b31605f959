import pytest

from vtterm.buffer import TermPos
from vtterm.resize import ResizableTerminalBuffer


def write_lines(buffer, lines):
    for i, text in enumerate(lines):
        if i:
            buffer.insert_cr()
            buffer.insert_lf()
        for char in text:
            buffer.insert_char(char)


def text(buffer, row):
    return buffer.get_string(row, 0, buffer.width - 1)[0]


@pytest.mark.parametrize(
    "width,height", [(3, 10), (1025, 10), (10, 1), (10, 1025)]
)
def test_invalid_sizes_raise(width, height):
    buffer = ResizableTerminalBuffer(10, 5, 10)
    with pytest.raises(ValueError):
        buffer.resize_to(width, height)


def test_invalid_size_leaves_buffer_unchanged():
    buffer = ResizableTerminalBuffer(10, 5, 10)
    with pytest.raises(ValueError):
        buffer.resize_to(2, 5)
    assert (buffer.width, buffer.height) == (10, 5)


def test_same_size_changes_history_capacity():
    buffer = ResizableTerminalBuffer(10, 5, 10)
    buffer.resize_to(10, 5, 20)
    assert buffer.history_capacity == 20
    buffer.resize_to(10, 5, 0)
    assert buffer.history_capacity == 0
    assert buffer.history_size == 0


def test_resize_keeps_history_capacity_by_default():
    buffer = ResizableTerminalBuffer(10, 5, 30)
    buffer.resize_to(20, 6)
    assert buffer.history_capacity == 30
    assert (buffer.width, buffer.height) == (20, 6)


def test_narrowing_rewraps_line():
    buffer = ResizableTerminalBuffer(10, 5, 10)
    write_lines(buffer, ["abcdef"])
    buffer.resize_to(4, 5)
    assert text(buffer, 0) == "abcd"
    assert text(buffer, 1) == "ef"
    assert buffer.history_line_at(0).soft_break is True
    assert buffer.cursor == TermPos(2, 1)


def test_rewrap_round_trip_restores_text_and_cursor():
    buffer = ResizableTerminalBuffer(10, 5, 10)
    write_lines(buffer, ["abcdef"])
    original_cursor = buffer.cursor
    buffer.resize_to(4, 5)
    buffer.resize_to(10, 5)
    assert text(buffer, 0) == "abcdef"
    assert buffer.line_length(1) == 0
    assert buffer.cursor == original_cursor


def test_narrowing_pushes_overflow_into_history():
    buffer = ResizableTerminalBuffer(10, 2, 10)
    write_lines(buffer, ["abcdef", "gh"])
    buffer.resize_to(4, 2)
    assert buffer.history_size == 1
    assert text(buffer, -1) == "abcd"
    assert text(buffer, 0) == "ef"
    assert text(buffer, 1) == "gh"
    assert buffer.cursor.y == 1


def test_shrinking_height_moves_top_lines_to_history():
    buffer = ResizableTerminalBuffer(10, 5, 10)
    write_lines(buffer, ["l0", "l1", "l2", "l3", "l4"])
    buffer.resize_to(10, 3)
    assert buffer.history_size == 2
    assert text(buffer, -1) == "l1"
    assert text(buffer, -2) == "l0"
    assert [text(buffer, row) for row in range(3)] == ["l2", "l3", "l4"]
    assert buffer.cursor == TermPos(2, 2)


def test_growing_height_keeps_content_and_clears_new_lines():
    buffer = ResizableTerminalBuffer(10, 3, 10)
    write_lines(buffer, ["x", "y"])
    buffer.resize_to(10, 6)
    assert buffer.height == 6
    assert text(buffer, 0) == "x"
    assert text(buffer, 1) == "y"
    assert all(buffer.line_length(row) == 0 for row in range(2, 6))


def test_width_change_resets_tab_stops():
    buffer = ResizableTerminalBuffer(10, 3)
    buffer.clear_all_tab_stops()
    buffer.resize_to(20, 3)
    buffer.insert_tab()
    assert buffer.cursor.x == 8


def test_set_history_capacity_keeps_newest_lines():
    buffer = ResizableTerminalBuffer(10, 2, 10)
    write_lines(buffer, ["h0", "h1", "h2", "h3", "h4", "h5"])
    assert buffer.history_size == 4
    buffer.set_history_capacity(2)
    assert buffer.history_capacity == 2
    assert buffer.history_size == 2
    assert text(buffer, -1) == "h3"
    assert text(buffer, -2) == "h2"


def test_set_history_capacity_zero_drops_history():
    buffer = ResizableTerminalBuffer(10, 2, 10)
    write_lines(buffer, ["a", "b", "c"])
    buffer.set_history_capacity(0)
    assert buffer.history_size == 0
    assert buffer.history_line_at(-1) is None


def test_rewrap_preserves_history_content_when_widening():
    buffer = ResizableTerminalBuffer(10, 2, 10)
    write_lines(buffer, ["one", "two", "three"])
    before = [text(buffer, row) for row in range(-buffer.history_size, 2)]
    buffer.resize_to(12, 2)
    after = [text(buffer, row) for row in range(-buffer.history_size, 2)]
    assert after == before
    assert buffer.width == 12
    assert buffer.history_capacity == 10