import pytest

from vtterm.buffer import (
    TAB_WIDTH,
    BasicTerminalBuffer,
    CellKind,
    DirtyInfo,
    TermPos,
)
from vtterm.history import A_WIDTH, Attributes


def write(buffer, text):
    for char in text:
        buffer.insert_char(char)


def write_rows(buffer, rows):
    for index, row in enumerate(rows):
        if index:
            buffer.insert_cr()
            buffer.insert_lf()
        write(buffer, row)


def line_text(buffer, row):
    line = buffer.history_line_at(row)
    return "".join(cell.character for cell in line.cells[: line.length])


def test_invalid_size_raises():
    with pytest.raises(ValueError):
        BasicTerminalBuffer(0, 5)


def test_insert_chars_and_get_string():
    buffer = BasicTerminalBuffer(20, 5)
    write(buffer, "hello")
    text, attributes, count = buffer.get_string(0, 0, 19)
    assert text == "hello"
    assert count == len("hello")
    assert attributes == Attributes()
    assert buffer.cursor == TermPos(len("hello"), 0)
    assert buffer.line_length(0) == len("hello")


def test_soft_wrap_at_line_end():
    buffer = BasicTerminalBuffer(4, 3)
    write(buffer, "abcde")
    first = buffer.history_line_at(0)
    assert first.soft_break is True
    assert buffer.line_length(0) == buffer.width
    assert line_text(buffer, 1) == "e"


def test_scrolled_lines_go_to_history():
    buffer = BasicTerminalBuffer(10, 2, 10)
    write_rows(buffer, ["a", "b", "c"])
    assert buffer.history_size == 1
    assert line_text(buffer, -1) == "a"
    assert line_text(buffer, 0) == "b"
    assert line_text(buffer, 1) == "c"


def test_insert_tab_moves_to_next_stop():
    buffer = BasicTerminalBuffer(20, 2)
    buffer.insert_tab()
    assert buffer.cursor.x == TAB_WIDTH


def test_clear_all_tab_stops_goes_to_end():
    buffer = BasicTerminalBuffer(20, 2)
    buffer.clear_all_tab_stops()
    buffer.insert_tab()
    assert buffer.cursor.x == buffer.width - 1


def test_back_tab():
    buffer = BasicTerminalBuffer(20, 2)
    buffer.set_cursor(TAB_WIDTH + 2, 0)
    buffer.insert_cursor_back_tab(1)
    assert buffer.cursor.x == TAB_WIDTH


def test_set_tab_stop():
    buffer = BasicTerminalBuffer(20, 2)
    buffer.clear_all_tab_stops()
    buffer.set_tab_stop(5)
    buffer.insert_tab()
    assert buffer.cursor.x == 5
    buffer.clear_tab_stop(5)
    buffer.set_cursor(0, 0)
    buffer.insert_tab()
    assert buffer.cursor.x == buffer.width - 1


def test_set_cursor_is_clamped():
    buffer = BasicTerminalBuffer(10, 5)
    buffer.set_cursor(100, 100)
    assert buffer.cursor == TermPos(buffer.width - 1, buffer.height - 1)
    buffer.set_cursor(-3, -3)
    assert buffer.cursor == TermPos(0, 0)


def test_origin_mode_uses_scroll_region():
    buffer = BasicTerminalBuffer(10, 8)
    buffer.set_scroll_region(2, 5)
    buffer.set_origin_mode(True)
    assert buffer.cursor.y == 2
    buffer.set_cursor(0, 100)
    assert buffer.cursor.y == 5


def test_save_and_restore_cursor():
    buffer = BasicTerminalBuffer(10, 5)
    buffer.set_cursor(3, 2)
    buffer.save_cursor()
    buffer.set_cursor(7, 4)
    buffer.restore_cursor()
    assert buffer.cursor == TermPos(3, 2)


def test_move_cursor_relative():
    buffer = BasicTerminalBuffer(10, 5)
    buffer.move_cursor_right(4)
    buffer.move_cursor_down(2)
    buffer.move_cursor_left(1)
    buffer.move_cursor_up(1)
    assert buffer.cursor == TermPos(3, 1)
    buffer.next_line()
    assert buffer.cursor == TermPos(0, 2)


def test_delete_chars():
    buffer = BasicTerminalBuffer(20, 3)
    write(buffer, "abcdef")
    buffer.set_cursor_x(1)
    buffer.delete_chars(2)
    assert line_text(buffer, 0) == "adef"


def test_insert_mode_inserts():
    buffer = BasicTerminalBuffer(20, 3)
    write(buffer, "ac")
    buffer.set_insert_mode(False)
    buffer.set_cursor_x(1)
    buffer.insert_char("b")
    assert line_text(buffer, 0) == "abc"


def test_erase_chars_blanks_cells():
    buffer = BasicTerminalBuffer(20, 3)
    write(buffer, "abcdef")
    buffer.set_cursor_x(1)
    buffer.erase_chars(2)
    assert line_text(buffer, 0) == "a  def"


def test_erase_below_truncates_and_clears():
    buffer = BasicTerminalBuffer(20, 3)
    write_rows(buffer, ["abc", "def", "ghi"])
    buffer.set_cursor(1, 1)
    buffer.erase_below()
    assert line_text(buffer, 0) == "abc"
    assert line_text(buffer, 1) == "d"
    assert buffer.line_length(2) == 0


def test_erase_above():
    buffer = BasicTerminalBuffer(20, 3)
    write_rows(buffer, ["abc", "def", "ghi"])
    buffer.set_cursor(1, 1)
    buffer.erase_above()
    assert buffer.line_length(0) == 0
    assert line_text(buffer, 1) == "  f"
    assert line_text(buffer, 2) == "ghi"


def test_erase_all_moves_screen_to_history():
    buffer = BasicTerminalBuffer(10, 3, 10)
    write_rows(buffer, ["a", "b"])
    buffer.erase_all()
    assert all(buffer.line_length(row) == 0 for row in range(buffer.height))
    assert buffer.history_size == buffer.height
    buffer.erase_scrollback()
    assert buffer.history_size == 0


def test_delete_lines_shifts_up():
    buffer = BasicTerminalBuffer(10, 4)
    write_rows(buffer, ["a", "b", "c", "d"])
    buffer.set_cursor(0, 1)
    buffer.delete_lines(1)
    assert [line_text(buffer, row) for row in range(4)] == ["a", "c", "d", ""]


def test_insert_lines_shifts_down():
    buffer = BasicTerminalBuffer(10, 4)
    write_rows(buffer, ["a", "b", "c", "d"])
    buffer.set_cursor(0, 1)
    buffer.insert_lines(1)
    assert [line_text(buffer, row) for row in range(4)] == ["a", "", "b", "c"]


def test_scroll_by_and_reverse_index():
    buffer = BasicTerminalBuffer(10, 3)
    write_rows(buffer, ["a", "b", "c"])
    buffer.scroll_by(-1)
    assert [line_text(buffer, row) for row in range(3)] == ["", "a", "b"]
    buffer.set_cursor(0, 0)
    buffer.insert_ri()
    assert [line_text(buffer, row) for row in range(3)] == ["", "", "a"]


def test_full_width_char_cells():
    buffer = BasicTerminalBuffer(10, 2)
    buffer.insert_char("中")
    kind, char, attributes = buffer.get_char(0, 0)
    assert kind is CellKind.A_CHAR
    assert char == "中"
    assert attributes.state & A_WIDTH
    assert buffer.get_char(0, 1)[0] is CellKind.IN_STRING
    assert buffer.get_char(0, 5)[0] is CellKind.NO_CHAR
    assert buffer.is_full_width_char(0, 1) is True
    assert buffer.cursor.x == 2


def test_insert_space():
    buffer = BasicTerminalBuffer(20, 2)
    write(buffer, "abc")
    buffer.set_cursor_x(1)
    buffer.insert_space(2)
    assert line_text(buffer, 0) == "a  bc"


def test_fill_screen():
    buffer = BasicTerminalBuffer(6, 3)
    attributes = Attributes(state=1)
    buffer.fill_screen("E", attributes)
    for row in range(buffer.height):
        assert line_text(buffer, row) == "E" * buffer.width
    assert buffer.get_cell_attributes(0, 0) == (attributes, buffer.width)


def test_get_cell_attributes_counts_run():
    buffer = BasicTerminalBuffer(10, 2)
    bold = Attributes(state=1)
    buffer.attributes = bold
    write(buffer, "ab")
    buffer.attributes = Attributes()
    write(buffer, "c")
    assert buffer.get_cell_attributes(0, 0) == (bold, 2)
    text, attributes, count = buffer.get_string(0, 0, 9)
    assert (text, attributes, count) == ("ab", bold, 2)


def test_synchronize_with_copies_lines():
    source = BasicTerminalBuffer(10, 3)
    write_rows(source, ["x", "yz"])
    dest = BasicTerminalBuffer(10, 3)
    dest.synchronize_with(source, 0, 0, 2)
    assert [line_text(dest, row) for row in range(3)] == ["x", "yz", ""]
    source.insert_char("q")
    assert line_text(dest, 1) == "yz"


def test_clear_resets_cursor():
    buffer = BasicTerminalBuffer(10, 3, 5)
    write_rows(buffer, ["a", "b", "c", "d"])
    buffer.clear(True)
    assert buffer.cursor == TermPos(0, 0)
    assert buffer.history_size == 0
    assert all(buffer.line_length(row) == 0 for row in range(buffer.height))


def test_insert_last_char_repeats():
    buffer = BasicTerminalBuffer(10, 2)
    buffer.insert_char("z")
    buffer.insert_last_char()
    assert line_text(buffer, 0) == "zz"


def test_insert_marks_dirty_region_and_message_sent():
    buffer = BasicTerminalBuffer(10, 3)
    buffer.dirty_info.reset()
    assert buffer.dirty_info.message_sent is False
    buffer.set_cursor(0, 1)
    buffer.insert_char("a")
    buffer.insert_char("b")
    assert buffer.dirty_info.message_sent is True
    assert buffer.dirty_info.dirty_top == 1
    assert buffer.dirty_info.dirty_bottom == 1
    buffer.dirty_info.reset()
    buffer.set_cursor(0, 2)
    buffer.insert_char("c")
    assert buffer.dirty_info.message_sent is True
    assert (buffer.dirty_info.dirty_top, buffer.dirty_info.dirty_bottom) == (2, 2)


def test_dirty_info_region():
    info = DirtyInfo()
    assert info.is_dirty_region_valid() is False
    info.extend_dirty_region(3, 5)
    info.extend_dirty_region(1, 4)
    assert (info.dirty_top, info.dirty_bottom) == (1, 5)
    assert info.is_dirty_region_valid() is True
    info.reset()
    assert info.is_dirty_region_valid() is False


def test_term_pos_ordering():
    assert TermPos(5, 0) < TermPos(0, 1)
    assert TermPos(1, 2) < TermPos(2, 2)
    assert TermPos(3, 3) >= TermPos(3, 3)
    assert sorted([TermPos(0, 2), TermPos(9, 1)]) == [TermPos(9, 1), TermPos(0, 2)]


def test_line_color_follows_cr():
    buffer = BasicTerminalBuffer(10, 2)
    colored = Attributes(state=0, background=3)
    buffer.attributes = colored
    buffer.insert_cr()
    assert buffer.get_line_color(0) == colored
    assert buffer.get_line_color(buffer.height + 1) == Attributes()