"""The screen of a terminal: lines of cells, cursor, scrolling and history."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import total_ordering

from vtterm.history import A_WIDTH, Attributes, HistoryBuffer, TerminalCell, TerminalLine

HALF_WIDTH = 1
FULL_WIDTH = 2
TAB_WIDTH = 8

INT_MAX = 2**31 - 1
INT_MIN = -(2**31)

SPACE = " "


def _is_full_width(char: str) -> bool:
    return bool(char) and unicodedata.east_asian_width(char[0]) in ("W", "F")


def _restrict(value: int, low: int, high: int) -> int:
    return low if value < low else (high if value > high else value)


def _copy_cell(cell: TerminalCell) -> TerminalCell:
    return TerminalCell(cell.character, cell.attributes)


@total_ordering
@dataclass
class TermPos:
    """A position on the screen or in the history; ordered by row, then column."""

    x: int = 0
    y: int = 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TermPos):
            return NotImplemented
        return (self.y, self.x) < (other.y, other.x)

    def set_to(self, x: int, y: int) -> None:
        self.x = x
        self.y = y


class CellKind(Enum):
    """What a screen position holds."""

    NO_CHAR = 0
    IN_STRING = 1
    A_CHAR = 2


@dataclass
class DirtyInfo:
    """Which lines changed since the listener last synchronized."""

    lines_scrolled: int = 0
    dirty_top: int = INT_MAX
    dirty_bottom: int = INT_MIN
    invalidate_all: bool = False
    message_sent: bool = False

    def is_dirty_region_valid(self) -> bool:
        return self.dirty_top <= self.dirty_bottom

    def extend_dirty_region(self, top: int, bottom: int) -> None:
        if top < self.dirty_top:
            self.dirty_top = top
        if bottom > self.dirty_bottom:
            self.dirty_bottom = bottom

    def reset(self) -> None:
        self.lines_scrolled = 0
        self.dirty_top = INT_MAX
        self.dirty_bottom = INT_MIN
        self.invalidate_all = False
        self.message_sent = False


class BasicTerminalBuffer:
    """A ring of screen lines with a cursor, scroll region and history."""

    def __init__(self, width: int, height: int, history_capacity: int = 0) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("buffer width and height must be positive")
        self._width = width
        self._height = height
        self._scroll_top = 0
        self._scroll_bottom = height - 1
        self._cursor = TermPos(0, 0)
        self._saved_cursors: list[TermPos] = []
        self._soft_wrapped_cursor = False
        self._screen_offset = 0
        self._overwrite_mode = True
        self._alternate_screen_active = False
        self._origin_mode = False
        self._saved_origin_mode = False
        self._attributes = Attributes()
        self._last = "\x00"
        self._screen = self._allocate_lines(width, height)
        self._history: HistoryBuffer | None = None
        if history_capacity > 0:
            self._history = HistoryBuffer(width, history_capacity)
        self._tab_stops: list[bool] = []
        self._reset_tab_stops(width)
        self.dirty_info = DirtyInfo()

    # properties

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def history_size(self) -> int:
        return self._history.size if self._history is not None else 0

    @property
    def history_capacity(self) -> int:
        return self._history.capacity if self._history is not None else 0

    @property
    def is_alternate_screen_active(self) -> bool:
        return self._alternate_screen_active

    @property
    def attributes(self) -> Attributes:
        return self._attributes

    @attributes.setter
    def attributes(self, attributes: Attributes) -> None:
        self._attributes = attributes

    @property
    def cursor(self) -> TermPos:
        return TermPos(self._cursor.x, self._cursor.y)

    # line access

    def _line_index(self, index: int) -> int:
        return (index + self._screen_offset) % self._height

    def _line_at(self, index: int) -> TerminalLine:
        return self._screen[self._line_index(index)]

    def history_line_at(self, index: int) -> TerminalLine | None:
        """Return screen line ``index``, or history line for negative ``index``."""
        if index >= self._height:
            return None
        if index < 0 and self._history is not None:
            return self._history.get_terminal_line_at(-index - 1)
        if index + self._height < 0:
            return None
        return self._line_at(index + self._height)

    # dirty tracking

    def _invalidate(self, top: int, bottom: int) -> None:
        self.dirty_info.extend_dirty_region(top, bottom)
        if not self.dirty_info.message_sent:
            self.notify_listener()
            self.dirty_info.message_sent = True

    def _cursor_changed(self) -> None:
        if not self.dirty_info.message_sent:
            self.notify_listener()
            self.dirty_info.message_sent = True

    def _invalidate_all(self) -> None:
        self.dirty_info.invalidate_all = True
        if not self.dirty_info.message_sent:
            self.notify_listener()
            self.dirty_info.message_sent = True

    def notify_listener(self) -> None:
        """Hook called when the buffer first becomes dirty; subclasses override."""

    # whole-buffer operations

    def clear(self, reset_cursor: bool) -> None:
        self._soft_wrapped_cursor = False
        self._screen_offset = 0
        self._clear_lines(0, self._height - 1)
        if reset_cursor:
            self._cursor.set_to(0, 0)
        if self._history is not None:
            self._history.clear()
        self.dirty_info.lines_scrolled = 0
        self._invalidate(0, self._height - 1)

    def synchronize_with(
        self, other: BasicTerminalBuffer, offset: int, dirty_top: int, dirty_bottom: int
    ) -> None:
        """Copy ``other``'s dirty lines, seen from row ``offset``, onto this screen."""
        first = 0
        last = self._height - 1
        dirty_top -= offset
        dirty_bottom -= offset
        if first > dirty_bottom or dirty_top > last:
            return
        first = max(first, dirty_top)
        last = min(last, dirty_bottom)

        for i in range(first, last + 1):
            dest = self._line_at(i)
            source = other.history_line_at(i + offset)
            if source is None:
                dest.clear(self._attributes, self._width)
                continue
            dest.length = source.length
            dest.attributes = source.attributes
            dest.soft_break = source.soft_break
            if dest.length > 0:
                count = min(self._width, len(source.cells))
                dest.cells[:count] = [_copy_cell(c) for c in source.cells[:count]]

    # queries

    def is_full_width_char(self, row: int, column: int) -> bool:
        line = self.history_line_at(row)
        return (
            line is not None
            and 0 < column < line.length
            and line.cells[column - 1].attributes.is_width
        )

    def get_char(
        self, row: int, column: int
    ) -> tuple[CellKind, str | None, Attributes | None]:
        """Return the kind of cell at a position with its character and attributes."""
        line = self.history_line_at(row)
        if line is None or column < 0 or column >= line.length:
            return CellKind.NO_CHAR, None, None
        if column > 0 and line.cells[column - 1].attributes.is_width:
            return CellKind.IN_STRING, None, None
        cell = line.cells[column]
        return CellKind.A_CHAR, cell.character, cell.attributes

    def get_cell_attributes(self, row: int, column: int) -> tuple[Attributes, int]:
        """Return the attributes at a position and how many cells share them."""
        line = self.history_line_at(row)
        if line is None or column < 0:
            return Attributes(), 0
        attributes = Attributes()
        c = column
        while c < self._width:
            cell = line.cells[c]
            if c > column and attributes != cell.attributes:
                break
            attributes = cell.attributes
            c += 1
        return attributes, c - column

    def get_string(
        self, row: int, first_column: int, last_column: int
    ) -> tuple[str, Attributes, int]:
        """Return the text of a run of equally attributed cells, its attributes
        and the number of columns it spans."""
        line = self.history_line_at(row)
        if line is None:
            return "", Attributes(), 0
        last_column = min(last_column, line.length - 1)
        attributes = Attributes()
        column = first_column
        if column <= last_column:
            attributes = line.cells[column].attributes
        chars: list[str] = []
        while column <= last_column:
            cell = line.cells[column]
            if cell.attributes != attributes:
                break
            chars.append(cell.character)
            column += 1
        return "".join(chars), attributes, column - first_column

    def line_length(self, index: int) -> int:
        line = self.history_line_at(index)
        return line.length if line is not None else 0

    def get_line_color(self, index: int) -> Attributes:
        line = self.history_line_at(index)
        return line.attributes if line is not None else Attributes()

    # inserting

    def insert_char(self, char: str) -> None:
        self._last = char
        full = _is_full_width(char)
        width = FULL_WIDTH if full else HALF_WIDTH

        if self._soft_wrapped_cursor or self._cursor.x + width > self._width:
            self._soft_break_line()
        else:
            self._pad_line_to_cursor()
        self._soft_wrapped_cursor = False

        if not self._overwrite_mode:
            self._insert_gap(width)

        line = self._line_at(self._cursor.y)
        cell = line.cells[self._cursor.x]
        cell.character = char
        state = self._attributes.state | (A_WIDTH if full else 0)
        cell.attributes = replace(self._attributes, state=state)

        if line.length < self._cursor.x + width:
            line.length = self._cursor.x + width

        self._invalidate(self._cursor.y, self._cursor.y)
        self._cursor.x += width
        if self._cursor.x == self._width:
            self._cursor.x -= width
            self._soft_wrapped_cursor = True

    def insert_last_char(self) -> None:
        self.insert_char(self._last)

    def fill_screen(self, char: str, attributes: Attributes) -> None:
        width = HALF_WIDTH
        if _is_full_width(char):
            attributes = replace(attributes, state=attributes.state | A_WIDTH)
            width = FULL_WIDTH
        self._soft_wrapped_cursor = False
        count = self._width // width
        for y in range(self._height):
            line = self._line_at(y)
            for cell in line.cells[:count]:
                cell.character = char
                cell.attributes = attributes
            line.length = count
        self._invalidate(0, self._height - 1)

    def insert_cr(self) -> None:
        line = self._line_at(self._cursor.y)
        line.attributes = self._attributes
        line.soft_break = False
        self._soft_wrapped_cursor = False
        self._cursor.x = 0
        self._invalidate(self._cursor.y, self._cursor.y)
        self._cursor_changed()

    def insert_lf(self) -> None:
        self._soft_wrapped_cursor = False
        if self._cursor.y == self._scroll_bottom:
            self._scroll(self._scroll_top, self._scroll_bottom, 1)
        else:
            if self._cursor.y < self._height - 1:
                self._cursor.y += 1
            self._cursor_changed()

    def insert_ri(self) -> None:
        self._soft_wrapped_cursor = False
        if self._cursor.y == self._scroll_top:
            self._scroll(self._scroll_top, self._scroll_bottom, -1)
        else:
            if self._cursor.y > 0:
                self._cursor.y -= 1
            self._cursor_changed()

    def insert_tab(self) -> None:
        self._soft_wrapped_cursor = False
        x = self._cursor.x + 1
        while x < self._width and not self._tab_stops[x]:
            x += 1
        x = _restrict(x, 0, self._width - 1)

        if x != self._cursor.x:
            line = self._line_at(self._cursor.y)
            for i in range(self._cursor.x, x + 1):
                if line.length <= i:
                    line.cells[i].character = SPACE
                    line.cells[i].attributes = self._attributes
            self._cursor.x = x
            if line.length < x:
                line.length = x
            self._cursor_changed()

    def insert_cursor_back_tab(self, num_tabs: int) -> None:
        x = self._cursor.x - 1
        self._soft_wrapped_cursor = False
        for _ in range(max(num_tabs, 0)):
            while x >= 0 and not self._tab_stops[x]:
                x -= 1
        x = _restrict(x, 0, self._width - 1)
        if x != self._cursor.x:
            self._cursor.x = x
            self._cursor_changed()

    def set_insert_mode(self, overwrite: bool) -> None:
        """Select overwrite (True) or insert (False) mode."""
        self._overwrite_mode = bool(overwrite)

    def insert_space(self, num: int) -> None:
        if self._cursor.x + num > self._width:
            num = self._width - self._cursor.x
        if num <= 0:
            return
        self._soft_wrapped_cursor = False
        self._pad_line_to_cursor()
        self._insert_gap(num)

        line = self._line_at(self._cursor.y)
        x = self._cursor.x
        fill = line.cells[x - 1].attributes if x > 0 else self._attributes
        for cell in line.cells[x:x + num]:
            cell.character = SPACE
            cell.attributes = fill
        line.attributes = self._attributes
        self._invalidate(self._cursor.y, self._cursor.y)

    def insert_lines(self, num_lines: int) -> None:
        if self._scroll_top <= self._cursor.y < self._scroll_bottom:
            self._soft_wrapped_cursor = False
            self._scroll(self._cursor.y, self._scroll_bottom, -num_lines)

    # erasing and deleting

    def erase_chars(self, num_chars: int) -> None:
        self.erase_chars_from(self._cursor.x, num_chars)

    def erase_chars_from(self, first: int, num_chars: int) -> None:
        line = self._line_at(self._cursor.y)
        end = min(first + num_chars, self._width)
        for cell in line.cells[first:end]:
            cell.attributes = self._attributes
        line.attributes = self._attributes
        self._soft_wrapped_cursor = False

        end = min(first + num_chars, line.length)
        if first > 0 and line.cells[first - 1].attributes.is_width:
            first -= 1
        if end > 0 and line.cells[end - 1].attributes.is_width:
            end = min(end + 1, self._width)
        for cell in line.cells[first:end]:
            cell.character = SPACE
            cell.attributes = self._attributes
        self._invalidate(self._cursor.y, self._cursor.y)

    def erase_above(self) -> None:
        if self._cursor.y > 0:
            self._clear_lines(0, self._cursor.y - 1)
        self._soft_wrapped_cursor = False

        line = self._line_at(self._cursor.y)
        if self._cursor.x < line.length:
            to = self._cursor.x
            if line.cells[to].attributes.is_width:
                to = min(to + 1, self._width - 1)
            for cell in line.cells[:to + 1]:
                cell.attributes = self._attributes
                cell.character = SPACE
        else:
            line.clear(self._attributes, self._width)
        self._invalidate(self._cursor.y, self._cursor.y)

    def erase_below(self) -> None:
        self._soft_wrapped_cursor = False
        if self._cursor.y < self._height - 1:
            self._clear_lines(self._cursor.y + 1, self._height - 1)
        self.delete_columns()

    def erase_all(self) -> None:
        self._soft_wrapped_cursor = False
        self._scroll(0, self._height - 1, self._height)

    def erase_scrollback(self) -> None:
        self._soft_wrapped_cursor = False
        if self._history is not None:
            self._history.clear()
        self._invalidate(0, 0)

    def delete_chars(self, num_chars: int) -> None:
        self._soft_wrapped_cursor = False
        line = self._line_at(self._cursor.y)
        x = self._cursor.x
        if x >= line.length:
            return
        if x + num_chars < line.length:
            left = line.length - x - num_chars
            moved = [_copy_cell(c) for c in line.cells[x + num_chars:x + num_chars + left]]
            line.cells[x:x + left] = moved
            line.length = x + left
            for cell in line.cells[x + left:x + left + num_chars]:
                cell.attributes = self._attributes
        else:
            for cell in line.cells[x:line.length]:
                cell.attributes = self._attributes
            line.length = x
        self._invalidate(self._cursor.y, self._cursor.y)

    def delete_columns(self) -> None:
        self.delete_columns_from(self._cursor.x)

    def delete_columns_from(self, first: int) -> None:
        self._soft_wrapped_cursor = False
        line = self._line_at(self._cursor.y)
        for cell in line.cells[first:self._width]:
            cell.attributes = self._attributes
        if first <= line.length:
            line.length = first
            line.attributes = self._attributes
        self._invalidate(self._cursor.y, self._cursor.y)

    def delete_lines(self, num_lines: int) -> None:
        if self._scroll_top <= self._cursor.y <= self._scroll_bottom:
            self._soft_wrapped_cursor = False
            self._scroll(self._cursor.y, self._scroll_bottom, num_lines)

    # cursor

    def set_cursor(self, x: int, y: int) -> None:
        self._set_cursor(x, y, False)

    def set_cursor_x(self, x: int) -> None:
        self.set_cursor(x, self._cursor.y)

    def set_cursor_y(self, y: int) -> None:
        self.set_cursor(self._cursor.x, y)

    def save_cursor(self) -> None:
        self._saved_cursors.append(TermPos(self._cursor.x, self._cursor.y))

    def restore_cursor(self) -> None:
        if not self._saved_cursors:
            return
        top = self._saved_cursors[-1]
        self._set_cursor(top.x, top.y, True)
        self._saved_cursors.pop()

    def move_cursor_right(self, num: int) -> None:
        self.set_cursor(self._cursor.x + num, self._cursor.y)

    def move_cursor_left(self, num: int) -> None:
        self.set_cursor(self._cursor.x - num, self._cursor.y)

    def move_cursor_up(self, num: int) -> None:
        self.set_cursor(self._cursor.x, self._cursor.y - num)

    def move_cursor_down(self, num: int) -> None:
        self.set_cursor(self._cursor.x, self._cursor.y + num)

    def next_line(self) -> None:
        self.set_cursor(0, self._cursor.y + 1)

    def _set_cursor(self, x: int, y: int, absolute: bool) -> None:
        self._soft_wrapped_cursor = False
        x = _restrict(x, 0, self._width - 1)
        if self._origin_mode and not absolute:
            y = _restrict(y + self._scroll_top, self._scroll_top, self._scroll_bottom)
        else:
            y = _restrict(y, 0, self._height - 1)
        if x != self._cursor.x or y != self._cursor.y:
            self._cursor.set_to(x, y)
            self._cursor_changed()

    # scroll region and tab stops

    def scroll_by(self, num_lines: int) -> None:
        self._scroll(self._scroll_top, self._scroll_bottom, num_lines)

    def set_scroll_region(self, top: int, bottom: int) -> None:
        self._scroll_top = _restrict(top, 0, self._height - 1)
        self._scroll_bottom = _restrict(bottom, self._scroll_top, self._height - 1)
        self._set_cursor(0, 0, False)

    def set_origin_mode(self, enabled: bool) -> None:
        self._origin_mode = enabled
        self._set_cursor(0, 0, False)

    def save_origin_mode(self) -> None:
        self._saved_origin_mode = self._origin_mode

    def restore_origin_mode(self) -> None:
        self._origin_mode = self._saved_origin_mode

    def set_tab_stop(self, x: int) -> None:
        self._tab_stops[_restrict(x, 0, self._width - 1)] = True

    def clear_tab_stop(self, x: int) -> None:
        self._tab_stops[_restrict(x, 0, self._width - 1)] = False

    def clear_all_tab_stops(self) -> None:
        self._tab_stops = [False] * self._width

    # internals

    @staticmethod
    def _allocate_lines(width: int, count: int) -> list[TerminalLine]:
        lines = []
        for _ in range(count):
            line = TerminalLine()
            line.clear(Attributes(), width)
            lines.append(line)
        return lines

    def _clear_lines(self, first: int, last: int) -> None:
        first_cleared = last_cleared = -1
        for i in range(first, last + 1):
            line = self._line_at(i)
            if line.length > 0:
                if first_cleared == -1:
                    first_cleared = i
                last_cleared = i
            line.clear(self._attributes, self._width)
        if first_cleared >= 0:
            self._invalidate(first_cleared, last_cleared)

    def _reset_tab_stops(self, width: int) -> None:
        self._tab_stops = [i % TAB_WIDTH == 0 for i in range(width)]

    def _swap(self, a: int, b: int) -> None:
        self._screen[a], self._screen[b] = self._screen[b], self._screen[a]

    def _scroll(self, top: int, bottom: int, num_lines: int) -> None:
        if num_lines == 0:
            return
        if num_lines > 0:
            if top == 0:
                self._scroll_up_to_history(bottom, num_lines)
            elif num_lines >= bottom - top + 1:
                self._clear_lines(top, bottom)
            else:
                for i in range(top + num_lines, bottom + 1):
                    drop = self._line_index(i - num_lines)
                    keep = self._line_index(i)
                    self._screen[drop].clear(self._attributes, self._width)
                    self._swap(drop, keep)
                for i in range(bottom - num_lines + 1, top + num_lines):
                    self._line_at(i).clear(self._attributes, self._width)
                self._invalidate(top, bottom)
        else:
            num_lines = -num_lines
            if num_lines >= bottom - top + 1:
                self._clear_lines(top, bottom)
            else:
                for i in range(bottom - num_lines, top - 1, -1):
                    keep = self._line_index(i)
                    drop = self._line_index(i + num_lines)
                    self._screen[drop].clear(self._attributes, self._width)
                    self._swap(drop, keep)
                for i in range(bottom - num_lines + 1, top + num_lines):
                    self._line_at(i).clear(self._attributes, self._width)
                self._invalidate(top, bottom)

    def _scroll_up_to_history(self, bottom: int, num_lines: int) -> None:
        if self._history is not None:
            to_history = min(num_lines, bottom + 1)
            for i in range(to_history):
                self._history.add_line(self._line_at(i))
            if to_history < num_lines:
                self._history.add_empty_lines(num_lines - to_history)

        if num_lines >= bottom + 1:
            self._clear_lines(0, bottom)
        else:
            if bottom != self._height - 1:
                # Partial scroll: move the lines below the region along.
                for i in range(self._height - 1, bottom, -1):
                    self._swap(self._line_index(i), self._line_index(i + num_lines))
            self._screen_offset = (self._screen_offset + num_lines) % self._height
            for i in range(bottom - num_lines + 1, bottom + 1):
                self._line_at(i).clear(self._attributes, self._width)

        dirty = self.dirty_info
        if dirty.dirty_top != INT_MAX:
            if dirty.dirty_top <= bottom:
                dirty.dirty_top -= num_lines
                if dirty.dirty_bottom <= bottom:
                    dirty.dirty_bottom -= num_lines
            self._invalidate(bottom - num_lines + 1, bottom)

        dirty.lines_scrolled += num_lines
        self._invalidate(bottom + 1 - num_lines, bottom)
        if bottom < self._height - 1:
            self._invalidate(bottom + 1, self._height - 1)

    def _soft_break_line(self) -> None:
        self._line_at(self._cursor.y).soft_break = True
        self._cursor.x = 0
        if self._cursor.y == self._scroll_bottom:
            self._scroll(self._scroll_top, self._scroll_bottom, 1)
        else:
            self._cursor.y += 1

    def _pad_line_to_cursor(self) -> None:
        line = self._line_at(self._cursor.y)
        for cell in line.cells[line.length:self._cursor.x]:
            cell.character = SPACE

    @staticmethod
    def _truncate_line(line: TerminalLine, length: int) -> None:
        if line.length <= length:
            return
        if length > 0 and line.cells[length - 1].attributes.is_width:
            length -= 1
        line.length = length

    def _insert_gap(self, width: int) -> None:
        line = self._line_at(self._cursor.y)
        x = self._cursor.x
        to_move = min(line.length - x, self._width - x - width)
        if to_move > 0:
            moved = [_copy_cell(c) for c in line.cells[x:x + to_move]]
            line.cells[x + width:x + width + to_move] = moved
        line.length = min(line.length + width, self._width)