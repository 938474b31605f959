"""Resizing a terminal buffer, re-wrapping its lines to a new width."""

from __future__ import annotations

from vtterm.buffer import BasicTerminalBuffer, TermPos
from vtterm.history import HistoryBuffer, TerminalCell, TerminalLine

# Soft size limits for the buffer itself; the user interface may be stricter.
MIN_ROW_COUNT = 2
MAX_ROW_COUNT = 1024
MIN_COLUMN_COUNT = 4
MAX_COLUMN_COUNT = 1024


def _copy_cells(cells: list[TerminalCell]) -> list[TerminalCell]:
    return [TerminalCell(cell.character, cell.attributes) for cell in cells]


class ResizableTerminalBuffer(BasicTerminalBuffer):
    """A terminal buffer whose size and history capacity can change."""

    def resize_to(
        self, width: int, height: int, history_capacity: int | None = None
    ) -> None:
        """Resize to ``width`` x ``height``, re-wrapping lines when the width changes.

        Without ``history_capacity`` the current capacity is kept.
        """
        if history_capacity is None:
            history_capacity = self.history_capacity
        if not (
            MIN_ROW_COUNT <= height <= MAX_ROW_COUNT
            and MIN_COLUMN_COUNT <= width <= MAX_COLUMN_COUNT
        ):
            raise ValueError(f"unsupported terminal size {width}x{height}")

        if width == self._width and height == self._height:
            self.set_history_capacity(history_capacity)
        elif self._alternate_screen_active:
            self._resize_simple(width, height, history_capacity)
        else:
            self._resize_rewrap(width, height, history_capacity)

    def set_history_capacity(self, history_capacity: int) -> None:
        """Change how many lines the history keeps; the newest ones survive."""
        self._resize_history(self._width, history_capacity)

    def _resize_history(self, width: int, history_capacity: int) -> None:
        if width == self._width and history_capacity == self.history_capacity:
            return
        if history_capacity <= 0:
            self._history = None
            return

        history = HistoryBuffer(width, history_capacity)
        old = self._history
        if old is not None:
            for index in reversed(range(min(old.size, history_capacity))):
                line = old.get_terminal_line_at(index)
                if line is None:
                    continue
                if line.length > width:
                    self._truncate_line(line, width)
                history.add_line(line)
        self._history = history

    def _finish_resize(self, width: int, height: int) -> None:
        if width != self._width:
            self._reset_tab_stops(width)
        self._width = width
        self._height = height
        self._scroll_top = 0
        self._scroll_bottom = height - 1
        self._origin_mode = self._saved_origin_mode = False
        self._soft_wrapped_cursor = False

    def _resize_simple(self, width: int, height: int, history_capacity: int) -> None:
        if width == self._width and height == self._height:
            return
        if width != self._width or history_capacity != self.history_capacity:
            self._resize_history(width, history_capacity)

        lines = self._allocate_lines(width, height)
        end_line = min(self._height, height)
        first_line = 0

        if height < self._height:
            if end_line <= self._cursor.y:
                end_line = self._cursor.y + 1
                first_line = end_line - height
            # push the first lines to the history
            if self._history is not None:
                for i in range(first_line):
                    line = self._line_at(i)
                    if width < self._width:
                        self._truncate_line(line, width)
                    self._history.add_line(line)

        for i in range(first_line, end_line):
            source = self._line_at(i)
            dest = lines[i - first_line]
            if width < self._width:
                self._truncate_line(source, width)
            count = min(source.length, width)
            dest.cells[:count] = _copy_cells(source.cells[:count])
            dest.length = source.length
            dest.soft_break = source.soft_break
            dest.attributes = source.attributes

        for line in lines[end_line - first_line:]:
            line.clear(self._attributes, width)

        self._screen = lines
        self._screen_offset = 0
        if self._cursor.x > width:
            self._cursor.x = width
        self._cursor.y -= first_line
        self._finish_resize(width, height)

    def _resize_rewrap(self, width: int, height: int, history_capacity: int) -> None:
        if width == self._width:
            self._resize_simple(width, height, history_capacity)
            return

        screen = self._allocate_lines(width, height)
        history = HistoryBuffer(width, history_capacity) if history_capacity > 0 else None

        history_size = self.history_size
        total_lines = history_size + self._height

        cursor = TermPos(0, 0)
        dest_index = 0
        source_index = 0
        source_x = 0
        dest_total_lines = 0
        dest_screen_offset = 0
        max_dest_total_lines: int | None = None
        new_dest_line = True
        cursor_seen = False
        source: TerminalLine | None = self.history_line_at(-history_size)

        while source_index < total_lines and source is not None:
            dest = screen[dest_index]
            if new_dest_line:
                # Before reusing a dest line written earlier, move it to the
                # history.
                if history is not None and dest_total_lines >= height:
                    history.add_line(dest)
                dest.clear(self._attributes, width)
                new_dest_line = False

            source_left = source.length - source_x
            dest_left = width - dest.length

            if source_index == history_size and source_x == 0:
                dest_screen_offset = dest_total_lines
                if dest_left == 0 and source_left > 0:
                    dest_screen_offset += 1
                max_dest_total_lines = dest_screen_offset + height

            to_copy = min(source_left, dest_left)
            # Don't split a full-width character across lines.
            if to_copy > 0 and source.cells[source_x + to_copy - 1].attributes.is_width:
                to_copy -= 1

            old = self._cursor
            if (
                old.y + history_size == source_index
                and old.x >= source_x
                and (
                    old.x < source_x + to_copy
                    or (dest_left >= source_left and source_x + source_left <= old.x)
                )
            ):
                cursor.x = min(dest.length + old.x - source_x, width - 1)
                cursor.y = dest_total_lines
                cursor_seen = True

            if to_copy > 0:
                dest.cells[dest.length:dest.length + to_copy] = _copy_cells(
                    source.cells[source_x:source_x + to_copy]
                )
                dest.length += to_copy
            dest.attributes = source.attributes

            next_dest_line = False
            if to_copy == source_left:
                if not source.soft_break:
                    next_dest_line = True
                source_index += 1
                source_x = 0
                source = self.history_line_at(source_index - history_size)
            else:
                dest.soft_break = True
                next_dest_line = True
                source_x += to_copy

            if next_dest_line:
                dest_index = (dest_index + 1) % height
                dest_total_lines += 1
                new_dest_line = True
                if (
                    cursor_seen
                    and max_dest_total_lines is not None
                    and dest_total_lines >= max_dest_total_lines
                ):
                    break

        # A soft break on the last source line leaves the last dest line
        # uncounted.
        if not new_dest_line:
            dest_total_lines += 1

        if dest_total_lines - dest_screen_offset > height:
            dest_screen_offset = dest_total_lines - height
        cursor.y -= dest_screen_offset

        for i in range(dest_total_lines, dest_screen_offset + height):
            line = screen[i % height]
            if history is not None and i >= height:
                history.add_line(line)
            line.clear(self._attributes, width)

        self._screen = screen
        self._history = history
        self._cursor.set_to(cursor.x, cursor.y)
        self._screen_offset = dest_screen_offset % height
        self._finish_resize(width, height)