"""Scroll-back history of terminal lines, stored compactly."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field, replace

A_BOLD = 0x0001
A_UNDERLINE = 0x0002
A_INVERSE = 0x0004
A_MOUSE = 0x0008
A_FORECOLORED = 0x0010
A_BACKCOLORED = 0x0020
A_DIM = 0x0040
A_STRIKE = 0x0080
A_WIDTH = 0x0100

# Attribute bits that are kept when a line goes into the history.
CHAR_ATTRIBUTES = (
    A_BOLD | A_UNDERLINE | A_INVERSE | A_FORECOLORED | A_BACKCOLORED | A_DIM | A_STRIKE
)

# Bytes one attributes run takes in the history's storage budget.
_RUN_SIZE = 16


def _is_full_width(char: str) -> bool:
    return bool(char) and unicodedata.east_asian_width(char[0]) in ("W", "F")


@dataclass(frozen=True)
class Attributes:
    """Display attributes of a cell: state bits and colors."""

    state: int = 0
    foreground: int = 0
    background: int = 0

    @property
    def is_width(self) -> bool:
        """True for the first cell of a full-width character."""
        return bool(self.state & A_WIDTH)

    def _history_key(self) -> Attributes:
        return Attributes(self.state & CHAR_ATTRIBUTES, self.foreground, self.background)


@dataclass
class TerminalCell:
    """One screen cell: a character and its attributes."""

    character: str = " "
    attributes: Attributes = field(default_factory=Attributes)


@dataclass
class TerminalLine:
    """A line of cells; only the first ``length`` cells hold text."""

    cells: list[TerminalCell] = field(default_factory=list)
    length: int = 0
    soft_break: bool = False
    attributes: Attributes = field(default_factory=Attributes)

    def clear(self, attributes: Attributes | None = None, width: int | None = None) -> None:
        """Empty the line, giving ``width`` cells the background ``attributes``."""
        attrs = attributes if attributes is not None else Attributes()
        if width is None:
            width = len(self.cells)
        while len(self.cells) < width:
            self.cells.append(TerminalCell())
        for cell in self.cells[:width]:
            cell.character = " "
            cell.attributes = attrs
        self.length = 0
        self.soft_break = False
        self.attributes = attrs


@dataclass
class _AttributesRun:
    attributes: Attributes
    offset: int
    length: int = 0


@dataclass
class _HistoryLine:
    offset: int = 0
    chars: str = ""
    runs: list[_AttributesRun] = field(default_factory=list)
    soft_break: bool = False
    attributes: Attributes = field(default_factory=Attributes)

    @property
    def byte_length(self) -> int:
        return len(self.chars.encode("utf-8", errors="surrogatepass"))

    @property
    def buffer_size(self) -> int:
        return len(self.runs) * _RUN_SIZE + self.byte_length


class HistoryBuffer:
    """Ring of the most recent lines, within a fixed storage budget."""

    def __init__(self, width: int, capacity: int) -> None:
        if width <= 0 or capacity <= 0:
            raise ValueError("history width and capacity must be positive")
        self.width = width
        self.capacity = capacity
        self._lines = [_HistoryLine() for _ in range(capacity)]
        self._next_line = 0
        self._size = 0
        self._buffer_size = (width + 4) * capacity
        self._allocation_offset = 0

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def clear(self) -> None:
        self._next_line = 0
        self._size = 0
        self._allocation_offset = 0

    def _line_at(self, index: int) -> _HistoryLine:
        return self._lines[(self.capacity + self._next_line - index - 1) % self.capacity]

    def line_at(self, index: int) -> _HistoryLine | None:
        """Return stored line ``index`` (0 is the newest), or None."""
        if 0 <= index < self._size:
            return self._line_at(index)
        return None

    def get_terminal_line_at(self, index: int) -> TerminalLine | None:
        """Expand stored line ``index`` back into cells, or return None."""
        line = self.line_at(index)
        if line is None:
            return None

        cells: list[TerminalCell] = []
        attributes = Attributes()
        runs = line.runs
        run_index = 0
        next_attributes_at = runs[0].offset if runs else None

        for char in line.chars:
            count = len(cells)
            if count == next_attributes_at:
                if run_index < len(runs) and count < runs[run_index].offset:
                    attributes = Attributes()
                    next_attributes_at = runs[run_index].offset
                elif run_index < len(runs):
                    run = runs[run_index]
                    attributes = run.attributes
                    next_attributes_at = run.offset + run.length
                    run_index += 1
                else:
                    attributes = Attributes()
                    next_attributes_at = None

            if _is_full_width(char):
                cells.append(
                    TerminalCell(char, replace(attributes, state=attributes.state | A_WIDTH))
                )
                # The second, invisible cell has cleared attributes so that
                # full-width detection works.
                cells.append(TerminalCell(" ", Attributes()))
            else:
                cells.append(TerminalCell(char, attributes))

        length = len(cells)
        cells.extend(TerminalCell() for _ in range(self.width - length))
        return TerminalLine(cells, length, line.soft_break, line.attributes)

    def add_line(self, line: TerminalLine) -> None:
        """Store ``line`` as the newest history line."""
        chars: list[str] = []
        runs: list[_AttributesRun] = []
        current = Attributes()
        i = 0
        while i < line.length:
            cell = line.cells[i]
            chars.append(cell.character)
            key = cell.attributes._history_key()
            if key != current:
                if current.state != 0:
                    runs[-1].length = i - runs[-1].offset
                current = key
                if current.state != 0:
                    runs.append(_AttributesRun(current, i))
            if cell.attributes.is_width:
                i += 1
            i += 1
        if current.state != 0:
            runs[-1].length = line.length - runs[-1].offset

        text = "".join(chars)
        history_line = self._allocate_line(
            len(runs), len(text.encode("utf-8", errors="surrogatepass"))
        )
        history_line.chars = text
        history_line.runs = runs
        history_line.soft_break = line.soft_break
        history_line.attributes = line.attributes

    def add_empty_lines(self, count: int) -> None:
        if count <= 0:
            return
        count = min(count, self.capacity)
        if count + self._size > self.capacity:
            self.drop_lines(count + self._size - self.capacity)

        for _ in range(count):
            self._lines[self._next_line] = _HistoryLine(offset=self._allocation_offset)
            self._next_line = (self._next_line + 1) % self.capacity
        self._size += count

    def drop_lines(self, count: int) -> None:
        """Forget the ``count`` oldest lines."""
        if count <= 0:
            return
        if count < self._size:
            self._size -= count
        else:
            self._size = 0
            self._next_line = 0
            self._allocation_offset = 0

    def _allocate_line(self, runs: int, byte_length: int) -> _HistoryLine:
        to_drop = 1 if self._size == self.capacity else 0
        bytes_needed = runs * _RUN_SIZE + byte_length

        if self._allocation_offset + bytes_needed > self._buffer_size:
            # drop all lines after the allocation index
            while to_drop < self._size:
                line = self._line_at(self._size - to_drop - 1)
                if line.offset < self._allocation_offset:
                    break
                to_drop += 1
            self._allocation_offset = 0

        # drop all lines interfering with the new one
        next_offset = (self._allocation_offset + bytes_needed + 1) & ~1
        while to_drop < self._size:
            line = self._line_at(self._size - to_drop - 1)
            if (
                line.offset + line.buffer_size <= self._allocation_offset
                or line.offset >= next_offset
            ):
                break
            to_drop += 1

        self.drop_lines(to_drop)

        line = _HistoryLine(offset=self._allocation_offset)
        self._lines[self._next_line] = line
        self._next_line = (self._next_line + 1) % self.capacity
        self._size += 1
        self._allocation_offset = (self._allocation_offset + bytes_needed + 1) & ~1
        return line