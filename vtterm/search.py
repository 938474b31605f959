"""Reading text back out of a terminal buffer: regions, words and searching."""

from __future__ import annotations

from enum import Enum
from typing import Callable

from vtterm.buffer import FULL_WIDTH, HALF_WIDTH, BasicTerminalBuffer, TermPos
from vtterm.history import TerminalLine

WORD_PUNCTUATION = ":@-./_~"


class CharType(Enum):
    """How a character takes part in word selection."""

    WORD_CHAR = 0
    SPACE = 1
    WORD_DELIMITER = 2


Classifier = Callable[[str], CharType]


def classify_char(char: str) -> CharType:
    """Classify ``char`` as space, word character or word delimiter."""
    if not char or char.isspace() or char == "\x00":
        return CharType.SPACE
    if char.isalnum() or char in WORD_PUNCTUATION or ord(char[0]) >= 0x80:
        return CharType.WORD_CHAR
    return CharType.WORD_DELIMITER


def _cell_width(line: TerminalLine, x: int) -> int:
    return FULL_WIDTH if line.cells[x].attributes.is_width else HALF_WIDTH


def _ascii_lower(char: str) -> str:
    return char.lower() if len(char) == 1 and ord(char) < 0x80 else char


def _copy(pos: TermPos) -> TermPos:
    return TermPos(pos.x, pos.y)


def _partial_line_string(
    buffer: BasicTerminalBuffer, row: int, start_column: int, end_column: int
) -> tuple[str, TerminalLine | None]:
    """Text of ``row`` from ``start_column`` up to, not including, ``end_column``."""
    line = buffer.history_line_at(row)
    if line is None:
        return "", None
    end_column = min(end_column, line.length)
    parts: list[str] = []
    x = start_column
    while x < end_column:
        cell = line.cells[x]
        parts.append(cell.character)
        if cell.attributes.is_width:
            x += 1
        x += 1
    return "".join(parts), line


def _previous_line_pos(
    buffer: BasicTerminalBuffer, line: TerminalLine, pos: TermPos
) -> TerminalLine | None:
    """Step ``pos`` back one character; return the line it is now on, or None."""
    pos.x -= 1
    if pos.x < 0:
        # Continue at the end of the previous line, if it soft-breaks.
        pos.y -= 1
        previous = buffer.history_line_at(pos.y)
        if previous is None or not previous.soft_break or previous.length == 0:
            return None
        line = previous
        pos.x = line.length - 1
    if pos.x > 0 and line.cells[pos.x - 1].attributes.is_width:
        pos.x -= 1
    return line


def _normalize_line_pos(
    buffer: BasicTerminalBuffer, line: TerminalLine, pos: TermPos
) -> TerminalLine | None:
    """Move ``pos`` past a soft break if it is at the end of its line."""
    if pos.x < line.length:
        return line
    if not line.soft_break:
        return None
    pos.y += 1
    pos.x = 0
    return buffer.history_line_at(pos.y)


def _previous_char(buffer: BasicTerminalBuffer, pos: TermPos) -> str | None:
    """Move ``pos`` back and return the character there."""
    pos.x -= 1
    line = buffer.history_line_at(pos.y)
    while True:
        if pos.x < 0:
            pos.y -= 1
            line = buffer.history_line_at(pos.y)
            if line is None:
                return None
            pos.x = line.length
            if line.soft_break:
                pos.x -= 1
            else:
                return "\n"
        else:
            if line is None:
                return None
            return line.cells[pos.x].character


def _next_char(buffer: BasicTerminalBuffer, pos: TermPos) -> str | None:
    """Return the character at ``pos`` and move ``pos`` forward."""
    line = buffer.history_line_at(pos.y)
    if line is None:
        return None
    if pos.x >= line.length:
        pos.x = 0
        pos.y += 1
        return "\n"
    char = line.cells[pos.x].character
    pos.x += 1
    while line is not None and pos.x >= line.length and line.soft_break:
        pos.x = 0
        pos.y += 1
        line = buffer.history_line_at(pos.y)
    return char


def get_string_from_region(
    buffer: BasicTerminalBuffer, start: TermPos, end: TermPos
) -> str:
    """Return the text between ``start`` and ``end`` (exclusive)."""
    if start >= end:
        return ""
    pos = _copy(start)
    if buffer.is_full_width_char(pos.y, pos.x):
        pos.x -= 1

    parts: list[str] = []
    while pos.y < end.y:
        text, line = _partial_line_string(buffer, pos.y, pos.x, buffer.width)
        parts.append(text)
        if line is not None and not line.soft_break:
            parts.append("\n")
        pos.x = 0
        pos.y += 1

    if end.x > 0:
        parts.append(_partial_line_string(buffer, end.y, pos.x, end.x)[0])
    return "".join(parts)


def find_word(
    buffer: BasicTerminalBuffer,
    pos: TermPos,
    classifier: Classifier | None,
    find_non_words: bool,
) -> tuple[TermPos, TermPos] | None:
    """Return the range of the word (or run of like characters) at ``pos``."""
    classify = classifier or classify_char
    x, y = pos.x, pos.y
    line = buffer.history_line_at(y)
    if line is None or x < 0 or x >= buffer.width:
        return None

    if x >= line.length:
        # Beyond the end of the line: select all the space.
        if not find_non_words:
            return None
        return TermPos(line.length, y), TermPos(buffer.width, y)

    if x > 0 and line.cells[x - 1].attributes.is_width:
        x -= 1

    kind = classify(line.cells[x].character)
    if kind != CharType.WORD_CHAR and not find_non_words:
        return None

    start = TermPos(x, y)
    end = TermPos(x + _cell_width(line, x), y)
    current = line
    while True:
        previous = _copy(start)
        found = _previous_line_pos(buffer, current, previous)
        if found is None or classify(found.cells[previous.x].character) != kind:
            break
        current = found
        start = previous

    current = buffer.history_line_at(end.y)
    while current is not None:
        following = _copy(end)
        found = _normalize_line_pos(buffer, current, following)
        if found is None:
            break
        current = found
        if classify(current.cells[following.x].character) != kind:
            break
        following.x += _cell_width(current, following.x)
        end = following

    return start, end


def previous_line_pos(buffer: BasicTerminalBuffer, pos: TermPos) -> TermPos | None:
    """Return the position of the character before ``pos``, or None."""
    line = buffer.history_line_at(pos.y)
    if line is None or pos.x < 0 or pos.x >= buffer.width:
        return None
    result = _copy(pos)
    if _previous_line_pos(buffer, line, result) is None:
        return None
    return result


def next_line_pos(
    buffer: BasicTerminalBuffer, pos: TermPos, normalize: bool
) -> TermPos | None:
    """Return the position after the character at ``pos``, or None.

    With ``normalize`` the result must point at an actual character.
    """
    line = buffer.history_line_at(pos.y)
    if line is None or pos.x < 0 or pos.x > buffer.width:
        return None
    result = _copy(pos)
    line = _normalize_line_pos(buffer, line, result)
    if line is None:
        return None
    result.x += _cell_width(line, result.x)
    if normalize and _normalize_line_pos(buffer, line, result) is None:
        return None
    return result


def find(
    buffer: BasicTerminalBuffer,
    pattern: str,
    start: TermPos,
    forward: bool,
    case_sensitive: bool,
    match_word: bool,
) -> tuple[TermPos, TermPos] | None:
    """Search for ``pattern`` from ``start``; return the match range or None."""
    pos = _copy(start)
    line = buffer.history_line_at(pos.y)
    if line is not None:
        if forward:
            while line is not None and pos.x >= line.length and line.soft_break:
                pos.x = 0
                pos.y += 1
                line = buffer.history_line_at(pos.y)
        elif pos.x > line.length:
            pos.x = line.length

    chars = [c if case_sensitive else _ascii_lower(c) for c in pattern]
    if not chars:
        return None
    if not forward:
        chars.reverse()

    def step(position: TermPos) -> str | None:
        if forward:
            return _next_char(buffer, position)
        return _previous_char(buffer, position)

    match_index = 0
    first_match = TermPos()
    while True:
        previous = _copy(pos)
        char = step(pos)
        if char is None:
            return None

        candidate = char if case_sensitive else _ascii_lower(char)
        if candidate == chars[match_index]:
            if match_index == 0:
                first_match = previous
            match_index += 1
            if match_index < len(chars):
                continue

            match_start = _copy(first_match)
            match_end = _copy(pos)
            if not forward:
                match_start, match_end = match_end, match_start

            if match_word:
                before = _previous_char(buffer, _copy(match_start))
                after = _next_char(buffer, _copy(match_end))
                if (before is not None and not before.isspace()) or (
                    after is not None and not after.isspace()
                ):
                    pos = _copy(first_match)
                    step(pos)
                    match_index = 0
                    continue

            return match_start, match_end
        elif match_index > 0:
            # Continue after the position where the partial match began.
            pos = _copy(first_match)
            step(pos)
            match_index = 0