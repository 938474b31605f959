"""Evaluation of title patterns with ``%`` placeholders."""

from __future__ import annotations

from abc import ABC, abstractmethod


class PlaceholderMapper(ABC):
    """Supplies replacement text for pattern placeholders."""

    @abstractmethod
    def map_placeholder(
        self, placeholder: str, number: int, number_given: bool
    ) -> str | None:
        """Return the replacement for ``placeholder`` or None if unknown."""


def _is_alnum(char: str) -> bool:
    return char.isascii() and char.isalnum()


def evaluate(pattern: str, mapper: PlaceholderMapper) -> str:
    """Expand the placeholders in ``pattern`` using ``mapper``.

    ``%%`` is a literal percent, ``%<`` and ``%>`` open optional before and
    after sections, ``%-`` ends a section. Other placeholders take the form
    ``%[separators][number]letter``; the separators are emitted only if the
    mapped value is not empty.
    """
    result: list[str] = []
    before = ""
    is_before = is_after = had_result = began = False
    pos = 0
    end = len(pattern)

    while pos < end:
        placeholder = pattern.find("%", pos)
        literal = pattern[pos:] if placeholder < 0 else pattern[pos:placeholder]
        length = len(literal)

        if placeholder != pos:
            if is_before:
                before = literal
                is_before = False
            elif not is_after or had_result:
                result.append(literal)
                is_before = False
                before = ""
                is_after = False
        if placeholder < 0:
            return "".join(result)

        pos = placeholder + 1
        current = pattern[pos] if pos < end else ""
        if current == "%":
            result.append("%")
            pos += 1
            continue
        if current == "<":
            is_before = began = True
            had_result = False
            pos += 1
            continue
        if current == ">":
            is_after = True
            began = False
            before = ""
            pos += 1
            continue
        if current == "-":
            pos += 1
            is_before = is_after = False
            continue

        while pos < end and not _is_alnum(pattern[pos]):
            before += pattern[pos]
            pos += 1

        number = 0
        has_number = False
        if pos < end and pattern[pos].isascii() and pattern[pos].isdigit():
            start = pos
            while pos < end and pattern[pos].isascii() and pattern[pos].isdigit():
                pos += 1
            number = int(pattern[start:pos])
            has_number = True

        mapped = None
        if pos < end:
            mapped = mapper.map_placeholder(pattern[pos], number, has_number)
        if mapped is not None:
            if began and mapped:
                had_result = True
            if before and mapped:
                result.append(before)
                before = ""
            result.append(mapped)
            pos += 1
        else:
            result.append(pattern[placeholder:placeholder + length])

    return "".join(result)