"""State of an input method's inline (pre-edit) text."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Clause:
    """A clause of inline input, as a range of byte offsets."""

    start: int
    end: int


@dataclass
class InlineInput:
    """Inline input text, selection and clauses of an input method."""

    method: Any = None
    string: str = ""
    active: bool = False
    selection_offset: int = 0
    selection_length: int = 0
    _clauses: list[Clause] = field(default_factory=list, repr=False)

    def add_clause(self, start: int, end: int) -> None:
        self._clauses.append(Clause(start, end))

    def get_clause(self, index: int) -> Clause:
        """Return clause ``index``; raise IndexError if out of range."""
        if not 0 <= index < len(self._clauses):
            raise IndexError(f"clause index {index} out of range")
        return self._clauses[index]

    def count_clauses(self) -> int:
        return len(self._clauses)

    def reset_clauses(self) -> None:
        self._clauses.clear()