"""Information about the foreground process of a terminal."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ActiveProcessInfo:
    """ID, name and working directory of a process; ID -1 means unset."""

    id: int = -1
    name: str = ""
    current_directory: str = ""

    @property
    def is_valid(self) -> bool:
        return self.id >= 0

    def set_to(self, pid: int, name: str, current_directory: str) -> None:
        self.id = pid
        self.name = name
        self.current_directory = current_directory

    def unset(self) -> None:
        self.id = -1
        self.name = ""
        self.current_directory = ""