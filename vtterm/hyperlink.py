"""Hyperlinks found in terminal text and opening them."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from enum import Enum

OPEN_COMMAND = "/bin/open"
SHELL_ESCAPE_CHARACTERS = " ~`#$&*()\\|[]{};'\"<>?!"


class LinkType(Enum):
    """What kind of target a hyperlink points to."""

    URL = "url"
    PATH = "path"
    PATH_WITH_LINE = "path_with_line"
    PATH_WITH_LINE_AND_COLUMN = "path_with_line_and_column"


def escape_for_shell(address: str) -> str:
    """Backslash-escape every shell metacharacter in ``address``."""
    return "".join(
        "\\" + char if char in SHELL_ESCAPE_CHARACTERS else char for char in address
    )


@dataclass
class HyperLink:
    """A link target with the text it was displayed as."""

    address: str = ""
    link_type: LinkType = LinkType.URL
    text: str | None = None

    def __post_init__(self) -> None:
        if self.text is None:
            self.text = self.address

    @property
    def is_valid(self) -> bool:
        return bool(self.address)

    def open(self) -> None:
        """Open the link with the system opener; raise OSError on failure."""
        if not self.is_valid:
            raise ValueError("hyperlink has no address")
        command = f"{OPEN_COMMAND} {escape_for_shell(self.address)}"
        completed = subprocess.run(command, shell=True, check=False)
        if completed.returncode != 0:
            raise OSError(
                f"opening {self.address!r} failed with status {completed.returncode}"
            )