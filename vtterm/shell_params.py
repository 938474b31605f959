"""Parameters for starting a shell and information about a running one."""

from __future__ import annotations

import codecs
from dataclasses import dataclass, field

DEFAULT_ENCODING = "utf-8"
DEFAULT_ENCODING_NAME = "UTF-8"


class ShellInfo:
    """Process ID, default-shell flag and text encoding of a shell."""

    def __init__(self) -> None:
        self.process_id = -1
        self.is_default_shell = True
        self._encoding = DEFAULT_ENCODING
        self._encoding_name = DEFAULT_ENCODING_NAME

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def encoding_name(self) -> str:
        return self._encoding_name

    def set_encoding(self, encoding: str) -> None:
        """Set the encoding; unknown encodings are named ``UTF-8``."""
        self._encoding = encoding
        try:
            self._encoding_name = codecs.lookup(encoding).name.upper()
        except LookupError:
            self._encoding_name = DEFAULT_ENCODING_NAME


@dataclass
class ShellParameters:
    """Command, working directory and encoding for a shell to start."""

    arguments: list[str] = field(default_factory=list)
    current_directory: str = ""
    encoding: str = DEFAULT_ENCODING

    @property
    def argument_count(self) -> int:
        return len(self.arguments)