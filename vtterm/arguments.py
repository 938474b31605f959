"""Command line arguments of the terminal."""

from __future__ import annotations

import sys
from typing import Sequence

DEFAULT_BOUNDS = (50.0, 50.0, 630.0, 435.0)


class Arguments:
    """Parsed terminal options and the shell command to run."""

    def __init__(self, default_args: Sequence[str] = ()) -> None:
        self.usage_requested = False
        self.bounds = DEFAULT_BOUNDS
        self.standard_shell = True
        self.full_screen = False
        self.shell_arguments: list[str] = list(default_args)
        self.title: str | None = None
        self.working_directory: str | None = None

    def parse(self, argv: Sequence[str]) -> None:
        """Parse ``argv``; its first element is the program name."""
        args = iter(list(argv)[1:])
        for arg in args:
            if not arg.startswith("-"):
                self.shell_arguments = [arg, *args]
                self.standard_shell = False
                return
            if arg in ("-h", "--help"):
                self.usage_requested = True
            elif arg in ("-t", "--title"):
                value = next(args, None)
                if value is None:
                    self.usage_requested = True
                else:
                    self.title = value
            elif arg in ("-w", "--working-directory"):
                value = next(args, None)
                if value is None:
                    self.usage_requested = True
                else:
                    self.working_directory = value
            elif arg in ("-f", "--fullscreen"):
                self.full_screen = True
            else:
                print(f'Unrecognized option "{arg}"', file=sys.stderr)
                self.usage_requested = True