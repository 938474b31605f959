"""Terminal emulator core: screen buffer, scrollback, shell, preferences, colours and title patterns."""

__version__ = "0.1.0"