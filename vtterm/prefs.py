"""Terminal preferences: defaults, text settings files and color themes."""

from __future__ import annotations

import os
import re
import sys
from enum import Enum
from pathlib import Path
from typing import Iterable

from vtterm.colors import AnsiColorScheme, ColorScheme, RGBColor

PREF_TRUE = "true"
PREF_FALSE = "false"

PREF_BLOCK_CURSOR = "block"
PREF_IBEAM_CURSOR = "ibeam"
PREF_UNDERLINE_CURSOR = "underline"

ERROR_STRING = "Error!"

PREF_COLS = "Cols"
PREF_ROWS = "Rows"
PREF_HALF_FONT_FAMILY = "Half Font Family"
PREF_HALF_FONT_STYLE = "Half Font Style"
PREF_HALF_FONT_SIZE = "Half Font Size"

PREF_TEXT_FORE_COLOR = "Text"
PREF_TEXT_BACK_COLOR = "Background"
PREF_CURSOR_FORE_COLOR = "Text under cursor"
PREF_CURSOR_BACK_COLOR = "Cursor"
PREF_SELECT_FORE_COLOR = "Selected text"
PREF_SELECT_BACK_COLOR = "Selected background"

PREF_IM_FORE_COLOR = "IM foreground color"
PREF_IM_BACK_COLOR = "IM background color"
PREF_IM_SELECT_COLOR = "IM selection color"

PREF_ANSI_BLACK_COLOR = "ANSI black color"
PREF_ANSI_RED_COLOR = "ANSI red color"
PREF_ANSI_GREEN_COLOR = "ANSI green color"
PREF_ANSI_YELLOW_COLOR = "ANSI yellow color"
PREF_ANSI_BLUE_COLOR = "ANSI blue color"
PREF_ANSI_MAGENTA_COLOR = "ANSI magenta color"
PREF_ANSI_CYAN_COLOR = "ANSI cyan color"
PREF_ANSI_WHITE_COLOR = "ANSI white color"

PREF_ANSI_BLACK_HCOLOR = "ANSI bright black color"
PREF_ANSI_RED_HCOLOR = "ANSI bright red color"
PREF_ANSI_GREEN_HCOLOR = "ANSI bright green color"
PREF_ANSI_YELLOW_HCOLOR = "ANSI bright yellow color"
PREF_ANSI_BLUE_HCOLOR = "ANSI bright blue color"
PREF_ANSI_MAGENTA_HCOLOR = "ANSI bright magenta color"
PREF_ANSI_CYAN_HCOLOR = "ANSI bright cyan color"
PREF_ANSI_WHITE_HCOLOR = "ANSI bright white color"

PREF_HISTORY_SIZE = "History size"
PREF_TEXT_ENCODING = "Text encoding"
PREF_IM_AWARE = "Input method aware"
PREF_TAB_TITLE = "Tab title"
PREF_WINDOW_TITLE = "Window title"
PREF_BLINK_CURSOR = "Blinking cursor"
PREF_USE_OPTION_AS_META = "Use option as meta"
PREF_WARN_ON_EXIT = "Warn on exit"
PREF_CURSOR_STYLE = "Cursor style"
PREF_EMULATE_BOLD = "Emulate bold"
PREF_ALLOW_BOLD = "Allow bold text"
PREF_THEME_NAME = "Theme name"

DEFAULTS: tuple[tuple[str, str], ...] = (
    (PREF_COLS, "80"),
    (PREF_ROWS, "25"),
    (PREF_TEXT_FORE_COLOR, "  0,   0,   0"),
    (PREF_TEXT_BACK_COLOR, "255, 255, 255"),
    (PREF_CURSOR_FORE_COLOR, "255, 255, 255"),
    (PREF_CURSOR_BACK_COLOR, "  0,   0,   0"),
    (PREF_SELECT_FORE_COLOR, "255, 255, 255"),
    (PREF_SELECT_BACK_COLOR, "  0,   0,   0"),
    (PREF_IM_FORE_COLOR, "  0,   0,   0"),
    (PREF_IM_BACK_COLOR, "152, 203, 255"),
    (PREF_IM_SELECT_COLOR, "255, 152, 152"),
    (PREF_ANSI_BLACK_COLOR, " 40,  40,  40"),
    (PREF_ANSI_RED_COLOR, "204,   0,   0"),
    (PREF_ANSI_GREEN_COLOR, " 78, 154,   6"),
    (PREF_ANSI_YELLOW_COLOR, "218, 168,   0"),
    (PREF_ANSI_BLUE_COLOR, " 51, 102, 152"),
    (PREF_ANSI_MAGENTA_COLOR, "115,  68, 123"),
    (PREF_ANSI_CYAN_COLOR, "  6, 152, 154"),
    (PREF_ANSI_WHITE_COLOR, "245, 245, 245"),
    (PREF_ANSI_BLACK_HCOLOR, "128, 128, 128"),
    (PREF_ANSI_RED_HCOLOR, "255,   0,   0"),
    (PREF_ANSI_GREEN_HCOLOR, "  0, 255,   0"),
    (PREF_ANSI_YELLOW_HCOLOR, "255, 255,   0"),
    (PREF_ANSI_BLUE_HCOLOR, "  0,   0, 255"),
    (PREF_ANSI_MAGENTA_HCOLOR, "255,   0, 255"),
    (PREF_ANSI_CYAN_HCOLOR, "  0, 255, 255"),
    (PREF_ANSI_WHITE_HCOLOR, "255, 255, 255"),
    (PREF_HISTORY_SIZE, "10000"),
    (PREF_TEXT_ENCODING, "UTF-8"),
    (PREF_IM_AWARE, "0"),
    (PREF_TAB_TITLE, "%1d: %p%e"),
    (PREF_WINDOW_TITLE, "%T% i: %t"),
    (PREF_BLINK_CURSOR, PREF_TRUE),
    (PREF_USE_OPTION_AS_META, PREF_FALSE),
    (PREF_WARN_ON_EXIT, PREF_TRUE),
    (PREF_CURSOR_STYLE, PREF_BLOCK_CURSOR),
    (PREF_EMULATE_BOLD, PREF_FALSE),
)

_LINE = re.compile(r'"+([^"]+)"+[^"]+"+([^"]+)')
_INT = re.compile(r"\s*([-+]?\d+)")
_FLOAT = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
_RGB = re.compile(r"\s*([-+]?\d+)(?:,\s*([-+]?\d+)(?:,\s*([-+]?\d+))?)?")

_ANSI_KEYS = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")


class CursorStyle(Enum):
    """Shape of the text cursor."""

    BLOCK = PREF_BLOCK_CURSOR
    UNDERLINE = PREF_UNDERLINE_CURSOR
    IBEAM = PREF_IBEAM_CURSOR


def default_path() -> Path:
    """Return the default settings file path, creating its directory."""
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(
        os.path.expanduser("~"), ".config"
    )
    directory = Path(base) / "Terminal"
    directory.mkdir(mode=0o755, parents=True, exist_ok=True)
    return directory / "Default"


class PrefHandler:
    """A set of string-valued preferences with typed accessors."""

    def __init__(self, load_settings: bool = True) -> None:
        self._values: dict[str, str] = {}
        for key, value in DEFAULTS:
            self.set_string(key, value)
        if load_settings:
            try:
                self.open_text(default_path())
            except OSError:
                pass

    def copy(self) -> PrefHandler:
        """Return an independent handler holding the same values."""
        other = PrefHandler(load_settings=False)
        other._values = dict(self._values)
        return other

    def open_text(self, path: str | os.PathLike[str]) -> None:
        """Load ``"key" , "value"`` lines from ``path``; '#' starts a comment."""
        with open(path, encoding="utf-8", errors="replace", newline="") as file:
            for line in file:
                if line.startswith("#"):
                    continue
                match = _LINE.match(line)
                if match:
                    self.set_string(match.group(1), match.group(2))

    def save_as_text(self, path: str | os.PathLike[str]) -> None:
        """Write every preference to ``path`` in the text settings format."""
        with open(path, "w", encoding="utf-8", newline="") as file:
            for key, value in self._values.items():
                file.write(f'"{key}" , "{value}"\n')

    def save_default_as_text(self) -> None:
        self.save_as_text(default_path())

    def get_int32(self, key: str) -> int:
        value = self._values.get(key)
        if value is None:
            return 0
        match = _INT.match(value)
        return int(match.group(1)) if match else 0

    def get_float(self, key: str) -> float:
        value = self._values.get(key)
        if value is None:
            return 0.0
        match = _FLOAT.match(value)
        return float(match.group(1)) if match else 0.0

    def get_string(self, key: str) -> str:
        """Return the value of ``key``, or ``"Error!"`` if it is not set."""
        return self._values.get(key, ERROR_STRING)

    def get_bool(self, key: str) -> bool:
        return self._values.get(key) == PREF_TRUE

    def get_cursor(self, key: str) -> CursorStyle:
        value = self._values.get(key)
        if value == PREF_UNDERLINE_CURSOR:
            return CursorStyle.UNDERLINE
        if value == PREF_IBEAM_CURSOR:
            return CursorStyle.IBEAM
        return CursorStyle.BLOCK

    def get_rgb(self, key: str) -> RGBColor:
        """Parse an ``r, g, b`` value; missing keys give black."""
        value = self._values.get(key)
        if value is None:
            print(f"PrefHandler.get_rgb({key}) - key not found", file=sys.stderr)
            return RGBColor(0, 0, 0, 255)
        match = _RGB.match(value)
        parts = [0, 0, 0]
        if match:
            for index, group in enumerate(match.groups()):
                if group is not None:
                    parts[index] = int(group) & 0xFF
        return RGBColor(parts[0], parts[1], parts[2], 255)

    def set_int32(self, key: str, value: int) -> None:
        self.set_string(key, str(int(value)))

    def set_float(self, key: str, value: float) -> None:
        self.set_string(key, "%g" % value)

    def set_string(self, key: str, value: str) -> None:
        self._values.pop(key, None)
        self._values[key] = value

    def set_bool(self, key: str, value: bool) -> None:
        self.set_string(key, PREF_TRUE if value else PREF_FALSE)

    def set_rgb(self, key: str, color: RGBColor) -> None:
        self.set_string(key, f"{color.red}, {color.green}, {color.blue}")

    def is_empty(self) -> bool:
        return not self._values

    def _ansi(self, suffix: str) -> AnsiColorScheme:
        return AnsiColorScheme(
            **{
                name: self.get_rgb(f"ANSI {'bright ' if suffix else ''}{name} color")
                for name in _ANSI_KEYS
            }
        )

    def load_color_scheme(self, name: str) -> ColorScheme:
        """Build a color scheme named ``name`` from the color preferences."""
        return ColorScheme(
            name=name,
            text_fore_color=self.get_rgb(PREF_TEXT_FORE_COLOR),
            text_back_color=self.get_rgb(PREF_TEXT_BACK_COLOR),
            cursor_fore_color=self.get_rgb(PREF_CURSOR_FORE_COLOR),
            cursor_back_color=self.get_rgb(PREF_CURSOR_BACK_COLOR),
            select_fore_color=self.get_rgb(PREF_SELECT_FORE_COLOR),
            select_back_color=self.get_rgb(PREF_SELECT_BACK_COLOR),
            ansi_colors=self._ansi(""),
            ansi_colors_h=self._ansi("h"),
        )


def load_themes(directories: Iterable[str | os.PathLike[str]]) -> list[ColorScheme]:
    """Load theme files from ``directories``, later ones replacing same names.

    Directories that do not exist are skipped. The result is sorted by name.
    """
    schemes: list[ColorScheme] = []
    for directory in directories:
        path = Path(directory)
        if not path.is_dir():
            continue
        for entry in sorted(path.iterdir()):
            handler = PrefHandler(load_settings=False)
            try:
                handler.open_text(entry)
            except OSError:
                continue
            name = handler._values.get(PREF_THEME_NAME)
            if not name:
                continue
            schemes = [scheme for scheme in schemes if scheme.name != name]
            schemes.append(handler.load_color_scheme(name))
    schemes.sort(key=lambda scheme: scheme.name)
    return schemes


_DEFAULT_KEY = "default"
_shared: dict[str, PrefHandler] = {}


def default_handler() -> PrefHandler:
    """Return the shared handler, creating it on first use."""
    if _DEFAULT_KEY not in _shared:
        _shared[_DEFAULT_KEY] = PrefHandler()
    return _shared[_DEFAULT_KEY]


def set_default_handler(handler: PrefHandler | None) -> None:
    """Replace the shared handler; ``None`` leaves none in place."""
    delete_default_handler()
    if handler is not None:
        _shared[_DEFAULT_KEY] = handler


def delete_default_handler() -> None:
    """Drop the shared handler so the next use creates a fresh one."""
    _shared.pop(_DEFAULT_KEY, None)