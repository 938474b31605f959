"""Color values, color schemes and X11 color name lookup."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

ANSI_COLOR_COUNT = 16
TERM_COLOR_COUNT = 256

_HEX2 = r"([0-9a-fA-F]{1,2})"
_HEX4 = r"([0-9a-fA-F]{1,4})"
_FLOAT = r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)"

_RGB8 = re.compile(rf"rgb:{_HEX2}/{_HEX2}/{_HEX2}")
_SHARP8 = re.compile(rf"#{_HEX2}{_HEX2}{_HEX2}")
_RGB16 = re.compile(rf"rgb:{_HEX4}/{_HEX4}/{_HEX4}")
_SHARP16 = re.compile(rf"#{_HEX4}{_HEX4}{_HEX4}")
_CMYK = re.compile(rf"cmyk:{_FLOAT}/{_FLOAT}/{_FLOAT}/{_FLOAT}")
_CMY = re.compile(rf"cmy:{_FLOAT}/{_FLOAT}/{_FLOAT}")


@dataclass(frozen=True)
class RGBColor:
    """An 8-bit-per-channel color with alpha."""

    red: int = 0
    green: int = 0
    blue: int = 0
    alpha: int = 255


@dataclass
class AnsiColorScheme:
    """The eight basic ANSI colors."""

    black: RGBColor = field(default_factory=RGBColor)
    red: RGBColor = field(default_factory=RGBColor)
    green: RGBColor = field(default_factory=RGBColor)
    yellow: RGBColor = field(default_factory=RGBColor)
    blue: RGBColor = field(default_factory=RGBColor)
    magenta: RGBColor = field(default_factory=RGBColor)
    cyan: RGBColor = field(default_factory=RGBColor)
    white: RGBColor = field(default_factory=RGBColor)


@dataclass
class ColorScheme:
    """A named terminal color scheme; equality compares colors only."""

    name: str = field(default="", compare=False)
    text_fore_color: RGBColor = field(default_factory=RGBColor)
    text_back_color: RGBColor = field(default_factory=RGBColor)
    cursor_fore_color: RGBColor = field(default_factory=RGBColor)
    cursor_back_color: RGBColor = field(default_factory=RGBColor)
    select_fore_color: RGBColor = field(default_factory=RGBColor)
    select_back_color: RGBColor = field(default_factory=RGBColor)
    ansi_colors: AnsiColorScheme = field(default_factory=AnsiColorScheme)
    ansi_colors_h: AnsiColorScheme = field(default_factory=AnsiColorScheme)


def hash_color_name(name: str) -> int:
    """Hash a color name: spaces ignored, case folded, 'E' joined with 'A'."""
    value = 0
    for char in name:
        ch = ord(char.upper()) if char.isascii() else ord(char)
        if ch == ord(" "):
            continue
        if ch == ord("E"):
            ch = ord("A")
        value = ((value << 4) + (ch & 0xFF)) & 0xFFFFFFFF
        high = value & 0xF0000000
        if high:
            value ^= high >> 24
            value ^= high
    return value


def _parse_numeric(name: str) -> RGBColor | None:
    length = len(name)
    for pattern, size in ((_RGB8, 12), (_SHARP8, 7)):
        match = pattern.match(name)
        if length == size and match:
            r, g, b = (int(group, 16) for group in match.groups())
            return RGBColor(r, g, b)
    for pattern, size in ((_RGB16, 18), (_SHARP16, 13)):
        match = pattern.match(name)
        if length == size and match:
            r, g, b = (int(group, 16) >> 8 for group in match.groups())
            return RGBColor(r, g, b)

    values: list[float] | None = None
    match = _CMYK.match(name)
    if match:
        values = [float(group) for group in match.groups()]
    else:
        match = _CMY.match(name)
        if match:
            values = [float(group) for group in match.groups()] + [0.0]
    if values is not None and all(0 <= v <= 1 for v in values):
        c, m, y, k = values
        return RGBColor(
            int((1 - c) * (1 - k) * 255),
            int((1 - m) * (1 - k) * 255),
            int((1 - y) * (1 - k) * 255),
        )
    return None


class XColorsTable:
    """Resolves numeric color specifications and X11 color names."""

    def __init__(self, entries: Iterable[tuple[int, RGBColor]] = ()) -> None:
        pairs = sorted(entries, key=lambda pair: pair[0])
        self._hashes = [h for h, _ in pairs]
        self._colors = [c for _, c in pairs]

    @classmethod
    def from_names(cls, names: Mapping[str, RGBColor]) -> XColorsTable:
        """Build a table from a mapping of color names to colors."""
        return cls((hash_color_name(n), c) for n, c in names.items())

    @classmethod
    def from_rgb_text(cls, text: str) -> XColorsTable:
        """Build a table from the contents of an X11 ``rgb.txt`` file."""
        names: dict[str, RGBColor] = {}
        for line in text.splitlines():
            parts = line.split(None, 3)
            if len(parts) < 4 or line.lstrip().startswith("!"):
                continue
            try:
                r, g, b = (int(p) for p in parts[:3])
            except ValueError:
                continue
            names[parts[3].strip()] = RGBColor(r, g, b)
        return cls.from_names(names)

    def __len__(self) -> int:
        return len(self._hashes)

    def look_up_color(self, name: str) -> RGBColor:
        """Return the color for ``name``; raise LookupError if unknown."""
        color = _parse_numeric(name)
        if color is not None:
            return color
        if not self._hashes:
            raise LookupError("no X colors table loaded")
        target = hash_color_name(name)
        index = bisect.bisect_left(self._hashes, target)
        if index < len(self._hashes) and self._hashes[index] == target:
            return self._colors[index]
        raise LookupError(f"unknown color name: {name!r}")