"""Color & style helpers for the terminal board.

Decisions:
- Truecolor preferred; falls back to the 256-color cube if unsupported.
- Disabled automatically when not a TTY unless FORCE_COLOR is set.
- Honors NO_COLOR for complete disable.
- Palette comes from Settings (env / .env overrides already applied).
"""
from __future__ import annotations
import os
import sys
from typing import Dict, Mapping, Optional, TextIO

from models import COLUMNS


def _hex_to_rgb(hex_code: str) -> tuple[int, int, int]:
    """Convert a hex color code to an RGB tuple."""
    h = hex_code.lstrip('#')
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def _fg_truecolor(r: int, g: int, b: int) -> str:
    return f"\033[38;2;{r};{g};{b}m"


def _fg_256(r: int, g: int, b: int) -> str:
    """Approximate RGB to xterm 256-color cube."""
    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))
    r6, g6, b6 = to_6(r), to_6(g), to_6(b)
    idx = 16 + 36 * r6 + 6 * g6 + b6
    return f"\033[38;5;{idx}m"


class Theme:
    """ANSI sequences for one output stream; every sequence is '' when disabled."""

    def __init__(self, palette: Mapping[str, str], enabled: bool = True, truecolor: bool = False):
        self.enabled = enabled
        self.truecolor = truecolor
        self.reset = self._code('0')
        self.bold = self._code('1')
        self.dim = self._code('2')
        primary = self._from_hex(palette['primary'])
        self.header = primary
        self.task_id = primary + self.bold
        self.empty = self.dim + primary
        self.columns: Dict[str, str] = {c: self._from_hex(palette[c]) for c in COLUMNS}

    @classmethod
    def from_settings(cls, settings, stream: Optional[TextIO] = None) -> "Theme":
        stream = sys.stdout if stream is None else stream
        isatty = getattr(stream, 'isatty', lambda: False)()
        enabled = (settings.force_color or isatty) and not settings.no_color
        colorterm = os.environ.get("COLORTERM", "").lower()
        truecolor = enabled and any(tok in colorterm for tok in ("truecolor", "24bit"))
        return cls(settings.palette, enabled=enabled, truecolor=truecolor)

    @classmethod
    def plain(cls, palette: Mapping[str, str]) -> "Theme":
        return cls(palette, enabled=False)

    def _code(self, part: str) -> str:
        return f"\033[{part}m" if self.enabled else ''

    def _from_hex(self, hex_code: str) -> str:
        if not self.enabled:
            return ''
        r, g, b = _hex_to_rgb(hex_code)
        if self.truecolor:
            return _fg_truecolor(r, g, b)
        return _fg_256(r, g, b)

    def color(self, text: str, *styles: str) -> str:
        """Apply ANSI styles to a given text."""
        if not self.enabled:
            return text
        return ''.join(styles) + text + self.reset
