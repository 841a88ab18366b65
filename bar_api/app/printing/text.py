"""Fixed-width text helpers for thermal receipts.

The printer has no reflow of its own: every helper here returns text that is
already laid out for a given column count.
"""

from __future__ import annotations

import math
import re
import unicodedata

_REPLACEMENTS = {
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2013": "-",
    "\u2014": "-",
    "\u2026": "...",
}
_LINE_SPLIT_RE = re.compile(r"\r?\n")


def to_latin1_safe(value: str) -> str:
    """Return ``value`` using only characters a single-byte code page can print.

    Typographic quotes, dashes and ellipses become ASCII; anything else
    outside tab, newline, carriage return and U+0020..U+00FF becomes ``?``.
    """

    text = unicodedata.normalize("NFC", value)
    for src, dst in _REPLACEMENTS.items():
        text = text.replace(src, dst)
    return "".join(
        ch if ch in "\t\n\r" or 32 <= ord(ch) <= 255 else "?" for ch in text
    )


def wrap_text(text: str, width: int) -> list[str]:
    """Word-wrap ``text`` to ``width`` columns.

    A line breaks at the last space of the chunk only when that space sits
    past half the width; otherwise the chunk is cut hard at ``width``.
    """

    if width <= 0:
        return [text]
    parts: list[str] = []
    for base in _LINE_SPLIT_RE.split(text):
        line = base.strip()
        if not line:
            parts.append("")
            continue
        while len(line) > width:
            chunk = line[:width]
            break_at = chunk.rfind(" ")
            if break_at > math.floor(width * 0.5):
                parts.append(chunk[:break_at].rstrip())
                line = line[break_at + 1 :].lstrip()
            else:
                parts.append(chunk)
                line = line[width:]
        parts.append(line)
    return parts or [""]


def left_right_line(left: str, right: str, width: int) -> str:
    """Justify ``left`` and ``right`` on one line with at least one space between.

    ``right`` is never cut; ``left`` is truncated to make room.
    """

    left = left.strip()
    right = right.strip()
    max_left = max(0, width - len(right) - 1)
    left = left[:max_left]
    spaces = max(1, width - len(left) - len(right))
    return f"{left}{' ' * spaces}{right}"


def center_line(text: str, width: int) -> str:
    """Left-pad ``text`` to centre it; no trailing padding is added."""

    text = text.strip()
    if len(text) >= width:
        return text[:width]
    return " " * ((width - len(text)) // 2) + text


def format_money(value: float, symbol: str = "$") -> str:
    """Render ``value`` as ``<symbol> 1,234.50`` with a leading minus if negative."""

    sign = "-" if value < 0 else ""
    return f"{sign}{symbol} {abs(value):,.2f}"
