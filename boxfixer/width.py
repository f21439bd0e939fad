#
# This file is part of BoxFixer.
#
# SPDX-License-Identifier: BSD-2-Clause

"""
Visual width model.

Measures text in terminal cells following the Unicode East Asian Width
property, so that border columns line up the way they are displayed:

- combining marks, format characters and controls: 0 columns
- East Asian Wide and Fullwidth characters (CJK, most emoji): 2 columns
- everything else, box-drawing glyphs included: 1 column

Tabs must be expanded (``expand_tabs``) before any measurement.
"""

import unicodedata
from typing import List

from boxfixer.common import DEFAULT_TAB_WIDTH, DecodingError


# Character Width ----------------------------------------------------------------------------------

def char_width(ch: str) -> int:
    """Return the number of terminal columns occupied by ``ch``.

    Raises:
        DecodingError: If ``ch`` is a lone surrogate (undecodable input
            smuggled through ``surrogateescape``).
    """
    cp = ord(ch)
    if 0x20 <= cp < 0x7F:
        return 1
    if 0xD800 <= cp <= 0xDFFF:
        raise DecodingError(f"Malformed character U+{cp:04X} (lone surrogate)")
    if cp < 0x20 or 0x7F <= cp < 0xA0:
        return 0
    if unicodedata.combining(ch) or unicodedata.category(ch) in ("Mn", "Me", "Cf"):
        return 0
    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return 2
    return 1


def visual_width(text: str) -> int:
    """Return the visual width of ``text`` in terminal columns."""
    if text.isascii() and text.isprintable():
        return len(text)
    return sum(char_width(ch) for ch in text)


def prefix_widths(text: str) -> List[int]:
    """Return cumulative widths: entry ``i`` is the width of ``text[:i]``.

    The list has ``len(text) + 1`` entries and is non-decreasing, so the
    width of any prefix can be looked up without re-measuring it.
    """
    widths = [0]
    total = 0
    for ch in text:
        total += char_width(ch)
        widths.append(total)
    return widths


def offset_for_column(text: str, column: int) -> int:
    """Convert a visual column into an insertion offset.

    Returns the last offset whose prefix is at most ``column`` columns wide.
    Zero-width marks stay attached to the character before them, and a column
    inside a wide character maps to the offset before that character. Columns
    past the end of the text map to ``len(text)``.
    """
    offset = 0
    total = 0
    for i, ch in enumerate(text):
        total += char_width(ch)
        if total > column:
            break
        offset = i + 1
    return offset

# Tab Expansion ------------------------------------------------------------------------------------

def expand_tabs(line: str, tab_width: int = DEFAULT_TAB_WIDTH) -> str:
    """Replace tabs with spaces up to the next multiple of ``tab_width`` columns.

    Columns are visual columns, so a wide character before a tab advances the
    tab stop computation by two.
    """
    if tab_width < 1:
        raise ValueError(f"Tab width must be at least 1, got {tab_width}")
    if "\t" not in line:
        return line

    parts = []
    column = 0
    for ch in line:
        if ch == "\t":
            spaces = tab_width - (column % tab_width)
            parts.append(" " * spaces)
            column += spaces
        else:
            parts.append(ch)
            column += char_width(ch)
    return "".join(parts)

# Decoding -----------------------------------------------------------------------------------------

def decode_text(data: bytes, source: str = "<input>") -> str:
    """Decode raw input as UTF-8.

    Raises:
        DecodingError: If the data contains NUL bytes (binary input) or is
            not valid UTF-8.
    """
    if b"\x00" in data:
        raise DecodingError(f"Input appears to be binary: {source}")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodingError(
            f"Invalid UTF-8 at byte position {exc.start} "
            f"(byte value: 0x{data[exc.start]:02X}) in {source}"
        ) from exc
