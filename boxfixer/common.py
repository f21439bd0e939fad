#
# This file is part of BoxFixer.
#
# SPDX-License-Identifier: BSD-2-Clause

"""
Common definitions for BoxFixer.

This module defines the box glyph taxonomy, the tuning constants and the
exceptions shared by the classification, detection and correction stages.

Taxonomy
--------
Every recognized glyph maps to exactly one ``GlyphRole``:

- CORNER:     ``+``, ``┌ ┐ └ ┘`` and their heavy, double and rounded variants
- HORIZONTAL: ``- = ~``, ``─ ━ ═`` and the dashed variants
- VERTICAL:   ``|``, ``│ ┃ ║`` and the dashed variants
- JUNCTION:   every T and cross form (``├ ┤ ┬ ┴ ┼``, ``╠ ╣ ╦ ╩ ╬``, ...)

Characters absent from the table are never box glyphs.
"""

import enum
from typing import Dict, Iterable, Optional


# Glyph Taxonomy -----------------------------------------------------------------------------------

class GlyphRole(enum.Enum):
    """Structural role of a box-drawing glyph."""
    CORNER     = "corner"
    HORIZONTAL = "horizontal"
    VERTICAL   = "vertical"
    JUNCTION   = "junction"


def _chars(first: int, last: int) -> str:
    return "".join(chr(cp) for cp in range(first, last + 1))


CORNER_GLYPHS = (
    "+"
    + _chars(0x250C, 0x251B)  # ┌┍┎┏ ┐┑┒┓ └┕┖┗ ┘┙┚┛
    + _chars(0x2552, 0x255D)  # ╒╓╔ ╕╖╗ ╘╙╚ ╛╜╝
    + _chars(0x256D, 0x2570)  # ╭╮╯╰
)

HORIZONTAL_GLYPHS = "-=~" "─━═" "┄┅┈┉╌╍"

VERTICAL_GLYPHS = "|" "│┃║" "┆┇┊┋╎╏"

JUNCTION_GLYPHS = (
    _chars(0x251C, 0x254B)    # ├ ... ╋
    + _chars(0x255E, 0x256C)  # ╞ ... ╬
)


def _build_glyph_table(groups: Iterable) -> Dict[str, GlyphRole]:
    table = {}
    for role, glyphs in groups:
        for glyph in glyphs:
            if glyph in table:
                raise ValueError(
                    f"Glyph {glyph!r} listed as both {table[glyph].value} and {role.value}"
                )
            table[glyph] = role
    return table


GLYPH_ROLES: Dict[str, GlyphRole] = _build_glyph_table([
    (GlyphRole.CORNER,     CORNER_GLYPHS),
    (GlyphRole.HORIZONTAL, HORIZONTAL_GLYPHS),
    (GlyphRole.VERTICAL,   VERTICAL_GLYPHS),
    (GlyphRole.JUNCTION,   JUNCTION_GLYPHS),
])

# Roles that may terminate a border at either end of a line.
BORDER_ROLES = frozenset({GlyphRole.VERTICAL, GlyphRole.CORNER, GlyphRole.JUNCTION})


def glyph_role(ch: str) -> Optional[GlyphRole]:
    """Return the taxonomy role of ``ch``, or None for plain characters."""
    return GLYPH_ROLES.get(ch)


def is_box_glyph(ch: str) -> bool:
    return ch in GLYPH_ROLES


def is_border_glyph(ch: str) -> bool:
    return GLYPH_ROLES.get(ch) in BORDER_ROLES

# Constants ----------------------------------------------------------------------------------------

# Quick scan (pass-through prefilter)
QUICK_SCAN_THRESHOLD = 0.01  # Minimum fraction of lines holding a box glyph
QUICK_SCAN_LIMIT     = 1000  # Lines inspected by the prefilter

# Tab expansion
DEFAULT_TAB_WIDTH = 4
MAX_TAB_WIDTH     = 16

# Correction policy
DEFAULT_MIN_SCORE       = 0.5  # Revision acceptance threshold
DEFAULT_MAX_ITERATIONS  = 10   # Iteration cap per block
DEFAULT_BLOCK_THRESHOLD = 0.3  # Block confidence acceptance threshold

# Block confidence
LEFT_MARGIN_PENALTY = 0.5  # Weight of left margin inconsistency

# Input limits
MAX_FILE_SIZE = 100 * 1024 * 1024  # 100 MB

# Named acceptance thresholds.
PRESETS: Dict[str, float] = {
    "strict":     0.8,
    "normal":     0.5,
    "aggressive": 0.3,
    "relaxed":    0.1,
}

# Errors -------------------------------------------------------------------------------------------

class BoxFixerError(Exception):
    """Base class for BoxFixer errors."""


class DecodingError(BoxFixerError, ValueError):
    """Input is not valid text (binary data, invalid UTF-8 or malformed characters)."""
