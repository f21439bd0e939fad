#
# This file is part of BoxFixer.
#
# SPDX-License-Identifier: BSD-2-Clause

"""
Line classification against the box glyph taxonomy.

Each (tab-expanded) line is classified on its own, without looking at its
neighbours:

    +----------+     CORNER          (fill, corners and junctions only)
    |  Content |     VERTICAL_BORDER (border glyph at either edge)
    ├──────────┤     JUNCTION
    ------------     HORIZONTAL_FILL
    plain text       PLAIN

The first and last non-space characters decide the left and right border
columns. Classification is idempotent: padding inserted before the right
border only moves ``right_border_col``.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, List, Optional

from boxfixer.common import GlyphRole, glyph_role, is_border_glyph
from boxfixer.width import prefix_widths


# Line Kinds ---------------------------------------------------------------------------------------

class LineKind(enum.Enum):
    CORNER          = "corner"
    HORIZONTAL_FILL = "horizontal_fill"
    VERTICAL_BORDER = "vertical_border"
    JUNCTION        = "junction"
    PLAIN           = "plain"


STRUCTURAL_KINDS = frozenset({LineKind.CORNER, LineKind.HORIZONTAL_FILL, LineKind.JUNCTION})


@dataclass(frozen=True)
class Classification:
    """Result of classifying a single line.

    Attributes:
        kind: Structural category of the line
        visual_width: Width of the whole line in terminal columns
        indent: Visual columns of leading whitespace
        left_border_col: Column of the leading border glyph, if any
        left_glyph: The leading border glyph, if any
        right_border_col: Column of the trailing border glyph, if any
        right_glyph: The trailing border glyph, if any
        right_border_offset: String offset of the trailing border glyph
        blank: True for empty or whitespace-only lines
    """
    kind: LineKind
    visual_width: int = 0
    indent: int = 0
    left_border_col: Optional[int] = None
    left_glyph: Optional[str] = None
    right_border_col: Optional[int] = None
    right_glyph: Optional[str] = None
    right_border_offset: Optional[int] = None
    blank: bool = False

    @property
    def is_boxy(self) -> bool:
        return self.kind is not LineKind.PLAIN

    @property
    def is_structural(self) -> bool:
        return self.kind in STRUCTURAL_KINDS

    @property
    def has_left_border(self) -> bool:
        return self.left_border_col is not None

    @property
    def has_right_border(self) -> bool:
        return self.right_border_col is not None

    @property
    def is_full_border(self) -> bool:
        return self.has_left_border and self.has_right_border


BLANK = Classification(kind=LineKind.PLAIN, blank=True)

# Classifier ---------------------------------------------------------------------------------------

def classify(line: str) -> Classification:
    """Classify a tab-expanded line.

    Args:
        line: Line content without its line terminator

    Returns:
        Classification with the border columns of the line
    """
    start = len(line) - len(line.lstrip())
    end = len(line.rstrip())
    widths = prefix_widths(line)

    if start >= end:
        if not line:
            return BLANK
        return Classification(kind=LineKind.PLAIN, visual_width=widths[-1], blank=True)

    first = line[start]
    last = line[end - 1]

    # A lone glyph is a left border: padding must never move it right.
    left_col = widths[start] if is_border_glyph(first) else None
    right_col = widths[end - 1] if end - 1 > start and is_border_glyph(last) else None

    kind = _structural_kind(line[start:end])
    if kind is None:
        if left_col is None and right_col is None:
            kind = LineKind.PLAIN
        else:
            kind = LineKind.VERTICAL_BORDER

    return Classification(
        kind=kind,
        visual_width=widths[-1],
        indent=widths[start],
        left_border_col=left_col,
        left_glyph=first if left_col is not None else None,
        right_border_col=right_col,
        right_glyph=last if right_col is not None else None,
        right_border_offset=end - 1 if right_col is not None else None,
    )


def _structural_kind(body: str) -> Optional[LineKind]:
    # A structural line holds nothing but glyphs and spaces, with at least one
    # corner, fill or junction among them; vertical glyphs may be mixed in.
    roles = set()
    for ch in body:
        if ch.isspace():
            continue
        role = glyph_role(ch)
        if role is None:
            return None
        roles.add(role)

    if GlyphRole.CORNER in roles:
        return LineKind.CORNER
    if GlyphRole.JUNCTION in roles:
        return LineKind.JUNCTION
    if GlyphRole.HORIZONTAL in roles:
        return LineKind.HORIZONTAL_FILL
    return None


def classify_lines(lines: Iterable[str]) -> List[Classification]:
    return [classify(line) for line in lines]
