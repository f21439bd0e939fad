#
# This file is part of BoxFixer.
#
# SPDX-License-Identifier: BSD-2-Clause

"""
Target column resolution, revision generation and revision scoring.

A block is aligned on its target column: the rightmost right-border column
found among its lines. Every line whose border sits left of the target gets
a ``Revision`` that inserts spaces right before its border glyph. Lines that
have a left border but no right border get a synthesized revision that pads
them up to the target column, with a lower score.

Revisions only ever insert whitespace.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from boxfixer.classifier import Classification, LineKind
from boxfixer.detector import dominant_left_margin
from boxfixer.width import offset_for_column


# Target Column ------------------------------------------------------------------------------------

def target_column(classifications: Sequence[Classification]) -> Optional[int]:
    """Return the maximum right border column, or None if no line has one."""
    columns = [c.right_border_col for c in classifications if c.has_right_border]
    if not columns:
        return None
    return max(columns)

# Scoring ------------------------------------------------------------------------------------------

@dataclass
class ScoringWeights:
    """Adjustable factors of a revision score.

    A score is the product of a glyph factor, a margin factor and a gap
    factor:

        glyph  = bordered | synthesized
        margin = margin_match | margin_missing | margin_mismatch
        gap    = 1 - gap_penalty * min(1, gap / average block line width)
    """
    bordered: float = 1.0
    synthesized: float = 0.4
    margin_match: float = 1.0
    margin_missing: float = 0.85
    margin_mismatch: float = 0.6
    gap_penalty: float = 0.6


def score_revision(classification: Classification, gap: int,
                   dominant_left: Optional[int], average_width: float,
                   weights: Optional[ScoringWeights] = None) -> float:
    """Score the padding of one line.

    Args:
        classification: Current classification of the line
        gap: Number of columns to insert
        dominant_left: Most common left border column of the block
        average_width: Average visual width of the block's non-blank lines
        weights: Scoring factors (defaults to ``ScoringWeights()``)

    Returns:
        Confidence in [0, 1] that the insertion is correct
    """
    if weights is None:
        weights = ScoringWeights()

    glyph = weights.bordered if classification.has_right_border else weights.synthesized

    if not classification.has_left_border or dominant_left is None:
        margin = weights.margin_missing
    elif classification.left_border_col == dominant_left:
        margin = weights.margin_match
    else:
        margin = weights.margin_mismatch

    relative_gap = min(1.0, gap / average_width) if average_width > 0 else 1.0
    score = glyph * margin * (1.0 - weights.gap_penalty * relative_gap)
    return max(0.0, min(1.0, score))


def average_width(classifications: Sequence[Classification]) -> float:
    widths = [c.visual_width for c in classifications if not c.blank]
    if not widths:
        return 0.0
    return sum(widths) / len(widths)

# Revisions ----------------------------------------------------------------------------------------

@dataclass
class Revision:
    """A proposed whitespace insertion.

    Attributes:
        line_index: Document index of the line
        insertion_column: Visual column where the padding starts
        insertion_offset: String offset where the padding is inserted
        inserted_text: The padding (spaces only)
        score: Confidence in [0, 1]
        synthesized: True when the line has no right border of its own
    """
    line_index: int
    insertion_column: int
    insertion_offset: int
    inserted_text: str
    score: float
    synthesized: bool = False

    @property
    def gap(self) -> int:
        return len(self.inserted_text)

    def apply(self, line: str) -> str:
        """Return ``line`` with the padding inserted."""
        return line[:self.insertion_offset] + self.inserted_text + line[self.insertion_offset:]


def generate_revisions(lines: Sequence[str], classifications: Sequence[Classification],
                       start: int, target: int,
                       weights: Optional[ScoringWeights] = None) -> List[Revision]:
    """Propose one revision per line that falls short of ``target``.

    Args:
        lines: Current (expanded) lines of the block
        classifications: Classification of each block line
        start: Document index of the block's first line
        target: Target column of the block
        weights: Scoring factors

    Returns:
        Scored revisions, in line order
    """
    dominant_left = dominant_left_margin(classifications)
    mean_width = average_width(classifications)
    revisions = []

    for i, (line, c) in enumerate(zip(lines, classifications)):
        if c.has_right_border:
            gap = target - c.right_border_col
            column = c.right_border_col
        elif c.kind is LineKind.VERTICAL_BORDER:
            gap = target - c.visual_width
            column = c.visual_width
        else:
            continue

        if gap <= 0:
            continue

        revisions.append(Revision(
            line_index=start + i,
            insertion_column=column,
            insertion_offset=offset_for_column(line, column),
            inserted_text=" " * gap,
            score=score_revision(c, gap, dominant_left, mean_width, weights),
            synthesized=not c.has_right_border,
        ))

    return revisions


def split_by_threshold(revisions: Sequence[Revision],
                       min_score: float) -> Tuple[List[Revision], List[Revision]]:
    """Split revisions into (accepted, rejected) against ``min_score``."""
    accepted = [r for r in revisions if r.score >= min_score]
    rejected = [r for r in revisions if r.score < min_score]
    return accepted, rejected
