#
# This file is part of BoxFixer.
#
# SPDX-License-Identifier: BSD-2-Clause

"""
Diagram block detection.

Detection runs in two phases:

1. ``quick_scan`` looks at the raw input and measures how many lines hold a
   box glyph at all. Below ``QUICK_SCAN_THRESHOLD`` the document is passed
   through untouched without classifying a single line.
2. ``detect_blocks`` groups consecutive boxy lines into ``DiagramBlock``
   ranges and scores each one.
"""

import itertools
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from boxfixer.classifier import Classification
from boxfixer.common import (
    GLYPH_ROLES,
    LEFT_MARGIN_PENALTY,
    QUICK_SCAN_LIMIT,
    QUICK_SCAN_THRESHOLD,
)

logger = logging.getLogger(__name__)


# Quick Scan ---------------------------------------------------------------------------------------

@dataclass
class QuickScanResult:
    """Outcome of the whole-document density prefilter."""
    lines_scanned: int
    lines_with_glyphs: int
    ratio: float
    likely_has_diagrams: bool


def quick_scan(lines: Iterable[str],
               threshold: float = QUICK_SCAN_THRESHOLD,
               limit: int = QUICK_SCAN_LIMIT) -> QuickScanResult:
    """Decide whether a document is worth classifying.

    Only the first ``limit`` lines are inspected, so the cost does not grow
    with the size of the document.

    Args:
        lines: Raw document lines
        threshold: Minimum fraction of lines holding a box glyph
        limit: Maximum number of lines to inspect

    Returns:
        QuickScanResult with the measured density
    """
    scanned = 0
    with_glyphs = 0
    for line in itertools.islice(lines, limit):
        scanned += 1
        if any(ch in GLYPH_ROLES for ch in line):
            with_glyphs += 1

    ratio = with_glyphs / scanned if scanned else 0.0
    return QuickScanResult(
        lines_scanned=scanned,
        lines_with_glyphs=with_glyphs,
        ratio=ratio,
        likely_has_diagrams=scanned > 0 and ratio >= threshold,
    )

# Diagram Blocks -----------------------------------------------------------------------------------

@dataclass
class DiagramBlock:
    """A run of document lines that looks like a diagram.

    Attributes:
        start: Index of the first line (inclusive)
        end: Index after the last line (exclusive)
        confidence: Likelihood that the run is a diagram, in [0, 1]
    """
    start: int
    end: int
    confidence: float = 0.0

    def __len__(self) -> int:
        return self.end - self.start

    def lines(self) -> range:
        return range(self.start, self.end)

    def accepted(self, threshold: float) -> bool:
        return self.confidence >= threshold


def detect_blocks(classifications: Sequence[Classification]) -> List[DiagramBlock]:
    """Group classified lines into diagram blocks.

    A block opens on a boxy line and keeps growing over boxy lines. A single
    plain line (a blank separator, a row without borders) is tolerated when a
    boxy line follows it; two plain lines in a row close the block. Trailing
    plain lines never belong to a block.

    Args:
        classifications: One classification per document line

    Returns:
        Blocks in document order, each with its confidence score
    """
    blocks = []
    count = len(classifications)
    i = 0

    while i < count:
        if not classifications[i].is_boxy:
            i += 1
            continue

        start = i
        end = i + 1
        plain_run = 0
        j = i + 1
        while j < count:
            if classifications[j].is_boxy:
                plain_run = 0
                end = j + 1
            else:
                plain_run += 1
                if plain_run >= 2:
                    break
            j += 1

        block = DiagramBlock(start, end, block_confidence(classifications[start:end]))
        logger.debug("Block at lines %d-%d (confidence %.2f)", start + 1, end, block.confidence)
        blocks.append(block)
        i = end

    return blocks

# Confidence ---------------------------------------------------------------------------------------

def dominant_left_margin(classifications: Iterable[Classification]) -> Optional[int]:
    """Return the most common left border column (ties go to the leftmost)."""
    counts = Counter(c.left_border_col for c in classifications if c.has_left_border)
    if not counts:
        return None
    return min(counts, key=lambda col: (-counts[col], col))


def block_confidence(classifications: Sequence[Classification]) -> float:
    """Score a block by its share of right-bordered lines.

    The share is reduced when the left-bordered lines do not agree on a
    single left margin.
    """
    if not classifications:
        return 0.0

    bordered = sum(1 for c in classifications if c.has_right_border)
    score = bordered / len(classifications)

    lefts = [c.left_border_col for c in classifications if c.has_left_border]
    if lefts:
        consistency = Counter(lefts).most_common(1)[0][1] / len(lefts)
        score *= 1.0 - LEFT_MARGIN_PENALTY * (1.0 - consistency)

    return max(0.0, min(1.0, score))
