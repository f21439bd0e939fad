#
# This file is part of BoxFixer.
#
# SPDX-License-Identifier: BSD-2-Clause

"""
Tests for the quick scan prefilter and diagram block detection.
"""

import unittest

from boxfixer.classifier import classify_lines
from boxfixer.common import QUICK_SCAN_LIMIT
from boxfixer.detector import (
    DiagramBlock,
    block_confidence,
    detect_blocks,
    dominant_left_margin,
    quick_scan,
)


def blocks_of(lines):
    return [(b.start, b.end) for b in detect_blocks(classify_lines(lines))]


class TestQuickScan(unittest.TestCase):
    """Test the density prefilter."""

    def test_plain_text(self):
        scan = quick_scan(["just some prose"] * 200)
        self.assertEqual(scan.lines_with_glyphs, 0)
        self.assertEqual(scan.ratio, 0.0)
        self.assertFalse(scan.likely_has_diagrams)

    def test_diagram_lines(self):
        scan = quick_scan(["+--+", "|a |", "+--+", "text"])
        self.assertEqual(scan.lines_scanned, 4)
        self.assertEqual(scan.lines_with_glyphs, 3)
        self.assertTrue(scan.likely_has_diagrams)

    def test_threshold_boundary(self):
        """Exactly one percent passes, just below does not."""
        self.assertTrue(quick_scan(["+--+"] + ["prose"] * 99).likely_has_diagrams)
        self.assertFalse(quick_scan(["+--+"] + ["prose"] * 199).likely_has_diagrams)

    def test_scan_is_bounded(self):
        """Only the first QUICK_SCAN_LIMIT lines are inspected."""
        scan = quick_scan(["prose"] * (QUICK_SCAN_LIMIT * 5))
        self.assertEqual(scan.lines_scanned, QUICK_SCAN_LIMIT)

    def test_empty_input(self):
        scan = quick_scan([])
        self.assertEqual(scan.lines_scanned, 0)
        self.assertFalse(scan.likely_has_diagrams)


class TestDetectBlocks(unittest.TestCase):
    """Test grouping of classified lines into blocks."""

    def test_simple_box(self):
        lines = ["Some text before", "+----+", "| hi |", "+----+", "Text after"]
        self.assertEqual(blocks_of(lines), [(1, 4)])

    def test_no_diagrams(self):
        self.assertEqual(blocks_of(["hello", "world", "", "more prose"]), [])

    def test_empty_input(self):
        self.assertEqual(blocks_of([]), [])

    def test_only_blanks(self):
        self.assertEqual(blocks_of(["", "   ", ""]), [])

    def test_single_blank_line_inside_block(self):
        """One plain line between boxy lines stays in the block."""
        lines = ["+--+", "|a |", "", "|b |", "+--+"]
        self.assertEqual(blocks_of(lines), [(0, 5)])

    def test_two_plain_lines_split_blocks(self):
        lines = ["+--+", "|a |", "+--+", "", "", "+--+", "|b |", "+--+"]
        self.assertEqual(blocks_of(lines), [(0, 3), (5, 8)])

    def test_trailing_plain_lines_trimmed(self):
        self.assertEqual(blocks_of(["+--+", "|a |", "+--+", ""]), [(0, 3)])
        self.assertEqual(blocks_of(["+--+", "|a |", "+--+", "", ""]), [(0, 3)])

    def test_block_at_start_and_end(self):
        self.assertEqual(blocks_of(["┌──┐", "│a │", "└──┘", "", "", "text"]), [(0, 3)])
        self.assertEqual(blocks_of(["text", "", "┌──┐", "│a │", "└──┘"]), [(2, 5)])

    def test_multiple_blocks_separated_by_prose(self):
        lines = [
            "First box:",
            "┌─────────┐",
            "│ Box 1  │",
            "└─────────┘",
            "",
            "Second box:",
            "┌───────────────┐",
            "│ Box 2        │",
            "└───────────────┘",
        ]
        self.assertEqual(blocks_of(lines), [(1, 4), (6, 9)])

    def test_large_document_is_linear(self):
        """A box deep inside a long document is found as a single block."""
        lines = ["plain text line"] * 10000
        lines[5000:5003] = ["+----+", "| hi|", "+----+"]
        self.assertEqual(blocks_of(lines), [(5000, 5003)])


class TestBlockConfidence(unittest.TestCase):
    """Test block confidence scoring."""

    def test_fully_bordered_block(self):
        c = classify_lines(["+----+", "| hi |", "+----+"])
        self.assertEqual(block_confidence(c), 1.0)

    def test_partially_bordered_block(self):
        """The score is the share of right-bordered lines."""
        c = classify_lines(["+--+", "|a |", "", "|b |", "+--+"])
        self.assertAlmostEqual(block_confidence(c), 0.8)

    def test_no_right_border(self):
        c = classify_lines(["| short", "| much longer text"])
        self.assertEqual(block_confidence(c), 0.0)

    def test_inconsistent_left_margin(self):
        """Disagreeing left margins lower the score."""
        c = classify_lines(["| a |", "  | b |"])
        self.assertAlmostEqual(block_confidence(c), 0.75)

    def test_empty(self):
        self.assertEqual(block_confidence([]), 0.0)

    def test_detected_blocks_carry_confidence(self):
        blocks = detect_blocks(classify_lines(["+----+", "| hi |", "+----+"]))
        self.assertEqual(len(blocks), 1)
        self.assertEqual(blocks[0].confidence, 1.0)

    def test_dominant_left_margin(self):
        c = classify_lines(["| a |", "| b |", "  | c |"])
        self.assertEqual(dominant_left_margin(c), 0)
        self.assertIsNone(dominant_left_margin(classify_lines(["text", "----"])))

    def test_dominant_left_margin_tie(self):
        """Ties go to the leftmost column."""
        c = classify_lines(["   | a |", " | b |"])
        self.assertEqual(dominant_left_margin(c), 1)


class TestDiagramBlock(unittest.TestCase):

    def test_range(self):
        block = DiagramBlock(start=2, end=5, confidence=0.4)
        self.assertEqual(len(block), 3)
        self.assertEqual(list(block.lines()), [2, 3, 4])

    def test_accepted(self):
        block = DiagramBlock(start=0, end=1, confidence=0.4)
        self.assertTrue(block.accepted(0.3))
        self.assertTrue(block.accepted(0.4))
        self.assertFalse(block.accepted(0.5))


if __name__ == "__main__":
    unittest.main()
