#
# This file is part of BoxFixer.
#
# SPDX-License-Identifier: BSD-2-Clause

"""
Tests for the visual width model, tab expansion and input decoding.
"""

import unittest

from boxfixer.common import DecodingError
from boxfixer.width import (
    char_width,
    decode_text,
    expand_tabs,
    offset_for_column,
    prefix_widths,
    visual_width,
)


class TestVisualWidth(unittest.TestCase):
    """Test terminal column measurement."""

    def test_empty(self):
        """Empty text has no width."""
        self.assertEqual(visual_width(""), 0)

    def test_ascii(self):
        """ASCII characters are one column each."""
        self.assertEqual(visual_width("Hello"), 5)
        self.assertEqual(visual_width("| hi |"), 6)

    def test_box_glyphs_are_narrow(self):
        """Box-drawing glyphs are one column each."""
        self.assertEqual(visual_width("┌──┐"), 4)
        self.assertEqual(visual_width("╔══╗"), 4)

    def test_cjk(self):
        """CJK characters are two columns each."""
        self.assertEqual(visual_width("你好"), 4)
        self.assertEqual(visual_width("Hello世界"), 9)
        self.assertEqual(visual_width("│ データ │"), 10)

    def test_fullwidth(self):
        """Fullwidth forms are two columns."""
        self.assertEqual(visual_width("ＡＢ"), 4)

    def test_combining_marks(self):
        """Combining marks take no column."""
        self.assertEqual(visual_width("e\u0301"), 1)

    def test_zero_width_format_characters(self):
        """Zero-width space, joiner and BOM take no column."""
        self.assertEqual(visual_width("a\u200bb"), 2)
        self.assertEqual(visual_width("a\u200db"), 2)
        self.assertEqual(visual_width("\ufeffab"), 2)

    def test_lone_surrogate_is_rejected(self):
        """Malformed characters are reported, not measured."""
        with self.assertRaises(DecodingError):
            char_width("\ud800")
        with self.assertRaises(DecodingError):
            visual_width("ab\udcff")


class TestPrefixWidths(unittest.TestCase):
    """Test incremental width queries."""

    def test_prefix_widths(self):
        """Entry i is the width of the first i characters."""
        self.assertEqual(prefix_widths(""), [0])
        self.assertEqual(prefix_widths("a你b"), [0, 1, 3, 4])

    def test_offset_for_column(self):
        """Visual columns convert back to insertion offsets."""
        text = "a你b"
        self.assertEqual(offset_for_column(text, 0), 0)
        self.assertEqual(offset_for_column(text, 1), 1)
        self.assertEqual(offset_for_column(text, 2), 1)
        self.assertEqual(offset_for_column(text, 3), 2)
        self.assertEqual(offset_for_column(text, 4), 3)

    def test_offset_after_zero_width_mark(self):
        """A combining mark is never split from its base character."""
        self.assertEqual(offset_for_column("ae\u0301|", 2), 3)

    def test_offset_past_end(self):
        """Columns past the end map to the end of the text."""
        self.assertEqual(offset_for_column("abc", 10), 3)


class TestExpandTabs(unittest.TestCase):
    """Test the tab expansion pre-pass."""

    def test_start_of_line(self):
        self.assertEqual(expand_tabs("\tx", 4), "    x")

    def test_middle_of_line(self):
        self.assertEqual(expand_tabs("ab\tc", 4), "ab  c")

    def test_multiple(self):
        self.assertEqual(expand_tabs("\t\tx", 4), "        x")

    def test_custom_widths(self):
        self.assertEqual(expand_tabs("\tx", 2), "  x")
        self.assertEqual(expand_tabs("a\tx", 8), "a       x")

    def test_wide_character_advances_two_columns(self):
        """Tab stops are computed on visual columns."""
        self.assertEqual(expand_tabs("你\tx", 4), "你  x")

    def test_no_tabs(self):
        line = "│ no tabs │"
        self.assertIs(expand_tabs(line, 4), line)
        self.assertEqual(expand_tabs("", 4), "")

    def test_invalid_width(self):
        with self.assertRaises(ValueError):
            expand_tabs("\tx", 0)


class TestDecodeText(unittest.TestCase):
    """Test input decoding."""

    def test_valid_utf8(self):
        self.assertEqual(decode_text("┌─┐".encode("utf-8")), "┌─┐")

    def test_binary_input(self):
        """NUL bytes mean binary input."""
        with self.assertRaises(DecodingError) as ctx:
            decode_text(b"abc\x00def", "data.bin")
        self.assertIn("binary", str(ctx.exception))
        self.assertIn("data.bin", str(ctx.exception))

    def test_invalid_utf8(self):
        """Invalid UTF-8 names the offending byte."""
        with self.assertRaises(DecodingError) as ctx:
            decode_text(b"ab\xffcd", "stdin")
        self.assertIn("position 2", str(ctx.exception))
        self.assertIn("0xFF", str(ctx.exception))

    def test_decoding_error_is_value_error(self):
        with self.assertRaises(ValueError):
            decode_text(b"\xc3")


if __name__ == "__main__":
    unittest.main()
