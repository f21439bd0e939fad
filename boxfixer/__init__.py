#
# This file is part of BoxFixer.
#
# SPDX-License-Identifier: BSD-2-Clause

r"""
BoxFixer: right-border alignment for ASCII/Unicode box diagrams.

Text blocks that look like box diagrams are detected, and their right-hand
borders are padded so that every border lands on the same column. Content
is never removed or reordered; corrections only insert spaces.

Pipeline
--------
raw text → tab expansion → line classification → block detection
→ per block: [target column → revisions → scoring → apply] until stable
→ corrected lines spliced back into the document

Examples
--------
>>> from boxfixer import correct_text
>>> text, report = correct_text("+----+\n| hi|\n+----+")
>>> print(text)
+----+
| hi |
+----+
>>> report.total_revisions
1
"""

__version__ = "0.1.0"

from boxfixer.common import DecodingError, GlyphRole
from boxfixer.classifier import Classification, LineKind, classify
from boxfixer.detector import DiagramBlock, detect_blocks, quick_scan
from boxfixer.revision import Revision, ScoringWeights, target_column
from boxfixer.corrector import (
    BlockReport,
    BlockStatus,
    CorrectionController,
    CorrectionPolicy,
    DocumentReport,
    correct_lines,
    correct_text,
)
