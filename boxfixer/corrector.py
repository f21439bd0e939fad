#
# This file is part of BoxFixer.
#
# SPDX-License-Identifier: BSD-2-Clause

"""
Iterative correction of diagram blocks.

Each accepted block is driven through a bounded loop:

    Start -> Iterating -> Converged
                       -> MaxIterationsReached

One iteration recomputes the target column, generates and scores
revisions, drops the ones under the acceptance threshold and applies the
rest. An iteration that accepts nothing means the block has converged. A
block without any right border cannot be corrected and stops at once.

The document driver runs the quick scan, expands tabs, classifies every
line, detects blocks, corrects them one by one and splices the corrected
lines back into the document. Lines that no revision touched are returned
exactly as they came in.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from boxfixer.classifier import Classification, classify, classify_lines
from boxfixer.common import (
    DEFAULT_BLOCK_THRESHOLD,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_MIN_SCORE,
    DEFAULT_TAB_WIDTH,
    MAX_TAB_WIDTH,
    PRESETS,
    QUICK_SCAN_THRESHOLD,
)
from boxfixer.detector import DiagramBlock, QuickScanResult, detect_blocks, quick_scan
from boxfixer.revision import (
    Revision,
    ScoringWeights,
    generate_revisions,
    split_by_threshold,
    target_column,
)
from boxfixer.width import expand_tabs

logger = logging.getLogger(__name__)


# Policy -------------------------------------------------------------------------------------------

@dataclass
class CorrectionPolicy:
    """Thresholds and limits applied while correcting a document.

    Attributes:
        min_score: Minimum revision score to apply a revision
        max_iterations: Iteration cap per block
        block_threshold: Minimum block confidence to correct a block
        force_all: Skip the quick scan and correct every block
        tab_width: Tab stop width used by the tab expansion pre-pass
        weights: Revision scoring factors
    """
    min_score: float = DEFAULT_MIN_SCORE
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    block_threshold: float = DEFAULT_BLOCK_THRESHOLD
    force_all: bool = False
    tab_width: int = DEFAULT_TAB_WIDTH
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    @classmethod
    def from_preset(cls, name: str, **overrides) -> "CorrectionPolicy":
        """Build a policy whose ``min_score`` comes from a named preset."""
        try:
            min_score = PRESETS[name]
        except KeyError:
            raise ValueError(
                f"Unknown preset: {name} (choose from {', '.join(PRESETS)})"
            ) from None
        return cls(min_score=min_score, **overrides)

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if not 0.0 <= self.min_score <= 1.0:
            raise ValueError("min_score must be between 0.0 and 1.0")
        if not 0.0 <= self.block_threshold <= 1.0:
            raise ValueError("block_threshold must be between 0.0 and 1.0")
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if not 1 <= self.tab_width <= MAX_TAB_WIDTH:
            raise ValueError(f"tab_width must be between 1 and {MAX_TAB_WIDTH}")

# Reports ------------------------------------------------------------------------------------------

class BlockStatus(enum.Enum):
    CONVERGED      = "converged"
    MAX_ITERATIONS = "max_iterations"
    NO_BORDER      = "no_border"       # No right border: cannot correct
    SKIPPED        = "skipped"         # Below the block confidence threshold


@dataclass
class CorrectionState:
    iteration_count: int = 0
    converged: bool = False
    no_border: bool = False

    @property
    def status(self) -> BlockStatus:
        if self.no_border:
            return BlockStatus.NO_BORDER
        if self.converged:
            return BlockStatus.CONVERGED
        return BlockStatus.MAX_ITERATIONS


@dataclass
class BlockReport:
    """What happened to one block.

    Attributes:
        start: Index of the block's first line
        end: Index after the block's last line
        confidence: Block confidence score
        status: Terminal state of the block
        target_column: Last target column computed, if any
        revisions_per_iteration: Revisions applied by each iteration
        skipped: Candidates left under the threshold by the final pass
        changed_lines: Document indices of the lines that were padded
    """
    start: int
    end: int
    confidence: float
    status: BlockStatus = BlockStatus.CONVERGED
    target_column: Optional[int] = None
    revisions_per_iteration: List[int] = field(default_factory=list)
    skipped: List[Revision] = field(default_factory=list)
    changed_lines: List[int] = field(default_factory=list)

    @property
    def iterations(self) -> int:
        return len(self.revisions_per_iteration)

    @property
    def revisions_applied(self) -> int:
        return sum(self.revisions_per_iteration)

    @property
    def modified(self) -> bool:
        return self.revisions_applied > 0

    def to_dict(self) -> Dict:
        return {
            "start_line": self.start + 1,
            "end_line": self.end,
            "confidence": round(self.confidence, 3),
            "status": self.status.value,
            "target_column": self.target_column,
            "iterations": self.iterations,
            "revisions_per_iteration": list(self.revisions_per_iteration),
            "revisions_applied": self.revisions_applied,
            "skipped_candidates": len(self.skipped),
        }


@dataclass
class DocumentReport:
    """Summary of a document correction run."""
    line_count: int = 0
    scan: Optional[QuickScanResult] = None
    passthrough: bool = False
    blocks: List[BlockReport] = field(default_factory=list)
    changed_lines: List[int] = field(default_factory=list)

    @property
    def blocks_found(self) -> int:
        return len(self.blocks)

    @property
    def blocks_modified(self) -> int:
        return sum(1 for block in self.blocks if block.modified)

    @property
    def total_revisions(self) -> int:
        return sum(block.revisions_applied for block in self.blocks)

    def to_dict(self) -> Dict:
        return {
            "passthrough": self.passthrough,
            "blocks_detected": self.blocks_found,
            "blocks_modified": self.blocks_modified,
            "revisions_applied": self.total_revisions,
            "blocks": [block.to_dict() for block in self.blocks],
        }

# Correction Controller ----------------------------------------------------------------------------

class CorrectionController:
    """Drives a single block to an aligned, stable state.

    Blocks share no state, so one controller can correct the blocks of a
    document in any order.
    """

    def __init__(self, policy: Optional[CorrectionPolicy] = None):
        self.policy = policy or CorrectionPolicy()

    def correct_block(self, lines: List[str], block: DiagramBlock,
                      classifications: Optional[Sequence[Classification]] = None) -> BlockReport:
        """Correct one block of ``lines`` in place.

        Args:
            lines: Tab-expanded document lines (modified in place)
            block: Block to correct
            classifications: Classifications of the document lines, reused
                for the first iteration when given

        Returns:
            BlockReport describing the iterations that ran
        """
        report = BlockReport(block.start, block.end, block.confidence)
        state = CorrectionState()
        changed = set()

        if classifications is None:
            current = classify_lines(lines[block.start:block.end])
        else:
            current = list(classifications[block.start:block.end])

        while True:
            target = target_column(current)
            if target is None:
                state.no_border = True
                logger.info("    No right border found, cannot correct")
                break
            report.target_column = target

            revisions = generate_revisions(
                lines[block.start:block.end], current, block.start, target, self.policy.weights
            )
            accepted, rejected = split_by_threshold(revisions, self.policy.min_score)
            report.skipped = rejected
            for revision in rejected:
                logger.debug("    Line %d: skipped padding of %d (score %.2f < %.2f)",
                             revision.line_index + 1, revision.gap, revision.score,
                             self.policy.min_score)

            if not accepted:
                state.converged = True
                if state.iteration_count:
                    logger.info("    Converged after %d iteration(s)", state.iteration_count)
                break

            # Revisions touch distinct lines, so applying them one after the
            # other is the same as applying them all to the pre-iteration state.
            for revision in accepted:
                index = revision.line_index
                lines[index] = revision.apply(lines[index])
                current[index - block.start] = classify(lines[index])
                changed.add(index)

            state.iteration_count += 1
            report.revisions_per_iteration.append(len(accepted))
            logger.info("    Iteration %d: applied %d revision(s)",
                        state.iteration_count, len(accepted))

            if state.iteration_count >= self.policy.max_iterations:
                logger.info("    Stopped after %d iteration(s) without converging",
                            state.iteration_count)
                break

        report.status = state.status
        report.changed_lines = sorted(changed)
        return report

# Document Correction ------------------------------------------------------------------------------

def correct_lines(lines: Sequence[str],
                  policy: Optional[CorrectionPolicy] = None) -> Tuple[List[str], DocumentReport]:
    """Correct every diagram block of a document.

    Args:
        lines: Document lines without line terminators
        policy: Correction policy (defaults to ``CorrectionPolicy()``)

    Returns:
        Tuple of (corrected lines, DocumentReport). Untouched lines are the
        input strings themselves; padded lines are tab-expanded.

    Raises:
        DecodingError: If a line holds malformed characters
        ValueError: If the policy is invalid
    """
    if policy is None:
        policy = CorrectionPolicy()
    policy.validate()

    original = list(lines)
    report = DocumentReport(line_count=len(original))

    if not policy.force_all:
        report.scan = quick_scan(original)
        if not report.scan.likely_has_diagrams:
            report.passthrough = True
            logger.info(
                "Quick scan: no diagrams detected (%d/%d lines, %.1f%% box glyphs < %.1f%% threshold)",
                report.scan.lines_with_glyphs, report.scan.lines_scanned,
                report.scan.ratio * 100, QUICK_SCAN_THRESHOLD * 100,
            )
            return original, report

    expanded = [expand_tabs(line, policy.tab_width) for line in original]
    classifications = classify_lines(expanded)
    blocks = detect_blocks(classifications)
    logger.info("Found %d diagram block(s)", len(blocks))

    controller = CorrectionController(policy)
    changed = set()
    for number, block in enumerate(blocks, 1):
        if not policy.force_all and not block.accepted(policy.block_threshold):
            logger.info("  Block %d: lines %d-%d skipped (confidence: %.0f%%)",
                        number, block.start + 1, block.end, block.confidence * 100)
            report.blocks.append(BlockReport(
                block.start, block.end, block.confidence, status=BlockStatus.SKIPPED
            ))
            continue

        logger.info("  Block %d: lines %d-%d (confidence: %.0f%%)",
                    number, block.start + 1, block.end, block.confidence * 100)
        block_report = controller.correct_block(expanded, block, classifications)
        report.blocks.append(block_report)
        changed.update(block_report.changed_lines)

    report.changed_lines = sorted(changed)
    corrected = [expanded[i] if i in changed else line for i, line in enumerate(original)]
    return corrected, report


def split_lines(text: str) -> Tuple[List[str], List[str]]:
    """Split ``text`` into line bodies and their terminators (``\\n``, ``\\r\\n`` or ``''``)."""
    bodies = []
    endings = []
    pieces = text.split("\n")
    last = pieces.pop()
    for piece in pieces:
        if piece.endswith("\r"):
            bodies.append(piece[:-1])
            endings.append("\r\n")
        else:
            bodies.append(piece)
            endings.append("\n")
    if last:
        bodies.append(last)
        endings.append("")
    return bodies, endings


def correct_text(text: str,
                 policy: Optional[CorrectionPolicy] = None) -> Tuple[str, DocumentReport]:
    """Correct a whole text, keeping every line terminator as it was."""
    bodies, endings = split_lines(text)
    corrected, report = correct_lines(bodies, policy)
    return "".join(body + ending for body, ending in zip(corrected, endings)), report
