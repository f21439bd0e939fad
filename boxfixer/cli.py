#
# This file is part of BoxFixer.
#
# SPDX-License-Identifier: BSD-2-Clause

"""BoxFixer command line interface.

Fixes misaligned right borders of ASCII/Unicode box diagrams in text files,
or in standard input when no path is given. Corrections only ever insert
padding; nothing is removed.

Exit codes:
    0  Success
    1  General error (file not found, permission denied, I/O error)
    2  Invalid command-line arguments
    3  Dry-run mode: changes would be made
    4  Parse error (invalid UTF-8 or binary input)
"""

import argparse
import difflib
import json
import logging
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from boxfixer import __version__
from boxfixer.common import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_MIN_SCORE,
    DEFAULT_TAB_WIDTH,
    MAX_FILE_SIZE,
    MAX_TAB_WIDTH,
    PRESETS,
    DecodingError,
)
from boxfixer.corrector import CorrectionPolicy, DocumentReport, correct_text
from boxfixer.width import decode_text

EXIT_SUCCESS      = 0
EXIT_ERROR        = 1
EXIT_INVALID_ARGS = 2
EXIT_WOULD_CHANGE = 3
EXIT_PARSE_ERROR  = 4

JSON_VERSION = "1.0"

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    """Outcome of processing one input.

    Attributes:
        filename: Path of the input, or "stdin"
        original: Text as read
        corrected: Text after correction
        report: Per-block correction report
    """
    filename: str
    original: str
    corrected: str
    report: DocumentReport

    @property
    def changed(self) -> bool:
        return self.original != self.corrected


class FileProcessor:
    """Processes files to fix box diagram alignment.

    Handles reading files, applying the corrections, and writing results
    back to disk. Supports both single file and recursive directory
    processing.
    """

    def __init__(self, policy: Optional[CorrectionPolicy] = None, verbose: bool = False):
        self.policy = policy or CorrectionPolicy()
        self.verbose = verbose

        log_level = logging.INFO if verbose else logging.WARNING
        logging.basicConfig(
            level=log_level,
            format='%(levelname)s: %(message)s'
        )
        self.logger = logging.getLogger(__name__)

    def process_text(self, text: str, filename: str = "stdin") -> FileResult:
        """Correct already decoded text."""
        self.logger.info(f"Processing {filename} ({len(text.splitlines())} lines)...")
        corrected, report = correct_text(text, self.policy)
        return FileResult(filename, text, corrected, report)

    def process_file(self, file_path: str, in_place: bool = False,
                     dry_run: bool = False, backup_ext: Optional[str] = None) -> FileResult:
        """Process a single file.

        Args:
            file_path: Path to the file to process
            in_place: Whether to modify the file in place
            dry_run: If True, don't actually write changes
            backup_ext: When set, copy the file to ``<file><backup_ext>``
                before overwriting it

        Returns:
            FileResult with the original and corrected text

        Raises:
            FileNotFoundError: If file doesn't exist
            PermissionError: If file cannot be read/written
            DecodingError: If file is binary or not valid UTF-8
            ValueError: If file is too large or not a regular file
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        if not path.is_file():
            raise ValueError(f"Not a regular file: {file_path}")

        file_size = path.stat().st_size
        if file_size > MAX_FILE_SIZE:
            raise ValueError(
                f"File too large: {file_size} bytes (max {MAX_FILE_SIZE})"
            )

        if in_place and not dry_run and not os.access(path, os.W_OK):
            raise PermissionError(f"File not writable: {file_path}")

        with open(path, 'rb') as f:
            original = decode_text(f.read(), file_path)

        result = self.process_text(original, file_path)

        if result.changed:
            self.logger.info(
                f"Fixed: {file_path} ({result.report.blocks_modified} block(s), "
                f"{result.report.total_revisions} revision(s))"
            )
        else:
            self.logger.debug(f"No changes: {file_path}")

        if in_place and result.changed and not dry_run:
            if backup_ext:
                backup_path = str(path) + backup_ext
                shutil.copy2(path, backup_path)
                self.logger.info(f"Created backup: {backup_path}")
            try:
                with open(path, 'w', encoding='utf-8', newline='') as f:
                    f.write(result.corrected)
            except PermissionError as exc:
                raise PermissionError(f"Cannot write to {file_path}") from exc

        return result

    def process_directory(self, dir_path: str, pattern: str = '*.md',
                          in_place: bool = False, dry_run: bool = False,
                          backup_ext: Optional[str] = None) -> List[FileResult]:
        """Process all matching files in directory.

        Args:
            dir_path: Directory to process
            pattern: Glob pattern for files (default: *.md)
            in_place: Whether to modify files in place
            dry_run: If True, don't actually write changes
            backup_ext: Backup extension for in-place edits

        Returns:
            Results of the files successfully processed

        Raises:
            NotADirectoryError: If dir_path is not a directory
        """
        path = Path(dir_path)

        if not path.is_dir():
            raise NotADirectoryError(f"Not a directory: {dir_path}")

        results = []
        for file_path in sorted(path.rglob(pattern)):
            if file_path.is_file():
                try:
                    results.append(
                        self.process_file(str(file_path), in_place, dry_run, backup_ext)
                    )
                except (OSError, ValueError) as exc:
                    self.logger.error(f"Error processing {file_path}: {exc}")

        return results


def format_diff(result: FileResult, proposed: bool = False) -> str:
    """Render a unified diff between the original and corrected text."""
    if not result.changed:
        return ""

    tofile = f"b/{result.filename}" + (" (proposed)" if proposed else "")
    diff = difflib.unified_diff(
        result.original.splitlines(keepends=True),
        result.corrected.splitlines(keepends=True),
        fromfile=f"a/{result.filename}",
        tofile=tofile,
    )
    return "".join(line if line.endswith("\n") else line + "\n" for line in diff)


def result_to_json(result: FileResult, dry_run: bool = False,
                   include_content: bool = True) -> Dict:
    report = result.report
    data = {
        "version": JSON_VERSION,
        "status": "dry_run" if dry_run else "success",
        "file": result.filename,
        "input": {
            "lines": report.line_count,
            "bytes": len(result.original.encode("utf-8")),
        },
        "processing": {
            "passthrough": report.passthrough,
            "blocks_detected": report.blocks_found,
            "blocks_modified": report.blocks_modified,
            "revisions_applied": report.total_revisions,
        },
        "output": {
            "lines": report.line_count,
            "bytes": len(result.corrected.encode("utf-8")),
            "changed": result.changed,
        },
        "blocks": [block.to_dict() for block in report.blocks],
    }
    if include_content:
        data["content"] = result.corrected
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='boxfixer',
        description='Fix misaligned right borders in ASCII/Unicode box diagrams',
        epilog=(
            'Example: %(prog)s --in-place file.md\n\n'
            'exit codes:\n'
            '  0  Success\n'
            '  1  General error (file not found, permission denied, I/O error)\n'
            '  2  Invalid command-line arguments\n'
            '  3  Dry-run mode: changes would be made\n'
            '  4  Parse error (invalid UTF-8 or binary input)'
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        'paths',
        nargs='*',
        help='Files or directories to process (reads stdin if omitted)'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )
    parser.add_argument(
        '-i', '--in-place',
        action='store_true',
        help='Modify files in place'
    )
    parser.add_argument(
        '-r', '--recursive',
        action='store_true',
        help='Process directories recursively'
    )
    parser.add_argument(
        '-p', '--pattern',
        default='*.md',
        help='File pattern for recursive processing (default: *.md)'
    )
    parser.add_argument(
        '-n', '--dry-run',
        action='store_true',
        help='Preview changes without modifying files (exit 0=no changes, 3=would change)'
    )
    parser.add_argument(
        '-d', '--diff',
        action='store_true',
        help='Show unified diff of changes instead of full output'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Output results as JSON'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output showing correction progress'
    )
    parser.add_argument(
        '-P', '--preset',
        choices=list(PRESETS),
        help='Confidence threshold preset (conflicts with --min-score)'
    )
    parser.add_argument(
        '-s', '--min-score',
        type=float,
        default=None,
        help=f'Minimum score for applying revisions, 0.0-1.0 (default: {DEFAULT_MIN_SCORE})'
    )
    parser.add_argument(
        '-m', '--max-iters',
        type=int,
        default=DEFAULT_MAX_ITERATIONS,
        help=f'Maximum iterations of the correction loop (default: {DEFAULT_MAX_ITERATIONS})'
    )
    parser.add_argument(
        '-t', '--tab-width',
        type=int,
        default=DEFAULT_TAB_WIDTH,
        help=f'Tab width for expansion, 1-{MAX_TAB_WIDTH} (default: {DEFAULT_TAB_WIDTH})'
    )
    parser.add_argument(
        '-a', '--all',
        action='store_true',
        help='Process all diagram-like blocks, not just confident ones'
    )
    parser.add_argument(
        '--backup',
        action='store_true',
        help='Create backup file before in-place editing'
    )
    parser.add_argument(
        '--backup-ext',
        default='.bak',
        help='Extension for backup files (default: .bak)'
    )

    return parser


def build_policy(args: argparse.Namespace) -> CorrectionPolicy:
    overrides = {
        'max_iterations': args.max_iters,
        'tab_width': args.tab_width,
        'force_all': args.all,
    }
    if args.preset:
        return CorrectionPolicy.from_preset(args.preset, **overrides)
    if args.min_score is not None:
        return CorrectionPolicy(min_score=args.min_score, **overrides)
    return CorrectionPolicy(**overrides)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (see module docstring)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.preset and args.min_score is not None:
        parser.error('--preset conflicts with --min-score')
    if args.dry_run and args.in_place:
        parser.error('--dry-run conflicts with --in-place')
    if args.json and (args.verbose or args.diff):
        parser.error('--json conflicts with --verbose and --diff')
    if args.in_place and not args.paths:
        parser.error('--in-place requires at least one input file')
    if args.backup and not args.in_place:
        parser.error('--backup requires --in-place')

    policy = build_policy(args)
    try:
        policy.validate()
    except ValueError as exc:
        parser.error(str(exc))

    processor = FileProcessor(policy, verbose=args.verbose)
    backup_ext = args.backup_ext if args.backup else None

    if args.max_iters > 100:
        logger.warning(f"--max-iters {args.max_iters} is very high; this may slow processing")
    if args.preset:
        logger.info(f"Using preset: {args.preset} (min_score = {policy.min_score:.1f})")

    errors = 0
    has_parse_error = False
    totals = {'files': 0, 'changed': 0, 'blocks': 0, 'revisions': 0}
    would_change = False
    show_headers = len(args.paths) > 1 and not (args.in_place or args.diff or args.json)

    def emit(result: FileResult) -> None:
        nonlocal would_change
        would_change = would_change or result.changed
        totals['files'] += 1
        totals['changed'] += int(result.changed)
        totals['blocks'] += result.report.blocks_modified
        totals['revisions'] += result.report.total_revisions

        if args.json:
            print(json.dumps(
                result_to_json(result, args.dry_run, not (args.dry_run or args.in_place)),
                indent=2, ensure_ascii=False
            ))
        elif args.dry_run:
            if args.diff:
                sys.stdout.write(format_diff(result, proposed=True))
            if result.changed:
                logger.info(
                    f"Would modify: {result.filename} ({result.report.blocks_modified} block(s), "
                    f"{result.report.total_revisions} revision(s))"
                )
            else:
                logger.info(f"No changes needed: {result.filename}")
        elif args.diff:
            sys.stdout.write(format_diff(result))
        elif not args.in_place:
            if show_headers:
                print(f"==> {result.filename} <==")
            sys.stdout.write(result.corrected)
            if show_headers:
                # Blank line between files
                print()

    if not args.paths:
        try:
            text = decode_text(sys.stdin.buffer.read(), "stdin")
        except DecodingError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return EXIT_PARSE_ERROR
        emit(processor.process_text(text))
        return EXIT_WOULD_CHANGE if args.dry_run and would_change else EXIT_SUCCESS

    for path_str in args.paths:
        path = Path(path_str)

        try:
            if path.is_file():
                emit(processor.process_file(
                    str(path),
                    in_place=args.in_place,
                    dry_run=args.dry_run,
                    backup_ext=backup_ext
                ))

            elif path.is_dir():
                if not args.recursive:
                    print(
                        f"Error: {path_str} is a directory. Use --recursive to process directories.",
                        file=sys.stderr
                    )
                    errors += 1
                    continue

                results = processor.process_directory(
                    str(path),
                    pattern=args.pattern,
                    in_place=args.in_place,
                    dry_run=args.dry_run,
                    backup_ext=backup_ext
                )
                for result in results:
                    emit(result)

                logger.info(f"Processed {len(results)} files in {path_str}")

            else:
                print(f"Error: {path_str} not found", file=sys.stderr)
                errors += 1

        except FileNotFoundError:
            print(f"Error: File not found: {path_str}", file=sys.stderr)
            errors += 1
        except PermissionError:
            print(f"Error: Permission denied: {path_str}", file=sys.stderr)
            errors += 1
        except DecodingError as exc:
            print(f"Error: Cannot decode file {path_str}: {exc}", file=sys.stderr)
            errors += 1
            has_parse_error = True
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            errors += 1
        except OSError as exc:
            print(f"Error processing {path_str}: {exc}", file=sys.stderr)
            errors += 1

    if len(args.paths) > 1:
        logger.info(
            f"Summary: {totals['files']} file(s) processed, {totals['changed']} changed, "
            f"{totals['blocks']} block(s), {totals['revisions']} revision(s), {errors} error(s)"
        )

    # A parse error outranks any other error.
    if has_parse_error:
        return EXIT_PARSE_ERROR
    if errors:
        return EXIT_ERROR
    if args.dry_run and would_change:
        return EXIT_WOULD_CHANGE
    return EXIT_SUCCESS
