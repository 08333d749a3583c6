# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command-line entry point for line counting and duplicate detection."""

import argparse
import logging
import sys
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

from codemetrics.duplication import DEFAULT_MIN_LINES, DuplicateDetector, summarize
from codemetrics.loc import count_project
from codemetrics.pipeline import ScanError, normalize_project
from codemetrics.report import (
    display_limit,
    duplication_payload,
    format_json,
    loc_payload,
    write_duplication_detail,
    write_duplication_summary,
    write_json,
    write_loc_table,
)
from codemetrics.walker import ExcludeFilter, SourceFile, source_files

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--path", default=".", help="Directory or file to analyze.")
    parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    parser.add_argument(
        "--include-tests",
        action="store_true",
        help="Include test files and directories (excluded by default).",
    )
    parser.add_argument(
        "--include-ext",
        action="append",
        default=[],
        help="Only analyze files with this extension (repeatable).",
    )
    parser.add_argument(
        "--exclude-ext",
        action="append",
        default=[],
        help="Skip files with this extension (repeatable).",
    )
    parser.add_argument(
        "--exclude-dir",
        action="append",
        default=[],
        help="Skip directories with this name (repeatable).",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="Skip paths matching this glob pattern (repeatable).",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="cm", description="Code metrics tools.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    loc_parser = subparsers.add_parser(
        "loc", help="Count blank, comment and code lines by language."
    )
    _add_common_arguments(loc_parser)
    loc_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show files read, unique, duplicate, binary and elapsed time.",
    )

    dups_parser = subparsers.add_parser("dups", help="Detect duplicate code across files.")
    _add_common_arguments(dups_parser)
    dups_parser.add_argument(
        "--min-lines",
        type=int,
        default=DEFAULT_MIN_LINES,
        help="Minimum code lines for a duplicate block.",
    )
    dups_parser.add_argument(
        "--report",
        action="store_true",
        help="Show every duplicate group with locations and a sample.",
    )
    dups_parser.add_argument(
        "--show-all",
        action="store_true",
        help="Show all duplicate groups instead of the top 20.",
    )
    dups_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress the skipped-boilerplate diagnostic.",
    )
    dups_parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Worker threads used to classify files.",
    )
    dups_parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.command == "loc":
        return _run_loc(args=args, stdout=stdout, stderr=stderr)
    if args.command == "dups":
        return _run_dups(args=args, stdout=stdout, stderr=stderr)

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _collect_sources(args: argparse.Namespace, stderr: TextIO) -> list[SourceFile] | None:
    """Walk the analysis root.

    Args:
        args: Parsed CLI arguments.
        stderr: Standard error stream.

    Returns:
        Recognized source files, or ``None`` when the walk cannot start.
    """
    root_path = Path(args.path)
    if not root_path.exists():
        logger.warning(f"Path does not exist (path={root_path})")
        stderr.write(f"Path does not exist: {root_path}\n")
        return None
    exclude_filter = ExcludeFilter.build(
        include_extensions=args.include_ext,
        extensions=args.exclude_ext,
        dirs=args.exclude_dir,
        globs=args.exclude,
    )
    try:
        return source_files(
            root_path,
            exclude_tests=not args.include_tests,
            exclude_filter=exclude_filter,
        )
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read .gitignore files (error={exc})")
        stderr.write(f"Failed to read .gitignore files: {exc}\n")
        return None


def _run_loc(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run loc command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    sources = _collect_sources(args=args, stderr=stderr)
    if sources is None:
        return 2
    result = count_project(sources)
    _write_errors(errors=result.errors, stderr=stderr)

    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    if args.format == "json":
        write_json(loc_payload(result), console)
    else:
        write_loc_table(result, console, verbose=args.verbose)
    return 0


def _run_dups(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run dups command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    if args.min_lines <= 0:
        logger.warning(f"Invalid minimum block size (min_lines={args.min_lines})")
        stderr.write("min-lines must be > 0\n")
        return 2
    if args.jobs <= 0:
        logger.warning(f"Invalid worker count (jobs={args.jobs})")
        stderr.write("jobs must be > 0\n")
        return 2

    sources = _collect_sources(args=args, stderr=stderr)
    if sources is None:
        return 2
    scan = normalize_project(
        sources, strip_test_blocks=not args.include_tests, jobs=args.jobs
    )
    _write_errors(errors=scan.errors, stderr=stderr)

    detector = DuplicateDetector(
        min_lines=args.min_lines, quiet=args.quiet or args.format == "json"
    )
    groups = detector.detect(scan.files)
    metrics = summarize(scan.files, groups)
    shown = groups[: display_limit(len(groups), args.show_all)]

    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    if args.format == "json":
        payload = duplication_payload(metrics, shown)
        if args.output:
            try:
                output_path = Path(args.output)
                output_path.parent.mkdir(parents=True, exist_ok=True)
                output_path.write_text(format_json(payload), encoding="utf-8")
            except OSError as exc:
                logger.warning(
                    f"Failed to write JSON output file (output_path={args.output} error={exc})"
                )
                stderr.write(f"Failed to write JSON output file: {args.output}\n")
                return 2
        else:
            write_json(payload, console)
    elif not scan.files:
        console.print("No recognized source files found.")
    elif args.report:
        write_duplication_detail(metrics, shown, len(groups), console)
    else:
        write_duplication_summary(metrics, groups, console)
    return 0


def _write_errors(errors: list[ScanError], stderr: TextIO) -> None:
    """Write recoverable scan errors to stderr.

    Args:
        errors: Recoverable per-file errors.
        stderr: Standard error stream.
    """
    for error in errors:
        stderr.write(f"scan_error: {error.file_path}: {error.message}\n")


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
