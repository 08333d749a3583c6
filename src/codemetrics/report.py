# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Rendering of duplication and lines-of-code results."""

import json
import logging
from dataclasses import asdict
from typing import Any, Sequence

from rich.console import Console
from rich.style import Style
from rich.table import Table

from codemetrics.duplication import (
    DuplicateGroup,
    DuplicationMetrics,
    assessment,
    severity_breakdown,
)
from codemetrics.loc import LocResult

logger = logging.getLogger(__name__)

DEFAULT_GROUP_LIMIT = 20
_RULE_STYLE = Style(color="cyan")
_SEVERITY_STYLES = {"Critical": "bold red", "Tolerable": "yellow"}


def display_limit(total: int, show_all: bool) -> int:
    """Return how many groups to show."""
    return total if show_all else min(DEFAULT_GROUP_LIMIT, total)


def duplication_payload(
    metrics: DuplicationMetrics, groups: Sequence[DuplicateGroup]
) -> dict[str, Any]:
    """Build the serializable duplication document.

    Args:
        metrics: Project-level metrics.
        groups: Groups to include.

    Returns:
        JSON-compatible payload with ``metrics`` and ``groups`` keys.
    """
    percentage = metrics.percentage
    return {
        "metrics": {
            "total_code_lines": metrics.total_code_lines,
            "duplicated_lines": metrics.duplicated_lines,
            "duplication_percentage": percentage,
            "duplicate_groups": metrics.duplicate_groups,
            "files_with_duplicates": metrics.files_with_duplicates,
            "largest_block": metrics.largest_block,
            "assessment": assessment(percentage),
        },
        "groups": [
            {
                "locations": [asdict(location) for location in group.locations],
                "line_count": group.line_count,
                "sample": list(group.sample),
                "severity": group.severity,
                "duplicated_lines": group.duplicated_lines,
            }
            for group in groups
        ],
    }


def format_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)


def write_json(payload: dict[str, Any], console: Console) -> None:
    """Print a JSON payload without markup or highlighting."""
    console.print(format_json(payload), markup=False, highlight=False, soft_wrap=True)


def write_duplication_summary(
    metrics: DuplicationMetrics, groups: Sequence[DuplicateGroup], console: Console
) -> None:
    """Print the duplication summary with the Rule of Three breakdown.

    Args:
        metrics: Project-level metrics.
        groups: All detected groups.
        console: Output console.
    """
    percentage = metrics.percentage
    table = Table(title="Duplication Analysis", show_header=False, expand=False)
    table.add_column("metric")
    table.add_column("value", justify="right")
    table.add_row("Total code lines", str(metrics.total_code_lines))
    table.add_row("Duplicated lines", str(metrics.duplicated_lines))
    table.add_row("Duplication", f"{percentage:.1f}%")
    table.add_row("Duplicate groups", str(metrics.duplicate_groups))
    table.add_row("Files with duplicates", str(metrics.files_with_duplicates))
    if metrics.largest_block > 0:
        table.add_row("Largest duplicate", f"{metrics.largest_block} lines")

    breakdown = severity_breakdown(groups)
    if breakdown.critical_groups:
        table.add_row(
            "Critical duplicates (3+)",
            f"{breakdown.critical_groups} groups, {breakdown.critical_lines} lines",
        )
    if breakdown.tolerable_groups:
        table.add_row(
            "Tolerable duplicates (2x)",
            f"{breakdown.tolerable_groups} groups, {breakdown.tolerable_lines} lines",
        )
    table.add_row("Assessment", assessment(percentage))
    console.print(table)


def write_duplication_detail(
    metrics: DuplicationMetrics,
    groups: Sequence[DuplicateGroup],
    total_groups: int,
    console: Console,
) -> None:
    """Print the summary followed by every shown group.

    Args:
        metrics: Project-level metrics.
        groups: Groups to show, already limited.
        total_groups: Number of groups detected in total.
        console: Output console.
    """
    write_duplication_summary(metrics, groups, console)
    if not groups:
        return

    console.print("Duplicate groups (sorted by severity, then duplicated lines)")
    for position, group in enumerate(groups, start=1):
        console.rule(style=_RULE_STYLE, characters="-")
        console.print(
            f"[{_SEVERITY_STYLES[group.severity]}]\\[{position}] {group.severity.upper()}[/]: "
            f"{group.line_count} lines, {len(group.locations)} occurrences "
            f"({group.duplicated_lines} duplicated lines)",
            highlight=False,
        )
        for location in group.locations:
            console.print(
                f"  {location.file_path}:{location.start_line}-{location.end_line}",
                markup=False,
                highlight=False,
            )
        if group.sample:
            console.print("Sample:")
            for line in group.sample:
                console.print(f"  {line}", markup=False, highlight=False)
            if group.line_count > len(group.sample):
                console.print("  ...")
    console.rule(style=_RULE_STYLE, characters="-")

    if len(groups) < total_groups:
        console.print(
            f"Showing top {len(groups)} of {total_groups} duplicate groups.",
            highlight=False,
        )
        console.print("Use --show-all to see all groups.")


def loc_payload(result: LocResult) -> dict[str, Any]:
    """Build the serializable lines-of-code document."""
    return {
        "languages": [asdict(report) for report in result.languages],
        "totals": {
            "files": sum(report.files for report in result.languages),
            "blank": result.totals.blank,
            "comment": result.totals.comment,
            "code": result.totals.code,
        },
    }


def write_loc_table(result: LocResult, console: Console, verbose: bool = False) -> None:
    """Print per-language line counts as a table.

    Args:
        result: Line count result.
        console: Output console.
        verbose: Also print walk and de-duplication counters.
    """
    if not result.languages:
        console.print("No recognized source files found.")
        return

    table = Table(show_header=True, expand=False)
    table.add_column("Language")
    for column in ("Files", "Blank", "Comment", "Code"):
        table.add_column(column, justify="right")
    for report in result.languages:
        table.add_row(
            report.name,
            str(report.files),
            str(report.blank),
            str(report.comment),
            str(report.code),
        )
    table.add_section()
    table.add_row(
        "Total",
        str(sum(report.files for report in result.languages)),
        str(result.totals.blank),
        str(result.totals.comment),
        str(result.totals.code),
    )
    console.print(table)

    if verbose:
        summary = {
            "total_files": result.total_files,
            "unique_files": result.unique_files,
            "duplicate_files": result.duplicate_files,
            "binary_files": result.binary_files,
            "errors": len(result.errors),
            "elapsed_ms": result.elapsed_ms,
        }
        console.print(
            " ".join(f"{key}={value}" for key, value in summary.items()),
            markup=False,
            highlight=False,
        )
