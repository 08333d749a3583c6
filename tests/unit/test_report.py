# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import io
import json

import pytest
from rich.console import Console

from codemetrics.classifier import FileStats
from codemetrics.duplication import (
    DuplicateGroup,
    DuplicateLocation,
    DuplicationMetrics,
)
from codemetrics.loc import LanguageReport, LocResult
from codemetrics.report import (
    display_limit,
    duplication_payload,
    format_json,
    loc_payload,
    write_duplication_detail,
    write_duplication_summary,
    write_loc_table,
)


def _console() -> tuple[Console, io.StringIO]:
    stream = io.StringIO()
    return Console(file=stream, force_terminal=False, width=120), stream


def _group(line_count: int, paths: tuple[str, ...], severity: str) -> DuplicateGroup:
    return DuplicateGroup(
        locations=tuple(DuplicateLocation(path, 10, 10 + line_count - 1) for path in paths),
        line_count=line_count,
        sample=tuple(f"line_{index}()" for index in range(min(line_count, 5))),
        severity=severity,  # type: ignore[arg-type]
    )


METRICS = DuplicationMetrics(
    total_code_lines=200,
    duplicated_lines=24,
    duplicate_groups=2,
    files_with_duplicates=3,
    largest_block=8,
)
GROUPS = [
    _group(6, ("a.py", "b.py", "c.py"), "Critical"),
    _group(8, ("a.py", "b.py"), "Tolerable"),
]


def test_rep_001_display_limit() -> None:
    assert display_limit(50, show_all=False) == 20
    assert display_limit(7, show_all=False) == 7
    assert display_limit(50, show_all=True) == 50


def test_rep_002_duplication_payload_fields() -> None:
    payload = json.loads(format_json(duplication_payload(METRICS, GROUPS)))

    assert payload["metrics"] == {
        "assessment": "High",
        "duplicate_groups": 2,
        "duplicated_lines": 24,
        "duplication_percentage": pytest.approx(12.0),
        "files_with_duplicates": 3,
        "largest_block": 8,
        "total_code_lines": 200,
    }
    first = payload["groups"][0]
    assert first["severity"] == "Critical"
    assert first["duplicated_lines"] == 12
    assert first["locations"][0] == {"file_path": "a.py", "start_line": 10, "end_line": 15}
    assert len(first["sample"]) == 5


def test_rep_003_summary_table_shows_rule_of_three_breakdown() -> None:
    console, stream = _console()

    write_duplication_summary(METRICS, GROUPS, console)

    output = stream.getvalue()
    assert "Duplication Analysis" in output
    assert "12.0%" in output
    assert "Critical duplicates (3+)" in output
    assert "1 groups, 12 lines" in output
    assert "Tolerable duplicates (2x)" in output
    assert "High" in output


def test_rep_004_detail_lists_locations_samples_and_truncation_hint() -> None:
    console, stream = _console()

    write_duplication_detail(METRICS, GROUPS[:1], total_groups=2, console=console)

    output = stream.getvalue()
    assert "[1] CRITICAL: 6 lines, 3 occurrences (12 duplicated lines)" in output
    assert "c.py:10-15" in output
    assert "Sample:" in output
    assert "line_4()" in output
    assert "..." in output
    assert "Showing top 1 of 2 duplicate groups." in output


def test_rep_005_loc_payload_and_table() -> None:
    result = LocResult(
        languages=[
            LanguageReport(name="Python", files=2, blank=3, comment=4, code=20),
            LanguageReport(name="Rust", files=1, blank=1, comment=0, code=5),
        ],
        totals=FileStats(blank=4, comment=4, code=25),
        total_files=4,
        unique_files=3,
        duplicate_files=1,
        binary_files=0,
    )
    console, stream = _console()

    payload = loc_payload(result)
    write_loc_table(result, console, verbose=True)

    assert payload["totals"] == {"files": 3, "blank": 4, "comment": 4, "code": 25}
    assert payload["languages"][0]["name"] == "Python"
    output = stream.getvalue()
    assert "Python" in output
    assert "Total" in output
    assert "duplicate_files=1" in output


def test_rep_006_empty_loc_table() -> None:
    console, stream = _console()

    write_loc_table(
        LocResult(
            languages=[],
            totals=FileStats(),
            total_files=0,
            unique_files=0,
            duplicate_files=0,
            binary_files=0,
        ),
        console,
    )

    assert "No recognized source files found." in stream.getvalue()


def test_rep_007_verbose_counters_stay_plain_on_a_colour_console() -> None:
    stream = io.StringIO()
    console = Console(file=stream, force_terminal=False, color_system="truecolor", width=120)
    result = LocResult(
        languages=[LanguageReport(name="Go", files=1, blank=0, comment=0, code=1)],
        totals=FileStats(code=1),
        total_files=1,
        unique_files=1,
        duplicate_files=0,
        binary_files=0,
    )

    write_loc_table(result, console, verbose=True)

    assert (
        "total_files=1 unique_files=1 duplicate_files=0 binary_files=0 errors=0 elapsed_ms=0"
        in stream.getvalue()
    )
