# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import logging
from pathlib import Path
from typing import Sequence

import pytest

from codemetrics.duplication import (
    DuplicateDetector,
    DuplicateGroup,
    DuplicateLocation,
    assessment,
    severity_breakdown,
    summarize,
)
from codemetrics.duplication.extension import (
    extend_backward,
    extend_forward,
    verify_extended_block,
)
from codemetrics.duplication.groups import sort_groups
from codemetrics.duplication.hashing import (
    FNV_OFFSET_BASIS,
    build_fingerprint_index,
    combine_digests,
    fnv1a,
)
from codemetrics.duplication.validation import ValidationResult, validate_buckets
from codemetrics.normalizer import NormalizedFile, NormalizedLine


def _block(size: int, tag: str = "shared") -> list[str]:
    return [f"{tag}_{index} = compute({index})" for index in range(size)]


def _unique(tag: str, count: int) -> list[str]:
    return [f"{tag}_unique_{index}()" for index in range(count)]


def _file(
    path: str, texts: Sequence[str], line_numbers: Sequence[int] | None = None
) -> NormalizedFile:
    numbers = line_numbers or range(1, len(texts) + 1)
    return NormalizedFile(
        path=Path(path),
        lines=tuple(
            NormalizedLine(line_number=number, text=text)
            for number, text in zip(numbers, texts)
        ),
    )


def _group(
    paths: Sequence[str], line_count: int, severity: str, start_line: int = 1
) -> DuplicateGroup:
    return DuplicateGroup(
        locations=tuple(
            DuplicateLocation(path, start_line, start_line + line_count - 1)
            for path in paths
        ),
        line_count=line_count,
        sample=(),
        severity=severity,  # type: ignore[arg-type]
    )


def test_dup_001_two_files_share_one_minimal_block() -> None:
    files = [
        _file("a.py", ["a_head()", *_block(6), "a_tail()"]),
        _file("b.py", [*_unique("b", 2), *_block(6)]),
    ]

    groups = DuplicateDetector(min_lines=6).detect(files)

    assert len(groups) == 1
    group = groups[0]
    assert group.line_count == 6
    assert group.severity == "Tolerable"
    assert group.duplicated_lines == 6
    assert group.locations == (
        DuplicateLocation("a.py", 2, 7),
        DuplicateLocation("b.py", 3, 8),
    )
    assert group.sample == tuple(_block(6)[:5])


def test_dup_002_three_occurrences_are_critical() -> None:
    files = [
        _file(name, [*_unique(name, 1), *_block(6)]) for name in ("a.rs", "b.rs", "c.rs")
    ]

    groups = DuplicateDetector(min_lines=6).detect(files)

    assert len(groups) == 1
    assert groups[0].severity == "Critical"
    assert len(groups[0].locations) == 3
    assert groups[0].duplicated_lines == 12


def test_dup_003_longer_block_is_reported_once_at_full_length() -> None:
    files = [
        _file("a.py", ["a_head()", *_block(8), "a_tail()"]),
        _file("b.py", [*_block(8), "b_tail()"]),
    ]

    groups = DuplicateDetector(min_lines=6).detect(files)

    assert len(groups) == 1
    assert groups[0].line_count == 8
    assert groups[0].locations == (
        DuplicateLocation("a.py", 2, 9),
        DuplicateLocation("b.py", 1, 8),
    )
    assert len(groups[0].sample) == 5


def test_dup_004_boilerplate_ceiling_skips_with_single_warning(
    caplog: pytest.LogCaptureFixture,
) -> None:
    files = [_file(f"f{index:03d}.py", _block(6)) for index in range(150)]

    with caplog.at_level(logging.WARNING):
        groups = DuplicateDetector(min_lines=6).detect(files)

    assert groups == []
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Skipped 1 patterns with more than 100 occurrences" in warnings[0].getMessage()


def test_dup_005_quiet_detector_suppresses_boilerplate_warning(
    caplog: pytest.LogCaptureFixture,
) -> None:
    files = [_file(f"f{index:03d}.py", _block(6)) for index in range(150)]

    with caplog.at_level(logging.WARNING):
        groups = DuplicateDetector(min_lines=6, quiet=True).detect(files)

    assert groups == []
    assert not [record for record in caplog.records if record.levelno == logging.WARNING]


def test_dup_006_occurrences_at_the_ceiling_are_still_reported() -> None:
    files = [_file(f"f{index:03d}.py", _block(6)) for index in range(100)]

    groups = DuplicateDetector(min_lines=6).detect(files)

    assert len(groups) == 1
    assert len(groups[0].locations) == 100
    assert groups[0].duplicated_lines == 6 * 99


def test_dup_007_same_file_duplicates_are_grouped() -> None:
    files = [_file("lib.go", [*_block(6), "separator()", *_block(6)])]

    groups = DuplicateDetector(min_lines=6).detect(files)

    assert len(groups) == 1
    assert groups[0].locations == (
        DuplicateLocation("lib.go", 1, 6),
        DuplicateLocation("lib.go", 8, 13),
    )


def test_dup_008_locations_map_back_to_original_line_numbers() -> None:
    files = [
        _file("a.c", _block(6), line_numbers=[3, 4, 8, 9, 10, 15]),
        _file("b.c", _block(6)),
    ]

    groups = DuplicateDetector(min_lines=6).detect(files)

    assert groups[0].locations == (
        DuplicateLocation("a.c", 3, 15),
        DuplicateLocation("b.c", 1, 6),
    )


def test_dup_009_smaller_min_lines_covers_every_larger_min_lines_block() -> None:
    files = [
        _file("a.py", [*_block(8), "a_mid()", *_block(6, "other"), "a_tail()"]),
        _file("b.py", ["b_head()", *_block(8), *_unique("b", 2), *_block(6, "other")]),
    ]

    strict = DuplicateDetector(min_lines=8).detect(files)
    loose = DuplicateDetector(min_lines=6).detect(files)

    assert len(strict) == 1
    assert len(loose) == 2
    for group in strict:
        for location in group.locations:
            assert any(
                other.file_path == location.file_path
                and other.start_line <= location.start_line
                and other.end_line >= location.end_line
                for candidate in loose
                for other in candidate.locations
            )


def test_dup_010_every_location_holds_identical_text() -> None:
    files = [
        _file("a.py", [*_block(7), *_unique("a", 3), *_block(6, "x")]),
        _file("b.py", [*_unique("b", 1), *_block(7)]),
        _file("c.py", [*_block(6, "x"), *_unique("c", 4), *_block(7)]),
    ]
    by_path = {normalized.path.as_posix(): normalized for normalized in files}

    groups = DuplicateDetector(min_lines=6).detect(files)

    assert groups
    for group in groups:
        texts = []
        for location in group.locations:
            texts.append(
                [
                    line.text
                    for line in by_path[location.file_path].lines
                    if location.start_line <= line.line_number <= location.end_line
                ]
            )
        assert all(len(text) == group.line_count for text in texts)
        assert all(text == texts[0] for text in texts)


def test_dup_011_detection_is_deterministic() -> None:
    files = [
        _file("a.py", [*_block(7), *_unique("a", 3), *_block(6, "x")]),
        _file("b.py", [*_block(6, "x"), *_block(7)]),
    ]
    detector = DuplicateDetector(min_lines=6)

    assert detector.detect(files) == detector.detect(files)


def test_dup_012_files_shorter_than_min_lines_contribute_no_windows() -> None:
    files = [_file("short.py", _block(3)), _file("long.py", _block(4))]

    assert build_fingerprint_index(files, min_lines=4) != {}
    assert all(
        file_index == 1
        for locations in build_fingerprint_index(files, min_lines=4).values()
        for file_index, _ in locations
    )
    assert DuplicateDetector(min_lines=6).detect(files) == []


@pytest.mark.parametrize(
    ("min_lines", "max_occurrences"),
    [(0, 100), (-1, 100), (6, 1)],
)
def test_dup_013_detector_rejects_invalid_configuration(
    min_lines: int, max_occurrences: int
) -> None:
    with pytest.raises(ValueError):
        DuplicateDetector(min_lines=min_lines, max_occurrences=max_occurrences)


def test_dup_014_validation_drops_hash_collisions_and_single_locations() -> None:
    files = [_file("a.py", ["x()", "y()"]), _file("b.py", ["x()", "z()"])]
    index = {
        1: [(0, 0), (1, 0)],
        2: [(0, 1), (0, 1)],
    }

    result = validate_buckets(index, files, min_lines=2, max_occurrences=100)

    assert result.confirmed == {}
    assert result.ordered == []
    assert result.skipped_collisions == 1
    assert result.skipped_boilerplate == 0


def test_dup_015_validation_confirms_sorted_deduplicated_locations() -> None:
    files = [_file("a.py", ["x()", "y()"]), _file("b.py", ["x()", "y()"])]

    result = validate_buckets({9: [(1, 0), (0, 0), (1, 0)]}, files, min_lines=2, max_occurrences=2)

    assert result.confirmed == {((0, 0), (1, 0)): 9}
    assert result.ordered == [((0, 0), (1, 0))]


def test_dup_016_extension_walks_confirmed_neighbours() -> None:
    confirmed = {((0, 0), (1, 2)), ((0, 1), (1, 3)), ((0, 2), (1, 4))}

    consumed: set = set()
    start, backward = extend_backward(((0, 2), (1, 4)), confirmed, consumed)
    assert start == ((0, 0), (1, 2))
    assert backward == 2
    assert consumed == {((0, 0), (1, 2)), ((0, 1), (1, 3))}

    consumed = set()
    assert extend_forward(((0, 0), (1, 2)), confirmed, consumed) == 2
    assert consumed == {((0, 1), (1, 3)), ((0, 2), (1, 4))}


def test_dup_017_backward_extension_stops_at_file_start() -> None:
    confirmed = {((0, 0), (1, 0)), ((0, 1), (1, 1))}

    start, backward = extend_backward(((0, 0), (1, 0)), confirmed, set())

    assert start == ((0, 0), (1, 0))
    assert backward == 0


def test_dup_018_verification_returns_identical_prefix_length() -> None:
    files = [_file("a.py", ["x()", "y()", "z()"]), _file("b.py", ["x()", "y()", "w()"])]

    assert verify_extended_block(files, ((0, 0), (1, 0)), block_size=3) == 2
    assert verify_extended_block(files, ((0, 0), (1, 0)), block_size=2) == 2


def test_dup_019_groups_sort_by_severity_then_duplicated_lines_then_location() -> None:
    tolerable_large = _group(["a.py", "b.py"], 30, "Tolerable")
    critical_small = _group(["c.py", "d.py", "e.py"], 6, "Critical")
    critical_large = _group(["z.py", "y.py", "x.py"], 10, "Critical")
    tolerable_tie_late = _group(["m.py", "n.py"], 6, "Tolerable", start_line=20)
    tolerable_tie_early = _group(["m.py", "n.py"], 6, "Tolerable", start_line=4)

    ordered = sort_groups(
        [tolerable_tie_late, tolerable_large, critical_small, tolerable_tie_early, critical_large]
    )

    assert ordered == [
        critical_large,
        critical_small,
        tolerable_large,
        tolerable_tie_early,
        tolerable_tie_late,
    ]


def test_dup_020_fnv1a_known_values_and_order_sensitive_folding() -> None:
    assert fnv1a(b"") == FNV_OFFSET_BASIS
    assert fnv1a(b"a") == 0xAF63DC4C8601EC8C
    assert combine_digests([1, 2]) != combine_digests([2, 1])


def test_dup_021_summarize_and_severity_breakdown() -> None:
    files = [
        _file("a.py", [*_block(6), *_unique("a", 2)]),
        _file("b.py", _block(6)),
    ]
    groups = DuplicateDetector(min_lines=6).detect(files)

    metrics = summarize(files, groups)
    breakdown = severity_breakdown(groups)

    assert metrics.total_code_lines == 14
    assert metrics.duplicated_lines == 6
    assert metrics.duplicate_groups == 1
    assert metrics.files_with_duplicates == 2
    assert metrics.largest_block == 6
    assert metrics.percentage == pytest.approx(6 / 14 * 100)
    assert breakdown.tolerable_groups == 1
    assert breakdown.tolerable_lines == 6
    assert breakdown.critical_groups == 0


def test_dup_022_summarize_empty_project() -> None:
    metrics = summarize([], [])

    assert metrics.percentage == 0.0
    assert metrics.largest_block == 0


@pytest.mark.parametrize(
    ("percentage", "label"),
    [
        (0.0, "Excellent"),
        (2.99, "Excellent"),
        (3.0, "Good"),
        (5.0, "Moderate"),
        (9.9, "Moderate"),
        (10.0, "High"),
        (20.0, "Very High"),
    ],
)
def test_dup_023_assessment_thresholds(percentage: float, label: str) -> None:
    assert assessment(percentage) == label


def _inject_confirmed(
    monkeypatch: pytest.MonkeyPatch, confirmed: dict[tuple, int]
) -> None:
    result = ValidationResult(
        confirmed=confirmed,
        ordered=sorted(confirmed),
        skipped_boilerplate=0,
        skipped_collisions=0,
    )
    monkeypatch.setattr(
        "codemetrics.duplication.detector.validate_buckets",
        lambda **_: result,
    )


def test_dup_024_block_failing_reverification_below_min_lines_is_dropped(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    files = [
        _file("a.py", ["a_head()", *_block(6)]),
        _file("b.py", ["b_head()", *_block(6)]),
    ]
    _inject_confirmed(monkeypatch, {((0, 0), (1, 0)): 1, ((0, 1), (1, 1)): 2})

    assert DuplicateDetector(min_lines=6).detect(files) == []


def test_dup_025_extended_block_shrinks_to_verified_prefix(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    files = [
        _file("a.py", [*_block(6), "a_tail()"]),
        _file("b.py", [*_block(6), "b_tail()"]),
    ]
    _inject_confirmed(monkeypatch, {((0, 0), (1, 0)): 1, ((0, 1), (1, 1)): 2})

    groups = DuplicateDetector(min_lines=6).detect(files)

    assert len(groups) == 1
    assert groups[0].line_count == 6
    assert groups[0].locations == (
        DuplicateLocation("a.py", 1, 6),
        DuplicateLocation("b.py", 1, 6),
    )
