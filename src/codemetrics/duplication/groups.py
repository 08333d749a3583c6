# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Build and order reported duplicate groups."""

from typing import Sequence

from codemetrics.duplication.model import (
    SEVERITY_RANK,
    DuplicateGroup,
    DuplicateLocation,
    DuplicationSeverity,
    LocationSet,
)
from codemetrics.normalizer import NormalizedFile

SAMPLE_LINES = 5
CRITICAL_OCCURRENCES = 3


def classify_severity(occurrences: int) -> DuplicationSeverity:
    """Apply the Rule of Three to an occurrence count."""
    return "Critical" if occurrences >= CRITICAL_OCCURRENCES else "Tolerable"


def build_group(
    files: Sequence[NormalizedFile], start: LocationSet, block_size: int
) -> DuplicateGroup:
    """Map a block's normalized offsets back to original source lines.

    Args:
        files: Normalized files referenced by the locations.
        start: Start location of the block in every file.
        block_size: Verified block length in code lines.

    Returns:
        Duplicate group with locations, sample and severity.
    """
    locations: list[DuplicateLocation] = []
    for file_index, offset in start:
        normalized = files[file_index]
        block = normalized.lines[offset : offset + block_size]
        locations.append(
            DuplicateLocation(
                file_path=normalized.path.as_posix(),
                start_line=block[0].line_number,
                end_line=block[-1].line_number,
            )
        )

    first_index, first_offset = start[0]
    sample = tuple(
        line.text
        for line in files[first_index].lines[
            first_offset : first_offset + min(block_size, SAMPLE_LINES)
        ]
    )
    return DuplicateGroup(
        locations=tuple(locations),
        line_count=block_size,
        sample=sample,
        severity=classify_severity(len(locations)),
    )


def group_sort_key(group: DuplicateGroup) -> tuple[int, int, str, int]:
    """Order by severity, then duplicated lines descending, then first location."""
    first = group.locations[0]
    return (
        SEVERITY_RANK[group.severity],
        -group.duplicated_lines,
        first.file_path,
        first.start_line,
    )


def sort_groups(groups: list[DuplicateGroup]) -> list[DuplicateGroup]:
    return sorted(groups, key=group_sort_key)
