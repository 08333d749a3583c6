# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Project-wide duplicate code detection.

Detection runs in four phases over all normalized files:

1. Fingerprint every window of ``min_lines`` code lines.
2. Confirm buckets with two or more identical windows, skipping boilerplate.
3. Extend confirmed windows backward and forward into maximal blocks.
4. Build groups, classify severity, and order them deterministically.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from codemetrics.duplication.extension import (
    extend_backward,
    extend_forward,
    verify_extended_block,
)
from codemetrics.duplication.groups import build_group, sort_groups
from codemetrics.duplication.hashing import build_fingerprint_index
from codemetrics.duplication.model import DuplicateGroup, LocationSet
from codemetrics.duplication.validation import validate_buckets
from codemetrics.normalizer import NormalizedFile

logger = logging.getLogger(__name__)

DEFAULT_MIN_LINES = 6
MAX_OCCURRENCES = 100


class DuplicateDetector:
    """Find duplicated blocks of code lines across a set of files."""

    def __init__(
        self,
        min_lines: int = DEFAULT_MIN_LINES,
        max_occurrences: int = MAX_OCCURRENCES,
        quiet: bool = False,
    ) -> None:
        """Initialize detector.

        Args:
            min_lines: Minimum block size in code lines.
            max_occurrences: Occurrence ceiling above which a window is boilerplate.
            quiet: Suppress the aggregate boilerplate diagnostic.

        Raises:
            ValueError: If ``min_lines`` is below 1 or ``max_occurrences`` below 2.
        """
        if min_lines < 1:
            raise ValueError("min_lines must be >= 1")
        if max_occurrences < 2:
            raise ValueError("max_occurrences must be >= 2")
        self._min_lines = min_lines
        self._max_occurrences = max_occurrences
        self._quiet = quiet

    @property
    def min_lines(self) -> int:
        return self._min_lines

    def detect(self, files: Sequence[NormalizedFile]) -> list[DuplicateGroup]:
        """Detect duplicate groups.

        Args:
            files: Normalized files of the whole project.

        Returns:
            Duplicate groups, Critical first, then by duplicated lines descending.
        """
        index = build_fingerprint_index(files, self._min_lines)
        validation = validate_buckets(
            index=index,
            files=files,
            min_lines=self._min_lines,
            max_occurrences=self._max_occurrences,
            quiet=self._quiet,
        )

        consumed: set[LocationSet] = set()
        groups: list[DuplicateGroup] = []
        for locations in validation.ordered:
            if locations in consumed:
                continue
            consumed.add(locations)
            start, backward = extend_backward(locations, validation.confirmed, consumed)
            forward = extend_forward(locations, validation.confirmed, consumed)
            block_size = self._min_lines + backward + forward
            verified = verify_extended_block(files, start, block_size)
            if verified < self._min_lines:
                logger.debug(
                    f"Dropped block failing verification (locations={len(start)} verified={verified})"
                )
                continue
            groups.append(build_group(files, start, verified))

        logger.info(
            f"Duplicate detection completed (files={len(files)} confirmed={len(validation.ordered)} "
            f"groups={len(groups)})"
        )
        return sort_groups(groups)


@dataclass(frozen=True)
class DuplicationMetrics:
    """Summarize one duplication analysis.

    Attributes:
        total_code_lines: Code lines analyzed across all files.
        duplicated_lines: Lines duplicated beyond the first occurrence.
        duplicate_groups: Number of reported groups.
        files_with_duplicates: Distinct files holding at least one occurrence.
        largest_block: Line count of the largest group.
    """

    total_code_lines: int
    duplicated_lines: int
    duplicate_groups: int
    files_with_duplicates: int
    largest_block: int

    @property
    def percentage(self) -> float:
        if self.total_code_lines == 0:
            return 0.0
        return self.duplicated_lines / self.total_code_lines * 100.0


@dataclass(frozen=True)
class SeverityBreakdown:
    """Hold group and line counts per severity."""

    critical_groups: int
    tolerable_groups: int
    critical_lines: int
    tolerable_lines: int


def summarize(
    files: Sequence[NormalizedFile], groups: Sequence[DuplicateGroup]
) -> DuplicationMetrics:
    """Compute project-level duplication metrics."""
    return DuplicationMetrics(
        total_code_lines=sum(len(normalized.lines) for normalized in files),
        duplicated_lines=sum(group.duplicated_lines for group in groups),
        duplicate_groups=len(groups),
        files_with_duplicates=len(
            {location.file_path for group in groups for location in group.locations}
        ),
        largest_block=max((group.line_count for group in groups), default=0),
    )


def severity_breakdown(groups: Sequence[DuplicateGroup]) -> SeverityBreakdown:
    critical = [group for group in groups if group.severity == "Critical"]
    tolerable = [group for group in groups if group.severity == "Tolerable"]
    return SeverityBreakdown(
        critical_groups=len(critical),
        tolerable_groups=len(tolerable),
        critical_lines=sum(group.duplicated_lines for group in critical),
        tolerable_lines=sum(group.duplicated_lines for group in tolerable),
    )


def assessment(percentage: float) -> str:
    """Label a duplication percentage."""
    if percentage < 3.0:
        return "Excellent"
    if percentage < 5.0:
        return "Good"
    if percentage < 10.0:
        return "Moderate"
    if percentage < 20.0:
        return "High"
    return "Very High"
