# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Duplicate code detection for the code metrics scanner."""

from codemetrics.duplication.detector import (
    DEFAULT_MIN_LINES,
    MAX_OCCURRENCES,
    DuplicateDetector,
    DuplicationMetrics,
    assessment,
    severity_breakdown,
    summarize,
)
from codemetrics.duplication.model import (
    DuplicateGroup,
    DuplicateLocation,
    DuplicationSeverity,
)

__all__ = [
    "DEFAULT_MIN_LINES",
    "MAX_OCCURRENCES",
    "DuplicateDetector",
    "DuplicateGroup",
    "DuplicateLocation",
    "DuplicationMetrics",
    "DuplicationSeverity",
    "assessment",
    "severity_breakdown",
    "summarize",
]
