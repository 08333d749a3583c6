# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Reduce classified source to the code lines used for duplicate detection."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from codemetrics.classifier import LineKind

logger = logging.getLogger(__name__)

TEST_BLOCK_MARKER = "#[cfg(test)]"


@dataclass(frozen=True)
class NormalizedLine:
    """Represent one retained code line.

    Attributes:
        line_number: Original line number in the source file (1-based).
        text: Line text with surrounding whitespace trimmed.
    """

    line_number: int
    text: str


@dataclass(frozen=True)
class NormalizedFile:
    """Represent the code lines of one file, in source order."""

    path: Path
    lines: tuple[NormalizedLine, ...]


def normalize_lines(
    lines: Sequence[str], kinds: Sequence[LineKind]
) -> tuple[NormalizedLine, ...]:
    """Keep code lines only, paired with their original line numbers.

    Args:
        lines: Source lines.
        kinds: Classification of each source line.

    Returns:
        Trimmed code lines with 1-based original line numbers.
    """
    return tuple(
        NormalizedLine(line_number=index, text=line.strip())
        for index, (line, kind) in enumerate(zip(lines, kinds), start=1)
        if kind == "code"
    )


def find_test_block_start(lines: Sequence[str]) -> int:
    """Return the index of the first inline test module marker.

    Returns ``len(lines)`` when the file has no such marker.
    """
    for index, line in enumerate(lines):
        if line.strip() == TEST_BLOCK_MARKER:
            return index
    return len(lines)
