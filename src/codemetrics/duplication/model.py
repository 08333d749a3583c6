# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Duplicate detection result models."""

from dataclasses import dataclass
from typing import Literal

DuplicationSeverity = Literal["Critical", "Tolerable"]

SEVERITY_RANK: dict[DuplicationSeverity, int] = {"Critical": 0, "Tolerable": 1}

# Sorted, de-duplicated (file_index, line_offset) pairs where one window occurs.
Location = tuple[int, int]
LocationSet = tuple[Location, ...]


@dataclass(frozen=True)
class DuplicateLocation:
    """Represent one occurrence of a duplicated block.

    Attributes:
        file_path: Path of the file containing the block.
        start_line: Original start line (1-based).
        end_line: Original end line (1-based, inclusive).
    """

    file_path: str
    start_line: int
    end_line: int


@dataclass(frozen=True)
class DuplicateGroup:
    """Represent one maximal duplicated block and all of its occurrences.

    Attributes:
        locations: Every occurrence of the block.
        line_count: Number of code lines in the block.
        sample: Up to five leading lines of the block.
        severity: ``Critical`` for three or more occurrences, else ``Tolerable``.
    """

    locations: tuple[DuplicateLocation, ...]
    line_count: int
    sample: tuple[str, ...]
    severity: DuplicationSeverity

    @property
    def duplicated_lines(self) -> int:
        """Lines duplicated beyond the first occurrence."""
        return self.line_count * (len(self.locations) - 1)
