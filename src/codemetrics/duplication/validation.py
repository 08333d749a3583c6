# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Turn raw hash buckets into confirmed duplicate windows."""

import logging
from dataclasses import dataclass
from typing import Sequence

from codemetrics.duplication.model import Location, LocationSet
from codemetrics.normalizer import NormalizedFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Represent the confirmed windows of one detection run.

    Attributes:
        confirmed: Confirmed location sets mapped to their window hash; used
            for adjacency lookups while extending blocks.
        ordered: The confirmed location sets in sorted order.
        skipped_boilerplate: Number of buckets dropped by the occurrence ceiling.
        skipped_collisions: Number of buckets dropped because their windows differ.
    """

    confirmed: dict[LocationSet, int]
    ordered: list[LocationSet]
    skipped_boilerplate: int
    skipped_collisions: int


def window_text(
    files: Sequence[NormalizedFile], location: Location, size: int
) -> list[str]:
    """Return the text of ``size`` lines starting at ``location``."""
    file_index, offset = location
    return [line.text for line in files[file_index].lines[offset : offset + size]]


def validate_buckets(
    index: dict[int, list[Location]],
    files: Sequence[NormalizedFile],
    min_lines: int,
    max_occurrences: int,
    quiet: bool = False,
) -> ValidationResult:
    """Filter hash buckets down to windows that are truly duplicated.

    Buckets are de-duplicated and sorted, then dropped when they have fewer
    than two locations, more than ``max_occurrences`` locations, or when any
    window differs from the first one (a hash collision).

    Args:
        index: Window hash to raw locations.
        files: Normalized files referenced by the locations.
        min_lines: Window size.
        max_occurrences: Boilerplate ceiling.
        quiet: Suppress the aggregate boilerplate diagnostic.

    Returns:
        Confirmed location sets and skip counters.
    """
    confirmed: dict[LocationSet, int] = {}
    skipped_boilerplate = 0
    skipped_collisions = 0

    for window_hash, raw_locations in index.items():
        locations: LocationSet = tuple(sorted(set(raw_locations)))
        if len(locations) < 2:
            continue
        if len(locations) > max_occurrences:
            skipped_boilerplate += 1
            continue
        first = window_text(files, locations[0], min_lines)
        if any(window_text(files, other, min_lines) != first for other in locations[1:]):
            skipped_collisions += 1
            continue
        confirmed[locations] = window_hash

    if skipped_collisions:
        logger.debug(f"Dropped colliding hash buckets (count={skipped_collisions})")
    if skipped_boilerplate and not quiet:
        logger.warning(
            f"Skipped {skipped_boilerplate} patterns with more than {max_occurrences} "
            "occurrences (likely boilerplate)"
        )

    return ValidationResult(
        confirmed=confirmed,
        ordered=sorted(confirmed),
        skipped_boilerplate=skipped_boilerplate,
        skipped_collisions=skipped_collisions,
    )
