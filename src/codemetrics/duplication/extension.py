# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Grow minimal duplicate windows into maximal blocks.

Location sets are nodes and shifting every location by one line is an edge.
Extension walks those edges iteratively and records every visited node in a
shared consumed set, so each node is expanded at most once per run.
"""

import logging
from typing import Container, Sequence

from codemetrics.duplication.model import LocationSet
from codemetrics.normalizer import NormalizedFile

logger = logging.getLogger(__name__)


def shift(locations: LocationSet, delta: int) -> LocationSet:
    """Shift every location of a set by ``delta`` lines."""
    return tuple((file_index, offset + delta) for file_index, offset in locations)


def extend_backward(
    locations: LocationSet,
    confirmed: Container[LocationSet],
    consumed: set[LocationSet],
) -> tuple[LocationSet, int]:
    """Extend a confirmed window towards the start of its files.

    Args:
        locations: Confirmed starting location set.
        confirmed: Lookup of confirmed location sets.
        consumed: Location sets already absorbed into a block; updated in place.

    Returns:
        The new start locations and the number of backward steps taken.
    """
    start = locations
    steps = 0
    while all(offset > 0 for _, offset in start):
        previous = shift(start, -1)
        if previous not in confirmed:
            break
        consumed.add(previous)
        start = previous
        steps += 1
    return start, steps


def extend_forward(
    locations: LocationSet,
    confirmed: Container[LocationSet],
    consumed: set[LocationSet],
) -> int:
    """Extend a confirmed window towards the end of its files.

    Returns:
        The number of forward steps taken.
    """
    current = locations
    steps = 0
    while True:
        following = shift(current, 1)
        if following not in confirmed:
            return steps
        consumed.add(following)
        current = following
        steps += 1


def verify_extended_block(
    files: Sequence[NormalizedFile], start: LocationSet, block_size: int
) -> int:
    """Confirm that the extended block is identical at every location.

    Args:
        files: Normalized files referenced by the locations.
        start: Start location of the block in every file.
        block_size: Candidate block length.

    Returns:
        Length of the longest prefix that is identical at every location.
    """
    first_index, first_offset = start[0]
    reference = [
        line.text
        for line in files[first_index].lines[first_offset : first_offset + block_size]
    ]
    verified = len(reference)
    for file_index, offset in start[1:]:
        other = files[file_index].lines[offset : offset + block_size]
        matching = 0
        for expected, line in zip(reference, other):
            if line.text != expected:
                break
            matching += 1
        verified = min(verified, matching)
    if verified < block_size:
        logger.debug(
            f"Extended block shrunk on verification (block_size={block_size} verified={verified})"
        )
    return verified
