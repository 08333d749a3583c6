# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Window fingerprinting with 64-bit FNV-1a.

FNV-1a is fast and deterministic across runs, but not collision free; every
hash match is confirmed by comparing the actual line text afterwards.
"""

import logging
from typing import Sequence

from codemetrics.duplication.model import Location
from codemetrics.normalizer import NormalizedFile, NormalizedLine

logger = logging.getLogger(__name__)

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
LINE_SEPARATOR = 0xFF
_MASK_64 = 0xFFFFFFFFFFFFFFFF


def fnv1a(data: bytes, seed: int = FNV_OFFSET_BASIS) -> int:
    """Compute 64-bit FNV-1a over ``data`` starting from ``seed``."""
    value = seed
    for byte in data:
        value = ((value ^ byte) * FNV_PRIME) & _MASK_64
    return value


def line_digest(text: str) -> int:
    """Digest one line's UTF-8 text."""
    return fnv1a(text.encode("utf-8"))


def combine_digests(digests: Sequence[int]) -> int:
    """Fold per-line digests into one order-sensitive window hash.

    A separator step follows every line, so distinct line splits of the same
    character stream produce different inputs to the fold.
    """
    value = FNV_OFFSET_BASIS
    for digest in digests:
        value = fnv1a(digest.to_bytes(8, "little"), value)
        value = ((value ^ LINE_SEPARATOR) * FNV_PRIME) & _MASK_64
    return value


def hash_window(lines: Sequence[NormalizedLine]) -> int:
    """Hash a window of normalized lines."""
    return combine_digests([line_digest(line.text) for line in lines])


def build_fingerprint_index(
    files: Sequence[NormalizedFile], min_lines: int
) -> dict[int, list[Location]]:
    """Hash every window of ``min_lines`` consecutive code lines.

    Files shorter than ``min_lines`` contribute no windows.

    Args:
        files: Normalized files, indexed by position.
        min_lines: Window size.

    Returns:
        Mapping from window hash to the ``(file_index, offset)`` pairs where it occurs.
    """
    index: dict[int, list[Location]] = {}
    window_count = 0
    for file_index, normalized in enumerate(files):
        line_count = len(normalized.lines)
        if line_count < min_lines:
            continue
        digests = [line_digest(line.text) for line in normalized.lines]
        for offset in range(line_count - min_lines + 1):
            window_hash = combine_digests(digests[offset : offset + min_lines])
            index.setdefault(window_hash, []).append((file_index, offset))
            window_count += 1
    logger.debug(
        f"Fingerprint index built (files={len(files)} windows={window_count} buckets={len(index)})"
    )
    return index
