# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Per-file classification and normalization across a project."""

import concurrent.futures
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from codemetrics.normalizer import NormalizedFile, find_test_block_start, normalize_lines
from codemetrics.source import SourceReadError, read_source
from codemetrics.walker import SourceFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanError:
    """Represent a recoverable failure for one file."""

    file_path: str
    message: str


@dataclass(frozen=True)
class ProjectScan:
    """Represent the normalized files of a project.

    Attributes:
        files: Normalized files in walk order.
        errors: Files that could not be read or decoded.
        binary_files: Number of files skipped as binary.
    """

    files: list[NormalizedFile]
    errors: list[ScanError]
    binary_files: int


def normalize_source(source: SourceFile, strip_test_blocks: bool) -> NormalizedFile | None:
    """Read, classify and normalize one source file.

    Args:
        source: File to process.
        strip_test_blocks: Drop everything from an inline ``#[cfg(test)]`` marker on.

    Returns:
        Normalized file, or ``None`` for binary files.

    Raises:
        SourceReadError: If the file cannot be read or decoded.
    """
    classified = read_source(source.path, source.language)
    if classified is None:
        return None
    end = find_test_block_start(classified.lines) if strip_test_blocks else len(classified.lines)
    return NormalizedFile(
        path=Path(source.relative_path),
        lines=normalize_lines(classified.lines[:end], classified.kinds[:end]),
    )


def normalize_project(
    sources: Sequence[SourceFile],
    strip_test_blocks: bool = True,
    jobs: int = 1,
) -> ProjectScan:
    """Normalize every source file of a project.

    Files are independent, so with ``jobs > 1`` they are processed on a
    thread pool. The result order always follows ``sources``.

    Args:
        sources: Files to process, in walk order.
        strip_test_blocks: Drop inline test modules from each file.
        jobs: Number of worker threads.

    Returns:
        Normalized files, recoverable errors and the binary file count.

    Raises:
        ValueError: If ``jobs`` is not greater than zero.
    """
    if jobs <= 0:
        raise ValueError("jobs must be > 0")

    results: list[NormalizedFile | None | ScanError] = [None] * len(sources)
    if jobs == 1:
        for position, source in enumerate(sources):
            results[position] = _normalize_or_error(source, strip_test_blocks)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as executor:
            future_to_position = {
                executor.submit(_normalize_or_error, source, strip_test_blocks): position
                for position, source in enumerate(sources)
            }
            for future in concurrent.futures.as_completed(future_to_position):
                results[future_to_position[future]] = future.result()

    files: list[NormalizedFile] = []
    errors: list[ScanError] = []
    binary_files = 0
    for result in results:
        if isinstance(result, ScanError):
            errors.append(result)
        elif result is None:
            binary_files += 1
        else:
            files.append(result)
    logger.info(
        f"Normalization completed (files={len(files)} binary={binary_files} errors={len(errors)})"
    )
    return ProjectScan(files=files, errors=errors, binary_files=binary_files)


def _normalize_or_error(
    source: SourceFile, strip_test_blocks: bool
) -> NormalizedFile | None | ScanError:
    try:
        return normalize_source(source, strip_test_blocks)
    except SourceReadError as exc:
        logger.warning(
            f"Skipping file due to read failure (file_path={source.relative_path} error={exc})"
        )
        return ScanError(file_path=source.relative_path, message=str(exc))
