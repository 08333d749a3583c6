# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Lines-of-code counting per language."""

import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Sequence

from codemetrics.classifier import FileStats, count_kinds
from codemetrics.pipeline import ScanError
from codemetrics.source import SourceReadError, read_source
from codemetrics.walker import SourceFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LanguageReport:
    """Represent aggregated line counts of one language."""

    name: str
    files: int
    blank: int
    comment: int
    code: int


@dataclass(frozen=True)
class LocResult:
    """Represent one lines-of-code run.

    Attributes:
        languages: Per-language counts, by code lines descending then name.
        totals: Counts summed over every language.
        total_files: Recognized files seen by the walk.
        unique_files: Files counted after content de-duplication.
        duplicate_files: Files skipped because identical content was already counted.
        binary_files: Files skipped as binary.
        errors: Files that could not be read or decoded.
        elapsed_ms: Wall-clock duration of the count.
    """

    languages: list[LanguageReport]
    totals: FileStats
    total_files: int
    unique_files: int
    duplicate_files: int
    binary_files: int
    errors: list[ScanError] = field(default_factory=list)
    elapsed_ms: int = 0


def count_project(sources: Sequence[SourceFile]) -> LocResult:
    """Count blank, comment and code lines per language.

    Args:
        sources: Files to count, in walk order.

    Returns:
        Aggregated counts and run counters.
    """
    started = time.monotonic()
    stats_by_language: dict[str, tuple[int, FileStats]] = {}
    seen_digests: set[str] = set()
    unique_files = 0
    duplicate_files = 0
    binary_files = 0
    errors: list[ScanError] = []

    for source in sources:
        try:
            classified = read_source(source.path, source.language)
        except SourceReadError as exc:
            logger.warning(
                f"Skipping file due to read failure (file_path={source.relative_path} error={exc})"
            )
            errors.append(ScanError(file_path=source.relative_path, message=str(exc)))
            continue
        if classified is None:
            binary_files += 1
            continue
        digest = hashlib.md5(classified.content).hexdigest()  # noqa: S324
        if digest in seen_digests:
            duplicate_files += 1
            continue
        seen_digests.add(digest)
        unique_files += 1

        file_count, stats = stats_by_language.get(source.language.name, (0, FileStats()))
        stats.add(count_kinds(classified.kinds))
        stats_by_language[source.language.name] = (file_count + 1, stats)

    reports = [
        LanguageReport(
            name=name,
            files=file_count,
            blank=stats.blank,
            comment=stats.comment,
            code=stats.code,
        )
        for name, (file_count, stats) in stats_by_language.items()
    ]
    reports.sort(key=lambda report: (-report.code, report.name))

    totals = FileStats()
    for _, stats in stats_by_language.values():
        totals.add(stats)

    elapsed_ms = int(round((time.monotonic() - started) * 1000))
    logger.info(
        f"Line count completed (files={len(sources)} unique={unique_files} "
        f"duplicates={duplicate_files} binary={binary_files} errors={len(errors)})"
    )
    return LocResult(
        languages=reports,
        totals=totals,
        total_files=len(sources),
        unique_files=unique_files,
        duplicate_files=duplicate_files,
        binary_files=binary_files,
        errors=errors,
        elapsed_ms=elapsed_ms,
    )
