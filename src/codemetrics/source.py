# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Source file reading with binary detection and line classification."""

import logging
from dataclasses import dataclass
from pathlib import Path

from codemetrics.classifier import LineKind, classify_lines
from codemetrics.languages import LanguageSpec

logger = logging.getLogger(__name__)

BINARY_PROBE_SIZE = 512


class SourceReadError(RuntimeError):
    """Represent a failure to read or decode a source file."""


@dataclass(frozen=True)
class ClassifiedSource:
    """Represent one file's lines together with their classification."""

    path: Path
    language: LanguageSpec
    content: bytes
    lines: list[str]
    kinds: list[LineKind]


def is_binary(data: bytes) -> bool:
    """Check for a NUL byte in the leading probe window."""
    return b"\x00" in data[:BINARY_PROBE_SIZE]


def split_lines(text: str) -> list[str]:
    """Split text on newlines after normalizing CRLF line endings.

    A trailing newline does not produce an extra empty line.
    """
    normalized = text.replace("\r\n", "\n")
    if not normalized:
        return []
    lines = normalized.split("\n")
    if normalized.endswith("\n"):
        lines.pop()
    return lines


def read_source(path: Path, spec: LanguageSpec) -> ClassifiedSource | None:
    """Read a file and classify its lines.

    Args:
        path: File to read.
        spec: Language grammar used for classification.

    Returns:
        Classified source, or ``None`` for binary files.

    Raises:
        SourceReadError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise SourceReadError(f"Failed to read {path}: {exc}") from exc
    if is_binary(content):
        logger.debug(f"Skipping binary file (path={path})")
        return None
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SourceReadError(f"Failed to decode {path}: {exc}") from exc

    lines = split_lines(text)
    return ClassifiedSource(
        path=path,
        language=spec,
        content=content,
        lines=lines,
        kinds=classify_lines(lines, spec),
    )
