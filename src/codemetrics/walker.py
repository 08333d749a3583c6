# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Source file enumeration honouring .gitignore rules and test exclusion."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import pathspec

from codemetrics.languages import LanguageSpec, detect, detect_by_shebang

logger = logging.getLogger(__name__)

TEST_DIRS: frozenset[str] = frozenset({"tests", "test", "__tests__", "spec"})


@dataclass(frozen=True)
class _TestPattern:
    extensions: frozenset[str]
    suffixes: tuple[str, ...] = ()
    prefixes: tuple[str, ...] = ()


_TEST_PATTERNS: tuple[_TestPattern, ...] = (
    _TestPattern(frozenset({"rs", "go", "exs", "dart"}), suffixes=("_test",)),
    _TestPattern(frozenset({"py"}), suffixes=("_test",), prefixes=("test_",)),
    _TestPattern(frozenset({"rb"}), suffixes=("_test", "_spec")),
    _TestPattern(frozenset({"php"}), suffixes=("Test", "_test")),
    _TestPattern(
        frozenset({"js", "jsx", "mjs", "cjs", "ts", "tsx", "mts", "cts"}),
        suffixes=(".test", ".spec"),
    ),
    _TestPattern(
        frozenset({"java", "kt", "kts", "cs", "swift"}), suffixes=("Test", "Tests")
    ),
    _TestPattern(frozenset({"scala"}), suffixes=("Test", "Spec")),
    _TestPattern(frozenset({"c"}), suffixes=("_test", "_unittest"), prefixes=("test_",)),
    _TestPattern(
        frozenset({"cc", "cpp", "cxx"}),
        suffixes=("_test", "_unittest", "Test"),
        prefixes=("test_",),
    ),
    _TestPattern(frozenset({"hs"}), suffixes=("Test", "Spec")),
)


def is_test_file(path: Path) -> bool:
    """Check whether a file name follows a test naming convention.

    Args:
        path: File path to inspect.

    Returns:
        True when the name matches the test pattern for its extension.
    """
    base, dot, extension = path.name.rpartition(".")
    if not dot:
        return False
    for pattern in _TEST_PATTERNS:
        if extension not in pattern.extensions:
            continue
        if base.endswith(pattern.suffixes) or base.startswith(pattern.prefixes):
            return True
    return False


class IgnoreMatcher:
    """Match root-relative walk entries against every .gitignore in a project.

    Nested ``.gitignore`` patterns are rebased onto the walk root and compiled
    into one ``GitIgnoreSpec``. Files are loaded shallowest first, so a deeper
    file's patterns (including negations) take precedence.
    """

    def __init__(self, spec: pathspec.GitIgnoreSpec) -> None:
        self._spec = spec

    @classmethod
    def from_project_root(cls, root: Path) -> "IgnoreMatcher":
        """Collect and compile the .gitignore files below ``root``.

        Args:
            root: Walk root.

        Returns:
            Matcher over all collected patterns.

        Raises:
            OSError: If a .gitignore file cannot be read.
            UnicodeDecodeError: If a .gitignore file is not valid UTF-8.
        """
        patterns: list[str] = []
        ignore_files = _gitignore_files(root)
        for ignore_file in ignore_files:
            base = ignore_file.parent.relative_to(root).as_posix()
            base = "" if base == "." else base
            patterns.extend(
                _rebase_pattern(line, base)
                for line in ignore_file.read_text(encoding="utf-8").splitlines()
            )
        logger.debug(
            f"Loaded ignore rules (files={len(ignore_files)} patterns={len(patterns)})"
        )
        return cls(spec=pathspec.GitIgnoreSpec.from_lines(patterns))

    def matches(self, relative_path: str, is_dir: bool) -> bool:
        """Check whether a root-relative POSIX path is ignored."""
        path = relative_path.replace(os.sep, "/").strip("/")
        if not path:
            return False
        return self._spec.match_file(f"{path}/" if is_dir else path)


def _gitignore_files(root: Path) -> list[Path]:
    found = (
        path
        for path in root.rglob(".gitignore")
        if ".git" not in path.relative_to(root).parts[:-1]
    )
    return sorted(found, key=lambda path: (len(path.parts), path.as_posix()))


def _rebase_pattern(line: str, base: str) -> str:
    """Rewrite one line of the .gitignore in ``base`` relative to the walk root.

    Patterns containing an inner slash stay anchored to ``base``; slash-free
    patterns match at any depth below it, as git applies them.
    """
    if not base or not line.strip() or line.lstrip().startswith("#"):
        return line
    negated = line.startswith("!")
    pattern = line[1:] if negated else line
    if pattern.startswith("/"):
        rebased = f"/{base}{pattern}"
    elif "/" in pattern.rstrip("/"):
        rebased = f"/{base}/{pattern}"
    else:
        rebased = f"/{base}/**/{pattern}"
    return f"!{rebased}" if negated else rebased


@dataclass(frozen=True)
class ExcludeFilter:
    """Exclude files by extension, directory name, or glob pattern.

    Attributes:
        include_extensions: When non-empty, only these extensions pass.
        extensions: Extensions to exclude (lowercase, without leading dot).
        dirs: Directory names to exclude (exact match).
        globs: Glob patterns matched against project-relative paths.
    """

    include_extensions: frozenset[str] = frozenset()
    extensions: frozenset[str] = frozenset()
    dirs: frozenset[str] = frozenset()
    globs: tuple[str, ...] = ()
    _glob_spec: pathspec.GitIgnoreSpec | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.globs:
            object.__setattr__(
                self,
                "_glob_spec",
                pathspec.GitIgnoreSpec.from_lines(self.globs),
            )

    @classmethod
    def build(
        cls,
        include_extensions: list[str] | None = None,
        extensions: list[str] | None = None,
        dirs: list[str] | None = None,
        globs: list[str] | None = None,
    ) -> "ExcludeFilter":
        """Build a filter from raw CLI values.

        Extensions are normalized by stripping a leading dot and lowercasing,
        so ``"JS"``, ``".js"`` and ``"js"`` are equivalent.
        """
        return cls(
            include_extensions=_normalize_extensions(include_extensions or []),
            extensions=_normalize_extensions(extensions or []),
            dirs=frozenset(dirs or []),
            globs=tuple(globs or []),
        )

    def excludes_dir(self, name: str) -> bool:
        return name in self.dirs

    def excludes_file(self, relative_path: str) -> bool:
        """Check a project-relative POSIX file path against the filter."""
        _, dot, extension = relative_path.rpartition("/")[-1].rpartition(".")
        extension = extension.lower() if dot else ""
        if self.include_extensions:
            if extension not in self.include_extensions:
                return True
        elif extension and extension in self.extensions:
            return True
        if self._glob_spec is not None and self._glob_spec.match_file(relative_path):
            return True
        return False


def _normalize_extensions(values: list[str]) -> frozenset[str]:
    normalized = (value.lstrip(".").lower() for value in values)
    return frozenset(value for value in normalized if value)


@dataclass(frozen=True)
class SourceFile:
    """Represent one recognized source file paired with its language."""

    path: Path
    relative_path: str
    language: LanguageSpec


def try_detect_shebang(path: Path) -> LanguageSpec | None:
    """Detect a language from a file's first line, ignoring unreadable files."""
    try:
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            first_line = handle.readline()
    except OSError as exc:
        logger.debug(f"Cannot read first line (path={path} error={exc})")
        return None
    return detect_by_shebang(first_line)


def source_files(
    root: Path,
    exclude_tests: bool = True,
    exclude_filter: ExcludeFilter | None = None,
    matcher: IgnoreMatcher | None = None,
) -> list[SourceFile]:
    """Enumerate recognized source files beneath a root directory.

    Traversal order is deterministic (sorted by name, breadth first).

    Args:
        root: Directory to walk.
        exclude_tests: Whether to skip test directories and test files.
        exclude_filter: Optional extension, directory and glob filter.
        matcher: Optional precompiled .gitignore matcher; built from ``root``
            when omitted.

    Returns:
        Source files with their detected language.

    Raises:
        OSError: If .gitignore files cannot be read.
        UnicodeDecodeError: If .gitignore files contain invalid UTF-8.
    """
    root = root.resolve()
    if root.is_file():
        spec = detect(root) or try_detect_shebang(root)
        return [SourceFile(root, root.name, spec)] if spec is not None else []
    exclude_filter = exclude_filter or ExcludeFilter()
    matcher = matcher or IgnoreMatcher.from_project_root(root)

    results: list[SourceFile] = []
    skipped = 0
    queue: list[Path] = [root]
    while queue:
        current = queue.pop(0)
        try:
            children = sorted(current.iterdir(), key=lambda item: item.name)
        except OSError as exc:
            logger.warning(f"Cannot list directory (path={current} error={exc})")
            continue
        for child in children:
            relative = child.relative_to(root).as_posix()
            is_dir = child.is_dir()
            if is_dir:
                if child.name == ".git" or child.is_symlink():
                    continue
                if (
                    matcher.matches(relative_path=relative, is_dir=True)
                    or exclude_filter.excludes_dir(child.name)
                    or (exclude_tests and child.name in TEST_DIRS)
                ):
                    skipped += 1
                    continue
                queue.append(child)
                continue
            if not child.is_file():
                continue
            if (
                matcher.matches(relative_path=relative, is_dir=False)
                or exclude_filter.excludes_file(relative)
                or (exclude_tests and is_test_file(child))
            ):
                skipped += 1
                continue
            spec = detect(child) or try_detect_shebang(child)
            if spec is None:
                continue
            results.append(SourceFile(path=child, relative_path=relative, language=spec))

    logger.debug(
        f"Walk completed (root={root} files={len(results)} skipped={skipped})"
    )
    return results

