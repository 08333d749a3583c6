# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Per-language line classification into code, comment, and blank lines.

The scanner is a finite state machine threaded through the lines of one
file. In normal mode each position is tried against an ordered sequence of
matchers (triple quote, pragma, block comment, line comment, quote); the
first one that matches decides the step. Pragma openers are textual
supersets of block comment openers in some languages, so the order matters.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Literal

from codemetrics.languages import LanguageSpec

logger = logging.getLogger(__name__)

LineKind = Literal["blank", "comment", "code"]
StringKind = Literal["double", "single", "triple_double", "triple_single"]
ScanMode = Literal["normal", "string", "block_comment"]

_ASCII_WHITESPACE = frozenset(" \t\n\r\x0b\x0c")
_TRIPLE_DELIMITERS: dict[StringKind, str] = {
    "triple_double": '"""',
    "triple_single": "'''",
}
_QUOTE_CHARS: dict[StringKind, str] = {"double": '"', "single": "'"}


@dataclass(frozen=True)
class ScanState:
    """Represent the lexical mode carried from one line to the next.

    Attributes:
        mode: Current scanner mode.
        string_kind: Open string delimiter when ``mode`` is ``"string"``.
        depth: Block comment nesting depth when ``mode`` is ``"block_comment"``.
    """

    mode: ScanMode = "normal"
    string_kind: StringKind | None = None
    depth: int = 0


NORMAL = ScanState()


def _in_string(kind: StringKind) -> ScanState:
    return ScanState(mode="string", string_kind=kind)


def _in_block_comment(depth: int) -> ScanState:
    return ScanState(mode="block_comment", depth=depth)


@dataclass(frozen=True)
class StepResult:
    """Represent one scanner step over the current line.

    Attributes:
        advance: Number of characters consumed.
        new_state: State to switch to, or ``None`` to keep the current one.
        has_code: Whether the consumed text counts as code.
        has_comment: Whether the consumed text counts as comment.
        break_line: Whether scanning of the line stops after this step.
    """

    advance: int
    new_state: ScanState | None = None
    has_code: bool = False
    has_comment: bool = False
    break_line: bool = False


def _code(advance: int, new_state: ScanState | None = None) -> StepResult:
    return StepResult(advance=advance, new_state=new_state, has_code=True)


def _comment(advance: int, new_state: ScanState | None = None) -> StepResult:
    return StepResult(advance=advance, new_state=new_state, has_comment=True)


_LINE_COMMENT = StepResult(advance=0, has_comment=True, break_line=True)

NormalMatcher = Callable[[str, int, LanguageSpec], StepResult | None]


def _match_triple_quote(line: str, pos: int, spec: LanguageSpec) -> StepResult | None:
    if not spec.triple_quote_strings:
        return None
    if line.startswith('"""', pos):
        return _code(3, _in_string("triple_double"))
    if spec.single_quote_strings and line.startswith("'''", pos):
        return _code(3, _in_string("triple_single"))
    return None


def _match_pragma(line: str, pos: int, spec: LanguageSpec) -> StepResult | None:
    if spec.pragma is None:
        return None
    opener, closer = spec.pragma
    if not line.startswith(opener, pos):
        return None
    close_at = line.find(closer, pos + len(opener))
    end = len(line) if close_at < 0 else close_at + len(closer)
    return _code(end - pos)


def _match_block_comment(line: str, pos: int, spec: LanguageSpec) -> StepResult | None:
    if spec.block_comment is None:
        return None
    opener = spec.block_comment[0]
    if line.startswith(opener, pos):
        return _comment(len(opener), _in_block_comment(1))
    return None


def _match_line_comment(line: str, pos: int, spec: LanguageSpec) -> StepResult | None:
    for marker in spec.line_comments:
        if not line.startswith(marker, pos):
            continue
        follow = pos + len(marker)
        if (
            spec.line_comment_not_before
            and follow < len(line)
            and line[follow] in spec.line_comment_not_before
        ):
            continue
        return _LINE_COMMENT
    return None


def _match_quote(line: str, pos: int, spec: LanguageSpec) -> StepResult | None:
    char = line[pos]
    if char == '"':
        return _code(1, _in_string("double"))
    if char == "'" and spec.single_quote_strings:
        return _code(1, _in_string("single"))
    return None


NORMAL_MATCHERS: tuple[NormalMatcher, ...] = (
    _match_triple_quote,
    _match_pragma,
    _match_block_comment,
    _match_line_comment,
    _match_quote,
)


def step_normal(line: str, pos: int, spec: LanguageSpec) -> StepResult:
    """Scan one position in normal mode using the ordered matchers."""
    for matcher in NORMAL_MATCHERS:
        result = matcher(line, pos, spec)
        if result is not None:
            return result
    return StepResult(advance=1, has_code=line[pos] not in _ASCII_WHITESPACE)


def step_in_string(line: str, pos: int, kind: StringKind) -> StepResult:
    """Scan one position inside a string literal; string content is code."""
    triple = _TRIPLE_DELIMITERS.get(kind)
    if triple is not None:
        if line.startswith(triple, pos):
            return _code(3, NORMAL)
        return _code(1)
    char = line[pos]
    if char == "\\":
        return _code(min(pos + 2, len(line)) - pos)
    if char == _QUOTE_CHARS[kind]:
        return _code(1, NORMAL)
    return _code(1)


def step_in_block_comment(line: str, pos: int, spec: LanguageSpec, depth: int) -> StepResult:
    """Scan one position inside a block comment, tracking nesting depth."""
    if spec.block_comment is None:
        return _comment(1)
    opener, closer = spec.block_comment
    if spec.nested_block_comments and line.startswith(opener, pos):
        return _comment(len(opener), _in_block_comment(depth + 1))
    if line.startswith(closer, pos):
        new_state = NORMAL if depth <= 1 else _in_block_comment(depth - 1)
        return _comment(len(closer), new_state)
    return _comment(1)


def classify_line(
    line: str, state: ScanState, spec: LanguageSpec
) -> tuple[LineKind, ScanState]:
    """Classify one line given the state left by the previous line.

    Args:
        line: Line text without its trailing newline.
        state: Scanner state at the start of the line.
        spec: Language grammar driving the scanner.

    Returns:
        The line classification and the state at the end of the line.
    """
    if not line.strip() and state.mode != "block_comment":
        return "blank", state

    has_code = state.mode == "string"
    has_comment = state.mode == "block_comment"
    pos = 0
    length = len(line)
    while pos < length:
        if state.mode == "normal":
            result = step_normal(line, pos, spec)
        elif state.mode == "string":
            result = step_in_string(line, pos, state.string_kind)  # type: ignore[arg-type]
        else:
            result = step_in_block_comment(line, pos, spec, state.depth)
        has_code = has_code or result.has_code
        has_comment = has_comment or result.has_comment
        if result.new_state is not None:
            state = result.new_state
        pos += result.advance
        if result.break_line:
            break

    # Plain quoted strings never span lines.
    if state.mode == "string" and state.string_kind in _QUOTE_CHARS:
        state = NORMAL

    if has_code:
        return "code", state
    if has_comment:
        return "comment", state
    return "blank", state


def classify_lines(lines: Iterable[str], spec: LanguageSpec) -> list[LineKind]:
    """Classify every line of one file.

    The state is threaded through the lines as an explicit accumulator, so
    classifying different files is independent. An unterminated string or
    block comment simply leaves the rest of the file in that mode.

    Args:
        lines: File lines without trailing newlines.
        spec: Language grammar of the file.

    Returns:
        One classification per input line, in order.
    """
    kinds: list[LineKind] = []
    state = NORMAL
    for index, line in enumerate(lines):
        if index == 0 and line.startswith("#!"):
            kinds.append("code")
            continue
        kind, state = classify_line(line, state, spec)
        kinds.append(kind)
    return kinds


@dataclass
class FileStats:
    """Hold blank, comment, and code line counters."""

    blank: int = 0
    comment: int = 0
    code: int = 0

    @property
    def total(self) -> int:
        return self.blank + self.comment + self.code

    def add(self, other: "FileStats") -> None:
        """Accumulate another set of counters into this one."""
        self.blank += other.blank
        self.comment += other.comment
        self.code += other.code


def count_kinds(kinds: Iterable[LineKind]) -> FileStats:
    """Count classifications by kind."""
    stats = FileStats()
    for kind in kinds:
        if kind == "blank":
            stats.blank += 1
        elif kind == "comment":
            stats.comment += 1
        else:
            stats.code += 1
    return stats
