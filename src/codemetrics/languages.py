# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Static registry of per-language lexical rules and language detection."""

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LanguageSpec:
    """Describe the lexical grammar of one language.

    Attributes:
        name: Display name of the language.
        extensions: File extensions without the leading dot.
        filenames: Exact file names mapped to this language.
        line_comments: Line comment markers, tried in order.
        line_comment_not_before: Characters that, when immediately following a
            line comment marker, mean the marker is an operator and not a comment.
        block_comment: Optional block comment ``(open, close)`` pair.
        nested_block_comments: Whether block comments nest.
        single_quote_strings: Whether ``'`` delimits strings.
        triple_quote_strings: Whether triple-quoted strings are recognized.
        pragma: Optional ``(open, close)`` pair of a comment-like code directive.
        shebangs: Interpreter names recognized on a ``#!`` line.
    """

    name: str
    extensions: tuple[str, ...] = ()
    filenames: tuple[str, ...] = ()
    line_comments: tuple[str, ...] = ()
    line_comment_not_before: str = ""
    block_comment: tuple[str, str] | None = None
    nested_block_comments: bool = False
    single_quote_strings: bool = False
    triple_quote_strings: bool = False
    pragma: tuple[str, str] | None = None
    shebangs: tuple[str, ...] = ()


_C_BLOCK = ("/*", "*/")
_ML_BLOCK = ("(*", "*)")
_XML_BLOCK = ("<!--", "-->")

LANGUAGES: tuple[LanguageSpec, ...] = (
    LanguageSpec(
        "Rust",
        extensions=("rs",),
        line_comments=("//",),
        block_comment=_C_BLOCK,
        nested_block_comments=True,
    ),
    LanguageSpec(
        "Python",
        extensions=("py", "pyi"),
        line_comments=("#",),
        single_quote_strings=True,
        triple_quote_strings=True,
        shebangs=("python", "python3"),
    ),
    LanguageSpec(
        "JavaScript",
        extensions=("js", "mjs", "cjs"),
        line_comments=("//",),
        block_comment=_C_BLOCK,
        single_quote_strings=True,
        shebangs=("node",),
    ),
    LanguageSpec(
        "TypeScript",
        extensions=("ts", "mts", "cts"),
        line_comments=("//",),
        block_comment=_C_BLOCK,
        single_quote_strings=True,
    ),
    LanguageSpec(
        "Java", extensions=("java",), line_comments=("//",), block_comment=_C_BLOCK
    ),
    LanguageSpec(
        "C", extensions=("c", "h"), line_comments=("//",), block_comment=_C_BLOCK
    ),
    LanguageSpec(
        "C++",
        extensions=("cpp", "cxx", "cc", "hpp", "hxx"),
        line_comments=("//",),
        block_comment=_C_BLOCK,
    ),
    LanguageSpec(
        "C#", extensions=("cs",), line_comments=("//",), block_comment=_C_BLOCK
    ),
    LanguageSpec(
        "Go", extensions=("go",), line_comments=("//",), block_comment=_C_BLOCK
    ),
    LanguageSpec(
        "Ruby",
        extensions=("rb",),
        filenames=("Rakefile", "Gemfile"),
        line_comments=("#",),
        single_quote_strings=True,
        shebangs=("ruby",),
    ),
    LanguageSpec(
        "Bourne Shell",
        extensions=("sh",),
        line_comments=("#",),
        single_quote_strings=True,
        shebangs=("sh",),
    ),
    LanguageSpec(
        "Bourne Again Shell",
        extensions=("bash",),
        line_comments=("#",),
        single_quote_strings=True,
        shebangs=("bash",),
    ),
    LanguageSpec(
        "Zsh",
        extensions=("zsh",),
        line_comments=("#",),
        single_quote_strings=True,
        shebangs=("zsh",),
    ),
    LanguageSpec(
        "HTML",
        extensions=("html", "htm"),
        block_comment=_XML_BLOCK,
        single_quote_strings=True,
    ),
    LanguageSpec(
        "CSS", extensions=("css",), block_comment=_C_BLOCK, single_quote_strings=True
    ),
    LanguageSpec(
        "SQL",
        extensions=("sql",),
        line_comments=("--",),
        block_comment=_C_BLOCK,
        single_quote_strings=True,
    ),
    LanguageSpec("TOML", extensions=("toml",), line_comments=("#",)),
    LanguageSpec("YAML", extensions=("yaml", "yml"), line_comments=("#",)),
    LanguageSpec("JSON", extensions=("json",)),
    LanguageSpec("Markdown", extensions=("md", "markdown")),
    LanguageSpec(
        "Kotlin",
        extensions=("kt", "kts"),
        line_comments=("//",),
        block_comment=_C_BLOCK,
        nested_block_comments=True,
    ),
    LanguageSpec(
        "Swift",
        extensions=("swift",),
        line_comments=("//",),
        block_comment=_C_BLOCK,
        nested_block_comments=True,
    ),
    LanguageSpec(
        "PHP",
        extensions=("php",),
        line_comments=("//",),
        block_comment=_C_BLOCK,
        single_quote_strings=True,
    ),
    LanguageSpec(
        "Dart",
        extensions=("dart",),
        line_comments=("//",),
        block_comment=_C_BLOCK,
        single_quote_strings=True,
    ),
    # `-->` is an operator, `{-# ... #-}` is a pragma and not a comment.
    LanguageSpec(
        "Haskell",
        extensions=("hs",),
        line_comments=("--",),
        line_comment_not_before="!#$%&*+./<=>?@\\^|~",
        block_comment=("{-", "-}"),
        nested_block_comments=True,
        pragma=("{-#", "#-}"),
    ),
    LanguageSpec(
        "Lua",
        extensions=("lua",),
        line_comments=("--",),
        block_comment=("--[[", "]]"),
        single_quote_strings=True,
        shebangs=("lua",),
    ),
    LanguageSpec(
        "Perl",
        extensions=("pl", "pm"),
        line_comments=("#",),
        single_quote_strings=True,
        shebangs=("perl",),
    ),
    LanguageSpec(
        "R",
        extensions=("r", "R"),
        line_comments=("#",),
        single_quote_strings=True,
        shebangs=("Rscript",),
    ),
    LanguageSpec(
        "Scala",
        extensions=("scala", "sc", "sbt"),
        line_comments=("//",),
        block_comment=_C_BLOCK,
        nested_block_comments=True,
    ),
    LanguageSpec(
        "XML",
        extensions=(
            "xml",
            "xsl",
            "xslt",
            "svg",
            "fsproj",
            "csproj",
            "vbproj",
            "vcxproj",
            "sln",
            "plist",
            "xaml",
        ),
        block_comment=_XML_BLOCK,
        single_quote_strings=True,
    ),
    LanguageSpec("Dockerfile", filenames=("Dockerfile",), line_comments=("#",)),
    LanguageSpec(
        "Makefile",
        extensions=("mk",),
        filenames=("Makefile", "makefile", "GNUmakefile"),
        line_comments=("#",),
    ),
    LanguageSpec(
        "Elixir",
        extensions=("ex",),
        line_comments=("#",),
        single_quote_strings=True,
        shebangs=("elixir",),
    ),
    LanguageSpec(
        "Elixir Script",
        extensions=("exs",),
        line_comments=("#",),
        single_quote_strings=True,
    ),
    LanguageSpec(
        "Clojure", extensions=("clj", "cljs", "cljc", "edn"), line_comments=(";",)
    ),
    LanguageSpec("Zig", extensions=("zig",), line_comments=("//",)),
    LanguageSpec(
        "Objective-C",
        extensions=("m", "mm"),
        line_comments=("//",),
        block_comment=_C_BLOCK,
    ),
    LanguageSpec(
        "OCaml",
        extensions=("ml", "mli"),
        block_comment=_ML_BLOCK,
        nested_block_comments=True,
    ),
    LanguageSpec(
        "F#",
        extensions=("fs", "fsi", "fsx"),
        line_comments=("//",),
        block_comment=_ML_BLOCK,
        nested_block_comments=True,
    ),
    LanguageSpec(
        "Nim",
        extensions=("nim",),
        line_comments=("#",),
        block_comment=("#[", "]#"),
        nested_block_comments=True,
    ),
    LanguageSpec(
        "Julia",
        extensions=("jl",),
        line_comments=("#",),
        block_comment=("#=", "=#"),
        nested_block_comments=True,
        shebangs=("julia",),
    ),
    LanguageSpec(
        "Terraform", extensions=("tf",), line_comments=("#",), block_comment=_C_BLOCK
    ),
    LanguageSpec(
        "Groovy",
        extensions=("groovy",),
        line_comments=("//",),
        block_comment=_C_BLOCK,
        single_quote_strings=True,
    ),
    LanguageSpec(
        "Gradle",
        extensions=("gradle",),
        line_comments=("//",),
        block_comment=_C_BLOCK,
        single_quote_strings=True,
    ),
    LanguageSpec("Erlang", extensions=("erl", "hrl"), line_comments=("%",)),
    LanguageSpec(
        "DOS Batch",
        extensions=("bat", "cmd"),
        line_comments=("::", "rem ", "REM ", "Rem "),
    ),
    LanguageSpec("Properties", extensions=("properties",), line_comments=("#",)),
    LanguageSpec("Text", extensions=("txt",)),
)


def find_language(name: str) -> LanguageSpec:
    """Look up a registered language by display name.

    Args:
        name: Language display name, e.g. ``"Python"``.

    Returns:
        Matching language specification.

    Raises:
        KeyError: If no language has this name.
    """
    for spec in LANGUAGES:
        if spec.name == name:
            return spec
    raise KeyError(name)


def detect(path: Path) -> LanguageSpec | None:
    """Detect a language by exact file name, then by extension.

    Args:
        path: File path to inspect.

    Returns:
        Matching language specification, or ``None`` when unrecognized.
    """
    file_name = path.name
    for spec in LANGUAGES:
        if file_name in spec.filenames:
            return spec

    extension = path.suffix[1:] if path.suffix else ""
    if not extension:
        return None
    for spec in LANGUAGES:
        if extension in spec.extensions:
            return spec
    return None


def detect_by_shebang(first_line: str) -> LanguageSpec | None:
    """Detect a language from a ``#!`` interpreter line.

    Handles direct interpreter paths (``#!/bin/bash``) and ``env`` wrappers
    with flags (``#!/usr/bin/env -S python3 -u``).

    Args:
        first_line: First line of a file.

    Returns:
        Matching language specification, or ``None``.
    """
    line = first_line.strip()
    if not line.startswith("#!"):
        return None

    tail = line.rsplit("/", 1)[-1].split()
    interpreter = tail[0] if tail else ""
    if interpreter == "env":
        words = line.split()
        env_index = next(
            (index for index, word in enumerate(words) if word.endswith("env")), None
        )
        arguments = words[env_index + 1 :] if env_index is not None else []
        program = next((word for word in arguments if not word.startswith("-")), "")
    else:
        program = interpreter

    if not program:
        return None
    for spec in LANGUAGES:
        for shebang in spec.shebangs:
            if program == shebang or program.startswith(shebang):
                return spec
    return None
