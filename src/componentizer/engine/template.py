# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""On-demand templating of fetched components.

Templating never modifies a fetched component. When at least one file
matches the template patterns of a component, the whole component directory
is duplicated next to the original (``<name>_<unique suffix>``) and only the
matched files of the duplicate are rewritten through the template context.

Patterns are relative to the component root and are either literal paths or
globs. Globs are separator aware: ``*`` and ``?`` stop at ``/``, ``**``
crosses directories, ``[...]`` (``[!...]`` to negate) matches a character
class and ``{a,b}`` matches alternatives. A matched directory templates every
file below it.
"""

from __future__ import annotations

import os
import posixpath
import re
import shutil
import uuid
from pathlib import Path

from componentizer.model.interfaces import TemplateContext

# ###############
# Public Interface
# ###############


class TemplateError(Exception):
    """Raised when a component cannot be templated."""


def execute_template(root: Path, patterns: list[str], context: TemplateContext) -> Path | None:
    """Template the files of *root* matching *patterns* into a disposable copy.

    Args:
        root: Directory of a fetched component.
        patterns: Literal paths or globs relative to *root*.
        context: Substitution engine applied to every matched file.

    Returns:
        The root of the templated copy, or None when *patterns* is empty or
        nothing matched (no copy is made). The caller owns the copy and must
        delete it once done.

    Raises:
        TemplateError: If a pattern is invalid, the copy cannot be made, or
            the context fails on a matched file. A partial copy is removed
            before the error propagates.
    """
    if not patterns:
        return None

    literals, globs = _compile_patterns(root, patterns)
    matches = _find_matches(root, literals, globs)
    if not matches:
        return None

    target = root.parent / f"{root.name}_{unique_suffix()}"
    try:
        shutil.copytree(root, target, symlinks=True)
        for file in _files_to_template(target, matches):
            _template_file(file, context)
    except Exception as exc:
        if target.exists():
            shutil.rmtree(target, ignore_errors=True)
        if isinstance(exc, TemplateError):
            raise
        raise TemplateError(f"Cannot template component '{root}': {exc}") from exc
    return target


def unique_suffix() -> str:
    """Return a time-derived identifier unique across concurrent callers."""
    return uuid.uuid1().hex


def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a separator-aware glob into an anchored regular expression.

    Raises:
        TemplateError: If the braces of *pattern* are unbalanced.
    """
    return re.compile(_translate(pattern) + r"\Z")


# ################
# Implementation
# ################

_GLOB_CHARS = frozenset("*?[{")


def _compile_patterns(root: Path, patterns: list[str]) -> tuple[set[str], list[re.Pattern[str]]]:
    """Split *patterns* into resolved literal paths and compiled globs."""
    base = root.as_posix().rstrip("/")
    literals: set[str] = set()
    globs: list[re.Pattern[str]] = []
    for pattern in patterns:
        relative = pattern.replace("\\", "/")
        while relative.startswith("./"):
            relative = relative[2:]
        literals.add(posixpath.normpath(posixpath.join(base, relative)))
        if _GLOB_CHARS.intersection(relative):
            globs.append(re.compile(re.escape(base + "/") + _translate(relative) + r"\Z"))
    return literals, globs


def _find_matches(root: Path, literals: set[str], globs: list[re.Pattern[str]]) -> list[Path]:
    """Walk *root* and return the relative paths matching a literal or a glob."""
    matches: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        current = Path(dirpath)
        for entry in [current, *(current / name for name in sorted(filenames))]:
            candidate = entry.as_posix()
            if candidate in literals or any(g.match(candidate) for g in globs):
                matches.append(entry.relative_to(root))
    return matches


def _files_to_template(target: Path, matches: list[Path]) -> list[Path]:
    """Map the matches onto the copy, expanding matched directories to their files."""
    files: dict[Path, None] = {}
    for relative in matches:
        path = target / relative
        if path.is_symlink():
            continue
        if path.is_dir():
            for child in sorted(path.rglob("*")):
                if child.is_file() and not child.is_symlink():
                    files[child] = None
        elif path.is_file():
            files[path] = None
    return list(files)


def _template_file(path: Path, context: TemplateContext) -> None:
    """Rewrite *path* in place with its content substituted by *context*."""
    try:
        content = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TemplateError(f"Cannot template '{path}': not a UTF-8 text file") from exc
    try:
        rendered = context.execute(content)
    except Exception as exc:
        raise TemplateError(f"Template execution failed for '{path}': {exc}") from exc
    path.write_bytes(rendered.encode("utf-8"))


def _translate(pattern: str) -> str:
    """Translate a glob into a regular expression body."""
    out: list[str] = []
    depth = 0
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                out.append(".*")
                i += 2
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = pattern.find("]", i + 2)
            if end == -1:
                out.append(re.escape(c))
            else:
                body = pattern[i + 1 : end]
                negate = body.startswith("!")
                if negate:
                    body = body[1:]
                body = re.sub(r"([\\^\[])", r"\\\1", body)
                out.append(f"[^/{body}]" if negate else f"[{body}]")
                i = end + 1
                continue
        elif c == "{":
            depth += 1
            out.append("(?:")
        elif c == "," and depth:
            out.append("|")
        elif c == "}" and depth:
            depth -= 1
            out.append(")")
        elif c == "\\" and i + 1 < n:
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        else:
            out.append(re.escape(c))
        i += 1
    if depth:
        raise TemplateError(f"Unbalanced braces in template pattern {pattern!r}")
    return "".join(out)
