from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

from repo_docs.config import GIT_METADATA_DIR, SelectionRules
from repo_docs.exceptions import InvalidPatternError, TraversalError

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return str(path.relative_to(root)).replace("\\", "/")
    except ValueError:
        return str(path)


def normalize_patterns(patterns: Sequence[str] | None) -> list[str]:
    """Drop blank entries from a sequence of user supplied patterns.

    Args:
        patterns (Sequence[str] | None): the raw patterns, possibly None

    Returns:
        list[str]: the stripped, non-empty patterns in their original order
    """
    out: list[str] = []
    for p in patterns or ():
        p2 = (p or "").strip()
        if p2:
            out.append(p2)
    return out


def compile_patterns(patterns: Sequence[str] | None) -> tuple[re.Pattern[str], ...]:
    """Compile regular expressions, failing on the first invalid one.

    Args:
        patterns (Sequence[str] | None): the patterns to compile

    Raises:
        InvalidPatternError: if a pattern is not a valid Python regular expression.

    Returns:
        tuple[re.Pattern[str], ...]: the compiled patterns in order
    """
    compiled: list[re.Pattern[str]] = []
    for pattern in normalize_patterns(patterns):
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise InvalidPatternError(pattern=pattern, detail=str(e)) from e
    return tuple(compiled)


def compile_rules(includes: Sequence[str] | None, excludes: Sequence[str] | None) -> SelectionRules:
    """Compile include/exclude patterns into selection rules."""
    return SelectionRules(includes=compile_patterns(includes), excludes=compile_patterns(excludes))


def is_selected(path: Path, rules: SelectionRules) -> bool:
    """Check a file's full path against the selection rules."""
    return rules.matches(str(path))


def _sorted_entries(directory: Path) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise TraversalError(path=directory, detail=str(e)) from e


def iter_doc_files(root: Path, rules: SelectionRules) -> Iterator[Path]:
    """Walk `root` depth-first and yield the files selected by `rules`.

    Entries of each directory are visited in name order and a subdirectory is
    descended into as soon as it is met, so the order is stable for an unchanged
    tree. Symbolic links are neither followed nor yielded, and `.git`
    directories are pruned.

    Args:
        root (Path): the directory to walk
        rules (SelectionRules): the compiled include/exclude rules

    Raises:
        TraversalError: if a directory cannot be listed.

    Yields:
        Iterator[Path]: the selected file paths, in traversal order
    """
    for entry in _sorted_entries(root):
        path = root / entry.name
        if entry.is_symlink():
            continue
        if entry.is_dir(follow_symlinks=False):
            if entry.name == GIT_METADATA_DIR:
                continue
            yield from iter_doc_files(path, rules)
        elif entry.is_file(follow_symlinks=False) and is_selected(path, rules):
            yield path


def find_doc_files(root: Path, rules: SelectionRules) -> list[Path]:
    """Materialize `iter_doc_files` into a list."""
    return list(iter_doc_files(root, rules))
