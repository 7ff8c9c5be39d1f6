from __future__ import annotations

import io
from typing import TYPE_CHECKING

from repo_docs.exceptions import ReadError
from repo_docs.file_manipulation import relpath

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from repo_docs.config import RepositoryIdentity


def read_text(path: Path) -> str:
    """Read a whole file as UTF-8 text, line endings untouched.

    Args:
        path (Path): the file to read

    Raises:
        ReadError: if the file is missing, unreadable or not valid UTF-8.

    Returns:
        str: the file content
    """
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(path=path, detail=str(e)) from e


def document_header(identity: RepositoryIdentity) -> str:
    return f"# Documentation for {identity.slug}\n\n"


def file_block(rel: str, content: str) -> str:
    return f"\n\n---\n**{rel}**:\n\n{content}\n"


def build_document(
    files: Sequence[Path],
    root: Path,
    identity: RepositoryIdentity,
) -> str:
    """Concatenate the selected files into one documentation text.

    The text starts with a header naming `owner/repo`; every file follows in the
    given order as a `---` separator, its path relative to `root` in bold, and
    its raw content. The result is stripped of surrounding whitespace.

    Args:
        files (Sequence[Path]): the selected files, in selection order
        root (Path): the clone root the relative paths are computed from
        identity (RepositoryIdentity): the repository owner and name

    Raises:
        ReadError: if any file cannot be read; no partial text is returned.

    Returns:
        str: the aggregated documentation
    """
    out = io.StringIO()
    out.write(document_header(identity))
    for f in files:
        out.write(file_block(relpath(f, root), read_text(f)))
    return out.getvalue().strip()
