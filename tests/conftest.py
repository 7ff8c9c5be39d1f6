from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

DOC_TREE: dict[str, str] = {
    "README.md": "# Widgets\n\nTop level readme.\n",
    "docs/intro.md": "## Intro\n\nHow to use widgets.\n",
    "src/app.py": "print('not documentation')\n",
}

GIT = ["git", "-c", "user.name=Repo Docs", "-c", "user.email=repo-docs@example.com", "-c", "commit.gpgsign=false"]

WriteTree = Callable[[Path, Mapping[str, str]], Path]


def write_tree(root: Path, files: Mapping[str, str]) -> Path:
    """Write `relative path -> content` entries under `root`."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def git(cwd: Path, *args: str) -> str:
    """Run git in `cwd` with a fixed identity and return its stdout."""
    out = subprocess.run(
        [*GIT, *args],
        cwd=str(cwd),
        text=True,
        capture_output=True,
        check=True,
    )
    return out.stdout.strip()


@pytest.fixture
def make_tree() -> WriteTree:
    """Provide the tree writer to tests."""
    return write_tree


@pytest.fixture
def doc_tree(tmp_path: Path) -> Path:
    """A plain directory holding README.md, docs/intro.md and src/app.py."""
    return write_tree(tmp_path / "clone", DOC_TREE)


@pytest.fixture
def tmp_root(tmp_path: Path) -> Path:
    """An empty temporary root for clones."""
    root = tmp_path / "tmp-root"
    root.mkdir()
    return root


@pytest.fixture
def source_repo(tmp_path: Path) -> Path:
    """A committed git repository at `<tmp>/acme/widgets` with a `feature` branch.

    The default branch holds DOC_TREE; `feature` adds `docs/feature.md`.
    """
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    repo = tmp_path / "acme" / "widgets"
    repo.mkdir(parents=True)
    git(repo, "init", "-q")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    write_tree(repo, DOC_TREE)
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", "docs")
    git(repo, "checkout", "-q", "-b", "feature")
    write_tree(repo, {"docs/feature.md": "Feature notes.\n"})
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", "feature docs")
    git(repo, "checkout", "-q", "main")
    return repo
