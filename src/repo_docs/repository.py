from __future__ import annotations

import secrets
import shutil
import subprocess  # noqa: S404
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from repo_docs.config import ACQUISITION_PREFIX, DEFAULT_GIT_EXECUTABLE, RepositoryIdentity
from repo_docs.exceptions import (
    AcquisitionFailedError,
    GitCommandError,
    MalformedRepositoryURLError,
    MetadataUnavailableError,
)
from repo_docs.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType


def parse_repo_url(repo_url: str) -> RepositoryIdentity:
    """Extract the owner and repository name from a repository URL.

    Leading slashes, a trailing `.git` suffix and a trailing slash are removed
    from the URL path; the first two remaining segments are the owner and the name.

    Args:
        repo_url (str): the URL of the repository, e.g. `https://github.com/acme/widgets.git`

    Raises:
        MalformedRepositoryURLError: if the URL is not valid or misses a segment.

    Returns:
        RepositoryIdentity: the owner and repository name
    """
    try:
        parsed = urlparse(repo_url.strip())
    except ValueError as e:
        raise MalformedRepositoryURLError(url=repo_url) from e
    if not parsed.scheme or (not parsed.netloc and parsed.scheme != "file"):
        raise MalformedRepositoryURLError(url=repo_url)

    cleaned = parsed.path.lstrip("/").rstrip("/")
    cleaned = cleaned.removesuffix(".git").rstrip("/")
    segments = cleaned.split("/")
    owner = segments[0] if segments else ""
    repo = segments[1] if len(segments) > 1 else ""
    if not owner or not repo:
        raise MalformedRepositoryURLError(url=repo_url)
    return RepositoryIdentity(owner=owner, repo=repo)


def run_git(args: Sequence[str], cwd: Path | None = None, git: str = DEFAULT_GIT_EXECUTABLE) -> str:
    """Run a git command and return its standard output.

    Args:
        args (Sequence[str]): the git arguments, without the executable
        cwd (Path | None): the working directory of the command
        git (str): the git executable to invoke

    Raises:
        GitCommandError: if git exits with a non-zero status or cannot be started.

    Returns:
        str: the captured standard output
    """
    cmd = [git, *args]
    command = " ".join(cmd)
    try:
        out = subprocess.run(  # noqa: S603
            cmd,
            cwd=str(cwd) if cwd else None,
            text=True,
            capture_output=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise GitCommandError(
            command=command,
            returncode=e.returncode,
            stdout=e.stdout or "",
            stderr=e.stderr or "",
        ) from e
    except OSError as e:
        raise GitCommandError(command=command, returncode=127, stdout="", stderr=str(e)) from e
    return out.stdout


def make_acquisition_path(tmp_root: Path) -> Path:
    """Return a fresh, collision resistant clone path under `tmp_root`."""
    return tmp_root / f"{ACQUISITION_PREFIX}{secrets.token_hex(8)}"


def remove_tree(path: Path) -> bool:
    """Remove a directory tree, logging instead of raising on failure.

    Returns:
        bool: True if nothing is left at `path`, False otherwise
    """
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)
        return False
    return True


def clone_repo(
    repo_url: str,
    dest: Path,
    branch: str | None = None,
    git: str = DEFAULT_GIT_EXECUTABLE,
) -> Path:
    """Shallow-clone a repository (optionally at a branch) into `dest`.

    A partially created `dest` is removed before the error is raised.

    Args:
        repo_url (str): the URL of the repository
        dest (Path): the directory to clone into; must not exist yet
        branch (str | None): the branch to clone, the remote default branch if None
        git (str): the git executable to invoke

    Raises:
        AcquisitionFailedError: if git cannot clone the repository or the branch.

    Returns:
        Path: the clone directory
    """
    args = ["clone", "--depth=1"]
    if branch:
        args.extend(["--branch", branch])
    args.extend(["--", repo_url, str(dest)])
    logger.info("cloning repository", url=repo_url, branch=branch or "default", dest=str(dest))
    try:
        run_git(args, git=git)
    except GitCommandError as e:
        remove_tree(dest)
        raise AcquisitionFailedError(
            url=repo_url,
            branch=branch or "",
            detail=e.stderr.strip() or str(e),
        ) from e
    return dest


def read_revision(repo: Path, git: str = DEFAULT_GIT_EXECUTABLE) -> tuple[str, str]:
    """Read the checked-out revision and its commit date from a clone.

    Args:
        repo (Path): the clone directory
        git (str): the git executable to invoke

    Raises:
        MetadataUnavailableError: if either git query fails.

    Returns:
        tuple[str, str]: the revision identifier and the commit date
    """
    try:
        revision = run_git(["rev-parse", "HEAD"], cwd=repo, git=git).strip()
        committed_at = run_git(["log", "-1", "--format=%cd", "HEAD"], cwd=repo, git=git).strip()
    except GitCommandError as e:
        raise MetadataUnavailableError(path=repo, detail=e.stderr.strip() or str(e)) from e
    logger.info("read revision", revision=revision, committed_at=committed_at)
    return revision, committed_at


class Acquisition:
    """Exclusively owned clone of a repository, disposed when the block exits.

    Usage:
        with Acquisition(url, branch="main") as root:
            ...

    `__exit__` removes the clone whatever the outcome of the block and never
    suppresses the block's exception.
    """

    def __init__(
        self,
        repo_url: str,
        branch: str | None = None,
        *,
        tmp_root: Path,
        git: str = DEFAULT_GIT_EXECUTABLE,
    ) -> None:
        self.repo_url = repo_url
        self.branch = branch
        self.git = git
        self.path = make_acquisition_path(tmp_root)
        self.disposed = False

    def __enter__(self) -> Path:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AcquisitionFailedError(url=self.repo_url, branch=self.branch or "", detail=str(e)) from e
        return clone_repo(self.repo_url, self.path, branch=self.branch, git=self.git)

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def dispose(self) -> None:
        """Remove the clone; failures are logged and never raised."""
        if self.disposed:
            return
        self.disposed = remove_tree(self.path)
