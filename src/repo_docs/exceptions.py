from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RepoDocsError(Exception):
    """Base exception for errors in the repo_docs module."""


@dataclass(frozen=True)
class MalformedRepositoryURLError(RepoDocsError):
    """Raised when owner/repo cannot be parsed from a repository URL."""

    url: str
    message: str = "Could not parse owner/repo from URL"

    def __str__(self) -> str:
        return f"{self.message}: {self.url}"


@dataclass(frozen=True)
class InvalidPatternError(RepoDocsError):
    """Raised when an include/exclude pattern is not a valid regular expression."""

    pattern: str
    detail: str

    def __str__(self) -> str:
        return f"Invalid pattern {self.pattern!r}: {self.detail}"


@dataclass(frozen=True)
class GitCommandError(RepoDocsError):
    """Raised when a git command fails."""

    command: str
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        diagnostic = self.stderr.strip() or self.stdout.strip()
        return f"`{self.command}` exited with status {self.returncode}: {diagnostic}"


@dataclass(frozen=True)
class AcquisitionFailedError(RepoDocsError):
    """Raised when the repository cannot be cloned (bad URL, missing repo or branch)."""

    url: str
    branch: str
    detail: str

    def __str__(self) -> str:
        return f"Failed to clone branch '{self.branch or 'default'}' of {self.url}: {self.detail}"


@dataclass(frozen=True)
class MetadataUnavailableError(RepoDocsError):
    """Raised when the revision or commit date of a clone cannot be read."""

    path: Path
    detail: str

    def __str__(self) -> str:
        return f"Could not read revision metadata in {self.path}: {self.detail}"


@dataclass(frozen=True)
class TraversalError(RepoDocsError):
    """Raised when a directory of the clone cannot be listed."""

    path: Path
    detail: str

    def __str__(self) -> str:
        return f"Could not list directory {self.path}: {self.detail}"


@dataclass(frozen=True)
class ReadError(RepoDocsError):
    """Raised when a selected file cannot be read as text."""

    path: Path
    detail: str

    def __str__(self) -> str:
        return f"Could not read {self.path}: {self.detail}"


@dataclass(frozen=True)
class ConfigFileError(RepoDocsError):
    """Raised when a YAML configuration file is malformed."""

    file: Path
    message: str = "The configuration file must be a YAML mapping."

    def __str__(self) -> str:
        return f"{self.message} ({self.file})"
