from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum, auto

from pydantic import BaseModel, ConfigDict, Field

DOC_EXTENSION = ".md"
ACQUISITION_PREFIX = "repo-docs-"
GIT_METADATA_DIR = ".git"
DEFAULT_GIT_EXECUTABLE = "git"


class PipelineState(StrEnum):
    """Lifecycle states of a single `generate_repo_docs` run.

    Any state from `ACQUIRED` onwards always ends in `DISPOSED`.
    """

    NOT_STARTED = auto()
    ACQUIRED = auto()
    INSPECTED = auto()
    SELECTED = auto()
    AGGREGATED = auto()
    DISPOSED = auto()


class RepositoryIdentity(BaseModel):
    """Owner and name of a repository, parsed from its URL.

    Attributes:
        owner: First path segment of the URL (user or organisation).
        repo: Second path segment of the URL, without any `.git` suffix.
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., min_length=1, description="Repository owner")
    repo: str = Field(..., min_length=1, description="Repository name")

    @property
    def slug(self) -> str:
        """Return the `owner/repo` label used in document headers."""
        return f"{self.owner}/{self.repo}"


class RepositoryMetadata(RepositoryIdentity):
    """Repository identity plus the revision captured from the clone.

    Attributes:
        revision: Identifier of the checked-out commit (`git rev-parse HEAD`).
        committed_at: Commit date of that revision as printed by `git log`.
    """

    revision: str = Field(..., description="Checked-out commit identifier")
    committed_at: str = Field(..., description="Commit date of the revision")


class RepoDocs(BaseModel):
    """Result of a pipeline run: the aggregated document and its provenance."""

    model_config = ConfigDict(frozen=True)

    output: str = Field(..., description="Aggregated documentation text")
    metadata: RepositoryMetadata


@dataclass(frozen=True)
class SelectionRules:
    """Compiled include/exclude regular expressions.

    An empty `includes` falls back to the documentation extension test.
    `excludes` are applied after includes and always win.
    """

    includes: tuple[re.Pattern[str], ...] = ()
    excludes: tuple[re.Pattern[str], ...] = ()

    def matches(self, path: str) -> bool:
        if self.includes:
            included = any(p.search(path) for p in self.includes)
        else:
            included = path.lower().endswith(DOC_EXTENSION)
        return included and not any(p.search(path) for p in self.excludes)
