"""Aggregate the documentation files of a git repository into one text."""

__version__ = "0.1.0"

from repo_docs.config import RepoDocs, RepositoryIdentity, RepositoryMetadata  # noqa: E402
from repo_docs.pipeline import generate_repo_docs  # noqa: E402

__all__ = [
    "RepoDocs",
    "RepositoryIdentity",
    "RepositoryMetadata",
    "__version__",
    "generate_repo_docs",
]
