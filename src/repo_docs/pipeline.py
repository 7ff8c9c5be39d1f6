"""Clone a repository, collect its documentation files and aggregate them."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from repo_docs import repository
from repo_docs.config import DEFAULT_GIT_EXECUTABLE, PipelineState, RepoDocs, RepositoryMetadata
from repo_docs.file_manipulation import compile_rules, find_doc_files
from repo_docs.logging import logger
from repo_docs.output_construction import build_document

if TYPE_CHECKING:
    from collections.abc import Sequence


def generate_repo_docs(
    repo_url: str,
    *,
    includes: Sequence[str] | None = None,
    excludes: Sequence[str] | None = None,
    branch: str | None = None,
    tmp_dir: Path | None = None,
    git_executable: str | None = None,
) -> RepoDocs:
    """Generate the aggregated documentation of a remote repository.

    The URL and the patterns are validated before anything is cloned. Once the
    clone exists it is removed before this function returns or raises.

    Args:
        repo_url (str): the URL of the repository
        includes (Sequence[str] | None): regexes a file path must match; `.md` files if empty
        excludes (Sequence[str] | None): regexes that remove a file, applied after includes
        branch (str | None): the branch to clone, the remote default if None
        tmp_dir (Path | None): the temporary root for the clone, system default if None
        git_executable (str | None): the git executable, `git` if None

    Raises:
        MalformedRepositoryURLError: if owner/repo cannot be parsed from the URL.
        InvalidPatternError: if an include/exclude pattern does not compile.
        AcquisitionFailedError: if the repository or branch cannot be cloned.
        MetadataUnavailableError: if the revision of the clone cannot be read.
        TraversalError: if a directory of the clone cannot be listed.
        ReadError: if a selected file cannot be read.

    Returns:
        RepoDocs: the aggregated text and the repository metadata
    """
    repo_url = repo_url.strip()
    identity = repository.parse_repo_url(repo_url)
    rules = compile_rules(includes, excludes)
    git = git_executable or DEFAULT_GIT_EXECUTABLE
    acquisition = repository.Acquisition(
        repo_url,
        branch=branch or None,
        tmp_root=Path(tmp_dir or tempfile.gettempdir()),
        git=git,
    )
    log = logger.bind(repo=identity.slug, clone=str(acquisition.path))
    state = PipelineState.NOT_STARTED

    try:
        with acquisition as root:
            state = PipelineState.ACQUIRED
            log.info("pipeline state", state=state)

            revision, committed_at = repository.read_revision(root, git=git)
            state = PipelineState.INSPECTED
            log.info("pipeline state", state=state)

            files = find_doc_files(root, rules)
            state = PipelineState.SELECTED
            log.info("pipeline state", state=state, files=len(files))

            output = build_document(files, root, identity)
            state = PipelineState.AGGREGATED
            log.info("pipeline state", state=state, chars=len(output))
    finally:
        if state is not PipelineState.NOT_STARTED:
            log.info("pipeline state", state=PipelineState.DISPOSED, after=state, removed=acquisition.disposed)

    metadata = RepositoryMetadata(
        owner=identity.owner,
        repo=identity.repo,
        revision=revision,
        committed_at=committed_at,
    )
    return RepoDocs(output=output, metadata=metadata)
