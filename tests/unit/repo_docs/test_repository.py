from __future__ import annotations

import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from repo_docs import repository
from repo_docs.config import ACQUISITION_PREFIX, RepositoryIdentity
from repo_docs.exceptions import (
    AcquisitionFailedError,
    GitCommandError,
    MalformedRepositoryURLError,
    MetadataUnavailableError,
)

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.unit
@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/acme/widgets",
        "https://github.com/acme/widgets/",
        "https://github.com/acme/widgets.git",
        "https://github.com/acme/widgets.git/",
        "ssh://git@github.com/acme/widgets.git",
        "https://github.com/acme/widgets/tree/main",
    ],
)
def test_parse_repo_url_extracts_owner_and_repo(url: str) -> None:
    assert repository.parse_repo_url(url) == RepositoryIdentity(owner="acme", repo="widgets")


@pytest.mark.unit
@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/onlyowner",
        "https://github.com/onlyowner/",
        "https://github.com/",
        "not a url",
        "git@github.com:acme/widgets.git",
        "https://[github.com/acme/widgets",
    ],
)
def test_parse_repo_url_rejects_malformed_urls(url: str) -> None:
    with pytest.raises(MalformedRepositoryURLError) as exc_info:
        repository.parse_repo_url(url)

    assert exc_info.value.url == url
    assert url in str(exc_info.value)


@pytest.mark.unit
def test_run_git_returns_stdout(mocker: MockerFixture, tmp_path: Path) -> None:
    run = mocker.patch.object(
        repository.subprocess,
        "run",
        return_value=subprocess.CompletedProcess(args=[], returncode=0, stdout="abc\n", stderr=""),
    )

    assert repository.run_git(["rev-parse", "HEAD"], cwd=tmp_path) == "abc\n"
    assert run.call_args.args[0] == ["git", "rev-parse", "HEAD"]
    assert run.call_args.kwargs["cwd"] == str(tmp_path)


@pytest.mark.unit
def test_run_git_wraps_non_zero_exit(mocker: MockerFixture) -> None:
    mocker.patch.object(
        repository.subprocess,
        "run",
        side_effect=subprocess.CalledProcessError(128, ["git", "status"], output="", stderr="fatal: not a git repository"),
    )

    with pytest.raises(GitCommandError) as exc_info:
        repository.run_git(["status"])

    err = exc_info.value
    assert err.command == "git status"
    assert err.returncode == 128  # noqa: PLR2004
    assert "not a git repository" in str(err)


@pytest.mark.unit
def test_run_git_wraps_missing_executable(mocker: MockerFixture) -> None:
    mocker.patch.object(repository.subprocess, "run", side_effect=FileNotFoundError("no such file: gitx"))

    with pytest.raises(GitCommandError) as exc_info:
        repository.run_git(["status"], git="gitx")

    assert exc_info.value.returncode == 127  # noqa: PLR2004
    assert exc_info.value.command == "gitx status"


@pytest.mark.unit
def test_make_acquisition_path_is_unique(tmp_path: Path) -> None:
    first = repository.make_acquisition_path(tmp_path)
    second = repository.make_acquisition_path(tmp_path)

    assert first != second
    assert first.parent == tmp_path
    assert first.name.startswith(ACQUISITION_PREFIX)


@pytest.mark.unit
def test_clone_repo_runs_shallow_clone_of_branch(mocker: MockerFixture, tmp_path: Path) -> None:
    run_git = mocker.patch.object(repository, "run_git", return_value="")
    dest = tmp_path / "clone"

    assert repository.clone_repo("https://github.com/acme/widgets", dest, branch="dev") == dest
    run_git.assert_called_once_with(
        ["clone", "--depth=1", "--branch", "dev", "--", "https://github.com/acme/widgets", str(dest)],
        git="git",
    )


@pytest.mark.unit
def test_clone_repo_uses_default_branch_when_none(mocker: MockerFixture, tmp_path: Path) -> None:
    run_git = mocker.patch.object(repository, "run_git", return_value="")
    dest = tmp_path / "clone"

    repository.clone_repo("https://github.com/acme/widgets", dest)

    assert "--branch" not in run_git.call_args.args[0]


@pytest.mark.unit
def test_clone_repo_failure_removes_partial_clone(mocker: MockerFixture, tmp_path: Path) -> None:
    dest = tmp_path / "clone"

    def fail(*_args: object, **_kwargs: object) -> str:
        (dest / ".git").mkdir(parents=True)
        raise GitCommandError(
            command="git clone",
            returncode=128,
            stdout="",
            stderr="fatal: Remote branch nope not found in upstream origin\n",
        )

    mocker.patch.object(repository, "run_git", side_effect=fail)

    with pytest.raises(AcquisitionFailedError) as exc_info:
        repository.clone_repo("https://github.com/acme/widgets", dest, branch="nope")

    err = exc_info.value
    assert err.branch == "nope"
    assert err.detail == "fatal: Remote branch nope not found in upstream origin"
    assert isinstance(err.__cause__, GitCommandError)
    assert "Failed to clone branch 'nope'" in str(err)
    assert not dest.exists()


@pytest.mark.unit
def test_read_revision_returns_trimmed_values(mocker: MockerFixture, tmp_path: Path) -> None:
    run_git = mocker.patch.object(
        repository,
        "run_git",
        side_effect=["0123abcd\n", "Mon Jan 6 10:00:00 2025 +0100\n"],
    )

    assert repository.read_revision(tmp_path) == ("0123abcd", "Mon Jan 6 10:00:00 2025 +0100")
    assert run_git.call_args_list[0].args[0] == ["rev-parse", "HEAD"]
    assert run_git.call_args_list[1].args[0] == ["log", "-1", "--format=%cd", "HEAD"]


@pytest.mark.unit
def test_read_revision_failure_raises_metadata_unavailable(mocker: MockerFixture, tmp_path: Path) -> None:
    mocker.patch.object(
        repository,
        "run_git",
        side_effect=GitCommandError(command="git rev-parse HEAD", returncode=128, stdout="", stderr="fatal: bad HEAD"),
    )

    with pytest.raises(MetadataUnavailableError) as exc_info:
        repository.read_revision(tmp_path)

    assert exc_info.value.path == tmp_path
    assert exc_info.value.detail == "fatal: bad HEAD"


@pytest.mark.unit
def test_remove_tree_logs_and_reports_failure(mocker: MockerFixture, tmp_path: Path) -> None:
    target = tmp_path / "clone"
    target.mkdir()
    mocker.patch.object(repository.shutil, "rmtree", side_effect=PermissionError("denied"))
    warning = mocker.patch.object(repository.logger, "warning")

    assert repository.remove_tree(target) is False
    warning.assert_called_once()


@pytest.mark.unit
def test_remove_tree_on_missing_path_is_a_no_op(tmp_path: Path) -> None:
    assert repository.remove_tree(tmp_path / "missing") is True


@pytest.mark.unit
def test_remove_tree_never_raises_when_path_cannot_be_inspected(mocker: MockerFixture, tmp_path: Path) -> None:
    mocker.patch.object(Path, "exists", side_effect=PermissionError("denied"))
    mocker.patch.object(repository.shutil, "rmtree", side_effect=PermissionError("denied"))
    warning = mocker.patch.object(repository.logger, "warning")

    assert repository.remove_tree(tmp_path / "clone") is False
    warning.assert_called_once()


@pytest.mark.unit
def test_acquisition_disposes_clone_when_block_raises(mocker: MockerFixture, tmp_root: Path) -> None:
    def fake_clone(_url: str, dest: Path, **_kwargs: object) -> Path:
        (dest / "README.md").parent.mkdir(parents=True)
        (dest / "README.md").write_text("hi", encoding="utf-8")
        return dest

    mocker.patch.object(repository, "clone_repo", side_effect=fake_clone)
    acquisition = repository.Acquisition("https://github.com/acme/widgets", tmp_root=tmp_root)

    with pytest.raises(RuntimeError, match="boom"), acquisition as root:
        assert (root / "README.md").exists()
        raise RuntimeError("boom")  # noqa: EM101

    assert acquisition.disposed is True
    assert list(tmp_root.iterdir()) == []
