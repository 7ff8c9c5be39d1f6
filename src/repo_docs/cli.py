"""
repo_docs — Gather the documentation of a git repository into one text.

Overview
--------
The command shallow-clones a repository into a throw-away directory, walks
its tree, and concatenates every selected file behind a `**path**:` header.
By default the Markdown files (`*.md`) are selected; `--include` replaces
that default with regular expressions tested against each file's full path,
and `--exclude` removes files afterwards. The clone is always deleted.

The result is printed with the repository metadata (owner, name, revision,
commit date), or written to `--output`.

Usage
-----
Run `python -m repo_docs.cli --help` for full options. Common examples:
    - All Markdown files of the default branch:
        repo-docs https://github.com/acme/widgets
    - Only the docs/ folder of a branch, as JSON:
        repo-docs https://github.com/acme/widgets --branch dev --include "docs/.*\\.md" --format json
    - Options from a YAML file, log to a file:
        repo-docs https://github.com/acme/widgets --config repo_docs.yaml --log-file run.log
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

from pydantic import ValidationError

from repo_docs import __version__
from repo_docs.exceptions import RepoDocsError
from repo_docs.logging import logger, setup_logging
from repo_docs.pipeline import generate_repo_docs
from repo_docs.settings import Settings, load_config_file

if TYPE_CHECKING:
    from collections.abc import Sequence

    from repo_docs.config import RepoDocs


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="repo-docs",
        description="Aggregate the documentation files of a git repository.",
    )
    p.add_argument("repo_url", help="Repository URL, e.g. https://github.com/acme/widgets.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--branch", type=str, default="", help="Branch to clone.")
    p.add_argument(
        "--include",
        action="append",
        default=None,
        help="Include regex on the file path (repeatable).",
    )
    p.add_argument(
        "--exclude",
        action="append",
        default=None,
        help="Exclude regex on the file path (repeatable).",
    )
    p.add_argument(
        "--filter",
        action="append",
        default=None,
        help="Alias of --include.",
    )
    p.add_argument("--output", type=str, default=None, help="Output file.")
    p.add_argument(
        "--format",
        type=str,
        choices=["text", "json"],
        default="text",
        help="Output format.",
    )
    p.add_argument("--config", type=str, default="", help="YAML file with default options.")
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    p.add_argument("--tmp-dir", type=str, default=None, help="Temporary root for the clone.")
    p.add_argument("--git", type=str, default=None, help="Git executable.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse the command line into `Settings`.

    Values of a `--config` YAML file become parser defaults, so flags given on the
    command line take precedence over the file. Pattern lists are replaced, not
    extended: any `--include`/`--filter` flag discards the file's `include`, and
    any `--exclude` flag discards its `exclude`.

    Args:
        argv (Sequence[str] | None): the arguments, `sys.argv[1:]` if None

    Raises:
        ConfigFileError: if the configuration file cannot be used.

    Returns:
        Settings: the validated settings
    """
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", type=str, default="")
    known, _ = pre.parse_known_args(argv)

    file_values = load_config_file(known.config) if known.config else {}
    file_patterns = {k: file_values.pop(k, []) for k in ("include", "exclude")}

    p = build_parser()
    p.set_defaults(**file_values)
    args = p.parse_args(argv)

    values = {k: v for k, v in vars(args).items() if v is not None}
    flag_includes = [*values.pop("include", []), *values.pop("filter", [])]
    values["include"] = flag_includes or file_patterns["include"]
    values["exclude"] = values.pop("exclude", None) or file_patterns["exclude"]
    return Settings(**values)


def render_result(result: RepoDocs, fmt: str) -> str:
    """Render a pipeline result as plain text or JSON."""
    if fmt == "json":
        return result.model_dump_json(indent=2) + "\n"
    meta = result.metadata
    header = f"Metadata: owner={meta.owner} repo={meta.repo} revision={meta.revision} committed_at={meta.committed_at}"
    return f"{header}\n\n{result.output}\n"


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = parse_args(argv)
    except (RepoDocsError, ValidationError) as e:
        logger.error("invalid configuration", error=str(e))
        print(f"Failed to generate docs: {e}", file=sys.stderr)
        return 1
    if settings.log_file:
        setup_logging(settings.log_file)

    try:
        result = generate_repo_docs(
            settings.repo_url,
            includes=settings.include,
            excludes=settings.exclude,
            branch=settings.branch or None,
            tmp_dir=settings.tmp_dir,
            git_executable=settings.git,
        )
    except RepoDocsError as e:
        logger.error("failed to generate docs", kind=type(e).__name__, error=str(e))
        print(f"Failed to generate docs: {e}", file=sys.stderr)
        return 1

    content = render_result(result, settings.format)
    if settings.output:
        settings.output.write_text(content, encoding="utf-8")
        print(f"Wrote {settings.output} format={settings.format}")
    else:
        sys.stdout.write(content)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
