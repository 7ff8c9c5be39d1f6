from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field

from repo_docs.config import DEFAULT_GIT_EXECUTABLE
from repo_docs.exceptions import ConfigFileError

ENV_FILE = find_dotenv(usecwd=True)

CONFIG_FILE_KEYS = frozenset(
    {"branch", "include", "exclude", "output", "format", "log_file", "tmp_dir", "git"},
)


def env_default(key: str, fallback: str) -> str:
    """Read a default from the process environment, then from the `.env` file.

    Args:
        key (str): the variable name, e.g. `REPO_DOCS_TMP_DIR`
        fallback (str): the value used when the variable is set nowhere

    Returns:
        str: the first non-empty value found, or `fallback`
    """
    value = os.environ.get(key)
    if value:
        return value
    if ENV_FILE:
        value = dotenv_values(ENV_FILE).get(key)
        if value:
            return value
    return fallback


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load CLI defaults from a YAML configuration file.

    Args:
        path (str | Path): the YAML file to load

    Raises:
        ConfigFileError: if the file cannot be read or parsed, is not a mapping,
            or contains unknown keys.

    Returns:
        dict[str, Any]: the options found in the file, keyed like the CLI destinations
    """
    file = Path(path)
    try:
        data = yaml.safe_load(file.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(file=file, message=f"Cannot load configuration: {e}") from e
    if not isinstance(data, dict):
        raise ConfigFileError(file=file)
    options = {str(k).replace("-", "_"): v for k, v in data.items()}
    unknown = sorted(set(options) - CONFIG_FILE_KEYS)
    if unknown:
        raise ConfigFileError(file=file, message=f"Unknown configuration keys: {', '.join(unknown)}.")
    for key in ("include", "exclude"):
        if isinstance(options.get(key), str):
            options[key] = [options[key]]
    return options


class Settings(BaseModel):
    """Configuration settings for the repo_docs command line."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    repo_url: str = Field(..., description="Repository URL to clone.")
    branch: str = Field(default="", description="Branch to clone (remote default if empty).")
    include: list[str] = Field(default_factory=list, description="Include regex.")
    exclude: list[str] = Field(default_factory=list, description="Exclude regex.")
    output: Path | None = Field(default=None, description="Output file (stdout if unset).")
    format: Literal["text", "json"] = Field(default="text", description="Output format.")
    log_file: str = Field(default="", description="Log file path.")
    config: str = Field(default="", description="YAML configuration file.")
    tmp_dir: Path = Field(
        default_factory=lambda: Path(env_default("REPO_DOCS_TMP_DIR", tempfile.gettempdir())),
        description="Temporary root for clones.",
    )
    git: str = Field(
        default_factory=lambda: env_default("REPO_DOCS_GIT", DEFAULT_GIT_EXECUTABLE),
        description="Git executable.",
    )
