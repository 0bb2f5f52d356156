"""Collector configuration.

All settings the pipeline needs (where the fragments live, which GitHub
repository to query, how scopes are ranked) travel in one explicit
CollectorConfig value that is passed to each component. Nothing reads
process-wide state except the CLI, which builds the config.

Optional overrides can be loaded from a YAML file:

    jira_base_url: https://example.atlassian.net/browse/
    pull_selection: last
    scope_priority:
      Performance: 10
      Core: 30
      Default: 100
"""

from __future__ import annotations

import re
from enum import StrEnum
from pathlib import Path, PurePosixPath
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from changelog_collector.errors import ConfigError

DEFAULT_JIRA_BASE_URL = "https://konghq.atlassian.net/browse/"
DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_SCOPE = "Default"

DEFAULT_SCOPE_PRIORITY: dict[str, int] = {
    "Performance": 10,
    "Configuration": 20,
    "Core": 30,
    "PDK": 40,
    "Plugin": 50,
    "Admin API": 60,
    "Clustering": 70,
    DEFAULT_SCOPE: 100,
}

_REPO_RE = re.compile(r"^[\w.-]+/[\w.-]+$")


class PullSelection(StrEnum):
    """Which pull request to use when a commit belongs to several.

    LAST: The last entry returned by the API (historical behaviour)
    FIRST: The first entry returned by the API
    """

    LAST = "last"
    FIRST = "first"


class CollectorOverrides(BaseModel):
    """Settings that may come from a YAML file."""

    jira_base_url: str | None = None
    api_base_url: str | None = None
    pull_selection: PullSelection | None = None
    scope_priority: dict[str, int] | None = None


class CollectorConfig(BaseModel):
    """Configuration for one collector run.

    Attributes:
        repo_path: Local checkout of the repository
        changelog_path: Fragment directory, relative to repo_path
        system: Display name used as the document title
        repo: GitHub repository in "owner/name" format
        token: GitHub token; unauthenticated calls when empty
        jira_base_url: Prefix for tracker ticket links
        api_base_url: GitHub REST API root
        scope_priority: Scope name -> rank, lower sorts first
        default_scope: Scope assigned to fragments that declare none
        pull_selection: Which associated PR governs a fragment
    """

    repo_path: Path = Field(Path("."), description="Repository checkout")
    changelog_path: str = Field(..., min_length=1, description="Fragment directory")
    system: str = Field("", description="System display name")
    repo: str = Field(..., description="Repository in 'owner/name' format")
    token: str | None = Field(None, description="GitHub token")
    jira_base_url: str = DEFAULT_JIRA_BASE_URL
    api_base_url: str = DEFAULT_API_BASE_URL
    scope_priority: dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_SCOPE_PRIORITY)
    )
    default_scope: str = Field(DEFAULT_SCOPE, min_length=1)
    pull_selection: PullSelection = PullSelection.LAST

    @field_validator("repo")
    @classmethod
    def check_repo(cls, value: str) -> str:
        if not _REPO_RE.match(value):
            raise ValueError(f"repo must look like 'owner/name', got {value!r}")
        return value

    @property
    def fragment_dir(self) -> Path:
        """Where the fragment files are on disk."""
        return self.repo_path / self.changelog_path

    @property
    def fallback_priority(self) -> int:
        """Rank shared by every scope missing from the priority table."""
        return self.scope_priority.get(DEFAULT_SCOPE, DEFAULT_SCOPE_PRIORITY[DEFAULT_SCOPE])

    def fragment_api_path(self, filename: str) -> str:
        """Repository-relative path of a fragment, as GitHub knows it."""
        return str(PurePosixPath(Path(self.changelog_path).as_posix()) / filename)

    def with_overrides(self, overrides: CollectorOverrides) -> CollectorConfig:
        """Return a copy with every override that is set applied."""
        data = overrides.model_dump(exclude_none=True)
        return self.model_copy(update=data)


def load_collector_config(
    path: str | Path, required: bool = False
) -> CollectorOverrides:
    """Load and validate a YAML overrides file.

    Args:
        path: Path to the YAML configuration file.
        required: Fail instead of returning empty overrides when the file
                  doesn't exist. Set for paths the user named explicitly.

    Returns:
        Validated overrides. Empty overrides if the file doesn't exist
        and is not required.

    Raises:
        ConfigError: If a required file is missing, or the YAML content is
            invalid or fails validation.
    """
    config_path = Path(path)
    if not config_path.exists():
        if required:
            raise ConfigError(f"Config file {path} does not exist")
        return CollectorOverrides()

    try:
        raw: Any = yaml.safe_load(config_path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    try:
        return CollectorOverrides.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid collector config in {path}: {exc}") from exc
