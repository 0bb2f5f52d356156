"""Pydantic models defining the data that flows through the collector.

These schemas are the single source of truth for:
- The changelog fragment file format (Fragment)
- The GitHub API responses we consume (CommitItem, PullItem)
- The per-fragment lookup results (CommitContext, PullRequestContext)
- The render input handed to the template (AggregatedDocument)

Key design decisions:
- Fragment ignores unknown fields so authors can add notes freely
- GitHub responses are validated at the boundary instead of being
  walked as untyped dicts
- Enriched and aggregated models are frozen: nothing is mutated once it
  has been placed into a document
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Fragment (input file format)
# ---------------------------------------------------------------------------


def scalar_text(value: object) -> object:
    """Render a YAML scalar the way it was written, e.g. `true` or `2024-01-01`.

    Numbers are left to pydantic's number-to-string coercion; mappings and
    lists pass through so validation still rejects them.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return value


class Fragment(BaseModel):
    """A single changelog fragment as written by the author.

    Attributes:
        message: Free-text description of the change
        type: Category of the change (e.g. "feature", "bugfix"), open string
        scope: Affected subsystem; empty when the author left it out
        prs: Pull request numbers declared by the author
        githubs: GitHub issue numbers declared by the author
        jiras: Tracker ticket identifiers declared by the author
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    message: str = Field("", description="Description of the change")
    type: str = Field("", description="Category of the change")
    scope: str = Field("", description="Affected subsystem")
    prs: list[int] = Field(default_factory=list, description="Declared PR numbers")
    githubs: list[int] = Field(
        default_factory=list, description="Declared GitHub issue numbers"
    )
    jiras: list[str] = Field(
        default_factory=list, description="Declared tracker ticket IDs"
    )

    @field_validator("message", "type", "scope", mode="before")
    @classmethod
    def null_to_empty(cls, value: object) -> object:
        """A bare `scope:` key in YAML decodes to None; treat it as unset."""
        return "" if value is None else scalar_text(value)

    @field_validator("prs", "githubs", mode="before")
    @classmethod
    def null_to_list(cls, value: object) -> object:
        return [] if value is None else value

    @field_validator("jiras", mode="before")
    @classmethod
    def tickets_as_text(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return [scalar_text(item) for item in value]
        return value


# ---------------------------------------------------------------------------
# GitHub API responses
# ---------------------------------------------------------------------------


class CommitDetail(BaseModel):
    message: str


class CommitItem(BaseModel):
    """One entry of GET /repos/{repo}/commits."""

    sha: str
    commit: CommitDetail


class PullItem(BaseModel):
    """One entry of GET /repos/{repo}/commits/{sha}/pulls."""

    number: int
    title: str = ""
    body: str | None = None


# ---------------------------------------------------------------------------
# Lookup contexts (ephemeral, per fragment)
# ---------------------------------------------------------------------------


class CommitContext(BaseModel):
    """The commit that introduced a fragment file."""

    sha: str = Field(..., description="Commit hash")
    message: str = Field("", description="Commit message")


class PullRequestContext(BaseModel):
    """The pull request associated with a fragment's commit."""

    number: int = Field(..., description="Pull request number")
    title: str = Field("", description="Pull request title")
    body: str = Field("", description="Pull request description")


# ---------------------------------------------------------------------------
# Resolved references
# ---------------------------------------------------------------------------


class ResolvedTicket(BaseModel):
    """A tracker ticket with its hyperlink, e.g. ABC-123."""

    model_config = ConfigDict(frozen=True)

    id: str
    link: str


class ResolvedIssue(BaseModel):
    """A GitHub issue or PR reference, e.g. #1234."""

    model_config = ConfigDict(frozen=True)

    name: str
    link: str


# ---------------------------------------------------------------------------
# Render input
# ---------------------------------------------------------------------------


class EnrichedFragment(BaseModel):
    """A fragment after metadata enrichment.

    Attributes:
        message: Description of the change
        type: Category, used verbatim as the top-level grouping key
        scope: Subsystem, never empty
        prs: Declared PR numbers
        githubs: Issue numbers after the fallback chain was applied
        jiras: Ticket IDs, declared or inferred from the PR body
        parsed_jiras: Ticket IDs resolved to links
        parsed_githubs: Issue numbers resolved to links
    """

    model_config = ConfigDict(frozen=True)

    message: str
    type: str
    scope: str = Field(..., min_length=1)
    prs: list[int] = Field(default_factory=list)
    githubs: list[int] = Field(default_factory=list)
    jiras: list[str] = Field(default_factory=list)
    parsed_jiras: list[ResolvedTicket] = Field(default_factory=list)
    parsed_githubs: list[ResolvedIssue] = Field(default_factory=list)


class ScopeGroup(BaseModel):
    """All fragments of one category that share a scope, in listing order."""

    model_config = ConfigDict(frozen=True)

    scope_name: str
    entries: list[EnrichedFragment] = Field(default_factory=list)


class AggregatedDocument(BaseModel):
    """Top-level render input.

    Attributes:
        system: Display name of the system the changelog is for
        types: Category name -> scope groups ordered by scope priority.
               Categories are kept in alphabetical order.
    """

    model_config = ConfigDict(frozen=True)

    system: str
    types: dict[str, list[ScopeGroup]] = Field(default_factory=dict)
