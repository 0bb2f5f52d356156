"""Error taxonomy for the changelog collector.

Every error is fatal: the pipeline aborts on the first one and the CLI
turns it into a single message plus a non-zero exit status.
"""

from __future__ import annotations


class ChangelogError(Exception):
    """Base class for all collector failures."""


class ConfigError(ChangelogError):
    """The collector configuration file is unreadable or invalid."""


class StoreUnavailable(ChangelogError):
    """The fragment directory (or a file in it) cannot be read."""


class MalformedFragment(ChangelogError):
    """A fragment file could not be decoded."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"failed to parse fragment {source}: {reason}")
        self.source = source
        self.reason = reason


class LookupFailed(ChangelogError):
    """A GitHub API lookup failed."""


class CommitLookupFailed(LookupFailed):
    """Fetching the commit that introduced a fragment failed."""


class PullLookupFailed(LookupFailed):
    """Fetching the pull requests for a commit failed."""


class RenderError(ChangelogError):
    """A template helper was called incorrectly."""


class InvalidMappingArity(RenderError):
    """The mapping helper received an odd number of arguments."""


class InvalidMappingKey(RenderError):
    """A mapping key is neither a string nor a sequence of strings."""
