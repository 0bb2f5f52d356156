"""GitHub API client for fetching fragment context.

For each fragment file the collector needs two things from GitHub's REST API:
- The commit that introduced the file (most recent commit touching its path)
- The pull requests associated with that commit

Design notes:
- Uses httpx for async HTTP requests
- Responses are validated with pydantic; any transport error, non-200
  status or unexpected shape becomes CommitLookupFailed/PullLookupFailed
- No retries: a failed call aborts the run
- Uses a Protocol so the pipeline doesn't depend on the concrete
  implementation (makes testing with mocks easy)

GitHub API docs: https://docs.github.com/en/rest/commits/commits
"""

from __future__ import annotations

from typing import Protocol

import httpx
from pydantic import TypeAdapter, ValidationError

from changelog_collector.config import DEFAULT_API_BASE_URL, PullSelection
from changelog_collector.errors import CommitLookupFailed, LookupFailed, PullLookupFailed
from changelog_collector.schemas import (
    CommitContext,
    CommitItem,
    PullItem,
    PullRequestContext,
)

_COMMITS = TypeAdapter(list[CommitItem])
_PULLS = TypeAdapter(list[PullItem])

# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class GitHubClientProtocol(Protocol):
    """Protocol defining the interface for GitHub data fetching."""

    async def get_commit_context(self, path: str) -> CommitContext:
        """Return the most recent commit touching a repository path.

        Raises:
            CommitLookupFailed: If the lookup fails or finds no commit
        """
        ...

    async def get_pull_context(self, sha: str) -> PullRequestContext | None:
        """Return the pull request associated with a commit.

        Returns:
            The selected pull request, or None if the commit has none

        Raises:
            PullLookupFailed: If the lookup fails
        """
        ...


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


class GitHubClient:
    """Real GitHub API client using httpx.

    Usage:
        client = GitHubClient(repo="Kong/kong", token="ghp_...")
        commit = await client.get_commit_context("changelog/unreleased/fix.yml")
        pull = await client.get_pull_context(commit.sha)
    """

    def __init__(
        self,
        repo: str,
        token: str | None = None,
        base_url: str = DEFAULT_API_BASE_URL,
        pull_selection: PullSelection = PullSelection.LAST,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            repo: Repository in "owner/name" format
            token: GitHub token. Requests are unauthenticated when empty.
            base_url: REST API root
            pull_selection: Which PR to pick when a commit has several
            transport: Optional httpx transport (used by tests)
            timeout: Per-request timeout in seconds
        """
        self._repo = repo
        self._base_url = base_url
        self._pull_selection = pull_selection
        self._transport = transport
        self._timeout = timeout
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    async def get_commit_context(self, path: str) -> CommitContext:
        """Fetch the commit that introduced a fragment file.

        GET /repos/{repo}/commits?path={path} lists commits newest first;
        the first one is used.
        """
        items = await self._get_list(
            f"/repos/{self._repo}/commits",
            {"path": path},
            _COMMITS,
            CommitLookupFailed,
            "commits",
        )
        if not items:
            raise CommitLookupFailed(f"failed to fetch commits: no commit touches {path}")

        latest = items[0]
        return CommitContext(sha=latest.sha, message=latest.commit.message)

    async def get_pull_context(self, sha: str) -> PullRequestContext | None:
        """Fetch the pull request associated with a commit.

        GET /repos/{repo}/commits/{sha}/pulls. The entry picked depends on
        the configured PullSelection.
        """
        items = await self._get_list(
            f"/repos/{self._repo}/commits/{sha}/pulls",
            None,
            _PULLS,
            PullLookupFailed,
            "pulls",
        )
        if not items:
            return None

        pull = items[-1] if self._pull_selection == PullSelection.LAST else items[0]
        return PullRequestContext(
            number=pull.number,
            title=pull.title,
            body=pull.body or "",
        )

    async def _get_list(
        self,
        url: str,
        params: dict[str, str] | None,
        adapter: TypeAdapter,
        error: type[LookupFailed],
        what: str,
    ) -> list:
        """GET a JSON list endpoint and validate it, mapping every failure to `error`."""
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise error(f"failed to fetch {what}: {exc}") from exc

        if resp.status_code != 200:
            raise error(
                f"failed to fetch {what}: {resp.status_code} {resp.reason_phrase}"
            )

        try:
            return adapter.validate_json(resp.content)
        except ValidationError as exc:
            raise error(f"failed to decode {what}: {exc}") from exc


# ---------------------------------------------------------------------------
# Mock Implementation (for testing)
# ---------------------------------------------------------------------------


class MockGitHubClient:
    """Mock GitHub client that returns predefined data.

    Use this in tests and local development when you don't want to hit
    the real GitHub API.

    Usage:
        client = MockGitHubClient(
            commits={"changelog/unreleased/fix.yml": CommitContext(sha="abc")},
            pulls={"abc": PullRequestContext(number=42)},
        )
    """

    def __init__(
        self,
        commits: dict[str, CommitContext] | None = None,
        pulls: dict[str, PullRequestContext | None] | None = None,
    ) -> None:
        """Initialize with optional predefined data.

        Args:
            commits: Repository path -> commit that introduced it
            pulls: Commit sha -> associated pull request (None for no PR)
        """
        self._commits = commits or {}
        self._pulls = pulls or {}
        self.calls: list[tuple[str, str]] = []

    async def get_commit_context(self, path: str) -> CommitContext:
        self.calls.append(("commit", path))
        if path not in self._commits:
            raise CommitLookupFailed(f"failed to fetch commits: no commit touches {path}")
        return self._commits[path]

    async def get_pull_context(self, sha: str) -> PullRequestContext | None:
        self.calls.append(("pulls", sha))
        if sha not in self._pulls:
            raise PullLookupFailed(f"failed to fetch pulls: unknown commit {sha}")
        return self._pulls[sha]
