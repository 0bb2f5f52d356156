"""Metadata enricher.

Fills in what an author left out of a fragment using the commit that
introduced the fragment file and the pull request that commit belongs to:

1. Tickets: if none are declared, tracker IDs (e.g. ABC-123) are scraped
   from the PR description.
2. Issues: if none are declared, the declared PR numbers are used; if
   those are empty too, the number of the PR found on GitHub.

Both reference lists are deduplicated, keeping first-seen order, before
being turned into links.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TypeVar

from changelog_collector.config import CollectorConfig
from changelog_collector.context.github import GitHubClientProtocol
from changelog_collector.logging_config import get_logger
from changelog_collector.schemas import (
    EnrichedFragment,
    Fragment,
    PullRequestContext,
    ResolvedIssue,
    ResolvedTicket,
)

logger = get_logger(__name__)

TICKET_PATTERN = re.compile(r"[a-zA-Z]+-[0-9]+")

T = TypeVar("T")


def dedupe(values: Iterable[T]) -> list[T]:
    """Drop repeated values, keeping the first occurrence of each."""
    seen: set[T] = set()
    result: list[T] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def extract_ticket_ids(text: str) -> list[str]:
    """Find tracker ticket IDs in free text.

    >>> extract_ticket_ids("see ABC-1 and ABC-1 again, also XYZ-2")
    ['ABC-1', 'XYZ-2']
    """
    return dedupe(TICKET_PATTERN.findall(text or ""))


def resolve_tickets(ticket_ids: Iterable[str], base_url: str) -> list[ResolvedTicket]:
    return [ResolvedTicket(id=tid, link=base_url + tid) for tid in ticket_ids]


def resolve_issues(numbers: Iterable[int], repo: str) -> list[ResolvedIssue]:
    return [
        ResolvedIssue(
            name=f"#{number}",
            link=f"https://github.com/{repo}/issues/{number}",
        )
        for number in numbers
    ]


def apply_inference(
    fragment: Fragment,
    pull: PullRequestContext | None,
    config: CollectorConfig,
) -> EnrichedFragment:
    """Apply the ticket and issue fallback rules to a parsed fragment.

    Args:
        fragment: The parsed fragment (scope already defaulted)
        pull: The governing pull request, or None if the commit has none
        config: Collector configuration (repo, ticket base URL)

    Returns:
        The enriched fragment with resolved links
    """
    jiras = dedupe(fragment.jiras)
    if not jiras and pull is not None:
        jiras = extract_ticket_ids(pull.body)
        if jiras:
            logger.debug("tickets_inferred", pr_number=pull.number, tickets=jiras)

    githubs = dedupe(fragment.githubs)
    if not githubs:
        githubs = dedupe(fragment.prs)
    if not githubs and pull is not None:
        githubs = [pull.number]

    return EnrichedFragment(
        message=fragment.message,
        type=fragment.type,
        scope=fragment.scope,
        prs=list(fragment.prs),
        githubs=githubs,
        jiras=jiras,
        parsed_jiras=resolve_tickets(jiras, config.jira_base_url),
        parsed_githubs=resolve_issues(githubs, config.repo),
    )


async def enrich_fragment(
    fragment: Fragment,
    filename: str,
    client: GitHubClientProtocol,
    config: CollectorConfig,
) -> EnrichedFragment:
    """Look up a fragment's commit and pull request, then apply inference.

    Args:
        fragment: The parsed fragment
        filename: Name of the fragment file inside the changelog directory
        client: GitHub client used for the two lookups
        config: Collector configuration

    Returns:
        The enriched fragment

    Raises:
        CommitLookupFailed: If the introducing commit cannot be fetched
        PullLookupFailed: If the associated pull requests cannot be fetched
    """
    path = config.fragment_api_path(filename)

    commit = await client.get_commit_context(path)
    logger.debug("commit_resolved", fragment=filename, sha=commit.sha)

    pull = await client.get_pull_context(commit.sha)
    if pull is None:
        logger.warning("pull_missing", fragment=filename, sha=commit.sha)
    else:
        logger.debug("pull_resolved", fragment=filename, pr_number=pull.number)

    return apply_inference(fragment, pull, config)
