"""Pipeline orchestrator for building a changelog from fragments.

This module ties together all the components:
- Fragment discovery (store.py)
- Fragment decoding (parser.py)
- GitHub lookups and inference (context/github.py, enricher.py)
- Grouping and ordering (aggregator.py)
- Rendering (renderer.py)

Fragments are processed one at a time, in file listing order. Any error
aborts the whole run; there is no partial changelog.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from pydantic import ValidationError

from changelog_collector.aggregator import Aggregator
from changelog_collector.config import CollectorConfig, load_collector_config
from changelog_collector.context.github import GitHubClient, GitHubClientProtocol
from changelog_collector.enricher import enrich_fragment
from changelog_collector.errors import ChangelogError, ConfigError
from changelog_collector.logging_config import bind_run_context, get_logger, setup_logging
from changelog_collector.parser import parse_fragment
from changelog_collector.renderer import render_document
from changelog_collector.schemas import AggregatedDocument
from changelog_collector.store import read_fragments

logger = get_logger(__name__)


class ChangelogCollector:
    """Runs the fragment -> document pipeline for one repository.

    Usage:
        collector = ChangelogCollector(config)
        document = await collector.collect()
        print(render_document(document))
    """

    def __init__(
        self,
        config: CollectorConfig,
        client: GitHubClientProtocol | None = None,
    ) -> None:
        """Initialize the collector with its dependencies.

        Args:
            config: Collector configuration
            client: GitHub client. A real GitHubClient is built from the
                    config if None.
        """
        self.config = config
        self.client = client or GitHubClient(
            repo=config.repo,
            token=config.token,
            base_url=config.api_base_url,
            pull_selection=config.pull_selection,
        )

    async def collect(self) -> AggregatedDocument:
        """Read, parse, enrich and aggregate every fragment.

        Returns:
            The aggregated document, ready to render

        Raises:
            ChangelogError: On the first failure of any step
        """
        config = self.config
        aggregator = Aggregator(config.scope_priority, config.fallback_priority)
        logger.info("collection_started", path=str(config.fragment_dir), repo=config.repo)

        for filename, content in read_fragments(config.fragment_dir):
            fragment = parse_fragment(content, filename, config.default_scope)
            logger.debug(
                "fragment_parsed",
                fragment=filename,
                type=fragment.type,
                scope=fragment.scope,
            )
            entry = await enrich_fragment(fragment, filename, self.client, config)
            aggregator.add(entry)

        return aggregator.build(config.system)

    async def generate(self, template_path: str | Path | None = None) -> str:
        """Collect and render the changelog text."""
        document = await self.collect()
        return render_document(document, template_path)


# ---------------------------------------------------------------------------
# CLI Entry Point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="changelog",
        description="Build a changelog from changelog fragment files",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate changelog")
    generate.add_argument(
        "--changelog_path",
        required=True,
        help="The changelog path. (e.g. CHANGELOG/unreleased)",
    )
    generate.add_argument(
        "--system",
        required=True,
        help="The system name. (e.g. Kong)",
    )
    generate.add_argument(
        "--repo_path",
        required=True,
        help="The repository path. (e.g. /path/to/your/repository)",
    )
    generate.add_argument(
        "--repo",
        required=True,
        help="The repository name. (e.g. Kong/kong)",
    )
    generate.add_argument(
        "--template",
        help="Jinja template to render with (defaults to the bundled Markdown template)",
    )
    generate.add_argument(
        "--config",
        help="YAML file overriding scope priorities, ticket URL or PR selection",
    )
    return parser


def _build_config(args: argparse.Namespace) -> CollectorConfig:
    try:
        config = CollectorConfig(
            repo_path=Path(args.repo_path),
            changelog_path=args.changelog_path,
            system=args.system,
            repo=args.repo,
            token=os.environ.get("GITHUB_TOKEN") or None,
        )
    except ValidationError as exc:
        raise ConfigError(f"invalid arguments: {exc}") from exc

    if args.config:
        config = config.with_overrides(
            load_collector_config(args.config, required=True)
        )
    return config


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Usage:
        GITHUB_TOKEN=ghp_... changelog generate \\
            --changelog_path CHANGELOG/unreleased/kong --system Kong \\
            --repo_path . --repo Kong/kong > CHANGELOG.md

    Returns:
        Process exit status (0 on success, 1 on any collector error)
    """
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        config = _build_config(args)
        bind_run_context(config.repo, config.system)
        changelog = asyncio.run(ChangelogCollector(config).generate(args.template))
    except ChangelogError as exc:
        logger.error("collection_failed", error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(changelog)
    return 0


if __name__ == "__main__":
    sys.exit(main())
