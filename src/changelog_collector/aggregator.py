"""Aggregator: groups enriched fragments by category, then by scope.

Ordering rules:
- Fragments inside a scope keep the order they were added in.
- Scopes inside a category are sorted by the priority table (lower first).
  Scopes missing from the table share the fallback priority. Ties keep
  first-seen order because the sort is stable.
- Categories are emitted in alphabetical order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from changelog_collector.logging_config import get_logger
from changelog_collector.schemas import AggregatedDocument, EnrichedFragment, ScopeGroup

logger = get_logger(__name__)


def sort_scopes(
    scopes: Iterable[str],
    priority: Mapping[str, int],
    fallback: int,
) -> list[str]:
    """Order scope names by priority.

    >>> sort_scopes(["Plugin", "Core", "Unknown", "Performance"],
    ...             {"Performance": 10, "Core": 30, "Plugin": 50, "Default": 100}, 100)
    ['Performance', 'Core', 'Plugin', 'Unknown']
    """
    return sorted(scopes, key=lambda scope: priority.get(scope, fallback))


class Aggregator:
    """Accumulates enriched fragments into a two-level grouping.

    Usage:
        aggregator = Aggregator(config.scope_priority, config.fallback_priority)
        for entry in entries:
            aggregator.add(entry)
        document = aggregator.build(system="Kong")
    """

    def __init__(self, priority: Mapping[str, int], fallback: int) -> None:
        self._priority = dict(priority)
        self._fallback = fallback
        self._groups: dict[str, dict[str, list[EnrichedFragment]]] = {}

    def add(self, entry: EnrichedFragment) -> None:
        scopes = self._groups.setdefault(entry.type, {})
        scopes.setdefault(entry.scope, []).append(entry)

    def __len__(self) -> int:
        return sum(
            len(entries) for scopes in self._groups.values() for entries in scopes.values()
        )

    def build(self, system: str) -> AggregatedDocument:
        """Produce the render input from everything added so far."""
        types: dict[str, list[ScopeGroup]] = {}
        for category in sorted(self._groups):
            scopes = self._groups[category]
            types[category] = [
                ScopeGroup(scope_name=scope, entries=list(scopes[scope]))
                for scope in sort_scopes(scopes, self._priority, self._fallback)
            ]

        logger.info(
            "document_aggregated",
            system=system,
            categories=len(types),
            fragments=len(self),
        )
        return AggregatedDocument(system=system, types=types)
