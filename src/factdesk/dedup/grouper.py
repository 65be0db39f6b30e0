"""Greedy topic grouping of raw source items.

Single pass over the input in discovery order: each not-yet-used item seeds a
group, and every later unused item of the same category that shares at least
``min_shared_words`` significant words with the *seed* joins it.

The result depends on input order and is not transitive (members are only
compared with the seed). Batches are small (20-50 items), so the O(n²) scan
is acceptable.
"""

import logging

from factdesk.data import RawSourceItem, SourceGroup
from factdesk.text import significant_words

logger = logging.getLogger(__name__)

DEFAULT_MIN_SHARED_WORDS = 2


def group_sources(
    items: list[RawSourceItem],
    *,
    min_shared_words: int = DEFAULT_MIN_SHARED_WORDS,
) -> list[SourceGroup]:
    """Partition ``items`` into topic groups.

    Args:
        items: Items in discovery/priority order.
        min_shared_words: Overlap with the seed needed to join its group.

    Returns:
        Groups in order of their seeds. Every input item appears in exactly
        one group; an item with no match forms a singleton.
    """
    words = [significant_words(item.title) for item in items]
    used: set[int] = set()
    groups: list[SourceGroup] = []

    for i, seed in enumerate(items):
        if i in used:
            continue
        used.add(i)
        members = [seed]

        for j in range(i + 1, len(items)):
            if j in used:
                continue
            other = items[j]
            if other.category != seed.category:
                continue
            if len(words[i] & words[j]) >= min_shared_words:
                members.append(other)
                used.add(j)

        groups.append(SourceGroup(topic=seed.title, items=tuple(members)))

    logger.debug("Grouped %d sources into %d groups", len(items), len(groups))
    return groups


class SourceGrouper:
    """Configured wrapper around :func:`group_sources`."""

    def __init__(self, min_shared_words: int = DEFAULT_MIN_SHARED_WORDS) -> None:
        self._min_shared_words = min_shared_words

    def group(self, items: list[RawSourceItem]) -> list[SourceGroup]:
        return group_sources(items, min_shared_words=self._min_shared_words)
