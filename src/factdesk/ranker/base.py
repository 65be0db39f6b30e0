"""Protocol for source ranking."""

from typing import Protocol

from factdesk.data import RawSourceItem


class SourceRanker(Protocol):
    """Interface for ordering raw sources by reader relevance."""

    def rank(
        self,
        items: list[RawSourceItem],
        interests: list[str],
    ) -> list[RawSourceItem]:
        """Order items so the most relevant come first.

        Args:
            items: Raw sources in discovery order.
            interests: Active reader interests (names, e.g. "Tesla").

        Returns:
            The same items, reordered. Nothing is dropped.
        """
        ...
