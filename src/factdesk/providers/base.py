from typing import Protocol

from factdesk.data import RawSourceItem, Usage


class SourceProvider(Protocol):
    """Interface for anything that discovers raw news items."""

    name: str

    async def fetch(self) -> tuple[list[RawSourceItem], Usage]:
        """Discover current news items.

        Returns:
            Tuple of (items, usage). Items may contain URL duplicates of
            other providers; the pipeline deduplicates the union.
        """
        ...
