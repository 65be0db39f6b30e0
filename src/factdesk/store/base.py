from datetime import datetime
from typing import Protocol

from factdesk.data import FactCheckResult, GeneratedArticle, RawSourceItem


class Store(Protocol):
    """Persistence for raw sources and generated articles.

    Implementations must make ``upsert_raw_sources`` (skip on URL conflict)
    and ``mark_processed`` atomic; the pipeline does no locking of its own.
    """

    async def upsert_raw_sources(self, items: list[RawSourceItem]) -> int:
        """Insert items whose normalized URL is not stored yet.

        Returns:
            Number of newly inserted items.
        """
        ...

    async def select_unprocessed_sources(
        self, *, since: datetime, limit: int
    ) -> list[RawSourceItem]:
        """Unprocessed items fetched at or after ``since``, newest first."""
        ...

    async def mark_processed(self, ids: list[str]) -> None: ...

    async def insert_article(self, article: GeneratedArticle) -> None: ...

    async def get_article(self, article_id: str) -> GeneratedArticle | None: ...

    async def select_recent_article_titles(self, *, since: datetime) -> list[str]: ...

    async def select_recent_article_source_urls(self, *, since: datetime) -> list[str]:
        """URLs of every source behind articles created at or after ``since``."""
        ...

    async def update_article_fact_fields(
        self,
        article_id: str,
        *,
        fact_score: int,
        fact_details: FactCheckResult,
        updated_at: datetime,
    ) -> bool:
        """Attach a verdict to an article.

        Returns:
            False if no article with ``article_id`` exists.
        """
        ...
