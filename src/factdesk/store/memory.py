"""In-process store used by the CLI and tests."""

import asyncio
import dataclasses
import logging
from datetime import datetime

from factdesk.data import FactCheckResult, GeneratedArticle, RawSourceItem
from factdesk.url import normalize_url

logger = logging.getLogger(__name__)


class InMemoryStore:
    """Store implementation backed by dicts, guarded by an ``asyncio.Lock``."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._sources: dict[str, RawSourceItem] = {}
        self._urls: set[str] = set()
        self._articles: dict[str, GeneratedArticle] = {}

    async def upsert_raw_sources(self, items: list[RawSourceItem]) -> int:
        inserted = 0
        async with self._lock:
            for item in items:
                key = normalize_url(item.url)
                if key in self._urls or item.id in self._sources:
                    continue
                self._urls.add(key)
                self._sources[item.id] = item
                inserted += 1
        logger.debug("Upserted %d of %d raw sources", inserted, len(items))
        return inserted

    async def select_unprocessed_sources(
        self, *, since: datetime, limit: int
    ) -> list[RawSourceItem]:
        async with self._lock:
            candidates = [
                item
                for item in self._sources.values()
                if not item.processed and item.fetched_at >= since
            ]
        candidates.sort(key=lambda item: item.fetched_at, reverse=True)
        return candidates[:limit]

    async def mark_processed(self, ids: list[str]) -> None:
        async with self._lock:
            for source_id in ids:
                item = self._sources.get(source_id)
                if item is not None and not item.processed:
                    self._sources[source_id] = dataclasses.replace(item, processed=True)

    async def get_source(self, source_id: str) -> RawSourceItem | None:
        async with self._lock:
            return self._sources.get(source_id)

    async def insert_article(self, article: GeneratedArticle) -> None:
        async with self._lock:
            self._articles[article.id] = article

    async def get_article(self, article_id: str) -> GeneratedArticle | None:
        async with self._lock:
            return self._articles.get(article_id)

    async def list_articles(self) -> list[GeneratedArticle]:
        async with self._lock:
            return sorted(self._articles.values(), key=lambda a: a.created_at, reverse=True)

    async def select_recent_article_titles(self, *, since: datetime) -> list[str]:
        async with self._lock:
            return [a.title for a in self._articles.values() if a.created_at >= since]

    async def select_recent_article_source_urls(self, *, since: datetime) -> list[str]:
        async with self._lock:
            return [
                source.url
                for article in self._articles.values()
                if article.created_at >= since
                for source in article.sources
            ]

    async def update_article_fact_fields(
        self,
        article_id: str,
        *,
        fact_score: int,
        fact_details: FactCheckResult,
        updated_at: datetime,
    ) -> bool:
        async with self._lock:
            article = self._articles.get(article_id)
            if article is None:
                return False
            self._articles[article_id] = dataclasses.replace(
                article,
                fact_score=fact_score,
                fact_details=fact_details,
                updated_at=updated_at,
            )
        return True
