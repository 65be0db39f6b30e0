"""JSON-file store so that separate CLI invocations share sources and articles."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from factdesk.data import FactCheckResult, GeneratedArticle, RawSourceItem
from factdesk.store.memory import InMemoryStore
from factdesk.url import normalize_url

logger = logging.getLogger(__name__)


class JsonFileStore(InMemoryStore):
    """InMemoryStore that loads from and saves to one JSON file.

    The whole file is rewritten after every change, through a temporary file
    in the same directory, so a crash never leaves half a file behind.
    A missing file is an empty store; an unreadable one raises.
    """

    def __init__(self, path: Path | str) -> None:
        super().__init__()
        self._path = Path(path)
        if self._path.exists():
            self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        data = json.loads(self._path.read_text(encoding="utf-8"))
        for raw in data.get("sources", []):
            item = RawSourceItem.from_dict(raw)
            self._sources[item.id] = item
            self._urls.add(normalize_url(item.url))
        for raw in data.get("articles", []):
            article = GeneratedArticle.from_dict(raw)
            self._articles[article.id] = article
        logger.debug(
            "Loaded %d sources and %d articles from %s",
            len(self._sources),
            len(self._articles),
            self._path,
        )

    def _save(self) -> None:
        """Write the current state. Call with ``self._lock`` held."""
        data: dict[str, Any] = {
            "sources": [item.to_dict() for item in self._sources.values()],
            "articles": [article.to_dict() for article in self._articles.values()],
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self._path)

    async def upsert_raw_sources(self, items: list[RawSourceItem]) -> int:
        inserted = await super().upsert_raw_sources(items)
        if inserted:
            async with self._lock:
                self._save()
        return inserted

    async def mark_processed(self, ids: list[str]) -> None:
        await super().mark_processed(ids)
        async with self._lock:
            self._save()

    async def insert_article(self, article: GeneratedArticle) -> None:
        await super().insert_article(article)
        async with self._lock:
            self._save()

    async def update_article_fact_fields(
        self,
        article_id: str,
        *,
        fact_score: int,
        fact_details: FactCheckResult,
        updated_at: datetime,
    ) -> bool:
        updated = await super().update_article_fact_fields(
            article_id,
            fact_score=fact_score,
            fact_details=fact_details,
            updated_at=updated_at,
        )
        if updated:
            async with self._lock:
                self._save()
        return updated
