"""RSS/Atom feeds fetched with httpx and parsed with feedparser."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

import feedparser
import httpx
from bs4 import BeautifulSoup

from factdesk.data import Category, RawSourceItem, SubCategory, Usage, utc_now
from factdesk.url import source_id_for

logger = logging.getLogger(__name__)

USER_AGENT = "factdesk/0.1 (+https://github.com/factdesk)"
MAX_DESCRIPTION_CHARS = 300


@dataclass(frozen=True)
class FeedSource:
    """One configured feed and the section its items belong to."""

    name: str
    url: str
    category: Category
    sub_category: SubCategory = SubCategory.GENERAL


def clean_html(raw_html: str) -> str:
    if not raw_html:
        return ""
    return BeautifulSoup(raw_html, "html.parser").get_text(" ", strip=True)


def parse_date(entry: feedparser.FeedParserDict) -> datetime | None:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return None
    return datetime(*parsed[:6], tzinfo=UTC)


def extract_content(entry: feedparser.FeedParserDict) -> str:
    content = entry.get("content")
    if isinstance(content, list) and content:
        return clean_html(content[0].get("value", ""))
    return clean_html(entry.get("summary") or entry.get("description") or "")


def entry_to_item(
    entry: feedparser.FeedParserDict,
    feed: FeedSource,
    fetched_at: datetime,
) -> RawSourceItem | None:
    """Convert a feed entry; entries without a link or title are dropped."""
    link = (entry.get("link") or "").strip()
    title = clean_html(entry.get("title") or "")
    if not link or not title:
        return None
    description = clean_html(entry.get("summary") or entry.get("description") or "")
    return RawSourceItem(
        id=source_id_for(link),
        title=title,
        url=link,
        source_name=feed.name,
        category=feed.category,
        sub_category=feed.sub_category,
        description=description[:MAX_DESCRIPTION_CHARS],
        published_at=parse_date(entry) or fetched_at,
        fetched_at=fetched_at,
        raw_content=extract_content(entry),
    )


class RSSProvider:
    """Fetch a fixed list of feeds concurrently.

    A feed that fails to download or parse is logged and skipped.

    Args:
        feeds: Feeds to read.
        timeout: Per-request timeout in seconds.
        max_items_per_feed: Cap on entries taken from each feed.
    """

    name = "rss"

    def __init__(
        self,
        feeds: list[FeedSource],
        *,
        timeout: float = 5.0,
        max_items_per_feed: int = 20,
    ) -> None:
        self._feeds = feeds
        self._timeout = timeout
        self._max_items = max_items_per_feed

    async def fetch(self) -> tuple[list[RawSourceItem], Usage]:
        fetched_at = utc_now()
        async with httpx.AsyncClient(
            timeout=self._timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ) as client:
            tasks = [self._fetch_feed(client, feed, fetched_at) for feed in self._feeds]
            results = await asyncio.gather(*tasks, return_exceptions=True)

        items: list[RawSourceItem] = []
        successful_requests = 0
        for feed, result in zip(self._feeds, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Failed to fetch feed %s: %s", feed.name, result)
                continue
            successful_requests += 1
            items.extend(result)

        logger.info("RSS: %d items from %d/%d feeds", len(items), successful_requests, len(self._feeds))
        return (items, Usage(provider_requests=successful_requests))

    async def _fetch_feed(
        self,
        client: httpx.AsyncClient,
        feed: FeedSource,
        fetched_at: datetime,
    ) -> list[RawSourceItem]:
        response = await client.get(feed.url)
        response.raise_for_status()
        parsed = feedparser.parse(response.content)
        if parsed.bozo and not parsed.entries:
            raise ValueError(f"Unparseable feed: {parsed.get('bozo_exception')}")

        items: list[RawSourceItem] = []
        for entry in parsed.entries[: self._max_items]:
            item = entry_to_item(entry, feed, fetched_at)
            if item is not None:
                items.append(item)
        return items
