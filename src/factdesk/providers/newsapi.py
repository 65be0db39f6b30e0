"""NewsAPI top headlines."""

import logging
import os

import httpx

from factdesk.data import Category, RawSourceItem, SubCategory, Usage, utc_now
from factdesk.errors import ServiceUnavailableError
from factdesk.parsing import coerce_datetime
from factdesk.url import extract_domain, source_id_for

NEWSAPI_URL = "https://newsapi.org/v2/top-headlines"

logger = logging.getLogger(__name__)


class NewsAPIProvider:
    """Fetch top headlines for one country from NewsAPI.

    Args:
        api_key: NewsAPI key (defaults to NEWSAPI_KEY env var).
        country: Two-letter country code.
        news_category: Optional NewsAPI category, e.g. "business".
        category: Section assigned to every returned item.
        sub_category: Sub-section assigned to every returned item.
        page_size: Number of headlines to request.
        timeout: Request timeout in seconds.

    Raises:
        ServiceUnavailableError: If no API key is available.
    """

    name = "newsapi"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        country: str = "dk",
        news_category: str | None = None,
        category: Category = Category.DOMESTIC,
        sub_category: SubCategory = SubCategory.GENERAL,
        page_size: int = 20,
        timeout: float = 10.0,
    ) -> None:
        self._api_key = api_key or os.environ.get("NEWSAPI_KEY")
        if not self._api_key:
            raise ServiceUnavailableError(
                "NewsAPI key required. Pass api_key or set NEWSAPI_KEY env var."
            )
        self._country = country
        self._news_category = news_category
        self._category = category
        self._sub_category = sub_category
        self._page_size = page_size
        self._timeout = timeout

    async def fetch(self) -> tuple[list[RawSourceItem], Usage]:
        params: dict[str, str | int] = {
            "country": self._country,
            "pageSize": self._page_size,
        }
        if self._news_category:
            params["category"] = self._news_category

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(
                NEWSAPI_URL, params=params, headers={"X-Api-Key": self._api_key or ""}
            )
        response.raise_for_status()
        data = response.json()

        if data.get("status") != "ok":
            logger.warning("NewsAPI error: %s", data.get("message"))
            return ([], Usage(provider_requests=1))

        fetched_at = utc_now()
        items: list[RawSourceItem] = []
        for article in data.get("articles", []):
            url = article.get("url")
            title = article.get("title")
            if not url or not title or title == "[Removed]":
                continue
            source_name = (article.get("source") or {}).get("name") or extract_domain(url)
            items.append(
                RawSourceItem(
                    id=source_id_for(url),
                    title=title,
                    url=url,
                    source_name=source_name,
                    category=self._category,
                    sub_category=self._sub_category,
                    description=article.get("description") or "",
                    published_at=coerce_datetime(article.get("publishedAt"), fetched_at),
                    fetched_at=fetched_at,
                    raw_content=article.get("content") or article.get("description") or "",
                )
            )

        return (items, Usage(provider_requests=1))
