"""News discovery through a web-search-augmented model.

Four core searches (domestic general, domestic finance, regional, global)
always run; each configured interest adds one more. All searches run
concurrently and a failed search only loses its own stories.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from factdesk.categorize import Categorizer
from factdesk.completion import WebSearchCompletionService
from factdesk.data import Category, RawSourceItem, SubCategory, Usage, utc_now
from factdesk.parsing import coerce_datetime, coerce_str, extract_json
from factdesk.url import extract_domain, normalize_url, source_id_for

logger = logging.getLogger(__name__)

MIN_CATEGORIZATION_CONFIDENCE = 50

_STORY_FORMAT = """\
Return ONLY valid JSON (no markdown, no extra text):
{{"stories": [{{"title": "...", "source": "...", "url": "...", \
"summary": "one sentence in {language}", \
"published_date": "ISO 8601 datetime of when this was published"}}]}}

Find {count} stories. Include the actual URL from the source; each story \
must have a unique URL.\
"""


@dataclass(frozen=True)
class DiscoverySearch:
    """One search topic and the section its stories default to."""

    label: str
    category: Category
    sub_category: SubCategory
    instructions: str
    story_count: str = "5-8"


CORE_SEARCHES: tuple[DiscoverySearch, ...] = (
    DiscoverySearch(
        label="Domestic - General",
        category=Category.DOMESTIC,
        sub_category=SubCategory.GENERAL,
        instructions=(
            "Search the web for the most important Danish news stories from today. "
            "Find real current news from Danish media (DR, TV2, Berlingske, "
            "Politiken, Jyllands-Posten, Information)."
        ),
        story_count="8-12",
    ),
    DiscoverySearch(
        label="Domestic - Finance",
        category=Category.DOMESTIC,
        sub_category=SubCategory.FINANCE,
        instructions=(
            "Search the web for today's Danish financial, business and economic news: "
            "Danish companies (Novo Nordisk, Maersk, Vestas, Carlsberg, DSV, Ørsted), "
            "the Danish economy, housing market and interest rates."
        ),
    ),
    DiscoverySearch(
        label="Regional - General",
        category=Category.REGIONAL,
        sub_category=SubCategory.GENERAL,
        instructions=(
            "Search the web for the most important European news from today, "
            "excluding Denmark-specific news: EU politics and major events in "
            "European countries."
        ),
        story_count="6-10",
    ),
    DiscoverySearch(
        label="Global - General",
        category=Category.GLOBAL,
        sub_category=SubCategory.GENERAL,
        instructions=(
            "Search the web for today's most important world news outside Europe: "
            "USA, Asia, the Middle East, Africa and Latin America."
        ),
        story_count="6-10",
    ),
)


def interest_search(name: str, search_terms: str | None = None) -> DiscoverySearch:
    return DiscoverySearch(
        label=f"Interest: {name}",
        category=Category.GLOBAL,
        sub_category=SubCategory.GENERAL,
        instructions=(
            f"Search the web for today's latest news about {name}. "
            f"Use these search terms: {search_terms or name}. "
            "Find developments from the last 24 hours."
        ),
        story_count="3-6",
    )


def parse_stories(text: str) -> list[dict[str, Any]]:
    """Stories from a discovery answer; entries need a title, url and summary."""
    raw = extract_json(text)
    stories = raw.get("stories") or raw.get("results") or []
    if not isinstance(stories, list):
        return []
    return [
        story
        for story in stories
        if isinstance(story, dict)
        and coerce_str(story.get("title"))
        and coerce_str(story.get("url"))
        and coerce_str(story.get("summary"))
    ]


class ClaudeDiscoveryProvider:
    """Discover current news with web search and classify it.

    Args:
        search_service: Web-search-augmented completion service.
        categorizer: Optional categorizer; its verdict replaces a story's
            search category only when confidence is above 50.
        interests: Interest names that each get their own search.
        timeout: Per-search timeout in seconds.
        max_searches: Web search budget per discovery search.
        language: Language for story summaries.
    """

    name = "claude_discovery"

    def __init__(
        self,
        search_service: WebSearchCompletionService,
        *,
        categorizer: Categorizer | None = None,
        interests: list[str] | None = None,
        timeout: float = 45.0,
        max_searches: int = 5,
        language: str = "Danish",
    ) -> None:
        self._search = search_service
        self._categorizer = categorizer
        self._searches = list(CORE_SEARCHES) + [interest_search(i) for i in interests or []]
        self._timeout = timeout
        self._max_searches = max_searches
        self._language = language

    @property
    def searches(self) -> list[DiscoverySearch]:
        return list(self._searches)

    async def fetch(self) -> tuple[list[RawSourceItem], Usage]:
        tasks = [self._run_search(search) for search in self._searches]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        total_usage = Usage()
        seen_urls: set[str] = set()
        found: list[tuple[DiscoverySearch, dict[str, Any]]] = []

        for search, result in zip(self._searches, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Discovery search %r failed: %s", search.label, result)
                continue
            stories, usage = result
            total_usage += usage
            for story in stories:
                key = normalize_url(story["url"])
                if key in seen_urls:
                    continue
                seen_urls.add(key)
                found.append((search, story))

        items = await self._to_items(found, total_usage)
        logger.info(
            "Discovery: %d unique stories from %d searches (%d web searches)",
            len(items),
            len(self._searches),
            total_usage.web_searches,
        )
        return (items, total_usage)

    async def _run_search(self, search: DiscoverySearch) -> tuple[list[dict[str, Any]], Usage]:
        prompt = search.instructions + "\n\n" + _STORY_FORMAT.format(
            language=self._language, count=search.story_count
        )
        completion, usage = await self._search.complete_with_search(
            prompt, max_searches=self._max_searches, timeout=self._timeout
        )
        return (parse_stories(completion.text), usage)

    async def _to_items(
        self,
        found: list[tuple[DiscoverySearch, dict[str, Any]]],
        usage: Usage,
    ) -> list[RawSourceItem]:
        categorizations = None
        if self._categorizer is not None and found:
            categorizations, cat_usage = await self._categorizer.categorize_batch(
                [(coerce_str(s.get("title")), coerce_str(s.get("summary"))) for _, s in found]
            )
            usage += cat_usage

        fetched_at = utc_now()
        items: list[RawSourceItem] = []
        for i, (search, story) in enumerate(found):
            category, sub_category = search.category, search.sub_category
            if categorizations is not None:
                cat = categorizations[i]
                if cat.confidence > MIN_CATEGORIZATION_CONFIDENCE:
                    category, sub_category = cat.category, cat.sub_category

            url = coerce_str(story.get("url"))
            summary = coerce_str(story.get("summary"))
            items.append(
                RawSourceItem(
                    id=source_id_for(url),
                    title=coerce_str(story.get("title")),
                    url=url,
                    source_name=coerce_str(story.get("source"), extract_domain(url)),
                    category=category,
                    sub_category=sub_category,
                    description=summary,
                    published_at=coerce_datetime(story.get("published_date"), fetched_at),
                    fetched_at=fetched_at,
                    raw_content=summary,
                )
            )
        return items
