"""Fast classification of discovered stories into sections."""

import logging
from typing import Any

from factdesk.cache import TtlCache
from factdesk.completion import TextCompletionService
from factdesk.data import (
    CATEGORY_ALIASES,
    SUB_CATEGORY_ALIASES,
    Categorization,
    Category,
    SubCategory,
    Usage,
)
from factdesk.parsing import (
    FieldRule,
    apply_rules,
    coerce_bool,
    coerce_enum,
    coerce_score,
    coerce_str,
    extract_json,
)
from factdesk.text import normalize_title

logger = logging.getLogger(__name__)

MAX_SNIPPET_CHARS = 300

SYSTEM_PROMPT = """\
You categorize news stories for a Danish news site. For each numbered story \
decide:
- "category": domestic (Denmark), regional (Europe outside Denmark), global \
(rest of the world), or soft-news (celebrity, entertainment, gossip)
- "sub_category": finance for business, markets and economy; otherwise general
- "region": the main country or region, e.g. "Denmark", "Germany", "USA"
- "is_gossip": true only for celebrity and entertainment stories
- "confidence": 0-100, how sure you are of the category

Return {"results": [{"index": 1, "category": "...", "sub_category": "...", \
"region": "...", "is_gossip": false, "confidence": 80}, ...]} with one entry \
per story.\
"""

_RULES = [
    FieldRule("category", lambda v: coerce_enum(v, Category, Category.GLOBAL, CATEGORY_ALIASES)),
    FieldRule(
        "sub_category",
        lambda v: coerce_enum(v, SubCategory, SubCategory.GENERAL, SUB_CATEGORY_ALIASES),
    ),
    FieldRule("region", coerce_str),
    FieldRule("is_gossip", coerce_bool),
    FieldRule("confidence", lambda v: coerce_score(v, 0)),
]


def _parse_entry(raw: dict[str, Any]) -> Categorization:
    return Categorization(**apply_rules(raw, _RULES))


class Categorizer:
    """Classify stories with one model call per batch of uncached titles.

    Failures never raise: an item that could not be classified gets the
    default ``Categorization`` (global/general, confidence 0), which callers
    treat as "keep the provider's own category".

    Args:
        completion: Text completion service.
        cache: Results keyed by normalized title.
        timeout: Completion timeout in seconds.
    """

    def __init__(
        self,
        completion: TextCompletionService,
        *,
        cache: TtlCache[str, Categorization] | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._completion = completion
        self._cache: TtlCache[str, Categorization] = cache if cache is not None else TtlCache()
        self._timeout = timeout

    async def categorize(self, title: str, content: str = "") -> tuple[Categorization, Usage]:
        results, usage = await self.categorize_batch([(title, content)])
        return (results[0], usage)

    async def categorize_batch(
        self, items: list[tuple[str, str]]
    ) -> tuple[list[Categorization], Usage]:
        """Classify ``(title, content)`` pairs, preserving input order."""
        results: list[Categorization | None] = []
        pending: list[int] = []
        for i, (title, _) in enumerate(items):
            cached = self._cache.get(normalize_title(title))
            results.append(cached)
            if cached is None:
                pending.append(i)

        if not pending:
            return ([r or Categorization() for r in results], Usage())

        user_content = "\n\n".join(
            f"{n + 1}. {items[i][0]}\n{items[i][1][:MAX_SNIPPET_CHARS]}"
            for n, i in enumerate(pending)
        )
        usage = Usage()
        try:
            text, usage = await self._completion.complete(
                SYSTEM_PROMPT,
                user_content,
                temperature=0.2,
                json_response=True,
                timeout=self._timeout,
            )
            entries = extract_json(text).get("results")
        except Exception as e:
            logger.warning("Categorization of %d stories failed: %s", len(pending), e)
            entries = None

        by_index: dict[int, Categorization] = {}
        if isinstance(entries, list):
            for position, entry in enumerate(entries):
                if not isinstance(entry, dict):
                    continue
                # Missing or non-numeric index: use the position. Out of range: drop.
                index = coerce_score(
                    entry.get("index"), position + 1, low=0, high=len(pending) + 1
                )
                if not 1 <= index <= len(pending):
                    logger.debug("Ignoring categorization with index %r", entry.get("index"))
                    continue
                by_index.setdefault(index - 1, _parse_entry(entry))

        for n, i in enumerate(pending):
            categorization = by_index.get(n)
            if categorization is None:
                results[i] = Categorization()
                continue
            results[i] = categorization
            self._cache.set(normalize_title(items[i][0]), categorization)

        return ([r or Categorization() for r in results], usage)
