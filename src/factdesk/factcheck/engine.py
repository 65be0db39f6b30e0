"""Fact verification: cache, web-search verification, AI-only fallback.

Per call the engine moves through these states:

    CacheLookup -> WebSearchVerify -> AiOnlyFallback -> TerminalFailure

A cache hit returns immediately. Any exception from the web-search path
(transport, timeout, unparseable answer) falls through to the AI-only path;
if that fails too the result carries ``score == -1`` and is never cached.
"""

import logging
from typing import Any

from factdesk.cache import TtlCache
from factdesk.completion import TextCompletionService, WebSearchCompletionService
from factdesk.completion.base import SearchCompletion
from factdesk.data import (
    Claim,
    FactCheckResult,
    SourceLink,
    Usage,
    Verdict,
    VerificationMethod,
    utc_now,
)
from factdesk.errors import (
    ArticleNotFoundError,
    MalformedResponseError,
    ServiceUnavailableError,
)
from factdesk.parsing import coerce_enum, coerce_score, coerce_str, extract_json
from factdesk.store import Store
from factdesk.text import normalize_title
from factdesk.url import extract_domain

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 6000

FALLBACK_DISCLAIMER = (
    "Note: no web sources could be consulted, so this assessment is based on "
    "the model's own knowledge only."
)

WEB_SEARCH_PROMPT = """\
You are a meticulous fact-checker. Verify the news article below.

1. Identify 3-5 concrete, verifiable claims in the article.
2. Search the web for evidence for each claim.
3. Judge each claim with one verdict: true, mostly-true, mixed, mostly-false, \
false, unverified.

Respond ONLY with a JSON object (no markdown fences, no commentary):
{{"score": <0-100 overall credibility>, "summary": "<2-3 sentences in {language}>", \
"claims": [{{"text": "...", "verdict": "...", "explanation": "..."}}]}}

Source: {source}
Title: {title}
Content:
{content}\
"""

AI_ONLY_SYSTEM_PROMPT = """\
You are a careful fact-checker without web access. Assess the credibility of \
the news article using only your own knowledge. Because nothing can be \
verified externally, be conservative: prefer "unverified" over "true" when in \
doubt and keep the overall score moderate.

Return a JSON object with:
- "score": overall credibility 0-100
- "summary": 2-3 sentences in {language}
- "claims": array of {{"text", "verdict", "explanation"}} where verdict is one \
of true, mostly-true, mixed, mostly-false, false, unverified\
"""


def fact_check_cache_key(title: str, source: str) -> str:
    return f"{normalize_title(title)}|{source}"


def parse_claims(
    raw_claims: Any,
    claim_sources: tuple[SourceLink, ...] = (),
) -> tuple[Claim, ...]:
    """Read a ``claims`` array from model output, skipping unusable entries."""
    if not isinstance(raw_claims, list):
        return ()
    claims: list[Claim] = []
    for raw in raw_claims:
        if not isinstance(raw, dict):
            continue
        text = coerce_str(raw.get("text"))
        if not text:
            continue
        claims.append(
            Claim(
                text=text,
                verdict=coerce_enum(raw.get("verdict"), Verdict, Verdict.UNVERIFIED),
                explanation=coerce_str(raw.get("explanation")),
                claim_sources=claim_sources,
            )
        )
    return tuple(claims)


def _required_score(raw: dict[str, Any]) -> int:
    score = coerce_score(raw.get("score"), default=-1)
    if score < 0:
        raise MalformedResponseError(f"Missing or non-numeric score: {raw.get('score')!r}")
    return score


def _with_disclaimer(summary: str) -> str:
    return f"{summary} {FALLBACK_DISCLAIMER}".strip()


class FactCheckEngine:
    """Verify article text with a web-search model, falling back to AI-only.

    Either service may be None when it is not configured. With neither, every
    check returns an "unavailable" result with ``score == -1``.

    Args:
        search_service: Web-search-augmented completion for the primary path.
        completion_service: Plain completion for the fallback path.
        store: Where verdicts for persisted articles are written back.
        cache: Verdict cache keyed by normalized title and source label.
        search_timeout: Timeout for the web-search call, in seconds.
        fallback_timeout: Timeout for the fallback call, in seconds.
        max_searches: Web search budget per check.
        cache_degraded_results: Also cache AI-only verdicts.
        language: Language for summaries.
    """

    def __init__(
        self,
        search_service: WebSearchCompletionService | None,
        completion_service: TextCompletionService | None,
        *,
        store: Store | None = None,
        cache: TtlCache[str, FactCheckResult] | None = None,
        search_timeout: float = 45.0,
        fallback_timeout: float = 20.0,
        max_searches: int = 5,
        cache_degraded_results: bool = True,
        language: str = "Danish",
    ) -> None:
        self._search = search_service
        self._completion = completion_service
        self._store = store
        self._cache: TtlCache[str, FactCheckResult] = cache if cache is not None else TtlCache()
        self._search_timeout = search_timeout
        self._fallback_timeout = fallback_timeout
        self._max_searches = max_searches
        self._cache_degraded = cache_degraded_results
        self._language = language

    async def check(
        self,
        title: str,
        content: str = "",
        source: str = "unknown",
        *,
        article_id: str | None = None,
        force: bool = False,
    ) -> tuple[FactCheckResult, Usage]:
        """Fact-check a piece of text.

        Args:
            title: Article headline.
            content: Article body.
            source: Source label (publisher name); part of the cache key.
            article_id: If given, the verdict is written back to that article.
            force: Skip the cache lookup and do not store the new verdict.

        Returns:
            Tuple of (result, usage). Never raises for collaborator failures;
            a result with ``score == -1`` means no check could be completed.
        """
        key = fact_check_cache_key(title, source)
        if not force:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Fact-check cache hit for %r", title)
                await self._write_back(article_id, cached)
                return (cached, Usage())

        if self._search is None and self._completion is None:
            logger.warning("Fact-check requested for %r but no service is configured", title)
            return (
                FactCheckResult(
                    score=-1,
                    summary="Fact-check unavailable: no verification service is configured.",
                ),
                Usage(),
            )

        usage = Usage()
        result: FactCheckResult | None = None
        error: Exception | None = None

        if self._search is not None:
            try:
                completion, call_usage = await self._search.complete_with_search(
                    WEB_SEARCH_PROMPT.format(
                        language=self._language,
                        source=source,
                        title=title,
                        content=content[:MAX_CONTENT_CHARS],
                    ),
                    max_searches=self._max_searches,
                    timeout=self._search_timeout,
                )
                usage += call_usage
                result = self._result_from_search(completion)
            except Exception as e:
                logger.warning("Web-search verification failed for %r: %s", title, e)
                error = e

        if result is None:
            try:
                result, call_usage = await self._verify_ai_only(title, content, source)
                usage += call_usage
            except Exception as e:
                reason = f"{error}; {e}" if error is not None else str(e)
                logger.error("Fact-check failed for %r: %s", title, reason)
                return (
                    FactCheckResult(
                        score=-1,
                        summary=f"Fact-check could not be completed: {reason}",
                    ),
                    usage,
                )

        degraded = result.verification_method == VerificationMethod.AI_ONLY
        if not force and (self._cache_degraded or not degraded):
            self._cache.set(key, result)

        await self._write_back(article_id, result)
        return (result, usage)

    async def check_article(
        self, article_id: str, *, force: bool = False
    ) -> tuple[FactCheckResult, Usage]:
        """Fact-check a persisted article and write the verdict back.

        Raises:
            ArticleNotFoundError: If the store has no such article.
        """
        if self._store is None:
            raise ArticleNotFoundError(f"No store configured to look up {article_id}")
        article = await self._store.get_article(article_id)
        if article is None:
            raise ArticleNotFoundError(f"Article not found: {article_id}")
        return await self.check(
            article.title,
            article.body,
            article.sources[0].source_name,
            article_id=article.id,
            force=force,
        )

    def _result_from_search(self, completion: SearchCompletion) -> FactCheckResult:
        raw = extract_json(completion.text)
        score = _required_score(raw)

        links = tuple(
            SourceLink(
                url=url,
                domain=extract_domain(url),
                title=completion.citation_titles.get(url),
            )
            for url in completion.citation_urls
        )
        domains = tuple(dict.fromkeys(link.domain for link in links))
        summary = coerce_str(raw.get("summary"))

        if not links:
            # Zero citations cannot count as web verification.
            logger.info("Web-search answer had no citations; labelling it ai-only")
            return FactCheckResult(
                score=score,
                summary=_with_disclaimer(summary),
                claims=parse_claims(raw.get("claims")),
                verification_method=VerificationMethod.AI_ONLY,
            )

        return FactCheckResult(
            score=score,
            summary=summary,
            claims=parse_claims(raw.get("claims"), claim_sources=links),
            sources=domains,
            source_links=links,
            sources_consulted=len(links),
            verification_method=VerificationMethod.WEB_SEARCH,
        )

    async def _verify_ai_only(
        self, title: str, content: str, source: str
    ) -> tuple[FactCheckResult, Usage]:
        if self._completion is None:
            raise ServiceUnavailableError("no fallback completion service is configured")
        text, usage = await self._completion.complete(
            AI_ONLY_SYSTEM_PROMPT.format(language=self._language),
            f"Source: {source}\nTitle: {title}\nContent:\n{content[:MAX_CONTENT_CHARS]}",
            temperature=0.3,
            json_response=True,
            timeout=self._fallback_timeout,
        )
        raw = extract_json(text)
        result = FactCheckResult(
            score=_required_score(raw),
            summary=_with_disclaimer(coerce_str(raw.get("summary"))),
            claims=parse_claims(raw.get("claims")),
            verification_method=VerificationMethod.AI_ONLY,
        )
        return (result, usage)

    async def _write_back(self, article_id: str | None, result: FactCheckResult) -> None:
        if article_id is None or self._store is None or result.failed:
            return
        try:
            found = await self._store.update_article_fact_fields(
                article_id,
                fact_score=result.score,
                fact_details=result,
                updated_at=utc_now(),
            )
        except Exception:
            logger.warning("Could not persist fact-check for article %s", article_id, exc_info=True)
            return
        if not found:
            logger.warning("Fact-check write-back skipped: article %s not found", article_id)
