"""Article synthesis from a group of raw sources."""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from factdesk.completion import TextCompletionService
from factdesk.data import (
    CATEGORY_ALIASES,
    SUB_CATEGORY_ALIASES,
    ArticleSource,
    Category,
    FactCheckResult,
    FailureReason,
    GeneratedArticle,
    GenerationFailure,
    RawSourceItem,
    SourceGroup,
    SubCategory,
    Usage,
    VerificationMethod,
    utc_now,
)
from factdesk.errors import CompletionError, MalformedResponseError
from factdesk.factcheck import parse_claims
from factdesk.parsing import (
    FieldRule,
    apply_rules,
    coerce_bool,
    coerce_enum,
    coerce_score,
    coerce_str,
    coerce_str_list,
    extract_json,
)
from factdesk.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_FACT_SCORE = 70
MIN_BODY_CHARS = 50
MAX_EXCERPT_CHARS = 1500

SYSTEM_PROMPT = """\
You are a professional news journalist. Write one original article in \
{language} based on the sources provided by the user.

Today is {today}. If the sources describe events that are clearly outdated \
(older than a few days) or contain no real news, do not write an article: \
return {{"skip": true, "skip_reason": "..."}} instead.

RULES:
- Write in {language}, neutral and factual. Never invent facts that are not \
in the sources.
- The body is markdown and at least 200 words.
- Assess how well the sources support the article's claims in fact_score \
(0-100) and list the main claims in fact_details.
- category is one of: domestic, regional, global, soft-news. sub_category is \
one of: general, finance.
- is_gossip is true only for celebrity and entertainment stories.
- interest_tags: only use these tags, and only when the article is directly \
about the topic: {interests}. When in doubt leave it out; most articles have [].

Return a JSON object:
{{
  "title": "Clear, engaging headline",
  "summary": "One or two sentences capturing the essence",
  "body": "Full article in markdown...",
  "fact_score": 85,
  "fact_details": {{
    "claims": [{{"text": "...", "verdict": "true", "explanation": "..."}}],
    "sources_checked": ["example.com"]
  }},
  "category": "domestic",
  "sub_category": "general",
  "interest_tags": [],
  "is_gossip": false,
  "skip": false
}}\
"""


def _source_to_prompt_text(item: RawSourceItem, index: int) -> str:
    """Format a source for inclusion in the generation prompt."""
    parts = [f"SOURCE {index + 1}:"]
    parts.append(f"  Outlet: {item.source_name}")
    parts.append(f"  Title: {item.title}")
    if item.description:
        parts.append(f"  Description: {item.description}")
    if item.raw_content:
        parts.append(f"  Excerpt: {item.raw_content[:MAX_EXCERPT_CHARS]}")
    parts.append(f"  URL: {item.url}")
    parts.append(f"  Published: {item.published_at.isoformat()}")
    return "\n".join(parts)


def _field_rules(primary: RawSourceItem) -> list[FieldRule]:
    """Validation table for one response; fallbacks come from the primary source."""
    return [
        FieldRule("title", lambda v: coerce_str(v, primary.title)),
        FieldRule("summary", lambda v: coerce_str(v, primary.description)),
        FieldRule("body", coerce_str),
        FieldRule("fact_score", lambda v: coerce_score(v, DEFAULT_FACT_SCORE)),
        FieldRule(
            "category",
            lambda v: coerce_enum(v, Category, primary.category, CATEGORY_ALIASES),
        ),
        FieldRule(
            "sub_category",
            lambda v: coerce_enum(v, SubCategory, primary.sub_category, SUB_CATEGORY_ALIASES),
        ),
        FieldRule("interest_tags", coerce_str_list),
        FieldRule("is_gossip", coerce_bool),
        FieldRule("fact_details", lambda v: v if isinstance(v, dict) else {}),
    ]


class ArticleGenerator:
    """Turn a source group into one article with a single model call.

    Args:
        completion: Text completion service.
        rate_limiter: Shared article rate limiter.
        timeout: Completion timeout in seconds.
        temperature: Sampling temperature.
        language: Language the article is written in.
        clock: Returns the current time; used for the prompt date and timestamps.
    """

    def __init__(
        self,
        completion: TextCompletionService,
        rate_limiter: RateLimiter | None = None,
        *,
        timeout: float = 90.0,
        temperature: float = 0.4,
        language: str = "Danish",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._completion = completion
        self._rate_limiter = rate_limiter or RateLimiter()
        self._timeout = timeout
        self._temperature = temperature
        self._language = language
        self._clock = clock

    async def generate(
        self,
        group: SourceGroup,
        interest_context: list[str] | None = None,
    ) -> tuple[GeneratedArticle | GenerationFailure, Usage]:
        """Generate an article for ``group``.

        Args:
            group: Sources concerning one story; the first is the primary.
            interest_context: Interest names the model may use as tags.

        Returns:
            Tuple of (article or failure, usage). Transport and parse errors
            are returned as failures, never raised.
        """
        if not self._rate_limiter.try_acquire():
            logger.info("Article rate limit reached (%d per window)", self._rate_limiter.limit)
            return (
                GenerationFailure(
                    FailureReason.RATE_LIMITED,
                    f"Rate limit reached: {self._rate_limiter.limit} articles per window",
                ),
                Usage(),
            )

        now = self._clock()
        system_prompt = SYSTEM_PROMPT.format(
            language=self._language,
            today=now.strftime("%Y-%m-%d"),
            interests=", ".join(f'"{i}"' for i in interest_context or []) or "(none)",
        )
        user_content = "\n\n---\n\n".join(
            _source_to_prompt_text(item, i) for i, item in enumerate(group.items)
        )

        try:
            text, usage = await self._completion.complete(
                system_prompt,
                user_content,
                temperature=self._temperature,
                json_response=True,
                timeout=self._timeout,
            )
        except CompletionError as e:
            logger.warning("Generation failed for %r: %s", group.topic, e)
            return (GenerationFailure(FailureReason.COMPLETION_ERROR, str(e)), Usage())

        try:
            raw = extract_json(text)
        except MalformedResponseError as e:
            return (GenerationFailure(FailureReason.MALFORMED_RESPONSE, str(e)), usage)

        if coerce_bool(raw.get("skip")):
            reason = coerce_str(raw.get("skip_reason"), "sources are stale")
            logger.info("Model skipped %r: %s", group.topic, reason)
            return (GenerationFailure(FailureReason.STALE_SOURCES, reason), usage)

        fields = apply_rules(raw, _field_rules(group.primary))
        body: str = fields["body"]
        if len(body) < MIN_BODY_CHARS:
            return (
                GenerationFailure(
                    FailureReason.MALFORMED_RESPONSE,
                    f"Body missing or too short ({len(body)} chars)",
                ),
                usage,
            )

        article = GeneratedArticle(
            id=str(uuid.uuid4()),
            title=fields["title"],
            summary=fields["summary"],
            body=body,
            category=fields["category"],
            sub_category=fields["sub_category"],
            sources=tuple(
                ArticleSource(title=item.title, url=item.url, source_name=item.source_name)
                for item in group.items
            ),
            fact_score=fields["fact_score"],
            fact_details=self._self_assessment(fields["fact_details"], fields["fact_score"], now),
            interest_tags=frozenset(fields["interest_tags"]),
            is_gossip=fields["is_gossip"],
            created_at=now,
            updated_at=now,
            published=True,
        )
        logger.info("Generated %r from %d sources", article.title, len(group.items))
        return (article, usage)

    def _self_assessment(
        self, raw: dict[str, Any], score: int, now: datetime
    ) -> FactCheckResult:
        """Keep the model's own source assessment as an ai-only verdict."""
        return FactCheckResult(
            score=score,
            summary=coerce_str(raw.get("summary")),
            claims=parse_claims(raw.get("claims")),
            sources=tuple(coerce_str_list(raw.get("sources_checked"))),
            verification_method=VerificationMethod.AI_ONLY,
            checked_at=now,
        )
