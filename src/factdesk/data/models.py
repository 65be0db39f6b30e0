"""Core data models for factdesk."""

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from factdesk.parsing import coerce_bool, coerce_datetime, coerce_enum, coerce_score


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class Category(StrEnum):
    """Editorial section a story belongs to."""

    DOMESTIC = "domestic"
    REGIONAL = "regional"
    GLOBAL = "global"
    SOFT_NEWS = "soft-news"


class SubCategory(StrEnum):
    GENERAL = "general"
    FINANCE = "finance"


class Verdict(StrEnum):
    """Per-claim fact-check verdict."""

    TRUE = "true"
    MOSTLY_TRUE = "mostly-true"
    MIXED = "mixed"
    MOSTLY_FALSE = "mostly-false"
    FALSE = "false"
    UNVERIFIED = "unverified"


class VerificationMethod(StrEnum):
    """How a fact-check verdict was produced."""

    WEB_SEARCH = "web-search"
    AI_ONLY = "ai-only"


class FailureReason(StrEnum):
    """Why article generation produced no article."""

    RATE_LIMITED = "rate_limited"
    STALE_SOURCES = "stale_sources"
    MALFORMED_RESPONSE = "malformed_response"
    COMPLETION_ERROR = "completion_error"


# ============================================================
# Sources
# ============================================================


@dataclass(frozen=True)
class RawSourceItem:
    """One discovered news item before synthesis.

    ``url`` is the natural dedup key; ``id`` is derived from it by
    :func:`factdesk.url.source_id_for` for provider-created items.
    """

    id: str
    title: str
    url: str
    source_name: str
    category: Category
    sub_category: SubCategory = SubCategory.GENERAL
    description: str = ""
    published_at: datetime = field(default_factory=utc_now)
    fetched_at: datetime = field(default_factory=utc_now)
    raw_content: str = ""
    processed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "sourceName": self.source_name,
            "category": self.category.value,
            "subCategory": self.sub_category.value,
            "description": self.description,
            "publishedAt": self.published_at.isoformat(),
            "fetchedAt": self.fetched_at.isoformat(),
            "rawContent": self.raw_content,
            "processed": self.processed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawSourceItem":
        now = utc_now()
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            url=str(data.get("url", "")),
            source_name=str(data.get("sourceName", "")),
            category=coerce_enum(data.get("category"), Category, Category.GLOBAL),
            sub_category=coerce_enum(
                data.get("subCategory"), SubCategory, SubCategory.GENERAL
            ),
            description=str(data.get("description", "")),
            published_at=coerce_datetime(data.get("publishedAt"), now),
            fetched_at=coerce_datetime(data.get("fetchedAt"), now),
            raw_content=str(data.get("rawContent", "")),
            processed=coerce_bool(data.get("processed")),
        )


@dataclass(frozen=True)
class SourceGroup:
    """A cluster of items judged to concern the same story.

    Members keep discovery order; the first member is the primary source.
    """

    topic: str
    items: tuple[RawSourceItem, ...]

    @property
    def primary(self) -> RawSourceItem:
        return self.items[0]

    @property
    def ids(self) -> list[str]:
        return [item.id for item in self.items]


# ============================================================
# Fact-check
# ============================================================


@dataclass(frozen=True)
class SourceLink:
    url: str
    domain: str = ""
    title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url, "domain": self.domain}
        if self.title:
            data["title"] = self.title
        return data


@dataclass(frozen=True)
class Claim:
    """A single verifiable statement and its verdict."""

    text: str
    verdict: Verdict = Verdict.UNVERIFIED
    explanation: str = ""
    claim_sources: tuple[SourceLink, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "text": self.text,
            "verdict": self.verdict.value,
            "explanation": self.explanation,
        }
        if self.claim_sources:
            data["claimSources"] = [link.to_dict() for link in self.claim_sources]
        return data


@dataclass(frozen=True)
class FactCheckResult:
    """A credibility verdict with per-claim breakdown and citations.

    ``score`` is 0-100, or -1 when no check could be completed. Callers must
    treat -1 as unknown, never as "0% credible".
    """

    score: int
    summary: str
    claims: tuple[Claim, ...] = ()
    sources: tuple[str, ...] = ()
    source_links: tuple[SourceLink, ...] = ()
    sources_consulted: int = 0
    verification_method: VerificationMethod = VerificationMethod.AI_ONLY
    checked_at: datetime = field(default_factory=utc_now)

    @property
    def failed(self) -> bool:
        return self.score < 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the camelCase field names of the JSON surface."""
        return {
            "score": self.score,
            "summary": self.summary,
            "claims": [claim.to_dict() for claim in self.claims],
            "sources": list(self.sources),
            "sourceLinks": [link.to_dict() for link in self.source_links],
            "sourcesConsulted": self.sources_consulted,
            "verificationMethod": self.verification_method.value,
            "checkedAt": self.checked_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FactCheckResult":
        """Read back a serialized verdict, tolerating missing optional fields."""

        def _link(raw: dict[str, Any]) -> SourceLink:
            return SourceLink(
                url=str(raw.get("url", "")),
                domain=str(raw.get("domain", "")),
                title=raw.get("title"),
            )

        claims = tuple(
            Claim(
                text=str(raw.get("text", "")),
                verdict=coerce_enum(raw.get("verdict"), Verdict, Verdict.UNVERIFIED),
                explanation=str(raw.get("explanation", "")),
                claim_sources=tuple(_link(s) for s in raw.get("claimSources", []) or []),
            )
            for raw in data.get("claims", []) or []
            if isinstance(raw, dict)
        )
        checked_at_raw = data.get("checkedAt")
        try:
            checked_at = datetime.fromisoformat(checked_at_raw) if checked_at_raw else utc_now()
        except (TypeError, ValueError):
            checked_at = utc_now()
        score = data.get("score")
        return cls(
            score=-1 if score == -1 else coerce_score(score, default=-1),
            summary=str(data.get("summary", "")),
            claims=claims,
            sources=tuple(str(s) for s in data.get("sources", []) or []),
            source_links=tuple(_link(s) for s in data.get("sourceLinks", []) or []),
            sources_consulted=int(data.get("sourcesConsulted", 0) or 0),
            verification_method=coerce_enum(
                data.get("verificationMethod"),
                VerificationMethod,
                VerificationMethod.AI_ONLY,
            ),
            checked_at=checked_at,
        )


# ============================================================
# Articles
# ============================================================


@dataclass(frozen=True)
class ArticleSource:
    """Provenance record linking an article to one raw source."""

    title: str
    url: str
    source_name: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "url": self.url, "sourceName": self.source_name}


@dataclass(frozen=True)
class GeneratedArticle:
    """A synthesized, published article with provenance and fact-check metadata.

    Only ``fact_score``, ``fact_details`` and ``updated_at`` change after
    creation, and only through the fact-check engine.
    """

    id: str
    title: str
    summary: str
    body: str
    category: Category
    sub_category: SubCategory
    sources: tuple[ArticleSource, ...]
    fact_score: int = -1
    fact_details: FactCheckResult | None = None
    interest_tags: frozenset[str] = frozenset()
    is_gossip: bool = False
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    published: bool = True

    def __post_init__(self) -> None:
        if not self.sources:
            raise ValueError("An article must trace to at least one source")
        if self.fact_score != -1 and not 0 <= self.fact_score <= 100:
            raise ValueError(f"fact_score out of range: {self.fact_score}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "body": self.body,
            "category": self.category.value,
            "subCategory": self.sub_category.value,
            "factScore": self.fact_score,
            "factDetails": self.fact_details.to_dict() if self.fact_details else None,
            "interestTags": sorted(self.interest_tags),
            "sources": [s.to_dict() for s in self.sources],
            "isGossip": self.is_gossip,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "published": self.published,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeneratedArticle":
        """Inverse of :meth:`to_dict`.

        Raises:
            ValueError: If the record lists no sources.
        """
        now = utc_now()
        details = data.get("factDetails")
        score = data.get("factScore")
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            summary=str(data.get("summary", "")),
            body=str(data.get("body", "")),
            category=coerce_enum(data.get("category"), Category, Category.GLOBAL),
            sub_category=coerce_enum(data.get("subCategory"), SubCategory, SubCategory.GENERAL),
            sources=tuple(
                ArticleSource(
                    title=str(s.get("title", "")),
                    url=str(s.get("url", "")),
                    source_name=str(s.get("sourceName", "")),
                )
                for s in data.get("sources", []) or []
                if isinstance(s, dict)
            ),
            fact_score=-1 if score == -1 else coerce_score(score, default=-1),
            fact_details=FactCheckResult.from_dict(details) if isinstance(details, dict) else None,
            interest_tags=frozenset(str(t) for t in data.get("interestTags", []) or []),
            is_gossip=coerce_bool(data.get("isGossip")),
            created_at=coerce_datetime(data.get("createdAt"), now),
            updated_at=coerce_datetime(data.get("updatedAt"), now),
            published=coerce_bool(data.get("published"), default=True),
        )


@dataclass(frozen=True)
class Categorization:
    """Fast-path classification of a discovered story."""

    category: Category = Category.GLOBAL
    sub_category: SubCategory = SubCategory.GENERAL
    region: str = ""
    is_gossip: bool = False
    confidence: int = 0


# ============================================================
# Pipeline outcomes
# ============================================================


@dataclass(frozen=True)
class DuplicateCheck:
    is_dup: bool
    matched_title: str | None = None
    similarity: float | None = None


@dataclass(frozen=True)
class GenerationFailure:
    """A group that produced no article, and why."""

    reason: FailureReason
    message: str = ""


@dataclass
class IngestionSummary:
    """Outcome of one bounded ingestion run."""

    generated: int = 0
    total_groups: int = 0
    articles: list[str] = field(default_factory=list)
    skipped_duplicates: list[str] = field(default_factory=list)
    skipped_stale: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total_sources: int = 0
    fresh_sources: int = 0
    rate_limited: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "generated": self.generated,
            "totalGroups": self.total_groups,
            "articles": list(self.articles),
            "totalSources": self.total_sources,
            "freshSources": self.fresh_sources,
        }
        if self.skipped_duplicates:
            data["skippedDuplicates"] = list(self.skipped_duplicates)
        if self.skipped_stale:
            data["skippedStale"] = list(self.skipped_stale)
        if self.errors:
            data["errors"] = list(self.errors)
        if self.rate_limited:
            data["rateLimited"] = True
        return data


@dataclass
class RefreshSummary:
    """Outcome of one provider refresh."""

    fetched: int = 0
    unique: int = 0
    inserted: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "fetched": self.fetched,
            "unique": self.unique,
            "inserted": self.inserted,
        }
        if self.errors:
            data["errors"] = list(self.errors)
        return data


# ============================================================
# Usage accounting
# ============================================================


@dataclass(frozen=True)
class APICallUsage:
    """Usage from a single model call."""

    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0
    web_searches: int = 0


@dataclass
class Usage:
    """Accumulated usage across pipeline components."""

    api_calls: list[APICallUsage] = field(default_factory=list)
    provider_requests: int = 0

    @property
    def input_tokens(self) -> int:
        return sum(c.input_tokens for c in self.api_calls)

    @property
    def output_tokens(self) -> int:
        return sum(c.output_tokens for c in self.api_calls)

    @property
    def web_searches(self) -> int:
        return sum(c.web_searches for c in self.api_calls)

    def to_dict(self) -> dict[str, Any]:
        """Totals first, then the per-call breakdown."""
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "web_searches": self.web_searches,
            "provider_requests": self.provider_requests,
            "api_calls": [asdict(c) for c in self.api_calls],
        }

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            api_calls=self.api_calls + other.api_calls,
            provider_requests=self.provider_requests + other.provider_requests,
        )

    def __iadd__(self, other: "Usage") -> "Usage":
        self.api_calls.extend(other.api_calls)
        self.provider_requests += other.provider_requests
        return self


# Labels seen in model output and older persisted rows.
CATEGORY_ALIASES: dict[str, Category] = {
    "danmark": Category.DOMESTIC,
    "denmark": Category.DOMESTIC,
    "europa": Category.REGIONAL,
    "europe": Category.REGIONAL,
    "verden": Category.GLOBAL,
    "world": Category.GLOBAL,
    "sladder": Category.SOFT_NEWS,
    "gossip": Category.SOFT_NEWS,
}

SUB_CATEGORY_ALIASES: dict[str, SubCategory] = {
    "generelt": SubCategory.GENERAL,
    "finans": SubCategory.FINANCE,
    "business": SubCategory.FINANCE,
}
