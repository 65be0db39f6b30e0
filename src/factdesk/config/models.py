"""Pydantic configuration models for factdesk components."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from factdesk.data import Category, SubCategory

DEFAULT_INTERESTS = ["Tesla", "AI", "Grøn Energi", "Økonomi & Finans", "Renter"]


# ============================================================
# Model access
# ============================================================


class CompletionConfig(BaseModel):
    """Models used for plain and web-search completions."""

    model: str = "claude-haiku-4-5-20251001"
    search_model: str = "claude-haiku-4-5-20251001"
    max_tokens: int = 4096

    model_config = {"frozen": True}


# ============================================================
# Stage Configs
# ============================================================


class GenerationConfig(BaseModel):
    """Configuration for ArticleGenerator and its rate limiter."""

    timeout_seconds: float = 90.0
    temperature: float = 0.4
    language: str = "Danish"
    rate_limit: int = 50
    rate_window_minutes: float = 60.0

    model_config = {"frozen": True}


class FactCheckConfig(BaseModel):
    """Configuration for FactCheckEngine and its verdict cache."""

    search_timeout_seconds: float = 45.0
    fallback_timeout_seconds: float = 20.0
    max_searches: int = 5
    language: str = "Danish"
    cache_ttl_minutes: float = 30.0
    cache_max_entries: int = 500
    cache_evict_count: int = 100
    cache_degraded_results: bool = True

    model_config = {"frozen": True}


class CategorizationConfig(BaseModel):
    """Configuration for the discovery-time Categorizer."""

    enabled: bool = True
    timeout_seconds: float = 10.0
    cache_ttl_minutes: float = 30.0

    model_config = {"frozen": True}


class IngestionConfig(BaseModel):
    """Configuration for IngestionOrchestrator runs."""

    max_sources_per_run: int = 25
    max_articles_per_run: int = 5
    source_window_hours: float = 24.0
    dedup_window_hours: float = 48.0
    min_shared_words: int = 2
    duplicate_threshold: float = 0.6
    provider_timeout_seconds: float = 8.0
    interests: list[str] = Field(default_factory=lambda: list(DEFAULT_INTERESTS))

    model_config = {"frozen": True}


# ============================================================
# Provider Configs
# ============================================================


class ClaudeDiscoveryProviderConfig(BaseModel):
    """Configuration for ClaudeDiscoveryProvider."""

    type: Literal["claude_discovery"] = "claude_discovery"
    search_timeout_seconds: float = 45.0
    fetch_timeout_seconds: float = 120.0
    max_searches: int = 5
    language: str = "Danish"
    interests: list[str] | None = None

    model_config = {"frozen": True}


class FeedConfig(BaseModel):
    """One RSS feed."""

    name: str
    url: str
    category: Category
    sub_category: SubCategory = SubCategory.GENERAL

    model_config = {"frozen": True}


class RSSProviderConfig(BaseModel):
    """Configuration for RSSProvider."""

    type: Literal["rss"] = "rss"
    feeds: list[FeedConfig] = Field(default_factory=list)
    request_timeout_seconds: float = 5.0
    fetch_timeout_seconds: float = 8.0
    max_items_per_feed: int = 20

    model_config = {"frozen": True}


class NewsAPIProviderConfig(BaseModel):
    """Configuration for NewsAPIProvider."""

    type: Literal["newsapi"] = "newsapi"
    country: str = "dk"
    news_category: str | None = None
    category: Category = Category.DOMESTIC
    sub_category: SubCategory = SubCategory.GENERAL
    page_size: int = 20
    fetch_timeout_seconds: float = 6.0

    model_config = {"frozen": True}


ProviderConfig = Annotated[
    ClaudeDiscoveryProviderConfig | RSSProviderConfig | NewsAPIProviderConfig,
    Field(discriminator="type"),
]


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for console logging and per-run JSON records."""

    level: str = "INFO"
    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Store Config
# ============================================================


class StoreConfig(BaseModel):
    """Where sources and articles persist between runs.

    Without a ``path`` (or with an empty one) the store lives in memory and
    dies with the process.
    """

    path: str | None = None

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class FactdeskConfig(BaseModel):
    """Root configuration for factdesk."""

    completion: CompletionConfig = Field(default_factory=CompletionConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    fact_check: FactCheckConfig = Field(default_factory=FactCheckConfig)
    categorization: CategorizationConfig = Field(default_factory=CategorizationConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    providers: list[ProviderConfig] = Field(default_factory=list)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
