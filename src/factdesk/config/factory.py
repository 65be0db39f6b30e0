"""Factory functions to create components from configuration."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from factdesk.cache import TtlCache
from factdesk.categorize import Categorizer
from factdesk.completion import (
    ClaudeCompletionService,
    ClaudeWebSearchService,
    TextCompletionService,
    WebSearchCompletionService,
)
from factdesk.config.models import (
    ClaudeDiscoveryProviderConfig,
    CompletionConfig,
    FactdeskConfig,
    NewsAPIProviderConfig,
    ProviderConfig,
    RSSProviderConfig,
    StoreConfig,
)
from factdesk.dedup import DuplicateGuard, SourceGrouper
from factdesk.errors import ServiceUnavailableError
from factdesk.factcheck import FactCheckEngine
from factdesk.generator import ArticleGenerator
from factdesk.pipeline import IngestionOrchestrator
from factdesk.providers import (
    ClaudeDiscoveryProvider,
    FeedSource,
    NewsAPIProvider,
    RSSProvider,
    SourceProvider,
)
from factdesk.rate_limit import RateLimiter
from factdesk.ranker import InterestRanker
from factdesk.run_logger import RunLogger
from factdesk.store import InMemoryStore, JsonFileStore, Store

logger = logging.getLogger(__name__)


@dataclass
class Components:
    """Everything the CLI needs, built from one config.

    ``orchestrator`` is None when no text completion service is available,
    since articles cannot be generated without one.
    """

    store: Store
    fact_checker: FactCheckEngine
    orchestrator: IngestionOrchestrator | None
    run_logger: RunLogger | None
    interests: list[str]


def create_completion_services(
    config: CompletionConfig,
) -> tuple[TextCompletionService | None, WebSearchCompletionService | None]:
    """Create the completion services, or None for each one lacking credentials."""
    try:
        text: TextCompletionService | None = ClaudeCompletionService(
            model=config.model, max_tokens=config.max_tokens
        )
        search: WebSearchCompletionService | None = ClaudeWebSearchService(
            model=config.search_model, max_tokens=config.max_tokens
        )
    except ServiceUnavailableError as e:
        logger.warning("Completion services unavailable: %s", e)
        return (None, None)
    return (text, search)


def create_provider(
    config: ProviderConfig,
    *,
    search_service: WebSearchCompletionService | None,
    categorizer: Categorizer | None,
    interests: list[str],
) -> SourceProvider | None:
    """Create a source provider from config.

    Returns None if the provider's credentials or services are missing.
    """
    if isinstance(config, ClaudeDiscoveryProviderConfig):
        if search_service is None:
            logger.warning("Skipping claude_discovery provider: no web search service")
            return None
        return ClaudeDiscoveryProvider(
            search_service,
            categorizer=categorizer,
            interests=config.interests if config.interests is not None else interests,
            timeout=config.search_timeout_seconds,
            max_searches=config.max_searches,
            language=config.language,
        )
    if isinstance(config, RSSProviderConfig):
        feeds = [
            FeedSource(
                name=feed.name,
                url=feed.url,
                category=feed.category,
                sub_category=feed.sub_category,
            )
            for feed in config.feeds
        ]
        return RSSProvider(
            feeds,
            timeout=config.request_timeout_seconds,
            max_items_per_feed=config.max_items_per_feed,
        )
    if isinstance(config, NewsAPIProviderConfig):
        try:
            return NewsAPIProvider(
                country=config.country,
                news_category=config.news_category,
                category=config.category,
                sub_category=config.sub_category,
                page_size=config.page_size,
            )
        except ServiceUnavailableError as e:
            logger.warning("Skipping newsapi provider: %s", e)
            return None
    msg = f"Unknown provider config type: {type(config)}"
    raise ValueError(msg)


def create_store(config: StoreConfig) -> Store:
    """A JsonFileStore when a path is configured, else an InMemoryStore."""
    if config.path:
        logger.debug("Using JSON store at %s", config.path)
        return JsonFileStore(config.path)
    return InMemoryStore()


def create_from_config(
    config: FactdeskConfig,
    *,
    store: Store | None = None,
) -> Components:
    """Create all components from root config.

    Args:
        config: Root configuration. CLI overrides are applied by the loader.
        store: Store to use instead of the one ``config.store`` describes.

    Returns:
        The assembled Components.
    """
    run_logger: RunLogger | None = None
    if config.logging.enabled:
        run_logger = RunLogger(log_dir=Path(config.logging.log_dir))

    if store is None:
        store = create_store(config.store)
    text, search = create_completion_services(config.completion)
    interests = list(config.ingestion.interests)

    fc = config.fact_check
    fact_checker = FactCheckEngine(
        search,
        text,
        store=store,
        cache=TtlCache(
            ttl_seconds=fc.cache_ttl_minutes * 60,
            max_entries=fc.cache_max_entries,
            evict_count=fc.cache_evict_count,
        ),
        search_timeout=fc.search_timeout_seconds,
        fallback_timeout=fc.fallback_timeout_seconds,
        max_searches=fc.max_searches,
        cache_degraded_results=fc.cache_degraded_results,
        language=fc.language,
    )

    orchestrator: IngestionOrchestrator | None = None
    if text is not None:
        categorizer: Categorizer | None = None
        if config.categorization.enabled:
            categorizer = Categorizer(
                text,
                cache=TtlCache(ttl_seconds=config.categorization.cache_ttl_minutes * 60),
                timeout=config.categorization.timeout_seconds,
            )

        providers: list[SourceProvider] = []
        provider_timeouts: dict[str, float] = {}
        for provider_config in config.providers:
            provider = create_provider(
                provider_config,
                search_service=search,
                categorizer=categorizer,
                interests=interests,
            )
            if provider is not None:
                providers.append(provider)
                provider_timeouts[provider.name] = provider_config.fetch_timeout_seconds

        gen = config.generation
        ing = config.ingestion
        orchestrator = IngestionOrchestrator(
            store,
            ArticleGenerator(
                text,
                RateLimiter(gen.rate_limit, gen.rate_window_minutes * 60),
                timeout=gen.timeout_seconds,
                temperature=gen.temperature,
                language=gen.language,
            ),
            providers=providers,
            ranker=InterestRanker(),
            grouper=SourceGrouper(ing.min_shared_words),
            guard=DuplicateGuard(ing.duplicate_threshold),
            max_sources_per_run=ing.max_sources_per_run,
            max_articles_per_run=ing.max_articles_per_run,
            source_window=timedelta(hours=ing.source_window_hours),
            dedup_window=timedelta(hours=ing.dedup_window_hours),
            provider_timeout=ing.provider_timeout_seconds,
            provider_timeouts=provider_timeouts,
            run_logger=run_logger,
        )

    return Components(
        store=store,
        fact_checker=fact_checker,
        orchestrator=orchestrator,
        run_logger=run_logger,
        interests=interests,
    )
