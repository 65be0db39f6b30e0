"""factdesk: news ingestion, article synthesis and fact verification."""

from factdesk.cache import TtlCache
from factdesk.categorize import Categorizer
from factdesk.completion import (
    ClaudeCompletionService,
    ClaudeWebSearchService,
    SearchCompletion,
    TextCompletionService,
    WebSearchCompletionService,
)
from factdesk.config import FactdeskConfig, create_from_config, load_config
from factdesk.data import (
    Category,
    FactCheckResult,
    GeneratedArticle,
    GenerationFailure,
    IngestionSummary,
    RawSourceItem,
    SourceGroup,
    SubCategory,
    Usage,
)
from factdesk.dedup import DuplicateGuard, SourceGrouper, group_sources, is_duplicate
from factdesk.factcheck import FactCheckEngine
from factdesk.generator import ArticleGenerator
from factdesk.pipeline import IngestionOrchestrator
from factdesk.providers import (
    ClaudeDiscoveryProvider,
    NewsAPIProvider,
    RSSProvider,
    SourceProvider,
)
from factdesk.ranker import InterestRanker, SourceRanker, prioritize
from factdesk.rate_limit import RateLimiter
from factdesk.store import InMemoryStore, JsonFileStore, Store
from factdesk.text import jaccard, normalize_title, significant_words

__all__ = [
    # Models
    "Category",
    "FactCheckResult",
    "GeneratedArticle",
    "GenerationFailure",
    "IngestionSummary",
    "RawSourceItem",
    "SourceGroup",
    "SubCategory",
    "Usage",
    # Functions
    "group_sources",
    "is_duplicate",
    "jaccard",
    "normalize_title",
    "prioritize",
    "significant_words",
    # Protocols
    "SourceProvider",
    "SourceRanker",
    "Store",
    "TextCompletionService",
    "WebSearchCompletionService",
    # Completion
    "ClaudeCompletionService",
    "ClaudeWebSearchService",
    "SearchCompletion",
    # Components
    "ArticleGenerator",
    "Categorizer",
    "DuplicateGuard",
    "FactCheckEngine",
    "IngestionOrchestrator",
    "InterestRanker",
    "RateLimiter",
    "SourceGrouper",
    "TtlCache",
    # Providers
    "ClaudeDiscoveryProvider",
    "NewsAPIProvider",
    "RSSProvider",
    # Stores
    "InMemoryStore",
    "JsonFileStore",
    # Config
    "FactdeskConfig",
    "create_from_config",
    "load_config",
]
