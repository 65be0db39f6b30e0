"""Configuration module for factdesk."""

from factdesk.config.factory import Components, create_from_config
from factdesk.config.loader import apply_overrides, get_default_config_path, load_config
from factdesk.config.models import (
    CategorizationConfig,
    ClaudeDiscoveryProviderConfig,
    CompletionConfig,
    FactCheckConfig,
    FactdeskConfig,
    FeedConfig,
    GenerationConfig,
    IngestionConfig,
    LoggingConfig,
    NewsAPIProviderConfig,
    ProviderConfig,
    RSSProviderConfig,
    StoreConfig,
)

__all__ = [
    "CategorizationConfig",
    "ClaudeDiscoveryProviderConfig",
    "Components",
    "CompletionConfig",
    "FactCheckConfig",
    "FactdeskConfig",
    "FeedConfig",
    "GenerationConfig",
    "IngestionConfig",
    "LoggingConfig",
    "NewsAPIProviderConfig",
    "ProviderConfig",
    "RSSProviderConfig",
    "StoreConfig",
    "apply_overrides",
    "create_from_config",
    "get_default_config_path",
    "load_config",
]
