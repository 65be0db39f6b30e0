from factdesk.providers.base import SourceProvider
from factdesk.providers.discovery import CORE_SEARCHES, ClaudeDiscoveryProvider, DiscoverySearch
from factdesk.providers.newsapi import NewsAPIProvider
from factdesk.providers.rss import FeedSource, RSSProvider

__all__ = [
    "CORE_SEARCHES",
    "ClaudeDiscoveryProvider",
    "DiscoverySearch",
    "FeedSource",
    "NewsAPIProvider",
    "RSSProvider",
    "SourceProvider",
]
