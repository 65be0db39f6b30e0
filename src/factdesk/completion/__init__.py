from factdesk.completion.base import (
    SearchCompletion,
    TextCompletionService,
    WebSearchCompletionService,
)
from factdesk.completion.claude import ClaudeCompletionService, ClaudeWebSearchService

__all__ = [
    "ClaudeCompletionService",
    "ClaudeWebSearchService",
    "SearchCompletion",
    "TextCompletionService",
    "WebSearchCompletionService",
]
