from dataclasses import dataclass, field
from typing import Protocol

from factdesk.data import Usage


@dataclass(frozen=True)
class SearchCompletion:
    """Text answer from a web-search-augmented model call.

    Attributes:
        text: Concatenated text output of the model.
        citation_urls: Distinct cited URLs, in order of first appearance.
        search_call_count: Number of web searches the model performed.
        citation_titles: Page title per cited URL, where the model gave one.
    """

    text: str
    citation_urls: tuple[str, ...] = ()
    search_call_count: int = 0
    citation_titles: dict[str, str] = field(default_factory=dict)


class TextCompletionService(Protocol):
    """Interface for plain (non-search) text completion."""

    async def complete(
        self,
        system_prompt: str,
        user_content: str,
        *,
        temperature: float = 0.3,
        json_response: bool = True,
        timeout: float | None = None,
    ) -> tuple[str, Usage]:
        """Run one completion.

        Args:
            system_prompt: Instructions for the model.
            user_content: The user turn.
            temperature: Sampling temperature.
            json_response: Ask the model to answer with a single JSON object.
            timeout: Request timeout in seconds.

        Returns:
            Tuple of (response text, usage).

        Raises:
            CompletionTimeoutError: If the call exceeded ``timeout``.
            CompletionError: On any other transport or API failure.
        """
        ...


class WebSearchCompletionService(Protocol):
    """Interface for completion with live web search and citations."""

    async def complete_with_search(
        self,
        prompt: str,
        *,
        max_searches: int = 5,
        timeout: float | None = None,
    ) -> tuple[SearchCompletion, Usage]:
        """Run one search-augmented completion.

        Raises:
            CompletionTimeoutError: If the call exceeded ``timeout``.
            CompletionError: On any other transport or API failure.
        """
        ...
