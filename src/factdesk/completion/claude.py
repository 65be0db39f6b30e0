"""Completion services backed by the Anthropic Messages API."""

import logging
import os
from typing import Any

import anthropic

from factdesk.completion.base import SearchCompletion
from factdesk.data import APICallUsage, Usage
from factdesk.errors import CompletionError, CompletionTimeoutError, ServiceUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"

JSON_ONLY_INSTRUCTION = (
    "\n\nRespond ONLY with a single JSON object (no markdown fences, no commentary)."
)


def _resolve_client(api_key: str | None) -> anthropic.AsyncAnthropic:
    resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
    if not resolved_key:
        raise ServiceUnavailableError("CLAUDE_API_KEY is not configured")
    return anthropic.AsyncAnthropic(api_key=resolved_key)


def _usage_from_response(response: Any, model: str) -> Usage:
    """Build a Usage record from a Messages API response."""
    web_searches = 0
    server_tool_use = getattr(response.usage, "server_tool_use", None)
    if server_tool_use is not None:
        web_searches = getattr(server_tool_use, "web_search_requests", 0) or 0

    return Usage(
        api_calls=[
            APICallUsage(
                model=model,
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
                cache_creation_input_tokens=getattr(
                    response.usage, "cache_creation_input_tokens", 0
                )
                or 0,
                cache_read_input_tokens=getattr(response.usage, "cache_read_input_tokens", 0)
                or 0,
                web_searches=web_searches,
            ),
        ],
    )


def _response_text(response: Any) -> str:
    return "".join(block.text for block in response.content if block.type == "text")


class ClaudeCompletionService:
    """Plain text completion with Claude.

    Args:
        model: Anthropic model ID to use.
        api_key: API key (defaults to CLAUDE_API_KEY env var).
        max_tokens: Output token cap per call.

    Raises:
        ServiceUnavailableError: If no API key is available.
    """

    def __init__(
        self,
        *,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        max_tokens: int = 4096,
    ) -> None:
        self._client = _resolve_client(api_key)
        self._model = model
        self._max_tokens = max_tokens

    async def complete(
        self,
        system_prompt: str,
        user_content: str,
        *,
        temperature: float = 0.3,
        json_response: bool = True,
        timeout: float | None = None,
    ) -> tuple[str, Usage]:
        system = system_prompt + JSON_ONLY_INSTRUCTION if json_response else system_prompt
        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "system": system,
            "temperature": temperature,
            "messages": [{"role": "user", "content": user_content}],
        }
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await self._client.messages.create(**kwargs)
        except anthropic.APITimeoutError as e:
            raise CompletionTimeoutError(f"Completion timed out after {timeout}s") from e
        except anthropic.APIError as e:
            raise CompletionError(f"Completion failed: {e}") from e

        return (_response_text(response), _usage_from_response(response, self._model))


class ClaudeWebSearchService:
    """Search-augmented completion using Claude's server-side web search tool.

    Citations are read from the ``citations`` attached to text blocks, so
    only pages the model actually cites are reported, not every search hit.

    Note: Web search must be enabled in your Anthropic Console settings.

    Args:
        model: Anthropic model ID to use.
        api_key: API key (defaults to CLAUDE_API_KEY env var).
        max_tokens: Output token cap per call.

    Raises:
        ServiceUnavailableError: If no API key is available.
    """

    def __init__(
        self,
        *,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        max_tokens: int = 4096,
    ) -> None:
        self._client = _resolve_client(api_key)
        self._model = model
        self._max_tokens = max_tokens

    async def complete_with_search(
        self,
        prompt: str,
        *,
        max_searches: int = 5,
        timeout: float | None = None,
    ) -> tuple[SearchCompletion, Usage]:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "tools": [
                {
                    "type": "web_search_20250305",
                    "name": "web_search",
                    "max_uses": max_searches,
                }
            ],
            "messages": [{"role": "user", "content": prompt}],
        }
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await self._client.messages.create(**kwargs)
        except anthropic.APITimeoutError as e:
            raise CompletionTimeoutError(f"Web search timed out after {timeout}s") from e
        except anthropic.APIError as e:
            raise CompletionError(f"Web search failed: {e}") from e

        usage = _usage_from_response(response, self._model)

        urls: list[str] = []
        titles: dict[str, str] = {}
        search_calls = 0
        for block in response.content:
            if block.type == "server_tool_use":
                search_calls += 1
            if block.type != "text":
                continue
            for citation in getattr(block, "citations", None) or []:
                url = getattr(citation, "url", None)
                if not url or url in urls:
                    continue
                urls.append(url)
                title = getattr(citation, "title", None)
                if title:
                    titles[url] = title

        completion = SearchCompletion(
            text=_response_text(response),
            citation_urls=tuple(urls),
            search_call_count=search_calls or usage.web_searches,
            citation_titles=titles,
        )
        logger.debug(
            "Web search completion: %d searches, %d citations",
            completion.search_call_count,
            len(urls),
        )
        return (completion, usage)
