"""Shared fixtures and builders for factdesk tests."""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from factdesk.data import (
    ArticleSource,
    Category,
    GeneratedArticle,
    RawSourceItem,
    SubCategory,
    Usage,
)
from factdesk.url import source_id_for

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


def make_item(
    title: str,
    *,
    category: Category = Category.DOMESTIC,
    url: str | None = None,
    description: str = "",
    fetched_at: datetime | None = None,
    sub_category: SubCategory = SubCategory.GENERAL,
) -> RawSourceItem:
    """Build a RawSourceItem with a URL derived from the title."""
    url = url or "https://example.com/" + title.lower().replace(" ", "-")
    return RawSourceItem(
        id=source_id_for(url),
        title=title,
        url=url,
        source_name="Example",
        category=category,
        sub_category=sub_category,
        description=description,
        published_at=fetched_at or NOW,
        fetched_at=fetched_at or NOW,
    )


def make_article(
    title: str = "Existing article",
    *,
    source_url: str = "https://example.com/source",
    created_at: datetime | None = None,
) -> GeneratedArticle:
    return GeneratedArticle(
        id=str(uuid.uuid4()),
        title=title,
        summary="Summary",
        body="Body " * 30,
        category=Category.DOMESTIC,
        sub_category=SubCategory.GENERAL,
        sources=(ArticleSource(title=title, url=source_url, source_name="Example"),),
        created_at=created_at or NOW,
        updated_at=created_at or NOW,
    )


def make_usage_mock(input_tokens: int = 100, output_tokens: int = 50, searches: int = 0) -> MagicMock:
    """Mock of an Anthropic ``response.usage`` object."""
    usage = MagicMock()
    usage.input_tokens = input_tokens
    usage.output_tokens = output_tokens
    usage.cache_creation_input_tokens = 0
    usage.cache_read_input_tokens = 0
    if searches:
        usage.server_tool_use.web_search_requests = searches
    else:
        usage.server_tool_use = None
    return usage


def text_block(text: str, citations: list[MagicMock] | None = None) -> MagicMock:
    block = MagicMock()
    block.type = "text"
    block.text = text
    block.citations = citations
    return block


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def empty_usage() -> Usage:
    return Usage()


@pytest.fixture
def an_hour_ago() -> datetime:
    return NOW - timedelta(hours=1)
