"""Bounded ingestion runs: sources in, deduplicated articles out."""

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime, timedelta

from factdesk.data import (
    FailureReason,
    GeneratedArticle,
    GenerationFailure,
    IngestionSummary,
    RawSourceItem,
    RefreshSummary,
    SourceGroup,
    Usage,
    utc_now,
)
from factdesk.dedup import DuplicateGuard, SourceGrouper, describe_duplicate
from factdesk.generator import ArticleGenerator
from factdesk.providers import SourceProvider
from factdesk.ranker import InterestRanker, SourceRanker
from factdesk.run_logger import RunLogger
from factdesk.store import Store
from factdesk.url import normalize_url

logger = logging.getLogger(__name__)


def dedupe_by_url(items: list[RawSourceItem]) -> list[RawSourceItem]:
    """Keep the first item per normalized URL."""
    seen: set[str] = set()
    unique: list[RawSourceItem] = []
    for item in items:
        key = normalize_url(item.url)
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


class IngestionOrchestrator:
    """Drive providers, grouping, deduplication and generation.

    Each ``run`` is bounded: at most ``max_sources_per_run`` sources are
    considered and at most ``max_articles_per_run`` articles are created.
    Every group that was attempted has its sources marked processed exactly
    once, whatever the outcome. A rate-limited group ends the run.

    Args:
        store: Persistence for sources and articles.
        generator: Article generator.
        providers: Source providers used by ``refresh_sources``.
        ranker: Interest ranker (defaults to keyword scoring).
        grouper: Topic grouper.
        guard: Duplicate guard.
        max_sources_per_run: Cap on unprocessed sources pulled per run.
        max_articles_per_run: Cap on articles created per run.
        source_window: Only sources fetched within this window are used.
        dedup_window: Articles created within this window count as existing.
        provider_timeout: Default per-provider fetch timeout in seconds.
        provider_timeouts: Per-provider overrides, keyed by provider name.
        run_logger: Optional RunLogger for stage records.
        clock: Returns the current time.
    """

    def __init__(
        self,
        store: Store,
        generator: ArticleGenerator,
        *,
        providers: list[SourceProvider] | None = None,
        ranker: SourceRanker | None = None,
        grouper: SourceGrouper | None = None,
        guard: DuplicateGuard | None = None,
        max_sources_per_run: int = 25,
        max_articles_per_run: int = 5,
        source_window: timedelta = timedelta(hours=24),
        dedup_window: timedelta = timedelta(hours=48),
        provider_timeout: float = 8.0,
        provider_timeouts: dict[str, float] | None = None,
        run_logger: RunLogger | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._generator = generator
        self._providers = providers or []
        self._ranker = ranker or InterestRanker()
        self._grouper = grouper or SourceGrouper()
        self._guard = guard or DuplicateGuard()
        self._max_sources = max_sources_per_run
        self._max_articles = max_articles_per_run
        self._source_window = source_window
        self._dedup_window = dedup_window
        self._provider_timeout = provider_timeout
        self._provider_timeouts = provider_timeouts or {}
        self._run_logger = run_logger
        self._clock = clock

    async def refresh_sources(self) -> tuple[RefreshSummary, Usage]:
        """Fetch all providers concurrently and store their new items.

        A provider that fails or exceeds its timeout contributes nothing.
        """
        summary = RefreshSummary()
        total_usage = Usage()
        if self._run_logger:
            self._run_logger.start_run("refresh", {"providers": [p.name for p in self._providers]})

        t0 = time.monotonic()
        tasks = [
            asyncio.wait_for(
                provider.fetch(),
                timeout=self._provider_timeouts.get(provider.name, self._provider_timeout),
            )
            for provider in self._providers
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        fetch_duration = time.monotonic() - t0

        all_items: list[RawSourceItem] = []
        for provider, result in zip(self._providers, results, strict=True):
            if isinstance(result, BaseException):
                reason = "timed out" if isinstance(result, TimeoutError) else str(result)
                logger.warning("Provider %s failed: %s", provider.name, reason)
                summary.errors.append(f"{provider.name}: {reason}")
                continue
            items, usage = result
            total_usage += usage
            all_items.extend(items)
            if self._run_logger:
                self._run_logger.log_stage(
                    stage="fetch",
                    component=type(provider).__name__,
                    output_data={"item_count": len(items)},
                    usage=usage,
                    duration_seconds=fetch_duration,
                )

        unique = dedupe_by_url(all_items)
        summary.fetched = len(all_items)
        summary.unique = len(unique)
        summary.inserted = await self._store.upsert_raw_sources(unique)
        logger.info(
            "Refresh: %d fetched, %d unique, %d new", summary.fetched, summary.unique, summary.inserted
        )

        if self._run_logger:
            self._run_logger.finish_run(summary, total_usage)
        return (summary, total_usage)

    async def run(self, interests: list[str] | None = None) -> tuple[IngestionSummary, Usage]:
        """Turn unprocessed sources into articles.

        Args:
            interests: Active reader interests, used for ranking and tagging.

        Returns:
            Tuple of (summary, usage).
        """
        interests = interests or []
        summary = IngestionSummary()
        total_usage = Usage()
        now = self._clock()
        if self._run_logger:
            self._run_logger.start_run("ingestion", {"interests": interests})

        sources = await self._store.select_unprocessed_sources(
            since=now - self._source_window, limit=self._max_sources
        )
        summary.total_sources = len(sources)
        if not sources:
            logger.info("No unprocessed sources")
            return self._finish(summary, total_usage)

        since = now - self._dedup_window
        existing_titles = list(await self._store.select_recent_article_titles(since=since))
        used_urls = {
            normalize_url(url)
            for url in await self._store.select_recent_article_source_urls(since=since)
        }

        covered = [s for s in sources if normalize_url(s.url) in used_urls]
        fresh = [s for s in sources if normalize_url(s.url) not in used_urls]
        summary.fresh_sources = len(fresh)
        if covered:
            logger.info("%d sources already back existing articles", len(covered))
            await self._mark_processed([s.id for s in covered])
        if not fresh:
            return self._finish(summary, total_usage)

        t0 = time.monotonic()
        ranked = self._ranker.rank(fresh, interests)
        groups = self._grouper.group(ranked)
        summary.total_groups = len(groups)
        if self._run_logger:
            self._run_logger.log_stage(
                stage="grouping",
                component=type(self._grouper).__name__,
                input_data=[s.title for s in ranked],
                output_data=[g.ids for g in groups],
                duration_seconds=time.monotonic() - t0,
            )

        for index, group in enumerate(groups):
            if summary.generated >= self._max_articles:
                break
            new_title, usage = await self._process_group(
                index, group, interests, existing_titles, summary
            )
            total_usage += usage
            if new_title is not None:
                existing_titles.append(new_title)
            if summary.rate_limited:
                break

        logger.info(
            "Ingestion: %d generated from %d groups (%d duplicates, %d errors)",
            summary.generated,
            summary.total_groups,
            len(summary.skipped_duplicates),
            len(summary.errors),
        )
        return self._finish(summary, total_usage)

    async def _process_group(
        self,
        index: int,
        group: SourceGroup,
        interests: list[str],
        existing_titles: list[str],
        summary: IngestionSummary,
    ) -> tuple[str | None, Usage]:
        """Run guard → generator → guard → insert for one group.

        Returns:
            Tuple of (title of the inserted article or None, usage).
        """
        usage = Usage()
        t0 = time.monotonic()
        try:
            pre_check = self._guard.check(group.primary.title, existing_titles)
            if pre_check.is_dup:
                summary.skipped_duplicates.append(
                    describe_duplicate(group.primary.title, pre_check)
                )
                return (None, usage)

            result, usage = await self._generator.generate(group, interests)
            self._log_generation(group, result, usage, time.monotonic() - t0)

            if isinstance(result, GenerationFailure):
                if result.reason == FailureReason.RATE_LIMITED:
                    summary.rate_limited = True
                elif result.reason == FailureReason.STALE_SOURCES:
                    summary.skipped_stale.append(group.topic)
                else:
                    summary.errors.append(f"Group {index}: {result.reason}: {result.message}")
                return (None, usage)

            post_check = self._guard.check(result.title, existing_titles)
            if post_check.is_dup:
                summary.skipped_duplicates.append(
                    describe_duplicate(result.title, post_check, generated=True)
                )
                return (None, usage)

            await self._store.insert_article(result)
            summary.articles.append(result.title)
            summary.generated += 1
            return (result.title, usage)
        except Exception as e:
            logger.warning("Group %d (%r) failed: %s", index, group.topic, e, exc_info=True)
            summary.errors.append(f"Group {index}: {e}")
            return (None, usage)
        finally:
            await self._mark_processed(group.ids)

    async def _mark_processed(self, ids: list[str]) -> None:
        try:
            await self._store.mark_processed(ids)
        except Exception:
            logger.warning("Could not mark %d sources processed", len(ids), exc_info=True)

    def _log_generation(
        self,
        group: SourceGroup,
        result: GeneratedArticle | GenerationFailure,
        usage: Usage,
        duration: float,
    ) -> None:
        if not self._run_logger:
            return
        self._run_logger.log_stage(
            stage="generation",
            component=type(self._generator).__name__,
            input_data={"topic": group.topic, "source_ids": group.ids},
            output_data=result,
            usage=usage,
            duration_seconds=duration,
        )

    def _finish(
        self, summary: IngestionSummary, usage: Usage
    ) -> tuple[IngestionSummary, Usage]:
        if self._run_logger:
            self._run_logger.finish_run(summary, usage)
        return (summary, usage)
