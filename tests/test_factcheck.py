"""Tests for FactCheckEngine."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import make_article

from factdesk.completion import SearchCompletion
from factdesk.data import Usage, Verdict, VerificationMethod
from factdesk.errors import ArticleNotFoundError, CompletionError, CompletionTimeoutError
from factdesk.factcheck import FALLBACK_DISCLAIMER, FactCheckEngine, fact_check_cache_key
from factdesk.store import InMemoryStore

VERDICT = {
    "score": 82,
    "summary": "Påstandene holder.",
    "claims": [
        {"text": "Aktien steg 5%", "verdict": "mostly_true", "explanation": "Ifølge Børsen"},
        {"text": "", "verdict": "true"},
        "not a claim",
    ],
}


def _search_service(
    completion: SearchCompletion | None = None, *, side_effect: Exception | None = None
) -> MagicMock:
    service = MagicMock()
    service.complete_with_search = AsyncMock(
        return_value=(
            completion
            or SearchCompletion(
                text=json.dumps(VERDICT),
                citation_urls=("https://www.borsen.dk/a", "https://dr.dk/b", "https://borsen.dk/c"),
                search_call_count=2,
                citation_titles={"https://dr.dk/b": "DR artikel"},
            ),
            Usage(),
        ),
        side_effect=side_effect,
    )
    return service


def _completion_service(
    text: str | None = None, *, side_effect: Exception | None = None
) -> MagicMock:
    service = MagicMock()
    service.complete = AsyncMock(
        return_value=(text or json.dumps({"score": 60, "summary": "Plausibelt."}), Usage()),
        side_effect=side_effect,
    )
    return service


async def test_web_search_verdict() -> None:
    engine = FactCheckEngine(_search_service(), _completion_service())

    result, _ = await engine.check("Novo stiger", "Aktien steg 5%", "Børsen")

    assert result.verification_method == VerificationMethod.WEB_SEARCH
    assert result.score == 82
    assert result.summary == "Påstandene holder."
    assert result.sources == ("borsen.dk", "dr.dk")
    assert result.sources_consulted == 3
    assert [link.title for link in result.source_links] == [None, "DR artikel", None]
    assert len(result.claims) == 1
    assert result.claims[0].verdict == Verdict.MOSTLY_TRUE
    assert len(result.claims[0].claim_sources) == 3


async def test_second_call_is_served_from_cache() -> None:
    search = _search_service()
    engine = FactCheckEngine(search, _completion_service())

    first, _ = await engine.check("Novo stiger!", "x", "Børsen")
    second, usage = await engine.check("novo  stiger", "y", "Børsen")

    assert second == first
    assert usage.api_calls == []
    assert search.complete_with_search.await_count == 1


async def test_cache_key_includes_source() -> None:
    search = _search_service()
    engine = FactCheckEngine(search, _completion_service())

    await engine.check("Novo stiger", source="Børsen")
    await engine.check("Novo stiger", source="DR")

    assert search.complete_with_search.await_count == 2
    assert fact_check_cache_key("Novo stiger!", "DR") == "novo stiger|DR"


async def test_force_bypasses_cache() -> None:
    search = _search_service()
    engine = FactCheckEngine(search, _completion_service())

    await engine.check("Novo stiger")
    await engine.check("Novo stiger", force=True)

    assert search.complete_with_search.await_count == 2


@pytest.mark.parametrize(
    "error", [CompletionError("down"), CompletionTimeoutError("slow"), ValueError("odd")]
)
async def test_search_failure_falls_back_to_ai_only(error: Exception) -> None:
    completion = _completion_service()
    engine = FactCheckEngine(_search_service(side_effect=error), completion)

    result, _ = await engine.check("Novo stiger", "Aktien steg")

    assert result.verification_method == VerificationMethod.AI_ONLY
    assert result.score == 60
    assert result.sources_consulted == 0
    assert result.source_links == ()
    assert FALLBACK_DISCLAIMER in result.summary
    assert completion.complete.await_args.kwargs["timeout"] == 20.0


async def test_unparseable_search_answer_falls_back() -> None:
    search = _search_service(SearchCompletion(text="Jeg kunne ikke finde noget."))
    engine = FactCheckEngine(search, _completion_service())

    result, _ = await engine.check("Novo stiger")

    assert result.verification_method == VerificationMethod.AI_ONLY
    assert result.score == 60


async def test_zero_citations_relabelled_as_ai_only() -> None:
    search = _search_service(SearchCompletion(text=json.dumps(VERDICT)))
    completion = _completion_service()
    engine = FactCheckEngine(search, completion)

    result, _ = await engine.check("Novo stiger")

    assert result.verification_method == VerificationMethod.AI_ONLY
    assert result.score == 82
    assert result.sources_consulted == 0
    assert result.summary.endswith(FALLBACK_DISCLAIMER)
    completion.complete.assert_not_awaited()


async def test_both_paths_failing_returns_unknown_and_is_not_cached() -> None:
    search = _search_service(side_effect=CompletionError("search down"))
    completion = _completion_service(side_effect=CompletionError("fallback down"))
    engine = FactCheckEngine(search, completion)

    result, _ = await engine.check("Novo stiger")
    await engine.check("Novo stiger")

    assert result.score == -1
    assert result.failed
    assert "search down" in result.summary and "fallback down" in result.summary
    assert search.complete_with_search.await_count == 2


async def test_no_services_configured() -> None:
    engine = FactCheckEngine(None, None)

    result, usage = await engine.check("Novo stiger")

    assert result.score == -1
    assert "unavailable" in result.summary
    assert usage.api_calls == []


async def test_search_only_without_fallback_fails_cleanly() -> None:
    engine = FactCheckEngine(_search_service(side_effect=CompletionError("down")), None)

    result, _ = await engine.check("Novo stiger")

    assert result.score == -1
    assert "no fallback completion service" in result.summary


async def test_degraded_results_not_cached_when_disabled() -> None:
    completion = _completion_service()
    engine = FactCheckEngine(None, completion, cache_degraded_results=False)

    await engine.check("Novo stiger")
    await engine.check("Novo stiger")

    assert completion.complete.await_count == 2


class TestWriteBack:
    async def test_check_article_persists_verdict(self) -> None:
        store = InMemoryStore()
        article = make_article("Novo stiger efter regnskab")
        await store.insert_article(article)
        engine = FactCheckEngine(_search_service(), None, store=store)

        result, _ = await engine.check_article(article.id)

        updated = await store.get_article(article.id)
        assert updated is not None
        assert updated.fact_score == 82
        assert updated.fact_details == result
        assert updated.updated_at >= article.updated_at

    async def test_cache_hit_still_writes_back(self) -> None:
        store = InMemoryStore()
        article = make_article("Novo stiger efter regnskab")
        await store.insert_article(article)
        search = _search_service()
        engine = FactCheckEngine(search, None, store=store)

        await engine.check(article.title, source="Example")
        await engine.check(article.title, source="Example", article_id=article.id)

        updated = await store.get_article(article.id)
        assert updated is not None and updated.fact_score == 82
        assert search.complete_with_search.await_count == 1

    async def test_failed_check_is_not_written_back(self) -> None:
        store = InMemoryStore()
        article = make_article()
        await store.insert_article(article)
        engine = FactCheckEngine(None, None, store=store)

        await engine.check(article.title, article_id=article.id)

        unchanged = await store.get_article(article.id)
        assert unchanged is not None and unchanged.fact_score == -1

    async def test_store_error_does_not_fail_the_check(self) -> None:
        store = MagicMock()
        store.update_article_fact_fields = AsyncMock(side_effect=RuntimeError("db down"))
        engine = FactCheckEngine(_search_service(), None, store=store)

        result, _ = await engine.check("Novo stiger", article_id="a1")

        assert result.score == 82

    async def test_check_article_unknown_id(self) -> None:
        engine = FactCheckEngine(_search_service(), None, store=InMemoryStore())

        with pytest.raises(ArticleNotFoundError):
            await engine.check_article("missing")
