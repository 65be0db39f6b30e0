"""Tests for RunLogger and to_jsonable."""

import json
from datetime import UTC, datetime
from pathlib import Path

from factdesk.data import (
    APICallUsage,
    Category,
    FailureReason,
    GenerationFailure,
    IngestionSummary,
    Usage,
)
from factdesk.run_logger import RunLogger, to_jsonable

# -- to_jsonable tests --


def test_primitives_and_containers() -> None:
    assert to_jsonable(None) is None
    assert to_jsonable(42) == 42
    assert to_jsonable([1, "two", None]) == [1, "two", None]
    assert to_jsonable({"a": (1, 2)}) == {"a": [1, 2]}


def test_enum_datetime_path() -> None:
    assert to_jsonable(Category.SOFT_NEWS) == "soft-news"
    assert to_jsonable(datetime(2026, 3, 2, tzinfo=UTC)) == "2026-03-02T00:00:00+00:00"
    assert to_jsonable(Path("logs/x.json")) == "logs/x.json"


def test_dataclass_without_to_dict_is_flattened() -> None:
    result = to_jsonable(GenerationFailure(FailureReason.STALE_SOURCES, "old"))
    assert result == {"reason": "stale_sources", "message": "old"}


def test_to_dict_is_preferred() -> None:
    summary = IngestionSummary(generated=1, articles=["A"])
    assert to_jsonable(summary) == summary.to_dict()


def test_usage_includes_totals() -> None:
    usage = Usage(
        api_calls=[
            APICallUsage(model="m", input_tokens=100, output_tokens=50, web_searches=2),
            APICallUsage(model="m", input_tokens=10, output_tokens=5),
        ],
        provider_requests=3,
    )
    result = to_jsonable(usage)
    assert result["input_tokens"] == 110
    assert result["output_tokens"] == 55
    assert result["web_searches"] == 2
    assert result["provider_requests"] == 3
    assert len(result["api_calls"]) == 2


# -- RunLogger tests --


def test_calls_outside_a_run_are_ignored(tmp_path: Path) -> None:
    run_logger = RunLogger(tmp_path)
    run_logger.log_stage("grouping", "SourceGrouper", duration_seconds=0.1)
    assert run_logger.finish_run({}) is None
    assert list(tmp_path.iterdir()) == []


def test_writes_run_record(tmp_path: Path) -> None:
    run_logger = RunLogger(tmp_path / "logs")
    run_logger.start_run("refresh", {"providers": ["rss"]})
    run_logger.log_stage(
        "fetch",
        "RSSProvider",
        output_data={"item_count": 4},
        usage=Usage(provider_requests=2),
        duration_seconds=0.123456,
    )
    path = run_logger.finish_run({"inserted": 4}, Usage(provider_requests=2))

    assert path is not None and path == run_logger.last_log_path
    assert path.name.startswith("refresh_")
    data = json.loads(path.read_text())
    assert data["params"] == {"providers": ["rss"]}
    assert data["stages"][0]["output"] == {"item_count": 4}
    assert data["stages"][0]["input"] is None
    assert data["stages"][0]["duration_seconds"] == 0.1235
    assert data["result"] == {"inserted": 4}
    assert data["total_usage"]["provider_requests"] == 2
    assert data["completed_at"] is not None


def test_each_run_gets_its_own_file(tmp_path: Path) -> None:
    run_logger = RunLogger(tmp_path)
    run_logger.start_run("ingestion", {})
    first = run_logger.finish_run({})
    run_logger.start_run("ingestion", {})
    second = run_logger.finish_run({})

    assert first != second
    assert len(list(tmp_path.iterdir())) == 2
    # A finished run is not written twice.
    assert run_logger.finish_run({}) is None
