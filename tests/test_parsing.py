"""Tests for model-output parsing helpers."""

import math
from datetime import UTC, datetime

import pytest

from factdesk.data import CATEGORY_ALIASES, Category, Verdict
from factdesk.errors import MalformedResponseError
from factdesk.parsing import (
    FieldRule,
    apply_rules,
    coerce_bool,
    coerce_datetime,
    coerce_enum,
    coerce_score,
    coerce_str,
    coerce_str_list,
    extract_json,
)


class TestExtractJson:
    def test_plain_object(self) -> None:
        assert extract_json('{"score": 80}') == {"score": 80}

    def test_fenced_block(self) -> None:
        text = 'Here you go:\n```json\n{"title": "Hej"}\n```\nDone.'
        assert extract_json(text) == {"title": "Hej"}

    def test_unlabelled_fence(self) -> None:
        assert extract_json('```\n{"a": 1}\n```') == {"a": 1}

    def test_outermost_braces_in_prose(self) -> None:
        text = 'Based on my research {"score": 55, "claims": [{"claim": "x"}]} hope this helps'
        assert extract_json(text) == {"score": 55, "claims": [{"claim": "x"}]}

    def test_render_tags_are_stripped(self) -> None:
        text = '<cite:render type="x">{"bogus": </cite:render>{"score": 1}'
        assert extract_json(text) == {"score": 1}

    @pytest.mark.parametrize("text", [None, "", "   ", "no json here", "[1, 2, 3]", "{broken"])
    def test_unparseable_raises(self, text: str | None) -> None:
        with pytest.raises(MalformedResponseError):
            extract_json(text)


class TestCoercion:
    def test_enum_case_insensitive(self) -> None:
        assert coerce_enum("TRUE", Verdict, Verdict.UNVERIFIED) == Verdict.TRUE

    def test_enum_separator_variants(self) -> None:
        assert coerce_enum("mostly_true", Verdict, Verdict.UNVERIFIED) == Verdict.MOSTLY_TRUE

    def test_enum_alias(self) -> None:
        assert coerce_enum("Danmark", Category, Category.GLOBAL, CATEGORY_ALIASES) == Category.DOMESTIC

    @pytest.mark.parametrize("value", [None, 3, "banana"])
    def test_enum_fallback(self, value: object) -> None:
        assert coerce_enum(value, Verdict, Verdict.UNVERIFIED) == Verdict.UNVERIFIED

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(85, 85), (250, 100), (-5, 0), ("72", 72), (66.6, 67), ("banana", 70), (None, 70),
         (True, 70), (math.nan, 70)],
    )
    def test_score(self, value: object, expected: int) -> None:
        assert coerce_score(value, 70) == expected

    def test_str(self) -> None:
        assert coerce_str("  hej ") == "hej"
        assert coerce_str("   ", "fallback") == "fallback"
        assert coerce_str(42, "fallback") == "fallback"

    def test_str_list(self) -> None:
        assert coerce_str_list(["a", " ", 3, " b "]) == ["a", "b"]
        assert coerce_str_list("a") == []

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(True, True), ("yes", True), ("false", False), (1, True), (0, False), (None, False)],
    )
    def test_bool(self, value: object, expected: bool) -> None:
        assert coerce_bool(value) is expected

    def test_datetime(self) -> None:
        default = datetime(2000, 1, 1, tzinfo=UTC)
        assert coerce_datetime("2026-03-02T10:00:00Z", default) == datetime(2026, 3, 2, 10, tzinfo=UTC)
        assert coerce_datetime("2026-03-02T10:00:00", default).tzinfo is UTC
        assert coerce_datetime("yesterday", default) == default
        assert coerce_datetime(None, default) == default


def test_apply_rules_renames_and_coerces() -> None:
    rules = [
        FieldRule("score", lambda v: coerce_score(v, 70), target="fact_score"),
        FieldRule("title", lambda v: coerce_str(v, "Untitled")),
    ]
    assert apply_rules({"score": "banana"}, rules) == {"fact_score": 70, "title": "Untitled"}
