"""Tests for URL helpers."""

import pytest

from factdesk.url import extract_domain, normalize_url, source_id_for


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://www.dr.dk/nyheder/indland", "dr.dk"),
        ("https://Borsen.DK/a", "borsen.dk"),
        ("not a url", "Unknown"),
    ],
)
def test_extract_domain(url: str, expected: str) -> None:
    assert extract_domain(url) == expected


def test_normalize_url() -> None:
    assert normalize_url("  https://DR.dk/Nyheder/ ") == "https://dr.dk/nyheder"


def test_source_id_is_stable_across_url_variants() -> None:
    a = source_id_for("https://dr.dk/nyheder/")
    b = source_id_for("HTTPS://DR.DK/NYHEDER")
    assert a == b
    assert len(a) == 16
