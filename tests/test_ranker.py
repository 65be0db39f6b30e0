"""Tests for InterestRanker."""

from conftest import make_item

from factdesk.ranker import InterestRanker, build_keyword_map, prioritize, score_item


def test_items_matching_more_interests_rank_first() -> None:
    plain = make_item("Storm rammer Jylland")
    tesla = make_item("Tesla sænker prisen på Model Y")
    both = make_item("Tesla satser på kunstig intelligens i nye biler")

    ranked = InterestRanker().rank([plain, tesla, both], ["Tesla", "AI"])

    assert ranked == [both, tesla, plain]


def test_ties_keep_discovery_order() -> None:
    a = make_item("Vestas vinder ordre")
    b = make_item("Storm rammer Jylland")
    c = make_item("Ørsted bygger ny vindmøllepark")

    assert prioritize([a, b, c], ["Grøn Energi"]) == [a, c, b]


def test_description_counts_toward_score() -> None:
    item = make_item("Ny rapport", description="Nationalbanken hæver renten")
    assert score_item(item, build_keyword_map(["Renter"])) == 1


def test_unknown_interest_uses_its_name_as_keyword() -> None:
    keyword_map = build_keyword_map(["Rumfart"])
    assert keyword_map == {"Rumfart": ["rumfart"]}
    assert score_item(make_item("Dansk rumfart får nyt budget"), keyword_map) == 1


def test_no_interests_returns_copy_in_original_order() -> None:
    items = [make_item("B nyhed"), make_item("A nyhed")]
    ranked = prioritize(items, [])
    assert ranked == items
    assert ranked is not items


def test_short_keywords_do_not_match_inside_words() -> None:
    # "ai" must not fire on "maine" or "said"
    item = make_item("Maine officials said nothing")
    assert score_item(item, build_keyword_map(["AI"])) == 0


def test_keyword_at_start_of_title_matches() -> None:
    item = make_item("AI overtager kundeservice i danske banker")
    assert score_item(item, build_keyword_map(["AI"])) == 1


def test_keyword_at_end_of_description_matches() -> None:
    item = make_item("Ny rapport", description="Bankerne satser på AI")
    assert score_item(item, build_keyword_map(["AI"])) == 1
