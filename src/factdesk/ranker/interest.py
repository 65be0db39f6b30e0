"""Interest-based prioritization of raw sources.

Each interest maps to a keyword list; an item scores one point per interest
with at least one keyword in its title or description. Sorting is stable, so
ties keep discovery order.
"""

import logging

from factdesk.data import RawSourceItem

logger = logging.getLogger(__name__)

INTEREST_KEYWORDS: dict[str, list[str]] = {
    "Tesla": ["tesla", "elon musk", "model y", "model 3", "cybertruck"],
    "AI": [" ai ", "ai-", "kunstig intelligens", "artificial intelligence", "chatgpt", "openai", "machine learning"],
    "Grøn Energi": ["grøn energi", "vindmølle", "solcelle", "vedvarende", "renewable", "ørsted", "vestas"],
    "Økonomi & Finans": ["økonomi", "finans", "aktie", "børs", "inflation", "bnp", "økonomisk"],
    "Renter": ["rente", "nationalbanken", "ecb", "federal reserve", "boligrente", "realkredit"],
    "Politik": ["regering", "folketing", "minister", "valg", "parti", "politik"],
    "Sundhed": ["sundhed", "hospital", "læge", "sygdom", "medicin", "novo nordisk", "sundhedsvæsen"],
    "Tech": ["tech", "teknologi", "apple", "google", "microsoft", "software", "startup"],
    "Klima": ["klima", "co2", "udledning", "klimaforandring", "climate", "global opvarmning"],
    "Krypto": ["krypto", "bitcoin", "ethereum", "blockchain", "crypto"],
    "Ejendomme": ["bolig", "ejendom", "huspris", "boligmarked", "lejlighed"],
    "Sport": ["fodbold", "sport", "superliga", "landshold", "håndbold", "cykling"],
    "Kultur": ["kultur", "film", "musik", "kunst", "teater", "bog"],
    "Videnskab": ["forskning", "videnskab", "forsker", "studie", "universitet", "science"],
    "Startups": ["startup", "iværksætter", "venture", "investering", "unicorn", "vækstvirksomhed"],
}


def build_keyword_map(interests: list[str]) -> dict[str, list[str]]:
    """Resolve active interests to their keyword lists.

    Interests without a static entry fall back to the lowercased name as the
    single keyword.
    """
    return {
        interest: INTEREST_KEYWORDS.get(interest, [interest.lower()])
        for interest in interests
    }


def score_item(item: RawSourceItem, keyword_map: dict[str, list[str]]) -> int:
    """Count interests with at least one keyword in the item's text."""
    text = f" {item.title} {item.description} ".lower()
    return sum(
        1 for keywords in keyword_map.values() if any(kw in text for kw in keywords)
    )


def prioritize(items: list[RawSourceItem], interests: list[str]) -> list[RawSourceItem]:
    """Return items sorted by descending interest score (stable)."""
    if not interests:
        return list(items)
    keyword_map = build_keyword_map(interests)
    return sorted(items, key=lambda item: score_item(item, keyword_map), reverse=True)


class InterestRanker:
    """Rank raw sources by keyword overlap with reader interests."""

    def rank(
        self,
        items: list[RawSourceItem],
        interests: list[str],
    ) -> list[RawSourceItem]:
        ranked = prioritize(items, interests)
        logger.debug("Ranked %d sources against %d interests", len(ranked), len(interests))
        return ranked
