from factdesk.ranker.base import SourceRanker
from factdesk.ranker.interest import (
    INTEREST_KEYWORDS,
    InterestRanker,
    build_keyword_map,
    prioritize,
    score_item,
)

__all__ = [
    "INTEREST_KEYWORDS",
    "InterestRanker",
    "SourceRanker",
    "build_keyword_map",
    "prioritize",
    "score_item",
]
