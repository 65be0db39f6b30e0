from factdesk.factcheck.engine import (
    FALLBACK_DISCLAIMER,
    FactCheckEngine,
    fact_check_cache_key,
    parse_claims,
)

__all__ = [
    "FALLBACK_DISCLAIMER",
    "FactCheckEngine",
    "fact_check_cache_key",
    "parse_claims",
]
