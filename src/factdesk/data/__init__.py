"""Data models for factdesk."""

from factdesk.data.models import (
    CATEGORY_ALIASES,
    SUB_CATEGORY_ALIASES,
    APICallUsage,
    ArticleSource,
    Categorization,
    Category,
    Claim,
    DuplicateCheck,
    FactCheckResult,
    FailureReason,
    GeneratedArticle,
    GenerationFailure,
    IngestionSummary,
    RawSourceItem,
    RefreshSummary,
    SourceGroup,
    SourceLink,
    SubCategory,
    Usage,
    Verdict,
    VerificationMethod,
    utc_now,
)

__all__ = [
    "CATEGORY_ALIASES",
    "SUB_CATEGORY_ALIASES",
    "APICallUsage",
    "ArticleSource",
    "Categorization",
    "Category",
    "Claim",
    "DuplicateCheck",
    "FactCheckResult",
    "FailureReason",
    "GeneratedArticle",
    "GenerationFailure",
    "IngestionSummary",
    "RawSourceItem",
    "RefreshSummary",
    "SourceGroup",
    "SourceLink",
    "SubCategory",
    "Usage",
    "Verdict",
    "VerificationMethod",
    "utc_now",
]
