"""Source grouping and duplicate detection."""

from factdesk.dedup.grouper import SourceGrouper, group_sources
from factdesk.dedup.guard import DuplicateGuard, describe_duplicate, is_duplicate

__all__ = [
    "DuplicateGuard",
    "SourceGrouper",
    "describe_duplicate",
    "group_sources",
    "is_duplicate",
]
