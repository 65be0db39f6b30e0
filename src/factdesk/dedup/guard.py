"""Title-level duplicate detection against already-published articles."""

import logging

from factdesk.data import DuplicateCheck
from factdesk.text import jaccard, normalize_title

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.6


def is_duplicate(
    candidate_title: str,
    existing_titles: list[str],
    *,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> DuplicateCheck:
    """Check a title against existing titles; the first match wins.

    A title is a duplicate of an existing one if both normalize to the same
    string (similarity 1.0) or their Jaccard similarity is strictly above
    ``threshold``.
    """
    normalized = normalize_title(candidate_title)
    for existing in existing_titles:
        if normalized == normalize_title(existing):
            return DuplicateCheck(is_dup=True, matched_title=existing, similarity=1.0)
        similarity = jaccard(candidate_title, existing)
        if similarity > threshold:
            return DuplicateCheck(is_dup=True, matched_title=existing, similarity=similarity)
    return DuplicateCheck(is_dup=False)


class DuplicateGuard:
    """Accept/reject decisions for candidate titles.

    Args:
        threshold: Jaccard similarity above which titles are duplicates.
    """

    def __init__(self, threshold: float = DEFAULT_SIMILARITY_THRESHOLD) -> None:
        self._threshold = threshold

    def check(self, candidate_title: str, existing_titles: list[str]) -> DuplicateCheck:
        result = is_duplicate(candidate_title, existing_titles, threshold=self._threshold)
        if result.is_dup:
            logger.info(
                "Duplicate title %r ~ %r (%.0f%%)",
                candidate_title,
                result.matched_title,
                (result.similarity or 0.0) * 100,
            )
        return result


def describe_duplicate(title: str, check: DuplicateCheck, *, generated: bool = False) -> str:
    """Human-readable line for the run summary."""
    prefix = "Generated " if generated else ""
    percent = round((check.similarity or 0.0) * 100)
    return f'{prefix}"{title}" ≈ "{check.matched_title}" ({percent}%)'
