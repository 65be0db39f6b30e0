"""Exception hierarchy for factdesk.

Business-rule rejections (duplicates, stale batches, rate limits) are not
exceptions; they are returned as result variants.
"""


class FactdeskError(Exception):
    """Base class for all factdesk errors."""


class ServiceUnavailableError(FactdeskError):
    """A collaborator is missing credentials or configuration."""


class CompletionError(FactdeskError):
    """A completion or web-search call failed (network, non-2xx, SDK error)."""


class CompletionTimeoutError(CompletionError):
    """A completion call exceeded its timeout."""


class MalformedResponseError(FactdeskError):
    """A model response could not be parsed into the expected shape."""


class ArticleNotFoundError(FactdeskError):
    """No persisted article exists for the requested id."""
