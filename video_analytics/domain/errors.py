"""Domain errors."""


class DomainError(Exception):
    """Base domain error."""


class AnalyticsQueryError(DomainError):
    """Analytics data API query failed."""


class AnalyticsTimeoutError(AnalyticsQueryError):
    """Analytics data API query exceeded its time budget."""


class InvalidFilterError(DomainError):
    """Filter expression node is not supported."""


class InvalidQueryError(DomainError):
    """Dashboard query parameters are invalid."""


class EnrichmentError(DomainError):
    """Location enrichment job failed."""


class StorageError(DomainError):
    """Session storage read or write failed."""
