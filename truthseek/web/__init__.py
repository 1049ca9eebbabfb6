"""Web module -- search providers, rate limiting, aggregation."""

from truthseek.web.errors import (
    AuthenticationFailed,
    NoProvidersAvailable,
    ProviderCallFailed,
    ProviderUnavailable,
    SearchError,
)
from truthseek.web.options import SearchOptions
from truthseek.web.rate_limiter import RateLimiter
from truthseek.web.search_provider import SearchProvider, SearchResponse, SearchResult
from truthseek.web.service import AggregatedResponse, SearchService, build_search_service

__all__ = [
    "AggregatedResponse",
    "AuthenticationFailed",
    "NoProvidersAvailable",
    "ProviderCallFailed",
    "ProviderUnavailable",
    "RateLimiter",
    "SearchError",
    "SearchOptions",
    "SearchProvider",
    "SearchResponse",
    "SearchResult",
    "SearchService",
    "build_search_service",
]
