"""Exa neural search implementation."""

import asyncio
from typing import Any, Dict, Optional

from exa_py import Exa

from truthseek.utils.logger import get_logger
from truthseek.web.errors import ProviderCallFailed, ProviderUnavailable
from truthseek.web.options import SearchOptions
from truthseek.web.rate_limiter import RateLimiter
from truthseek.web.search_provider import SearchProvider, SearchResponse, normalize_result

log = get_logger(__name__)

SUMMARY_PROMPT = "Summarize the content considering the query was {query}"


class ExaSearch(SearchProvider):
    """Semantic search via Exa, with per-result summaries framed by the query.

    Calls go through a ``RateLimiter`` (5 starts per second by default).
    """

    name = "exa"

    def __init__(self, api_key: str, rate_limit: int = 5):
        self._client: Optional[Exa] = None
        self.rate_limiter = RateLimiter(rate_limit)
        if not api_key:
            log.warning("EXA_API_KEY is not set, Exa search will not be available")
            return
        self._client = Exa(api_key)
        log.info("Initialized Exa search provider")

    def is_available(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> Optional[Exa]:
        return self._client

    def _request_kwargs(self, query: str, options: SearchOptions) -> Dict[str, Any]:
        opts = options.exa
        kwargs: Dict[str, Any] = {
            "type": opts.type,
            "num_results": opts.limit,
            "text": {"max_characters": opts.max_characters},
        }
        if opts.summarize:
            kwargs["summary"] = {"query": SUMMARY_PROMPT.format(query=query)}
        # Only sent when enabled; older SDK releases reject unknown options.
        if opts.moderation:
            kwargs["moderation"] = True
        if opts.use_autoprompt:
            kwargs["use_autoprompt"] = True
        return kwargs

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> SearchResponse:
        if not self.is_available():
            raise ProviderUnavailable(self.name, "make sure EXA_API_KEY is set")

        kwargs = self._request_kwargs(query, options or SearchOptions())

        async def call():
            log.debug('Executing Exa search for: "%s"', query)
            return await asyncio.to_thread(self._client.search_and_contents, query, **kwargs)

        log.debug('Scheduling Exa search for: "%s" (with rate limiting)', query)
        try:
            raw = await self.rate_limiter.schedule(call)
        except Exception as exc:
            log.error('Exa search error for "%s": %s', query, exc)
            raise ProviderCallFailed(self.name, str(exc)) from exc
        log.debug('Exa search completed for: "%s"', query)

        try:
            results = [
                normalize_result(_result_to_dict(item), self.name)
                for item in getattr(raw, "results", None) or []
            ]
        except (AttributeError, TypeError, ValueError) as exc:
            log.error('Exa returned a malformed response for "%s": %s', query, exc)
            raise ProviderCallFailed(self.name, f"malformed response: {exc}") from exc
        return SearchResponse(
            provider=self.name,
            results=results,
            raw=raw,
            extra={"autoprompt": getattr(raw, "autoprompt_string", None)},
        )


def _result_to_dict(item: Any) -> Dict[str, Any]:
    """Flatten an ``exa_py`` result object into the normaliser's input shape."""
    metadata = {
        key: getattr(item, key, None)
        for key in ("id", "published_date", "author")
        if getattr(item, key, None) is not None
    }
    return {
        "title": getattr(item, "title", None),
        "url": getattr(item, "url", None),
        "summary": getattr(item, "summary", None),
        "text": getattr(item, "text", None),
        "score": getattr(item, "score", None),
        "metadata": metadata,
    }
