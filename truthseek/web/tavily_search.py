"""Tavily Search implementation (general web search)."""

import asyncio
from typing import Optional

from tavily import TavilyClient

from truthseek.utils.logger import get_logger
from truthseek.web.errors import ProviderCallFailed, ProviderUnavailable
from truthseek.web.options import SearchOptions
from truthseek.web.search_provider import SearchProvider, SearchResponse, normalize_results

log = get_logger(__name__)


class TavilySearch(SearchProvider):
    """Web search via the Tavily API.

    Tavily returns pre-extracted, LLM-ready content alongside each result and
    can optionally synthesise a short answer. It enforces its own quotas, so no
    client-side rate limiter is applied.
    """

    name = "tavily"

    def __init__(self, api_key: str):
        self._client: Optional[TavilyClient] = None
        if not api_key:
            log.warning("TAVILY_API_KEY is not set, Tavily search will not be available")
            return
        self._client = TavilyClient(api_key=api_key)
        log.info("Initialized Tavily search provider")

    def is_available(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> Optional[TavilyClient]:
        return self._client

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> SearchResponse:
        """Execute a Tavily search and normalise results."""
        if not self.is_available():
            raise ProviderUnavailable(self.name, "make sure TAVILY_API_KEY is set")

        opts = (options or SearchOptions()).tavily
        log.debug('Executing Tavily search for: "%s"', query)
        try:
            raw = await asyncio.to_thread(
                self._client.search,
                query=query,
                max_results=opts.limit,
                search_depth=opts.search_depth,
                topic=opts.topic,
                include_answer=opts.include_answer,
                include_images=opts.include_images,
            )
        except Exception as exc:
            log.error('Tavily search error for "%s": %s', query, exc)
            raise ProviderCallFailed(self.name, str(exc)) from exc
        log.debug('Tavily search completed for: "%s"', query)

        try:
            return SearchResponse(
                provider=self.name,
                results=normalize_results(raw.get("results"), self.name),
                answer=raw.get("answer"),
                raw=raw,
                extra={
                    "images": raw.get("images") or [],
                    "response_time": raw.get("response_time"),
                },
            )
        except (AttributeError, TypeError, ValueError) as exc:
            log.error('Tavily returned a malformed response for "%s": %s', query, exc)
            raise ProviderCallFailed(self.name, f"malformed response: {exc}") from exc
