"""Shared plumbing for providers that talk plain JSON-over-HTTPS."""

from typing import Any, Callable, Dict, Optional

import httpx

from truthseek.utils.logger import get_logger
from truthseek.web.errors import ProviderCallFailed, ProviderUnavailable
from truthseek.web.rate_limiter import RateLimiter
from truthseek.web.search_provider import SearchProvider, SearchResponse

log = get_logger(__name__)


class HttpSearchProvider(SearchProvider):
    """Base for API-key providers whose calls are rate limited HTTP POSTs.

    ``transport`` is handed to ``httpx.AsyncClient`` (tests pass an
    ``httpx.MockTransport``).
    """

    env_var: str = ""
    display_name: str = ""

    def __init__(
        self,
        api_key: str,
        rate_limit: int = 5,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self.rate_limiter = RateLimiter(rate_limit)
        self._transport = transport
        if not api_key:
            log.warning("%s is not set, %s search will not be available",
                        self.env_var, self.display_name)
            return
        log.info("Initialized %s search provider", self.display_name)

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _ensure_available(self) -> None:
        if not self.is_available():
            raise ProviderUnavailable(self.name, f"make sure {self.env_var} is set")

    async def _post_json(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(url, headers=headers, json=payload)
        if resp.is_error:
            raise ProviderCallFailed(
                self.name,
                f"{self.display_name} API error: {resp.status_code} {resp.reason_phrase}",
            )
        body = resp.json()
        if not isinstance(body, dict):
            raise ProviderCallFailed(
                self.name,
                f"{self.display_name} returned {type(body).__name__}, expected a JSON object",
            )
        return body

    async def _scheduled_post(
        self, query: str, url: str, headers: Dict[str, str], payload: Dict[str, Any]
    ) -> Any:
        """POST through the rate limiter; every failure becomes ``ProviderCallFailed``."""

        async def call():
            log.debug('Executing %s search for: "%s"', self.display_name, query)
            return await self._post_json(url, headers, payload)

        log.debug('Scheduling %s search for: "%s" (with rate limiting)', self.display_name, query)
        try:
            raw = await self.rate_limiter.schedule(call)
        except ProviderCallFailed as exc:
            log.error('%s search error for "%s": %s', self.display_name, query, exc)
            raise
        except Exception as exc:
            log.error('%s search error for "%s": %s', self.display_name, query, exc)
            raise ProviderCallFailed(self.name, str(exc)) from exc
        log.debug('%s search completed for: "%s"', self.display_name, query)
        return raw

    def _build_response(
        self, query: str, raw: Dict[str, Any], build: Callable[[Dict[str, Any]], SearchResponse]
    ) -> SearchResponse:
        """Map *raw* with *build*; a body of the wrong shape is a failed call."""
        try:
            return build(raw)
        except (AttributeError, TypeError, ValueError) as exc:
            log.error('%s returned a malformed response for "%s": %s',
                      self.display_name, query, exc)
            raise ProviderCallFailed(self.name, f"malformed response: {exc}") from exc
