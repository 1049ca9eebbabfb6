"""Provider registry and fan-out aggregator.

``SearchService`` owns the name -> provider map. A query goes either to one
named provider (errors propagate) or to every registered provider at once,
in which case each provider's failure is isolated: it only narrows
``used_providers`` and ``combined_results``.

Build one with ``build_search_service(settings)`` during start-up and pass it
to whatever needs to search; there is no module-level instance.
"""

import asyncio
import time
from dataclasses import asdict, dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from truthseek.utils.config import Settings
from truthseek.utils.logger import get_logger
from truthseek.web.errors import NoProvidersAvailable, ProviderCallFailed, ProviderUnavailable
from truthseek.web.exa_search import ExaSearch
from truthseek.web.options import ALL_PROVIDERS, SearchOptions
from truthseek.web.perplexity_search import PerplexitySearch
from truthseek.web.search_provider import SearchProvider, SearchResponse, SearchResult
from truthseek.web.serper_search import SerperSearch
from truthseek.web.tavily_search import TavilySearch
from truthseek.web.twitter_search import TwitterSearch

log = get_logger(__name__)


@dataclass
class AggregatedResponse:
    """Merged outcome of a fan-out search."""

    responses: Dict[str, SearchResponse] = field(default_factory=dict)
    used_providers: List[str] = field(default_factory=list)
    failed_providers: List[str] = field(default_factory=list)
    combined_results: List[SearchResult] = field(default_factory=list)
    provider: str = ALL_PROVIDERS

    def answer_for(self, name: str) -> Optional[str]:
        response = self.responses.get(name)
        return response.answer if response else None

    def to_dict(self) -> Dict[str, Any]:
        """Flat JSON-ready view: one key per provider plus the merged fields."""
        data: Dict[str, Any] = {
            name: response_to_dict(response) for name, response in self.responses.items()
        }
        data.update(
            provider=self.provider,
            usedProviders=list(self.used_providers),
            failedProviders=list(self.failed_providers),
            combinedResults=[asdict(r) for r in self.combined_results],
        )
        return data


def response_to_dict(response: SearchResponse) -> Dict[str, Any]:
    return {
        "provider": response.provider,
        "answer": response.answer,
        "results": [asdict(r) for r in response.results],
        **{k: v for k, v in response.extra.items() if v is not None},
    }


SearchOutcome = Union[SearchResponse, AggregatedResponse]


class SearchService:
    """Registry of available providers plus single/fan-out dispatch."""

    def __init__(self, provider_timeout: Optional[float] = None):
        self._providers: Dict[str, SearchProvider] = {}
        self.provider_timeout = provider_timeout

    @property
    def providers(self) -> Mapping[str, SearchProvider]:
        return MappingProxyType(self._providers)

    def available_providers(self) -> List[str]:
        return list(self._providers)

    def register_provider(self, provider: SearchProvider) -> bool:
        """Add *provider* if it is available; an existing entry is replaced."""
        if not provider.is_available():
            log.warning("Failed to register unavailable search provider: %s", provider.name)
            return False
        self._providers[provider.name] = provider
        log.info("Registered search provider: %s", provider.name)
        return True

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> SearchOutcome:
        options = options or SearchOptions()
        target = options.provider or ALL_PROVIDERS
        log.debug('Search request with provider: %s for query: "%s"', target, query)

        if not options.fan_out:
            provider = self._providers.get(target)
            if provider is None:
                raise ProviderUnavailable(target)
            try:
                return await self._call(provider, query, options)
            except Exception as exc:
                log.error("Error with provider %s: %s", target, exc)
                raise

        return await self._fan_out(query, options)

    async def _call(self, provider: SearchProvider, query: str, options: SearchOptions) -> SearchResponse:
        if self.provider_timeout is None:
            return await provider.search(query, options)
        try:
            return await asyncio.wait_for(provider.search(query, options), self.provider_timeout)
        except asyncio.TimeoutError as exc:
            raise ProviderCallFailed(
                provider.name, f"timed out after {self.provider_timeout:.1f}s"
            ) from exc

    async def _settle(
        self, name: str, provider: SearchProvider, query: str, options: SearchOptions
    ) -> Tuple[str, Optional[SearchResponse], Optional[Exception]]:
        try:
            return name, await self._call(provider, query, options), None
        except Exception as exc:
            return name, None, exc

    async def _fan_out(self, query: str, options: SearchOptions) -> AggregatedResponse:
        started = time.monotonic()
        aggregated = AggregatedResponse()
        pending = [
            self._settle(name, provider, query, options)
            for name, provider in list(self._providers.items())
        ]

        for settled in asyncio.as_completed(pending):
            name, response, error = await settled
            if error is not None:
                log.error("Error with provider %s: %s", name, error)
                aggregated.failed_providers.append(name)
                continue
            aggregated.responses[name] = response
            aggregated.used_providers.append(name)
            aggregated.combined_results.extend(
                replace(result, source=name) for result in response.results
            )

        if not aggregated.used_providers:
            raise NoProvidersAvailable(aggregated.failed_providers)

        log.info('Fan-out for "%s": %d results from %s in %.0fms',
                 query, len(aggregated.combined_results),
                 ", ".join(aggregated.used_providers),
                 (time.monotonic() - started) * 1000)
        return aggregated

    # -- Per-provider shortcuts -------------------------------------------------

    async def search_tavily(self, query: str, options: Optional[SearchOptions] = None) -> SearchOutcome:
        return await self.search(query, (options or SearchOptions()).with_provider(TavilySearch.name))

    async def search_exa(self, query: str, options: Optional[SearchOptions] = None) -> SearchOutcome:
        return await self.search(query, (options or SearchOptions()).with_provider(ExaSearch.name))

    async def search_perplexity(self, query: str, options: Optional[SearchOptions] = None) -> SearchOutcome:
        return await self.search(query, (options or SearchOptions()).with_provider(PerplexitySearch.name))

    async def search_serper(self, query: str, options: Optional[SearchOptions] = None) -> SearchOutcome:
        return await self.search(query, (options or SearchOptions()).with_provider(SerperSearch.name))

    async def search_twitter(self, query: str, options: Optional[SearchOptions] = None) -> SearchOutcome:
        return await self.search(query, (options or SearchOptions()).with_provider(TwitterSearch.name))


async def register_when_ready(
    service: SearchService, provider: TwitterSearch, timeout: Optional[float]
) -> bool:
    """Run *provider*'s handshake, waiting at most *timeout* seconds, then register.

    A *timeout* of ``None`` or ``<= 0`` waits for the handshake to finish.
    A handshake still running at the deadline keeps going in the background
    but the provider is not registered; call ``register_provider`` later to
    add it.
    """
    if timeout is not None and timeout <= 0:
        timeout = None
    handshake = provider.start()
    try:
        ok = await asyncio.wait_for(asyncio.shield(handshake), timeout)
    except asyncio.TimeoutError:
        log.warning("%s handshake still pending after %.1fs, not registering",
                    provider.name, timeout)
        return False
    if not ok:
        return False
    if not service.register_provider(provider):
        log.warning("%s authentication succeeded but is_available() returned false",
                    provider.name)
        return False
    return True


async def build_search_service(settings: Settings) -> SearchService:
    """Construct and register every provider whose credentials are configured."""
    service = SearchService(provider_timeout=settings.search_provider_timeout)

    if settings.tavily_api_key:
        service.register_provider(TavilySearch(settings.tavily_api_key))
    if settings.exa_api_key:
        service.register_provider(ExaSearch(settings.exa_api_key, rate_limit=settings.exa_rate_limit))
    if settings.perplexity_api_key:
        service.register_provider(
            PerplexitySearch(
                settings.perplexity_api_key,
                rate_limit=settings.perplexity_rate_limit,
                timeout=settings.http_timeout,
            )
        )
    if settings.serper_api_key:
        service.register_provider(
            SerperSearch(
                settings.serper_api_key,
                rate_limit=settings.serper_rate_limit,
                timeout=settings.http_timeout,
            )
        )

    log.debug("Twitter credentials: username=%s, password=%s, email=%s, cookies=%s",
              bool(settings.twitter_username), bool(settings.twitter_password),
              bool(settings.twitter_email), bool(settings.twitter_cookies_file))
    if settings.twitter_configured:
        twitter = TwitterSearch(
            settings.twitter_username,
            settings.twitter_password,
            email=settings.twitter_email,
            cookies_file=settings.twitter_cookies_file,
        )
        await register_when_ready(service, twitter, settings.twitter_auth_timeout)

    log.info("Available search providers: %s", ", ".join(service.available_providers()) or "none")
    return service
