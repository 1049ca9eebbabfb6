"""Unit tests for the SearchService registry and fan-out aggregation."""

import asyncio
from unittest.mock import patch

import pytest

from truthseek.utils.config import Settings
from truthseek.web.errors import NoProvidersAvailable, ProviderCallFailed, ProviderUnavailable
from truthseek.web.options import SearchOptions
from truthseek.web.search_provider import SearchResult
from truthseek.web.service import AggregatedResponse, SearchService, build_search_service

ITEM_A = {"title": "T1", "url": "u1", "content": "c1", "score": 0.9}


def _service(*providers):
    service = SearchService()
    for provider in providers:
        service.register_provider(provider)
    return service


class TestRegistration:
    def test_available_provider_is_registered(self, stub_provider):
        service = SearchService()
        assert service.register_provider(stub_provider("stubA")) is True
        assert service.available_providers() == ["stubA"]

    def test_unavailable_provider_is_rejected(self, stub_provider):
        service = SearchService()
        assert service.register_provider(stub_provider("ghost", available=False)) is False
        assert "ghost" not in service.providers

        with pytest.raises(ProviderUnavailable):
            asyncio.run(service.search("q", SearchOptions(provider="ghost")))

    def test_reregistration_replaces_entry(self, stub_provider):
        first, second = stub_provider("stubA"), stub_provider("stubA")
        service = _service(first, second)
        assert service.providers["stubA"] is second

    def test_providers_view_is_read_only(self, stub_provider):
        service = _service(stub_provider("stubA"))
        with pytest.raises(TypeError):
            service.providers["other"] = stub_provider("other")


class TestNamedProvider:
    def test_returns_provider_response_directly(self, stub_provider):
        a, b = stub_provider("A", items=[ITEM_A]), stub_provider("B", items=[ITEM_A])
        service = _service(a, b)

        response = asyncio.run(service.search("q", SearchOptions(provider="A")))

        assert response.provider == "A"
        assert [r.title for r in response.results] == ["T1"]
        assert b.calls == []

    def test_unregistered_name_fails_without_touching_others(self, stub_provider):
        a = stub_provider("A", items=[ITEM_A])
        service = _service(a)

        with pytest.raises(ProviderUnavailable) as info:
            asyncio.run(service.search("q", SearchOptions(provider="missing")))
        assert info.value.provider == "missing"
        assert a.calls == []

    def test_provider_error_propagates(self, stub_provider):
        service = _service(stub_provider("A", error=ProviderCallFailed("A", "boom")))
        with pytest.raises(ProviderCallFailed):
            asyncio.run(service.search("q", SearchOptions(provider="A")))

    def test_shortcut_forces_provider(self, stub_provider):
        tavily = stub_provider("tavily", items=[ITEM_A])
        service = _service(tavily, stub_provider("exa"))

        response = asyncio.run(service.search_tavily("q"))
        assert response.provider == "tavily"
        assert tavily.seen_options[0].provider == "tavily"

        with pytest.raises(ProviderUnavailable):
            asyncio.run(service.search_twitter("q"))


class TestFanOut:
    def test_failing_provider_is_isolated(self, stub_provider):
        service = _service(
            stub_provider("stubA", items=[ITEM_A]),
            stub_provider("stubB", error=RuntimeError("network down")),
        )

        response = asyncio.run(service.search("climate change", SearchOptions(provider="all")))

        assert isinstance(response, AggregatedResponse)
        assert response.provider == "all"
        assert response.used_providers == ["stubA"]
        assert response.failed_providers == ["stubB"]
        assert response.combined_results == [
            SearchResult(title="T1", url="u1", content="c1", score=0.9, source="stubA")
        ]
        assert set(response.responses) == {"stubA"}

    def test_default_options_fan_out(self, stub_provider):
        service = _service(stub_provider("A", items=[ITEM_A]), stub_provider("B", items=[ITEM_A]))
        response = asyncio.run(service.search("q"))
        assert sorted(response.used_providers) == ["A", "B"]
        assert len(response.combined_results) == 2

    def test_all_failing_raises(self, stub_provider):
        service = _service(
            stub_provider("A", error=RuntimeError("a")),
            stub_provider("B", error=ValueError("b")),
        )
        with pytest.raises(NoProvidersAvailable) as info:
            asyncio.run(service.search("q"))
        assert sorted(info.value.failed) == ["A", "B"]

    def test_empty_registry_raises(self):
        with pytest.raises(NoProvidersAvailable):
            asyncio.run(SearchService().search("q"))

    def test_results_follow_completion_order(self, stub_provider):
        service = _service(
            stub_provider("slow", items=[{"title": "s", "url": "us", "content": "x"}], delay=0.05),
            stub_provider("fast", items=[{"title": "f", "url": "uf", "content": "y"}]),
        )
        response = asyncio.run(service.search("q"))
        assert response.used_providers == ["fast", "slow"]
        assert [r.title for r in response.combined_results] == ["f", "s"]

    def test_source_is_stamped_with_registry_name(self, stub_provider):
        item = {"title": "t", "url": "u", "text": "body", "relevance_score": 0.4}
        service = _service(stub_provider("neural", items=[item]))
        [result] = asyncio.run(service.search("q")).combined_results
        assert result.source == "neural"
        assert result.content == "body"
        assert result.score == 0.4

    def test_slow_provider_times_out_when_deadline_set(self, stub_provider):
        service = SearchService(provider_timeout=0.05)
        service.register_provider(stub_provider("slow", items=[ITEM_A], delay=1.0))
        service.register_provider(stub_provider("fast", items=[ITEM_A]))

        response = asyncio.run(service.search("q"))
        assert response.used_providers == ["fast"]
        assert response.failed_providers == ["slow"]

    def test_to_dict_flattens_per_provider_responses(self, stub_provider):
        service = _service(stub_provider("stubA", items=[ITEM_A], answer="yes"))
        data = asyncio.run(service.search("q")).to_dict()
        assert data["provider"] == "all"
        assert data["usedProviders"] == ["stubA"]
        assert data["stubA"]["answer"] == "yes"
        assert data["combinedResults"][0]["source"] == "stubA"


def _settings(**overrides):
    values = dict(
        tavily_api_key="",
        exa_api_key="",
        perplexity_api_key="",
        serper_api_key="",
        twitter_username="",
        twitter_password="",
        twitter_email="",
        twitter_cookies_file="",
        twitter_auth_timeout=0.5,
        search_provider_timeout=None,
    )
    values.update(overrides)
    return Settings(**values)


class TestBuildSearchService:
    def test_no_credentials_means_no_providers(self):
        service = asyncio.run(build_search_service(_settings()))
        assert service.available_providers() == []

    def test_registers_configured_providers(self):
        with patch("truthseek.web.tavily_search.TavilyClient"), \
                patch("truthseek.web.exa_search.Exa"):
            service = asyncio.run(build_search_service(_settings(
                tavily_api_key="tvly-key",
                exa_api_key="exa-key",
                perplexity_api_key="pplx-key",
                serper_api_key="serper-key",
                search_provider_timeout=12.0,
            )))
        assert sorted(service.available_providers()) == ["exa", "perplexity", "serper", "tavily"]
        assert service.provider_timeout == 12.0

    def test_failed_twitter_handshake_is_not_fatal(self):
        with patch("truthseek.web.twitter_search._load_twikit", side_effect=ImportError("no twikit")):
            service = asyncio.run(build_search_service(_settings(
                twitter_username="user", twitter_password="secret",
            )))
        assert "twitter" not in service.providers
