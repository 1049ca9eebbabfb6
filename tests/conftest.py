"""Shared test doubles."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from truthseek.web.options import SearchOptions
from truthseek.web.search_provider import SearchProvider, SearchResponse, normalize_results


class StubProvider(SearchProvider):
    """In-memory provider returning canned items or raising a canned error."""

    def __init__(
        self,
        name: str,
        items: Optional[List[Dict[str, Any]]] = None,
        error: Optional[Exception] = None,
        available: bool = True,
        delay: float = 0.0,
        answer: Optional[str] = None,
    ):
        self.name = name
        self.items = items or []
        self.error = error
        self.available = available
        self.delay = delay
        self.answer = answer
        self.calls: List[str] = []
        self.seen_options: List[Optional[SearchOptions]] = []

    def is_available(self) -> bool:
        return self.available

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> SearchResponse:
        self.calls.append(query)
        self.seen_options.append(options)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return SearchResponse(
            provider=self.name,
            results=normalize_results(self.items, self.name),
            answer=self.answer,
            raw={"results": self.items},
        )


@pytest.fixture
def stub_provider():
    return StubProvider
