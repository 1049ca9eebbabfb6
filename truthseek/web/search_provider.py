"""Abstract search interface and the shared result types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from truthseek.web.options import SearchOptions


@dataclass
class SearchResult:
    """A single provider-agnostic search result.

    ``score`` is only comparable between results of the same ``source``.
    """

    title: str
    url: str
    content: str
    score: float
    source: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchResponse:
    """One provider's answer to a query, already normalised."""

    provider: str
    results: List[SearchResult] = field(default_factory=list)
    answer: Optional[str] = None
    raw: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)


def _first_present(item: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None and value != "":
            return value
    return None


def normalize_result(item: Mapping[str, Any], source: str) -> SearchResult:
    """Map a native result payload onto ``SearchResult``.

    Content prefers a summary, then full text, then content, then a snippet.
    Score prefers ``relevance_score`` over ``score``.
    """
    content = _first_present(item, "summary", "text", "content", "snippet")
    score = _first_present(item, "relevance_score", "score")
    return SearchResult(
        title=item.get("title") or "",
        url=_first_present(item, "url", "link") or "",
        content=content or "",
        score=float(score) if score is not None else 0.0,
        source=source,
        metadata=dict(item.get("metadata") or {}),
    )


def normalize_results(items: Optional[List[Mapping[str, Any]]], source: str) -> List[SearchResult]:
    return [normalize_result(item, source) for item in items or []]


class SearchProvider(ABC):
    """Abstract interface -- swap implementations without touching callers."""

    name: str = ""

    @abstractmethod
    def is_available(self) -> bool:
        """True once credentials are present (and any handshake succeeded)."""
        ...

    @abstractmethod
    async def search(
        self, query: str, options: Optional[SearchOptions] = None
    ) -> SearchResponse:
        """Return the normalised response for *query*.

        Raises ``ProviderUnavailable`` when called while unavailable and
        ``ProviderCallFailed`` when the backend call fails.
        """
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} available={self.is_available()}>"
