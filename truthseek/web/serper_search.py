"""Serper.dev Google search implementation."""

from typing import Any, Dict, List, Optional

from truthseek.web.http_provider import HttpSearchProvider
from truthseek.web.options import SearchOptions
from truthseek.web.search_provider import SearchResponse, SearchResult

SERPER_URL = "https://google.serper.dev/search"


class SerperSearch(HttpSearchProvider):
    """Google results through Serper.dev.

    Three result families are merged: organic hits (``1.0 - i * 0.05``), the
    knowledge graph card (``1.0``) and "people also ask" (``0.8 - i * 0.05``).
    """

    name = "serper"
    env_var = "SERPER_API_KEY"
    display_name = "Serper.dev"

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> SearchResponse:
        self._ensure_available()
        opts = (options or SearchOptions()).serper
        headers = {"X-API-KEY": self.api_key, "Content-Type": "application/json"}
        payload = {
            "q": query,
            "gl": opts.gl,
            "hl": opts.hl,
            "autocorrect": opts.autocorrect,
            "page": opts.page,
            "num": opts.num,
        }
        raw = await self._scheduled_post(query, SERPER_URL, headers, payload)
        return self._build_response(query, raw, self._to_response)

    def _to_response(self, raw: Dict[str, Any]) -> SearchResponse:
        return SearchResponse(
            provider=self.name,
            results=self._format(raw),
            answer=(raw.get("answerBox") or {}).get("answer"),
            raw=raw,
        )

    def _format(self, raw: Dict[str, Any]) -> List[SearchResult]:
        results: List[SearchResult] = []

        for index, item in enumerate(raw.get("organic") or []):
            results.append(
                SearchResult(
                    title=item.get("title", ""),
                    url=item.get("link", ""),
                    content=item.get("snippet", ""),
                    score=1.0 - index * 0.05,
                    source=self.name,
                    metadata={"position": item.get("position", index + 1)},
                )
            )

        graph = raw.get("knowledgeGraph")
        if graph:
            results.append(
                SearchResult(
                    title=graph.get("title") or "Knowledge Graph",
                    url=graph.get("descriptionLink") or "",
                    content=graph.get("description") or "",
                    score=1.0,
                    source=self.name,
                    metadata={"kind": "knowledge_graph"},
                )
            )

        for index, item in enumerate(raw.get("peopleAlsoAsk") or []):
            results.append(
                SearchResult(
                    title=item.get("question", ""),
                    url=item.get("link", ""),
                    content=item.get("snippet", ""),
                    score=0.8 - index * 0.05,
                    source=self.name,
                    metadata={"kind": "people_also_ask"},
                )
            )

        return results
