"""Perplexity Q&A search: a chat completion whose citations become results."""

from typing import Any, Dict, List, Optional

from truthseek.web.http_provider import HttpSearchProvider
from truthseek.web.options import SearchOptions
from truthseek.web.search_provider import SearchResponse, SearchResult

PERPLEXITY_URL = "https://api.perplexity.ai/chat/completions"


class PerplexitySearch(HttpSearchProvider):
    """Ask Perplexity's Sonar models and turn each citation into a result.

    Every result carries the full answer as its content; ranking follows
    citation order (``1.0 - index * 0.1``).
    """

    name = "perplexity"
    env_var = "PERPLEXITY_API_KEY"
    display_name = "Perplexity"

    def _payload(self, query: str, options: SearchOptions) -> Dict[str, Any]:
        opts = options.perplexity
        return {
            "model": opts.model,
            "messages": [
                {"role": "system", "content": opts.system_prompt},
                {"role": "user", "content": query},
            ],
            "max_tokens": opts.max_tokens,
            "temperature": opts.temperature,
            "top_p": opts.top_p,
            "return_related_questions": opts.return_related_questions,
            "search_recency_filter": opts.recency_filter,
            "stream": False,
        }

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> SearchResponse:
        self._ensure_available()
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        raw = await self._scheduled_post(
            query, PERPLEXITY_URL, headers, self._payload(query, options or SearchOptions())
        )
        return self._build_response(query, raw, self._to_response)

    def _to_response(self, raw: Dict[str, Any]) -> SearchResponse:
        answer = _answer_text(raw)
        citations = raw.get("citations") or []
        return SearchResponse(
            provider=self.name,
            results=self._format_citations(citations, answer, raw.get("search_results") or []),
            answer=answer,
            raw=raw,
            extra={
                "citations": citations,
                "related_questions": raw.get("related_questions") or [],
            },
        )

    def _format_citations(
        self, citations: List[str], answer: str, search_results: List[Dict[str, Any]]
    ) -> List[SearchResult]:
        titles = {r.get("url"): r.get("title") for r in search_results if r.get("url")}
        return [
            SearchResult(
                title=titles.get(url) or f"Result {index + 1}",
                url=url,
                content=answer,
                score=1.0 - index * 0.1,
                source=self.name,
            )
            for index, url in enumerate(citations)
        ]


def _answer_text(raw: Dict[str, Any]) -> str:
    choices = raw.get("choices") or []
    if not choices:
        return ""
    return (choices[0].get("message") or {}).get("content") or ""
