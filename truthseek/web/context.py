"""Render search outcomes into an LLM-ready context block."""

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Sequence

from truthseek.utils.logger import get_logger
from truthseek.web.options import SearchOptions, TavilyOptions, TwitterOptions
from truthseek.web.service import AggregatedResponse, SearchOutcome, SearchService

log = get_logger(__name__)

NO_RESULTS = "NO RESULTS FOUND"
SEARCH_ERROR = "ERROR DURING SEARCH"


@dataclass
class QueryContext:
    query: str
    text: str
    providers: Optional[List[str]] = None


def verification_options() -> SearchOptions:
    """Options used when gathering evidence for a claim."""
    return SearchOptions(
        tavily=TavilyOptions(include_answer=True),
        twitter=TwitterOptions(count=5, mode="top"),
    )


def format_response(response: Optional[SearchOutcome]) -> str:
    if response is None:
        return NO_RESULTS

    if isinstance(response, AggregatedResponse):
        if not response.combined_results:
            return NO_RESULTS
        text = ""
        answer = response.answer_for("tavily")
        if answer:
            text = f"##### Result from tavily #####\n{answer}\n"
        return text + "\n".join(
            f"##### Result from {r.source} | Title: {r.title} | URL: {r.url} #####\n{r.content}"
            for r in response.combined_results
        )

    if not response.results:
        return NO_RESULTS

    if response.provider == "twitter":
        return "\n\n".join(
            f"##### Tweet from {r.metadata.get('name', '')} (@{r.metadata.get('username', '')})"
            f" | Likes: {r.metadata.get('likes', 0)} | Retweets: {r.metadata.get('retweets', 0)}"
            f" | URL: {r.url} #####\n{r.content}"
            for r in response.results
        )

    text = f"##### Results #####\n{response.answer}\n" if response.answer else ""
    return text + "\n".join(f"{r.title} (url: {r.url}): {r.content}" for r in response.results)


async def search_query(
    service: SearchService, query: str, options: Optional[SearchOptions] = None
) -> QueryContext:
    """Search one query; failures are rendered, not raised."""
    try:
        response = await service.search(query, options or verification_options())
    except Exception as exc:
        log.error('Error during search for "%s": %s', query, exc)
        return QueryContext(query=query, text=SEARCH_ERROR)

    if isinstance(response, AggregatedResponse):
        providers = list(response.used_providers)
    else:
        providers = [response.provider]
    log.info('Search completed for "%s" using provider(s): %s', query, ", ".join(providers))
    return QueryContext(query=query, text=format_response(response), providers=providers)


async def search_queries(
    service: SearchService,
    queries: Sequence[str],
    options: Optional[SearchOptions] = None,
) -> List[QueryContext]:
    """Run every query concurrently, preserving input order in the output."""
    return list(await asyncio.gather(*(search_query(service, q, options) for q in queries)))


def format_queries_result(items: Sequence[QueryContext]) -> str:
    return "\n\n\n\n".join(f"## Query\n{item.query}\n## Result\n{item.text}" for item in items)
