"""CLI entry point for the truthseek search layer."""

import argparse
import asyncio
import json
import sys
import time

from truthseek.utils.config import settings
from truthseek.utils.logger import get_logger, log_search
from truthseek.web.context import format_response, verification_options
from truthseek.web.errors import SearchError
from truthseek.web.service import (
    AggregatedResponse,
    SearchService,
    build_search_service,
    response_to_dict,
)

log = get_logger(__name__)


async def run_query(
    query: str,
    service: SearchService,
    provider: str = "all",
    verdict: bool = False,
    as_json: bool = False,
) -> None:
    """Run a single query through the search service and print results."""
    query = query.strip()
    if not query:
        print("\nError: Query is empty.\n")
        return
    if len(query) > settings.max_query_length:
        print(f"\nError: Query exceeds max length ({settings.max_query_length} chars).\n")
        return

    print(f"\nQuery: {query}")
    print("Searching...\n")

    start = time.monotonic()
    options = verification_options().with_provider(provider)
    try:
        response = await service.search(query, options)
    except SearchError as exc:
        print(f"Error: {exc}\n")
        log_search(query, provider, [], [], 0, (time.monotonic() - start) * 1000)
        return

    if isinstance(response, AggregatedResponse):
        used, failed = response.used_providers, response.failed_providers
        result_count = len(response.combined_results)
    else:
        used, failed = [response.provider], []
        result_count = len(response.results)

    context = format_response(response)
    decision = None
    if verdict:
        from truthseek.llm.verdict import VerdictLLM

        decision = await VerdictLLM().generate_decision(query, context)

    elapsed_ms = (time.monotonic() - start) * 1000
    log_search(query, provider, used, failed, result_count, elapsed_ms,
               verdict=decision["verdict"] if decision else None)

    if as_json:
        if isinstance(response, AggregatedResponse):
            payload = response.to_dict()
        else:
            payload = response_to_dict(response)
        if decision:
            payload["verdict"] = decision
        print(json.dumps(payload, indent=2, default=str))
        return

    print(f"Providers: {', '.join(used)}" + (f" (failed: {', '.join(failed)})" if failed else ""))
    print(f"\n{context}\n")
    if decision:
        print(f"Verdict: {decision['verdict']} (confidence: {decision['confidence']:.2f})")
        print(f"{decision['reasoning']}\n")
    print(f"Performance: {elapsed_ms:.0f}ms ({result_count} results)\n")


async def interactive_mode(service: SearchService, provider: str, verdict: bool) -> None:
    """REPL loop for interactive querying."""
    print("truthseek  (type 'quit' or 'exit' to stop)\n")
    while True:
        try:
            query = (await asyncio.to_thread(input, "Query: ")).strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye.")
            break
        if query.lower() in ("quit", "exit", "q"):
            print("Goodbye.")
            break
        if not query:
            continue
        await run_query(query, service, provider=provider, verdict=verdict)


async def _main(args: argparse.Namespace) -> int:
    service = await build_search_service(settings)
    if not service.available_providers():
        print("No search providers configured. Set TAVILY_API_KEY, EXA_API_KEY, "
              "PERPLEXITY_API_KEY, SERPER_API_KEY or Twitter credentials.")
        return 1

    if args.interactive:
        await interactive_mode(service, args.provider, args.verdict)
    else:
        await run_query(args.query, service, provider=args.provider,
                        verdict=args.verdict, as_json=args.json)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Multi-provider search for claim verification")
    parser.add_argument("query", nargs="?", help="Single query to run")
    parser.add_argument("--provider", "-p", default="all",
                        help="Provider name (tavily, exa, perplexity, serper, twitter) or 'all'")
    parser.add_argument("--verdict", action="store_true",
                        help="Ask the LLM for a verdict on the query as a claim")
    parser.add_argument("--json", action="store_true", help="Print the raw response as JSON")
    parser.add_argument("--interactive", "-i", action="store_true",
                        help="Start interactive REPL mode")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable DEBUG logging")
    args = parser.parse_args()

    if args.verbose:
        import logging
        logging.getLogger().setLevel(logging.DEBUG)
        for name in list(logging.root.manager.loggerDict):
            if name.startswith("truthseek"):
                logging.getLogger(name).setLevel(logging.DEBUG)

    if not args.interactive and not args.query:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
