"""One lazy-sequence interface over the shapes client libraries return.

A result set may arrive as a list, a plain iterable, an async iterable, or a
*paged* object: an iterable page that exposes an awaitable ``next()`` which
fetches the following page (an empty page means the end). ``as_async_iter``
folds all of them into a single async iterator, so offset/count handling is
written once in ``collect``.
"""

import inspect
from typing import Any, AsyncIterator, List


def _is_paged(source: Any) -> bool:
    next_page = getattr(source, "next", None)
    return callable(next_page) and inspect.iscoroutinefunction(next_page)


async def _iter_pages(page: Any) -> AsyncIterator[Any]:
    while page is not None:
        items = list(page)
        if not items:
            return
        for item in items:
            yield item
        page = await page.next()


async def _iter_sync(source: Any) -> AsyncIterator[Any]:
    for item in source:
        yield item


def as_async_iter(source: Any) -> AsyncIterator[Any]:
    """Wrap *source* in an async iterator, fetching further pages on demand."""
    if source is None:
        return _iter_sync(())
    if _is_paged(source):
        return _iter_pages(source)
    if hasattr(source, "__aiter__"):
        return source.__aiter__()
    return _iter_sync(source)


async def collect(source: Any, offset: int = 0, count: int = 10) -> List[Any]:
    """Skip *offset* items, then return up to *count* items from *source*.

    ``None`` entries are ignored for both skipping and counting; other falsy
    values such as ``0`` or ``""`` are kept.
    """
    items: List[Any] = []
    if count <= 0:
        return items
    skipped = 0
    async for item in as_async_iter(source):
        if item is None:
            continue
        if skipped < offset:
            skipped += 1
            continue
        items.append(item)
        if len(items) >= count:
            break
    return items
