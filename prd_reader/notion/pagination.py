"""Cursor-based pagination over Notion list endpoints."""

import logging
from typing import Any, Awaitable, Callable, Dict, List

MAX_PAGE_SIZE = 100

logger = logging.getLogger(__name__)


async def collect_paginated(
    list_fn: Callable[..., Awaitable[Dict[str, Any]]],
    page_size: int = MAX_PAGE_SIZE,
    **kwargs: Any,
) -> List[Dict[str, Any]]:
    """
    Fetch every item from a paginated Notion endpoint, in service order.

    Errors from ``list_fn`` are not caught; a failure on any page aborts the
    whole collection.

    Args:
        list_fn: Endpoint coroutine, e.g. ``client.blocks.children.list``
        page_size: Items per request, clamped to 1..100
        **kwargs: Endpoint arguments such as ``block_id``

    Returns:
        All ``results`` entries across pages
    """
    page_size = max(1, min(page_size, MAX_PAGE_SIZE))
    items: List[Dict[str, Any]] = []
    cursor = None
    pages = 0

    while True:
        params = dict(kwargs, page_size=page_size)
        if cursor:
            params["start_cursor"] = cursor

        response = await list_fn(**params)
        pages += 1
        items.extend(response.get("results", []))

        cursor = response.get("next_cursor")
        if not response.get("has_more") or not cursor:
            break

    logger.debug(f"Collected {len(items)} items in {pages} page(s)")
    return items
