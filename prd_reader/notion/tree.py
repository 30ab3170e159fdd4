"""Recursive, concurrent block tree fetching."""

import asyncio
import logging
from typing import List, Optional

from .client import NotionClient
from .models import ContentNode

DEFAULT_MAX_DEPTH = 99
DEFAULT_MAX_CONCURRENCY = 8


class BlockTreeFetcher:
    """Builds the block tree under a page.

    The root is depth 0 and its children depth 1. A node at depth ``k`` is
    expanded only while ``k < max_depth``; deeper nodes keep an empty child
    list, ``unexpanded`` stays True and one warning counts them. Sibling
    subtrees are fetched concurrently, every API call going through one
    semaphore.
    """

    def __init__(
        self,
        client: NotionClient,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        """
        Initialize fetcher.

        Args:
            client: NotionClient used to list block children
            max_concurrency: Maximum number of in-flight child listings
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.client = client
        self.max_concurrency = max_concurrency
        self.logger = logging.getLogger(__name__)

    async def fetch(
        self,
        root_id: str,
        max_depth: int = DEFAULT_MAX_DEPTH,
        deadline: Optional[float] = None,
        warnings: Optional[List[str]] = None,
    ) -> List[ContentNode]:
        """
        Fetch the block tree under ``root_id``.

        Failure to list the root's own children propagates. Failures below
        that leave the affected node with empty children and add a warning.

        Args:
            root_id: Page or block ID
            max_depth: Depth ceiling, at least 1
            deadline: Optional absolute event-loop time for the whole fetch
            warnings: Optional list collecting descriptions of skipped subtrees

        Returns:
            Top-level nodes in service order
        """
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")

        semaphore = asyncio.Semaphore(self.max_concurrency)
        if warnings is None:
            warnings = []

        nodes = await self._fetch_level(root_id, 1, max_depth, semaphore, deadline, warnings)
        self.logger.debug(f"Fetched {len(nodes)} top-level blocks under {root_id}")

        truncated = _count_at_ceiling(nodes, 1, max_depth)
        if truncated:
            message = f"{truncated} block(s) at the depth ceiling ({max_depth}) have unfetched children"
            self.logger.warning(message)
            warnings.append(message)
        return nodes

    async def _fetch_level(
        self,
        parent_id: str,
        depth: int,
        max_depth: int,
        semaphore: asyncio.Semaphore,
        deadline: Optional[float],
        warnings: List[str],
    ) -> List[ContentNode]:
        """List the children of ``parent_id`` (at ``depth``) and expand them."""
        async with semaphore:
            raw_blocks = await self._list_children(parent_id, deadline)

        nodes = [ContentNode.from_api(block) for block in raw_blocks]
        expandable = [
            node for node in nodes if node.has_children and depth < max_depth
        ]
        if not expandable:
            return nodes

        # gather keeps argument order, so results line up with ``expandable``
        results = await asyncio.gather(
            *(
                self._fetch_subtree(node, depth + 1, max_depth, semaphore, deadline, warnings)
                for node in expandable
            )
        )
        for node, children in zip(expandable, results):
            if children is not None:
                node.children = children
                node.expanded = True
        return nodes

    async def _fetch_subtree(
        self,
        node: ContentNode,
        depth: int,
        max_depth: int,
        semaphore: asyncio.Semaphore,
        deadline: Optional[float],
        warnings: List[str],
    ) -> Optional[List[ContentNode]]:
        """Fetch one subtree; None when it failed or ran past the deadline."""
        try:
            return await self._fetch_level(
                node.id, depth, max_depth, semaphore, deadline, warnings
            )
        except asyncio.TimeoutError:
            message = f"Deadline reached before children of block {node.id} were fetched"
        except Exception as e:
            message = f"Failed to fetch children of block {node.id}: {e}"

        self.logger.warning(message)
        warnings.append(message)
        return None

    async def _list_children(self, block_id: str, deadline: Optional[float]):
        if deadline is None:
            return await self.client.list_block_children(block_id)

        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise asyncio.TimeoutError()
        return await asyncio.wait_for(
            self.client.list_block_children(block_id), timeout=remaining
        )


def _count_at_ceiling(nodes: List[ContentNode], depth: int, max_depth: int) -> int:
    """Count nodes left unexpanded because they sit at the depth ceiling."""
    if depth >= max_depth:
        return sum(1 for node in nodes if node.unexpanded)
    return sum(_count_at_ceiling(node.children, depth + 1, max_depth) for node in nodes)
