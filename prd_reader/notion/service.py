"""End-to-end retrieval of simplified page content."""

import asyncio
import logging
from typing import List, Optional

from ..config.config_schema import NotionConfig
from .client import NotionClient
from .databases import CollectionClient
from .models import SimplifiedContent
from .retry import RetryPolicy
from .simplifier import ContentSimplifier
from .tree import DEFAULT_MAX_DEPTH, BlockTreeFetcher
from .urls import extract_page_id


class NotionContentService:
    """Fetches a page, its block tree and embedded databases, and simplifies them."""

    def __init__(
        self,
        client: NotionClient,
        fetcher: BlockTreeFetcher,
        simplifier: ContentSimplifier,
        max_depth: int = DEFAULT_MAX_DEPTH,
        fetch_timeout: Optional[float] = None,
    ):
        """
        Initialize service.

        Args:
            client: NotionClient used for page metadata
            fetcher: Block tree fetcher
            simplifier: Content simplifier
            max_depth: Default depth ceiling
            fetch_timeout: Default overall deadline in seconds (None for none)
        """
        self.client = client
        self.fetcher = fetcher
        self.simplifier = simplifier
        self.max_depth = max_depth
        self.fetch_timeout = fetch_timeout
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: NotionConfig) -> "NotionContentService":
        """Wire client, fetcher, retry policy and simplifier from configuration."""
        client = NotionClient(
            api_key=config.api_key,
            rate_limit_delay=config.rate_limit_delay,
            page_size=config.page_size,
            notion_version=config.notion_version,
            timeout_ms=config.timeout_ms,
        )
        retry_policy = RetryPolicy(
            max_attempts=config.retry.max_attempts,
            base_delay=config.retry.base_delay,
        )
        return cls(
            client=client,
            fetcher=BlockTreeFetcher(client, max_concurrency=config.max_concurrency),
            simplifier=ContentSimplifier(CollectionClient(client, retry_policy)),
            max_depth=config.max_depth,
            fetch_timeout=config.fetch_timeout,
        )

    async def get_simplified_content(
        self,
        page_ref: str,
        max_depth: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> SimplifiedContent:
        """
        Fetch and simplify a page.

        Failing to retrieve the page itself or to list its top-level blocks,
        including running past the timeout while doing so,
        raises. Failures further down are reported in ``warnings``.

        Args:
            page_ref: Page ID or Notion URL
            max_depth: Depth ceiling override
            timeout: Overall deadline override in seconds

        Returns:
            SimplifiedContent for the page
        """
        page_id = extract_page_id(page_ref)
        max_depth = max_depth if max_depth is not None else self.max_depth
        timeout = timeout if timeout is not None else self.fetch_timeout

        deadline = None
        if timeout is not None:
            deadline = asyncio.get_running_loop().time() + timeout

        warnings: List[str] = []

        page_info = await self._get_page_info(page_id, deadline)
        self.logger.info(f"Fetching content of '{page_info.title}' ({page_id})")

        nodes = await self.fetcher.fetch(
            page_id, max_depth=max_depth, deadline=deadline, warnings=warnings
        )
        contents = await self.simplifier.simplify(nodes, deadline=deadline, warnings=warnings)

        self.logger.info(
            f"Simplified '{page_info.title}': {len(contents)} units, "
            f"{len(warnings)} warnings"
        )
        return SimplifiedContent(
            title=page_info.title,
            url=page_info.url,
            last_edited_time=page_info.last_edited_time,
            contents=contents,
            warnings=warnings,
        )

    async def _get_page_info(self, page_id: str, deadline: Optional[float]):
        if deadline is None:
            return await self.client.get_page_info(page_id)

        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise asyncio.TimeoutError()
        return await asyncio.wait_for(self.client.get_page_info(page_id), timeout=remaining)

    async def close(self) -> None:
        await self.client.close()
