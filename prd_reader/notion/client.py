"""Async Notion API client wrapper with pagination support."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from notion_client import AsyncClient

from .models import UNTITLED, PageInfo
from .pagination import MAX_PAGE_SIZE, collect_paginated


class NotionClient:
    """Read-only Notion API client used by the fetcher and collection client."""

    def __init__(
        self,
        api_key: str,
        rate_limit_delay: float = 0.0,
        page_size: int = MAX_PAGE_SIZE,
        notion_version: Optional[str] = None,
        timeout_ms: int = 60_000,
    ):
        """
        Initialize Notion client.

        Args:
            api_key: Notion integration API key
            rate_limit_delay: Delay before each API call (seconds)
            page_size: Items requested per page on list endpoints
            notion_version: Optional Notion-Version header override
            timeout_ms: Per-request timeout of the underlying SDK
        """
        options: Dict[str, Any] = {"auth": api_key, "timeout_ms": timeout_ms}
        if notion_version:
            options["notion_version"] = notion_version
        self.client = AsyncClient(**options)
        self.rate_limit_delay = rate_limit_delay
        self.page_size = page_size
        self.logger = logging.getLogger(__name__)

    async def _rate_limit(self) -> None:
        """Apply rate limiting delay before an API call."""
        if self.rate_limit_delay > 0:
            await asyncio.sleep(self.rate_limit_delay)

    async def _call(self, endpoint, **kwargs) -> Dict[str, Any]:
        await self._rate_limit()
        return await endpoint(**kwargs)

    async def get_page(self, page_id: str) -> Dict[str, Any]:
        """
        Fetch a single page by ID.

        Args:
            page_id: Notion page ID

        Returns:
            Page object from Notion API
        """
        return await self._call(self.client.pages.retrieve, page_id=page_id)

    async def get_page_info(self, page_id: str) -> PageInfo:
        """Fetch a page and reduce it to PageInfo."""
        page = await self.get_page(page_id)
        return PageInfo.from_api(page, self.get_page_title(page))

    def get_page_title(self, page: Dict[str, Any]) -> str:
        """
        Extract title from page properties.

        Args:
            page: Page object from Notion API

        Returns:
            Page title, or "Untitled" when no title property has text
        """
        properties = page.get("properties") or {}

        # Try common title property names
        for prop_name in ["title", "Title", "Name", "name"]:
            title = _title_text(properties.get(prop_name))
            if title:
                return title

        # Fallback: check all properties for title type
        for prop in properties.values():
            title = _title_text(prop)
            if title:
                return title

        return UNTITLED

    async def list_block_children(self, block_id: str) -> List[Dict[str, Any]]:
        """
        Fetch all child blocks of a page or block, handling pagination.

        Args:
            block_id: Page ID or block ID

        Returns:
            Raw block objects in service order
        """
        return await collect_paginated(
            self._list_children_page, page_size=self.page_size, block_id=block_id
        )

    async def query_database(self, database_id: str) -> List[Dict[str, Any]]:
        """
        Query a database and return all of its pages, handling pagination.

        Args:
            database_id: Database ID

        Returns:
            Page objects from the database in service order
        """
        return await collect_paginated(
            self._query_database_page,
            page_size=self.page_size,
            database_id=database_id,
        )

    async def _list_children_page(self, **kwargs) -> Dict[str, Any]:
        return await self._call(self.client.blocks.children.list, **kwargs)

    async def _query_database_page(self, **kwargs) -> Dict[str, Any]:
        return await self._call(self.client.databases.query, **kwargs)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()


def _title_text(prop: Optional[Dict[str, Any]]) -> str:
    if not isinstance(prop, dict) or prop.get("type") != "title":
        return ""
    return "".join(t.get("plain_text", "") for t in prop.get("title") or [])
