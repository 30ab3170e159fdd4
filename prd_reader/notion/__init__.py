"""Notion integration module for fetching and simplifying page content."""

from .models import (
    BlockKind,
    CollectionRow,
    ContentNode,
    ContentUnit,
    PageInfo,
    SimplifiedContent,
)
from .client import NotionClient
from .databases import CollectionClient
from .retry import RetryPolicy, is_retryable_error
from .tree import BlockTreeFetcher
from .simplifier import ContentSimplifier
from .service import NotionContentService
from .renderer import render_markdown
from .urls import InvalidPageReferenceError, extract_page_id

__all__ = [
    "BlockKind",
    "CollectionRow",
    "ContentNode",
    "ContentUnit",
    "PageInfo",
    "SimplifiedContent",
    "NotionClient",
    "CollectionClient",
    "RetryPolicy",
    "is_retryable_error",
    "BlockTreeFetcher",
    "ContentSimplifier",
    "NotionContentService",
    "render_markdown",
    "InvalidPageReferenceError",
    "extract_page_id",
]
