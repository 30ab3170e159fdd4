"""Flattening of a block tree into simplified content units."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from .databases import CollectionClient
from .models import (
    DIVIDER_TEXT,
    BlockKind,
    CollectionRow,
    ContentNode,
    ContentUnit,
    file_url,
)
from .properties import plain_text

LOAD_FAILED_MARKER = "(load failed)"

# Kinds that are kept even when they carry no inline text
_KEPT_WITHOUT_TEXT = frozenset(
    {BlockKind.TABLE, BlockKind.IMAGE, BlockKind.CHILD_DATABASE}
)
# Kinds that never produce a unit of their own
_NEVER_EMITTED = frozenset({BlockKind.UNKNOWN, BlockKind.TABLE_ROW})


def extract_text(payload: Dict[str, Any]) -> str:
    """
    Text of a block payload: its rich_text runs, else its title, else "".

    Args:
        payload: Kind-specific block data

    Returns:
        Plain text
    """
    rich_text = payload.get("rich_text")
    if rich_text is not None:
        return plain_text(rich_text)

    title = payload.get("title")
    if isinstance(title, str):
        return title
    return plain_text(title)


class ContentSimplifier:
    """Turns a fetched block tree into an ordered list of ContentUnits.

    The walk is depth-first pre-order. A unit's children follow it at
    ``indent_level + 1``, except toggles (children nested in the unit),
    tables (rows folded into ``table_data``) and databases (rows come from
    the collection client only). Units without text are dropped unless they
    are tables, images or databases; the children of a dropped node are
    emitted at the dropped node's own indentation.
    """

    def __init__(self, collection_client: Optional[CollectionClient] = None):
        self.collection_client = collection_client
        self.logger = logging.getLogger(__name__)

    async def simplify(
        self,
        nodes: List[ContentNode],
        deadline: Optional[float] = None,
        warnings: Optional[List[str]] = None,
    ) -> List[ContentUnit]:
        """
        Flatten ``nodes`` and their descendants.

        Args:
            nodes: Top-level nodes from BlockTreeFetcher.fetch
            deadline: Optional absolute event-loop time for database queries
            warnings: Optional list collecting descriptions of failed databases

        Returns:
            Units in document order
        """
        if warnings is None:
            warnings = []
        units: List[ContentUnit] = []
        await self._walk(nodes, 0, units, deadline, warnings)
        return units

    async def _walk(
        self,
        nodes: List[ContentNode],
        indent: int,
        out: List[ContentUnit],
        deadline: Optional[float],
        warnings: List[str],
    ) -> None:
        for node in nodes:
            kind = node.kind

            if kind is BlockKind.TABLE:
                out.append(self._table_unit(node, indent))
                continue

            if kind is BlockKind.CHILD_DATABASE:
                out.append(await self._database_unit(node, indent, deadline, warnings))
                continue

            if kind is BlockKind.TOGGLE:
                text = extract_text(node.payload)
                if text:
                    nested: List[ContentUnit] = []
                    await self._walk(node.children, indent + 1, nested, deadline, warnings)
                    out.append(
                        ContentUnit(kind=kind, content=text, indent_level=indent, children=nested)
                    )
                else:
                    await self._walk(node.children, indent, out, deadline, warnings)
                continue

            unit = self._project(node, indent)
            if unit is not None:
                out.append(unit)
            if node.children:
                # Children of a dropped node take its place
                child_indent = indent + 1 if unit is not None else indent
                await self._walk(node.children, child_indent, out, deadline, warnings)

    def _project(self, node: ContentNode, indent: int) -> Optional[ContentUnit]:
        """Unit for a plain block, or None when it is dropped."""
        kind = node.kind
        if kind in _NEVER_EMITTED:
            return None
        if kind is BlockKind.DIVIDER:
            return ContentUnit(kind=kind, content=DIVIDER_TEXT, indent_level=indent)

        if kind is BlockKind.IMAGE:
            url = file_url(node.payload)
            return ContentUnit(kind=kind, content=url or "", indent_level=indent, url=url)

        text = extract_text(node.payload)
        if not text and kind not in _KEPT_WITHOUT_TEXT:
            return None

        unit = ContentUnit(kind=kind, content=text, indent_level=indent)
        if kind.heading_level is not None:
            unit.level = kind.heading_level
        elif kind is BlockKind.TO_DO:
            unit.checked = bool(node.payload.get("checked", False))
        elif kind is BlockKind.CODE:
            unit.language = node.payload.get("language") or ""
        return unit

    def _table_unit(self, node: ContentNode, indent: int) -> ContentUnit:
        rows: List[List[str]] = []
        for child in node.children:
            if child.kind is not BlockKind.TABLE_ROW:
                continue
            cells = child.payload.get("cells") or []
            rows.append([plain_text(cell) for cell in cells])

        return ContentUnit(
            kind=BlockKind.TABLE,
            content=f"Table ({len(rows)} rows)",
            indent_level=indent,
            table_data=rows,
        )

    async def _database_unit(
        self,
        node: ContentNode,
        indent: int,
        deadline: Optional[float],
        warnings: List[str],
    ) -> ContentUnit:
        title = extract_text(node.payload)
        rows: List[CollectionRow] = []

        if self.collection_client is not None:
            message = None
            try:
                rows = await self._query_rows(node.id, deadline)
            except asyncio.TimeoutError:
                message = f"Deadline reached before database {node.id} was loaded"
            except Exception as e:
                message = f"Failed to load database {node.id}: {e}"

            if message:
                self.logger.warning(message)
                warnings.append(message)
                title = f"{title} {LOAD_FAILED_MARKER}".strip()

        return ContentUnit(
            kind=BlockKind.CHILD_DATABASE,
            content=title,
            indent_level=indent,
            collection_rows=rows,
        )

    async def _query_rows(
        self, collection_id: str, deadline: Optional[float]
    ) -> List[CollectionRow]:
        if deadline is None:
            return await self.collection_client.query(collection_id)

        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise asyncio.TimeoutError()
        return await asyncio.wait_for(
            self.collection_client.query(collection_id, deadline=deadline),
            timeout=remaining,
        )
