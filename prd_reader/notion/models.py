"""Dataclasses for fetched Notion content and its simplified form."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

UNTITLED = "Untitled"
DIVIDER_TEXT = "---"


class BlockKind(str, Enum):
    """Block types understood by the fetcher and simplifier."""

    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    PARAGRAPH = "paragraph"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    CALLOUT = "callout"
    QUOTE = "quote"
    CODE = "code"
    TABLE = "table"
    TABLE_ROW = "table_row"
    IMAGE = "image"
    TOGGLE = "toggle"
    DIVIDER = "divider"
    CHILD_DATABASE = "child_database"
    UNKNOWN = "unknown"

    @classmethod
    def from_api(cls, type_name: Optional[str]) -> "BlockKind":
        """Map a Notion block type string to a kind, defaulting to UNKNOWN."""
        if not isinstance(type_name, str):
            return cls.UNKNOWN
        try:
            return cls(type_name)
        except ValueError:
            return cls.UNKNOWN

    @property
    def heading_level(self) -> Optional[int]:
        """Heading level 1-3, or None for non-heading kinds."""
        return _HEADING_LEVELS.get(self)


_HEADING_LEVELS = {
    BlockKind.HEADING_1: 1,
    BlockKind.HEADING_2: 2,
    BlockKind.HEADING_3: 3,
}


@dataclass
class ContentNode:
    """One block in the fetched tree."""

    id: str
    kind: BlockKind
    type_name: str = ""
    created_time: Optional[str] = None
    last_edited_time: Optional[str] = None
    has_children: bool = False
    archived: bool = False
    payload: Dict[str, Any] = field(default_factory=dict)
    children: List["ContentNode"] = field(default_factory=list)
    expanded: bool = False

    @property
    def unexpanded(self) -> bool:
        """True when the block has children that were not fetched."""
        return self.has_children and not self.expanded

    @classmethod
    def from_api(cls, block: Dict[str, Any]) -> "ContentNode":
        """
        Decode a raw block object.

        Unknown or missing types produce an UNKNOWN node with an empty payload.

        Args:
            block: Block object from Notion API

        Returns:
            ContentNode without children
        """
        type_name = block.get("type") or ""
        kind = BlockKind.from_api(type_name)
        payload: Dict[str, Any] = {}
        if kind is not BlockKind.UNKNOWN:
            data = block.get(type_name)
            if isinstance(data, dict):
                payload = data

        return cls(
            id=block.get("id", ""),
            kind=kind,
            type_name=type_name,
            created_time=block.get("created_time"),
            last_edited_time=block.get("last_edited_time"),
            has_children=bool(block.get("has_children", False)),
            archived=bool(block.get("archived", False)),
            payload=payload,
        )


@dataclass
class PageInfo:
    """Metadata of the root page."""

    id: str
    title: str = UNTITLED
    url: str = ""
    created_time: Optional[str] = None
    last_edited_time: Optional[str] = None
    cover_url: Optional[str] = None
    icon: Optional[str] = None

    @classmethod
    def from_api(cls, page: Dict[str, Any], title: str) -> "PageInfo":
        """Build page info from a page object and its already-extracted title."""
        return cls(
            id=page.get("id", ""),
            title=title or UNTITLED,
            url=page.get("url") or "",
            created_time=page.get("created_time"),
            last_edited_time=page.get("last_edited_time"),
            cover_url=file_url(page.get("cover")),
            icon=_icon_reference(page.get("icon")),
        )


@dataclass
class CollectionRow:
    """A database entry reduced to display strings."""

    id: str
    title: str
    url: str
    properties: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "properties": dict(self.properties),
        }


@dataclass
class ContentUnit:
    """One entry of the simplified, flattened content."""

    kind: BlockKind
    content: str
    indent_level: int = 0
    level: Optional[int] = None
    checked: Optional[bool] = None
    language: Optional[str] = None
    url: Optional[str] = None
    table_data: Optional[List[List[str]]] = None
    collection_rows: Optional[List[CollectionRow]] = None
    children: Optional[List["ContentUnit"]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys, omitting unset optional fields."""
        data: Dict[str, Any] = {
            "type": self.kind.value,
            "content": self.content,
            "indentLevel": self.indent_level,
        }
        if self.level is not None:
            data["level"] = self.level
        if self.checked is not None:
            data["checked"] = self.checked
        if self.language is not None:
            data["language"] = self.language
        if self.url is not None:
            data["url"] = self.url
        if self.table_data is not None:
            data["tableData"] = [list(row) for row in self.table_data]
        if self.collection_rows is not None:
            data["databaseRows"] = [row.to_dict() for row in self.collection_rows]
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass(frozen=True)
class SimplifiedContent:
    """Final result of fetching and simplifying a page.

    ``contents`` and ``warnings`` are stored as tuples, whatever sequence
    they were given as.
    """

    title: str
    url: str
    last_edited_time: Optional[str]
    contents: Tuple[ContentUnit, ...] = ()
    warnings: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "contents", tuple(self.contents))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "lastEditedTime": self.last_edited_time,
            "contents": [unit.to_dict() for unit in self.contents],
            "warnings": list(self.warnings),
        }


def file_url(ref: Optional[Dict[str, Any]]) -> Optional[str]:
    """Resolve an external-or-hosted file reference to its URL."""
    if not isinstance(ref, dict):
        return None
    ref_type = ref.get("type")
    if ref_type in ("external", "file", "file_upload"):
        inner = ref.get(ref_type)
        if isinstance(inner, dict) and inner.get("url"):
            return inner["url"]
    # Some payloads omit "type"; fall back to whichever form is present
    for key in ("external", "file"):
        inner = ref.get(key)
        if isinstance(inner, dict) and inner.get("url"):
            return inner["url"]
    return None


def _icon_reference(icon: Optional[Dict[str, Any]]) -> Optional[str]:
    if not isinstance(icon, dict):
        return None
    if icon.get("type") == "emoji":
        return icon.get("emoji")
    return file_url(icon)
