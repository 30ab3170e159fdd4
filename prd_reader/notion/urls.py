"""Parsing of Notion page references (IDs and share URLs)."""

import re
from urllib.parse import parse_qs, urlparse

_ID_RE = re.compile(
    r"([0-9a-f]{8}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{12})",
    re.IGNORECASE,
)
# Share URLs end with the ID, after an optional "Title-" slug
_TRAILING_ID_RE = re.compile(
    r"([0-9a-f]{32}|[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})$",
    re.IGNORECASE,
)


class InvalidPageReferenceError(ValueError):
    """Raised when no Notion page ID can be found in a reference."""


def format_page_id(raw_id: str) -> str:
    """Return the dashed 8-4-4-4-12 form of a 32 hex digit ID."""
    compact = raw_id.replace("-", "").lower()
    return "-".join(
        [compact[:8], compact[8:12], compact[12:16], compact[16:20], compact[20:]]
    )


def extract_page_id(reference: str) -> str:
    """
    Extract a page ID from an ID or a Notion URL.

    Accepted forms include ``https://www.notion.so/ws/Title-<id>``,
    ``https://ws.notion.site/<id>?v=...`` and peek links carrying ``?p=<id>``.

    Args:
        reference: Page ID (dashed or not) or Notion URL

    Returns:
        Dashed page ID

    Raises:
        InvalidPageReferenceError: If the reference holds no page ID
    """
    reference = (reference or "").strip()
    if not reference:
        raise InvalidPageReferenceError("Empty page reference")

    if "://" not in reference:
        match = _ID_RE.fullmatch(reference)
        if match:
            return format_page_id(match.group(1))
        raise InvalidPageReferenceError(f"Not a Notion page ID or URL: {reference}")

    parsed = urlparse(reference)
    # Peek links point at the opened page, not the database in the path
    peek = parse_qs(parsed.query).get("p")
    if peek:
        match = _ID_RE.fullmatch(peek[0])
        if match:
            return format_page_id(match.group(1))

    last_segment = parsed.path.rstrip("/").rsplit("/", 1)[-1]
    match = _TRAILING_ID_RE.search(last_segment)
    if match:
        return format_page_id(match.group(1))

    raise InvalidPageReferenceError(f"No page ID found in URL: {reference}")
