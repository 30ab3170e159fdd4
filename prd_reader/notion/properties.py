"""Reduction of Notion database properties to display strings."""

import logging
from typing import Any, Callable, Dict, List

from .models import UNTITLED, CollectionRow

logger = logging.getLogger(__name__)


def plain_text(rich_text: Any) -> str:
    """Concatenate the plain-text runs of a rich text array."""
    if not isinstance(rich_text, list):
        return ""
    parts = []
    for item in rich_text:
        if not isinstance(item, dict):
            continue
        text = item.get("plain_text")
        if text is None and isinstance(item.get("text"), dict):
            text = item["text"].get("content")
        if text:
            parts.append(text)
    return "".join(parts)


def _number(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _date(value: Any) -> str:
    if not isinstance(value, dict) or not value.get("start"):
        return ""
    if value.get("end"):
        return f"{value['start']} ~ {value['end']}"
    return value["start"]


def _user(user: Any) -> str:
    if not isinstance(user, dict):
        return ""
    return user.get("name") or user.get("id") or ""


def _option(option: Any) -> str:
    if not isinstance(option, dict):
        return ""
    return option.get("name") or ""


def _join(values: List[str]) -> str:
    return ", ".join(v for v in values if v)


def _file_name(ref: Any) -> str:
    if not isinstance(ref, dict):
        return ""
    if ref.get("name"):
        return ref["name"]
    for key in ("external", "file"):
        inner = ref.get(key)
        if isinstance(inner, dict) and inner.get("url"):
            return inner["url"]
    return ""


def _formula(value: Any) -> str:
    if not isinstance(value, dict):
        return ""
    kind = value.get("type")
    if kind == "string":
        return value.get("string") or ""
    if kind == "number":
        return _number(value.get("number"))
    if kind == "boolean":
        return _boolean(value.get("boolean"))
    if kind == "date":
        return _date(value.get("date"))
    return ""


def _rollup(value: Any) -> str:
    if not isinstance(value, dict):
        return ""
    kind = value.get("type")
    if kind == "number":
        return _number(value.get("number"))
    if kind == "date":
        return _date(value.get("date"))
    if kind == "array":
        return _join([property_to_string(item) for item in value.get("array") or []])
    return ""


def _boolean(value: Any) -> str:
    if value is None:
        return ""
    return "true" if value else "false"


def _unique_id(value: Any) -> str:
    if not isinstance(value, dict) or value.get("number") is None:
        return ""
    number = _number(value.get("number"))
    prefix = value.get("prefix")
    return f"{prefix}-{number}" if prefix else number


_REDUCERS: Dict[str, Callable[[Any], str]] = {
    "title": plain_text,
    "rich_text": plain_text,
    "number": _number,
    "select": _option,
    "status": _option,
    "multi_select": lambda v: _join([_option(o) for o in v]) if isinstance(v, list) else "",
    "date": _date,
    "checkbox": _boolean,
    "url": lambda v: v if isinstance(v, str) else "",
    "email": lambda v: v if isinstance(v, str) else "",
    "phone_number": lambda v: v if isinstance(v, str) else "",
    "people": lambda v: _join([_user(u) for u in v]) if isinstance(v, list) else "",
    "created_by": _user,
    "last_edited_by": _user,
    "files": lambda v: _join([_file_name(f) for f in v]) if isinstance(v, list) else "",
    "relation": lambda v: str(len(v)) if isinstance(v, list) else "",
    "formula": _formula,
    "rollup": _rollup,
    "created_time": lambda v: v if isinstance(v, str) else "",
    "last_edited_time": lambda v: v if isinstance(v, str) else "",
    "unique_id": _unique_id,
}


def property_to_string(prop: Any) -> str:
    """
    Reduce a property value object to a single display string.

    Unsupported types and malformed values yield an empty string.

    Args:
        prop: Property object with "type" and a value keyed by that type

    Returns:
        Display string
    """
    if not isinstance(prop, dict):
        return ""
    prop_type = prop.get("type")
    reducer = _REDUCERS.get(prop_type)
    if reducer is None:
        return ""
    try:
        return reducer(prop.get(prop_type))
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.debug(f"Could not reduce {prop_type} property: {e}")
        return ""


def row_from_page(page: Dict[str, Any]) -> CollectionRow:
    """
    Build a CollectionRow from a database page object.

    Args:
        page: Page object returned by a database query

    Returns:
        Row with every property reduced to a string
    """
    properties = page.get("properties") or {}
    values: Dict[str, str] = {}
    title = ""
    for name, prop in properties.items():
        values[name] = property_to_string(prop)
        if not title and isinstance(prop, dict) and prop.get("type") == "title":
            title = values[name]

    return CollectionRow(
        id=page.get("id", ""),
        title=title or UNTITLED,
        url=page.get("url") or "",
        properties=values,
    )
