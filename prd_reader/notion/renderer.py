"""Markdown rendering of simplified content, used for LLM prompts."""

from typing import List

from .models import BlockKind, CollectionRow, ContentUnit, SimplifiedContent

INDENT = "  "


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _pipe_table(rows: List[List[str]], indent: str) -> List[str]:
    if not rows:
        return []
    width = max(len(row) for row in rows)
    padded = [row + [""] * (width - len(row)) for row in rows]
    lines = [indent + "| " + " | ".join(_escape_cell(c) for c in padded[0]) + " |"]
    lines.append(indent + "|" + "---|" * width)
    for row in padded[1:]:
        lines.append(indent + "| " + " | ".join(_escape_cell(c) for c in row) + " |")
    return lines


def _database_rows(rows: List[CollectionRow]) -> List[List[str]]:
    columns: List[str] = []
    for row in rows:
        for name in row.properties:
            if name not in columns:
                columns.append(name)
    table = [["Title"] + columns]
    for row in rows:
        table.append([row.title] + [row.properties.get(name, "") for name in columns])
    return table


def _prefixed(text: str, prefix: str) -> List[str]:
    return [prefix + line for line in text.split("\n")]


def render_unit(unit: ContentUnit) -> List[str]:
    """Render one unit (and nested toggle children) as markdown lines."""
    indent = INDENT * unit.indent_level
    kind = unit.kind
    text = unit.content

    if unit.level is not None:
        return [f"{indent}{'#' * unit.level} {text}"]
    if kind is BlockKind.BULLETED_LIST_ITEM:
        return _prefixed(text, f"{indent}- ")
    if kind is BlockKind.NUMBERED_LIST_ITEM:
        return _prefixed(text, f"{indent}1. ")
    if kind is BlockKind.TO_DO:
        mark = "x" if unit.checked else " "
        return [f"{indent}- [{mark}] {text}"]
    if kind in (BlockKind.QUOTE, BlockKind.CALLOUT):
        return _prefixed(text, f"{indent}> ")
    if kind is BlockKind.CODE:
        lines = [f"{indent}```{unit.language or ''}"]
        lines.extend(indent + line for line in text.split("\n"))
        lines.append(f"{indent}```")
        return lines
    if kind is BlockKind.DIVIDER:
        return [f"{indent}{text}"]
    if kind is BlockKind.IMAGE:
        return [f"{indent}![]({unit.url})"] if unit.url else []
    if kind is BlockKind.TABLE:
        return _pipe_table(unit.table_data or [], indent)
    if kind is BlockKind.CHILD_DATABASE:
        lines = [f"{indent}**{text}**"]
        if unit.collection_rows:
            lines.extend(_pipe_table(_database_rows(unit.collection_rows), indent))
        return lines
    if kind is BlockKind.TOGGLE:
        lines = [f"{indent}<details>", f"{indent}<summary>{text}</summary>", ""]
        for child in unit.children or []:
            lines.extend(render_unit(child))
        lines.append(f"{indent}</details>")
        return lines
    return _prefixed(text, indent)


def render_markdown(content: SimplifiedContent) -> str:
    """
    Render simplified content as a markdown document.

    Args:
        content: Result of NotionContentService.get_simplified_content

    Returns:
        Markdown text starting with the page title
    """
    lines = [f"# {content.title}", ""]
    for unit in content.contents:
        lines.extend(render_unit(unit))
    return "\n".join(lines).rstrip() + "\n"
