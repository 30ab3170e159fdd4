"""Retrieval and simplification of Notion PRD pages for downstream prompting."""

__version__ = "0.1.0"
