"""
Markdown and metadata exporters.
"""

from .markdown_renderer import (
    MarkdownRenderer,
    format_type_label,
    make_anchor,
    make_schema_anchor,
)
from .markdown_exporter import MarkdownExporter, group_by_tags
from .json_exporter import JsonExporter

__all__ = [
    "MarkdownRenderer",
    "MarkdownExporter",
    "JsonExporter",
    "format_type_label",
    "group_by_tags",
    "make_anchor",
    "make_schema_anchor",
]
