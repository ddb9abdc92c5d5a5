"""Exporter factory and registry."""

from __future__ import annotations

from postmatter.exporters.base import PostExporter, page_metadata
from postmatter.models import ExportFormat

__all__ = ["PostExporter", "create_exporter", "page_metadata"]


def create_exporter(fmt: ExportFormat | str) -> PostExporter:
    """Create an exporter for the given format.

    Raises:
        ValueError: If the format is unknown.
    """
    if isinstance(fmt, str):
        try:
            fmt = ExportFormat(fmt)
        except ValueError:
            raise ValueError(f"Unknown export format: {fmt!r}") from None

    from postmatter.exporters.json import JsonExporter
    from postmatter.exporters.markdown import MarkdownExporter

    exporters: dict[ExportFormat, PostExporter] = {
        ExportFormat.MARKDOWN: MarkdownExporter(),
        ExportFormat.JSON: JsonExporter(),
    }

    return exporters[fmt]
