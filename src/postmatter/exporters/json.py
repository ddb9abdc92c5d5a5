"""JSON exporter: structured metadata and typed segments for a renderer."""

from __future__ import annotations

import json
from pathlib import Path

from postmatter.exporters.base import PostExporter, export_stem, page_metadata
from postmatter.models import CodeBlock, Post

_CODE_FIELDS = {"kind", "language", "info", "code", "style", "line"}


class JsonExporter(PostExporter):
    """Emits ``{"metadata": ..., "segments": [...]}`` per post."""

    def format_post(self, post: Post) -> str:
        segments = [
            seg.model_dump(mode="json", include=_CODE_FIELDS)
            if isinstance(seg, CodeBlock)
            else seg.model_dump(mode="json")
            for seg in post.segments
        ]
        payload = {
            "slug": post.slug,
            "date": post.date.isoformat() if post.date else None,
            "metadata": page_metadata(post),
            "segments": segments,
        }
        return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"

    def output_path(self, output_dir: Path, post: Post) -> Path:
        return output_dir / "json" / f"{export_stem(post)}.json"

    def format_index(self, posts: list[Post]) -> str:
        entries = [
            {
                "slug": post.slug,
                "path": f"{export_stem(post)}.json",
                "date": post.date.isoformat() if post.date else None,
                "metadata": page_metadata(post),
            }
            for post in posts
        ]
        return json.dumps(entries, indent=2, ensure_ascii=False) + "\n"

    def index_path(self, output_dir: Path) -> Path:
        return output_dir / "json" / "index.json"
