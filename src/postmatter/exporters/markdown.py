"""Plain markdown exporter: canonical re-serialization of each post."""

from __future__ import annotations

from pathlib import Path

from postmatter.exporters.base import PostExporter, export_stem
from postmatter.models import Post
from postmatter.writer import serialize_post


class MarkdownExporter(PostExporter):
    """Writes posts back out as front matter plus markdown body."""

    def format_post(self, post: Post) -> str:
        return serialize_post(post)

    def output_path(self, output_dir: Path, post: Post) -> Path:
        return output_dir / "markdown" / f"{export_stem(post)}.md"

    def format_index(self, posts: list[Post]) -> str:
        lines: list[str] = [
            "# Posts",
            "",
        ]

        by_category: dict[str, list[Post]] = {}
        for post in posts:
            by_category.setdefault(post.category or "Uncategorized", []).append(post)

        for category in sorted(by_category, key=str.lower):
            lines.append(f"## {category}")
            lines.append("")
            entries = sorted(by_category[category], key=lambda p: (p.date is None, p.date, p.slug))
            for post in entries:
                link = f"- [{post.title}]({export_stem(post)}.md)"
                if post.date is not None:
                    link += f" ({post.date.isoformat()})"
                lines.append(link)
            lines.append("")

        return "\n".join(lines)

    def index_path(self, output_dir: Path) -> Path:
        return output_dir / "markdown" / "README.md"
