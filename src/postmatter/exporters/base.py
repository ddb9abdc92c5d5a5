"""Base class for post exporters, plus the metadata every format shares."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from postmatter.models import Post
from postmatter.writer import post_filename

PAGE_KEYS = ("title", "category", "keywords", "comments", "layout")


def page_metadata(post: Post) -> dict[str, object]:
    """Metadata a renderer must reflect on the page.

    Standard keys come first with typed values; any other front-matter
    keys follow verbatim in authored order.
    """
    metadata: dict[str, object] = {
        "title": post.title,
        "category": post.category,
        "keywords": post.keywords,
        "comments": post.comments,
        "layout": post.layout,
    }
    for key, value in post.front_matter.as_dict().items():
        if key not in PAGE_KEYS:
            metadata[key] = value
    return metadata


def export_stem(post: Post) -> str:
    """Base filename (without suffix) an exported post is written under."""
    if post.source_path is not None:
        return post.source_path.stem
    return Path(post_filename(post)).stem


class PostExporter(ABC):
    """Base class for post export formats."""

    @abstractmethod
    def format_post(self, post: Post) -> str:
        """Render one post in this format."""

    @abstractmethod
    def output_path(self, output_dir: Path, post: Post) -> Path:
        """Compute the output file path for an exported post."""

    @abstractmethod
    def format_index(self, posts: list[Post]) -> str:
        """Generate an index listing all exported posts."""

    @abstractmethod
    def index_path(self, output_dir: Path) -> Path:
        """Compute the output file path for the index."""
