"""Discover and read posts from a posts directory."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from postmatter.config import PostmatterConfig
from postmatter.errors import PostError
from postmatter.models import Post
from postmatter.parser import read_post

logger = logging.getLogger(__name__)


class PostReader:
    """Discovers and reads post files from a directory."""

    def __init__(self, config: PostmatterConfig | None = None) -> None:
        self.config = config or PostmatterConfig()

    def discover(self, posts_dir: Path) -> list[Path]:
        """List post files under ``posts_dir`` with a configured extension."""
        if not posts_dir.exists():
            return []

        extensions = {ext.lower() for ext in self.config.posts.extensions}
        return sorted(
            p for p in posts_dir.rglob("*") if p.is_file() and p.suffix.lower() in extensions
        )

    def read_all(self, posts_dir: Path) -> list[Post]:
        """Read every parsable post, sorted by date then slug.

        Files that fail to read or parse are logged and skipped.
        """
        posts: list[Post] = []
        for path in self.discover(posts_dir):
            post = self._parse_file(path)
            if post is not None:
                posts.append(post)

        return sorted(posts, key=lambda p: (p.date or date.min, p.slug))

    def read_category(self, posts_dir: Path, category: str) -> list[Post]:
        """Read posts whose category matches ``category`` (case-insensitive)."""
        wanted = category.strip().lower()
        return [p for p in self.read_all(posts_dir) if p.category.lower() == wanted]

    def _parse_file(self, path: Path) -> Post | None:
        try:
            return read_post(path, required_fields=self.config.front_matter.required)
        except (OSError, UnicodeDecodeError):
            logger.warning("Could not read post file: %s", path)
            return None
        except PostError as exc:
            logger.warning("Skipping malformed post %s", exc)
            return None


def keyword_index(posts: list[Post]) -> dict[str, list[str]]:
    """Map each keyword to the slugs of the posts that declare it."""
    index: dict[str, list[str]] = {}
    for post in posts:
        for keyword in post.keywords:
            index.setdefault(keyword, []).append(post.slug)
    return dict(sorted(index.items()))
