"""Serialize, author and edit post documents."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from pathlib import Path

from postmatter.errors import MalformedMetadataError, PostExistsError
from postmatter.models import (
    FrontMatter,
    FrontMatterField,
    Post,
    Segment,
    parse_bool,
    slugify,
    split_keywords,
)
from postmatter.parser import FRONT_MATTER_OPEN, is_valid_key, parse_body

logger = logging.getLogger(__name__)

_NEEDS_QUOTE_START = tuple("[{\"'#&*!|>%@`")


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _quote(value: str, quote: str) -> str:
    if quote == "'":
        return "'" + value.replace("'", "''") + "'"
    return '"' + value.replace('"', '\\"') + '"'


def _render_scalar(value: str, quote: str) -> str:
    if quote:
        return _quote(value, quote)
    if value.startswith(_NEEDS_QUOTE_START) or ": " in value or value.endswith(":"):
        return _quote(value, '"')
    return value


def _render_item(item: str, *, inline: bool) -> str:
    if item.startswith(_NEEDS_QUOTE_START) or item != item.strip():
        return _quote(item, '"')
    if inline and ("," in item or "]" in item):
        return _quote(item, '"')
    return item


def serialize_front_matter(front_matter: FrontMatter) -> str:
    """Render front matter, delimiters included."""
    lines: list[str] = [FRONT_MATTER_OPEN]
    for f in front_matter.fields:
        if isinstance(f.value, list):
            if f.inline or not f.value:
                items = ", ".join(_render_item(item, inline=True) for item in f.value)
                lines.append(f"{f.key}: [{items}]")
            else:
                lines.append(f"{f.key}:")
                lines.extend(f"  - {_render_item(item, inline=False)}" for item in f.value)
        elif f.value == "" and not f.quote:
            lines.append(f"{f.key}:")
        else:
            lines.append(f"{f.key}: {_render_scalar(f.value, f.quote)}")
    lines.append(FRONT_MATTER_OPEN)
    return "\n".join(lines) + "\n"


def serialize_body(segments: Iterable[Segment]) -> str:
    """Concatenate segments back into body text."""
    return "".join(seg.source for seg in segments)


def serialize_post(post: Post) -> str:
    """Render a whole post.

    Code blocks are emitted from their recorded delimiters, so every
    fenced block comes back byte for byte.
    """
    return serialize_front_matter(post.front_matter) + serialize_body(post.segments)


# ---------------------------------------------------------------------------
# Authoring
# ---------------------------------------------------------------------------


def post_filename(post: Post, default_date: date | None = None) -> str:
    """Jekyll-style ``YYYY-MM-DD-slug.md`` filename for a post."""
    post_date = post.date or default_date or date.today()
    return f"{post_date.isoformat()}-{slugify(post.title)}.md"


def new_post(
    title: str,
    *,
    category: str = "",
    keywords: Iterable[str] = (),
    comments: bool = True,
    layout: str = "post",
    date: date | None = None,
    body: str = "",
) -> Post:
    """Create a post with the standard front-matter keys.

    Raises:
        MalformedMetadataError: ``title`` is empty.
    """
    if not title.strip():
        raise MalformedMetadataError("required field 'title' is empty")

    front_matter = FrontMatter()
    if layout:
        front_matter.set("layout", layout)
    front_matter.set("title", title.strip(), quote='"')
    keyword_list = split_keywords(list(keywords))
    if keyword_list:
        front_matter.set("keywords", ", ".join(keyword_list))
    if category:
        front_matter.set("category", category)
    front_matter.set("comments", "true" if comments else "false")
    if date is not None:
        front_matter.set("date", date.isoformat())

    if body and not body.startswith("\n"):
        body = "\n" + body
    return Post(front_matter=front_matter, segments=parse_body(body))


def update_field(post: Post, key: str, value: str | list[str]) -> Post:
    """Return a copy of ``post`` with one front-matter field changed.

    An empty value removes the key, since declared keys must carry a
    value. ``keywords`` keeps the list or comma form it already has.

    Raises:
        MalformedMetadataError: A key or value that would not parse back,
            removing or emptying ``title``, or a ``comments`` value that
            is not a boolean literal.
    """
    if not is_valid_key(key):
        raise MalformedMetadataError(f"invalid front-matter key {key!r}", path=post.source_path)
    items = value if isinstance(value, list) else [value]
    if any("\n" in item or "\r" in item for item in items):
        raise MalformedMetadataError(
            f"value for {key!r} must be a single line", path=post.source_path
        )

    updated = post.model_copy(deep=True)
    front_matter = updated.front_matter
    is_empty = not value if isinstance(value, list) else not value.strip()

    if key == "title" and is_empty:
        raise MalformedMetadataError("required field 'title' is empty", path=post.source_path)
    if (
        key == "comments"
        and not is_empty
        and (isinstance(value, list) or parse_bool(value) is None)
    ):
        raise MalformedMetadataError(
            f"'comments' must be true or false, got {value!r}", path=post.source_path
        )

    if is_empty:
        front_matter.remove(key)
        return updated

    if key == "keywords":
        keywords = split_keywords(value)
        existing = front_matter.field("keywords")
        if existing is not None and isinstance(existing.value, list):
            existing.value = keywords
        else:
            front_matter.set("keywords", ", ".join(keywords))
        return updated

    front_matter.set(key, value)
    return updated


def write_post(post: Post, posts_dir: Path, *, overwrite: bool = False) -> Path:
    """Write a post to disk and return its path.

    The post's ``source_path`` is used when set, otherwise a Jekyll
    filename inside ``posts_dir``.

    Raises:
        PostExistsError: The target exists and ``overwrite`` is False.
    """
    path = post.source_path or posts_dir / post_filename(post)
    if path.exists() and not overwrite:
        raise PostExistsError("refusing to overwrite existing post", path=path)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_post(post), encoding="utf-8")
    logger.info("Wrote post %s", path)
    return path
