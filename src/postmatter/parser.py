"""Parse post documents into :class:`~postmatter.models.Post` values.

A post is a front-matter block delimited by ``---`` lines followed by a
body. The body is split into verbatim text segments and code blocks.
Three code block forms are recognised:

- backtick fences (```` ```elixir ````), CommonMark rules;
- tilde fences (``~~~elixir``), CommonMark rules;
- Jekyll Liquid blocks (``{% highlight elixir %}`` ... ``{% endhighlight %}``).

Parsing is pure: the same text always produces an equal ``Post``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from postmatter.errors import MalformedMetadataError, PostError, UnterminatedCodeBlockError
from postmatter.models import (
    CodeBlock,
    FenceStyle,
    FrontMatter,
    FrontMatterField,
    Post,
    Segment,
    TextSegment,
    parse_bool,
)

logger = logging.getLogger(__name__)

FRONT_MATTER_OPEN = "---"
FRONT_MATTER_CLOSE = ("---", "...")

_KEY_RE = re.compile(r"^([A-Za-z0-9_][A-Za-z0-9_.-]*)\s*:(?:\s+(.*)|\s*)$")
_LIST_ITEM_RE = re.compile(r"^\s*-(?:\s+(.*)|\s*)$")
_FENCE_OPEN_RE = re.compile(r"^( {0,3})(`{3,}|~{3,})(.*)$")
_LIQUID_OPEN_RE = re.compile(r"^\s*\{%-?\s*highlight(?:\s+(\S+))?(.*?)\s*-?%\}\s*$")
_LIQUID_CLOSE_RE = re.compile(r"^\s*\{%-?\s*endhighlight\s*-?%\}\s*$")


# ---------------------------------------------------------------------------
# Document split
# ---------------------------------------------------------------------------


def split_document(text: str) -> tuple[str, str, int]:
    """Split a post into raw front matter, body and the body's first line.

    Raises:
        MalformedMetadataError: No opening delimiter on the first line, or
            the front-matter block is never closed.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n").rstrip() != FRONT_MATTER_OPEN:
        raise MalformedMetadataError("missing front matter: document must start with '---'", line=1)

    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n").rstrip() in FRONT_MATTER_CLOSE:
            raw = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return raw, body, index + 2

    raise MalformedMetadataError("front matter is never closed with '---'", line=1)


# ---------------------------------------------------------------------------
# Front matter
# ---------------------------------------------------------------------------


def _unquote(value: str) -> tuple[str, str]:
    """Strip matching surrounding quotes; return (value, quote char)."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        inner = value[1:-1]
        if value[0] == '"':
            inner = inner.replace('\\"', '"')
        else:
            inner = inner.replace("''", "'")
        return inner, value[0]
    return value, ""


def _split_inline_items(inner: str) -> list[str]:
    """Split on commas that are not inside a quoted item."""
    items: list[str] = []
    start = 0
    quote = ""
    index = 0
    while index < len(inner):
        char = inner[index]
        if quote:
            if quote == '"' and char == "\\":
                index += 1
            elif char == quote:
                if quote == "'" and inner[index + 1 : index + 2] == "'":
                    index += 1
                else:
                    quote = ""
        elif char in ("'", '"') and not inner[start:index].strip():
            quote = char
        elif char == ",":
            items.append(inner[start:index])
            start = index + 1
        index += 1
    items.append(inner[start:])
    return items


def _parse_inline_list(value: str) -> list[str]:
    inner = value[1:-1].strip()
    if not inner:
        return []
    return [_unquote(item.strip())[0] for item in _split_inline_items(inner)]


def is_valid_key(key: str) -> bool:
    """Whether ``key`` can be written as a front-matter key and read back."""
    return _KEY_RE.match(f"{key}: x") is not None


def parse_front_matter(raw: str, *, first_line: int = 2) -> FrontMatter:
    """Parse the text between the front-matter delimiters.

    Handles ``key: value`` scalars (optionally quoted), inline lists
    (``key: [a, b]``) and block lists (``key:`` followed by ``- item``
    lines). Blank and ``#`` comment lines are skipped.

    Args:
        raw: Front-matter text without the delimiter lines.
        first_line: Line number of ``raw``'s first line in the document,
            used in error messages.

    Raises:
        MalformedMetadataError: On a line that is neither ``key: value``
            nor a list item, a list item with no key, or a duplicate key.
    """
    front_matter = FrontMatter()
    list_field: FrontMatterField | None = None

    for offset, line in enumerate(raw.splitlines()):
        lineno = first_line + offset
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        item = _LIST_ITEM_RE.match(line)
        if item is not None:
            if list_field is None or not isinstance(list_field.value, list):
                raise MalformedMetadataError("list item without a key", line=lineno)
            list_field.value.append(_unquote((item.group(1) or "").strip())[0])
            continue

        match = _KEY_RE.match(line)
        if match is None:
            raise MalformedMetadataError(f"expected 'key: value', got {stripped!r}", line=lineno)

        key = match.group(1)
        value = (match.group(2) or "").strip()
        if key in front_matter:
            raise MalformedMetadataError(f"duplicate key {key!r}", line=lineno)

        if not value:
            # A list header, or an empty scalar if no items follow.
            list_field = FrontMatterField(key=key, value=[])
            front_matter.fields.append(list_field)
            continue

        list_field = None
        if value.startswith("[") and value.endswith("]"):
            front_matter.fields.append(
                FrontMatterField(key=key, value=_parse_inline_list(value), inline=True)
            )
        else:
            scalar, quote = _unquote(value)
            front_matter.fields.append(FrontMatterField(key=key, value=scalar, quote=quote))

    # Headers that never got items are empty scalars.
    for f in front_matter.fields:
        if f.value == [] and not f.inline:
            f.value = ""

    return front_matter


# ---------------------------------------------------------------------------
# Body
# ---------------------------------------------------------------------------


@dataclass
class _OpenBlock:
    """A code block whose closing delimiter has not been seen yet."""

    style: FenceStyle
    fence: str
    language: str
    info: str
    opening: str
    line: int
    code_lines: list[str] = field(default_factory=list)

    def closes_with(self, content: str) -> bool:
        if self.style == FenceStyle.LIQUID:
            return _LIQUID_CLOSE_RE.match(content) is not None
        match = re.match(rf"^ {{0,3}}({re.escape(self.fence[0])}+)\s*$", content)
        return match is not None and len(match.group(1)) >= len(self.fence)

    def finish(self, closing: str) -> CodeBlock:
        return CodeBlock(
            language=self.language,
            info=self.info,
            code="".join(self.code_lines),
            style=self.style,
            opening=self.opening,
            closing=closing,
            line=self.line,
        )


def _open_block(line: str, lineno: int) -> _OpenBlock | None:
    content = line.rstrip("\r\n")

    fence = _FENCE_OPEN_RE.match(content)
    # Backtick info strings may not contain backticks.
    if fence is not None and not (fence.group(2)[0] == "`" and "`" in fence.group(3)):
        language, _, rest = fence.group(3).strip().partition(" ")
        return _OpenBlock(
            style=FenceStyle.BACKTICK if fence.group(2)[0] == "`" else FenceStyle.TILDE,
            fence=fence.group(2),
            language=language,
            info=rest.strip(),
            opening=line,
            line=lineno,
        )

    liquid = _LIQUID_OPEN_RE.match(content)
    if liquid is not None:
        return _OpenBlock(
            style=FenceStyle.LIQUID,
            fence="",
            language=liquid.group(1) or "",
            info=liquid.group(2).strip(),
            opening=line,
            line=lineno,
        )

    return None


def parse_body(body: str, start_line: int = 1) -> list[Segment]:
    """Split body text into text segments and code blocks.

    Args:
        body: Text after the front matter.
        start_line: Document line number of the body's first line.

    Raises:
        UnterminatedCodeBlockError: A code block runs to end of input.
    """
    segments: list[Segment] = []
    text_lines: list[str] = []
    block: _OpenBlock | None = None

    for offset, line in enumerate(body.splitlines(keepends=True)):
        if block is None:
            block = _open_block(line, start_line + offset)
            if block is None:
                text_lines.append(line)
            elif text_lines:
                segments.append(TextSegment(text="".join(text_lines)))
                text_lines = []
            continue

        if block.closes_with(line.rstrip("\r\n")):
            segments.append(block.finish(line))
            block = None
        else:
            block.code_lines.append(line)

    if block is not None:
        raise UnterminatedCodeBlockError(
            f"code block opened with {block.opening.strip()!r} is never closed",
            line=block.line,
        )

    if text_lines:
        segments.append(TextSegment(text="".join(text_lines)))
    return segments


# ---------------------------------------------------------------------------
# Post
# ---------------------------------------------------------------------------


def _require_fields(front_matter: FrontMatter, required: Iterable[str]) -> None:
    for key in required:
        f = front_matter.field(key)
        if f is None:
            raise MalformedMetadataError(f"required field {key!r} is missing")
        if f.is_empty:
            raise MalformedMetadataError(f"required field {key!r} is empty")

    comments = front_matter.get("comments")
    if isinstance(comments, list) or (
        isinstance(comments, str) and comments.strip() and parse_bool(comments) is None
    ):
        raise MalformedMetadataError(f"'comments' must be true or false, got {comments!r}")


def parse_post(
    text: str,
    *,
    source_path: Path | None = None,
    required_fields: Iterable[str] = ("title",),
) -> Post:
    """Parse a complete post document.

    Raises:
        MalformedMetadataError: Missing/unterminated front matter, a bad
            front-matter line, a missing or empty required field, or a
            non-boolean ``comments`` value.
        UnterminatedCodeBlockError: A code block is never closed.
    """
    try:
        raw, body, body_line = split_document(text)
        front_matter = parse_front_matter(raw)
        _require_fields(front_matter, required_fields)
        segments = parse_body(body, start_line=body_line)
    except PostError as exc:
        if source_path is not None and exc.path is None:
            raise exc.with_path(source_path) from exc
        raise

    logger.debug(
        "Parsed %s: %d field(s), %d segment(s)",
        source_path or "<text>",
        len(front_matter.fields),
        len(segments),
    )
    return Post(front_matter=front_matter, segments=segments, source_path=source_path)


def read_post(path: Path, *, required_fields: Iterable[str] = ("title",)) -> Post:
    """Read and parse a UTF-8 post file."""
    text = path.read_text(encoding="utf-8")
    return parse_post(text, source_path=path, required_fields=required_fields)
