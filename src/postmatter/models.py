"""Pure data models for post documents.

All Pydantic models and enums live here. No I/O. The parser builds these
from text, the writer turns them back into text, and everything else
reads them.
"""

from __future__ import annotations

import contextlib
import re
from datetime import date
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field

TRUE_LITERALS = frozenset({"true", "yes", "on", "1"})
FALSE_LITERALS = frozenset({"false", "no", "off", "0"})

_FILENAME_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})-(.+)$")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_bool(value: str) -> bool | None:
    """Interpret a front-matter boolean literal, or None if it isn't one."""
    lowered = value.strip().lower()
    if lowered in TRUE_LITERALS:
        return True
    if lowered in FALSE_LITERALS:
        return False
    return None


def slugify(title: str) -> str:
    """Lowercase, ASCII-ish, hyphen-separated slug for a title."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "untitled"


def split_keywords(value: str | list[str]) -> list[str]:
    """Normalize a keywords value to an ordered list without duplicates."""
    raw = value if isinstance(value, list) else value.split(",")
    seen: dict[str, None] = {}
    for item in raw:
        item = item.strip()
        if item:
            seen.setdefault(item, None)
    return list(seen)


# ---------------------------------------------------------------------------
# Front matter
# ---------------------------------------------------------------------------


class FrontMatterField(BaseModel):
    """One key of the front-matter block, as authored."""

    key: str
    value: str | list[str]
    quote: str = ""  # '"' or "'" when the scalar was quoted
    inline: bool = False  # list written as [a, b]

    @property
    def is_empty(self) -> bool:
        if isinstance(self.value, list):
            return not any(item.strip() for item in self.value)
        return not self.value.strip()


class FrontMatter(BaseModel):
    """Ordered front-matter metadata."""

    fields: list[FrontMatterField] = Field(default_factory=list)

    def __contains__(self, key: object) -> bool:
        return any(f.key == key for f in self.fields)

    def field(self, key: str) -> FrontMatterField | None:
        for f in self.fields:
            if f.key == key:
                return f
        return None

    def get(self, key: str, default: str | list[str] | None = None) -> str | list[str] | None:
        f = self.field(key)
        return f.value if f is not None else default

    def get_str(self, key: str) -> str:
        """Scalar value of ``key``; lists are joined with ", "."""
        value = self.get(key, "")
        if isinstance(value, list):
            return ", ".join(value)
        return value or ""

    def set(self, key: str, value: str | list[str], *, quote: str | None = None) -> None:
        """Set ``key``, keeping its position (and quoting) if it already exists."""
        existing = self.field(key)
        if existing is not None:
            existing.value = value
            if quote is not None:
                existing.quote = quote
            if isinstance(value, str):
                existing.inline = False
            return
        self.fields.append(FrontMatterField(key=key, value=value, quote=quote or ""))

    def remove(self, key: str) -> None:
        self.fields = [f for f in self.fields if f.key != key]

    def keys(self) -> list[str]:
        return [f.key for f in self.fields]

    def as_dict(self) -> dict[str, str | list[str]]:
        return {f.key: f.value for f in self.fields}


# ---------------------------------------------------------------------------
# Body segments
# ---------------------------------------------------------------------------


class FenceStyle(StrEnum):
    """Delimiter style of a code block."""

    BACKTICK = "backtick"
    TILDE = "tilde"
    LIQUID = "liquid"


class TextSegment(BaseModel):
    """Plain prose between code blocks, kept verbatim."""

    kind: Literal["text"] = "text"
    text: str

    @property
    def source(self) -> str:
        return self.text


class CodeBlock(BaseModel):
    """A delimited code block tagged with a language for highlighting.

    ``opening`` and ``closing`` are the exact delimiter lines including
    their line endings, so ``source`` reproduces the block byte for byte.
    """

    kind: Literal["code"] = "code"
    language: str = ""
    info: str = ""
    code: str = ""
    style: FenceStyle = FenceStyle.BACKTICK
    opening: str
    closing: str
    line: int | None = None

    @property
    def source(self) -> str:
        return self.opening + self.code + self.closing

    @classmethod
    def create(
        cls,
        language: str,
        code: str,
        style: FenceStyle = FenceStyle.BACKTICK,
    ) -> CodeBlock:
        """Build a canonically delimited block for authoring."""
        if code and not code.endswith("\n"):
            code += "\n"

        if style == FenceStyle.LIQUID:
            opening = f"{{% highlight {language} %}}\n" if language else "{% highlight %}\n"
            closing = "{% endhighlight %}\n"
        else:
            char = "`" if style == FenceStyle.BACKTICK else "~"
            # The fence must be longer than any run of the same character
            # that starts a line inside the code.
            longest = 0
            for line in code.splitlines():
                match = re.match(rf"^ {{0,3}}({re.escape(char)}+)", line)
                if match:
                    longest = max(longest, len(match.group(1)))
            fence = char * max(3, longest + 1)
            opening = f"{fence}{language}\n"
            closing = f"{fence}\n"

        return cls(language=language, code=code, style=style, opening=opening, closing=closing)


Segment = Annotated[TextSegment | CodeBlock, Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Post
# ---------------------------------------------------------------------------


class Post(BaseModel):
    """A blog post: front-matter metadata followed by a segmented body."""

    front_matter: FrontMatter = Field(default_factory=FrontMatter)
    segments: list[Segment] = Field(default_factory=list)
    source_path: Path | None = None

    @property
    def layout(self) -> str:
        return self.front_matter.get_str("layout")

    @property
    def title(self) -> str:
        return self.front_matter.get_str("title")

    @property
    def category(self) -> str:
        return self.front_matter.get_str("category")

    @property
    def keywords(self) -> list[str]:
        value = self.front_matter.get("keywords")
        if value is None:
            return []
        return split_keywords(value)

    @property
    def comments(self) -> bool:
        value = self.front_matter.get("comments")
        if not isinstance(value, str):
            return False
        return bool(parse_bool(value))

    @property
    def date(self) -> date | None:
        value = self.front_matter.get("date")
        if isinstance(value, str) and len(value) >= 10:
            with contextlib.suppress(ValueError):
                return date.fromisoformat(value[:10])
        if self.source_path is not None:
            match = _FILENAME_DATE_RE.match(self.source_path.stem)
            if match:
                with contextlib.suppress(ValueError):
                    return date.fromisoformat(match.group(1))
        return None

    @property
    def slug(self) -> str:
        if self.source_path is not None:
            stem = self.source_path.stem
            match = _FILENAME_DATE_RE.match(stem)
            return match.group(2) if match else stem
        return slugify(self.title)

    @property
    def body(self) -> str:
        return "".join(seg.source for seg in self.segments)

    @property
    def code_blocks(self) -> list[CodeBlock]:
        return [seg for seg in self.segments if isinstance(seg, CodeBlock)]

    @property
    def languages(self) -> list[str]:
        """Distinct code block languages in order of first appearance."""
        seen: dict[str, None] = {}
        for block in self.code_blocks:
            if block.language:
                seen.setdefault(block.language, None)
        return list(seen)


# ---------------------------------------------------------------------------
# Check results
# ---------------------------------------------------------------------------


class Severity(StrEnum):
    """How serious a post issue is."""

    ERROR = "error"
    WARNING = "warning"


class PostIssue(BaseModel):
    """A single problem found while checking a post."""

    severity: Severity
    code: str
    message: str
    line: int | None = None
    path: Path | None = None

    def render(self) -> str:
        location = str(self.path) if self.path is not None else "<post>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.severity}: {self.message} [{self.code}]"


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class ExportFormat(StrEnum):
    """Available export formats."""

    MARKDOWN = "markdown"
    JSON = "json"
