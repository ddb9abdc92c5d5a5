"""Exception hierarchy for post parsing and writing."""

from __future__ import annotations

from pathlib import Path


class PostError(Exception):
    """Base error for anything wrong with a post document.

    Carries the optional file path and 1-based line number so callers can
    point an author at the offending spot.
    """

    def __init__(self, message: str, *, path: Path | None = None, line: int | None = None) -> None:
        self.reason = message
        self.path = path
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        location = ""
        if self.path is not None:
            location = str(self.path)
        if self.line is not None:
            location = f"{location}:{self.line}" if location else f"line {self.line}"
        return f"{location}: {self.reason}" if location else self.reason

    def with_path(self, path: Path) -> PostError:
        """Return a copy of this error bound to ``path``."""
        return type(self)(self.reason, path=path, line=self.line)


class MalformedMetadataError(PostError):
    """Front matter is missing, unterminated, unparsable or incomplete."""


class UnterminatedCodeBlockError(PostError):
    """A code block was opened but never closed."""


class PostExistsError(PostError):
    """Writing a post would overwrite an existing file."""
