"""Author-facing checks for post documents.

Parse failures stop a post from loading at all; checks report the softer
problems a renderer would otherwise trip over, as a list of issues.
"""

from __future__ import annotations

import logging
from pathlib import Path

from postmatter.config import PostmatterConfig
from postmatter.errors import MalformedMetadataError, PostError, UnterminatedCodeBlockError
from postmatter.models import Post, PostIssue, Severity, parse_bool
from postmatter.parser import parse_post

logger = logging.getLogger(__name__)


def check_post(post: Post, config: PostmatterConfig | None = None) -> list[PostIssue]:
    """Check a parsed post and return every issue found."""
    config = config or PostmatterConfig()
    path = post.source_path
    issues: list[PostIssue] = []

    for f in post.front_matter.fields:
        if f.is_empty:
            issues.append(
                PostIssue(
                    severity=Severity.ERROR,
                    code="empty-value",
                    message=f"front-matter key {f.key!r} has no value",
                    path=path,
                )
            )

    for key in config.front_matter.expected:
        if key not in post.front_matter:
            issues.append(
                PostIssue(
                    severity=Severity.WARNING,
                    code="missing-field",
                    message=f"front-matter key {key!r} is missing",
                    path=path,
                )
            )

    comments = post.front_matter.get("comments")
    if isinstance(comments, list) or (
        isinstance(comments, str) and comments.strip() and parse_bool(comments) is None
    ):
        issues.append(
            PostIssue(
                severity=Severity.ERROR,
                code="invalid-boolean",
                message=f"'comments' must be true or false, got {comments!r}",
                path=path,
            )
        )

    allowed = {lang.lower() for lang in config.checks.languages}
    for block in post.code_blocks:
        if not block.language:
            if config.checks.require_language:
                issues.append(
                    PostIssue(
                        severity=Severity.ERROR,
                        code="missing-language",
                        message="code block does not declare a language",
                        line=block.line,
                        path=path,
                    )
                )
        elif allowed and block.language.lower() not in allowed:
            issues.append(
                PostIssue(
                    severity=Severity.WARNING,
                    code="unknown-language",
                    message=f"code block language {block.language!r} is not in the allowed list",
                    line=block.line,
                    path=path,
                )
            )

    return issues


def check_text(
    text: str,
    path: Path | None = None,
    config: PostmatterConfig | None = None,
) -> list[PostIssue]:
    """Parse and check post text, reporting parse failures as issues."""
    config = config or PostmatterConfig()
    try:
        post = parse_post(text, source_path=path, required_fields=config.front_matter.required)
    except MalformedMetadataError as exc:
        return [_issue_from_error(exc, "malformed-metadata", path)]
    except UnterminatedCodeBlockError as exc:
        return [_issue_from_error(exc, "unterminated-code-block", path)]
    return check_post(post, config)


def check_file(path: Path, config: PostmatterConfig | None = None) -> list[PostIssue]:
    """Read and check a post file."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read post file: %s", path)
        return [
            PostIssue(
                severity=Severity.ERROR,
                code="unreadable",
                message=f"could not read file: {exc}",
                path=path,
            )
        ]
    return check_text(text, path, config)


def has_errors(issues: list[PostIssue]) -> bool:
    return any(issue.severity == Severity.ERROR for issue in issues)


def _issue_from_error(exc: PostError, code: str, path: Path | None) -> PostIssue:
    return PostIssue(
        severity=Severity.ERROR,
        code=code,
        message=exc.reason,
        line=exc.line,
        path=exc.path or path,
    )
