"""Structured blog post documents.

Parses posts made of front-matter metadata and a body of prose
interleaved with language-tagged code blocks, checks them, writes them
back without disturbing their code blocks, and exports them for an
external static-site renderer.
"""

from postmatter.checks import check_file, check_post, check_text, has_errors
from postmatter.config import PostmatterConfig, load_config, merge_cli_overrides
from postmatter.errors import (
    MalformedMetadataError,
    PostError,
    PostExistsError,
    UnterminatedCodeBlockError,
)
from postmatter.exporters import create_exporter, page_metadata
from postmatter.models import (
    CodeBlock,
    ExportFormat,
    FenceStyle,
    FrontMatter,
    FrontMatterField,
    Post,
    PostIssue,
    Severity,
    TextSegment,
)
from postmatter.parser import parse_body, parse_front_matter, parse_post, read_post, split_document
from postmatter.reader import PostReader, keyword_index
from postmatter.writer import (
    new_post,
    post_filename,
    serialize_body,
    serialize_front_matter,
    serialize_post,
    update_field,
    write_post,
)

__version__ = "0.1.0"

__all__ = [
    "CodeBlock",
    "ExportFormat",
    "FenceStyle",
    "FrontMatter",
    "FrontMatterField",
    "MalformedMetadataError",
    "Post",
    "PostError",
    "PostExistsError",
    "PostIssue",
    "PostReader",
    "PostmatterConfig",
    "Severity",
    "TextSegment",
    "UnterminatedCodeBlockError",
    "check_file",
    "check_post",
    "check_text",
    "create_exporter",
    "has_errors",
    "keyword_index",
    "load_config",
    "merge_cli_overrides",
    "new_post",
    "page_metadata",
    "parse_body",
    "parse_front_matter",
    "parse_post",
    "post_filename",
    "read_post",
    "serialize_body",
    "serialize_front_matter",
    "serialize_post",
    "split_document",
    "update_field",
    "write_post",
]
