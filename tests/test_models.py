"""Tests for post data models."""

from pathlib import Path

from postmatter.models import (
    CodeBlock,
    FrontMatter,
    Post,
    PostIssue,
    Severity,
    TextSegment,
    parse_bool,
    slugify,
    split_keywords,
)


class TestHelpers:
    def test_parse_bool(self):
        assert parse_bool("true") is True
        assert parse_bool(" Yes ") is True
        assert parse_bool("OFF") is False
        assert parse_bool("0") is False
        assert parse_bool("maybe") is None

    def test_slugify(self):
        assert slugify("Macros") == "macros"
        assert slugify("  Quote & Unquote: the AST!  ") == "quote-unquote-the-ast"
        assert slugify("???") == "untitled"

    def test_split_keywords(self):
        assert split_keywords("elixir, macros ,, elixir") == ["elixir", "macros"]
        assert split_keywords(["ast", " ast ", "quote"]) == ["ast", "quote"]


class TestFrontMatter:
    def test_set_get_remove(self):
        fm = FrontMatter()
        fm.set("title", "Macros", quote='"')
        fm.set("category", "elixir")
        fm.set("title", "AST")

        assert fm.keys() == ["title", "category"]
        assert fm.get("title") == "AST"
        field = fm.field("title")
        assert field is not None
        assert field.quote == '"'

        fm.remove("title")
        assert "title" not in fm
        assert fm.get("title", "none") == "none"

    def test_get_str_joins_lists(self):
        fm = FrontMatter()
        fm.set("keywords", ["elixir", "macros"])
        assert fm.get_str("keywords") == "elixir, macros"
        assert fm.get_str("missing") == ""

    def test_as_dict(self):
        fm = FrontMatter()
        fm.set("layout", "post")
        fm.set("tags", ["a"])
        assert fm.as_dict() == {"layout": "post", "tags": ["a"]}


class TestPost:
    def _post(self) -> Post:
        fm = FrontMatter()
        fm.set("title", "Macros")
        return Post(
            front_matter=fm,
            segments=[
                TextSegment(text="Intro\n"),
                CodeBlock.create("elixir", "x"),
                CodeBlock.create("", "plain"),
                CodeBlock.create("elixir", "y"),
                CodeBlock.create("console", "$ iex"),
            ],
        )

    def test_languages_distinct_in_order(self):
        assert self._post().languages == ["elixir", "console"]

    def test_body(self):
        body = self._post().body
        assert body.startswith("Intro\n```elixir\nx\n```\n```\nplain\n```\n")

    def test_segments_validate_from_dicts(self):
        post = Post.model_validate(
            {
                "front_matter": {"fields": [{"key": "title", "value": "Macros"}]},
                "segments": [
                    {"kind": "text", "text": "Hi\n"},
                    {
                        "kind": "code",
                        "language": "elixir",
                        "opening": "```elixir\n",
                        "closing": "```\n",
                    },
                ],
            }
        )
        assert isinstance(post.segments[0], TextSegment)
        assert isinstance(post.segments[1], CodeBlock)
        assert post.title == "Macros"

    def test_slug_strips_date_prefix(self):
        post = Post(source_path=Path("_posts/2015-06-20-macros.md"))
        assert post.slug == "macros"

    def test_slug_without_date_prefix(self):
        post = Post(source_path=Path("drafts/macros.md"))
        assert post.slug == "macros"
        assert post.date is None


class TestPostIssue:
    def test_render_without_path(self):
        issue = PostIssue(severity=Severity.WARNING, code="missing-field", message="nope")
        assert issue.render() == "<post>: warning: nope [missing-field]"
