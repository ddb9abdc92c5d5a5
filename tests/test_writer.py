"""Tests for post serialization, authoring and editing."""

from datetime import date
from pathlib import Path

import pytest

from postmatter.errors import MalformedMetadataError, PostExistsError
from postmatter.models import CodeBlock, FenceStyle, FrontMatter, FrontMatterField
from postmatter.parser import parse_post
from postmatter.writer import (
    new_post,
    post_filename,
    serialize_body,
    serialize_front_matter,
    serialize_post,
    update_field,
    write_post,
)

CANONICAL = """\
---
layout: post
title: "Macros"
keywords:
  - elixir
  - macros
tags: [ast, quote]
category: metaprogramming
comments: false
---

Text.

```elixir
quote do: 1 + 2
```
"""


class TestSerializeFrontMatter:
    def test_scalars_lists_and_quotes(self):
        fm = FrontMatter(
            fields=[
                FrontMatterField(key="title", value="Macros", quote='"'),
                FrontMatterField(key="keywords", value=["elixir", "macros"]),
                FrontMatterField(key="tags", value=["ast"], inline=True),
                FrontMatterField(key="comments", value="true"),
            ]
        )
        assert serialize_front_matter(fm) == (
            "---\n"
            'title: "Macros"\n'
            "keywords:\n"
            "  - elixir\n"
            "  - macros\n"
            "tags: [ast]\n"
            "comments: true\n"
            "---\n"
        )

    def test_quotes_values_that_need_it(self):
        fm = FrontMatter(fields=[FrontMatterField(key="title", value="Elixir: macros")])
        assert 'title: "Elixir: macros"' in serialize_front_matter(fm)

    def test_escapes_embedded_quotes(self):
        fm = FrontMatter(fields=[FrontMatterField(key="title", value='say "hi"', quote='"')])
        assert 'title: "say \\"hi\\""' in serialize_front_matter(fm)

    def test_quotes_list_items_that_need_it(self):
        fm = FrontMatter(
            fields=[
                FrontMatterField(key="keywords", value=["a", "b, c"], inline=True),
                FrontMatterField(key="tags", value=["#elixir", "ast"]),
            ]
        )
        text = serialize_front_matter(fm)
        assert 'keywords: [a, "b, c"]' in text
        assert '  - "#elixir"' in text

    def test_inline_list_with_comma_round_trips(self):
        text = '---\ntitle: x\nkeywords: [a, "b, c"]\n---\n'
        post = parse_post(text)
        assert post.front_matter.get("keywords") == ["a", "b, c"]
        assert serialize_post(post) == text

    def test_empty_front_matter(self):
        assert serialize_front_matter(FrontMatter()) == "---\n---\n"


class TestSerializePost:
    def test_canonical_round_trip(self):
        assert serialize_post(parse_post(CANONICAL)) == CANONICAL

    def test_quoted_values_survive_round_trip(self):
        text = "---\ntitle: 'It''s AST'\nnote: \"a \\\"b\\\"\"\n---\n"
        post = parse_post(text)
        assert post.title == "It's AST"
        assert post.front_matter.get("note") == 'a "b"'
        assert serialize_post(post) == text

    def test_serialize_body(self):
        block = CodeBlock.create("elixir", "x")
        assert serialize_body([block]) == "```elixir\nx\n```\n"

    def test_fenced_blocks_byte_identical_after_edit(self):
        post = parse_post(CANONICAL)
        edited = update_field(post, "title", "Quote and Unquote")
        assert edited.code_blocks[0].source == "```elixir\nquote do: 1 + 2\n```\n"
        assert "```elixir\nquote do: 1 + 2\n```\n" in serialize_post(edited)


class TestCodeBlockCreate:
    def test_backtick(self):
        block = CodeBlock.create("elixir", "IO.puts 1\n")
        assert block.source == "```elixir\nIO.puts 1\n```\n"

    def test_lengthens_fence_around_nested_fence(self):
        block = CodeBlock.create("markdown", "```elixir\nx\n```\n")
        assert block.opening == "````markdown\n"
        assert block.closing == "````\n"

    def test_tilde(self):
        block = CodeBlock.create("console", "$ mix test", FenceStyle.TILDE)
        assert block.source == "~~~console\n$ mix test\n~~~\n"

    def test_liquid(self):
        block = CodeBlock.create("elixir", "x\n", FenceStyle.LIQUID)
        assert block.source == "{% highlight elixir %}\nx\n{% endhighlight %}\n"

    def test_created_block_parses_back(self):
        block = CodeBlock.create("markdown", "```elixir\nx\n```\n")
        post = parse_post("---\ntitle: x\n---\n" + block.source)
        assert post.code_blocks[0].code == block.code


class TestNewPost:
    def test_standard_keys(self):
        post = new_post(
            "Macros",
            category="metaprogramming",
            keywords=["elixir", "macros", "elixir"],
            date=date(2015, 6, 20),
            body="Macros write code.\n",
        )
        assert serialize_post(post) == (
            "---\n"
            "layout: post\n"
            'title: "Macros"\n'
            "keywords: elixir, macros\n"
            "category: metaprogramming\n"
            "comments: true\n"
            "date: 2015-06-20\n"
            "---\n"
            "\n"
            "Macros write code.\n"
        )

    def test_parses_body_segments(self):
        post = new_post("Macros", body="```elixir\nx\n```\n")
        assert post.code_blocks[0].language == "elixir"

    def test_comments_disabled(self):
        post = new_post("Macros", comments=False)
        assert post.comments is False

    def test_empty_title_rejected(self):
        with pytest.raises(MalformedMetadataError):
            new_post("   ")


class TestPostFilename:
    def test_uses_post_date(self):
        post = new_post("Quote & Unquote", date=date(2015, 6, 20))
        assert post_filename(post) == "2015-06-20-quote-unquote.md"

    def test_falls_back_to_default_date(self):
        post = new_post("Macros")
        assert post_filename(post, date(2016, 1, 2)) == "2016-01-02-macros.md"


class TestUpdateField:
    def test_returns_copy(self):
        post = parse_post(CANONICAL)
        edited = update_field(post, "category", "elixir")
        assert edited.category == "elixir"
        assert post.category == "metaprogramming"

    def test_keeps_position_and_quote(self):
        post = parse_post(CANONICAL)
        edited = update_field(post, "title", "Quote")
        assert edited.front_matter.keys() == post.front_matter.keys()
        assert 'title: "Quote"' in serialize_post(edited)

    def test_adds_new_key_at_end(self):
        post = parse_post(CANONICAL)
        edited = update_field(post, "author", "jose")
        assert edited.front_matter.keys()[-1] == "author"

    def test_keywords_keep_list_form(self):
        post = parse_post(CANONICAL)
        edited = update_field(post, "keywords", "elixir, ast")
        assert edited.front_matter.get("keywords") == ["elixir", "ast"]

    def test_keywords_scalar_form(self):
        post = parse_post("---\ntitle: x\nkeywords: a, b\n---\n")
        edited = update_field(post, "keywords", ["c", "d", "c"])
        assert edited.front_matter.get("keywords") == "c, d"

    def test_empty_value_removes_key(self):
        post = parse_post(CANONICAL)
        edited = update_field(post, "tags", "")
        assert "tags" not in edited.front_matter

    def test_cannot_empty_title(self):
        post = parse_post(CANONICAL)
        with pytest.raises(MalformedMetadataError, match="'title' is empty"):
            update_field(post, "title", " ")

    def test_comments_must_be_boolean(self):
        post = parse_post(CANONICAL)
        with pytest.raises(MalformedMetadataError):
            update_field(post, "comments", "sometimes")
        with pytest.raises(MalformedMetadataError):
            update_field(post, "comments", ["true"])

    @pytest.mark.parametrize("key", ["my key", "-draft", "", "title:"])
    def test_rejects_keys_that_would_not_parse(self, key: str):
        post = parse_post(CANONICAL)
        with pytest.raises(MalformedMetadataError, match="invalid front-matter key"):
            update_field(post, key, "v")

    def test_rejects_multiline_value(self):
        post = parse_post(CANONICAL)
        with pytest.raises(MalformedMetadataError, match="single line"):
            update_field(post, "category", "one\ntwo")
        with pytest.raises(MalformedMetadataError, match="single line"):
            update_field(post, "tags", ["ok", "bad\r\n"])

    def test_edited_post_parses_back(self):
        post = parse_post(CANONICAL)
        edited = update_field(post, "summary", "[draft] Macros: the basics")
        reparsed = parse_post(serialize_post(edited))
        assert reparsed.front_matter.get("summary") == "[draft] Macros: the basics"


class TestWritePost:
    def test_writes_jekyll_filename(self, tmp_path: Path):
        post = new_post("Macros", date=date(2015, 6, 20))
        path = write_post(post, tmp_path / "_posts")

        assert path == tmp_path / "_posts" / "2015-06-20-macros.md"
        assert path.read_text(encoding="utf-8") == serialize_post(post)

    def test_refuses_to_overwrite(self, tmp_path: Path):
        post = new_post("Macros", date=date(2015, 6, 20))
        write_post(post, tmp_path)
        with pytest.raises(PostExistsError):
            write_post(post, tmp_path)

    def test_overwrite_source_path(self, tmp_path: Path):
        path = tmp_path / "2015-06-20-macros.md"
        path.write_text(CANONICAL, encoding="utf-8")
        post = parse_post(CANONICAL, source_path=path)

        written = write_post(update_field(post, "comments", "true"), tmp_path, overwrite=True)

        assert written == path
        assert "comments: true" in path.read_text(encoding="utf-8")
