import pytest

from mdviewer.content import extract, parse_frontmatter


class TestExtractWithoutFrontmatter:
    @pytest.mark.parametrize("text", [
        "",
        "# Title\n\nPlain body.",
        "no trailing newline",
        "\n---\ntitle: late\n---\n",
        "# Title\n\nSome intro text.\n\n---\n\nContent after horizontal rule.",
        "----\ntitle: four dashes\n----\n",
    ])
    def test_body_is_unchanged(self, text):
        doc = extract(text)
        assert doc.frontmatter is None
        assert doc.body == text


class TestExtractFallback:
    def test_unterminated_block(self):
        text = "---\nkey: v\n\nbody"
        doc = extract(text)
        assert doc.frontmatter is None
        assert doc.body == text

    def test_unterminated_block_with_heading(self):
        text = "---\n# This looks like frontmatter but has no closing delimiter\n\nRegular content here."
        doc = extract(text)
        assert doc.frontmatter is None
        assert doc.body == text

    @pytest.mark.parametrize("block", [
        "just a string",
        "- a\n- b",
        "{}",
        "",
        "42",
    ])
    def test_non_mapping_or_empty(self, block):
        text = f"---\n{block}\n---\n\nbody"
        doc = extract(text)
        assert doc.frontmatter is None
        assert doc.body == text

    def test_invalid_yaml(self):
        text = "---\ntitle: [unclosed\n---\nbody"
        doc = extract(text)
        assert doc.frontmatter is None
        assert doc.body == text

    @pytest.mark.parametrize("block", [
        "data: !!binary /w==",
        "a: &x [*x]",
    ])
    def test_values_that_cannot_be_json(self, block):
        text = f"---\n{block}\n---\nbody"
        doc = extract(text)
        assert doc.frontmatter is None
        assert doc.body == text

    @pytest.mark.parametrize("text", [
        "---\x0ctitle: x\n---\nbody",
        "---\ntitle: x\u2028---\nbody",
        "---\ntitle: x\x85---\nbody",
    ])
    def test_only_newline_ends_a_line(self, text):
        doc = extract(text)
        assert doc.frontmatter is None
        assert doc.body == text


class TestExtractSuccess:
    def test_simple_block(self):
        doc = extract("---\ntitle: Hello\n---\n\n# Body")
        assert doc.frontmatter == {"title": "Hello"}
        assert doc.body == "# Body"

    def test_nested_values(self):
        text = """---
title: 'Complex Article'
author_url: https://example.com/user
tags:
  - javascript
  - typescript
---

# Content"""
        doc = extract(text)
        assert doc.frontmatter["title"] == "Complex Article"
        assert doc.frontmatter["author_url"] == "https://example.com/user"
        assert doc.frontmatter["tags"] == ["javascript", "typescript"]
        assert doc.body == "# Content"

    def test_body_structure_is_preserved(self):
        doc = extract("---\na: 1\n---\n\n\n# Hello World\n\nThis is the content.\n\n---\n\nMore.\n")
        assert doc.body == "# Hello World\n\nThis is the content.\n\n---\n\nMore.\n"

    def test_crlf_line_endings(self):
        doc = extract("---\r\ntitle: Hello\r\n---\r\n\r\nBody\r\n")
        assert doc.frontmatter == {"title": "Hello"}
        assert doc.body == "Body\r\n"

    def test_non_string_keys_are_stringified(self):
        doc = extract("---\n1: one\nfalse: no\n---\nbody")
        assert doc.frontmatter == {"1": "one", "False": False}

    def test_path_is_attached(self):
        assert extract("body", path="x/b.md").path == "x/b.md"


class TestParseFrontmatter:
    def test_mapping(self):
        assert parse_frontmatter("a: 1") == {"a": 1}

    def test_scalar(self):
        assert parse_frontmatter("hello") is None
