"""Unit tests for core/utils/slug.py"""

import pytest

from notionpub.core.utils.slug import slugify


@pytest.mark.parametrize("text,expected", [
    ("Hello, World!", "hello-world"),
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-ch-rs"),
    ("Version 2.0 Released", "version-2-0-released"),
    ("Café crème", "caf-cr-me"),
    ("!!!", ""),
    ("", ""),
])
def test_slugify_basic(text, expected):
    """slugify lowercases and collapses non-alphanumeric runs to a single hyphen."""
    assert slugify(text) == expected


@pytest.mark.parametrize("text", [
    "Hello, World!", "--a--b--", "Tables & Things", "ÄÖÜ 123", "already-slugified", "  ",
])
def test_slugify_idempotent(text):
    """slugify(slugify(t)) == slugify(t)."""
    once = slugify(text)
    assert slugify(once) == once


def test_slugify_strips_leading_trailing_hyphens():
    """slugify strips leading/trailing hyphens from result."""
    result = slugify("!leading and trailing?")
    assert not result.startswith("-")
    assert not result.endswith("-")
