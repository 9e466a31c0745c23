"""Unit tests for core/pipeline.py"""

import json
import logging

import pytest

from notionpub.config import Settings
from notionpub.core.models import BlockKind, DividerBlock, TableBlock, TextBlock
from notionpub.core.pipeline import Publisher, run_export
from notionpub.core.plugins.registry import Plugin, PluginRegistry
from notionpub.errors import UpstreamFetchError
from notionpub.sources.memory_source import MemorySource


@pytest.fixture(name="publisher")
def publisher_fixture(sample_source):
    return Publisher(sample_source)


class _FailingRows(MemorySource):
    def list_table_rows(self, table_id):
        raise UpstreamFetchError(f"Failed to fetch blocks for {table_id}: HTTP 502")


# --- list_published ---

def test_list_published_skips_untitled_and_drafts(publisher):
    summaries = publisher.list_published()
    assert [s.slug for s in summaries] == ["hello-world", "tables-things"]
    assert summaries[0].tags == ["intro", "news"]


def test_list_published_warns_on_duplicate_slugs(page, caplog):
    source = MemorySource(pages=[page("a", "Same Title"), page("b", "Same  title!")])
    with caplog.at_level(logging.WARNING):
        summaries = Publisher(source).list_published()
    assert [s.source_id for s in summaries] == ["a", "b"]
    assert "same-title" in caplog.text


# --- get_by_slug ---

def test_get_by_slug_expands_macros(publisher):
    """The YouTube token becomes an embed; no token syntax survives."""
    post = publisher.get_by_slug("hello-world")
    assert post.title == "Hello, World!"
    assert post.source_id == "p-hello"
    heading, para, reading = post.blocks
    assert heading.kind == BlockKind.heading1 and heading.text == "Welcome"
    assert para.text.startswith("Check out ")
    assert '<iframe src="https://www.youtube.com/embed/dQw4w9WgXcQ"' in para.text
    assert "<span>1 min read</span>" in reading.text
    assert all("{{" not in b.text for b in post.blocks)


def test_expanded_blocks_keep_markup_segments(publisher):
    """Macro output is kept apart from the source text around it."""
    heading, para, _ = publisher.get_by_slug("hello-world").blocks
    assert heading.segments == []
    literal, embed = para.segments
    assert (literal.text, literal.markup) == ("Check out ", False)
    assert embed.markup and embed.text.startswith("<div")
    assert literal.text + embed.text == para.text


def test_get_by_slug_not_found(publisher):
    assert publisher.get_by_slug("no-such-post") is None


def test_get_by_slug_never_returns_drafts(publisher):
    assert publisher.get_by_slug("draft-post") is None


def test_get_by_slug_table_rows(publisher):
    """Table rows are fetched separately and keep rows -> cells -> fragments."""
    post = publisher.get_by_slug("tables-things")
    table, divider = post.blocks
    assert isinstance(table, TableBlock)
    assert table.table.column_count == 2
    assert table.table.has_column_header is True
    assert table.table.rows == [[["Name"], ["Value"]], [["a"], ["1", "0"]]]
    assert isinstance(divider, DividerBlock)


def test_get_by_slug_duplicate_first_wins(page, text_block):
    source = MemorySource(
        pages=[page("a", "Same Title"), page("b", "Same Title")],
        children={"a": [text_block("paragraph", "first")], "b": [text_block("paragraph", "second")]},
    )
    post = Publisher(source).get_by_slug("same-title")
    assert post.source_id == "a"
    assert post.blocks[0].text == "first"


def test_get_by_slug_propagates_upstream_errors(sample_source):
    source = _FailingRows(pages=sample_source.pages, children=sample_source.children)
    with pytest.raises(UpstreamFetchError, match="tbl"):
        Publisher(source).get_by_slug("tables-things")


def test_handlers_see_unexpanded_post(page, text_block):
    """Every block is expanded against the normalized post, not a half-expanded one."""
    seen = []
    registry = PluginRegistry([
        Plugin("Grow", lambda p, c: " ".join(["w"] * 50)),
        Plugin("Count", lambda p, c: seen.append([b.text for b in c.post.blocks]) or "n"),
    ])
    source = MemorySource(
        pages=[page("a", "Post")],
        children={"a": [text_block("paragraph", "{{Grow}}"), text_block("paragraph", "{{Count}}")]},
    )
    post = Publisher(source, registry).get_by_slug("post")
    assert seen == [["{{Grow}}", "{{Count}}"]]
    assert post.blocks[1].text == "n"


# --- plugins ---

def test_default_registry_holds_builtins(publisher):
    assert "YouTube" in publisher.list_available_plugins()
    assert len(publisher.list_available_plugins()) == 8


def test_default_registry_honors_settings():
    publisher = Publisher(None, settings=Settings(plugins=["Share"]))
    assert publisher.list_available_plugins() == {"Share"}


def test_register_plugin_used_by_expansion(page, text_block):
    source = MemorySource(pages=[page("a", "Post")], children={"a": [text_block("paragraph", "{{Shout[hi]}}")]})
    publisher = Publisher(source)
    publisher.register_plugin(Plugin("Shout", lambda p, c: p.upper()))
    assert "Shout" in publisher.list_available_plugins()
    assert publisher.get_by_slug("post").blocks[0].text == "HI"


def test_registries_are_not_shared(sample_source):
    first, second = Publisher(sample_source), Publisher(sample_source)
    first.register_plugin(Plugin("Only", lambda p, c: ""))
    assert "Only" in first.list_available_plugins()
    assert "Only" not in second.list_available_plugins()


# --- run_export ---

def test_run_export_all(publisher, tmp_path):
    results, missing = run_export(publisher, tmp_path / "dist", "mdx")
    assert missing == []
    assert [slug for slug, _ in results] == ["hello-world", "tables-things"]
    for slug, path in results:
        assert path == tmp_path / "dist" / f"{slug}.mdx"
        assert path.exists()
    sidecar = json.loads((tmp_path / "dist" / "hello-world.json").read_text(encoding="utf-8"))
    assert sidecar["blocks"] == ["heading1", "paragraph", "paragraph"]


def test_run_export_selected_and_missing(publisher, tmp_path):
    results, missing = run_export(publisher, tmp_path, "md", ["tables-things", "nope", "tables-things"])
    assert [slug for slug, _ in results] == ["tables-things"]
    assert missing == ["nope"]
    assert "| Name | Value |" in (tmp_path / "tables-things.md").read_text(encoding="utf-8")
    assert not (tmp_path / "hello-world.md").exists()
