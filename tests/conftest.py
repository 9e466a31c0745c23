"""Root test configuration: env isolation and Notion-shaped record factories"""

import os

import pytest

from notionpub.sources.memory_source import MemorySource


@pytest.fixture(autouse=True)
def isolate_env(tmp_path, monkeypatch):
    """Run each test from an empty tmp dir with no NOTIONPUB_/NOTION_ env vars set."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith(("NOTIONPUB_", "NOTION_")):
            monkeypatch.delenv(name)


def _rich(text: str, href: str = None, **annotations) -> dict:
    ann = {"bold": False, "italic": False, "strikethrough": False,
           "underline": False, "code": False, "color": "default"}
    ann.update(annotations)
    return {
        "type": "text",
        "text": {"content": text, "link": {"url": href} if href else None},
        "annotations": ann,
        "plain_text": text,
        "href": href,
    }


def _block(block_type: str, block_id: str = None, **payload) -> dict:
    return {"object": "block", "id": block_id or f"{block_type}-id", "type": block_type, block_type: payload}


def _text_block(block_type: str, *texts: str, block_id: str = None) -> dict:
    return _block(block_type, block_id, rich_text=[_rich(t) for t in texts])


def _table_row(*cells: list[str]) -> dict:
    return {"type": "table_row", "table_row": {"cells": [[_rich(t) for t in cell] for cell in cells]}}


def _page(page_id: str, title: str = None, published: bool = True, date: str = None, tags: list[str] = ()) -> dict:
    props = {"Published": {"type": "checkbox", "checkbox": published},
             "Tags": {"type": "multi_select", "multi_select": [{"name": t} for t in tags]}}
    if title is not None:
        props["Name"] = {"type": "title", "title": [_rich(title)]}
    if date is not None:
        props["Date"] = {"type": "date", "date": {"start": date}}
    return {"object": "page", "id": page_id, "properties": props}


@pytest.fixture(name="rich")
def rich_fixture():
    return _rich


@pytest.fixture(name="block")
def block_fixture():
    return _block


@pytest.fixture(name="text_block")
def text_block_fixture():
    return _text_block


@pytest.fixture(name="table_row")
def table_row_fixture():
    return _table_row


@pytest.fixture(name="page")
def page_fixture():
    return _page


@pytest.fixture(name="sample_source")
def sample_source_fixture():
    """Three published entries (one untitled) plus one draft."""
    return MemorySource(
        pages=[
            _page("p-hello", "Hello, World!", date="2026-03-01", tags=["intro", "intro", "news"]),
            _page("p-untitled"),
            _page("p-tables", "Tables & Things", date="2026-02-01T10:30:00+00:00"),
            _page("p-draft", "Draft Post", published=False),
        ],
        children={
            "p-hello": [
                _text_block("heading_1", "Welcome", block_id="h1"),
                _text_block("paragraph", "Check out {{YouTube[dQw4w9WgXcQ]}}", block_id="para"),
                _text_block("paragraph", "{{ReadingTime}}", block_id="rt"),
            ],
            "p-tables": [
                _block("table", "tbl", table_width=2, has_column_header=True, has_row_header=False),
                _block("divider", "div"),
            ],
            "tbl": [
                _table_row(["Name"], ["Value"]),
                _table_row(["a"], ["1", "0"]),
            ],
        },
    )
