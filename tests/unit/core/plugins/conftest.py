"""Shared fixtures for plugin unit tests"""

import pytest

from notionpub.config import Settings
from notionpub.core.models import Post
from notionpub.core.plugins.expander import MacroExpander, RenderContext
from notionpub.core.plugins.registry import Plugin, PluginRegistry


@pytest.fixture(name="post")
def post_fixture():
    return Post(title="Hello, World!", source_id="p1")


@pytest.fixture(name="make_context")
def make_context_fixture(post):
    def _make(text: str = "", target: Post = None, **settings) -> RenderContext:
        return RenderContext(source_text=text, settings=Settings(**settings), post=target or post)
    return _make


@pytest.fixture(name="registry")
def registry_fixture():
    """Isolated registry with a few deterministic test plugins."""
    def _boom(parameter, context):
        raise RuntimeError("boom")

    return PluginRegistry([
        Plugin("Echo", lambda p, c: f"<echo>{p}</echo>"),
        Plugin("Braces", lambda p, c: "{{Echo[nested]}}"),
        Plugin("Boom", _boom),
    ])


@pytest.fixture(name="expander")
def expander_fixture(registry):
    return MacroExpander(registry)
