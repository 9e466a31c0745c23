"""Post assembly: fetch -> normalize -> macro-expand orchestration, and export"""

import logging
from collections import Counter
from pathlib import Path

from notionpub.config import Settings
from notionpub.core.export import write_post
from notionpub.core.models import Block, Post, PostSummary, block_text
from notionpub.core.normalize import is_table, normalize_blocks
from notionpub.core.plugins.builtins import register_builtins
from notionpub.core.plugins.expander import OPEN, MacroExpander, RenderContext
from notionpub.core.plugins.registry import PluginHandler, PluginRegistry
from notionpub.core.posts import extract_summary
from notionpub.sources.source import ContentSource


logger = logging.getLogger(__name__)


class Publisher:
    """Builds posts from a content source with an explicitly owned plugin registry.

    When no registry is given, a fresh one is created holding the built-ins
    enabled by settings.plugins.
    """

    def __init__(
        self,
        source: ContentSource,
        registry: PluginRegistry | None = None,
        settings: Settings | None = None,
        ) -> None:
        self.source = source
        self.settings = settings or Settings()
        if registry is None:
            registry = register_builtins(PluginRegistry(), self.settings.plugins)
        self.registry = registry
        self.expander = MacroExpander(registry)

    # --- listing ---

    def list_published(self) -> list[PostSummary]:
        """Summaries of published entries in source order; untitled entries are dropped."""
        summaries = [s for s in map(extract_summary, self.source.query_published()) if s]
        duplicates = [slug for slug, n in Counter(s.slug for s in summaries).items() if n > 1]
        for slug in duplicates:
            logger.warning("Slug %r is shared by several entries; the first listed wins", slug)
        return summaries

    # --- full content ---

    def fetch_blocks(self, source_id: str) -> list[Block]:
        """Fetch and normalize an entry's blocks; tables get a second lookup for their rows."""
        raws = self.source.list_children(source_id)
        rows_by_table = {raw['id']: self.source.list_table_rows(raw['id']) for raw in raws if is_table(raw)}
        return normalize_blocks(raws, rows_by_table)

    def expand_post(self, post: Post) -> Post:
        """Macro-expand every text-bearing block of post in place.

        Every handler sees the post as normalized; results are assigned only
        after all blocks have been expanded.
        """
        expanded = [
            (block, self.expander.split(text, RenderContext(text, self.settings, post)))
            for block in post.blocks
            if (text := block_text(block)) and OPEN in text
        ]
        for block, segments in expanded:
            block.text = ''.join(s.text for s in segments)
            if any(s.markup for s in segments):
                block.segments = segments
        return post

    def get_post(self, summary: PostSummary) -> Post:
        post = Post.from_summary(summary, self.fetch_blocks(summary.source_id))
        return self.expand_post(post)

    def get_by_slug(self, slug: str) -> Post | None:
        """Return the fully expanded post for slug, or None when no entry matches."""
        summary = next((s for s in self.list_published() if s.slug == slug), None)
        if summary is None:
            return None
        return self.get_post(summary)

    # --- plugins ---

    def register_plugin(self, plugin: PluginHandler) -> None:
        self.registry.register(plugin)

    def list_available_plugins(self) -> set[str]:
        return self.registry.names()


def run_export(
    publisher: Publisher,
    output_dir: Path,
    fmt: str,
    slugs: list[str] | None = None,
    ) -> tuple[list[tuple[str, Path]], list[str]]:
    """Write published posts (optionally only slugs) to output_dir.

    Returns ((slug, path) pairs, requested slugs with no matching entry).
    """
    summaries: dict[str, PostSummary] = {}
    for s in publisher.list_published():
        summaries.setdefault(s.slug, s)

    wanted = list(dict.fromkeys(slugs)) if slugs else list(summaries)
    missing = [slug for slug in wanted if slug not in summaries]

    results = []
    for slug in wanted:
        if slug in summaries:
            post = publisher.get_post(summaries[slug])
            path, _ = write_post(post, output_dir, fmt, publisher.settings)
            results.append((slug, path))
    return results, missing
