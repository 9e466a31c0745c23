"""Export pipeline: build MD/MDX/HTML content, sidecar JSON, and write output files"""

import json
from pathlib import Path

import yaml
from markdown_it import MarkdownIt

from notionpub.config import Settings
from notionpub.core.models import BlockKind, Post
from notionpub.core.render import render_blocks


def build_body(post: Post) -> str:
    """Render the post's (already expanded) blocks as a markdown body."""
    return render_blocks(post.blocks)


def build_frontmatter(post: Post) -> dict:
    fm = {"title": post.title, "slug": post.slug}
    if post.published_at:
        fm["date"] = post.published_at.isoformat()
    if post.tags:
        fm["tags"] = list(post.tags)
    if post.excerpt:
        fm["excerpt"] = post.excerpt
    return fm


def build_mdx(post: Post, body: str) -> str:
    """Return body with a YAML frontmatter block prepended."""
    header = yaml.dump(build_frontmatter(post), default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{header}---\n\n{body.lstrip()}"


def build_html(body: str, parser_config: str = 'gfm-like') -> str:
    """Render the markdown body to an HTML fragment; raw HTML from macros passes through."""
    md = MarkdownIt(parser_config, options_update={"html": True, "linkify": False})
    return md.render(body)


def build_sidecar(post: Post, settings: Settings) -> dict:
    """Build the sidecar JSON dict consumed by page templates."""
    base = settings.route_base_path.rstrip('/')
    return {
        "title": post.title,
        "slug": post.slug,
        "url": f"{base}/{post.slug}",
        "source_id": post.source_id,
        "published_at": post.published_at.isoformat() if post.published_at else None,
        "tags": list(post.tags),
        "excerpt": post.excerpt,
        "blocks": [BlockKind(b.kind).value for b in post.blocks],
    }


def write_post(
    post: Post,
    output_dir: Path,
    fmt: str = 'mdx',
    settings: Settings | None = None,
    ) -> tuple[Path, Path]:
    """Write the rendered post + sidecar JSON for a single post.

    Output paths: output_dir / post.slug.{fmt|json}

    Returns (content_path, json_path).
    """
    settings = settings or Settings()
    output_dir.mkdir(parents=True, exist_ok=True)

    body = build_body(post)
    content = build_html(body, settings.parser_config) if fmt == 'html' else build_mdx(post, body)
    content_path = output_dir / f"{post.slug}.{fmt}"
    json_path = output_dir / f"{post.slug}.json"

    content_path.write_text(content, encoding='utf-8')
    json_path.write_text(
        json.dumps(build_sidecar(post, settings), indent=2, ensure_ascii=False),
        encoding='utf-8',
    )
    return content_path, json_path
