"""Built-in macro handlers: embeds, comments, table of contents, reading time, share links"""

import math
from dataclasses import dataclass
from html import escape
from urllib.parse import quote

from notionpub.core.models import HEADING_LEVELS, block_text
from notionpub.core.plugins.expander import RenderContext
from notionpub.core.plugins.registry import Plugin, PluginRegistry


DEFAULT_SHARE_PLATFORMS = ['twitter', 'linkedin', 'facebook']
TOC_EMPTY = '<div class="toc-empty">No headings found for table of contents</div>'


def heading_anchor(index: int) -> str:
    """Anchor id for the index-th heading of a post (shared with the block renderer)."""
    return f"heading-{index}"


def codepen(parameter: str, context: RenderContext) -> str:
    pen_id = escape(parameter)
    return (
        f'<iframe height="300" style="width: 100%;" scrolling="no" title="CodePen Embed" '
        f'src="https://codepen.io/embed/{pen_id}?height=300&amp;theme-id=dark&amp;default-tab=result" '
        f'frameborder="no" loading="lazy" allowtransparency="true" allowfullscreen="true"></iframe>'
    )


def tweet(parameter: str, context: RenderContext) -> str:
    tweet_id = escape(parameter)
    return (
        f'<div class="tweet-embed" data-tweet-id="{tweet_id}">'
        f'<blockquote class="twitter-tweet">'
        f'<a href="https://twitter.com/twitter/status/{tweet_id}"></a>'
        f'</blockquote></div>'
    )


def youtube(parameter: str, context: RenderContext) -> str:
    video_id = escape(parameter)
    return (
        '<div style="position: relative; padding-bottom: 56.25%; height: 0; overflow: hidden; '
        'max-width: 100%; background: #000;">'
        f'<iframe src="https://www.youtube.com/embed/{video_id}" '
        'style="position: absolute; top: 0; left: 0; width: 100%; height: 100%;" '
        'frameborder="0" allowfullscreen></iframe></div>'
    )


def gallery(parameter: str, context: RenderContext) -> str:
    folder = escape(parameter)
    return (
        f'<div class="image-gallery" data-folder="{folder}">'
        f'<p>📷 Image Gallery: {folder}</p></div>'
    )


def comment_section(parameter: str, context: RenderContext) -> str:
    # config is an opaque passthrough for the client-side comments widget
    return (
        f'<div class="comment-section" data-config="{escape(parameter)}">'
        '<h3>Comments</h3>'
        '<div id="comments-container"></div>'
        '</div>'
    )


@dataclass
class _Heading:
    anchor: str
    text: str
    level: int


def _toc_list(headings: list[_Heading]) -> str:
    """Nest headings into <ul> lists by level; a deeper heading opens a sublist."""
    parts: list[str] = []
    stack: list[int] = []
    for h in headings:
        if not stack:
            parts.append('<ul class="toc-list">')
            stack.append(h.level)
        elif h.level > stack[-1]:
            parts.append('<ul>')
            stack.append(h.level)
        else:
            parts.append('</li>')
            while len(stack) > 1 and h.level <= stack[-2]:
                parts.append('</ul></li>')
                stack.pop()
        parts.append(f'<li class="toc-level-{h.level}"><a href="#{h.anchor}">{escape(h.text)}</a>')
    parts.append('</li>')
    parts.extend('</ul></li>' for _ in stack[1:])
    parts.append('</ul>')
    return ''.join(parts)


def table_of_contents(parameter: str, context: RenderContext) -> str:
    headings = [
        _Heading(anchor=heading_anchor(i), text=block.text, level=HEADING_LEVELS[block.kind])
        for i, block in enumerate(b for b in context.post.blocks if b.kind in HEADING_LEVELS)
    ]
    if not headings:
        return TOC_EMPTY
    return (
        f'<div class="table-of-contents theme-{context.settings.theme}">'
        '<h4>Table of Contents</h4>'
        f'{_toc_list(headings)}'
        '</div>'
    )


def word_count(context: RenderContext) -> int:
    """Words across every block with non-empty text, split on whitespace runs."""
    texts = [t for t in (block_text(b) for b in context.post.blocks) if t]
    return len(' '.join(texts).split())


def reading_minutes(context: RenderContext) -> int:
    return math.ceil(word_count(context) / context.settings.words_per_minute)


def reading_time(parameter: str, context: RenderContext) -> str:
    return (
        '<div class="reading-time">'
        '<span class="reading-time-icon">📖</span>'
        f'<span>{reading_minutes(context)} min read</span>'
        '</div>'
    )


def _share_link(platform: str, title: str, url: str) -> str:
    match platform:
        case 'twitter':
            href, label = f"https://twitter.com/intent/tweet?text={title}&amp;url={url}", "Twitter"
        case 'linkedin':
            href, label = f"https://www.linkedin.com/sharing/share-offsite/?url={url}", "LinkedIn"
        case 'facebook':
            href, label = f"https://www.facebook.com/sharer/sharer.php?u={url}", "Facebook"
        case _:
            return ''
    return f'<a href="{href}" target="_blank" class="share-button {platform}">{label}</a>'


def share(parameter: str, context: RenderContext) -> str:
    platforms = parameter.split(',') if parameter else DEFAULT_SHARE_PLATFORMS
    title = quote(context.post.title, safe='')
    base = context.settings.route_base_path.rstrip('/')
    url = quote(f"{base}/{context.post.slug}", safe='')
    buttons = ''.join(_share_link(p.strip(), title, url) for p in platforms)
    return (
        f'<div class="share-section theme-{context.settings.theme}">'
        '<h4>Share this post</h4>'
        f'<div class="share-buttons">{buttons}</div>'
        '</div>'
    )


BUILTIN_PLUGINS: list[Plugin] = [
    Plugin('CodePen', codepen),
    Plugin('Tweet', tweet),
    Plugin('YouTube', youtube),
    Plugin('Gallery', gallery),
    Plugin('CommentSection', comment_section),
    Plugin('TableOfContents', table_of_contents),
    Plugin('ReadingTime', reading_time),
    Plugin('Share', share),
]


def register_builtins(registry: PluginRegistry, enabled: list[str] = None) -> PluginRegistry:
    """Register built-ins into registry; enabled restricts by name (None/empty = all)."""
    unknown = set(enabled or []) - {p.name for p in BUILTIN_PLUGINS}
    if unknown:
        raise ValueError(f"Unknown built-in plugin(s): {', '.join(sorted(unknown))}")
    for plugin in BUILTIN_PLUGINS:
        if not enabled or plugin.name in enabled:
            registry.register(plugin)
    return registry
