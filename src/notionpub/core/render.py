"""Block -> markdown rendering for the exported page body"""

import re

from notionpub.core.models import (
    HEADING_LEVELS, Block, BlockKind, CodeBlock, DividerBlock, ImageBlock,
    Span, TableBlock, TableContent, TextBlock, UnsupportedBlock,
)
from notionpub.core.plugins.builtins import heading_anchor


_INLINE_SPECIAL = re.compile(r'([\\`*_{}\[\]<&~])')
# list, heading, quote and setext markers only act at the start of a line
_LINE_START = re.compile(r'^([ \t]*)([#>+=-]|\d+[.)])', re.MULTILINE)


def _escape_line_start(m: re.Match) -> str:
    lead, marker = m.groups()
    if marker[0].isdigit():
        return f"{lead}{marker[:-1]}\\{marker[-1]}"
    return f"{lead}\\{marker}"


def escape_markdown(text: str) -> str:
    """Backslash-escape source text so markdown and MDX read it as literal characters."""
    return _LINE_START.sub(_escape_line_start, _INLINE_SPECIAL.sub(r'\\\1', text))


def _wrap(text: str, marker: str) -> str:
    """Wrap the non-whitespace core of text in marker (emphasis cannot touch spaces)."""
    core = text.strip()
    if not core:
        return text
    lead = text[:len(text) - len(text.lstrip())]
    trail = text[len(text.rstrip()):]
    return f"{lead}{marker}{core}{marker}{trail}"


def render_span(span: Span) -> str:
    if span.code:
        text = _wrap(span.text, '`')
    else:
        text = _INLINE_SPECIAL.sub(r'\\\1', span.text)
    if span.bold:
        text = _wrap(text, '**')
    if span.italic:
        text = _wrap(text, '_')
    if span.strikethrough:
        text = _wrap(text, '~~')
    if span.href:
        text = f"[{text}]({span.href})"
    return text


def render_inline(block: TextBlock | UnsupportedBlock) -> str:
    """Inline markdown for a block's text.

    Expanded blocks keep macro markup verbatim and escape the text around it.
    Otherwise rich spans are used while they still spell the block text.
    """
    if block.segments:
        return ''.join(s.text if s.markup else escape_markdown(s.text) for s in block.segments)
    spans = getattr(block, 'rich_spans', None)
    if spans and ''.join(s.text for s in spans) == block.text:
        return _LINE_START.sub(_escape_line_start, ''.join(render_span(s) for s in spans))
    return escape_markdown(block.text or '')


def _cell(fragments: list[str]) -> str:
    return escape_markdown(''.join(fragments)).replace('|', '\\|').replace('\n', '<br>')


def render_table(table: TableContent) -> str:
    """GFM table; without a column header the header row is left blank."""
    rows = [[_cell(c) for c in row] for row in table.rows]
    width = max([table.column_count, *(len(r) for r in rows)])
    if width == 0:
        return ''
    rows = [r + [''] * (width - len(r)) for r in rows]
    if table.has_row_header:
        rows = [[f"**{r[0]}**" if r[0] else '', *r[1:]] for r in rows]

    if table.has_column_header and rows:
        header, body = rows[0], rows[1:]
    else:
        header, body = [''] * width, rows

    lines = [
        '| ' + ' | '.join(header) + ' |',
        '|' + '|'.join(['---'] * width) + '|',
        *('| ' + ' | '.join(r) + ' |' for r in body),
    ]
    return '\n'.join(lines)


def render_block(block: Block, anchor: str | None = None) -> str:
    """Render one block to markdown; anchor is the TOC id for headings."""
    match block:
        case TextBlock(kind=kind) if kind in HEADING_LEVELS:
            heading = f"{'#' * HEADING_LEVELS[kind]} {render_inline(block)}"
            return f'<a id="{anchor}"></a>\n\n{heading}' if anchor else heading
        case TextBlock(kind=BlockKind.bulleted_item):
            return f"- {render_inline(block)}"
        case TextBlock(kind=BlockKind.numbered_item):
            return f"1. {render_inline(block)}"
        case TextBlock(kind=BlockKind.quote | BlockKind.callout):
            return '\n'.join(f"> {line}" for line in render_inline(block).splitlines() or [''])
        case TextBlock():
            return render_inline(block)
        case CodeBlock():
            return f"```{block.language}\n{block.code}\n```"
        case ImageBlock():
            image = f"![{escape_markdown(block.image.alt_text)}]({block.image.url})"
            caption = escape_markdown(block.image.caption)
            return f"{image}\n\n_{caption}_" if caption else image
        case DividerBlock():
            return '---'
        case TableBlock():
            return render_table(block.table)
        case UnsupportedBlock():
            if block.text:
                return render_inline(block)
            return f"> ⚠️ Unsupported block: {block.source_type or 'unknown'}"
    return ''


def render_blocks(blocks: list[Block]) -> str:
    """Join rendered blocks; headings are numbered in order to match TOC anchors."""
    parts = []
    heading_index = 0
    for block in blocks:
        anchor = None
        if block.kind in HEADING_LEVELS:
            anchor = heading_anchor(heading_index)
            heading_index += 1
        rendered = render_block(block, anchor)
        if rendered:
            parts.append(rendered)
    return '\n\n'.join(parts)
