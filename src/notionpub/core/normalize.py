"""Raw source block -> normalized Block conversion

Each raw block is a Notion-style record: a ``type`` discriminator plus a
payload stored under the key of the same name, e.g.::

    {"id": "...", "type": "paragraph", "paragraph": {"rich_text": [...]}}

Normalization is total: a payload that does not match its declared type
degrades to an UnsupportedBlock for that one block and never aborts siblings.
"""

import logging
from typing import Any, Callable

from pydantic import ValidationError

from notionpub.core.models import (
    Block, BlockKind, CodeBlock, DividerBlock, ImageBlock, ImageContent,
    Span, TableBlock, TableContent, TextBlock, UnsupportedBlock,
)


logger = logging.getLogger(__name__)

DEFAULT_ALT_TEXT = "Blog image"

TEXT_TYPE_MAP: dict[str, BlockKind] = {
    'paragraph':          BlockKind.paragraph,
    'heading_1':          BlockKind.heading1,
    'heading_2':          BlockKind.heading2,
    'heading_3':          BlockKind.heading3,
    'bulleted_list_item': BlockKind.bulleted_item,
    'numbered_list_item': BlockKind.numbered_item,
    'quote':              BlockKind.quote,
    'callout':            BlockKind.callout,
}

_MALFORMED = (KeyError, TypeError, AttributeError, ValueError, ValidationError)


def fragment_text(fragment: dict[str, Any]) -> str:
    """Plain text of one rich-text fragment (``plain_text``, else ``text.content``)."""
    if 'plain_text' in fragment:
        return fragment['plain_text']
    return fragment['text']['content']


def plain_text(fragments: list[dict[str, Any]] | None) -> str:
    """Concatenate fragment plain text in declared order, ignoring annotations."""
    return ''.join(fragment_text(f) for f in fragments or [])


def extract_spans(fragments: list[dict[str, Any]] | None) -> list[Span]:
    """Convert fragments to Spans, keeping bold/italic/strikethrough/code/href."""
    spans = []
    for f in fragments or []:
        ann = f.get('annotations') or {}
        href = f.get('href') or ((f.get('text') or {}).get('link') or {}).get('url')
        spans.append(Span(
            text=fragment_text(f),
            bold=bool(ann.get('bold')),
            italic=bool(ann.get('italic')),
            strikethrough=bool(ann.get('strikethrough')),
            code=bool(ann.get('code')),
            href=href,
        ))
    return spans


def _text_block(raw: dict, payload: dict, _rows) -> TextBlock:
    fragments = payload['rich_text']
    return TextBlock(
        kind=TEXT_TYPE_MAP[raw['type']],
        id=raw.get('id'),
        text=plain_text(fragments),
        rich_spans=extract_spans(fragments),
    )


def _code_block(raw: dict, payload: dict, _rows) -> CodeBlock:
    return CodeBlock(
        id=raw.get('id'),
        code=plain_text(payload['rich_text']),
        language=payload.get('language') or 'text',
    )


def _image_block(raw: dict, payload: dict, _rows) -> ImageBlock:
    url = (payload.get('external') or {}).get('url') or payload['file']['url']
    caption = plain_text(payload.get('caption'))
    return ImageBlock(
        id=raw.get('id'),
        image=ImageContent(url=url, caption=caption, alt_text=caption or DEFAULT_ALT_TEXT),
    )


def _divider_block(raw: dict, _payload, _rows) -> DividerBlock:
    return DividerBlock(id=raw.get('id'))


def _table_block(raw: dict, payload: dict, rows: list[dict] | None) -> TableBlock:
    cells_by_row = [
        [[fragment_text(f) for f in cell] for cell in row['table_row']['cells']]
        for row in rows or []
        if row.get('type') == 'table_row'
    ]
    return TableBlock(
        id=raw.get('id'),
        table=TableContent(
            column_count=payload['table_width'],
            has_column_header=bool(payload.get('has_column_header')),
            has_row_header=bool(payload.get('has_row_header')),
            rows=cells_by_row,
        ),
    )


CONVERTERS: dict[str, Callable[[dict, Any, list[dict] | None], Block]] = {
    **{t: _text_block for t in TEXT_TYPE_MAP},
    'code':    _code_block,
    'image':   _image_block,
    'divider': _divider_block,
    'table':   _table_block,
}


def _best_effort_text(raw: dict) -> str | None:
    """Text from a generic ``rich_text`` array under the block's own type key, if any."""
    block_type = raw.get('type')
    payload = raw.get(block_type) if isinstance(block_type, str) else None
    if not isinstance(payload, dict) or not isinstance(payload.get('rich_text'), list):
        return None
    try:
        return plain_text(payload['rich_text'])
    except _MALFORMED:
        return None


def _unsupported(raw: dict) -> UnsupportedBlock:
    return UnsupportedBlock(
        id=raw.get('id'),
        source_type=str(raw.get('type') or ''),
        text=_best_effort_text(raw),
    )


def is_table(raw: Any) -> bool:
    """True when a raw block needs a second lookup for its table rows."""
    return isinstance(raw, dict) and raw.get('type') == 'table' and bool(raw.get('id'))


def normalize_block(raw: dict[str, Any], table_rows: list[dict] | None = None) -> Block:
    """Map one raw source block to exactly one Block; never raises.

    table_rows carries the child row records of a table block (fetched by the
    caller with a second lookup keyed by the block id); ignored for other types.
    """
    if not isinstance(raw, dict):
        logger.warning("Skipping non-mapping block record of type %s", type(raw).__name__)
        return UnsupportedBlock()

    block_type = raw.get('type')
    convert = CONVERTERS.get(block_type) if isinstance(block_type, str) else None
    if convert is None:
        return _unsupported(raw)

    try:
        return convert(raw, raw.get(block_type), table_rows)
    except _MALFORMED as e:
        logger.warning("Malformed %s block %s degraded to unsupported: %s", block_type, raw.get('id'), e)
        return _unsupported(raw)


def normalize_blocks(raws: list[dict[str, Any]], rows_by_table: dict[str, list[dict]] = None) -> list[Block]:
    """Normalize a block sequence in order; rows_by_table maps table block id -> row records."""
    rows_by_table = rows_by_table or {}
    return [
        normalize_block(raw, rows_by_table.get(raw.get('id')) if is_table(raw) else None)
        for raw in raws
    ]
