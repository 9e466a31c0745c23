"""Entry record -> PostSummary metadata extraction"""

import logging
from datetime import datetime
from typing import Any

from notionpub.core.models import PostSummary
from notionpub.core.normalize import plain_text


logger = logging.getLogger(__name__)

TITLE_PROPERTIES = ('Name', 'Title')
DATE_PROPERTIES = ('Published Date', 'Date')
EXCERPT_PROPERTIES = ('Excerpt', 'Summary')
TAGS_PROPERTY = 'Tags'


def _first_property(properties: dict, names: tuple[str, ...]) -> dict | None:
    for name in names:
        prop = properties.get(name)
        if isinstance(prop, dict):
            return prop
    return None


def _title(properties: dict) -> str:
    prop = _first_property(properties, TITLE_PROPERTIES)
    return plain_text(prop.get('title')).strip() if prop else ''


def _published_at(properties: dict, page_id: str) -> datetime | None:
    prop = _first_property(properties, DATE_PROPERTIES)
    start = ((prop or {}).get('date') or {}).get('start')
    if not start:
        return None
    try:
        return datetime.fromisoformat(start)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparsable date %r on entry %s", start, page_id)
        return None


def _tags(properties: dict) -> list[str]:
    options = (properties.get(TAGS_PROPERTY) or {}).get('multi_select') or []
    return list(dict.fromkeys(o['name'] for o in options if o.get('name')))


def _excerpt(properties: dict) -> str | None:
    prop = _first_property(properties, EXCERPT_PROPERTIES)
    text = plain_text(prop.get('rich_text')).strip() if prop else ''
    return text or None


def extract_summary(page: dict[str, Any]) -> PostSummary | None:
    """Build listing metadata for one entry; None when it has no usable title."""
    page_id = str(page.get('id') or '')
    properties = page.get('properties') or {}
    try:
        title = _title(properties)
        if not title:
            logger.warning("Dropping entry %s: no title", page_id)
            return None
        summary = PostSummary(
            title=title,
            source_id=page_id,
            published_at=_published_at(properties, page_id),
            tags=_tags(properties),
            excerpt=_excerpt(properties),
        )
        if not summary.slug:
            logger.warning("Dropping entry %s: title %r has no slug characters", page_id, title)
            return None
        return summary
    except (KeyError, TypeError, AttributeError) as e:
        logger.warning("Dropping entry %s: unreadable properties: %s", page_id, e)
        return None
