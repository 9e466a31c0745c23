from dataclasses import dataclass, field
from typing import Any

from notionpub.sources.source import ContentSource


def _is_published(page: dict[str, Any]) -> bool:
    prop = (page.get("properties") or {}).get("Published")
    if not isinstance(prop, dict) or "checkbox" not in prop:
        return True
    return bool(prop["checkbox"])


@dataclass
class MemorySource(ContentSource):
    pages: list[dict[str, Any]] = field(default_factory=list)
    children: dict[str, list[dict[str, Any]]] = field(default_factory=dict)

    def query_published(self) -> list[dict[str, Any]]:
        return [p for p in self.pages if _is_published(p)]

    def list_children(self, block_id: str) -> list[dict[str, Any]]:
        return list(self.children.get(block_id, []))
