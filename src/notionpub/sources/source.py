from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any


class ContentSource(ABC):
    """Boundary to the external document store; returns raw records, fully paginated."""

    @abstractmethod
    def query_published(self) -> list[dict[str, Any]]:
        """Entries flagged published, in source order (typically newest first)."""
        raise NotImplementedError

    @abstractmethod
    def list_children(self, block_id: str) -> list[dict[str, Any]]:
        """Child block records of a page or block, in order."""
        raise NotImplementedError

    def list_table_rows(self, table_id: str) -> list[dict[str, Any]]:
        """Row records of a table block."""
        return [b for b in self.list_children(table_id) if b.get("type") == "table_row"]
