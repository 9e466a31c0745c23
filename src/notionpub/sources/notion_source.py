"""Notion REST client implementing the ContentSource boundary"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from notionpub.config import Settings
from notionpub.errors import UpstreamFetchError
from notionpub.sources.source import ContentSource


logger = logging.getLogger(__name__)

PUBLISHED_FILTER = {"property": "Published", "checkbox": {"equals": True}}
NEWEST_FIRST = [{"property": "Created", "direction": "descending"}]


class NotionSource(ContentSource):
    """Fetch published database entries and page/table children from Notion.

    Listings follow ``has_more``/``next_cursor`` until exhausted. Any transport
    or HTTP error surfaces as UpstreamFetchError; nothing is retried here.
    """

    def __init__(
        self,
        token: str,
        database_id: str,
        *,
        api_url: str = "https://api.notion.com/v1",
        notion_version: str = "2022-06-28",
        page_size: int = 100,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
        ) -> None:
        self.database_id = database_id
        self.page_size = page_size
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=api_url, timeout=timeout)
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Notion-Version": notion_version,
        }

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.Client | None = None) -> NotionSource:
        if not settings.notion_token or not settings.notion_database_id:
            raise ValueError(
                "notion_token and notion_database_id are required "
                "(set NOTION_TOKEN / NOTION_DATABASE_ID or add them to config.yaml)"
            )
        return cls(
            settings.notion_token,
            settings.notion_database_id,
            api_url=settings.notion_api_url,
            notion_version=settings.notion_version,
            page_size=settings.page_size,
            timeout=settings.request_timeout,
            client=client,
        )

    def __enter__(self) -> NotionSource:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _request(self, method: str, path: str, what: str, **kwargs) -> dict[str, Any]:
        logger.debug("%s %s", method, path)
        try:
            res = self._client.request(method, path, headers=self._headers, **kwargs)
            res.raise_for_status()
            data = res.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamFetchError(
                f"Failed to {what}: HTTP {e.response.status_code} {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamFetchError(f"Failed to {what}: {e}") from e
        except ValueError as e:
            raise UpstreamFetchError(f"Failed to {what}: invalid JSON response: {e}") from e
        if not isinstance(data, dict):
            raise UpstreamFetchError(f"Failed to {what}: unexpected response shape")
        return data

    def _paginate(self, method: str, path: str, what: str, **kwargs) -> list[dict[str, Any]]:
        results: list[dict[str, Any]] = []
        cursor = None
        while True:
            if method == "POST":
                body = dict(kwargs.get("json") or {}, page_size=self.page_size)
                if cursor:
                    body["start_cursor"] = cursor
                data = self._request(method, path, what, json=body)
            else:
                params = {"page_size": self.page_size}
                if cursor:
                    params["start_cursor"] = cursor
                data = self._request(method, path, what, params=params)
            results.extend(data.get("results") or [])
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                return results

    def query_published(self) -> list[dict[str, Any]]:
        return self._paginate(
            "POST", f"/databases/{self.database_id}/query", "fetch posts from Notion",
            json={"filter": PUBLISHED_FILTER, "sorts": NEWEST_FIRST},
        )

    def list_children(self, block_id: str) -> list[dict[str, Any]]:
        return self._paginate("GET", f"/blocks/{block_id}/children", f"fetch blocks for {block_id}")
