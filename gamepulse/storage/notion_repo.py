"""Minimal Notion repository for the content-ideas database.

Plain `requests` against the public REST API: schema discovery, a recency
ordered read of game names for dedup, and one page insert per idea. Every
failure surfaces as PersistenceError; nothing is retried because inserts are
not idempotent.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from gamepulse.errors import PersistenceError
from gamepulse.storage.notion_properties import RUN_DATE_PROPERTY, title_property

logger = logging.getLogger(__name__)

NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"
MAX_PAGE_SIZE = 100


def _plain_text(rich: Any) -> str:
    if not isinstance(rich, list):
        return ""
    return "".join(str((part or {}).get("plain_text") or "") for part in rich).strip()


class NotionRepo:
    def __init__(self, api_key: str, database_id: str, *, timeout: float = 30, session: Optional[Any] = None):
        self.api_key = api_key
        self.database_id = database_id
        self.timeout = timeout
        self.http = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Notion-Version": NOTION_VERSION,
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{NOTION_API_URL}{path}"
        try:
            resp = self.http.request(method, url, headers=self._headers(), json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise PersistenceError(f"Notion {method} {path} failed: {e}") from e
        if resp.status_code >= 400:
            try:
                message = (resp.json() or {}).get("message") or resp.text
            except ValueError:
                message = resp.text
            raise PersistenceError(f"Notion {method} {path} returned {resp.status_code}: {message}", status=resp.status_code)
        try:
            return resp.json() or {}
        except ValueError as e:
            raise PersistenceError(f"Notion {method} {path} returned non-JSON body") from e

    # ------------------------- schema -------------------------

    def columns(self) -> Dict[str, str]:
        """Current property names of the database mapped to their Notion type."""
        data = self._request("GET", f"/databases/{self.database_id}")
        props = data.get("properties") or {}
        return {str(name): str((prop or {}).get("type") or "") for name, prop in props.items()}

    # ------------------------- reads -------------------------

    def recent_names(self, limit: int = 60, *, columns: Optional[Mapping[str, str]] = None) -> List[str]:
        """Game names of the newest `limit` pages, most recent first, without repeats."""
        if limit <= 0:
            return []
        columns = self.columns() if columns is None else columns
        title_prop = title_property(columns)
        if not title_prop:
            logger.warning("Notion database has no title column; history is empty")
            return []
        if RUN_DATE_PROPERTY in columns:
            sorts = [{"property": RUN_DATE_PROPERTY, "direction": "descending"}]
        else:
            sorts = [{"timestamp": "created_time", "direction": "descending"}]

        names: List[str] = []
        seen_pages = 0
        cursor: Optional[str] = None
        while seen_pages < limit:
            body: Dict[str, Any] = {"page_size": min(limit - seen_pages, MAX_PAGE_SIZE), "sorts": sorts}
            if cursor:
                body["start_cursor"] = cursor
            data = self._request("POST", f"/databases/{self.database_id}/query", body)
            results = data.get("results") or []
            for page in results:
                seen_pages += 1
                prop = ((page or {}).get("properties") or {}).get(title_prop) or {}
                text = _plain_text(prop.get("title"))
                if text:
                    names.append(text)
            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor or not results:
                break
        return list(dict.fromkeys(names))

    # ------------------------- writes -------------------------

    def insert(self, properties: Dict[str, Any]) -> str:
        """Create one page; returns its id."""
        data = self._request(
            "POST",
            "/pages",
            {"parent": {"database_id": self.database_id}, "properties": properties},
        )
        return str(data.get("id") or "")
