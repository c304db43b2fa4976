"""
Notion Page Operations Module

Contains methods for page manipulation:
- search
- create_page
- retrieve_page
- update_page
"""

from typing import Any, Dict, List, Optional

from notion_sync import config
from notion_sync.constants import MAX_PAGE_SIZE
from notion_sync.logger import logger
from notion_sync.notion.blocks import BlockLike, serialize_blocks


def page_title(page: Dict[str, Any]) -> str:
    """Plain title of a page or database record ("" if it has none)."""
    if page.get("object") == "database":
        return "".join(item.get("plain_text", "") for item in page.get("title", []))

    for prop in (page.get("properties") or {}).values():
        if prop.get("type") == "title":
            return "".join(item.get("plain_text", "") for item in prop.get("title", []))
    return ""


def _title_text(title: str) -> List[Dict[str, Any]]:
    return [{"type": "text", "text": {"content": title}}] if title else []


class PageOperationsMixin:
    """Mixin class providing page operation methods for NotionClient."""

    def search(self, query: str, page_size: int = MAX_PAGE_SIZE,
               max_results: Optional[int] = None) -> List[Dict[str, Any]]:
        """Search pages and databases shared with the integration.

        Args:
            query: Text to match against titles
            page_size: Results per request
            max_results: Stop after this many results (all when None)

        Returns:
            List of page/database objects
        """
        results: List[Dict[str, Any]] = []
        body: Dict[str, Any] = {"query": query, "page_size": min(page_size, MAX_PAGE_SIZE)}

        while True:
            response = self._request("POST", "search", json_body=body)
            results.extend(response.get("results", []))
            if max_results is not None and len(results) >= max_results:
                return results[:max_results]

            cursor = response.get("next_cursor")
            if not response.get("has_more") or not cursor:
                return results
            body = dict(body, start_cursor=cursor)

    def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        return self._request("GET", f"pages/{self._quote_id(page_id)}")

    def update_page(self, page_id: str, title: str) -> Dict[str, Any]:
        """Set a page's title.

        Args:
            page_id: Page ID
            title: New title (may be empty)

        Returns:
            The updated page object
        """
        body = {"properties": {"title": {"title": _title_text(title)}}}
        page = self._request("PATCH", f"pages/{self._quote_id(page_id)}", json_body=body)
        logger.debug(f"Updated title of page {page_id}")
        return page

    def create_page(self, parent_id: str, title: str,
                    children: Optional[List[BlockLike]] = None) -> Dict[str, Any]:
        """Create a child page under an existing page.

        The first chunk of children is sent with the create request, any rest
        is appended afterwards.

        Args:
            parent_id: Parent page ID
            title: Page title
            children: Initial content blocks

        Returns:
            The created page object
        """
        payload = serialize_blocks(children or [])
        chunk_size = config.BATCH_CHUNK_SIZE

        body: Dict[str, Any] = {
            "parent": {"page_id": parent_id},
            "properties": {
                "title": {"title": _title_text(title)},
            },
        }
        if payload:
            body["children"] = payload[:chunk_size]

        page = self._request("POST", "pages", json_body=body)
        logger.debug(f"Created page {page.get('id')} under {parent_id}")

        remaining = payload[chunk_size:]
        if remaining:
            self.append_block_children(page["id"], remaining)
        return page
