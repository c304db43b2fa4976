"""
Notion Block Operations Module

Contains methods for block manipulation:
- list_block_children, list_all_block_children
- append_block_children (chunked)
- update_block, delete_block, delete_blocks (parallel)
- fetch_block_tree
"""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Union

from notion_sync import config
from notion_sync.constants import MAX_PAGE_SIZE
from notion_sync.converter.blocks import Block
from notion_sync.converter.correlator import BlockTreeCorrelator
from notion_sync.logger import logger


BlockLike = Union[Block, Dict[str, Any]]


def serialize_blocks(blocks: List[BlockLike]) -> List[Dict[str, Any]]:
    """Turn Block objects into request payloads; dicts pass through."""
    return [block.to_dict() if isinstance(block, Block) else block for block in blocks]


class BlockOperationsMixin:
    """Mixin class providing block operation methods for NotionClient."""

    def list_block_children(self, block_id: str, start_cursor: Optional[str] = None,
                            page_size: int = MAX_PAGE_SIZE) -> Dict[str, Any]:
        """Get one page of a block's children.

        Args:
            block_id: Block or page ID
            start_cursor: Cursor from the previous page's next_cursor
            page_size: Items per page (max 100)

        Returns:
            Raw list response: results, has_more, next_cursor
        """
        params: Dict[str, Any] = {"page_size": min(page_size, MAX_PAGE_SIZE)}
        if start_cursor:
            params["start_cursor"] = start_cursor
        return self._request("GET", f"blocks/{self._quote_id(block_id)}/children", params=params)

    def list_all_block_children(self, block_id: str) -> List[Dict[str, Any]]:
        """Get all direct children of a block, following pagination."""
        children: List[Dict[str, Any]] = []
        cursor = None
        while True:
            page = self.list_block_children(block_id, cursor)
            children.extend(page.get("results", []))
            cursor = page.get("next_cursor")
            if not page.get("has_more") or not cursor:
                break
        return children

    def append_block_children(self, block_id: str, children: List[BlockLike],
                              after: Optional[str] = None) -> List[Dict[str, Any]]:
        """Append children to a block.

        The API accepts at most 100 blocks per request, so larger lists are
        sent in chunks. When `after` is given, each chunk is inserted after the
        last block created by the previous one to keep the original order.

        Args:
            block_id: Parent block or page ID
            children: Blocks to append
            after: Insert after this sibling instead of at the end

        Returns:
            Created block records
        """
        payload = serialize_blocks(children)
        created: List[Dict[str, Any]] = []
        chunk_size = config.BATCH_CHUNK_SIZE

        for start in range(0, len(payload), chunk_size):
            body: Dict[str, Any] = {"children": payload[start:start + chunk_size]}
            if after:
                body["after"] = after

            response = self._request("PATCH", f"blocks/{self._quote_id(block_id)}/children", json_body=body)
            results = response.get("results", [])
            created.extend(results)
            if after and results:
                after = results[-1]["id"]

        logger.debug(f"Appended {len(created)} blocks to {block_id}")
        return created

    def update_block(self, block_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Patch a block's content, e.g. {"paragraph": {"rich_text": [...]}}."""
        return self._request("PATCH", f"blocks/{self._quote_id(block_id)}", json_body=payload)

    def delete_block(self, block_id: str) -> Dict[str, Any]:
        """Archive (delete) a single block."""
        return self._request("DELETE", f"blocks/{self._quote_id(block_id)}")

    def delete_blocks(self, block_ids: List[str]) -> int:
        """Delete many blocks in parallel.

        Concurrency is bounded by the client's bulkhead. Every deletion is
        attempted; the first failure is re-raised after all have finished.

        Returns:
            Number of blocks deleted
        """
        if not block_ids:
            return 0

        first_error: Optional[BaseException] = None
        deleted = 0
        with logger.progress(len(block_ids), "Deleting blocks") as update:
            with ThreadPoolExecutor(max_workers=config.MAX_PARALLEL_REQUESTS) as executor:
                futures = {executor.submit(self.delete_block, block_id): block_id for block_id in block_ids}
                for future in as_completed(futures):
                    try:
                        future.result()
                        deleted += 1
                    except Exception as e:
                        logger.warning(f"Failed to delete block {futures[future]}: {e}")
                        if first_error is None:
                            first_error = e
                    update(1)

        if first_error is not None:
            raise first_error
        return deleted

    def fetch_block_tree(self, block_id: str,
                         cancel_event: Optional[threading.Event] = None) -> List[Block]:
        """Load every descendant of a page or block as a Block tree."""
        return BlockTreeCorrelator(self.list_block_children).load(block_id, cancel_event)
