"""
Block tree materialization from the paginated children listing.

The Notion API only returns one level of children per request. The
correlator attaches each listed block under its already-built parent and,
for blocks flagged `has_children`, queues another listing for that block.
The queue is processed breadth-first so only one pagination cursor is open
per tree at any time.
"""

import threading
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from notion_sync.converter.blocks import Block
from notion_sync.exceptions import NotionSyncError
from notion_sync.logger import logger


# fetch_page(block_id, start_cursor) -> {"results": [...], "has_more": bool, "next_cursor": str}
FetchPage = Callable[[str, Optional[str]], Dict[str, Any]]


class LoadCancelled(NotionSyncError):
    """Raised when a tree load is cancelled between page fetches.

    Attributes:
        partial: Root blocks materialized before cancellation
    """

    def __init__(self, partial: List[Block]):
        super().__init__("Block tree load cancelled")
        self.partial = partial


class BlockTreeCorrelator:
    """Attach remotely listed blocks to their parents, one level at a time."""

    def __init__(self, fetch_page: FetchPage):
        """
        Args:
            fetch_page: Callback returning one page of a block's children
        """
        self.fetch_page = fetch_page
        self.roots: List[Block] = []
        self._root_id: Optional[str] = None
        self._nodes: Dict[str, Block] = {}

    def attach(self, parent_id: str, raw: Dict[str, Any]) -> Optional[Block]:
        """Build a block from a remote record and attach it under parent_id.

        Returns:
            The attached block, or None when the type is unsupported or the
            parent is unknown
        """
        block = Block.from_dict(raw)
        if block is None:
            logger.debug(f"Skipping unsupported block type '{raw.get('type')}' ({raw.get('id')})")
            return None

        if parent_id == self._root_id:
            self.roots.append(block)
        else:
            parent = self._nodes.get(parent_id)
            if parent is None or not parent.append_child(block):
                logger.debug(f"No container for block {block.block_id} under {parent_id}")
                return None

        if block.block_id:
            self._nodes[block.block_id] = block
        return block

    def load(self, root_id: str, cancel_event: Optional[threading.Event] = None) -> List[Block]:
        """Materialize the whole tree under root_id.

        Args:
            root_id: Page or block id whose descendants are loaded
            cancel_event: Checked before every page fetch

        Returns:
            Root blocks with all children attached

        Raises:
            LoadCancelled: If cancel_event is set during the load
        """
        self.roots = []
        self._root_id = root_id
        self._nodes = {}

        queue: Deque[str] = deque([root_id])
        pages = 0
        while queue:
            parent_id = queue.popleft()
            expand: List[Block] = []

            for raw in self._iter_children(parent_id, cancel_event):
                block = self.attach(parent_id, raw)
                if block is not None and block.has_children and block.supports_children:
                    expand.append(block)

            # Siblings are all attached before any of them is expanded
            queue.extend(block.block_id for block in expand if block.block_id)
            pages += 1

        logger.debug(f"Loaded {len(self._nodes)} blocks under {root_id} ({pages} listings)")
        return self.roots

    def _iter_children(self, block_id: str, cancel_event: Optional[threading.Event]):
        cursor: Optional[str] = None
        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise LoadCancelled(self.roots)

            page = self.fetch_page(block_id, cursor)
            for raw in page.get("results", []):
                yield raw

            cursor = page.get("next_cursor")
            if not page.get("has_more") or not cursor:
                break


def load_block_tree(fetch_page: FetchPage, root_id: str,
                    cancel_event: Optional[threading.Event] = None) -> List[Block]:
    return BlockTreeCorrelator(fetch_page).load(root_id, cancel_event)
