"""
Command surface.

Each command validates its arguments, runs the converter and the Notion
client, and returns human-readable text. Failures never escape as
exceptions: they come back as "Error: ..." (bad arguments) or
"Exception occurred while ..." (converter/API failures) messages.
"""

from typing import List, Optional

from notion_sync.constants import BlockType
from notion_sync.converter import MarkdownToNotion, NotionToMarkdown, strip_front_matter
from notion_sync.logger import logger
from notion_sync.notion import NotionClient, page_title


NOT_PUBLIC = "Not publicly shared"


def _missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return len(value) == 0


def _required(**arguments) -> Optional[str]:
    """Return the error text for the first missing argument, if any."""
    for name, value in arguments.items():
        if _missing(value):
            return f"Error: {name} is required"
    return None


class NotionCommands:
    """Notion operations exposed as text-in / text-out commands."""

    def __init__(self, client: NotionClient):
        self.client = client
        self.parser = MarkdownToNotion()
        self.renderer = NotionToMarkdown()

    def _failed(self, action: str, error: Exception) -> str:
        logger.error(f"Exception occurred while {action}: {error}")
        return f"Exception occurred while {action}: {error}"

    def search(self, query: str) -> str:
        """List pages matching query as "Title: ..., ID: ..., Public URL: ..." lines."""
        if query is None:
            return "Error: query is required"

        logger.info(f"Searching Notion for '{query}'")
        try:
            pages = self.client.search(query)
        except Exception as e:
            return self._failed("searching Notion", e)

        lines = [
            f"Title: {page_title(page)}, ID: {page.get('id')}, "
            f"Public URL: {page.get('public_url') or 'Not available'}"
            for page in pages
        ]
        logger.success(f"Search completed, found {len(lines)} results")
        return "\n".join(lines) if lines else "No results found"

    def create_page(self, parent_id: str, title: str, content: str) -> str:
        """Create a page under parent_id with Markdown content."""
        error = _required(parent_id=parent_id, title=title)
        if error:
            return error

        logger.info(f"Creating page '{title}' under {parent_id}")
        try:
            blocks = self.parser.parse(strip_front_matter(content or ""))
            page = self.client.create_page(parent_id, title, blocks)
        except Exception as e:
            return self._failed("creating Notion page", e)

        logger.success(f"Page created: {page.get('id')}")
        return (
            "Page created successfully!\n"
            f"ID: {page.get('id')}\n"
            f"Private URL: {page.get('url') or ''}\n"
            f"Public URL: {page.get('public_url') or NOT_PUBLIC}"
        )

    def update_page(self, page_id: str, title: str) -> str:
        """Rename a page."""
        error = _required(page_id=page_id)
        if error:
            return error
        if title is None:
            return "Error: title is required"

        logger.info(f"Updating Notion page {page_id}")
        try:
            page = self.client.update_page(page_id, title)
        except Exception as e:
            return self._failed("updating Notion page", e)

        logger.success(f"Page updated: {page.get('id')}")
        return f"Page updated successfully!\nID: {page.get('id')}"

    def get_page_content(self, page_id: str) -> str:
        """Page content as Markdown, with block id markers and a front-matter header."""
        error = _required(page_id=page_id)
        if error:
            return error

        logger.info(f"Retrieving page content for {page_id}")
        try:
            page = self.client.retrieve_page(page_id)
            blocks = self.client.fetch_block_tree(page_id)
            content = self.renderer.convert(blocks)
        except Exception as e:
            return self._failed("retrieving Notion page content", e)

        logger.success(f"Retrieved {len(blocks)} top-level blocks")
        return (
            "---\n"
            f"pageid: {page_id}\n"
            f"privateUrl: {page.get('url') or ''}\n"
            f"publicUrl: {page.get('public_url') or NOT_PUBLIC}\n"
            "---\n"
            f"{content}"
        )

    def update_page_content(self, page_id: str, content: str) -> str:
        """Replace a page's content, keeping its child pages.

        The first existing block stays as an anchor while the rest is deleted,
        new content is inserted after it, then the anchor is deleted too.
        """
        error = _required(page_id=page_id)
        if error:
            return error
        if content is None:
            return "Error: content is required"

        logger.info(f"Updating content of page {page_id}")
        try:
            blocks = self.parser.parse(strip_front_matter(content))
            existing = self.client.list_all_block_children(page_id)
            block_ids = [block["id"] for block in existing if block.get("type") != BlockType.CHILD_PAGE]

            placeholder = block_ids.pop(0) if block_ids else None
            if block_ids:
                self.client.delete_blocks(block_ids)

            self.client.append_block_children(page_id, blocks, after=placeholder)

            if placeholder:
                self.client.delete_block(placeholder)
        except Exception as e:
            return self._failed("updating Notion page content", e)

        logger.success(f"Page content updated: {page_id}")
        return f"Page content updated successfully!\nID: {page_id}"

    def append_block_content(self, block_id: str, content: str, after: Optional[str] = None) -> str:
        """Append Markdown content under a page or block."""
        error = _required(block_id=block_id, content=content)
        if error:
            return error

        logger.info(f"Appending content to {block_id}")
        try:
            blocks = self.parser.parse(strip_front_matter(content))
            created = self.client.append_block_children(block_id, blocks, after=after)
        except Exception as e:
            return self._failed("appending Notion block content", e)

        logger.success(f"Appended {len(created)} blocks to {block_id}")
        return f"Content appended successfully!\nID: {block_id}\nBlocks: {len(created)}"

    def delete_blocks(self, block_ids: List[str]) -> str:
        error = _required(block_ids=block_ids)
        if error:
            return error

        logger.info(f"Deleting {len(block_ids)} blocks")
        try:
            deleted = self.client.delete_blocks(block_ids)
        except Exception as e:
            return self._failed("deleting Notion blocks", e)

        logger.success(f"Deleted {deleted} blocks")
        return f"Blocks deleted successfully!\nIDs: {', '.join(block_ids)}"

    def update_block(self, block_id: str, content: str) -> str:
        """Replace one block's content with the first block built from content.

        Only the block's own content object is patched; its children are left alone.
        """
        error = _required(block_id=block_id)
        if error:
            return error
        if content is None:
            return "Error: content is required"

        logger.info(f"Updating block {block_id}")
        try:
            blocks = self.parser.parse(content)
            if not blocks:
                raise ValueError("content does not contain a block")
            block = blocks[0]
            self.client.update_block(block_id, {block.type: block.content()})
        except Exception as e:
            return self._failed("updating Notion block", e)

        logger.success(f"Block updated: {block_id}")
        return f"Block updated successfully!\nID: {block_id}"
