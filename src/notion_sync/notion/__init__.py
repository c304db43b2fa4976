"""
Notion API Client Package

This package provides a modular interface to the Notion REST API.

Package Structure:
    - base.py: Core client (auth headers, retry / circuit breaker / bulkhead, errors)
    - blocks.py: Block operations (list/append/update/delete/tree)
    - pages.py: Page operations (search/create/retrieve/update title)

Usage:
    from notion_sync.notion import NotionClient

    client = NotionClient()  # token from configuration
    blocks = client.fetch_block_tree(page_id)
"""

from notion_sync.core.circuit_breaker import CircuitOpenError
from notion_sync.notion.base import (
    NotionApiError,
    NotionClientBase,
    NotionRateLimitError,
    NotionServerError,
)
from notion_sync.notion.blocks import BlockOperationsMixin
from notion_sync.notion.pages import PageOperationsMixin, page_title


class NotionClient(NotionClientBase, BlockOperationsMixin, PageOperationsMixin):
    """Notion API client composed from the operation mixins."""


__all__ = [
    'NotionClient',
    'NotionClientBase',
    'BlockOperationsMixin',
    'PageOperationsMixin',
    'NotionApiError',
    'NotionRateLimitError',
    'NotionServerError',
    'CircuitOpenError',
    'page_title',
]
