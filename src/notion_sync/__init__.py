"""
notion-sync

Bidirectional conversion between Markdown and Notion block trees, plus a thin
Notion API client and command surface built around it.

Usage:
    from notion_sync import MarkdownToNotion, NotionToMarkdown

    blocks = MarkdownToNotion().parse(markdown_text)
    markdown = NotionToMarkdown().convert(blocks)
"""

from notion_sync.converter import MarkdownToNotion, NotionToMarkdown

__version__ = "0.3.0"

__all__ = ['MarkdownToNotion', 'NotionToMarkdown', '__version__']
