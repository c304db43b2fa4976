"""
Converter Package

Provides bidirectional conversion between Markdown and Notion block trees.

Usage:
    from notion_sync.converter import MarkdownToNotion, NotionToMarkdown

    blocks = MarkdownToNotion().parse(text)
    text = NotionToMarkdown().convert(blocks)

Modules:
    - languages: code fence tag <-> Notion language
    - rich_text: inline Markdown <-> rich_text spans
    - blocks: block model matching the Notion API shape
    - markdown_to_notion: Markdown -> blocks
    - notion_to_markdown: blocks -> Markdown
    - correlator: breadth-first loading of remote block trees
"""

from notion_sync.converter.blocks import Block, CodeInfo, blocks_from_dicts, blocks_to_dicts
from notion_sync.converter.correlator import BlockTreeCorrelator, LoadCancelled, load_block_tree
from notion_sync.converter.languages import DEFAULT_LANGUAGE, denormalize_language, normalize_language
from notion_sync.converter.markdown_to_notion import MarkdownToNotion, markdown_to_blocks, strip_front_matter
from notion_sync.converter.notion_to_markdown import NotionToMarkdown, blocks_to_markdown
from notion_sync.converter.rich_text import RichTextSpan, markdown_to_spans, spans_to_markdown

__all__ = [
    'Block', 'CodeInfo', 'RichTextSpan',
    'MarkdownToNotion', 'NotionToMarkdown', 'BlockTreeCorrelator', 'LoadCancelled',
    'markdown_to_blocks', 'blocks_to_markdown', 'load_block_tree', 'strip_front_matter',
    'blocks_from_dicts', 'blocks_to_dicts',
    'markdown_to_spans', 'spans_to_markdown',
    'normalize_language', 'denormalize_language', 'DEFAULT_LANGUAGE',
]
