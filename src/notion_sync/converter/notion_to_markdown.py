"""
Notion block tree -> Markdown.

Depth-first, pre-order walk. Blocks that carry an id are preceded by a
`[//]: # (BlockId: ...)` marker line. Markdown renderers hide these lines,
and MarkdownToNotion(keep_ids=True) reads them back, so block identities
survive an edit round-trip. Empty text blocks still get a line ("-", "#",
"&nbsp;") so their ids and children are not lost.
"""

from typing import Any, Dict, List, Optional

from notion_sync.constants import BLOCK_ID_MARKER, CODE_FENCE, EMPTY_PARAGRAPH, INDENT_WIDTH
from notion_sync.converter.blocks import (
    Block,
    BulletedListItemBlock,
    CodeBlock,
    DividerBlock,
    HeadingBlock,
    NumberedListItemBlock,
    ParagraphBlock,
    QuoteBlock,
    TableBlock,
    TextBlock,
    blocks_from_dicts,
)
from notion_sync.converter.languages import denormalize_language
from notion_sync.converter.markdown_to_notion import escape_paragraph_line
from notion_sync.converter.rich_text import RichTextSpan, spans_to_markdown


def _cell_to_markdown(cell: List[RichTextSpan]) -> str:
    return spans_to_markdown(cell).replace("|", "\\|").replace("\n", " ")


def _prefixed(marker: str, text: str) -> str:
    return f"{marker} {text}" if text else marker


class NotionToMarkdown:
    """Render Notion blocks as Markdown.

    Supports:
    - Headings 1-3
    - Paragraphs and quotes (multi-line)
    - Bulleted and numbered lists, nested by indentation
    - Code blocks with fence language tags
    - Dividers
    - Tables with optional header row
    """

    def __init__(self, include_ids: bool = True):
        """Initialize the renderer.

        Args:
            include_ids: Emit block id marker lines for blocks that have an id
        """
        self.include_ids = include_ids

    def convert(self, blocks: List[Block]) -> str:
        """Render root blocks to Markdown.

        Top-level blocks are separated by one blank line. The result has no
        trailing newline.
        """
        chunks = []
        for block, number in self._numbered(blocks):
            lines = self._render_block(block, 0, number)
            if lines:
                chunks.append("\n".join(lines))
        return "\n\n".join(chunks)

    def convert_dicts(self, items: List[Dict[str, Any]]) -> str:
        """Render raw Notion API block records (with nested children)."""
        return self.convert(blocks_from_dicts(items))

    @staticmethod
    def _numbered(blocks: List[Block]):
        """Pair each sibling with its running number inside a numbered list run."""
        counter = 0
        for block in blocks:
            if isinstance(block, NumberedListItemBlock):
                counter += 1
                yield block, counter
            else:
                counter = 0
                yield block, None

    def _render_block(self, block: Block, depth: int, number: Optional[int] = None) -> List[str]:
        indent = " " * (INDENT_WIDTH * depth)
        content = self._render_content(block, number)

        lines: List[str] = []
        if content:
            if self.include_ids and block.block_id:
                lines.append(indent + BLOCK_ID_MARKER.format(block_id=block.block_id))
            lines.extend(indent + line if line else line for line in content)

        if not isinstance(block, TableBlock):
            for child, child_number in self._numbered(block.children):
                lines.extend(self._render_block(child, depth + 1, child_number))
        return lines

    def _render_content(self, block: Block, number: Optional[int]) -> List[str]:
        """Lines for the block itself, unindented. Empty list for unsupported blocks."""
        if isinstance(block, CodeBlock):
            return self._render_code(block)
        if isinstance(block, DividerBlock):
            return ["---"]
        if isinstance(block, TableBlock):
            return self._render_table(block)
        if not isinstance(block, TextBlock):
            return []

        text = spans_to_markdown(block.rich_text)
        lines = text.split("\n")
        # Continuation lines read back as paragraphs
        rest = [escape_paragraph_line(line) for line in lines[1:]]

        if isinstance(block, HeadingBlock):
            return [_prefixed("#" * block.level, " ".join(lines))]
        if isinstance(block, BulletedListItemBlock):
            return [_prefixed("-", lines[0])] + rest
        if isinstance(block, NumberedListItemBlock):
            return [_prefixed(f"{number or 1}.", lines[0])] + rest
        if isinstance(block, QuoteBlock):
            return [_prefixed(">", line) for line in lines]
        if isinstance(block, ParagraphBlock):
            if not text:
                return [EMPTY_PARAGRAPH]
            return [escape_paragraph_line(lines[0])] + rest
        return []

    @staticmethod
    def _render_code(block: CodeBlock) -> List[str]:
        text = block.text
        if text.endswith("\n"):
            text = text[:-1]
        body = text.split("\n") if block.text else []
        return [CODE_FENCE + denormalize_language(block.language)] + body + [CODE_FENCE]

    @staticmethod
    def _render_table(table: TableBlock) -> List[str]:
        rows = table.rows
        if not rows:
            return []

        width = max([table.table_width] + [len(row.cells) for row in rows])
        lines = []
        for index, row in enumerate(rows):
            cells = [_cell_to_markdown(cell) for cell in row.cells]
            cells.extend("" for _ in range(width - len(cells)))
            lines.append("| " + " | ".join(cells) + " |")
            if index == 0 and table.has_column_header:
                lines.append("| " + " | ".join("---" for _ in range(width)) + " |")
        return lines


def blocks_to_markdown(blocks: List[Block], include_ids: bool = True) -> str:
    """Convenience wrapper around NotionToMarkdown.convert."""
    return NotionToMarkdown(include_ids=include_ids).convert(blocks)
