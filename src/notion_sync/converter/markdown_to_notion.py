"""
Markdown -> Notion block tree.

The document is consumed one physical line at a time. Nesting is tracked with
an explicit stack of IndentFrame objects: each frame maps an indentation level
to the block list currently receiving children. Only list items open new
frames, and only when the very next physical line is indented deeper.

Two line forms exist so that rendered pages read back unchanged. A paragraph
line that would otherwise read as block syntax carries a leading backslash
(`\\# not a heading`), and `&nbsp;` alone stands for an empty paragraph.
"""

import re
from typing import List, Optional, Tuple

from markdown_it import MarkdownIt

from notion_sync.constants import CODE_FENCE, EMPTY_PARAGRAPH, INDENT_WIDTH, LINE_ESCAPE, MAX_HEADING_LEVEL
from notion_sync.converter.blocks import (
    Block,
    BulletedListItemBlock,
    CodeBlock,
    CodeInfo,
    DividerBlock,
    HeadingBlock,
    NumberedListItemBlock,
    ParagraphBlock,
    QuoteBlock,
    TableBlock,
    TableRowBlock,
)
from notion_sync.converter.languages import normalize_language
from notion_sync.converter.rich_text import RichTextSpan, markdown_to_spans
from notion_sync.logger import logger


LINE_SPLIT = re.compile(r"\r\n|\r|\n")
# Marker-only lines ("#", "-", "1.") are empty blocks
HEADING_PATTERN = re.compile(r"^(#+)(?:\s+(.*))?$")
BULLET_PATTERN = re.compile(r"^[-*](?:\s(.*))?$")
ORDERED_PATTERN = re.compile(r"^\d+\.(?:\s(.*))?$")
QUOTE_PATTERN = re.compile(r"^>\s?(.*)$")
DIVIDER_PATTERN = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})$")
CELL_SPLIT = re.compile(r"(?<!\\)\|")
# Must stay in sync with BLOCK_ID_MARKER
MARKER_PATTERN = re.compile(r"^\[//\]: # \(BlockId: (?P<block_id>[^)]+)\)$")
FRONT_MATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(?:[A-Za-z][\w-]*:.*\r?\n)+---[ \t]*(?:\r?\n|\Z)")

BLOCK_PATTERNS = (HEADING_PATTERN, BULLET_PATTERN, ORDERED_PATTERN, QUOTE_PATTERN,
                  DIVIDER_PATTERN, MARKER_PATTERN)


def indent_level(line: str) -> int:
    """Indentation level of a line: leading spaces // INDENT_WIDTH (a tab counts as one level)."""
    spaces = 0
    for char in line:
        if char == " ":
            spaces += 1
        elif char == "\t":
            spaces += INDENT_WIDTH
        else:
            break
    return spaces // INDENT_WIDTH


def _leading_spaces(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def parse_block_id_marker(line: str) -> Optional[str]:
    """Return the block id carried by a marker line, or None if it is not one."""
    match = MARKER_PATTERN.match(line.strip())
    return match.group("block_id").strip() if match else None


def strip_front_matter(markdown: str) -> str:
    """Drop a leading `---` / `key: value` / `---` header, if present."""
    match = FRONT_MATTER_PATTERN.match(markdown or "")
    return markdown[match.end():] if match else markdown


def is_block_syntax(text: str) -> bool:
    """Whether a trimmed line would build something other than a plain paragraph.

    Escaped lines count when what follows the escape would, so a paragraph
    that literally starts with a backslash gets escaped once more.
    """
    if text.startswith(LINE_ESCAPE):
        return is_block_syntax(text[len(LINE_ESCAPE):])
    if text == EMPTY_PARAGRAPH or text.startswith(CODE_FENCE) or text.startswith("|"):
        return True
    return any(pattern.match(text) for pattern in BLOCK_PATTERNS)


class IndentFrame:
    """Parse-time mapping from an indentation level to the list receiving blocks."""

    def __init__(self, level: int, children: List[Block]):
        self.level = level
        self.children = children

    def __repr__(self):
        return f"IndentFrame(level={self.level}, children={len(self.children)})"


class MarkdownToNotion:
    """Build Notion block trees from Markdown text.

    Usage:
        blocks = MarkdownToNotion().parse(markdown)
        payload = [block.to_dict() for block in blocks]
    """

    def __init__(self):
        # Tables are delegated to markdown-it so alignment rows and escaped
        # pipes follow GFM
        self.md = MarkdownIt("commonmark").enable("table")

    def parse(self, markdown: str, keep_ids: bool = False) -> List[Block]:
        """Parse a Markdown document into root blocks.

        Args:
            markdown: Markdown source
            keep_ids: Attach ids from `[//]: # (BlockId: ...)` marker lines to
                the block that follows them. Markers are never emitted as
                content either way.

        Returns:
            Ordered list of root blocks
        """
        roots: List[Block] = []
        stack: List[IndentFrame] = [IndentFrame(0, roots)]
        lines = LINE_SPLIT.split(markdown or "")
        pending_id: Optional[str] = None

        i = 0
        while i < len(lines):
            line = lines[i]
            if not line.strip():
                i += 1
                continue

            block_id = parse_block_id_marker(line)
            if block_id is not None:
                if keep_ids:
                    pending_id = block_id
                i += 1
                continue

            level = indent_level(line)
            # Root frame is never popped
            while len(stack) > 1 and stack[-1].level > level:
                stack.pop()

            block, i = self._build_block(lines, i)
            if keep_ids and pending_id:
                block.block_id = pending_id
                pending_id = None
            stack[-1].children.append(block)

            # A list item owns the next line only if that line is deeper
            if isinstance(block, (BulletedListItemBlock, NumberedListItemBlock)):
                if i < len(lines) and indent_level(lines[i]) > level:
                    stack.append(IndentFrame(level + 1, block.children))

        return roots

    def _build_block(self, lines: List[str], i: int) -> Tuple[Block, int]:
        """Classify lines[i] and build one block.

        Returns:
            (block, index of the first line not consumed)
        """
        line = lines[i]
        trimmed = line.strip()

        if trimmed.startswith(LINE_ESCAPE) and is_block_syntax(trimmed):
            return ParagraphBlock(markdown_to_spans(trimmed[len(LINE_ESCAPE):])), i + 1

        if trimmed.startswith(CODE_FENCE):
            return self._build_code(lines, i)

        match = HEADING_PATTERN.match(trimmed)
        if match:
            level = min(len(match.group(1)), MAX_HEADING_LEVEL)
            return HeadingBlock(level, markdown_to_spans((match.group(2) or "").strip())), i + 1

        match = BULLET_PATTERN.match(trimmed)
        if match:
            return BulletedListItemBlock(markdown_to_spans(match.group(1) or "")), i + 1

        match = ORDERED_PATTERN.match(trimmed)
        if match:
            return NumberedListItemBlock(markdown_to_spans(match.group(1) or "")), i + 1

        if QUOTE_PATTERN.match(trimmed):
            return self._build_quote(lines, i)

        if DIVIDER_PATTERN.match(trimmed):
            return DividerBlock(), i + 1

        if trimmed.startswith("|"):
            return self._build_table(lines, i)

        if trimmed == EMPTY_PARAGRAPH:
            return ParagraphBlock(), i + 1

        return ParagraphBlock(markdown_to_spans(trimmed)), i + 1

    def _build_code(self, lines: List[str], i: int) -> Tuple[CodeBlock, int]:
        opening = lines[i]
        fence_indent = _leading_spaces(opening)
        language = normalize_language(opening.strip()[len(CODE_FENCE):])

        body = []
        i += 1
        while i < len(lines) and not lines[i].strip().startswith(CODE_FENCE):
            text = lines[i]
            # Strip at most the fence's own indentation
            strip = min(fence_indent, _leading_spaces(text))
            body.append(text[strip:] + "\n")
            i += 1

        if i < len(lines):
            i += 1  # closing fence
        else:
            logger.debug("Unterminated code fence, consuming to end of document")

        return CodeBlock(CodeInfo(language, "".join(body))), i

    def _build_quote(self, lines: List[str], i: int) -> Tuple[QuoteBlock, int]:
        spans: List[RichTextSpan] = []
        level = indent_level(lines[i])
        while i < len(lines):
            match = QUOTE_PATTERN.match(lines[i].strip())
            if not match or indent_level(lines[i]) != level:
                break
            if spans:
                spans.append(RichTextSpan("\n"))
            spans.extend(markdown_to_spans(match.group(1)))
            i += 1
        return QuoteBlock(spans), i

    def _build_table(self, lines: List[str], i: int) -> Tuple[TableBlock, int]:
        table_lines = []
        while i < len(lines) and lines[i].strip().startswith("|"):
            table_lines.append(lines[i].strip())
            i += 1

        rows, has_header = self._tokenize_table("\n".join(table_lines))
        if rows is None:
            rows = [self._split_row(row) for row in table_lines]
            has_header = False

        width = max(len(row) for row in rows) if rows else 0
        table = TableBlock(table_width=width, has_column_header=has_header)
        for row in rows:
            cells = [markdown_to_spans(cell) for cell in row]
            cells.extend([] for _ in range(width - len(cells)))
            table.append_child(TableRowBlock(cells))
        return table, i

    def _tokenize_table(self, source: str) -> Tuple[Optional[List[List[str]]], bool]:
        """Read a pipe table with markdown-it.

        Returns:
            (rows of raw cell text, has header). Rows is None when markdown-it
            does not see a table (e.g. no separator row).
        """
        tokens = self.md.parse(source)
        if not any(token.type == "table_open" for token in tokens):
            return None, False

        rows: List[List[str]] = []
        has_header = False
        current: Optional[List[str]] = None
        in_cell = False
        for token in tokens:
            if token.type == "table_close":
                break
            if token.type == "thead_open":
                has_header = True
            elif token.type == "tr_open":
                current = []
            elif token.type == "tr_close" and current is not None:
                rows.append(current)
                current = None
            elif token.type in ("th_open", "td_open"):
                in_cell = True
                if current is not None:
                    current.append("")
            elif token.type in ("th_close", "td_close"):
                in_cell = False
            elif token.type == "inline" and in_cell and current is not None:
                current[-1] = token.content.strip().replace("\\|", "|")
        return rows, has_header

    @staticmethod
    def _split_row(line: str) -> List[str]:
        inner = line.strip()
        if inner.startswith("|"):
            inner = inner[1:]
        if inner.endswith("|"):
            inner = inner[:-1]
        return [cell.strip().replace("\\|", "|") for cell in CELL_SPLIT.split(inner)]


def escape_paragraph_line(line: str) -> str:
    """Inverse of the escape check in MarkdownToNotion._build_block."""
    trimmed = line.strip()
    if trimmed and is_block_syntax(trimmed):
        return LINE_ESCAPE + trimmed
    return line


def markdown_to_blocks(markdown: str, keep_ids: bool = False) -> List[Block]:
    """Convenience wrapper around MarkdownToNotion.parse."""
    return MarkdownToNotion().parse(markdown, keep_ids=keep_ids)
