"""
Notion block model.

One class per supported block type. Every class serializes to exactly the
shape the Notion API accepts on create/append, and can be rebuilt from the
shape the API returns on list, so trees move between the converters and the
client without translation.
"""

from typing import Any, Dict, List, Optional, Type

from notion_sync.constants import BlockType, HEADING_TYPES, MAX_HEADING_LEVEL, MAX_RICH_TEXT_LENGTH
from notion_sync.converter.rich_text import RichTextSpan, spans_plain_text


def _spans_from_dicts(items: Optional[List[Dict[str, Any]]]) -> List[RichTextSpan]:
    return [RichTextSpan.from_dict(item) for item in items or []]


def _split_span(span: RichTextSpan) -> List[RichTextSpan]:
    """Cut a span into pieces the API accepts, keeping annotations and link."""
    text = span.content
    if len(text) <= MAX_RICH_TEXT_LENGTH:
        return [span]
    return [
        RichTextSpan(text[i:i + MAX_RICH_TEXT_LENGTH], bold=span.bold, italic=span.italic,
                     strikethrough=span.strikethrough, underline=span.underline,
                     code=span.code, link=span.link)
        for i in range(0, len(text), MAX_RICH_TEXT_LENGTH)
    ]


def _spans_to_dicts(spans: List[RichTextSpan]) -> List[Dict[str, Any]]:
    return [piece.to_dict() for span in spans for piece in _split_span(span)]


class Block:
    """Base class for all blocks.

    Attributes:
        block_id: Opaque id assigned by Notion; None for freshly built blocks
        has_children: Remote flag telling whether children still need fetching
        children: Owned child blocks (always empty on non-container types)
    """

    type: str = ""
    supports_children = False

    def __init__(self, block_id: Optional[str] = None, has_children: bool = False):
        self.block_id = block_id
        self.has_children = has_children
        self.children: List["Block"] = []

    def append_child(self, child: "Block") -> bool:
        """Attach a child if this block type can hold children.

        Returns:
            True if attached, False for block types without children
        """
        if not self.supports_children:
            return False
        self.children.append(child)
        return True

    def content(self) -> Dict[str, Any]:
        """The per-type content object, without children."""
        return {}

    def plain_text(self) -> str:
        return ""

    def to_dict(self, include_id: bool = False) -> Dict[str, Any]:
        body = self.content()
        if self.supports_children and self.children:
            body["children"] = [child.to_dict(include_id) for child in self.children]

        data: Dict[str, Any] = {"object": "block", "type": self.type, self.type: body}
        if include_id and self.block_id:
            data["id"] = self.block_id
            data["has_children"] = bool(self.children) or self.has_children
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Optional["Block"]:
        """Rebuild a block from a Notion API record.

        Nested "children" found inside the content object (as in an exported
        tree) are rebuilt too. Unsupported types return None.
        """
        block_type = data.get("type", "")
        cls = BLOCK_CLASSES.get(block_type)
        if cls is None:
            return None

        body = data.get(block_type) or {}
        block = cls._from_content(block_type, body)
        block.block_id = data.get("id")
        block.has_children = bool(data.get("has_children"))

        for child_data in body.get("children") or data.get("children") or []:
            child = Block.from_dict(child_data)
            if child is not None:
                block.append_child(child)
        return block

    @classmethod
    def _from_content(cls, block_type: str, body: Dict[str, Any]) -> "Block":
        raise NotImplementedError

    def __repr__(self):
        ident = f" id={self.block_id}" if self.block_id else ""
        return f"<{type(self).__name__}{ident} {self.plain_text()[:30]!r} children={len(self.children)}>"


class TextBlock(Block):
    """A block whose content is a single rich_text array."""

    def __init__(self, rich_text: Optional[List[RichTextSpan]] = None, **kwargs):
        super().__init__(**kwargs)
        self.rich_text = list(rich_text or [])

    def content(self) -> Dict[str, Any]:
        return {"rich_text": _spans_to_dicts(self.rich_text), "color": "default"}

    def plain_text(self) -> str:
        return spans_plain_text(self.rich_text)

    @classmethod
    def _from_content(cls, block_type, body):
        return cls(_spans_from_dicts(body.get("rich_text")))


class HeadingBlock(TextBlock):

    def __init__(self, level: int = 1, rich_text: Optional[List[RichTextSpan]] = None, **kwargs):
        super().__init__(rich_text, **kwargs)
        self.level = max(1, min(level, MAX_HEADING_LEVEL))

    @property
    def type(self):
        return HEADING_TYPES[self.level]

    def content(self) -> Dict[str, Any]:
        body = super().content()
        body["is_toggleable"] = False
        return body

    @classmethod
    def _from_content(cls, block_type, body):
        level = int(block_type.rsplit("_", 1)[-1])
        return cls(level, _spans_from_dicts(body.get("rich_text")))


class ParagraphBlock(TextBlock):
    type = BlockType.PARAGRAPH
    supports_children = True


class BulletedListItemBlock(TextBlock):
    type = BlockType.BULLETED_LIST_ITEM
    supports_children = True


class NumberedListItemBlock(TextBlock):
    type = BlockType.NUMBERED_LIST_ITEM
    supports_children = True


class QuoteBlock(TextBlock):
    type = BlockType.QUOTE
    supports_children = True


class CodeInfo:
    """Canonical language plus raw, newline-preserving code text."""

    def __init__(self, language: str, text: str):
        self.language = language
        self.text = text

    def __eq__(self, other):
        if not isinstance(other, CodeInfo):
            return NotImplemented
        return (self.language, self.text) == (other.language, other.text)

    def __repr__(self):
        return f"CodeInfo({self.language!r}, {self.text!r})"


class CodeBlock(Block):
    """Fenced code. The text is kept as one atomic string, never segmented."""

    type = BlockType.CODE

    def __init__(self, code: CodeInfo, **kwargs):
        super().__init__(**kwargs)
        self.code = code

    @property
    def language(self) -> str:
        return self.code.language

    @property
    def text(self) -> str:
        return self.code.text

    def content(self) -> Dict[str, Any]:
        text = self.code.text
        return {
            "rich_text": _spans_to_dicts([RichTextSpan(text)] if text else []),
            "language": self.code.language,
        }

    def plain_text(self) -> str:
        return self.code.text

    @classmethod
    def _from_content(cls, block_type, body):
        text = "".join(span.content for span in _spans_from_dicts(body.get("rich_text")))
        return cls(CodeInfo(body.get("language") or "", text))


class DividerBlock(Block):
    type = BlockType.DIVIDER

    @classmethod
    def _from_content(cls, block_type, body):
        return cls()


class TableRowBlock(Block):
    """One table row; each cell is a rich_text array."""

    type = BlockType.TABLE_ROW

    def __init__(self, cells: Optional[List[List[RichTextSpan]]] = None, **kwargs):
        super().__init__(**kwargs)
        self.cells = [list(cell) for cell in cells or []]

    def content(self) -> Dict[str, Any]:
        return {"cells": [_spans_to_dicts(cell) for cell in self.cells]}

    def plain_text(self) -> str:
        return " | ".join(spans_plain_text(cell) for cell in self.cells)

    @classmethod
    def _from_content(cls, block_type, body):
        return cls([_spans_from_dicts(cell) for cell in body.get("cells") or []])


class TableBlock(Block):
    """A table; its children are TableRowBlock instances."""

    type = BlockType.TABLE
    supports_children = True

    def __init__(self, table_width: int = 0, has_column_header: bool = False,
                 has_row_header: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.table_width = table_width
        self.has_column_header = has_column_header
        self.has_row_header = has_row_header

    @property
    def rows(self) -> List[TableRowBlock]:
        return [child for child in self.children if isinstance(child, TableRowBlock)]

    def content(self) -> Dict[str, Any]:
        return {
            "table_width": self.table_width,
            "has_column_header": self.has_column_header,
            "has_row_header": self.has_row_header,
        }

    def plain_text(self) -> str:
        return "\n".join(row.plain_text() for row in self.rows)

    @classmethod
    def _from_content(cls, block_type, body):
        return cls(
            table_width=body.get("table_width") or 0,
            has_column_header=bool(body.get("has_column_header")),
            has_row_header=bool(body.get("has_row_header")),
        )


BLOCK_CLASSES: Dict[str, Type[Block]] = {
    BlockType.HEADING1: HeadingBlock,
    BlockType.HEADING2: HeadingBlock,
    BlockType.HEADING3: HeadingBlock,
    BlockType.PARAGRAPH: ParagraphBlock,
    BlockType.CODE: CodeBlock,
    BlockType.BULLETED_LIST_ITEM: BulletedListItemBlock,
    BlockType.NUMBERED_LIST_ITEM: NumberedListItemBlock,
    BlockType.QUOTE: QuoteBlock,
    BlockType.DIVIDER: DividerBlock,
    BlockType.TABLE: TableBlock,
    BlockType.TABLE_ROW: TableRowBlock,
}


def blocks_to_dicts(blocks: List[Block], include_id: bool = False) -> List[Dict[str, Any]]:
    return [block.to_dict(include_id) for block in blocks]


def blocks_from_dicts(items: List[Dict[str, Any]]) -> List[Block]:
    """Rebuild a list of blocks, skipping unsupported types."""
    result = []
    for item in items:
        block = Block.from_dict(item)
        if block is not None:
            result.append(block)
    return result
