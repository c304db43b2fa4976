"""Tests for the Notion block model."""

from notion_sync.converter.blocks import (
    Block,
    BulletedListItemBlock,
    CodeBlock,
    CodeInfo,
    DividerBlock,
    HeadingBlock,
    ParagraphBlock,
    TableBlock,
    TableRowBlock,
    blocks_from_dicts,
)
from notion_sync.converter.rich_text import RichTextSpan


class TestBlockSerialization:
    """to_dict produces the Notion create/append shape."""

    def test_paragraph(self):
        data = ParagraphBlock([RichTextSpan("hi")]).to_dict()
        assert data["object"] == "block"
        assert data["type"] == "paragraph"
        assert data["paragraph"]["rich_text"][0]["text"]["content"] == "hi"
        assert "children" not in data["paragraph"]
        assert "id" not in data

    def test_children_nested_in_content(self):
        parent = BulletedListItemBlock([RichTextSpan("a")])
        assert parent.append_child(BulletedListItemBlock([RichTextSpan("b")])) is True

        data = parent.to_dict()
        children = data["bulleted_list_item"]["children"]
        assert len(children) == 1
        assert children[0]["type"] == "bulleted_list_item"

    def test_non_container_ignores_children(self):
        divider = DividerBlock()
        assert divider.append_child(ParagraphBlock()) is False
        assert divider.children == []
        assert divider.to_dict() == {"object": "block", "type": "divider", "divider": {}}

    def test_heading_level_is_clamped(self):
        assert HeadingBlock(5).type == "heading_3"
        assert HeadingBlock(1).type == "heading_1"

    def test_include_id(self):
        block = ParagraphBlock([RichTextSpan("x")], block_id="abc", has_children=True)
        data = block.to_dict(include_id=True)
        assert data["id"] == "abc"
        assert data["has_children"] is True
        assert "id" not in block.to_dict()

    def test_long_code_is_chunked(self):
        text = "x" * 4500
        data = CodeBlock(CodeInfo("python", text)).to_dict()
        items = data["code"]["rich_text"]
        assert [len(item["text"]["content"]) for item in items] == [2000, 2000, 500]
        assert data["code"]["language"] == "python"

        rebuilt = Block.from_dict(data)
        assert rebuilt.text == text

    def test_long_paragraph_is_chunked(self):
        block = ParagraphBlock([RichTextSpan("a"), RichTextSpan("x" * 2500, bold=True, link="https://a.b")])
        items = block.to_dict()["paragraph"]["rich_text"]

        assert [len(item["text"]["content"]) for item in items] == [1, 2000, 500]
        assert all(item["annotations"]["bold"] for item in items[1:])
        assert all(item["text"]["link"] == {"url": "https://a.b"} for item in items[1:])
        assert Block.from_dict(block.to_dict()).plain_text() == "a" + "x" * 2500

    def test_long_heading_and_cell_are_chunked(self):
        heading = HeadingBlock(2, [RichTextSpan("h" * 2001)]).to_dict()
        row = TableRowBlock([[RichTextSpan("c" * 4000)]]).to_dict()

        assert [len(i["text"]["content"]) for i in heading["heading_2"]["rich_text"]] == [2000, 1]
        assert [len(i["text"]["content"]) for i in row["table_row"]["cells"][0]] == [2000, 2000]

    def test_empty_code_has_no_items(self):
        assert CodeBlock(CodeInfo("python", "")).to_dict()["code"]["rich_text"] == []

    def test_table(self):
        table = TableBlock(table_width=2, has_column_header=True)
        table.append_child(TableRowBlock([[RichTextSpan("A")], [RichTextSpan("B")]]))
        data = table.to_dict()

        assert data["table"]["table_width"] == 2
        assert data["table"]["has_column_header"] is True
        row = data["table"]["children"][0]
        assert row["type"] == "table_row"
        assert row["table_row"]["cells"][1][0]["plain_text"] == "B"


class TestBlockFromDict:
    """from_dict rebuilds blocks from API records."""

    def test_heading(self, remote_block):
        block = Block.from_dict(remote_block("heading_2", "Title", block_id="h"))
        assert isinstance(block, HeadingBlock)
        assert block.level == 2
        assert block.block_id == "h"
        assert block.plain_text() == "Title"

    def test_unsupported_type(self, remote_block):
        assert Block.from_dict(remote_block("image", block_id="img")) is None
        assert Block.from_dict(remote_block("child_page", block_id="cp")) is None

    def test_has_children_flag(self, remote_block):
        block = Block.from_dict(remote_block("bulleted_list_item", "a", has_children=True))
        assert block.has_children is True
        assert block.children == []

    def test_nested_children(self, remote_block):
        parent = remote_block("bulleted_list_item", "a")
        parent["bulleted_list_item"]["children"] = [remote_block("paragraph", "b")]

        block = Block.from_dict(parent)
        assert [child.plain_text() for child in block.children] == ["b"]

    def test_blocks_from_dicts_skips_unsupported(self, remote_block):
        blocks = blocks_from_dicts([
            remote_block("paragraph", "a"),
            remote_block("image"),
            remote_block("divider"),
        ])
        assert [type(b) for b in blocks] == [ParagraphBlock, DividerBlock]

    def test_round_trip(self):
        original = BulletedListItemBlock([RichTextSpan("a", bold=True)])
        original.append_child(CodeBlock(CodeInfo("rust", "fn main() {}\n")))

        rebuilt = Block.from_dict(original.to_dict())
        assert rebuilt.rich_text == original.rich_text
        assert rebuilt.children[0].code == CodeInfo("rust", "fn main() {}\n")
