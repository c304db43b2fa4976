"""Tests for the notionsync command line."""

import io
import json
from unittest.mock import patch

import pytest

from notion_sync import cli, config


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.setattr(config, "NOTION_API_KEY", "")


class TestOfflineCommands:
    """md2notion / notion2md need no credential."""

    def test_md2notion(self, tmp_path, capsys, no_api_key):
        path = tmp_path / "note.md"
        path.write_text("# Title\n\n- item\n  - nested", encoding="utf-8")

        assert cli.main(["md2notion", str(path)]) == 0

        blocks = json.loads(capsys.readouterr().out)
        assert [b["type"] for b in blocks] == ["heading_1", "bulleted_list_item"]
        assert blocks[1]["bulleted_list_item"]["children"][0]["type"] == "bulleted_list_item"

    def test_md2notion_keep_ids(self, tmp_path, capsys):
        path = tmp_path / "note.md"
        path.write_text("[//]: # (BlockId: abc)\ntext", encoding="utf-8")

        cli.main(["md2notion", "--keep-ids", str(path)])

        assert json.loads(capsys.readouterr().out)[0]["id"] == "abc"

    def test_md2notion_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("```py\nx = 1\n```"))

        assert cli.main(["md2notion", "-"]) == 0

        block = json.loads(capsys.readouterr().out)[0]
        assert block["code"]["language"] == "python"

    def test_notion2md(self, tmp_path, capsys, remote_block, no_api_key):
        path = tmp_path / "blocks.json"
        path.write_text(json.dumps({"results": [remote_block("heading_2", "Hi", block_id="h")]}))

        assert cli.main(["notion2md", str(path)]) == 0
        assert capsys.readouterr().out == "[//]: # (BlockId: h)\n## Hi\n"

    def test_notion2md_without_ids(self, tmp_path, capsys, remote_block):
        path = tmp_path / "blocks.json"
        path.write_text(json.dumps([remote_block("paragraph", "body", block_id="p")]))

        cli.main(["notion2md", "--no-ids", str(path)])
        assert capsys.readouterr().out == "body\n"

    def test_missing_file(self, tmp_path):
        assert cli.main(["md2notion", str(tmp_path / "nope.md")]) == 1


class TestRemoteCommands:
    """Commands that talk to Notion."""

    def test_missing_api_key_exits_1(self, no_api_key):
        assert cli.main(["search", "x"]) == 1

    @patch("notion_sync.cli.NotionClient")
    def test_search(self, mock_client_cls, capsys, monkeypatch):
        monkeypatch.setattr(config, "NOTION_API_KEY", "secret")
        mock_client_cls.return_value.search.return_value = []

        assert cli.main(["search", "anything"]) == 0

        mock_client_cls.assert_called_once_with(api_key="secret")
        assert capsys.readouterr().out == "No results found\n"

    @patch("notion_sync.cli.NotionClient")
    def test_delete(self, mock_client_cls, capsys, monkeypatch):
        monkeypatch.setattr(config, "NOTION_API_KEY", "secret")
        mock_client_cls.return_value.delete_blocks.return_value = 2

        cli.main(["delete", "a", "b"])

        mock_client_cls.return_value.delete_blocks.assert_called_once_with(["a", "b"])
        assert "Blocks deleted successfully!" in capsys.readouterr().out

    @patch("notion_sync.cli.NotionClient")
    def test_append_with_after(self, mock_client_cls, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "NOTION_API_KEY", "secret")
        client = mock_client_cls.return_value
        client.append_block_children.return_value = []
        path = tmp_path / "more.md"
        path.write_text("more text", encoding="utf-8")

        cli.main(["append", "page", str(path), "--after", "b7"])

        assert client.append_block_children.call_args.kwargs["after"] == "b7"

    @patch("notion_sync.cli.NotionClient")
    def test_update_page_title(self, mock_client_cls, capsys, monkeypatch):
        monkeypatch.setattr(config, "NOTION_API_KEY", "secret")
        mock_client_cls.return_value.update_page.return_value = {"id": "p1"}

        assert cli.main(["update-page-title", "p1", "New"]) == 0

        mock_client_cls.return_value.update_page.assert_called_once_with("p1", "New")
        assert capsys.readouterr().out == "Page updated successfully!\nID: p1\n"

    @patch("notion_sync.cli.logger")
    @patch("notion_sync.cli.NotionClient")
    def test_remote_command_prints_header(self, mock_client_cls, mock_logger, monkeypatch):
        monkeypatch.setattr(config, "NOTION_API_KEY", "secret")
        mock_client_cls.return_value.search.return_value = []

        cli.main(["search", "x"])

        mock_logger.header.assert_called_once_with("notionsync search", icon="📌")


class TestParser:
    """Argument parsing."""

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 0
        assert "notionsync" in capsys.readouterr().out

    def test_set_key(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(config, "USE_KEYRING", False)
        monkeypatch.setattr(config, "NOTION_API_KEY", "")
        path = tmp_path / "cfg.json"

        assert cli.main(["--config", str(path), "set-key", "tok"]) == 0

        assert json.loads(path.read_text())["notion_api_key"] == "tok"
        assert "API key saved" in capsys.readouterr().out
