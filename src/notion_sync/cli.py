import argparse
import json
import sys
from typing import List, Optional

from notion_sync import config
from notion_sync.commands import NotionCommands
from notion_sync.config import ConfigError
from notion_sync.converter import MarkdownToNotion, NotionToMarkdown, blocks_to_dicts
from notion_sync.logger import LogLevel, logger
from notion_sync.notion import NotionClient


def read_input(path: str) -> str:
    """Read a UTF-8 text file, or stdin when path is '-'."""
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _ensure_commands() -> NotionCommands:
    """Create the command surface around an authenticated client.

    Raises:
        ConfigError: If no API key is configured
    """
    api_key = config.require_api_key()
    return NotionCommands(NotionClient(api_key=api_key))


def run_md2notion(path: str, keep_ids: bool = False) -> str:
    blocks = MarkdownToNotion().parse(read_input(path), keep_ids=keep_ids)
    return json.dumps(blocks_to_dicts(blocks, include_id=keep_ids), indent=2, ensure_ascii=False)


def run_notion2md(path: str, include_ids: bool = True) -> str:
    data = json.loads(read_input(path))
    # Accept a bare list or a raw list-children response
    if isinstance(data, dict):
        data = data.get("results", [])
    return NotionToMarkdown(include_ids=include_ids).convert_dicts(data)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notionsync",
        description="NotionSync: convert Markdown to Notion blocks and back, and edit Notion pages",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
Examples:
  1. Offline conversion:
     notionsync md2notion note.md > blocks.json
     notionsync notion2md blocks.json

  2. Read and rewrite a page:
     notionsync get-page <page_id> > page.md
     notionsync update-page <page_id> page.md
     notionsync update-page-title <page_id> "New title"

  3. Store the integration token in the OS keyring:
     notionsync set-key secret_xxx
"""
    )
    parser.add_argument("--config", help=f"Path to the JSON config file (default: {config.CONFIG_FILE})")
    parser.add_argument("--debug", action="store_true", help="Show debug logs")

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p = sub.add_parser("search", help="Search pages by title")
    p.add_argument("query")

    p = sub.add_parser("create-page", help="Create a page from a Markdown file")
    p.add_argument("parent_id")
    p.add_argument("title")
    p.add_argument("file", help="Markdown file, '-' for stdin")

    p = sub.add_parser("update-page-title", help="Rename a page")
    p.add_argument("page_id")
    p.add_argument("title")

    p = sub.add_parser("get-page", help="Print a page as Markdown with block ids")
    p.add_argument("page_id")

    p = sub.add_parser("update-page", help="Replace a page's content with a Markdown file")
    p.add_argument("page_id")
    p.add_argument("file", help="Markdown file, '-' for stdin")

    p = sub.add_parser("append", help="Append a Markdown file under a page or block")
    p.add_argument("block_id")
    p.add_argument("file", help="Markdown file, '-' for stdin")
    p.add_argument("--after", help="Insert after this sibling block")

    p = sub.add_parser("delete", help="Delete blocks")
    p.add_argument("block_ids", nargs="+")

    p = sub.add_parser("update-block", help="Replace one block with a line of Markdown")
    p.add_argument("block_id")
    p.add_argument("text")

    p = sub.add_parser("md2notion", help="Print the Notion block JSON for a Markdown file (offline)")
    p.add_argument("file", help="Markdown file, '-' for stdin")
    p.add_argument("--keep-ids", action="store_true", help="Keep ids from BlockId marker lines")

    p = sub.add_parser("notion2md", help="Print Markdown for a JSON list of Notion blocks (offline)")
    p.add_argument("file", help="JSON file, '-' for stdin")
    p.add_argument("--no-ids", action="store_true", help="Omit BlockId marker lines")

    p = sub.add_parser("set-key", help="Save the Notion integration token")
    p.add_argument("api_key")

    return parser


def run_command(args: argparse.Namespace) -> str:
    """Dispatch a parsed command and return its output text."""
    if args.command == "md2notion":
        return run_md2notion(args.file, keep_ids=args.keep_ids)
    if args.command == "notion2md":
        return run_notion2md(args.file, include_ids=not args.no_ids)
    if args.command == "set-key":
        config.save_api_key(args.api_key, args.config)
        return "API key saved"

    commands = _ensure_commands()
    logger.header(f"notionsync {args.command}", icon="📌")
    if args.command == "search":
        return commands.search(args.query)
    if args.command == "create-page":
        return commands.create_page(args.parent_id, args.title, read_input(args.file))
    if args.command == "update-page-title":
        return commands.update_page(args.page_id, args.title)
    if args.command == "get-page":
        return commands.get_page_content(args.page_id)
    if args.command == "update-page":
        return commands.update_page_content(args.page_id, read_input(args.file))
    if args.command == "append":
        return commands.append_block_content(args.block_id, read_input(args.file), after=args.after)
    if args.command == "delete":
        return commands.delete_blocks(args.block_ids)
    if args.command == "update-block":
        return commands.update_block(args.block_id, args.text)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.debug:
        logger.set_level(LogLevel.DEBUG)
    if args.config:
        config.load_config(args.config)

    try:
        output = run_command(args)
    except ConfigError as e:
        logger.error(str(e))
        return 1
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read input: {e}")
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
