"""
Constants Module

Defines constants used across the notion-sync project.
"""

# =============================================================================
# Notion Block Types
# =============================================================================

class BlockType:
    """Notion block type discriminators."""
    HEADING1 = "heading_1"
    HEADING2 = "heading_2"
    HEADING3 = "heading_3"
    PARAGRAPH = "paragraph"
    CODE = "code"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    QUOTE = "quote"
    DIVIDER = "divider"
    TABLE = "table"
    TABLE_ROW = "table_row"
    CHILD_PAGE = "child_page"


HEADING_TYPES = {
    1: BlockType.HEADING1,
    2: BlockType.HEADING2,
    3: BlockType.HEADING3,
}

# Headings deeper than this collapse onto the last level
MAX_HEADING_LEVEL = 3


# =============================================================================
# Markdown Markers
# =============================================================================

# Hidden comment carrying a block id, e.g. "[//]: # (BlockId: 1234)"
BLOCK_ID_MARKER = "[//]: # (BlockId: {block_id})"

CODE_FENCE = "```"

INDENT_WIDTH = 2

# Stand-in line for a paragraph with no text (blank lines carry no block)
EMPTY_PARAGRAPH = "&nbsp;"

# Prefix that keeps a paragraph line from reading as block syntax
LINE_ESCAPE = "\\"


# =============================================================================
# API Constants
# =============================================================================

NOTION_API_BASE_URL = "https://api.notion.com/v1"
NOTION_API_VERSION = "2022-06-28"

# Maximum characters in one rich_text item
MAX_RICH_TEXT_LENGTH = 2000

# Maximum blocks in one append-children request
MAX_APPEND_BLOCKS = 100

# Maximum page size for list endpoints
MAX_PAGE_SIZE = 100

# Status codes that are retried with exponential backoff
RETRYABLE_STATUS_CODES = (409, 429, 503)

# Status codes that count as failures for the circuit breaker
BREAKER_STATUS_CODES = (500, 502, 504)
