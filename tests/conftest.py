"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from typing import Any, Callable, Dict, List, Optional

import pytest

# Keep tests away from the developer's OS keyring; must be set before notion_sync.config is imported
os.environ["NOTION_SYNC_USE_KEYRING"] = "0"

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))


def rich_text(content: str, **annotations) -> Dict[str, Any]:
    """A rich_text item as returned by the Notion API."""
    base = {"bold": False, "italic": False, "strikethrough": False,
            "underline": False, "code": False, "color": "default"}
    base.update(annotations)
    return {
        "type": "text",
        "text": {"content": content, "link": None},
        "annotations": base,
        "plain_text": content,
        "href": None,
    }


@pytest.fixture
def remote_block() -> Callable[..., Dict[str, Any]]:
    """Factory for block records shaped like the list-children response."""
    def make(block_type: str, text: str = "", block_id: Optional[str] = None,
             has_children: bool = False, **content) -> Dict[str, Any]:
        body: Dict[str, Any] = dict(content)
        if block_type not in ("divider", "table", "table_row", "child_page") and "rich_text" not in body:
            body["rich_text"] = [rich_text(text)] if text else []
        return {
            "object": "block",
            "id": block_id or f"{block_type}-{text or 'x'}",
            "type": block_type,
            "has_children": has_children,
            block_type: body,
        }
    return make


@pytest.fixture
def paged_fetcher() -> Callable[[Dict[Any, Dict[str, Any]]], Any]:
    """Build a fetch_page callback from {(block_id, cursor): page} and record calls."""
    def build(pages: Dict[Any, Dict[str, Any]]):
        calls: List[Any] = []

        def fetch(block_id: str, cursor: Optional[str] = None) -> Dict[str, Any]:
            calls.append((block_id, cursor))
            return pages.get((block_id, cursor), {"results": [], "has_more": False, "next_cursor": None})

        fetch.calls = calls
        return fetch
    return build


@pytest.fixture
def sample_markdown() -> str:
    """Provide sample markdown content for testing."""
    return """# Test Document

## Introduction

This is a **bold** and *italic* text with `inline code`.

### Features

- Item 1
- Item 2
  - Nested item
- Item 3

1. First
2. Second
3. Third

```python
def hello():
    print("Hello, World!")
```

> Quoted line

---

| Name | Age |
|------|-----|
| John | 30  |
"""
