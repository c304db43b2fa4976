"""
Rich text conversion between one line of inline Markdown and Notion
rich_text spans.

Forward direction scans the line for every inline pattern independently,
then walks the matches left to right. Where two candidate matches overlap,
the one starting first wins; on equal start the longer match wins, and on
equal length the pattern listed first in INLINE_PATTERNS wins. Losing
candidates are dropped, so spans never overlap. The text inside a matched
pair (except code) is segmented again, so nested markers combine.

Underscore emphasis (`_x_`, `__x__`) is read but always written back with
asterisks, so only the asterisk forms survive a round trip unchanged.
"""

import re
from typing import Any, Dict, List, Optional, Pattern, Tuple

from notion_sync.logger import logger


ANNOTATION_NAMES = ("bold", "italic", "strikethrough", "underline", "code")


class RichTextSpan:
    """A run of text sharing one set of annotations and an optional link."""

    def __init__(self, content: str, bold: bool = False, italic: bool = False,
                 strikethrough: bool = False, underline: bool = False,
                 code: bool = False, link: Optional[str] = None):
        self.content = content
        self.bold = bold
        self.italic = italic
        self.strikethrough = strikethrough
        self.underline = underline
        self.code = code
        self.link = link

    @property
    def is_plain(self) -> bool:
        return not any(getattr(self, name) for name in ANNOTATION_NAMES) and not self.link

    def annotations(self) -> Dict[str, Any]:
        result = {name: getattr(self, name) for name in ANNOTATION_NAMES}
        result["color"] = "default"
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a Notion rich_text item."""
        return {
            "type": "text",
            "text": {
                "content": self.content,
                "link": {"url": self.link} if self.link else None,
            },
            "annotations": self.annotations(),
            "plain_text": self.content,
            "href": self.link,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RichTextSpan":
        """Build a span from a Notion rich_text item.

        Mentions and equations carry no "text" object; their plain_text is used.
        """
        text = data.get("text") or {}
        content = text.get("content")
        if content is None:
            content = data.get("plain_text", "") or ""

        link = None
        if text.get("link"):
            link = text["link"].get("url")
        if not link:
            link = data.get("href")

        annotations = data.get("annotations") or {}
        return cls(
            content,
            bold=bool(annotations.get("bold")),
            italic=bool(annotations.get("italic")),
            strikethrough=bool(annotations.get("strikethrough")),
            underline=bool(annotations.get("underline")),
            code=bool(annotations.get("code")),
            link=link,
        )

    def __eq__(self, other):
        if not isinstance(other, RichTextSpan):
            return NotImplemented
        return (self.content, self.link, self.annotations()) == \
            (other.content, other.link, other.annotations())

    def __repr__(self):
        flags = [name for name in ANNOTATION_NAMES if getattr(self, name)]
        if self.link:
            flags.append(f"link={self.link}")
        return f"RichTextSpan({self.content!r}{', ' if flags else ''}{', '.join(flags)})"


# (pattern, annotations) in tie-break order. Group "text" holds the inner
# text; group "url" is only present for links.
INLINE_PATTERNS: List[Tuple[Pattern[str], Dict[str, bool]]] = [
    # *italic* / _italic_
    (re.compile(r"(?<![*\\])\*(?![*\s])(?P<text>.+?)(?<![*\s\\])\*(?!\*)"), {"italic": True}),
    (re.compile(r"(?<![_\w\\])_(?![_\s])(?P<text>.+?)(?<![_\s\\])_(?![_\w])"), {"italic": True}),
    # **bold** / __bold__
    (re.compile(r"(?<![*\\])\*\*(?![*\s])(?P<text>.+?)(?<![*\s\\])\*\*(?!\*)"), {"bold": True}),
    (re.compile(r"(?<![_\w\\])__(?![_\s])(?P<text>.+?)(?<![_\s\\])__(?![_\w])"), {"bold": True}),
    # ***bold+italic*** / ___bold+italic___
    (re.compile(r"(?<![*\\])\*\*\*(?![*\s])(?P<text>.+?)(?<![*\s\\])\*\*\*(?!\*)"), {"bold": True, "italic": True}),
    (re.compile(r"(?<![_\w\\])___(?![_\s])(?P<text>.+?)(?<![_\s\\])___(?![_\w])"), {"bold": True, "italic": True}),
    # ~~strikethrough~~
    (re.compile(r"(?<![~\\])~~(?!~)(?P<text>.+?)(?<!~)~~(?!~)"), {"strikethrough": True}),
    # `code`
    (re.compile(r"(?<![`\\])`(?!`)(?P<text>.+?)(?<!`)`(?!`)"), {"code": True}),
    # [text](url)
    (re.compile(r"(?<![!\\])\[(?P<text>[^\]]+)\]\((?P<url>[^)\s]+)\)"), {}),
]


def _find_candidates(line: str) -> List[Tuple[int, int, int, re.Match, Dict[str, bool]]]:
    candidates = []
    for order, (pattern, annotations) in enumerate(INLINE_PATTERNS):
        for match in pattern.finditer(line):
            candidates.append((match.start(), match.end(), order, match, annotations))
    # earliest start, then longest, then pattern order
    candidates.sort(key=lambda c: (c[0], -(c[1] - c[0]), c[2]))
    return candidates


def _styled(match: re.Match, annotations: Dict[str, bool]) -> List[RichTextSpan]:
    """Spans for one matched marker pair.

    Code content is literal. Any other inner text is segmented again and the
    outer annotations and link are laid over each inner span, which reads back
    nested forms such as `[**x**](url)` or `` **`x`** ``.
    """
    inner = match.group("text")
    link = match.groupdict().get("url")
    if annotations.get("code"):
        return [RichTextSpan(inner, **annotations)]

    spans = markdown_to_spans(inner)
    for span in spans:
        for name, value in annotations.items():
            if value:
                setattr(span, name, True)
        if link:
            span.link = link
    return spans


def markdown_to_spans(line: str) -> List[RichTextSpan]:
    """Split one line of inline Markdown into ordered, non-overlapping spans."""
    spans: List[RichTextSpan] = []
    if not line:
        return spans

    last_end = 0
    for start, end, _, match, annotations in _find_candidates(line):
        if start < last_end:
            logger.debug(f"Dropping overlapping inline marker at {start}: {match.group(0)!r}")
            continue

        if start > last_end:
            spans.append(RichTextSpan(line[last_end:start]))

        spans.extend(_styled(match, annotations))
        last_end = end

    if last_end < len(line):
        spans.append(RichTextSpan(line[last_end:]))

    return spans


def span_to_markdown(span: RichTextSpan) -> str:
    """Render one span back to inline Markdown."""
    text = span.content
    if not text:
        return ""

    if span.code:
        text = f"`{text}`"
    if span.bold and span.italic:
        text = f"***{text}***"
    elif span.bold:
        text = f"**{text}**"
    elif span.italic:
        text = f"*{text}*"
    if span.strikethrough:
        text = f"~~{text}~~"
    if span.link:
        text = f"[{text}]({span.link})"
    return text


def spans_to_markdown(spans: List[RichTextSpan]) -> str:
    """Inverse of markdown_to_spans."""
    return "".join(span_to_markdown(span) for span in spans)


def spans_plain_text(spans: List[RichTextSpan]) -> str:
    return "".join(span.content for span in spans)
