"""A flat stream of Markdown events with source offsets."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from functools import lru_cache

from markdown_it import MarkdownIt
from markdown_it.token import Token


class EventKind(enum.Enum):
    """The kind of a Markdown event."""

    START = "start"
    END = "end"
    TEXT = "text"
    CODE = "code"
    HTML = "html"
    SOFT_BREAK = "soft_break"
    HARD_BREAK = "hard_break"
    RULE = "rule"


@dataclass(frozen=True)
class Event:
    """One event of the Markdown stream.

    START and END events carry a ``tag``: one of ``paragraph``, ``heading``,
    ``list``, ``item``, ``block_quote``, ``code_block``, ``emphasis``,
    ``strong``, ``link`` or ``image``. Headings also carry their ``level``,
    links and images their ``href`` and ``title``. TEXT, CODE and HTML events
    carry ``text``. ``offset`` is the source position of the line the event
    was found on; it takes no part in comparisons.
    """

    kind: EventKind
    tag: str | None = None
    level: int = 0
    text: str = ""
    href: str = ""
    title: str = ""
    offset: int = field(default=0, compare=False)

    def is_start(self, tag: str, level: int | None = None) -> bool:
        """Whether this opens ``tag`` (at ``level``, if given)."""
        return (
            self.kind is EventKind.START
            and self.tag == tag
            and (level is None or self.level == level)
        )

    def is_end(self, tag: str, level: int | None = None) -> bool:
        """Whether this closes ``tag`` (at ``level``, if given)."""
        return (
            self.kind is EventKind.END
            and self.tag == tag
            and (level is None or self.level == level)
        )


_BLOCK_TAGS = {
    "paragraph": "paragraph",
    "heading": "heading",
    "bullet_list": "list",
    "ordered_list": "list",
    "list_item": "item",
    "blockquote": "block_quote",
}

_INLINE_TAGS = {
    "em": "emphasis",
    "strong": "strong",
    "link": "link",
}

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@lru_cache(maxsize=None)
def _parser() -> MarkdownIt:
    md = MarkdownIt("commonmark")
    # Keep link destinations as written (after unescaping), and accept all of them.
    md.normalizeLink = lambda url: url
    md.validateLink = lambda url: True
    return md


def _line_starts(text: str) -> list[int]:
    return [0, *(m.end() for m in _LINE_BREAK.finditer(text))]


def _heading_level(token: Token) -> int:
    return int(token.tag[1:]) if token.tag[:1] == "h" and token.tag[1:].isdigit() else 0


def _inline_events(children: Iterable[Token], offset: int) -> Iterator[Event]:
    for tok in children:
        kind = tok.type
        if kind in ("text", "text_special"):
            yield Event(EventKind.TEXT, text=tok.content, offset=offset)
        elif kind == "code_inline":
            yield Event(EventKind.CODE, text=tok.content, offset=offset)
        elif kind == "softbreak":
            yield Event(EventKind.SOFT_BREAK, offset=offset)
        elif kind == "hardbreak":
            yield Event(EventKind.HARD_BREAK, offset=offset)
        elif kind == "html_inline":
            yield Event(EventKind.HTML, text=tok.content, offset=offset)
        elif kind == "image":
            src = str(tok.attrGet("src") or "")
            title = str(tok.attrGet("title") or "")
            yield Event(EventKind.START, "image", href=src, title=title, offset=offset)
            yield from _inline_events(tok.children or [], offset)
            yield Event(EventKind.END, "image", offset=offset)
        elif kind.endswith("_open") and kind[:-5] in _INLINE_TAGS:
            tag = _INLINE_TAGS[kind[:-5]]
            if tag == "link":
                href = str(tok.attrGet("href") or "")
                title = str(tok.attrGet("title") or "")
                yield Event(EventKind.START, tag, href=href, title=title, offset=offset)
            else:
                yield Event(EventKind.START, tag, offset=offset)
        elif kind.endswith("_close") and kind[:-6] in _INLINE_TAGS:
            yield Event(EventKind.END, _INLINE_TAGS[kind[:-6]], offset=offset)


def _block_events(tok: Token, offset: int) -> Iterator[Event]:
    kind = tok.type
    if tok.hidden:
        # Paragraphs of tight list items are not part of the stream.
        return
    if kind == "inline":
        yield from _inline_events(tok.children or [], offset)
    elif kind == "hr":
        yield Event(EventKind.RULE, offset=offset)
    elif kind in ("code_block", "fence"):
        yield Event(EventKind.START, "code_block", offset=offset)
        if tok.content:
            yield Event(EventKind.TEXT, text=tok.content, offset=offset)
        yield Event(EventKind.END, "code_block", offset=offset)
    elif kind == "html_block":
        yield Event(EventKind.HTML, text=tok.content, offset=offset)
    elif kind.endswith("_open") and kind[:-5] in _BLOCK_TAGS:
        level = _heading_level(tok) if kind == "heading_open" else 0
        yield Event(EventKind.START, _BLOCK_TAGS[kind[:-5]], level=level, offset=offset)
    elif kind.endswith("_close") and kind[:-6] in _BLOCK_TAGS:
        level = _heading_level(tok) if kind == "heading_close" else 0
        yield Event(EventKind.END, _BLOCK_TAGS[kind[:-6]], level=level, offset=offset)


def markdown_events(text: str) -> list[Event]:
    """Parse CommonMark ``text`` into a flat list of events."""
    starts = _line_starts(text)
    events: list[Event] = []
    offset = 0
    for tok in _parser().parse(text):
        if tok.map:
            offset = starts[min(tok.map[0], len(starts) - 1)]
        events.extend(_block_events(tok, offset))
    return events


def stringify_events(events: Iterable[Event]) -> str:
    """Strip the styling from ``events`` and return just the plain text."""
    parts: list[str] = []
    for event in events:
        if event.kind in (EventKind.TEXT, EventKind.CODE):
            parts.append(event.text)
        elif event.kind is EventKind.SOFT_BREAK:
            parts.append(" ")
    return "".join(parts)