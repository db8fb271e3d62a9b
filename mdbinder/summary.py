"""Parsing of a ``SUMMARY.md`` file into the layout of a book.

The summary is made of an optional title, unnumbered prefix chapters, one or
more parts of numbered (and possibly nested) chapters, and unnumbered suffix
chapters::

    summary           ::= title prefix_chapters numbered_chapters suffix_chapters
    title             ::= "# " TEXT | EPSILON
    prefix_chapters   ::= item*
    suffix_chapters   ::= item*
    numbered_chapters ::= part+
    part              ::= title dotted_item+
    dotted_item       ::= INDENT* DOT_POINT item
    item              ::= link | separator
    separator         ::= "---"
    link              ::= "[" TEXT "]" "(" TEXT ")"
    DOT_POINT         ::= "-" | "*"
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from .events import Event, EventKind, markdown_events, stringify_events

log = logging.getLogger(__name__)


class SummaryParseError(ValueError):
    """Raised when a ``SUMMARY.md`` cannot be parsed."""


class SectionNumber(tuple):
    """A section number such as ``1.2.3.``."""

    def __new__(cls, parts: Iterable[int] = ()) -> SectionNumber:
        return super().__new__(cls, (int(part) for part in parts))

    def __str__(self) -> str:
        if not self:
            return "0"
        return "".join(f"{part}." for part in self)

    def __repr__(self) -> str:
        return f"SectionNumber({list(self)!r})"

    def child(self, index: int) -> SectionNumber:
        """The number of this section's sub-section ``index``."""
        return SectionNumber((*self, index))

    def shifted(self, level: int, by: int) -> SectionNumber:
        """A copy with the component at ``level`` increased by ``by``."""
        parts = list(self)
        parts[level] += by
        return SectionNumber(parts)


@dataclass
class Link:
    """An entry of the summary such as ``[Some section](./path/to/file.md)``.

    A link without a location is a draft chapter.
    """

    name: str
    location: Path | None = None
    number: SectionNumber | None = None
    nested_items: list[SummaryItem] = field(default_factory=list)


@dataclass(frozen=True)
class Separator:
    """A separator (``---``) between chapters."""


@dataclass(frozen=True)
class PartTitle:
    """The title of a part of the numbered chapters."""

    title: str


SummaryItem = Link | Separator | PartTitle


@dataclass
class Summary:
    """The parsed ``SUMMARY.md``, specifying how the book is laid out."""

    title: str | None = None
    prefix_chapters: list[SummaryItem] = field(default_factory=list)
    numbered_chapters: list[SummaryItem] = field(default_factory=list)
    suffix_chapters: list[SummaryItem] = field(default_factory=list)

    def all_items(self) -> Iterator[SummaryItem]:
        """The top-level items of all three sections, in order."""
        yield from self.prefix_chapters
        yield from self.numbered_chapters
        yield from self.suffix_chapters


@contextmanager
def _context(message: str) -> Iterator[None]:
    try:
        yield
    except SummaryParseError as exc:
        raise SummaryParseError(f"{message}: {exc}") from exc


def _shift_section_numbers(items: Iterable[SummaryItem], level: int, by: int) -> None:
    for item in items:
        if isinstance(item, Link):
            if item.number is not None:
                item.number = item.number.shifted(level, by)
            _shift_section_numbers(item.nested_items, level, by)


def _last_link(items: list[SummaryItem]) -> Link:
    for item in reversed(items):
        if isinstance(item, Link):
            return item
    raise SummaryParseError(
        "Unable to get last link because the list of SummaryItems doesn't contain any Links"
    )


class SummaryParser:
    """A recursive-descent parser over the Markdown events of a summary."""

    def __init__(self, text: str) -> None:
        self._src = text
        self._stream = iter(markdown_events(text))
        self._offset = 0
        self._back: Event | None = None
        self._root_items = 0
        self._root_number = SectionNumber()

    def parse(self) -> Summary:
        """Parse the whole summary."""
        title = self.parse_title()
        with _context("There was an error parsing the prefix chapters"):
            prefix = self.parse_affix(True)
        with _context("There was an error parsing the numbered chapters"):
            numbered = self.parse_parts()
        with _context("There was an error parsing the suffix chapters"):
            suffix = self.parse_affix(False)
        return Summary(title, prefix, numbered, suffix)

    def next_event(self) -> Event | None:
        """The next event, or None at the end of the document."""
        if self._back is not None:
            event, self._back = self._back, None
            return event
        event = next(self._stream, None)
        if event is not None:
            self._offset = event.offset
        return event

    def parse_title(self) -> str | None:
        """Parse the leading level-one heading, skipping HTML such as comments."""
        while (event := self.next_event()) is not None:
            if event.is_start("heading", 1):
                log.debug("Found a h1 in the SUMMARY")
                return stringify_events(self._collect_until(lambda e: e.is_end("heading", 1)))
            if event.kind is EventKind.HTML:
                continue
            self._push_back(event)
            return None
        return None

    def parse_affix(self, is_prefix: bool) -> list[SummaryItem]:
        """Parse the prefix (or suffix) chapters."""
        log.debug("Parsing %s items", "prefix" if is_prefix else "suffix")
        items: list[SummaryItem] = []
        while (event := self.next_event()) is not None:
            if event.is_start("list") or event.is_start("heading", 1):
                if is_prefix:
                    self._push_back(event)
                    break
                raise self._error("Suffix chapters cannot be followed by a list")
            if event.is_start("link"):
                items.append(self.parse_link(event.href))
            elif event.kind is EventKind.RULE:
                items.append(Separator())
        return items

    def parse_parts(self) -> list[SummaryItem]:
        """Parse the numbered chapters, possibly split into titled parts."""
        parts: list[SummaryItem] = []
        while (event := self.next_event()) is not None:
            if event.is_start("paragraph"):
                self._push_back(event)
                break
            if event.is_start("heading", 1):
                log.debug("Found a h1 in the SUMMARY")
                title: str | None = stringify_events(
                    self._collect_until(lambda e: e.is_end("heading", 1))
                )
            else:
                self._push_back(event)
                title = None

            with _context("There was an error parsing the numbered chapters"):
                chapters = self.parse_numbered()

            if title is not None:
                parts.append(PartTitle(title))
            parts.extend(chapters)
        return parts

    def parse_numbered(self) -> list[SummaryItem]:
        """Parse one part's numbered chapters; numbering continues across parts."""
        items: list[SummaryItem] = []
        first = True
        while (event := self.next_event()) is not None:
            if event.is_start("paragraph"):
                if not first:
                    self._push_back(event)
                    break
            elif event.is_start("heading", 1):
                self._push_back(event)
                break
            elif event.is_start("list"):
                self._push_back(event)
                bunch = self._parse_nested_numbered(self._root_number)
                # Lists resumed after a rule or a comment are numbered from 1 again.
                _shift_section_numbers(bunch, 0, self._root_items)
                self._root_items += len(bunch)
                items.extend(bunch)
            elif event.kind is EventKind.START:
                log.debug("Skipping contents of %s", event.tag)
                while (inner := self.next_event()) is not None:
                    if inner.is_end(event.tag or "", event.level):
                        break
            elif event.kind is EventKind.RULE:
                items.append(Separator())
            first = False
        return items

    def parse_link(self, href: str) -> Link:
        """Finish a link whose opening event has just been read."""
        href = href.replace("%20", " ")
        name = stringify_events(self._collect_until(lambda e: e.is_end("link")))
        return Link(name=name, location=Path(href) if href else None)

    def _parse_nested_numbered(self, parent: SectionNumber) -> list[SummaryItem]:
        log.debug("Parsing numbered chapters at level %s", parent)
        items: list[SummaryItem] = []
        while (event := self.next_event()) is not None:
            if event.is_start("item"):
                items.append(self._parse_nested_item(parent, len(items)))
            elif event.is_start("list"):
                if not items:
                    continue
                last = _last_link(items)
                assert last.number is not None
                last.nested_items = self._parse_nested_numbered(last.number)
            elif event.is_end("list"):
                break
        return items

    def _parse_nested_item(self, parent: SectionNumber, existing: int) -> Link:
        while True:
            event = self.next_event()
            if event is not None and event.is_start("paragraph"):
                continue
            if event is not None and event.is_start("link"):
                link = self.parse_link(event.href)
                link.number = parent.child(existing + 1)
                log.debug("Found chapter: %s %s", link.number, link.name)
                return link
            log.warning("Expected a start of a link, actually got %r", event)
            raise self._error("The link items for nested chapters must only contain a hyperlink")

    def _collect_until(self, is_delimiter: Callable[[Event], bool]) -> list[Event]:
        events: list[Event] = []
        for event in self._stream:
            if is_delimiter(event):
                return events
            events.append(event)
        log.debug("Reached end of stream without finding the closing event")
        return events

    def _push_back(self, event: Event) -> None:
        if self._back is not None:
            raise RuntimeError("only one event can be pushed back")
        self._back = event

    def _current_location(self) -> tuple[int, int]:
        previous = self._src[: self._offset]
        line = previous.count("\n") + 1
        start_of_line = max(previous.rfind("\n"), 0)
        col = len(self._src[start_of_line : self._offset])
        return line, col

    def _error(self, message: str) -> SummaryParseError:
        line, col = self._current_location()
        return SummaryParseError(
            f"failed to parse SUMMARY.md line {line}, column {col}: {message}"
        )


def parse_summary(text: str) -> Summary:
    """Parse the text of a ``SUMMARY.md``."""
    return SummaryParser(text).parse()