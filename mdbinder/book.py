"""The in-memory representation of a book and loading it from disk."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .summary import (
    Link,
    PartTitle,
    SectionNumber,
    Separator,
    Summary,
    SummaryItem,
    SummaryParseError,
    parse_summary,
)

log = logging.getLogger(__name__)

_UTF8_BOM = "\ufeff"


class BookLoadError(Exception):
    """Raised when a book or one of its chapters cannot be loaded."""


@dataclass
class Chapter:
    """A chapter, usually backed by one file on disk, possibly with sub-items.

    ``path`` and ``source_path`` are relative to the ``SUMMARY.md`` file; a
    chapter without a path is a draft.
    """

    name: str
    content: str = ""
    number: SectionNumber | None = None
    sub_items: list[BookItem] = field(default_factory=list)
    path: Path | None = None
    source_path: Path | None = None
    parent_names: list[str] = field(default_factory=list)

    @classmethod
    def new_draft(cls, name: str, parent_names: Iterable[str]) -> Chapter:
        """A draft chapter, not attached to any source file."""
        return cls(name=name, parent_names=list(parent_names))

    def is_draft_chapter(self) -> bool:
        """Whether this chapter has no source file."""
        return self.path is None

    def __str__(self) -> str:
        if self.number is not None:
            return f"{self.number} {self.name}"
        return self.name


BookItem = Chapter | Separator | PartTitle


@dataclass
class Book:
    """A tree of chapters, separators and part titles.

    Iterating over a book walks its items depth-first, each chapter before
    its sub-items.
    """

    sections: list[BookItem] = field(default_factory=list)

    def __iter__(self) -> Iterator[BookItem]:
        return _walk(self.sections)

    def push_item(self, item: BookItem) -> Book:
        """Append ``item`` to the top level and return the book."""
        self.sections.append(item)
        return self

    def for_each(self, func: Callable[[BookItem], None]) -> None:
        """Call ``func`` on every item, sub-items before their chapter."""
        _for_each(func, self.sections)


def _walk(items: Iterable[BookItem]) -> Iterator[BookItem]:
    for item in items:
        yield item
        if isinstance(item, Chapter):
            yield from _walk(item.sub_items)


def _for_each(func: Callable[[BookItem], None], items: Iterable[BookItem]) -> None:
    for item in items:
        if isinstance(item, Chapter):
            _for_each(func, item.sub_items)
        func(item)


def load_book(src_dir: str | Path) -> Book:
    """Load a book from its source directory, guided by its ``SUMMARY.md``."""
    src_dir = Path(src_dir)
    summary_md = src_dir / "SUMMARY.md"
    try:
        text = summary_md.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BookLoadError(
            f"Couldn't open SUMMARY.md in {str(src_dir)!r} directory: {exc}"
        ) from exc
    try:
        summary = parse_summary(text)
    except SummaryParseError as exc:
        raise BookLoadError(f"Summary parsing failed for file={str(summary_md)!r}: {exc}") from exc
    return load_book_from_disk(summary, src_dir)


def load_book_from_disk(summary: Summary, src_dir: str | Path) -> Book:
    """Load every chapter named by ``summary`` from ``src_dir``."""
    log.debug("Loading the book from disk")
    src_dir = Path(src_dir)
    return Book([load_summary_item(item, src_dir, []) for item in summary.all_items()])


def load_summary_item(
    item: SummaryItem, src_dir: str | Path, parent_names: Iterable[str]
) -> BookItem:
    """Turn one summary entry into a book item, loading chapters from disk."""
    if isinstance(item, Link):
        return load_chapter(item, src_dir, parent_names)
    if isinstance(item, PartTitle):
        return PartTitle(item.title)
    return Separator()


def load_chapter(link: Link, src_dir: str | Path, parent_names: Iterable[str]) -> Chapter:
    """Load the chapter ``link`` points at, along with its nested items."""
    src_dir = Path(src_dir)
    parent_names = list(parent_names)

    if link.location is None:
        chapter = Chapter.new_draft(link.name, parent_names)
    else:
        log.debug("Loading %s (%s)", link.name, link.location)
        location = link.location if link.location.is_absolute() else src_dir / link.location
        try:
            raw = location.read_bytes()
        except OSError as exc:
            raise BookLoadError(f"Chapter file not found, {link.location}: {exc}") from exc
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BookLoadError(f'Unable to read "{link.name}" ({location}): {exc}') from exc
        content = content.removeprefix(_UTF8_BOM)

        try:
            relative = location.relative_to(src_dir)
        except ValueError as exc:
            raise BookLoadError(
                f"Chapter {location} is not inside the book directory {src_dir}"
            ) from exc

        chapter = Chapter(
            name=link.name,
            content=content,
            path=relative,
            source_path=relative,
            parent_names=parent_names,
        )

    chapter.number = link.number
    sub_parents = [*parent_names, link.name]
    chapter.sub_items = [
        load_summary_item(item, src_dir, sub_parents) for item in link.nested_items
    ]
    return chapter