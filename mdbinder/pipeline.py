"""Preprocessors, deciding when they run, and the preprocessor command protocol.

A preprocessor command is started by the build with one of two invocations:

* ``supports <renderer>``: exit with 0 if the renderer is supported, else 1.
* no arguments: read ``[context, book]`` as JSON from standard input, and
  write the processed book as JSON to standard output.
"""

from __future__ import annotations

import abc
import argparse
import json
import re
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .book import Book, BookItem, Chapter
from .ordering import DEFAULT_PREPROCESSORS
from .summary import PartTitle, SectionNumber, Separator

HOST_VERSION = "0.4.15"

_VERSION = re.compile(r"^\s*v?(\d+)\.(\d+)\.(\d+)")


class Preprocessor(abc.ABC):
    """Something that transforms a book before it is rendered."""

    name: str = "preprocessor"

    @abc.abstractmethod
    def run(self, config: Mapping[str, Any], book: Book) -> Book:
        """Process ``book`` under the book's ``config`` and return the result."""

    def supports_renderer(self, renderer: str) -> bool:
        """Whether this preprocessor should run for ``renderer``."""
        return True


class NopPreprocessor(Preprocessor):
    """A preprocessor which does precisely nothing.

    Setting ``blow-up`` in its ``preprocessor.nop-preprocessor`` table makes
    it fail instead.
    """

    name = "nop-preprocessor"

    def run(self, config: Mapping[str, Any], book: Book) -> Book:
        tables = config.get("preprocessor")
        own = tables.get(self.name) if isinstance(tables, Mapping) else None
        if isinstance(own, Mapping) and "blow-up" in own:
            raise RuntimeError("Boom!!1!")
        return book

    def supports_renderer(self, renderer: str) -> bool:
        return renderer != "not-supported"


def _use_default_preprocessors(config: Mapping[str, Any]) -> bool:
    build = config.get("build")
    if not isinstance(build, Mapping):
        return True
    return bool(build.get("use-default-preprocessors", True))


def preprocessor_should_run(
    preprocessor: Preprocessor, renderer_name: str, config: Mapping[str, Any]
) -> bool:
    """Whether ``preprocessor`` runs for ``renderer_name``.

    Default preprocessors run whenever they support the renderer. Otherwise an
    explicit ``preprocessor.<name>.renderers`` list decides, falling back to
    the preprocessor's own ``supports_renderer``.
    """
    if _use_default_preprocessors(config) and preprocessor.name in DEFAULT_PREPROCESSORS:
        return preprocessor.supports_renderer(renderer_name)

    tables = config.get("preprocessor")
    own = tables.get(preprocessor.name) if isinstance(tables, Mapping) else None
    explicit = own.get("renderers") if isinstance(own, Mapping) else None
    if isinstance(explicit, list):
        return any(isinstance(name, str) and name == renderer_name for name in explicit)

    return preprocessor.supports_renderer(renderer_name)


def _parse_version(text: str) -> tuple[int, int, int]:
    match = _VERSION.match(text)
    if match is None:
        raise ValueError(f"invalid version: {text!r}")
    major, minor, patch = (int(part) for part in match.groups())
    return major, minor, patch


def _compatible(required: tuple[int, int, int], actual: tuple[int, int, int]) -> bool:
    if required[0] != actual[0]:
        return False
    if required[0] == 0:
        if required[1] != actual[1]:
            return False
        if required[1] == 0:
            return required[2] == actual[2]
    return actual >= required


def _item_from_json(data: Any) -> BookItem:
    if data == "Separator":
        return Separator()
    if isinstance(data, Mapping):
        if "PartTitle" in data:
            return PartTitle(str(data["PartTitle"]))
        if "Chapter" in data:
            return _chapter_from_json(data["Chapter"])
    raise ValueError(f"unknown book item: {data!r}")


def _chapter_from_json(data: Mapping[str, Any]) -> Chapter:
    number = data.get("number")
    path = data.get("path")
    source_path = data.get("source_path")
    return Chapter(
        name=data["name"],
        content=data.get("content", ""),
        number=SectionNumber(number) if number is not None else None,
        sub_items=[_item_from_json(item) for item in data.get("sub_items", [])],
        path=Path(path) if path is not None else None,
        source_path=Path(source_path) if source_path is not None else None,
        parent_names=list(data.get("parent_names", [])),
    )


def _book_from_json(data: Mapping[str, Any]) -> Book:
    return Book([_item_from_json(item) for item in data.get("sections", [])])


def _item_to_json(item: BookItem) -> Any:
    if isinstance(item, Chapter):
        return {
            "Chapter": {
                "name": item.name,
                "content": item.content,
                "number": list(item.number) if item.number is not None else None,
                "sub_items": [_item_to_json(sub) for sub in item.sub_items],
                "path": item.path.as_posix() if item.path is not None else None,
                "source_path": (
                    item.source_path.as_posix() if item.source_path is not None else None
                ),
                "parent_names": list(item.parent_names),
            }
        }
    if isinstance(item, PartTitle):
        return {"PartTitle": item.title}
    return "Separator"


def _book_to_json(book: Book) -> dict[str, Any]:
    return {"sections": [_item_to_json(item) for item in book.sections], "__non_exhaustive": None}


def _handle_preprocessing(preprocessor: Preprocessor) -> None:
    payload = json.load(sys.stdin)
    if not isinstance(payload, list) or len(payload) != 2:
        raise ValueError("expected a JSON array of [context, book] on standard input")
    context, book_data = payload
    if not isinstance(context, Mapping) or not isinstance(book_data, Mapping):
        raise ValueError("expected a JSON array of [context, book] on standard input")

    caller_version = str(context.get("mdbook_version", ""))
    if not _compatible(_parse_version(HOST_VERSION), _parse_version(caller_version)):
        print(
            f"Warning: The {preprocessor.name} plugin was built against version "
            f"{HOST_VERSION} of the book builder, but we're being called from version "
            f"{caller_version}",
            file=sys.stderr,
        )

    config = context.get("config")
    processed = preprocessor.run(config if isinstance(config, Mapping) else {}, _book_from_json(book_data))
    json.dump(_book_to_json(processed), sys.stdout)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nop-preprocessor",
        description="A preprocessor which does precisely nothing",
    )
    commands = parser.add_subparsers(dest="command")
    supports = commands.add_parser(
        "supports", help="Check whether a renderer is supported by this preprocessor"
    )
    supports.add_argument("renderer")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the no-op preprocessor command; return the exit status."""
    args = _make_parser().parse_args(argv)
    preprocessor = NopPreprocessor()

    if args.command == "supports":
        return 0 if preprocessor.supports_renderer(args.renderer) else 1

    try:
        _handle_preprocessing(preprocessor)
    except Exception as exc:  # noqa: BLE001 - any failure is reported and ends the command
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())