# mdbinder

mdbinder turns a directory of Markdown files into an in-memory book. A
`SUMMARY.md` file lays out the book: unnumbered prefix chapters, numbered
chapters (optionally split into titled parts, and nested as deeply as you
like), and unnumbered suffix chapters. It also works out which renderers and
preprocessors a book's configuration asks for, and in what order the
preprocessors run.

## Installing

```
pip install .
```

For running the test suite:

```
pip install .[test]
pytest
```

## Writing a SUMMARY.md

```markdown
# Summary

[Introduction](intro.md)

# Getting started

- [Installation](install.md)
    - [On Linux](install/linux.md)
- [First steps](first-steps.md)

---

# Reference

- [Configuration](config.md)
- [Draft chapter]()

[Appendix](appendix.md)
```

* A level-one heading at the very top is the summary's title; HTML comments
  before it are skipped.
* Links before the first list are prefix chapters; links after the last list
  are suffix chapters. A list or level-one heading after suffix chapters is
  an error.
* `-` or `*` list items are numbered chapters, and each item may hold only a
  link. Numbering continues across parts and separators, so the example
  gives `1.`, `1.1.`, `2.`, `3.` and `4.`.
* A level-one heading between lists starts a new part (`PartTitle`). Other
  headings between lists are skipped.
* `---` adds a `Separator`.
* A link with an empty target is a draft chapter with no file behind it.
* `%20` in a link target stands for a space.

## Parsing and loading

```python
from mdbinder.summary import parse_summary
from mdbinder.book import load_book

with open("src/SUMMARY.md", encoding="utf-8") as fh:
    summary = parse_summary(fh.read())

book = load_book("src")
for item in book:
    print(item)
```

* `mdbinder.summary.parse_summary` returns a `Summary` with `title`,
  `prefix_chapters`, `numbered_chapters` and `suffix_chapters`, made of
  `Link`, `Separator` and `PartTitle` items. A `Link` carries a `name`, a
  `location` (a `Path`, or `None` for a draft), a `SectionNumber` and its
  `nested_items`. A malformed outline raises `SummaryParseError`, whose
  message gives the line and column.
* `mdbinder.book.load_book` reads `SUMMARY.md` from the source directory and
  loads every chapter it names. A missing or unreadable `SUMMARY.md`, a
  malformed outline, or a missing chapter file raises `BookLoadError`. A
  leading UTF-8 byte-order mark is removed from chapter contents.
  `load_book_from_disk`, `load_summary_item` and `load_chapter` do the same
  work starting from a `Summary`, a single item, or a single link.
* A `Chapter` has a `name`, `content`, `number`, `sub_items`, `path` and
  `source_path` (relative to the source directory) and `parent_names`.
  `Chapter.new_draft` makes a chapter with no file, and `is_draft_chapter`
  tells them apart. `str(chapter)` gives the number and the name, as in
  `1.2. Installation`.
* Iterating a `Book` walks its items depth-first, each chapter before its
  sub-items. `Book.for_each` calls a function on every item, sub-items before
  their chapter, and `Book.push_item` appends an item to the top level.
* `mdbinder.events.markdown_events` turns Markdown into a flat list of
  `Event`s, and `stringify_events` reduces events to plain text.

## Renderers and preprocessors

`mdbinder.ordering` reads a configuration mapping (such as a loaded TOML
document):

* `determine_renderers(config)` returns `(name, command)` pairs for the
  entries of the `output` table, in name order. `html` and `markdown` are
  built in and have no command; any other renderer uses its `command` key or
  `mdbinder-<name>`. With no `output` table it returns only `html`.
* `determine_preprocessors(config)` returns the preprocessors to run, in
  order, as `(name, command)` pairs. The built-in `links` and `index` are
  included unless `build.use-default-preprocessors` is false. Each entry of
  the `preprocessor` table is added, honouring its `before` and `after`
  lists; names in those lists that are not configured are ignored with a
  warning. Ties are broken by name. A `before` or `after` that is not a list
  of strings, or a cycle, raises `PipelineConfigError`.
* `get_custom_preprocessor_cmd(key, table)` gives a preprocessor's command.

`mdbinder.pipeline` holds the `Preprocessor` base class (a `name`, `run` and
`supports_renderer`) and `preprocessor_should_run(preprocessor,
renderer_name, config)`: a default preprocessor runs whenever it supports the
renderer; otherwise a `preprocessor.<name>.renderers` list decides, falling
back to the preprocessor's own `supports_renderer`.

## The no-op preprocessor command

`mdbinder-nop` runs `NopPreprocessor`, which returns the book unchanged and
is useful as a starting point and for testing a pipeline.

```
mdbinder-nop supports html
```

exits with status 0 when the renderer is supported and 1 when it is not (only
the renderer named `not-supported` is refused).

```
mdbinder-nop < input.json > output.json
```

reads a JSON array `[context, book]` from standard input and writes the book
back as JSON to standard output. The context's `config` is the book
configuration; its `mdbook_version` is compared with the version the command
was built for, and a warning is printed to standard error if they are not
compatible. If `preprocessor.nop-preprocessor` in the configuration contains
a `blow-up` key, the command fails on purpose, printing the error and exiting
with status 1.

## What it does not do

mdbinder does not render books: there is no HTML or Markdown output, and the
`html` and `markdown` renderers and the `links` and `index` preprocessors are
only names in the ordering, with no implementation here. It does not start
renderer or preprocessor commands itself, has no command for creating,
building, serving or watching a book, and does not create chapter files that
are missing.