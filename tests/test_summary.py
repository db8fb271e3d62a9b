from pathlib import Path

import pytest

from mdbinder.summary import (
    Link,
    PartTitle,
    SectionNumber,
    Separator,
    Summary,
    SummaryParseError,
    SummaryParser,
    parse_summary,
)


def numbered(name, location, numbers, nested=None):
    return Link(
        name=name,
        location=Path(location),
        number=SectionNumber(numbers),
        nested_items=nested or [],
    )


def affix(name, location):
    return Link(name=name, location=Path(location))


@pytest.mark.parametrize(
    "parts, expected",
    [([0], "0."), ([1, 3], "1.3."), ([1, 2, 3], "1.2.3."), ([], "0")],
)
def test_section_number_dotted_representation(parts, expected):
    assert str(SectionNumber(parts)) == expected


def test_section_number_child_and_shift():
    assert SectionNumber([1]).child(2) == SectionNumber([1, 2])
    assert SectionNumber([1, 4]).shifted(0, 2) == SectionNumber([3, 4])


def test_parse_initial_title():
    assert SummaryParser("# Summary").parse_title() == "Summary"


def test_no_initial_title():
    parser = SummaryParser("[Link]()")
    assert parser.parse_title() is None
    event = parser.next_event()
    assert event.is_start("paragraph")


def test_parse_title_with_styling():
    assert SummaryParser("# My **Awesome** Summary").parse_title() == "My Awesome Summary"


def test_parse_some_prefix_items():
    parser = SummaryParser("[First](./first.md)\n[Second](./second.md)\n")
    got = parser.parse_affix(True)
    assert got == [affix("First", "./first.md"), affix("Second", "./second.md")]


def test_parse_prefix_items_with_a_separator():
    parser = SummaryParser("[First](./first.md)\n\n---\n\n[Second](./second.md)\n")
    got = parser.parse_affix(True)
    assert len(got) == 3
    assert got[1] == Separator()


def test_suffix_items_cannot_be_followed_by_a_list():
    parser = SummaryParser("[First](./first.md)\n- [Second](./second.md)\n")
    with pytest.raises(SummaryParseError) as info:
        parser.parse_affix(False)
    assert "line 2" in str(info.value)
    assert "Suffix chapters cannot be followed by a list" in str(info.value)


def test_parse_a_link():
    parser = SummaryParser("[First](./first.md)")
    assert parser.next_event().is_start("paragraph")
    event = parser.next_event()
    assert event.is_start("link")
    got = parser.parse_link(event.href)
    assert got == affix("First", "./first.md")


def test_parse_a_numbered_chapter():
    got = SummaryParser("- [First](./first.md)\n").parse_numbered()
    assert got == [numbered("First", "./first.md", [1])]


def test_parse_nested_numbered_chapters():
    src = "- [First](./first.md)\n  - [Nested](./nested.md)\n- [Second](./second.md)"
    got = SummaryParser(src).parse_numbered()
    assert got == [
        numbered("First", "./first.md", [1], [numbered("Nested", "./nested.md", [1, 1])]),
        numbered("Second", "./second.md", [2]),
    ]


def test_parse_numbered_chapters_separated_by_comment():
    src = "- [First](./first.md)\n<!-- this is a comment -->\n- [Second](./second.md)"
    got = SummaryParser(src).parse_numbered()
    assert got == [
        numbered("First", "./first.md", [1]),
        numbered("Second", "./second.md", [2]),
    ]


def test_parse_titled_parts():
    src = (
        "- [First](./first.md)\n- [Second](./second.md)\n"
        "# Title 2\n- [Third](./third.md)\n\t- [Fourth](./fourth.md)"
    )
    got = SummaryParser(src).parse_parts()
    assert got == [
        numbered("First", "./first.md", [1]),
        numbered("Second", "./second.md", [2]),
        PartTitle("Title 2"),
        numbered("Third", "./third.md", [3], [numbered("Fourth", "./fourth.md", [3, 1])]),
    ]


def test_can_have_a_subheader_between_nested_items():
    src = "- [First](./first.md)\n\n## Subheading\n\n- [Second](./second.md)\n"
    got = SummaryParser(src).parse_numbered()
    assert got == [
        numbered("First", "./first.md", [1]),
        numbered("Second", "./second.md", [2]),
    ]


def test_an_empty_link_location_is_a_draft_chapter():
    got = SummaryParser("- [Empty]()\n").parse_numbered()
    assert got == [Link(name="Empty", location=None, number=SectionNumber([1]))]


def test_keep_numbering_after_separator():
    src = "- [First](./first.md)\n---\n- [Second](./second.md)\n---\n- [Third](./third.md)\n"
    got = SummaryParser(src).parse_numbered()
    assert got == [
        numbered("First", "./first.md", [1]),
        Separator(),
        numbered("Second", "./second.md", [2]),
        Separator(),
        numbered("Third", "./third.md", [3]),
    ]


def test_add_space_for_multi_line_chapter_names():
    got = SummaryParser("- [Chapter\ntitle](./chapter.md)").parse_numbered()
    assert got == [numbered("Chapter title", "./chapter.md", [1])]


def test_allow_space_in_link_destination():
    src = "- [test1](./test%20link1.md)\n- [test2](<./test link2.md>)"
    got = SummaryParser(src).parse_numbered()
    assert got == [
        numbered("test1", "./test link1.md", [1]),
        numbered("test2", "./test link2.md", [2]),
    ]


def test_nested_items_must_be_links():
    with pytest.raises(SummaryParseError) as info:
        SummaryParser("- Plain text\n").parse_numbered()
    assert "must only contain a hyperlink" in str(info.value)


SKIP_HTML_SRC = """<!--
# Title - En
-->
# Title - Local

<!--
[Prefix 00-01 - En](ch00-01.md)
[Prefix 00-02 - En](ch00-02.md)
-->
[Prefix 00-01 - Local](ch00-01.md)
[Prefix 00-02 - Local](ch00-02.md)

<!--
## Section Title - En
-->
## Section Title - Localized

<!--
- [Ch 01-00 - En](ch01-00.md)
    - [Ch 01-01 - En](ch01-01.md)
    - [Ch 01-02 - En](ch01-02.md)
-->
- [Ch 01-00 - Local](ch01-00.md)
    - [Ch 01-01 - Local](ch01-01.md)
    - [Ch 01-02 - Local](ch01-02.md)

<!--
- [Ch 02-00 - En](ch02-00.md)
-->
- [Ch 02-00 - Local](ch02-00.md)

<!--
[Appendix A - En](appendix-01.md)
[Appendix B - En](appendix-02.md)
-->`
[Appendix A - Local](appendix-01.md)
[Appendix B - Local](appendix-02.md)
"""


def test_skip_html_comments():
    parser = SummaryParser(SKIP_HTML_SRC)

    assert parser.parse_title() == "Title - Local"

    assert parser.parse_affix(True) == [
        affix("Prefix 00-01 - Local", "ch00-01.md"),
        affix("Prefix 00-02 - Local", "ch00-02.md"),
    ]

    ch01_nested = [
        numbered("Ch 01-01 - Local", "ch01-01.md", [1, 1]),
        numbered("Ch 01-02 - Local", "ch01-02.md", [1, 2]),
    ]
    assert parser.parse_parts() == [
        numbered("Ch 01-00 - Local", "ch01-00.md", [1], ch01_nested),
        numbered("Ch 02-00 - Local", "ch02-00.md", [2]),
    ]

    assert parser.parse_affix(False) == [
        affix("Appendix A - Local", "appendix-01.md"),
        affix("Appendix B - Local", "appendix-02.md"),
    ]


def test_parse_summary_whole_document():
    src = "# Summary\n\n[Intro](intro.md)\n\n- [One](one.md)\n- [Two](two.md)\n\n[Outro](outro.md)\n"
    got = parse_summary(src)
    assert got == Summary(
        title="Summary",
        prefix_chapters=[affix("Intro", "intro.md")],
        numbered_chapters=[
            numbered("One", "one.md", [1]),
            numbered("Two", "two.md", [2]),
        ],
        suffix_chapters=[affix("Outro", "outro.md")],
    )
    assert [item.name for item in got.all_items()] == ["Intro", "One", "Two", "Outro"]


def test_parse_summary_reports_suffix_followed_by_list():
    src = "[a](a.md)\n\n- [b](b.md)\n\n[c](c.md)\n\n- [d](d.md)\n"
    with pytest.raises(SummaryParseError) as info:
        parse_summary(src)
    message = str(info.value)
    assert message.startswith("There was an error parsing the suffix chapters")
    assert "line 7" in message


def test_parse_summary_of_empty_text():
    assert parse_summary("") == Summary()