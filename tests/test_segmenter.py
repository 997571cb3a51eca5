"""Tests for block segmentation."""

import textwrap

from docconform.models import DefinitionList, Heading, SectionTag
from docconform.parsers.base import get_parser
from docconform.segmentation.segmenter import segment


def sections_of(text, config, markup="rdoc"):
    document = get_parser(markup).parse(textwrap.dedent(text).strip("\n"))
    return segment(document, config)


def test_count_example(count_doc, test_config):
    """The Array#count documentation has only CallSeq and Synopsis."""
    sections = sections_of(count_doc, test_config)

    assert [s.tag for s in sections.present()] == [SectionTag.CALL_SEQ, SectionTag.SYNOPSIS]
    assert [line.text for line in sections.call_seq_lines] == [
        "array.count -> integer",
        "array.count(obj) -> integer",
        "array.count {|element| ... } -> integer",
    ]
    assert [line.line for line in sections.call_seq_lines] == [2, 3, 4]
    assert sections.synopsis.text == "Returns a count of specified elements."
    assert sections.ambiguities == []


def test_all_sections(test_config):
    sections = sections_of("""
        call-seq:
          array.fetch(index) -> element

        Returns the element at offset +index+.

        With a negative index, counts from the end.

        index:: An Integer offset.

        Raises IndexError if +index+ is out of range.

        Related: #[], #dig.
    """, test_config)

    assert [s.tag for s in sections.present()] == [
        SectionTag.CALL_SEQ,
        SectionTag.SYNOPSIS,
        SectionTag.DETAILS,
        SectionTag.ARGUMENT_DESCRIPTION,
        SectionTag.CORNER_CASES,
        SectionTag.RELATED_METHODS,
    ]
    assert isinstance(sections.argument_description.nodes[0], DefinitionList)
    assert sections.corner_cases.text.startswith("Raises IndexError")
    assert sections.related.references == ["#[]", "#dig"]
    assert sections.related.unresolved == []


def test_monospace_call_seq(test_config):
    """Leading monospace-only signature lines form the CallSeq section."""
    sections = sections_of("""
        <tt>array.size -> integer</tt>

        Returns the number of elements.
    """, test_config)

    assert sections.has(SectionTag.CALL_SEQ)
    assert sections.call_seq_lines[0].text == "array.size -> integer"
    assert sections.has(SectionTag.SYNOPSIS)


def test_no_call_seq(test_config):
    sections = sections_of("Returns the number of elements.", test_config)

    assert not sections.has(SectionTag.CALL_SEQ)
    assert sections.call_seq_lines == []
    assert sections.has(SectionTag.SYNOPSIS)


def test_details_with_heading(test_config):
    sections = sections_of("""
        Returns the first element.

        == Examples

          a = [1, 2]
          a.first # => 1
    """, test_config)

    assert isinstance(sections.details.nodes[0], Heading)
    assert len(sections.details.nodes) == 2


def test_generic_definition_list_ends_details(test_config):
    """Details stop at the first definition list, even one that is not an argument list."""
    sections = sections_of("""
        call-seq:
          time.strftime(format) -> string

        Formats the time.

        Formats are:

        %Y:: year with century
        %m:: month of the year

        Padding flags may precede a directive.
    """, test_config)

    assert not sections.has(SectionTag.ARGUMENT_DESCRIPTION)
    assert (sections.details.start, sections.details.end) == (2, 3)
    assert sections.details.text == "Formats are:"
    assert len(sections.ambiguities) == 1
    assert sections.ambiguities[0].message == "2 node(s) after the details belong to no section"
    assert sections.ambiguities[0].line == 8


def test_generic_list_before_argument_list(test_config):
    sections = sections_of("""
        Formats the value.

        Details come first.

        %d:: decimal digits

        Arguments:

        width:: An Integer.
    """, test_config)

    assert sections.details.text == "Details come first."
    assert sections.argument_description.nodes[0].entries[0].term == "width"
    messages = [a.message for a in sections.ambiguities]
    assert messages == ["2 node(s) before the argument description belong to no section"]


class TestRelatedLine:
    """Tests for the trailing Related: line."""

    def test_related_must_be_last(self, test_config):
        sections = sections_of("""
            Returns the size.

            Related: #length.

            More text.
        """, test_config)

        assert not sections.has(SectionTag.RELATED_METHODS)
        assert len(sections.ambiguities) == 1
        assert "not at the end" in sections.ambiguities[0].message

    def test_multiline_related_is_ambiguous(self, test_config):
        sections = sections_of("""
            Returns the size.

            Related: #length,
            #count.
        """, test_config)

        assert not sections.has(SectionTag.RELATED_METHODS)
        assert "more than one line" in sections.ambiguities[0].message

    def test_unresolved_tokens(self, test_config):
        sections = sections_of("""
            Returns the size.

            Related: #length and +count+.
        """, test_config)

        assert sections.related.references == ["#length"]
        assert sections.related.unresolved == ["count"]

    def test_related_is_not_synopsis(self, test_config):
        sections = sections_of("Related: #length.", test_config)

        assert not sections.has(SectionTag.SYNOPSIS)
        assert sections.has(SectionTag.RELATED_METHODS)


class TestAmbiguities:
    """Tests for boundaries that cannot be resolved."""

    def test_late_call_seq_directive(self, test_config):
        sections = sections_of("""
            Returns the size.

            call-seq:
              array.size -> integer
        """, test_config)

        assert not sections.has(SectionTag.CALL_SEQ)
        assert "call-seq directive" in sections.ambiguities[0].message

    def test_two_argument_lists(self, test_config):
        sections = sections_of("""
            Returns a slice.

            start:: An Integer.

            Counting starts at zero.

            length:: An Integer.
        """, test_config)

        assert sections.argument_description.nodes[0].entries[0].term == "start"
        messages = [a.message for a in sections.ambiguities]
        assert "more than one argument description list" in messages


def test_markdown_segmentation(test_config):
    sections = sections_of("""
        call-seq:
          array.size -> integer

        Returns the number of elements.

        Related: #length.
    """, test_config, markup="markdown")

    assert [s.tag for s in sections.present()] == [
        SectionTag.CALL_SEQ,
        SectionTag.SYNOPSIS,
        SectionTag.RELATED_METHODS,
    ]


def test_segmentation_is_idempotent(count_doc, test_config):
    assert sections_of(count_doc, test_config) == sections_of(count_doc, test_config)
