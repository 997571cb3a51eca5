"""Tests for inline markup parsing."""

from pydantic import BaseModel

from docconform.models import CodeSpan, CrossReference, ParseIssue, Text
from docconform.parsers.inline import extract_cross_references, is_cross_reference, parse_inline


def test_plain_text():
    """Text without markup is a single text node."""
    nodes, issues = parse_inline("Returns a count of elements.")

    assert nodes == [Text(text="Returns a count of elements.")]
    assert issues == []


def test_monospace_forms():
    """All monospace spellings produce code spans."""
    for text in ("+nil+", "<tt>nil</tt>", "<code>nil</code>"):
        nodes, issues = parse_inline(f"Returns {text} otherwise.")

        assert CodeSpan(text="nil") in nodes
        assert issues == []


def test_backtick_spans_are_markdown_only():
    nodes, issues = parse_inline("Returns `nil` otherwise.", backticks=True)

    assert CodeSpan(text="nil") in nodes
    assert issues == []

    nodes, issues = parse_inline("Returns `nil` otherwise.")

    assert nodes == [Text(text="Returns `nil` otherwise.")]
    assert issues == []


def test_rdoc_quoting_is_literal():
    """Old-style `quoted' names are prose, not unterminated spans."""
    nodes, issues = parse_inline(
        "Invokes the method identified by `name' and passes it the arguments."
    )

    assert issues == []
    assert not any(isinstance(n, CodeSpan) for n in nodes)


def test_plus_inside_words_is_literal():
    """A plus sign between operands is not a span marker."""
    nodes, _ = parse_inline("Computes a + b + c.")

    assert not any(isinstance(n, CodeSpan) for n in nodes)


def test_unterminated_monospace_is_recovered():
    """An unclosed span keeps the text and reports an issue."""
    nodes, issues = parse_inline("Returns <tt>nil when empty.", line=4)

    assert len(issues) == 1
    assert issues[0].markup_construct == "monospace"
    assert issues[0].line == 4
    assert "nil when empty." in "".join(n.text for n in nodes if isinstance(n, Text))


class TestCrossReferences:
    """Tests for cross-reference detection."""

    def test_instance_method(self):
        nodes, _ = parse_inline("See #each for details.")

        assert CrossReference(target="#each") in nodes

    def test_qualified_references(self):
        nodes, _ = parse_inline("Like Array#map, Kernel::puts and File.open.")

        assert extract_cross_references(nodes) == ["Array#map", "Kernel::puts", "File.open"]

    def test_predicate_and_operator_names(self):
        assert is_cross_reference("#empty?")
        assert is_cross_reference("#<=>")
        assert is_cross_reference("#[]=")

    def test_plain_words_are_not_references(self):
        assert not is_cross_reference("each")
        assert not is_cross_reference("Array")

    def test_escaped_reference(self):
        """A backslash suppresses the cross-reference."""
        nodes, _ = parse_inline(r"Use \#each literally.")

        assert extract_cross_references(nodes) == []
        assert nodes == [Text(text="Use #each literally.")]

    def test_reference_inside_code_span(self):
        """Code spans are not scanned for references."""
        nodes, _ = parse_inline("Compare +a#b+ here.")

        assert extract_cross_references(nodes) == []
        assert CodeSpan(text="a#b") in nodes


def test_issue_fields_do_not_shadow_model_attributes():
    assert not set(ParseIssue.model_fields) & set(dir(BaseModel))
