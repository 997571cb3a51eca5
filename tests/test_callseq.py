"""Tests for the call-seq signature grammar."""

import pytest

from docconform.exceptions import CallSeqSyntaxError
from docconform.models import ArgumentKind, SourceLine
from docconform.parsers.callseq import looks_like_signature, parse_call_seq, parse_call_seq_line


class TestParseCallSeqLine:
    """Tests for parsing single signature lines."""

    def test_no_arguments(self):
        entry = parse_call_seq_line("array.count -> integer")

        assert entry.receiver == "array"
        assert entry.name == "count"
        assert entry.arguments == []
        assert entry.block is None
        assert entry.returns == ["integer"]
        assert not entry.parenthesized

    def test_positional_argument(self):
        entry = parse_call_seq_line("array.count(obj) -> integer")

        assert [a.name for a in entry.arguments] == ["obj"]
        assert entry.arguments[0].kind == ArgumentKind.POSITIONAL
        assert entry.parenthesized

    def test_block_only_form(self):
        """A block form without parentheses has no arguments and a block."""
        entry = parse_call_seq_line("array.count {|element| ... } -> integer")

        assert entry.arguments == []
        assert entry.block is not None
        assert entry.block.params == ["element"]
        assert entry.block.rendering == "braces"

    @pytest.mark.parametrize(
        "line",
        [
            "array.each {|element| ... } -> self",
            "hash.each_pair {|key, value| ... } -> self",
            "array.map! { ... } -> self",
        ],
    )
    def test_block_forms_have_empty_arguments(self, line):
        entry = parse_call_seq_line(line)

        assert entry.arguments == []
        assert entry.accepts_block
        assert not entry.accepts_arguments

    @pytest.mark.parametrize(
        "line, params",
        [
            ("array.each {|element| block } -> self", ["element"]),
            ("hash.each { |k, v| expr } -> self", ["k", "v"]),
            ("array.select {|x| x.even? } -> new_array", ["x"]),
        ],
    )
    def test_block_body_is_free_text(self, line, params):
        entry = parse_call_seq_line(line)

        assert entry.block.rendering == "braces"
        assert entry.block.params == params

    def test_argument_kinds(self):
        entry = parse_call_seq_line("obj.send(name, *args, key: 1, **opts, &block) -> object")

        kinds = [a.kind for a in entry.arguments]
        assert kinds == [
            ArgumentKind.POSITIONAL,
            ArgumentKind.SPLAT,
            ArgumentKind.KEYWORD,
            ArgumentKind.DOUBLE_SPLAT,
            ArgumentKind.BLOCK,
        ]
        assert entry.arguments[2].default == "1"
        assert entry.block.rendering == "ampersand"

    def test_default_values(self):
        entry = parse_call_seq_line("array.first(n = 1) -> new_array")

        assert entry.arguments[0].name == "n"
        assert entry.arguments[0].default == "1"
        assert entry.arguments[0].has_default

    def test_old_style_optional_argument(self):
        entry = parse_call_seq_line("str.center(width [, padstr]) -> new_str")

        assert [a.name for a in entry.arguments] == ["width", "padstr"]
        assert not entry.arguments[0].has_default
        assert entry.arguments[1].default == "optional"

    def test_return_disjunction(self):
        entry = parse_call_seq_line("array.first -> object or nil")

        assert entry.returns == ["object", "nil"]

    def test_return_sentinel(self):
        assert parse_call_seq_line("array.each {|e| ... } -> self").return_sentinel == "self"
        assert parse_call_seq_line("array.first -> object").return_sentinel == "object"
        assert parse_call_seq_line("array.size -> integer").return_sentinel is None

    def test_alternative_arrows(self):
        assert parse_call_seq_line("array.size → integer").arrow == "→"
        assert parse_call_seq_line("array.size => integer").arrow == "=>"

    def test_element_reference(self):
        entry = parse_call_seq_line("array[index] -> object or nil")

        assert entry.name == "[]"
        assert [a.name for a in entry.arguments] == ["index"]

    def test_element_assignment(self):
        entry = parse_call_seq_line("array[index] = object -> object")

        assert entry.name == "[]="
        assert [a.name for a in entry.arguments] == ["index", "object"]

    def test_binary_operator(self):
        entry = parse_call_seq_line("array <=> other_array -> -1, 0, 1, or nil")

        assert entry.name == "<=>"
        assert entry.arguments[0].name == "other_array"
        assert entry.returns == ["-1", "0", "1", "nil"]

    def test_unary_operator(self):
        entry = parse_call_seq_line("-int -> integer")

        assert entry.name == "-@"
        assert entry.receiver == "int"

    def test_class_method(self):
        entry = parse_call_seq_line("Array.new(size = 0) -> new_array")

        assert entry.receiver == "Array"
        assert entry.name == "new"

    def test_do_end_block(self):
        entry = parse_call_seq_line("array.each do |element| ... end -> self")

        assert entry.block.rendering == "do"
        assert entry.block.params == ["element"]


class TestCallSeqErrors:
    """Tests for lines that break the grammar."""

    def test_missing_return_type(self):
        with pytest.raises(CallSeqSyntaxError, match="missing return type"):
            parse_call_seq_line("array.count(obj)", line=3)

    def test_empty_return_type(self):
        with pytest.raises(CallSeqSyntaxError):
            parse_call_seq_line("array.count ->")

    def test_malformed_argument(self):
        with pytest.raises(CallSeqSyntaxError, match="malformed argument"):
            parse_call_seq_line("array.count(1 + 2) -> integer")

    def test_error_carries_line(self):
        with pytest.raises(CallSeqSyntaxError) as excinfo:
            parse_call_seq_line("array.count", line=7)

        assert excinfo.value.line == 7

    def test_parse_collects_errors(self):
        result = parse_call_seq(
            [
                SourceLine(line=2, text="array.count -> integer"),
                SourceLine(line=3, text="array.count(obj)"),
            ]
        )

        assert len(result.entries) == 1
        assert len(result.errors) == 1
        assert result.errors[0].line == 3


class TestLooksLikeSignature:
    """Tests for the lenient signature detector."""

    @pytest.mark.parametrize(
        "text",
        [
            "array.count -> integer",
            "array.count(obj) -> integer",
            "array.each {|element| ... } -> self",
            "array[index] -> object",
            "array <=> other -> integer",
            "-int -> integer",
        ],
    )
    def test_signatures(self, text):
        assert looks_like_signature(text)

    @pytest.mark.parametrize(
        "text",
        [
            "Returns a count of specified elements.",
            "a.count # => 3",
            "array.count",
        ],
    )
    def test_non_signatures(self, text):
        assert not looks_like_signature(text)


def test_nested_optional_groups():
    """Old-style nested optional arguments are all optional."""
    entry = parse_call_seq_line("str.index(substring [, offset [, limit]]) -> integer or nil")

    assert [a.name for a in entry.arguments] == ["substring", "offset", "limit"]
    assert [a.has_default for a in entry.arguments] == [False, True, True]
