"""
Tests for text contexts and the primitive text parsers
"""

import pytest

from text_context import Offset, TextContext, offset_of
from text_parsers import (
    EOS,
    TextParseError,
    alphanumeric,
    char,
    digit,
    eos,
    furthest_of,
    letter,
    position,
    satisfy,
    spaces,
    string,
)


class TestTextContext:
    def test_initial_offset(self):
        assert TextContext().offset == Offset(0, 1, 1)

    def test_advance_on_same_line(self):
        context = TextContext().with_offset(index=3, column=3)
        assert context.offset == Offset(3, 1, 4)

    def test_advance_across_lines_resets_column(self):
        context = TextContext(Offset(5, 1, 6)).with_offset(index=4, row=2, column=1)
        assert context.offset == Offset(9, 3, 2)

    def test_contexts_are_immutable(self):
        context = TextContext()
        context.with_offset(index=1, column=1)
        assert context == TextContext()

    def test_offset_of(self):
        assert offset_of("abc") == {'index': 3, 'row': 0, 'column': 3}
        assert offset_of("a\nbc") == {'index': 4, 'row': 1, 'column': 2}
        assert offset_of("ab\n") == {'index': 3, 'row': 1, 'column': 0}

    def test_str(self):
        assert str(TextContext(Offset(4, 2, 3))) == "line 2, column 3"


class TestCharParser:
    def test_char_advances_column(self):
        parsing = char('a').run("abc")
        assert parsing.value == 97
        assert parsing.context.offset == Offset(1, 1, 2)

    def test_char_accepts_code_point(self):
        assert char(97).run("a").value == 97

    def test_newline_advances_row(self):
        context = TextContext(Offset(3, 1, 4))
        parsing = char('\n').run("abc\nd", context)
        assert parsing.context.offset == Offset(4, 2, 1)

    def test_failure_at_start_leaves_offset(self):
        parsing = char('a').run("xyz")
        assert parsing.error == TextParseError('a', 'x')
        assert parsing.context.offset == Offset(0, 1, 1)

    def test_failure_at_end(self):
        assert char('a').run("").error == TextParseError('a', EOS)

    def test_rejects_multiple_characters(self):
        with pytest.raises(ValueError):
            char('ab')


class TestStringParser:
    def test_single_line(self):
        parsing = string("let").run("let x")
        assert parsing.value == "let"
        assert parsing.context.offset == Offset(3, 1, 4)

    def test_multi_line(self):
        parsing = string("a\nb\nc").run("a\nb\nc\nd")
        assert parsing.context.offset.row == 3
        assert parsing.context.offset.column == 2

    def test_mismatch_reports_same_length_slice(self):
        parsing = string("abc").run("abd")
        assert parsing.error == TextParseError('abc', 'abd')
        assert parsing.context == TextContext()

    def test_mismatch_at_end(self):
        assert string("abc").run("").error == TextParseError('abc', EOS)


class TestDigitParser:
    def test_digit(self):
        parsing = digit().run("7x")
        assert parsing.value == 7
        assert parsing.context.offset == Offset(1, 1, 2)

    def test_not_a_digit(self):
        parsing = digit().run("x")
        assert parsing.error.expected == "0-9"
        assert parsing.error.actual == "x"

    def test_end_of_input(self):
        assert digit().run("").error == TextParseError('0-9', EOS)


class TestPredicateParsers:
    def test_letter(self):
        assert letter().run("q1").value == "q"
        assert letter().run("1q").error == TextParseError('letter', '1')

    def test_alphanumeric(self):
        assert alphanumeric().run("a").value == "a"
        assert alphanumeric().run("5").value == "5"

    def test_alphanumeric_combined_error(self):
        parsing = alphanumeric().run("_")
        assert parsing.error == TextParseError('letter or digit', '_')

    def test_satisfy(self):
        vowel = satisfy(lambda c: c in "aeiou", "vowel")
        assert vowel.run("e").value == "e"
        assert vowel.run("x").error == TextParseError('vowel', 'x')


class TestEOSParser:
    def test_succeeds_at_end(self):
        context = TextContext(Offset(3, 1, 4))
        parsing = eos().run("abc", context)
        assert parsing.success
        assert parsing.value is None
        assert parsing.context == context

    def test_fails_before_end(self):
        parsing = eos().run("abc")
        assert parsing.error == TextParseError(EOS, 'a')
        assert parsing.context == TextContext()


class TestSpacesAndPosition:
    def test_spaces(self):
        parsing = spaces().run("   x")
        assert parsing.value == "   "
        assert parsing.context.index == 3

    def test_no_spaces(self):
        parsing = spaces().run("x")
        assert parsing.success
        assert parsing.value == ""

    def test_position(self):
        context = TextContext(Offset(2, 1, 3))
        parsing = position().run("abc", context)
        assert parsing.value == Offset(2, 1, 3)
        assert parsing.context == context


class TestFurthestOf:
    def test_first_success_wins(self):
        parser = furthest_of(string("ab"), string("a"))
        assert parser.run("ab").value == "ab"

    def test_reports_deepest_failure(self):
        parser = furthest_of(char('a').drop_then(char('b')).drop_then(char('c')),
                             char('x'))
        parsing = parser.run("abz")
        assert parsing.error == TextParseError('c', 'z')
        assert parsing.error.offset == Offset(2, 1, 3)
        assert parsing.context == TextContext()

    def test_ties_go_to_first_alternative(self):
        parsing = furthest_of(char('a'), char('b')).run("z")
        assert parsing.error == TextParseError('a', 'z')
