"""
Tests for sequencing, alternation and repetition
"""

import pytest

from combinators import many, many1, one_of, optional, separated_by, sequence
from text_context import Offset, TextContext
from text_parsers import TextParseError, char, digit, spaces


class TestSequence:
    def test_values_in_order(self):
        parsing = sequence(digit(), char('+'), digit()).run("1+2")
        assert parsing.value == [1, ord('+'), 2]
        assert parsing.context.index == 3

    def test_first_failure_aborts(self):
        parsing = sequence(digit(), char('+'), digit()).run("1-2")
        assert not parsing.success
        assert parsing.error == TextParseError('+', '-')
        assert parsing.context == TextContext()

    def test_failing_last_element_reverts(self):
        parsing = sequence(char('a'), char('b'), char('c')).run("abz")
        assert parsing.error == TextParseError('c', 'z')
        assert parsing.error.offset == Offset(2, 1, 3)
        assert parsing.context == TextContext()

    def test_empty_sequence(self):
        assert sequence().run("abc", TextContext()).value == []


class TestOneOf:
    def test_first_matching_alternative(self):
        parser = one_of(char('a'), char('b'), char('c'))
        assert parser.run("b").value == ord('b')

    def test_last_failure_is_reported(self):
        parser = one_of(char('a'), char('b'), char('c'))
        assert parser.run("z").error == TextParseError('c', 'z')

    def test_alternatives_start_from_same_input(self):
        parser = one_of(sequence(char('a'), char('b')), sequence(char('a'), char('c')))
        assert parser.run("ac").success

    def test_requires_a_parser(self):
        with pytest.raises(ValueError):
            one_of()


class TestRepetition:
    def test_many_consumes_all_matches(self):
        parsing = many(char(' ')).run("   x")
        assert parsing.value == [32, 32, 32]
        assert parsing.context.offset == Offset(3, 1, 4)

    def test_many_zero_matches(self):
        parsing = many(char(' ')).run("x")
        assert parsing.value == []
        assert parsing.context == TextContext()

    def test_many1_needs_one_match(self):
        parsing = many1(digit()).run("x")
        assert parsing.error == TextParseError('0-9', 'x')
        assert parsing.context == TextContext()

    def test_many1_collects_in_order(self):
        assert many1(digit()).run("2024!").value == [2, 0, 2, 4]

    def test_long_repetition(self):
        parsing = many(char('a')).run("a" * 5000)
        assert len(parsing.value) == 5000
        assert parsing.context.index == 5000

    def test_partial_element_is_not_consumed(self):
        pair = sequence(digit(), char(';'))
        parsing = many(pair).run("1;2;3")
        assert parsing.value == [[1, ord(';')], [2, ord(';')]]
        assert parsing.context.index == 4


class TestOptionalAndSeparated:
    def test_optional_present(self):
        assert optional(digit()).run("5").value == 5

    def test_optional_absent(self):
        parsing = optional(digit(), 0).run("x")
        assert parsing.value == 0
        assert parsing.context == TextContext()

    def test_separated_by(self):
        separator = spaces().then_drop(char(',')).then_drop(spaces())
        parsing = separated_by(digit(), separator).run("1, 2 ,3")
        assert parsing.value == [1, 2, 3]
        assert parsing.context.index == 7

    def test_separated_by_empty(self):
        assert separated_by(digit(), char(',')).run(")").value == []

    def test_separated_by_leaves_dangling_separator(self):
        parsing = separated_by(digit(), char(',')).run("1,2,")
        assert parsing.value == [1, 2]
        assert parsing.context.index == 3
