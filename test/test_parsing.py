"""
Tests for the parser combinator core
"""

import pytest

from outcome import Failure, Success
from parsing import Parser, Parsing, defer, fail, pure
from text_context import Offset, TextContext
from text_parsers import TextParseError, char, digit, string


class TestOutcome:
    """Success and Failure values"""

    def test_success(self):
        outcome = Success(3)
        assert outcome.success
        assert outcome.value == 3

    def test_failure(self):
        outcome = Failure('boom')
        assert not outcome.success
        assert outcome.error == 'boom'

    def test_equality(self):
        assert Success(1) == Success(1)
        assert Success(1) != Failure(1)


class TestRun:
    """Running parsers with and without an explicit context"""

    def test_default_context_comes_from_provider(self):
        parsing = char('a').run("a")
        assert parsing.context == TextContext(Offset(1, 1, 2))

    def test_explicit_context_resumes_mid_input(self):
        start = TextContext(Offset(2, 1, 3))
        parsing = char('c').run("abc", start)
        assert parsing.value == ord('c')
        assert parsing.context.index == 3

    def test_parsing_properties(self):
        parsing = digit().run("x")
        assert not parsing.success
        assert parsing.value is None
        assert parsing.error == TextParseError('0-9', 'x')

    def test_parsing_is_a_tuple(self):
        outcome, rest, context = digit().run("5")
        assert outcome == Success(5)
        assert rest == "5"
        assert context.index == 1


class TestMap:
    def test_map_transforms_value(self):
        assert digit().map(lambda n: n * 2).run("4").value == 8

    def test_map_passes_failure_through(self):
        parsing = digit().map(lambda n: n * 2).run("x")
        assert parsing.error == TextParseError('0-9', 'x')
        assert parsing.context == TextContext()

    def test_map_error_transforms_error_only(self):
        parser = digit().map_error(lambda e: e.expected)
        assert parser.run("x").error == '0-9'
        assert parser.run("3").value == 3


class TestFlatMap:
    def test_flat_map_continues_after_first_parser(self):
        parser = digit().flat_map(lambda n: pure(n + 1))
        parsing = parser.run("4")
        assert parsing.value == 5
        assert parsing.context.index == 1

    def test_flat_map_reverts_on_second_failure(self):
        parser = char('a').flat_map(lambda _: char('b'))
        parsing = parser.run("ac")
        assert not parsing.success
        assert parsing.context == TextContext()
        assert parsing.error == TextParseError('b', 'c')

    def test_error_keeps_location_after_revert(self):
        parsing = char('a').drop_then(char('b')).run("ac")
        assert parsing.context.index == 0
        assert parsing.error.offset == Offset(1, 1, 2)

    def test_zip_reverts_when_second_fails(self):
        parsing = digit().zip(digit()).run("1x", TextContext())
        assert parsing.error == TextParseError('0-9', 'x')
        assert parsing.context == TextContext()

    def test_zip_pairs_values(self):
        assert digit().zip(digit()).run("12").value == (1, 2)

    def test_then_drop_and_drop_then(self):
        assert digit().then_drop(char(';')).run("1;").value == 1
        assert char('-').drop_then(digit()).run("-1").value == 1


class TestAlternation:
    def test_or_else_uses_fallback_on_original_input(self):
        parser = char('a').drop_then(char('b')) | char('a').drop_then(char('c'))
        parsing = parser.run("ac")
        assert parsing.value == ord('c')
        assert parsing.context.index == 2

    def test_or_else_keeps_first_success(self):
        assert (digit() | pure(-1)).run("7").value == 7

    def test_or_else_reports_fallback_failure(self):
        parsing = char('a').or_else(char('b')).run("c")
        assert parsing.error == TextParseError('b', 'c')

    def test_or_method_and_operator_agree(self):
        text = "q"
        assert char('a').or_else(char('q')).run(text) == (char('a') | char('q')).run(text)


class TestFilterAndContext:
    def test_filter_accepts(self):
        parser = digit().filter(lambda n: n > 4, lambda n: f"{n} too small")
        assert parser.run("7").value == 7

    def test_filter_rejects_and_reverts(self):
        parser = digit().filter(lambda n: n > 4, lambda n: f"{n} too small")
        parsing = parser.run("3")
        assert parsing.error == "3 too small"
        assert parsing.context == TextContext()

    def test_map_context_applies_on_success(self):
        parser = char('a').map_context(lambda c: c.with_offset(row=1))
        assert parser.run("a").context.offset == Offset(1, 2, 1)

    def test_map_context_leaves_failure_context(self):
        parser = char('a').map_context(lambda c: c.with_offset(row=1))
        assert parser.run("b").context == TextContext()

    def test_map_context_keeps_context_provider(self):
        parser = char('a').map_context(lambda c: c.with_offset(row=1))
        assert parser.context_provider() == TextContext()
        assert parser.run("a") == parser.run("a", TextContext())

    def test_transform_applies_function(self):
        doubled = digit().transform(lambda p: p.zip(p))
        assert doubled.run("12").value == (1, 2)


class TestConstants:
    def test_pure_consumes_nothing(self):
        parsing = pure(42).run("abc", TextContext())
        assert parsing == Parsing(Success(42), "abc", TextContext())

    def test_fail_consumes_nothing(self):
        parsing = fail('nope').run("abc", TextContext())
        assert parsing == Parsing(Failure('nope'), "abc", TextContext())

    def test_pure_without_provider_runs_with_none_context(self):
        assert pure(1).run("").context is None


class TestLazyRules:
    def test_of_memoizes_provider(self):
        calls = []

        @Parser.of
        def rule():
            calls.append(1)
            return string("ab")

        assert rule() is rule()
        assert len(calls) == 1

    def test_recursive_rule_through_defer(self):
        @Parser.of
        def depth():
            return (char('(').drop_then(defer(depth)).then_drop(char(')')).map(lambda d: d + 1)
                    | char('x').map(lambda _: 0))

        assert depth().run("(((x)))").value == 3

    def test_deferred_parser_provides_text_context(self):
        parser = defer(lambda: char('a'))
        assert parser.run("a").context == TextContext(Offset(1, 1, 2))
