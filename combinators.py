"""
Parser combinator functions
Sequencing, alternation and repetition built on the core parser algebra
"""

from functools import reduce
from typing import Any

from outcome import Success
from parsing import Parser, Parsing, pure


def sequence(*parsers: Parser) -> Parser:
    """
    Applies parsers in sequence and groups the results into a list.

    Each parser continues from where the previous one stopped. The first
    failure aborts the whole sequence; no partial list is returned.
    """
    if not parsers:
        return pure([])
    return reduce(
        lambda parser, current: parser.flat_map(
            lambda mine: current.map(lambda theirs: mine + [theirs])),
        parsers[1:],
        parsers[0].map(lambda value: [value]))


def one_of(*parsers: Parser) -> Parser:
    """
    Chains alternatives with or_else.

    Every alternative runs against the original input. When all of them
    fail, the failure of the last alternative is the one reported.
    """
    if not parsers:
        raise ValueError("one_of requires at least one parser")
    return reduce(lambda parser, current: parser.or_else(current), parsers)


class ParserRepetition(Parser):
    """One or more repetitions of a parser, collected in source order"""

    def __init__(self, parser: Parser):
        super().__init__(parser.context_provider)
        self._parser = parser

    def parse(self, input: Any, context: Any) -> Parsing:
        outcome, rest, current = self._parser.parse(input, context)
        if not outcome.success:
            return Parsing(outcome, input, context)

        values = [outcome.value]
        while True:
            outcome, next_rest, next_context = self._parser.parse(rest, current)
            if not outcome.success:
                break
            values.append(outcome.value)
            rest, current = next_rest, next_context
        return Parsing(Success(values), rest, current)


def many1(parser: Parser) -> Parser:
    """
    Accepts one or more repetitions of parser and returns the list of values.

    Repetition stops at the first failure, which is discarded. A parser that
    succeeds without consuming input never stops repeating.
    """
    return ParserRepetition(parser)


def many(parser: Parser) -> Parser:
    """Accepts zero or more repetitions of parser; never fails"""
    return many1(parser).or_else(pure([]))


def optional(parser: Parser, default: Any = None) -> Parser:
    """Accepts parser or nothing, returning default in the latter case"""
    return parser.or_else(pure(default))


def separated_by(parser: Parser, separator: Parser) -> Parser:
    """Accepts zero or more occurrences of parser separated by separator"""
    def with_tail(first: Any) -> Parser:
        return many(separator.drop_then(parser)).map(
            lambda tail: [first] + tail)

    return parser.flat_map(with_tail).or_else(pure([]))
