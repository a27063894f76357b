"""
Text parsers
Primitive parsers over strings that track line/column offsets
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Sequence, Union

from combinators import many
from outcome import Failure, Success
from parsing import Parser, Parsing
from text_context import Offset, TextContext, offset_of


EOS = '<eos>'

CP_ZERO = ord('0')
CP_NINE = ord('9')


@dataclass(frozen=True)
class TextParseError:
    """
    Error of a text parser: what was expected and what was found instead.

    offset records where the mismatch happened. It is not part of equality,
    so errors compare by their expected and actual tokens only.
    """
    expected: str
    actual: str = EOS
    offset: Optional[Offset] = field(default=None, compare=False)

    def __str__(self) -> str:
        actual = self.actual if self.actual == EOS else repr(self.actual)
        return f"expected {self.expected!r}, got {actual}"


def _observed(input: str, index: int) -> str:
    return input[index] if index < len(input) else EOS


class TextParser(Parser):
    """
    Base class for parsers over text.

    The input is the whole text and is never sliced; the TextContext says
    where parsing currently stands, so the rest of a text parse is always
    the original string.
    """

    def __init__(self):
        super().__init__(TextContext)


# ============================================================================
# PRIMITIVE PARSERS
# ============================================================================

class CharParser(TextParser):
    """Parses a single code point"""

    def __init__(self, code_point: int):
        super().__init__()
        self._code_point = code_point

    def parse(self, input: str, context: TextContext) -> Parsing:
        index = context.offset.index
        if index < len(input) and ord(input[index]) == self._code_point:
            advanced = context.with_offset(**offset_of(input[index]))
            return Parsing(Success(self._code_point), input, advanced)
        error = TextParseError(chr(self._code_point), _observed(input, index),
                               context.offset)
        return Parsing(Failure(error), input, context)

    def __repr__(self) -> str:
        return f"char({chr(self._code_point)!r})"


class StringParser(TextParser):
    """Parses a verbatim string and returns it"""

    def __init__(self, pattern: str):
        super().__init__()
        self._pattern = pattern

    def parse(self, input: str, context: TextContext) -> Parsing:
        index = context.offset.index
        if input.startswith(self._pattern, index):
            advanced = context.with_offset(**offset_of(self._pattern))
            return Parsing(Success(self._pattern), input, advanced)
        found = input[index:index + len(self._pattern)] or EOS
        error = TextParseError(self._pattern, found, context.offset)
        return Parsing(Failure(error), input, context)

    def __repr__(self) -> str:
        return f"string({self._pattern!r})"


class SatisfyParser(TextParser):
    """Parses a single character accepted by a predicate and returns it"""

    def __init__(self, predicate: Callable[[str], bool], expected: str):
        super().__init__()
        self._predicate = predicate
        self._expected = expected

    def parse(self, input: str, context: TextContext) -> Parsing:
        index = context.offset.index
        if index < len(input) and self._predicate(input[index]):
            advanced = context.with_offset(**offset_of(input[index]))
            return Parsing(Success(input[index]), input, advanced)
        error = TextParseError(self._expected, _observed(input, index), context.offset)
        return Parsing(Failure(error), input, context)


class DigitParser(TextParser):
    """Parses a single arabic digit and returns its value"""

    def parse(self, input: str, context: TextContext) -> Parsing:
        index = context.offset.index
        code_point = ord(input[index]) if index < len(input) else None
        if code_point is not None and CP_ZERO <= code_point <= CP_NINE:
            return Parsing(Success(code_point - CP_ZERO), input,
                           context.with_offset(index=1, column=1))
        error = TextParseError('0-9', _observed(input, index), context.offset)
        return Parsing(Failure(error), input, context)


class EOSParser(TextParser):
    """Succeeds only at the end of the input; never moves the offset"""

    def parse(self, input: str, context: TextContext) -> Parsing:
        index = context.offset.index
        if index >= len(input):
            return Parsing(Success(None), input, context)
        error = TextParseError(EOS, input[index], context.offset)
        return Parsing(Failure(error), input, context)


class PositionParser(TextParser):
    """Returns the current offset without consuming input"""

    def parse(self, input: str, context: TextContext) -> Parsing:
        return Parsing(Success(context.offset), input, context)


class FurthestFailureParser(TextParser):
    """
    Alternation over text parsers that reports the failure which got the
    furthest into the input, rather than the failure of the last alternative.
    Ties go to the earlier alternative.
    """

    def __init__(self, parsers: Sequence[Parser]):
        super().__init__()
        self._parsers = tuple(parsers)

    def parse(self, input: str, context: TextContext) -> Parsing:
        furthest = None
        for parser in self._parsers:
            parsing = parser.parse(input, context)
            if parsing.success:
                return parsing
            if furthest is None or _reach(parsing.error) > _reach(furthest):
                furthest = parsing.error
        return Parsing(Failure(furthest), input, context)


def _reach(error: TextParseError) -> int:
    offset = getattr(error, 'offset', None)
    return offset.index if offset is not None else -1


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def char(c: Union[str, int]) -> Parser:
    """Creates a parser for a single character, given as a string or code point"""
    if isinstance(c, str):
        if len(c) != 1:
            raise ValueError(f"char expects a single character, got {c!r}")
        c = ord(c)
    return CharParser(c)


def string(s: str) -> Parser:
    """Creates a parser for a verbatim string"""
    return StringParser(s)


def satisfy(predicate: Callable[[str], bool], expected: str) -> Parser:
    """Creates a parser for one character matching predicate"""
    return SatisfyParser(predicate, expected)


@Parser.of
def digit() -> Parser:
    """Parser for a single arabic digit (0-9), returning its integer value"""
    return DigitParser()


@Parser.of
def letter() -> Parser:
    """Parser for a single letter, returning the character"""
    return satisfy(str.isalpha, 'letter')


@Parser.of
def alphanumeric() -> Parser:
    """Parser for a single letter or digit, returning the character"""
    return (letter()
            .or_else(digit().map(str))
            .map_error(lambda e: replace(e, expected='letter or digit')))


@Parser.of
def eos() -> Parser:
    """Parser that matches the end of the input"""
    return EOSParser()


@Parser.of
def spaces() -> Parser:
    """Parser for any number of spaces, returning the consumed text"""
    return many(char(' ')).map(lambda code_points: ''.join(map(chr, code_points)))


@Parser.of
def position() -> Parser:
    """Parser returning the current Offset, consuming nothing"""
    return PositionParser()


def furthest_of(*parsers: Parser) -> Parser:
    """
    Tries each parser on the same input and returns the first success.

    On failure the reported error is the one located furthest into the
    input, which usually names the real mistake inside a half-matched
    alternative.
    """
    if not parsers:
        raise ValueError("furthest_of requires at least one parser")
    return FurthestFailureParser(parsers)
