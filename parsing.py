"""
Parser combinator core
Immutable parser values composed by mapping, binding, alternation and error mapping
"""

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Callable, Generic, NamedTuple, Optional, Tuple, TypeVar

from outcome import Failure, Outcome, Success


I = TypeVar('I')
O = TypeVar('O')
U = TypeVar('U')
E = TypeVar('E')
F = TypeVar('F')
C = TypeVar('C')

ContextProvider = Optional[Callable[[], Any]]

_DEFAULT_CONTEXT = object()


# ============================================================================
# DATA STRUCTURES
# ============================================================================

class Parsing(NamedTuple):
    """Result of running a parser: outcome, remaining input and context"""
    outcome: Outcome
    rest: Any
    context: Any

    @property
    def success(self) -> bool:
        return self.outcome.success

    @property
    def value(self) -> Any:
        """Parsed value, or None when the parser failed"""
        return self.outcome.value if self.outcome.success else None

    @property
    def error(self) -> Any:
        """Error payload, or None when the parser succeeded"""
        return None if self.outcome.success else self.outcome.error


class Parser(ABC, Generic[I, O, E, C]):
    """
    Basic parser.

    Type parameters are the input type (I), the parsed type (O), the error
    type (E) and the type of the context threaded through the parse (C).

    A parser is a description of a parsing strategy and never changes after
    construction: every run receives its input and context and returns a new
    context instead of updating shared state. On failure the returned
    context must be the one that was passed in.
    """

    def __init__(self, context_provider: ContextProvider = None):
        self._context_provider = context_provider

    @property
    def context_provider(self) -> ContextProvider:
        """Function creating the initial context for a top-level run"""
        return self._context_provider

    @abstractmethod
    def parse(self, input: I, context: C) -> Parsing:
        """Run the parser on an input with an explicit context"""

    def run(self, input: I, context: Any = _DEFAULT_CONTEXT) -> Parsing:
        """
        Run the parser on an input.

        Without a context, the parser's context provider creates a fresh one.
        Passing a context resumes parsing mid-stream or nests the run inside
        a surrounding parser.
        """
        if context is _DEFAULT_CONTEXT:
            provider = self.context_provider
            context = provider() if provider is not None else None
        return self.parse(input, context)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def map(self, f: Callable[[O], U]) -> 'Parser[I, U, E, C]':
        """Parser accepting the same input, with its value mapped by f"""
        return ParserMap(self, f)

    def flat_map(self, f: Callable[[O], 'Parser[I, U, F, C]']) -> 'Parser[I, U, Any, C]':
        """Monadic bind: run this parser, then the parser f builds from its value"""
        return ParserFlatMap(self, f)

    def or_else(self, fallback: 'Parser[I, U, F, C]') -> 'Parser[I, Any, F, C]':
        """Parser that retries with fallback on the original input if this one fails"""
        return ParserDisjunction(self, fallback)

    def __or__(self, fallback: 'Parser[I, U, F, C]') -> 'Parser[I, Any, F, C]':
        return self.or_else(fallback)

    def map_error(self, f: Callable[[E], F]) -> 'Parser[I, O, F, C]':
        """Parser with its error payload mapped by f"""
        return ParserMapError(self, f)

    def zip(self, other: 'Parser[I, U, F, C]') -> 'Parser[I, Tuple[O, U], Any, C]':
        """Runs other after this parser and pairs both values"""
        return self.flat_map(lambda mine: other.map(lambda theirs: (mine, theirs)))

    def then_drop(self, other: 'Parser[I, Any, F, C]') -> 'Parser[I, O, Any, C]':
        """Runs other after this parser, keeping this parser's value"""
        return self.flat_map(lambda value: other.map(lambda _: value))

    def drop_then(self, other: 'Parser[I, U, F, C]') -> 'Parser[I, U, Any, C]':
        """Runs other after this parser, keeping other's value"""
        return self.flat_map(lambda _: other)

    def filter(self, predicate: Callable[[O], bool],
               error: Callable[[O], E]) -> 'Parser[I, O, E, C]':
        """Parser that fails with error(value) when predicate rejects the value"""
        return ParserFilter(self, predicate, error)

    def map_context(self, f: Callable[[C], C]) -> 'Parser[I, O, E, C]':
        """Parser whose resulting context is mapped by f after a success"""
        return ParserMapContext(self, f)

    def transform(self, f: Callable[['Parser[I, O, E, C]'], 'Parser']) -> 'Parser':
        """Applies a parser-to-parser function to this parser"""
        return f(self)

    @staticmethod
    def of(provider: Callable[[], 'Parser']) -> Callable[[], 'Parser']:
        """
        Wraps a parser provider with memoization.

        The provider runs at most once; later calls return the cached parser.
        Grammar rules are written as memoized providers so that a rule can
        refer to itself (through flat_map or defer) without recursing while
        the grammar is being built.
        """
        return lru_cache(maxsize=None)(provider)


def _either_provider(first: Parser, second: Parser) -> ContextProvider:
    provider = first.context_provider
    return provider if provider is not None else second.context_provider


# ============================================================================
# COMBINATOR NODES
# ============================================================================

class ParserMap(Parser):
    """Functor mapping of a parser"""

    def __init__(self, parser: Parser, functor: Callable[[Any], Any]):
        super().__init__(parser.context_provider)
        self._parser = parser
        self._functor = functor

    def parse(self, input: Any, context: Any) -> Parsing:
        outcome, rest, result_context = self._parser.parse(input, context)
        if outcome.success:
            return Parsing(Success(self._functor(outcome.value)), rest, result_context)
        return Parsing(outcome, rest, result_context)


class ParserFlatMap(Parser):
    """Monadic binding of a parser to a parser-producing function"""

    def __init__(self, parser: Parser, functor: Callable[[Any], Parser]):
        super().__init__(parser.context_provider)
        self._parser = parser
        self._functor = functor

    def parse(self, input: Any, context: Any) -> Parsing:
        outcome, rest, result_context = self._parser.parse(input, context)
        if not outcome.success:
            return Parsing(outcome, input, context)
        parsing = self._functor(outcome.value).parse(rest, result_context)
        if not parsing.success:
            return Parsing(parsing.outcome, input, context)
        return parsing


class ParserDisjunction(Parser):
    """Alternation: the fallback runs on the original input when the first parser fails"""

    def __init__(self, parser: Parser, fallback: Parser):
        super().__init__(_either_provider(parser, fallback))
        self._parser = parser
        self._fallback = fallback

    def parse(self, input: Any, context: Any) -> Parsing:
        parsing = self._parser.parse(input, context)
        if parsing.outcome.success:
            return parsing
        return self._fallback.parse(input, context)


class ParserMapError(Parser):
    """Error mapping of a parser"""

    def __init__(self, parser: Parser, functor: Callable[[Any], Any]):
        super().__init__(parser.context_provider)
        self._parser = parser
        self._functor = functor

    def parse(self, input: Any, context: Any) -> Parsing:
        parsing = self._parser.parse(input, context)
        if parsing.outcome.success:
            return parsing
        return Parsing(Failure(self._functor(parsing.outcome.error)),
                       parsing.rest, parsing.context)


class ParserFilter(Parser):
    """Parser that rejects parsed values not matching a condition"""

    def __init__(self, parser: Parser, condition: Callable[[Any], bool],
                 error: Callable[[Any], Any]):
        super().__init__(parser.context_provider)
        self._parser = parser
        self._condition = condition
        self._error = error

    def parse(self, input: Any, context: Any) -> Parsing:
        parsing = self._parser.parse(input, context)
        if not parsing.outcome.success:
            return Parsing(parsing.outcome, input, context)
        if self._condition(parsing.outcome.value):
            return parsing
        return Parsing(Failure(self._error(parsing.outcome.value)), input, context)


class ParserMapContext(Parser):
    """Context mapping of a parser, applied on success only"""

    def __init__(self, parser: Parser, mapping: Callable[[Any], Any]):
        super().__init__(parser.context_provider)
        self._parser = parser
        self._mapping = mapping

    def parse(self, input: Any, context: Any) -> Parsing:
        outcome, rest, result_context = self._parser.parse(input, context)
        if outcome.success:
            return Parsing(outcome, rest, self._mapping(result_context))
        return Parsing(outcome, input, context)


class PureParser(Parser):
    """Parser that returns a value without consuming input"""

    def __init__(self, value: Any):
        super().__init__()
        self._value = value

    def parse(self, input: Any, context: Any) -> Parsing:
        return Parsing(Success(self._value), input, context)

    def __repr__(self) -> str:
        return f"pure({self._value!r})"


class ErrorParser(Parser):
    """Parser that always fails with the same error"""

    def __init__(self, error: Any):
        super().__init__()
        self._error = error

    def parse(self, input: Any, context: Any) -> Parsing:
        return Parsing(Failure(self._error), input, context)

    def __repr__(self) -> str:
        return f"fail({self._error!r})"


class DeferredParser(Parser):
    """Parser resolved from a provider the first time it runs"""

    def __init__(self, provider: Callable[[], Parser]):
        super().__init__()
        self._provider = provider

    @property
    def context_provider(self) -> ContextProvider:
        return lambda: _initial_context(self._provider())

    def parse(self, input: Any, context: Any) -> Parsing:
        return self._provider().parse(input, context)


def _initial_context(parser: Parser) -> Any:
    provider = parser.context_provider
    return provider() if provider is not None else None


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def pure(value: Any) -> Parser:
    """Creates a parser that always succeeds with value, consuming nothing"""
    return PureParser(value)


def fail(error: Any) -> Parser:
    """Creates a parser that always fails with error, consuming nothing"""
    return ErrorParser(error)


def defer(provider: Callable[[], Parser]) -> Parser:
    """
    Creates a parser that asks provider for the real parser when run.

    Combine with Parser.of so the provider builds the rule only once.
    """
    return DeferredParser(provider)
