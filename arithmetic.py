"""
Arithmetic expressions
Expression model, operator table and the text grammar that builds expression trees
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Callable, NamedTuple, Tuple, Union
import math
import operator

from combinators import many1, one_of, optional, separated_by
from error_handling import ExpressionSyntaxError
from parsing import Parser, defer, pure
from text_parsers import (
    TextParseError,
    alphanumeric,
    char,
    digit,
    eos,
    furthest_of,
    position,
    spaces,
    string,
)
from utilities import binary_arithmetic_op, ieee_divide, ieee_power


# ============================================================================
# EXPRESSION MODEL
# ============================================================================

@dataclass(frozen=True)
class Number:
    """Numeric literal"""
    value: float


@dataclass(frozen=True)
class Variable:
    """Free variable written as #name"""
    name: str


@dataclass(frozen=True)
class ExternalRef:
    """Host-provided value written as v[index]; index is itself an expression"""
    index: 'Expression'


@dataclass(frozen=True)
class Call:
    """Function call name(arg, ...)"""
    name: str
    args: Tuple['Expression', ...] = ()


@dataclass(frozen=True)
class Operator:
    """
    Binary operation.

    grouped marks a node that was written inside parentheses. Precedence
    balancing never rotates into a grouped node, and the flag takes no part
    in equality.
    """
    op: str
    left: 'Expression'
    right: 'Expression'
    grouped: bool = field(default=False, compare=False)


Expression = Union[Number, Variable, ExternalRef, Call, Operator]


# ============================================================================
# OPERATORS
# ============================================================================

class OperatorSpec(NamedTuple):
    priority: int
    function: Callable[[float, float], float]


OPERATORS = MappingProxyType({
    '+': OperatorSpec(0, binary_arithmetic_op(operator.add, 'add')),
    '-': OperatorSpec(0, binary_arithmetic_op(operator.sub, 'sub')),
    '/': OperatorSpec(1, ieee_divide),
    '*': OperatorSpec(1, binary_arithmetic_op(operator.mul, 'mul')),
    '^': OperatorSpec(2, ieee_power),
})


class PartialOperation(NamedTuple):
    """An operator with its left operand, waiting for the right one"""
    op: str
    left: Expression


def binds_before(left: str, right: str) -> bool:
    """True when the operator on the left is applied before the one on its right"""
    return OPERATORS[left].priority >= OPERATORS[right].priority


def balance(partial: PartialOperation, right: Expression) -> Operator:
    """
    Attaches a parsed right-hand side to a partial operation.

    The right-hand side comes out of the grammar right-nested, so for
    1 * 2 + 3 it is (2 + 3). When the pending operator binds at least as
    tightly as the root of the right-hand side, the partial operation is
    pushed down into its leftmost operand instead, giving (1 * 2) + 3.
    Equal priorities therefore associate to the left.
    """
    if (isinstance(right, Operator) and not right.grouped
            and binds_before(partial.op, right.op)):
        return replace(right, left=balance(partial, right.left))
    return Operator(partial.op, partial.left, right)


# ============================================================================
# GRAMMAR
# ============================================================================

ATOM_EXPECTED = "number, variable, function call or '('"
OPERATOR_EXPECTED = f"operator ({', '.join(OPERATORS)})"


def _expecting(expected: str) -> Callable[[TextParseError], TextParseError]:
    return lambda error: replace(error, expected=expected)


@Parser.of
def sign() -> Parser:
    """Optional sign; a '-' may be followed by spaces"""
    return one_of(
        char('-').then_drop(spaces()).drop_then(pure(-1.0)),
        char('+').drop_then(pure(1.0)),
        pure(1.0))


@Parser.of
def digits() -> Parser:
    """One or more digits, returned as text"""
    return many1(digit()).map(lambda values: ''.join(map(str, values)))


@Parser.of
def fraction() -> Parser:
    return char('.').drop_then(digits()).map(lambda text: '.' + text)


@Parser.of
def exponent() -> Parser:
    return (char('e') | char('E')).drop_then(sign()).flat_map(
        lambda bit: digits().map(lambda text: ('e-' if bit < 0 else 'e') + text))


@Parser.of
def unsigned_number() -> Parser:
    """Decimal literal: 12, 12.5, .5, 1e3, 1.5e-3"""
    integral = digits().flat_map(
        lambda text: optional(fraction(), '').map(lambda tail: text + tail))
    return (integral | fraction()).flat_map(
        lambda mantissa: optional(exponent(), '').map(lambda tail: mantissa + tail)
    ).map(float)


@Parser.of
def number() -> Parser:
    """Signed decimal literal, returned as a float"""
    return (sign()
            .flat_map(lambda bit: unsigned_number().map(lambda value: bit * value))
            .map_error(_expecting('number')))


@Parser.of
def name() -> Parser:
    """Variable or function name: letters, digits and underscores"""
    return (many1(alphanumeric() | char('_').map(chr))
            .map(''.join)
            .map_error(_expecting('name')))


@Parser.of
def number_expression() -> Parser:
    return number().map(Number)


@Parser.of
def free_variable() -> Parser:
    return char('#').drop_then(name()).map(Variable)


@Parser.of
def external_reference() -> Parser:
    return (char('v')
            .drop_then(char('['))
            .drop_then(spaces())
            .drop_then(defer(expression))
            .then_drop(spaces())
            .then_drop(char(']'))
            .map(ExternalRef))


@Parser.of
def variable() -> Parser:
    """#name or v[expression]"""
    return furthest_of(free_variable(), external_reference())


@Parser.of
def argument_list() -> Parser:
    separator = spaces().then_drop(char(',')).then_drop(spaces())
    return (char('(')
            .drop_then(spaces())
            .drop_then(separated_by(defer(expression), separator))
            .then_drop(spaces())
            .then_drop(char(')'))
            .map(tuple))


@Parser.of
def function_call() -> Parser:
    return name().zip(argument_list()).map(lambda pair: Call(*pair))


@Parser.of
def parenthesized() -> Parser:
    def group(expr: Expression) -> Expression:
        return replace(expr, grouped=True) if isinstance(expr, Operator) else expr

    return (char('(')
            .drop_then(spaces())
            .drop_then(defer(expression))
            .then_drop(spaces())
            .then_drop(char(')'))
            .map(group))


@Parser.of
def atom() -> Parser:
    """
    A single operand: parenthesized expression, number, function call or
    variable. A failure at the very start of the operand is reported as a
    missing operand; deeper failures keep their own message.
    """
    alternatives = furthest_of(
        parenthesized(), number_expression(), function_call(), variable())

    def at(start):
        return alternatives.map_error(
            lambda error: replace(error, expected=ATOM_EXPECTED)
            if error.offset == start else error)

    return position().flat_map(at)


@Parser.of
def operator_symbol() -> Parser:
    return one_of(*map(string, OPERATORS)).map_error(_expecting(OPERATOR_EXPECTED))


def operation_tail(partial: PartialOperation) -> Parser:
    """Right-hand side of an operation, balanced against the pending operator"""
    return spaces().drop_then(expression()).map(lambda right: balance(partial, right))


@Parser.of
def expression() -> Parser:
    """
    Parser for an arithmetic expression.

    Equivalent to `operation | atom` with `operation := atom operator
    expression`, factored on the leading atom so that it is parsed once.
    """
    def continue_from(left: Expression) -> Parser:
        return optional(spaces().drop_then(operator_symbol())).flat_map(
            lambda op: pure(left) if op is None
            else operation_tail(PartialOperation(op, left)))

    return atom().flat_map(continue_from)


@Parser.of
def full_expression() -> Parser:
    """Expression spanning the whole input, surrounding spaces allowed"""
    return spaces().drop_then(expression()).then_drop(spaces()).then_drop(eos())


# ============================================================================
# PARSER FRONT END
# ============================================================================

class ExpressionParser:
    """Parses complete expression sources, raising on malformed input"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = full_expression()

    def parse_expression(self, text: str) -> Expression:
        """Parse a whole expression source into an expression tree"""
        if self.debug:
            print(f"Parsing: {text!r}")

        parsing = self.grammar.run(text)
        if not parsing.success:
            if self.debug:
                print(f"Parse failed: {parsing.error}")
            raise ExpressionSyntaxError.from_failure(
                parsing.error, parsing.context.offset, text)

        if self.debug:
            print(pretty_print_expression(parsing.value), end='')
        return parsing.value


def create_parser(debug: bool = False) -> ExpressionParser:
    """Create an expression parser"""
    return ExpressionParser(debug=debug)


def parse(source: str) -> Expression:
    """Parse source into an expression tree; raises ExpressionSyntaxError"""
    return create_parser().parse_expression(source)


# ============================================================================
# RENDERING
# ============================================================================

def format_number(value: float) -> str:
    """Source text for a number that parses back to the same value"""
    if math.isinf(value):
        return '-1e999' if value < 0 else '1e999'
    if value.is_integer():
        return str(int(value))
    return repr(value)


def to_source(expr: Expression) -> str:
    """Render an expression as fully parenthesized source text"""
    if isinstance(expr, Number):
        return format_number(expr.value)
    elif isinstance(expr, Variable):
        return f"#{expr.name}"
    elif isinstance(expr, ExternalRef):
        return f"v[{to_source(expr.index)}]"
    elif isinstance(expr, Call):
        return f"{expr.name}({', '.join(to_source(arg) for arg in expr.args)})"
    return f"({to_source(expr.left)} {expr.op} {to_source(expr.right)})"


def pretty_print_expression(expr: Expression, indent: int = 0) -> str:
    """Pretty print an expression tree for debugging"""
    prefix = "  " * indent
    if isinstance(expr, Number):
        return f"{prefix}Number({format_number(expr.value)})\n"
    elif isinstance(expr, Variable):
        return f"{prefix}Variable({expr.name})\n"
    elif isinstance(expr, ExternalRef):
        return f"{prefix}ExternalRef\n" + pretty_print_expression(expr.index, indent + 1)
    elif isinstance(expr, Call):
        result = f"{prefix}Call({expr.name})\n"
        for arg in expr.args:
            result += pretty_print_expression(arg, indent + 1)
        return result

    result = f"{prefix}Operator({expr.op})\n"
    result += pretty_print_expression(expr.left, indent + 1)
    result += pretty_print_expression(expr.right, indent + 1)
    return result
