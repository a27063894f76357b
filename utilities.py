"""
Utilities module for the arithmetic evaluator
IEEE-754 arithmetic helpers and argument validation shared by operators and built-ins
"""

from typing import Any, Callable, Sequence
import functools
import inspect
import math

from error_handling import ArityError


Number = float


# ==================== BINARY OPERATION FACTORIES ====================

def ieee_divide(x: Number, y: Number) -> Number:
  """
  Division with IEEE-754 results instead of ZeroDivisionError

  Examples:
    ieee_divide(1, 0) -> inf
    ieee_divide(-1, 0) -> -inf
    ieee_divide(0, 0) -> nan
  """
  try:
    return x / y
  except ZeroDivisionError:
    if math.isnan(x) or x == 0:
      return math.nan
    return math.copysign(math.inf, x) * math.copysign(1.0, y)


def _is_odd_integer(value: Number) -> bool:
  return float(value).is_integer() and value % 2 == 1


def ieee_power(base: Number, exponent: Number) -> Number:
  """
  Exponentiation with IEEE-754 results for overflow and domain errors

  Examples:
    ieee_power(10, 400) -> inf
    ieee_power(0, -1) -> inf
    ieee_power(-8, 1 / 3) -> nan
  """
  try:
    return math.pow(base, exponent)
  except OverflowError:
    if base < 0 and _is_odd_integer(exponent):
      return -math.inf
    return math.inf
  except ValueError:
    if base == 0:
      if math.copysign(1.0, base) < 0 and _is_odd_integer(exponent):
        return -math.inf
      return math.inf
    return math.nan


def binary_arithmetic_op(
  op: Callable[[Number, Number], Number],
  op_name: str
) -> Callable[[Number, Number], Number]:
  """
  Factory for binary arithmetic operations over floats

  Args:
    op: Python operator function (e.g., operator.add)
    op_name: Name used for the resulting function

  Returns:
    Function converting both operands to float before applying op

  Examples:
    add = binary_arithmetic_op(operator.add, "add")
    add(1, 2) -> 3.0
  """
  def arithmetic(x: Number, y: Number) -> Number:
    return op(float(x), float(y))

  arithmetic.__name__ = op_name
  return arithmetic


# ==================== UNARY FUNCTION FACTORIES ====================

def ieee_unary(func: Callable[[Number], Number], odd: bool = False) -> Callable[[Number], Number]:
  """
  Wraps a math function so domain errors give nan and overflows give infinity

  Args:
    func: Function of one float (e.g., math.exp)
    odd: Whether func is odd, so overflow keeps the sign of the argument

  Examples:
    ieee_unary(math.sqrt)(-1) -> nan
    ieee_unary(math.sinh, odd=True)(-1000) -> -inf
  """
  @functools.wraps(func)
  def wrapper(x: Number) -> Number:
    try:
      return func(x)
    except OverflowError:
      return math.copysign(math.inf, x) if odd else math.inf
    except ValueError:
      return math.nan

  return wrapper


def ieee_logarithm(func: Callable[[Number], Number]) -> Callable[[Number], Number]:
  """Logarithm returning -inf at zero and nan for negative arguments"""
  @functools.wraps(func)
  def wrapper(x: Number) -> Number:
    if x == 0:
      return -math.inf
    if math.isnan(x) or x < 0:
      return math.nan
    return func(x)

  return wrapper


def ieee_rounding(func: Callable[[Number], int]) -> Callable[[Number], Number]:
  """Rounding function that passes infinities and nan through unchanged"""
  @functools.wraps(func)
  def wrapper(x: Number) -> Number:
    if not math.isfinite(x):
      return x
    return float(func(x))

  return wrapper


def nan_propagating(func: Callable[..., Number], empty: Number) -> Callable[..., Number]:
  """
  Wraps a variadic reduction (min, max) so any nan argument gives nan

  Args:
    func: Reduction over its positional arguments
    empty: Result when called without arguments
  """
  @functools.wraps(func)
  def wrapper(*args: Number) -> Number:
    if not args:
      return empty
    if any(math.isnan(arg) for arg in args):
      return math.nan
    return float(func(args))

  return wrapper


# ==================== ERROR MESSAGE BUILDERS ====================

def arity_error(func_name: str, expected: str, got: int) -> ArityError:
  """
  Generate arity mismatch error

  Args:
    func_name: Function name
    expected: Description of the accepted arguments
    got: Actual number of arguments

  Returns:
    ArityError with formatted message
  """
  return ArityError(
    f"{func_name} requires {expected}, got {got} argument{'s' if got != 1 else ''}"
  )


def describe_parameters(func: Callable[..., Any]) -> str:
  """Human readable description of the positional arguments func accepts"""
  try:
    parameters = list(inspect.signature(func, follow_wrapped=False).parameters.values())
  except (TypeError, ValueError):
    return "a different number of arguments"

  if any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in parameters):
    return "any number of arguments"
  required = [p for p in parameters if p.default is inspect.Parameter.empty]
  if len(required) == len(parameters):
    count = len(parameters)
    return f"{count} argument{'s' if count != 1 else ''}"
  return f"{len(required)} to {len(parameters)} arguments"


# ==================== VALIDATION UTILITIES ====================

def validate_function_args(func_name: str, func: Callable[..., Any], args: Sequence[Number]) -> None:
  """
  Validate that func can be called with args

  Functions without an introspectable signature are not checked.

  Raises:
    ArityError if the arguments do not fit the signature
  """
  try:
    signature = inspect.signature(func, follow_wrapped=False)
  except (TypeError, ValueError):
    return

  try:
    signature.bind(*args)
  except TypeError:
    raise arity_error(func_name, describe_parameters(func), len(args)) from None
