"""
arithcomb Standard Library
Built-in math functions callable from expressions
Every function takes and returns floats with IEEE-754 results: no math errors are raised
"""

from types import MappingProxyType
from typing import Callable, Dict, List, Mapping
import math
import random

from error_handling import MissingBindingError
from utilities import (
  ieee_logarithm,
  ieee_rounding,
  ieee_unary,
  nan_propagating
)


# ============================================================================
# FUNCTIONS WITHOUT A MATH COUNTERPART
# ============================================================================

def arith_sign(x: float) -> float:
  """-1, 0 or 1 with the sign of x; nan stays nan and zeros keep their sign"""
  if math.isnan(x) or x == 0:
    return x
  return math.copysign(1.0, x)


def arith_avg(*values: float) -> float:
  """Arithmetic mean of the arguments; nan without arguments"""
  if not values:
    return math.nan
  return sum(values) / len(values)


def arith_rand() -> float:
  """Uniform random number in [0, 1)"""
  return random.random()


def arith_hypot(*values: float) -> float:
  """Euclidean norm of the arguments"""
  return math.hypot(*values)


def arith_abs(x: float) -> float:
  return math.fabs(x)


# ============================================================================
# FUNCTION REGISTRY
# ============================================================================

def make_builtin_function(name: str, func: Callable, type_signature: str = "") -> Dict:
  """Create a built-in function entry"""
  return {
      'type': 'builtin_function',
      'name': name,
      'func': func,
      'type_signature': type_signature
  }


UNARY = "Num -> Num"
VARIADIC = "Num... -> Num"

BUILTIN_FUNCTIONS: Mapping[str, Dict] = MappingProxyType({
    # Comparison and sign
    "min": make_builtin_function("min", nan_propagating(min, math.inf), VARIADIC),
    "max": make_builtin_function("max", nan_propagating(max, -math.inf), VARIADIC),
    "abs": make_builtin_function("abs", arith_abs, UNARY),
    "sign": make_builtin_function("sign", arith_sign, UNARY),

    # Exponentials and logarithms
    "exp": make_builtin_function("exp", ieee_unary(math.exp), UNARY),
    "log": make_builtin_function("log", ieee_logarithm(math.log), UNARY),
    "log10": make_builtin_function("log10", ieee_logarithm(math.log10), UNARY),
    "log2": make_builtin_function("log2", ieee_logarithm(math.log2), UNARY),
    "sqrt": make_builtin_function("sqrt", ieee_unary(math.sqrt), UNARY),

    # Rounding
    "ceil": make_builtin_function("ceil", ieee_rounding(math.ceil), UNARY),
    "floor": make_builtin_function("floor", ieee_rounding(math.floor), UNARY),

    # Miscellaneous
    "rand": make_builtin_function("rand", arith_rand, "-> Num"),
    "hypot": make_builtin_function("hypot", arith_hypot, VARIADIC),
    "avg": make_builtin_function("avg", arith_avg, VARIADIC),

    # Trigonometry
    "sin": make_builtin_function("sin", ieee_unary(math.sin), UNARY),
    "sinh": make_builtin_function("sinh", ieee_unary(math.sinh, odd=True), UNARY),
    "asin": make_builtin_function("asin", ieee_unary(math.asin), UNARY),
    "cos": make_builtin_function("cos", ieee_unary(math.cos), UNARY),
    "cosh": make_builtin_function("cosh", ieee_unary(math.cosh), UNARY),
    "acos": make_builtin_function("acos", ieee_unary(math.acos), UNARY),
    "tan": make_builtin_function("tan", ieee_unary(math.tan), UNARY),
    "tanh": make_builtin_function("tanh", ieee_unary(math.tanh), UNARY),
    "atan": make_builtin_function("atan", ieee_unary(math.atan), UNARY),
})


def get_builtin_function(name: str) -> Dict:
  """Get a built-in function by name"""
  if name in BUILTIN_FUNCTIONS:
    return BUILTIN_FUNCTIONS[name]
  else:
    raise MissingBindingError("function", name)


def list_builtin_functions() -> List[str]:
  """List all available built-in functions"""
  return list(BUILTIN_FUNCTIONS.keys())


if __name__ == "__main__":
  print("arithcomb Standard Library")
  print("=" * 30)
  print(f"Available functions: {len(BUILTIN_FUNCTIONS)}")
  for name, func in BUILTIN_FUNCTIONS.items():
    print(f"  {name}: {func['type_signature']}")
