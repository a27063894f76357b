"""
arithcomb Interpreter
Tree-walking evaluation of parsed arithmetic expressions
Host bindings (variables, functions, external lookup) are passed in, never stored globally
"""

from collections import ChainMap
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional
import pykka

from arithmetic import (
  Call,
  Expression,
  ExternalRef,
  Number,
  OPERATORS,
  Operator,
  Variable,
  create_parser,
)
from error_handling import EvaluationError, ExpressionSyntaxError, MissingBindingError
from stdlib import BUILTIN_FUNCTIONS
from utilities import validate_function_args


Lookup = Callable[[float], float]


# ============================================================================
# DATA STRUCTURES
# ============================================================================

def make_runtime_env(
  variables: Optional[Mapping[str, float]] = None,
  functions: Optional[Mapping[str, Callable[..., float]]] = None,
  lookup: Optional[Lookup] = None
) -> Dict:
  """
  Create the evaluation environment.

  Host functions shadow built-ins of the same name.
  """
  builtins = {name: entry['func'] for name, entry in BUILTIN_FUNCTIONS.items()}
  return {
      'variables': MappingProxyType(dict(variables or {})),
      'functions': ChainMap(dict(functions or {}), builtins),
      'lookup': lookup
  }


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(expr: Expression, env: Dict, debug: bool = False) -> float:
  """Evaluate an expression node to a float"""
  if debug:
    print(f"Evaluating: {type(expr).__name__}")

  if isinstance(expr, Number):
    return eval_number(expr, env, debug)
  elif isinstance(expr, Variable):
    return eval_variable(expr, env, debug)
  elif isinstance(expr, ExternalRef):
    return eval_external_ref(expr, env, debug)
  elif isinstance(expr, Call):
    return eval_call(expr, env, debug)
  elif isinstance(expr, Operator):
    return eval_operation(expr, env, debug)
  else:
    raise EvaluationError(f"Unknown expression node: {expr!r}")


def eval_number(expr: Number, env: Dict, debug: bool = False) -> float:
  """Evaluate number literal"""
  return float(expr.value)


def eval_variable(expr: Variable, env: Dict, debug: bool = False) -> float:
  """Evaluate free variable by looking it up in the host bindings"""
  if expr.name not in env['variables']:
    raise MissingBindingError("variable", f"#{expr.name}")

  value = env['variables'][expr.name]

  if debug:
    print(f"  #{expr.name} = {value}")
  return float(value)


def eval_external_ref(expr: ExternalRef, env: Dict, debug: bool = False) -> float:
  """Evaluate the index expression, then ask the host lookup for the value"""
  index = eval_ast(expr.index, env, debug)
  lookup = env['lookup']
  if lookup is None:
    raise MissingBindingError("external reference", f"v[{index:g}]")

  value = float(lookup(index))
  if debug:
    print(f"  v[{index:g}] = {value}")
  return value


def eval_call(expr: Call, env: Dict, debug: bool = False) -> float:
  """Evaluate arguments left to right, then apply the named function"""
  func = env['functions'].get(expr.name)
  if func is None:
    raise MissingBindingError("function", expr.name)

  args = [eval_ast(arg, env, debug) for arg in expr.args]
  validate_function_args(expr.name, func, args)

  result = float(func(*args))
  if debug:
    print(f"  {expr.name}({', '.join(map(str, args))}) = {result}")
  return result


def eval_operation(expr: Operator, env: Dict, debug: bool = False) -> float:
  """Evaluate left operand, then right operand, then apply the operator"""
  spec = OPERATORS.get(expr.op)
  if spec is None:
    raise EvaluationError(f"Unknown operator: {expr.op}")

  left = eval_ast(expr.left, env, debug)
  right = eval_ast(expr.right, env, debug)
  result = spec.function(left, right)
  if debug:
    print(f"  {left} {expr.op} {right} = {result}")
  return result


def evaluate(
  expr: Expression,
  variables: Optional[Mapping[str, float]] = None,
  functions: Optional[Mapping[str, Callable[..., float]]] = None,
  lookup: Optional[Lookup] = None,
  debug: bool = False
) -> float:
  """
  Evaluate an expression tree.

  Args:
    expr: Parsed expression
    variables: Values of free variables (#name)
    functions: Extra functions, layered over the built-ins
    lookup: Host callback resolving v[index]; receives the index as a float
    debug: Print an evaluation trace

  Returns:
    The value as a float. Division by zero, overflow and math domain errors
    give inf, -inf or nan.

  Raises:
    MissingBindingError: unbound variable, unknown function or no lookup
    ArityError: wrong number of arguments for a function
  """
  env = make_runtime_env(variables, functions, lookup)
  return eval_ast(expr, env, debug)


def create_interpreter(debug: bool = False) -> Callable[..., float]:
  """
  Factory function returning an interpreter for expression sources.

  The returned function parses and evaluates a source string with the given
  host bindings.
  """
  parser = create_parser(debug)

  def interpret(source: str, variables=None, functions=None, lookup=None) -> float:
    expr = parser.parse_expression(source)
    return evaluate(expr, variables, functions, lookup, debug)

  return interpret


def create_debug_interpreter() -> Callable[..., float]:
  """Create an interpreter with debug output enabled"""
  return create_interpreter(debug=True)


# ============================================================================
# BATCH EVALUATION (Using Pykka)
# ============================================================================

class EvaluationActor(pykka.ThreadingActor):
  """
  Actor evaluating expression sources.

  All actors share the same grammar; parsers keep no per-parse state, so
  no coordination between actors is needed.
  """

  def __init__(self, interpreter: Callable[..., float], environment: Dict):
    super().__init__()
    self.interpreter = interpreter
    self.environment = environment

  def on_receive(self, message: Any) -> Any:
    """Evaluate message['source']; errors are returned, not raised"""
    try:
      return self.interpreter(message['source'], **self.environment)
    except (ExpressionSyntaxError, EvaluationError) as e:
      return e


def par_evaluate(
  sources: List[str],
  workers: int = 4,
  debug: bool = False,
  **environment: Any
) -> List[Any]:
  """
  Evaluate independent expression sources on a pool of actors.

  Args:
    sources: Expression sources
    workers: Number of actors; sources are dealt out round-robin
    debug: Print parse and evaluation traces
    environment: variables, functions and lookup passed to every evaluation

  Returns:
    One entry per source, in order: the float value, or the
    ExpressionSyntaxError / EvaluationError raised for that source.
  """
  if workers < 1:
    raise ValueError(f"workers must be at least 1, got {workers}")
  if not sources:
    return []

  interpreter = create_interpreter(debug)

  actors = [EvaluationActor.start(interpreter, environment)
            for _ in range(min(workers, len(sources)))]
  try:
    futures = [actors[i % len(actors)].ask({'source': source}, block=False)
               for i, source in enumerate(sources)]
    return pykka.get_all(futures)
  finally:
    for actor_ref in actors:
      actor_ref.stop()
