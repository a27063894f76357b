"""
arithcomb - Main Entry Point
Evaluate arithmetic expressions from the command line or an interactive session
"""

import sys
import argparse
from typing import Dict, List, Optional
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from arithmetic import create_parser, pretty_print_expression, to_source
from error_handling import EvaluationError, ExpressionSyntaxError
from interpreter import evaluate
from stdlib import list_builtin_functions


VERSION = 'arithcomb 0.1.0'
HISTORY_FILE = "~/.arithcomb_history"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='arithcomb - arithmetic expressions built from parser combinators',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s "1 + 2 * 3"                  # Evaluate an expression
  %(prog)s -D x=2 "#x ^ 10"             # Bind a free variable
  %(prog)s --parse "(1 + 2) * max(3, 4)" # Show the expression tree
  %(prog)s -i                           # Interactive mode
  %(prog)s -i --debug                   # Interactive mode with debug
        """
  )

  parser.add_argument(
      'expressions',
      nargs='*',
      help='Expressions to evaluate'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Show the parsed expression tree instead of evaluating'
  )

  parser.add_argument(
      '-D', '--define',
      action='append',
      default=[],
      metavar='NAME=VALUE',
      help='Bind the free variable #NAME; VALUE may itself be an expression'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable parse and evaluation traces'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def parse_definitions(definitions: List[str], debug: bool = False) -> Dict[str, float]:
  """
  Evaluate NAME=VALUE definitions in order.

  Each value is an expression and may use the variables defined before it.

  Raises:
    ValueError if a definition has no '=' or an invalid name
  """
  parser = create_parser(debug)
  variables: Dict[str, float] = {}
  for definition in definitions:
    name, sep, source = definition.partition('=')
    name = name.strip().lstrip('#')
    if not sep or not name or not all(c.isalnum() or c == '_' for c in name):
      raise ValueError(f"Invalid definition '{definition}', expected NAME=VALUE")
    variables[name] = evaluate(parser.parse_expression(source), variables, debug=debug)
  return variables


def format_value(value: float) -> str:
  """Show integral results without a trailing .0"""
  if value.is_integer():
    return str(int(value))
  return str(value)


def run_expressions(expressions: List[str], variables: Dict[str, float],
                    show_tree: bool = False, debug: bool = False) -> int:
  """Evaluate (or just parse) each expression and print the results; returns the exit status"""
  parser = create_parser(debug)
  status = 0
  for source in expressions:
    try:
      expr = parser.parse_expression(source)
      if show_tree:
        print(to_source(expr))
        print(pretty_print_expression(expr), end='')
      else:
        print(format_value(evaluate(expr, variables, debug=debug)))
    except ExpressionSyntaxError as e:
      print(f"Error in '{source}':\n{e}", file=sys.stderr)
      status = 1
    except EvaluationError as e:
      print(f"Evaluation error in '{source}': {e.message}", file=sys.stderr)
      status = 1
  return status


def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  completions = list_builtin_functions() + [":parse", ":vars", ":let", ":help", "exit"]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(_write_history, history_file)


def _write_history(history_file: str) -> None:
  try:
    readline.write_history_file(history_file)
  except OSError:
    pass


def show_help() -> None:
  print("REPL Commands:")
  print("  <expr>              - Evaluate an expression")
  print("  :parse <expr>       - Show the parsed expression tree")
  print("  :let <name> = <expr> - Bind the free variable #name")
  print("  :vars               - Show bound variables")
  print("  :help               - Show this help")
  print("  exit                - Exit REPL")
  print()
  print("Syntax:")
  print("  1 + 2 * 3           - Operators + - * / ^ (^ binds tightest)")
  print("  #x                  - Free variable")
  print("  max(1, #x)          - Function call")
  print()
  print("Functions: " + ', '.join(list_builtin_functions()))


def process_line(code: str, parser, session_vars: Dict[str, float],
                 debug: bool = False) -> Optional[bool]:
  """
  Handle one line of interactive input.

  Returns False when the session should end, None otherwise. :let updates
  session_vars in place.
  """
  code = code.strip()
  if code in ("exit", "exit.", ":quit"):
    return False
  if not code:
    return None

  try:
    if code.startswith(":parse "):
      expr = parser.parse_expression(code[len(":parse "):])
      print("Expression tree:")
      print(pretty_print_expression(expr), end='')
    elif code == ":vars":
      if session_vars:
        for name, value in session_vars.items():
          print(f"  #{name} = {format_value(value)}")
      else:
        print("  (no variables bound)")
    elif code.startswith(":let "):
      name, sep, source = code[len(":let "):].partition('=')
      name = name.strip().lstrip('#')
      if not sep or not name:
        print("Usage: :let <name> = <expr>")
        return None
      value = evaluate(parser.parse_expression(source), session_vars, debug=debug)
      session_vars[name] = value
      print(f"Bound: #{name} = {format_value(value)}")
    elif code == ":help":
      show_help()
    elif code.startswith(":"):
      print(f"Unknown command: {code.split()[0]} (try :help)")
    else:
      expr = parser.parse_expression(code)
      print(f"=> {format_value(evaluate(expr, session_vars, debug=debug))}")
  except ExpressionSyntaxError as e:
    print(f"{e}")
  except EvaluationError as e:
    print(f"Evaluation error: {e.message}")
  return None


def run_interactive_mode(variables: Optional[Dict[str, float]] = None,
                         debug: bool = False) -> None:
  """Run an interactive evaluation session"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  parser = create_parser(debug)
  session_vars = dict(variables or {})

  while True:
    try:
      code = input("arith> ")
      if process_line(code, parser, session_vars, debug) is False:
        break
    except KeyboardInterrupt:
      print("\nGoodbye!")
      break
    except EOFError:
      print("\nGoodbye!")
      break
    except Exception as e:
      print(f"Unexpected error: {e}")
      if debug:
        import traceback
        traceback.print_exc()


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for arithcomb"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  try:
    variables = parse_definitions(args.define, debug=args.debug)
  except (ValueError, ExpressionSyntaxError, EvaluationError) as e:
    print(f"Error: {e}", file=sys.stderr)
    sys.exit(2)

  if args.expressions:
    status = run_expressions(args.expressions, variables, args.parse, args.debug)
    if args.interactive:
      run_interactive_mode(variables, debug=args.debug)
    sys.exit(status)

  if args.interactive or sys.stdin.isatty():
    run_interactive_mode(variables, debug=args.debug)
    return

  # Piped input: one expression per line
  sources = [line for line in sys.stdin.read().splitlines() if line.strip()]
  sys.exit(run_expressions(sources, variables, args.parse, args.debug))


if __name__ == "__main__":
  main()
