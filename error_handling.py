"""
Error handling for expression parsing and evaluation
Parse failures become detailed, located error messages; evaluation errors are a separate family
"""

from typing import Any, Dict, List, Optional

from text_parsers import EOS


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"Parse error at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error, with a caret under the error column"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def describe_token(actual: str) -> str:
    """Describe what was found at the error location"""
    if actual == EOS:
        return "end of input"
    return f"'{actual}'"


def describe_expected(expected: str) -> str:
    """Describe what the parser was looking for; single characters are quoted"""
    if expected == EOS:
        return "end of input"
    if len(expected) == 1:
        return f"'{expected}'"
    return expected


def generate_suggestions(expected: str, got: str, source_text: str) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if got == EOS and source_text.count('(') > source_text.count(')'):
        suggestions.append("A '(' is never closed - add the missing ')'")

    if got == EOS and source_text.count('[') > source_text.count(']'):
        suggestions.append("A 'v[' reference is never closed - add the missing ']'")

    if expected == EOS and got == ')':
        suggestions.append("Remove the unmatched ')'")
    elif expected == EOS and got.strip():
        suggestions.append("Operators must be one of + - * / ^")

    if got == EOS and source_text.rstrip() and source_text.rstrip()[-1] in '+-*/^':
        suggestions.append("The expression ends with an operator - add its right operand")

    return suggestions


def enhance_parse_failure(error: Any, offset: Any, source_text: str) -> Dict:
    """
    Convert a text parse failure into an enhanced error dict

    Args:
        error: TextParseError with expected and actual fields
        offset: Offset where parsing stopped, used when the error has none
        source_text: Full parsed text
    """
    offset = getattr(error, 'offset', None) or offset
    got = describe_token(error.actual)
    expected = describe_expected(error.expected)

    return make_parse_error(
        message=f"expected {expected}, got {got}",
        location=offset.index,
        line=offset.row,
        column=offset.column,
        expected=[expected],
        got=got,
        context=get_context_lines(source_text, offset.row, offset.column),
        suggestions=generate_suggestions(error.expected, error.actual, source_text)
    )


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class ExpressionSyntaxError(Exception):
    """Raised when an expression source cannot be parsed"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        super().__init__(message)

    def __str__(self) -> str:
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions
        )
        return format_parse_error(error_dict)

    @classmethod
    def from_failure(cls, error: Any, offset: Any, source_text: str) -> 'ExpressionSyntaxError':
        """Build the exception from a parse failure and where it happened"""
        return cls(**enhance_parse_failure(error, offset, source_text))


class EvaluationError(Exception):
    """Base class for errors raised while evaluating a parsed expression"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingBindingError(EvaluationError):
    """A variable, function or external reference has no binding"""
    def __init__(self, kind: str, name: Any):
        self.kind = kind
        self.name = name
        super().__init__(f"Unbound {kind}: {name}")


class ArityError(EvaluationError):
    """A function was called with the wrong number of arguments"""
