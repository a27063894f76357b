"""
Text parsing context
Immutable source offsets (index, row, column) threaded through text parsers
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Offset:
    """Location in a text: 0-based code point index, 1-based row and column"""
    index: int = 0
    row: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"line {self.row}, column {self.column}"


@dataclass(frozen=True)
class TextContext:
    """Context passed between text parsers"""
    offset: Offset = Offset()

    def with_offset(self, index: int = 0, row: int = 0, column: int = 0) -> 'TextContext':
        """
        Returns a new context advanced by the given amounts.

        When rows are added the column restarts at 1 before adding column,
        so column is the length of the text after the last line break.
        """
        return TextContext(Offset(
            index=self.offset.index + index,
            row=self.offset.row + row,
            column=1 + column if row > 0 else self.offset.column + column
        ))

    @property
    def index(self) -> int:
        return self.offset.index

    def __str__(self) -> str:
        return str(self.offset)


def offset_of(text: str) -> dict:
    """Offset delta for consuming text, usable as with_offset(**delta)"""
    lines = text.split('\n')
    return {
        'index': len(text),
        'row': len(lines) - 1,
        'column': len(lines[-1])
    }
