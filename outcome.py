"""
Parse outcomes
Success/failure values produced by every parser invocation
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union


V = TypeVar('V')
E = TypeVar('E')


@dataclass(frozen=True)
class Success(Generic[V]):
    """A parse step that accepted its input"""
    value: V

    @property
    def success(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"Success({self.value!r})"


@dataclass(frozen=True)
class Failure(Generic[E]):
    """A parse step that rejected its input"""
    error: E

    @property
    def success(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"Failure({self.error})"


Outcome = Union[Success[V], Failure[E]]
