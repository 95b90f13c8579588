"""Optional and fallible results.

`Maybe` marks values that may be absent (the current salary of a user with no
salary history). `Either` carries one store fetch's outcome: `Right(rows)` or
`Left(PersistenceError)`, so a failed sub-fetch can fall back to empty rows.
"""
from abc import ABC, abstractmethod
from typing import TypeVar, Generic

T = TypeVar('T')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):
    """Outcome of one fetch; `Left` holds the error, `Right` the rows."""

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self.error = error

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Left({self.error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self.error == other.error
