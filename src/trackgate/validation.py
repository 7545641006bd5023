from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Iterator, Sequence, TypeVar, Union, overload

T = TypeVar("T")
U = TypeVar("U")


class FailureKind(str, Enum):
    EMPTY_INPUT = "empty_input"
    CONTENT_TYPE_MISMATCH = "content_type_mismatch"
    BODY_PARSE_ERROR = "body_parse_error"
    SCHEMA_VIOLATION = "schema_violation"
    FIELD_TYPE_ERROR = "field_type_error"
    EMPTY_EVENT_BATCH = "empty_event_batch"
    COERCION_FAILURE = "coercion_failure"
    UNSUPPORTED_API = "unsupported_api"


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str

    def __str__(self) -> str:
        return self.message


class NonEmptyList(Sequence[T]):
    """Immutable sequence that always holds at least one element."""

    __slots__ = ("_items",)

    def __init__(self, head: T, *tail: T) -> None:
        self._items: tuple[T, ...] = (head, *tail)

    @classmethod
    def from_iterable(cls, items: Iterable[T]) -> NonEmptyList[T] | None:
        collected = list(items)
        if not collected:
            return None
        return cls(*collected)

    @property
    def head(self) -> T:
        return self._items[0]

    @property
    def tail(self) -> tuple[T, ...]:
        return self._items[1:]

    def map(self, fn: Callable[[T], U]) -> NonEmptyList[U]:
        return NonEmptyList(*(fn(item) for item in self._items))

    def to_list(self) -> list[T]:
        return list(self._items)

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[T, ...]: ...

    def __getitem__(self, index):
        return self._items[index]

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, NonEmptyList):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"NonEmptyList{self._items!r}"


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T

    def map(self, fn: Callable[[T], U]) -> Valid[U]:
        return Valid(fn(self.value))

    def and_then(self, fn: Callable[[T], ValidationOutcome[U]]) -> ValidationOutcome[U]:
        return fn(self.value)


@dataclass(frozen=True)
class Invalid:
    failures: NonEmptyList[Failure]

    @property
    def messages(self) -> list[str]:
        return [failure.message for failure in self.failures]

    @property
    def kinds(self) -> list[FailureKind]:
        return [failure.kind for failure in self.failures]

    def map(self, fn: Callable[[Any], Any]) -> Invalid:
        return self

    def and_then(self, fn: Callable[[Any], Any]) -> Invalid:
        return self


ValidationOutcome = Union[Valid[T], Invalid]


def valid(value: T) -> Valid[T]:
    return Valid(value)


def invalid(kind: FailureKind, message: str) -> Invalid:
    return Invalid(NonEmptyList(Failure(kind, message)))


@dataclass
class FailureAccumulator(Generic[T]):
    """Collects every failure and every success before a single decision.

    Used for passes where one bad item must not hide the others. Fail-fast
    chaining goes through ``Valid.and_then`` instead.
    """

    successes: list[T] = field(default_factory=list)
    failures: list[Failure] = field(default_factory=list)

    def add(self, outcome: ValidationOutcome[T]) -> None:
        if isinstance(outcome, Invalid):
            self.failures.extend(outcome.failures)
        else:
            self.successes.append(outcome.value)

    def record(self, kind: FailureKind, message: str) -> None:
        self.failures.append(Failure(kind, message))

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def to_invalid(self) -> Invalid | None:
        failures = NonEmptyList.from_iterable(self.failures)
        return Invalid(failures) if failures is not None else None
