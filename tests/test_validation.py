from __future__ import annotations

import pytest

from trackgate.validation import (
    Failure,
    FailureAccumulator,
    FailureKind,
    Invalid,
    NonEmptyList,
    Valid,
    invalid,
    valid,
)


def test_non_empty_list_cannot_be_built_empty() -> None:
    assert NonEmptyList.from_iterable([]) is None
    with pytest.raises(TypeError):
        NonEmptyList()  # type: ignore[call-arg]


def test_non_empty_list_behaves_like_a_sequence() -> None:
    items = NonEmptyList(1, 2, 3)

    assert items.head == 1
    assert items.tail == (2, 3)
    assert len(items) == 3
    assert list(items) == [1, 2, 3]
    assert items[-1] == 3
    assert items.map(lambda value: value * 10) == NonEmptyList(10, 20, 30)
    assert NonEmptyList.from_iterable(iter("ab")) == NonEmptyList("a", "b")


def test_and_then_short_circuits_on_first_failure() -> None:
    calls: list[str] = []

    def step(name: str):
        def run(value: int):
            calls.append(name)
            return valid(value + 1)

        return run

    outcome = valid(1).and_then(step("a")).and_then(lambda _: invalid(FailureKind.BODY_PARSE_ERROR, "bad")).and_then(
        step("b")
    )

    assert isinstance(outcome, Invalid)
    assert outcome.messages == ["bad"]
    assert calls == ["a"]


def test_map_only_touches_valid_outcomes() -> None:
    assert valid(2).map(lambda value: value * 2) == Valid(4)
    failed = invalid(FailureKind.EMPTY_INPUT, "empty")
    assert failed.map(lambda value: value * 2) is failed


def test_accumulator_keeps_every_failure_in_order() -> None:
    accumulator: FailureAccumulator[int] = FailureAccumulator()
    accumulator.add(valid(1))
    accumulator.add(invalid(FailureKind.FIELD_TYPE_ERROR, "first"))
    accumulator.record(FailureKind.FIELD_TYPE_ERROR, "second")
    accumulator.add(valid(2))

    assert accumulator.successes == [1, 2]
    assert accumulator.has_failures
    failed = accumulator.to_invalid()
    assert failed is not None
    assert failed.messages == ["first", "second"]


def test_accumulator_without_failures_has_no_invalid() -> None:
    accumulator: FailureAccumulator[int] = FailureAccumulator()
    accumulator.add(valid(1))

    assert accumulator.to_invalid() is None


def test_failure_renders_as_its_message() -> None:
    assert str(Failure(FailureKind.SCHEMA_VIOLATION, "$: [] is too short")) == "$: [] is too short"
