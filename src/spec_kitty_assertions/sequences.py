"""Lock-step equality assertion for lazily produced sequences."""
from __future__ import annotations

import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

from spec_kitty_assertions.models import FailureKind, SequenceEqualError

T = TypeVar("T")

_EXHAUSTED: Any = object()


@dataclass
class SequenceSnapshot(Generic[T]):
    """Elements read from one side of a comparison, in order."""

    items: List[T] = field(default_factory=list)
    fully_drained: bool = False


def _read(iterator: Iterator[T]) -> Any:
    return next(iterator, _EXHAUSTED)


def _has_more(iterator: Iterator[T]) -> bool:
    return _read(iterator) is not _EXHAUSTED


def _close(iterator: Iterator[Any]) -> None:
    close = getattr(iterator, "close", None)
    if close is not None:
        close()


def compare_sequences(
    expected: Iterable[T],
    actual: Iterable[T],
    equality: Optional[Callable[[T, T], bool]] = None,
) -> Optional[Tuple[FailureKind, int, SequenceSnapshot[T], SequenceSnapshot[T]]]:
    """Walk *expected* and *actual* in lock-step until they differ.

    Each element is buffered as it is read, so neither input is consumed
    beyond the first difference plus one element.

    Returns:
        ``None`` if the sequences are equal, otherwise
        ``(kind, index, expected_snapshot, actual_snapshot)``.
    """
    are_equal = equality if equality is not None else operator.eq
    expected_snapshot: SequenceSnapshot[T] = SequenceSnapshot()
    actual_snapshot: SequenceSnapshot[T] = SequenceSnapshot()

    expected_iter = iter(expected)
    actual_iter = iter(actual)
    try:
        index = 0
        while True:
            expected_item = _read(expected_iter)
            actual_item = _read(actual_iter)
            expected_done = expected_item is _EXHAUSTED
            actual_done = actual_item is _EXHAUSTED

            if expected_done and actual_done:
                return None

            if expected_done != actual_done:
                # The side that produced an element is known to hold more
                # than the common prefix; that element is not buffered.
                expected_snapshot.fully_drained = expected_done
                actual_snapshot.fully_drained = actual_done
                return (
                    FailureKind.SEQUENCE_LENGTH_MISMATCH,
                    index,
                    expected_snapshot,
                    actual_snapshot,
                )

            expected_snapshot.items.append(expected_item)
            actual_snapshot.items.append(actual_item)

            if not are_equal(expected_item, actual_item):
                expected_snapshot.fully_drained = not _has_more(expected_iter)
                actual_snapshot.fully_drained = not _has_more(actual_iter)
                return (
                    FailureKind.SEQUENCE_ELEMENT_MISMATCH,
                    index,
                    expected_snapshot,
                    actual_snapshot,
                )

            index += 1
    finally:
        _close(expected_iter)
        _close(actual_iter)


def assert_sequence_equal(
    expected: Iterable[T],
    actual: Iterable[T],
    equality: Optional[Callable[[T, T], bool]] = None,
) -> None:
    """Assert two sequences have equal length and pairwise-equal elements.

    Args:
        expected: The expected sequence. May be a generator or other
            single-pass iterable.
        actual: The actual sequence.
        equality: Element comparison called as ``equality(expected, actual)``.
            Defaults to ``==``.

    Raises:
        SequenceEqualError: On the first length or element difference. The
            message shows what was read from each side, followed by ``,...``
            for a side that still had elements left.

    Example:
        >>> assert_sequence_equal([1, 2], (n for n in range(1, 4)))
        Traceback (most recent call last):
        ...
        SequenceEqualError: SequenceEqualError : SequenceEqual Assertion Failure
        Expected: 1,2
        Actual: 1,2,...
    """
    mismatch = compare_sequences(expected, actual, equality)
    if mismatch is None:
        return

    kind, index, expected_snapshot, actual_snapshot = mismatch
    raise SequenceEqualError(
        kind,
        index,
        expected_snapshot.items,
        expected_snapshot.fully_drained,
        actual_snapshot.items,
        actual_snapshot.fully_drained,
    )
