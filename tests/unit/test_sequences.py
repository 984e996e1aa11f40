"""Unit tests for lock-step sequence equality."""

import itertools
from typing import Iterator, List

import pytest

from spec_kitty_assertions import FailureKind, SequenceEqualError, assert_sequence_equal
from spec_kitty_assertions.sequences import compare_sequences


class CountingIterable:
    """Iterable that records how many elements have been pulled from it."""

    def __init__(self, items: Iterator[int]) -> None:
        self._items = items
        self.pulled = 0
        self.closed = False

    def __iter__(self) -> "CountingIterable":
        return self

    def __next__(self) -> int:
        value = next(self._items)
        self.pulled += 1
        return value

    def close(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Equal sequences
# ---------------------------------------------------------------------------


class TestEqualSequences:
    """Equal-length, pairwise-equal sequences pass."""

    def test_equal_lists(self) -> None:
        assert_sequence_equal([1, 2, 3], [1, 2, 3])

    def test_both_empty(self) -> None:
        assert_sequence_equal([], iter(()))

    def test_list_against_generator(self) -> None:
        assert_sequence_equal([0, 1, 4], (n * n for n in range(3)))

    def test_custom_equality(self) -> None:
        assert_sequence_equal(
            ["Alpha", "BETA"], ["alpha", "beta"], lambda e, a: e.lower() == a.lower()
        )

    def test_custom_equality_receives_expected_first(self) -> None:
        calls: List[tuple] = []

        def equality(expected: int, actual: int) -> bool:
            calls.append((expected, actual))
            return True

        assert_sequence_equal([1, 2], [10, 20], equality)
        assert calls == [(1, 10), (2, 20)]

    def test_none_equality_uses_default(self) -> None:
        assert_sequence_equal([1], [1], None)


# ---------------------------------------------------------------------------
# Element mismatches
# ---------------------------------------------------------------------------


class TestElementMismatch:
    """Sequences of equal length differing in an element."""

    def test_last_element_differs(self) -> None:
        with pytest.raises(SequenceEqualError) as exc_info:
            assert_sequence_equal([1, 2, 3], [1, 2, 4])
        error = exc_info.value
        assert error.kind is FailureKind.SEQUENCE_ELEMENT_MISMATCH
        assert error.index == 2
        assert error.expected == "1,2,3"
        assert error.actual == "1,2,4"
        assert error.expected_fully_drained is True
        assert error.actual_fully_drained is True

    def test_message(self) -> None:
        with pytest.raises(SequenceEqualError) as exc_info:
            assert_sequence_equal([1, 2, 3], [1, 2, 4])
        assert str(exc_info.value) == (
            "SequenceEqualError : SequenceEqual Assertion Failure\n"
            "Expected: 1,2,3\n"
            "Actual: 1,2,4"
        )

    def test_early_difference_marks_both_truncated(self) -> None:
        with pytest.raises(SequenceEqualError) as exc_info:
            assert_sequence_equal([1, 9, 3, 4], [1, 2, 3, 4])
        error = exc_info.value
        assert error.expected_items == [1, 9]
        assert error.actual_items == [1, 2]
        assert "Expected: 1,9,...\nActual: 1,2,..." in str(error)

    def test_custom_equality_mismatch(self) -> None:
        with pytest.raises(SequenceEqualError):
            assert_sequence_equal([1, 2], [1, 2], lambda e, a: False)

    def test_element_mismatch_is_assertion_error(self) -> None:
        with pytest.raises(AssertionError):
            assert_sequence_equal("ab", "ac")


# ---------------------------------------------------------------------------
# Length mismatches
# ---------------------------------------------------------------------------


class TestLengthMismatch:
    """Sequences that run out at different points."""

    def test_actual_longer(self) -> None:
        with pytest.raises(SequenceEqualError) as exc_info:
            assert_sequence_equal([1, 2], [1, 2, 3])
        error = exc_info.value
        assert error.kind is FailureKind.SEQUENCE_LENGTH_MISMATCH
        assert error.index == 2
        assert error.expected == "1,2"
        assert error.expected_fully_drained is True
        assert error.actual == "1,2"
        assert error.actual_fully_drained is False
        assert str(error).endswith("Expected: 1,2\nActual: 1,2,...")

    def test_expected_longer(self) -> None:
        with pytest.raises(SequenceEqualError) as exc_info:
            assert_sequence_equal([1, 2, 3, 4], [1, 2])
        error = exc_info.value
        assert error.expected_fully_drained is False
        assert error.actual_fully_drained is True
        assert str(error).endswith("Expected: 1,2,...\nActual: 1,2")

    def test_empty_expected(self) -> None:
        with pytest.raises(SequenceEqualError) as exc_info:
            assert_sequence_equal([], [1])
        assert str(exc_info.value).endswith("Expected: Empty Sequence\nActual: Empty Sequence,...")

    def test_empty_actual(self) -> None:
        with pytest.raises(SequenceEqualError) as exc_info:
            assert_sequence_equal([1], [])
        assert str(exc_info.value).endswith("Expected: Empty Sequence,...\nActual: Empty Sequence")


# ---------------------------------------------------------------------------
# Streaming behaviour
# ---------------------------------------------------------------------------


class TestStreaming:
    """Inputs are read lazily and closed afterwards."""

    def test_infinite_sequences_diverging_early(self) -> None:
        expected = itertools.count()
        actual = itertools.chain([0, 1, 99], itertools.count(3))
        with pytest.raises(SequenceEqualError) as exc_info:
            assert_sequence_equal(expected, actual)
        error = exc_info.value
        assert error.expected_items == [0, 1, 2]
        assert error.actual_items == [0, 1, 99]
        assert error.expected_fully_drained is False
        assert error.actual_fully_drained is False

    def test_finite_against_infinite(self) -> None:
        with pytest.raises(SequenceEqualError) as exc_info:
            assert_sequence_equal([0, 1, 2], itertools.count())
        assert exc_info.value.kind is FailureKind.SEQUENCE_LENGTH_MISMATCH
        assert exc_info.value.actual_fully_drained is False

    def test_reads_at_most_one_element_past_mismatch(self) -> None:
        expected = CountingIterable(iter(range(100)))
        actual = CountingIterable(iter([0, 1, -1] + list(range(3, 100))))
        with pytest.raises(SequenceEqualError):
            assert_sequence_equal(expected, actual)
        assert expected.pulled == 4
        assert actual.pulled == 4

    def test_iterators_closed_on_mismatch(self) -> None:
        expected = CountingIterable(iter([1]))
        actual = CountingIterable(iter([2]))
        with pytest.raises(SequenceEqualError):
            assert_sequence_equal(expected, actual)
        assert expected.closed and actual.closed

    def test_iterators_closed_on_success(self) -> None:
        expected = CountingIterable(iter([1]))
        actual = CountingIterable(iter([1]))
        assert_sequence_equal(expected, actual)
        assert expected.closed and actual.closed

    def test_generators_closed_when_equality_raises(self) -> None:
        finalized: List[str] = []

        def numbers() -> Iterator[int]:
            try:
                yield from range(10)
            finally:
                finalized.append("done")

        def equality(expected: int, actual: int) -> bool:
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            assert_sequence_equal(numbers(), numbers(), equality)
        assert finalized == ["done", "done"]

    def test_each_input_iterated_once(self) -> None:
        class OnceOnly:
            def __init__(self) -> None:
                self.iterations = 0

            def __iter__(self) -> Iterator[int]:
                self.iterations += 1
                return iter([1, 2])

        expected, actual = OnceOnly(), OnceOnly()
        with pytest.raises(SequenceEqualError):
            assert_sequence_equal(expected, actual, lambda e, a: e != 2)
        assert expected.iterations == 1
        assert actual.iterations == 1


class TestCompareSequences:
    def test_returns_none_when_equal(self) -> None:
        assert compare_sequences([1], [1]) is None

    def test_returns_snapshots_on_mismatch(self) -> None:
        result = compare_sequences(["a"], ["b"])
        assert result is not None
        kind, index, expected, actual = result
        assert kind is FailureKind.SEQUENCE_ELEMENT_MISMATCH
        assert index == 0
        assert (expected.items, expected.fully_drained) == (["a"], True)
        assert (actual.items, actual.fully_drained) == (["b"], True)
