"""Failure kinds and exception types for spec-kitty-assertions."""
from enum import Enum
from typing import Any, Optional


class FailureKind(str, Enum):
    """Why an assertion failed."""

    SEQUENCE_LENGTH_MISMATCH = "sequence_length_mismatch"
    SEQUENCE_ELEMENT_MISMATCH = "sequence_element_mismatch"
    EVENT_RAISED_UNEXPECTEDLY = "event_raised_unexpectedly"
    EVENT_NOT_RAISED = "event_not_raised"
    PROPERTY_NOT_CHANGED = "property_not_changed"
    PROPERTY_CHANGED_UNEXPECTEDLY = "property_changed_unexpectedly"
    PAYLOAD_TYPE_MISMATCH = "payload_type_mismatch"


# Custom Exceptions
class SpecKittyAssertionsError(Exception):
    """Base exception for all library errors."""
    pass


class UsageError(SpecKittyAssertionsError, ValueError):
    """The assertion API was called incorrectly (a broken test, not a failed one)."""
    pass


class HandlerSignatureError(SpecKittyAssertionsError, TypeError):
    """A handler cannot accept the arguments its event passes."""
    pass


class UnknownEventError(SpecKittyAssertionsError, AttributeError):
    """No event with the requested name is declared on the type."""

    def __init__(self, owner: type, event_name: str, available: Any = ()) -> None:
        self.owner = owner
        self.event_name = event_name
        self.available = tuple(sorted(available))
        super().__init__(
            f"{owner.__name__} declares no event named {event_name!r}. "
            f"Declared events: {list(self.available)}"
        )


class UnknownPropertyError(SpecKittyAssertionsError, AttributeError):
    """No attribute with the requested name exists on the object."""

    def __init__(self, owner: type, property_name: str) -> None:
        self.owner = owner
        self.property_name = property_name
        super().__init__(
            f"{owner.__name__} has no property named {property_name!r}"
        )


class AssertionFailure(SpecKittyAssertionsError, AssertionError):
    """A custom assertion did not hold.

    Subclasses ``AssertionError`` so pytest reports it as a test failure
    rather than an error.
    """

    kind: Optional[FailureKind] = None

    def __init__(self, message: str, kind: Optional[FailureKind] = None) -> None:
        if kind is not None:
            self.kind = kind
        super().__init__(message)

    @classmethod
    def headline(cls, title: str) -> str:
        return f"{cls.__name__} : {title}"


class SequenceEqualError(AssertionFailure):
    """Raised when two sequences differ in length or in an element."""

    EMPTY_SEQUENCE_MESSAGE = "Empty Sequence"
    TRUNCATION_MARKER = ",..."
    SEQUENCE_SEPARATOR = ","

    def __init__(
        self,
        kind: FailureKind,
        index: int,
        expected_items: Any,
        expected_fully_drained: bool,
        actual_items: Any,
        actual_fully_drained: bool,
    ) -> None:
        self.index = index
        self.expected_items = list(expected_items)
        self.actual_items = list(actual_items)
        self.expected_fully_drained = expected_fully_drained
        self.actual_fully_drained = actual_fully_drained
        self.expected = self.SEQUENCE_SEPARATOR.join(str(i) for i in self.expected_items)
        self.actual = self.SEQUENCE_SEPARATOR.join(str(i) for i in self.actual_items)
        super().__init__(
            f"{self.headline('SequenceEqual Assertion Failure')}\n"
            f"Expected: {self._render(self.expected, expected_fully_drained)}\n"
            f"Actual: {self._render(self.actual, actual_fully_drained)}",
            kind,
        )

    @classmethod
    def _render(cls, joined: str, fully_drained: bool) -> str:
        text = joined if joined else cls.EMPTY_SEQUENCE_MESSAGE
        return text if fully_drained else text + cls.TRUNCATION_MARKER


class RaisesError(AssertionFailure):
    """Raised when an event assertion about raising is not met."""

    def __init__(
        self,
        event_owner: type,
        event_name: str,
        should_have_been_raised: bool,
        was_raised: bool,
    ) -> None:
        self.event_owner = event_owner
        self.event_name = event_name
        self.should_have_been_raised = should_have_been_raised
        self.was_raised = was_raised
        kind = (
            FailureKind.EVENT_NOT_RAISED
            if should_have_been_raised
            else FailureKind.EVENT_RAISED_UNEXPECTEDLY
        )
        super().__init__(
            f"{self.headline('Event Assertion Failure')}\n"
            f"The event {event_owner.__name__}.{event_name} "
            f"{'was raised' if was_raised else 'was not raised'} "
            f"when {'expected' if should_have_been_raised else 'not expected'}.",
            kind,
        )


class PayloadTypeError(AssertionFailure):
    """Raised when a captured event payload is not of the asserted type."""

    kind = FailureKind.PAYLOAD_TYPE_MISMATCH

    def __init__(self, event_name: str, expected_type: Any, payload: Any) -> None:
        self.event_name = event_name
        self.expected_type = expected_type
        self.payload = payload
        expected = (
            expected_type.__name__ if isinstance(expected_type, type) else repr(expected_type)
        )
        super().__init__(
            f"{self.headline('Event Payload Assertion Failure')}\n"
            f"The event {event_name} carried a {type(payload).__name__} payload "
            f"({payload!r}), which is not a {expected}."
        )


class PropertyChangedError(AssertionFailure):
    """Raised when code was expected to change a property but did not."""

    kind = FailureKind.PROPERTY_NOT_CHANGED

    def __init__(self, property_name: str) -> None:
        self.property_name = property_name
        super().__init__(
            f"PropertyChanged assertion failure: PropertyChanged event for "
            f"property {property_name} was not raised"
        )


class PropertyDoesNotChangeError(AssertionFailure):
    """Raised when code unexpectedly changes a property."""

    kind = FailureKind.PROPERTY_CHANGED_UNEXPECTEDLY

    def __init__(self, property_name: str) -> None:
        self.property_name = property_name
        super().__init__(
            f"PropertyDoesNotChange assertion failure: PropertyChanged event for "
            f"property {property_name} was raised"
        )
