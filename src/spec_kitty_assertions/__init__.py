"""
spec-kitty-assertions: Custom pytest assertions for events and lazy sequences.

This library adds assertions that plain ``assert`` cannot express directly:
that an event on an object is (or is not) raised by some test code, that an
object reports a property change, and that two lazily produced sequences are
equal without draining either one up front.

Example:
    >>> from spec_kitty_assertions import Event, assert_raises_with_payload
    >>> class Document:
    ...     saved = Event(dict)
    ...     def save(self) -> None:
    ...         self.saved.fire({"ok": True})
    >>> doc = Document()
    >>> assert_raises_with_payload(doc, lambda d: d.saved.subscribe(None), doc.save, dict)
    {'ok': True}

Events can be selected three ways:
    - a callable that subscribes to the event on a stand-in for the target
      (``lambda d: d.saved.subscribe(None)``),
    - the event's name (``"saved"``),
    - an explicit ``EventHooks(subscribe, unsubscribe)`` pair for objects
      that do not declare ``Event`` descriptors.
"""

__version__ = "1.0.0"

# Failure kinds and exceptions
from spec_kitty_assertions.models import (
    FailureKind,
    SpecKittyAssertionsError,
    UsageError,
    HandlerSignatureError,
    UnknownEventError,
    UnknownPropertyError,
    AssertionFailure,
    SequenceEqualError,
    RaisesError,
    PayloadTypeError,
    PropertyChangedError,
    PropertyDoesNotChangeError,
)

# Event declarations
from spec_kitty_assertions.events import (
    Event,
    BoundEvent,
    EventShape,
    EventHooks,
    EventDescriptor,
    declared_events,
    get_event,
)

# Probing and event resolution
from spec_kitty_assertions.probe import EventProbe
from spec_kitty_assertions.recorder import SubscriptionRecorder
from spec_kitty_assertions.resolver import resolve_event

# Event assertions
from spec_kitty_assertions.raises import (
    assert_raises,
    assert_does_not_raise,
    assert_raises_with_payload,
    probe_event,
)

# Sequence assertions
from spec_kitty_assertions.sequences import assert_sequence_equal

# Property-change assertions
from spec_kitty_assertions.properties import (
    PropertyChangedEventArgs,
    NotifyPropertyChanged,
    property_name_of,
    assert_property_changed,
    assert_property_does_not_change,
)

__all__ = [
    # Failure kinds and exceptions
    "FailureKind",
    "SpecKittyAssertionsError",
    "UsageError",
    "HandlerSignatureError",
    "UnknownEventError",
    "UnknownPropertyError",
    "AssertionFailure",
    "SequenceEqualError",
    "RaisesError",
    "PayloadTypeError",
    "PropertyChangedError",
    "PropertyDoesNotChangeError",
    # Event declarations
    "Event",
    "BoundEvent",
    "EventShape",
    "EventHooks",
    "EventDescriptor",
    "declared_events",
    "get_event",
    # Probing and event resolution
    "EventProbe",
    "SubscriptionRecorder",
    "resolve_event",
    # Event assertions
    "assert_raises",
    "assert_does_not_raise",
    "assert_raises_with_payload",
    "probe_event",
    # Sequence assertions
    "assert_sequence_equal",
    # Property-change assertions
    "PropertyChangedEventArgs",
    "NotifyPropertyChanged",
    "property_name_of",
    "assert_property_changed",
    "assert_property_does_not_change",
]
