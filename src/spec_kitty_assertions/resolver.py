"""Resolve which event on a target an assertion is about."""
from __future__ import annotations

import logging
from typing import Any, Callable, Union

from spec_kitty_assertions.events import EventDescriptor, EventHooks, get_event
from spec_kitty_assertions.models import UsageError
from spec_kitty_assertions.recorder import ADD_MARKER, REMOVE_MARKER, SubscriptionRecorder

logger = logging.getLogger("spec_kitty_assertions.resolver")

EventSelector = Union[str, EventHooks, Callable[[Any], Any]]


def event_name_from_subscription(target_type: type, subscriber: Callable[[Any], Any]) -> str:
    """Run *subscriber* against a stand-in of *target_type* and return the event name.

    *subscriber* must subscribe or unsubscribe a handler, e.g.
    ``lambda d: d.saved.subscribe(None)``.

    Raises:
        UsageError: If the last recorded call is not an event subscription or
            unsubscription.
    """
    recorder = SubscriptionRecorder(target_type)
    subscriber(recorder)

    call = recorder.recorded_call
    if call is None:
        raise UsageError(
            "Invocation must be an event subscription or unsubscription; "
            "no call was made on the target"
        )
    if call.startswith(ADD_MARKER):
        return call[len(ADD_MARKER):]
    if call.startswith(REMOVE_MARKER):
        return call[len(REMOVE_MARKER):]
    raise UsageError(
        f"Invocation must be an event subscription or unsubscription; got {call!r}"
    )


def resolve_event(target: Any, event: EventSelector) -> EventDescriptor:
    """Resolve *event* to a descriptor for an event on ``type(target)``.

    Args:
        target: The object expected to raise the event.
        event: An event name, an :class:`EventHooks` pair, or a callable
            that subscribes to (or unsubscribes from) the event on a
            stand-in for *target*.

    Returns:
        The resolved EventDescriptor.

    Raises:
        UsageError: If a subscriber callable performed no subscription.
        UnknownEventError: If the event is not declared on the target's type.
    """
    target_type = type(target)

    if isinstance(event, EventHooks):
        descriptor = EventDescriptor.for_hooks(target_type, event)
    elif isinstance(event, str):
        descriptor = EventDescriptor.for_event(target_type, get_event(target_type, event))
    elif callable(event):
        name = event_name_from_subscription(target_type, event)
        descriptor = EventDescriptor.for_event(target_type, get_event(target_type, name))
    else:
        raise UsageError(
            f"Cannot resolve an event from {type(event).__name__}; pass an event "
            f"name, EventHooks or a subscribing callable"
        )

    logger.debug("Resolved %r on %s", descriptor.name, target_type.__name__)
    return descriptor
