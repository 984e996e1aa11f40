"""Assertions that an event is (or is not) raised by a piece of test code.

Example:
    >>> doc = Document()
    >>> assert_raises(doc, lambda d: d.saved.subscribe(None), doc.save)
    >>> result = assert_raises_with_payload(doc, "saved", doc.save, SaveResult)
    >>> assert_does_not_raise(doc, "saved", lambda: None)
"""
from __future__ import annotations

import inspect
import logging
import types
import typing
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Tuple, TypeVar, overload

from pydantic import ConfigDict, PydanticUserError, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from spec_kitty_assertions.events import EventDescriptor, Handler
from spec_kitty_assertions.models import PayloadTypeError, RaisesError, UsageError
from spec_kitty_assertions.probe import EventProbe
from spec_kitty_assertions.resolver import EventSelector, resolve_event

logger = logging.getLogger("spec_kitty_assertions.raises")

TPayload = TypeVar("TPayload")

Trigger = Callable[[], Any]


@contextmanager
def attached(target: Any, descriptor: EventDescriptor, handler: Handler) -> Iterator[None]:
    """Keep *handler* subscribed to the described event for the ``with`` block.

    The handler is detached on every exit path, including when the block raises.
    If detaching fails while the block's own exception is propagating, the
    detach error is logged and the block's exception is re-raised.
    """
    descriptor.add_handler(target, handler)
    try:
        yield
    except BaseException:
        try:
            descriptor.remove_handler(target, handler)
        except Exception:
            logger.debug(
                "Ignored error detaching %s from %s.%s",
                getattr(handler, "__name__", handler),
                descriptor.owner.__name__,
                descriptor.name,
                exc_info=True,
            )
        raise
    descriptor.remove_handler(target, handler)


def run_trigger(trigger: Trigger) -> None:
    """Invoke *trigger*, rejecting coroutine functions.

    Raises:
        UsageError: If *trigger* returned an awaitable.
    """
    result = trigger()
    if inspect.isawaitable(result):
        close = getattr(result, "close", None)
        if close is not None:
            close()
        raise UsageError(
            "Triggers must run synchronously; got an awaitable from "
            f"{getattr(trigger, '__name__', trigger)!r}"
        )


@contextmanager
def probe_event(target: Any, event: EventSelector) -> Iterator[EventProbe]:
    """Attach a fresh :class:`EventProbe` to an event for the ``with`` block.

    Example:
        >>> with probe_event(doc, "saved") as probe:
        ...     doc.save()
        >>> probe.fired
        True
    """
    descriptor = resolve_event(target, event)
    probe = EventProbe()
    with _probing(target, descriptor, probe):
        yield probe


@contextmanager
def _probing(target: Any, descriptor: EventDescriptor, probe: EventProbe) -> Iterator[None]:
    handler = probe.handler_for(descriptor.shape)
    logger.debug(
        "Attaching probe %s to %s.%s",
        probe.probe_id, descriptor.owner.__name__, descriptor.name,
    )
    with attached(target, descriptor, handler):
        try:
            yield
        finally:
            logger.debug(
                "Detaching probe %s from %s.%s (fired %d times)",
                probe.probe_id, descriptor.owner.__name__, descriptor.name, probe.fire_count,
            )


def _raises(
    target: Any,
    event: EventSelector,
    trigger: Trigger,
    expect_raised: bool,
) -> Tuple[EventDescriptor, EventProbe]:
    descriptor = resolve_event(target, event)
    probe = EventProbe()

    with _probing(target, descriptor, probe):
        run_trigger(trigger)

    if probe.fired != expect_raised:
        raise RaisesError(descriptor.owner, descriptor.name, expect_raised, probe.fired)

    return descriptor, probe


def assert_raises(target: Any, event: EventSelector, trigger: Trigger) -> None:
    """Assert that *trigger* raises *event* on *target* at least once.

    Args:
        target: The object raising the event.
        event: The event name, an EventHooks pair, or a callable subscribing
            to (or unsubscribing from) the event, e.g.
            ``lambda d: d.saved.subscribe(None)``.
        trigger: Zero-argument callable that should raise the event.

    Raises:
        RaisesError: If the event was not raised.
        UsageError: If *event* does not identify an event subscription.
        UnknownEventError: If the event does not exist on the target's type.
    """
    _raises(target, event, trigger, True)


def assert_does_not_raise(target: Any, event: EventSelector, trigger: Trigger) -> None:
    """Assert that *trigger* does not raise *event* on *target*.

    If *trigger* itself fails, its exception propagates after the probe
    is detached.

    Raises:
        RaisesError: If the event was raised.
    """
    _raises(target, event, trigger, False)


@overload
def assert_raises_with_payload(
    target: Any, event: EventSelector, trigger: Trigger, payload_type: type[TPayload]
) -> TPayload: ...


@overload
def assert_raises_with_payload(
    target: Any, event: EventSelector, trigger: Trigger, payload_type: Any = ...
) -> Any: ...


def assert_raises_with_payload(
    target: Any,
    event: EventSelector,
    trigger: Trigger,
    payload_type: Any = Any,
) -> Any:
    """Assert that *trigger* raises *event* and return the captured payload.

    When the event fires more than once, the last payload is returned.

    Args:
        payload_type: Expected payload type. Classes are checked with
            ``isinstance``; typing constructs such as ``Optional[X]`` or
            ``list[int]`` are validated strictly.

    Raises:
        RaisesError: If the event was not raised.
        PayloadTypeError: If the payload is not of *payload_type*.
        UsageError: If *payload_type* cannot be checked (for example an
            unresolvable forward reference).
    """
    descriptor, probe = _raises(target, event, trigger, True)
    check_payload_type(
        f"{descriptor.owner.__name__}.{descriptor.name}", probe.payload, payload_type
    )
    return probe.payload


def check_payload_type(event_name: str, payload: Any, payload_type: Any) -> None:
    """Raise PayloadTypeError unless *payload* is an instance of *payload_type*."""
    try:
        matches = _payload_matches(payload, payload_type)
    except PydanticValidationError as exc:
        raise PayloadTypeError(event_name, payload_type, payload) from exc
    if not matches:
        raise PayloadTypeError(event_name, payload_type, payload)


def _payload_matches(payload: Any, payload_type: Any) -> bool:
    if payload_type is Any:
        return True

    origin = typing.get_origin(payload_type)
    if origin is typing.Union or origin is types.UnionType:
        for option in typing.get_args(payload_type):
            try:
                if _payload_matches(payload, option):
                    return True
            except PydanticValidationError:
                continue
        return False

    if origin is None and isinstance(payload_type, type):
        return isinstance(payload, payload_type)

    try:
        adapter: TypeAdapter[Any] = TypeAdapter(
            payload_type, config=ConfigDict(arbitrary_types_allowed=True, strict=True)
        )
        adapter.validate_python(payload)
    except PydanticUserError as exc:
        # Unresolvable forward references and types pydantic has no schema for.
        raise UsageError(
            f"Cannot check event payloads against {payload_type!r}: {exc}"
        ) from exc
    return True
