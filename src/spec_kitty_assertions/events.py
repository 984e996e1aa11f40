"""Declarative events that objects expose and tests can subscribe to.

An :class:`Event` is declared in a class body and accessed per instance as a
:class:`BoundEvent`::

    class Document:
        saved = Event(SaveResult)

        def save(self) -> None:
            self.saved.fire(SaveResult(ok=True))

    doc = Document()
    doc.saved += on_saved          # or doc.saved.subscribe(on_saved)
    doc.saved -= on_saved

Objects that do not declare events (signals, callback lists, third-party
emitters) can still be probed through an explicit :class:`EventHooks` pair.
"""
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from spec_kitty_assertions.models import HandlerSignatureError, UnknownEventError, UsageError

logger = logging.getLogger("spec_kitty_assertions.events")

Handler = Callable[..., Any]

_MISSING: Any = object()


class EventShape(BaseModel):
    """The positional arguments an event passes to each handler.

    The default shape is ``(sender, payload)``; either argument can be
    switched off.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    sender: bool = Field(
        default=True,
        description="Whether handlers receive the object raising the event first",
    )
    payload: bool = Field(
        default=True,
        description="Whether handlers receive the event payload",
    )
    payload_type: Any = Field(
        default=Any,
        description="Declared type of the payload (documentation and assertions)",
    )

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        names: List[str] = []
        if self.sender:
            names.append("sender")
        if self.payload:
            names.append("payload")
        return tuple(names)

    @property
    def arity(self) -> int:
        return len(self.parameter_names)

    def check_handler(self, handler: Handler, event_name: str) -> None:
        """Raise HandlerSignatureError if *handler* cannot take this shape's arguments."""
        try:
            signature = inspect.signature(handler)
        except (TypeError, ValueError):
            # Some builtins expose no signature; accept them as-is.
            return
        try:
            signature.bind(*([None] * self.arity))
        except TypeError as exc:
            raise HandlerSignatureError(
                f"Handler {handler!r} cannot be subscribed to {event_name!r}: "
                f"handlers are called with ({', '.join(self.parameter_names)}) "
                f"but its signature is {signature} ({exc})"
            ) from exc


class BoundEvent:
    """An event bound to one instance, holding that instance's handlers."""

    def __init__(self, owner: Any, name: str, shape: EventShape) -> None:
        self._owner = owner
        self._name = name
        self._shape = shape
        self._handlers: List[Handler] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def shape(self) -> EventShape:
        return self._shape

    @property
    def handlers(self) -> Tuple[Handler, ...]:
        return tuple(self._handlers)

    def subscribe(self, handler: Optional[Handler]) -> None:
        """Add *handler*. Subscribing ``None`` does nothing."""
        if handler is None:
            logger.debug("Ignored None subscription to %s", self._name)
            return
        self._shape.check_handler(handler, self._name)
        self._handlers.append(handler)

    def unsubscribe(self, handler: Optional[Handler]) -> None:
        """Remove the most recently added handler equal to *handler*.

        Removing ``None`` or a handler that is not subscribed does nothing.
        """
        if handler is None:
            return
        for index in range(len(self._handlers) - 1, -1, -1):
            if self._handlers[index] == handler:
                del self._handlers[index]
                return
        logger.debug("Handler %r was not subscribed to %s", handler, self._name)

    add = connect = subscribe
    remove = disconnect = unsubscribe

    def __iadd__(self, handler: Optional[Handler]) -> "BoundEvent":
        self.subscribe(handler)
        return self

    def __isub__(self, handler: Optional[Handler]) -> "BoundEvent":
        self.unsubscribe(handler)
        return self

    def fire(self, payload: Any = _MISSING) -> None:
        """Invoke every subscribed handler with this event's arguments."""
        if self._shape.payload and payload is _MISSING:
            raise TypeError(f"Event {self._name!r} must be fired with a payload")
        if not self._shape.payload and payload is not _MISSING:
            raise TypeError(f"Event {self._name!r} carries no payload")

        args: List[Any] = []
        if self._shape.sender:
            args.append(self._owner)
        if self._shape.payload:
            args.append(payload)

        for handler in list(self._handlers):
            handler(*args)

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return (
            f"BoundEvent(name={self._name}, "
            f"owner={type(self._owner).__name__}, "
            f"handlers={len(self._handlers)})"
        )


class Event:
    """Descriptor declaring a named event on a class.

    Args:
        payload_type: Declared type of the payload handlers receive.
        sender: Pass the raising object as the first handler argument.
        payload: Pass a payload as the last handler argument.
        doc: Optional docstring for the event.
    """

    def __init__(
        self,
        payload_type: Any = Any,
        *,
        sender: bool = True,
        payload: bool = True,
        doc: Optional[str] = None,
    ) -> None:
        self.shape = EventShape(sender=sender, payload=payload, payload_type=payload_type)
        self.name = ""
        self.__doc__ = doc

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    @property
    def _storage_key(self) -> str:
        return f"_event_{self.name}"

    def _state(self, instance: Any) -> Dict[str, Any]:
        """Per-instance storage; handlers live in the instance ``__dict__``."""
        try:
            return instance.__dict__
        except AttributeError:
            raise UsageError(
                f"{type(instance).__name__} declares event {self.name!r} but its "
                f"instances have no __dict__; add '__dict__' to its __slots__"
            ) from None

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        state = self._state(instance)
        bound = state.get(self._storage_key)
        if bound is None:
            bound = BoundEvent(instance, self.name, self.shape)
            state[self._storage_key] = bound
        return bound

    def __set__(self, instance: Any, value: Any) -> None:
        # Augmented assignment (obj.ev += h) writes the bound event back.
        if value is not self._state(instance).get(self._storage_key):
            raise AttributeError(
                f"Cannot assign to event {self.name!r}; use += or subscribe()"
            )

    def __repr__(self) -> str:
        return f"Event(name={self.name}, shape={self.shape.parameter_names})"


def declared_events(cls: type) -> Dict[str, Event]:
    """Enumerate the events declared on *cls* and its bases, by name."""
    events: Dict[str, Event] = {}
    for klass in reversed(inspect.getmro(cls)):
        for name, member in vars(klass).items():
            if isinstance(member, Event):
                events[name] = member
            elif name in events:
                # A subclass attribute shadows the base event.
                del events[name]
    return events


def get_event(cls: type, name: str) -> Event:
    """Look up the event called *name* on *cls*.

    Raises:
        UnknownEventError: If *cls* declares no such event.
    """
    events = declared_events(cls)
    try:
        return events[name]
    except KeyError:
        raise UnknownEventError(cls, name, events.keys()) from None


@dataclass(frozen=True)
class EventHooks:
    """An explicit subscribe/unsubscribe pair for an event.

    Use this when the target does not declare :class:`Event` descriptors::

        EventHooks(signal.connect, signal.disconnect, name="changed")
    """

    subscribe: Callable[[Handler], Any]
    unsubscribe: Callable[[Handler], Any]
    name: str = "<event>"
    shape: EventShape = field(default_factory=EventShape)


class EventDescriptor(BaseModel):
    """A resolved event: where it lives, its shape and how to attach to it."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, description="Event name")
    owner: type = Field(..., description="Type declaring the event")
    shape: EventShape = Field(default_factory=EventShape)
    subscribe: Callable[[Any, Handler], Any] = Field(
        ..., description="Attach a handler to the event on a target instance"
    )
    unsubscribe: Callable[[Any, Handler], Any] = Field(
        ..., description="Detach a handler from the event on a target instance"
    )

    @classmethod
    def for_event(cls, owner: type, event: Event) -> "EventDescriptor":
        name = event.name
        return cls(
            name=name,
            owner=owner,
            shape=event.shape,
            subscribe=lambda target, handler: getattr(target, name).subscribe(handler),
            unsubscribe=lambda target, handler: getattr(target, name).unsubscribe(handler),
        )

    @classmethod
    def for_hooks(cls, owner: type, hooks: EventHooks) -> "EventDescriptor":
        return cls(
            name=hooks.name,
            owner=owner,
            shape=hooks.shape,
            subscribe=lambda _target, handler: hooks.subscribe(handler),
            unsubscribe=lambda _target, handler: hooks.unsubscribe(handler),
        )

    def add_handler(self, target: Any, handler: Handler) -> None:
        self.subscribe(target, handler)

    def remove_handler(self, target: Any, handler: Handler) -> None:
        self.unsubscribe(target, handler)

    def __repr__(self) -> str:
        return (
            f"EventDescriptor(name={self.name}, owner={self.owner.__name__}, "
            f"shape={self.shape.parameter_names})"
        )
