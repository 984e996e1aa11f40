"""Event probe: a transient observer that records whether an event fired."""
from __future__ import annotations

import inspect
from typing import Any, Callable

from ulid import ULID

from spec_kitty_assertions.events import EventShape


class EventProbe:
    """Captures whether an event fired and the payload of its last firing.

    A probe is created fresh for one assertion and attached to exactly one
    event. If the event fires several times, ``fired`` stays true and
    ``payload`` holds the last firing's payload.
    """

    def __init__(self) -> None:
        self.probe_id = str(ULID())
        self.fired = False
        self.fire_count = 0
        self.sender: Any = None
        self.payload: Any = None

    def on_event(self, sender: Any, payload: Any) -> None:
        self.fired = True
        self.fire_count += 1
        self.sender = sender
        self.payload = payload

    def handler_for(self, shape: EventShape) -> Callable[..., None]:
        """Build a handler accepting exactly the arguments *shape* declares.

        The returned callable reports ``shape.parameter_names`` through
        ``inspect.signature`` so events that validate their handlers accept
        it, and forwards what it receives to :meth:`on_event`.
        """
        names = shape.parameter_names
        has_sender = shape.sender
        has_payload = shape.payload

        def handler(*args: Any) -> None:
            if len(args) != len(names):
                raise TypeError(
                    f"probe handler takes {len(names)} positional arguments "
                    f"({', '.join(names)}) but {len(args)} were given"
                )
            sender = args[0] if has_sender else None
            payload = args[-1] if has_payload else None
            self.on_event(sender, payload)

        handler.__signature__ = inspect.Signature(  # type: ignore[attr-defined]
            [
                inspect.Parameter(name, inspect.Parameter.POSITIONAL_OR_KEYWORD)
                for name in names
            ]
        )
        handler.__name__ = f"probe_{self.probe_id}"
        handler.__qualname__ = handler.__name__
        return handler

    def __repr__(self) -> str:
        """Human-readable representation."""
        return (
            f"EventProbe(id={self.probe_id[:8]}..., "
            f"fired={self.fired}, "
            f"count={self.fire_count})"
        )
