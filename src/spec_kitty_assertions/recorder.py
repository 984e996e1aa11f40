"""Recording stand-ins used to find out which member a test means.

Rather than naming an event or property as a string, a test performs a
normal-looking call against a stand-in, e.g. ``lambda d: d.saved.subscribe(None)``
or ``lambda d: d.title``, and the stand-in records what was touched.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from spec_kitty_assertions.events import declared_events

logger = logging.getLogger("spec_kitty_assertions.recorder")

ADD_MARKER = "add_"
REMOVE_MARKER = "remove_"


class _RecordingMember:
    """A callable stand-in member that records its name when called."""

    def __init__(self, recorder: "SubscriptionRecorder", name: str) -> None:
        self._recorder = recorder
        self._name = name

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self._recorder._record(self._name)
        return None


class _RecordingEvent:
    """Stand-in for a declared event; subscriptions are recorded, not applied."""

    def __init__(self, recorder: "SubscriptionRecorder", name: str) -> None:
        self._recorder = recorder
        self._name = name

    def subscribe(self, handler: Any = None) -> None:
        self._recorder._record(ADD_MARKER + self._name)

    def unsubscribe(self, handler: Any = None) -> None:
        self._recorder._record(REMOVE_MARKER + self._name)

    add = connect = subscribe
    remove = disconnect = unsubscribe

    def __iadd__(self, handler: Any) -> "_RecordingEvent":
        self.subscribe(handler)
        return self

    def __isub__(self, handler: Any) -> "_RecordingEvent":
        self.unsubscribe(handler)
        return self

    def __getattr__(self, name: str) -> _RecordingMember:
        if name.startswith("__"):
            raise AttributeError(name)
        return _RecordingMember(self._recorder, f"{self._name}.{name}")


class SubscriptionRecorder:
    """A stand-in shaped like *target_type* that records the last call made on it.

    ``isinstance(recorder, target_type)`` holds (``__class__`` reports the
    target type, as ``unittest.mock`` spec objects do). Only attributes the
    target type has are available; calling any of them records its name and
    returns ``None``. Declared events record ``add_<name>`` on subscription
    and ``remove_<name>`` on unsubscription.
    """

    def __init__(self, target_type: type) -> None:
        object.__setattr__(self, "_target_type", target_type)
        object.__setattr__(self, "_events", declared_events(target_type))
        object.__setattr__(self, "_last_call", None)

    @property  # type: ignore[misc]
    def __class__(self) -> type:  # noqa: D105
        return object.__getattribute__(self, "_target_type")

    @property
    def recorded_call(self) -> Optional[str]:
        """Name of the last call made against the recorder, if any."""
        return object.__getattribute__(self, "_last_call")

    def _record(self, name: str) -> None:
        logger.debug("Recorded call %s", name)
        object.__setattr__(self, "_last_call", name)

    def __getattr__(self, name: str) -> Any:
        target_type = object.__getattribute__(self, "_target_type")
        if name in object.__getattribute__(self, "_events"):
            return _RecordingEvent(self, name)
        if name.startswith("__") or name not in dir(target_type):
            raise AttributeError(
                f"{target_type.__name__} stand-in has no attribute {name!r}"
            )
        return _RecordingMember(self, name)

    def __setattr__(self, name: str, value: Any) -> None:
        # Writes (including the write-back of ``ev += handler``) are discarded.
        pass

    def __repr__(self) -> str:
        target_type = object.__getattribute__(self, "_target_type")
        return f"SubscriptionRecorder(target={target_type.__name__}, last={self.recorded_call})"


class AttributeRecorder:
    """A stand-in that records the name of the last attribute read from it."""

    def __init__(self, owner: Optional[type] = None) -> None:
        object.__setattr__(self, "_owner", owner)
        object.__setattr__(self, "_last_attribute", None)

    @property  # type: ignore[misc]
    def __class__(self) -> type:  # noqa: D105
        owner = object.__getattribute__(self, "_owner")
        return owner if owner is not None else AttributeRecorder

    @property
    def recorded_attribute(self) -> Optional[str]:
        return object.__getattribute__(self, "_last_attribute")

    def __getattr__(self, name: str) -> "AttributeRecorder":
        if name.startswith("__"):
            raise AttributeError(name)
        object.__setattr__(self, "_last_attribute", name)
        return self
