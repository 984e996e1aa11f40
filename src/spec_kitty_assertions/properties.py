"""Property-change notifications and the assertions built on them."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from spec_kitty_assertions.events import Event
from spec_kitty_assertions.models import (
    PropertyChangedError,
    PropertyDoesNotChangeError,
    UnknownPropertyError,
    UsageError,
)
from spec_kitty_assertions.raises import Trigger, attached, run_trigger
from spec_kitty_assertions.recorder import AttributeRecorder
from spec_kitty_assertions.resolver import resolve_event

logger = logging.getLogger("spec_kitty_assertions.properties")

PROPERTY_CHANGED = "property_changed"

PropertySelector = Union[str, property, Callable[[Any], Any]]


class PropertyChangedEventArgs(BaseModel):
    """Payload of a ``property_changed`` event."""

    model_config = ConfigDict(frozen=True)

    property_name: str = Field(
        ...,
        min_length=1,
        description="Name of the property whose value changed",
    )


class NotifyPropertyChanged:
    """Mixin for objects that announce property changes.

    Example:
        >>> class Document(NotifyPropertyChanged):
        ...     @property
        ...     def title(self) -> str:
        ...         return self._title
        ...
        ...     @title.setter
        ...     def title(self, value: str) -> None:
        ...         self._title = value
        ...         self.on_property_changed("title")
    """

    property_changed = Event(PropertyChangedEventArgs)

    def on_property_changed(self, property_name: str) -> None:
        self.property_changed.fire(PropertyChangedEventArgs(property_name=property_name))


def property_name_of(prop: PropertySelector, owner: Optional[type] = None) -> str:
    """Return the name of the property *prop* refers to.

    Args:
        prop: A property name, a ``property`` object (``Document.title``) or
            a callable reading the property (``lambda d: d.title``). For
            chained reads the last attribute wins.
        owner: Type the property belongs to; when given, the name must
            exist on it.

    Raises:
        UsageError: If a callable reads no attribute, or *prop* is not a
            supported selector.
        UnknownPropertyError: If *owner* has no attribute of that name.
    """
    if isinstance(prop, str):
        name = prop
    elif isinstance(prop, property):
        if prop.fget is None:
            raise UsageError("Cannot name a property that has no getter")
        name = prop.fget.__name__
    elif callable(prop):
        recorder = AttributeRecorder(owner)
        prop(recorder)
        recorded = recorder.recorded_attribute
        if recorded is None:
            raise UsageError("Property expression must read an attribute")
        name = recorded
    else:
        raise UsageError(
            f"Cannot resolve a property from {type(prop).__name__}; pass a name, "
            f"a property or a callable reading it"
        )

    if owner is not None and not hasattr(owner, name):
        raise UnknownPropertyError(owner, name)
    return name


def _resolve_property_name(obj: Any, prop: PropertySelector) -> str:
    name = property_name_of(prop)
    if not hasattr(type(obj), name) and name not in getattr(obj, "__dict__", {}):
        raise UnknownPropertyError(type(obj), name)
    return name


def _watch_property_changes(obj: Any, trigger: Trigger) -> List[Tuple[Any, Any]]:
    """Run *trigger* and return every (sender, args) pair ``property_changed`` fired with."""
    descriptor = resolve_event(obj, PROPERTY_CHANGED)
    changes: List[Tuple[Any, Any]] = []

    def handler(sender: Any, args: Any) -> None:
        changes.append((sender, args))

    with attached(obj, descriptor, handler):
        run_trigger(trigger)

    logger.debug("Observed %d property changes on %s", len(changes), type(obj).__name__)
    return changes


def assert_property_changed(obj: Any, prop: PropertySelector, trigger: Trigger) -> None:
    """Assert that *trigger* makes *obj* report a change to *prop*.

    Raises:
        PropertyChangedError: If no ``property_changed`` firing named the property.
        UnknownEventError: If *obj* declares no ``property_changed`` event.
        UnknownPropertyError: If *obj* has no such property.
    """
    name = _resolve_property_name(obj, prop)
    changes = _watch_property_changes(obj, trigger)
    if not any(getattr(args, "property_name", None) == name for _, args in changes):
        raise PropertyChangedError(name)


def assert_property_does_not_change(obj: Any, prop: PropertySelector, trigger: Trigger) -> None:
    """Assert that *trigger* does not make *obj* report a change to *prop*.

    Changes reported for other properties, or with a different sender, are
    ignored.

    Raises:
        PropertyDoesNotChangeError: If *obj* reported a change to the property.
    """
    name = _resolve_property_name(obj, prop)
    changes = _watch_property_changes(obj, trigger)
    for sender, args in changes:
        if sender is obj and getattr(args, "property_name", None) == name:
            raise PropertyDoesNotChangeError(name)
