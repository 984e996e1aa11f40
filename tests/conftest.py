"""Shared pytest fixtures for all tests."""
from dataclasses import dataclass
from typing import Any, List

import pytest

from spec_kitty_assertions import Event, NotifyPropertyChanged


@dataclass(frozen=True)
class SaveResult:
    ok: bool


class Document(NotifyPropertyChanged):
    """Sample event source used across the suite."""

    saved = Event(SaveResult)
    closed = Event(sender=True, payload=False)
    renamed = Event(str, sender=False)

    def __init__(self, title: str = "untitled") -> None:
        self._title = title
        self.save_count = 0

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        if value == self._title:
            return
        self._title = value
        self.renamed.fire(value)
        self.on_property_changed("title")

    @property
    def word_count(self) -> int:
        return len(self._title.split())

    def save(self, ok: bool = True) -> None:
        self.save_count += 1
        self.saved.fire(SaveResult(ok=ok))

    def close(self) -> None:
        self.closed.fire()

    def touch(self) -> None:
        """Does nothing observable."""


class SignalLike:
    """An emitter without Event descriptors (connect/disconnect callbacks)."""

    def __init__(self) -> None:
        self.listeners: List[Any] = []

    def connect(self, listener: Any) -> None:
        self.listeners.append(listener)

    def disconnect(self, listener: Any) -> None:
        self.listeners.remove(listener)

    def emit(self, sender: Any, payload: Any) -> None:
        for listener in list(self.listeners):
            listener(sender, payload)


@pytest.fixture
def document() -> Document:
    """A fresh Document with no subscribers."""
    return Document()


@pytest.fixture
def signal() -> SignalLike:
    """A fresh connect/disconnect emitter."""
    return SignalLike()
