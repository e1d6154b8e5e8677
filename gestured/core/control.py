from __future__ import annotations
from dataclasses import dataclass, field
from threading import Lock
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class SharedSnapshot(Generic[T]):
    """
    Shared configuration plane.
    Holds one immutable value; readers take the whole value, the reloader
    swaps in a fully built replacement. Nobody mutates the value itself.
    """
    _value: T
    _lock: Lock = field(default_factory=Lock, repr=False)

    def get(self) -> T:
        with self._lock:
            return self._value

    def swap(self, value: T) -> None:
        with self._lock:
            self._value = value
