"""
gestured: core contracts

Raw trackpad events flow in, discrete gestures flow out. Every other
module speaks in these types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


# ============================================================
# Event source → Classifier (libinput → Logic)
# ============================================================

@dataclass(frozen=True)
class SwipeBegin:
    fingers: int


@dataclass(frozen=True)
class SwipeUpdate:
    dx: float
    dy: float


@dataclass(frozen=True)
class SwipeEnd:
    cancelled: bool = False


@dataclass(frozen=True)
class PinchBegin:
    """libinput reports scale 1.0 at the start of every pinch."""
    scale: float = 1.0


@dataclass(frozen=True)
class PinchUpdate:
    dx: float
    dy: float
    angle_delta: float
    scale: float            # absolute, relative to the finger spread at begin


@dataclass(frozen=True)
class PinchEnd:
    scale: Optional[float] = None   # None = keep the last update's scale
    cancelled: bool = False


RawGestureEvent = Union[SwipeBegin, SwipeUpdate, SwipeEnd, PinchBegin, PinchUpdate, PinchEnd]

SWIPE_EVENTS = (SwipeBegin, SwipeUpdate, SwipeEnd)
PINCH_EVENTS = (PinchBegin, PinchUpdate, PinchEnd)


# ============================================================
# Classifier → Resolver / Dispatcher (Logic → Actions)
# ============================================================

class SwipeDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class RotationDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class PinchDirection(str, Enum):
    IN = "in"
    OUT = "out"


class Category(str, Enum):
    SWIPE = "swipe"
    ROTATION = "rotation"
    PINCH = "pinch"


@dataclass(frozen=True)
class Swipe:
    direction: SwipeDirection
    fingers: int

    category = Category.SWIPE

    def setting_key(self) -> str:
        return f"{self.category.value}.{self.direction.value}.{self.fingers}"


@dataclass(frozen=True)
class Rotation:
    direction: RotationDirection
    angle: float = 0.0

    category = Category.ROTATION

    def setting_key(self) -> str:
        return f"{self.category.value}.{self.direction.value}"


@dataclass(frozen=True)
class Pinch:
    direction: PinchDirection
    scale: float = 1.0

    category = Category.PINCH

    def setting_key(self) -> str:
        return f"{self.category.value}.{self.direction.value}"


GestureType = Union[Swipe, Rotation, Pinch]


def key_for_app(setting: str, app: Optional[str]) -> str:
    """`firefox` + `swipe.up.3` -> `firefox.swipe.up.3`; no app -> the global key."""
    if app is None:
        return setting
    return f"{app}.{setting}"
