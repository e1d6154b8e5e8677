from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, NamedTuple, Optional, Tuple, Union

from gestured.core.config import (
    DEFAULT_TUNING, NO_TRIGGERS,
    PinchTriggers, PinchTuning, SwipeTuning, Tuning,
)
from gestured.core.types import (
    RawGestureEvent, GestureType,
    SwipeBegin, SwipeUpdate, SwipeEnd,
    PinchBegin, PinchUpdate, PinchEnd,
    SWIPE_EVENTS, PINCH_EVENTS,
    Swipe, Rotation, Pinch,
    SwipeDirection, RotationDirection, PinchDirection,
)

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    ACCUMULATING = "ACCUMULATING"
    EMITTED = "EMITTED"
    EARLY_FIRE = "EARLY_FIRE"
    RESIDUAL = "RESIDUAL"          # leftover of an early-fired pinch, dropped
    UNRECOGNIZED = "UNRECOGNIZED"
    CANCELLED = "CANCELLED"
    NO_BUILDER = "NO_BUILDER"      # update/end without a begin


# ============================================================
# Builders (immutable accumulators, one live per gesture kind)
# ============================================================

@dataclass(frozen=True)
class SwipeBuilder:
    fingers: int
    dx: float = 0.0
    dy: float = 0.0

    def add(self, dx: float, dy: float) -> "SwipeBuilder":
        return replace(self, dx=self.dx + dx, dy=self.dy + dy)


@dataclass(frozen=True)
class PinchBuilder:
    baseline: float
    scale: float
    dx: float = 0.0
    dy: float = 0.0
    angle: float = 0.0
    triggers: PinchTriggers = NO_TRIGGERS
    fired: int = 0

    @property
    def scale_delta(self) -> float:
        # positive when the fingers close (pinch in)
        return self.baseline - self.scale

    def add(self, dx: float, dy: float, angle: float, scale: float) -> "PinchBuilder":
        return replace(self, dx=self.dx + dx, dy=self.dy + dy, angle=self.angle + angle, scale=scale)


Builder = Union[SwipeBuilder, PinchBuilder]


class Step(NamedTuple):
    state: Optional[Builder]
    emitted: Tuple[GestureType, ...]
    outcome: Outcome
    # the builder as it was when the step finished with it (for diagnostics)
    builder: Optional[Builder] = None


# ============================================================
# Swipe
# ============================================================

def swipe_angle(dx: float, dy: float) -> float:
    """Absolute angle of the motion vector against the horizontal axis, 0..90."""
    if dx == 0:
        return 90.0
    return abs(math.degrees(math.atan(dy / dx)))


def swipe_direction(b: SwipeBuilder, tuning: SwipeTuning = DEFAULT_TUNING.swipe) -> Optional[SwipeDirection]:
    if b.fingers == tuning.horizontal_only_fingers:
        return SwipeDirection.RIGHT if b.dx > 0 else SwipeDirection.LEFT

    if b.dx == 0 and b.dy == 0:
        return None

    angle = swipe_angle(b.dx, b.dy)

    lo, hi = tuning.vertical_band
    if lo < angle < hi:
        return SwipeDirection.DOWN if b.dy > 0 else SwipeDirection.UP

    lo, hi = tuning.horizontal_band
    if lo < angle < hi:
        return SwipeDirection.RIGHT if b.dx > 0 else SwipeDirection.LEFT

    return None


def swipe_step(state: Optional[SwipeBuilder], event: RawGestureEvent,
               tuning: SwipeTuning = DEFAULT_TUNING.swipe) -> Step:
    if isinstance(event, SwipeBegin):
        b = SwipeBuilder(fingers=event.fingers)
        return Step(b, (), Outcome.ACCUMULATING, b)

    if state is None:
        return Step(None, (), Outcome.NO_BUILDER)

    if isinstance(event, SwipeUpdate):
        b = state.add(event.dx, event.dy)
        return Step(b, (), Outcome.ACCUMULATING, b)

    if isinstance(event, SwipeEnd):
        if event.cancelled:
            return Step(None, (), Outcome.CANCELLED, state)
        direction = swipe_direction(state, tuning)
        if direction is None:
            return Step(None, (), Outcome.UNRECOGNIZED, state)
        return Step(None, (Swipe(direction, state.fingers),), Outcome.EMITTED, state)

    raise TypeError(f"not a swipe event: {event!r}")


# ============================================================
# Pinch / rotation
# ============================================================

def pinch_gesture(b: PinchBuilder, tuning: PinchTuning = DEFAULT_TUNING.pinch) -> Optional[GestureType]:
    """Rotation wins over pinch whenever the accumulated angle is past the threshold."""
    limit = tuning.rotation_threshold_deg
    if b.angle > limit:
        return Rotation(RotationDirection.RIGHT, b.angle)
    if b.angle < -limit:
        return Rotation(RotationDirection.LEFT, b.angle)

    delta = b.scale_delta
    if delta > 0:
        return Pinch(PinchDirection.IN, b.scale)
    if delta < 0:
        return Pinch(PinchDirection.OUT, b.scale)
    return None


def _crossed_trigger(b: PinchBuilder, g: Pinch) -> bool:
    pinch_in = g.direction == PinchDirection.IN
    threshold = b.triggers.threshold_for(pinch_in)
    if threshold == 0:
        return False
    delta = b.scale_delta
    return delta >= threshold if pinch_in else delta <= -threshold


def pinch_step(state: Optional[PinchBuilder], event: RawGestureEvent,
               triggers: PinchTriggers = NO_TRIGGERS,
               tuning: PinchTuning = DEFAULT_TUNING.pinch) -> Step:
    if isinstance(event, PinchBegin):
        b = PinchBuilder(baseline=event.scale, scale=event.scale, triggers=triggers)
        return Step(b, (), Outcome.ACCUMULATING, b)

    if state is None:
        return Step(None, (), Outcome.NO_BUILDER)

    if isinstance(event, PinchUpdate):
        b = state.add(event.dx, event.dy, event.angle_delta, event.scale)
        g = pinch_gesture(b, tuning)
        if isinstance(g, Pinch) and _crossed_trigger(b, g):
            fired = replace(b, baseline=b.scale, fired=b.fired + 1)
            return Step(fired, (g,), Outcome.EARLY_FIRE, b)
        return Step(b, (), Outcome.ACCUMULATING, b)

    if isinstance(event, PinchEnd):
        b = state if event.scale is None else replace(state, scale=event.scale)
        if event.cancelled:
            return Step(None, (), Outcome.CANCELLED, b)
        g = pinch_gesture(b, tuning)
        if b.fired:
            # continuous zoom already fired; a partial step below the trigger is noise
            if g is None or (isinstance(g, Pinch) and b.triggers.threshold_for(g.direction == PinchDirection.IN)):
                return Step(None, (), Outcome.RESIDUAL, b)
        if g is None:
            return Step(None, (), Outcome.UNRECOGNIZED, b)
        return Step(None, (g,), Outcome.EMITTED, b)

    raise TypeError(f"not a pinch event: {event!r}")


# ============================================================
# Classifier
# ============================================================

class Classifier:
    """
    Deterministic gesture classifier.
    Converts RawGestureEvent -> list[GestureType]. Owns exactly one
    builder slot per gesture kind; all transitions go through the pure
    step functions above.

    `triggers` is asked for the pinch early-fire thresholds at every
    PinchBegin, so a configuration reload applies from the next pinch on.

    Once a pinch has fired early, its End emits nothing more for a
    direction that has a trigger: the leftover below the trigger is
    dropped (Outcome.RESIDUAL). A rotation still emits at End.
    """

    def __init__(self, tuning: Tuning = DEFAULT_TUNING,
                 triggers: Optional[Callable[[], PinchTriggers]] = None) -> None:
        self.tuning = tuning
        self._triggers = triggers or (lambda: NO_TRIGGERS)
        self.swipe: Optional[SwipeBuilder] = None
        self.pinch: Optional[PinchBuilder] = None

    @property
    def idle(self) -> bool:
        return self.swipe is None and self.pinch is None

    def reset(self) -> None:
        self.swipe = None
        self.pinch = None

    def feed(self, event: RawGestureEvent) -> list[GestureType]:
        if isinstance(event, SWIPE_EVENTS):
            if isinstance(event, SwipeBegin) and self.swipe is not None:
                logger.debug("swipe restarted before end, dropping %r", self.swipe)
            step = swipe_step(self.swipe, event, self.tuning.swipe)
            self.swipe = step.state
            kind = "swipe"
        elif isinstance(event, PINCH_EVENTS):
            triggers = self._triggers() if isinstance(event, PinchBegin) else NO_TRIGGERS
            if isinstance(event, PinchBegin) and self.pinch is not None:
                logger.debug("pinch restarted before end, dropping %r", self.pinch)
            step = pinch_step(self.pinch, event, triggers, self.tuning.pinch)
            self.pinch = step.state
            kind = "pinch"
        else:
            logger.debug("ignoring event %r", event)
            return []

        self._log(kind, event, step)
        return list(step.emitted)

    def _log(self, kind: str, event: RawGestureEvent, step: Step) -> None:
        o = step.outcome
        if o == Outcome.EMITTED or o == Outcome.EARLY_FIRE:
            for g in step.emitted:
                logger.debug("triggered gesture (%s): %r", o.value.lower(), g)
        elif o == Outcome.UNRECOGNIZED:
            logger.warning("unrecognized %s gesture: %r", kind, step.builder)
        elif o == Outcome.CANCELLED:
            logger.info("%s gesture cancelled: %r", kind, step.builder)
        elif o == Outcome.NO_BUILDER:
            logger.warning("no %s gesture in progress for %r", kind, event)
        elif o == Outcome.RESIDUAL:
            logger.debug("dropping pinch residual after %d early fires: %r", step.builder.fired, step.builder)
