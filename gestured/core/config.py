"""
gestured: classifier tuning

Angles are in degrees, scales are libinput pinch scales (1.0 = fingers
as far apart as they were at begin).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SwipeTuning:
    # open interval: anything in here is a vertical swipe
    vertical_band: Tuple[float, float] = (75.0, 105.0)
    # open interval as well; a perfectly flat swipe (0°) is not classified
    horizontal_band: Tuple[float, float] = (0.0, 15.0)
    # some touchpads only report horizontal motion for two fingers
    horizontal_only_fingers: int = 2


@dataclass(frozen=True)
class PinchTuning:
    rotation_threshold_deg: float = 50.0


@dataclass(frozen=True)
class PinchTriggers:
    """
    Early-fire thresholds on the scale delta since the last baseline.
    0.0 disables early firing for that direction.
    """
    pinch_in: float = 0.0
    pinch_out: float = 0.0

    def threshold_for(self, pinch_in: bool) -> float:
        return self.pinch_in if pinch_in else self.pinch_out


@dataclass(frozen=True)
class Tuning:
    swipe: SwipeTuning = SwipeTuning()
    pinch: PinchTuning = PinchTuning()


DEFAULT_TUNING = Tuning()
NO_TRIGGERS = PinchTriggers()

# Reserved top-level configuration keys; anything else is an app namespace.
CONFIGURATION_PREFIXES = ("swipe", "rotation", "pinch", "gesture")

PINCH_IN_TRIGGER_KEY = "gesture.trigger.pinch.in.scale"
PINCH_OUT_TRIGGER_KEY = "gesture.trigger.pinch.out.scale"
