"""
Raw gesture events from `libinput debug-events`.

Lines of interest look like:

 event9   GESTURE_SWIPE_BEGIN     +1.527s	3
 event9   GESTURE_SWIPE_UPDATE    +1.531s	3  7.31/ 1.27 ( 9.19/ 1.60 unaccelerated)
 event9   GESTURE_SWIPE_END       +1.640s	3 cancelled
 event9   GESTURE_PINCH_UPDATE    +3.010s	2  0.10/-0.20 ( 0.15/-0.30 unaccelerated)  0.87 @  2.51

Everything else (pointer motion, keys, hold gestures) is ignored.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections import deque
from typing import Iterable, Iterator, Optional, Sequence

from gestured.core.errors import EventSourceUnavailable
from gestured.core.types import (
    RawGestureEvent,
    SwipeBegin, SwipeUpdate, SwipeEnd,
    PinchBegin, PinchUpdate, PinchEnd,
)

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("libinput", "debug-events")

_NUM = r"[-+]?\d+(?:\.\d+)?"
_HEADER = re.compile(rf"GESTURE_(SWIPE|PINCH)_(BEGIN|UPDATE|END)\s+\+?{_NUM}s\s+(\d+)(.*)$")
_DELTA = re.compile(rf"({_NUM})/\s*({_NUM})")
_SCALE_ANGLE = re.compile(rf"({_NUM})\s*@\s*({_NUM})")


def parse_line(line: str) -> Optional[RawGestureEvent]:
    m = _HEADER.search(line)
    if not m:
        return None
    kind, phase, fingers, rest = m.group(1), m.group(2), int(m.group(3)), m.group(4)

    if phase == "BEGIN":
        return SwipeBegin(fingers=fingers) if kind == "SWIPE" else PinchBegin()

    if phase == "END":
        cancelled = "cancelled" in rest
        return SwipeEnd(cancelled=cancelled) if kind == "SWIPE" else PinchEnd(cancelled=cancelled)

    delta = _DELTA.search(rest)
    if not delta:
        logger.debug("malformed gesture update: %r", line)
        return None
    dx, dy = float(delta.group(1)), float(delta.group(2))

    if kind == "SWIPE":
        return SwipeUpdate(dx=dx, dy=dy)

    sa = _SCALE_ANGLE.search(rest)
    if not sa:
        logger.debug("pinch update without scale/angle: %r", line)
        return None
    return PinchUpdate(dx=dx, dy=dy, scale=float(sa.group(1)), angle_delta=float(sa.group(2)))


def events_from_lines(lines: Iterable[str]) -> Iterator[RawGestureEvent]:
    for line in lines:
        ev = parse_line(line)
        if ev is not None:
            yield ev


class LibinputEventSource:
    """
    Spawns `libinput debug-events` and yields gesture events until the
    process exits. Needs read access to /dev/input (group `input`).
    """

    def __init__(self, command: Sequence[str] = DEFAULT_COMMAND) -> None:
        self.command = tuple(command)
        self._proc: Optional[subprocess.Popen] = None

    def __iter__(self) -> Iterator[RawGestureEvent]:
        try:
            self._proc = subprocess.Popen(
                self.command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True, bufsize=1,
            )
        except OSError as e:
            raise EventSourceUnavailable(f"cannot start {' '.join(self.command)}: {e}") from e

        logger.info("listening to %s (pid %d)", " ".join(self.command), self._proc.pid)
        last = deque(maxlen=1)
        try:
            assert self._proc.stdout is not None
            yield from events_from_lines(self._watch(self._proc.stdout, last))
            status = self._proc.wait()
            if status:
                reason = f": {last[0].strip()}" if last else ""
                raise EventSourceUnavailable(f"{' '.join(self.command)} exited with status {status}{reason}")
        finally:
            self.close()

    @staticmethod
    def _watch(lines: Iterable[str], last: deque) -> Iterator[str]:
        # remember the last line; libinput prints its error there before exiting
        for line in lines:
            last.append(line)
            yield line

    def close(self) -> None:
        proc, self._proc = self._proc, None
        if proc is None or proc.poll() is not None:
            return
        proc.terminate()
        try:
            proc.wait(timeout=2)
        except subprocess.TimeoutExpired:
            proc.kill()
