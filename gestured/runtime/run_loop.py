from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from gestured.core.types import GestureType, RawGestureEvent
from gestured.interpreter.state_machine import Classifier
from gestured.runtime.dispatcher import Dispatch, Dispatcher

logger = logging.getLogger(__name__)


def no_app() -> Optional[str]:
    return None


@dataclass
class GestureLoop:
    """
    Single-threaded pipeline: raw event -> classifier -> dispatch.
    Gestures emitted by one event are dispatched in order before the next
    event is read, so classification and dispatch never overlap.
    """
    source: Iterable[RawGestureEvent]
    classifier: Classifier
    dispatcher: Dispatcher
    app_provider: Callable[[], Optional[str]] = no_app

    handled: int = field(default=0, init=False)

    def step(self, event: RawGestureEvent) -> list[tuple[GestureType, Dispatch]]:
        results = []
        for gesture in self.classifier.feed(event):
            app = self.app_provider()
            results.append((gesture, self.dispatcher.handle(gesture, app)))
            self.handled += 1
        return results

    def run(self) -> int:
        """Runs until the source is exhausted. Returns the number of gestures handled."""
        for event in self.source:
            try:
                self.step(event)
            except Exception:
                # one bad event must not take the daemon down
                logger.exception("error while handling %r", event)
                self.classifier.reset()
        return self.handled
