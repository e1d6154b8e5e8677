import logging

from gestured.core.config import PinchTriggers
from gestured.core.errors import DispatchFailure
from gestured.core.settings import GestureActions
from gestured.core.types import (
    SwipeBegin, SwipeUpdate, SwipeEnd, PinchBegin, PinchUpdate, PinchEnd,
    Swipe, Pinch, SwipeDirection, PinchDirection,
)
from gestured.interpreter.state_machine import Classifier
from gestured.runtime.dispatcher import Dispatch, Dispatcher
from gestured.runtime.run_loop import GestureLoop


class FakeSender:
    def __init__(self, fail_on=()):
        self.sent = []
        self.fail_on = set(fail_on)

    def send(self, sequence):
        if sequence in self.fail_on:
            raise DispatchFailure(f"cannot send {sequence}")
        self.sent.append(sequence)


class ExplodingSender:
    def send(self, sequence):
        raise RuntimeError("boom")


def actions():
    return GestureActions.from_mapping({
        "swipe": {"up": {"3": "ctrl+t"}, "down": {"3": "ctrl+w"}},
        "pinch": {"in": "ctrl+minus"},
        "gesture": {"trigger": {"pinch": {"in": {"scale": 0.3}}}},
        "firefox": {"swipe": {"up": {"3": "ctrl+y"}}},
        "chrome": {"swipe": {"up": {"3": ""}}},
    })


def test_dispatch_outcomes(caplog):
    sender = FakeSender()
    d = Dispatcher(actions(), sender)
    up = Swipe(SwipeDirection.UP, 3)

    with caplog.at_level(logging.INFO):
        assert d.handle(up) == Dispatch.SENT
        assert d.handle(up, "firefox") == Dispatch.SENT
        assert d.handle(up, "chrome") == Dispatch.DISABLED
        assert d.handle(Swipe(SwipeDirection.LEFT, 4)) == Dispatch.UNCONFIGURED

    assert sender.sent == ["ctrl+t", "ctrl+y"]
    messages = [(r.levelno, r.message) for r in caplog.records]
    assert any(lvl == logging.INFO and "skipping gesture due to no action" in m for lvl, m in messages)
    assert any(lvl == logging.WARNING and "gesture not configured" in m for lvl, m in messages)


def test_dispatch_failure_is_logged_not_raised(caplog):
    d = Dispatcher(actions(), FakeSender(fail_on={"ctrl+t"}))
    with caplog.at_level(logging.ERROR):
        assert d.handle(Swipe(SwipeDirection.UP, 3)) == Dispatch.FAILED
    assert any(r.levelno == logging.ERROR for r in caplog.records)

    d = Dispatcher(actions(), ExplodingSender())
    assert d.handle(Swipe(SwipeDirection.UP, 3)) == Dispatch.FAILED


def test_loop_classifies_and_dispatches_in_order():
    a = actions()
    sender = FakeSender()
    apps = iter(["firefox", None])
    events = [
        SwipeBegin(3), SwipeUpdate(0.0, -50.0), SwipeEnd(),
        SwipeBegin(3), SwipeUpdate(1.0, 40.0), SwipeEnd(),
    ]
    loop = GestureLoop(events, Classifier(triggers=a.pinch_triggers), Dispatcher(a, sender), lambda: next(apps))
    assert loop.run() == 2
    assert sender.sent == ["ctrl+y", "ctrl+w"]


def test_loop_survives_failures_and_unrecognized_gestures():
    a = actions()
    sender = FakeSender(fail_on={"ctrl+t"})
    events = [
        SwipeEnd(),                                            # no builder
        SwipeBegin(3), SwipeUpdate(30.0, 30.0), SwipeEnd(),    # diagonal
        SwipeBegin(3), SwipeUpdate(0.0, -50.0), SwipeEnd(),    # dispatch fails
        SwipeBegin(3), SwipeUpdate(0.0, 50.0), SwipeEnd(),     # still handled
    ]
    loop = GestureLoop(events, Classifier(), Dispatcher(a, sender))
    assert loop.run() == 2
    assert sender.sent == ["ctrl+w"]


def test_loop_early_fire_uses_configured_trigger():
    a = actions()
    assert a.pinch_triggers() == PinchTriggers(pinch_in=0.3)
    sender = FakeSender()
    loop = GestureLoop([], Classifier(triggers=a.pinch_triggers), Dispatcher(a, sender))

    loop.step(PinchBegin(1.0))
    results = loop.step(PinchUpdate(0.0, 0.0, 0.0, 0.65))
    assert results == [(Pinch(PinchDirection.IN, 0.65), Dispatch.SENT)]
    loop.step(PinchUpdate(0.0, 0.0, 0.0, 0.3))
    loop.step(PinchEnd())
    assert sender.sent == ["ctrl+minus", "ctrl+minus"]


def test_loop_resets_classifier_after_unexpected_error():
    class BrokenApps:
        calls = 0

        def __call__(self):
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError("window lookup exploded")
            return None

    sender = FakeSender()
    events = [
        SwipeBegin(3), SwipeUpdate(0.0, -50.0), SwipeEnd(),
        SwipeBegin(3), SwipeUpdate(0.0, 50.0), SwipeEnd(),
    ]
    loop = GestureLoop(events, Classifier(), Dispatcher(actions(), sender), BrokenApps())
    loop.run()
    assert sender.sent == ["ctrl+w"]
