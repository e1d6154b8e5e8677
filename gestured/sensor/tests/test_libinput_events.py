import pytest

from gestured.core.types import SwipeBegin, SwipeUpdate, SwipeEnd, PinchBegin, PinchUpdate, PinchEnd
from gestured.sensor.libinput_events import LibinputEventSource, events_from_lines, parse_line
from gestured.sensor.active_window import process_name


LOG = """\
-event9   DEVICE_ADDED            SynPS/2 Synaptics TouchPad        seat0 default group9  cap:pg
-event9   GESTURE_SWIPE_BEGIN     +1.527s\t3
 event9   GESTURE_SWIPE_UPDATE    +1.531s\t3  7.31/ 1.27 ( 9.19/ 1.60 unaccelerated)
 event9   GESTURE_SWIPE_UPDATE    +1.540s\t3 -2.50/-0.75 (-3.10/-0.90 unaccelerated)
 event9   POINTER_MOTION          +1.545s\t  1.00/  0.00 ( 1.20/  0.00 unaccelerated)
 event9   GESTURE_SWIPE_END       +1.640s\t3
 event9   GESTURE_PINCH_BEGIN     +3.000s\t2
 event9   GESTURE_PINCH_UPDATE    +3.010s\t2  0.10/-0.20 ( 0.15/-0.30 unaccelerated)  0.87 @  2.51
 event9   GESTURE_PINCH_END       +3.100s\t2 cancelled
 event9   GESTURE_HOLD_BEGIN      +4.000s\t3
"""


def test_parse_debug_events_log():
    events = list(events_from_lines(LOG.splitlines()))
    assert events == [
        SwipeBegin(3),
        SwipeUpdate(7.31, 1.27),
        SwipeUpdate(-2.5, -0.75),
        SwipeEnd(cancelled=False),
        PinchBegin(1.0),
        PinchUpdate(dx=0.1, dy=-0.2, angle_delta=2.51, scale=0.87),
        PinchEnd(scale=None, cancelled=True),
    ]


@pytest.mark.parametrize("line", [
    "",
    "event9   KEYBOARD_KEY  +1.0s  KEY_A (30) pressed",
    " event9   GESTURE_SWIPE_UPDATE    +1.531s\t3  garbage",
    " event9   GESTURE_PINCH_UPDATE    +3.010s\t2  0.10/-0.20 ( 0.15/-0.30 unaccelerated)",
])
def test_unrelated_or_malformed_lines_are_skipped(line):
    assert parse_line(line) is None


def test_source_reports_missing_tool():
    from gestured.core.errors import EventSourceUnavailable

    src = LibinputEventSource(command=("/nonexistent/libinput", "debug-events"))
    with pytest.raises(EventSourceUnavailable):
        list(src)


def test_source_reads_process_output(tmp_path):
    log = tmp_path / "events.log"
    log.write_text(LOG)
    assert len(list(LibinputEventSource(command=("cat", str(log))))) == 7


def test_source_raises_when_tool_fails():
    from gestured.core.errors import EventSourceUnavailable

    src = LibinputEventSource(command=("sh", "-c", "echo 'Failed to open /dev/input/event9'; exit 1"))
    with pytest.raises(EventSourceUnavailable) as exc:
        list(src)
    assert "status 1" in str(exc.value)
    assert "Failed to open" in str(exc.value)


def test_process_name(tmp_path):
    (tmp_path / "4242").mkdir()
    (tmp_path / "4242" / "comm").write_text("firefox\n")
    assert process_name(4242, proc_root=tmp_path) == "firefox"
