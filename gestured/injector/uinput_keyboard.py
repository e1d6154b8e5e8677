from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from evdev import UInput, ecodes as e

from gestured.core.errors import DispatchFailure

# xdotool-style names that don't map 1:1 onto KEY_<NAME>
ALIASES = {
    "ctrl": "KEY_LEFTCTRL",
    "control": "KEY_LEFTCTRL",
    "alt": "KEY_LEFTALT",
    "shift": "KEY_LEFTSHIFT",
    "super": "KEY_LEFTMETA",
    "meta": "KEY_LEFTMETA",
    "win": "KEY_LEFTMETA",
    "return": "KEY_ENTER",
    "escape": "KEY_ESC",
    "prior": "KEY_PAGEUP",
    "next": "KEY_PAGEDOWN",
    "plus": "KEY_KPPLUS",
    "period": "KEY_DOT",
    "xf86audioraisevolume": "KEY_VOLUMEUP",
    "xf86audiolowervolume": "KEY_VOLUMEDOWN",
    "xf86audiomute": "KEY_MUTE",
}


def key_code(name: str) -> int:
    """`ctrl` -> KEY_LEFTCTRL, `Page_Up` -> KEY_PAGEUP, `t` -> KEY_T."""
    lowered = name.strip().lower()
    symbol = ALIASES.get(lowered) or "KEY_" + lowered.replace("_", "").upper()
    code = e.ecodes.get(symbol)
    if code is None:
        raise DispatchFailure(f"unknown key name {name!r}")
    return code


def parse_sequence(sequence: str) -> list[list[int]]:
    """
    "ctrl+alt+Left super" -> [[ctrl, alt, left], [super]]
    Chords are pressed in order and released in reverse.
    """
    chords = []
    for chord in sequence.split():
        names = [n for n in chord.split("+") if n]
        if not names:
            raise DispatchFailure(f"empty key chord in {sequence!r}")
        chords.append([key_code(n) for n in names])
    if not chords:
        raise DispatchFailure("empty key sequence")
    return chords


@dataclass
class UInputKeyboard:
    """
    Minimal keyboard injector using Linux uinput.
    Keep it boring. The classifier is the brain.
    """
    ui: UInput

    @classmethod
    def create(cls) -> "UInputKeyboard":
        # no capabilities given: evdev registers every key code
        ui = UInput(name="gestured virtual keyboard")
        return cls(ui=ui)

    def _chord(self, codes: Iterable[int]) -> None:
        codes = list(codes)
        for code in codes:
            self.ui.write(e.EV_KEY, code, 1)
        self.ui.syn()
        for code in reversed(codes):
            self.ui.write(e.EV_KEY, code, 0)
        self.ui.syn()

    def send(self, sequence: str) -> None:
        # parse everything first so a typo sends nothing at all
        chords = parse_sequence(sequence)
        try:
            for chord in chords:
                self._chord(chord)
        except OSError as err:
            raise DispatchFailure(f"uinput write failed for {sequence!r}: {err}") from err

    def close(self) -> None:
        self.ui.close()
