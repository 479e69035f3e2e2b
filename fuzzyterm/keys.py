"""Decoding of raw terminal input bytes into key and mouse events."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from typing import Callable

from fuzzyterm.tui import DOUBLE_CLICK_DURATION, Event, EventType, MouseEvent

ESC = 0x1B
_DEL = 127

_OFFSET_REPORT = re.compile(rb"\x1b\[[0-9]+;[0-9]+R")

_SINGLE_BYTES = {
    3: EventType.CTRL_C,
    7: EventType.CTRL_G,
    17: EventType.CTRL_Q,
    _DEL: EventType.BSPACE,
    0: EventType.CTRL_SPACE,
    28: EventType.CTRL_BACK_SLASH,
    29: EventType.CTRL_RIGHT_BRACKET,
    30: EventType.CTRL_CARET,
    31: EventType.CTRL_SLASH,
}

_ALT_SIMPLE = {
    ESC: EventType.ESC,
    ord(" "): EventType.ALT_SPACE,
    ord("/"): EventType.ALT_SLASH,
    ord("b"): EventType.ALT_B,
    ord("d"): EventType.ALT_D,
    ord("f"): EventType.ALT_F,
    _DEL: EventType.ALT_BS,
}

# (plain, with alt)
_ARROWS = {
    ord("D"): (EventType.LEFT, EventType.ALT_LEFT),
    ord("C"): (EventType.RIGHT, EventType.ALT_RIGHT),
    ord("B"): (EventType.DOWN, EventType.ALT_DOWN),
    ord("A"): (EventType.UP, EventType.ALT_UP),
}

_CSI_SIMPLE = {
    ord("Z"): EventType.BTAB,
    ord("H"): EventType.HOME,
    ord("F"): EventType.END,
    ord("P"): EventType.F1,
    ord("Q"): EventType.F2,
    ord("R"): EventType.F3,
    ord("S"): EventType.F4,
}

_TILDE_KEYS = {
    ord("3"): EventType.DEL,
    ord("4"): EventType.END,
    ord("5"): EventType.PG_UP,
    ord("6"): EventType.PG_DN,
}

_F9_TO_F12 = {
    ord("0"): EventType.F9,
    ord("1"): EventType.F10,
    ord("3"): EventType.F11,
    ord("4"): EventType.F12,
}

_F1_TO_F8 = {
    ord("1"): EventType.F1,
    ord("2"): EventType.F2,
    ord("3"): EventType.F3,
    ord("4"): EventType.F4,
    ord("5"): EventType.F5,
    ord("7"): EventType.F6,
    ord("8"): EventType.F7,
    ord("9"): EventType.F8,
}

# (shift, alt, alt+shift)
_MODIFIED_ARROWS = {
    ord("A"): (EventType.S_UP, EventType.ALT_UP, EventType.ALT_S_UP),
    ord("B"): (EventType.S_DOWN, EventType.ALT_DOWN, EventType.ALT_S_DOWN),
    ord("C"): (EventType.S_RIGHT, EventType.ALT_RIGHT, EventType.ALT_S_RIGHT),
    ord("D"): (EventType.S_LEFT, EventType.ALT_LEFT, EventType.ALT_S_LEFT),
}

_MOUSE_BUTTONS = frozenset((32, 34, 36, 40, 48, 35, 39, 43, 51))
_MOUSE_WHEEL = frozenset((96, 100, 104, 112, 97, 101, 105, 113))

_FALL = object()
_PASTE = object()


def _utf8_length(lead: int) -> int:
    if lead < 0x80:
        return 1
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


def _decode_char(buffer: bytes) -> tuple[str, int] | None:
    length = _utf8_length(buffer[0])
    if length == 0 or len(buffer) < length:
        return None
    try:
        char = buffer[:length].decode("utf-8")
    except UnicodeDecodeError:
        return None
    if char == "\ufffd":
        return None
    return char, length


@dataclass
class KeyDecoder:
    """Turns raw terminal input into events.

    ``mouse`` enables decoding of mouse reports, ``yoffset`` is subtracted from
    reported rows, and ``clock`` supplies the time in seconds for double clicks.
    """

    mouse: bool = False
    yoffset: int = 0
    clock: Callable[[], float] = time.monotonic
    _click_y: list[int] = field(default_factory=list, init=False, repr=False)
    _prev_down_time: float | None = field(default=None, init=False, repr=False)

    def next_event(self, buffer: bytes) -> tuple[Event | None, int]:
        """Decode the first event in ``buffer``.

        Returns the event and the number of bytes it used. The event is None
        when the bytes were a bracketed-paste marker that carries no event.
        """
        buffer = bytes(buffer)
        if not buffer:
            raise ValueError("empty input buffer")

        first = buffer[0]
        single = _SINGLE_BYTES.get(first)
        if single is not None:
            return Event(single), 1
        if first == ESC:
            return self._escape_sequence(buffer)
        if first <= EventType.CTRL_Z:
            return Event(EventType(first)), 1

        decoded = _decode_char(buffer)
        if decoded is None:
            return Event(EventType.ESC), 1
        char, size = decoded
        return Event(EventType.RUNE, char), size

    def _escape_sequence(self, buffer: bytes) -> tuple[Event | None, int]:
        if len(buffer) < 2:
            return Event(EventType.ESC), 1

        report = _OFFSET_REPORT.match(buffer)
        if report:
            return Event(EventType.INVALID), report.end()

        second = buffer[1]
        if 1 <= second <= 26:
            return Event(EventType(EventType.CTRL_ALT_A + second - 1)), 2

        skip = 0
        alt = False
        if len(buffer) > 2 and second == ESC:
            buffer = buffer[1:]
            skip = 1
            alt = True

        result, size = self._escape_body(buffer, alt)
        if result is _PASTE:
            return None, size + skip
        if result is _FALL:
            result = self._alt_key(buffer[1])
        return result, size + skip

    def _escape_body(self, buffer: bytes, alt: bool) -> tuple[object, int]:
        n = len(buffer)
        second = buffer[1]
        simple = _ALT_SIMPLE.get(second)
        if simple is not None:
            return Event(simple), 2
        if second not in (ord("["), ord("O")):
            return _FALL, 2
        if n < 3:
            return Event(EventType.INVALID), 2

        third = buffer[2]
        if third in _ARROWS:
            plain, with_alt = _ARROWS[third]
            return Event(with_alt if alt else plain), 3
        if third in _CSI_SIMPLE:
            return Event(_CSI_SIMPLE[third]), 3
        if third == ord("M"):
            return self._mouse_sequence(buffer)
        if third not in b"123456":
            return _FALL, 3
        if n < 4:
            return Event(EventType.INVALID), 3

        fourth = buffer[3]
        if third == ord("2"):
            return self._csi_two(buffer)
        if third in _TILDE_KEYS:
            return Event(_TILDE_KEYS[third]), 4

        # third == '1'
        if fourth == ord("~"):
            return Event(EventType.HOME), 4
        if fourth in _F1_TO_F8:
            if n == 5 and buffer[4] == ord("~"):
                return Event(_F1_TO_F8[fourth]), 5
            return Event(EventType.INVALID), 4
        if fourth == ord(";"):
            return self._modified_arrow(buffer)
        return _FALL, 4

    @staticmethod
    def _csi_two(buffer: bytes) -> tuple[object, int]:
        n = len(buffer)
        size = 4
        if buffer[3] == ord("~"):
            return Event(EventType.INSERT), size
        if n > 4 and buffer[4] == ord("~"):
            size = 5
            key = _F9_TO_F12.get(buffer[3])
            if key is not None:
                return Event(key), size
        if (
            n > 5
            and buffer[3] == ord("0")
            and buffer[4] in (ord("0"), ord("1"))
            and buffer[5] == ord("~")
        ):
            return _PASTE, 6
        return Event(EventType.INVALID), size

    @staticmethod
    def _modified_arrow(buffer: bytes) -> tuple[object, int]:
        n = len(buffer)
        if n < 6:
            return Event(EventType.INVALID), 4
        size = 6
        modifier = buffer[4]
        if modifier not in b"1235":
            return _FALL, size
        alt = modifier == ord("3")
        alt_shift = modifier == ord("1") and buffer[5] == ord("0")
        char = buffer[5]
        if alt_shift:
            if n < 7:
                return Event(EventType.INVALID), size
            size = 7
            char = buffer[6]
        keys = _MODIFIED_ARROWS.get(char)
        if keys is None:
            return _FALL, size
        shifted, with_alt, with_alt_shift = keys
        if alt:
            return Event(with_alt), size
        if alt_shift:
            return Event(with_alt_shift), size
        return Event(shifted), size

    @staticmethod
    def _alt_key(char: int) -> Event:
        if ord("a") <= char <= ord("z"):
            return Event(EventType(EventType.ALT_A + char - ord("a")))
        if ord("0") <= char <= ord("9"):
            return Event(EventType(EventType.ALT_0 + char - ord("0")))
        return Event(EventType.INVALID)

    def _mouse_sequence(self, buffer: bytes) -> tuple[object, int]:
        if len(buffer) < 6 or not self.mouse:
            return Event(EventType.INVALID), 3
        code = buffer[3]
        x = (buffer[4] - 33) & 0xFF
        y = ((buffer[5] - 33) & 0xFF) - self.yoffset

        if code in _MOUSE_BUTTONS:
            mod = code >= 36
            left = code == 32
            down = code % 2 == 0
            double = False
            now = self.clock()
            recent = (
                self._prev_down_time is not None
                and now - self._prev_down_time < DOUBLE_CLICK_DURATION
            )
            if down:
                if not left:
                    self._click_y = []
                elif recent:
                    self._click_y.append(y)
                else:
                    self._click_y = [y]
                self._prev_down_time = now
            elif (
                len(self._click_y) > 1
                and self._click_y[0] == self._click_y[1]
                and recent
            ):
                double = True
            mouse = MouseEvent(y, x, 0, left, down, double, mod)
            return Event(EventType.MOUSE, mouse=mouse), 6

        if code in _MOUSE_WHEEL:
            mod = code >= 100
            scroll = 1 - (code % 2) * 2
            mouse = MouseEvent(y, x, scroll, False, False, False, mod)
            return Event(EventType.MOUSE, mouse=mouse), 6

        return Event(EventType.INVALID), 6