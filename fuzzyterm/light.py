"""A renderer that draws with plain escape sequences on part of the terminal."""

from __future__ import annotations

import os
import re
import subprocess
import sys
import termios
import time
import tty
from dataclasses import dataclass
from typing import Callable, Sequence, TextIO

from fuzzyterm.keys import ESC, KeyDecoder
from fuzzyterm.tui import (
    COL_BLACK,
    COL_DEFAULT,
    COL_WHITE,
    DARK256,
    DEFAULT16,
    Attr,
    BorderShape,
    BorderStyle,
    ColorPair,
    ColorTheme,
    Event,
    EventType,
    FillReturn,
    Renderer,
    Window,
    init_theme,
    is_24bit,
    make_palette,
)
from fuzzyterm.util import rune_width, set_nonblock

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

DEFAULT_ESC_DELAY = 100
ESC_POLL_INTERVAL = 5
OFFSET_POLL_TRIES = 10
MAX_INPUT_BUFFER = 10 * 1024

CONSOLE_DEVICE = "/dev/tty"

_OFFSET_PATTERN = re.compile(rb"(.*)\x1b\[([0-9]+);([0-9]+)R")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_DEV_PREFIXES = ("/dev/pts/", "/dev/")


def _atoi(text: str, default: int) -> int:
    return int(text) if _INTEGER.fullmatch(text) else default


def _get_env(name: str, default: int) -> int:
    value = os.environ.get(name, "")
    return _atoi(value, default) if value else default


def _repeat(char: str, times: int) -> str:
    return char * times if times > 0 else ""


@dataclass(frozen=True)
class WrappedLine:
    """A piece of a line that fits the window, with its display width."""

    text: str
    display_width: int


def wrap_line(text: str, prefix_length: int, max_width: int, tabstop: int) -> list[WrappedLine]:
    """Split ``text`` into pieces that fit ``max_width`` columns after ``prefix_length``."""
    lines: list[WrappedLine] = []
    width = 0
    line = ""
    for char in text:
        w = rune_width(char, prefix_length + width, tabstop)
        width += w
        piece = _repeat(" ", w) if char == "\t" else char
        if prefix_length + width <= max_width:
            line += piece
        else:
            lines.append(WrappedLine(line, width - w))
            line = piece
            prefix_length = 0
            width = rune_width(char, prefix_length, tabstop)
    lines.append(WrappedLine(line, width))
    return lines


def attr_codes(attr: Attr) -> list[str]:
    """SGR parameters for the given attributes."""
    if attr & Attr.CLEAR:
        return []
    table = (
        (Attr.BOLD, "1"),
        (Attr.DIM, "2"),
        (Attr.ITALIC, "3"),
        (Attr.UNDERLINE, "4"),
        (Attr.BLINK, "5"),
        (Attr.REVERSE, "7"),
    )
    return [code for flag, code in table if attr & flag]


def color_codes(fg: int, bg: int) -> list[str]:
    """SGR parameters for a foreground and background colour."""
    codes: list[str] = []
    for color, offset in ((fg, 0), (bg, 10)):
        if color == COL_DEFAULT:
            continue
        if is_24bit(color):
            r, g, b = (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF
            codes.append(f"{38 + offset};2;{r};{g};{b}")
        elif COL_BLACK <= color <= COL_WHITE:
            codes.append(str(color + 30 + offset))
        elif COL_WHITE < color < 16:
            codes.append(str(color + 90 + offset - 8))
        elif 16 <= color < 256:
            codes.append(f"{38 + offset};5;{color}")
    return codes


def cleanse(text: str) -> str:
    """Remove escape characters from text."""
    return text.replace("\x1b", "")


def ttyname() -> str:
    """Find the device path of the terminal on standard error, or ''."""
    try:
        rdev = os.fstat(2).st_rdev
    except OSError:
        return ""
    for prefix in _DEV_PREFIXES:
        try:
            entries = list(os.scandir(prefix))
        except OSError:
            continue
        for entry in entries:
            try:
                if entry.stat(follow_symlinks=False).st_rdev == rdev:
                    return prefix + entry.name
            except OSError:
                continue
    return ""


def open_tty_in() -> int:
    """Open the controlling terminal for reading and return its descriptor."""
    try:
        return os.open(CONSOLE_DEVICE, os.O_RDONLY)
    except OSError:
        name = ttyname()
        if name:
            try:
                return os.open(name, os.O_RDONLY)
            except OSError:
                pass
        raise OSError(f"Failed to open {CONSOLE_DEVICE}") from None


def is_light_renderer_supported() -> bool:
    """The light renderer works on any terminal that understands escape sequences."""
    return True


class LightRenderer(Renderer):
    """Draws below the cursor (or on the alternate screen) using escape sequences."""

    def __init__(
        self,
        theme: ColorTheme,
        force_black: bool,
        mouse: bool,
        tabstop: int,
        clear_on_exit: bool,
        fullscreen: bool,
        max_height_func: Callable[[int], int],
        *,
        output: TextIO | None = None,
        tty_in: int | None = None,
    ) -> None:
        self.theme = theme
        self.force_black = force_black
        self.mouse = mouse
        self.tabstop = tabstop
        self.clear_on_exit = clear_on_exit
        self.fullscreen = fullscreen
        self.max_height_func = max_height_func
        self.tty_in = open_tty_in() if tty_in is None else tty_in
        self.palette = make_palette(theme)
        self.esc_delay = DEFAULT_ESC_DELAY
        self.width = 0
        self.height = 0
        self.yoffset = 0
        self.up_one_line = False
        self._output = output
        self._orig_state: list | None = None
        self._buffer = b""
        self._queued = ""
        self._y = 0
        self._x = 0
        self._decoder = KeyDecoder()

    # Output

    def _stderr(self, text: str) -> None:
        self._stderr_internal(text, True)

    def _stderr_internal(self, text: str, allow_nlcr: bool) -> None:
        chars = []
        for char in text:
            nlcr = char in "\n\r"
            if ord(char) >= 32 or char == "\x1b" or nlcr:
                if char == "\ufffd" or (nlcr and not allow_nlcr):
                    chars.append(" ")
                else:
                    chars.append(char)
        self._queued += "".join(chars)

    def _csi(self, code: str) -> None:
        self._stderr("\x1b[" + code)

    def _flush(self) -> None:
        if self._queued:
            stream = self._output if self._output is not None else sys.stderr
            stream.write(self._queued)
            stream.flush()
            self._queued = ""

    def _make_space(self) -> None:
        self._stderr("\n")
        self._csi("G")

    def _move(self, y: int, x: int) -> None:
        if self._y < y:
            self._csi(f"{y - self._y}B")
        elif self._y > y:
            self._csi(f"{self._y - y}A")
        self._stderr("\r")
        if x > 0:
            self._csi(f"{x}C")
        self._y = y
        self._x = x

    def _origin(self) -> None:
        self._move(0, 0)

    def _smcup(self) -> None:
        self._csi("?1049h")

    def _rmcup(self) -> None:
        self._csi("?1049l")

    # Terminal state

    def _default_theme(self) -> ColorTheme:
        if "256" in os.environ.get("TERM", ""):
            return DARK256
        try:
            result = subprocess.run(
                ["tput", "colors"], capture_output=True, text=True, check=False
            )
        except OSError:
            return DEFAULT16
        if result.returncode == 0 and _atoi(result.stdout.strip(), 16) > 16:
            return DARK256
        return DEFAULT16

    def _init_platform(self) -> None:
        self._orig_state = termios.tcgetattr(self.tty_in)
        tty.setraw(self.tty_in, termios.TCSANOW)

    def _setup_terminal(self) -> None:
        tty.setraw(self.tty_in, termios.TCSANOW)

    def _restore_terminal(self) -> None:
        if self._orig_state is not None:
            termios.tcsetattr(self.tty_in, termios.TCSANOW, self._orig_state)

    def _update_terminal_size(self) -> None:
        try:
            size = os.get_terminal_size(self.tty_in)
        except OSError:
            self.width = _get_env("COLUMNS", DEFAULT_WIDTH)
            self.height = self.max_height_func(_get_env("LINES", DEFAULT_HEIGHT))
        else:
            self.width = size.columns
            self.height = self.max_height_func(size.lines)

    def _find_offset(self) -> tuple[int, int]:
        self._csi("6n")
        self._flush()
        data = b""
        for tries in range(OFFSET_POLL_TRIES):
            data = self._get_bytes_internal(data, tries > 0)
            found = _OFFSET_PATTERN.search(data)
            if found:
                self._buffer += found.group(1)
                return int(found.group(2)) - 1, int(found.group(3)) - 1
        return -1, -1

    # Input

    def _getch(self, nonblock: bool) -> int | None:
        try:
            set_nonblock(self.tty_in, nonblock)
            data = os.read(self.tty_in, 1)
        except OSError:
            return None
        return data[0] if data else None

    def _get_bytes(self) -> bytes:
        return self._get_bytes_internal(self._buffer, False)

    def _get_bytes_internal(self, buffer: bytes, nonblock: bool) -> bytes:
        collected = bytearray(buffer)
        c = self._getch(nonblock)
        if c is None and not nonblock:
            self.close()
            raise OSError(f"Failed to read {CONSOLE_DEVICE}")

        retries = 0
        if c == ESC or nonblock:
            retries = self.esc_delay // ESC_POLL_INTERVAL
        if c is not None:
            collected.append(c)

        previous = c
        while True:
            c = self._getch(True)
            if c is None:
                if retries > 0:
                    retries -= 1
                    time.sleep(ESC_POLL_INTERVAL / 1000)
                    continue
                break
            if c == ESC and previous != c:
                retries = self.esc_delay // ESC_POLL_INTERVAL
            else:
                retries = 0
            collected.append(c)
            previous = c
            if len(collected) > MAX_INPUT_BUFFER:
                self.close()
                raise RuntimeError(f"Input buffer overflow ({len(collected)})")
        return bytes(collected)

    def get_char(self) -> Event:
        if not self._buffer:
            self._buffer = self._get_bytes()
        if not self._buffer:
            raise RuntimeError("Empty buffer")

        self._decoder.mouse = self.mouse
        self._decoder.yoffset = self.yoffset
        event, size = self._decoder.next_event(self._buffer)
        if event is not None and event.type == EventType.INVALID and self._buffer[0] == ESC:
            # Second chance: the sequence may not have arrived in full yet
            self._buffer = self._get_bytes()
            event, size = self._decoder.next_event(self._buffer)
        self._buffer = self._buffer[size:]
        if event is None:
            return self.get_char()
        return event

    # Renderer interface

    def init(self) -> None:
        self.esc_delay = _atoi(os.environ.get("ESCDELAY", ""), DEFAULT_ESC_DELAY)
        self._init_platform()
        self._update_terminal_size()
        self.palette = init_theme(self.theme, self._default_theme(), self.force_black)

        if self.fullscreen:
            self._smcup()
        else:
            # Assume --no-clear is used for repeated relaunching; keep the lower screen.
            if self.clear_on_exit:
                self._csi("J")
            y, x = self._find_offset()
            self.mouse = self.mouse and y >= 0
            if x > 0 and self.clear_on_exit:
                self.up_one_line = True
                self._make_space()
            for _ in range(1, self.max_y()):
                self._make_space()

        if self.mouse:
            self._csi("?1000h")
        self._csi(f"{self.max_y() - 1}A")
        self._csi("G")
        self._csi("K")
        if not self.clear_on_exit and not self.fullscreen:
            self._csi("s")
        if not self.fullscreen and self.mouse:
            self.yoffset, _ = self._find_offset()

    def pause(self, clear: bool) -> None:
        self._restore_terminal()
        if clear:
            if self.fullscreen:
                self._rmcup()
            else:
                self._smcup()
                self._csi("H")
            self._flush()

    def resume(self, clear: bool, sigcont: bool) -> None:
        self._setup_terminal()
        if clear:
            if self.fullscreen:
                self._smcup()
            else:
                self._rmcup()
            self._flush()
        elif sigcont and not self.fullscreen and self.mouse:
            # The offset taken at start-up is likely stale; give up on the mouse.
            self._csi("?1000l")
            self.mouse = False

    def clear(self) -> None:
        if self.fullscreen:
            self._csi("H")
        self._origin()
        self._csi("J")
        self._flush()

    def refresh_windows(self, windows: Sequence[Window]) -> None:
        self._flush()

    def refresh(self) -> None:
        self._update_terminal_size()

    def close(self) -> None:
        if self.clear_on_exit:
            if self.fullscreen:
                self._rmcup()
            else:
                self._origin()
                if self.up_one_line:
                    self._csi("A")
                self._csi("J")
        elif not self.fullscreen:
            self._csi("u")
        if self.mouse:
            self._csi("?1000l")
        self._flush()
        self._restore_terminal()

    def max_x(self) -> int:
        return self.width

    def max_y(self) -> int:
        return self.height

    def new_window(
        self,
        top: int,
        left: int,
        width: int,
        height: int,
        preview: bool,
        border_style: BorderStyle,
    ) -> LightWindow:
        return LightWindow(self, top, left, width, height, preview, border_style)


class LightWindow(Window):
    """A region drawn by a :class:`LightRenderer`."""

    def __init__(
        self,
        renderer: LightRenderer,
        top: int,
        left: int,
        width: int,
        height: int,
        preview: bool,
        border: BorderStyle,
    ) -> None:
        self.renderer = renderer
        self.colored = renderer.theme.colored
        self.preview = preview
        self.border = border
        self.top = top
        self.left = left
        self.width = width
        self.height = height
        self.x = 0
        self.y = 0
        self.tabstop = renderer.tabstop
        self.dirty = False
        self.closed = False
        theme = renderer.theme
        if preview:
            self.fg, self.bg = theme.preview_fg.color, theme.preview_bg.color
        else:
            self.fg, self.bg = theme.fg.color, theme.bg.color
        self._draw_border()

    def _draw_border(self) -> None:
        shape = self.border.shape
        if shape in (BorderShape.ROUNDED, BorderShape.SHARP):
            self._draw_border_around()
        elif shape == BorderShape.HORIZONTAL:
            self._draw_border_horizontal(True, True)
        elif shape == BorderShape.VERTICAL:
            self._draw_border_vertical(True, True)
        elif shape == BorderShape.TOP:
            self._draw_border_horizontal(True, False)
        elif shape == BorderShape.BOTTOM:
            self._draw_border_horizontal(False, True)
        elif shape == BorderShape.LEFT:
            self._draw_border_vertical(True, False)
        elif shape == BorderShape.RIGHT:
            self._draw_border_vertical(False, True)

    def _draw_border_horizontal(self, top: bool, bottom: bool) -> None:
        color = self.renderer.palette.border
        line = _repeat(self.border.horizontal, self.width)
        if top:
            self.move(0, 0)
            self.cprint(color, line)
        if bottom:
            self.move(self.height - 1, 0)
            self.cprint(color, line)

    def _draw_border_vertical(self, left: bool, right: bool) -> None:
        color = self.renderer.palette.border
        width = self.width - 2
        if not left or not right:
            width += 1
        for y in range(self.height):
            self.move(y, 0)
            if left:
                self.cprint(color, self.border.vertical)
            self.cprint(color, _repeat(" ", width))
            if right:
                self.cprint(color, self.border.vertical)

    def _draw_border_around(self) -> None:
        palette = self.renderer.palette
        color = palette.preview_border if self.preview else palette.border
        b = self.border
        inner = self.width - 2
        self.move(0, 0)
        self.cprint(color, b.top_left + _repeat(b.horizontal, inner) + b.top_right)
        for y in range(1, self.height - 1):
            self.move(y, 0)
            self.cprint(color, b.vertical)
            self.cprint(color, _repeat(" ", inner))
            self.cprint(color, b.vertical)
        self.move(self.height - 1, 0)
        self.cprint(color, b.bottom_left + _repeat(b.horizontal, inner) + b.bottom_right)

    def _csi(self, code: str) -> None:
        self.renderer._csi(code)

    def _write(self, text: str) -> None:
        self.dirty = True
        self.renderer._stderr_internal(text, False)

    def _csi_color(self, fg: int, bg: int, attr: Attr) -> bool:
        codes = attr_codes(attr) + color_codes(fg, bg)
        self._csi(";" + ";".join(codes) + "m")
        return bool(codes)

    def refresh(self) -> None:
        """Mark the window's drawing as seen; output is flushed by the renderer."""
        self.dirty = False

    def close(self) -> None:
        """Mark the window as closed; it owns no terminal resources."""
        self.closed = True

    def enclose(self, y: int, x: int) -> bool:
        return (
            self.left <= x < self.left + self.width
            and self.top <= y < self.top + self.height
        )

    def move(self, y: int, x: int) -> None:
        self.x = x
        self.y = y
        self.renderer._move(self.top + y, self.left + x)

    def move_and_clear(self, y: int, x: int) -> None:
        self.move(y, x)
        # Erasing to the end of line would also wipe a preview window on the right.
        self.print(_repeat(" ", self.width - x))
        self.move(y, x)

    def print(self, text: str) -> None:
        self._cprint2(COL_DEFAULT, self.bg, Attr.REGULAR, text)

    def cprint(self, pair: ColorPair, text: str) -> None:
        self._csi_color(pair.fg, pair.bg, pair.attr)
        self._write(cleanse(text))
        self._csi("m")

    def _cprint2(self, fg: int, bg: int, attr: Attr, text: str) -> None:
        colored = self._csi_color(fg, bg, attr)
        self._write(cleanse(text))
        if colored:
            self._csi("m")

    def _fill(self, text: str, on_move: Callable[[], None]) -> FillReturn:
        all_lines = text.split("\n")
        for i, line in enumerate(all_lines):
            pieces = wrap_line(line, self.x, self.width, self.tabstop)
            for j, piece in enumerate(pieces):
                if self.x >= self.width - 1 and piece.display_width == 0:
                    if self.y < self.height - 1:
                        self.move(self.y + 1, 0)
                    return FillReturn.NEXT_LINE
                self._write(piece.text)
                self.x += piece.display_width

                if j < len(pieces) - 1 or i < len(all_lines) - 1:
                    if self.y + 1 >= self.height:
                        return FillReturn.SUSPEND
                    self.move_and_clear(self.y, self.x)
                    self.move(self.y + 1, 0)
                    on_move()
        return FillReturn.CONTINUE

    def _set_bg(self) -> None:
        if self.bg != COL_DEFAULT:
            self._csi_color(COL_DEFAULT, self.bg, Attr.REGULAR)

    def fill(self, text: str) -> FillReturn:
        self.move(self.y, self.x)
        self._set_bg()
        return self._fill(text, self._set_bg)

    def cfill(self, fg: int, bg: int, attr: Attr, text: str) -> FillReturn:
        self.move(self.y, self.x)
        if fg == COL_DEFAULT:
            fg = self.fg
        if bg == COL_DEFAULT:
            bg = self.bg
        if self._csi_color(fg, bg, attr):
            try:
                return self._fill(text, lambda: self._csi_color(fg, bg, attr))
            finally:
                self._csi("m")
        return self._fill(text, self._set_bg)

    def finish_fill(self) -> None:
        self.move_and_clear(self.y, self.x)
        for y in range(self.y + 1, self.height):
            self.move_and_clear(y, 0)

    def erase(self) -> None:
        self._draw_border()
        # The window is not erased here to avoid flickering while scrolling.
        self.move(0, 0)