"""Terminal UI model: key events, colours, themes, borders and renderer interfaces."""

from __future__ import annotations

import re
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import IntEnum, IntFlag
from typing import Sequence

DOUBLE_CLICK_DURATION = 0.5
"""Longest interval, in seconds, between two clicks of a double click."""


class Attr(IntFlag):
    """Text attributes."""

    UNDEFINED = 0
    BOLD = 1
    DIM = 1 << 1
    ITALIC = 1 << 2
    UNDERLINE = 1 << 3
    BLINK = 1 << 4
    BLINK2 = 1 << 5
    REVERSE = 1 << 6
    REGULAR = 1 << 7
    CLEAR = 1 << 8


def _event_type_members() -> list[tuple[str, int]]:
    names = ["RUNE"]
    names += ["TAB" if c == "I" else f"CTRL_{c}" for c in string.ascii_uppercase]
    names += [
        "ESC",
        "CTRL_SPACE",
        "CTRL_BACK_SLASH",
        "CTRL_RIGHT_BRACKET",
        "CTRL_CARET",
        "CTRL_SLASH",
        "INVALID",
        "RESIZE",
        "MOUSE",
        "DOUBLE_CLICK",
        "LEFT_CLICK",
        "RIGHT_CLICK",
        "BTAB",
        "BSPACE",
        "DEL",
        "PG_UP",
        "PG_DN",
        "UP",
        "DOWN",
        "LEFT",
        "RIGHT",
        "HOME",
        "END",
        "INSERT",
        "S_UP",
        "S_DOWN",
        "S_LEFT",
        "S_RIGHT",
    ]
    names += [f"F{n}" for n in range(1, 13)]
    names += [
        "CHANGE",
        "BACKWARD_EOF",
        "ALT_SPACE",
        "ALT_SLASH",
        "ALT_BS",
        "ALT_UP",
        "ALT_DOWN",
        "ALT_LEFT",
        "ALT_RIGHT",
        "ALT_S_UP",
        "ALT_S_DOWN",
        "ALT_S_LEFT",
        "ALT_S_RIGHT",
    ]
    members = [(name, value) for value, name in enumerate(names)]
    alt_0 = len(names)
    members += [(f"ALT_{d}", alt_0 + int(d)) for d in string.digits]
    alt_a = alt_0 + ord("a") - ord("0")
    members += [(f"ALT_{c}", alt_a + i) for i, c in enumerate(string.ascii_uppercase)]
    ctrl_alt_a = alt_a + 26
    members += [
        (f"CTRL_ALT_{c}", ctrl_alt_a + i) for i, c in enumerate(string.ascii_uppercase)
    ]
    return members


EventType = IntEnum(  # type: ignore[misc]
    "EventType", _event_type_members(), module=__name__, qualname="EventType"
)
EventType.__doc__ = "Kinds of user action."


class FillReturn(IntEnum):
    """Outcome of filling text into a window."""

    CONTINUE = 0
    NEXT_LINE = 1
    SUSPEND = 2


COL_UNDEFINED = -2
COL_DEFAULT = -1
COL_BLACK = 0
COL_RED = 1
COL_GREEN = 2
COL_YELLOW = 3
COL_BLUE = 4
COL_MAGENTA = 5
COL_CYAN = 6
COL_WHITE = 7

_TRUE_COLOR_FLAG = 1 << 24
_HEX_PAIR = re.compile(r"[0-9a-fA-F]{1,2}")


def is_24bit(color: int) -> bool:
    """True when ``color`` is a 24-bit RGB colour."""
    return color > 0 and (color & _TRUE_COLOR_FLAG) > 0


def _hex_component(text: str) -> int:
    return int(text, 16) if _HEX_PAIR.fullmatch(text) else 0


def hex_to_color(rrggbb: str) -> int:
    """Convert ``#rrggbb`` into a 24-bit colour value."""
    if len(rrggbb) < 7:
        raise ValueError(f"invalid colour: {rrggbb!r}")
    r = _hex_component(rrggbb[1:3])
    g = _hex_component(rrggbb[3:5])
    b = _hex_component(rrggbb[5:7])
    return _TRUE_COLOR_FLAG + (r << 16) + (g << 8) + b


@dataclass(frozen=True)
class ColorAttr:
    """A colour with attributes; both may be left undefined."""

    color: int = COL_UNDEFINED
    attr: Attr = Attr.UNDEFINED


@dataclass(frozen=True)
class ColorPair:
    """Foreground and background colours with text attributes."""

    fg: int
    bg: int
    attr: Attr = Attr.UNDEFINED

    def has_bg(self) -> bool:
        """True when the pair paints a visible background."""
        if self.attr & Attr.REVERSE:
            return self.fg != COL_DEFAULT
        return self.bg != COL_DEFAULT

    def _merge(self, other: ColorPair, except_color: int) -> ColorPair:
        return ColorPair(
            fg=other.fg if other.fg != except_color else self.fg,
            bg=other.bg if other.bg != except_color else self.bg,
            attr=self.attr | other.attr,
        )

    def with_attr(self, attr: Attr) -> ColorPair:
        """Return a copy with ``attr`` added."""
        return replace(self, attr=self.attr | attr)

    def merge_attr(self, other: ColorPair) -> ColorPair:
        """Return a copy with the attributes of ``other`` added."""
        return self.with_attr(other.attr)

    def merge(self, other: ColorPair) -> ColorPair:
        """Overlay the defined colours and the attributes of ``other``."""
        return self._merge(other, COL_UNDEFINED)

    def merge_non_default(self, other: ColorPair) -> ColorPair:
        """Overlay the non-default colours and the attributes of ``other``."""
        return self._merge(other, COL_DEFAULT)


@dataclass
class ColorTheme:
    """Colours for every element of the interface."""

    colored: bool = True
    input: ColorAttr = ColorAttr()
    fg: ColorAttr = ColorAttr()
    bg: ColorAttr = ColorAttr()
    preview_fg: ColorAttr = ColorAttr()
    preview_bg: ColorAttr = ColorAttr()
    dark_bg: ColorAttr = ColorAttr()
    gutter: ColorAttr = ColorAttr()
    prompt: ColorAttr = ColorAttr()
    match: ColorAttr = ColorAttr()
    current: ColorAttr = ColorAttr()
    current_match: ColorAttr = ColorAttr()
    spinner: ColorAttr = ColorAttr()
    info: ColorAttr = ColorAttr()
    cursor: ColorAttr = ColorAttr()
    selected: ColorAttr = ColorAttr()
    header: ColorAttr = ColorAttr()
    border: ColorAttr = ColorAttr()


@dataclass(frozen=True)
class Palette:
    """Colour pairs derived from a resolved theme."""

    prompt: ColorPair
    normal: ColorPair
    input: ColorPair
    match: ColorPair
    cursor: ColorPair
    cursor_empty: ColorPair
    selected: ColorPair
    current: ColorPair
    current_match: ColorPair
    current_cursor: ColorPair
    current_cursor_empty: ColorPair
    current_selected: ColorPair
    current_selected_empty: ColorPair
    spinner: ColorPair
    info: ColorPair
    header: ColorPair
    border: ColorPair
    preview: ColorPair
    preview_border: ColorPair


@dataclass(frozen=True)
class MouseEvent:
    """Position and state of a mouse action; ``s`` is the scroll direction."""

    y: int
    x: int
    s: int = 0
    left: bool = False
    down: bool = False
    double: bool = False
    mod: bool = False


@dataclass(frozen=True)
class Event:
    """A user action; ``char`` is set for typed characters."""

    type: EventType
    char: str = ""
    mouse: MouseEvent | None = None


class BorderShape(IntEnum):
    NONE = 0
    ROUNDED = 1
    SHARP = 2
    HORIZONTAL = 3
    VERTICAL = 4
    TOP = 5
    BOTTOM = 6
    LEFT = 7
    RIGHT = 8


@dataclass(frozen=True)
class BorderStyle:
    """Shape of a border and the characters that draw it."""

    shape: BorderShape
    horizontal: str
    vertical: str
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str


def make_border_style(shape: BorderShape, unicode: bool) -> BorderStyle:
    """Border characters for ``shape``, with box-drawing or ASCII characters."""
    if not unicode:
        return BorderStyle(shape, "-", "|", "+", "+", "+", "+")
    if shape == BorderShape.ROUNDED:
        return BorderStyle(shape, "─", "│", "╭", "╮", "╰", "╯")
    return BorderStyle(shape, "─", "│", "┌", "┐", "└", "┘")


def make_transparent_border() -> BorderStyle:
    """A rounded border drawn with spaces."""
    return BorderStyle(BorderShape.ROUNDED, " ", " ", " ", " ", " ", " ")


def empty_theme() -> ColorTheme:
    """A coloured theme with every element left undefined."""
    return ColorTheme(colored=True)


def no_color_theme() -> ColorTheme:
    """A theme that uses only the terminal's default colours and attributes."""
    regular = ColorAttr(COL_DEFAULT, Attr.REGULAR)
    return ColorTheme(
        colored=False,
        input=regular,
        fg=regular,
        bg=regular,
        preview_fg=regular,
        preview_bg=regular,
        dark_bg=regular,
        gutter=regular,
        prompt=regular,
        match=ColorAttr(COL_DEFAULT, Attr.UNDERLINE),
        current=ColorAttr(COL_DEFAULT, Attr.REVERSE),
        current_match=ColorAttr(COL_DEFAULT, Attr.REVERSE | Attr.UNDERLINE),
        spinner=regular,
        info=regular,
        cursor=regular,
        selected=regular,
        header=regular,
        border=regular,
    )


def _base_theme(**colors: int) -> ColorTheme:
    default = ColorAttr(COL_DEFAULT)
    return ColorTheme(
        colored=True,
        input=default,
        fg=default,
        bg=default,
        **{name: ColorAttr(color) for name, color in colors.items()},
    )


DEFAULT16 = _base_theme(
    dark_bg=COL_BLACK,
    prompt=COL_BLUE,
    match=COL_GREEN,
    current=COL_YELLOW,
    current_match=COL_GREEN,
    spinner=COL_GREEN,
    info=COL_WHITE,
    cursor=COL_RED,
    selected=COL_MAGENTA,
    header=COL_CYAN,
    border=COL_BLACK,
)

DARK256 = _base_theme(
    dark_bg=236,
    prompt=110,
    match=108,
    current=254,
    current_match=151,
    spinner=148,
    info=144,
    cursor=161,
    selected=168,
    header=109,
    border=59,
)

LIGHT256 = _base_theme(
    dark_bg=251,
    prompt=25,
    match=66,
    current=237,
    current_match=23,
    spinner=65,
    info=101,
    cursor=161,
    selected=168,
    header=31,
    border=145,
)


def _overlay(base: ColorAttr, over: ColorAttr) -> ColorAttr:
    return ColorAttr(
        color=over.color if over.color != COL_UNDEFINED else base.color,
        attr=over.attr if over.attr != Attr.UNDEFINED else base.attr,
    )


_PLAIN_ELEMENTS = (
    "input",
    "fg",
    "bg",
    "dark_bg",
    "prompt",
    "match",
    "current",
    "current_match",
    "spinner",
    "info",
    "cursor",
    "selected",
    "header",
    "border",
)


def init_theme(theme: ColorTheme, base_theme: ColorTheme, force_black: bool) -> Palette:
    """Fill undefined parts of ``theme`` from ``base_theme`` and build its palette."""
    if force_black:
        theme.bg = ColorAttr(COL_BLACK, Attr.UNDEFINED)

    for name in ("input", "fg", "bg"):
        setattr(theme, name, _overlay(getattr(base_theme, name), getattr(theme, name)))
    theme.preview_fg = _overlay(theme.fg, _overlay(base_theme.preview_fg, theme.preview_fg))
    theme.preview_bg = _overlay(theme.bg, _overlay(base_theme.preview_bg, theme.preview_bg))
    theme.dark_bg = _overlay(base_theme.dark_bg, theme.dark_bg)
    theme.gutter = _overlay(theme.dark_bg, _overlay(base_theme.gutter, theme.gutter))
    for name in _PLAIN_ELEMENTS[4:]:
        setattr(theme, name, _overlay(getattr(base_theme, name), getattr(theme, name)))

    return make_palette(theme)


def _pair(fg: ColorAttr, bg: ColorAttr) -> ColorPair:
    bg_color = bg.color
    if fg.color == COL_DEFAULT and fg.attr & Attr.REVERSE:
        bg_color = COL_DEFAULT
    return ColorPair(fg.color, bg_color, fg.attr)


def make_palette(theme: ColorTheme) -> Palette:
    """Derive the colour pairs used for drawing from a resolved theme."""
    blank = replace(theme.fg, attr=Attr.REGULAR)
    return Palette(
        prompt=_pair(theme.prompt, theme.bg),
        normal=_pair(theme.fg, theme.bg),
        input=_pair(theme.input, theme.bg),
        match=_pair(theme.match, theme.bg),
        cursor=_pair(theme.cursor, theme.gutter),
        cursor_empty=_pair(blank, theme.gutter),
        selected=_pair(theme.selected, theme.gutter),
        current=_pair(theme.current, theme.dark_bg),
        current_match=_pair(theme.current_match, theme.dark_bg),
        current_cursor=_pair(theme.cursor, theme.dark_bg),
        current_cursor_empty=_pair(blank, theme.dark_bg),
        current_selected=_pair(theme.selected, theme.dark_bg),
        current_selected_empty=_pair(blank, theme.dark_bg),
        spinner=_pair(theme.spinner, theme.bg),
        info=_pair(theme.info, theme.bg),
        header=_pair(theme.header, theme.bg),
        border=_pair(theme.border, theme.bg),
        preview=_pair(theme.preview_fg, theme.preview_bg),
        preview_border=_pair(theme.border, theme.preview_bg),
    )


class Window(ABC):
    """A rectangular region of the screen; ``x`` and ``y`` are the cursor."""

    top: int
    left: int
    width: int
    height: int
    x: int
    y: int

    @abstractmethod
    def refresh(self) -> None: ...

    @abstractmethod
    def finish_fill(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def enclose(self, y: int, x: int) -> bool: ...

    @abstractmethod
    def move(self, y: int, x: int) -> None: ...

    @abstractmethod
    def move_and_clear(self, y: int, x: int) -> None: ...

    @abstractmethod
    def print(self, text: str) -> None: ...

    @abstractmethod
    def cprint(self, pair: ColorPair, text: str) -> None: ...

    @abstractmethod
    def fill(self, text: str) -> FillReturn: ...

    @abstractmethod
    def cfill(self, fg: int, bg: int, attr: Attr, text: str) -> FillReturn: ...

    @abstractmethod
    def erase(self) -> None: ...


class Renderer(ABC):
    """Draws windows on a terminal and reads user input."""

    @abstractmethod
    def init(self) -> None: ...

    @abstractmethod
    def pause(self, clear: bool) -> None: ...

    @abstractmethod
    def resume(self, clear: bool, sigcont: bool) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...

    @abstractmethod
    def refresh_windows(self, windows: Sequence[Window]) -> None: ...

    @abstractmethod
    def refresh(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def get_char(self) -> Event: ...

    @abstractmethod
    def max_x(self) -> int: ...

    @abstractmethod
    def max_y(self) -> int: ...

    @abstractmethod
    def new_window(
        self,
        top: int,
        left: int,
        width: int,
        height: int,
        preview: bool,
        border_style: BorderStyle,
    ) -> Window: ...


# Keep dataclass field import used for optional extension by callers.
_ = field