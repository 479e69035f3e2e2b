# fuzzyterm

Building blocks for interactive, line-oriented terminal interfaces such as
fuzzy finders: an ANSI renderer that draws below the cursor or on the
alternate screen, a decoder that turns raw terminal input into key and mouse
events, colour themes, and a few text and threading utilities.

The renderer uses `termios` and `tty`, so it needs a POSIX system.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `fuzzyterm.util`: `rune_width` (display width of a character, tabs
  expanded to the next tab stop), `constrain`, `dur_within`, `as_uint16`,
  `once`, `is_tty`, `is_windows`, `set_nonblock`, `read`, `AtomicBool`,
  `Slab` / `make_slab`, and shell helpers: `exec_command` runs a command
  through `$SHELL` (or `sh`), `exec_command_with` through a given shell;
  both return a `ShellCommand` whose `start(**kwargs)` passes keyword
  arguments to `subprocess.Popen` and whose `kill()` kills its process group.
- `fuzzyterm.chars`: `Chars`, a line of text kept as bytes when it is ASCII
  and as a string otherwise, built with `to_chars` or `runes_to_chars`. It
  supports `len()`, indexing and `str()`, and has `trim_length`,
  `leading_whitespaces`, `trailing_whitespaces`,
  `trim_trailing_whitespaces`, `to_runes` and `prepend`.
- `fuzzyterm.eventbox`: `EventBox`, a mailbox of events guarded by a
  condition variable, with `set`, `wait`, `wait_for`, `peek`, `watch` and
  `unwatch`.
- `fuzzyterm.tui`: `EventType`, `Event`, `MouseEvent`, `Attr`,
  `FillReturn`, `ColorAttr`, `ColorPair`, `ColorTheme`, `Palette`, the
  built-in themes `DEFAULT16`, `DARK256` and `LIGHT256`, `empty_theme`,
  `no_color_theme`, `init_theme`, `make_palette`, `hex_to_color`,
  `is_24bit`, `BorderShape`, `BorderStyle`, `make_border_style`,
  `make_transparent_border`, and the abstract `Renderer` and `Window`.
- `fuzzyterm.keys`: `KeyDecoder`, whose `next_event(buffer)` decodes the
  first event in a byte string (control keys, escape sequences, function
  keys, UTF-8 characters, xterm mouse reports) and returns it together with
  the number of bytes used.
- `fuzzyterm.light`: `LightRenderer` and `LightWindow`, which draw with
  plain escape sequences on standard error (or a stream passed as
  `output=`) and read keys from `/dev/tty`; plus `wrap_line`, `attr_codes`,
  `color_codes`, `cleanse`, `ttyname`, `open_tty_in` and
  `is_light_renderer_supported`.

## Example

```python
from fuzzyterm import tui
from fuzzyterm.light import LightRenderer

theme = tui.empty_theme()
renderer = LightRenderer(theme, force_black=False, mouse=False, tabstop=8,
                         clear_on_exit=True, fullscreen=False,
                         max_height_func=lambda h: min(h, 10))
renderer.init()
try:
    window = renderer.new_window(
        0, 0, renderer.max_x(), renderer.max_y(), False,
        tui.make_border_style(tui.BorderShape.ROUNDED, True),
    )
    window.move(1, 2)
    window.print("press any key")
    renderer.refresh_windows([window])
    event = renderer.get_char()
finally:
    renderer.close()
print(event)
```

Decoding input without a terminal:

```python
from fuzzyterm.keys import KeyDecoder
from fuzzyterm.tui import EventType

event, used = KeyDecoder().next_event(b"\x1b[A")
assert event.type == EventType.UP and used == 3
```

Colours can be given as hex strings:

```python
from fuzzyterm.tui import hex_to_color, is_24bit

color = hex_to_color("#102030")
assert is_24bit(color)
```

## What it does not do

This package has no command-line program and no fuzzy matching or search:
it provides the terminal, input and text pieces only. There is no
full-screen renderer built on a curses-like screen library; `LightRenderer`
is the one concrete `Renderer`, and it works only where `termios` is
available.