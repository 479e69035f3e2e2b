import pytest

from fuzzyterm.keys import KeyDecoder
from fuzzyterm.tui import EventType


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def decode_all(decoder, data):
    events = []
    total = 0
    while data:
        event, used = decoder.next_event(data)
        assert used > 0
        total += used
        data = data[used:]
        events.append(event)
    return events, total


def test_plain_character():
    event, used = KeyDecoder().next_event(b"a")
    assert event.type == EventType.RUNE
    assert event.char == "a"
    assert used == 1


def test_multibyte_character():
    data = "한".encode("utf-8")
    event, used = KeyDecoder().next_event(data + b"x")
    assert event.type == EventType.RUNE
    assert event.char == "한"
    assert used == len(data)


def test_invalid_utf8_is_esc():
    event, used = KeyDecoder().next_event(b"\xff")
    assert event.type == EventType.ESC
    assert used == 1


@pytest.mark.parametrize(
    "byte, expected",
    [
        (3, EventType.CTRL_C),
        (7, EventType.CTRL_G),
        (17, EventType.CTRL_Q),
        (127, EventType.BSPACE),
        (0, EventType.CTRL_SPACE),
        (28, EventType.CTRL_BACK_SLASH),
        (29, EventType.CTRL_RIGHT_BRACKET),
        (30, EventType.CTRL_CARET),
        (31, EventType.CTRL_SLASH),
        (1, EventType.CTRL_A),
        (9, EventType.TAB),
        (26, EventType.CTRL_Z),
    ],
)
def test_control_bytes(byte, expected):
    event, used = KeyDecoder().next_event(bytes([byte]))
    assert event.type == expected
    assert used == 1


def test_lone_escape():
    event, used = KeyDecoder().next_event(b"\x1b")
    assert event.type == EventType.ESC
    assert used == 1


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x1b[A", EventType.UP),
        (b"\x1b[B", EventType.DOWN),
        (b"\x1b[C", EventType.RIGHT),
        (b"\x1b[D", EventType.LEFT),
        (b"\x1bOP", EventType.F1),
        (b"\x1b[Z", EventType.BTAB),
        (b"\x1b[H", EventType.HOME),
        (b"\x1b[F", EventType.END),
        (b"\x1b[2~", EventType.INSERT),
        (b"\x1b[3~", EventType.DEL),
        (b"\x1b[5~", EventType.PG_UP),
        (b"\x1b[6~", EventType.PG_DN),
        (b"\x1b[1~", EventType.HOME),
        (b"\x1b[15~", EventType.F5),
        (b"\x1b[17~", EventType.F6),
        (b"\x1b[20~", EventType.F9),
        (b"\x1b[24~", EventType.F12),
        (b"\x1b[1;2A", EventType.S_UP),
        (b"\x1b[1;3B", EventType.ALT_DOWN),
        (b"\x1b[1;10C", EventType.ALT_S_RIGHT),
        (b"\x1b\x1b[A", EventType.ALT_UP),
        (b"\x1b\x1b[D", EventType.ALT_LEFT),
        (b"\x1b ", EventType.ALT_SPACE),
        (b"\x1b/", EventType.ALT_SLASH),
        (b"\x1b\x7f", EventType.ALT_BS),
        (b"\x1bb", EventType.ALT_B),
        (b"\x1bz", EventType.ALT_Z),
        (b"\x1b5", EventType.ALT_5),
        (b"\x1b\x01", EventType.CTRL_ALT_A),
        (b"\x1b\x0d", EventType.CTRL_ALT_M),
        (b"\x1b\x1b\x1b", EventType.ESC),
    ],
)
def test_escape_sequences(data, expected):
    event, used = KeyDecoder().next_event(data)
    assert event.type == expected
    assert used == len(data)


def test_sequence_followed_by_more_input():
    events, total = decode_all(KeyDecoder(), b"\x1b[Aab")
    assert [e.type for e in events] == [EventType.UP, EventType.RUNE, EventType.RUNE]
    assert "".join(e.char for e in events) == "ab"
    assert total == len(b"\x1b[Aab")


def test_cursor_position_report_is_invalid():
    data = b"\x1b[12;34R"
    event, used = KeyDecoder().next_event(data + b"q")
    assert event.type == EventType.INVALID
    assert used == len(data)


def test_bracketed_paste_marker_is_skipped():
    event, used = KeyDecoder().next_event(b"\x1b[200~hello")
    assert event is None
    assert used == len(b"\x1b[200~")


def test_incomplete_sequence_is_invalid():
    event, _ = KeyDecoder().next_event(b"\x1b[")
    assert event.type == EventType.INVALID


def test_empty_buffer_raises():
    with pytest.raises(ValueError):
        KeyDecoder().next_event(b"")


def test_mouse_disabled_gives_invalid():
    event, _ = KeyDecoder().next_event(b"\x1b[M" + bytes([32, 40, 40]))
    assert event.type == EventType.INVALID


def test_mouse_left_down_position():
    decoder = KeyDecoder(mouse=True, clock=FakeClock())
    event, used = decoder.next_event(b"\x1b[M" + bytes([32, 33 + 4, 33 + 7]))
    assert used == 6
    assert event.type == EventType.MOUSE
    assert (event.mouse.x, event.mouse.y) == (4, 7)
    assert event.mouse.left and event.mouse.down
    assert not event.mouse.double and not event.mouse.mod


def test_mouse_yoffset_subtracted():
    decoder = KeyDecoder(mouse=True, yoffset=3, clock=FakeClock())
    event, _ = decoder.next_event(b"\x1b[M" + bytes([32, 33, 33 + 10]))
    assert event.mouse.y == 10 - 3


def test_double_click():
    clock = FakeClock()
    decoder = KeyDecoder(mouse=True, clock=clock)
    down = b"\x1b[M" + bytes([32, 40, 40])
    up = b"\x1b[M" + bytes([35, 40, 40])
    decoder.next_event(down)
    first_up, _ = decoder.next_event(up)
    assert not first_up.mouse.double
    clock.now += 0.1
    decoder.next_event(down)
    second_up, _ = decoder.next_event(up)
    assert second_up.mouse.double
    assert not second_up.mouse.down


def test_slow_clicks_are_not_double():
    clock = FakeClock()
    decoder = KeyDecoder(mouse=True, clock=clock)
    down = b"\x1b[M" + bytes([32, 40, 40])
    up = b"\x1b[M" + bytes([35, 40, 40])
    decoder.next_event(down)
    decoder.next_event(up)
    clock.now += 2.0
    decoder.next_event(down)
    event, _ = decoder.next_event(up)
    assert not event.mouse.double


def test_right_click_is_not_left():
    decoder = KeyDecoder(mouse=True, clock=FakeClock())
    event, _ = decoder.next_event(b"\x1b[M" + bytes([34, 40, 40]))
    assert event.mouse.down
    assert not event.mouse.left


@pytest.mark.parametrize("code, scroll", [(96, 1), (97, -1)])
def test_mouse_wheel(code, scroll):
    decoder = KeyDecoder(mouse=True, clock=FakeClock())
    event, used = decoder.next_event(b"\x1b[M" + bytes([code, 40, 40]))
    assert used == 6
    assert event.mouse.s == scroll
    assert not event.mouse.down


def test_mouse_wheel_modifier():
    decoder = KeyDecoder(mouse=True, clock=FakeClock())
    event, _ = decoder.next_event(b"\x1b[M" + bytes([100, 40, 40]))
    assert event.mouse.mod