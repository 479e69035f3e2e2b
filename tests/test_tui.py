import pytest

from fuzzyterm.tui import (
    COL_BLACK,
    COL_DEFAULT,
    COL_UNDEFINED,
    DARK256,
    DEFAULT16,
    Attr,
    BorderShape,
    ColorAttr,
    ColorPair,
    EventType,
    empty_theme,
    hex_to_color,
    init_theme,
    is_24bit,
    make_border_style,
    make_palette,
    make_transparent_border,
    no_color_theme,
)


@pytest.mark.parametrize(
    "expr, r, g, b",
    [
        ("#ff0000", 255, 0, 0),
        ("#010203", 1, 2, 3),
        ("#102030", 16, 32, 48),
        ("#ffffff", 255, 255, 255),
    ],
)
def test_hex_to_color(expr, r, g, b):
    color = hex_to_color(expr)
    assert is_24bit(color)
    assert (color >> 16) & 0xFF == r
    assert (color >> 8) & 0xFF == g
    assert color & 0xFF == b


def test_hex_to_color_value():
    assert hex_to_color("#010203") == (1 << 24) + 0x010203


def test_hex_to_color_invalid_component_is_zero():
    assert hex_to_color("#zz0010") == (1 << 24) + 0x10


def test_hex_to_color_too_short():
    with pytest.raises(ValueError):
        hex_to_color("#fff")


@pytest.mark.parametrize("color", [255, 0, COL_DEFAULT, COL_UNDEFINED])
def test_is_24bit_false_for_indexed(color):
    assert is_24bit(color) is False


def test_has_bg():
    assert ColorPair(COL_DEFAULT, 1, Attr.UNDEFINED).has_bg() is True
    assert ColorPair(1, COL_DEFAULT, Attr.UNDEFINED).has_bg() is False
    assert ColorPair(1, COL_DEFAULT, Attr.REVERSE).has_bg() is True
    assert ColorPair(COL_DEFAULT, 1, Attr.REVERSE).has_bg() is False


def test_merge_skips_undefined():
    base = ColorPair(1, 2, Attr.BOLD)
    merged = base.merge(ColorPair(COL_UNDEFINED, 5, Attr.UNDERLINE))
    assert merged == ColorPair(1, 5, Attr.BOLD | Attr.UNDERLINE)


def test_merge_non_default_skips_default():
    base = ColorPair(1, 2, Attr.UNDEFINED)
    merged = base.merge_non_default(ColorPair(COL_DEFAULT, 7, Attr.DIM))
    assert merged == ColorPair(1, 7, Attr.DIM)


def test_with_attr_and_merge_attr():
    base = ColorPair(3, 4, Attr.BOLD)
    assert base.with_attr(Attr.REVERSE) == ColorPair(3, 4, Attr.BOLD | Attr.REVERSE)
    assert base.merge_attr(ColorPair(9, 9, Attr.ITALIC)) == ColorPair(
        3, 4, Attr.BOLD | Attr.ITALIC
    )
    assert base.attr == Attr.BOLD


def test_border_styles():
    rounded = make_border_style(BorderShape.ROUNDED, True)
    assert (rounded.top_left, rounded.bottom_right) == ("╭", "╯")
    sharp = make_border_style(BorderShape.SHARP, True)
    assert (sharp.top_left, sharp.horizontal, sharp.vertical) == ("┌", "─", "│")
    ascii_style = make_border_style(BorderShape.ROUNDED, False)
    assert (ascii_style.horizontal, ascii_style.vertical, ascii_style.top_left) == (
        "-",
        "|",
        "+",
    )
    assert ascii_style.shape == BorderShape.ROUNDED


def test_transparent_border():
    border = make_transparent_border()
    assert border.shape == BorderShape.ROUNDED
    assert {border.horizontal, border.vertical, border.top_left, border.bottom_right} == {" "}


def test_empty_and_no_color_themes():
    empty = empty_theme()
    assert empty.colored is True
    assert empty.prompt == ColorAttr(COL_UNDEFINED, Attr.UNDEFINED)
    plain = no_color_theme()
    assert plain.colored is False
    assert plain.match == ColorAttr(COL_DEFAULT, Attr.UNDERLINE)
    assert plain.current_match.attr == Attr.REVERSE | Attr.UNDERLINE


def test_init_theme_takes_base_colors():
    theme = empty_theme()
    palette = init_theme(theme, DARK256, False)
    assert theme.prompt.color == 110
    assert theme.gutter.color == 236
    assert theme.preview_fg.color == COL_DEFAULT
    assert palette.prompt == ColorPair(110, COL_DEFAULT, Attr.UNDEFINED)
    assert palette.cursor == ColorPair(161, 236, Attr.UNDEFINED)
    assert palette.cursor_empty == ColorPair(COL_DEFAULT, 236, Attr.REGULAR)


def test_init_theme_keeps_user_overrides():
    theme = empty_theme()
    theme.prompt = ColorAttr(200, Attr.BOLD)
    theme.match = ColorAttr(COL_UNDEFINED, Attr.UNDERLINE)
    palette = init_theme(theme, DEFAULT16, False)
    assert palette.prompt == ColorPair(200, COL_DEFAULT, Attr.BOLD)
    assert theme.match == ColorAttr(2, Attr.UNDERLINE)


def test_init_theme_force_black():
    theme = empty_theme()
    palette = init_theme(theme, DEFAULT16, True)
    assert theme.bg.color == COL_BLACK
    assert palette.normal.bg == COL_BLACK
    assert palette.preview.bg == COL_BLACK


def test_reverse_default_clears_background():
    theme = no_color_theme()
    palette = init_theme(theme, DEFAULT16, False)
    assert palette.current == ColorPair(COL_DEFAULT, COL_DEFAULT, Attr.REVERSE)


def test_make_palette_preview_border():
    theme = empty_theme()
    theme.border = ColorAttr(59)
    theme.preview_bg = ColorAttr(17)
    palette = make_palette(theme)
    assert palette.preview_border == ColorPair(59, 17, Attr.UNDEFINED)


def test_event_type_arithmetic():
    assert EventType(EventType.ALT_A + 3) is EventType.ALT_D
    assert EventType(EventType.ALT_0 + ord("a") - ord("0")) is EventType.ALT_A
    assert EventType(EventType.CTRL_ALT_A + 12) is EventType.CTRL_ALT_M
    assert EventType(27) is EventType.ESC
    assert EventType(9) is EventType.TAB