import pytest

from fuzzyterm.chars import Chars, runes_to_chars, to_chars


def test_to_chars_ascii():
    chars = to_chars(b"foobar")
    assert chars.is_bytes() is True
    assert str(chars) == "foobar"


def test_chars_length():
    chars = to_chars("\tabc한글  ".encode())
    assert chars.is_bytes() is False
    assert len(chars) == 8
    assert chars.trim_length() == 5


def test_chars_to_string():
    text = "\tabc한글  "
    assert str(to_chars(text.encode())) == text


@pytest.mark.parametrize(
    "text,expected",
    [
        ("hello", 5),
        ("hello ", 5),
        ("hello  ", 5),
        (" hello", 5),
        ("  hello", 5),
        (" hello ", 5),
        ("  hello  ", 5),
        ("h   o", 5),
        ("  h   o  ", 5),
        ("         ", 0),
    ],
)
def test_trim_length(text, expected):
    assert to_chars(text.encode()).trim_length() == expected


def test_whitespace_counts():
    chars = to_chars(b"  ab   ")
    assert chars.leading_whitespaces() == 2
    assert chars.trailing_whitespaces() == 3


def test_trim_trailing_whitespaces():
    chars = to_chars("  가나 \t".encode())
    chars.trim_trailing_whitespaces()
    assert str(chars) == "  가나"
    assert len(chars) == 4


def test_getitem_and_runes():
    chars = to_chars("a한b".encode())
    assert chars[1] == "한"
    assert chars.to_runes() == ["a", "한", "b"]
    ascii_chars = to_chars(b"xyz")
    assert ascii_chars[2] == "z"
    assert ascii_chars.to_runes() == ["x", "y", "z"]


def test_runes_to_chars_not_bytes():
    chars = runes_to_chars(["a", "b"])
    assert chars.is_bytes() is False
    assert str(chars) == "ab"


def test_prepend():
    chars = to_chars(b"bar")
    chars.prepend("foo")
    assert str(chars) == "foobar"
    assert chars.is_bytes() is True
    chars.prepend("한")
    assert str(chars) == "한foobar"
    assert chars.is_bytes() is False


def test_index_attribute():
    chars = Chars(b"x", index=7)
    assert chars.index == 7