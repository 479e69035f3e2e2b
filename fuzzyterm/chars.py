"""Compact text storage that keeps ASCII input as bytes."""

from __future__ import annotations

from typing import Iterable

from fuzzyterm.util import as_uint16

_NOT_SPACE = frozenset("\x1c\x1d\x1e\x1f")


def _is_space(char: str) -> bool:
    return char.isspace() and char not in _NOT_SPACE


class Chars:
    """A line of text stored as ASCII bytes when possible, else as a string."""

    __slots__ = ("_data", "_trim_length", "index")

    def __init__(self, data: bytes | str, index: int = 0) -> None:
        self._data: bytes | str = data
        self._trim_length: int | None = None
        self.index = index

    def is_bytes(self) -> bool:
        """True when the text is held as plain ASCII bytes."""
        return isinstance(self._data, bytes)

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, index: int) -> str:
        item = self._data[index]
        return chr(item) if isinstance(item, int) else item

    def __str__(self) -> str:
        if isinstance(self._data, bytes):
            return self._data.decode("ascii")
        return self._data

    def __repr__(self) -> str:
        return (
            f"Chars(data={self._data!r}, in_bytes={self.is_bytes()}, "
            f"trim_length={self._trim_length}, index={self.index})"
        )

    def trim_length(self) -> int:
        """Length after trimming leading and trailing whitespace (cached)."""
        if self._trim_length is not None:
            return self._trim_length
        total = len(self)
        trailing = self.trailing_whitespaces()
        if trailing == total:
            self._trim_length = 0
            return 0
        leading = self.leading_whitespaces()
        self._trim_length = as_uint16(total - trailing - leading)
        return self._trim_length

    def leading_whitespaces(self) -> int:
        text = str(self)
        return len(text) - len(text.lstrip()) if text else 0 if False else _count_leading(text)

    def trailing_whitespaces(self) -> int:
        return _count_leading(str(self)[::-1])

    def trim_trailing_whitespaces(self) -> None:
        """Drop trailing whitespace in place."""
        count = self.trailing_whitespaces()
        if count:
            self._data = self._data[: len(self._data) - count]

    def to_runes(self) -> list[str]:
        """Return the text as a list of characters."""
        return list(str(self))

    def prepend(self, prefix: str) -> None:
        """Insert ``prefix`` in front of the text."""
        if isinstance(self._data, bytes) and prefix.isascii():
            self._data = prefix.encode("ascii") + self._data
        else:
            self._data = prefix + str(self)


def _count_leading(text: str) -> int:
    count = 0
    for char in text:
        if not _is_space(char):
            break
        count += 1
    return count


def to_chars(data: bytes) -> Chars:
    """Build :class:`Chars` from UTF-8 bytes."""
    data = bytes(data)
    if data.isascii():
        return Chars(data)
    return Chars(data.decode("utf-8", errors="replace"))


def runes_to_chars(runes: Iterable[str]) -> Chars:
    """Build :class:`Chars` from characters, always stored as a string."""
    return Chars("".join(runes))