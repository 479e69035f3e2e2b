"""Small helpers: character widths, clamping, shell commands and sync primitives."""

from __future__ import annotations

import os
import signal
import subprocess
import sys
import threading
from array import array
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from wcwidth import wcwidth

_T = TypeVar("_T")

_UINT16_MAX = 0xFFFF

_rune_widths: dict[str, int] = {}


def rune_width(r: str, prefix_width: int, tabstop: int) -> int:
    """Return the display width of character ``r`` at column ``prefix_width``."""
    if r == "\t":
        return tabstop - prefix_width % tabstop
    cached = _rune_widths.get(r)
    if cached is not None:
        return cached
    if r in ("\n", "\r"):
        return 1
    width = max(wcwidth(r), 0)
    _rune_widths[r] = width
    return width


def constrain(val: _T, minimum: _T, maximum: _T) -> _T:
    """Limit ``val`` to the closed range [minimum, maximum]."""
    if val < minimum:  # type: ignore[operator]
        return minimum
    if val > maximum:  # type: ignore[operator]
        return maximum
    return val


def as_uint16(val: int) -> int:
    """Clamp an integer into the unsigned 16-bit range."""
    if val > _UINT16_MAX:
        return _UINT16_MAX
    if val < 0:
        return 0
    return val


def dur_within(val: _T, minimum: _T, maximum: _T) -> _T:
    """Limit a duration to the given bounds."""
    return constrain(val, minimum, maximum)


def is_tty() -> bool:
    """Return True if standard input is a terminal."""
    stdin = sys.stdin
    if stdin is None:
        return False
    try:
        return stdin.isatty()
    except (ValueError, OSError):
        return False


def once(next_response: bool) -> Callable[[], bool]:
    """Return a function that yields ``next_response`` once, then False."""
    state = next_response

    def _next() -> bool:
        nonlocal state
        previous, state = state, False
        return previous

    return _next


def is_windows() -> bool:
    """Return True when running on Windows."""
    return sys.platform == "win32"


def set_nonblock(fd: int, nonblock: bool) -> None:
    """Switch a file descriptor between blocking and non-blocking mode."""
    os.set_blocking(fd, not nonblock)


def read(fd: int, size: int) -> bytes:
    """Read up to ``size`` bytes from a file descriptor."""
    return os.read(fd, size)


@dataclass
class ShellCommand:
    """A command line to be run by a shell, optionally in its own process group."""

    args: list[str]
    setpgid: bool = False
    process: subprocess.Popen | None = field(default=None, init=False, repr=False)

    def start(self, **kwargs: Any) -> subprocess.Popen:
        """Start the command; keyword arguments go to :class:`subprocess.Popen`."""
        if self.setpgid:
            kwargs.setdefault("start_new_session", True)
        self.process = subprocess.Popen(self.args, **kwargs)
        return self.process

    def kill(self) -> None:
        """Kill the process group of the started command."""
        if self.process is None:
            raise RuntimeError("command has not been started")
        os.killpg(self.process.pid, signal.SIGKILL)


def exec_command(command: str, setpgid: bool) -> ShellCommand:
    """Prepare ``command`` to be run by ``$SHELL`` (``sh`` when unset)."""
    shell = os.environ.get("SHELL") or "sh"
    return exec_command_with(shell, command, setpgid)


def exec_command_with(shell: str, command: str, setpgid: bool) -> ShellCommand:
    """Prepare ``command`` to be run by the given shell."""
    return ShellCommand([shell, "-c", command], setpgid)


class AtomicBool:
    """A boolean with synchronised access."""

    def __init__(self, initial_state: bool = False) -> None:
        self._lock = threading.Lock()
        self._state = bool(initial_state)

    def get(self) -> bool:
        with self._lock:
            return self._state

    def set(self, new_state: bool) -> bool:
        with self._lock:
            self._state = bool(new_state)
        return bool(new_state)


@dataclass
class Slab:
    """Reusable scratch arrays of 16-bit and 32-bit integers."""

    i16: array
    i32: array


def make_slab(size16: int, size32: int) -> Slab:
    """Create a slab with zero-filled arrays of the given sizes."""
    return Slab(i16=array("h", bytes(2 * size16)), i32=array("i", [0]) * size32)