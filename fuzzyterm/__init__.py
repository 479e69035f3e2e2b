"""Terminal rendering, key decoding, colour themes and text utilities for fuzzy finders."""

__version__ = "0.1.0"
__all__ = ["chars", "eventbox", "keys", "light", "tui", "util"]