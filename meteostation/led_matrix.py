"""Alert patterns for the 5x5 WS2812 LED matrix."""

from __future__ import annotations

from typing import Callable

NUM_PIXELS = 25

# Each pattern is drawn row by row; '#' marks a lit pixel.
_PATTERN_ART = (
    # square: all fine
    ("#####", "#...#", "#...#", "#...#", "#####"),
    # exclamation mark: attention
    ("..#..", ".....", "..#..", "..#..", "..#.."),
    # cross: critical
    ("#...#", ".#.#.", "..#..", ".#.#.", "#...#"),
)

PATTERNS: tuple[tuple[bool, ...], ...] = tuple(
    tuple(cell == "#" for row in art for cell in row) for art in _PATTERN_ART
)


def _channel(name: str, value: int) -> int:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be in 0..255, got {value}")
    return value


def urgb_u32(r: int, g: int, b: int) -> int:
    """Pack an RGB colour into the GRB word the LEDs expect."""
    return (_channel("g", g) << 16) | (_channel("r", r) << 8) | _channel("b", b)


def pattern_words(r: int, g: int, b: int, number: int) -> list[int]:
    """Return the GRB colour for each pixel of pattern ``number``; unlit pixels are 0."""
    if not 0 <= number < len(PATTERNS):
        raise IndexError(f"no pattern {number}")
    color = urgb_u32(r, g, b)
    return [color if lit else 0 for lit in PATTERNS[number]]


class LedMatrix:
    """Sends patterns to the matrix through a callable that pushes one word."""

    def __init__(self, put_pixel: Callable[[int], object]) -> None:
        self.put_pixel = put_pixel

    def show(self, r: int, g: int, b: int, number: int) -> None:
        """Light pattern ``number`` in the given colour."""
        for word in pattern_words(r, g, b, number):
            self.put_pixel((word << 8) & 0xFFFFFFFF)