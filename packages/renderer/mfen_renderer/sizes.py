"""Output size presets and resolution."""

from __future__ import annotations

from dataclasses import dataclass

from mfen_board.errors import SizeError

CANVAS_SIZE = 1024
SQUARE_SIZE = CANVAS_SIZE // 8
DEFAULT_SIZE = "medium"

PRESET_SIZES: dict[str, int] = {
    "tiny": 128,
    "small": 256,
    "medium": 384,
    "large": 512,
    "huge": 1024,
}


@dataclass(frozen=True)
class SizeInfo:
    pixels: int
    preset: str | None


def _as_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def resolve_size(value: object = None) -> int:
    """Resolve a preset name or pixel count to an edge length in pixels.

    Numbers above the canvas size are clamped; zero, negative and missing
    values fall back to the medium preset. Unknown preset names raise.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return PRESET_SIZES[DEFAULT_SIZE]
    number = _as_number(value)
    if number is not None:
        if number != number or number < 1:
            return PRESET_SIZES[DEFAULT_SIZE]
        return int(min(CANVAS_SIZE, number))
    name = str(value).strip().lower()
    if name not in PRESET_SIZES:
        raise SizeError("illegal size was given.")
    return PRESET_SIZES[name]


def describe_size(value: object = None) -> SizeInfo:
    pixels = resolve_size(value)
    preset = next((name for name, px in PRESET_SIZES.items() if px == pixels), None)
    return SizeInfo(pixels=pixels, preset=preset)
