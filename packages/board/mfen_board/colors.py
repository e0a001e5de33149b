"""Hex color decoding for board square colors."""

from __future__ import annotations

import re

from .errors import ColorError
from .models import RGBColor

_HEX_RE = re.compile(r"^[0-9a-fA-F]{6}$")


def normalize_hex(value: str) -> str:
    """Strip prefixes, expand shorthand and return the uppercase 6-digit form."""
    text = str(value).strip()
    if text.startswith("#"):
        text = text[1:]
    if text[:2].lower() == "0x":
        text = text[2:]
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if not _HEX_RE.match(text):
        raise ColorError(f"invalid hex color '{value}' was given.")
    return text.upper()


def decode(value: str) -> RGBColor:
    text = normalize_hex(value)
    return RGBColor(r=int(text[0:2], 16), g=int(text[2:4], 16), b=int(text[4:6], 16))


def encode(color: RGBColor) -> str:
    return color.hex
