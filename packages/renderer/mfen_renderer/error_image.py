"""In-band error images returned instead of a board."""

from __future__ import annotations

from PIL import Image, ImageDraw, ImageFont

_PADDING = 2


def _font() -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype("DejaVuSansMono.ttf", 13)
    except OSError:
        return ImageFont.load_default()


def error_text(code: int, message: str) -> str:
    return f"Error {code}: {message}"


def render_error(code: int, message: str) -> Image.Image:
    """Transparent RGBA image just large enough for the black error line."""
    text = error_text(code, message)
    font = _font()
    left, top, right, bottom = font.getbbox(text)
    width = max(1, right - min(left, 0) + _PADDING * 2)
    height = max(1, bottom - min(top, 0) + _PADDING * 2)

    image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.text((_PADDING - min(left, 0), _PADDING - min(top, 0)), text, font=font, fill=(0, 0, 0, 255))
    return image
