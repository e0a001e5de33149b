"""PNG/JPEG encode and decode through Pillow."""

from __future__ import annotations

import zlib
from enum import Enum
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from mfen_board.errors import FilterError, MimeKindError, QualityError


class MimeKind(str, Enum):
    PNG = "image/png"
    JPEG = "image/jpeg"

    @property
    def extension(self) -> str:
        return ".png" if self is MimeKind.PNG else ".jpg"

    @property
    def pil_format(self) -> str:
        return "PNG" if self is MimeKind.PNG else "JPEG"

    @property
    def quality_range(self) -> tuple[int, int]:
        return (0, 9) if self is MimeKind.PNG else (0, 100)

    @property
    def default_quality(self) -> int:
        return 9 if self is MimeKind.PNG else 90

    @classmethod
    def parse(cls, value: "str | MimeKind") -> "MimeKind":
        if isinstance(value, MimeKind):
            return value
        key = str(value).strip().lower()
        kind = _MIME_ALIASES.get(key)
        if kind is None:
            raise MimeKindError("unusable MIME type given.")
        return kind


_MIME_ALIASES = {
    "image/png": MimeKind.PNG,
    "png": MimeKind.PNG,
    "image/jpeg": MimeKind.JPEG,
    "image/jpg": MimeKind.JPEG,
    "jpeg": MimeKind.JPEG,
    "jpg": MimeKind.JPEG,
}

# PNG filter settings map to zlib compression strategies.
FILTER_STRATEGIES: dict[str, int] = {
    "default": zlib.Z_DEFAULT_STRATEGY,
    "filtered": zlib.Z_FILTERED,
    "huffman": zlib.Z_HUFFMAN_ONLY,
    "rle": zlib.Z_RLE,
    "fixed": zlib.Z_FIXED,
}

DEFAULT_FILTER = "default"


def check_filter(name: str) -> str:
    key = str(name).strip().lower()
    if key not in FILTER_STRATEGIES:
        raise FilterError(f"unknown PNG filter '{name}' was given.")
    return key


def effective_quality(kind: MimeKind, quality: int | None) -> int:
    if quality is None:
        return kind.default_quality
    try:
        value = int(quality)
    except (TypeError, ValueError, OverflowError):
        raise QualityError(f"quality '{quality}' is not a whole number.") from None
    low, high = kind.quality_range
    return max(low, min(high, value))


def _flatten(image: Image.Image) -> Image.Image:
    if image.mode == "RGB":
        return image
    if image.mode in ("RGBA", "LA") or "transparency" in image.info:
        rgba = image.convert("RGBA")
        base = Image.new("RGB", rgba.size, (255, 255, 255))
        base.paste(rgba, mask=rgba.getchannel("A"))
        return base
    return image.convert("RGB")


def encode(
    image: Image.Image,
    kind: MimeKind,
    quality: int | None = None,
    filter_setting: str = DEFAULT_FILTER,
) -> bytes:
    buf = BytesIO()
    level = effective_quality(kind, quality)
    if kind is MimeKind.PNG:
        image.save(
            buf,
            format="PNG",
            compress_level=level,
            compress_type=FILTER_STRATEGIES[check_filter(filter_setting)],
        )
    else:
        # JPEG has no alpha; transparent error images are flattened onto white.
        _flatten(image).save(buf, format="JPEG", quality=level)
    return buf.getvalue()


def decode(data: bytes, kind: MimeKind) -> Image.Image:
    """Decode and fully load an image; raises ValueError on corrupt or mismatched data."""
    try:
        with Image.open(BytesIO(data)) as img:
            if img.format != kind.pil_format:
                raise ValueError(f"expected {kind.pil_format}, found {img.format}")
            img.load()
            return img.copy()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ValueError(f"could not decode {kind.pil_format} data: {exc}") from exc

