"""Board rendering, sprites, error images and image codecs."""

from .board import BoardRenderer, dark_square_mask
from .codec import DEFAULT_FILTER, FILTER_STRATEGIES, MimeKind, check_filter, decode, effective_quality, encode
from .error_image import error_text, render_error
from .sizes import CANVAS_SIZE, DEFAULT_SIZE, PRESET_SIZES, SQUARE_SIZE, SizeInfo, describe_size, resolve_size
from .sprites import DirectorySpriteProvider, DrawnSpriteProvider, SpriteProvider, sprite_filename

__all__ = [
    "BoardRenderer",
    "CANVAS_SIZE",
    "DEFAULT_FILTER",
    "DEFAULT_SIZE",
    "DirectorySpriteProvider",
    "DrawnSpriteProvider",
    "FILTER_STRATEGIES",
    "MimeKind",
    "PRESET_SIZES",
    "SQUARE_SIZE",
    "SizeInfo",
    "SpriteProvider",
    "check_filter",
    "dark_square_mask",
    "decode",
    "describe_size",
    "effective_quality",
    "encode",
    "error_text",
    "render_error",
    "resolve_size",
    "sprite_filename",
]
