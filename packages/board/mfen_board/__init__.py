"""Board position and color decoding for MFEN rendering."""

from .colors import decode as decode_color
from .colors import encode as encode_color
from .colors import normalize_hex
from .errors import (
    CacheDirectoryError,
    ColorError,
    ErrorCode,
    FilterError,
    ImageCreationError,
    MfenError,
    MimeKindError,
    PositionError,
    QualityError,
    SizeError,
    SpriteError,
)
from .models import BoardGrid, Piece, PieceColor, PieceKind, RGBColor
from .position import STARTING_POSITION, parse, placement_field, to_position_string

__all__ = [
    "BoardGrid",
    "CacheDirectoryError",
    "ColorError",
    "ErrorCode",
    "FilterError",
    "ImageCreationError",
    "MfenError",
    "MimeKindError",
    "Piece",
    "PieceColor",
    "PieceKind",
    "PositionError",
    "QualityError",
    "RGBColor",
    "STARTING_POSITION",
    "SizeError",
    "SpriteError",
    "decode_color",
    "encode_color",
    "normalize_hex",
    "parse",
    "placement_field",
    "to_position_string",
]
