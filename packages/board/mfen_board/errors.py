"""Error taxonomy shared by every rendering stage."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    INVALID_SIZE = 1
    INVALID_CHARACTERS = 2
    IMAGE_CREATION_FAILED = 3
    UNSUPPORTED_MIME_KIND = 4
    CACHE_DIRECTORY_UNCREATABLE = 5
    CACHE_DIRECTORY_UNWRITABLE = 6
    INVALID_HEX = 7
    SPRITE_UNAVAILABLE = 8
    INVALID_FILTER = 9
    INVALID_QUALITY = 10


class MfenError(Exception):
    """Recoverable failure carrying the code shown on the error image."""

    code: ErrorCode = ErrorCode.IMAGE_CREATION_FAILED

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def as_pair(self) -> tuple[int, str]:
        return int(self.code), self.message


class SizeError(MfenError, ValueError):
    code = ErrorCode.INVALID_SIZE


class PositionError(MfenError, ValueError):
    code = ErrorCode.INVALID_CHARACTERS


class ColorError(MfenError, ValueError):
    code = ErrorCode.INVALID_HEX


class ImageCreationError(MfenError):
    code = ErrorCode.IMAGE_CREATION_FAILED


class MimeKindError(MfenError, ValueError):
    code = ErrorCode.UNSUPPORTED_MIME_KIND


class FilterError(MfenError, ValueError):
    code = ErrorCode.INVALID_FILTER


class QualityError(MfenError, ValueError):
    code = ErrorCode.INVALID_QUALITY


class CacheDirectoryError(MfenError, OSError):
    code = ErrorCode.CACHE_DIRECTORY_UNCREATABLE


class SpriteError(MfenError):
    code = ErrorCode.SPRITE_UNAVAILABLE
