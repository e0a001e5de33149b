"""Board composition at canvas resolution and downscaling."""

from __future__ import annotations

import numpy as np
from PIL import Image

from mfen_board.errors import ImageCreationError
from mfen_board.models import BoardGrid, RGBColor

from .sizes import CANVAS_SIZE, SQUARE_SIZE
from .sprites import DrawnSpriteProvider, SpriteProvider


def dark_square_mask() -> np.ndarray:
    """Boolean [rank, file] mask of dark squares; the top-left square is light."""
    idx = np.arange(8)
    return (idx[:, None] + idx[None, :]) % 2 == 1


class BoardRenderer:
    """Draws the checkered background and blits piece sprites over it."""

    def __init__(self, sprites: SpriteProvider | None = None) -> None:
        self.sprites = sprites or DrawnSpriteProvider()

    def background(self, light: RGBColor, dark: RGBColor) -> Image.Image:
        block = np.ones((SQUARE_SIZE, SQUARE_SIZE), dtype=bool)
        mask = np.kron(dark_square_mask(), block).astype(bool)
        pixels = np.where(
            mask[..., None],
            np.array(dark.as_tuple(), dtype=np.uint8),
            np.array(light.as_tuple(), dtype=np.uint8),
        ).astype(np.uint8)
        try:
            return Image.fromarray(pixels)
        except (MemoryError, ValueError) as exc:
            raise ImageCreationError("the script could not create an image object.") from exc

    def compose(self, grid: BoardGrid, light: RGBColor, dark: RGBColor) -> Image.Image:
        image = self.background(light, dark)
        for file_idx, rank_idx, piece in grid.pieces():
            art = self.sprites.sprite(piece.kind, piece.color)
            origin = (file_idx * SQUARE_SIZE, rank_idx * SQUARE_SIZE)
            if art.mode == "RGBA":
                image.paste(art, origin, art)
            else:
                image.paste(art, origin)
        return image

    @staticmethod
    def downscale(image: Image.Image, target: int) -> Image.Image:
        if target >= CANVAS_SIZE:
            return image
        return image.resize((target, target), Image.Resampling.LANCZOS)

    def render(self, grid: BoardGrid, light: RGBColor, dark: RGBColor, target: int) -> Image.Image:
        return self.downscale(self.compose(grid, light, dark), target)
