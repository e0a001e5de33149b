"""Piece sprite providers keyed by piece kind and color."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from PIL import Image, ImageDraw

from mfen_board.errors import SpriteError
from mfen_board.models import PieceColor, PieceKind

from .sizes import SQUARE_SIZE


class SpriteProvider(Protocol):
    def sprite(self, kind: PieceKind, color: PieceColor) -> Image.Image: ...


def sprite_filename(kind: PieceKind, color: PieceColor) -> str:
    return f"{kind.value}_{color.short}.png"


class DirectorySpriteProvider:
    """Loads `{kind}_{w|b}.png` files from a folder, e.g. `rook_w.png`."""

    def __init__(self, folder: Path | str) -> None:
        self.folder = Path(folder)
        self._loaded: dict[tuple[PieceKind, PieceColor], Image.Image] = {}

    def path_for(self, kind: PieceKind, color: PieceColor) -> Path:
        return self.folder / sprite_filename(kind, color)

    def missing(self) -> list[str]:
        return [
            sprite_filename(kind, color)
            for kind in PieceKind
            for color in PieceColor
            if not self.path_for(kind, color).is_file()
        ]

    def sprite(self, kind: PieceKind, color: PieceColor) -> Image.Image:
        key = (kind, color)
        if key in self._loaded:
            return self._loaded[key]
        path = self.path_for(kind, color)
        try:
            with Image.open(path) as img:
                img.load()
                art = img.convert("RGBA") if img.mode in ("RGBA", "LA", "P") else img.convert("RGB")
        except OSError as exc:
            raise SpriteError(f"piece image '{path}' could not be loaded.") from exc
        if art.size != (SQUARE_SIZE, SQUARE_SIZE):
            art = art.resize((SQUARE_SIZE, SQUARE_SIZE), Image.Resampling.LANCZOS)
        self._loaded[key] = art
        return art


_PALETTE = {
    PieceColor.WHITE: ((250, 250, 250, 255), (34, 34, 34, 255)),
    PieceColor.BLACK: ((34, 34, 34, 255), (250, 250, 250, 255)),
}


class DrawnSpriteProvider:
    """Draws simple piece silhouettes on a transparent 128x128 tile."""

    outline_width = 4

    def __init__(self) -> None:
        self._drawn: dict[tuple[PieceKind, PieceColor], Image.Image] = {}

    def missing(self) -> list[str]:
        return []

    def sprite(self, kind: PieceKind, color: PieceColor) -> Image.Image:
        key = (kind, color)
        if key not in self._drawn:
            self._drawn[key] = self._draw(kind, color)
        return self._drawn[key]

    def _draw(self, kind: PieceKind, color: PieceColor) -> Image.Image:
        img = Image.new("RGBA", (SQUARE_SIZE, SQUARE_SIZE), (0, 0, 0, 0))
        draw = ImageDraw.Draw(img)
        fill, line = _PALETTE[color]
        style = {"fill": fill, "outline": line, "width": self.outline_width}

        # Shared pedestal.
        draw.rounded_rectangle((28, 100, 100, 114), radius=4, **style)
        getattr(self, f"_draw_{kind.value}")(draw, style, line)
        return img

    @staticmethod
    def _draw_pawn(draw: ImageDraw.ImageDraw, style: dict, line: tuple) -> None:
        draw.polygon([(44, 100), (52, 64), (76, 64), (84, 100)], **style)
        draw.ellipse((46, 28, 82, 64), **style)

    @staticmethod
    def _draw_rook(draw: ImageDraw.ImageDraw, style: dict, line: tuple) -> None:
        draw.rectangle((40, 48, 88, 100), **style)
        draw.rectangle((34, 36, 94, 50), **style)
        for x0 in (34, 56, 78):
            draw.rectangle((x0, 22, x0 + 16, 38), **style)

    @staticmethod
    def _draw_knight(draw: ImageDraw.ImageDraw, style: dict, line: tuple) -> None:
        draw.polygon(
            [(36, 100), (44, 66), (30, 58), (34, 40), (56, 22), (62, 14), (68, 24), (84, 34), (94, 64), (92, 100)],
            **style,
        )
        draw.ellipse((52, 36, 60, 44), fill=line)

    @staticmethod
    def _draw_bishop(draw: ImageDraw.ImageDraw, style: dict, line: tuple) -> None:
        draw.polygon([(46, 100), (54, 74), (74, 74), (82, 100)], **style)
        draw.ellipse((42, 30, 86, 80), **style)
        draw.ellipse((56, 14, 72, 30), **style)
        draw.line((58, 44, 70, 58), fill=line, width=4)

    @staticmethod
    def _draw_queen(draw: ImageDraw.ImageDraw, style: dict, line: tuple) -> None:
        draw.polygon(
            [(34, 100), (26, 40), (46, 70), (54, 30), (64, 68), (74, 30), (82, 70), (102, 40), (94, 100)],
            **style,
        )
        for cx in (26, 54, 74, 102):
            draw.ellipse((cx - 7, 26, cx + 7, 40), **style)

    @staticmethod
    def _draw_king(draw: ImageDraw.ImageDraw, style: dict, line: tuple) -> None:
        draw.polygon([(36, 100), (30, 52), (98, 52), (92, 100)], **style)
        draw.rounded_rectangle((40, 40, 88, 56), radius=6, **style)
        draw.rectangle((58, 8, 70, 40), **style)
        draw.rectangle((48, 16, 80, 28), **style)
