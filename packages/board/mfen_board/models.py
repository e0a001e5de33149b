"""Typed board and color models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

BOARD_FILES = 8
BOARD_RANKS = 8


class PieceKind(str, Enum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"

    @property
    def letter(self) -> str:
        return _KIND_LETTERS[self]


class PieceColor(str, Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def short(self) -> str:
        return "w" if self is PieceColor.WHITE else "b"


_KIND_LETTERS = {
    PieceKind.PAWN: "p",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.ROOK: "r",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}

LETTER_KINDS = {letter: kind for kind, letter in _KIND_LETTERS.items()}


@dataclass(frozen=True)
class Piece:
    kind: PieceKind
    color: PieceColor

    @property
    def symbol(self) -> str:
        letter = self.kind.letter
        return letter.upper() if self.color is PieceColor.WHITE else letter

    @classmethod
    def from_symbol(cls, symbol: str) -> "Piece":
        kind = LETTER_KINDS[symbol.lower()]
        color = PieceColor.BLACK if symbol.islower() else PieceColor.WHITE
        return cls(kind=kind, color=color)


Cell = Piece | None
Rank = tuple[Cell, ...]


@dataclass(frozen=True)
class BoardGrid:
    """8x8 grid; rank 0 is the top rank as written in the position string."""

    ranks: tuple[Rank, ...]

    def __post_init__(self) -> None:
        if len(self.ranks) != BOARD_RANKS or any(len(r) != BOARD_FILES for r in self.ranks):
            raise ValueError("BoardGrid requires exactly 8 ranks of 8 cells")

    @classmethod
    def empty(cls) -> "BoardGrid":
        return cls(ranks=tuple((None,) * BOARD_FILES for _ in range(BOARD_RANKS)))

    def cell(self, file: int, rank: int) -> Cell:
        return self.ranks[rank][file]

    def pieces(self) -> Iterator[tuple[int, int, Piece]]:
        for rank_idx, rank in enumerate(self.ranks):
            for file_idx, cell in enumerate(rank):
                if cell is not None:
                    yield file_idx, rank_idx, cell

    @property
    def is_empty(self) -> bool:
        return next(self.pieces(), None) is None


@dataclass(frozen=True)
class RGBColor:
    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"Color channel out of range: {channel}")

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @property
    def hex(self) -> str:
        return f"{self.r:02X}{self.g:02X}{self.b:02X}"
