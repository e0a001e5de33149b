"""Piece-placement parsing and re-serialization."""

from __future__ import annotations

import re

from .errors import PositionError
from .models import BOARD_FILES, BOARD_RANKS, BoardGrid, Cell, Piece

STARTING_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

_LEGAL_RE = re.compile(r"[RNBQKP1-8/]+", re.IGNORECASE | re.ASCII)


def placement_field(raw: str) -> str:
    """Return the piece-placement field; move counters, castling and turn are dropped."""
    return raw.strip().split(" ")[0]


def validate(raw: str) -> str:
    placement = placement_field(raw)
    if not _LEGAL_RE.fullmatch(placement):
        raise PositionError("FEN string was empty or contained illegal characters.")
    return placement


def _parse_rank(token: str) -> tuple[Cell, ...]:
    cells: list[Cell] = [None] * BOARD_FILES
    cursor = 0
    for ch in token:
        if cursor >= BOARD_FILES:
            break
        if ch.isdigit():
            cursor += int(ch)
            continue
        cells[cursor] = Piece.from_symbol(ch)
        cursor += 1
    return tuple(cells)


def parse(raw: str) -> BoardGrid:
    """Decode a position string into a BoardGrid.

    Missing or empty rank tokens are empty ranks. Content past the eighth
    file of a rank, and ranks past the eighth, are ignored.
    """
    placement = validate(raw)
    tokens = placement.split("/")[:BOARD_RANKS]
    tokens += [""] * (BOARD_RANKS - len(tokens))
    return BoardGrid(ranks=tuple(_parse_rank(t) for t in tokens))


def to_position_string(grid: BoardGrid) -> str:
    ranks: list[str] = []
    for rank in grid.ranks:
        out = ""
        gap = 0
        for cell in rank:
            if cell is None:
                gap += 1
                continue
            if gap:
                out += str(gap)
                gap = 0
            out += cell.symbol
        if gap:
            out += str(gap)
        ranks.append(out)
    return "/".join(ranks)
