from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Optional

from .board import KIND_TO_CHAR, Color, Kind, file_of, offboard, rank_of, tile
from .errors import OffBoardTileError


class CastleSide(Enum):
    KINGSIDE = "kingside"
    QUEENSIDE = "queenside"


class CastlingRights(IntFlag):
    """Four independent castling flags."""

    NONE = 0
    WHITE_KINGSIDE = 1
    WHITE_QUEENSIDE = 2
    BLACK_KINGSIDE = 4
    BLACK_QUEENSIDE = 8
    ALL = 15


CASTLING_RIGHT = {
    (Color.WHITE, CastleSide.KINGSIDE): CastlingRights.WHITE_KINGSIDE,
    (Color.WHITE, CastleSide.QUEENSIDE): CastlingRights.WHITE_QUEENSIDE,
    (Color.BLACK, CastleSide.KINGSIDE): CastlingRights.BLACK_KINGSIDE,
    (Color.BLACK, CastleSide.QUEENSIDE): CastlingRights.BLACK_QUEENSIDE,
}
COLOR_RIGHTS = (
    CastlingRights.WHITE_KINGSIDE | CastlingRights.WHITE_QUEENSIDE,
    CastlingRights.BLACK_KINGSIDE | CastlingRights.BLACK_QUEENSIDE,
)

# King and rook files before and after castling, per side
CASTLE_FILES = {
    CastleSide.KINGSIDE: {"king": (4, 6), "rook": (7, 5), "between": (5, 6)},
    CastleSide.QUEENSIDE: {"king": (4, 2), "rook": (0, 3), "between": (3, 2, 1)},
}


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    A Move is a plain value: it is only meaningful relative to the position it
    was generated from.

    Attributes:
        origin (int): 0x88 tile the piece leaves.
        dest (int): 0x88 tile the piece lands on (the king's tile for castles).
        piece (Kind): Kind of the moving piece (the pawn for promotions).
        capture (bool): Takes an enemy piece, including en passant.
        castle (Optional[CastleSide]): Castle side, ``None`` otherwise.
        en_passant (bool): En-passant capture.
        pawn (bool): Any pawn move.
        push (bool): Two-square pawn advance.
        promotion (Optional[Kind]): Promotion kind, if any.
    """

    origin: int
    dest: int
    piece: Kind
    capture: bool = False
    castle: Optional[CastleSide] = None
    en_passant: bool = False
    pawn: bool = False
    push: bool = False
    promotion: Optional[Kind] = None

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = KIND_TO_CHAR[self.promotion] if self.promotion is not None else ""
        return tile_name(self.origin) + tile_name(self.dest) + promo

    def long_notation(self) -> str:
        """Render as ``e2-e4``, ``Ng1-f3``, ``e7xd8=Q`` or ``O-O``."""
        if self.castle is CastleSide.KINGSIDE:
            return "O-O"
        if self.castle is CastleSide.QUEENSIDE:
            return "O-O-O"
        x = "x" if self.capture else "-"
        text = f"{tile_name(self.origin)}{x}{tile_name(self.dest)}"
        if self.pawn:
            if self.promotion is not None:
                text += "=" + KIND_TO_CHAR[self.promotion].upper()
            return text
        return KIND_TO_CHAR[self.piece].upper() + text

    def __str__(self) -> str:
        return self.to_uci()


def parse_tile(s: str) -> int:
    """Convert algebraic notation into a 0x88 tile.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: 0x88 tile index.

    Raises:
        OffBoardTileError: If ``s`` does not name one of a1..h8.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise OffBoardTileError(f"invalid square: {s!r}")
    return tile(int(s[1]) - 1, ord(s[0]) - ord("a"))


def tile_name(t: int) -> str:
    """Convert a 0x88 tile into algebraic notation.

    Raises:
        OffBoardTileError: If ``t`` fails the off-board test.
    """
    if t < 0 or offboard(t):
        raise OffBoardTileError(f"invalid tile index: {t}")
    return chr(ord("a") + file_of(t)) + str(rank_of(t) + 1)
