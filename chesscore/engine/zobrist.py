from __future__ import annotations

from typing import List, TYPE_CHECKING

from .board import BOARD_SIZE, PAWN_FORWARD, Color, Kind, file_of, offboard
from .move import CastlingRights

if TYPE_CHECKING:  # pragma: no cover
    from .position import Position


MASK64 = 0xFFFFFFFFFFFFFFFF
CASTLING_ORDER = (
    CastlingRights.WHITE_KINGSIDE,
    CastlingRights.WHITE_QUEENSIDE,
    CastlingRights.BLACK_KINGSIDE,
    CastlingRights.BLACK_QUEENSIDE,
)


class _SplitMix64:
    def __init__(self, seed: int) -> None:
        self.state = seed & MASK64

    def next(self) -> int:
        # Deterministic 64-bit SplitMix64
        self.state = (self.state + 0x9E3779B97F4A7C15) & MASK64
        z = self.state
        z = (z ^ (z >> 30)) * 0xBF58476D1CE4E5B9 & MASK64
        z = (z ^ (z >> 27)) * 0x94D049BB133111EB & MASK64
        z = z ^ (z >> 31)
        return z & MASK64


class Zobrist:
    """Zobrist hashing seeds.

    Table layout:
    - piece_tile[color * 6 + kind][tile]: 128 entries per piece, padding
      tiles included so lookups need no translation
    - side_to_move: toggle for black side to move
    - castling[4]: K, Q, k, q
    - ep_file[8]: files a..h
    """

    piece_tile: List[List[int]]
    side_to_move: int
    castling: List[int]
    ep_file: List[int]

    def __init__(self, seed: int = 0xC0FFEE_F00D_DEAD) -> None:
        prng = _SplitMix64(seed)
        self.piece_tile = [[prng.next() for _ in range(BOARD_SIZE)] for _ in range(12)]
        self.side_to_move = prng.next()
        self.castling = [prng.next() for _ in range(4)]
        self.ep_file = [prng.next() for _ in range(8)]


# Global deterministic table
ZOBRIST = Zobrist()


def compute_hash(position: "Position") -> int:
    """Compute the 64-bit Zobrist hash of ``position``.

    Deterministic across runs given the fixed ZOBRIST table. Counters are not
    part of the key, so repeated placements hash equal.
    """
    h = 0
    for t, p in position.board.pieces():
        h ^= ZOBRIST.piece_tile[p.color * 6 + p.kind][t]
    if position.turn == Color.BLACK:
        h ^= ZOBRIST.side_to_move
    for i, flag in enumerate(CASTLING_ORDER):
        if position.castling & flag:
            h ^= ZOBRIST.castling[i]
    if position.ep_square is not None and _ep_capturable(position):
        h ^= ZOBRIST.ep_file[file_of(position.ep_square)]
    return h & MASK64


def _ep_capturable(position: "Position") -> bool:
    # A pawn of the side to move must stand beside the pushed pawn
    behind = position.ep_square - PAWN_FORWARD[position.turn]
    for t in (behind - 1, behind + 1):
        if offboard(t):
            continue
        p = position.board.occupant(t)
        if p is not None and p.color == position.turn and p.kind == Kind.PAWN:
            return True
    return False
