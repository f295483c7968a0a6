from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from .board import (
    BISHOP_DELTAS,
    KING_DELTAS,
    KNIGHT_DELTAS,
    PAWN_FORWARD,
    ROOK_DELTAS,
    Color,
    Kind,
    offboard,
)

if TYPE_CHECKING:  # pragma: no cover
    from .position import Position


# Ray tables walked backward from the target tile: (deltas, kinds that attack along them)
_RAYS = (
    (ROOK_DELTAS, (Kind.ROOK, Kind.QUEEN)),
    (BISHOP_DELTAS, (Kind.BISHOP, Kind.QUEEN)),
)
_STEPS = (
    (KNIGHT_DELTAS, Kind.KNIGHT),
    (KING_DELTAS, Kind.KING),
)


def is_attacked(position: "Position", tile: int, by_color: Color) -> bool:
    """Return True if ``by_color`` has a piece that could capture on ``tile``.

    This is a one-ply geometric threat test, not a legality test: whether the
    attacking move would expose its own king is irrelevant.

    The generator's delta tables are walked outward from ``tile``: for each
    slider direction only the first occupant matters, knights and kings are a
    single step, and pawns are looked for on the two tiles diagonally behind
    ``tile`` from the attacker's point of view.
    """
    return _scan(position, tile, by_color, first_only=True) != []


def attackers(position: "Position", tile: int, by_color: Color) -> List[int]:
    """Return the tiles of every ``by_color`` piece attacking ``tile``."""
    return _scan(position, tile, by_color, first_only=False)


def in_check(position: "Position", color: Optional[Color] = None) -> bool:
    """Return True if ``color`` (default: side to move) has its king attacked."""
    c = position.turn if color is None else color
    return is_attacked(position, position.king_tiles[c], c.opponent)


def _scan(position: "Position", tile: int, by_color: Color, *, first_only: bool) -> List[int]:
    board = position.board
    found: List[int] = []

    # Pawns: an attacker stands one rank "behind" tile, seen from its own forward direction
    behind = tile - PAWN_FORWARD[by_color]
    for side in (-1, 1):
        t = behind + side
        p = board.occupant(t)
        if p is not None and p.color == by_color and p.kind == Kind.PAWN:
            found.append(t)
            if first_only:
                return found

    for deltas, kind in _STEPS:
        for d in deltas:
            t = tile + d
            p = board.occupant(t)
            if p is not None and p.color == by_color and p.kind == kind:
                found.append(t)
                if first_only:
                    return found

    for deltas, kinds in _RAYS:
        for d in deltas:
            t = tile + d
            while not offboard(t):
                p = board.occupant(t)
                if p is not None:
                    if p.color == by_color and p.kind in kinds:
                        found.append(t)
                        if first_only:
                            return found
                    break
                t += d

    return found
