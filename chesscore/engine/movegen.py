from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

from .board import (
    BACK_RANK,
    PAWN_FORWARD,
    PAWN_START_RANK,
    PROMOTION_KINDS,
    SLIDE_DELTAS,
    STEP_DELTAS,
    TILES,
    Kind,
    offboard,
    rank_of,
    tile,
)
from .move import CASTLE_FILES, CASTLING_RIGHT, CastleSide, Move

if TYPE_CHECKING:  # pragma: no cover
    from .position import Position


def pseudo_legal_moves(position: "Position") -> Iterator[Move]:
    """Yield pseudo-legal moves for the side to move.

    Pseudo-legal moves obey piece geometry, blocking and capture rules but may
    leave the mover's own king in check; castles are emitted as candidates
    whose check conditions are left to the legality filter.

    Order is deterministic: tiles a1..h8 (rank-major), then kingside and
    queenside castles. Every call scans the position afresh.
    """
    board = position.board
    us = position.turn
    for t in TILES:
        p = board.occupant(t)
        if p is None or p.color != us:
            continue
        if p.kind == Kind.PAWN:
            yield from _pawn_moves(position, t)
        elif p.kind in SLIDE_DELTAS:
            yield from _slider_moves(position, t, p.kind)
        else:
            yield from _step_moves(position, t, p.kind)
    yield from _castle_moves(position)


def _step_moves(position: "Position", origin: int, kind: Kind) -> Iterator[Move]:
    board = position.board
    for d in STEP_DELTAS[kind]:
        dest = origin + d
        if offboard(dest):
            continue
        q = board.occupant(dest)
        if q is None:
            yield Move(origin, dest, kind)
        elif q.color != position.turn:
            yield Move(origin, dest, kind, capture=True)


def _slider_moves(position: "Position", origin: int, kind: Kind) -> Iterator[Move]:
    board = position.board
    for d in SLIDE_DELTAS[kind]:
        dest = origin + d
        while not offboard(dest):
            q = board.occupant(dest)
            if q is not None:
                if q.color != position.turn:
                    yield Move(origin, dest, kind, capture=True)
                break
            yield Move(origin, dest, kind)
            dest += d


def _pawn_moves(position: "Position", origin: int) -> Iterator[Move]:
    board = position.board
    us = position.turn
    fwd = PAWN_FORWARD[us]
    last_rank = BACK_RANK[us.opponent]

    # Pushes; a pawn is never on its own last rank so origin + fwd stays on the board
    one = origin + fwd
    if not offboard(one) and board.occupant(one) is None:
        if rank_of(one) == last_rank:
            for kind in PROMOTION_KINDS:
                yield Move(origin, one, Kind.PAWN, pawn=True, promotion=kind)
        else:
            yield Move(origin, one, Kind.PAWN, pawn=True)
            two = one + fwd
            if rank_of(origin) == PAWN_START_RANK[us] and board.occupant(two) is None:
                yield Move(origin, two, Kind.PAWN, pawn=True, push=True)

    # Diagonal captures, including en passant
    for side in (-1, 1):
        dest = one + side
        if offboard(dest):
            continue
        if dest == position.ep_square:
            yield Move(origin, dest, Kind.PAWN, capture=True, en_passant=True, pawn=True)
            continue
        q = board.occupant(dest)
        if q is None or q.color == us:
            continue
        if rank_of(dest) == last_rank:
            for kind in PROMOTION_KINDS:
                yield Move(origin, dest, Kind.PAWN, capture=True, pawn=True, promotion=kind)
        else:
            yield Move(origin, dest, Kind.PAWN, capture=True, pawn=True)


def _castle_moves(position: "Position") -> Iterator[Move]:
    board = position.board
    us = position.turn
    rank = BACK_RANK[us]
    king_home = tile(rank, 4)
    if position.king_tiles[us] != king_home:
        return
    for side in (CastleSide.KINGSIDE, CastleSide.QUEENSIDE):
        if not position.castling & CASTLING_RIGHT[(us, side)]:
            continue
        files = CASTLE_FILES[side]
        rook = board.occupant(tile(rank, files["rook"][0]))
        if rook is None or rook.color != us or rook.kind != Kind.ROOK:
            continue
        if any(board.occupant(tile(rank, f)) is not None for f in files["between"]):
            continue
        yield Move(king_home, tile(rank, files["king"][1]), Kind.KING, castle=side)


def castle_transit_tiles(move: Move) -> tuple[int, ...]:
    """Tiles the king stands on or crosses while castling, origin first."""
    step = 1 if move.dest > move.origin else -1
    return tuple(range(move.origin, move.dest + step, step))
