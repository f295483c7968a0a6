from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional

from .attacks import in_check, is_attacked
from .board import BACK_RANK, PAWN_FORWARD, Color, Kind, Piece, tile
from .move import CASTLE_FILES, COLOR_RIGHTS, CastlingRights, Move
from .movegen import castle_transit_tiles, pseudo_legal_moves

if TYPE_CHECKING:  # pragma: no cover
    from .position import Position


# Rights lost whenever a move leaves or lands on one of these tiles: the king
# leaving home, a rook leaving its corner, or a rook being captured there.
CASTLING_TILE_MASKS: Dict[int, CastlingRights] = {
    tile(BACK_RANK[Color.WHITE], 0): CastlingRights.WHITE_QUEENSIDE,
    tile(BACK_RANK[Color.WHITE], 4): COLOR_RIGHTS[Color.WHITE],
    tile(BACK_RANK[Color.WHITE], 7): CastlingRights.WHITE_KINGSIDE,
    tile(BACK_RANK[Color.BLACK], 0): CastlingRights.BLACK_QUEENSIDE,
    tile(BACK_RANK[Color.BLACK], 4): COLOR_RIGHTS[Color.BLACK],
    tile(BACK_RANK[Color.BLACK], 7): CastlingRights.BLACK_KINGSIDE,
}


@dataclass(frozen=True)
class UndoRecord:
    """Everything needed to reverse exactly one ``apply_move``.

    Attributes:
        move (Move): The move that was applied.
        castling (CastlingRights): Rights before the move.
        ep_square (Optional[int]): En-passant target before the move.
        halfmove_clock (int): Half-move clock before the move.
        captured (Optional[Piece]): Piece removed by the move, if any.
        captured_tile (Optional[int]): Where ``captured`` stood; differs from
            ``move.dest`` for en passant.
    """

    move: Move
    castling: CastlingRights
    ep_square: Optional[int]
    halfmove_clock: int
    captured: Optional[Piece] = None
    captured_tile: Optional[int] = None


def apply_move(position: "Position", move: Move) -> UndoRecord:
    """Apply ``move`` to ``position`` in place and return its undo record.

    The move must be pseudo-legal for this position (normally it comes from
    ``pseudo_legal_moves``); anything else is a caller bug and is not checked.

    Supports: normal moves, captures, promotions, en passant and castling.
    Updates castling rights (including a rook captured on its home tile),
    en-passant target, counters, side to move and the king tile cache.
    """
    board = position.board
    us = position.turn

    captured: Optional[Piece] = None
    captured_tile: Optional[int] = None
    if move.en_passant:
        captured_tile = move.dest - PAWN_FORWARD[us]
        captured = board.occupant(captured_tile)
        board.remove(captured_tile)
    elif move.castle is None:
        captured = board.occupant(move.dest)
        if captured is not None:
            captured_tile = move.dest

    record = UndoRecord(
        move=move,
        castling=position.castling,
        ep_square=position.ep_square,
        halfmove_clock=position.halfmove_clock,
        captured=captured,
        captured_tile=captured_tile,
    )

    if move.castle is not None:
        rank = BACK_RANK[us]
        rook_from, rook_to = CASTLE_FILES[move.castle]["rook"]
        board.move(move.origin, move.dest)
        board.move(tile(rank, rook_from), tile(rank, rook_to))
    else:
        board.move(move.origin, move.dest)
        if move.promotion is not None:
            board.place(move.dest, us, move.promotion)

    if move.piece == Kind.KING:
        position.king_tiles[us] = move.dest

    lost = CASTLING_TILE_MASKS.get(move.origin, CastlingRights.NONE)
    lost |= CASTLING_TILE_MASKS.get(move.dest, CastlingRights.NONE)
    if move.castle is not None:
        lost |= COLOR_RIGHTS[us]
    if lost:
        position.castling &= ~lost

    # En passant lives for exactly one ply
    position.ep_square = move.origin + PAWN_FORWARD[us] if move.push else None

    if move.pawn or captured is not None:
        position.halfmove_clock = 0
    else:
        position.halfmove_clock += 1
    if us == Color.BLACK:
        position.fullmove_number += 1
    position.turn = us.opponent
    return record


def undo_move(position: "Position", record: UndoRecord) -> None:
    """Reverse the ``apply_move`` that produced ``record``.

    Must be called on the position the record came from, with no other
    apply/undo in between.
    """
    board = position.board
    move = record.move
    us = position.turn.opponent

    if move.castle is not None:
        rank = BACK_RANK[us]
        rook_from, rook_to = CASTLE_FILES[move.castle]["rook"]
        board.move(tile(rank, rook_to), tile(rank, rook_from))
        board.move(move.dest, move.origin)
    else:
        board.move(move.dest, move.origin)
        if move.promotion is not None:
            board.place(move.origin, us, Kind.PAWN)
        if record.captured is not None:
            board.put(record.captured_tile, record.captured)

    if move.piece == Kind.KING:
        position.king_tiles[us] = move.origin

    position.castling = record.castling
    position.ep_square = record.ep_square
    position.halfmove_clock = record.halfmove_clock
    if us == Color.BLACK:
        position.fullmove_number -= 1
    position.turn = us


def is_legal(position: "Position", move: Move) -> bool:
    """Return True if the pseudo-legal ``move`` keeps the mover's king safe.

    Castles additionally require every tile the king stands on or crosses
    (origin, intermediate, destination) to be free of enemy attack. All moves
    are then simulated: apply, test the mover's king tile, undo.
    """
    us = position.turn
    them = us.opponent
    if move.castle is not None:
        for t in castle_transit_tiles(move):
            if is_attacked(position, t, them):
                return False
    record = apply_move(position, move)
    try:
        return not is_attacked(position, position.king_tiles[us], them)
    finally:
        undo_move(position, record)


def legal_moves(position: "Position") -> List[Move]:
    """Return all legal moves for the side to move, in generation order."""
    return [m for m in list(pseudo_legal_moves(position)) if is_legal(position, m)]


__all__ = [
    "CASTLING_TILE_MASKS",
    "UndoRecord",
    "apply_move",
    "in_check",
    "is_attacked",
    "is_legal",
    "legal_moves",
    "pseudo_legal_moves",
    "undo_move",
]
