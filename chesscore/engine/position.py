from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .board import BACK_RANK, PAWN_FORWARD, Board, Color, Kind, Piece, rank_of, tile
from .errors import NotationError, PositionError, UnrecognizedPieceError
from .move import CASTLING_RIGHT, CastleSide, CastlingRights, Move, parse_tile, tile_name
from . import rules


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

# FEN letters in canonical order
CASTLING_CHARS = (
    ("K", CastlingRights.WHITE_KINGSIDE),
    ("Q", CastlingRights.WHITE_QUEENSIDE),
    ("k", CastlingRights.BLACK_KINGSIDE),
    ("q", CastlingRights.BLACK_QUEENSIDE),
)


@dataclass
class Position:
    """Board plus game state.

    Notes:
    - ``king_tiles[color]`` caches each king's tile; apply/undo keep it in step
      with the board, it is only scanned for once, at construction.
    - Mutate only through ``make_move``/``unmake_move`` (or
      ``rules.apply_move``/``rules.undo_move``).
    """

    board: Board
    turn: Color
    castling: CastlingRights
    ep_square: Optional[int]
    halfmove_clock: int
    fullmove_number: int
    king_tiles: List[int]
    # internal undo stack for make/unmake
    _history: List["rules.UndoRecord"] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def startpos(cls) -> "Position":
        """Create a position with the standard starting layout, White to move."""
        return cls(
            board=Board.standard(),
            turn=Color.WHITE,
            castling=CastlingRights.ALL,
            ep_square=None,
            halfmove_clock=0,
            fullmove_number=1,
            king_tiles=[tile(0, 4), tile(7, 4)],
        )

    @classmethod
    def from_fen(cls, fen: str) -> "Position":
        """Create a position from a Forsyth–Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Position: Fully initialized position.

        Raises:
            NotationError: If ``fen`` is empty, has the wrong number of fields,
                or contains an invalid castling field, en-passant square or
                move counter.
            UnrecognizedPieceError: If the placement holds an unknown letter.
            PositionError: If the placement breaks a board invariant (one king
                per side, no pawns on the back ranks, side not to move in
                check) or the en-passant target does not follow a double push.

        Notes:
            Nothing is returned unless every field parses, so a caller never
            sees a partially initialized position.
        """
        if not fen or not isinstance(fen, str):
            raise NotationError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise NotationError("FEN must have 6 fields")
        placement, stm, castling_field, ep, halfmove, fullmove = parts

        board = _parse_placement(placement)

        kings: List[List[int]] = [[], []]
        for t, p in board.pieces():
            if p.kind == Kind.KING:
                kings[p.color].append(t)
            elif p.kind == Kind.PAWN and rank_of(t) in BACK_RANK:
                raise PositionError(f"pawn on back rank at {tile_name(t)}")
        if len(kings[Color.WHITE]) != 1 or len(kings[Color.BLACK]) != 1:
            raise PositionError("position needs exactly one king per side")

        if stm not in ("w", "b"):
            raise NotationError("side to move must be 'w' or 'b'")
        turn = Color.WHITE if stm == "w" else Color.BLACK

        castling = CastlingRights.NONE
        if castling_field != "-":
            letters = dict(CASTLING_CHARS)
            for ch in castling_field:
                if ch not in letters:
                    raise NotationError("invalid castling rights")
                castling |= letters[ch]

        ep_square: Optional[int]
        if ep == "-":
            ep_square = None
        else:
            try:
                ep_square = parse_tile(ep)
            except NotationError as e:
                raise NotationError("invalid en passant square") from e
            # the target sits behind the pawn that just pushed
            if rank_of(ep_square) != (5 if turn == Color.WHITE else 2):
                raise NotationError("invalid en passant square rank")
            _check_ep_target(board, ep_square, turn.opponent)

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise NotationError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise NotationError("invalid move counters in FEN")

        position = cls(
            board=board,
            turn=turn,
            castling=castling,
            ep_square=ep_square,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
            king_tiles=[kings[Color.WHITE][0], kings[Color.BLACK][0]],
        )
        # The side that just moved cannot have left its king en prise
        if rules.in_check(position, turn.opponent):
            raise PositionError("side not to move is in check")
        return position

    def to_fen(self) -> str:
        """Serialize the current position into a normalized FEN string."""
        ranks_str: List[str] = []
        for r in range(7, -1, -1):
            run = 0
            row = []
            for f in range(8):
                p = self.board.occupant(tile(r, f))
                if p is None:
                    run += 1
                else:
                    if run > 0:
                        row.append(str(run))
                        run = 0
                    row.append(p.symbol)
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        placement = "/".join(ranks_str)

        stm = "w" if self.turn == Color.WHITE else "b"
        castling = "".join(ch for ch, flag in CASTLING_CHARS if self.castling & flag) or "-"
        ep = tile_name(self.ep_square) if self.ep_square is not None else "-"
        return f"{placement} {stm} {castling} {ep} {self.halfmove_clock} {self.fullmove_number}"

    def copy(self) -> "Position":
        """Return an independent copy (the undo stack is not carried over)."""
        return Position(
            board=self.board.copy(),
            turn=self.turn,
            castling=self.castling,
            ep_square=self.ep_square,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
            king_tiles=list(self.king_tiles),
        )

    def has_right(self, color: Color, side: CastleSide) -> bool:
        return bool(self.castling & CASTLING_RIGHT[(color, side)])

    # --- Rules shortcuts ---
    def pseudo_legal_moves(self) -> List[Move]:
        return list(rules.pseudo_legal_moves(self))

    def legal_moves(self) -> List[Move]:
        return rules.legal_moves(self)

    def is_legal(self, move: Move) -> bool:
        return rules.is_legal(self, move)

    def in_check(self, color: Optional[Color] = None) -> bool:
        """Return True if ``color`` (default: side to move) is in check."""
        return rules.in_check(self, color)

    def make_move(self, move: Move) -> None:
        """Apply ``move`` in place and remember how to reverse it."""
        self._history.append(rules.apply_move(self, move))

    def unmake_move(self) -> Move:
        """Undo the last ``make_move`` and return the move that was undone."""
        if not self._history:
            raise ValueError("no move to unmake")
        record = self._history.pop()
        rules.undo_move(self, record)
        return record.move


def _parse_placement(placement: str) -> Board:
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise NotationError("FEN board must have 8 ranks")
    board = Board()
    for r, rank in zip(range(7, -1, -1), ranks):  # FEN lists rank 8 first
        f = 0
        for ch in rank:
            if ch.isdigit():
                n = int(ch)
                if n < 1 or n > 8:
                    raise NotationError("invalid empty count in FEN rank")
                f += n
            else:
                try:
                    piece = Piece.from_symbol(ch)
                except KeyError:
                    raise UnrecognizedPieceError(f"invalid piece in FEN: {ch!r}") from None
                if f >= 8:
                    raise NotationError("too many squares in FEN rank")
                board.put(tile(r, f), piece)
                f += 1
            if f > 8:
                raise NotationError("too many squares in FEN rank")
        if f != 8:
            raise NotationError("rank does not sum to 8 squares in FEN")
    return board


def _check_ep_target(board: Board, ep_square: int, pusher: Color) -> None:
    # A double push by ``pusher`` left the target empty, the pawn one step
    # beyond it and its start tile empty.
    pawn = board.occupant(ep_square + PAWN_FORWARD[pusher])
    if (
        board.occupant(ep_square) is not None
        or board.occupant(ep_square - PAWN_FORWARD[pusher]) is not None
        or pawn is None
        or pawn.color != pusher
        or pawn.kind != Kind.PAWN
    ):
        raise PositionError(f"no double push behind en passant square {tile_name(ep_square)}")
