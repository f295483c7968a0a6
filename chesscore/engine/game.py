from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .errors import IllegalMoveError
from .move import Move
from .notation import parse_san, parse_uci, to_san
from .position import Position
from .zobrist import compute_hash


logger = logging.getLogger(__name__)


@dataclass
class Game:
    """Game wrapper around a position with helper operations.

    Responsibility: track position state, expose legal moves, apply and undo
    moves, report game-end flags.
    """

    position: Position
    move_stack: List[Move] = field(default_factory=list)
    san_stack: List[str] = field(default_factory=list)
    repetition: Dict[int, int] = field(default_factory=dict)

    @classmethod
    def new(cls) -> "Game":
        return cls(position=Position.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(position=Position.from_fen(fen))

    def to_fen(self) -> str:
        return self.position.to_fen()

    def __post_init__(self) -> None:
        # Seed repetition with current position
        h = compute_hash(self.position)
        self.repetition[h] = self.repetition.get(h, 0) + 1

    def legal_moves(self) -> List[Move]:
        return self.position.legal_moves()

    def apply_move(self, move: Move) -> None:
        # Validate legality; only generated values are accepted
        if move not in self.position.legal_moves():
            logger.debug("rejected move", extra={"move": move.to_uci(), "fen": self.to_fen()})
            raise IllegalMoveError(f"illegal move: {move.to_uci()}")
        san = to_san(self.position, move)
        self.position.make_move(move)
        self.move_stack.append(move)
        self.san_stack.append(san)
        h = compute_hash(self.position)
        self.repetition[h] = self.repetition.get(h, 0) + 1

    def push_uci(self, text: str) -> Move:
        """Resolve UCI text against the current position and apply it."""
        move = parse_uci(self.position, text)
        self.apply_move(move)
        return move

    def push_san(self, text: str) -> Move:
        """Resolve SAN/short-hand text against the current position and apply it."""
        move = parse_san(self.position, text)
        self.apply_move(move)
        return move

    def undo_move(self) -> Move:
        if not self.move_stack:
            raise ValueError("no moves to undo")
        # Decrement count for current position
        curr = compute_hash(self.position)
        if curr in self.repetition:
            self.repetition[curr] -= 1
            if self.repetition[curr] <= 0:
                del self.repetition[curr]
        last = self.move_stack.pop()
        self.san_stack.pop()
        self.position.unmake_move()
        logger.debug("undid move", extra={"move": last.to_uci()})
        return last

    # --- State flags for protocol ---
    def in_check(self) -> bool:
        return self.position.in_check()

    def checkmate(self) -> bool:
        return self.in_check() and not self.legal_moves()

    def stalemate(self) -> bool:
        return (not self.in_check()) and not self.legal_moves()

    def is_draw(self) -> bool:
        # Draw by 50-move rule, stalemate, or threefold repetition
        if self.position.halfmove_clock >= 100:
            return True
        if self.stalemate():
            return True
        count = self.repetition.get(compute_hash(self.position), 0)
        return count >= 3

    def move_history_uci(self) -> List[str]:
        return [m.to_uci() for m in self.move_stack]

    def move_history_san(self) -> List[str]:
        return list(self.san_stack)
