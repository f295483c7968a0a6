from __future__ import annotations

from typing import Dict

from .position import Position
from .rules import apply_move, legal_moves, undo_move


def perft(position: Position, depth: int) -> int:
    """Compute perft node count for ``position`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are visited with apply/undo on the one position, which is left
    exactly as it was passed in.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = legal_moves(position)
    if depth == 1:
        return len(moves)

    nodes = 0
    for m in moves:
        record = apply_move(position, m)
        nodes += perft(position, depth - 1)
        undo_move(position, record)
    return nodes


def divide(position: Position, depth: int) -> Dict[str, int]:
    """Return perft(depth - 1) for every root move, keyed by UCI text."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    counts: Dict[str, int] = {}
    for m in legal_moves(position):
        record = apply_move(position, m)
        counts[m.to_uci()] = perft(position, depth - 1)
        undo_move(position, record)
    return counts
