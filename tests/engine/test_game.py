from __future__ import annotations

import pytest

from chesscore.engine.board import Kind
from chesscore.engine.errors import IllegalMoveError
from chesscore.engine.game import Game
from chesscore.engine.move import Move, parse_tile
from chesscore.engine.position import STARTPOS_FEN


def test_fools_mate() -> None:
    game = Game.new()
    for san in ("f3", "e5", "g4", "Qh4#"):
        game.push_san(san)
    assert game.in_check()
    assert game.checkmate()
    assert not game.stalemate()
    assert game.legal_moves() == []
    assert game.move_history_uci() == ["f2f3", "e7e5", "g2g4", "d8h4"]
    assert game.move_history_san() == ["f3", "e5", "g4", "Qh4#"]


def test_stalemate_is_a_draw() -> None:
    game = Game.from_fen("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert not game.in_check()
    assert game.stalemate()
    assert not game.checkmate()
    assert game.is_draw()


def test_fifty_move_rule() -> None:
    assert Game.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 100 80").is_draw()
    assert not Game.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 99 80").is_draw()


def test_threefold_repetition() -> None:
    game = Game.new()
    shuffle = ("g1f3", "g8f6", "f3g1", "f6g8")
    for uci in shuffle:
        game.push_uci(uci)
    assert not game.is_draw()
    for uci in shuffle:
        game.push_uci(uci)
    assert game.is_draw()

    game.undo_move()
    assert not game.is_draw()


def test_apply_move_rejects_values_not_generated_here() -> None:
    game = Game.new()
    bogus = Move(parse_tile("e2"), parse_tile("e5"), Kind.PAWN, pawn=True)
    with pytest.raises(IllegalMoveError):
        game.apply_move(bogus)
    # Correct squares but missing the push flag: still not the generated value
    unflagged = Move(parse_tile("e2"), parse_tile("e4"), Kind.PAWN, pawn=True)
    with pytest.raises(IllegalMoveError):
        game.apply_move(unflagged)
    assert game.to_fen() == STARTPOS_FEN


def test_undo_move() -> None:
    game = Game.new()
    with pytest.raises(ValueError):
        game.undo_move()

    played = game.push_uci("e2e4")
    assert game.undo_move() == played
    assert game.to_fen() == STARTPOS_FEN
    assert game.move_history_uci() == []
    assert game.move_history_san() == []
