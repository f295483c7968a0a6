from __future__ import annotations

import pytest

from chesscore.engine.board import Kind
from chesscore.engine.movegen import castle_transit_tiles, pseudo_legal_moves
from chesscore.engine.move import parse_tile
from chesscore.engine.position import Position, STARTPOS_FEN


def uci(moves) -> list[str]:
    return [m.to_uci() for m in moves]


def test_startpos_counts() -> None:
    p = Position.startpos()
    assert len(p.pseudo_legal_moves()) == 20
    assert len(p.legal_moves()) == 20


def test_generation_is_lazy_and_deterministic() -> None:
    p = Position.startpos()
    gen = pseudo_legal_moves(p)
    assert iter(gen) is gen
    first = next(gen)
    assert first.origin == parse_tile("b1")
    assert uci(p.pseudo_legal_moves()) == uci(p.pseudo_legal_moves())
    assert uci(p.legal_moves()) == uci(Position.from_fen(STARTPOS_FEN).legal_moves())


@pytest.mark.parametrize(
    "fen",
    [
        STARTPOS_FEN,
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
        "8/8/8/KPp4r/8/8/8/4k3 w - c6 0 1",
        "k3r3/8/8/8/8/8/4R3/4K3 w - - 0 1",
    ],
)
def test_legal_is_ordered_subset_of_pseudo_legal(fen: str) -> None:
    p = Position.from_fen(fen)
    pseudo = uci(p.pseudo_legal_moves())
    legal = uci(p.legal_moves())
    assert set(legal) <= set(pseudo)
    assert legal == [m for m in pseudo if m in set(legal)]


def test_pawn_double_push_needs_both_tiles_empty() -> None:
    p = Position.from_fen("4k3/8/8/8/4n3/8/4P3/4K3 w - - 0 1")
    ms = uci(p.legal_moves())
    assert "e2e3" in ms
    assert "e2e4" not in ms

    p = Position.from_fen("4k3/8/8/8/8/4n3/4P3/4K3 w - - 0 1")
    ms = uci(p.legal_moves())
    assert "e2e3" not in ms and "e2e4" not in ms


def test_double_push_flag_only_from_start_rank() -> None:
    p = Position.startpos()
    pushes = [m for m in p.legal_moves() if m.push]
    assert len(pushes) == 8
    assert all(m.pawn and m.piece == Kind.PAWN for m in pushes)

    p = Position.from_fen("4k3/8/8/8/8/4P3/8/4K3 w - - 0 1")
    assert not any(m.push for m in p.legal_moves())


def test_pawns_do_not_wrap_around_edges() -> None:
    p = Position.from_fen("4k3/8/8/p6P/8/8/8/4K3 w - - 0 1")
    assert "h5a6" not in uci(p.pseudo_legal_moves())


def test_knight_moves_at_corner() -> None:
    p = Position.from_fen("4k3/8/8/8/8/8/8/N3K3 w - - 0 1")
    knight = sorted(m.to_uci() for m in p.legal_moves() if m.piece == Kind.KNIGHT)
    assert knight == ["a1b3", "a1c2"]


def test_check_evasion_only_king_moves_off_line() -> None:
    p = Position.from_fen("4r2k/8/8/8/8/8/8/4K3 w - - 0 1")
    assert p.in_check()
    assert set(uci(p.legal_moves())) == {"e1d1", "e1d2", "e1f1", "e1f2"}


def test_moves_flagged_as_captures() -> None:
    p = Position.from_fen("4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1")
    caps = [m for m in p.legal_moves() if m.capture]
    assert uci(caps) == ["e4d5"]


def test_castle_transit_tiles() -> None:
    p = Position.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    castles = {m.to_uci(): m for m in p.legal_moves() if m.castle is not None}
    assert castle_transit_tiles(castles["e1g1"]) == (
        parse_tile("e1"),
        parse_tile("f1"),
        parse_tile("g1"),
    )
    assert castle_transit_tiles(castles["e1c1"]) == (
        parse_tile("e1"),
        parse_tile("d1"),
        parse_tile("c1"),
    )
