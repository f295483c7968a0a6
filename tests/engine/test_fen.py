from __future__ import annotations

import pytest

from chesscore.engine.board import Color, Kind
from chesscore.engine.errors import NotationError, PositionError, UnrecognizedPieceError
from chesscore.engine.move import CastleSide, CastlingRights, parse_tile
from chesscore.engine.position import Position, STARTPOS_FEN


def test_startpos_round_trip() -> None:
    p = Position.from_fen(STARTPOS_FEN)
    assert p.to_fen() == STARTPOS_FEN
    assert Position.startpos().to_fen() == STARTPOS_FEN


@pytest.mark.parametrize(
    "fen",
    [
        # Mixed pieces and empty squares, some castling rights
        "r1bqkbnr/pppp1ppp/2n5/4p3/3P4/5N2/PPP1PPPP/RNBQKB1R b KQ - 2 3",
        # No castling rights, ep target present on rank 3
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b - e3 0 1",
        # All castling rights
        "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1",
        # Kiwipete
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
    ],
)
def test_round_trip_various_positions(fen: str) -> None:
    p = Position.from_fen(fen)
    assert p.to_fen() == fen


def test_from_fen_fields() -> None:
    p = Position.from_fen("r3k2r/8/8/3Pp3/8/8/8/R3K2R w Kq e6 3 17")
    assert p.turn == Color.WHITE
    assert p.castling == CastlingRights.WHITE_KINGSIDE | CastlingRights.BLACK_QUEENSIDE
    assert p.ep_square == parse_tile("e6")
    assert p.halfmove_clock == 3
    assert p.fullmove_number == 17
    assert p.king_tiles == [parse_tile("e1"), parse_tile("e8")]
    assert p.has_right(Color.WHITE, CastleSide.KINGSIDE)
    assert not p.has_right(Color.WHITE, CastleSide.QUEENSIDE)
    assert p.has_right(Color.BLACK, CastleSide.QUEENSIDE)
    piece = p.board.occupant(parse_tile("e5"))
    assert piece is not None and piece.color == Color.BLACK and piece.kind == Kind.PAWN


def test_castling_letters_normalized_on_output() -> None:
    p = Position.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w qkQK - 0 1")
    assert p.to_fen().split()[2] == "KQkq"


@pytest.mark.parametrize(
    "fen",
    [
        "",  # empty
        "4k3/8/8/8/8/8/4K3 w - - 0 1",  # not enough ranks
        "4k3/8/8/8/8/8/8/4K3 w - - 0",  # missing fields
        "4k3/8/8/8/8/8/8/4K3 x - - 0 1",  # bad side to move
        "4k3/8/8/8/8/8/8/4K3 w A - 0 1",  # bad castling
        "4k3/8/8/8/8/8/8/4K3 w - z9 0 1",  # bad ep square
        "4k3/8/8/8/8/8/8/4K3 w - e3 0 1",  # ep square on the wrong rank for white to move
        "4k3/8/8/8/8/8/8/4K3 w - - -1 1",  # bad halfmove
        "4k3/8/8/8/8/8/8/4K3 w - - 0 0",  # bad fullmove
        "4k3/8/8/8/8/8/8/4K3 w - - x 1",  # non-numeric counter
        "9/4k3/8/8/8/8/8/4K3 w - - 0 1",  # too many squares
        "4k3/8/8/8/8/8/8/4K2 w - - 0 1",  # too few squares
    ],
)
def test_invalid_fen_raises_notation_error(fen: str) -> None:
    with pytest.raises(NotationError):
        Position.from_fen(fen)


def test_unknown_piece_letter() -> None:
    with pytest.raises(UnrecognizedPieceError) as exc:
        Position.from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX w KQkq - 0 1")
    assert exc.value.code == "unrecognized_piece"


@pytest.mark.parametrize(
    "fen",
    [
        "8/8/8/8/8/8/8/8 w - - 0 1",  # no kings
        "4k3/8/8/8/8/8/8/3KK3 w - - 0 1",  # two white kings
        "P3k3/8/8/8/8/8/8/4K3 w - - 0 1",  # pawn on the last rank
        "4k3/8/8/8/8/8/8/p3K3 b - - 0 1",  # pawn on the first rank
    ],
)
def test_board_invariants_rejected(fen: str) -> None:
    with pytest.raises(PositionError):
        Position.from_fen(fen)


def test_invalid_fen_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        Position.from_fen("not a fen")


@pytest.mark.parametrize(
    "fen",
    [
        "4k3/8/4n3/3Pp3/8/8/8/4K3 w - e6 0 1",  # target tile occupied
        "4k3/8/8/3P4/8/8/8/4K3 w - e6 0 1",  # no pawn beyond the target
        "4k3/4p3/8/3Pp3/8/8/8/4K3 w - e6 0 1",  # start tile occupied
        "4k3/8/8/3PP3/8/8/8/4K3 w - e6 0 1",  # own pawn beyond the target
    ],
)
def test_en_passant_target_without_double_push_rejected(fen: str) -> None:
    with pytest.raises(PositionError) as exc:
        Position.from_fen(fen)
    assert exc.value.code == "invalid_position"


def test_en_passant_target_after_double_push_accepted() -> None:
    p = Position.from_fen("4k3/8/8/3Pp3/8/8/8/4K3 w - e6 0 1")
    assert p.ep_square == parse_tile("e6")


def test_side_not_to_move_in_check_rejected() -> None:
    with pytest.raises(PositionError):
        Position.from_fen("4k3/8/8/8/8/8/8/4RK2 w - - 0 1")
    # The same placement is fine with Black to move
    assert Position.from_fen("4k3/8/8/8/8/8/8/4RK2 b - - 0 1").in_check()
