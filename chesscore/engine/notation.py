"""Move text in and out: SAN, long algebraic (UCI) and short-hand resolution.

Resolution always goes through ``legal_moves`` so a returned Move carries the
flags (capture, castle, en passant, promotion) of the generated value.
"""

from __future__ import annotations

import re
from typing import List, Optional

from .board import CHAR_TO_KIND, KIND_TO_CHAR, PROMOTION_KINDS, Kind, file_of, rank_of
from .errors import (
    AmbiguousMoveError,
    IllegalCastleError,
    IllegalMoveError,
    InvalidPromotionError,
    NotationError,
    UnrecognizedPieceError,
)
from .move import CastleSide, Move, parse_tile, tile_name
from .position import Position
from .rules import apply_move, legal_moves, pseudo_legal_moves, undo_move


_SAN_RE = re.compile(
    r"^(?P<piece>[A-Z])?"
    r"(?P<from_file>[a-h])?"
    r"(?P<from_rank>[1-8])?"
    r"(?P<capture>x)?"
    r"(?P<dest>[a-z][0-9])"
    r"(?:=?(?P<promo>[A-Za-z]))?$"
)
_CASTLES = {
    "O-O": CastleSide.KINGSIDE,
    "0-0": CastleSide.KINGSIDE,
    "O-O-O": CastleSide.QUEENSIDE,
    "0-0-0": CastleSide.QUEENSIDE,
}
_SUFFIX_CHARS = "+#!?"


def to_san(position: Position, move: Move) -> str:
    """Convert a legal move to SAN, including ``+``/``#`` suffixes."""
    if move.castle is CastleSide.KINGSIDE:
        san = "O-O"
    elif move.castle is CastleSide.QUEENSIDE:
        san = "O-O-O"
    else:
        dest = tile_name(move.dest)
        x = "x" if move.capture else ""
        if move.pawn:
            san = f"{'abcdefgh'[file_of(move.origin)]}x{dest}" if move.capture else dest
            if move.promotion is not None:
                san += "=" + KIND_TO_CHAR[move.promotion].upper()
        else:
            letter = KIND_TO_CHAR[move.piece].upper()
            san = f"{letter}{_disambiguation(position, move)}{x}{dest}"
    return san + _check_suffix(position, move)


def parse_san(position: Position, text: str) -> Move:
    """Resolve SAN or short-hand move text against the legal moves.

    Matches moves of the named piece kind landing on the destination tile,
    narrowed by any origin file/rank given. An ``x`` must be present exactly
    when the move captures.

    Raises:
        NotationError: Malformed text.
        UnrecognizedPieceError: Unknown piece letter.
        OffBoardTileError: Destination outside a1..h8.
        IllegalCastleError: Castle text with no legal castle on that side.
        InvalidPromotionError: Promotion missing on a promoting move, given on
            a non-promoting one, or naming a pawn or king.
        IllegalMoveError: No legal move matches.
        AmbiguousMoveError: More than one legal move matches.
    """
    raw = text.strip() if isinstance(text, str) else ""
    core = raw.rstrip(_SUFFIX_CHARS)
    if not core:
        raise NotationError(f"empty move text: {text!r}")

    if core in _CASTLES:
        return _resolve_castle(position, _CASTLES[core], raw)

    m = _SAN_RE.match(core)
    if m is None:
        raise NotationError(f"malformed move text: {raw!r}")

    kind = Kind.PAWN
    if m.group("piece"):
        letter = m.group("piece").lower()
        if letter not in CHAR_TO_KIND:
            raise UnrecognizedPieceError(f"unrecognized piece: {m.group('piece')!r}")
        kind = CHAR_TO_KIND[letter]
    dest = parse_tile(m.group("dest"))
    promo = _promotion_kind(m.group("promo"))

    capture = bool(m.group("capture"))
    candidates = [
        mv
        for mv in legal_moves(position)
        if mv.piece == kind and mv.dest == dest and mv.castle is None and mv.capture == capture
    ]
    if m.group("from_file"):
        f = ord(m.group("from_file")) - ord("a")
        candidates = [mv for mv in candidates if file_of(mv.origin) == f]
    elif kind == Kind.PAWN:
        # A pawn changes file only when capturing, and then the text names its file
        candidates = [mv for mv in candidates if file_of(mv.origin) == file_of(dest)]
    if m.group("from_rank"):
        r = int(m.group("from_rank")) - 1
        candidates = [mv for mv in candidates if rank_of(mv.origin) == r]

    return _select(candidates, promo, raw)


def parse_uci(position: Position, text: str) -> Move:
    """Resolve long algebraic text such as ``e2e4`` or ``e7e8q`` to a legal move.

    Raises:
        NotationError: Wrong length or malformed text.
        OffBoardTileError: A tile outside a1..h8.
        UnrecognizedPieceError / InvalidPromotionError: Bad promotion letter.
        IllegalCastleError: King move matching a castle that is not legal.
        IllegalMoveError: No legal move matches.
    """
    if not isinstance(text, str) or len(text.strip()) not in (4, 5):
        raise NotationError(f"invalid UCI move length: {text!r}")
    uci = text.strip()
    origin = parse_tile(uci[0:2])
    dest = parse_tile(uci[2:4])
    promo = _promotion_kind(uci[4]) if len(uci) == 5 else None

    candidates = [mv for mv in legal_moves(position) if mv.origin == origin and mv.dest == dest]
    if not candidates:
        for mv in pseudo_legal_moves(position):
            if mv.castle is not None and mv.origin == origin and mv.dest == dest:
                raise IllegalCastleError(f"illegal castle: {uci}")
    return _select(candidates, promo, uci)


def _select(candidates: List[Move], promo: Optional[Kind], raw: str) -> Move:
    if not candidates:
        raise IllegalMoveError(f"illegal move: {raw}")
    promoting = any(mv.promotion is not None for mv in candidates)
    if promoting and promo is None:
        raise InvalidPromotionError(f"promotion piece required: {raw}")
    if not promoting and promo is not None:
        raise InvalidPromotionError(f"move does not promote: {raw}")
    if promoting:
        candidates = [mv for mv in candidates if mv.promotion == promo]
    if len(candidates) > 1:
        origins = ", ".join(tile_name(mv.origin) for mv in candidates)
        raise AmbiguousMoveError(f"ambiguous move {raw}: from {origins}")
    return candidates[0]


def _resolve_castle(position: Position, side: CastleSide, raw: str) -> Move:
    for mv in legal_moves(position):
        if mv.castle is side:
            return mv
    raise IllegalCastleError(f"illegal castle: {raw}")


def _promotion_kind(letter: Optional[str]) -> Optional[Kind]:
    if not letter:
        return None
    kind = CHAR_TO_KIND.get(letter.lower())
    if kind is None:
        raise UnrecognizedPieceError(f"unrecognized promotion piece: {letter!r}")
    if kind not in PROMOTION_KINDS:
        raise InvalidPromotionError(f"cannot promote to {letter!r}")
    return kind


def _disambiguation(position: Position, move: Move) -> str:
    if move.piece == Kind.KING:
        return ""
    rivals = [
        mv.origin
        for mv in legal_moves(position)
        if mv.piece == move.piece and mv.dest == move.dest and mv.origin != move.origin
    ]
    if not rivals:
        return ""
    if all(file_of(o) != file_of(move.origin) for o in rivals):
        return "abcdefgh"[file_of(move.origin)]
    if all(rank_of(o) != rank_of(move.origin) for o in rivals):
        return str(rank_of(move.origin) + 1)
    return tile_name(move.origin)


def _check_suffix(position: Position, move: Move) -> str:
    # After applying the move the side to move has flipped.
    record = apply_move(position, move)
    try:
        if not position.in_check():
            return ""
        return "#" if not legal_moves(position) else "+"
    finally:
        undo_move(position, record)
