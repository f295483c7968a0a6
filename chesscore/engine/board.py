from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, List, Optional, Tuple


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    @property
    def opponent(self) -> "Color":
        return Color(1 - self)


class Kind(IntEnum):
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5


KIND_TO_CHAR = {
    Kind.PAWN: "p",
    Kind.KNIGHT: "n",
    Kind.BISHOP: "b",
    Kind.ROOK: "r",
    Kind.QUEEN: "q",
    Kind.KING: "k",
}
CHAR_TO_KIND = {v: k for k, v in KIND_TO_CHAR.items()}

# Promotion choices in generation order
PROMOTION_KINDS = (Kind.QUEEN, Kind.ROOK, Kind.BISHOP, Kind.KNIGHT)


# --- 0x88 tile encoding ---
# tile = rank << 4 | file; the 0x88 bits are set whenever a delta leaves the board.
OFFBOARD_MASK = 0x88
BOARD_SIZE = 128


def tile(rank: int, file: int) -> int:
    return (rank << 4) | file


def rank_of(t: int) -> int:
    return t >> 4


def file_of(t: int) -> int:
    return t & 7


def offboard(t: int) -> bool:
    return t & OFFBOARD_MASK != 0


# All 64 playable tiles, a1..h1, a2..h2, ... h8
TILES: Tuple[int, ...] = tuple(tile(r, f) for r in range(8) for f in range(8))

# Geometry deltas in tile space
KNIGHT_DELTAS = (33, 31, 18, 14, -14, -18, -31, -33)
KING_DELTAS = (16, -16, 1, -1, 17, 15, -15, -17)
BISHOP_DELTAS = (17, 15, -15, -17)
ROOK_DELTAS = (16, -16, 1, -1)
QUEEN_DELTAS = ROOK_DELTAS + BISHOP_DELTAS

STEP_DELTAS = {
    Kind.KNIGHT: KNIGHT_DELTAS,
    Kind.KING: KING_DELTAS,
}
SLIDE_DELTAS = {
    Kind.BISHOP: BISHOP_DELTAS,
    Kind.ROOK: ROOK_DELTAS,
    Kind.QUEEN: QUEEN_DELTAS,
}

PAWN_FORWARD = (16, -16)  # indexed by Color
PAWN_START_RANK = (1, 6)
BACK_RANK = (0, 7)

BACK_ROW = (
    Kind.ROOK,
    Kind.KNIGHT,
    Kind.BISHOP,
    Kind.QUEEN,
    Kind.KING,
    Kind.BISHOP,
    Kind.KNIGHT,
    Kind.ROOK,
)


@dataclass(frozen=True)
class Piece:
    """A colored piece. Immutable; owned by the board slot holding it."""

    color: Color
    kind: Kind

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for White, lowercase for Black."""
        ch = KIND_TO_CHAR[self.kind]
        return ch.upper() if self.color == Color.WHITE else ch

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        """Build a piece from its FEN letter.

        Raises:
            KeyError: If ``ch`` is not one of ``PNBRQKpnbrqk``.
        """
        kind = CHAR_TO_KIND[ch.lower()]
        color = Color.WHITE if ch.isupper() else Color.BLACK
        return cls(color, kind)


@dataclass
class Board:
    """128-slot 0x88 board.

    Notes:
    - Only tiles with ``tile & 0x88 == 0`` are playable; the other 64 slots are
      padding and stay empty.
    - Every operation is a silent no-op on an off-board tile, so generation
      loops may probe one step past an edge and rely on ``offboard``.
    - The board does not know whose turn it is.
    """

    slots: List[Optional[Piece]] = field(default_factory=lambda: [None] * BOARD_SIZE)

    @classmethod
    def standard(cls) -> "Board":
        """Return a board with the standard starting layout."""
        b = cls()
        for f, kind in enumerate(BACK_ROW):
            b.place(tile(BACK_RANK[Color.WHITE], f), Color.WHITE, kind)
            b.place(tile(BACK_RANK[Color.BLACK], f), Color.BLACK, kind)
            b.place(tile(PAWN_START_RANK[Color.WHITE], f), Color.WHITE, Kind.PAWN)
            b.place(tile(PAWN_START_RANK[Color.BLACK], f), Color.BLACK, Kind.PAWN)
        return b

    def place(self, t: int, color: Color, kind: Kind) -> None:
        if not offboard(t):
            self.slots[t] = Piece(color, kind)

    def put(self, t: int, piece: Optional[Piece]) -> None:
        """Store ``piece`` (or clear the slot) without building a new Piece."""
        if not offboard(t):
            self.slots[t] = piece

    def remove(self, t: int) -> None:
        if not offboard(t):
            self.slots[t] = None

    def move(self, origin: int, dest: int) -> None:
        """Relocate the occupant of ``origin`` to ``dest``; no capture tracking."""
        if not offboard(origin | dest):
            self.slots[dest] = self.slots[origin]
            self.slots[origin] = None

    def occupant(self, t: int) -> Optional[Piece]:
        if offboard(t):
            return None
        return self.slots[t]

    def pieces(self) -> Iterator[Tuple[int, Piece]]:
        """Yield ``(tile, piece)`` for every occupied tile in a1..h8 order."""
        for t in TILES:
            p = self.slots[t]
            if p is not None:
                yield t, p

    def copy(self) -> "Board":
        return Board(slots=list(self.slots))

    def render(self) -> str:
        """Return an ASCII diagram with rank 8 on top."""
        line = "  +---+---+---+---+---+---+---+---+"
        rows = [line]
        for r in range(7, -1, -1):
            cells = []
            for f in range(8):
                p = self.slots[tile(r, f)]
                cells.append(p.symbol if p is not None else " ")
            rows.append(f"{r + 1} | " + " | ".join(cells) + " |")
            rows.append(line)
        rows.append("    a   b   c   d   e   f   g   h")
        return "\n".join(rows)
