from __future__ import annotations


class ChessError(ValueError):
    """Base class for recoverable rule and notation errors.

    Each subclass carries a stable ``code`` used by the HTTP error envelope.
    Subclassing ``ValueError`` keeps ``except ValueError`` call sites working.
    """

    code = "chess_error"
    default_message = "Chess error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NotationError(ChessError):
    code = "parse_error"
    default_message = "Parse error"


class PositionError(NotationError):
    code = "invalid_position"
    default_message = "Invalid position"


class UnrecognizedPieceError(NotationError):
    code = "unrecognized_piece"
    default_message = "Unrecognized piece"


class OffBoardTileError(NotationError):
    code = "off_board_tile"
    default_message = "Tile is off the board"


class IllegalMoveError(ChessError):
    code = "illegal_move"
    default_message = "Illegal move"


class IllegalCastleError(IllegalMoveError):
    code = "illegal_castle"
    default_message = "Illegal castle"


class AmbiguousMoveError(ChessError):
    code = "ambiguous_move"
    default_message = "Ambiguous move"


class InvalidPromotionError(ChessError):
    code = "invalid_promotion"
    default_message = "Invalid pawn promotion"
