"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    PLAYING = "playing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


class Phase(StrEnum):
    NO_SELECTION = "no selection"
    PIECE_SELECTED = "piece selected"


# --- NOTE The domain layer has its own Color and PieceType (src/chess/pieces.py). These are the string versions that cross the boundary.
# --- Both share member names, so converting is just Color[domain_color.name]


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"
