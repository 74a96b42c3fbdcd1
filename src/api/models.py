"""Requests and Response models"""

from typing import Optional, Self

from pydantic import BaseModel, field_validator

from src.chess.square import BOARD_DIMENSIONS
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, Phase, PieceType, Status


# --- REQUEST MODELS ---
class SelectSquareRequest(BaseModel):
    row: int
    col: int

    @classmethod
    def from_algebraic(cls, square_name: str) -> Self:
        """Convenience: 'e2' instead of row=6, col=4"""

        def _is_algebraic_notation(value: str) -> bool:
            if len(value) != 2:
                return False
            return value[0].isalpha() and value[1].isnumeric()

        if not _is_algebraic_notation(square_name):
            raise InvalidRequestError(
                f"Cannot interpret {square_name!r} as a valid square name."
            )
        col = ord(square_name[0].lower()) - ord("a")
        row = BOARD_DIMENSIONS[0] - int(square_name[1])
        return cls(row=row, col=col)

    @field_validator("row")
    @classmethod
    def validate_row(cls, value: int) -> int:
        if not 0 <= value < BOARD_DIMENSIONS[0]:
            raise InvalidRequestError(
                f"Row {value} is off the board. Pick one in [0, {BOARD_DIMENSIONS[0]})."
            )
        return value

    @field_validator("col")
    @classmethod
    def validate_col(cls, value: int) -> int:
        if not 0 <= value < BOARD_DIMENSIONS[1]:
            raise InvalidRequestError(
                f"Column {value} is off the board. Pick one in [0, {BOARD_DIMENSIONS[1]})."
            )
        return value


# --- RESPONSE MODELS ---
class PieceResponse(BaseModel):
    type: PieceType
    color: Color


class SquareResponse(BaseModel):
    row: int
    col: int
    name: str


class SessionResponse(BaseModel):
    board: list[list[Optional[PieceResponse]]]
    current_player: Color
    selected_square: Optional[SquareResponse]
    valid_moves: list[SquareResponse]
    status: Status
    phase: Phase
