"""Orchestration of communication from the presentation layer (clicks, rendering) to the game session and back."""

from typing import Optional

from src.api.models import (
    PieceResponse,
    SelectSquareRequest,
    SessionResponse,
    SquareResponse,
)
from src.chess.game import GameSession, SessionState
from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.shared_types import Color, Phase, PieceType, Status


class SessionService:
    """Translates boundary requests into session transitions, and session state into responses."""

    def __init__(self, session: GameSession) -> None:
        self.session = session

    def get_state(self) -> SessionResponse:
        """Current state, for rendering. Listeners of the session call this after every change."""
        return self._create_session_response(self.session.state)

    def select_square(self, request: SelectSquareRequest) -> SessionResponse:
        """The player clicked a square."""
        square = Square(request.row, request.col)
        state = self.session.select_square(square)
        return self._create_session_response(state)

    def reset(self) -> SessionResponse:
        """The player asked for a new game."""
        state = self.session.reset()
        return self._create_session_response(state)

    # -- Internal helpers --
    def _create_session_response(self, state: SessionState) -> SessionResponse:
        return SessionResponse(
            board=[
                [self._create_piece_response(piece) for piece in row]
                for row in state.board.rows()
            ],
            current_player=Color[state.current_player.name],
            selected_square=(
                self._create_square_response(state.selected_square)
                if state.selected_square is not None
                else None
            ),
            valid_moves=[
                self._create_square_response(square) for square in state.valid_moves
            ],
            status=Status[state.status.name],
            phase=Phase[state.phase.name],
        )

    def _create_piece_response(self, piece: Optional[Piece]) -> Optional[PieceResponse]:
        if piece is None:
            return None
        return PieceResponse(
            type=PieceType[piece.type.name], color=Color[piece.color.name]
        )

    def _create_square_response(self, square: Square) -> SquareResponse:
        return SquareResponse(row=square.row, col=square.col, name=square.to_algebraic())
