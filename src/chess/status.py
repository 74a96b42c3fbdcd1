"""
Check detection, legal move filtering and the end-of-game conditions.

Attack detection works on the raw candidate moves (src/chess/moves.py) and never on the filtered legal moves:
the filter itself asks "am I in check after this move?", so going through it here would never bottom out.
"""

import logging
from enum import Enum

from src.chess.board import Board
from src.chess.moves import RandomSource, candidate_moves
from src.chess.pieces import Color, Piece
from src.chess.square import Square

_LOGGER = logging.getLogger(__name__)


class GameStatus(Enum):
    PLAYING = "playing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"

    @property
    def is_terminal(self) -> bool:
        return self in (GameStatus.CHECKMATE, GameStatus.STALEMATE)


def is_under_attack(
    board: Board, target: Square, by_color: Color, rng: RandomSource
) -> bool:
    """True if any piece of `by_color` has `target` among its raw candidate moves"""
    for square in board.locate_color(by_color):
        piece = board.piece(square)
        assert piece is not None
        if target in candidate_moves(board, square, piece, rng):
            return True
    return False


def is_check(board: Board, color: Color, rng: RandomSource) -> bool:
    """
    Is the king of `color` attacked by the opponent?

    NOTE: A board without a king of that color is never in check.
    """
    king_square = board.find_king(color)
    if king_square is None:
        return False
    return is_under_attack(board, king_square, color.opponent, rng)


def legal_moves(
    board: Board, from_square: Square, piece: Piece, rng: RandomSource
) -> list[Square]:
    """
    Candidate moves that do not put (or leave) your own king in check
    ----

    plan:
    1. generate the candidate moves
    2. for each, relocate the piece on a copy of the board
    3. drop the move if the king is in check on that copy
    """
    legal: list[Square] = []
    for to_square in candidate_moves(board, from_square, piece, rng):
        speculative_board = board.move_piece(from_square, to_square)
        if is_check(speculative_board, piece.color, rng):
            _LOGGER.debug(
                "%s %s%s would leave the king in check",
                piece.describe(),
                from_square.to_algebraic(),
                to_square.to_algebraic(),
            )
            continue
        legal.append(to_square)
    return legal


def has_legal_move(board: Board, color: Color, rng: RandomSource) -> bool:
    for square in board.locate_color(color):
        piece = board.piece(square)
        assert piece is not None
        if legal_moves(board, square, piece, rng):
            return True
    return False


# --- CHECKS FOR ENDING THE GAME ---
# NOTE: knights draw a fresh behaviour on every call, so with a knight on the board two separate calls
# may disagree. Checkmate and stalemate exclude each other within one evaluate_status() result.
def is_checkmate(board: Board, color: Color, rng: RandomSource) -> bool:
    return evaluate_status(board, color, rng) == GameStatus.CHECKMATE


def is_stalemate(board: Board, color: Color, rng: RandomSource) -> bool:
    return evaluate_status(board, color, rng) == GameStatus.STALEMATE


def evaluate_status(board: Board, color: Color, rng: RandomSource) -> GameStatus:
    """Status of the game from the point of view of the player about to move"""
    in_check = is_check(board, color, rng)
    can_move = has_legal_move(board, color, rng)
    if in_check and not can_move:
        return GameStatus.CHECKMATE
    if not can_move:
        return GameStatus.STALEMATE
    if in_check:
        return GameStatus.CHECK
    return GameStatus.PLAYING
