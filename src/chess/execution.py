"""
Applying a move to the board, including the side effects some pieces trigger.

Side effect implemented here:
* a bishop that captures an enemy piece swaps places with a random friendly pawn (if there is one left)
"""

import logging

from src.chess.board import Board
from src.chess.moves import Move, RandomSource
from src.chess.pieces import Piece, PieceType
from src.chess.square import Square

_LOGGER = logging.getLogger(__name__)


def apply_move(
    board: Board, from_square: Square, to_square: Square, rng: RandomSource
) -> Board:
    """Relocate the piece and resolve side effects. Returns a new board; `board` itself is untouched."""
    move = Move.from_board(board, from_square, to_square)
    return _apply(board, move, rng)


def execute_move(
    board: Board, from_square: Square, to_square: Square, rng: RandomSource
) -> tuple[Board, Move]:
    """Same as apply_move, but also hands back the record of what moved and what got captured"""
    move = Move.from_board(board, from_square, to_square)
    return _apply(board, move, rng), move


def _apply(board: Board, move: Move, rng: RandomSource) -> Board:
    new_board = board.move_piece(move.from_square, move.to_square)
    if _triggers_bishop_swap(move):
        new_board = _swap_bishop_with_pawn(new_board, move, rng)
    return new_board


def _triggers_bishop_swap(move: Move) -> bool:
    return move.moving_piece.type == PieceType.BISHOP and move.is_capture


def _swap_bishop_with_pawn(board: Board, move: Move, rng: RandomSource) -> Board:
    """
    The pawns are collected AFTER the bishop landed, so a pawn that just got captured is not a candidate.
    No friendly pawn left? Then the bishop simply stays where it captured.
    """
    own_pawn = Piece(PieceType.PAWN, move.moving_piece.color)
    pawn_squares = board.locate_pieces(own_pawn)
    if not pawn_squares:
        return board

    pawn_square = rng.choice(pawn_squares)
    _LOGGER.info(
        "%s captured on %s and swaps with the pawn on %s",
        move.moving_piece.describe(),
        move.to_square.to_algebraic(),
        pawn_square.to_algebraic(),
    )
    return board.swap_pieces(move.to_square, pawn_square)
