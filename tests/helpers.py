"""Test doubles and board builders shared by the test modules"""

from typing import Any, Sequence

from src.chess.board import Board
from src.chess.moves import KnightMode
from src.chess.pieces import Piece
from src.chess.square import Square

EMPTY_FEN = "/".join(["8"] * 8)


class ScriptedRandom:
    """
    Stand-in for random.Random that makes the randomised rules deterministic.

    * knight modes: `knight_mode` is returned whenever a knight draws its behaviour
    * anything else (bishop swap targets): the element at `index` (clamped to the sequence length)
    """

    def __init__(
        self, knight_mode: KnightMode = KnightMode.ROOK_LIKE, index: int = 0
    ) -> None:
        self.knight_mode = knight_mode
        self.index = index
        self.calls: list[Sequence[Any]] = []

    def choice(self, seq: Sequence[Any]) -> Any:
        self.calls.append(seq)
        if self.knight_mode in seq:
            return self.knight_mode
        return seq[min(self.index, len(seq) - 1)]


class RecordingNotifier:
    """Keeps every event description it receives"""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)


def sq(name: str) -> Square:
    """Short for Square.from_algebraic"""
    return Square.from_algebraic(name)


def board_from_pieces(pieces: dict[str, str]) -> Board:
    """Build a board from {'e1': 'K', 'e8': 'k', ...}: square name -> FEN letter"""
    board = Board.from_fen(EMPTY_FEN)
    for square_name, fen_char in pieces.items():
        board = board.place_piece(Piece.from_fen(fen_char), sq(square_name))
    return board
