"""
Geometry/Base movement and capturing rules of the variant

Key idea: Use strategy pattern to define candidate destination squares for each piece type.

The rules deviate from classical chess on purpose:
* pawns step diagonally onto empty squares and capture straight ahead
* rooks only land on squares an even number of steps away
* knights pick one of three behaviours at random every time they are asked, and never leave their 3x3 neighbourhood
* a queen stuck behind her own pawn can only hop over it
* (bishops capture as usual, but see src/chess/execution.py for what happens afterwards)

Legality (not leaving your own king in check) is checked later, see src/chess/status.py
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional, Protocol, Self, Sequence, TypeVar

from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import BOARD_DIMENSIONS, Square

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Optional[Piece]: ...


class RandomSource(Protocol):
    """Anything that can pick an element from a sequence. `random.Random` fits, tests supply a scripted one."""

    def choice(self, seq: Sequence[T]) -> T: ...


Vector = tuple[int, int]

STRAIGHTS: list[Vector] = [(0, 1), (0, -1), (1, 0), (-1, 0)]
DIAGONALS: list[Vector] = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS
KNIGHT_JUMPS: list[Vector] = [
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
]

# Longest ray that fits on the board
MAX_DISTANCE = max(BOARD_DIMENSIONS) - 1


@dataclass(frozen=True)
class Move:
    """A move about to be made, with a snapshot of the pieces involved (for reporting)"""

    from_square: Square
    to_square: Square
    moving_piece: Piece
    captured_piece: Optional[Piece] = None

    @classmethod
    def from_board(cls, board: Board, from_square: Square, to_square: Square) -> Self:
        """Snapshot of the moving pieces before the board gets updated."""
        moving_piece = board.piece(from_square)
        if moving_piece is None:
            raise ValueError(f"No piece on {from_square.to_algebraic()} to move")
        return cls(from_square, to_square, moving_piece, board.piece(to_square))

    @property
    def is_capture(self) -> bool:
        return (
            self.captured_piece is not None
            and self.captured_piece.color != self.moving_piece.color
        )

    def to_uci(self) -> str:
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}"


# --- MOVEMENT RULES ---
def _any_distance(distance: int) -> bool:
    return True


def _even_distance(distance: int) -> bool:
    return distance % 2 == 0


def raycasting_move(
    square: Square,
    color: Color,
    board: Board,
    directions: list[Vector],
    max_distance: int = MAX_DISTANCE,
    may_land: Callable[[int], bool] = _any_distance,
) -> list[Square]:
    """
    Raycasting algorithm
    -----

    ---
    We define move directions and move along them until we hit another piece, the edge of the board,
    or have travelled `max_distance` steps.

    `may_land` decides, by the number of steps travelled, whether the piece is allowed to stop on a square.
    A square it may not stop on is still passed through, and an occupied one still ends the ray.
    """
    moves: list[Square] = []
    for d_row, d_col in directions:
        for distance in range(1, max_distance + 1):
            target_square = square.offset(d_row * distance, d_col * distance)
            if not target_square.is_within_bounds():
                break

            occupant = board.piece(target_square)
            if occupant is None:
                if may_land(distance):
                    moves.append(target_square)
                continue

            # only the first occupied square counts, and only if it is the opponent's: then it can be captured.
            if occupant.color != color and may_land(distance):
                moves.append(target_square)
            break
    return moves


def single_step_move(
    square: Square, color: Color, board: Board, deltas: list[Vector]
) -> list[Square]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knight jumps"""
    moves: list[Square] = []
    for d_row, d_col in deltas:
        target_square = square.offset(d_row, d_col)
        if not target_square.is_within_bounds():
            continue

        occupant = board.piece(target_square)
        if occupant is None or occupant.color != color:
            moves.append(target_square)
    return moves


def candidate_pawn_moves(
    square: Square, color: Color, board: Board, rng: RandomSource
) -> list[Square]:
    """
    A pawn:
    - steps diagonally forward, but only onto an empty square
    - takes the enemy piece standing directly in front of it
    - never moves straight forward onto an empty square, and never moves two squares
    """
    forward = color.forward
    moves: list[Square] = []
    for d_col in (-1, 1):
        target_square = square.offset(forward, d_col)
        if target_square.is_within_bounds() and board.piece(target_square) is None:
            moves.append(target_square)

    ahead = square.offset(forward, 0)
    occupant = board.piece(ahead)
    if occupant is not None and occupant.color != color:
        moves.append(ahead)
    return moves


def candidate_rook_moves(
    square: Square, color: Color, board: Board, rng: RandomSource
) -> list[Square]:
    """Rooks move horizontally or vertically, landing 2, 4 or 6 squares away only"""
    return raycasting_move(square, color, board, STRAIGHTS, may_land=_even_distance)


class KnightMode(Enum):
    ROOK_LIKE = auto()
    BISHOP_LIKE = auto()
    KNIGHT_LIKE = auto()


KNIGHT_MODES: tuple[KnightMode, ...] = (
    KnightMode.ROOK_LIKE,
    KnightMode.BISHOP_LIKE,
    KnightMode.KNIGHT_LIKE,
)

KNIGHT_RAY_LIMIT = 2


def is_in_neighbourhood(origin: Square, target: Square) -> bool:
    """Inside the 3x3 block centered on origin"""
    return abs(target.row - origin.row) <= 1 and abs(target.col - origin.col) <= 1


def candidate_knight_moves(
    square: Square, color: Color, board: Board, rng: RandomSource
) -> list[Square]:
    """
    Every call draws a fresh behaviour: slide like a rook, slide like a bishop, or jump like a knight.
    Slides go at most 2 steps, and whatever comes out is restricted to the 3x3 neighbourhood.

    NOTE: an L-shaped jump always leaves the 3x3 neighbourhood, so KNIGHT_LIKE never yields a square.
    """
    mode = rng.choice(KNIGHT_MODES)
    _LOGGER.debug("Knight on %s behaves %s", square.to_algebraic(), mode.name)
    if mode == KnightMode.ROOK_LIKE:
        moves = raycasting_move(
            square, color, board, STRAIGHTS, max_distance=KNIGHT_RAY_LIMIT
        )
    elif mode == KnightMode.BISHOP_LIKE:
        moves = raycasting_move(
            square, color, board, DIAGONALS, max_distance=KNIGHT_RAY_LIMIT
        )
    else:
        moves = single_step_move(square, color, board, KNIGHT_JUMPS)
    return [target for target in moves if is_in_neighbourhood(square, target)]


def candidate_bishop_moves(
    square: Square, color: Color, board: Board, rng: RandomSource
) -> list[Square]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_move(square, color, board, DIAGONALS)


def candidate_queen_moves(
    square: Square, color: Color, board: Board, rng: RandomSource
) -> list[Square]:
    """
    The Queen combines classical rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)

    Unless her own pawn stands right in front of her: then the only option is the square just beyond that pawn.
    """
    in_front = square.offset(color.forward, 0)
    if board.piece(in_front) == Piece(PieceType.PAWN, color):
        beyond = square.offset(2 * color.forward, 0)
        if not beyond.is_within_bounds():
            return []
        occupant = board.piece(beyond)
        if occupant is None or occupant.color != color:
            return [beyond]
        return []

    return raycasting_move(square, color, board, STRAIGHTS + DIAGONALS)


def candidate_king_moves(
    square: Square, color: Color, board: Board, rng: RandomSource
) -> list[Square]:
    """The king moves a single square in any direction. No castling."""
    return single_step_move(square, color, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Square, Color, Board, RandomSource], list[Square]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def candidate_moves(
    board: Board, from_square: Square, piece: Piece, rng: RandomSource
) -> list[Square]:
    """
    Destination squares for `piece` standing on `from_square`, ignoring whether the move leaves its own king in check.
    """
    movement_rule = MOVEMENT_RULES[piece.type]
    return movement_rule(from_square, piece.color, board, rng)
