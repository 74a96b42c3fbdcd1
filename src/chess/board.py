"""The Game board: the configuration of pieces on the 8x8 grid. Every change produces a new Board."""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Self

from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import BOARD_DIMENSIONS, Square
from src.core.exceptions import InvalidBoardError

STARTING_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


@dataclass(frozen=True)
class Board:
    """
    Only occupied squares are stored. Asking for any other square (including squares off the board) gives None.

    NOTE: Never mutate `position` directly. Use the methods below, which all return a new Board.
    """

    position: dict[Square, Piece] = field(default_factory=dict)

    def __hash__(self) -> int:
        return hash(frozenset(self.position.items()))

    @classmethod
    def empty(cls) -> Self:
        return cls({})

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the piece placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the first rank listed, which is row 0 of the board
        * black pawns cover row 1 entirely
        * rows 2 through 5 have 8 consecutive empty squares
        * row 6 holds the white pawns (capital letters)
        * row 7 holds the white pieces. Each rank reads from the a-file (column 0) onwards.
        """
        fen_by_ranks = fen_str.strip().split("/")
        if len(fen_by_ranks) != BOARD_DIMENSIONS[0]:
            raise InvalidBoardError(
                f"Expected {BOARD_DIMENSIONS[0]} ranks separated by '/', got {len(fen_by_ranks)}: {fen_str!r}"
            )

        position: dict[Square, Piece] = {}
        for row, fen_one_rank in enumerate(fen_by_ranks):
            col = 0
            for character in fen_one_rank:
                if character.isdigit():
                    # A number denotes the amount of empty squares after each other
                    col += int(character)
                    continue
                if col < BOARD_DIMENSIONS[1]:
                    position[Square(row, col)] = Piece.from_fen(character)
                col += 1
            if col != BOARD_DIMENSIONS[1]:
                raise InvalidBoardError(
                    f"Rank {fen_one_rank!r} describes {col} squares instead of {BOARD_DIMENSIONS[1]}"
                )
        return cls(position)

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._rank_to_fen(row) for row in range(BOARD_DIMENSIONS[0]))

    def _rank_to_fen(self, row: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for col in range(BOARD_DIMENSIONS[1]):
            piece = self.piece(Square(row, col))
            if piece is None:
                empty_count += 1
                continue

            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- QUERIES ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def occupied_squares(self) -> Iterator[tuple[Square, Piece]]:
        """Row-major order, so anything picked from it is reproducible"""
        for square in sorted(self.position):
            yield square, self.position[square]

    def locate_pieces(self, piece: Piece) -> list[Square]:
        return [square for square, found in self.occupied_squares() if found == piece]

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square for square, piece in self.occupied_squares() if piece.color == color
        ]

    def find_king(self, color: Color) -> Optional[Square]:
        """None if that color has no king on the board"""
        kings = self.locate_pieces(Piece(PieceType.KING, color))
        return kings[0] if kings else None

    def count_pieces(self, piece: Piece) -> int:
        return len(self.locate_pieces(piece))

    def rows(self) -> list[list[Optional[Piece]]]:
        """The full grid, row 0 first. Used by the boundary layer to render the board"""
        return [
            [self.piece(Square(row, col)) for col in range(BOARD_DIMENSIONS[1])]
            for row in range(BOARD_DIMENSIONS[0])
        ]

    # --- UPDATES (all return a new Board) ---
    def place_piece(self, piece: Piece, square: Square) -> Self:
        if not square.is_within_bounds():
            raise InvalidBoardError(f"Cannot place a piece outside the board: {square}")
        position = dict(self.position)
        position[square] = piece
        return type(self)(position)

    def remove_piece(self, square: Square) -> Self:
        position = dict(self.position)
        position.pop(square, None)
        return type(self)(position)

    def move_piece(self, from_square: Square, to_square: Square) -> Self:
        """Plain relocation: whatever stood on the target square is gone, the origin becomes empty"""
        position = dict(self.position)
        piece_that_moved = position.pop(from_square, None)
        if piece_that_moved is None:
            return type(self)(position)
        position[to_square] = piece_that_moved
        return type(self)(position)

    def swap_pieces(self, first: Square, second: Square) -> Self:
        position = dict(self.position)
        first_piece = position.pop(first, None)
        second_piece = position.pop(second, None)
        if first_piece is not None:
            position[second] = first_piece
        if second_piece is not None:
            position[first] = second_piece
        return type(self)(position)
