"""Settings a GameSession is created with"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from src.chess.board import STARTING_POSITION, Board
from src.core.exceptions import ConfigurationError, InvalidBoardError
from src.core.shared_types import Color


class SessionConfig(BaseModel):
    """
    * starting_position: piece placement (first part of a FEN string) the game starts from, and returns to on reset
    * starting_player: who moves first
    * seed: seeds the random source used by knights and bishops. None means a fresh, unseeded source.
    * lock_after_game_over: refuse selections once the game reached checkmate or stalemate
    """

    model_config = ConfigDict(frozen=True)

    starting_position: str = STARTING_POSITION
    starting_player: Color = Color.WHITE
    seed: Optional[int] = None
    lock_after_game_over: bool = True

    @field_validator("starting_position")
    @classmethod
    def validate_starting_position(cls, value: str) -> str:
        try:
            Board.from_fen(value)
        except InvalidBoardError as err:
            raise ConfigurationError(f"Invalid starting position: {err}") from err
        return value.strip()

    def starting_board(self) -> Board:
        return Board.from_fen(self.starting_position)
