"""Custom errors shared by all layers"""


class ChessError(Exception):
    """Base class: anything the engine raises on purpose derives from this one"""


class GameStateError(ChessError):
    """The session is not in a state in which the request makes sense (game over, transition in progress, ...)"""


class InvalidBoardError(ChessError):
    """Piece placement text could not be turned into a Board"""


class InvalidRequestError(ChessError):
    """A boundary request failed validation"""


class ConfigurationError(ChessError):
    """A session could not be configured with the supplied settings"""
