"""
The GameSession is the entrypoint into the domain layer.
It interprets the clicks of a player (select a square) and orchestrates the rules required to play a turn:
compute legal moves, apply the chosen move, evaluate check/checkmate/stalemate, hand the turn over.

The state is replaced wholesale on every event, and whoever subscribed gets told it changed.
"""

import logging
import random
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Iterator, Optional, Self

from src.chess.board import Board
from src.chess.events import Listener, ListenerHandle, LoggingNotifier, Notifier
from src.chess.execution import execute_move
from src.chess.moves import Move, RandomSource
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square
from src.chess.status import GameStatus, evaluate_status, legal_moves
from src.core.config import SessionConfig
from src.core.exceptions import GameStateError

_LOGGER = logging.getLogger(__name__)


class SelectionPhase(Enum):
    NO_SELECTION = auto()
    PIECE_SELECTED = auto()


@dataclass(frozen=True)
class SessionState:
    """
    Snapshot of the game, as rendered by the presentation layer.

    NOTE: selected_square is only set while it holds a piece of current_player, and valid_moves were computed for that piece.
    Without a selection, valid_moves is empty.
    """

    board: Board
    current_player: Color
    selected_square: Optional[Square] = None
    valid_moves: tuple[Square, ...] = ()
    status: GameStatus = GameStatus.PLAYING

    @property
    def phase(self) -> SelectionPhase:
        if self.selected_square is None:
            return SelectionPhase.NO_SELECTION
        return SelectionPhase.PIECE_SELECTED

    def with_selection(self, square: Square, moves: list[Square]) -> Self:
        return replace(self, selected_square=square, valid_moves=tuple(moves))

    def without_selection(self) -> Self:
        return replace(self, selected_square=None, valid_moves=())


class GameSession:
    """
    One game between two players at the same screen.

    Transitions are synchronous and not reentrant: a listener that calls back into select_square() or reset()
    while being notified gets a GameStateError. The outer transition still completes, and a listener that
    raises never keeps the other listeners from being called.
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        rng: Optional[RandomSource] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.config = config if config is not None else SessionConfig()
        self.rng: RandomSource = (
            rng if rng is not None else random.Random(self.config.seed)
        )
        self.notifier: Notifier = notifier if notifier is not None else LoggingNotifier()
        self._listeners: dict[ListenerHandle, Listener] = {}
        self._announcements: list[str] = []
        self._transitioning = False
        self._state = self._initial_state()

    # --- QUERIES ---
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_game_over(self) -> bool:
        return self._state.status.is_terminal

    # --- LISTENERS ---
    def subscribe(self, listener: Listener) -> ListenerHandle:
        handle = ListenerHandle()
        self._listeners[handle] = listener
        return handle

    def unsubscribe(self, handle: ListenerHandle) -> bool:
        """False if the handle was not (or no longer) registered"""
        return self._listeners.pop(handle, None) is not None

    # --- TRANSITIONS ---
    def select_square(self, square: Square) -> SessionState:
        """
        The player clicked a square
        -----

        1. Nothing selected yet? Select the square if it holds one of your pieces, otherwise nothing happens.
        2. Clicked the selected square again? Deselect.
        3. Clicked one of the legal moves? Make the move, hand the turn over, evaluate the opponent's status.
        4. Clicked another one of your pieces? Select that one instead.
        5. Anything else: deselect.
        """
        with self._transition():
            if self.config.lock_after_game_over and self.is_game_over:
                raise GameStateError(
                    f"Game is over ({self._state.status.value}). Reset to start a new game."
                )
            self._state = self._next_state(square)
        return self._state

    def reset(self) -> SessionState:
        """Back to the starting position, no matter what"""
        with self._transition():
            self._state = self._initial_state()
            _LOGGER.info("Session reset")
            self._announce("New game started")
        return self._state

    # -- PRIVATE HELPERS ---
    def _initial_state(self) -> SessionState:
        return SessionState(
            board=self.config.starting_board(),
            current_player=Color[self.config.starting_player.name],
        )

    @contextmanager
    def _transition(self) -> Iterator[None]:
        """Run one state transition, then flush announcements and notify listeners. Nothing is emitted if it fails."""
        if self._transitioning:
            raise GameStateError("Another transition is still in progress.")
        self._transitioning = True
        try:
            yield
            self._flush_announcements()
            self._notify_listeners()
        finally:
            self._announcements.clear()
            self._transitioning = False

    def _next_state(self, square: Square) -> SessionState:
        state = self._state
        clicked_piece = state.board.piece(square)
        is_own_piece = (
            clicked_piece is not None and clicked_piece.color == state.current_player
        )

        if state.selected_square is None:
            if is_own_piece:
                assert clicked_piece is not None
                return self._select(square, clicked_piece)
            return state

        if square == state.selected_square:
            return state.without_selection()

        if square in state.valid_moves:
            return self._make_move(state.selected_square, square)

        if is_own_piece:
            assert clicked_piece is not None
            return self._select(square, clicked_piece)

        return state.without_selection()

    def _select(self, square: Square, piece: Piece) -> SessionState:
        moves = legal_moves(self._state.board, square, piece, self.rng)
        _LOGGER.debug(
            "Selected %s on %s: %d legal move(s)",
            piece.describe(),
            square.to_algebraic(),
            len(moves),
        )
        return self._state.with_selection(square, moves)

    def _make_move(self, from_square: Square, to_square: Square) -> SessionState:
        player = self._state.current_player
        board, move = execute_move(self._state.board, from_square, to_square, self.rng)
        opponent = player.opponent
        status = evaluate_status(board, opponent, self.rng)
        _LOGGER.info(
            "%s played %s, %s to move: %s",
            player.name.lower(),
            move.to_uci(),
            opponent.name.lower(),
            status.value,
        )
        self._describe_move(move, board, status)
        return SessionState(board=board, current_player=opponent, status=status)

    # --- ANNOUNCEMENTS ---
    def _describe_move(self, move: Move, board: Board, status: GameStatus) -> None:
        """Human readable descriptions of what the move caused"""
        player = move.moving_piece.color
        if move.is_capture:
            assert move.captured_piece is not None
            self._announce(
                f"{player.name.lower()} captured {move.captured_piece.type.name.lower()}"
            )

        # after a swap, the pawn stands where the bishop captured
        is_bishop_move = move.moving_piece.type == PieceType.BISHOP
        own_pawn = Piece(PieceType.PAWN, player)
        if is_bishop_move and board.piece(move.to_square) == own_pawn:
            self._announce(f"{move.moving_piece.describe()} swapped places with a pawn")

        opponent = player.opponent.name.lower()
        if status == GameStatus.CHECK:
            self._announce(f"{opponent} is in check")
        elif status == GameStatus.CHECKMATE:
            self._announce(f"Checkmate! {player.name.lower()} wins")
        elif status == GameStatus.STALEMATE:
            self._announce(f"Stalemate! {opponent} has no legal moves")

    def _announce(self, message: str) -> None:
        self._announcements.append(message)

    def _flush_announcements(self) -> None:
        for message in self._announcements:
            self.notifier.notify(message)

    def _notify_listeners(self) -> None:
        # copy: listeners may unsubscribe while being notified
        for listener in list(self._listeners.values()):
            try:
                listener()
            except Exception:
                # the new state is already committed, the remaining listeners still get told
                _LOGGER.exception("Listener %r failed", listener)
