"""Unit tests for /src/chess/game.py"""

from typing import Any, Callable
from unittest.mock import Mock

import pytest

from src.chess.board import STARTING_POSITION, Board
from src.chess.events import ListenerHandle
from src.chess.game import GameSession, SelectionPhase, SessionState
from src.chess.pieces import Color, Piece, PieceType
from src.chess.square import Square
from src.chess.status import GameStatus
from src.core.config import SessionConfig
from src.core.exceptions import GameStateError
from tests.helpers import RecordingNotifier, ScriptedRandom, sq

# c2 rook goes to c8 (6 squares up) and mates: d6/f6 rooks cover d8/f8, the king on e6 covers the 7th rank
MATE_IN_ONE = "4k3/8/3RKR2/8/8/8/2R5/8"
# b1 queen goes to b6 and leaves the a8 king without moves
STALEMATE_IN_ONE = "k7/8/8/8/8/8/8/1Q2K3"

SessionFactory = Callable[..., GameSession]


@pytest.fixture
def make_session(
    rng: ScriptedRandom, notifier: RecordingNotifier
) -> SessionFactory:
    """Call the inner function with a starting position and other SessionConfig fields"""

    def _create_session(
        starting_position: str = STARTING_POSITION, **config: Any
    ) -> GameSession:
        session_config = SessionConfig(starting_position=starting_position, **config)
        return GameSession(session_config, rng=rng, notifier=notifier)

    return _create_session


def assert_selection_invariant(state: SessionState) -> None:
    if state.selected_square is None:
        assert state.valid_moves == ()
        assert state.phase == SelectionPhase.NO_SELECTION
        return
    piece = state.board.piece(state.selected_square)
    assert piece is not None
    assert piece.color == state.current_player
    assert state.phase == SelectionPhase.PIECE_SELECTED


# -- CREATION --
def test_fresh_session(make_session: SessionFactory) -> None:
    state = make_session().state
    assert state.board == Board.starting_position()
    assert state.current_player == Color.WHITE
    assert state.selected_square is None
    assert state.valid_moves == ()
    assert state.status == GameStatus.PLAYING
    assert state.phase == SelectionPhase.NO_SELECTION


def test_default_session_uses_seeded_random() -> None:
    """Two sessions with the same seed see the same knight behaviour"""
    lone_knight = "4k3/8/8/8/3N4/8/8/4K3"
    config = SessionConfig(starting_position=lone_knight, seed=42)
    first, second = GameSession(config), GameSession(config)
    for _ in range(10):
        assert (
            first.select_square(sq("d4")).valid_moves
            == second.select_square(sq("d4")).valid_moves
        )


def test_starting_player_from_config(make_session: SessionFactory) -> None:
    session = make_session(starting_player="black")
    assert session.state.current_player == Color.BLACK


# -- SELECTING --
def test_selecting_own_pawn(make_session: SessionFactory) -> None:
    """White pawn on (6,4): the diagonal steps are the legal moves"""
    session = make_session()
    state = session.select_square(Square(6, 4))
    assert state.selected_square == Square(6, 4)
    assert set(state.valid_moves) == {Square(5, 3), Square(5, 5)}
    assert state.phase == SelectionPhase.PIECE_SELECTED
    assert_selection_invariant(state)


@pytest.mark.parametrize("square_name", ["e7", "e4"])
def test_selecting_opponent_piece_or_empty_square_is_noop(
    square_name: str, make_session: SessionFactory
) -> None:
    session = make_session()
    before = session.state
    state = session.select_square(sq(square_name))
    assert state == before
    assert state.selected_square is None


def test_selecting_off_the_board_is_noop(make_session: SessionFactory) -> None:
    session = make_session()
    state = session.select_square(Square(9, 9))
    assert state.selected_square is None


def test_deselect_by_selecting_again(make_session: SessionFactory) -> None:
    session = make_session()
    session.select_square(sq("e2"))
    state = session.select_square(sq("e2"))
    assert state.selected_square is None
    assert state.valid_moves == ()
    assert state.current_player == Color.WHITE


def test_reselect_other_own_piece(make_session: SessionFactory) -> None:
    session = make_session()
    session.select_square(sq("e2"))
    state = session.select_square(sq("d1"))
    assert state.selected_square == sq("d1")
    # queen stuck behind her pawn: hop to d3
    assert state.valid_moves == (sq("d3"),)
    assert_selection_invariant(state)


@pytest.mark.parametrize("square", [Square(3, 4), Square(1, 4), Square(-1, 4)])
def test_clicking_elsewhere_deselects(square: Square, make_session: SessionFactory) -> None:
    """Empty square, enemy piece that cannot be captured, or off the board: deselect, no move"""
    session = make_session()
    session.select_square(sq("e2"))
    state = session.select_square(square)
    assert state.selected_square is None
    assert state.valid_moves == ()
    assert state.board == Board.starting_position()
    assert state.current_player == Color.WHITE


# -- MOVING --
def test_moving_a_pawn(make_session: SessionFactory, notifier: RecordingNotifier) -> None:
    """Select (6,4), then move diagonally forward-left onto (5,3)"""
    session = make_session()
    session.select_square(Square(6, 4))
    state = session.select_square(Square(5, 3))
    assert state.board.piece(Square(5, 3)) == Piece(PieceType.PAWN, Color.WHITE)
    assert state.board.piece(Square(6, 4)) is None
    assert state.current_player == Color.BLACK
    assert state.selected_square is None
    assert state.valid_moves == ()
    assert state.status == GameStatus.PLAYING
    assert notifier.messages == []


def test_turns_alternate(make_session: SessionFactory) -> None:
    session = make_session()
    session.select_square(sq("e2"))
    session.select_square(sq("d3"))
    # white pieces can no longer be selected
    assert session.select_square(sq("d3")).selected_square is None
    state = session.select_square(sq("e7"))
    assert state.selected_square == sq("e7")
    state = session.select_square(sq("f6"))
    assert state.current_player == Color.WHITE


def test_capture_is_announced(
    make_session: SessionFactory, notifier: RecordingNotifier
) -> None:
    session = make_session("4k3/8/8/8/8/p7/8/R3K3")
    session.select_square(sq("a1"))
    state = session.select_square(sq("a3"))
    assert state.board.piece(sq("a3")) == Piece(PieceType.ROOK, Color.WHITE)
    assert notifier.messages == ["white captured pawn"]


def test_bishop_swap_is_announced(
    make_session: SessionFactory, notifier: RecordingNotifier
) -> None:
    session = make_session("4k3/8/2B5/8/4n3/8/P7/4K3")
    session.select_square(sq("c6"))
    state = session.select_square(sq("e4"))
    assert state.board.piece(sq("a2")) == Piece(PieceType.BISHOP, Color.WHITE)
    assert state.board.piece(sq("e4")) == Piece(PieceType.PAWN, Color.WHITE)
    assert notifier.messages == [
        "white captured knight",
        "white bishop swapped places with a pawn",
    ]


def test_check_is_announced(
    make_session: SessionFactory, notifier: RecordingNotifier
) -> None:
    session = make_session("4k3/8/8/8/8/8/2R5/4K3")
    session.select_square(sq("c2"))
    state = session.select_square(sq("c8"))
    assert state.status == GameStatus.CHECK
    assert state.current_player == Color.BLACK
    assert notifier.messages == ["black is in check"]


def test_checkmate_after_white_move(
    make_session: SessionFactory, notifier: RecordingNotifier
) -> None:
    """Black king on (0,4), white rook lands 2 squares away on the same rank"""
    session = make_session(MATE_IN_ONE)
    state = session.select_square(sq("c2"))
    assert Square(0, 2) in state.valid_moves
    state = session.select_square(Square(0, 2))
    assert state.status == GameStatus.CHECKMATE
    assert state.current_player == Color.BLACK
    assert session.is_game_over
    assert notifier.messages == ["Checkmate! white wins"]


def test_stalemate_after_white_move(
    make_session: SessionFactory, notifier: RecordingNotifier
) -> None:
    session = make_session(STALEMATE_IN_ONE)
    session.select_square(sq("b1"))
    state = session.select_square(sq("b6"))
    assert state.status == GameStatus.STALEMATE
    assert session.is_game_over
    assert len(notifier.messages) == 1
    assert notifier.messages[0].startswith("Stalemate!")


def test_selection_refused_after_game_over(make_session: SessionFactory) -> None:
    session = make_session(MATE_IN_ONE)
    session.select_square(sq("c2"))
    session.select_square(sq("c8"))
    before = session.state
    with pytest.raises(GameStateError):
        session.select_square(sq("e8"))
    assert session.state == before


def test_selection_allowed_after_game_over_if_not_locked(
    make_session: SessionFactory,
) -> None:
    session = make_session(MATE_IN_ONE, lock_after_game_over=False)
    session.select_square(sq("c2"))
    session.select_square(sq("c8"))
    state = session.select_square(sq("e8"))
    assert state.selected_square == sq("e8")
    assert state.valid_moves == ()
    assert state.status == GameStatus.CHECKMATE


# -- RESET --
def test_reset_restores_initial_position(
    make_session: SessionFactory, notifier: RecordingNotifier
) -> None:
    session = make_session()
    session.select_square(sq("e2"))
    session.select_square(sq("d3"))
    session.select_square(sq("e7"))
    session.select_square(sq("f6"))
    session.select_square(sq("g2"))
    state = session.reset()
    assert state.board.to_fen() == STARTING_POSITION
    assert state.current_player == Color.WHITE
    assert state.selected_square is None
    assert state.valid_moves == ()
    assert state.status == GameStatus.PLAYING
    assert notifier.messages == ["New game started"]


def test_reset_after_game_over(make_session: SessionFactory) -> None:
    session = make_session(MATE_IN_ONE)
    session.select_square(sq("c2"))
    session.select_square(sq("c8"))
    state = session.reset()
    assert state.board.to_fen() == MATE_IN_ONE
    assert state.status == GameStatus.PLAYING
    assert not session.is_game_over


# -- LISTENERS --
def test_listeners_called_after_every_transition(make_session: SessionFactory) -> None:
    session = make_session()
    listener = Mock()
    session.subscribe(listener)
    session.select_square(sq("e2"))
    session.select_square(sq("d3"))
    session.reset()
    assert listener.call_count == 3
    listener.assert_called_with()


def test_listener_sees_new_state(make_session: SessionFactory) -> None:
    session = make_session()
    seen: list[SessionState] = []
    session.subscribe(lambda: seen.append(session.state))
    session.select_square(sq("e2"))
    assert seen[0].selected_square == sq("e2")


def test_unsubscribe(make_session: SessionFactory) -> None:
    session = make_session()
    listener = Mock()
    handle = session.subscribe(listener)
    assert isinstance(handle, ListenerHandle)
    assert session.unsubscribe(handle)
    session.select_square(sq("e2"))
    listener.assert_not_called()
    # second time: nothing left to remove
    assert not session.unsubscribe(handle)


def test_handles_are_unique(make_session: SessionFactory) -> None:
    session = make_session()
    listener = Mock()
    first = session.subscribe(listener)
    second = session.subscribe(listener)
    assert first != second
    session.select_square(sq("e2"))
    assert listener.call_count == 2


def test_failed_transition_notifies_nobody(make_session: SessionFactory) -> None:
    session = make_session(MATE_IN_ONE)
    session.select_square(sq("c2"))
    session.select_square(sq("c8"))
    listener = Mock()
    session.subscribe(listener)
    with pytest.raises(GameStateError):
        session.select_square(sq("e8"))
    listener.assert_not_called()


def test_transitions_are_not_reentrant(make_session: SessionFactory) -> None:
    """Only the nested call is refused: the outer one completes and every listener hears about it"""
    session = make_session()
    refused: list[GameStateError] = []

    def _reenter() -> None:
        try:
            session.select_square(sq("d2"))
        except GameStateError as err:
            refused.append(err)

    handle = session.subscribe(_reenter)
    second_listener = Mock()
    session.subscribe(second_listener)

    state = session.select_square(sq("e2"))
    assert state.selected_square == sq("e2")
    assert session.state == state
    assert len(refused) == 1
    second_listener.assert_called_once_with()

    # the session accepts calls again once the listener is gone
    session.unsubscribe(handle)
    state = session.select_square(sq("d2"))
    assert state.selected_square == sq("d2")


def test_failing_listener_does_not_abort_transition(
    make_session: SessionFactory,
    notifier: RecordingNotifier,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A listener that lets an error escape (here: a nested call) is logged, the others still run"""
    session = make_session()
    session.subscribe(lambda: session.reset())
    second_listener = Mock()
    session.subscribe(second_listener)

    with caplog.at_level("ERROR", logger="src.chess.game"):
        state = session.select_square(sq("e2"))

    assert state.selected_square == sq("e2")
    second_listener.assert_called_once_with()
    assert "Listener" in caplog.text
    # the nested reset was refused: nothing announced, selection kept
    assert notifier.messages == []
    assert session.state.selected_square == sq("e2")


def test_default_notifier_logs(caplog: pytest.LogCaptureFixture) -> None:
    session = GameSession(rng=ScriptedRandom())
    with caplog.at_level("INFO", logger="src.chess.events"):
        session.reset()
    assert "New game started" in caplog.text
