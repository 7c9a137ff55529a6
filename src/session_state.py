# =============================================================================
# MODULE: session_state.py
# Connect Four - Canonical match record and its transitions
# =============================================================================

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union, assert_never

from game_core import Board, PLAYER1_PIECE, create_empty_board

# --- STATUS COPY ---
INITIAL_MESSAGE = 'Enter a username to start a match.'
YOUR_MOVE_MESSAGE = 'Your move - drop a disc to get four in a row.'


class Screen(str, Enum):
    AWAITING_NAME = 'AWAITING_NAME'
    MATCHMAKING = 'MATCHMAKING'
    IN_PROGRESS = 'IN_PROGRESS'
    FINISHED = 'FINISHED'


class Outcome(str, Enum):
    """Result of a finished match, relative to the local player."""
    WIN = 'WIN'
    LOSS = 'LOSS'
    DRAW = 'DRAW'


class GameMode(str, Enum):
    LOCAL = 'LOCAL'
    ONLINE = 'ONLINE'


@dataclass(frozen=True)
class Session:
    screen: Screen = Screen.AWAITING_NAME
    username: str = ''
    local_player: int = PLAYER1_PIECE
    opponent: Optional[str] = None
    board: Board = field(default_factory=create_empty_board)
    current_turn: int = PLAYER1_PIECE
    match_id: Optional[str] = None
    outcome: Optional[Outcome] = None
    message: str = INITIAL_MESSAGE
    mode: GameMode = GameMode.ONLINE

    def __post_init__(self):
        if (self.outcome is not None) != (self.screen == Screen.FINISHED):
            raise ValueError(f"Outcome {self.outcome} is inconsistent with screen {self.screen}")

    @property
    def is_my_turn(self) -> bool:
        return (self.screen == Screen.IN_PROGRESS
                and self.outcome is None
                and self.current_turn == self.local_player)


def initial_session(mode: GameMode = GameMode.ONLINE) -> Session:
    return Session(mode=mode)


# =============================================================================
# TRANSITIONS
# =============================================================================

@dataclass(frozen=True)
class SetIdentity:
    username: str


@dataclass(frozen=True)
class ChangeScreen:
    screen: Screen
    message: Optional[str] = None


@dataclass(frozen=True)
class BeginMatch:
    local_player: int
    opponent: Optional[str] = None
    first_turn: Optional[int] = None
    board: Optional[Board] = None
    match_id: Optional[str] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class ApplyBoard:
    board: Board
    turn: int
    message: Optional[str] = None


@dataclass(frozen=True)
class Conclude:
    outcome: Outcome
    message: Optional[str] = None
    board: Optional[Board] = None


@dataclass(frozen=True)
class Restart:
    pass


@dataclass(frozen=True)
class SetStatusMessage:
    message: str


Transition = Union[SetIdentity, ChangeScreen, BeginMatch, ApplyBoard,
                   Conclude, Restart, SetStatusMessage]


def reduce(session: Session, transition: Transition) -> Session:
    """
    Returns the session that follows `transition`. Never fails; callers are
    responsible for only dispatching transitions that fit the current screen.
    """
    if isinstance(transition, SetIdentity):
        return replace(session, username=transition.username)

    if isinstance(transition, ChangeScreen):
        message = transition.message if transition.message is not None else session.message
        # Only Conclude may enter FINISHED, since it carries the outcome.
        if transition.screen == Screen.FINISHED:
            return replace(session, message=message)
        return replace(session, screen=transition.screen, outcome=None, message=message)

    if isinstance(transition, BeginMatch):
        return replace(
            session,
            screen=Screen.IN_PROGRESS,
            opponent=transition.opponent if transition.opponent is not None else session.opponent,
            board=transition.board if transition.board is not None else create_empty_board(),
            current_turn=transition.first_turn if transition.first_turn is not None else transition.local_player,
            local_player=transition.local_player,
            match_id=transition.match_id,
            outcome=None,
            message=transition.message if transition.message is not None else session.message,
        )

    if isinstance(transition, ApplyBoard):
        return replace(
            session,
            board=transition.board,
            current_turn=transition.turn,
            message=transition.message if transition.message is not None else session.message,
        )

    if isinstance(transition, Conclude):
        return replace(
            session,
            screen=Screen.FINISHED,
            outcome=transition.outcome,
            board=transition.board if transition.board is not None else session.board,
            message=transition.message if transition.message is not None else session.message,
        )

    if isinstance(transition, Restart):
        return replace(
            session,
            screen=Screen.IN_PROGRESS,
            board=create_empty_board(),
            current_turn=session.local_player,
            outcome=None,
            message=YOUR_MOVE_MESSAGE,
        )

    if isinstance(transition, SetStatusMessage):
        return replace(session, message=transition.message)

    assert_never(transition)
