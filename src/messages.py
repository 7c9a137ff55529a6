# =============================================================================
# MODULE: messages.py
# Connect Four - Client/server wire messages (JSON frames)
# =============================================================================

import json
from dataclasses import dataclass
from typing import Optional, Union

from game_core import Board, COLS, ROWS, board_from_rows
from session_state import Outcome

# Outbound
MAKE_MOVE = 'MAKE_MOVE'
RECONNECT = 'RECONNECT'

# Inbound
GAME_START = 'GAME_START'
BOARD_UPDATE = 'BOARD_UPDATE'
GAME_OVER = 'GAME_OVER'
INFO = 'INFO'


class MessageFormatError(ValueError):
    """Raised when an inbound frame is not a well-formed server message."""


# =============================================================================
# CLIENT -> SERVER
# =============================================================================

@dataclass(frozen=True)
class MakeMove:
    column: int
    match_id: str

    def to_dict(self):
        return {'type': MAKE_MOVE, 'col': self.column, 'gameId': self.match_id}


@dataclass(frozen=True)
class Reconnect:
    username: str
    match_id: Optional[str] = None

    def to_dict(self):
        data = {'type': RECONNECT, 'username': self.username}
        if self.match_id:
            data['gameId'] = self.match_id
        return data


ClientMessage = Union[MakeMove, Reconnect]


def encode_client_message(message: ClientMessage) -> str:
    return json.dumps(message.to_dict())


# =============================================================================
# SERVER -> CLIENT
# =============================================================================

@dataclass(frozen=True)
class GameStart:
    match_id: str
    local_player: int
    opponent: str
    first_turn: Optional[int] = None
    board: Optional[Board] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class BoardUpdate:
    board: Board
    turn: int
    message: Optional[str] = None


@dataclass(frozen=True)
class GameOver:
    result: Outcome
    board: Board
    message: Optional[str] = None


@dataclass(frozen=True)
class Info:
    message: str


ServerMessage = Union[GameStart, BoardUpdate, GameOver, Info]


def _require(data, key):
    if key not in data or data[key] is None:
        raise MessageFormatError(f"{data.get('type')} missing '{key}'")
    return data[key]


def _player(value, key):
    if type(value) is not int or value not in (1, 2):
        raise MessageFormatError(f"'{key}' must be 1 or 2, got {value!r}")
    return value


def _board(value):
    if (not isinstance(value, list) or len(value) != ROWS
            or any(not isinstance(row, list) or len(row) != COLS for row in value)):
        raise MessageFormatError(f"board must be {ROWS}x{COLS}")
    if any(type(cell) is not int for row in value for cell in row):
        raise MessageFormatError("board cells must be integers")
    board = board_from_rows(value)
    if any(cell not in (0, 1, 2) for row in board for cell in row):
        raise MessageFormatError("board cells must be 0, 1 or 2")
    return board


def _optional_message(data):
    message = data.get('message')
    return message if isinstance(message, str) and message else None


def parse_server_message(frame) -> Optional[ServerMessage]:
    """
    Parses one inbound frame. Returns None for message kinds this client
    does not know; raises MessageFormatError for anything malformed.
    """
    if isinstance(frame, (bytes, bytearray)):
        frame = frame.decode('utf-8', errors='replace')
    if isinstance(frame, str):
        try:
            data = json.loads(frame)
        except json.JSONDecodeError as e:
            raise MessageFormatError(f"invalid JSON: {e.msg}") from e
    else:
        data = frame

    if not isinstance(data, dict) or not isinstance(data.get('type'), str):
        raise MessageFormatError("frame is not an object with a 'type'")

    kind = data['type']
    if kind == GAME_START:
        first_turn = data.get('firstTurn')
        board = data.get('board')
        return GameStart(
            match_id=str(_require(data, 'gameId')),
            local_player=_player(_require(data, 'you'), 'you'),
            opponent=str(data.get('opponent') or 'Opponent'),
            first_turn=_player(first_turn, 'firstTurn') if first_turn else None,
            board=_board(board) if board else None,
            message=_optional_message(data),
        )
    if kind == BOARD_UPDATE:
        return BoardUpdate(
            board=_board(_require(data, 'board')),
            turn=_player(_require(data, 'currentTurn'), 'currentTurn'),
            message=_optional_message(data),
        )
    if kind == GAME_OVER:
        raw_result = _require(data, 'result')
        try:
            result = Outcome(raw_result)
        except ValueError as e:
            raise MessageFormatError(f"unknown result {raw_result!r}") from e
        return GameOver(result=result, board=_board(_require(data, 'board')),
                        message=_optional_message(data))
    if kind == INFO:
        message = _require(data, 'message')
        if not isinstance(message, str):
            raise MessageFormatError("INFO message must be a string")
        return Info(message)
    return None
