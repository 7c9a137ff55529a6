# =============================================================================
# MODULE: game_controller.py
# Connect Four - Intents from the view, timers and server events
# =============================================================================

import logging
from typing import Callable, List, Optional

from ai_opponent import (BOT_BLOCKED, BOT_CONTINUE, BOT_DRAW, BOT_WIN,
                         HeuristicOpponent)
from config import BOT_DELAY, BOT_NAME, MATCHMAKING_DELAY
from game_core import (MOVE_COLUMN_FULL, MOVE_DRAW, MOVE_WIN, PLAYER1_PIECE,
                       PLAYER2_PIECE, evaluate_move, find_available_row,
                       other_player)
from messages import BoardUpdate, GameOver, GameStart, Info, MakeMove, Reconnect
from session_state import (YOUR_MOVE_MESSAGE, ApplyBoard, BeginMatch,
                           ChangeScreen, Conclude, GameMode, Outcome, Restart,
                           Screen, Session, SetIdentity, SetStatusMessage,
                           Transition, initial_session, reduce)

logger = logging.getLogger('GameController')

# --- STATUS COPY ---
MATCHMAKING_MESSAGE = 'Pairing you with an opponent...'
USERNAME_REQUIRED_MESSAGE = 'Add a call sign to join the lobby.'
COLUMN_FULL_MESSAGE = 'Column full - pick another lane.'
PLAYER_WIN_MESSAGE = 'You connected four! Well played.'
DRAW_MESSAGE = 'Dead heat - the grid is full.'
BOT_BLOCKED_MESSAGE = 'Bot cannot find a valid column. Restart to continue.'
REJOIN_MESSAGE = 'Requesting a new match...'


def turn_message(turn, you, opponent=None):
    if turn == you:
        return YOUR_MOVE_MESSAGE
    return f"{opponent or 'Opponent'} thinking - stay sharp."


def loss_message(opponent=None):
    return f"{opponent or 'Opponent'} connected four."


class GameController:
    """
    Owns the current Session and is the only place transitions are
    dispatched. In local mode it runs the matchmaking and opponent timers;
    in online mode it relays intents to a SyncClient and applies server
    messages as they arrive.
    """

    def __init__(self, scheduler, mode=GameMode.LOCAL, sync_client=None, opponent=None,
                 matchmaking_delay=MATCHMAKING_DELAY, bot_delay=BOT_DELAY):
        if mode == GameMode.ONLINE and sync_client is None:
            raise ValueError("Online mode requires a SyncClient")

        self.scheduler = scheduler
        self.sync_client = sync_client
        self.opponent = opponent or HeuristicOpponent(PLAYER2_PIECE)
        self.matchmaking_delay = matchmaking_delay
        self.bot_delay = bot_delay

        self.session: Session = initial_session(mode)
        self.validation_error: Optional[str] = None
        self._listeners: List[Callable] = []
        self._matchmaking_task = None
        self._bot_task = None
        self._bot_board = None
        self._unsubscribe = []

        if mode == GameMode.ONLINE:
            self._unsubscribe = [
                sync_client.on_message(self._handle_server_message),
                sync_client.on_error(self._handle_network_error),
            ]

    @property
    def state(self) -> Session:
        return self.session

    @property
    def mode(self) -> GameMode:
        return self.session.mode

    def subscribe(self, callback):
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return unsubscribe

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def dispatch(self, transition: Transition):
        previous = self.session
        self.session = reduce(previous, transition)
        logger.debug(f"{type(transition).__name__}: {previous.screen.value} -> {self.session.screen.value}")
        self._sync_timers()
        for callback in list(self._listeners):
            callback(self.session)

    def _sync_timers(self):
        """Cancels timers the new session made stale and arms the ones it needs."""
        session = self.session
        local = session.mode == GameMode.LOCAL

        wants_match = local and session.screen == Screen.MATCHMAKING
        if self._matchmaking_task is not None and self._matchmaking_task.pending:
            if not wants_match:
                self._matchmaking_task.cancel()
                self._matchmaking_task = None
        elif wants_match:
            self._matchmaking_task = self.scheduler.call_later(
                self.matchmaking_delay, self._start_local_match, 'matchmaking')

        wants_bot = (local and session.screen == Screen.IN_PROGRESS
                     and session.outcome is None
                     and session.current_turn != session.local_player)
        if self._bot_task is not None and self._bot_task.pending:
            if not wants_bot or self._bot_board is not session.board:
                self._bot_task.cancel()
                self._bot_task = None
        if wants_bot and (self._bot_task is None or not self._bot_task.pending):
            board = session.board
            self._bot_task = self.scheduler.call_later(
                self.bot_delay, lambda: self._play_opponent_turn(board), 'opponent-turn')
            self._bot_board = board

    # =========================================================================
    # INTENTS
    # =========================================================================

    def submit_username(self, value) -> bool:
        trimmed = (value or '').strip()
        if not trimmed:
            self.validation_error = USERNAME_REQUIRED_MESSAGE
            return False
        if self.session.screen != Screen.AWAITING_NAME:
            return False

        self.validation_error = None
        self.dispatch(SetIdentity(trimmed))
        self.dispatch(ChangeScreen(Screen.MATCHMAKING, MATCHMAKING_MESSAGE))
        if self.mode == GameMode.ONLINE:
            self.sync_client.connect(trimmed)
        return True

    def click_column(self, col) -> bool:
        session = self.session
        if not session.is_my_turn:
            return False

        if session.mode == GameMode.ONLINE:
            if find_available_row(session.board, col) is None:
                self.dispatch(SetStatusMessage(COLUMN_FULL_MESSAGE))
                return False
            if not session.match_id:
                return False
            return self.sync_client.send(MakeMove(col, session.match_id))

        evaluation = evaluate_move(session.board, col, session.local_player)
        if evaluation.kind == MOVE_COLUMN_FULL:
            self.dispatch(SetStatusMessage(COLUMN_FULL_MESSAGE))
            return False
        if evaluation.kind == MOVE_WIN:
            self.dispatch(Conclude(Outcome.WIN, PLAYER_WIN_MESSAGE, evaluation.board))
            return True
        if evaluation.kind == MOVE_DRAW:
            self.dispatch(Conclude(Outcome.DRAW, DRAW_MESSAGE, evaluation.board))
            return True

        next_turn = other_player(session.local_player)
        self.dispatch(ApplyBoard(evaluation.board, next_turn,
                                 turn_message(next_turn, session.local_player, session.opponent)))
        return True

    def restart(self) -> bool:
        session = self.session
        if session.screen != Screen.FINISHED:
            return False

        if session.mode == GameMode.LOCAL:
            self.dispatch(Restart())
            return True

        if not session.username:
            return False
        if self.sync_client.send(Reconnect(session.username, session.match_id)):
            self.dispatch(SetStatusMessage(REJOIN_MESSAGE))
            return True
        return False

    def shutdown(self):
        for task in (self._matchmaking_task, self._bot_task):
            if task is not None:
                task.cancel()
        self._matchmaking_task = self._bot_task = None
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        if self.sync_client is not None:
            self.sync_client.disconnect()

    # =========================================================================
    # LOCAL PLAY
    # =========================================================================

    def _start_local_match(self):
        self._matchmaking_task = None
        if self.session.screen != Screen.MATCHMAKING:
            logger.debug("Discarding stale matchmaking timer")
            return
        logger.info(f"Local match against {BOT_NAME}")
        self.dispatch(BeginMatch(
            local_player=PLAYER1_PIECE,
            opponent=BOT_NAME,
            first_turn=PLAYER1_PIECE,
            message=turn_message(PLAYER1_PIECE, PLAYER1_PIECE, BOT_NAME),
        ))

    def _play_opponent_turn(self, board):
        self._bot_task = None
        session = self.session
        if (session.board is not board or session.screen != Screen.IN_PROGRESS
                or session.outcome is not None or session.current_turn == session.local_player):
            logger.debug("Discarding stale opponent move")
            return

        move = self.opponent.play(board)
        if move.status == BOT_BLOCKED:
            logger.error("Opponent has no legal column; ending match as a draw")
            self.dispatch(Conclude(Outcome.DRAW, BOT_BLOCKED_MESSAGE, board))
        elif move.status == BOT_WIN:
            self.dispatch(Conclude(Outcome.LOSS, loss_message(session.opponent), move.board))
        elif move.status == BOT_DRAW:
            self.dispatch(Conclude(Outcome.DRAW, DRAW_MESSAGE, move.board))
        elif move.status == BOT_CONTINUE:
            self.dispatch(ApplyBoard(move.board, session.local_player,
                                     turn_message(session.local_player, session.local_player, session.opponent)))

    # =========================================================================
    # ONLINE PLAY
    # =========================================================================

    def _handle_server_message(self, message):
        session = self.session
        if isinstance(message, GameStart):
            self.sync_client.match_id = message.match_id
            first_turn = message.first_turn or message.local_player
            self.dispatch(BeginMatch(
                local_player=message.local_player,
                opponent=message.opponent,
                first_turn=first_turn,
                board=message.board,
                match_id=message.match_id,
                message=message.message or turn_message(first_turn, message.local_player, message.opponent),
            ))
        elif isinstance(message, BoardUpdate):
            self.dispatch(ApplyBoard(
                message.board, message.turn,
                message.message or turn_message(message.turn, session.local_player, session.opponent),
            ))
        elif isinstance(message, GameOver):
            if message.result == Outcome.WIN:
                fallback = PLAYER_WIN_MESSAGE
            elif message.result == Outcome.LOSS:
                fallback = loss_message(session.opponent)
            else:
                fallback = DRAW_MESSAGE
            self.dispatch(Conclude(message.result, message.message or fallback, message.board))
        elif isinstance(message, Info):
            self.dispatch(SetStatusMessage(message.message))

    def _handle_network_error(self, text):
        self.dispatch(SetStatusMessage(text))
