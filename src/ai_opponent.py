# =============================================================================
# MODULE: ai_opponent.py
# Connect Four - Heuristic opponent for local play
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Optional

from game_core import (Board, PLAYER1_PIECE, PLAYER2_PIECE, check_win, drop,
                       get_valid_locations, is_full)

logger = logging.getLogger('AIOpponent')

# --- COLUMN PREFERENCE (center-out) ---
PRIORITY_ORDER = [3, 2, 4, 1, 5, 0, 6]

# Play outcomes, from the opponent's point of view
BOT_WIN = 'WIN'
BOT_DRAW = 'DRAW'
BOT_CONTINUE = 'CONTINUE'
BOT_BLOCKED = 'BLOCKED'


@dataclass(frozen=True)
class BotMove:
    status: str
    board: Board
    column: Optional[int] = None


class HeuristicOpponent:
    """
    Stand-in player for local matches. Picks, in order: a winning column,
    a column that blocks the human's win, the first free column of
    PRIORITY_ORDER, then the leftmost free column.
    """

    def __init__(self, player_id=PLAYER2_PIECE):
        self.player_id = player_id
        self.opp_player_id = PLAYER1_PIECE if player_id == PLAYER2_PIECE else PLAYER2_PIECE

    def _completes_line(self, board, col, piece):
        simulated = drop(board, col, piece)
        return simulated is not None and check_win(simulated, piece)

    def select_column(self, board: Board) -> Optional[int]:
        valid_locations = get_valid_locations(board)
        if not valid_locations:
            return None

        # 1. Immediate win
        for col in valid_locations:
            if self._completes_line(board, col, self.player_id):
                return col

        # 2. Immediate block
        for col in valid_locations:
            if self._completes_line(board, col, self.opp_player_id):
                return col

        # 3. Positional preference
        for col in PRIORITY_ORDER:
            if col in valid_locations:
                return col

        # 4. Fallback
        return valid_locations[0]

    def play(self, board: Board) -> BotMove:
        """Selects and places a piece, then scores the result (win before draw)."""
        col = self.select_column(board)
        if col is None:
            logger.error("No valid column for the opponent on a board that is not full")
            return BotMove(BOT_BLOCKED, board)

        next_board = drop(board, col, self.player_id)
        if next_board is None:
            logger.error(f"Opponent selected full column {col}")
            return BotMove(BOT_BLOCKED, board)

        if check_win(next_board, self.player_id):
            return BotMove(BOT_WIN, next_board, col)
        if is_full(next_board):
            return BotMove(BOT_DRAW, next_board, col)
        return BotMove(BOT_CONTINUE, next_board, col)
