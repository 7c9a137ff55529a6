# =============================================================================
# MODULE: game_core.py
# Connect Four - Board engine and move evaluation
# =============================================================================

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

# --- GLOBAL CONSTANTS ---
ROWS = 6
COLS = 7
WINDOW_LENGTH = 4
EMPTY = 0
PLAYER1_PIECE = 1
PLAYER2_PIECE = 2

# Row 0 is the top of the board, row ROWS - 1 the bottom.
Board = Tuple[Tuple[int, ...], ...]

# Move evaluation kinds
MOVE_COLUMN_FULL = 'COLUMN_FULL'
MOVE_CONTINUE = 'CONTINUE'
MOVE_WIN = 'WIN'
MOVE_DRAW = 'DRAW'


def create_empty_board(rows: int = ROWS, cols: int = COLS) -> Board:
    return tuple(tuple(EMPTY for _ in range(cols)) for _ in range(rows))


def board_from_rows(rows: Sequence[Sequence[int]]) -> Board:
    """Freezes a nested list (e.g. a board received over the wire)."""
    return tuple(tuple(int(cell) for cell in row) for row in rows)


def other_player(player: int) -> int:
    return PLAYER1_PIECE if player == PLAYER2_PIECE else PLAYER2_PIECE


def find_available_row(board: Board, col: int) -> Optional[int]:
    """Lowest empty row in the column, or None if it is full."""
    if not (0 <= col < len(board[0])):
        return None
    for row in range(len(board) - 1, -1, -1):
        if board[row][col] == EMPTY:
            return row
    return None


def get_valid_locations(board: Board) -> list:
    return [c for c in range(len(board[0])) if find_available_row(board, c) is not None]


def drop(board: Board, col: int, player: int) -> Optional[Board]:
    """
    Drops a piece into a column. Returns the new board, or None when the
    column has no empty cell. The input board is never modified.
    """
    row = find_available_row(board, col)
    if row is None:
        return None
    target = list(board[row])
    target[col] = player
    return board[:row] + (tuple(target),) + board[row + 1:]


def check_win(board: Board, player: int) -> bool:
    """True if `player` owns WINDOW_LENGTH consecutive cells in any direction."""
    rows, cols = len(board), len(board[0])
    span = WINDOW_LENGTH - 1

    # Horizontal
    for r in range(rows):
        for c in range(cols - span):
            if all(board[r][c + i] == player for i in range(WINDOW_LENGTH)):
                return True
    # Vertical
    for c in range(cols):
        for r in range(rows - span):
            if all(board[r + i][c] == player for i in range(WINDOW_LENGTH)):
                return True
    # Diagonals
    for r in range(rows - span):
        for c in range(cols - span):
            if all(board[r + i][c + i] == player for i in range(WINDOW_LENGTH)):
                return True
    for r in range(span, rows):
        for c in range(cols - span):
            if all(board[r - i][c + i] == player for i in range(WINDOW_LENGTH)):
                return True
    return False


def is_full(board: Board) -> bool:
    return all(cell != EMPTY for row in board for cell in row)


@dataclass(frozen=True)
class MoveEvaluation:
    """Outcome of a single move attempt. `board` is None for COLUMN_FULL."""
    kind: str
    board: Optional[Board] = None


def evaluate_move(board: Board, col: int, player: int) -> MoveEvaluation:
    """
    Classifies a move as COLUMN_FULL, WIN, DRAW or CONTINUE.
    A move that completes a line on the last free cell is a WIN.
    """
    next_board = drop(board, col, player)
    if next_board is None:
        return MoveEvaluation(MOVE_COLUMN_FULL)

    if check_win(next_board, player):
        return MoveEvaluation(MOVE_WIN, next_board)
    if is_full(next_board):
        return MoveEvaluation(MOVE_DRAW, next_board)
    return MoveEvaluation(MOVE_CONTINUE, next_board)


def render_board(board: Board) -> str:
    """Debug rendering, top row first."""
    symbols = {EMPTY: '.', PLAYER1_PIECE: 'X', PLAYER2_PIECE: 'O'}
    lines = ["|" + "".join(f" {symbols.get(cell, '?')} |" for cell in row) for row in board]
    lines.append("-" * (4 * len(board[0]) + 1))
    lines.append("|" + "".join(f" {c} |" for c in range(len(board[0]))))
    return "\n".join(lines)
