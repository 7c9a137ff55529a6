"""Unit tests for src/ai_opponent.py"""

from ai_opponent import (BOT_BLOCKED, BOT_CONTINUE, BOT_DRAW, BOT_WIN,
                         HeuristicOpponent)
from conftest import DRAWN_BOARD, board_from_picture
from game_core import (EMPTY, PLAYER1_PIECE, PLAYER2_PIECE, board_from_rows,
                       create_empty_board, drop)


def test_default_opponent_plays_second_piece():
    bot = HeuristicOpponent()
    assert bot.player_id == PLAYER2_PIECE
    assert bot.opp_player_id == PLAYER1_PIECE


def test_takes_winning_column_before_blocking():
    board = board_from_picture(
        ".......",
        ".......",
        ".......",
        "......X",
        "......X",
        "OOO.X.X",
    )
    assert HeuristicOpponent().select_column(board) == 3


def test_blocks_human_three_in_a_row():
    board = board_from_picture(
        ".......",
        ".......",
        ".......",
        "X......",
        "X......",
        "XOO....",
    )
    assert HeuristicOpponent().select_column(board) == 0


def test_prefers_center_on_empty_board():
    assert HeuristicOpponent().select_column(create_empty_board()) == 3


def test_follows_priority_when_center_is_full():
    board = create_empty_board()
    for i in range(6):
        board = drop(board, 3, PLAYER1_PIECE if i % 2 else PLAYER2_PIECE)
    assert HeuristicOpponent().select_column(board) == 2


def test_player_one_opponent_mirrors_strategy():
    board = board_from_picture(
        ".......",
        ".......",
        ".......",
        ".......",
        ".......",
        ".XXX.OO",
    )
    bot = HeuristicOpponent(PLAYER1_PIECE)
    assert bot.select_column(board) == 0


def test_no_available_column_reports_blocked():
    bot = HeuristicOpponent()
    assert bot.select_column(DRAWN_BOARD) is None
    move = bot.play(DRAWN_BOARD)
    assert move.status == BOT_BLOCKED
    assert move.board is DRAWN_BOARD
    assert move.column is None


def test_play_winning_move():
    board = board_from_picture(
        ".......",
        ".......",
        ".......",
        ".......",
        "XX.....",
        "OOO.XX.",
    )
    move = HeuristicOpponent().play(board)
    assert move.status == BOT_WIN
    assert move.column == 3
    assert move.board[5][3] == PLAYER2_PIECE


def test_play_filling_last_cell_is_draw():
    rows = [list(r) for r in DRAWN_BOARD]
    rows[0][0] = EMPTY
    move = HeuristicOpponent().play(board_from_rows(rows))
    assert move.status == BOT_DRAW
    assert move.board[0][0] == PLAYER2_PIECE


def test_play_continue_returns_new_board():
    board = create_empty_board()
    move = HeuristicOpponent().play(board)
    assert move.status == BOT_CONTINUE
    assert move.board[5][3] == PLAYER2_PIECE
    assert board[5][3] == EMPTY
