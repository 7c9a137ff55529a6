"""Unit tests for src/game_core.py"""

import pytest

from conftest import DRAWN_BOARD, board_from_picture
from game_core import (EMPTY, MOVE_COLUMN_FULL, MOVE_CONTINUE, MOVE_DRAW,
                       MOVE_WIN, PLAYER1_PIECE, PLAYER2_PIECE, board_from_rows,
                       check_win, create_empty_board, drop, evaluate_move,
                       get_valid_locations, is_full, render_board)


def test_empty_board_shape():
    board = create_empty_board()
    assert len(board) == 6
    assert all(len(row) == 7 for row in board)
    assert all(cell == EMPTY for row in board for cell in row)


def test_drop_lands_on_bottom_row():
    board = create_empty_board()
    result = drop(board, 3, PLAYER1_PIECE)
    assert result[5][3] == PLAYER1_PIECE
    assert sum(cell != EMPTY for row in result for cell in row) == 1


def test_drop_stacks_on_existing_pieces():
    board = drop(drop(create_empty_board(), 0, PLAYER1_PIECE), 0, PLAYER2_PIECE)
    assert board[5][0] == PLAYER1_PIECE
    assert board[4][0] == PLAYER2_PIECE
    assert board[3][0] == EMPTY


def test_drop_does_not_mutate_input():
    board = create_empty_board()
    snapshot = board_from_rows([list(row) for row in board])
    drop(board, 2, PLAYER1_PIECE)
    assert board == snapshot


def test_drop_into_full_column_signals_full():
    board = create_empty_board()
    for i in range(6):
        board = drop(board, 4, PLAYER1_PIECE if i % 2 else PLAYER2_PIECE)
    assert drop(board, 4, PLAYER1_PIECE) is None
    assert 4 not in get_valid_locations(board)


@pytest.mark.parametrize("col", [-1, 7, 100])
def test_drop_outside_board_is_treated_as_full(col):
    assert drop(create_empty_board(), col, PLAYER1_PIECE) is None


def test_drop_changes_exactly_one_empty_cell_per_column():
    board = board_from_picture(
        ".......",
        ".......",
        "..O....",
        "..X....",
        ".OX.X..",
        "XOOXO.X",
    )
    for col in range(7):
        for player in (PLAYER1_PIECE, PLAYER2_PIECE):
            result = drop(board, col, player)
            changed = [(r, c) for r in range(6) for c in range(7) if result[r][c] != board[r][c]]
            assert len(changed) == 1
            r, c = changed[0]
            assert c == col and board[r][c] == EMPTY and result[r][c] == player
            assert all(result[below][col] != EMPTY for below in range(r + 1, 6))


def test_check_win_horizontal():
    board = board_from_rows([[0] * 7] * 5 + [[1, 1, 1, 1, 0, 0, 0]])
    assert check_win(board, PLAYER1_PIECE)
    assert not check_win(board, PLAYER2_PIECE)


def test_check_win_vertical():
    board = board_from_picture(
        ".......",
        ".......",
        "......O",
        "......O",
        "......O",
        "X.X...O",
    )
    assert check_win(board, PLAYER2_PIECE)


def test_check_win_rising_diagonal():
    board = board_from_picture(
        ".......",
        ".......",
        "...X...",
        "..XO...",
        ".XOO...",
        "XOOX...",
    )
    assert check_win(board, PLAYER1_PIECE)


def test_check_win_falling_diagonal():
    board = board_from_picture(
        ".......",
        ".......",
        "...O...",
        "...XO..",
        "...XXO.",
        "..XXOXO",
    )
    assert check_win(board, PLAYER2_PIECE)


def test_check_win_three_in_a_row_is_not_a_win():
    board = board_from_picture(
        ".......",
        ".......",
        ".......",
        ".......",
        "OO.....",
        "XXX.O..",
    )
    assert not check_win(board, PLAYER1_PIECE)
    assert not check_win(board, PLAYER2_PIECE)


def test_check_win_on_drawn_board():
    assert not check_win(DRAWN_BOARD, PLAYER1_PIECE)
    assert not check_win(DRAWN_BOARD, PLAYER2_PIECE)


def test_is_full():
    assert is_full(DRAWN_BOARD)
    assert not is_full(create_empty_board())


@pytest.mark.parametrize("row,col", [(0, 0), (0, 6), (5, 3), (2, 4)])
def test_single_empty_cell_means_not_full(row, col):
    rows = [list(r) for r in DRAWN_BOARD]
    rows[row][col] = EMPTY
    assert not is_full(board_from_rows(rows))


def test_evaluate_move_column_full():
    evaluation = evaluate_move(DRAWN_BOARD, 0, PLAYER1_PIECE)
    assert evaluation.kind == MOVE_COLUMN_FULL
    assert evaluation.board is None


def test_evaluate_move_continue():
    evaluation = evaluate_move(create_empty_board(), 3, PLAYER1_PIECE)
    assert evaluation.kind == MOVE_CONTINUE
    assert evaluation.board[5][3] == PLAYER1_PIECE


def test_evaluate_move_win():
    board = board_from_picture(
        ".......",
        ".......",
        ".......",
        ".......",
        "OOO....",
        "XXX....",
    )
    evaluation = evaluate_move(board, 3, PLAYER1_PIECE)
    assert evaluation.kind == MOVE_WIN
    assert evaluation.board[5][3] == PLAYER1_PIECE


def test_evaluate_move_draw_on_last_cell():
    rows = [list(r) for r in DRAWN_BOARD]
    rows[0][0] = EMPTY
    evaluation = evaluate_move(board_from_rows(rows), 0, PLAYER1_PIECE)
    assert evaluation.kind == MOVE_DRAW
    assert is_full(evaluation.board)


def test_win_takes_precedence_over_full_board():
    # The last free cell (0, 3) completes a top-row line for X.
    board = board_from_picture(
        "XXX.OOX",
        "OOXXXOX",
        "XXOOOXO",
        "OOXXXOX",
        "XXOOOXO",
        "OOXXXOX",
    )
    assert not check_win(board, PLAYER1_PIECE)
    evaluation = evaluate_move(board, 3, PLAYER1_PIECE)
    assert is_full(evaluation.board)
    assert evaluation.kind == MOVE_WIN


def test_render_board_marks_pieces():
    text = render_board(drop(create_empty_board(), 0, PLAYER2_PIECE))
    assert "O" in text
    assert text.splitlines()[5].startswith("| O |")
