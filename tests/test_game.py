"""Unit tests for tic-tac-toe game logic."""

import pytest

from tictactoe.game import (
    TicTacToeGame,
    has_won,
    is_full,
    legal_moves,
    new_board,
    validate_board,
    winning_line,
)


def test_initial_state_allows_every_cell():
    game = TicTacToeGame()
    assert game.available_moves() == list(range(9))
    assert game.current_player == "X"


def test_legal_moves_ascending():
    board = ["", "X", "", "O", "", "", "X", "", "O"]
    assert legal_moves(board) == [0, 2, 4, 5, 7]


def test_row_column_and_diagonal_wins():
    assert has_won(["X", "X", "X", "", "", "", "", "", ""], "X")
    assert has_won(["O", "", "", "O", "", "", "O", "", ""], "O")
    assert has_won(["", "", "X", "", "X", "", "X", "", ""], "X")
    assert not has_won(["X", "X", "O", "", "", "", "", "", ""], "X")


def test_winning_line_reports_completed_triple():
    board = ["", "", "O", "", "", "O", "", "", "O"]
    assert winning_line(board, "O") == (2, 5, 8)
    assert winning_line(board, "X") is None


def test_is_full():
    assert not is_full(new_board())
    assert is_full(["X", "O", "X", "X", "O", "O", "O", "X", "X"])


def test_validate_board_rejects_malformed_input():
    with pytest.raises(ValueError):
        validate_board([""] * 10)
    with pytest.raises(ValueError):
        validate_board(["X", "", "", "", "?", "", "", "", ""])
    validate_board(new_board())


def test_play_move_alternates_players():
    game = TicTacToeGame()
    game.play_move(4)
    assert game.board[4] == "X"
    assert game.current_player == "O"
    game.play_move(0)
    assert game.board[0] == "O"
    assert game.current_player == "X"


def test_occupied_and_out_of_range_cells_rejected():
    game = TicTacToeGame()
    game.play_move(4)
    with pytest.raises(ValueError):
        game.play_move(4)
    with pytest.raises(ValueError):
        game.play_move(9)


def test_win_detection_and_finished_game():
    game = TicTacToeGame()
    for cell in (0, 3, 1, 4, 2):
        game.play_move(cell)
    assert game.winner == "X"
    assert game.winning_line == (0, 1, 2)
    assert game.available_moves() == []
    with pytest.raises(ValueError):
        game.play_move(8)


def test_win_on_last_cell_is_not_a_draw():
    game = TicTacToeGame()
    for cell in (0, 1, 2, 3, 4, 5, 7, 6, 8):
        game.play_move(cell)
    assert game.winner == "X"
    assert game.winning_line == (0, 4, 8)
    assert not game.drawn


def test_draw_detection():
    game = TicTacToeGame()
    for cell in (0, 4, 8, 1, 7, 6, 2, 5, 3):
        game.play_move(cell)
    assert game.winner is None
    assert game.drawn


def test_reset_restores_empty_board():
    game = TicTacToeGame()
    game.play_move(0)
    game.reset()
    assert game.board == new_board()
    assert game.current_player == "X"
    assert not game.is_over
