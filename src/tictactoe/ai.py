"""Exhaustive minimax with alpha-beta pruning for the computer (O) player."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List
import logging
import math
import time

from .game import (
    CENTER,
    EMPTY,
    PLAYER_O,
    PLAYER_X,
    Player,
    TicTacToeGame,
    has_won,
    is_full,
    legal_moves,
    validate_board,
)

logger = logging.getLogger(__name__)

WIN_SCORE = 10


def minimax(
    board: List[str],
    depth: int,
    maximizing: bool,
    alpha: float,
    beta: float,
) -> int:
    """Score ``board`` for O assuming optimal play from both sides.

    Wins are worth ``10 - depth`` and losses ``depth - 10`` so faster wins and
    slower losses rank higher. The board is mutated in place while searching
    and every placement is undone before returning.
    """
    if has_won(board, PLAYER_O):
        return WIN_SCORE - depth
    if has_won(board, PLAYER_X):
        return depth - WIN_SCORE
    if is_full(board):
        return 0

    if maximizing:
        value = -math.inf
        for move in legal_moves(board):
            board[move] = PLAYER_O
            score = minimax(board, depth + 1, False, alpha, beta)
            board[move] = EMPTY
            value = max(value, score)
            alpha = max(alpha, score)
            if beta <= alpha:
                break
    else:
        value = math.inf
        for move in legal_moves(board):
            board[move] = PLAYER_X
            score = minimax(board, depth + 1, True, alpha, beta)
            board[move] = EMPTY
            value = min(value, score)
            beta = min(beta, score)
            if beta <= alpha:
                break
    return int(value)


def _check_searchable(board: List[str]) -> None:
    validate_board(board)
    if has_won(board, PLAYER_X) or has_won(board, PLAYER_O):
        raise ValueError("Game is already won")
    if is_full(board):
        raise ValueError("No legal moves available")
    x_count = board.count(PLAYER_X)
    o_count = board.count(PLAYER_O)
    if x_count != o_count + 1 and x_count + o_count > 0:
        raise ValueError("It is not O's turn on this board")


def choose_move(board: List[str]) -> int:
    """Return the optimal cell index for O.

    The board is handed back unchanged. Among equally good moves the lowest
    index wins because only strictly better scores replace the incumbent.
    """
    _check_searchable(board)

    # Center shortcuts; the full search below covers every other position
    if all(cell == EMPTY for cell in board):
        return CENTER
    if board[CENTER] == EMPTY:
        return CENTER

    best_score = -math.inf
    best_move = -1
    for move in legal_moves(board):
        board[move] = PLAYER_O
        score = minimax(board, 0, False, -math.inf, math.inf)
        board[move] = EMPTY
        if score > best_score:
            best_score, best_move = score, move
    return best_move


@dataclass
class MinimaxAI:
    """Computer opponent bound to one mark.

      - MinimaxAI(player="O")
      - choose(game) -> cell_index
    """

    player: Player = PLAYER_O

    def choose(self, game: TicTacToeGame) -> int:
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")
        if game.is_over:
            raise ValueError("Game already finished")

        started = time.perf_counter()
        move = choose_move(game.board)
        logger.debug(
            "AI %s chose cell %d in %.2f ms",
            self.player,
            move,
            (time.perf_counter() - started) * 1000,
        )
        return move
