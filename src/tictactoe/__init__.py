"""Unbeatable tic-tac-toe: rules, minimax opponent and the web application."""

from .ai import MinimaxAI, choose_move, minimax
from .game import TicTacToeGame, has_won, is_full, legal_moves
from .ui import app

__all__ = [
    "MinimaxAI",
    "TicTacToeGame",
    "app",
    "choose_move",
    "has_won",
    "is_full",
    "legal_moves",
    "minimax",
]
