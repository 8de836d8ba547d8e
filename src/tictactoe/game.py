"""Core rules and game state for classic 3x3 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

Player = str  # "X" or "O"
Board = List[str]

EMPTY = ""
PLAYER_X: Player = "X"
PLAYER_O: Player = "O"
BOARD_SIZE = 9
CENTER = 4

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


# ---------- Rules ----------


def new_board() -> Board:
    return [EMPTY] * BOARD_SIZE


def other_player(player: Player) -> Player:
    return PLAYER_O if player == PLAYER_X else PLAYER_X


def validate_board(board: Sequence[str]) -> None:
    """Raise ``ValueError`` unless ``board`` is 9 cells of "X", "O" or ""."""

    if len(board) != BOARD_SIZE:
        raise ValueError(f"Board must have {BOARD_SIZE} cells, got {len(board)}")
    for index, cell in enumerate(board):
        if cell not in (EMPTY, PLAYER_X, PLAYER_O):
            raise ValueError(f"Invalid value {cell!r} in cell {index}")


def has_won(board: Sequence[str], player: Player) -> bool:
    return any(
        board[a] == player and board[b] == player and board[c] == player
        for a, b, c in WINNING_LINES
    )


def winning_line(
    board: Sequence[str], player: Player
) -> Optional[Tuple[int, int, int]]:
    for line in WINNING_LINES:
        a, b, c = line
        if board[a] == player and board[b] == player and board[c] == player:
            return line
    return None


def is_full(board: Sequence[str]) -> bool:
    return all(cell != EMPTY for cell in board)


def legal_moves(board: Sequence[str]) -> List[int]:
    """Empty cell indices in ascending order."""
    return [index for index, cell in enumerate(board) if cell == EMPTY]


# ---------- Game ----------


@dataclass
class TicTacToeGame:
    board: Board = field(default_factory=new_board)
    current_player: Player = PLAYER_X
    winner: Optional[Player] = None
    drawn: bool = False
    winning_line: Optional[Tuple[int, int, int]] = None

    @property
    def is_over(self) -> bool:
        return self.winner is not None or self.drawn

    def available_moves(self) -> List[int]:
        if self.is_over:
            return []
        return legal_moves(self.board)

    def play_move(self, cell: int) -> None:
        """Place the current player's mark, update the result, pass the turn."""
        if self.is_over:
            raise ValueError("Game already finished")
        if not 0 <= cell < BOARD_SIZE:
            raise ValueError(f"Cell index {cell} is out of range")
        if self.board[cell] != EMPTY:
            raise ValueError("Cell already occupied")

        player = self.current_player
        self.board[cell] = player
        self._update_state(player)
        self.current_player = other_player(player)

    def reset(self) -> None:
        self.board = new_board()
        self.current_player = PLAYER_X
        self.winner = None
        self.drawn = False
        self.winning_line = None

    # ---- helpers ----

    def _update_state(self, player: Player) -> None:
        # A full board with a completed line is a win, not a draw
        line = winning_line(self.board, player)
        if line is not None:
            self.winner = player
            self.winning_line = line
            self.drawn = False
            return
        if is_full(self.board):
            self.drawn = True
