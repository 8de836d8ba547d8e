"""Win/lose/draw bookkeeping for the human player."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .game import PLAYER_X, Player

Outcome = str  # "win", "lose" or "draw", seen from the human's side

WIN: Outcome = "win"
LOSE: Outcome = "lose"
DRAW: Outcome = "draw"


def outcome_for(
    winner: Optional[Player], drawn: bool, human: Player = PLAYER_X
) -> Optional[Outcome]:
    if winner is not None:
        return WIN if winner == human else LOSE
    if drawn:
        return DRAW
    return None


@dataclass
class Scoreboard:
    player_wins: int = 0
    computer_wins: int = 0
    ties: int = 0

    def record(self, outcome: Outcome) -> None:
        if outcome == WIN:
            self.player_wins += 1
        elif outcome == LOSE:
            self.computer_wins += 1
        elif outcome == DRAW:
            self.ties += 1
        else:
            raise ValueError(f"Unknown outcome {outcome!r}")

    def reset(self) -> None:
        self.player_wins = 0
        self.computer_wins = 0
        self.ties = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "player": self.player_wins,
            "computer": self.computer_wins,
            "ties": self.ties,
        }
