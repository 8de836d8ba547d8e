"""Tests for outcome mapping and the scoreboard."""

import pytest

from tictactoe.scores import DRAW, LOSE, WIN, Scoreboard, outcome_for


def test_outcome_from_human_side():
    assert outcome_for("X", False) == WIN
    assert outcome_for("O", False) == LOSE
    assert outcome_for(None, True) == DRAW
    assert outcome_for(None, False) is None


def test_scoreboard_counts_and_resets():
    scores = Scoreboard()
    scores.record(WIN)
    scores.record(DRAW)
    scores.record(DRAW)
    scores.record(LOSE)
    assert scores.as_dict() == {"player": 1, "computer": 1, "ties": 2}

    scores.reset()
    assert scores.as_dict() == {"player": 0, "computer": 0, "ties": 0}


def test_unknown_outcome_rejected():
    with pytest.raises(ValueError):
        Scoreboard().record("forfeit")
