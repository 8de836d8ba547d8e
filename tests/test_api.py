"""Tests for the FastAPI tic-tac-toe interface."""

from __future__ import annotations

import math

from fastapi.testclient import TestClient

from tictactoe import ui
from tictactoe.ai import minimax
from tictactoe.config import Settings
from tictactoe.ui import app


client = TestClient(app)
ui.AI_THINK_DELAY = 0.0


def _new_game() -> str:
    response = client.post("/api/game")
    assert response.status_code == 200
    return response.json()["id"]


def _move(game_id: str, cell_index: int):
    return client.post(f"/api/game/{game_id}/move", json={"cellIndex": cell_index})


def test_create_game_and_first_move():
    response = client.post("/api/game")
    assert response.status_code == 200
    payload = response.json()
    assert payload["currentPlayer"] == "X"
    assert payload["board"] == [""] * 9
    assert payload["moveLog"] == []
    assert payload["scores"] == {"player": 0, "computer": 0, "ties": 0}

    game_id = payload["id"]
    move_response = _move(game_id, 0)
    assert move_response.status_code == 200
    state = move_response.json()
    assert state["board"][0] == "X"
    assert state["moveLog"][0] == {"player": "X", "cellIndex": 0}
    assert state["currentPlayer"] == "O"
    assert state["aiPending"] is True

    follow_up = client.get(f"/api/game/{game_id}")
    assert follow_up.status_code == 200
    final_state = follow_up.json()
    assert final_state["currentPlayer"] == "X"
    assert final_state["aiPending"] is False
    assert final_state["lastMove"] == {"player": "O", "cellIndex": 4}
    assert final_state["board"][4] == "O"


def test_invalid_move_rejected():
    game_id = _new_game()
    assert _move(game_id, 0).status_code == 200

    # Attempting to play the same cell should fail.
    duplicate_move = _move(game_id, 0)
    assert duplicate_move.status_code == 400
    assert duplicate_move.json()["detail"]


def test_rejects_out_of_range_cell():
    game_id = _new_game()
    assert _move(game_id, 9).status_code == 422
    assert _move(game_id, -1).status_code == 422


def test_unknown_game_returns_404():
    assert client.get("/api/game/missing").status_code == 404
    assert _move("missing", 0).status_code == 404


def test_computer_win_updates_scores_once():
    game_id = _new_game()
    for cell in (0, 1, 8):
        assert _move(game_id, cell).status_code == 200

    state = client.get(f"/api/game/{game_id}").json()
    assert state["winner"] == "O"
    assert state["outcome"] == "lose"
    assert state["winningLine"] == [2, 4, 6]
    assert state["availableMoves"] == []
    assert state["scores"] == {"player": 0, "computer": 1, "ties": 0}

    finished = _move(game_id, 3)
    assert finished.status_code == 400

    again = client.get(f"/api/game/{game_id}").json()
    assert again["scores"]["computer"] == 1


def test_restart_keeps_scores_and_reset_clears_them():
    game_id = _new_game()
    for cell in (0, 1, 8):
        _move(game_id, cell)

    restarted = client.post(f"/api/game/{game_id}/restart")
    assert restarted.status_code == 200
    state = restarted.json()
    assert state["board"] == [""] * 9
    assert state["currentPlayer"] == "X"
    assert state["moveLog"] == []
    assert state["outcome"] is None
    assert state["scores"]["computer"] == 1

    cleared = client.post(f"/api/game/{game_id}/scores/reset")
    assert cleared.status_code == 200
    assert cleared.json()["scores"] == {"player": 0, "computer": 0, "ties": 0}


def test_idle_sessions_are_evicted(monkeypatch):
    stale_id = _new_game()
    monkeypatch.setattr(ui, "SESSION_TTL_SECONDS", 0)
    _new_game()
    assert client.get(f"/api/game/{stale_id}").status_code == 404


def test_index_and_health():
    page = client.get("/")
    assert page.status_code == 200
    assert "Tic Tac Toe" in page.text
    assert client.get("/healthz").json() == {"status": "ok"}


def _best_reply_for_x(board):
    """Optimal human move: the one leaving O the lowest minimax score."""
    scores = {}
    for cell, mark in enumerate(board):
        if mark == "":
            board[cell] = "X"
            scores[cell] = minimax(board, 0, True, -math.inf, math.inf)
            board[cell] = ""
    return min(scores, key=scores.get)


def test_perfect_play_ends_in_recorded_draw():
    game_id = _new_game()
    state = client.get(f"/api/game/{game_id}").json()
    while state["outcome"] is None:
        assert _move(game_id, _best_reply_for_x(state["board"])).status_code == 200
        state = client.get(f"/api/game/{game_id}").json()

    assert state["outcome"] == "draw"
    assert state["drawn"] is True
    assert state["winner"] is None
    assert state["scores"] == {"player": 0, "computer": 0, "ties": 1}


def test_actions_rejected_while_ai_is_thinking(monkeypatch):
    game_id = _new_game()
    session = ui.SESSIONS[game_id]
    ui._apply_player_move(game_id, session, 0, background_tasks=None)
    assert client.get(f"/api/game/{game_id}").json()["aiPending"] is True

    busy_move = _move(game_id, 1)
    assert busy_move.status_code == 400
    assert busy_move.json()["detail"] == "AI is completing its move"

    busy_restart = client.post(f"/api/game/{game_id}/restart")
    assert busy_restart.status_code == 400
    assert busy_restart.json()["detail"] == "AI is completing its move"

    # A session waiting on the computer survives idle eviction.
    monkeypatch.setattr(ui, "SESSION_TTL_SECONDS", 0)
    _new_game()
    assert game_id in ui.SESSIONS

    ui._run_ai_turn(game_id)
    state = client.get(f"/api/game/{game_id}").json()
    assert state["aiPending"] is False
    assert state["board"][4] == "O"


def test_failed_ai_turn_is_logged_and_clears_pending(monkeypatch, caplog):
    game_id = _new_game()
    session = ui.SESSIONS[game_id]
    ui._apply_player_move(game_id, session, 0, background_tasks=None)

    def broken_choose(game):
        raise RuntimeError("search exploded")

    monkeypatch.setattr(session.ai, "choose", broken_choose)
    with caplog.at_level("ERROR", logger="tictactoe.ui"):
        ui._run_ai_turn(game_id)

    assert session.ai_pending is False
    assert any("AI turn failed" in record.message for record in caplog.records)


def test_lost_session_actions_return_404_and_page_recovers():
    for path in ("restart", "scores/reset"):
        assert client.post(f"/api/game/gone/{path}").status_code == 404
    page = client.get("/").text
    assert "recoverLostSession" in page
    assert "localStorage.removeItem(SESSION_KEY)" in page


def test_configure_applies_runtime_settings(monkeypatch):
    monkeypatch.setattr(ui, "AI_THINK_DELAY", ui.AI_THINK_DELAY)
    monkeypatch.setattr(ui, "SESSION_TTL_SECONDS", ui.SESSION_TTL_SECONDS)
    ui.configure(Settings(ai_delay=1.5, session_ttl_seconds=42))
    assert ui.AI_THINK_DELAY == 1.5
    assert ui.SESSION_TTL_SECONDS == 42
