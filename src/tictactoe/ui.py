"""FastAPI-powered web UI for playing unbeatable tic-tac-toe in the browser."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

from .ai import MinimaxAI
from .config import Settings
from .game import PLAYER_O, PLAYER_X, TicTacToeGame
from .scores import Scoreboard, outcome_for

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Container for an active game, its AI opponent and the running score."""

    game: TicTacToeGame
    ai: MinimaxAI
    scores: Scoreboard = field(default_factory=Scoreboard)
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    result_recorded: bool = False
    last_seen: float = field(default_factory=lambda: time.time())
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
SESSIONS_LOCK = threading.Lock()
app = FastAPI(
    title="Tic Tac Toe", description="Unbeatable tic-tac-toe played in the browser"
)

HUMAN_PLAYER = PLAYER_X
AI_THINK_DELAY: float = Settings.ai_delay
SESSION_TTL_SECONDS: int = Settings.session_ttl_seconds


def configure(settings: Settings) -> None:
    """Apply runtime settings before the app starts serving."""

    global AI_THINK_DELAY, SESSION_TTL_SECONDS
    AI_THINK_DELAY = settings.ai_delay
    SESSION_TTL_SECONDS = settings.session_ttl_seconds


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


def _cleanup_sessions() -> None:
    """Drop sessions nobody has touched for ``SESSION_TTL_SECONDS``."""

    now = time.time()
    with SESSIONS_LOCK:
        expired = [
            game_id
            for game_id, session in list(SESSIONS.items())
            if not session.ai_pending
            and now - session.last_seen >= SESSION_TTL_SECONDS
        ]
        for game_id in expired:
            SESSIONS.pop(game_id, None)
    if expired:
        logger.info("Evicted %d idle session(s)", len(expired))


def _create_session() -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    _cleanup_sessions()
    session = GameSession(game=TicTacToeGame(), ai=MinimaxAI(player=PLAYER_O))
    session_id = uuid.uuid4().hex
    with SESSIONS_LOCK:
        SESSIONS[session_id] = session
    logger.info("Created game session %s", session_id)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        session = SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    session.last_seen = time.time()
    return session


def _record_result(game_id: str, session: GameSession) -> None:
    """Count a finished game exactly once. Caller holds ``session.lock``."""

    if session.result_recorded:
        return
    game = session.game
    outcome = outcome_for(game.winner, game.drawn, human=HUMAN_PLAYER)
    if outcome is None:
        return
    session.scores.record(outcome)
    session.result_recorded = True
    logger.info("Game %s finished: player %s", game_id, outcome)


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        try:
            game = session.game
            if game.is_over:
                return
            if game.current_player != session.ai.player:
                return
            cell_index = session.ai.choose(game)
            game.play_move(cell_index)
            session.move_log.append(
                {"player": session.ai.player, "cellIndex": cell_index}
            )
            _record_result(game_id, session)
        except Exception:
            logger.exception("AI turn failed for game %s", game_id)
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        state: Dict[str, object] = {
            "id": game_id,
            "board": list(game.board),
            "currentPlayer": game.current_player,
            "winner": game.winner,
            "drawn": game.drawn,
            "winningLine": list(game.winning_line) if game.winning_line else None,
            "outcome": outcome_for(game.winner, game.drawn, human=HUMAN_PLAYER),
            "availableMoves": game.available_moves(),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
            "scores": session.scores.as_dict(),
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        game = session.game
        if game.is_over:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        if game.current_player != HUMAN_PLAYER:
            raise HTTPException(status_code=400, detail="It is not your turn")

        try:
            game.play_move(cell_index)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append({"player": HUMAN_PLAYER, "cellIndex": cell_index})
        _record_result(game_id, session)

        should_schedule_ai = (
            not game.is_over and game.current_player == session.ai.player
        )
        if should_schedule_ai:
            session.ai_pending = True

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id)


@app.post("/api/game")
def create_game() -> Dict[str, object]:
    game_id, session = _create_session()
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")
        session.game.reset()
        session.move_log.clear()
        session.result_recorded = False
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/scores/reset")
def reset_scores(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        session.scores.reset()
    return _serialize_session(game_id, session)


@app.get("/healthz")
def healthz() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic Tac Toe</title>
    <style>
      :root {
        color-scheme: dark;
        --bg-top: #0f172a;
        --bg-bottom: #1e293b;
        --panel: rgba(15, 23, 42, 0.85);
        --text: #f1f5f9;
        --muted: rgba(241, 245, 249, 0.7);
        --cell: #1e293b;
        --cell-hover: #334155;
        --border: rgba(148, 163, 184, 0.35);
        --x: #34d399;
        --o: #fb7185;
        --accent: #38bdf8;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      :root.light {
        color-scheme: light;
        --bg-top: #ffffff;
        --bg-bottom: #f8fafc;
        --panel: rgba(255, 255, 255, 0.92);
        --text: #0f172a;
        --muted: rgba(15, 23, 42, 0.65);
        --cell: #f1f5f9;
        --cell-hover: #e2e8f0;
        --border: rgba(71, 85, 105, 0.25);
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        justify-content: center;
        padding: 2rem 1rem 3rem;
        background: linear-gradient(to bottom, var(--bg-top), var(--bg-top) 50%, var(--bg-bottom));
        color: var(--text);
        transition: background 0.3s ease, color 0.3s ease;
      }
      main {
        background: var(--panel);
        border: 1px solid var(--border);
        border-radius: 18px;
        padding: clamp(1.25rem, 4vw, 2rem);
        width: min(440px, 100%);
      }
      header {
        display: flex;
        align-items: center;
        justify-content: space-between;
        margin-bottom: 1rem;
      }
      h1 {
        margin: 0;
        font-size: clamp(1.5rem, 2vw + 1rem, 2rem);
        letter-spacing: 0.04em;
      }
      button {
        font: inherit;
        cursor: pointer;
      }
      .pill {
        padding: 0.45rem 0.9rem;
        border-radius: 999px;
        border: 1px solid var(--border);
        background: transparent;
        color: var(--text);
      }
      .pill:hover {
        background: var(--cell-hover);
      }
      #status {
        text-align: center;
        font-weight: 600;
        min-height: 1.5rem;
        margin-bottom: 1rem;
      }
      #status.ai-turn {
        color: var(--muted);
      }
      #message {
        text-align: center;
        color: var(--o);
        min-height: 1.25rem;
        margin-bottom: 0.5rem;
      }
      .board-grid {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 0.6rem;
        touch-action: manipulation;
      }
      .cell {
        aspect-ratio: 1 / 1;
        border-radius: 14px;
        border: 1px solid var(--border);
        background: var(--cell);
        color: var(--text);
        font-size: clamp(2.2rem, 10vw, 3.4rem);
        font-weight: 700;
      }
      .cell:not(:disabled):hover {
        background: var(--cell-hover);
      }
      .cell:disabled {
        cursor: default;
      }
      .cell.x {
        color: var(--x);
      }
      .cell.o {
        color: var(--o);
      }
      .cell.win {
        border-color: var(--accent);
        box-shadow: 0 0 0 2px var(--accent) inset;
      }
      .board-grid.thinking {
        opacity: 0.85;
      }
      .scores {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 0.5rem;
        margin: 1.25rem 0;
        text-align: center;
      }
      .scores div {
        border: 1px solid var(--border);
        border-radius: 12px;
        padding: 0.5rem;
      }
      .scores span {
        display: block;
        font-size: 0.8rem;
        color: var(--muted);
      }
      .scores strong {
        font-size: 1.4rem;
      }
      .controls {
        display: flex;
        justify-content: center;
        gap: 0.75rem;
      }
      .hidden {
        display: none;
      }
      .sr-only {
        position: absolute;
        width: 1px;
        height: 1px;
        overflow: hidden;
        clip: rect(0 0 0 0);
      }
    </style>
  </head>
  <body>
    <main>
      <header>
        <h1>Tic Tac Toe</h1>
        <button id=\"theme-toggle\" class=\"pill\" type=\"button\" aria-label=\"Toggle theme\">Theme</button>
      </header>
      <div id=\"status\" role=\"status\">Loading…</div>
      <div id=\"message\" aria-live=\"polite\"></div>
      <div id=\"board\" class=\"board-grid\"></div>
      <div class=\"scores\">
        <div><span>You (X)</span><strong id=\"player-score\">0</strong></div>
        <div><span>Ties</span><strong id=\"ties\">0</strong></div>
        <div><span>Computer (O)</span><strong id=\"computer-score\">0</strong></div>
      </div>
      <div class=\"controls\">
        <button id=\"restart-btn\" class=\"pill hidden\" type=\"button\">Play again</button>
        <button id=\"reset-scores\" class=\"pill\" type=\"button\">Reset scores</button>
      </div>
    </main>
    <script>
      const SESSION_KEY = 'ttt:session:v1';
      const THEME_KEY = 'ttt:theme';
      const POLL_INTERVAL_MS = 150;

      const boardContainer = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const messageEl = document.getElementById('message');
      const restartButton = document.getElementById('restart-btn');
      const resetScoresButton = document.getElementById('reset-scores');
      const themeToggle = document.getElementById('theme-toggle');
      const playerScoreEl = document.getElementById('player-score');
      const computerScoreEl = document.getElementById('computer-score');
      const tiesEl = document.getElementById('ties');

      let gameId = null;
      let gameState = null;
      let isRequestPending = false;
      let aiPollHandle = null;

      const cells = Array.from({ length: 9 }, (_, index) => {
        const cell = document.createElement('button');
        cell.type = 'button';
        cell.classList.add('cell');
        cell.setAttribute('aria-label', `Cell ${index + 1}`);
        cell.addEventListener('click', () => sendMove(index));
        boardContainer.appendChild(cell);
        return cell;
      });

      function applySavedTheme() {
        if (localStorage.getItem(THEME_KEY) === 'light') {
          document.documentElement.classList.add('light');
        }
      }

      function toggleTheme() {
        const isLight = document.documentElement.classList.toggle('light');
        localStorage.setItem(THEME_KEY, isLight ? 'light' : 'dark');
      }

      async function request(path, options = {}) {
        const response = await fetch(path, {
          headers: { 'Content-Type': 'application/json' },
          ...options,
        });
        if (!response.ok) {
          const payload = await response.json().catch(() => ({}));
          const error = new Error(payload?.detail || 'Request failed');
          error.status = response.status;
          throw error;
        }
        return response.json();
      }

      async function startSession() {
        const saved = localStorage.getItem(SESSION_KEY);
        if (saved) {
          try {
            setState(await request(`/api/game/${saved}`));
            return;
          } catch (error) {
            if (error.status !== 404) {
              messageEl.textContent = error.message;
              return;
            }
          }
        }
        try {
          setState(await request('/api/game', { method: 'POST' }));
        } catch (error) {
          messageEl.textContent = 'Network error. Please reload.';
        }
      }

      async function recoverLostSession(error) {
        if (error.status !== 404) return false;
        stopAiPolling();
        localStorage.removeItem(SESSION_KEY);
        gameId = null;
        gameState = null;
        await startSession();
        messageEl.textContent = 'Your game expired, so a new one was started.';
        return true;
      }

      async function sendMove(cellIndex) {
        if (!gameState || isRequestPending) return;
        if (gameState.winner || gameState.drawn || gameState.aiPending) return;
        if (gameState.currentPlayer !== 'X' || gameState.board[cellIndex] !== '') return;
        isRequestPending = true;
        messageEl.textContent = '';
        if (navigator.vibrate) navigator.vibrate(10);
        try {
          setState(
            await request(`/api/game/${gameId}/move`, {
              method: 'POST',
              body: JSON.stringify({ cellIndex }),
            })
          );
        } catch (error) {
          if (await recoverLostSession(error)) return;
          messageEl.textContent = error.message || 'Invalid move';
        } finally {
          isRequestPending = false;
        }
      }

      async function postAction(path) {
        if (!gameId || isRequestPending) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          setState(await request(`/api/game/${gameId}/${path}`, { method: 'POST' }));
        } catch (error) {
          if (await recoverLostSession(error)) return;
          messageEl.textContent = error.message;
        } finally {
          isRequestPending = false;
        }
      }

      async function pollAiState() {
        aiPollHandle = null;
        if (!gameId) return;
        try {
          setState(await request(`/api/game/${gameId}`));
        } catch (error) {
          if (await recoverLostSession(error)) return;
          console.error('Polling failed', error);
          ensureAiPolling();
        }
      }

      function ensureAiPolling() {
        if (aiPollHandle === null) {
          aiPollHandle = setTimeout(pollAiState, POLL_INTERVAL_MS);
        }
      }

      function stopAiPolling() {
        if (aiPollHandle !== null) {
          clearTimeout(aiPollHandle);
          aiPollHandle = null;
        }
      }

      function setState(data) {
        gameId = data.id;
        localStorage.setItem(SESSION_KEY, gameId);
        gameState = data;
        renderBoard();
        updateStatus();
        updateScores();
        if (gameState.aiPending && !gameState.winner && !gameState.drawn) {
          ensureAiPolling();
        } else {
          stopAiPolling();
        }
      }

      function renderBoard() {
        const over = Boolean(gameState.winner || gameState.drawn);
        const humanTurn = gameState.currentPlayer === 'X' && !gameState.aiPending;
        const winning = new Set(gameState.winningLine || []);
        cells.forEach((cell, index) => {
          const mark = gameState.board[index];
          cell.textContent = mark;
          cell.classList.toggle('x', mark === 'X');
          cell.classList.toggle('o', mark === 'O');
          cell.classList.toggle('win', winning.has(index));
          cell.disabled = over || !humanTurn || mark !== '';
        });
        boardContainer.classList.toggle('thinking', Boolean(gameState.aiPending));
        restartButton.classList.toggle('hidden', !over);
      }

      function updateStatus() {
        statusEl.classList.remove('ai-turn');
        if (gameState.outcome === 'win') {
          statusEl.textContent = 'You win! 🎉';
        } else if (gameState.outcome === 'lose') {
          statusEl.textContent = 'Computer wins! 🤖';
        } else if (gameState.outcome === 'draw') {
          statusEl.textContent = "It's a draw!";
        } else if (gameState.currentPlayer === 'O' || gameState.aiPending) {
          statusEl.textContent = "Computer's turn (O)";
          statusEl.classList.add('ai-turn');
        } else {
          statusEl.textContent = 'Your turn (X)';
        }
      }

      function updateScores() {
        playerScoreEl.textContent = String(gameState.scores.player);
        computerScoreEl.textContent = String(gameState.scores.computer);
        tiesEl.textContent = String(gameState.scores.ties);
      }

      restartButton.addEventListener('click', () => postAction('restart'));
      resetScoresButton.addEventListener('click', () => postAction('scores/reset'));
      themeToggle.addEventListener('click', toggleTheme);

      applySavedTheme();
      startSession();
    </script>
  </body>
</html>
"""
