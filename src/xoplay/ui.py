"""FastAPI-powered web UI for playing Tic-Tac-Toe in the browser."""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from .ai import ComputerPlayer
from .config import get_settings
from .game import EMPTY, Difficulty, GameError, MatchState, Mode, NoLegalMoves

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Container for one browser's match, its settings and computer opponent."""

    state: MatchState
    mode: Mode
    difficulty: Difficulty
    computer: ComputerPlayer
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="XOPlay", description="Tic-tac-toe played in the browser")

AI_THINK_DELAY: Tuple[float, float] = get_settings().ai_delay


class NewGameRequest(BaseModel):
    """Request payload for starting a new session."""

    mode: Mode = Field(default_factory=lambda: get_settings().default_mode)
    difficulty: Difficulty = Field(
        default_factory=lambda: get_settings().default_difficulty
    )


class MoveRequest(BaseModel):
    """Request payload for selecting a cell."""

    index: int = Field(ge=0, le=8, description="Row-major cell index")


class SettingsRequest(BaseModel):
    """Mode and/or difficulty change; either one resets the round."""

    mode: Optional[Mode] = None
    difficulty: Optional[Difficulty] = None


def _create_session(mode: Mode, difficulty: Difficulty) -> Tuple[str, GameSession]:
    """Create a new session and register it for later access."""

    session = GameSession(
        state=MatchState(),
        mode=mode,
        difficulty=difficulty,
        computer=ComputerPlayer(player="O", difficulty=difficulty),
    )
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info(
        "Created session %s (mode=%s, difficulty=%s)",
        session_id,
        mode.value,
        difficulty.value,
    )
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _computer_should_move(session: GameSession) -> bool:
    state = session.state
    return (
        session.mode == Mode.VS_COMPUTER
        and not state.game_over
        and state.current_player == session.computer.player
    )


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))

    with session.lock:
        try:
            if not _computer_should_move(session):
                return
            index = session.computer.choose(session.state)
            session.state.apply_move(index, session.computer.player)
            logger.debug("Session %s: computer played %d", game_id, index)
        except NoLegalMoves:
            logger.exception("Session %s: computer asked to move on a full board", game_id)
        finally:
            session.ai_pending = False


def _status_line(state: MatchState) -> str:
    scores = state.scores
    if state.game_over:
        return f"Game Over! Score: X {scores.x} - O {scores.o}"
    return (
        f"{state.current_player}'s Turn | X: {scores.x} | O: {scores.o} "
        f"| Draws: {scores.draw}"
    )


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        state = session.state
        return {
            "id": game_id,
            "board": [c if c != EMPTY else "" for c in state.board],
            "currentPlayer": state.current_player,
            "mode": session.mode.value,
            "difficulty": session.difficulty.value,
            "gameOver": state.game_over,
            "winner": state.winner_player,
            "drawn": state.game_over and state.winner_player is None,
            "scores": state.scores.as_dict(),
            "moveLog": [
                {"index": move.index, "player": move.player} for move in state.history
            ],
            "legalMoves": [] if state.game_over else state.legal_moves(),
            "canUndo": state.can_undo() and not session.ai_pending,
            "showDifficulty": session.mode == Mode.VS_COMPUTER,
            "message": state.result_message(),
            "status": _status_line(state),
            "aiPending": session.ai_pending,
        }


def _ensure_idle(session: GameSession) -> None:
    if session.ai_pending:
        raise HTTPException(status_code=400, detail="Computer is completing its move")


def _apply_player_move(
    game_id: str,
    session: GameSession,
    index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        _ensure_idle(session)
        if _computer_should_move(session):
            raise HTTPException(status_code=400, detail="It is the computer's turn")

        player = session.state.current_player
        try:
            session.state.apply_move(index)
        except GameError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        logger.debug("Session %s: %s played %d", game_id, player, index)

        should_schedule_ai = _computer_should_move(session)
        if should_schedule_ai:
            session.ai_pending = True

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id)


def _reset_round(game_id: str, session: GameSession, clear_scores: bool) -> None:
    with session.lock:
        _ensure_idle(session)
        session.state.reset(clear_scores=clear_scores)
    logger.info("Session %s: round reset (clear_scores=%s)", game_id, clear_scores)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode, request.difficulty)
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
    _apply_player_move(game_id, session, request.index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/undo")
def undo_move(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        _ensure_idle(session)
        try:
            undone = session.state.undo(session.mode)
        except GameError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.debug("Session %s: undid %d move(s)", game_id, len(undone))
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/new")
def new_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    _reset_round(game_id, session, clear_scores=True)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/play-again")
def play_again(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    _reset_round(game_id, session, clear_scores=False)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/settings")
def change_settings(game_id: str, request: SettingsRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        _ensure_idle(session)
        if request.mode is not None:
            session.mode = request.mode
        if request.difficulty is not None:
            session.difficulty = request.difficulty
            session.computer.difficulty = request.difficulty
        session.state.reset(clear_scores=False)
    logger.info(
        "Session %s: settings now mode=%s, difficulty=%s",
        game_id,
        session.mode.value,
        session.difficulty.value,
    )
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>XOPlay</title>
    <style>
      :root {
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
        color-scheme: light;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        justify-content: center;
        align-items: flex-start;
        padding: 2rem 1rem;
        background: radial-gradient(circle at top, #f2f5ff, #cfd8ff 70%);
        color: #13203a;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: 2rem;
        width: min(440px, 100%);
        text-align: center;
      }
      h1 {
        margin: 0 0 1rem;
        letter-spacing: 0.06em;
      }
      .controls {
        display: flex;
        flex-wrap: wrap;
        gap: 0.75rem;
        justify-content: center;
        margin-bottom: 1rem;
      }
      .status-panel {
        margin: 1rem 0;
        font-weight: 600;
      }
      .board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 8px;
        margin: 0 auto;
        width: min(300px, 100%);
        aspect-ratio: 1;
      }
      .board.thinking {
        pointer-events: none;
        opacity: 0.8;
      }
      .cell {
        display: flex;
        align-items: center;
        justify-content: center;
        border-radius: 12px;
        background: #eef1ff;
        font-size: 2.6rem;
        font-weight: 700;
        cursor: pointer;
      }
      .cell.x {
        color: #2f5bff;
      }
      .cell.o {
        color: #ff5470;
      }
      button {
        font-size: 1rem;
        padding: 0.55rem 0.95rem;
        border-radius: 999px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: white;
        cursor: pointer;
        font-family: inherit;
      }
      button:disabled {
        cursor: default;
        opacity: 0.6;
      }
      .popup {
        position: fixed;
        inset: 0;
        display: flex;
        align-items: center;
        justify-content: center;
        background: rgba(12, 26, 51, 0.45);
      }
      .popup-card {
        background: white;
        border-radius: 16px;
        padding: 1.5rem 2rem;
        display: grid;
        gap: 1rem;
      }
      .hidden {
        display: none !important;
      }
    </style>
  </head>
  <body>
    <main>
      <h1>Tic-Tac-Toe</h1>
      <div class=\"controls\">
        <label><input type=\"radio\" name=\"mode\" value=\"twoPlayers\" checked /> Two players</label>
        <label><input type=\"radio\" name=\"mode\" value=\"vsComputer\" /> Vs computer</label>
      </div>
      <div class=\"controls hidden\" id=\"difficulty-controls\">
        <label><input type=\"radio\" name=\"difficulty\" value=\"easy\" checked /> Easy</label>
        <label><input type=\"radio\" name=\"difficulty\" value=\"unbeatable\" /> Unbeatable</label>
      </div>
      <div class=\"status-panel\">Loading…</div>
      <div class=\"board\"></div>
      <div class=\"controls\" style=\"margin-top: 1.25rem\">
        <button id=\"newGameBtn\">New Game</button>
        <button id=\"undoBtn\" disabled>Undo</button>
      </div>
    </main>
    <div class=\"popup hidden\" id=\"popup\">
      <div class=\"popup-card\">
        <strong id=\"popupMessage\"></strong>
        <button id=\"popupNewGameBtn\">Play Again</button>
      </div>
    </div>
    <script>
      const boardEl = document.querySelector('.board');
      const statusEl = document.querySelector('.status-panel');
      const newGameButton = document.getElementById('newGameBtn');
      const undoButton = document.getElementById('undoBtn');
      const popupEl = document.getElementById('popup');
      const popupMessageEl = document.getElementById('popupMessage');
      const playAgainButton = document.getElementById('popupNewGameBtn');
      const modeInputs = document.querySelectorAll('input[name=\"mode\"]');
      const difficultyInputs = document.querySelectorAll('input[name=\"difficulty\"]');
      const difficultyControls = document.getElementById('difficulty-controls');

      let gameId = null;
      let gameState = null;
      let isRequestPending = false;
      let aiPollHandle = null;

      function selectedValue(inputs) {
        const checked = Array.from(inputs).find((input) => input.checked);
        return checked ? checked.value : null;
      }

      async function call(path, body) {
        if (isRequestPending) return;
        isRequestPending = true;
        try {
          const response = await fetch(path, {
            method: body === undefined ? 'GET' : 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: body === undefined ? undefined : JSON.stringify(body),
          });
          if (!response.ok) {
            // Rejected intents are no-ops
            return;
          }
          setState(await response.json());
        } catch (error) {
          console.error('Request failed', error);
        } finally {
          isRequestPending = false;
        }
      }

      function stopAiPolling() {
        if (aiPollHandle) {
          clearTimeout(aiPollHandle);
          aiPollHandle = null;
        }
      }

      function ensureAiPolling() {
        if (aiPollHandle) return;
        aiPollHandle = setTimeout(async () => {
          aiPollHandle = null;
          await call(`/api/game/${gameId}`);
        }, 200);
      }

      function setState(data) {
        gameId = data.id;
        gameState = data;
        render();
        if (gameState.aiPending) {
          ensureAiPolling();
        } else {
          stopAiPolling();
        }
      }

      function render() {
        boardEl.innerHTML = '';
        gameState.board.forEach((value, index) => {
          const cell = document.createElement('div');
          cell.classList.add('cell');
          if (value) {
            cell.classList.add(value.toLowerCase());
            cell.textContent = value;
          }
          cell.dataset.index = index;
          boardEl.appendChild(cell);
        });
        boardEl.classList.toggle('thinking', gameState.aiPending);
        statusEl.textContent = gameState.status;
        undoButton.disabled = !gameState.canUndo;
        difficultyControls.classList.toggle('hidden', !gameState.showDifficulty);
        if (gameState.gameOver) {
          popupMessageEl.textContent = gameState.message;
          popupEl.classList.remove('hidden');
        } else {
          popupEl.classList.add('hidden');
        }
      }

      boardEl.addEventListener('click', (event) => {
        if (!event.target.classList.contains('cell') || !gameState) return;
        if (gameState.gameOver || gameState.aiPending) return;
        const index = Number.parseInt(event.target.dataset.index, 10);
        call(`/api/game/${gameId}/move`, { index });
      });
      newGameButton.addEventListener('click', () => call(`/api/game/${gameId}/new`, {}));
      playAgainButton.addEventListener('click', () => call(`/api/game/${gameId}/play-again`, {}));
      undoButton.addEventListener('click', () => call(`/api/game/${gameId}/undo`, {}));
      modeInputs.forEach((input) =>
        input.addEventListener('change', (event) =>
          call(`/api/game/${gameId}/settings`, { mode: event.target.value })
        )
      );
      difficultyInputs.forEach((input) =>
        input.addEventListener('change', (event) =>
          call(`/api/game/${gameId}/settings`, { difficulty: event.target.value })
        )
      );

      call('/api/game', {
        mode: selectedValue(modeInputs),
        difficulty: selectedValue(difficultyInputs),
      });
    </script>
  </body>
</html>
"""
