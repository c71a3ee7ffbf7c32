"""FastAPI-powered web UI for playing tic-tac-toe in the browser."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

from .ai import MinimaxAI
from .game import Board, InvalidMove, Player, opponent

logger = logging.getLogger(__name__)

Mode = Literal["pvp", "pvc"]
Mark = Literal["X", "O"]

AI_THINK_DELAY: float = 0.2


@dataclass
class ScoreTally:
    """Rounds won by each mark plus draws for one session."""

    x: int = 0
    o: int = 0
    draws: int = 0

    def record(self, winner: Optional[Player]) -> None:
        if winner == "X":
            self.x += 1
        elif winner == "O":
            self.o += 1
        else:
            self.draws += 1

    def as_dict(self) -> Dict[str, int]:
        return {"X": self.x, "O": self.o, "D": self.draws}


@dataclass
class GameSession:
    """Container for one browser's board, mode and running score."""

    mode: str = "pvc"
    human_mark: Player = "X"
    board: Board = field(default_factory=Board.empty)
    ai: Optional[MinimaxAI] = None
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    scores: ScoreTally = field(default_factory=ScoreTally)
    ai_pending: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def reset(self, mode: str, human_mark: Player) -> None:
        self.mode = mode
        self.human_mark = human_mark
        self.board = Board.empty()
        self.ai = MinimaxAI(player=opponent(human_mark)) if mode == "pvc" else None
        self.move_log = []
        self.ai_pending = False

    def ai_to_move(self) -> bool:
        return (
            self.ai is not None
            and not self.board.is_terminal()
            and self.board.current_player == self.ai.player
        )

    def apply(self, cell: int, player: Player) -> None:
        """Place ``player``'s mark and settle the tally if the round ends."""

        self.board = self.board.place(cell, player)
        self.move_log.append({"player": player, "cellIndex": cell})
        if self.board.is_terminal():
            result = self.board.winner()
            self.scores.record(result.player if result else None)
            logger.info(
                "Round finished: %s", f"{result.player} wins" if result else "draw"
            )


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic-Tac-Toe", description="Tic-tac-toe with a perfect opponent")


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    mode: Mode = Field(default="pvc", description="pvp for two humans, pvc vs computer")
    human_mark: Mark = Field(default="X", alias="humanMark")


class RestartRequest(BaseModel):
    """Request payload for starting another round in an existing session."""

    model_config = ConfigDict(populate_by_name=True)

    mode: Optional[Mode] = None
    human_mark: Optional[Mark] = Field(default=None, alias="humanMark")


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


def _create_session(mode: str, human_mark: Player) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    session = GameSession()
    session.reset(mode, human_mark)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("Created %s session %s (human plays %s)", mode, session_id, human_mark)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        return SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        try:
            if not session.ai_to_move():
                return
            cell = session.ai.choose(session.board)
            if cell is None:
                return
            session.apply(cell, session.ai.player)
        finally:
            session.ai_pending = False


def _schedule_ai_if_needed(
    game_id: str,
    session: GameSession,
    background_tasks: Optional[BackgroundTasks],
) -> None:
    # Caller holds session.lock
    if session.ai_to_move():
        session.ai_pending = True
        if background_tasks is not None:
            background_tasks.add_task(_run_ai_turn, game_id)


def _status_text(board: Board) -> str:
    result = board.winner()
    if result is not None:
        return f"Winner: {result.player}"
    if board.is_draw():
        return "Draw"
    return f"Current turn: {board.current_player}"


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        board = session.board
        result = board.winner()
        state: Dict[str, object] = {
            "id": game_id,
            "mode": session.mode,
            "humanMark": session.human_mark,
            "currentPlayer": board.current_player,
            "cells": [c if c in ("X", "O") else "" for c in board.cells],
            "winner": result.player if result else None,
            "winningLine": list(result.line) if result else None,
            "drawn": board.is_draw(),
            "gameOver": board.is_terminal(),
            "status": _status_text(board),
            "scores": session.scores.as_dict(),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
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
    with session.lock:
        board = session.board
        if board.is_terminal():
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(status_code=400, detail="AI is completing its move")

        player = board.current_player
        if session.mode == "pvc" and player != session.human_mark:
            raise HTTPException(status_code=400, detail="It is the computer's turn")

        try:
            session.apply(cell_index, player)
        except InvalidMove as exc:
            logger.debug("Rejected move %s in %s: %s", cell_index, game_id, exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        _schedule_ai_if_needed(game_id, session, background_tasks)


@app.post("/api/game")
def create_game(
    request: NewGameRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    game_id, session = _create_session(request.mode, request.human_mark)
    with session.lock:
        _schedule_ai_if_needed(game_id, session, background_tasks)
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
def restart_game(
    game_id: str, request: RestartRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        mode = request.mode or session.mode
        human_mark = request.human_mark or session.human_mark
        session.reset(mode, human_mark)
        logger.info("Restarted session %s as %s (human plays %s)", game_id, mode, human_mark)
        _schedule_ai_if_needed(game_id, session, background_tasks)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic-Tac-Toe</title>
    <style>
      body {
        font-family: system-ui, sans-serif;
        background: #0f172a;
        color: #e2e8f0;
        display: flex;
        flex-direction: column;
        align-items: center;
        gap: 1rem;
        padding: 2rem;
      }
      .controls, .scores { display: flex; gap: 1rem; align-items: center; }
      #board {
        display: grid;
        grid-template-columns: repeat(3, 96px);
        grid-template-rows: repeat(3, 96px);
        gap: 6px;
      }
      .cell {
        background: #1e293b;
        border-radius: 10px;
        display: flex;
        align-items: center;
        justify-content: center;
        font-size: 2.75rem;
        font-weight: 700;
        cursor: pointer;
      }
      .cell.disabled { cursor: default; }
      .cell.win { background: #15803d; }
      button, select { font: inherit; padding: 0.3rem 0.7rem; border-radius: 6px; }
    </style>
  </head>
  <body>
    <h1>Tic-Tac-Toe</h1>
    <div class=\"controls\">
      <label>Mode
        <select id=\"modeSelect\">
          <option value=\"pvc\">vs Computer</option>
          <option value=\"pvp\">2 Players</option>
        </select>
      </label>
      <label id=\"markLabel\">Play as
        <select id=\"markSelect\">
          <option value=\"X\">X</option>
          <option value=\"O\">O</option>
        </select>
      </label>
      <button id=\"restartBtn\">Restart</button>
    </div>
    <div id=\"status\"></div>
    <div id=\"board\"></div>
    <div class=\"scores\">
      <span>X: <strong id=\"xScore\">0</strong></span>
      <span>O: <strong id=\"oScore\">0</strong></span>
      <span>Draws: <strong id=\"drawScore\">0</strong></span>
    </div>
    <script>
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const modeSelect = document.getElementById('modeSelect');
      const markSelect = document.getElementById('markSelect');
      let gameId = null;
      let pollTimer = null;

      for (let i = 0; i < 9; i++) {
        const cell = document.createElement('div');
        cell.className = 'cell';
        cell.dataset.index = i;
        cell.addEventListener('click', () => play(i));
        boardEl.appendChild(cell);
      }

      async function call(url, body) {
        const res = await fetch(url, {
          method: body === undefined ? 'GET' : 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: body === undefined ? undefined : JSON.stringify(body),
        });
        const payload = await res.json();
        if (!res.ok) throw new Error(payload.detail || 'Request failed');
        return payload;
      }

      function render(state) {
        const win = new Set(state.winningLine || []);
        [...boardEl.children].forEach((el, i) => {
          el.textContent = state.cells[i];
          el.classList.toggle('disabled', !!state.cells[i] || state.gameOver);
          el.classList.toggle('win', win.has(i));
        });
        statusEl.textContent = state.aiPending ? 'Computer is thinking...' : state.status;
        document.getElementById('xScore').textContent = state.scores.X;
        document.getElementById('oScore').textContent = state.scores.O;
        document.getElementById('drawScore').textContent = state.scores.D;
        document.getElementById('markLabel').style.display =
          state.mode === 'pvc' ? 'inline-flex' : 'none';
        clearTimeout(pollTimer);
        if (state.aiPending) {
          pollTimer = setTimeout(async () => render(await call(`/api/game/${gameId}`)), 150);
        }
      }

      async function play(i) {
        if (!gameId) return;
        try {
          render(await call(`/api/game/${gameId}/move`, { cellIndex: i }));
        } catch (err) {
          statusEl.textContent = err.message;
        }
      }

      async function restart() {
        const body = { mode: modeSelect.value, humanMark: markSelect.value };
        const state = gameId
          ? await call(`/api/game/${gameId}/restart`, body)
          : await call('/api/game', body);
        gameId = state.id;
        render(state);
      }

      modeSelect.addEventListener('change', restart);
      markSelect.addEventListener('change', restart);
      document.getElementById('restartBtn').addEventListener('click', restart);
      restart();
    </script>
  </body>
</html>
"""
