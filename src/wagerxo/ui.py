"""FastAPI-powered web UI for playing WagerXO against the computer."""

from __future__ import annotations

import logging
import os
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .game import PLAYERS
from .session import (
    DEFAULT_BALANCE,
    BalanceExhausted,
    InvalidWager,
    Outcome,
    UserCancelled,
    WagerGame,
)

logger = logging.getLogger(__name__)

STARTING_BALANCE = float(os.environ.get("WAGERXO_STARTING_BALANCE", DEFAULT_BALANCE))


@dataclass
class TableSession:
    """Container for one human's wagering table."""

    game: WagerGame
    last_seen: float = field(default_factory=lambda: time.time())
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


TABLES: Dict[str, TableSession] = {}
TABLES_LOCK = threading.Lock()
TABLE_TTL_SECONDS = 60 * 30  # 30 minutes
app = FastAPI(title="WagerXO", description="Tic-tac-toe for money against the CPU")


class NewTableRequest(BaseModel):
    """Request payload for opening a table."""

    model_config = ConfigDict(populate_by_name=True)

    starting_balance: Optional[float] = Field(
        default=None, alias="startingBalance", gt=0
    )


class NewRoundRequest(BaseModel):
    """Request payload for starting a round on an existing table."""

    symbol: str = Field(default="X", description="Symbol the human plays")
    wager: float

    @field_validator("symbol")
    @classmethod
    def ensure_known_symbol(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in PLAYERS:
            raise ValueError(f"Symbol must be one of {', '.join(PLAYERS)}.")
        return value


class MoveRequest(BaseModel):
    """Request payload for a human move."""

    row: int = Field(ge=0, le=2)
    col: int = Field(ge=0, le=2)


def _cleanup_tables() -> None:
    """Drop tables nobody has touched within the TTL. Caller holds TABLES_LOCK."""

    now = time.time()
    expired = [
        table_id
        for table_id, table in list(TABLES.items())
        if now - table.last_seen >= TABLE_TTL_SECONDS
    ]
    for table_id in expired:
        TABLES.pop(table_id, None)
        logger.info("Dropped idle table %s", table_id)


def _create_table(balance: float) -> tuple[str, TableSession]:
    table = TableSession(game=WagerGame(balance=balance))
    table_id = uuid.uuid4().hex
    with TABLES_LOCK:
        _cleanup_tables()
        TABLES[table_id] = table
    logger.info("Opened table %s with balance %g", table_id, balance)
    return table_id, table


def _get_table(table_id: str) -> TableSession:
    with TABLES_LOCK:
        _cleanup_tables()
        table = TABLES.get(table_id)
        if table is None:
            raise HTTPException(status_code=404, detail="Table not found")
        table.last_seen = time.time()
        return table


def _serialize_table(table_id: str, table: TableSession) -> Dict[str, object]:
    game = table.game
    state: Dict[str, object] = {
        "id": table_id,
        "balance": game.get_balance(),
        "bankrupt": game.is_bankrupt,
        "lastOutcome": game.last_outcome.value if game.last_outcome else None,
        "round": None,
    }
    rnd = game.round
    if rnd is not None:
        round_state: Dict[str, object] = {
            "humanSymbol": rnd.human_symbol,
            "computerSymbol": rnd.computer_symbol,
            "humanTurn": rnd.human_turn,
            "humanFirst": rnd.human_first,
            "wager": rnd.wager,
            "cells": [
                [c if c in PLAYERS else "" for c in row] for row in rnd.board.rows()
            ],
            "outcome": rnd.outcome.value,
            "moveLog": list(rnd.move_log),
        }
        if rnd.move_log:
            round_state["lastMove"] = rnd.move_log[-1]
        state["round"] = round_state
    return state


def _run_locked(table_id: str, table: TableSession, action) -> Dict[str, object]:
    with table.lock:
        try:
            action(table.game)
            return _serialize_table(table_id, table)
        except InvalidWager as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except BalanceExhausted as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except UserCancelled as exc:
            raise HTTPException(status_code=410, detail=str(exc)) from exc


@app.post("/api/table")
def create_table(request: Optional[NewTableRequest] = None) -> Dict[str, object]:
    balance = STARTING_BALANCE
    if request is not None and request.starting_balance is not None:
        balance = request.starting_balance
    table_id, table = _create_table(balance)
    return _run_locked(table_id, table, lambda game: None)


@app.get("/api/table/{table_id}")
def get_table(table_id: str) -> Dict[str, object]:
    table = _get_table(table_id)
    return _run_locked(table_id, table, lambda game: None)


@app.post("/api/table/{table_id}/round")
def start_round(table_id: str, request: NewRoundRequest) -> Dict[str, object]:
    table = _get_table(table_id)

    def begin(game: WagerGame) -> None:
        if not game.new_round(request.symbol, request.wager):
            game.request_computer_move()

    return _run_locked(table_id, table, begin)


@app.post("/api/table/{table_id}/move")
def make_move(table_id: str, request: MoveRequest) -> Dict[str, object]:
    table = _get_table(table_id)
    accepted = False

    def play(game: WagerGame) -> None:
        nonlocal accepted
        result = game.submit_human_move(request.row, request.col)
        accepted = result.accepted
        if result.accepted and result.outcome is Outcome.CONTINUE:
            game.request_computer_move()

    state = _run_locked(table_id, table, play)
    state["accepted"] = accepted
    return state


@app.delete("/api/table/{table_id}")
def close_table(table_id: str) -> Dict[str, object]:
    table = _get_table(table_id)
    with table.lock:
        try:
            balance = table.game.cancel()
        except UserCancelled as exc:
            raise HTTPException(status_code=410, detail=str(exc)) from exc
    with TABLES_LOCK:
        TABLES.pop(table_id, None)
    logger.info("Closed table %s", table_id)
    return {"id": table_id, "balance": balance, "closed": True}


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>WagerXO</title>
    <style>
      body {
        font-family: Arial, sans-serif;
        display: flex;
        flex-direction: column;
        align-items: center;
        margin: 2rem;
      }
      #board {
        display: grid;
        grid-template-columns: repeat(3, 110px);
        grid-template-rows: repeat(3, 110px);
        gap: 4px;
      }
      #board button {
        font-size: 60px;
        font-weight: bold;
      }
      #status {
        margin: 1rem 0;
        min-height: 1.5rem;
      }
    </style>
  </head>
  <body>
    <h1>WagerXO</h1>
    <div id=\"balance\"></div>
    <div id=\"status\"></div>
    <div id=\"board\"></div>
    <p><button id=\"reset\">Reset</button></p>
    <script>
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const balanceEl = document.getElementById('balance');
      let tableId = null;
      let state = null;

      async function api(method, path, body) {
        const response = await fetch(path, {
          method,
          headers: { 'Content-Type': 'application/json' },
          body: body ? JSON.stringify(body) : undefined,
        });
        const payload = await response.json();
        return { ok: response.ok, status: response.status, payload };
      }

      function render() {
        boardEl.innerHTML = '';
        balanceEl.textContent = state ? `You have $${state.balance}` : '';
        const round = state && state.round;
        for (let row = 0; row < 3; row++) {
          for (let col = 0; col < 3; col++) {
            const button = document.createElement('button');
            button.textContent = round ? round.cells[row][col] : '';
            button.addEventListener('click', () => handleMove(row, col));
            boardEl.appendChild(button);
          }
        }
      }

      async function quit() {
        if (tableId) {
          await api('DELETE', `/api/table/${tableId}`);
        }
        tableId = null;
        statusEl.textContent = 'Thanks for playing.';
        boardEl.innerHTML = '';
      }

      async function startRound() {
        const choice = prompt('Choose your symbol (X or O):', 'X');
        if (choice === null) return quit();
        const symbol = choice.trim().toUpperCase() === 'O' ? 'O' : 'X';
        while (true) {
          const input = prompt(`You have $${state.balance}\\nEnter wager amount:`);
          if (input === null) return quit();
          const wager = Number(input);
          if (input.trim() !== '' && wager > 0 && wager <= state.balance) {
            const result = await api('POST', `/api/table/${tableId}/round`, { symbol, wager });
            if (result.ok) {
              state = result.payload;
              break;
            }
          }
          alert('Invalid wager.');
        }
        alert(state.round.humanFirst ? 'You go first.' : 'CPU goes first.');
        render();
        await checkRoundOver();
      }

      async function checkRoundOver() {
        const round = state.round;
        const wager = round.wager;
        let message = null;
        if (round.outcome === 'human_wins') message = `You win! You gain $${wager}`;
        if (round.outcome === 'computer_wins') message = `CPU wins! You lose $${wager}`;
        if (round.outcome === 'draw') message = "It's a draw! Your money stays the same.";
        if (message === null) {
          statusEl.textContent = 'Your move.';
          return;
        }
        alert(`${message}\\nYou now have $${state.balance}`);
        if (state.bankrupt) {
          alert("You're out of money! Game over.");
          return quit();
        }
        await startRound();
      }

      async function handleMove(row, col) {
        if (!tableId || !state.round) return;
        const result = await api('POST', `/api/table/${tableId}/move`, { row, col });
        if (!result.ok || !result.payload.accepted) return;
        state = result.payload;
        render();
        await checkRoundOver();
      }

      document.getElementById('reset').addEventListener('click', () => {
        if (tableId) startRound();
      });

      (async () => {
        const result = await api('POST', '/api/table');
        tableId = result.payload.id;
        state = result.payload;
        render();
        await startRound();
      })();
    </script>
  </body>
</html>
"""
