"""Round orchestration and the wager bookkeeping around it."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Protocol, Union
import logging
import math
import random

from .ai import GreedyAI, SHARED_RNG
from .game import PLAYERS, Board, InvalidMove, Move, Player, other_player

logger = logging.getLogger(__name__)

DEFAULT_BALANCE = 100.0


class InvalidWager(ValueError):
    """Wager is non-numeric, non-positive, or above the current balance."""


class BalanceExhausted(RuntimeError):
    """No money left to wager; the table is finished."""


class UserCancelled(RuntimeError):
    """The human opted out; nothing more can be played at this table."""


class Outcome(str, Enum):
    CONTINUE = "continue"
    HUMAN_WINS = "human_wins"
    COMPUTER_WINS = "computer_wins"
    DRAW = "draw"


class Policy(Protocol):
    def choose(self, board: Board) -> Move: ...


def parse_wager(raw: Union[str, float, int], balance: float) -> float:
    """Turn user input into a wager, enforcing ``0 < wager <= balance``."""
    if isinstance(raw, bool):
        raise InvalidWager("Wager must be a number")
    try:
        wager = float(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidWager(f"Wager {raw!r} is not a number") from exc
    if not math.isfinite(wager) or wager <= 0:
        raise InvalidWager("Wager must be greater than zero")
    if wager > balance:
        raise InvalidWager(f"Wager {wager:g} exceeds balance {balance:g}")
    return wager


@dataclass
class MoveResult:
    move: Optional[Move]
    outcome: Outcome
    cells: List[List[str]]
    accepted: bool = True


@dataclass
class RoundSession:
    """One round: symbols, whose turn it is, the stake and the board."""

    human_symbol: Player
    computer_symbol: Player
    human_turn: bool
    wager: float
    human_first: bool = False
    board: Board = field(default_factory=Board)
    outcome: Outcome = Outcome.CONTINUE
    move_log: List[Dict[str, int | str]] = field(default_factory=list)

    @property
    def over(self) -> bool:
        return self.outcome is not Outcome.CONTINUE

    def apply(self, row: int, col: int, player: Player) -> Outcome:
        self.board.place(row, col, player)
        self.move_log.append({"player": player, "row": row, "col": col})

        if self.board.is_winner(player):
            self.outcome = (
                Outcome.HUMAN_WINS
                if player == self.human_symbol
                else Outcome.COMPUTER_WINS
            )
        elif self.board.is_full():
            self.outcome = Outcome.DRAW
        else:
            self.human_turn = player != self.human_symbol
        return self.outcome


@dataclass
class WagerGame:
    """Engine facade driven by a presentation layer.

    Holds the money total across rounds and the current ``RoundSession``.
    Move requests that are out of turn or target a taken cell are ignored
    rather than raised, so callers can forward raw clicks.
    """

    balance: float = DEFAULT_BALANCE
    rng: random.Random = field(default=SHARED_RNG, repr=False)
    policy: Optional[Policy] = field(default=None, repr=False)
    round: Optional[RoundSession] = None
    last_outcome: Optional[Outcome] = None
    cancelled: bool = False

    # ---- external interface ----

    def new_round(self, human_symbol: Player, wager: float) -> bool:
        """Start a round and return ``True`` when the human moves first."""
        self._ensure_open()
        if self.is_bankrupt:
            raise BalanceExhausted("Balance is exhausted")
        if human_symbol not in PLAYERS:
            raise ValueError(f"Symbol must be one of {', '.join(PLAYERS)}")
        wager = parse_wager(wager, self.balance)

        if self.round is not None and not self.round.over:
            logger.info(
                "Abandoning unfinished round, wager %g returned", self.round.wager
            )

        human_first = self.rng.random() < 0.5
        self.round = RoundSession(
            human_symbol=human_symbol,
            computer_symbol=other_player(human_symbol),
            human_turn=human_first,
            wager=wager,
            human_first=human_first,
        )
        logger.info(
            "New round: human=%s wager=%g balance=%g first=%s",
            human_symbol,
            wager,
            self.balance,
            "human" if human_first else "computer",
        )
        return human_first

    def submit_human_move(self, row: int, col: int) -> MoveResult:
        self._ensure_open()
        rnd = self.round
        if rnd is None or rnd.over or not rnd.human_turn:
            return self._ignored("not the human's turn")
        try:
            outcome = rnd.apply(row, col, rnd.human_symbol)
        except InvalidMove as exc:
            return self._ignored(str(exc))
        self._settle(outcome)
        return MoveResult(move=(row, col), outcome=outcome, cells=rnd.board.rows())

    def request_computer_move(self) -> MoveResult:
        self._ensure_open()
        rnd = self.round
        if rnd is None or rnd.over or rnd.human_turn:
            return self._ignored("not the computer's turn")
        policy = self.policy or GreedyAI(player=rnd.computer_symbol, rng=self.rng)
        row, col = policy.choose(rnd.board)
        outcome = rnd.apply(row, col, rnd.computer_symbol)
        self._settle(outcome)
        return MoveResult(move=(row, col), outcome=outcome, cells=rnd.board.rows())

    def get_balance(self) -> float:
        self._ensure_open()
        return self.balance

    def cancel(self) -> float:
        """Close the table; returns the balance the human walks away with."""
        self._ensure_open()
        self.cancelled = True
        logger.info("Table closed by the human with balance %g", self.balance)
        return self.balance

    @property
    def is_bankrupt(self) -> bool:
        return self.balance <= 0

    # ---- helpers ----

    def _ensure_open(self) -> None:
        if self.cancelled:
            raise UserCancelled("The table has been closed")

    def _ignored(self, reason: str) -> MoveResult:
        logger.debug("Ignoring move request: %s", reason)
        rnd = self.round
        return MoveResult(
            move=None,
            outcome=rnd.outcome if rnd else Outcome.CONTINUE,
            cells=(rnd.board if rnd else Board()).rows(),
            accepted=False,
        )

    def _settle(self, outcome: Outcome) -> None:
        if outcome is Outcome.CONTINUE:
            return
        wager = self.round.wager
        if outcome is Outcome.HUMAN_WINS:
            self.balance += wager
        elif outcome is Outcome.COMPUTER_WINS:
            self.balance -= wager
        self.last_outcome = outcome
        logger.info("Round over: %s, balance now %g", outcome.value, self.balance)
        if self.is_bankrupt:
            logger.info("Balance exhausted")
