"""Greedy one-ply computer opponent: win, else block, else random."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import random

from .game import Board, Move, Player, other_player

# Shared by every policy that is not handed its own generator.
SHARED_RNG = random.Random()


def find_winning_cell(board: Board, player: Player) -> Optional[Move]:
    """First empty cell (row-major) that completes a line for ``player``."""
    for row, col in board.empty_cells():
        child = board.clone()
        child.place(row, col, player)
        if child.is_winner(player):
            return row, col
    return None


@dataclass
class GreedyAI:
    """Computer player using a fixed priority order.

    The search only looks one move ahead, so a human who sets up two threats
    at once (a fork) will beat it.
    """

    player: Player
    opponent: Optional[Player] = None
    rng: Optional[random.Random] = None

    def __post_init__(self) -> None:
        if self.opponent is None:
            self.opponent = other_player(self.player)
        if self.rng is None:
            self.rng = SHARED_RNG

    def choose(self, board: Board) -> Move:
        moves = board.empty_cells()
        if not moves:
            raise RuntimeError("No valid moves available")

        move = find_winning_cell(board, self.player)
        if move is None:
            move = find_winning_cell(board, self.opponent)
        if move is None:
            move = self.rng.choice(moves)
        return move
