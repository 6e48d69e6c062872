"""Core rules for the 3x3 WagerXO board."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

Player = str  # "X" or "O"
Move = Tuple[int, int]  # (row, col)

EMPTY = " "
PLAYERS: Tuple[Player, ...] = ("X", "O")
SIZE = 3

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


class InvalidMove(ValueError):
    """Placement on an occupied or out-of-range cell."""


def other_player(player: Player) -> Player:
    return "O" if player == "X" else "X"


@dataclass
class Board:
    # Row-major: (row, col) lives at row * 3 + col. ' ' (space) for empty
    cells: List[str] = field(default_factory=lambda: [EMPTY] * (SIZE * SIZE))

    def place(self, row: int, col: int, player: Player) -> None:
        if player not in PLAYERS:
            raise InvalidMove(f"Unknown symbol {player!r}")
        idx = self._index(row, col)
        if self.cells[idx] != EMPTY:
            raise InvalidMove("Cell already occupied")
        self.cells[idx] = player

    def cell(self, row: int, col: int) -> str:
        return self.cells[self._index(row, col)]

    def _index(self, row: int, col: int) -> int:
        if not (0 <= row < SIZE and 0 <= col < SIZE):
            raise InvalidMove(f"Cell ({row}, {col}) is off the board")
        return row * SIZE + col

    def is_winner(self, player: Player) -> bool:
        return any(
            self.cells[a] == self.cells[b] == self.cells[c] == player
            for a, b, c in WINNING_LINES
        )

    def is_full(self) -> bool:
        return all(c != EMPTY for c in self.cells)

    def empty_cells(self) -> List[Move]:
        """Empty positions in row-major order."""
        return [divmod(i, SIZE) for i, c in enumerate(self.cells) if c == EMPTY]

    def rows(self) -> List[List[str]]:
        return [self.cells[r * SIZE : (r + 1) * SIZE] for r in range(SIZE)]

    def clone(self) -> "Board":
        return Board(cells=self.cells.copy())
