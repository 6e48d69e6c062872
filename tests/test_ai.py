"""Tests for the greedy WagerXO computer opponent."""

import random

import pytest

from wagerxo.ai import SHARED_RNG, GreedyAI, find_winning_cell
from wagerxo.game import Board


def _board(layout: str) -> Board:
    return Board(cells=[" " if c == "." else c for c in layout])


def test_policies_share_one_generator():
    assert GreedyAI(player="O").rng is SHARED_RNG
    assert GreedyAI(player="X").rng is GreedyAI(player="O").rng
    own = random.Random(3)
    assert GreedyAI(player="O", rng=own).rng is own


def test_ai_takes_immediate_win():
    # O: (0,0), (0,1); X: (1,0), (2,2) with no X threat open
    board = _board("OO.X....X")
    ai = GreedyAI(player="O")
    assert ai.choose(board) == (0, 2)


def test_ai_blocks_opponent():
    board = _board("XX..O....")
    ai = GreedyAI(player="O")
    assert ai.choose(board) == (0, 2)


def test_ai_prefers_win_over_block():
    board = _board("XX.OO...X")
    ai = GreedyAI(player="O")
    assert ai.choose(board) == (1, 2)


def test_first_winning_cell_in_row_major_order():
    # O can win at (0,2) via the row and at (2,0) via the column
    board = _board("OO.O.....")
    assert find_winning_cell(board, "O") == (0, 2)
    assert find_winning_cell(board, "X") is None


def test_search_leaves_board_untouched():
    board = _board("XX..O....")
    before = list(board.cells)
    GreedyAI(player="O").choose(board)
    assert board.cells == before


def test_never_selects_occupied_cell():
    rng = random.Random(1234)
    ai = GreedyAI(player="O", rng=rng)
    for _ in range(200):
        board = Board()
        symbols = ["X", "O"]
        for turn in range(rng.randint(0, 8)):
            row, col = rng.choice(board.empty_cells())
            board.place(row, col, symbols[turn % 2])
        move = ai.choose(board)
        assert move in board.empty_cells()


def test_random_fallback_covers_several_cells():
    board = _board("....X....")
    ai = GreedyAI(player="O")
    choices = {ai.choose(board) for _ in range(200)}
    assert len(choices) > 1
    assert choices <= set(board.empty_cells())


def test_fork_beats_one_ply_lookahead():
    # X threatens both (0,2) and (2,0); blocking one leaves the other open
    board = _board("XX.XOO...")
    ai = GreedyAI(player="O")
    move = ai.choose(board)
    assert move == (0, 2)

    board.place(*move, "O")
    board.place(2, 0, "X")
    assert board.is_winner("X")


def test_ai_raises_on_full_board():
    board = _board("XOXXOOOXX")
    with pytest.raises(RuntimeError):
        GreedyAI(player="O").choose(board)
