"""WagerXO package exposing the board, the computer opponent, and the web application."""

from .ai import GreedyAI
from .game import Board, InvalidMove
from .session import Outcome, WagerGame
from .ui import app

__all__ = ["Board", "GreedyAI", "InvalidMove", "Outcome", "WagerGame", "app"]
