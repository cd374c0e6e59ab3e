"""XOPlay package exposing game logic, computer players, and the web application."""

from .ai import ComputerPlayer, choose_optimal_move, choose_random_move
from .game import Difficulty, MatchState, Mode
from .ui import app

__all__ = [
    "ComputerPlayer",
    "Difficulty",
    "MatchState",
    "Mode",
    "app",
    "choose_optimal_move",
    "choose_random_move",
]
