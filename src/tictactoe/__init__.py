"""Tic-tac-toe package exposing game rules, the perfect-play AI, and the web application."""

from .ai import MinimaxAI, best_move
from .game import Board, InvalidMove
from .ui import app

__all__ = ["Board", "InvalidMove", "MinimaxAI", "app", "best_move"]
