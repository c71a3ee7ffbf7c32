"""Exhaustive minimax search for perfect tic-tac-toe play."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple, Optional
import logging
import math

from .game import (
    FIRST_PLAYER,
    Board,
    Cells,
    Player,
    empty_cells,
    find_winner,
    opponent,
    with_mark,
)

logger = logging.getLogger(__name__)

CENTER = 4


class MoveOutcome(NamedTuple):
    """Root result: score for the optimized player and the move achieving it."""

    score: int
    cell: Optional[int]


def search(board: Board, player: Player) -> MoveOutcome:
    """Run the full-depth search from ``board`` with ``player`` to move.

    The score is +1 (forced win), 0 (draw) or -1 (forced loss) from
    ``player``'s point of view under perfect play by both sides. ``cell`` is
    None when the board is already decided or has no empty cells.
    """
    return _search(board, player, _Counter())


def best_move(board: Board, player: Player) -> Optional[int]:
    """Cell index of an optimal move for ``player``, or None if none exists.

    Among equally scored moves the lowest index is returned, so the result
    is reproducible for a given board and player.
    """
    return _best_move(board, player, _Counter())


def _search(board: Board, player: Player, counter: _Counter) -> MoveOutcome:
    opponent(player)  # validates the mark
    return _minimax(board.cells, player, player, counter)


def _best_move(board: Board, player: Player, counter: _Counter) -> Optional[int]:
    if board.is_blank() and player == FIRST_PLAYER:
        return CENTER
    return _search(board, player, counter).cell


class _Counter:
    __slots__ = ("nodes",)

    def __init__(self) -> None:
        self.nodes = 0


def _minimax(cells: Cells, maximizer: Player, mover: Player, counter: _Counter) -> MoveOutcome:
    counter.nodes += 1

    # Terminal
    result = find_winner(cells)
    if result is not None:
        return MoveOutcome(1 if result.player == maximizer else -1, None)
    moves = empty_cells(cells)
    if not moves:
        return MoveOutcome(0, None)

    maximizing = mover == maximizer
    value = -math.inf if maximizing else math.inf
    best_cell: Optional[int] = None
    following = opponent(mover)

    for cell in moves:
        child = with_mark(cells, cell, mover)
        score, _ = _minimax(child, maximizer, following, counter)
        # Strict comparison keeps the first (lowest) index on ties
        if (maximizing and score > value) or (not maximizing and score < value):
            value, best_cell = score, cell

    return MoveOutcome(int(value), best_cell)


@dataclass
class MinimaxAI:
    """Computer opponent playing ``player`` with perfect information.

    Used by the web layer:
      - MinimaxAI(player="O")
      - choose(board) -> cell index or None
    """

    player: Player
    nodes_evaluated: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        opponent(self.player)

    def choose(self, board: Board) -> Optional[int]:
        if board.current_player != self.player:
            raise ValueError("It is not this AI player's turn")

        counter = _Counter()
        cell = _best_move(board, self.player, counter)
        self.nodes_evaluated = counter.nodes
        if cell is None:
            logger.warning("No move available for %s on a finished board", self.player)
            return None
        logger.debug(
            "%s plays %s (%d positions evaluated)", self.player, cell, counter.nodes
        )
        return cell
