"""Core rules for classic 3x3 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Tuple

Player = str  # "X" or "O"

EMPTY = " "
FIRST_PLAYER: Player = "X"
PLAYERS: Tuple[Player, Player] = ("X", "O")

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

Cells = Tuple[str, ...]


class InvalidMove(ValueError):
    """Raised when a mark cannot be placed; the board is left unchanged."""


class GameStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    WON_BY_X = "won_by_x"
    WON_BY_O = "won_by_o"
    DRAWN = "drawn"

    @property
    def terminal(self) -> bool:
        return self is not GameStatus.IN_PROGRESS


class WinResult(NamedTuple):
    player: Player
    line: Tuple[int, int, int]


def opponent(player: Player) -> Player:
    if player == "X":
        return "O"
    if player == "O":
        return "X"
    raise ValueError(f"Unknown player {player!r}")


# ---------- Tuple-level helpers (shared with the search) ----------


def find_winner(cells: Cells) -> Optional[WinResult]:
    for line in WINNING_LINES:
        a, b, c = line
        v = cells[a]
        if v != EMPTY and v == cells[b] == cells[c]:
            return WinResult(v, line)
    return None


def empty_cells(cells: Cells) -> List[int]:
    return [i for i, c in enumerate(cells) if c == EMPTY]


def with_mark(cells: Cells, cell: int, player: Player) -> Cells:
    return cells[:cell] + (player,) + cells[cell + 1 :]


def _normalize(value: Optional[str]) -> str:
    if value is None or value in ("", EMPTY):
        return EMPTY
    if value in PLAYERS:
        return value
    raise ValueError(f"Unknown cell value {value!r}")


# ---------- Board ----------


@dataclass(frozen=True)
class Board:
    """Immutable 3x3 board; ``place`` returns a new board."""

    cells: Cells = (EMPTY,) * 9

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def from_cells(cls, cells: Iterable[Optional[str]]) -> "Board":
        normalized = tuple(_normalize(c) for c in cells)
        if len(normalized) != 9:
            raise ValueError(f"A board has 9 cells, got {len(normalized)}")
        return cls(normalized)

    # ---- queries ----

    def is_occupied(self, cell: int) -> bool:
        if not 0 <= cell < 9:
            raise ValueError(f"Cell index {cell} is outside 0..8")
        return self.cells[cell] != EMPTY

    def winner(self) -> Optional[WinResult]:
        """First completed line in row, column, diagonal order, or None."""
        return find_winner(self.cells)

    def is_full(self) -> bool:
        return EMPTY not in self.cells

    def is_draw(self) -> bool:
        return self.is_full() and self.winner() is None

    def is_terminal(self) -> bool:
        return self.winner() is not None or self.is_full()

    def is_blank(self) -> bool:
        return all(c == EMPTY for c in self.cells)

    def available_moves(self) -> List[int]:
        """Empty cell indices in ascending order."""
        return empty_cells(self.cells)

    @property
    def current_player(self) -> Player:
        x = self.cells.count("X")
        o = self.cells.count("O")
        return FIRST_PLAYER if x == o else opponent(FIRST_PLAYER)

    def status(self) -> GameStatus:
        result = self.winner()
        if result is not None:
            return GameStatus.WON_BY_X if result.player == "X" else GameStatus.WON_BY_O
        if self.is_full():
            return GameStatus.DRAWN
        return GameStatus.IN_PROGRESS

    # ---- moves ----

    def place(self, cell: int, player: Player) -> "Board":
        if player not in PLAYERS:
            raise InvalidMove(f"Unknown player {player!r}")
        if not 0 <= cell < 9:
            raise InvalidMove(f"Cell index {cell} is outside 0..8")
        if self.is_terminal():
            raise InvalidMove("Game already finished")
        if self.cells[cell] != EMPTY:
            raise InvalidMove("Cell already occupied")
        return Board(with_mark(self.cells, cell, player))

    def render(self) -> str:
        rows = [" | ".join(self.cells[i : i + 3]) for i in range(0, 9, 3)]
        return "\n---------\n".join(rows)
