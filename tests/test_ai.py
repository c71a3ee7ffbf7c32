"""Tests for the tic-tac-toe minimax AI."""

import pytest

from tictactoe.ai import MinimaxAI, MoveOutcome, best_move, search
from tictactoe.game import Board, opponent


def _play_out(board: Board) -> Board:
    while not board.is_terminal():
        player = board.current_player
        board = board.place(best_move(board, player), player)
    return board


def test_empty_board_opens_in_center():
    assert best_move(Board.empty(), "X") == 4


def test_ai_takes_immediate_win_over_block():
    board = Board.from_cells(["X", "X", "", "O", "O", "", "", "", ""])
    assert best_move(board, "X") == 2
    assert search(board, "X") == MoveOutcome(1, 2)


def test_ai_blocks_row_threat():
    board = Board.from_cells(["X", "X", "", "", "O", "", "", "", ""])
    assert best_move(board, "O") == 2


def test_ai_blocks_when_it_cannot_win():
    board = Board.from_cells(["X", "", "", "", "O", "O", "", "X", ""])
    assert best_move(board, "X") == 3


def test_lost_position_keeps_lowest_index():
    # X threatens both diagonals; every reply loses.
    board = Board.from_cells(["X", "O", "X", "O", "X", "", "", "", ""])
    assert search(board, "O") == MoveOutcome(-1, 5)


def test_corner_opening_answered_in_center():
    board = Board.empty().place(0, "X")
    assert best_move(board, "O") == 4


def test_perfect_play_from_empty_board_draws():
    assert _play_out(Board.empty()).is_draw()


@pytest.mark.parametrize("opening", range(9))
def test_perfect_play_after_any_opening_draws(opening):
    board = Board.empty().place(opening, "X")
    assert _play_out(board).is_draw()


def test_ai_as_first_player_never_loses():
    ai = MinimaxAI(player="X")
    stack = [Board.empty()]
    while stack:
        board = stack.pop()
        if board.is_terminal():
            result = board.winner()
            assert result is None or result.player == "X"
            continue
        if board.current_player == "X":
            stack.append(board.place(ai.choose(board), "X"))
        else:
            for cell in board.available_moves():
                stack.append(board.place(cell, "O"))


def test_best_move_is_deterministic_and_pure():
    board = Board.from_cells(["X", "", "", "", "", "", "", "", "O"])
    snapshot = board.cells
    first = best_move(board, "X")
    assert all(best_move(board, "X") == first for _ in range(3))
    assert board.cells == snapshot


def test_no_move_on_finished_boards():
    full = Board.from_cells(["X", "O", "X", "X", "O", "O", "O", "X", "X"])
    assert best_move(full, "X") is None
    won = Board.from_cells(["X", "X", "X", "O", "O", "", "", "", ""])
    assert best_move(won, "O") is None
    assert search(won, "O") == MoveOutcome(-1, None)


def test_search_rejects_unknown_player():
    with pytest.raises(ValueError):
        search(Board.empty(), "Z")


def test_ai_refuses_to_move_out_of_turn():
    ai = MinimaxAI(player="O")
    with pytest.raises(ValueError):
        ai.choose(Board.empty())


def test_ai_counts_evaluated_positions():
    board = Board.empty().place(4, "X")
    ai = MinimaxAI(player=opponent("X"))
    move = ai.choose(board)
    assert move in board.available_moves()
    assert ai.nodes_evaluated > 1


def test_ai_returns_none_on_finished_board():
    full = Board.from_cells(["X", "O", "X", "X", "O", "O", "O", "X", "X"])
    # Full board counts give O the turn.
    assert MinimaxAI(player="O").choose(full) is None


def test_lower_index_forced_win_beats_immediate_win():
    # Cells 3 and 4 win at once, but 1 also forces a win and comes first.
    board = Board.from_cells(["X", "", "O", "", "", "O", "X", "O", "X"])
    assert search(board, "X") == MoveOutcome(1, 1)
    assert best_move(board, "X") == 1


def test_ai_opening_skips_search():
    ai = MinimaxAI(player="X")
    assert ai.choose(Board.empty()) == 4
    assert ai.nodes_evaluated == 0


def test_ai_choice_matches_best_move():
    boards = [
        Board.empty().place(0, "X"),
        Board.from_cells(["X", "", "O", "", "", "O", "X", "O", "X"]),
        Board.from_cells(["X", "", "", "", "O", "O", "", "X", ""]),
    ]
    for board in boards:
        ai = MinimaxAI(player=board.current_player)
        assert ai.choose(board) == best_move(board, board.current_player)
