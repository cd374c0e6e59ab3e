"""Tests for the random and minimax computer players."""

import random

import pytest

from xoplay.ai import (
    ComputerPlayer,
    SearchStats,
    choose_optimal_move,
    choose_random_move,
    minimax,
)
from xoplay.game import (
    EMPTY,
    Difficulty,
    MatchState,
    NoLegalMoves,
    has_won,
    is_full,
    legal_moves,
    other,
    winner_of,
)

_ = EMPTY
FULL_DRAW = ["X", "O", "X", "X", "O", "X", "O", "X", "O"]


def play_out(board, player):
    """Both sides play optimally until the game ends; returns the winner."""
    board = list(board)
    while winner_of(board) is None and not is_full(board):
        board[choose_optimal_move(board, player)] = player
        player = other(player)
    return winner_of(board)


def test_takes_immediate_win():
    board = ["O", "O", _, "X", "X", _, "X", _, _]
    assert choose_optimal_move(board, "O") == 2


def test_blocks_immediate_threat():
    board = ["X", "X", _, _, "O", _, _, _, _]
    assert choose_optimal_move(board, "O") == 2


def test_answers_corner_opening_with_center():
    board = ["X", _, _, _, _, _, _, _, _]
    assert choose_optimal_move(board, "O") == 4


def test_ties_resolve_to_lowest_index():
    assert choose_optimal_move([_] * 9, "O") == 0
    assert choose_optimal_move([_] * 9, "X") == 0


def test_search_leaves_board_untouched():
    board = ["X", _, _, _, "O", _, _, _, "X"]
    snapshot = list(board)
    choose_optimal_move(board, "O")
    assert board == snapshot

    work = list(board)
    minimax(work, "O", float("-inf"), float("inf"))
    assert work == snapshot


def test_terminal_scores():
    assert minimax(["X", "X", "X", "O", "O", _, _, _, _], "O", -100, 100).score == -10
    assert minimax(["O", "O", "O", "X", "X", _, "X", _, _], "X", -100, 100).score == 10
    assert minimax(list(FULL_DRAW), "X", -100, 100).score == 0


def test_search_counts_nodes():
    stats = SearchStats()
    choose_optimal_move(["X", _, _, _, _, _, _, _, _], "O", stats)
    assert stats.nodes > 1


def test_no_legal_moves_on_full_board():
    with pytest.raises(NoLegalMoves):
        choose_optimal_move(FULL_DRAW, "O")
    with pytest.raises(NoLegalMoves):
        choose_random_move(FULL_DRAW)


def test_random_move_covers_every_legal_cell():
    board = ["X", _, "O", _, "X", _, _, "O", _]
    rng = random.Random(7)
    picks = {choose_random_move(board, rng) for _draw in range(200)}
    assert picks == set(legal_moves(board))


def test_x_converts_forced_win():
    # After X in a corner and O on an edge, X can force a win.
    board = ["X", "O", _, _, _, _, _, _, _]
    assert play_out(board, "X") == "X"


def test_optimal_opening_for_o_never_loses():
    board = [_] * 9
    board[choose_optimal_move(board, "O")] = "O"
    assert play_out(board, "X") in (None, "O")


def test_o_never_loses_against_any_x_policy():
    def explore(board):
        for index in legal_moves(board):
            board[index] = "X"
            assert not has_won(board, "X")
            if not is_full(board):
                reply = choose_optimal_move(board, "O")
                board[reply] = "O"
                if not has_won(board, "O"):
                    explore(board)
                board[reply] = EMPTY
            board[index] = EMPTY

    explore([_] * 9)


def test_computer_player_checks_turn():
    state = MatchState()
    with pytest.raises(ValueError):
        ComputerPlayer(player="O").choose(state)


def test_computer_player_difficulties():
    state = MatchState()
    state.apply_move(0)

    unbeatable = ComputerPlayer(player="O", difficulty=Difficulty.UNBEATABLE)
    assert unbeatable.choose(state) == 4

    easy = ComputerPlayer(
        player="O", difficulty=Difficulty.EASY, rng=random.Random(3)
    )
    assert easy.choose(state) in state.legal_moves()
