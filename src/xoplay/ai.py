"""Computer opponents: uniform random play and exhaustive alpha-beta minimax."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import logging
import math
import random

from .game import (
    EMPTY,
    Difficulty,
    MatchState,
    NoLegalMoves,
    Player,
    has_won,
    legal_moves,
    other,
)

logger = logging.getLogger(__name__)

# O is always the maximizer, X the minimizer.
MAXIMIZER: Player = "O"
WIN_SCORE = 10


@dataclass
class SearchResult:
    score: float
    index: Optional[int] = None


@dataclass
class SearchStats:
    nodes: int = 0


# ---- policies ----


def choose_random_move(
    board: Sequence[str], rng: Optional[random.Random] = None
) -> int:
    moves = legal_moves(board)
    if not moves:
        raise NoLegalMoves()
    return (rng or random).choice(moves)


def choose_optimal_move(
    board: Sequence[str], player: Player, stats: Optional[SearchStats] = None
) -> int:
    """Best move for ``player`` assuming optimal replies.

    The caller's board is never modified; the search backtracks on its own
    copy.
    """
    work = list(board)
    result = minimax(work, player, -math.inf, math.inf, stats)
    if result.index is None:
        raise NoLegalMoves()
    return result.index


# ---- core search ----


def minimax(
    board: List[str],
    player: Player,
    alpha: float,
    beta: float,
    stats: Optional[SearchStats] = None,
) -> SearchResult:
    """Alpha-beta minimax over ``board`` with ``player`` to move.

    Scores are absolute: +10 for an O line, -10 for an X line, 0 for a full
    board. Depth does not factor in. ``board`` is mutated during the search
    and restored before returning.
    """
    if stats is not None:
        stats.nodes += 1

    if has_won(board, "X"):
        return SearchResult(-WIN_SCORE)
    if has_won(board, "O"):
        return SearchResult(WIN_SCORE)
    empty_cells = legal_moves(board)
    if not empty_cells:
        return SearchResult(0)

    maximizing = player == MAXIMIZER
    scored: List[SearchResult] = []

    for index in empty_cells:
        board[index] = player
        score = minimax(board, other(player), alpha, beta, stats).score
        if maximizing:
            alpha = max(alpha, score)
        else:
            beta = min(beta, score)
        board[index] = EMPTY
        scored.append(SearchResult(score, index))

        if alpha >= beta:
            break

    # First strictly better score wins, so ties resolve to the lowest index
    best = scored[0]
    for candidate in scored[1:]:
        if maximizing and candidate.score > best.score:
            best = candidate
        elif not maximizing and candidate.score < best.score:
            best = candidate
    return best


# ---- player ----


@dataclass
class ComputerPlayer:
    """Computer opponent bound to one mark and one difficulty.

    - ComputerPlayer(player="O", difficulty=Difficulty.UNBEATABLE)
    - choose(state) -> cell index
    """

    player: Player = "O"
    difficulty: Difficulty = Difficulty.UNBEATABLE
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def choose(self, state: MatchState) -> int:
        if state.current_player != self.player:
            raise ValueError("It is not this computer player's turn")

        if self.difficulty == Difficulty.EASY:
            index = choose_random_move(state.board, self.rng)
            logger.debug("Random move for %s: %d", self.player, index)
            return index

        stats = SearchStats()
        index = choose_optimal_move(state.board, self.player, stats)
        logger.debug(
            "Optimal move for %s: %d (%d nodes searched)",
            self.player,
            index,
            stats.nodes,
        )
        return index
