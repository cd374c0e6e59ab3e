"""Core rules, move history and scoring for a single 3x3 Tic-Tac-Toe match."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

Player = str  # "X" or "O"

EMPTY = " "
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


class Mode(str, Enum):
    TWO_PLAYER = "twoPlayers"
    VS_COMPUTER = "vsComputer"


class Difficulty(str, Enum):
    EASY = "easy"
    UNBEATABLE = "unbeatable"


# ---------- Errors ----------


class GameError(ValueError):
    """Base class for rejected intents; all are recoverable no-ops."""


class InvalidCell(GameError):
    def __init__(self, index: int) -> None:
        super().__init__(f"Cell index {index} is outside the board")


class CellOccupied(GameError):
    def __init__(self, index: int) -> None:
        super().__init__(f"Cell {index} is already occupied")


class GameAlreadyOver(GameError):
    def __init__(self) -> None:
        super().__init__("Game already finished")


class NothingToUndo(GameError):
    def __init__(self) -> None:
        super().__init__("There is no move to undo")


class InvalidPlayer(GameError):
    def __init__(self, player: object) -> None:
        super().__init__(f"Unknown player {player!r}")


class NoLegalMoves(GameError):
    def __init__(self) -> None:
        super().__init__("No legal moves available")


# ---------- Board helpers ----------


def other(player: Player) -> Player:
    return "O" if player == "X" else "X"


def empty_board() -> List[str]:
    return [EMPTY] * 9


def has_won(board: Sequence[str], player: Player) -> bool:
    return any(
        board[a] == player and board[b] == player and board[c] == player
        for a, b, c in WINNING_LINES
    )


def winner_of(board: Sequence[str]) -> Optional[Player]:
    for a, b, c in WINNING_LINES:
        v = board[a]
        if v != EMPTY and v == board[b] == board[c]:
            return v
    return None


def is_full(board: Sequence[str]) -> bool:
    return all(c != EMPTY for c in board)


def legal_moves(board: Sequence[str]) -> List[int]:
    """Indices of empty cells in ascending order."""
    return [i for i, c in enumerate(board) if c == EMPTY]


def is_terminal(board: Sequence[str]) -> bool:
    """True if either player has a line or no empty cell is left.

    Works on any board, not only a match's own, so the search can probe
    hypothetical positions.
    """
    return winner_of(board) is not None or is_full(board)


# ---------- Match ----------


@dataclass(frozen=True)
class Move:
    index: int
    player: Player


@dataclass
class Scores:
    x: int = 0
    o: int = 0
    draw: int = 0

    def record_win(self, player: Player) -> None:
        if player == "X":
            self.x += 1
        else:
            self.o += 1

    def as_dict(self) -> Dict[str, int]:
        return {"X": self.x, "O": self.o, "Draw": self.draw}


@dataclass
class MatchState:
    board: List[str] = field(default_factory=empty_board)
    current_player: Player = "X"
    history: List[Move] = field(default_factory=list)
    game_over: bool = False
    scores: Scores = field(default_factory=Scores)
    # Set only when a move completes a line
    winner_player: Optional[Player] = None

    # ---- mutations ----

    def apply_move(self, index: int, player: Optional[Player] = None) -> None:
        """Place ``player`` (default: side to move) at ``index`` and settle the round.

        A move that completes a line on the last empty cell is scored as a
        win, never as a draw. Rejected moves leave the state untouched.
        """
        if self.game_over:
            raise GameAlreadyOver()
        if not 0 <= index < 9:
            raise InvalidCell(index)
        if self.board[index] != EMPTY:
            raise CellOccupied(index)

        mover = player if player is not None else self.current_player
        if mover not in PLAYERS:
            raise InvalidPlayer(mover)
        self.board[index] = mover
        self.history.append(Move(index=index, player=mover))

        if has_won(self.board, mover):
            self.scores.record_win(mover)
            self.winner_player = mover
            self.game_over = True
        elif is_full(self.board):
            self.scores.draw += 1
            self.game_over = True
        else:
            self.current_player = other(mover)

    def undo(self, mode: Mode = Mode.TWO_PLAYER) -> List[Move]:
        """Take back the last move, or the last move pair against the computer.

        Returns the removed moves, most recent first.
        """
        if self.game_over:
            raise GameAlreadyOver()
        if not self.history:
            raise NothingToUndo()

        count = 2 if mode == Mode.VS_COMPUTER and len(self.history) > 1 else 1
        undone: List[Move] = []
        for _ in range(count):
            move = self.history.pop()
            self.board[move.index] = EMPTY
            undone.append(move)

        self.current_player = other(self.history[-1].player) if self.history else "X"
        return undone

    def reset(self, clear_scores: bool = False) -> None:
        self.board = empty_board()
        self.history = []
        self.current_player = "X"
        self.game_over = False
        self.winner_player = None
        if clear_scores:
            self.scores = Scores()

    # ---- queries ----

    def winner(self) -> Optional[Player]:
        return winner_of(self.board)

    def is_draw(self) -> bool:
        return is_full(self.board) and winner_of(self.board) is None

    def legal_moves(self) -> List[int]:
        return legal_moves(self.board)

    def is_terminal(self) -> bool:
        return is_terminal(self.board)

    def can_undo(self) -> bool:
        return bool(self.history) and not self.game_over

    def result_message(self) -> Optional[str]:
        if not self.game_over:
            return None
        if self.winner_player:
            return f"{self.winner_player} Wins!"
        return "It's a Draw!"

    def replay(self) -> List[str]:
        """Rebuild the board from an empty grid by replaying the history."""
        board = empty_board()
        for move in self.history:
            board[move.index] = move.player
        return board
