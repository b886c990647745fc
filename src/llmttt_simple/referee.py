"""
Referee: pure game state and the move transition rule.

- GameState is an immutable value (board + mark to move).
- apply_move() returns the next state, or None when the move is illegal.
- status() derives IN_PROGRESS / WON / DRAW from the board on demand.

Used by GameSession, which owns the current GameState and serializes access.

"""
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .board import MARK_X, MARKS, calculate_winner, is_full, new_board, other_mark


class GameStatus(Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAW = "draw"


@dataclass(frozen=True)
class GameState:
    board: tuple[Optional[str], ...] = new_board()
    next_mark: str = MARK_X


def initial_state() -> GameState:
    return GameState()


def status(state: GameState) -> GameStatus:
    if calculate_winner(state.board).winner:
        return GameStatus.WON
    if is_full(state.board):
        return GameStatus.DRAW
    return GameStatus.IN_PROGRESS


def apply_move(state: GameState, index: int, mark: str) -> Optional[GameState]:
    """Place `mark` at `index` and flip the turn. None if the move is not legal."""
    if mark not in MARKS or mark != state.next_mark:
        return None
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= 8:
        return None
    if state.board[index] is not None:
        return None
    if status(state) is not GameStatus.IN_PROGRESS:
        return None
    board = list(state.board)
    board[index] = mark
    return replace(state, board=tuple(board), next_mark=other_mark(mark))
