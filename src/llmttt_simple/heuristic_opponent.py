"""
Heuristic opponent: one-ply rule-based move choice.

- Priority: win > block > center > random corner > random edge.
- Used as the fallback whenever remote advice is missing or invalid.
- Forks are not detected; in rare multi-threat positions the choice is not optimal.

"""
from __future__ import annotations
import random
from typing import Callable, Optional, Sequence

from .board import Board, CENTER, CORNERS, EDGES, LINES

Choice = Callable[[Sequence[int]], int]


def completing_cell(board: Board, mark: str) -> Optional[int]:
    """Empty cell that completes a line holding two `mark` cells (first line in order)."""
    for line in LINES:
        cells = [board[i] for i in line]
        if cells.count(mark) == 2 and cells.count(None) == 1:
            return line[cells.index(None)]
    return None


def choose_heuristic_move(board: Board, me: str, opp: str, choice: Choice = random.choice) -> Optional[int]:
    win = completing_cell(board, me)
    if win is not None:
        return win
    block = completing_cell(board, opp)
    if block is not None:
        return block
    if board[CENTER] is None:
        return CENTER
    corners = [i for i in CORNERS if board[i] is None]
    if corners:
        return choice(corners)
    edges = [i for i in EDGES if board[i] is None]
    if edges:
        return choice(edges)
    return None
