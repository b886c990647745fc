"""
Board helpers: winning lines, win/draw detection and serialization.

A board is a sequence of 9 cells indexed row-major:

    0 | 1 | 2
    3 | 4 | 5
    6 | 7 | 8

Each cell holds "X", "O" or None (empty).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

MARK_X = "X"
MARK_O = "O"
MARKS = (MARK_X, MARK_O)
EMPTY_CHAR = "-"

Board = Sequence[Optional[str]]

LINES: tuple[tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)
CENTER = 4
CORNERS = (0, 2, 6, 8)
EDGES = (1, 3, 5, 7)


@dataclass(frozen=True)
class WinResult:
    winner: Optional[str] = None
    line: tuple[int, ...] = ()


def calculate_winner(board: Board) -> WinResult:
    """Return the first completed line in LINES order, or an empty result."""
    for a, b, c in LINES:
        if board[a] and board[a] == board[b] == board[c]:
            return WinResult(winner=board[a], line=(a, b, c))
    return WinResult()


def is_full(board: Board) -> bool:
    return all(cell is not None for cell in board)


def empty_cells(board: Board) -> list[int]:
    return [i for i, cell in enumerate(board) if cell is None]


def other_mark(mark: str) -> str:
    return MARK_O if mark == MARK_X else MARK_X


def new_board() -> tuple[Optional[str], ...]:
    return (None,) * 9


def serialize_board(board: Board) -> str:
    """Fixed-length string, one char per cell: 'X', 'O' or '-'."""
    return "".join(cell if cell else EMPTY_CHAR for cell in board)


def parse_board(text: str) -> tuple[Optional[str], ...]:
    """Inverse of serialize_board. Whitespace and '|' separators are ignored."""
    chars = [ch for ch in text.upper() if ch not in " \n\t|"]
    if len(chars) != 9:
        raise ValueError(f"board must have 9 cells, got {len(chars)}")
    cells: list[Optional[str]] = []
    for ch in chars:
        if ch in MARKS:
            cells.append(ch)
        elif ch in (EMPTY_CHAR, ".", "_"):
            cells.append(None)
        else:
            raise ValueError(f"invalid cell character {ch!r}")
    return tuple(cells)


def render_board(board: Board) -> str:
    """Three-line text grid for logs and the terminal game."""
    rows = []
    for r in range(3):
        cells = [board[r * 3 + c] or str(r * 3 + c) for c in range(3)]
        rows.append(" | ".join(cells))
    return "\n---------\n".join(rows)


__all__ = [
    "MARK_X",
    "MARK_O",
    "LINES",
    "WinResult",
    "calculate_winner",
    "is_full",
    "empty_cells",
    "other_mark",
    "new_board",
    "serialize_board",
    "parse_board",
    "render_board",
]
