from __future__ import annotations
"""Interactive human player that only allows empty cells."""
from .board import Board, empty_cells, render_board


class UserOpponent:
    name = "Human"

    def choose(self, board: Board, me: str) -> int:
        """Prompt the user for an empty cell index; repeat until valid."""
        while True:
            print()
            print(render_board(board))
            raw = input(f"You play {me}. Enter a cell 0-8: ").strip()
            if not raw:
                continue
            try:
                index = int(raw)
            except ValueError:
                index = None
            if index is not None and index in empty_cells(board):
                return index
            print("That cell is not available. Please pick an empty cell.")

    def close(self):
        return
