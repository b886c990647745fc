from __future__ import annotations
"""Automated opponent: remote suggestion first, local heuristic as fallback."""
import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from .board import Board, LINES
from .heuristic_opponent import Choice, choose_heuristic_move
from .suggestion_client import Suggestion, SuggestionClient


def is_strong_block(board: Board, index: int, opp: str) -> bool:
    """True if `index` is the only empty cell of a line holding two `opp` marks.

    Evaluated on the board before the move. Informational only.
    """
    for line in LINES:
        if index not in line:
            continue
        cells = [board[i] for i in line]
        if cells.count(opp) == 2 and board[index] is None:
            return True
    return False


@dataclass
class Decision:
    index: Optional[int]
    source: Optional[str] = None  # "llm" | "heuristic" | None
    strong_block: bool = False
    meta: dict = field(default_factory=dict)


class OpponentPolicy:
    """Two-tier decision: ask the SuggestionClient, otherwise use the heuristic."""

    def __init__(self, suggester: Optional[SuggestionClient] = None, choice: Choice = random.choice):
        self.log = logging.getLogger("OpponentPolicy")
        self.suggester = suggester
        self.choice = choice

    def label(self) -> str:
        if self.suggester and self.suggester.enabled():
            return f"{self.suggester.model}+heuristic"
        return "heuristic"

    def decide(self, board: Board, me: str, opp: str) -> Decision:
        meta: dict = {}
        index: Optional[int] = None
        source: Optional[str] = None
        if self.suggester is not None:
            result = self.suggester.suggest(board, me, opp)
            meta = dict(result.meta)
            meta["raw"] = result.raw
            if isinstance(result, Suggestion):
                index, source = result.index, "llm"
            else:
                meta["fallback_reason"] = result.reason
                self.log.debug("No usable suggestion (%s); using heuristic", result.reason)
        if index is None:
            index = choose_heuristic_move(board, me, opp, choice=self.choice)
            source = "heuristic" if index is not None else None
        strong = index is not None and is_strong_block(board, index, opp)
        return Decision(index=index, source=source, strong_block=strong, meta=meta)
