"""
Move parsing/validation helpers for LLM replies.

The advisor is asked for a single JSON object {"move": <int>}. A reply is
accepted only when:
- it parses as a JSON object (a surrounding ``` fence is tolerated),
- "move" is an integer (bools and floats are rejected),
- the index is in 0..8 and the cell is currently empty.
"""
from __future__ import annotations

import json
import re
from typing import TypedDict

from .board import Board


class ParsedMove(TypedDict, total=False):
    ok: bool
    index: int
    reason: str


_FENCE_RE = re.compile(r"^```[A-Za-z]*\s*(.*?)\s*```$", re.DOTALL)


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` / ```json fence, on one line or several."""
    text = text.strip()
    m = _FENCE_RE.match(text)
    return m.group(1) if m else text


def parse_suggested_move(raw_text: str, board: Board) -> ParsedMove:
    """Parse and validate a JSON move reply against the board.

    Returns ParsedMove with ok/index or a reason on failure.
    """
    text = _strip_code_fence(raw_text or "")
    if not text:
        return {"ok": False, "reason": "empty_reply"}
    try:
        payload = json.loads(text)
    except ValueError:
        return {"ok": False, "reason": "bad_json"}
    if not isinstance(payload, dict):
        return {"ok": False, "reason": "not_an_object"}
    if "move" not in payload:
        return {"ok": False, "reason": "missing_move"}
    move = payload["move"]
    if isinstance(move, bool) or not isinstance(move, int):
        return {"ok": False, "reason": "move_not_integer"}
    if not 0 <= move <= 8:
        return {"ok": False, "reason": "move_out_of_range"}
    if board[move] is not None:
        return {"ok": False, "reason": "cell_occupied"}
    return {"ok": True, "index": move}


__all__ = ["ParsedMove", "parse_suggested_move"]
