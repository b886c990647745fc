from __future__ import annotations
"""
Shared helpers for building prompts and processing LLM moves.

These utilities keep the suggestion client and any future LLM-backed
opponents symmetric and provider-agnostic.
"""
import logging
import time

from .board import Board, serialize_board
from .move_validator import parse_suggested_move
from .prompting import PromptConfig, render_custom_prompt


def build_prompt_messages_for_board(board: Board, me: str, opp: str, prompt_cfg: PromptConfig) -> list[dict]:
    """Construct prompt messages for the given board/marks using the configured template."""
    values = {
        "BOARD": serialize_board(board),
        "ME": me,
        "OPP": opp,
    }
    user_content = render_custom_prompt(prompt_cfg.template, values)
    return [
        {"role": "system", "content": prompt_cfg.system_instructions},
        {"role": "user", "content": user_content},
    ]


def process_llm_raw_move(raw: str, board: Board, log: logging.Logger, meta_extra: dict | None = None):
    """Validate an LLM move reply against the current board.

    Returns (ok, index, parse_ms, meta). Nothing is applied here; the caller decides.
    """
    t0 = time.time()
    validator_info = parse_suggested_move(raw, board)
    parse_ms = int((time.time() - t0) * 1000)

    ok = bool(validator_info.get("ok"))
    index = validator_info.get("index") if ok else None
    if not ok:
        log.debug("Suggested move not usable: %s", validator_info.get("reason"))

    meta = {
        "raw": raw,
        "validator": validator_info,
    }
    if meta_extra:
        meta.update(meta_extra)
    return ok, index, parse_ms, meta
