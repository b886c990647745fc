from __future__ import annotations
"""Remote move advice from an LLM, with a two-outcome result (Suggestion | NoSuggestion)."""
import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Union

from openai import OpenAI

from .board import Board
from .config import SETTINGS
from .llm_client import ask_for_move_json, get_client
from .llm_play import build_prompt_messages_for_board, process_llm_raw_move
from .prompting import PromptConfig

log = logging.getLogger("suggestion_client")


@dataclass(frozen=True)
class Suggestion:
    index: int
    raw: str = ""
    meta: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class NoSuggestion:
    reason: str
    raw: str = ""
    meta: dict = field(default_factory=dict, compare=False)


SuggestionResult = Union[Suggestion, NoSuggestion]


@dataclass
class SuggestionClient:
    """Asks the configured model for one move; every failure resolves to NoSuggestion."""

    model: str = SETTINGS.model
    api_key: str = SETTINGS.llm_api_key
    base_url: Optional[str] = None
    prompt_cfg: Optional[PromptConfig] = None
    client: Optional[OpenAI] = None

    def enabled(self) -> bool:
        return bool(self.api_key)

    def suggest(self, board: Board, me: str, opp: str) -> SuggestionResult:
        if not self.enabled():
            return NoSuggestion("missing_api_key")
        cfg = self.prompt_cfg or PromptConfig()
        messages = build_prompt_messages_for_board(board, me, opp, cfg)
        t0 = time.time()
        try:
            if self.client is None:
                self.client = get_client(self.api_key, self.base_url)
            raw = ask_for_move_json(messages, model=self.model, client=self.client)
        except Exception:
            log.exception("Suggestion request failed")
            return NoSuggestion("request_failed")
        latency_ms = int((time.time() - t0) * 1000)
        if not raw:
            return NoSuggestion("empty_reply", meta={"latency_ms": latency_ms})

        meta_extra = {
            "prompt": messages[-1]["content"],
            "system": messages[0]["content"],
            "model": self.model,
            "latency_ms": latency_ms,
        }
        ok, index, _, meta = process_llm_raw_move(raw, board, log=log, meta_extra=meta_extra)
        if not ok:
            reason = meta["validator"].get("reason", "invalid")
            log.info("Discarding suggestion (%s): %r", reason, raw[:140])
            return NoSuggestion(reason, raw=raw, meta=meta)
        return Suggestion(index, raw=raw, meta=meta)
