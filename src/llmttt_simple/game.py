"""
Single-game session and config.

- GameConfig: which mark the automated opponent plays, and logging knobs.
- GameSession: owns the current GameState for one game between a human and the automated opponent.
  - apply_move() validates and applies a human (or any) move through referee.apply_move.
  - request_automated_move() asks OpponentPolicy for a move without holding the session lock,
    then applies it only if no reset happened in between (generation check).
  - Emits narrative events (turn-started, strong-block, won, lost, draw) to listeners.
  - Records every accepted move and exports a structured history for visualization.

"""
from __future__ import annotations
import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .board import MARK_O, WinResult, calculate_winner, other_mark, serialize_board
from .opponent_policy import Decision, OpponentPolicy
from .referee import GameState, GameStatus, apply_move, initial_state, status

EVENT_TURN_STARTED = "turn-started"
EVENT_STRONG_BLOCK = "strong-block"
EVENT_WON = "won"
EVENT_LOST = "lost"
EVENT_DRAW = "draw"

EventListener = Callable[[dict], None]


@dataclass
class GameConfig:
    ai_mark: str = MARK_O
    # Console logging of moves as they happen
    game_log: bool = False
    # Optional path to dump the structured history JSON after every move
    history_path: str | None = None


class GameSession:
    def __init__(self, policy: OpponentPolicy | None = None, cfg: GameConfig | None = None):
        self.log = logging.getLogger("GameSession")
        self.cfg = cfg or GameConfig()
        self.policy = policy or OpponentPolicy()
        self.ai_mark = self.cfg.ai_mark
        self.human_mark = other_mark(self.ai_mark)
        self._lock = threading.Lock()
        self._listeners: list[EventListener] = []
        self._state: GameState = initial_state()
        self._awaiting = False
        self._generation = 0
        self.records: list[dict] = []  # one dict per accepted move
        self.events: list[dict] = []
        self.start_ts = time.time()

    # ---------------- Read-only views -----------------
    @property
    def state(self) -> GameState:
        return self._state

    @property
    def board(self) -> tuple:
        return self._state.board

    @property
    def next_mark(self) -> str:
        return self._state.next_mark

    @property
    def status(self) -> GameStatus:
        return status(self._state)

    @property
    def win_result(self) -> WinResult:
        return calculate_winner(self._state.board)

    @property
    def winner(self) -> Optional[str]:
        return self.win_result.winner

    @property
    def generation(self) -> int:
        return self._generation

    def is_awaiting_decision(self) -> bool:
        return self._awaiting

    def needs_ai_turn(self) -> bool:
        return self.status is GameStatus.IN_PROGRESS and self.next_mark == self.ai_mark

    # ---------------- Events -----------------
    def add_listener(self, listener: EventListener) -> None:
        # Listeners run under the session lock and must not call back into the session.
        self._listeners.append(listener)

    def _emit(self, tag: str, **data) -> None:
        evt = {"event": tag, "generation": self._generation, **data}
        self.events.append(evt)
        for listener in list(self._listeners):
            try:
                listener(evt)
            except Exception:
                self.log.exception("Event listener failed for %s", tag)

    # ---------------- Transitions -----------------
    def apply_move(self, index: int, mark: str) -> bool:
        """Apply a move for `mark`. Returns False (and changes nothing) when the move is rejected."""
        with self._lock:
            if self._awaiting:
                self.log.debug("Rejecting move %s by %s: automated decision pending", index, mark)
                return False
            return self._apply_locked(index, mark, actor="human" if mark == self.human_mark else "ai")

    def request_automated_move(self) -> Decision | None:
        """Let the automated opponent move. Returns the applied Decision, or None if nothing was applied."""
        with self._lock:
            if self._awaiting or not self.needs_ai_turn():
                return None
            self._awaiting = True
            generation = self._generation
            board = self._state.board
        try:
            decision = self.policy.decide(board, self.ai_mark, self.human_mark)
        except Exception:
            self.log.exception("Opponent policy failed")
            decision = Decision(index=None)
        with self._lock:
            if generation != self._generation:
                self.log.info("Discarding automated move from generation %d (now %d)", generation, self._generation)
                return None
            self._awaiting = False
            if decision.index is None:
                self.log.warning("Opponent policy returned no move on board %s", serialize_board(board))
                return None
            applied = self._apply_locked(decision.index, self.ai_mark, actor="ai", decision=decision)
        return decision if applied else None

    def reset(self) -> None:
        with self._lock:
            self._state = initial_state()
            self._awaiting = False
            self._generation += 1
            self.records = []
            self.events = []
            self.start_ts = time.time()
            self.log.debug("Session reset (generation %d)", self._generation)
            self._emit(EVENT_TURN_STARTED, mark=self._state.next_mark)

    # ---------------- Internals -----------------
    def _apply_locked(self, index: int, mark: str, actor: str, decision: Decision | None = None) -> bool:
        nxt = apply_move(self._state, index, mark)
        if nxt is None:
            self.log.debug("Rejected move %r by %s on board %s", index, mark, serialize_board(self._state.board))
            return False
        self._state = nxt
        rec = {
            "actor": actor,
            "mark": mark,
            "index": index,
            "source": decision.source if decision else "human",
            "strong_block": bool(decision and decision.strong_block),
            "board": serialize_board(nxt.board),
            "meta": decision.meta if decision else {},
        }
        self.records.append(rec)
        if self.cfg.game_log:
            self.log.info("[ply %d] %s %s -> %d (%s)", len(self.records), actor, mark, index, rec["source"])
        else:
            self.log.debug("Ply %d %s %s -> %d", len(self.records), actor, mark, index)

        if decision and decision.strong_block:
            self._emit(EVENT_STRONG_BLOCK, index=index, mark=mark)
        result = calculate_winner(nxt.board)
        if result.winner:
            tag = EVENT_WON if result.winner == self.human_mark else EVENT_LOST
            self._emit(tag, winner=result.winner, line=list(result.line))
        elif status(nxt) is GameStatus.DRAW:
            self._emit(EVENT_DRAW)
        else:
            self._emit(EVENT_TURN_STARTED, mark=nxt.next_mark)
        if self.cfg.history_path:
            self.dump_structured_history_json(self.cfg.history_path)
        return True

    # --------------- Structured history export ---------------
    def export_structured_history(self) -> dict:
        """Return a structured representation of the game suitable for visualization."""
        result = self.win_result
        game_status = self.status
        return {
            "players": {"human": self.human_mark, "ai": self.ai_mark},
            "opponent": self.policy.label(),
            "status": game_status.value,
            "winner": result.winner,
            "line": list(result.line),
            "terminated": game_status is not GameStatus.IN_PROGRESS,
            "generation": self._generation,
            "moves": [
                {
                    "ply": i + 1,
                    "actor": rec["actor"],
                    "mark": rec["mark"],
                    "index": rec["index"],
                    "source": rec["source"],
                    "strong_block": rec["strong_block"],
                    "board": rec["board"],
                    "raw": rec["meta"].get("raw"),
                }
                for i, rec in enumerate(self.records)
            ],
        }

    def dump_structured_history_json(self, path: str) -> None:
        try:
            dir_path = os.path.dirname(path)
            if dir_path:
                os.makedirs(dir_path, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.export_structured_history(), f, ensure_ascii=False, indent=2)
            self.log.debug("Wrote structured history to %s", path)
        except OSError:
            self.log.exception("Failed writing structured history")

    # ---------------- Metrics -----------------
    def metrics(self) -> dict:
        ai_moves = [r for r in self.records if r["actor"] == "ai"]
        llm_moves = [r for r in ai_moves if r["source"] == "llm"]
        return {
            "plies_total": len(self.records),
            "plies_ai": len(ai_moves),
            "ai_llm_moves": len(llm_moves),
            "ai_heuristic_moves": len(ai_moves) - len(llm_moves),
            "ai_strong_blocks": sum(1 for r in ai_moves if r["strong_block"]),
            "status": self.status.value,
            "winner": self.winner,
            "duration_s": round(time.time() - self.start_ts, 2),
        }
