"""
Minimal Flask API that wires the tic-tac-toe engine into a UI.

Endpoints:
- POST /api/games                -> start a human vs AI game (AI opens if it plays X)
- GET  /api/games/<id>           -> current board, status and turn
- POST /api/games/<id>/move      -> submit a human move and receive the AI reply
- POST /api/games/<id>/reset     -> start over on the same game id

Games live in memory only; inactive games are dropped after LLMTTT_GAME_TTL_S seconds.
Move and reset responses carry the narrative events emitted while serving them;
GET returns every event of the current game.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Dict, Optional

from flask import Flask, jsonify, request

from llmttt_simple.board import MARK_O, MARK_X, other_mark, serialize_board
from llmttt_simple.config import SETTINGS
from llmttt_simple.game import GameConfig, GameSession
from llmttt_simple.opponent_policy import Decision, OpponentPolicy
from llmttt_simple.suggestion_client import SuggestionClient

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

app = Flask(__name__)
games_lock = threading.Lock()
GAMES: Dict[str, dict] = {}
GAME_TTL_S = SETTINGS.game_ttl_s


def _cleanup_stale_games(max_age_s: int = GAME_TTL_S):
    now = time.time()
    with games_lock:
        expired = [gid for gid, entry in GAMES.items() if now - entry.get("updated_at", now) > max_age_s]
        for gid in expired:
            GAMES.pop(gid, None)


def make_policy() -> OpponentPolicy:
    """Build the automated opponent; heuristic-only when no API key is configured."""
    suggester = SuggestionClient() if SETTINGS.llm_api_key else None
    return OpponentPolicy(suggester=suggester)


def _get_game(game_id: str) -> Optional[dict]:
    _cleanup_stale_games()
    with games_lock:
        return GAMES.get(game_id)


def _serialize_decision(decision: Optional[Decision]) -> Optional[dict]:
    if decision is None:
        return None
    return {"index": decision.index, "source": decision.source, "strong_block": decision.strong_block}


def _serialize_game(game_id: str, session: GameSession, since: int = 0, ai_move: Optional[Decision] = None) -> dict:
    result = session.win_result
    return {
        "game_id": game_id,
        "board": list(session.board),
        "board_str": serialize_board(session.board),
        "next_mark": session.next_mark,
        "status": session.status.value,
        "winner": result.winner,
        "line": list(result.line),
        "human_mark": session.human_mark,
        "ai_mark": session.ai_mark,
        "awaiting": session.is_awaiting_decision(),
        "generation": session.generation,
        "events": session.events[since:],
        "ai_move": _serialize_decision(ai_move),
    }


def _play_ai_if_due(session: GameSession) -> Optional[Decision]:
    if not session.needs_ai_turn():
        return None
    return session.request_automated_move()


@app.route("/api/games", methods=["POST"])
def create_game():
    """Start a human vs AI session without writing logs to disk."""
    _cleanup_stale_games()
    data = request.get_json(silent=True) or {}
    human_mark = str(data.get("human_mark", other_mark(SETTINGS.ai_mark))).upper()
    if human_mark not in (MARK_X, MARK_O):
        return jsonify({"error": "human_mark must be 'X' or 'O'"}), 400
    session = GameSession(policy=make_policy(), cfg=GameConfig(ai_mark=other_mark(human_mark)))
    game_id = f"ttt_{int(time.time())}_{uuid.uuid4().hex[:6]}"
    entry = {"session": session, "created_at": time.time(), "updated_at": time.time()}
    with games_lock:
        GAMES[game_id] = entry
    ai_move = _play_ai_if_due(session)
    return jsonify(_serialize_game(game_id, session, ai_move=ai_move))


@app.route("/api/games/<game_id>", methods=["GET"])
def get_game(game_id: str):
    entry = _get_game(game_id)
    if not entry:
        return jsonify({"error": "not found"}), 404
    return jsonify(_serialize_game(game_id, entry["session"]))


@app.route("/api/games/<game_id>/move", methods=["POST"])
def game_move(game_id: str):
    entry = _get_game(game_id)
    if not entry:
        return jsonify({"error": "not found"}), 404
    session: GameSession = entry["session"]

    data = request.get_json(silent=True) or {}
    index = data.get("index")
    if index is None:
        return jsonify({"error": "index is required"}), 400
    if isinstance(index, bool) or not isinstance(index, int):
        return jsonify({"error": "index must be an integer 0-8"}), 400

    since = len(session.events)
    if not session.apply_move(index, session.human_mark):
        return jsonify({"error": "invalid_move", **_serialize_game(game_id, session, since=since)}), 400
    entry["updated_at"] = time.time()
    ai_move = _play_ai_if_due(session)
    return jsonify(_serialize_game(game_id, session, since=since, ai_move=ai_move))


@app.route("/api/games/<game_id>/reset", methods=["POST"])
def game_reset(game_id: str):
    entry = _get_game(game_id)
    if not entry:
        return jsonify({"error": "not found"}), 404
    session: GameSession = entry["session"]
    session.reset()
    entry["updated_at"] = time.time()
    ai_move = _play_ai_if_due(session)
    return jsonify(_serialize_game(game_id, session, ai_move=ai_move))


@app.after_request
def add_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = request.headers.get("Origin", "*")
    response.headers["Access-Control-Allow-Credentials"] = "true"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    # Prevent caching so the UI always sees the freshest board
    response.headers["Cache-Control"] = "no-store, max-age=0"
    return response


@app.route("/api/<path:path>", methods=["OPTIONS"])
def cors_preflight(path: str):
    resp = app.make_response(("", 204))
    resp.headers["Access-Control-Allow-Origin"] = request.headers.get("Origin", "*")
    resp.headers["Access-Control-Allow-Credentials"] = "true"
    resp.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
    resp.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return resp


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000, debug=True)
