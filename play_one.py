import argparse
import logging

from llmttt_simple.board import MARK_O, MARK_X, other_mark, render_board
from llmttt_simple.config import SETTINGS
from llmttt_simple.game import GameConfig, GameSession
from llmttt_simple.opponent_policy import OpponentPolicy
from llmttt_simple.referee import GameStatus
from llmttt_simple.suggestion_client import SuggestionClient
from llmttt_simple.user_opponent import UserOpponent

NARRATION = {
    "turn-started": "{mark} to move.",
    "strong-block": "Blocked! The opponent shut down your winning line at cell {index}.",
    "won": "You win with {winner} on {line}!",
    "lost": "The opponent wins with {winner} on {line}.",
    "draw": "It's a draw!",
}


def narrate(evt: dict) -> None:
    template = NARRATION.get(evt.get("event", ""))
    if template:
        print(template.format(**evt))


def build_session(human_mark: str, model: str, use_llm: bool, history_out: str | None) -> GameSession:
    suggester = SuggestionClient(model=model) if use_llm else None
    cfg = GameConfig(ai_mark=other_mark(human_mark), game_log=True, history_path=history_out)
    return GameSession(policy=OpponentPolicy(suggester=suggester), cfg=cfg)


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--human-mark", choices=[MARK_X, MARK_O], default=other_mark(SETTINGS.ai_mark), help="Which mark you play (X moves first)")
    ap.add_argument("--model", default=SETTINGS.model, help="Advisor model name")
    ap.add_argument("--no-llm", action="store_true", help="Play against the local heuristic only")
    ap.add_argument("--history-out", default=None, help="Optional path to write the structured history JSON")
    ap.add_argument("--log-level", default="WARNING", help="Python logging level (e.g., INFO, DEBUG)")
    args = ap.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log = logging.getLogger("play_one")

    use_llm = not args.no_llm
    if use_llm and not SETTINGS.llm_api_key:
        log.warning("No API key configured (LLMTTT_LLM_API_KEY / OPENAI_API_KEY); playing heuristic-only.")

    session = build_session(args.human_mark, args.model, use_llm, args.history_out)
    session.add_listener(narrate)
    human = UserOpponent()
    try:
        while session.status is GameStatus.IN_PROGRESS:
            if session.needs_ai_turn():
                decision = session.request_automated_move()
                if decision is not None:
                    print(f"Opponent plays {session.ai_mark} at {decision.index} ({decision.source}).")
                continue
            index = human.choose(session.board, session.human_mark)
            session.apply_move(index, session.human_mark)
    except (KeyboardInterrupt, EOFError):
        print("\nGame abandoned.")
    finally:
        human.close()
    print()
    print(render_board(session.board))
    print(session.metrics())
