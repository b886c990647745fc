"""
Configuration and environment loading for LLM Tic-Tac-Toe.

- Loads settings.yml (YAML) from repo root if present; falls back to environment variables.
- Exposes SETTINGS with keys used across the project (API key, model, tuning knobs).
- An empty API key is not an error: the opponent simply plays heuristic-only.
"""
from dataclasses import dataclass
import os
from typing import Any, Callable

import yaml
from dotenv import load_dotenv

load_dotenv()


def _repo_root() -> str:
    # this file: src/llmttt_simple/config.py → repo root is two levels up
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _load_yaml(path: str) -> dict:
    if not os.path.isfile(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data if isinstance(data, dict) else {}


_cfg = _load_yaml(os.path.join(_repo_root(), "settings.yml"))


def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
    if name in _cfg:
        val = _cfg[name]
        return cast(val) if cast else val
    env = os.environ.get(name)
    if env is not None:
        return cast(env) if cast else env
    return default


def _mark(val: Any) -> str:
    mark = str(val).strip().upper()
    return mark if mark in ("X", "O") else "O"


@dataclass(frozen=True)
class Settings:
    # Auth / endpoint (OpenAI-compatible wire format)
    llm_api_key: str
    api_base: str
    model: str

    # Tuning knobs
    responses_timeout_s: float
    responses_retries: int

    # Game defaults
    ai_mark: str
    game_ttl_s: int


SETTINGS = Settings(
    llm_api_key=_get("LLMTTT_LLM_API_KEY", _get("OPENAI_API_KEY", "")),
    api_base=_get("LLMTTT_LLM_BASE_URL", ""),
    model=_get("LLMTTT_MODEL", "gpt-4o-mini"),
    responses_timeout_s=float(_get("LLMTTT_RESPONSES_TIMEOUT_S", 20.0, cast=float)),
    responses_retries=int(_get("LLMTTT_RESPONSES_RETRIES", 0, cast=int)),
    ai_mark=_mark(_get("LLMTTT_AI_MARK", "O")),
    game_ttl_s=int(_get("LLMTTT_GAME_TTL_S", 3600, cast=int)),
)
