from __future__ import annotations
"""
LLM client facade over an OpenAI-compatible chat completions endpoint.

The rest of the code should not care which SDK is in use. This module talks to
the endpoint with `model` + `messages` and returns raw text responses. The
client is built lazily so that a missing key never fails at import time.
"""
from typing import Optional, List, Dict
import logging
import random
import time

from openai import OpenAI

from .config import SETTINGS

log = logging.getLogger("llm_client")

_CLIENT: Optional[OpenAI] = None


def get_client(api_key: Optional[str] = None, base_url: Optional[str] = None) -> OpenAI:
    """Return the shared client for the configured key/endpoint, or a fresh one for any other.

    SDK-level retries are disabled; ask_for_move_json owns the retry count.
    """
    global _CLIENT
    key = api_key or SETTINGS.llm_api_key
    url = base_url or SETTINGS.api_base or None
    if key != SETTINGS.llm_api_key or url != (SETTINGS.api_base or None):
        return OpenAI(api_key=key, base_url=url, max_retries=0)
    if _CLIENT is None:
        _CLIENT = OpenAI(api_key=key, base_url=url, max_retries=0)
    return _CLIENT


# ------------------------- Chat wrappers -------------------------
def ask_for_move_json(messages: List[Dict[str, str]], model: Optional[str] = None, client: Optional[OpenAI] = None) -> str:
    """Send one deterministic JSON-mode chat request and return the reply text ("" on failure)."""
    if not model:
        raise ValueError("Model is required; set LLMTTT_MODEL or pass model explicitly.")
    client = client or get_client()
    delay = 0.5
    timeout = SETTINGS.responses_timeout_s
    for attempt in range(SETTINGS.responses_retries + 1):
        try:
            rsp = client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=0,
                response_format={"type": "json_object"},
                timeout=timeout,
            )
            text = _extract_text(rsp)
            if text:
                return text.strip()
        except Exception:
            if attempt >= SETTINGS.responses_retries:
                log.exception("Chat request failed after %d attempts", attempt + 1)
                break
            sleep_s = delay * (2 ** attempt) * (0.8 + 0.4 * random.random())
            time.sleep(min(sleep_s, 10.0))
    return ""


def _extract_text(rsp) -> str:
    try:
        if hasattr(rsp, "choices") and rsp.choices:
            msg = rsp.choices[0].message
            content = getattr(msg, "content", None)
            if isinstance(content, str):
                return content
            if isinstance(content, list):
                parts = []
                for c in content:
                    if isinstance(c, dict):
                        if c.get("type") == "text" and isinstance(c.get("text"), str):
                            parts.append(c["text"])
                        continue
                    t = getattr(c, "text", None)
                    if isinstance(t, str):
                        parts.append(t)
                if parts:
                    return "\n".join(parts)
    except Exception:
        log.exception("Failed to extract text from response")
    return ""
