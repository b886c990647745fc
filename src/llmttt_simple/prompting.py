"""
Prompt builders and config for LLM move requests using a modular template.

Callers supply system instructions and a template string with placeholders
that are substituted per turn.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

DEFAULT_JSON_SYSTEM = (
    "You are a Tic-Tac-Toe move advisor. Respond with exactly one JSON object of the form "
    '{"move": <integer 0-8>} and nothing else.'
)
DEFAULT_JSON_TEMPLATE = """Board (cells 0-8, row-major, '-' is empty): {BOARD}
You play {ME}. Your opponent plays {OPP}.
Choose a move using this priority:
1. If you can complete three in a row, take that cell.
2. Otherwise, if {OPP} could complete three in a row next turn, block that cell.
3. Otherwise, take the center (4) if it is empty.
4. Otherwise, take an empty corner (0, 2, 6, 8).
5. Otherwise, take an empty edge (1, 3, 5, 7).
Only choose an empty cell. Reply with {"move": <index>}."""


@dataclass
class PromptConfig:
    """Configuration for shaping move prompts using a custom template."""

    system_instructions: str = DEFAULT_JSON_SYSTEM
    template: str = DEFAULT_JSON_TEMPLATE


def render_custom_prompt(template: str, values: Dict[str, str]) -> str:
    """Replace known placeholders in the template. Unknown tokens are left intact."""
    rendered = template or ""
    for key, val in values.items():
        rendered = rendered.replace(f"{{{key}}}", val)
    return rendered
