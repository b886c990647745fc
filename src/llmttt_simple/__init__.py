"""
LLM Tic-Tac-Toe (Simplified) package.

Components:
- board: winning lines, win/draw detection, board serialization
- heuristic_opponent: win > block > center > corner > edge fallback policy
- suggestion_client/llm_client: remote JSON move advice over an OpenAI-compatible endpoint
- opponent_policy: suggestion first, heuristic fallback, strong-block classification
- referee/game: pure move transition and the per-game session state machine
"""
# Package exports are intentionally minimal; import modules directly as needed.
