import json
import os
import tempfile
import threading
import unittest
from unittest.mock import MagicMock

from llmttt_simple.board import parse_board
from llmttt_simple.game import GameConfig, GameSession
from llmttt_simple.opponent_policy import Decision, OpponentPolicy
from llmttt_simple.referee import GameState, GameStatus, apply_move, initial_state, status


def play(session, moves):
    """Apply alternating moves starting from the mark to move."""
    for index in moves:
        assert session.apply_move(index, session.next_mark), index


class RefereeTests(unittest.TestCase):
    def test_apply_move_is_pure(self):
        state = initial_state()
        nxt = apply_move(state, 4, "X")
        self.assertEqual(state.board, (None,) * 9)
        self.assertEqual(nxt.board[4], "X")
        self.assertEqual(nxt.next_mark, "O")

    def test_illegal_moves_return_none(self):
        state = apply_move(initial_state(), 4, "X")
        self.assertIsNone(apply_move(state, 4, "O"))   # occupied
        self.assertIsNone(apply_move(state, 0, "X"))   # out of turn
        self.assertIsNone(apply_move(state, 9, "O"))   # out of range
        self.assertIsNone(apply_move(state, True, "O"))
        self.assertIsNone(apply_move(state, 0, "Z"))

    def test_full_board_without_line_is_draw(self):
        full = GameState(board=parse_board("XOXOXOOXO"), next_mark="X")
        self.assertIs(status(full), GameStatus.DRAW)
        self.assertIsNone(apply_move(full, 0, "X"))

    def test_no_moves_after_win(self):
        won = GameState(board=parse_board("XXXOO----"), next_mark="O")
        self.assertIs(status(won), GameStatus.WON)
        self.assertIsNone(apply_move(won, 5, "O"))


class GameSessionTests(unittest.TestCase):
    def setUp(self):
        self.session = GameSession(cfg=GameConfig(ai_mark="O"))

    def test_first_move_center_flips_turn(self):
        self.assertEqual(self.session.next_mark, "X")
        self.assertTrue(self.session.apply_move(4, "X"))
        self.assertEqual(self.session.next_mark, "O")
        self.assertIsNone(self.session.winner)
        self.assertEqual(self.session.win_result.line, ())
        self.assertIs(self.session.status, GameStatus.IN_PROGRESS)

    def test_occupied_cell_is_rejected_without_mutation(self):
        self.session.apply_move(4, "X")
        before = (self.session.board, self.session.next_mark, len(self.session.records))
        self.assertFalse(self.session.apply_move(4, "O"))
        self.assertEqual((self.session.board, self.session.next_mark, len(self.session.records)), before)

    def test_out_of_turn_is_rejected(self):
        self.assertFalse(self.session.apply_move(0, "O"))
        self.assertEqual(self.session.board, (None,) * 9)

    def test_draw_on_full_board_without_line(self):
        play(self.session, [0, 4, 8, 2, 6, 3, 5, 7, 1])
        self.assertEqual(self.session.board, parse_board("XXOOOXXOX"))
        self.assertIs(self.session.status, GameStatus.DRAW)
        self.assertIsNone(self.session.winner)
        self.assertEqual(self.session.events[-1]["event"], "draw")
        self.assertFalse(self.session.apply_move(0, self.session.next_mark))

    def test_win_transitions_and_freezes(self):
        play(self.session, [0, 3, 1, 4, 2])
        self.assertIs(self.session.status, GameStatus.WON)
        self.assertEqual(self.session.winner, "X")
        self.assertEqual(self.session.win_result.line, (0, 1, 2))
        self.assertEqual(self.session.events[-1]["event"], "won")
        self.assertFalse(self.session.apply_move(5, "O"))
        self.assertIsNone(self.session.request_automated_move())

    def test_win_on_last_cell_is_not_a_draw(self):
        play(self.session, [0, 2, 1, 3, 4, 6, 5, 7, 8])
        self.assertEqual(self.session.board, parse_board("XXOOXXOOX"))
        self.assertIs(self.session.status, GameStatus.WON)
        self.assertEqual(self.session.winner, "X")
        self.assertEqual(self.session.win_result.line, (0, 4, 8))
        tags = [e["event"] for e in self.session.events]
        self.assertEqual(tags[-1], "won")
        self.assertNotIn("draw", tags)

    def test_ai_win_is_reported_as_lost(self):
        session = GameSession(cfg=GameConfig(ai_mark="X"))
        play(session, [0, 3, 1, 4, 2])
        self.assertEqual(session.events[-1]["event"], "lost")

    def test_automated_move_blocks_and_emits_strong_block(self):
        play(self.session, [0, 4, 1])
        decision = self.session.request_automated_move()
        self.assertEqual(decision.index, 2)
        self.assertEqual(decision.source, "heuristic")
        self.assertEqual(self.session.board[2], "O")
        tags = [e["event"] for e in self.session.events]
        self.assertIn("strong-block", tags)
        self.assertEqual(tags[-1], "turn-started")
        self.assertEqual(self.session.records[-1]["actor"], "ai")
        self.assertFalse(self.session.is_awaiting_decision())

    def test_automated_move_rejected_on_human_turn(self):
        self.assertIsNone(self.session.request_automated_move())
        self.assertEqual(self.session.board, (None,) * 9)

    def test_reset_returns_to_initial_state(self):
        play(self.session, [0, 3, 1, 4, 2])
        generation = self.session.generation
        self.session.reset()
        self.assertEqual(self.session.board, (None,) * 9)
        self.assertEqual(self.session.next_mark, "X")
        self.assertIs(self.session.status, GameStatus.IN_PROGRESS)
        self.assertEqual(self.session.generation, generation + 1)
        self.assertEqual(self.session.records, [])

    def test_listener_receives_events(self):
        seen = []
        self.session.add_listener(seen.append)
        self.session.apply_move(4, "X")
        self.assertEqual(seen, [{"event": "turn-started", "generation": 0, "mark": "O"}])

    def test_policy_returning_nothing_leaves_board(self):
        policy = MagicMock(spec=OpponentPolicy)
        policy.decide.return_value = Decision(index=None)
        session = GameSession(policy=policy)
        session.apply_move(4, "X")
        self.assertIsNone(session.request_automated_move())
        self.assertEqual(session.next_mark, "O")
        self.assertFalse(session.is_awaiting_decision())

    def test_policy_exception_clears_flag(self):
        policy = MagicMock(spec=OpponentPolicy)
        policy.decide.side_effect = RuntimeError("boom")
        session = GameSession(policy=policy)
        session.apply_move(4, "X")
        with self.assertLogs("GameSession", level="ERROR"):
            self.assertIsNone(session.request_automated_move())
        self.assertFalse(session.is_awaiting_decision())


class BlockingPolicy(OpponentPolicy):
    """Policy that waits until released, to exercise in-flight behavior."""

    def __init__(self, index):
        super().__init__()
        self.index = index
        self.started = threading.Event()
        self.release = threading.Event()

    def decide(self, board, me, opp):
        self.started.set()
        self.release.wait(5)
        return Decision(index=self.index, source="llm")


class InFlightDecisionTests(unittest.TestCase):
    def _start(self, session):
        results = []
        worker = threading.Thread(target=lambda: results.append(session.request_automated_move()))
        worker.start()
        self.assertTrue(session.policy.started.wait(5))
        return worker, results

    def test_human_move_and_reentrant_request_rejected_while_deciding(self):
        session = GameSession(policy=BlockingPolicy(index=0))
        session.apply_move(4, "X")
        worker, results = self._start(session)
        self.assertTrue(session.is_awaiting_decision())
        self.assertFalse(session.apply_move(1, "O"))
        self.assertIsNone(session.request_automated_move())
        session.policy.release.set()
        worker.join(5)
        self.assertEqual(results[0].index, 0)
        self.assertEqual(session.board[0], "O")
        self.assertFalse(session.is_awaiting_decision())

    def test_result_after_reset_is_discarded(self):
        session = GameSession(policy=BlockingPolicy(index=0))
        session.apply_move(4, "X")
        worker, results = self._start(session)
        session.reset()
        self.assertFalse(session.is_awaiting_decision())
        session.policy.release.set()
        worker.join(5)
        self.assertEqual(results, [None])
        self.assertEqual(session.board, (None,) * 9)
        self.assertEqual(session.next_mark, "X")
        self.assertTrue(session.apply_move(4, "X"))


class HistoryExportTests(unittest.TestCase):
    def test_export_and_dump(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "hist", "history.json")
            session = GameSession(cfg=GameConfig(history_path=path))
            session.apply_move(0, "X")
            session.request_automated_move()
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        self.assertEqual(data["players"], {"human": "X", "ai": "O"})
        self.assertEqual(data["opponent"], "heuristic")
        self.assertEqual([m["actor"] for m in data["moves"]], ["human", "ai"])
        self.assertEqual(data["moves"][1]["index"], 4)
        self.assertEqual(data["moves"][1]["board"], "X---O----")
        self.assertFalse(data["terminated"])
        metrics = session.metrics()
        self.assertEqual(metrics["plies_total"], 2)
        self.assertEqual(metrics["ai_heuristic_moves"], 1)


if __name__ == "__main__":
    unittest.main()
