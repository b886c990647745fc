import unittest
from unittest.mock import patch

import server
from llmttt_simple.opponent_policy import OpponentPolicy


def first(options):
    return options[0]


class HumanGameApiTests(unittest.TestCase):
    def setUp(self):
        server.GAMES.clear()
        self.client = server.app.test_client()
        # Deterministic heuristic-only opponent regardless of local credentials.
        patcher = patch.object(server, "make_policy", lambda: OpponentPolicy(choice=first))
        patcher.start()
        self.addCleanup(patcher.stop)

    def _create(self, **payload):
        payload.setdefault("human_mark", "X")
        rsp = self.client.post("/api/games", json=payload)
        self.assertEqual(rsp.status_code, 200)
        return rsp.get_json()

    def test_create_game_human_first(self):
        data = self._create()
        self.assertEqual(data["board"], [None] * 9)
        self.assertEqual(data["next_mark"], "X")
        self.assertEqual(data["human_mark"], "X")
        self.assertEqual(data["status"], "in_progress")
        self.assertIsNone(data["ai_move"])

    def test_responses_carry_cors_and_no_cache_headers(self):
        rsp = self.client.post("/api/games", json={"human_mark": "X"}, headers={"Origin": "http://localhost:3000"})
        self.assertEqual(rsp.headers["Access-Control-Allow-Origin"], "http://localhost:3000")
        self.assertEqual(rsp.headers["Cache-Control"], "no-store, max-age=0")

    def test_ai_opens_when_human_plays_o(self):
        data = self._create(human_mark="O")
        self.assertEqual(data["ai_move"]["index"], 4)
        self.assertEqual(data["board_str"], "----X----")
        self.assertEqual(data["next_mark"], "O")

    def test_move_gets_ai_reply_and_events(self):
        game_id = self._create()["game_id"]
        rsp = self.client.post(f"/api/games/{game_id}/move", json={"index": 0})
        self.assertEqual(rsp.status_code, 200)
        data = rsp.get_json()
        self.assertEqual(data["board_str"], "X---O----")
        self.assertEqual(data["ai_move"], {"index": 4, "source": "heuristic", "strong_block": False})
        self.assertEqual([e["event"] for e in data["events"]], ["turn-started", "turn-started"])

    def test_invalid_moves_are_400_and_leave_state(self):
        game_id = self._create()["game_id"]
        self.client.post(f"/api/games/{game_id}/move", json={"index": 0})
        for payload in ({"index": 0}, {"index": 9}, {"index": "2"}, {}):
            with self.subTest(payload=payload):
                rsp = self.client.post(f"/api/games/{game_id}/move", json=payload)
                self.assertEqual(rsp.status_code, 400)
        data = self.client.get(f"/api/games/{game_id}").get_json()
        self.assertEqual(data["board_str"], "X---O----")

    def test_reset(self):
        game_id = self._create()["game_id"]
        self.client.post(f"/api/games/{game_id}/move", json={"index": 0})
        data = self.client.post(f"/api/games/{game_id}/reset").get_json()
        self.assertEqual(data["board"], [None] * 9)
        self.assertEqual(data["generation"], 1)
        self.assertEqual(data["next_mark"], "X")

    def test_full_game_ends_with_lost(self):
        game_id = self._create()["game_id"]
        # Human X plays 0, 1, then 8 while the heuristic O takes 4, blocks 2, then wins on 2-4-6.
        for index in (0, 1, 8):
            data = self.client.post(f"/api/games/{game_id}/move", json={"index": index}).get_json()
        self.assertEqual(data["status"], "won")
        self.assertEqual(data["winner"], "O")
        self.assertEqual(data["line"], [2, 4, 6])
        self.assertEqual(data["events"][-1]["event"], "lost")

    def test_unknown_game_is_404(self):
        self.assertEqual(self.client.get("/api/games/nope").status_code, 404)
        self.assertEqual(self.client.post("/api/games/nope/move", json={"index": 0}).status_code, 404)
        self.assertEqual(self.client.post("/api/games/nope/reset").status_code, 404)

    def test_bad_human_mark(self):
        rsp = self.client.post("/api/games", json={"human_mark": "Z"})
        self.assertEqual(rsp.status_code, 400)


if __name__ == "__main__":
    unittest.main()
