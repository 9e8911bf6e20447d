import os
import tempfile
import unittest
from unittest import mock

from fastapi.testclient import TestClient

import database
from main import app

from factories import march_weeks, match, week_dict

PLAYERS = [
    {"id": "a1", "name": "A1", "position": "ATK"},
    {"id": "a2", "name": "A2", "position": "ATK"},
    {"id": "m1", "name": "M1", "position": "MEI"},
    {"id": "d1", "name": "D1", "position": "DEF"},
    {"id": "d2", "name": "D2", "position": "DEF"},
    {"id": "g1", "name": "G1", "position": "GOL"},
]

MARCH = [
    week_dict(
        "w1", "2024-03-02",
        {"t1": ["a1", "m1", "d1"], "t2": ["a2", "d2", "g1"]},
        [match("m1", "t1", "t2", (2, 0), goals={"a1": 2}, assists={"m1": 1})],
        champion="t1",
    ),
    week_dict(
        "w2", "2024-03-09",
        {"t3": ["a1", "d2", "g1"], "t4": ["a2", "m1", "d1"]},
        [match("m2", "t3", "t4", (1, 1), goals={"a1": 1, "a2": 1}, assists={"d2": 1})],
    ),
]


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        patcher = mock.patch.object(database, "DB_PATH", os.path.join(self.tmp.name, "api.db"))
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self.tmp.cleanup)
        database.init_db()
        self.client = TestClient(app)

    def load_march(self):
        self.assertEqual(self.client.post("/api/players", json=PLAYERS).json(), {"imported": 6})
        for w in MARCH:
            response = self.client.post("/api/weeks", json=w)
            self.assertEqual(response.status_code, 200)


class TestIngest(ApiTestCase):
    def test_bad_position_is_rejected(self):
        response = self.client.post("/api/players", json=[{"id": "x", "name": "X", "position": "CAM"}])
        self.assertEqual(response.status_code, 400)

    def test_negative_score_is_rejected(self):
        bad = week_dict("w1", "2024-03-02", {"t1": ["a1"], "t2": ["a2"]},
                        [match("m1", "t1", "t2", (-1, 0))])
        self.assertEqual(self.client.post("/api/weeks", json=bad).status_code, 422)

    def test_week_round_trips_into_storage(self):
        self.load_march()
        with database.db_session() as conn:
            weeks = database.load_weeks(conn)
        self.assertEqual([w.id for w in weeks], [w.id for w in march_weeks()])


class TestStatsEndpoints(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.load_march()

    def test_month_resume(self):
        data = self.client.get("/api/stats/month-resume/2024/3").json()
        self.assertEqual(data["scorer"], [{"name": "A1", "count": 3}, {"name": "A2", "count": 1}])
        self.assertEqual(data["bestDefender"][0], {"name": "D1", "count": 0.5})

    def test_month_resume_other_month_is_empty(self):
        data = self.client.get("/api/stats/month-resume/2024/4").json()
        self.assertEqual(data["topPointer"], [])

    def test_month_resume_with_exclusions(self):
        data = self.client.get("/api/stats/month-resume/2024", params={"excludePlayerIds": "a1,a2"}).json()
        self.assertEqual(data["scorer"], [])

    def test_best_of_positions(self):
        data = self.client.get("/api/stats/best-of-positions/2024/3").json()
        self.assertEqual(data["defenders"][0]["name"], "D1")
        self.assertEqual(len(data["goalkeepers"]), 1)

    def test_rankings(self):
        data = self.client.get("/api/stats/rankings/2024/3", params={"field": "goals"}).json()
        self.assertEqual(data[0]["name"], "A1")
        self.assertEqual(data[0]["rank"], 1)

    def test_rankings_unknown_field(self):
        response = self.client.get("/api/stats/rankings/2024", params={"field": "height"})
        self.assertEqual(response.status_code, 400)

    def test_player_overview(self):
        data = self.client.get("/api/players/a1/overview").json()
        self.assertEqual(data["goals"], 3)
        self.assertEqual(data["totalWeeks"], 2)

    def test_unknown_player_overview(self):
        self.assertEqual(self.client.get("/api/players/zz/overview").status_code, 404)


class TestChampionAndStreakEndpoints(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.load_march()

    def test_recompute_champion(self):
        data = self.client.post("/api/weeks/w2/champion").json()
        self.assertIsNone(data["teamId"])
        data = self.client.post("/api/weeks/w1/champion").json()
        self.assertEqual(data["teamId"], "t1")

    def test_recompute_missing_week(self):
        self.assertEqual(self.client.post("/api/weeks/nope/champion").status_code, 404)

    def test_backfill_then_read(self):
        state = self.client.post("/api/streaks/backfill", json={}).json()
        strikers = {e["playerId"]: e["streakCount"] for e in state["weekStriker"]}
        self.assertEqual(strikers, {"a1": 2, "a2": 1})
        self.assertEqual(state["weekTopAssist"], [{"playerId": "d2", "streakCount": 1}])
        self.assertEqual(state["weekChampion"], [])
        self.assertEqual(self.client.get("/api/streaks").json(), state)


if __name__ == '__main__':
    unittest.main()
