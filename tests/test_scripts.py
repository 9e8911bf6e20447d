import json
import os
import tempfile
import unittest
from unittest import mock

import requests

import backfill_streaks
import database
import fetch_weeks
import import_weeks

from factories import match, week_dict

EXPORT = {
    "players": [
        {"id": "p1", "name": "Ana", "position": "ATK"},
        {"id": "p2", "name": "Bia", "position": "GOL"},
    ],
    "weeks": [
        week_dict("w1", "2024-05-04", {"a": ["p1"], "b": ["p2"]},
                  [match("m1", "a", "b", (1, 0), goals={"p1": 1})], champion="a"),
        week_dict("w2", "2024-05-11", {"a": ["p1"], "b": ["p2"]},
                  [match("m1", "a", "b", (2, 2), goals={"p1": 2})]),
    ],
}


def fake_response(payload):
    response = mock.Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class ScriptTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.db_path = os.path.join(self.tmp.name, "scripts.db")

    def stored_weeks(self, league_id="default"):
        with database.db_session(self.db_path) as conn:
            return database.load_weeks(conn, league_id)


class TestImportWeeks(ScriptTestCase):
    def test_import_data(self):
        counts = import_weeks.import_data(EXPORT, self.db_path)
        self.assertEqual(counts, (2, 2))
        self.assertEqual([w.id for w in self.stored_weeks()], ["w1", "w2"])

    def test_import_file_with_league(self):
        path = os.path.join(self.tmp.name, "export.json")
        with open(path, "w") as f:
            json.dump(EXPORT, f)
        import_weeks.import_file(path, self.db_path, league_id="sunday")
        self.assertEqual(len(self.stored_weeks("sunday")), 2)
        self.assertEqual(self.stored_weeks(), [])


class TestFetchWeeks(ScriptTestCase):
    @mock.patch("fetch_weeks.requests.get")
    def test_fetch_and_import(self, mock_get):
        mock_get.side_effect = [fake_response(EXPORT["players"]), fake_response(EXPORT["weeks"])]
        imported = fetch_weeks.fetch_and_import("default", 2024, self.db_path, api_url="http://api")
        self.assertEqual(imported, 2)
        first_url = mock_get.call_args_list[0].args[0]
        self.assertEqual(first_url, "http://api/futs/default/players")
        self.assertEqual(mock_get.call_args_list[1].kwargs["params"], {"year": 2024})

    @mock.patch("fetch_weeks.requests.get")
    def test_api_error_imports_nothing(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")
        imported = fetch_weeks.fetch_and_import("default", None, self.db_path, api_url="http://api")
        self.assertEqual(imported, 0)


class TestBackfillStreaks(ScriptTestCase):
    def test_run(self):
        import_weeks.import_data(EXPORT, self.db_path)
        streaks = backfill_streaks.run("default", self.db_path)
        self.assertEqual([(e.player_id, e.streak_count) for e in streaks.week_striker], [("p1", 2)])

        with database.db_session(self.db_path) as conn:
            state = database.load_award_state(conn, "default")
        self.assertEqual(state["weekStriker"], [{"playerId": "p1", "streakCount": 2}])


if __name__ == '__main__':
    unittest.main()
