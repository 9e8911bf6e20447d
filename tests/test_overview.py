import unittest
from datetime import date, timedelta

from overview import player_overview

from factories import match, roster, week


def season(count, score=(2, 1)):
    start = date(2024, 1, 6)
    return [
        week(
            f"w{i}", (start + timedelta(weeks=i)).isoformat(),
            {"t1": ["p1", "p2"], "t2": ["p3", "p4"]},
            [match("m1", "t1", "t2", score, goals={"p1": 1})],
            champion="t1",
        )
        for i in range(count)
    ]


PLAYERS = roster(p1="ATK", p2="MEI", p3="DEF", p4="GOL")


class TestPlayerOverview(unittest.TestCase):
    def test_unknown_player(self):
        self.assertIsNone(player_overview(season(2), PLAYERS, "nobody"))

    def test_stats_and_rankings(self):
        overview = player_overview(season(4), PLAYERS, "p1")
        self.assertEqual(overview.stats.points, 12)
        self.assertEqual(overview.total_weeks, 4)
        self.assertEqual(overview.rankings["points"], 1)
        self.assertEqual(overview.rankings["goals"], 1)

    def test_interactions_need_enough_shared_matches(self):
        overview = player_overview(season(12), PLAYERS, "p1")
        self.assertEqual(overview.best_teammates, [])
        self.assertEqual(overview.toughest_opponents, [])

    def test_interactions_once_threshold_reached(self):
        overview = player_overview(season(13), PLAYERS, "p1")
        self.assertEqual([(e.name, e.points, e.points_expected) for e in overview.best_teammates],
                         [("P2", 39, 39)])
        self.assertEqual(sorted(e.name for e in overview.kindest_opponents), ["P3", "P4"])

        loser = player_overview(season(13), PLAYERS, "p3")
        self.assertEqual([(e.name, e.points) for e in loser.worst_teammates], [("P4", 0)])
        self.assertEqual(loser.toughest_opponents[0].points, 0)

    def test_serialised_keys(self):
        data = player_overview(season(13), PLAYERS, "p1").to_dict()
        self.assertEqual(data["playerId"], "p1")
        self.assertEqual(data["totalWeeks"], 13)
        self.assertEqual(data["top5PointsWithPlayers"][0]["pointsExpected"], 39)
        self.assertIn("top5PointsGivenByPlayers", data)


if __name__ == '__main__':
    unittest.main()
