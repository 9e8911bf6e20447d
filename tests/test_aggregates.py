import unittest

from aggregates import build_aggregates, match_points
from models import MatchResult, Position

from factories import SQUAD, march_weeks, match, week


class TestMatchPoints(unittest.TestCase):
    def test_outcomes(self):
        self.assertEqual(match_points(MatchResult(2, 0)), (3, 0))
        self.assertEqual(match_points(MatchResult(0, 1)), (0, 3))
        self.assertEqual(match_points(MatchResult(1, 1)), (1, 1))
        self.assertEqual(match_points(MatchResult(0, 0)), (1, 1))
        self.assertEqual(match_points(None), (0, 0))

    def test_only_valid_splits(self):
        allowed = {(0, 0), (3, 0), (0, 3), (1, 1)}
        for h in range(5):
            for a in range(5):
                self.assertIn(match_points(MatchResult(h, a)), allowed)


class TestAggregateBuilder(unittest.TestCase):
    def setUp(self):
        self.stats = build_aggregates(march_weeks(), SQUAD)

    def test_results_and_points(self):
        a1 = self.stats["a1"]
        self.assertEqual((a1.matches, a1.wins, a1.draws, a1.losses), (2, 1, 1, 0))
        self.assertEqual(a1.points, 4)
        a2 = self.stats["a2"]
        self.assertEqual((a2.matches, a2.wins, a2.draws, a2.losses), (2, 0, 1, 1))
        self.assertEqual(a2.points, 1)

    def test_goals_conceded_and_averages(self):
        a2 = self.stats["a2"]
        self.assertEqual(a2.goals_conceded, 3)
        self.assertEqual(a2.average_goals_conceded, 1.5)
        self.assertEqual(a2.points_percentage, 16.67)
        self.assertEqual(self.stats["a1"].points_percentage, 66.67)
        self.assertEqual(self.stats["a1"].average_points_per_match, 2)

    def test_goals_assists_and_weeks(self):
        a1 = self.stats["a1"]
        self.assertEqual(a1.goals, 3)
        self.assertEqual(a1.weeks_participated, 2)
        self.assertEqual(a1.average_goals_per_week, 1.5)
        self.assertEqual(a1.average_points_per_week, 2)
        self.assertEqual(self.stats["m1"].assists, 1)
        self.assertEqual(self.stats["d2"].average_assists_per_week, 0.5)

    def test_names_positions_and_championships(self):
        self.assertEqual(self.stats["g1"].name, "G1")
        self.assertEqual(self.stats["g1"].position, Position.GOL)
        self.assertEqual(self.stats["a1"].championships, 1)
        self.assertEqual(self.stats["a2"].championships, 0)

    def test_team_goals(self):
        self.assertEqual(self.stats["a1"].team_goals, 3)
        self.assertEqual(self.stats["g1"].team_goals, 1)

    def test_own_goal_is_not_a_scorer_credit(self):
        w = week(
            "w1", "2024-04-06",
            {"t1": ["p1"], "t2": ["p2"]},
            [match("m1", "t1", "t2", (1, 0), own_goals={"p2": 1})],
        )
        stats = build_aggregates([w])
        self.assertEqual(stats["p2"].own_goals, 1)
        self.assertEqual(stats["p2"].goals, 0)
        self.assertEqual(stats["p1"].goals, 0)

    def test_unplayed_match_does_not_touch_results(self):
        w = week(
            "w1", "2024-04-06",
            {"t1": ["p1"], "t2": ["p2"]},
            [match("m1", "t1", "t2", None, goals={"p1": 1})],
        )
        stats = build_aggregates([w])
        self.assertNotIn("p2", stats)
        p1 = stats["p1"]
        self.assertEqual((p1.matches, p1.points, p1.losses), (0, 0, 0))
        self.assertEqual(p1.goals, 1)
        self.assertEqual(p1.average_goals_conceded, 0)
        self.assertEqual(p1.points_percentage, 0)

    def test_champion_roster_counts_without_played_matches(self):
        w = week(
            "w1", "2024-04-06",
            {"t1": ["p1", "p2"], "t2": ["p3"]},
            [match("m1", "t1", "t2", None)],
            champion="t1",
        )
        stats = build_aggregates([w])
        self.assertEqual(stats["p1"].championships, 1)
        self.assertEqual(stats["p2"].championships, 1)
        self.assertEqual(stats["p1"].matches, 0)
        self.assertNotIn("p3", stats)

    def test_goal_or_assist_only_participation_counts_the_week(self):
        w = week(
            "w1", "2024-04-06",
            {"t1": ["p1"], "t2": ["p2"]},
            [match("m1", "t1", "t2", (1, 0), goals={"guest": 1}, assists={"helper": 1})],
        )
        stats = build_aggregates([w])
        self.assertEqual(stats["guest"].weeks_participated, 1)
        self.assertEqual(stats["helper"].weeks_participated, 1)
        self.assertEqual(stats["guest"].matches, 0)
        self.assertEqual(stats["guest"].average_points_per_match, 0)

    def test_excluded_players_vanish(self):
        stats = build_aggregates(march_weeks(), SQUAD, exclude_player_ids={"a1"})
        self.assertNotIn("a1", stats)
        self.assertEqual(stats["m1"].points, 4)
        self.assertEqual(stats["m1"].championships, 1)

    def test_interactions(self):
        a1 = self.stats["a1"]
        self.assertEqual(a1.with_players["m1"].points, 3)
        self.assertEqual(a1.with_players["m1"].matches, 1)
        self.assertEqual(a1.against_players["a2"].points, 4)
        self.assertEqual(a1.against_players["a2"].points_expected, 6)
        self.assertNotIn("a1", a1.with_players)

    def test_weeks_counted_once_per_week(self):
        w = week(
            "w1", "2024-04-06",
            {"t1": ["p1"], "t2": ["p2"], "t3": ["p3"]},
            [
                match("m1", "t1", "t2", (1, 0)),
                match("m2", "t1", "t3", (0, 0)),
            ],
        )
        stats = build_aggregates([w])
        self.assertEqual(stats["p1"].matches, 2)
        self.assertEqual(stats["p1"].weeks_participated, 1)

    def test_empty_input(self):
        self.assertEqual(build_aggregates([]), {})


if __name__ == '__main__':
    unittest.main()
