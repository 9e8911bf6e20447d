"""
Player Aggregate Builder
Folds deduplicated matches into one aggregate record per player.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from dedupe import week_matches
from models import Match, MatchResult, Player, Position, Team, Week
from rules import POINTS

logger = logging.getLogger(__name__)


@dataclass
class Interaction:
    """Points one player earned alongside / against another."""
    points: int = 0
    matches: int = 0

    @property
    def points_expected(self) -> int:
        return self.matches * 3


@dataclass
class PlayerAggregate:
    player_id: str
    name: str
    position: Optional[Position] = None
    matches: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    points: int = 0
    goals: int = 0
    own_goals: int = 0
    assists: int = 0
    goals_conceded: int = 0
    team_goals: int = 0
    championships: int = 0
    weeks: set[str] = field(default_factory=set)

    total_points_per_week: int = 0
    total_goals_per_week: int = 0
    total_assists_per_week: int = 0
    total_goals_conceded_per_week: int = 0

    average_goals_conceded: float = 0
    average_points_per_match: float = 0
    points_percentage: float = 0
    average_points_per_week: float = 0
    average_goals_per_week: float = 0
    average_assists_per_week: float = 0
    average_goals_conceded_per_week: float = 0

    with_players: dict[str, Interaction] = field(default_factory=dict)
    against_players: dict[str, Interaction] = field(default_factory=dict)

    @property
    def weeks_participated(self) -> int:
        return len(self.weeks)

    def to_dict(self) -> dict:
        return {
            "playerId": self.player_id,
            "name": self.name,
            "position": self.position.value if self.position else None,
            "matches": self.matches,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "points": self.points,
            "goals": self.goals,
            "ownGoals": self.own_goals,
            "assists": self.assists,
            "goalsConceded": self.goals_conceded,
            "teamGoals": self.team_goals,
            "championships": self.championships,
            "weeksParticipated": self.weeks_participated,
            "averageGoalsConceded": self.average_goals_conceded,
            "averagePointsPerMatch": self.average_points_per_match,
            "pointsPercentage": self.points_percentage,
            "averagePointsPerWeek": self.average_points_per_week,
            "averageGoalsPerWeek": self.average_goals_per_week,
            "averageAssistsPerWeek": self.average_assists_per_week,
            "averageGoalsConcededPerWeek": self.average_goals_conceded_per_week,
        }


def match_points(result: Optional[MatchResult]) -> tuple[int, int]:
    """(home, away) league points. A match without a result is worth nothing to either side."""
    if result is None:
        return 0, 0
    if result.home_goals > result.away_goals:
        return POINTS["win"], POINTS["loss"]
    if result.home_goals < result.away_goals:
        return POINTS["loss"], POINTS["win"]
    return POINTS["draw"], POINTS["draw"]


def _ratio(total: float, count: int) -> float:
    if count <= 0:
        return 0
    return round(total / count, 2)


class AggregateBuilder:
    """
    Accumulates per-player totals over a set of weeks.
    Excluded players are skipped everywhere, as if they never played.
    """

    def __init__(self, players: Optional[dict[str, Player]] = None,
                 exclude_player_ids: Iterable[str] = ()):
        self.players = players or {}
        self.excluded = set(exclude_player_ids)
        self.stats: dict[str, PlayerAggregate] = {}

    def _get(self, player_id: str) -> PlayerAggregate:
        agg = self.stats.get(player_id)
        if agg is None:
            player = self.players.get(player_id)
            agg = PlayerAggregate(
                player_id=player_id,
                name=player.name if player else player_id,
                position=player.position if player else None,
            )
            self.stats[player_id] = agg
        return agg

    def _roster(self, team: Optional[Team]) -> list[str]:
        if team is None:
            return []
        return [pid for pid in team.player_ids if pid not in self.excluded]

    def add_week(self, week: Week):
        for match in week_matches(week):
            self.add_match(week, match)

        for team in week.teams:
            if not team.champion:
                continue
            for pid in self._roster(team):
                self._get(pid).championships += 1

    def add_match(self, week: Week, match: Match):
        home = self._roster(week.team(match.home_team_id))
        away = self._roster(week.team(match.away_team_id))

        # Unplayed matches only count their goal/assist events
        if match.result is not None:
            home_pts, away_pts = match_points(match.result)
            hg, ag = match.result.home_goals, match.result.away_goals
            self._add_side(week.id, home, away, home_pts, scored=hg, conceded=ag)
            self._add_side(week.id, away, home, away_pts, scored=ag, conceded=hg)

        for goal in match.goals:
            if goal.player_id and goal.player_id not in self.excluded:
                agg = self._get(goal.player_id)
                agg.goals += goal.goals
                agg.total_goals_per_week += goal.goals
                agg.weeks.add(week.id)
            if goal.own_goal_player_id and goal.own_goal_player_id not in self.excluded:
                agg = self._get(goal.own_goal_player_id)
                agg.own_goals += goal.goals
                agg.weeks.add(week.id)

        for assist in match.assists:
            if assist.player_id in self.excluded:
                continue
            agg = self._get(assist.player_id)
            agg.assists += assist.assists
            agg.total_assists_per_week += assist.assists
            agg.weeks.add(week.id)

    def _add_side(self, week_id: str, roster: list[str], opponents: list[str],
                  pts: int, scored: int, conceded: int):
        for pid in roster:
            agg = self._get(pid)
            agg.weeks.add(week_id)
            agg.matches += 1
            agg.points += pts
            agg.total_points_per_week += pts
            agg.goals_conceded += conceded
            agg.total_goals_conceded_per_week += conceded
            agg.team_goals += scored
            if pts == POINTS["win"]:
                agg.wins += 1
            elif pts == POINTS["draw"]:
                agg.draws += 1
            else:
                agg.losses += 1

            for mate in roster:
                if mate != pid:
                    _interact(agg.with_players, mate, pts)
            for opp in opponents:
                _interact(agg.against_players, opp, pts)

    def finish(self) -> dict[str, PlayerAggregate]:
        for agg in self.stats.values():
            weeks = agg.weeks_participated
            agg.average_goals_conceded = _ratio(agg.goals_conceded, agg.matches)
            agg.average_points_per_match = _ratio(agg.points, agg.matches)
            agg.points_percentage = (
                round(agg.points / (agg.matches * 3) * 100, 2) if agg.matches else 0
            )
            agg.average_points_per_week = _ratio(agg.total_points_per_week, weeks)
            agg.average_goals_per_week = _ratio(agg.total_goals_per_week, weeks)
            agg.average_assists_per_week = _ratio(agg.total_assists_per_week, weeks)
            agg.average_goals_conceded_per_week = _ratio(agg.total_goals_conceded_per_week, weeks)
        return self.stats


def _interact(table: dict[str, Interaction], other_id: str, pts: int):
    entry = table.setdefault(other_id, Interaction())
    entry.points += pts
    entry.matches += 1


def build_aggregates(weeks: Iterable[Week], players: Optional[dict[str, Player]] = None,
                     exclude_player_ids: Iterable[str] = ()) -> dict[str, PlayerAggregate]:
    """Full rebuild of every player's aggregate for the given weeks."""
    builder = AggregateBuilder(players, exclude_player_ids)
    count = 0
    for week in weeks:
        builder.add_week(week)
        count += 1
    stats = builder.finish()
    logger.debug("Aggregated %d players over %d weeks", len(stats), count)
    return stats
