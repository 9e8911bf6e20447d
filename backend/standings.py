"""
Team standings and weekly champion resolution.

Champion cascade among teams tied on points:
fewest matches played, then best goal difference, then most goals scored.
Anything still tied means no champion that week.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from aggregates import match_points
from dedupe import week_matches
from models import Week

logger = logging.getLogger(__name__)


@dataclass
class TeamStanding:
    team_id: str
    points: int = 0
    matches_played: int = 0
    goals_scored: int = 0
    goals_conceded: int = 0
    goal_difference: int = 0


@dataclass
class TeamUpdate:
    team_id: str
    points: int
    champion: bool


@dataclass
class PlayerChampionFlag:
    player_id: str
    is_champion: bool


@dataclass
class ChampionResolution:
    week_id: str
    team_id: Optional[str]
    teams: list[TeamUpdate] = field(default_factory=list)
    players: list[PlayerChampionFlag] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "weekId": self.week_id,
            "teamId": self.team_id,
            "teams": [
                {"teamId": t.team_id, "points": t.points, "champion": t.champion}
                for t in self.teams
            ],
            "players": [
                {"playerId": p.player_id, "isChampion": p.is_champion}
                for p in self.players
            ],
        }


def compute_standings(week: Week) -> dict[str, TeamStanding]:
    table = {team.id: TeamStanding(team_id=team.id) for team in week.teams}

    for match in week_matches(week):
        if match.result is None:
            continue
        home = table.setdefault(match.home_team_id, TeamStanding(team_id=match.home_team_id))
        away = table.setdefault(match.away_team_id, TeamStanding(team_id=match.away_team_id))
        hg, ag = match.result.home_goals, match.result.away_goals
        home_pts, away_pts = match_points(match.result)

        for side, scored, conceded, pts in ((home, hg, ag, home_pts), (away, ag, hg, away_pts)):
            side.matches_played += 1
            side.goals_scored += scored
            side.goals_conceded += conceded
            side.goal_difference = side.goals_scored - side.goals_conceded
            side.points += pts

    return table


def resolve_champion(standings: dict[str, TeamStanding]) -> Optional[str]:
    teams = list(standings.values())
    if not teams:
        return None

    max_points = max(t.points for t in teams)
    contenders = [t for t in teams if t.points == max_points]

    cascade = (
        lambda t: -t.matches_played,
        lambda t: t.goal_difference,
        lambda t: t.goals_scored,
    )
    for criterion in cascade:
        if len(contenders) <= 1:
            break
        best = max(criterion(t) for t in contenders)
        contenders = [t for t in contenders if criterion(t) == best]

    return contenders[0].team_id if len(contenders) == 1 else None


def champion_resolution(week: Week) -> ChampionResolution:
    """
    Recompute points and champion for a week, plus the isChampion flag of every
    player on the week's rosters. Running it twice yields the same result.
    """
    standings = compute_standings(week)
    champion_id = resolve_champion(standings)

    teams = [
        TeamUpdate(
            team_id=team.id,
            points=standings[team.id].points,
            champion=team.id == champion_id,
        )
        for team in week.teams
    ]

    flags: dict[str, bool] = {}
    for team in week.teams:
        for pid in team.player_ids:
            flags[pid] = flags.get(pid, False) or team.id == champion_id
    players = [PlayerChampionFlag(player_id=pid, is_champion=v) for pid, v in flags.items()]

    if champion_id is None:
        logger.info("Week %s: no champion (unresolved tie)", week.id)
    else:
        logger.info("Week %s: champion team %s", week.id, champion_id)

    return ChampionResolution(week_id=week.id, team_id=champion_id, teams=teams, players=players)
