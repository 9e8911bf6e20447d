"""
Snapshot types for weeks, teams, matches and players.
Built once per computation from storage or JSON and never mutated afterwards.
"""

import logging
from enum import Enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

logger = logging.getLogger(__name__)


class Position(str, Enum):
    ATK = "ATK"
    MEI = "MEI"
    DEF = "DEF"
    GOL = "GOL"


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    position: Position

    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            position=Position(data["position"]),
        )


@dataclass(frozen=True)
class Goal:
    """A batch of goals. Exactly one of player_id / own_goal_player_id is set."""
    goals: int = 1
    player_id: Optional[str] = None
    own_goal_player_id: Optional[str] = None


@dataclass(frozen=True)
class Assist:
    player_id: str
    assists: int = 1


@dataclass(frozen=True)
class MatchResult:
    home_goals: int
    away_goals: int


@dataclass(frozen=True)
class Match:
    id: str
    home_team_id: str
    away_team_id: str
    result: Optional[MatchResult] = None
    goals: tuple[Goal, ...] = ()
    assists: tuple[Assist, ...] = ()


@dataclass(frozen=True)
class Team:
    id: str
    player_ids: tuple[str, ...] = ()
    champion: bool = False
    points: int = 0
    # The same match appears in the home team's and the away team's list.
    matches_home: tuple[Match, ...] = ()
    matches_away: tuple[Match, ...] = ()


@dataclass(frozen=True)
class Week:
    id: str
    date: date
    teams: tuple[Team, ...] = ()
    league_id: str = "default"

    def team(self, team_id: str) -> Optional[Team]:
        for t in self.teams:
            if t.id == team_id:
                return t
        return None


def parse_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _goal_from_dict(g: dict) -> Goal:
    return Goal(
        goals=int(g.get("goals", 1)),
        player_id=_opt_id(g.get("playerId")),
        own_goal_player_id=_opt_id(g.get("ownGoalPlayerId")),
    )


def _opt_id(value) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def match_from_dict(m: dict) -> Match:
    result = m.get("result")
    return Match(
        id=str(m["id"]),
        home_team_id=str(m["homeTeamId"]),
        away_team_id=str(m["awayTeamId"]),
        result=MatchResult(int(result["homeGoals"]), int(result["awayGoals"])) if result else None,
        goals=tuple(_goal_from_dict(g) for g in m.get("goals") or []),
        assists=tuple(
            Assist(player_id=str(a["playerId"]), assists=int(a.get("assists", 1)))
            for a in m.get("assists") or []
            if a.get("playerId")
        ),
    )


def week_from_dict(data: dict, league_id: str = "default") -> Week:
    """
    Build a Week from the exported shape:
      { id, date, teams: [{ id, champion, points, playerIds[] }], matches: [...] }
    Teams may instead carry their own matchesHome / matchesAway lists.
    """
    flat = [match_from_dict(m) for m in data.get("matches") or []]
    team_ids = {str(t["id"]) for t in data.get("teams") or []}
    for m in flat:
        if m.home_team_id not in team_ids or m.away_team_id not in team_ids:
            logger.warning(
                "Week %s: match %s references unknown team (%s vs %s)",
                data.get("id"), m.id, m.home_team_id, m.away_team_id,
            )

    teams = []
    for t in data.get("teams") or []:
        team_id = str(t["id"])
        home = [match_from_dict(m) for m in t.get("matchesHome") or []]
        away = [match_from_dict(m) for m in t.get("matchesAway") or []]
        home += [m for m in flat if m.home_team_id == team_id]
        away += [m for m in flat if m.away_team_id == team_id]
        teams.append(Team(
            id=team_id,
            player_ids=tuple(str(pid) for pid in t.get("playerIds") or []),
            champion=bool(t.get("champion", False)),
            points=int(t.get("points") or 0),
            matches_home=tuple(home),
            matches_away=tuple(away),
        ))

    return Week(
        id=str(data["id"]),
        date=parse_date(data["date"]),
        teams=tuple(teams),
        league_id=str(data.get("leagueId", league_id)),
    )

