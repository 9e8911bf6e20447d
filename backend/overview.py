"""
Single-player overview: aggregate, rankings in every field, and the teammates /
opponents the player does best and worst with.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from aggregates import Interaction, PlayerAggregate, build_aggregates
from models import Player, Week
from rankings import rank_all
from rules import INTERACTION_MIN_POINTS_EXPECTED, INTERACTION_TOP


@dataclass
class InteractionEntry:
    name: str
    points: int
    points_expected: int

    @property
    def ratio(self) -> float:
        return self.points / self.points_expected if self.points_expected else 0

    def to_dict(self) -> dict:
        return {"name": self.name, "points": self.points, "pointsExpected": self.points_expected}


@dataclass
class PlayerOverview:
    stats: PlayerAggregate
    total_weeks: int
    rankings: dict[str, int] = field(default_factory=dict)
    best_teammates: list[InteractionEntry] = field(default_factory=list)
    worst_teammates: list[InteractionEntry] = field(default_factory=list)
    toughest_opponents: list[InteractionEntry] = field(default_factory=list)
    kindest_opponents: list[InteractionEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            **self.stats.to_dict(),
            "totalWeeks": self.total_weeks,
            "rankings": self.rankings,
            "top5PointsWithPlayers": [e.to_dict() for e in self.best_teammates],
            "top5WorstPerformingTeammates": [e.to_dict() for e in self.worst_teammates],
            "top5PointsAgainstPlayers": [e.to_dict() for e in self.toughest_opponents],
            "top5PointsGivenByPlayers": [e.to_dict() for e in self.kindest_opponents],
        }


def _qualified(table: dict[str, Interaction], names: dict[str, str]) -> list[InteractionEntry]:
    entries = [
        InteractionEntry(name=names.get(pid, pid), points=i.points, points_expected=i.points_expected)
        for pid, i in table.items()
    ]
    return [e for e in entries if e.points_expected >= INTERACTION_MIN_POINTS_EXPECTED]


def player_overview(weeks: Sequence[Week], players: Optional[dict[str, Player]],
                    player_id: str) -> Optional[PlayerOverview]:
    aggregates = build_aggregates(weeks, players)
    stats = aggregates.get(player_id)
    if stats is None:
        return None

    names = {pid: a.name for pid, a in aggregates.items()}
    if players:
        names.update({pid: p.name for pid, p in players.items()})

    rankings = rank_all(aggregates, len(weeks)).get(player_id, {})
    mates = _qualified(stats.with_players, names)
    opponents = _qualified(stats.against_players, names)

    return PlayerOverview(
        stats=stats,
        total_weeks=stats.weeks_participated,
        rankings=rankings,
        best_teammates=sorted(mates, key=lambda e: -e.ratio)[:INTERACTION_TOP],
        worst_teammates=sorted(mates, key=lambda e: e.ratio)[:INTERACTION_TOP],
        toughest_opponents=sorted(opponents, key=lambda e: e.ratio)[:INTERACTION_TOP],
        kindest_opponents=sorted(opponents, key=lambda e: -e.ratio)[:INTERACTION_TOP],
    )
