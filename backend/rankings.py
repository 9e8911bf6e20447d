"""
Ranking Engine
Tie-sharing ranks over any numeric aggregate field, limited to regular participants.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from aggregates import PlayerAggregate
from rules import ASCENDING_FIELDS, RANKING_FIELDS, ranking_min_weeks


@dataclass
class RankingEntry:
    player_id: str
    name: str
    value: float
    rank: int

    def to_dict(self) -> dict:
        return {"playerId": self.player_id, "name": self.name, "value": self.value, "rank": self.rank}


def eligible_for_ranking(aggregates: Iterable[PlayerAggregate], total_weeks: int) -> list[PlayerAggregate]:
    min_weeks = ranking_min_weeks(total_weeks)
    return [a for a in aggregates if a.weeks_participated >= min_weeks]


def assign_ranks(values: list[float]) -> list[int]:
    """
    Ranks for values that are already sorted best-first.
    Equal neighbours share a rank; a new value takes its 1-based position.
    """
    ranks = []
    for i, value in enumerate(values):
        if i > 0 and value == values[i - 1]:
            ranks.append(ranks[-1])
        else:
            ranks.append(i + 1)
    return ranks


def rank_players(aggregates: Iterable[PlayerAggregate], field: str, total_weeks: int,
                 ascending: Optional[bool] = None) -> list[RankingEntry]:
    if field not in RANKING_FIELDS:
        raise ValueError(f"Unknown ranking field: {field}")
    if ascending is None:
        ascending = field in ASCENDING_FIELDS

    eligible = eligible_for_ranking(aggregates, total_weeks)
    if ascending:
        eligible.sort(key=lambda a: getattr(a, field) or 0)
    else:
        eligible.sort(key=lambda a: -(getattr(a, field) or 0))

    values = [getattr(a, field) or 0 for a in eligible]
    return [
        RankingEntry(player_id=a.player_id, name=a.name, value=v, rank=r)
        for a, v, r in zip(eligible, values, assign_ranks(values))
    ]


def rank_all(aggregates: dict[str, PlayerAggregate], total_weeks: int) -> dict[str, dict[str, int]]:
    """player_id -> {field: rank} for every ranking field, each field ranked independently."""
    rankings: dict[str, dict[str, int]] = {}
    for field in RANKING_FIELDS:
        for entry in rank_players(aggregates.values(), field, total_weeks):
            rankings.setdefault(entry.player_id, {})[field] = entry.rank
    return rankings
