"""
Best of Positions Scoring Engine
Weighted composite score per role: attacking output vs. defensive solidity.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from aggregates import PlayerAggregate, build_aggregates
from models import Player, Position, Week
from rules import (
    AWARD_MAX_ENTRIES,
    DEFENSIVE_WEIGHTS,
    POSITION_LABELS,
    POSITION_WEIGHTS,
    half_season_weeks,
)

logger = logging.getLogger(__name__)


@dataclass
class PositionScore:
    """Composite score and the raw inputs that produced it."""
    name: str
    position: Position
    point: float
    goals: int = 0
    assists: int = 0
    goals_against: float = 0
    points: int = 0
    championships: int = 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "point": self.point,
            "goalsScore": self.goals,
            "assistScore": self.assists,
            "goalsAgainstScore": self.goals_against,
            "pointsScore": self.points,
            "championshipScore": self.championships,
        }


@dataclass
class BestOfPositions:
    attackers: list[PositionScore] = field(default_factory=list)
    midfielders: list[PositionScore] = field(default_factory=list)
    defenders: list[PositionScore] = field(default_factory=list)
    goalkeepers: list[PositionScore] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            label: [s.to_dict() for s in getattr(self, label)]
            for label in POSITION_LABELS.values()
        }


def calculate_position_score(position: Position, goals: int, assists: int, championships: int,
                             goals_against: float, points: int) -> float:
    """Score for one player. Every Position is handled; unknown values raise."""
    if position in (Position.ATK, Position.MEI):
        w = POSITION_WEIGHTS[position]
        total = (
            goals * w["goals"]
            + assists * w["assists"]
            + championships * w["championships"]
            + w["defense"] / (goals_against + 1)
            + points * w["points"]
        )
    elif position in (Position.DEF, Position.GOL):
        w = DEFENSIVE_WEIGHTS
        total = (
            w["defense"] / (goals_against + 1)
            + (goals + assists) * w["goals_and_assists"]
            + points * w["points"]
            + championships * w["championships"]
            - w["offset"]
        )
    else:
        raise ValueError(f"No scoring rule for position {position!r}")
    return round(total, 2)


def score_player(agg: PlayerAggregate) -> PositionScore:
    return PositionScore(
        name=agg.name,
        position=agg.position,
        point=calculate_position_score(
            agg.position,
            goals=agg.goals,
            assists=agg.assists,
            championships=agg.championships,
            goals_against=agg.average_goals_conceded,
            points=agg.points,
        ),
        goals=agg.goals,
        assists=agg.assists,
        goals_against=agg.average_goals_conceded,
        points=agg.points,
        championships=agg.championships,
    )


def rank_positions(aggregates: Iterable[PlayerAggregate], total_weeks: int) -> BestOfPositions:
    required = half_season_weeks(total_weeks)
    buckets: dict[Position, list[PositionScore]] = {pos: [] for pos in Position}

    for agg in aggregates:
        if agg.position is None or agg.weeks_participated < required:
            continue
        buckets[agg.position].append(score_player(agg))

    return BestOfPositions(**{
        POSITION_LABELS[pos]: sorted(scores, key=lambda s: -s.point)[:AWARD_MAX_ENTRIES]
        for pos, scores in buckets.items()
    })


def best_of_positions(weeks: Sequence[Week], players: Optional[dict[str, Player]] = None,
                      exclude_player_ids: Iterable[str] = ()) -> BestOfPositions:
    aggregates = build_aggregates(weeks, players, exclude_player_ids)
    result = rank_positions(aggregates.values(), len(weeks))
    logger.debug(
        "Best of positions: %s",
        {label: len(getattr(result, label)) for label in POSITION_LABELS.values()},
    )
    return result
