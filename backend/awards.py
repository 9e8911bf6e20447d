"""
Monthly / seasonal awards.

Each category sorts its candidates best-first and keeps everyone at least as good as
the 5th-ranked value, so boundary ties are always included. Lists are capped at 9.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from aggregates import PlayerAggregate, build_aggregates
from models import Player, Position, Week
from rules import (
    AWARD_CUTOFF_POSITION,
    AWARD_MAX_ENTRIES,
    defender_min_weeks,
    half_season_weeks,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class AwardEntry:
    name: str
    count: float

    def to_dict(self) -> dict:
        return {"name": self.name, "count": self.count}


@dataclass
class MonthResume:
    assists: list[AwardEntry] = field(default_factory=list)
    scorer: list[AwardEntry] = field(default_factory=list)
    mvp: list[AwardEntry] = field(default_factory=list)
    lvp: list[AwardEntry] = field(default_factory=list)
    best_defender: list[AwardEntry] = field(default_factory=list)
    top_pointer: list[AwardEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "assists": [e.to_dict() for e in self.assists],
            "scorer": [e.to_dict() for e in self.scorer],
            "mvp": [e.to_dict() for e in self.mvp],
            "lvp": [e.to_dict() for e in self.lvp],
            "bestDefender": [e.to_dict() for e in self.best_defender],
            "topPointer": [e.to_dict() for e in self.top_pointer],
        }


def select_award(
    candidates: Iterable[T],
    metric: Callable[[T], float],
    ascending: bool = False,
    tiebreak: Optional[Callable[[T], Sequence]] = None,
) -> list[T]:
    """
    Everyone whose metric is at least as good as the cutoff value.
    With fewer than 5 candidates the last (worst) value is the cutoff.
    """
    def sort_key(c):
        primary = metric(c) if ascending else -metric(c)
        return (primary, *(tiebreak(c) if tiebreak else ()))

    ranked = sorted(candidates, key=sort_key)
    if not ranked:
        return []

    if len(ranked) >= AWARD_CUTOFF_POSITION:
        cutoff = metric(ranked[AWARD_CUTOFF_POSITION - 1])
    else:
        cutoff = metric(ranked[-1])

    if ascending:
        selected = [c for c in ranked if metric(c) <= cutoff]
    else:
        selected = [c for c in ranked if metric(c) >= cutoff]
    return selected[:AWARD_MAX_ENTRIES]


def _entries(players: list[PlayerAggregate], metric: Callable[[PlayerAggregate], float]) -> list[AwardEntry]:
    return [AwardEntry(name=p.name, count=metric(p)) for p in players]


def top_scorers(aggregates: Iterable[PlayerAggregate]) -> list[AwardEntry]:
    # Own goals never count here
    scorers = [a for a in aggregates if a.goals > 0]
    return _entries(select_award(scorers, lambda a: a.goals), lambda a: a.goals)


def top_assists(aggregates: Iterable[PlayerAggregate]) -> list[AwardEntry]:
    assisters = [a for a in aggregates if a.assists > 0]
    chosen = select_award(assisters, lambda a: a.assists, tiebreak=lambda a: (a.matches,))
    return _entries(chosen, lambda a: a.assists)


def mvp(aggregates: Iterable[PlayerAggregate]) -> list[AwardEntry]:
    """Most championships; ties go to fewer matches, then higher points percentage."""
    champions = [a for a in aggregates if a.championships > 0]
    chosen = select_award(
        champions,
        lambda a: a.championships,
        tiebreak=lambda a: (a.matches, -a.points_percentage),
    )
    return _entries(chosen, lambda a: a.championships)


def _played(aggregates: Iterable[PlayerAggregate]) -> list[PlayerAggregate]:
    # Goal/assist-only participants have no match averages to judge
    return [a for a in aggregates if a.matches > 0]


def top_pointers(aggregates: Iterable[PlayerAggregate]) -> list[AwardEntry]:
    chosen = select_award(_played(aggregates), lambda a: a.points)
    return _entries(chosen, lambda a: a.points)


def lvp(aggregates: Iterable[PlayerAggregate], total_weeks: int) -> list[AwardEntry]:
    """Lowest points percentage among players present in at least half the weeks."""
    required = half_season_weeks(total_weeks)
    regulars = [a for a in _played(aggregates) if a.weeks_participated >= required]
    chosen = select_award(regulars, lambda a: a.points_percentage, ascending=True)
    return _entries(chosen, lambda a: a.points_percentage)


def best_defenders(aggregates: Iterable[PlayerAggregate], total_weeks: int) -> list[AwardEntry]:
    required = defender_min_weeks(total_weeks)
    defenders = [
        a for a in _played(aggregates)
        if a.position in (Position.DEF, Position.GOL) and a.weeks_participated >= required
    ]
    chosen = select_award(defenders, lambda a: a.average_goals_conceded, ascending=True)
    return _entries(chosen, lambda a: a.average_goals_conceded)


def month_resume(weeks: Sequence[Week], players: Optional[dict[str, Player]] = None,
                 exclude_player_ids: Iterable[str] = ()) -> MonthResume:
    excluded = set(exclude_player_ids)
    aggregates = list(build_aggregates(weeks, players, excluded).values())
    total_weeks = len(weeks)
    logger.info("Month resume over %d weeks (%d excluded players)", total_weeks, len(excluded))

    return MonthResume(
        assists=top_assists(aggregates),
        scorer=top_scorers(aggregates),
        mvp=mvp(aggregates),
        lvp=lvp(aggregates, total_weeks),
        best_defender=best_defenders(aggregates, total_weeks),
        top_pointer=top_pointers(aggregates),
    )
