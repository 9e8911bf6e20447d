"""
Streak Reconstructor

Walks weeks from most recent to oldest. Players highlighted in the most recent week
start a live streak; each older week either extends it or freezes it for good.
Only streaks that include the most recent week are "current", so nobody joins later.
"""

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from dedupe import week_matches
from models import Week

logger = logging.getLogger(__name__)

CATEGORIES = ("week_champion", "week_striker", "week_top_assist")

# Persisted field names per category
CATEGORY_KEYS = {
    "week_champion": "weekChampion",
    "week_striker": "weekStriker",
    "week_top_assist": "weekTopAssist",
}


@dataclass(frozen=True)
class Highlights:
    week_champion: frozenset[str] = frozenset()
    week_striker: frozenset[str] = frozenset()
    week_top_assist: frozenset[str] = frozenset()


@dataclass(frozen=True)
class StreakEntry:
    player_id: str
    streak_count: int

    def to_dict(self) -> dict:
        return {"playerId": self.player_id, "streakCount": self.streak_count}


@dataclass(frozen=True)
class CategoryState:
    live: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    frozen: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class StreakState:
    week_champion: CategoryState = CategoryState()
    week_striker: CategoryState = CategoryState()
    week_top_assist: CategoryState = CategoryState()
    started: bool = False

    def all_resolved(self) -> bool:
        return self.started and not any(getattr(self, c).live for c in CATEGORIES)


@dataclass
class Streaks:
    week_champion: list[StreakEntry] = field(default_factory=list)
    week_striker: list[StreakEntry] = field(default_factory=list)
    week_top_assist: list[StreakEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            CATEGORY_KEYS[c]: [e.to_dict() for e in getattr(self, c)]
            for c in CATEGORIES
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Streaks":
        data = data or {}
        return cls(**{
            c: [
                StreakEntry(player_id=str(e["playerId"]), streak_count=int(e["streakCount"]))
                for e in data.get(CATEGORY_KEYS[c]) or []
            ]
            for c in CATEGORIES
        })


def _leaders(totals: dict[str, int]) -> frozenset[str]:
    """Everyone tied at the maximum, or nobody if the maximum is zero."""
    if not totals:
        return frozenset()
    best = max(totals.values())
    if best <= 0:
        return frozenset()
    return frozenset(pid for pid, v in totals.items() if v == best)


def week_highlights(week: Week) -> Highlights:
    champions: set[str] = set()
    for team in week.teams:
        if team.champion:
            champions.update(team.player_ids)
            break

    goals: dict[str, int] = {}
    assists: dict[str, int] = {}
    for match in week_matches(week):
        for g in match.goals:
            if g.player_id:
                goals[g.player_id] = goals.get(g.player_id, 0) + g.goals
        for a in match.assists:
            assists[a.player_id] = assists.get(a.player_id, 0) + a.assists

    return Highlights(
        week_champion=frozenset(champions),
        week_striker=_leaders(goals),
        week_top_assist=_leaders(assists),
    )


def _step_category(state: CategoryState, highlighted: frozenset[str], first: bool) -> CategoryState:
    if first:
        return CategoryState(
            live=MappingProxyType({pid: 1 for pid in sorted(highlighted)}),
            frozen=state.frozen,
        )

    live: dict[str, int] = {}
    frozen = dict(state.frozen)
    for pid, count in state.live.items():
        if pid in highlighted:
            live[pid] = count + 1
        else:
            frozen[pid] = count
    return CategoryState(live=MappingProxyType(live), frozen=MappingProxyType(frozen))


def step(state: StreakState, highlights: Highlights) -> StreakState:
    """One older week. Returns a new state; the given one is left untouched."""
    first = not state.started
    return replace(
        state,
        started=True,
        **{
            c: _step_category(getattr(state, c), getattr(highlights, c), first)
            for c in CATEGORIES
        },
    )


def _flush(state: CategoryState) -> list[StreakEntry]:
    final = dict(state.frozen)
    final.update(state.live)
    return [StreakEntry(player_id=pid, streak_count=n) for pid, n in final.items()]


def reconstruct_streaks(weeks: Iterable[Week]) -> Streaks:
    """
    Current streak of every player per category, as of the most recent week.
    Weeks are visited newest first regardless of input order.
    """
    ordered = sorted(weeks, key=lambda w: w.date, reverse=True)
    state = StreakState()

    for week in ordered:
        if state.all_resolved():
            logger.info("All streaks resolved, stopping at week %s (%s)", week.id, week.date)
            break
        highlights = week_highlights(week)
        logger.debug(
            "Week %s: champions=%d strikers=%d assists=%d",
            week.date,
            len(highlights.week_champion),
            len(highlights.week_striker),
            len(highlights.week_top_assist),
        )
        state = step(state, highlights)

    return Streaks(**{c: _flush(getattr(state, c)) for c in CATEGORIES})


def advance_current_streaks(existing: Streaks, highlights: Highlights) -> Streaks:
    """
    Streaks after a new most recent week: highlighted players extend their previous
    count by one, everybody else drops out.
    """
    result = {}
    for c in CATEGORIES:
        previous = {e.player_id: e.streak_count for e in getattr(existing, c)}
        result[c] = [
            StreakEntry(player_id=pid, streak_count=previous.get(pid, 0) + 1)
            for pid in sorted(getattr(highlights, c))
        ]
    return Streaks(**result)
