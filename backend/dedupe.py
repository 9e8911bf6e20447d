"""
Match deduplication.

Every match is reachable twice from a week: once through the home team's list and
once through the away team's list. Stats must count it once.
"""

from typing import Iterable, Iterator

from models import Match, Week


def iter_match_references(week: Week) -> Iterator[Match]:
    """All match references of a week, duplicates included, in team order."""
    for team in week.teams:
        yield from team.matches_home
        yield from team.matches_away


def unique_matches(references: Iterable[Match]) -> list[Match]:
    """Keep the first occurrence of each match id."""
    seen: set[str] = set()
    matches: dict[str, Match] = {}
    for match in references:
        if match.id in seen:
            continue
        seen.add(match.id)
        matches[match.id] = match
    return list(matches.values())


def week_matches(week: Week) -> list[Match]:
    return unique_matches(iter_match_references(week))
