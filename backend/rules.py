"""
Pelada Stats Rules
All fixed constants of the statistics engine in one place.
"""

import math

from models import Position

# League points per match outcome
POINTS = {
    "win": 3,
    "draw": 1,
    "loss": 0,
}

# Awards: value of the 5th-ranked player is the inclusive cutoff, lists never exceed 9
AWARD_CUTOFF_POSITION = 5
AWARD_MAX_ENTRIES = 9

# Slightly above one quarter so exact-quarter participants are left out of rankings
RANKING_MIN_PARTICIPATION = 0.2501

# Numeric aggregate fields that get a ranking
RANKING_FIELDS = (
    "matches", "wins", "losses", "draws", "points",
    "goals", "own_goals", "assists", "goals_conceded",
    "average_goals_conceded", "average_points_per_match", "points_percentage",
    "total_goals_per_week", "total_assists_per_week", "total_points_per_week",
    "total_goals_conceded_per_week", "average_points_per_week", "average_goals_per_week",
    "average_assists_per_week", "average_goals_conceded_per_week",
)

# Fields where lower is better
ASCENDING_FIELDS = frozenset({
    "losses",
    "goals_conceded",
    "average_points_per_match",
    "total_goals_conceded_per_week",
    "average_goals_conceded_per_week",
    "average_goals_conceded",
})

# Teammate / opponent relationships need this many expected points to be listed
INTERACTION_MIN_POINTS_EXPECTED = 39
INTERACTION_TOP = 5

# Best of positions: coefficients per role
POSITION_WEIGHTS = {
    Position.ATK: {"goals": 0.8, "assists": 0.3, "championships": 2, "defense": 6, "points": 0.1},
    Position.MEI: {"goals": 0.5, "assists": 0.6, "championships": 2, "defense": 8, "points": 0.1},
}
DEFENSIVE_WEIGHTS = {
    "defense": 60,
    "goals_and_assists": 0.1,
    "points": 0.1,
    "championships": 2,
    "offset": 25,
}

POSITION_LABELS = {
    Position.ATK: "attackers",
    Position.MEI: "midfielders",
    Position.DEF: "defenders",
    Position.GOL: "goalkeepers",
}


def ranking_min_weeks(total_weeks: int) -> float:
    return total_weeks * RANKING_MIN_PARTICIPATION


def half_season_weeks(total_weeks: int) -> int:
    """Participation required for LVP and best of positions."""
    return math.ceil(total_weeks / 2)


def defender_min_weeks(total_weeks: int) -> float:
    return total_weeks * 0.5
