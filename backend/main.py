"""
Pelada Stats - FastAPI Backend
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from aggregates import build_aggregates
from awards import month_resume
from database import (
    db_session,
    init_db,
    load_award_state,
    load_players,
    load_week,
    load_weeks,
    save_champion_resolution,
    save_players,
    save_streaks,
    save_week,
)
from models import Player, week_from_dict
from overview import player_overview
from rankings import rank_players
from rules import RANKING_FIELDS
from scoring import best_of_positions
from standings import champion_resolution
from streaks import reconstruct_streaks

logger = logging.getLogger(__name__)

app = FastAPI(title="Pelada Stats", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup():
    init_db()


def _exclusions(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    return [pid.strip() for pid in raw.split(",") if pid.strip()]


# ─── Ingest ───

class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PlayerIn(CamelModel):
    id: str
    name: str
    position: str


class ResultIn(CamelModel):
    home_goals: int = Field(alias="homeGoals", ge=0)
    away_goals: int = Field(alias="awayGoals", ge=0)


class GoalIn(CamelModel):
    player_id: Optional[str] = Field(default=None, alias="playerId")
    own_goal_player_id: Optional[str] = Field(default=None, alias="ownGoalPlayerId")
    goals: int = Field(default=1, ge=1)


class AssistIn(CamelModel):
    player_id: str = Field(alias="playerId")
    assists: int = Field(default=1, ge=1)


class MatchIn(CamelModel):
    id: str
    home_team_id: str = Field(alias="homeTeamId")
    away_team_id: str = Field(alias="awayTeamId")
    result: Optional[ResultIn] = None
    goals: list[GoalIn] = []
    assists: list[AssistIn] = []


class TeamIn(CamelModel):
    id: str
    champion: bool = False
    points: int = 0
    player_ids: list[str] = Field(default=[], alias="playerIds")


class WeekIn(CamelModel):
    id: str
    date: str
    league_id: str = Field(default="default", alias="leagueId")
    teams: list[TeamIn] = []
    matches: list[MatchIn] = []


@app.post("/api/players")
def import_players(players: list[PlayerIn]):
    try:
        parsed = [Player.from_dict(p.model_dump()) for p in players]
    except ValueError as e:
        raise HTTPException(400, str(e))
    with db_session() as conn:
        count = save_players(conn, parsed)
    return {"imported": count}


@app.post("/api/weeks")
def import_week(week: WeekIn):
    parsed = week_from_dict(week.model_dump(by_alias=True))
    with db_session() as conn:
        save_week(conn, parsed)
    return {"id": parsed.id, "status": "ok"}


# ─── Stats ───

@app.get("/api/stats/month-resume/{year}")
@app.get("/api/stats/month-resume/{year}/{month}")
def get_month_resume(
    year: int,
    month: Optional[int] = None,
    league_id: str = "default",
    exclude_player_ids: Optional[str] = Query(default=None, alias="excludePlayerIds"),
):
    with db_session(snapshot=True) as conn:
        players = load_players(conn)
        weeks = load_weeks(conn, league_id, year, month)
    return month_resume(weeks, players, _exclusions(exclude_player_ids)).to_dict()


@app.get("/api/stats/best-of-positions/{year}")
@app.get("/api/stats/best-of-positions/{year}/{month}")
def get_best_of_positions(
    year: int,
    month: Optional[int] = None,
    league_id: str = "default",
    exclude_player_ids: Optional[str] = Query(default=None, alias="excludePlayerIds"),
):
    with db_session(snapshot=True) as conn:
        players = load_players(conn)
        weeks = load_weeks(conn, league_id, year, month)
    return best_of_positions(weeks, players, _exclusions(exclude_player_ids)).to_dict()


@app.get("/api/stats/rankings/{year}")
@app.get("/api/stats/rankings/{year}/{month}")
def get_rankings(
    year: int,
    month: Optional[int] = None,
    field: str = "points",
    league_id: str = "default",
    exclude_player_ids: Optional[str] = Query(default=None, alias="excludePlayerIds"),
):
    if field not in RANKING_FIELDS:
        raise HTTPException(400, f"Unknown ranking field: {field}")

    with db_session(snapshot=True) as conn:
        players = load_players(conn)
        weeks = load_weeks(conn, league_id, year, month)
    aggregates = build_aggregates(weeks, players, _exclusions(exclude_player_ids))
    return [e.to_dict() for e in rank_players(aggregates.values(), field, len(weeks))]


@app.get("/api/players/{player_id}/overview")
def get_player_overview(player_id: str, year: Optional[int] = None, league_id: str = "default"):
    with db_session(snapshot=True) as conn:
        players = load_players(conn)
        weeks = load_weeks(conn, league_id, year)
    overview = player_overview(weeks, players, player_id)
    if not overview:
        raise HTTPException(404, "Player has no recorded matches")
    return overview.to_dict()


# ─── Champions & Streaks ───

@app.post("/api/weeks/{week_id}/champion")
def recompute_champion(week_id: str):
    with db_session(snapshot=True) as conn:
        week = load_week(conn, week_id)
        if not week:
            raise HTTPException(404, "Week not found")
        resolution = champion_resolution(week)
        save_champion_resolution(conn, resolution)
    return resolution.to_dict()


@app.get("/api/streaks")
def get_streaks(league_id: str = "default"):
    with db_session(snapshot=True) as conn:
        return load_award_state(conn, league_id)


class BackfillRequest(BaseModel):
    league_id: str = "default"


@app.post("/api/streaks/backfill")
def backfill_streaks(req: BackfillRequest):
    with db_session(snapshot=True) as conn:
        weeks = load_weeks(conn, req.league_id, descending=True)
        streaks = reconstruct_streaks(weeks)
        state = save_streaks(conn, req.league_id, streaks)
    logger.info("Backfilled streaks for league %s over %d weeks", req.league_id, len(weeks))
    return state
