"""
Database layer - SQLite storage for weeks, teams, matches and players.
"""

import calendar
import json
import logging
import sqlite3
import os
from contextlib import contextmanager
from typing import Iterable, Optional

from dedupe import week_matches
from models import Assist, Goal, Match, MatchResult, Player, Position, Team, Week, parse_date

DB_PATH = os.environ.get("DB_PATH", "/app/data/pelada.db")

logger = logging.getLogger(__name__)


def get_db(db_path: Optional[str] = None):
    conn = sqlite3.connect(db_path or DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def db_session(db_path: Optional[str] = None, snapshot: bool = False):
    """
    snapshot=True opens the transaction up front, so every SELECT in the block
    reads the same committed state and writers wait until the block ends.
    """
    conn = get_db(db_path)
    try:
        if snapshot:
            conn.execute("BEGIN")
        yield conn
        conn.commit()
    finally:
        conn.close()


def init_db(db_path: Optional[str] = None):
    with db_session(db_path) as conn:
        conn.executescript("""
        CREATE TABLE IF NOT EXISTS players (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            position TEXT NOT NULL CHECK(position IN ('ATK','MEI','DEF','GOL')),
            is_champion INTEGER DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS weeks (
            id TEXT PRIMARY KEY,
            league_id TEXT NOT NULL DEFAULT 'default',
            date TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS teams (
            week_id TEXT NOT NULL REFERENCES weeks(id),
            id TEXT NOT NULL,
            champion INTEGER DEFAULT 0,
            points INTEGER DEFAULT 0,
            order_index INTEGER DEFAULT 0,
            PRIMARY KEY (week_id, id)
        );

        CREATE TABLE IF NOT EXISTS team_players (
            week_id TEXT NOT NULL,
            team_id TEXT NOT NULL,
            player_id TEXT NOT NULL REFERENCES players(id),
            order_index INTEGER DEFAULT 0,
            PRIMARY KEY (week_id, team_id, player_id)
        );

        CREATE TABLE IF NOT EXISTS matches (
            week_id TEXT NOT NULL REFERENCES weeks(id),
            id TEXT NOT NULL,
            home_team_id TEXT NOT NULL,
            away_team_id TEXT NOT NULL,
            home_goals INTEGER,
            away_goals INTEGER,
            order_index INTEGER DEFAULT 0,
            PRIMARY KEY (week_id, id)
        );

        CREATE TABLE IF NOT EXISTS goals (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            week_id TEXT NOT NULL,
            match_id TEXT NOT NULL,
            player_id TEXT,
            own_goal_player_id TEXT,
            goals INTEGER NOT NULL DEFAULT 1
        );

        CREATE TABLE IF NOT EXISTS assists (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            week_id TEXT NOT NULL,
            match_id TEXT NOT NULL,
            player_id TEXT NOT NULL,
            assists INTEGER NOT NULL DEFAULT 1
        );

        CREATE TABLE IF NOT EXISTS award_state (
            league_id TEXT PRIMARY KEY,
            data TEXT NOT NULL DEFAULT '{}',
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """)


# ─── Writes ───

def save_players(conn, players: Iterable[Player]) -> int:
    count = 0
    for p in players:
        conn.execute("""
            INSERT INTO players (id, name, position) VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET name = excluded.name, position = excluded.position
        """, (p.id, p.name, p.position.value))
        count += 1
    return count


def save_week(conn, week: Week):
    """Insert or fully replace a week with its teams, rosters and matches."""
    for table in ("goals", "assists", "matches", "team_players", "teams"):
        conn.execute(f"DELETE FROM {table} WHERE week_id = ?", (week.id,))

    conn.execute(
        "INSERT OR REPLACE INTO weeks (id, league_id, date) VALUES (?, ?, ?)",
        (week.id, week.league_id, week.date.isoformat()),
    )

    for t_idx, team in enumerate(week.teams):
        conn.execute(
            "INSERT INTO teams (week_id, id, champion, points, order_index) VALUES (?,?,?,?,?)",
            (week.id, team.id, int(team.champion), team.points, t_idx),
        )
        for p_idx, pid in enumerate(team.player_ids):
            conn.execute(
                "INSERT OR IGNORE INTO team_players (week_id, team_id, player_id, order_index) VALUES (?,?,?,?)",
                (week.id, team.id, pid, p_idx),
            )

    for m_idx, match in enumerate(week_matches(week)):
        conn.execute("""
            INSERT INTO matches (week_id, id, home_team_id, away_team_id, home_goals, away_goals, order_index)
            VALUES (?,?,?,?,?,?,?)
        """, (
            week.id, match.id, match.home_team_id, match.away_team_id,
            match.result.home_goals if match.result else None,
            match.result.away_goals if match.result else None,
            m_idx,
        ))
        for g in match.goals:
            conn.execute(
                "INSERT INTO goals (week_id, match_id, player_id, own_goal_player_id, goals) VALUES (?,?,?,?,?)",
                (week.id, match.id, g.player_id, g.own_goal_player_id, g.goals),
            )
        for a in match.assists:
            conn.execute(
                "INSERT INTO assists (week_id, match_id, player_id, assists) VALUES (?,?,?,?)",
                (week.id, match.id, a.player_id, a.assists),
            )


def save_champion_resolution(conn, resolution):
    """Persist team points/champion flags and every rostered player's isChampion flag."""
    for t in resolution.teams:
        conn.execute(
            "UPDATE teams SET points = ?, champion = ? WHERE week_id = ? AND id = ?",
            (t.points, int(t.champion), resolution.week_id, t.team_id),
        )
    for p in resolution.players:
        conn.execute(
            "UPDATE players SET is_champion = ? WHERE id = ?",
            (int(p.is_champion), p.player_id),
        )
    logger.info("Saved champion %s for week %s", resolution.team_id, resolution.week_id)


def load_award_state(conn, league_id: str) -> dict:
    row = conn.execute("SELECT data FROM award_state WHERE league_id = ?", (league_id,)).fetchone()
    return json.loads(row["data"]) if row else {}


def save_streaks(conn, league_id: str, streaks) -> dict:
    """Merge week streak lists into the stored award state; other keys are kept."""
    state = load_award_state(conn, league_id)
    state.update(streaks.to_dict())
    conn.execute("""
        INSERT INTO award_state (league_id, data, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
        ON CONFLICT(league_id) DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at
    """, (league_id, json.dumps(state)))
    return state


# ─── Reads ───

def load_players(conn) -> dict[str, Player]:
    rows = conn.execute("SELECT id, name, position FROM players").fetchall()
    return {r["id"]: Player(id=r["id"], name=r["name"], position=Position(r["position"])) for r in rows}


def period_bounds(year: int, month: Optional[int] = None) -> tuple[str, str]:
    if month:
        last = calendar.monthrange(year, month)[1]
        return f"{year:04d}-{month:02d}-01", f"{year:04d}-{month:02d}-{last:02d}"
    return f"{year:04d}-01-01", f"{year:04d}-12-31"


def _build_week(conn, row) -> Week:
    week_id = row["id"]

    goals: dict[str, list[Goal]] = {}
    for g in conn.execute("SELECT * FROM goals WHERE week_id = ? ORDER BY id", (week_id,)):
        goals.setdefault(g["match_id"], []).append(
            Goal(goals=g["goals"], player_id=g["player_id"], own_goal_player_id=g["own_goal_player_id"])
        )

    assists: dict[str, list[Assist]] = {}
    for a in conn.execute("SELECT * FROM assists WHERE week_id = ? ORDER BY id", (week_id,)):
        assists.setdefault(a["match_id"], []).append(Assist(player_id=a["player_id"], assists=a["assists"]))

    matches = []
    for m in conn.execute("SELECT * FROM matches WHERE week_id = ? ORDER BY order_index", (week_id,)):
        result = None
        if m["home_goals"] is not None and m["away_goals"] is not None:
            result = MatchResult(m["home_goals"], m["away_goals"])
        matches.append(Match(
            id=m["id"],
            home_team_id=m["home_team_id"],
            away_team_id=m["away_team_id"],
            result=result,
            goals=tuple(goals.get(m["id"], [])),
            assists=tuple(assists.get(m["id"], [])),
        ))

    rosters: dict[str, list[str]] = {}
    for tp in conn.execute(
        "SELECT team_id, player_id FROM team_players WHERE week_id = ? ORDER BY order_index", (week_id,)
    ):
        rosters.setdefault(tp["team_id"], []).append(tp["player_id"])

    teams = []
    for t in conn.execute("SELECT * FROM teams WHERE week_id = ? ORDER BY order_index", (week_id,)):
        teams.append(Team(
            id=t["id"],
            player_ids=tuple(rosters.get(t["id"], [])),
            champion=bool(t["champion"]),
            points=t["points"] or 0,
            matches_home=tuple(m for m in matches if m.home_team_id == t["id"]),
            matches_away=tuple(m for m in matches if m.away_team_id == t["id"]),
        ))

    return Week(id=week_id, date=parse_date(row["date"]), teams=tuple(teams), league_id=row["league_id"])


def load_weeks(conn, league_id: str = "default", year: Optional[int] = None,
               month: Optional[int] = None, descending: bool = False) -> list[Week]:
    q = "SELECT * FROM weeks WHERE league_id = ?"
    params: list = [league_id]
    if year:
        start, end = period_bounds(year, month)
        q += " AND date >= ? AND date <= ?"
        params += [start, end]
    q += " ORDER BY date DESC" if descending else " ORDER BY date ASC"
    rows = conn.execute(q, params).fetchall()
    return [_build_week(conn, r) for r in rows]


def load_week(conn, week_id: str) -> Optional[Week]:
    row = conn.execute("SELECT * FROM weeks WHERE id = ?", (week_id,)).fetchone()
    return _build_week(conn, row) if row else None
