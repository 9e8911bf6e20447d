"""
Import players and weeks from a JSON export.
Usage: python import_weeks.py <export_json_path> [league_id]

Expected shape:
  { "players": [{id, name, position}], "weeks": [{id, date, teams: [...], matches: [...]}] }
"""

import json
import sys

from database import DB_PATH, db_session, init_db, save_players, save_week
from models import Player, week_from_dict


def import_data(data: dict, db_path=DB_PATH, league_id="default") -> tuple[int, int]:
    players = [Player.from_dict(p) for p in data.get("players") or []]
    weeks = [week_from_dict(w, league_id) for w in data.get("weeks") or []]
    print(f"Found {len(players)} players and {len(weeks)} weeks")

    init_db(db_path)
    with db_session(db_path) as conn:
        save_players(conn, players)
        for week in weeks:
            save_week(conn, week)
            print(f"  Imported week {week.date} ({len(week.teams)} teams)")

    print("Done!")
    return len(players), len(weeks)


def import_file(json_path, db_path=DB_PATH, league_id="default") -> tuple[int, int]:
    with open(json_path) as f:
        data = json.load(f)
    return import_data(data, db_path, league_id)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python import_weeks.py <export_json_path> [league_id]")
        sys.exit(1)
    import_file(sys.argv[1], league_id=sys.argv[2] if len(sys.argv) > 2 else "default")
