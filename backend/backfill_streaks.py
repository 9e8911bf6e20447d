"""
Rebuild the current week streaks (champion / striker / top assist) of a league.
Usage: python backfill_streaks.py [league_id]

Weeks are read newest first; the result is merged into the stored award state so
monthly fields are preserved.
"""

import json
import sys

from database import DB_PATH, db_session, init_db, load_players, load_weeks, save_streaks
from streaks import reconstruct_streaks


def run(league_id="default", db_path=DB_PATH):
    init_db(db_path)
    with db_session(db_path, snapshot=True) as conn:
        players = load_players(conn)
        weeks = load_weeks(conn, league_id, descending=True)
        print(f"Found {len(weeks)} week(s) - iterating most recent -> oldest")

        streaks = reconstruct_streaks(weeks)
        save_streaks(conn, league_id, streaks)

    print("\n--- Results ---")
    for key, entries in streaks.to_dict().items():
        named = [
            {**e, "name": players[e["playerId"]].name if e["playerId"] in players else None}
            for e in entries
        ]
        print(f"{key}: {json.dumps(named, indent=2, ensure_ascii=False)}")
    print(f"\nSaved streaks for league {league_id}")
    return streaks


if __name__ == "__main__":
    run(sys.argv[1] if len(sys.argv) > 1 else "default")
