"""
Fetch players and weeks from the dashboard API and store them locally.
Run via cron after match days.
"""

import os
import sys

import requests

from database import DB_PATH
from import_weeks import import_data

API_URL = os.environ.get("STATS_API_URL", "http://localhost:3333")


def fetch_and_import(league_id="default", year=None, db_path=DB_PATH, api_url=API_URL):
    """Pull players and weeks for a league (optionally one year) and import them."""
    headers = {}
    token = os.environ.get("STATS_API_TOKEN", "")
    if token:
        headers["Authorization"] = f"Bearer {token}"

    params = {"year": year} if year else {}
    try:
        players = requests.get(
            f"{api_url}/futs/{league_id}/players", headers=headers, timeout=15
        )
        players.raise_for_status()
        weeks = requests.get(
            f"{api_url}/futs/{league_id}/weeks", params=params, headers=headers, timeout=15
        )
        weeks.raise_for_status()
    except requests.RequestException as e:
        print(f"API error: {e}")
        return 0

    data = {"players": players.json(), "weeks": weeks.json()}
    print(f"Fetched {len(data['weeks'])} weeks from {api_url}")
    _, imported = import_data(data, db_path, league_id)
    return imported


if __name__ == "__main__":
    fetch_and_import(
        league_id=sys.argv[1] if len(sys.argv) > 1 else "default",
        year=int(sys.argv[2]) if len(sys.argv) > 2 else None,
    )
