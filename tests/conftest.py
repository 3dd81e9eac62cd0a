import pytest

from app import create_app
from config import TestConfig
from manage import upsert_match
from models import db


SCRAPED = [
    {
        "match_key": "arsenal-chelsea-20250301",
        "home_team": "Arsenal",
        "away_team": "Chelsea",
        "match_date": "2025-03-01",
        "match_time": "17:30",
        "home_odds": 1.55, "draw_odds": 4.10, "away_odds": 1.30,
        "match_url": "https://example.test/m/1",
        "scraped_at": "2025-02-27T09:00:00",
        "h2h": [
            {"date": "2023-10-21", "home_team": "Chelsea", "away_team": "Arsenal", "score": "2:1"},
            {"date": "2024-04-23", "home_team": "Arsenal", "away_team": "Chelsea", "score": "0:3"},
            {"date": "2022-11-06", "home_team": "Chelsea", "away_team": "Arsenal", "score": "abc"},
        ],
        "standings": [
            {"team": "Arsenal", "rank": "2", "mp": 26, "wins": 16, "draws": 7, "losses": 3,
             "goals": "50:21", "gd": 29, "pts": 55},
            {"team": "Chelsea", "rank": "5", "mp": 26, "wins": 13, "draws": 6, "losses": 7,
             "goals": "48:33", "gd": 15, "pts": 45},
        ],
    },
    {
        "match_key": "leeds-burnley-20250228",
        "home_team": "Leeds",
        "away_team": "Burnley",
        "match_date": "2025-02-28",
        "match_time": "20:00",
        "home_odds": 2.10, "draw_odds": 3.20, "away_odds": 3.60,
        "h2h": [],
        "standings": [
            {"team": "Leeds", "rank": "", "pts": 60},
            {"team": "Burnley", "rank": "3", "pts": 58},
        ],
    },
    {
        "match_key": "spurs-villa-20250301",
        "home_team": "Spurs",
        "away_team": "Villa",
        "match_date": "2025-03-01",
        "match_time": "15:00",
        "home_odds": 2.40, "draw_odds": 3.40, "away_odds": 2.90,
        "h2h": [],
        "standings": [
            {"team": "Spurs", "rank": "10", "pts": 30},
            {"team": "Villa", "rank": "7", "pts": 41},
        ],
    },
]


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seeded(app):
    """Three scraped matches; only Arsenal v Chelsea and Spurs v Villa are value bets."""
    rows = [upsert_match(payload) for payload in SCRAPED]
    db.session.commit()
    return {m.match_key: m.id for m in rows}
