"""manage.py: loading scraper exports and the DB check."""

import json

import pytest

import manage
from models import db, FootballMatch, H2hMatch, Standing

from conftest import SCRAPED


@pytest.fixture
def export(tmp_path):
    def write(payload):
        path = tmp_path / "export.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)
    return write


def test_load_export_list(app, export):
    loaded, skipped = manage.load_export(export(SCRAPED))
    assert (loaded, skipped) == (3, 0)
    assert FootballMatch.query.count() == 3
    assert H2hMatch.query.count() == 3
    assert Standing.query.count() == 6


def test_load_export_wrapped_in_matches_key(app, export):
    loaded, _ = manage.load_export(export({"matches": SCRAPED[:1]}))
    assert loaded == 1


def test_reimport_replaces_h2h_and_standings(app, export):
    manage.load_export(export(SCRAPED))

    updated = dict(SCRAPED[0], home_odds="1.72", h2h=[{"date": "2025-01-05", "score": "1:1"}])
    manage.load_export(export([updated]))

    m = FootballMatch.query.filter_by(match_key=updated["match_key"]).one()
    assert FootballMatch.query.count() == 3
    assert m.home_odds == 1.72
    assert [h.score for h in m.h2h_matches] == ["1:1"]
    assert len(m.standings) == 2


def test_bad_entries_skipped(app, export):
    rows = SCRAPED[:1] + [{"match_key": "", "home_team": "A", "away_team": "B"}, {"home_team": "A"}]
    loaded, skipped = manage.load_export(export(rows))
    assert (loaded, skipped) == (1, 2)


def test_non_object_entries_skipped(app, export):
    rows = ["just a string", 42, None, [1, 2], SCRAPED[0], dict(SCRAPED[1], h2h=["2:1"]), dict(SCRAPED[2], standings="x")]
    loaded, skipped = manage.load_export(export(rows))
    assert (loaded, skipped) == (1, 6)
    assert FootballMatch.query.count() == 1


def test_unreadable_values_stored_empty(app, export):
    row = {
        "match_key": "k1", "home_team": "A", "away_team": "B",
        "match_date": "next tuesday", "home_odds": "n/a", "away_odds": "2.5",
        "standings": [{"team": "A", "rank": 4, "mp": "?"}],
    }
    manage.load_export(export([row]))

    m = FootballMatch.query.filter_by(match_key="k1").one()
    assert m.match_date is None
    assert m.home_odds is None
    assert m.away_odds == 2.5
    assert m.standings[0].rank == "4"
    assert m.standings[0].mp is None


def test_db_check(seeded):
    stats = manage.db_check()
    assert stats["matches"] == 3
    assert stats["h2h"] == 3
    assert stats["standings"] == 6
    assert str(stats["min_date"]) == "2025-02-28"
    assert str(stats["max_date"]) == "2025-03-01"


def test_show_value_bets(seeded):
    bets = manage.show_value_bets(1.40)
    assert [b.match.home_team for b in bets] == ["Arsenal", "Spurs"]


@pytest.mark.parametrize("argv", [[], ["bogus"], ["load"]])
def test_usage_errors(argv, capsys):
    assert manage.main(argv) == 2
    assert "usage" in capsys.readouterr().err
