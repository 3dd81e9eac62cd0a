import json
import logging
import sys
from datetime import date, datetime

from sqlalchemy import func

from app import create_app, current_value_bets
from models import db, FootballMatch, H2hMatch, Standing

LOG = logging.getLogger("manage")

USAGE = "usage: python manage.py {init-db | load <export.json> | check | value-bets}"


def _to_float(val):
    try:
        return float(val) if val is not None and val != "" else None
    except (TypeError, ValueError):
        return None

def _to_int(val):
    try:
        return int(val) if val is not None and val != "" else None
    except (TypeError, ValueError):
        return None

def _to_date(val):
    if not val:
        return None
    if isinstance(val, date):
        return val
    try:
        return date.fromisoformat(str(val)[:10])
    except ValueError:
        LOG.warning("Unreadable date %r, stored as empty", val)
        return None

def _to_datetime(val):
    if not val:
        return None
    try:
        return datetime.fromisoformat(str(val))
    except ValueError:
        LOG.warning("Unreadable timestamp %r, stored as empty", val)
        return None

def _to_text(val):
    return None if val is None else str(val)


def upsert_match(payload):
    """
    Insert or update one scraped match keyed by match_key. Its H2H rows and
    standings are replaced wholesale with the ones in the payload.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"match entry must be an object, got {type(payload).__name__}")
    for nested in ("h2h", "standings"):
        rows = payload.get(nested) or []
        if not isinstance(rows, list) or any(not isinstance(row, dict) for row in rows):
            raise ValueError(f"{nested} must be a list of objects: {payload.get('match_key')!r}")

    key = payload.get("match_key")
    home, away = payload.get("home_team"), payload.get("away_team")
    if not key or not home or not away:
        raise ValueError(f"match needs match_key, home_team and away_team: {payload!r:.120}")

    m = FootballMatch.query.filter_by(match_key=key).first()
    if not m:
        m = FootballMatch(match_key=key)
        db.session.add(m)

    m.home_team = home
    m.away_team = away
    m.match_date = _to_date(payload.get("match_date"))
    m.match_time = _to_text(payload.get("match_time"))
    m.home_odds = _to_float(payload.get("home_odds"))
    m.draw_odds = _to_float(payload.get("draw_odds"))
    m.away_odds = _to_float(payload.get("away_odds"))
    m.match_url = payload.get("match_url")
    m.scraped_at = _to_datetime(payload.get("scraped_at"))

    m.h2h_matches = [
        H2hMatch(
            date=_to_date(h.get("date")),
            home_team=h.get("home_team"),
            away_team=h.get("away_team"),
            score=_to_text(h.get("score")),
            home_odds=_to_float(h.get("home_odds")),
            draw_odds=_to_float(h.get("draw_odds")),
            away_odds=_to_float(h.get("away_odds")),
        )
        for h in payload.get("h2h") or []
    ]
    m.standings = [
        Standing(
            team=s.get("team"),
            rank=_to_text(s.get("rank")),
            mp=_to_int(s.get("mp")),
            wins=_to_int(s.get("wins")),
            draws=_to_int(s.get("draws")),
            losses=_to_int(s.get("losses")),
            goals=_to_text(s.get("goals")),
            gd=_to_int(s.get("gd")),
            pts=_to_int(s.get("pts")),
        )
        for s in payload.get("standings") or []
    ]
    return m


def load_export(path):
    """Import a scraper export. Returns (loaded, skipped)."""
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    rows = data.get("matches", []) if isinstance(data, dict) else data

    loaded = skipped = 0
    for payload in rows:
        try:
            upsert_match(payload)
            db.session.flush()
            loaded += 1
        except ValueError as e:
            LOG.warning("Skipping match: %s", e)
            skipped += 1

    db.session.commit()
    LOG.info("Loaded %d matches from %s (%d skipped)", loaded, path, skipped)
    return loaded, skipped


def db_check():
    """Row counts and the scraped date range."""
    total, min_dt, max_dt = db.session.query(
        func.count(FootballMatch.id), func.min(FootballMatch.match_date), func.max(FootballMatch.match_date)
    ).one()
    h2h = db.session.query(func.count(H2hMatch.id)).scalar()
    standings = db.session.query(func.count(Standing.id)).scalar()
    LOG.info("DB CHECK: matches=%s min=%s max=%s h2h=%s standings=%s", total, min_dt, max_dt, h2h, standings)
    return {"matches": total, "min_date": min_dt, "max_date": max_dt, "h2h": h2h, "standings": standings}


def show_value_bets(min_odds):
    bets = current_value_bets(min_odds)
    for b in bets:
        LOG.info(
            "%s %s v %s | %.2f (%.1f%%) / %.2f (%.1f%%) | ranks %s/%s | h2h %d-%d",
            b.match.match_date, b.match.home_team, b.match.away_team,
            b.match.home_odds, b.home_win_prob, b.match.away_odds, b.away_win_prob,
            b.home_standing.rank, b.away_standing.rank, b.home_wins_vs_away, b.away_wins_vs_home,
        )
    return bets


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    cmd = argv[0] if argv else None
    if cmd not in ("init-db", "load", "check", "value-bets") or (cmd == "load" and len(argv) < 2):
        print(USAGE, file=sys.stderr)
        return 2

    app = create_app()
    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    with app.app_context():
        db.create_all()
        if cmd == "load":
            load_export(argv[1])
        elif cmd == "check":
            db_check()
        elif cmd == "value-bets":
            show_value_bets(app.config["VALUE_BET_MIN_ODDS"])
        else:
            LOG.info("Tables ready")
    return 0


if __name__ == "__main__":
    sys.exit(main())
