import logging
import math

from flask import Flask, render_template, jsonify, request, abort

from models import db, FootballMatch
from config import Config
from pipeline.records import MatchRecord, H2hRecord, StandingRecord
from pipeline.snapshot import load_snapshot, load_dashboard
from pipeline.value_bets import select_value_bets, implied_probability, newest_first, rank_sort_key

LOG = logging.getLogger("app")


def current_value_bets(min_odds):
    snap = load_snapshot(db.session)
    return select_value_bets(snap.matches, snap.standings, snap.h2h, min_odds=min_odds)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    db.init_app(app)

    @app.route("/")
    def index():
        matches, h2h_by_match, standings_by_match = load_dashboard(db.session)
        return render_template(
            "dashboard.html",
            matches=matches, h2h_by_match=h2h_by_match, standings_by_match=standings_by_match,
        )

    @app.route("/value-bets")
    def value_bets():
        min_odds = app.config["VALUE_BET_MIN_ODDS"]
        return render_template("value_bets.html", bets=current_value_bets(min_odds), min_odds=min_odds)

    @app.route("/matches/<int:match_id>")
    def match_page(match_id):
        m = db.session.get(FootballMatch, match_id)
        if not m:
            abort(404)

        match = MatchRecord.from_row(m)
        standings = sorted(
            (StandingRecord.from_row(s) for s in m.standings),
            key=lambda s: (rank_sort_key(s.rank), s.id),
        )
        h2h = newest_first([H2hRecord.from_row(h) for h in m.h2h_matches])

        # Implied probabilities only where a usable price exists
        probs = {
            side: implied_probability(odds)
            for side, odds in (("home", match.home_odds), ("draw", match.draw_odds), ("away", match.away_odds))
            if odds is not None and odds > 0
        }

        return render_template("match.html", match=match, standings=standings, h2h=h2h, probs=probs)

    @app.route("/api/matches")
    def api_matches():
        matches, h2h_by_match, standings_by_match = load_dashboard(db.session)

        out = []
        for m in matches:
            row = m.to_dict()
            row["h2h"] = [h.to_dict() for h in h2h_by_match.get(m.id, [])]
            row["standings"] = [s.to_dict() for s in standings_by_match.get(m.id, [])]
            out.append(row)
        return jsonify(out)

    @app.route("/api/value-bets")
    def api_value_bets():
        raw = request.args.get("min_odds")
        if raw is None:
            min_odds = app.config["VALUE_BET_MIN_ODDS"]
        else:
            try:
                min_odds = float(raw)
            except ValueError:
                min_odds = None
            if min_odds is None or not math.isfinite(min_odds):
                LOG.warning("Rejected min_odds=%r", raw)
                abort(400, description=f"min_odds must be a number, got {raw!r}")

        return jsonify([c.to_dict() for c in current_value_bets(min_odds)])

    @app.errorhandler(400)
    @app.errorhandler(404)
    def http_error(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": e.description}), e.code
        return e

    return app


if __name__ == "__main__":
    app = create_app()
    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    with app.app_context():
        db.create_all()
    app.run(debug=True)
