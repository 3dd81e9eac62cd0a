# pipeline/snapshot.py
from __future__ import annotations

import logging
from collections import defaultdict

from models import FootballMatch, H2hMatch, Standing
from pipeline.records import H2hRecord, MatchRecord, Snapshot, StandingRecord
from pipeline.value_bets import rank_sort_key

LOG = logging.getLogger(__name__)


def load_snapshot(session) -> Snapshot:
    """Read all three tables into memory as typed records for the selector."""
    matches = session.query(FootballMatch).order_by(FootballMatch.id.asc()).all()
    standings = session.query(Standing).order_by(Standing.id.asc()).all()
    h2h = session.query(H2hMatch).order_by(H2hMatch.id.asc()).all()

    LOG.debug("Snapshot: %d matches, %d standings, %d h2h rows", len(matches), len(standings), len(h2h))
    return Snapshot(
        matches=[MatchRecord.from_row(m) for m in matches],
        standings=[StandingRecord.from_row(s) for s in standings],
        h2h=[H2hRecord.from_row(h) for h in h2h],
    )


def load_dashboard(session):
    """
    Main dashboard read path, no filtering or derived fields:
      - matches by date, then kickoff time
      - H2H rows for those matches, newest first
      - standings by numeric rank, unranked teams last
    Returns (matches, h2h_by_match, standings_by_match).
    """
    matches = (
        session.query(FootballMatch)
        .order_by(
            FootballMatch.match_date.asc().nullslast(),
            FootballMatch.match_time.asc().nullslast(),
            FootballMatch.id.asc(),
        )
        .all()
    )

    # Fetch H2H for those matches at once
    match_ids = [m.id for m in matches]
    h2h = (
        session.query(H2hMatch)
        .filter(H2hMatch.match_id.in_(match_ids))
        .order_by(H2hMatch.date.desc().nullslast(), H2hMatch.id.desc())
        .all()
    )
    standings = session.query(Standing).filter(Standing.match_id.in_(match_ids)).all()
    # the store keeps rank as text, so order it here rather than in SQL
    standings.sort(key=lambda s: (rank_sort_key(s.rank), s.id))

    h2h_by_match = defaultdict(list)
    for h in h2h:
        h2h_by_match[h.match_id].append(H2hRecord.from_row(h))

    standings_by_match = defaultdict(list)
    for s in standings:
        standings_by_match[s.match_id].append(StandingRecord.from_row(s))

    return (
        [MatchRecord.from_row(m) for m in matches],
        dict(h2h_by_match),
        dict(standings_by_match),
    )
