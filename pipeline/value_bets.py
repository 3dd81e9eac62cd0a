# pipeline/value_bets.py
from __future__ import annotations

import logging
import re
from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from pipeline.records import H2hRecord, MatchRecord, StandingRecord, ValueBetCandidate

LOG = logging.getLogger(__name__)

# ---------------------- CONFIG ----------------------
MIN_ODDS = 1.40          # at least one side must pay more than this
# ----------------------------------------------------

# Rank only has to *start* with digits: "3" and "3rd" pass, "-" and "N/A" don't
_RANK_PREFIX = re.compile(r"^([0-9]+)")
_SCORE = re.compile(r"([0-9]+):([0-9]+)")

# digit runs longer than this count as malformed rank/score text
_MAX_DIGITS = 18


def _to_int(digits: str) -> Optional[int]:
    return int(digits) if len(digits) <= _MAX_DIGITS else None


def numeric_prefix(rank) -> Optional[int]:
    """Leading digit run of a rank value as an int, or None when it has none."""
    if rank is None:
        return None
    m = _RANK_PREFIX.match(str(rank))
    if not m:
        return None
    return _to_int(m.group(1))


def rank_sort_key(rank):
    """Ascending by numeric rank; unranked values go last instead of counting as 0."""
    n = numeric_prefix(rank)
    return (0, n) if n is not None else (1, 0)


def parse_score(score) -> Optional[tuple[int, int]]:
    """'2:1' -> (2, 1). Anything that isn't exactly '<digits>:<digits>' -> None."""
    if not isinstance(score, str):
        return None
    m = _SCORE.fullmatch(score)
    if not m:
        return None
    first, second = _to_int(m.group(1)), _to_int(m.group(2))
    if first is None or second is None:
        return None
    return first, second


def implied_probability(odds: float) -> float:
    """
    Naive odds-implied probability in percent, one decimal, half rounded away
    from zero. The bookmaker margin is left in, so home + draw + away sums to
    more than 100.
    """
    if odds is None or not odds > 0:
        raise ValueError(f"odds must be positive, got {odds!r}")
    pct = Decimal(1) / Decimal(str(odds)) * 100
    return float(pct.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def aggregate_h2h(records: Iterable[H2hRecord]) -> tuple[int, int]:
    """
    Count (home_wins_vs_away, away_wins_vs_home) over past meetings, reading
    the score as home:away of the listed fixture. Draws and unparseable scores
    count for neither side.
    """
    home_wins = away_wins = 0
    for r in records:
        parsed = parse_score(r.score)
        if parsed is None:
            continue
        first, second = parsed
        if first > second:
            home_wins += 1
        elif first < second:
            away_wins += 1
    return home_wins, away_wins


def candidate_sort_key(c: ValueBetCandidate):
    """Best-ranked participant first, then tightest odds, then match id."""
    best_rank = min(numeric_prefix(c.home_standing.rank), numeric_prefix(c.away_standing.rank))
    return best_rank, c.odds_spread, c.match.id


def _priced(odds) -> bool:
    return odds is not None and odds > 0


def newest_first(history: list[H2hRecord]) -> list[H2hRecord]:
    """H2H rows by fixture date, most recent first; undated rows sink to the bottom."""
    return sorted(
        history,
        key=lambda h: (h.date is not None, h.date or date.min, h.id),
        reverse=True,
    )


def _index_standings(standings: Iterable[StandingRecord], match_ids) -> dict:
    """(match_id, team) -> standing. Lowest id wins when a team is listed twice."""
    index = {}
    skipped = 0
    for s in sorted(standings, key=lambda s: s.id):
        if not s.team or s.match_id not in match_ids:
            skipped += 1
            continue
        index.setdefault((s.match_id, s.team), s)
    if skipped:
        LOG.debug("Ignored %d standing rows without a team or a known match", skipped)
    return index


def _exclusion_reason(m: MatchRecord, sh, sa, min_odds: float) -> Optional[str]:
    if not (_priced(m.home_odds) and _priced(m.away_odds)):
        return "missing or non-positive odds"
    if not (m.home_odds > min_odds or m.away_odds > min_odds):
        return f"neither side priced above {min_odds:.2f}"
    if sh is None or sa is None:
        return "no standing for one of the teams"
    if numeric_prefix(sh.rank) is None or numeric_prefix(sa.rank) is None:
        return f"unranked team (ranks {sh.rank!r} / {sa.rank!r})"
    return None


def select_value_bets(
    matches: Iterable[MatchRecord],
    standings: Iterable[StandingRecord],
    h2h_records: Iterable[H2hRecord],
    min_odds: float = MIN_ODDS,
) -> list[ValueBetCandidate]:
    """
    Pick the value-bet candidates out of a snapshot and rank them.

    A match qualifies when either side is priced above ``min_odds`` and both
    teams have a standing whose rank starts with a digit. Rows with bad data
    (no odds, zero/negative odds, unranked teams, unparseable H2H scores) are
    left out and never make the whole call fail. H2H and standing rows that
    point at a match outside the snapshot are ignored.

    Ordering: best rank of the two teams ascending, then |home_odds - away_odds|
    ascending, then match id.
    """
    if matches is None or standings is None or h2h_records is None:
        raise TypeError("select_value_bets needs matches, standings and h2h_records (got None)")

    matches = list(matches)
    by_id = {}
    keys = set()
    for m in matches:
        if m.match_key in keys:
            raise ValueError(f"duplicate match_key in snapshot: {m.match_key!r}")
        keys.add(m.match_key)
        by_id[m.id] = m

    standing_for = _index_standings(standings, by_id)

    h2h_by_match = defaultdict(list)
    orphans = 0
    for h in h2h_records:
        if h.match_id in by_id:
            h2h_by_match[h.match_id].append(h)
        else:
            orphans += 1
    if orphans:
        LOG.debug("Ignored %d H2H rows pointing at unknown matches", orphans)

    candidates = []
    for m in matches:
        sh = standing_for.get((m.id, m.home_team))
        sa = standing_for.get((m.id, m.away_team))

        reason = _exclusion_reason(m, sh, sa, min_odds)
        if reason:
            LOG.debug("Skipping %s: %s", m.match_key, reason)
            continue

        history = h2h_by_match.get(m.id, [])
        home_wins, away_wins = aggregate_h2h(history)
        candidates.append(ValueBetCandidate(
            match=m,
            home_standing=sh,
            away_standing=sa,
            home_win_prob=implied_probability(m.home_odds),
            away_win_prob=implied_probability(m.away_odds),
            home_wins_vs_away=home_wins,
            away_wins_vs_home=away_wins,
            h2h_history=newest_first(history),
        ))

    candidates.sort(key=candidate_sort_key)
    LOG.info("Value bets: %d of %d matches qualify (min odds %.2f)", len(candidates), len(matches), min_odds)
    return candidates
