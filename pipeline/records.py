# pipeline/records.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class MatchRecord:
    id: int
    match_key: str
    home_team: str
    away_team: str
    match_date: Optional[date] = None
    match_time: Optional[str] = None
    home_odds: Optional[float] = None
    draw_odds: Optional[float] = None
    away_odds: Optional[float] = None
    match_url: Optional[str] = None
    scraped_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, m) -> "MatchRecord":
        return cls(
            id=m.id,
            match_key=m.match_key,
            home_team=m.home_team,
            away_team=m.away_team,
            match_date=m.match_date,
            match_time=m.match_time,
            home_odds=m.home_odds,
            draw_odds=m.draw_odds,
            away_odds=m.away_odds,
            match_url=m.match_url,
            scraped_at=m.scraped_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "match_key": self.match_key,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "match_date": _iso(self.match_date),
            "match_time": self.match_time,
            "home_odds": self.home_odds,
            "draw_odds": self.draw_odds,
            "away_odds": self.away_odds,
            "match_url": self.match_url,
            "scraped_at": _iso(self.scraped_at),
        }


@dataclass(frozen=True)
class StandingRecord:
    id: int
    match_id: int
    team: Optional[str]
    rank: Optional[str]
    mp: Optional[int] = None
    wins: Optional[int] = None
    draws: Optional[int] = None
    losses: Optional[int] = None
    goals: Optional[str] = None
    gd: Optional[int] = None
    pts: Optional[int] = None

    @classmethod
    def from_row(cls, s) -> "StandingRecord":
        return cls(
            id=s.id,
            match_id=s.match_id,
            team=s.team,
            rank=s.rank,
            mp=s.mp,
            wins=s.wins,
            draws=s.draws,
            losses=s.losses,
            goals=s.goals,
            gd=s.gd,
            pts=s.pts,
        )

    def to_dict(self) -> dict:
        return {
            "team": self.team,
            "rank": self.rank,
            "mp": self.mp,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "goals": self.goals,
            "gd": self.gd,
            "pts": self.pts,
        }


@dataclass(frozen=True)
class H2hRecord:
    id: int
    match_id: int
    date: Optional[date]
    home_team: Optional[str]
    away_team: Optional[str]
    score: Optional[str]
    home_odds: Optional[float] = None
    draw_odds: Optional[float] = None
    away_odds: Optional[float] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, h) -> "H2hRecord":
        return cls(
            id=h.id,
            match_id=h.match_id,
            date=h.date,
            home_team=h.home_team,
            away_team=h.away_team,
            score=h.score,
            home_odds=h.home_odds,
            draw_odds=h.draw_odds,
            away_odds=h.away_odds,
            created_at=h.created_at,
        )

    def to_dict(self) -> dict:
        return {
            "date": _iso(self.date),
            "home_team": self.home_team,
            "away_team": self.away_team,
            "score": self.score,
            "home_odds": self.home_odds,
            "draw_odds": self.draw_odds,
            "away_odds": self.away_odds,
        }


@dataclass(frozen=True)
class Snapshot:
    """Everything the selector needs, already loaded into memory."""
    matches: list[MatchRecord]
    standings: list[StandingRecord]
    h2h: list[H2hRecord]


@dataclass
class ValueBetCandidate:
    """
    One row of the value-bets page: the match, its odds-implied win
    probabilities, both teams' standing summary and the H2H record.
    """
    match: MatchRecord
    home_standing: StandingRecord
    away_standing: StandingRecord
    home_win_prob: float
    away_win_prob: float
    home_wins_vs_away: int = 0
    away_wins_vs_home: int = 0
    h2h_history: list[H2hRecord] = field(default_factory=list)

    @property
    def odds_spread(self) -> float:
        return abs(self.match.home_odds - self.match.away_odds)

    def to_dict(self) -> dict:
        m, sh, sa = self.match, self.home_standing, self.away_standing
        return {
            "id": m.id,
            "match_key": m.match_key,
            "match_url": m.match_url,
            "home_team": m.home_team,
            "away_team": m.away_team,
            "match_date": _iso(m.match_date),
            "match_time": m.match_time,
            "home_odds": m.home_odds,
            "home_win_prob": self.home_win_prob,
            "away_odds": m.away_odds,
            "away_win_prob": self.away_win_prob,
            # standings, home side
            "home_rank": sh.rank, "home_mp": sh.mp, "home_wins": sh.wins, "home_draws": sh.draws,
            "home_losses": sh.losses, "home_pts": sh.pts, "home_gd": sh.gd,
            # standings, away side
            "away_rank": sa.rank, "away_mp": sa.mp, "away_wins": sa.wins, "away_draws": sa.draws,
            "away_losses": sa.losses, "away_pts": sa.pts, "away_gd": sa.gd,
            "home_wins_vs_away": self.home_wins_vs_away,
            "away_wins_vs_home": self.away_wins_vs_home,
            "h2h_history": [h.to_dict() for h in self.h2h_history],
        }


def _iso(value):
    return value.isoformat() if value is not None else None
