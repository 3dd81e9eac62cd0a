from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

class FootballMatch(db.Model):
    __tablename__ = "matches"

    id = db.Column(db.Integer, primary_key=True)
    match_key = db.Column(db.String(255), unique=True, nullable=False)  # scraper's own key
    home_team = db.Column(db.String(128), nullable=False)
    away_team = db.Column(db.String(128), nullable=False)
    match_date = db.Column(db.Date, index=True)
    match_time = db.Column(db.String(8))  # "HH:MM" local kickoff
    home_odds = db.Column(db.Float)
    draw_odds = db.Column(db.Float)
    away_odds = db.Column(db.Float)
    match_url = db.Column(db.String(512))
    scraped_at = db.Column(db.DateTime)

    h2h_matches = db.relationship("H2hMatch", backref="match", cascade="all, delete-orphan")
    standings = db.relationship("Standing", backref="match", cascade="all, delete-orphan")

class H2hMatch(db.Model):
    __tablename__ = "h2h_matches"

    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(db.Integer, db.ForeignKey("matches.id"), index=True, nullable=False)
    date = db.Column(db.Date)
    home_team = db.Column(db.String(128))
    away_team = db.Column(db.String(128))
    score = db.Column(db.String(16))  # "2:1"; anything else means unknown
    home_odds = db.Column(db.Float)
    draw_odds = db.Column(db.Float)
    away_odds = db.Column(db.Float)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

class Standing(db.Model):
    __tablename__ = "standings"

    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(db.Integer, db.ForeignKey("matches.id"), index=True, nullable=False)
    team = db.Column(db.String(128))
    rank = db.Column(db.String(16))  # may hold "-" or "N/A" for unranked teams
    mp = db.Column(db.Integer)
    wins = db.Column(db.Integer)
    draws = db.Column(db.Integer)
    losses = db.Column(db.Integer)
    goals = db.Column(db.String(16))  # "GF:GA"
    gd = db.Column(db.Integer)
    pts = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
