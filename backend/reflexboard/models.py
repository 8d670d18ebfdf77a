from datetime import datetime, timezone

from reflexboard import db


def utcnow():
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


NAME_COLUMN_LENGTH = 20


class Score(db.Model):
    __tablename__ = 'score'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(NAME_COLUMN_LENGTH), nullable=False)
    reaction_time = db.Column(db.Integer, nullable=False, index=True)
    timestamp = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)