"""Score stores.

A store only needs three operations: insert one entry and hand back its id,
list the fastest entries, and count the entries strictly faster than a
given time. Ordering is ascending reaction time, then submission time, then
id, so equal times keep the order they were submitted in.
"""

import itertools
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from reflexboard.models import NAME_COLUMN_LENGTH, Score, as_utc

from .errors import StoreError


@dataclass(frozen=True)
class ScoreEntry:
    name: str
    reaction_time: int
    timestamp: datetime
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'reactionTime': self.reaction_time,
            'timestamp': self.timestamp.isoformat(),
        }


class MemoryScoreStore:
    """Process-local store; scores vanish with the process."""

    max_name_length = None

    def __init__(self):
        self._entries: List[ScoreEntry] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def insert(self, entry: ScoreEntry) -> str:
        with self._lock:
            entry_id = str(next(self._ids))
            self._entries.append(ScoreEntry(entry.name, entry.reaction_time, entry.timestamp, entry_id))
            return entry_id

    def find_top(self, limit: int) -> List[ScoreEntry]:
        with self._lock:
            ordered = sorted(self._entries, key=lambda e: (e.reaction_time, e.timestamp, int(e.id)))
        return ordered[:limit]

    def count_below(self, reaction_time: int) -> int:
        with self._lock:
            return sum(1 for e in self._entries if e.reaction_time < reaction_time)

    def __len__(self):
        return len(self._entries)


class SqlAlchemyScoreStore:
    """Store backed by the ``score`` table through Flask-SQLAlchemy."""

    max_name_length = NAME_COLUMN_LENGTH

    def __init__(self, db):
        self.db = db

    def insert(self, entry: ScoreEntry) -> str:
        row = Score(name=entry.name, reaction_time=entry.reaction_time, timestamp=entry.timestamp)
        try:
            self.db.session.add(row)
            self.db.session.flush()
            entry_id = str(row.id)
            self.db.session.commit()
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise StoreError('Failed to insert score') from exc
        return entry_id

    def find_top(self, limit: int) -> List[ScoreEntry]:
        try:
            rows = (
                Score.query
                .order_by(Score.reaction_time.asc(), Score.timestamp.asc(), Score.id.asc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise StoreError('Failed to query scores') from exc
        return [ScoreEntry(r.name, r.reaction_time, as_utc(r.timestamp), str(r.id)) for r in rows]

    def count_below(self, reaction_time: int) -> int:
        try:
            return Score.query.filter(Score.reaction_time < reaction_time).count()
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise StoreError('Failed to count scores') from exc
