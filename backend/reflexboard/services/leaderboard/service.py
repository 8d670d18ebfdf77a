import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .errors import ValidationError
from .store import ScoreEntry


logger = logging.getLogger(__name__)

DEFAULT_NAME = 'Anonymous'


def round_half_up(value: float) -> int:
    # round() would send 180.5 to 180
    return int(math.floor(value + 0.5))


def normalize_name(name: Any, max_length: int = 20) -> str:
    if not isinstance(name, str) or not name.strip():
        return DEFAULT_NAME
    return name.strip()[:max_length]


@dataclass(frozen=True)
class SubmitResult:
    id: str
    rank: int
    entry: ScoreEntry

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': True,
            'id': self.id,
            'rank': self.rank,
            'entry': self.entry.to_dict(),
        }


class LeaderboardService:
    """Submit and rank reaction times against a score store.

    Stateless apart from its configuration; every call is an independent
    unit of work. The rank returned by submit_score is computed with a
    count after the insert, without a transaction spanning both, so under
    concurrent submissions it is best-effort.
    """

    def __init__(
        self,
        store,
        min_reaction_ms: int = 100,
        max_reaction_ms: int = 2000,
        name_max_length: int = 20,
        default_limit: int = 20,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.min_reaction_ms = min_reaction_ms
        self.max_reaction_ms = max_reaction_ms
        self.name_max_length = name_max_length
        self.default_limit = default_limit
        self._now = now

    @classmethod
    def from_config(cls, store, config) -> 'LeaderboardService':
        name_max_length = int(config.get('NAME_MAX_LENGTH', 20))
        # Names never outgrow the store's column
        column_limit = getattr(store, 'max_name_length', None)
        if column_limit is not None:
            name_max_length = min(name_max_length, column_limit)
        return cls(
            store,
            min_reaction_ms=int(config.get('MIN_REACTION_MS', 100)),
            max_reaction_ms=int(config.get('MAX_REACTION_MS', 2000)),
            name_max_length=name_max_length,
            default_limit=int(config.get('LEADERBOARD_LIMIT', 20)),
        )

    def validate_reaction_time(self, reaction_time: Any) -> int:
        valid = (
            isinstance(reaction_time, (int, float))
            and not isinstance(reaction_time, bool)
            and math.isfinite(reaction_time)
            and self.min_reaction_ms <= reaction_time <= self.max_reaction_ms
        )
        if not valid:
            raise ValidationError(
                f'Invalid reaction time. Must be between {self.min_reaction_ms}ms and {self.max_reaction_ms}ms.'
            )
        return round_half_up(reaction_time)

    def submit_score(self, name: Any, reaction_time: Any) -> SubmitResult:
        """Validate, store and rank a new score.

        Raises ValidationError before touching the store, StoreError if the
        store fails.
        """
        rounded = self.validate_reaction_time(reaction_time)
        entry = ScoreEntry(
            name=normalize_name(name, self.name_max_length),
            reaction_time=rounded,
            timestamp=self._now(),
        )
        entry_id = self.store.insert(entry)
        entry = replace(entry, id=entry_id)
        rank = self.store.count_below(entry.reaction_time) + 1
        logger.info(f"[score-submit] id={entry_id} name={entry.name!r} reaction_time={rounded} rank={rank}")
        return SubmitResult(id=entry_id, rank=rank, entry=entry)

    def list_top_scores(self, limit: Optional[int] = None) -> List[ScoreEntry]:
        if limit is None:
            limit = self.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError('Limit must be a positive integer.')
        return self.store.find_top(limit)
