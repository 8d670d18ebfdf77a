"""Leaderboard domain services: validation, persistence and ranking of scores."""

from .errors import LeaderboardError, StoreError, ValidationError
from .service import LeaderboardService, SubmitResult, normalize_name
from .store import MemoryScoreStore, ScoreEntry, SqlAlchemyScoreStore

__all__ = [
    'LeaderboardError',
    'StoreError',
    'ValidationError',
    'LeaderboardService',
    'SubmitResult',
    'normalize_name',
    'MemoryScoreStore',
    'ScoreEntry',
    'SqlAlchemyScoreStore',
]
