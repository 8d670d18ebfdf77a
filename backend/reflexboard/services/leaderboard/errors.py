class LeaderboardError(Exception):
    """Base class for leaderboard failures."""


class ValidationError(LeaderboardError):
    """The caller sent something we refuse to store. Maps to HTTP 400."""


class StoreError(LeaderboardError):
    """The score store could not be reached or the query failed. Maps to HTTP 500."""
