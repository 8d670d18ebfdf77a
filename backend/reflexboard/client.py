"""HTTP client for the leaderboard API.

Fetch failures are reported, never retried. A view that failed to load
carries an error message, which callers must show instead of the
"no scores yet" placeholder.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests


CONNECT_ERROR = 'Failed to connect to server'
LOAD_ERROR = 'Failed to load leaderboard'
MEDALS = {1: '🥇', 2: '🥈', 3: '🥉'}


class LeaderboardClientError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class LeaderboardView:
    scores: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return self.ok and not self.scores

    @property
    def best(self) -> Optional[int]:
        return self.scores[0]['reactionTime'] if self.scores else None


class LeaderboardClient:
    def __init__(self, base_url: str, timeout: float = 5.0, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/api/leaderboard"

    def fetch_top_scores(self) -> LeaderboardView:
        try:
            response = self.session.get(self.endpoint, timeout=self.timeout)
        except requests.RequestException:
            return LeaderboardView(error=CONNECT_ERROR)
        if not response.ok:
            return LeaderboardView(error=LOAD_ERROR)
        try:
            scores = response.json().get('scores', [])
        except ValueError:
            return LeaderboardView(error=LOAD_ERROR)
        return LeaderboardView(scores=scores)

    def submit_score(self, reaction_time: float, name: Optional[str] = None) -> Dict[str, Any]:
        """POST a score; returns the server's ``{success, id, rank, entry}`` body."""
        body = {'name': (name or '').strip() or 'Anonymous', 'reactionTime': reaction_time}
        try:
            response = self.session.post(self.endpoint, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            raise LeaderboardClientError(CONNECT_ERROR) from exc
        if not response.ok:
            try:
                message = response.json().get('error') or 'Failed to submit score'
            except ValueError:
                message = 'Failed to submit score'
            raise LeaderboardClientError(message, status_code=response.status_code)
        return response.json()


def _format_date(timestamp: str) -> str:
    try:
        when = datetime.fromisoformat(timestamp)
    except (TypeError, ValueError):
        return ''
    return f"{when.strftime('%b')} {when.day}"


def format_leaderboard(view: LeaderboardView, highlight_id: Optional[str] = None) -> str:
    if view.error:
        return view.error
    if view.is_empty:
        return 'No scores yet!\nBe the first to submit a score'

    lines = []
    for rank, score in enumerate(view.scores, start=1):
        marker = MEDALS.get(rank, str(rank))
        name = score.get('name', '')
        if highlight_id is not None and score.get('id') == highlight_id:
            name = f"{name} (You)"
        lines.append(
            f"{marker:>3}  {name:<26} {score.get('reactionTime'):>5}ms  {_format_date(score.get('timestamp')):>6}"
        )
    lines.append('')
    lines.append(f"Top {len(view.scores)} players | Best: {view.best}ms")
    return '\n'.join(lines)
