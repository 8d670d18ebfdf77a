"""Game domain services: reaction timing, messages, timers and sound cues.

This package contains pure(ish) domain logic that is driven by socket
handlers, keeping transport concerns separated from the game mechanics.
"""

from .messages import reaction_message
from .reaction import ReactionGame, ReactionResult
from .scheduler import BackgroundScheduler, ManualScheduler, TimerHandle

__all__ = [
    'reaction_message',
    'ReactionGame',
    'ReactionResult',
    'BackgroundScheduler',
    'ManualScheduler',
    'TimerHandle',
]
