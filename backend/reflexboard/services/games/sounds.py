"""Sound cues for the reaction game.

The server never plays audio itself. A process-wide SoundBus turns cue
names into ``play_sound`` Socket.IO events carrying tone parameters that
the browser synthesizes. Game sessions only see the ``play(sound_id)``
capability of a RoomSoundPlayer bound to their socket.
"""

import logging
import threading
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)

CLICK = 'click'
TRIGGER = 'trigger'
SUCCESS = 'success'
EARLY = 'early'

SOUND_CONFIGS: Dict[str, Dict[str, Any]] = {
    CLICK: {'frequency': 600, 'duration': 0.05, 'waveform': 'sine', 'gain': 0.1},
    TRIGGER: {'frequency': 880, 'duration': 0.1, 'waveform': 'sine', 'gain': 0.15},
    SUCCESS: {
        'frequency': 523.25, 'duration': 0.15, 'waveform': 'sine', 'gain': 0.12,
        # E5 on top of the C5 for a two-note chord
        'chord': {'frequency': 659.25, 'duration': 0.15, 'waveform': 'sine', 'gain': 0.1, 'offset': 0.05},
    },
    EARLY: {'frequency': 200, 'duration': 0.2, 'waveform': 'square', 'gain': 0.08},
}


class SoundBus:
    def __init__(self, socketio, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def play(self, sound_id: str, to: Optional[str] = None) -> None:
        config = SOUND_CONFIGS.get(sound_id)
        if config is None:
            raise ValueError(f"Unknown sound: {sound_id}")
        payload = dict(config, sound=sound_id)
        try:
            self.socketio.emit('play_sound', payload, to=to, namespace=self.namespace)
        except Exception as exc:
            # Audio is best-effort; a lost cue must not break the game
            logger.warning(f"[sound-failed] sound={sound_id} to={to} error={exc}")


_bus: Optional[SoundBus] = None
_bus_lock = threading.Lock()


def get_sound_bus() -> SoundBus:
    """Return the process-wide bus, creating it on first use."""
    global _bus
    if _bus is None:
        with _bus_lock:
            if _bus is None:
                from reflexboard import socketio
                _bus = SoundBus(socketio)
    return _bus


class RoomSoundPlayer:
    """Plays cues for a single socket connection (or room)."""

    def __init__(self, room: str):
        self.room = room

    def play(self, sound_id: str) -> None:
        get_sound_bus().play(sound_id, to=self.room)
