from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from reflexboard import socketio, get_scheduler
from reflexboard.services.games import ReactionGame
from reflexboard.services.games.sounds import RoomSoundPlayer
from typing import Dict

NAMESPACE = '/ws'
LEADERBOARD_ROOM = 'leaderboard'

# One reaction game per connected socket
_sessions: Dict[str, ReactionGame] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _state_emitter(sid: str):
    def _emit_state(snapshot):
        # socketio.emit rather than emit: the timer fires outside the request context
        socketio.emit('state_update', snapshot, to=sid, namespace=NAMESPACE)
    return _emit_state


def _get_session() -> ReactionGame:
    sid = _get_sid()
    game = _sessions.get(sid)
    if game is None:
        cfg = current_app.config
        delay_range = (
            float(cfg.get('REACTION_DELAY_MIN_MS', 1500)),
            float(cfg.get('REACTION_DELAY_MAX_MS', 4000)),
        )
        game = ReactionGame(
            get_scheduler(),
            sound_player=RoomSoundPlayer(sid),
            listener=_state_emitter(sid),
            delay_range_ms=delay_range,
        )
        _sessions[sid] = game
        current_app.logger.info(f"[session-new] sid={sid}")
    return game


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    game = _sessions.pop(_get_sid(), None)
    if game is not None:
        game.close()


def handle_start_game(data=None):
    _get_session().start()


def handle_click(data=None):
    game = _get_session()
    result = game.click()
    if result is not None:
        current_app.logger.info(f"[reaction] sid={_get_sid()} reaction_time={result.reaction_time_ms}ms")


def handle_acknowledge(data=None):
    _get_session().acknowledge()


def handle_reset_game(data=None):
    _get_session().reset()


def handle_toggle_sound(data=None):
    game = _get_session()
    enabled = data.get('enabled') if isinstance(data, dict) else None
    game.set_sound_enabled(not game.sound_enabled if enabled is None else bool(enabled))


def handle_get_state(data=None):
    emit('state_update', _get_session().snapshot())


def handle_subscribe_leaderboard(data=None):
    join_room(LEADERBOARD_ROOM)
    emit('subscribed', {'room': LEADERBOARD_ROOM})


def handle_unsubscribe_leaderboard(data=None):
    leave_room(LEADERBOARD_ROOM)
    emit('unsubscribed', {'room': LEADERBOARD_ROOM})


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('start_game', handle_start_game, namespace=NAMESPACE)
    socketio.on_event('click', handle_click, namespace=NAMESPACE)
    socketio.on_event('acknowledge', handle_acknowledge, namespace=NAMESPACE)
    socketio.on_event('reset_game', handle_reset_game, namespace=NAMESPACE)
    socketio.on_event('toggle_sound', handle_toggle_sound, namespace=NAMESPACE)
    socketio.on_event('get_state', handle_get_state, namespace=NAMESPACE)
    socketio.on_event('subscribe_leaderboard', handle_subscribe_leaderboard, namespace=NAMESPACE)
    socketio.on_event('unsubscribe_leaderboard', handle_unsubscribe_leaderboard, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
