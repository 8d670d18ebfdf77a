from flask import Blueprint, jsonify, request, current_app
from reflexboard import socketio, get_leaderboard_service
from reflexboard.services.leaderboard import StoreError, ValidationError
from reflexboard.socketio_events import LEADERBOARD_ROOM, NAMESPACE


leaderboard = Blueprint('leaderboard', __name__)


@leaderboard.route('', methods=['GET'])
def list_scores():
    service = get_leaderboard_service()
    try:
        scores = service.list_top_scores()
    except StoreError:
        current_app.logger.exception("[leaderboard-fetch-failed]")
        return jsonify({'error': 'Failed to fetch leaderboard'}), 500
    return jsonify({'scores': [s.to_dict() for s in scores]})


@leaderboard.route('', methods=['POST'])
def submit_score():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    service = get_leaderboard_service()
    try:
        result = service.submit_score(data.get('name'), data.get('reactionTime'))
    except ValidationError as exc:
        return jsonify({'error': str(exc)}), 400
    except StoreError:
        current_app.logger.exception("[score-submit-failed]")
        return jsonify({'error': 'Failed to submit score'}), 500

    payload = result.to_dict()
    # Subscribed clients refetch the list when they see this
    try:
        socketio.emit(
            'leaderboard_update',
            {'id': result.id, 'rank': result.rank, 'entry': payload['entry']},
            to=LEADERBOARD_ROOM,
            namespace=NAMESPACE,
        )
    except Exception as exc:
        # The score is already stored; a missed broadcast must not turn into a retry
        current_app.logger.warning(f"[leaderboard-broadcast-failed] id={result.id} error={exc}")
    return jsonify(payload), 201
