from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Memory Rush game server!'})


@main.route('/api/game/state', methods=['GET'])
def get_game_state():
    """Read-only snapshot of the session; unmatched cards stay hidden."""
    payload = current_app.extensions['memoryrush'].snapshot()
    # Include durations so clients can show countdowns
    cfg = current_app.config
    payload['durations'] = {
        'turn': int(cfg.get('TURN_DURATION_SEC', 30)),
        'lobby_grace': int(cfg.get('LOBBY_GRACE_SEC', 5)),
    }
    return jsonify(payload)
