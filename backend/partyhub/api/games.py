from flask import Blueprint, jsonify

from partyhub.services.games.projection import project_game_state, reconcile_scores

games = Blueprint('games', __name__)


@games.route('/<string:game_code>/state', methods=['GET'])
def get_game_state(game_code):
    """
    Returns the same snapshot the game room receives over Socket.IO.
    """
    state = project_game_state(game_code)
    if state is None:
        return jsonify({'error': 'Game not found'}), 404
    reconcile_scores(state)
    return jsonify(state)
