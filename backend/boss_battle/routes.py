from flask import Blueprint, current_app, jsonify

from boss_battle.services.game.abilities import ABILITIES

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Boss Battle game server!'})

@main.route('/api/state')
def get_game_state():
    return jsonify(current_app.extensions['game_session'].state_payload())

@main.route('/api/abilities')
def list_abilities():
    catalog = [
        {
            'name': name,
            'timing': config['timing'],
            'target': config['target'],
            'description': config['description'],
        }
        for name, config in ABILITIES.items()
    ]
    return jsonify(catalog)
