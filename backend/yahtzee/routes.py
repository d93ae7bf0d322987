from flask import Blueprint, jsonify

from yahtzee import get_registry

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Yahtzee game server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'rooms': len(get_registry().active_rooms())})
