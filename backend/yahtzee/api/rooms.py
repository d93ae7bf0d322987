from flask import Blueprint, jsonify

from yahtzee import get_registry

rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_code>', methods=['GET'])
def get_room_state(room_code):
    """
    Returns the membership and mirrored score sheets of a room, for
    observers and clients that missed a relayed message.
    """
    registry = get_registry()
    with registry.lock:
        room = registry.get(room_code)
        if not room:
            return jsonify({'error': 'Room not found'}), 404
        return jsonify(room.to_dict()), 200


@rooms.route('', methods=['GET'])
def list_rooms():
    """
    Returns the rooms that are still waiting for players.
    """
    registry = get_registry()
    with registry.lock:
        open_rooms = [
            room.to_dict(include_session=False)
            for room in registry.active_rooms()
            if not room.in_progress and not room.is_full
        ]
    return jsonify(open_rooms), 200
