import random

import click
from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry per app: rooms live in memory only
    from yahtzee.models import RoomRegistry
    flask_app.extensions['room_registry'] = RoomRegistry.from_config(flask_app.config)

    from yahtzee.routes import main
    flask_app.register_blueprint(main)

    from yahtzee.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # Importing here ensures the handlers bind to the initialized socketio instance
    from yahtzee.socketio_events import register_socketio_handlers
    register_socketio_handlers(
        namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'),
        testing=flask_app.config.get('TESTING', False),
    )

    @click.command('simulate-game')
    @click.option('--players', default=3, show_default=True, type=click.IntRange(2, 4), help='Number of players.')
    @click.option('--seed', type=int, default=None, help='Seed for reproducible dice.')
    def simulate_game_command(players, seed):
        """Plays a full local game with a greedy strategy and prints standings."""
        from yahtzee.services.games.autoplay import play_game
        from yahtzee.services.games.session import GameSession

        session = GameSession.local([f'Player {i + 1}' for i in range(players)], rng=random.Random(seed))
        play_game(session)
        winner = session.winner()
        for rank, player in enumerate(session.standings(), start=1):
            click.echo(f'#{rank} {player.name}: {player.total_score} (upper bonus {player.upper_bonus})')
        click.echo(f'Winner: {winner.name}')

    @click.command('rooms')
    def rooms_command():
        """Lists the active rooms held by this process."""
        registry = flask_app.extensions['room_registry']
        active = registry.active_rooms()
        if not active:
            click.echo('No active rooms.')
            return
        for room in active:
            names = ', '.join(m.name for m in room.members)
            state = 'in progress' if room.in_progress else 'lobby'
            click.echo(f'{room.code} [{state}] {len(room.members)}/{room.capacity}: {names}')

    flask_app.cli.add_command(simulate_game_command)
    flask_app.cli.add_command(rooms_command)

    return flask_app


def get_registry(app=None):
    """Room registry of the given (or current) app."""
    if app is None:
        from flask import current_app
        app = current_app
    return app.extensions['room_registry']
