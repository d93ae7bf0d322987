import os
import sys
import pytest

# Ensure the backend root (containing the `yahtzee` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from yahtzee import create_app, get_registry, socketio

NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    MAX_PLAYERS = 3
    MIN_PLAYERS = 2
    MAX_ROOM_CAPACITY = 4
    ROOM_CODE_LENGTH = 6
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = NAMESPACE
    LOG_LEVEL = 'DEBUG'


class ScriptedDice:
    """Stands in for random.Random: randint() returns the scripted values in order."""

    def __init__(self, values):
        self._values = iter(values)

    def randint(self, a, b):
        return next(self._values)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return get_registry(flask_app)


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients connected to /ws with an empty inbox."""
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, namespace=NAMESPACE)
        test_client.get_received(NAMESPACE)
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        if test_client.is_connected(NAMESPACE):
            test_client.disconnect(namespace=NAMESPACE)


def received(test_client, name=None):
    """Drain the inbox; payloads of ``name`` events, or (name, payload) pairs."""
    packets = test_client.get_received(NAMESPACE)
    if name is None:
        return [(p['name'], p['args'][0] if p['args'] else None) for p in packets]
    return [p['args'][0] for p in packets if p['name'] == name]
