import os

_DEFAULT_ORIGINS = 'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174'


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Default room capacity; clients may ask for MIN_PLAYERS..MAX_ROOM_CAPACITY
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '3'))
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    MAX_ROOM_CAPACITY = int(os.environ.get('MAX_ROOM_CAPACITY', '4'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGINS', _DEFAULT_ORIGINS).split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Defaults for yahtzee.client.GameClient
    SERVER_URL = os.environ.get('SERVER_URL', 'http://localhost:5000')
