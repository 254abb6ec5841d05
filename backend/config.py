import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Host credential; the login form compares against a bcrypt hash of it
    HOST_KEY = os.environ.get('HOST_KEY') or 'CHANGE_ME_HOST_KEY'
    # Optional JSON catalog; the built-in demo quiz is used when unset
    QUIZ_FILE = os.environ.get('QUIZ_FILE')
    # Question timing (milliseconds)
    PRE_DELAY_MS = int(os.environ.get('PRE_DELAY_MS', '500'))
    POPUP_SHOW_MS = int(os.environ.get('POPUP_SHOW_MS', '7000'))
    # Scoring and leaderboard views
    MAX_POINTS = int(os.environ.get('MAX_POINTS', '1000'))
    LEADERBOARD_SIZE = int(os.environ.get('LEADERBOARD_SIZE', '15'))
    FAST_TOP_SIZE = int(os.environ.get('FAST_TOP_SIZE', '5'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '24'))
    # Rooms that finish normally stay queryable this long (seconds). 0 keeps them.
    ENDED_ROOM_RETENTION_SEC = int(os.environ.get('ENDED_ROOM_RETENTION_SEC', '600'))
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
        ).split(',') if o.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
