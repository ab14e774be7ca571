import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Bind address used by run.py
    MEMORY_HOST = os.environ.get('MEMORY_HOST', '0.0.0.0')
    MEMORY_PORT = int(os.environ.get('MEMORY_PORT', '8090'))
    # Deck size in pairs (does not depend on how many players joined)
    NUM_PAIRS = int(os.environ.get('NUM_PAIRS', '16'))
    # Lobby admission
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '4'))
    LOBBY_GRACE_SEC = int(os.environ.get('LOBBY_GRACE_SEC', '5'))
    # Per-turn timeout (seconds)
    TURN_DURATION_SEC = int(os.environ.get('TURN_DURATION_SEC', '30'))
    # Optional: heartbeat interval for timer worker logs (sec). 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
