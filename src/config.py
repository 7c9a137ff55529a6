# =============================================================================
# MODULE: config.py
# Connect Four - Client configuration
# =============================================================================

import os
from dataclasses import dataclass

SERVER_URL = 'http://localhost:8080'
SOCKETIO_PATH = 'socket.io'

# Timings (seconds)
MATCHMAKING_DELAY = 1.6
BOT_DELAY = 0.9
RECONNECT_DELAY = 2.0
CONNECT_TIMEOUT = 5

BOT_NAME = 'Backend Bot'

LEADERBOARD_LIMIT = 10
LEADERBOARD_TIMEOUT = 3
LEADERBOARD_REFRESH = 5

MODES = ('local', 'online')


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class ClientConfig:
    server_url: str = SERVER_URL
    mode: str = 'local'
    debug: bool = False

    @classmethod
    def from_env(cls):
        mode = os.environ.get('CONNECT4_MODE', 'local').strip().lower()
        if mode not in MODES:
            raise ValueError(f"CONNECT4_MODE must be one of {MODES}, got {mode!r}")
        return cls(
            server_url=os.environ.get('CONNECT4_SERVER_URL', SERVER_URL).rstrip('/'),
            mode=mode,
            debug=_env_flag('CONNECT4_DEBUG'),
        )
