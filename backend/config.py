import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # First player to reach this many correct placements wins
    WIN_SCORE = int(os.environ.get('WIN_SCORE', '10'))
    # Player setup limits
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '10'))
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '20'))
    MIN_STARTING_TOKENS = int(os.environ.get('MIN_STARTING_TOKENS', '1'))
    MAX_STARTING_TOKENS = int(os.environ.get('MAX_STARTING_TOKENS', '5'))
    DEFAULT_STARTING_TOKENS = int(os.environ.get('DEFAULT_STARTING_TOKENS', '3'))
    # Optional: fixed shuffle seed for reproducible decks. Unset means random.
    SHUFFLE_SEED = int(os.environ['SHUFFLE_SEED']) if os.environ.get('SHUFFLE_SEED') else None
    # Playback hand-off URIs look like <scheme>:track:<id>
    PLAYBACK_URI_SCHEME = os.environ.get('PLAYBACK_URI_SCHEME', 'spotify')
    # Optional: debounce controller actions (ms). 0 disables.
    CONTROLLER_DEBOUNCE_MS = int(os.environ.get('CONTROLLER_DEBOUNCE_MS', '0'))
