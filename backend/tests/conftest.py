import os
import random
import sys
import pytest

# Ensure the backend root (containing the `norster` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from norster import create_app, socketio
from norster.models import PlayerConfig, Track
from norster.services.games import GameEngine


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    WIN_SCORE = 10
    MIN_PLAYERS = 2
    MAX_PLAYERS = 10
    MAX_NAME_LENGTH = 20
    MIN_STARTING_TOKENS = 1
    MAX_STARTING_TOKENS = 5
    DEFAULT_STARTING_TOKENS = 3
    SHUFFLE_SEED = None
    PLAYBACK_URI_SCHEME = 'spotify'
    CONTROLLER_DEBOUNCE_MS = 0


def make_track(track_id, release_date, name=None):
    return Track(
        id=track_id,
        title=name or f'Song {track_id}',
        artists=('Artist',),
        album='Album',
        release_date=release_date,
    )


def track_payload(track_id, release_date):
    """Catalog-shaped track, as the music service returns it."""
    return {
        'id': track_id,
        'name': f'Song {track_id}',
        'artists': [{'name': 'Artist'}],
        'album': {
            'name': 'Album',
            'release_date': release_date,
            'images': [{'url': f'https://img.example/{track_id}.jpg'}],
        },
    }


@pytest.fixture()
def three_tracks():
    return [make_track('t1', '1999-01-01'), make_track('t2', '2005-06-15'), make_track('t3', '2010')]


@pytest.fixture()
def engine(three_tracks):
    return GameEngine(three_tracks, PlayerConfig(names=('A', 'B'), starting_tokens=3), rng=random.Random(7))


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    from norster.api.games import sessions
    sessions.clear()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except RuntimeError:
        pass
