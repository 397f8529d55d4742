import os
import sys
import pytest

# Ensure the backend root (containing the `boss_battle` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from boss_battle import create_app, socketio
from boss_battle.models import build_game_state
from boss_battle.services.game.history import HistoryStore
from boss_battle.services.game.session import GameSession


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    PORT = 4000
    CORS_ORIGINS = '*'
    DEFAULT_PLAYER_HP = 30
    DEFAULT_BOSS_NAME = 'Riddlebeast'
    BOSS_AOE_DAMAGE = 2
    PVP_DAMAGE = 5
    RESURRECTION_HP = 10
    MAX_HISTORY = 20
    # No animation pauses under test
    ACTION_FLASH_MS = 0
    DISARM_FLASH_MS = 0
    ABILITY_FLASH_MS = 0
    STUN_SKIP_MS = 0
    ROUND_PAUSE_MS = 0
    AOE_HIT_MS = 0


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
    )
    yield test_client
    try:
        test_client.disconnect()
    except Exception:
        pass


@pytest.fixture()
def make_state():
    """Factory for a fresh game: Alice/Bob/Cara vs a 100 HP boss by default."""
    def _make(names=('Alice', 'Bob', 'Cara'), boss_hp=100, **kwargs):
        return build_game_state([{'name': n} for n in names], boss_hp=boss_hp, **kwargs)
    return _make


@pytest.fixture()
def history():
    return HistoryStore()


@pytest.fixture()
def published():
    return []


@pytest.fixture()
def sleeps():
    return []


@pytest.fixture()
def session(published, sleeps):
    """GameSession wired to in-memory collectors instead of Socket.IO.

    Pauses are recorded rather than slept so pacing can be asserted.
    """
    return GameSession(broadcast=published.append, sleep=sleeps.append)
