import os
import sys
import pytest

# Ensure the backend root (containing the `partyhub` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from partyhub import create_app, db, socketio

NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET = 'test-jwt-secret'
    TOKEN_TTL_HOURS = 24
    QUIZ_CORRECT_POINTS = 100
    VOTE_TARGET_POINTS = 1
    DEFAULT_TIME_LIMIT = 30
    GAME_CODE_LENGTH = 6
    SOCKETIO_NAMESPACE = NAMESPACE
    CORS_ORIGINS = ['http://localhost:5173']
    JOIN_URL_TEMPLATE = 'http://party.test/play/{code}'
    LOG_LEVEL = 'DEBUG'
    # Keep password hashing cheap in tests
    BCRYPT_LOG_ROUNDS = 4


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import partyhub.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def router(flask_app):
    return flask_app.extensions['partyhub.router']


@pytest.fixture()
def make_sio_client(flask_app):
    """Factory for Socket.IO test clients connected to the game namespace."""
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, namespace=NAMESPACE)
        # Drop the 'connected' greeting
        test_client.get_received(NAMESPACE)
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()


def emit(test_client, event, payload=None):
    """Emit an event and return its acknowledgement envelope."""
    return test_client.emit(event, payload or {}, namespace=NAMESPACE, callback=True)


def received(test_client, name):
    """Payloads of the queued events called ``name`` (drains the queue)."""
    return [pkt['args'][0] for pkt in test_client.get_received(NAMESPACE) if pkt['name'] == name]


def last_state(test_client):
    states = received(test_client, 'gameStateUpdate')
    return states[-1] if states else None
