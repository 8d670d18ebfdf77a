import os
import sys
from urllib.parse import urlsplit

import pytest

# Ensure the backend root (containing the `reflexboard` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from reflexboard import create_app, db, socketio, get_scheduler


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LEADERBOARD_STORE = 'sql'
    LEADERBOARD_LIMIT = 20
    MIN_REACTION_MS = 100
    MAX_REACTION_MS = 2000
    NAME_MAX_LENGTH = 20
    REACTION_DELAY_MIN_MS = 1500
    REACTION_DELAY_MAX_MS = 4000
    REACTION_SCHEDULER = 'manual'
    LEADERBOARD_URL = 'http://leaderboard.test'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def scheduler(flask_app):
    return get_scheduler()


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
    except Exception:
        pass


class TestClientResponse:
    """The slice of requests.Response the leaderboard client reads."""

    def __init__(self, flask_response):
        self._response = flask_response
        self.status_code = flask_response.status_code

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        data = self._response.get_json(silent=True)
        if data is None:
            raise ValueError('Response is not JSON')
        return data


class TestClientSession:
    """Routes requests.Session-style calls into a Flask test client."""

    def __init__(self, flask_client):
        self.flask_client = flask_client
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(('GET', url, timeout))
        return TestClientResponse(self.flask_client.get(urlsplit(url).path))

    def post(self, url, json=None, timeout=None):
        self.calls.append(('POST', url, timeout))
        return TestClientResponse(self.flask_client.post(urlsplit(url).path, json=json))


@pytest.fixture()
def http_session(client):
    return TestClientSession(client)
