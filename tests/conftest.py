import os
from concurrent.futures import Future

os.environ['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///:memory:'

import pytest
from app import app
from models import db, User
from werkzeug.security import generate_password_hash
from tracker.state import SaveQueue

@pytest.fixture
def client():
    app.config['TESTING'] = True
    app.config['SECRET_KEY'] = 'test-secret'

    with app.test_client() as client:
        with app.app_context():
            db.create_all()
            yield client
            db.session.remove()
            db.drop_all()

@pytest.fixture
def auth_client(client):
    user = User(username='testuser', password_hash=generate_password_hash('password', method='scrypt'))
    db.session.add(user)
    db.session.commit()

    response = client.post('/api/auth/login', json={'username': 'testuser', 'password': 'password'})
    headers = {'x-auth-token': response.json['token']}
    return client, user, headers

@pytest.fixture
def runner(client):
    return app.test_cli_runner()

class ImmediateExecutor:
    """Runs submitted saves inline so tests don't need threads."""

    def submit(self, fn, *args):
        future = Future()
        try:
            future.set_result(fn(*args))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait=True):
        pass

@pytest.fixture
def save_queue():
    return SaveQueue(executor=ImmediateExecutor())

class _FlaskResponse:
    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code

    def json(self):
        data = self._response.get_json(silent=True)
        if data is None:
            raise ValueError('response has no JSON body')
        return data

class FlaskSession:
    """Stands in for requests.Session, routing calls to the Flask test client."""

    def __init__(self, client):
        self.client = client
        self.calls = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        path = url.replace('http://testserver', '', 1)
        self.calls.append((method, path))
        return _FlaskResponse(self.client.open(path, method=method, json=json, headers=headers))

@pytest.fixture
def flask_session(client):
    return FlaskSession(client)
