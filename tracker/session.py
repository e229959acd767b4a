import os
import json
import logging

from .api import APIError

logger = logging.getLogger(__name__)

LOGGED_OUT = 'logged_out'
AUTHENTICATING = 'authenticating'
LOGGED_IN = 'logged_in'

def default_session_path():
    return os.environ.get('TRACKER_SESSION_FILE',
                          os.path.join(os.path.expanduser('~'), '.habit_tracker', 'session.json'))

class SessionStore:
    """Keeps the token and user profile between runs in a small JSON file."""

    def __init__(self, path=None):
        self.path = path or default_session_path()

    def load_session(self):
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning('Ignoring unreadable session file %s: %s', self.path, e)
            return None
        token = data.get('token') if isinstance(data, dict) else None
        user = data.get('user') if isinstance(data, dict) else None
        if not token or not user:
            return None
        return token, user

    def save(self, token, user):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({'token': token, 'user': user}, f)

    def clear(self):
        if os.path.exists(self.path):
            os.remove(self.path)

class AuthFlow:
    """Login state machine: logged_out -> authenticating -> logged_in."""

    def __init__(self, api, store):
        self.api = api
        self.store = store
        self.state = LOGGED_OUT
        self.user = None
        self.error = ''

    @property
    def is_logged_in(self):
        return self.state == LOGGED_IN

    def restore(self):
        """Called once at startup to pick up a previously saved session."""
        session = self.store.load_session()
        if session:
            token, user = session
            self.api.token = token
            self.user = user
            self.state = LOGGED_IN
        return session

    def submit(self, username, password, register=False):
        self.error = ''
        if not username or not password:
            self.error = 'Please fill in all fields'
            return False

        self.state = AUTHENTICATING
        try:
            if register:
                data = self.api.register(username, password)
            else:
                data = self.api.login(username, password)
        except APIError as e:
            # Network failures have no server message to show
            self.error = (e.message if e.status else None) or 'Authentication failed'
            self.state = LOGGED_OUT
            return False

        self.api.token = data['token']
        self.user = data['user']
        self.store.save(data['token'], data['user'])
        self.state = LOGGED_IN
        return True

    def logout(self):
        self.store.clear()
        self.api.token = None
        self.user = None
        self.state = LOGGED_OUT
