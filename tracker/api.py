import os
import requests

DEFAULT_API_URL = 'http://localhost:5000/api'

class APIError(Exception):
    def __init__(self, status, message):
        super().__init__(message)
        self.status = status
        self.message = message

class AuthError(APIError):
    pass

class TrackerAPI:
    """Thin client for the tracker's JSON API.

    The token is sent in the x-auth-token header. Any non-2xx response raises
    APIError (AuthError for 401) carrying the server's message.
    """

    def __init__(self, base_url=None, token=None, session=None, timeout=10):
        self.base_url = (base_url or os.environ.get('TRACKER_API_URL', DEFAULT_API_URL)).rstrip('/')
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method, path, json=None):
        headers = {}
        if self.token:
            headers['x-auth-token'] = self.token
        try:
            response = self.session.request(method, f'{self.base_url}{path}', json=json,
                                            headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise APIError(None, f'Network error: {e}') from e

        if response.status_code >= 400:
            try:
                message = response.json().get('message')
            except (ValueError, AttributeError):
                message = None
            message = message or f'Request failed with status {response.status_code}'
            if response.status_code == 401:
                raise AuthError(401, message)
            raise APIError(response.status_code, message)
        return response.json()

    # Auth
    def register(self, username, password):
        return self._request('POST', '/auth/register', {'username': username, 'password': password})

    def login(self, username, password):
        return self._request('POST', '/auth/login', {'username': username, 'password': password})

    # Habits
    def get_habits(self, year, month):
        return self._request('GET', f'/habits/{year}/{month}')

    def save_habits(self, year, month, habits):
        return self._request('POST', f'/habits/{year}/{month}', {'habits': habits})

    def get_yearly_report(self, year):
        return self._request('GET', f'/habits/report/{year}')

    # Sleep
    def get_sleep_data(self, year, month):
        return self._request('GET', f'/sleep/{year}/{month}')

    def save_sleep_data(self, year, month, entries):
        return self._request('POST', f'/sleep/{year}/{month}', {'sleep': entries})
