"""Small HTTP client for the habit tracker API.

Mirrors what the web frontend does: authenticate once, keep the bearer token,
then read and write one month at a time. ``autosave`` is fire-and-forget.
"""
import logging
import threading
import requests

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code, message):
        super().__init__(f'{status_code}: {message}')
        self.status_code = status_code
        self.message = message


class HabitTrackerClient:
    def __init__(self, base_url, token=None, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method, path, json=None):
        headers = {}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        response = self.session.request(method, f'{self.base_url}{path}', json=json,
                                        headers=headers, timeout=self.timeout)
        if response.status_code >= 400:
            try:
                message = response.json().get('error', response.reason)
            except ValueError:
                message = response.reason
            raise ApiError(response.status_code, message)
        return response.json()

    def _authenticate(self, path, body):
        result = self._request('POST', path, json=body)
        self.token = result['access_token']
        return result

    def register(self, email, password, name=None):
        body = {'email': email, 'password': password}
        if name is not None:
            body['name'] = name
        return self._authenticate('/auth/register', body)

    def login(self, email, password):
        return self._authenticate('/auth/login', {'email': email, 'password': password})

    def google_login(self, id_token):
        return self._authenticate('/auth/google', {'idToken': id_token})

    def profile(self):
        return self._request('GET', '/auth/profile')

    def get_month(self, year, month):
        return self._request('GET', f'/storage/{year}/{month}')

    def save_month(self, year, month, payload):
        return self._request('PUT', '/storage', json={'year': year, 'month': month, 'payload': payload})

    def ensure_month(self, year, month):
        return self._request('POST', f'/storage/{year}/{month}/ensure')

    def autosave(self, year, month, payload):
        """Save in the background. Failures are logged, never raised, never retried."""
        thread = threading.Thread(target=self._autosave, args=(year, month, payload), daemon=True)
        thread.start()
        return thread

    def _autosave(self, year, month, payload):
        try:
            self.save_month(year, month, payload)
        except (ApiError, requests.RequestException):
            logger.warning('Autosave of %s-%s failed; local state is unsynced', year, month, exc_info=True)
