from urllib.parse import urlencode
import requests
from jose import JWTError, jwt
from errors import ConfigurationError, InvalidExternalToken, InfrastructureError

GOOGLE_AUTH_URL = 'https://accounts.google.com/o/oauth2/v2/auth'
GOOGLE_TOKEN_URL = 'https://oauth2.googleapis.com/token'
GOOGLE_CERTS_URL = 'https://www.googleapis.com/oauth2/v3/certs'
GOOGLE_ISSUERS = ('accounts.google.com', 'https://accounts.google.com')
GOOGLE_SCOPES = ('openid', 'email', 'profile')
REQUIRED_SETTINGS = ('GOOGLE_CLIENT_ID', 'GOOGLE_CLIENT_SECRET', 'GOOGLE_CALLBACK_URL')
HTTP_TIMEOUT = 10


def check_google_config(config):
    for key in REQUIRED_SETTINGS:
        if not config.get(key):
            raise ConfigurationError(
                f'{key} is not set. Configure it in your environment to match your Google Cloud OAuth client.'
            )


def client_id_tail(client_id):
    return client_id[-10:] if len(client_id) > 10 else client_id


def fetch_google_certs():
    try:
        response = requests.get(GOOGLE_CERTS_URL, timeout=HTTP_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except (requests.RequestException, ValueError) as exc:
        raise InfrastructureError('Could not reach Google') from exc


def verify_id_token(id_token, client_id, access_token=None):
    """Verify a Google ID token's signature, audience and issuer; return its claims.

    ``access_token`` is only available in the redirect flow, where Google adds
    an ``at_hash`` claim binding the two tokens.
    """
    if not client_id:
        raise ConfigurationError('GOOGLE_CLIENT_ID is not configured')
    if not isinstance(id_token, str) or not id_token:
        raise InvalidExternalToken()

    certs = fetch_google_certs()
    try:
        claims = jwt.decode(
            id_token,
            certs,
            algorithms=['RS256'],
            audience=client_id,
            issuer=GOOGLE_ISSUERS,
            access_token=access_token,
            options={'verify_at_hash': access_token is not None},
        )
    except JWTError as exc:
        raise InvalidExternalToken() from exc

    if not claims.get('email') or claims.get('email_verified') is False:
        raise InvalidExternalToken()
    return claims


def authorization_url(client_id, callback_url, state):
    params = {
        'client_id': client_id,
        'redirect_uri': callback_url,
        'response_type': 'code',
        'scope': ' '.join(GOOGLE_SCOPES),
        'state': state,
        'prompt': 'select_account',
    }
    return f'{GOOGLE_AUTH_URL}?{urlencode(params)}'


def exchange_code(code, client_id, client_secret, callback_url):
    try:
        response = requests.post(GOOGLE_TOKEN_URL, data={
            'code': code,
            'client_id': client_id,
            'client_secret': client_secret,
            'redirect_uri': callback_url,
            'grant_type': 'authorization_code',
        }, timeout=HTTP_TIMEOUT)
    except requests.RequestException as exc:
        raise InfrastructureError('Could not reach Google') from exc

    if response.status_code >= 500:
        raise InfrastructureError('Google token endpoint unavailable')
    if response.status_code >= 400:
        # Bad or reused authorization code
        raise InvalidExternalToken()
    try:
        tokens = response.json()
    except ValueError as exc:
        raise InvalidExternalToken() from exc
    if not tokens.get('id_token'):
        raise InvalidExternalToken()
    return tokens
