from datetime import datetime, timedelta, timezone
from flask import current_app
from jose import JWTError, jwt
from errors import InvalidToken


def issue_token(user):
    now = datetime.now(timezone.utc)
    claims = {
        # jose insists on a string subject
        'sub': str(user.id),
        'email': user.email,
        'iat': now,
        'exp': now + timedelta(seconds=current_app.config['JWT_EXPIRES_IN']),
    }
    return jwt.encode(claims, current_app.config['JWT_SECRET'], algorithm=current_app.config['JWT_ALGORITHM'])


def verify_token(token):
    """Return the claims of a bearer token we issued, or raise InvalidToken."""
    try:
        claims = jwt.decode(
            token,
            current_app.config['JWT_SECRET'],
            algorithms=[current_app.config['JWT_ALGORITHM']],
        )
    except JWTError as exc:
        raise InvalidToken() from exc
    if not claims.get('sub') or not claims.get('email'):
        raise InvalidToken()
    return claims


def bearer_token(request):
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header.split(' ', 1)[1].strip() or None
    return None
