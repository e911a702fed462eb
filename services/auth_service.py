from flask import current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash
from models import db, User
from errors import DuplicateIdentity, InvalidCredentials, InvalidExternalToken
from services import google_identity
from services.bootstrap import ensure_current_snapshot
from services.tokens import issue_token
from utils import serialize_user, serialize_snapshot


def _authenticated(user):
    token = issue_token(user)
    storage = ensure_current_snapshot(user.id)
    return {
        'user': serialize_user(user),
        'access_token': token,
        'storage': serialize_snapshot(storage),
    }


def register(email, password, name=None):
    if User.query.filter_by(email=email).first():
        raise DuplicateIdentity()

    user = User(email=email, password_hash=generate_password_hash(password, method='scrypt'), name=name)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        # Same email registered concurrently
        db.session.rollback()
        raise DuplicateIdentity() from exc

    current_app.logger.info('Registered user %s', user.id)
    return _authenticated(user)


def login(email, password):
    user = User.query.filter_by(email=email).first()
    if not user or not user.password_hash or not check_password_hash(user.password_hash, password):
        current_app.logger.warning('Failed login attempt')
        raise InvalidCredentials()

    current_app.logger.info('User %s logged in', user.id)
    return _authenticated(user)


def external_login(id_token, access_token=None):
    """Sign in with a Google ID token, creating the account on first use."""
    claims = google_identity.verify_id_token(id_token, current_app.config.get('GOOGLE_CLIENT_ID'), access_token=access_token)
    email = claims.get('email')
    if not email:
        raise InvalidExternalToken()
    name = claims.get('name') or None

    user = _find_or_create_oauth_user(email, name)
    current_app.logger.info('User %s signed in with Google', user.id)
    return _authenticated(user)


def _find_or_create_oauth_user(email, name):
    user = User.query.filter_by(email=email).first()
    if user:
        if user.name is None and name:
            user.name = name
            db.session.commit()
        return user

    user = User(email=email, password_hash=None, name=name)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # First Google login raced another one for the same email
        db.session.rollback()
        user = User.query.filter_by(email=email).first()
        if user is None:
            raise
    return user
