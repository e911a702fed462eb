import os
from datetime import timedelta
from flask import Flask, jsonify, g
from flask_cors import CORS
from flask_login import LoginManager
from flask_migrate import Migrate
from sqlalchemy.exc import OperationalError
from dotenv import load_dotenv
from models import db, User
from errors import HabitTrackerError, InfrastructureError, InvalidToken
from services.google_identity import check_google_config, client_id_tail
from services.tokens import bearer_token, verify_token
from commands import register_commands

load_dotenv()

migrate = Migrate()
login_manager = LoginManager()

def database_uri():
    uri = os.environ.get('SQLALCHEMY_DATABASE_URI') or os.environ.get('DATABASE_URL') or 'sqlite:///db.sqlite3'
    if uri.startswith('postgres://'):
        uri = uri.replace('postgres://', 'postgresql://', 1)
    return uri

def default_config():
    return {
        'SECRET_KEY': os.environ.get('SECRET_KEY', 'dev_key_change_in_prod'),
        'SQLALCHEMY_DATABASE_URI': database_uri(),
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'JWT_SECRET': os.environ.get('JWT_SECRET', 'dev-secret-change-me'),
        'JWT_ALGORITHM': os.environ.get('JWT_ALGORITHM', 'HS256'),
        'JWT_EXPIRES_IN': int(os.environ.get('JWT_EXPIRES_IN', int(timedelta(days=7).total_seconds()))),
        'GOOGLE_CLIENT_ID': os.environ.get('GOOGLE_CLIENT_ID', ''),
        'GOOGLE_CLIENT_SECRET': os.environ.get('GOOGLE_CLIENT_SECRET', ''),
        'GOOGLE_CALLBACK_URL': os.environ.get('GOOGLE_CALLBACK_URL', ''),
        'FRONTEND_URL': os.environ.get('FRONTEND_URL', ''),
        'CORS_ORIGIN': os.environ.get('CORS_ORIGIN', '*'),
        # Never issued; keeps Flask-Login on the bearer request_loader
        'REMEMBER_COOKIE_NAME': 'habit_tracker_remember',
    }

@login_manager.user_loader
def load_user(user_id):
    # No cookie sessions; identity comes from the bearer token only
    return None

@login_manager.request_loader
def load_user_from_request(req):
    token = bearer_token(req)
    if not token:
        return None
    try:
        claims = verify_token(token)
    except InvalidToken:
        return None
    user = db.session.get(User, int(claims['sub']))
    if user is not None:
        g.token_claims = claims
    return user

@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'error': InvalidToken.message}), 401

def register_error_handlers(app):
    @app.errorhandler(HabitTrackerError)
    def handle_app_error(error):
        if error.status_code >= 500:
            app.logger.error('%s: %s', type(error).__name__, error.message)
        return jsonify({'error': error.message}), error.status_code

    @app.errorhandler(OperationalError)
    def handle_storage_unavailable(error):
        db.session.rollback()
        app.logger.exception('Database unavailable')
        return handle_app_error(InfrastructureError())

def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_mapping(default_config())
    if test_config:
        app.config.update(test_config)

    # Missing OAuth settings stop the process here rather than on first login
    check_google_config(app.config)
    app.logger.info('Google OAuth configured. callbackURL=%s clientID=...%s',
                    app.config['GOOGLE_CALLBACK_URL'], client_id_tail(app.config['GOOGLE_CLIENT_ID']))

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    CORS(app, origins=[o.strip() for o in app.config['CORS_ORIGIN'].split(',')])

    from routes import auth_bp, storage_bp
    app.register_blueprint(auth_bp)
    app.register_blueprint(storage_bp)
    register_error_handlers(app)
    register_commands(app)

    return app

if __name__ == '__main__':
    create_app().run(debug=True, port=int(os.environ.get('PORT', 3001)))
