import secrets
from flask import request, jsonify, redirect, session, current_app, g
from flask_login import login_required
from . import auth_bp
from errors import InvalidExternalToken
from services import auth_service, google_identity
from utils import require_string, json_object

@auth_bp.route('/register', methods=['POST'])
def register():
    data = json_object(request)
    email = require_string(data, 'email')
    password = require_string(data, 'password')
    name = require_string(data, 'name', required=False)
    return jsonify(auth_service.register(email, password, name)), 201

@auth_bp.route('/login', methods=['POST'])
def login():
    data = json_object(request)
    email = require_string(data, 'email')
    password = require_string(data, 'password')
    return jsonify(auth_service.login(email, password))

@auth_bp.route('/profile', methods=['GET'])
@login_required
def profile():
    # Identity comes from the verified token, not from the database row
    claims = g.token_claims
    return jsonify({'userId': int(claims['sub']), 'email': claims['email']})

@auth_bp.route('/google', methods=['POST'])
def google():
    data = json_object(request)
    return jsonify(auth_service.external_login(data.get('idToken')))

@auth_bp.route('/google/oauth', methods=['GET'])
def google_oauth():
    state = secrets.token_urlsafe(24)
    session['google_oauth_state'] = state
    return redirect(google_identity.authorization_url(
        current_app.config['GOOGLE_CLIENT_ID'],
        current_app.config['GOOGLE_CALLBACK_URL'],
        state,
    ))

@auth_bp.route('/google/callback', methods=['GET'])
def google_callback():
    expected_state = session.pop('google_oauth_state', None)
    state = request.args.get('state')
    code = request.args.get('code')
    if not expected_state or not state or not secrets.compare_digest(state, expected_state) or not code:
        raise InvalidExternalToken()

    tokens = google_identity.exchange_code(
        code,
        current_app.config['GOOGLE_CLIENT_ID'],
        current_app.config['GOOGLE_CLIENT_SECRET'],
        current_app.config['GOOGLE_CALLBACK_URL'],
    )
    result = auth_service.external_login(tokens['id_token'], access_token=tokens.get('access_token'))

    frontend_url = current_app.config.get('FRONTEND_URL')
    if frontend_url:
        # Fragment, not query string: it never reaches server logs
        return redirect(f"{frontend_url.rstrip('#')}#access_token={result['access_token']}")
    return jsonify(result)
