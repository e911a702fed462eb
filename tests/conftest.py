import pytest
from app import create_app
from models import db, User

TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test-secret-key',
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'JWT_SECRET': 'test-jwt-secret',
    'JWT_ALGORITHM': 'HS256',
    'JWT_EXPIRES_IN': 3600,
    'GOOGLE_CLIENT_ID': 'test-client-id.apps.googleusercontent.com',
    'GOOGLE_CLIENT_SECRET': 'test-client-secret',
    'GOOGLE_CALLBACK_URL': 'http://localhost:3001/auth/google/callback',
    'FRONTEND_URL': '',
    'CORS_ORIGIN': '*',
}

@pytest.fixture
def app():
    app = create_app(dict(TEST_CONFIG))
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client

@pytest.fixture
def register(client):
    def _register(email='testuser@example.com', password='password', name=None):
        body = {'email': email, 'password': password}
        if name is not None:
            body['name'] = name
        response = client.post('/auth/register', json=body)
        assert response.status_code == 201
        data = response.get_json()
        headers = {'Authorization': f"Bearer {data['access_token']}"}
        return data, headers
    return _register

@pytest.fixture
def auth_client(client, register):
    data, headers = register()
    user = db.session.get(User, data['user']['id'])
    client.environ_base['HTTP_AUTHORIZATION'] = headers['Authorization']
    return client, user

@pytest.fixture
def file_app(tmp_path):
    # Threads need a real file; in-memory SQLite is a single shared connection
    config = dict(TEST_CONFIG)
    config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{tmp_path / 'test.sqlite3'}"
    config['SQLALCHEMY_ENGINE_OPTIONS'] = {'connect_args': {'timeout': 30}}
    app = create_app(config)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
