import pytest

from skillswap import create_app, db, get_services


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'JWT_SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'skillswap.db'}",
        'BCRYPT_LOG_ROUNDS': 4,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    with app.app_context():
        yield get_services()


@pytest.fixture
def register(client):
    """Register a user over HTTP and return (user, auth headers)."""
    def _register(username, **extra):
        payload = {
            'username': username,
            'email': f'{username}@example.com',
            'password': 'hanoihue',
            'full_name': username.title(),
        }
        payload.update(extra)
        response = client.post('/api/auth/register', json=payload)
        assert response.status_code == 201, response.get_json()
        body = response.get_json()
        return body['user'], {'Authorization': f"Bearer {body['token']}"}
    return _register


@pytest.fixture
def add_skill(client):
    def _add_skill(headers, skill_name='Guitar Lessons', **extra):
        payload = {'skill_name': skill_name, 'proficiency_level': 'Advanced'}
        payload.update(extra)
        response = client.post('/api/skills', json=payload, headers=headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()['skill']
    return _add_skill
