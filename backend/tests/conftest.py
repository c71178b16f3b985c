import base64
import logging

import pytest

from vitalwatch import create_app, db
from vitalwatch.utils import encryption

TEST_KEY = base64.b64encode(b'\x01' * 32).decode()


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv('SECRET_KEY', 'test-secret')
    monkeypatch.setenv('DATABASE_URL', 'sqlite://')
    monkeypatch.setenv('JWT_SECRET_KEY', 'test-jwt-secret')
    monkeypatch.setenv('PHI_ENCRYPTION_KEY', TEST_KEY)
    monkeypatch.setenv('AUDIT_LOG_FILE', str(tmp_path / 'audit.log'))
    monkeypatch.delenv('FLASK_ENV', raising=False)
    monkeypatch.delenv('ALLOWED_ORIGINS', raising=False)
    monkeypatch.setattr(encryption, '_encryptor', None)

    app = create_app({
        'TESTING': True,
        'RATELIMIT_ENABLED': False,
        'SQLALCHEMY_ENGINE_OPTIONS': {},
        'THINGSPEAK_API_BASE': 'https://thingspeak.test',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

    audit = logging.getLogger('audit')
    for handler in list(audit.handlers):
        audit.removeHandler(handler)
        handler.close()


@pytest.fixture
def client(app):
    return app.test_client()


def auth_header(token):
    return {'Authorization': f'Bearer {token}'}


def register(client, username, role='patient', caregiver_id=None, password='secret123'):
    payload = {
        'username': username,
        'email': f'{username}@example.com',
        'password': password,
        'name': username.title(),
        'role': role,
    }
    if caregiver_id is not None:
        payload['caregiver_id'] = caregiver_id
    resp = client.post('/api/register', json=payload)
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    return body['token'], body['user']


@pytest.fixture
def patient(client):
    token, user = register(client, 'patricia')
    return {'token': token, 'user': user, 'headers': auth_header(token)}


@pytest.fixture
def caregiver(client):
    token, user = register(client, 'carl', role='caregiver')
    return {'token': token, 'user': user, 'headers': auth_header(token)}


@pytest.fixture
def add_device(client):
    def _add(headers, channel_id='123456', name='Wristband'):
        resp = client.post('/api/devices', headers=headers, json={
            'name': name,
            'channelId': channel_id,
            'readApiKey': 'READKEY123456',
            'writeApiKey': 'WRITEKEY123456',
        })
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _add


def feed_response(*entries):
    """ThingSpeak feeds.json body with the given entries, most recent first."""
    return {
        'channel': {'id': 123456, 'name': 'Vitals', 'description': '',
                    'created_at': '2026-01-01T00:00:00Z', 'updated_at': '2026-10-18T08:00:00Z'},
        'feeds': list(entries),
    }
