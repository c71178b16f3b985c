from vitalwatch import db
from vitalwatch.models import User

from conftest import auth_header, register


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.get_json() == {'status': 'healthy'}


def test_register_returns_token_and_user(client):
    token, user = register(client, 'patricia')
    assert token
    assert user['username'] == 'patricia'
    assert user['role'] == 'patient'
    assert user['email'] == 'patricia@example.com'
    assert 'password_hash' not in user


def test_registered_phi_is_encrypted_at_rest(client):
    _, user = register(client, 'patricia')
    row = db.session.get(User, user['id'])
    assert row._email_encrypted != 'patricia@example.com'
    assert row._name_encrypted != 'Patricia'
    assert row.name == 'Patricia'


def test_register_validation_error(client):
    resp = client.post('/api/register', json={'username': 'a'})
    assert resp.status_code == 400
    assert isinstance(resp.get_json()['error'], list)


def test_register_duplicates(client):
    register(client, 'patricia')
    resp = client.post('/api/register', json={
        'username': 'patricia', 'email': 'other@example.com', 'password': 'secret123', 'name': 'Pat'})
    assert resp.status_code == 409

    resp = client.post('/api/register', json={
        'username': 'another', 'email': 'PATRICIA@example.com', 'password': 'secret123', 'name': 'Pat'})
    assert resp.status_code == 409


def test_register_patient_with_caregiver(client):
    _, carer = register(client, 'carl', role='caregiver')
    _, patient = register(client, 'patricia', caregiver_id=carer['id'])
    assert patient['caregiver_id'] == carer['id']


def test_register_rejects_non_caregiver_link(client):
    _, other = register(client, 'otto')
    resp = client.post('/api/register', json={
        'username': 'patricia', 'email': 'p@example.com', 'password': 'secret123',
        'name': 'Patricia', 'caregiver_id': other['id']})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Invalid caregiver ID'


def test_register_rejects_out_of_range_caregiver_id(client):
    resp = client.post('/api/register', json={
        'username': 'patricia', 'email': 'p@example.com', 'password': 'secret123',
        'name': 'Patricia', 'caregiver_id': 10 ** 30})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == ['Invalid caregiver ID']


def test_login(client):
    register(client, 'patricia')
    resp = client.post('/api/login', json={'email': 'Patricia@Example.com', 'password': 'secret123'})
    assert resp.status_code == 200
    token = resp.get_json()['token']

    me = client.get('/api/user', headers=auth_header(token))
    assert me.status_code == 200
    assert me.get_json()['username'] == 'patricia'


def test_login_bad_credentials(client):
    register(client, 'patricia')
    resp = client.post('/api/login', json={'email': 'patricia@example.com', 'password': 'wrong-pass'})
    assert resp.status_code == 401
    resp = client.post('/api/login', json={'email': 'nobody@example.com', 'password': 'secret123'})
    assert resp.status_code == 401


def test_requires_token(client):
    assert client.get('/api/user').status_code == 401
    assert client.get('/api/user', headers={'Authorization': 'Token abc'}).status_code == 401
    assert client.get('/api/user', headers=auth_header('garbage')).status_code == 401


def test_logout_revokes_token(client, patient):
    resp = client.post('/api/logout', headers=patient['headers'])
    assert resp.status_code == 200
    resp = client.get('/api/user', headers=patient['headers'])
    assert resp.status_code == 401
    assert resp.get_json()['error'] == 'Token has been revoked'


def test_deactivated_account_rejected(client, patient):
    user = db.session.get(User, patient['user']['id'])
    user.is_active = False
    db.session.commit()
    assert client.get('/api/user', headers=patient['headers']).status_code == 401


def test_non_json_body_rejected(client):
    resp = client.post('/api/login', data='email=x', content_type='application/x-www-form-urlencoded')
    assert resp.status_code == 415


def test_login_is_rate_limited(app, client):
    app.config['RATELIMIT_ENABLED'] = True
    for _ in range(5):
        resp = client.post('/api/login', json={'email': 'x@example.com', 'password': 'whatever'})
        assert resp.status_code == 401
    resp = client.post('/api/login', json={'email': 'x@example.com', 'password': 'whatever'})
    assert resp.status_code == 429


def test_security_headers(client):
    resp = client.get('/health')
    assert resp.headers['X-Content-Type-Options'] == 'nosniff'
    assert resp.headers['X-Frame-Options'] == 'DENY'
