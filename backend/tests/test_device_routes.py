from vitalwatch import db
from vitalwatch.models import Device

from conftest import auth_header, register


def test_create_and_list_devices(client, patient, add_device):
    device = add_device(patient['headers'])
    assert device['channelId'] == '123456'
    assert device['userId'] == patient['user']['id']
    # Keys are masked in responses
    assert device['readApiKey'] == '*********3456'
    assert 'READKEY' not in device['readApiKey']

    resp = client.get('/api/devices', headers=patient['headers'])
    assert resp.status_code == 200
    assert [d['id'] for d in resp.get_json()] == [device['id']]


def test_api_keys_encrypted_at_rest(client, patient, add_device):
    device = add_device(patient['headers'])
    row = db.session.get(Device, device['id'])
    assert row._read_api_key_encrypted != 'READKEY123456'
    assert row.read_api_key == 'READKEY123456'


def test_create_device_validation(client, patient):
    resp = client.post('/api/devices', headers=patient['headers'], json={'name': 'Band'})
    assert resp.status_code == 400


def test_get_device_only_for_owner(client, patient, add_device):
    device = add_device(patient['headers'])
    assert client.get(f"/api/devices/{device['id']}", headers=patient['headers']).status_code == 200

    token, _ = register(client, 'mallory')
    resp = client.get(f"/api/devices/{device['id']}", headers=auth_header(token))
    assert resp.status_code == 404
    assert client.get('/api/devices/999', headers=patient['headers']).status_code == 404
