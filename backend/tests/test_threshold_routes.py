from vitalwatch.models import Threshold


def test_defaults_when_never_customised(client, patient):
    resp = client.get('/api/thresholds', headers=patient['headers'])
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['threshold'] is None
    assert body['effective']['heartRate'] == {'min': 60, 'max': 100, 'unit': 'BPM'}
    assert body['effective']['oxygen']['min'] == 95


def test_first_save_creates_then_updates(client, patient):
    uid = patient['user']['id']
    resp = client.post('/api/thresholds', headers=patient['headers'], json={
        'heartRateMin': '55', 'heartRateMax': '110', 'oxygenMin': '93',
        'temperatureMin': '36', 'temperatureMax': '38'})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['threshold']['heartRateMin'] == 55
    assert body['effective']['temperature'] == {'min': 36, 'max': 38, 'unit': '°C'}

    resp = client.post('/api/thresholds', headers=patient['headers'], json={'heartRateMax': 120})
    body = resp.get_json()
    assert body['threshold']['heartRateMin'] == 55
    assert body['threshold']['heartRateMax'] == 120
    assert Threshold.query.filter_by(user_id=uid).count() == 1


def test_clearing_an_override_restores_default(client, patient):
    client.post('/api/thresholds', headers=patient['headers'], json={'oxygenMin': '90'})
    resp = client.post('/api/thresholds', headers=patient['headers'], json={'oxygenMin': ''})
    body = resp.get_json()
    assert body['threshold']['oxygenMin'] is None
    assert body['effective']['oxygen']['min'] == 95


def test_invalid_threshold_rejected(client, patient):
    resp = client.post('/api/thresholds', headers=patient['headers'],
                       json={'heartRateMin': '120', 'heartRateMax': '80'})
    assert resp.status_code == 400
    assert Threshold.query.count() == 0

    resp = client.post('/api/thresholds', headers=patient['headers'], json={'oxygenMin': 'low'})
    assert resp.status_code == 400


def test_empty_body_rejected(client, patient):
    assert client.post('/api/thresholds', headers=patient['headers'], json={}).status_code == 400
