from types import SimpleNamespace

import pytest

from vitalwatch.utils.alerting import Reading, check_for_alerts, evaluate, format_number
from vitalwatch.utils.vital_ranges import DEFAULT_VITAL_RANGES


class RecordingStore:
    def __init__(self):
        self.alerts = []

    def __call__(self, **fields):
        self.alerts.append(fields)
        return fields


@pytest.fixture
def store():
    return RecordingStore()


def _evaluate(store, **vitals):
    return evaluate(7, Reading(**vitals), DEFAULT_VITAL_RANGES, create_alert=store)


@pytest.mark.parametrize('value, severity', [
    (49, 'critical'),   # min - 11
    (111, 'critical'),  # max + 11
    (51, 'warning'),    # min - 9
    (109, 'warning'),   # max + 9
    (50, 'warning'),    # min - 10 is not yet critical
    (110, 'warning'),
])
def test_heart_rate_severity(store, value, severity):
    [alert] = _evaluate(store, heart_rate=value)
    assert alert['type'] == 'heart-rate'
    assert alert['severity'] == severity


@pytest.mark.parametrize('value, severity', [
    (92, 'critical'),    # min - 3 is critical
    (92.1, 'warning'),   # min - 2.9
    (94.9, 'warning'),
    (80, 'critical'),
])
def test_oxygen_severity(store, value, severity):
    [alert] = _evaluate(store, oxygen=value)
    assert alert['type'] == 'oxygen'
    assert alert['severity'] == severity


def test_oxygen_has_no_upper_bound(store):
    assert _evaluate(store, oxygen=100) == []
    assert _evaluate(store, oxygen=105) == []
    assert store.alerts == []


@pytest.mark.parametrize('value, severity', [
    (39.0, 'critical'),  # max + 1.5
    (38.0, 'warning'),   # max + 0.5
    (35.0, 'critical'),  # min - 1.5
    (36.0, 'warning'),   # min - 0.5
])
def test_temperature_severity(store, value, severity):
    [alert] = _evaluate(store, temperature=value)
    assert alert['type'] == 'temperature'
    assert alert['severity'] == severity


def test_all_in_range_produces_nothing(store):
    assert _evaluate(store, heart_rate=72, oxygen=98, temperature=36.8) == []
    assert store.alerts == []


def test_range_bounds_are_inclusive(store):
    assert _evaluate(store, heart_rate=60, oxygen=95, temperature=37.5) == []
    assert _evaluate(store, heart_rate=100, temperature=36.5) == []


def test_missing_fields_never_alert(store):
    assert _evaluate(store) == []
    [alert] = _evaluate(store, temperature=40)
    assert alert['type'] == 'temperature'


def test_alert_fields_and_messages(store):
    alerts = _evaluate(store, heart_rate=120, oxygen=90, temperature=38.2)

    assert [a['type'] for a in alerts] == ['heart-rate', 'oxygen', 'temperature']
    assert all(a['user_id'] == 7 and a['is_read'] is False for a in alerts)

    heart, oxygen, temperature = alerts
    assert heart['message'] == 'Heart rate is 120 BPM, outside normal range (60-100 BPM)'
    assert heart['severity'] == 'critical'
    assert oxygen['message'] == 'Oxygen saturation is 90%, below normal range (≥95%)'
    assert oxygen['severity'] == 'critical'
    assert temperature['message'] == 'Temperature is 38.2°C, outside normal range (36.5-37.5°C)'
    assert temperature['severity'] == 'warning'


def test_store_errors_propagate():
    def failing_store(**fields):
        raise RuntimeError('database is down')

    with pytest.raises(RuntimeError, match='database is down'):
        evaluate(1, Reading(heart_rate=150), DEFAULT_VITAL_RANGES, create_alert=failing_store)


def test_store_failure_stops_later_writes():
    calls = []

    def flaky_store(**fields):
        calls.append(fields['type'])
        if fields['type'] == 'oxygen':
            raise RuntimeError('write failed')
        return fields

    with pytest.raises(RuntimeError):
        evaluate(1, Reading(heart_rate=150, oxygen=80, temperature=40), DEFAULT_VITAL_RANGES,
                 create_alert=flaky_store)
    assert calls == ['heart-rate', 'oxygen']


def test_repeated_readings_are_not_deduplicated(store):
    _evaluate(store, heart_rate=130)
    _evaluate(store, heart_rate=130)
    assert len(store.alerts) == 2


def test_reading_from_feed_parses_thingspeak_strings():
    reading = Reading.from_feed({
        'created_at': '2026-10-18T08:00:00Z',
        'field1': '72',
        'field2': None,
        'field3': 'n/a',
    })
    assert reading.heart_rate == 72.0
    assert reading.oxygen is None
    assert reading.temperature is None
    assert reading.created_at == '2026-10-18T08:00:00Z'


@pytest.mark.parametrize('value, text', [(120, '120'), (120.0, '120'), (38.2, '38.2'), (36.5, '36.5')])
def test_format_number(value, text):
    assert format_number(value) == text


class TestCheckForAlerts:

    def test_uses_first_feed_entry(self, store):
        feed = {'feeds': [{'field1': '130', 'created_at': 'new'},
                          {'field1': '72', 'created_at': 'old'}]}
        [alert] = check_for_alerts(3, feed, create_alert=store)
        assert alert['message'].startswith('Heart rate is 130 BPM')

    @pytest.mark.parametrize('feed', [None, {}, {'feeds': []}, {'feeds': None}])
    def test_empty_feed_is_a_no_op(self, store, feed):
        assert check_for_alerts(3, feed, create_alert=store) == []
        assert store.alerts == []

    def test_custom_threshold_is_applied(self, store):
        threshold = SimpleNamespace(heart_rate_min=None, heart_rate_max='140', oxygen_min='90',
                                    temperature_min=None, temperature_max=None)
        feed = {'feeds': [{'field1': '130', 'field2': '91', 'field3': '36.9'}]}
        assert check_for_alerts(3, feed, threshold=threshold, create_alert=store) == []

    def test_custom_threshold_in_message(self, store):
        threshold = SimpleNamespace(heart_rate_min='50', heart_rate_max='90', oxygen_min='abc',
                                    temperature_min=None, temperature_max=None)
        feed = {'feeds': [{'field1': '95', 'field2': '93'}]}
        heart, oxygen = check_for_alerts(3, feed, threshold=threshold, create_alert=store)
        assert heart['message'] == 'Heart rate is 95 BPM, outside normal range (50-90 BPM)'
        assert heart['severity'] == 'warning'
        # Unparseable oxygen override falls back to the 95% default
        assert oxygen['message'] == 'Oxygen saturation is 93%, below normal range (≥95%)'

    @pytest.mark.parametrize('overrides, field, value, severity', [
        ({'oxygen_min': '64.1'}, 'field2', '61.1', 'critical'),      # exactly min - 3
        ({'oxygen_min': '64.1'}, 'field2', '61.2', 'warning'),
        ({'heart_rate_min': '64.4'}, 'field1', '54.4', 'warning'),   # exactly min - 10
        ({'heart_rate_min': '64.4'}, 'field1', '54.3', 'critical'),
        ({'heart_rate_max': '100.7'}, 'field1', '110.7', 'warning'),  # exactly max + 10
        ({'temperature_max': '37.3'}, 'field3', '38.3', 'warning'),   # exactly max + 1
        ({'temperature_min': '36.1'}, 'field3', '35.1', 'warning'),   # exactly min - 1
        ({'temperature_min': '36.1'}, 'field3', '35.09', 'critical'),
    ])
    def test_fractional_threshold_boundaries(self, store, overrides, field, value, severity):
        columns = dict(heart_rate_min=None, heart_rate_max=None, oxygen_min=None,
                       temperature_min=None, temperature_max=None)
        columns.update(overrides)
        feed = {'feeds': [{field: value}]}
        [alert] = check_for_alerts(3, feed, threshold=SimpleNamespace(**columns), create_alert=store)
        assert alert['severity'] == severity
