"""
ThingSpeak telemetry client.

Devices publish heart rate to field1, oxygen saturation to field2 and body
temperature to field3 of a ThingSpeak channel. Responses are returned as the
decoded JSON: ``{'channel': {...}, 'feeds': [...]}``.
"""
import logging
from datetime import datetime, timedelta, timezone

import requests
from flask import current_app

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = 'https://api.thingspeak.com'


class TelemetryError(Exception):
    """Raised when the telemetry API cannot be reached or answers with an error."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class ThingSpeakClient:

    def __init__(self, base_url=DEFAULT_API_BASE, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        # Only sessions created here are closed by close()
        self._owns_session = session is None
        self.session = session or requests.Session()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        if self._owns_session:
            self.session.close()

    @classmethod
    def from_app(cls):
        """Build a client from the current Flask app configuration."""
        return cls(
            base_url=current_app.config.get('THINGSPEAK_API_BASE', DEFAULT_API_BASE),
            timeout=current_app.config.get('THINGSPEAK_TIMEOUT', 10),
        )

    def _get_feeds(self, channel_id: str, params: dict) -> dict:
        url = f'{self.base_url}/channels/{channel_id}/feeds.json'
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error('ThingSpeak request failed for channel %s: %s', channel_id, e)
            raise TelemetryError(f'ThingSpeak API error: {e}') from e

        if not response.ok:
            logger.warning('ThingSpeak returned %s for channel %s', response.status_code, channel_id)
            raise TelemetryError(f'ThingSpeak API error: {response.reason}', status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise TelemetryError('ThingSpeak API returned invalid JSON') from e

    def get_latest_data(self, channel_id: str, api_key: str) -> dict:
        """Fetch the single most recent entry of a channel."""
        return self._get_feeds(channel_id, {'api_key': api_key, 'results': 1})

    def get_historical_data(self, channel_id: str, api_key: str, days: int = 10) -> dict:
        """Fetch every entry from the last ``days`` days."""
        start = datetime.now(timezone.utc) - timedelta(days=days)
        return self._get_feeds(channel_id, {
            'api_key': api_key,
            'start': start.strftime('%Y-%m-%dT%H:%M:%SZ'),
        })
