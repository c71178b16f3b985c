"""
ThingSpeak device registration.
"""
from datetime import datetime
from vitalwatch import db
from vitalwatch.utils.encryption import encrypt_phi, decrypt_phi, mask_secret


class Device(db.Model):
    """
    A ThingSpeak channel that publishes a user's vitals.
    API keys grant access to patient telemetry and are encrypted at rest.
    """
    __tablename__ = 'devices'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    channel_id = db.Column(db.String(50), nullable=False)
    _read_api_key_encrypted = db.Column('read_api_key', db.Text, nullable=False)
    _write_api_key_encrypted = db.Column('write_api_key', db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def read_api_key(self) -> str:
        return decrypt_phi(self._read_api_key_encrypted) if self._read_api_key_encrypted else None

    @read_api_key.setter
    def read_api_key(self, value: str):
        self._read_api_key_encrypted = encrypt_phi(value) if value else None

    @property
    def write_api_key(self) -> str:
        return decrypt_phi(self._write_api_key_encrypted) if self._write_api_key_encrypted else None

    @write_api_key.setter
    def write_api_key(self, value: str):
        self._write_api_key_encrypted = encrypt_phi(value) if value else None

    @staticmethod
    def first_for_user(user_id: int):
        """The device used for a user's dashboard: their earliest registration."""
        return Device.query.filter_by(user_id=user_id).order_by(Device.id.asc()).first()

    def to_dict(self):
        """API keys are masked; the plaintext never leaves the server."""
        return {
            'id': self.id,
            'userId': self.user_id,
            'name': self.name,
            'channelId': self.channel_id,
            'readApiKey': mask_secret(self.read_api_key),
            'writeApiKey': mask_secret(self.write_api_key),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Device {self.id} channel={self.channel_id}>'
