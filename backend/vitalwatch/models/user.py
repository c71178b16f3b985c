"""
User model with encrypted PHI fields.
"""
import logging
from datetime import datetime
from vitalwatch import db
from vitalwatch.utils.encryption import encrypt_phi, decrypt_phi, hash_email

logger = logging.getLogger(__name__)

ROLE_PATIENT = 'patient'
ROLE_CAREGIVER = 'caregiver'


def _phi_property(column_attr):
    """Property that transparently encrypts on set and decrypts on get."""
    def getter(self):
        raw = getattr(self, column_attr)
        return decrypt_phi(raw) if raw else None

    def setter(self, value):
        setattr(self, column_attr, encrypt_phi(value) if value else None)

    return property(getter, setter)


class User(db.Model):
    """
    Patient or caregiver account.
    PHI fields (name, email, phone, address, emergency contact) are encrypted at rest.
    A patient's ``caregiver_id`` points at the caregiver who monitors them.
    """
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Encrypted PHI fields (stored as encrypted base64 strings)
    _name_encrypted = db.Column('name', db.Text, nullable=False)
    _email_encrypted = db.Column('email', db.Text, nullable=False)
    _email_hash = db.Column('email_hash', db.String(64), nullable=False, unique=True, index=True)
    _phone_encrypted = db.Column('phone', db.Text, nullable=True)
    _address_encrypted = db.Column('address', db.Text, nullable=True)
    _emergency_contact_encrypted = db.Column('emergency_contact', db.Text, nullable=True)
    _emergency_phone_encrypted = db.Column('emergency_phone', db.Text, nullable=True)

    role = db.Column(db.String(20), nullable=False, default=ROLE_PATIENT, index=True)
    caregiver_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)

    # Notification preferences
    email_alerts = db.Column(db.Boolean, nullable=False, default=True)
    sms_alerts = db.Column(db.Boolean, nullable=False, default=False)
    critical_alerts_only = db.Column(db.Boolean, nullable=False, default=False)

    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    devices = db.relationship('Device', backref='user', lazy='dynamic',
                              order_by='Device.id')
    alerts = db.relationship('Alert', backref='user', lazy='dynamic',
                             order_by='Alert.timestamp.desc()')
    threshold = db.relationship('Threshold', backref='user', uselist=False)
    patients = db.relationship('User', backref=db.backref('caregiver', remote_side=[id]),
                               lazy='dynamic')

    name = _phi_property('_name_encrypted')
    phone = _phi_property('_phone_encrypted')
    address = _phi_property('_address_encrypted')
    emergency_contact = _phi_property('_emergency_contact_encrypted')
    emergency_phone = _phi_property('_emergency_phone_encrypted')

    @property
    def email(self) -> str:
        return decrypt_phi(self._email_encrypted) if self._email_encrypted else None

    @email.setter
    def email(self, value: str):
        self._email_encrypted = encrypt_phi(value) if value else None
        self._email_hash = hash_email(value) if value else None

    @property
    def is_caregiver(self):
        return self.role == ROLE_CAREGIVER

    def has_patient(self, patient_id: int) -> bool:
        """True if ``patient_id`` is a patient monitored by this caregiver."""
        if not self.is_caregiver:
            return False
        return self.patients.filter_by(id=patient_id).first() is not None

    def notification_settings(self):
        return {
            'emailAlerts': self.email_alerts,
            'smsAlerts': self.sms_alerts,
            'criticalAlertsOnly': self.critical_alerts_only,
        }

    def to_dict(self, include_phi=False):
        """Convert to dictionary. Only include PHI if explicitly requested.
        The password hash is never included."""
        data = {
            'id': self.id,
            'username': self.username,
            'role': self.role,
            'caregiver_id': self.caregiver_id,
            'is_active': self.is_active,
            'notifications': self.notification_settings(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_phi:
            # Decrypt each field on its own so one bad value doesn't hide the rest
            for key in ('name', 'email', 'phone', 'address', 'emergency_contact', 'emergency_phone'):
                try:
                    data[key] = getattr(self, key)
                except Exception:
                    logger.error(
                        'Decryption error for user_id=%s field=%s', self.id, key,
                        exc_info=True,
                    )
                    data[key] = None
        return data

    @staticmethod
    def find_by_email(email: str):
        """Find a user by email using deterministic HMAC hash for lookup."""
        return User.query.filter_by(_email_hash=hash_email(email)).first()

    @staticmethod
    def find_by_username(username: str):
        return User.query.filter_by(username=username).first()

    def __repr__(self):
        return f'<User {self.id} {self.role}>'
