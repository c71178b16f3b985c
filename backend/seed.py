"""
Seed script: creates a demo caregiver with one linked patient.
Run from backend/: python seed.py
"""
import os

from vitalwatch import create_app, db
from vitalwatch.models import User, Device
from vitalwatch.utils.auth import hash_password

DEMO_PASSWORD = os.getenv('SEED_PASSWORD', 'changeme123')

ACCOUNTS = [
    # (username, email, name, role)
    ('caregiver', 'caregiver@vitalwatch.local', 'Demo Caregiver', 'caregiver'),
    ('patient', 'patient@vitalwatch.local', 'Demo Patient', 'patient'),
]


def _get_or_create(username, email, name, role, caregiver_id=None):
    user = User.find_by_username(username)
    if user:
        print(f"  User '{username}' already exists (id={user.id}), skipping.")
        return user
    user = User(username=username, password_hash=hash_password(DEMO_PASSWORD),
                role=role, caregiver_id=caregiver_id)
    user.name = name
    user.email = email
    db.session.add(user)
    db.session.commit()
    print(f"  Created {role} '{username}' (id={user.id}, email={email})")
    return user


def seed():
    app = create_app()
    with app.app_context():
        (cg_username, cg_email, cg_name, cg_role), (p_username, p_email, p_name, p_role) = ACCOUNTS
        caregiver = _get_or_create(cg_username, cg_email, cg_name, cg_role)
        patient = _get_or_create(p_username, p_email, p_name, p_role, caregiver_id=caregiver.id)

        channel_id = os.getenv('SEED_THINGSPEAK_CHANNEL')
        read_key = os.getenv('SEED_THINGSPEAK_READ_KEY')
        if channel_id and read_key and Device.first_for_user(patient.id) is None:
            device = Device(user_id=patient.id, name='Demo wristband', channel_id=channel_id)
            device.read_api_key = read_key
            device.write_api_key = os.getenv('SEED_THINGSPEAK_WRITE_KEY', read_key)
            db.session.add(device)
            db.session.commit()
            print(f"  Registered ThingSpeak channel {channel_id} for '{p_username}'")

        print("\nDone.")


if __name__ == "__main__":
    seed()
