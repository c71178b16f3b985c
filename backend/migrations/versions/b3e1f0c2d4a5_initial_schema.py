"""initial schema: users, devices, alerts, thresholds

Revision ID: b3e1f0c2d4a5
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b3e1f0c2d4a5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('email_hash', sa.String(64), nullable=False),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('emergency_contact', sa.Text(), nullable=True),
        sa.Column('emergency_phone', sa.Text(), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='patient'),
        sa.Column('caregiver_id', sa.Integer(), nullable=True),
        sa.Column('email_alerts', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sms_alerts', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('critical_alerts_only', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['caregiver_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email_hash', 'users', ['email_hash'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_caregiver_id', 'users', ['caregiver_id'])

    op.create_table('devices',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('channel_id', sa.String(50), nullable=False),
        sa.Column('read_api_key', sa.Text(), nullable=False),
        sa.Column('write_api_key', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_devices_user_id', 'devices', ['user_id'])

    op.create_table('alerts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('severity', sa.String(10), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_alerts_user_id', 'alerts', ['user_id'])
    op.create_index('ix_alerts_timestamp', 'alerts', ['timestamp'])

    op.create_table('thresholds',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('heart_rate_min', sa.Numeric(6, 2), nullable=True),
        sa.Column('heart_rate_max', sa.Numeric(6, 2), nullable=True),
        sa.Column('oxygen_min', sa.Numeric(6, 2), nullable=True),
        sa.Column('temperature_min', sa.Numeric(6, 2), nullable=True),
        sa.Column('temperature_max', sa.Numeric(6, 2), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )

    op.create_table('revoked_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('jti', sa.String(64), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_revoked_tokens_jti', 'revoked_tokens', ['jti'], unique=True)

    op.create_table('rate_limit_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(255), nullable=False),
        sa.Column('endpoint', sa.String(64), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_rate_limit_entries_key', 'rate_limit_entries', ['key'])
    op.create_index('ix_rate_limit_entries_endpoint', 'rate_limit_entries', ['endpoint'])
    op.create_index('ix_rate_limit_key_endpoint_ts', 'rate_limit_entries', ['key', 'endpoint', 'timestamp'])


def downgrade():
    op.drop_table('rate_limit_entries')
    op.drop_table('revoked_tokens')
    op.drop_table('thresholds')
    op.drop_table('alerts')
    op.drop_table('devices')
    op.drop_table('users')
