"""Initial netwatch schema

Revision ID: 4c1d2e7a9b10
Revises:
Create Date: 2026-10-18 09:12:41.102317

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1d2e7a9b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create devices, system_config and device_status_history."""
    op.create_table(
        'devices',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('ip', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('lane_name', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('status_since', sa.DateTime(), nullable=False),
        sa.Column('last_seen', sa.DateTime(), nullable=True),
        sa.Column('position_x', sa.Float(), nullable=False),
        sa.Column('position_y', sa.Float(), nullable=False),
        sa.Column('netwatch_timeout', sa.Integer(), nullable=False),
        sa.Column('netwatch_interval', sa.Integer(), nullable=False),
        sa.Column('netwatch_up_script', sa.String(), nullable=True),
        sa.Column('netwatch_down_script', sa.String(), nullable=True),
        sa.Column('needs_sync', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('ip'),
    )
    op.create_index(op.f('ix_devices_name'), 'devices', ['name'], unique=False)

    op.create_table(
        'system_config',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('mikrotik_host', sa.String(), nullable=False),
        sa.Column('mikrotik_user', sa.String(), nullable=False),
        sa.Column('mikrotik_password', sa.String(), nullable=False),
        sa.Column('mikrotik_port', sa.Integer(), nullable=False),
        sa.Column('polling_interval', sa.Integer(), nullable=False),
        sa.Column('default_netwatch_timeout', sa.Integer(), nullable=False),
        sa.Column('default_netwatch_interval', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'device_status_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('device_id', sa.String(), nullable=False),
        sa.Column('device_ip', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_device_status_history_id'), 'device_status_history', ['id'], unique=False)
    op.create_index(op.f('ix_device_status_history_device_id'), 'device_status_history', ['device_id'], unique=False)
    op.create_index(op.f('ix_device_status_history_timestamp'), 'device_status_history', ['timestamp'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_device_status_history_timestamp'), table_name='device_status_history')
    op.drop_index(op.f('ix_device_status_history_device_id'), table_name='device_status_history')
    op.drop_index(op.f('ix_device_status_history_id'), table_name='device_status_history')
    op.drop_table('device_status_history')
    op.drop_table('system_config')
    op.drop_index(op.f('ix_devices_name'), table_name='devices')
    op.drop_table('devices')
