"""initial_event_store_schema

Revision ID: 3f2a9c1d7e10
Revises:
Create Date: 2026-10-18 09:00:00

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create account, device, devicegroup, devicelist and eventdata.

    idx_eventdata_device_time backs every range query and the
    retention delete (accountID, deviceID, timestamp < cutoff).
    """
    print("[MIGRATION] Creating event store tables...")

    op.create_table(
        'account',
        sa.Column('accountID', sa.String(length=32), nullable=False),
        sa.Column('description', sa.String(length=128), nullable=True),
        sa.Column('isActive', sa.Boolean(), nullable=False),
        sa.Column('timeZone', sa.String(length=32), nullable=False),
        sa.Column('retainedEventAge', sa.BigInteger(), nullable=False),
        sa.Column('creationTime', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('accountID')
    )

    op.create_table(
        'device',
        sa.Column('accountID', sa.String(length=32), nullable=False),
        sa.Column('deviceID', sa.String(length=32), nullable=False),
        sa.Column('description', sa.String(length=128), nullable=True),
        sa.Column('isActive', sa.Boolean(), nullable=False),
        sa.Column('retainedEventAge', sa.BigInteger(), nullable=False),
        sa.Column('lastOdometerKM', sa.Float(), nullable=False),
        sa.Column('lastValidLatitude', sa.Float(), nullable=False),
        sa.Column('lastValidLongitude', sa.Float(), nullable=False),
        sa.Column('lastGPSTimestamp', sa.BigInteger(), nullable=False),
        sa.Column('creationTime', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['accountID'], ['account.accountID'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('accountID', 'deviceID')
    )

    op.create_table(
        'devicegroup',
        sa.Column('accountID', sa.String(length=32), nullable=False),
        sa.Column('groupID', sa.String(length=32), nullable=False),
        sa.Column('displayName', sa.String(length=64), nullable=True),
        sa.Column('description', sa.String(length=128), nullable=True),
        sa.Column('creationTime', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['accountID'], ['account.accountID'], name='fk_devicegroup_account', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('accountID', 'groupID')
    )

    op.create_table(
        'devicelist',
        sa.Column('accountID', sa.String(length=32), nullable=False),
        sa.Column('groupID', sa.String(length=32), nullable=False),
        sa.Column('deviceID', sa.String(length=32), nullable=False),
        sa.Column('creationTime', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(
            ['accountID', 'groupID'], ['devicegroup.accountID', 'devicegroup.groupID'],
            name='fk_devicelist_group', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['accountID', 'deviceID'], ['device.accountID', 'device.deviceID'],
            name='fk_devicelist_device', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('accountID', 'groupID', 'deviceID')
    )
    op.create_index('idx_devicelist_device', 'devicelist', ['accountID', 'deviceID'], unique=False)

    op.create_table(
        'eventdata',
        sa.Column('accountID', sa.String(length=32), nullable=False),
        sa.Column('deviceID', sa.String(length=32), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('statusCode', sa.Integer(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('cellLatitude', sa.Float(), nullable=True),
        sa.Column('cellLongitude', sa.Float(), nullable=True),
        sa.Column('altitude', sa.Float(), nullable=False),
        sa.Column('speedKPH', sa.Float(), nullable=False),
        sa.Column('heading', sa.Float(), nullable=False),
        sa.Column('odometerKM', sa.Float(), nullable=False),
        sa.Column('distanceKM', sa.Float(), nullable=False),
        sa.Column('address', sa.String(length=256), nullable=True),
        sa.Column('properties', sa.JSON(), nullable=True),
        sa.Column('creationTime', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(
            ['accountID', 'deviceID'], ['device.accountID', 'device.deviceID'],
            name='fk_eventdata_device', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('accountID', 'deviceID', 'timestamp', 'statusCode')
    )
    op.create_index('idx_eventdata_device_time', 'eventdata', ['accountID', 'deviceID', 'timestamp'], unique=False)

    print("[MIGRATION] ✅ Event store tables created")


def downgrade() -> None:
    print("[MIGRATION] Dropping event store tables...")
    op.drop_index('idx_eventdata_device_time', table_name='eventdata')
    op.drop_table('eventdata')
    op.drop_index('idx_devicelist_device', table_name='devicelist')
    op.drop_table('devicelist')
    op.drop_table('devicegroup')
    op.drop_table('device')
    op.drop_table('account')
    print("[MIGRATION] ✅ Event store tables dropped")
