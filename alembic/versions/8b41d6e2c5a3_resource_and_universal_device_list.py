"""resource_and_universal_device_list

Revision ID: 8b41d6e2c5a3
Revises: 3f2a9c1d7e10
Create Date: 2026-10-18 15:30:00

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8b41d6e2c5a3'
down_revision: Union[str, None] = '3f2a9c1d7e10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create resource and deviceulist.

    idx_deviceulist_device backs the "which groups list this device"
    lookup, keyed by the device's own account.
    """
    print("[MIGRATION] Creating resource and deviceulist tables...")

    op.create_table(
        'resource',
        sa.Column('accountID', sa.String(length=32), nullable=False),
        sa.Column('resourceID', sa.String(length=80), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=True),
        sa.Column('title', sa.String(length=70), nullable=True),
        sa.Column('description', sa.String(length=128), nullable=True),
        sa.Column('properties', sa.JSON(), nullable=True),
        sa.Column('value', sa.LargeBinary(), nullable=True),
        sa.Column('creationTime', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('lastUpdateTime', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['accountID'], ['account.accountID'], name='fk_resource_account', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('accountID', 'resourceID')
    )

    op.create_table(
        'deviceulist',
        sa.Column('accountID', sa.String(length=32), nullable=False),
        sa.Column('groupID', sa.String(length=32), nullable=False),
        sa.Column('devaccID', sa.String(length=32), nullable=False),
        sa.Column('deviceID', sa.String(length=32), nullable=False),
        sa.Column('creationTime', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(
            ['accountID', 'groupID'], ['devicegroup.accountID', 'devicegroup.groupID'],
            name='fk_deviceulist_group', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['devaccID', 'deviceID'], ['device.accountID', 'device.deviceID'],
            name='fk_deviceulist_device', ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('accountID', 'groupID', 'devaccID', 'deviceID')
    )
    op.create_index('idx_deviceulist_device', 'deviceulist', ['devaccID', 'deviceID'], unique=False)

    print("[MIGRATION] ✅ resource and deviceulist tables created")


def downgrade() -> None:
    print("[MIGRATION] Dropping resource and deviceulist tables...")
    op.drop_index('idx_deviceulist_device', table_name='deviceulist')
    op.drop_table('deviceulist')
    op.drop_table('resource')
    print("[MIGRATION] ✅ resource and deviceulist tables dropped")
