# fleetstore/Models/device_group.py

"""
DeviceGroup and DeviceList Models

A DeviceGroup is a named set of Devices within an Account. Membership is
stored as DeviceList rows. The reserved group id "all" is never stored:
it always exists and stands for every device of the account.

Database Tables: devicegroup, devicelist
"""

from sqlalchemy import Column, String, DateTime, ForeignKeyConstraint, Index
from sqlalchemy.sql import func
from fleetstore.DB.base_class import Base


DEVICE_GROUP_ALL = "all"


def is_group_all(group_id) -> bool:
    return group_id is not None and group_id.strip().lower() == DEVICE_GROUP_ALL


class DeviceGroup(Base):
    """
    SQLAlchemy model representing a named device group.

    Schema:
    - accountID (PK, FK): Owning account
    - groupID (PK): Group identifier, unique within the account
    - displayName: Short name shown in reports
    - description: Longer description
    """

    accountID = Column(String(32), primary_key=True)
    groupID = Column(String(32), primary_key=True)

    displayName = Column(String(64), nullable=True)
    description = Column(String(128), nullable=True)

    creationTime = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        ForeignKeyConstraint(
            ["accountID"],
            ["account.accountID"],
            name="fk_devicegroup_account",
            ondelete="CASCADE"
        ),
    )

    def get_display_name(self) -> str:
        return self.displayName or self.groupID

    def __repr__(self) -> str:
        return f"<DeviceGroup(accountID={self.accountID!r}, groupID={self.groupID!r})>"


class DeviceList(Base):
    """
    Group membership row: device (accountID, deviceID) belongs to groupID.
    """

    accountID = Column(String(32), primary_key=True)
    groupID = Column(String(32), primary_key=True)
    deviceID = Column(String(32), primary_key=True)

    creationTime = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        ForeignKeyConstraint(
            ["accountID", "groupID"],
            ["devicegroup.accountID", "devicegroup.groupID"],
            name="fk_devicelist_group",
            ondelete="CASCADE"
        ),
        ForeignKeyConstraint(
            ["accountID", "deviceID"],
            ["device.accountID", "device.deviceID"],
            name="fk_devicelist_device",
            ondelete="CASCADE"
        ),
        Index("idx_devicelist_device", "accountID", "deviceID"),
    )

    def __repr__(self) -> str:
        return (
            f"<DeviceList(accountID={self.accountID!r}, groupID={self.groupID!r}, "
            f"deviceID={self.deviceID!r})>"
        )
