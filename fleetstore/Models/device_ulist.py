# fleetstore/Models/device_ulist.py

"""
DeviceUList Model - Universal Group Membership

A universal DeviceGroup may hold devices owned by other accounts. Each
membership row names the group (accountID, groupID) and the member device
by its own owner (devaccID, deviceID). All four key parts are lowercase.

Database Table: deviceulist
"""

from sqlalchemy import Column, String, DateTime, ForeignKeyConstraint, Index
from sqlalchemy.sql import func
from fleetstore.DB.base_class import Base


class DeviceUList(Base):
    """
    Universal membership row: device devaccID/deviceID belongs to
    group accountID/groupID.
    """

    accountID = Column(String(32), primary_key=True)
    groupID = Column(String(32), primary_key=True)
    devaccID = Column(String(32), primary_key=True)
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
            name="fk_deviceulist_group",
            ondelete="CASCADE"
        ),
        ForeignKeyConstraint(
            ["devaccID", "deviceID"],
            ["device.accountID", "device.deviceID"],
            name="fk_deviceulist_device",
            ondelete="CASCADE"
        ),
        Index("idx_deviceulist_device", "devaccID", "deviceID"),
    )

    def __repr__(self) -> str:
        return (
            f"<DeviceUList(accountID={self.accountID!r}, groupID={self.groupID!r}, "
            f"devaccID={self.devaccID!r}, deviceID={self.deviceID!r})>"
        )
