# fleetstore/Schemas/device_group.py

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class DeviceGroup_base(BaseModel):
    """
    Base schema for device groups.
    """
    model_config = ConfigDict(from_attributes=True)

    groupID: str = Field(..., min_length=1, max_length=32, description="Group identifier")
    displayName: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = Field(None, max_length=128)


class DeviceGroup_create(DeviceGroup_base):
    """
    Schema for creating a group. The reserved id "all" is rejected.
    """
    pass


class DeviceGroup_get(DeviceGroup_base):
    accountID: str


class DeviceGroupList_response(BaseModel):
    accountID: str
    groups: List[str]


class GroupDevices_response(BaseModel):
    accountID: str
    groupID: str
    devices: List[str]
