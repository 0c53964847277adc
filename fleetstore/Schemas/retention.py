# fleetstore/Schemas/retention.py

from pydantic import BaseModel, Field
from typing import List, Optional


class DeviceRetention_get(BaseModel):
    """
    Outcome of counting or deleting old events for one device.

    count is None when the storage engine could not report a number.
    """
    deviceID: str
    count: Optional[int] = Field(None, description="Rows counted/deleted, None if unknown")
    elapsedMS: int = 0
    message: str = ""


class RetentionSweep_get(BaseModel):
    """
    Outcome of a group or account sweep.

    countUnsupported tells operators that total may be an undercount.
    """
    accountID: str
    groupID: str
    cutoff: int = Field(..., description="Effective cutoff (Unix seconds), exclusive")
    usedRetainedDate: bool = False
    total: Optional[int] = None
    countUnsupported: bool = False
    aborted: bool = False
    devices: List[DeviceRetention_get] = []
