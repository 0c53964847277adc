# fleetstore/Schemas/event_data.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


"""
Base schema with the fields shared by event payloads.
"""
class EventData_base(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    accountID: str = Field(..., min_length=1, max_length=32, description="Owning account")
    deviceID: str = Field(..., min_length=1, max_length=32, description="Reporting device")
    timestamp: int = Field(..., ge=0, description="Event time in Unix seconds")
    statusCode: int = Field(..., ge=0, description="Event classification code")

    latitude: float = Field(0.0, ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(0.0, ge=-180, le=180, description="Longitude in decimal degrees")
    cellLatitude: Optional[float] = Field(None, ge=-90, le=90)
    cellLongitude: Optional[float] = Field(None, ge=-180, le=180)
    altitude: float = Field(0.0, description="Altitude in meters")

    speedKPH: float = Field(0.0, ge=0, description="Speed in km/h")
    heading: float = Field(0.0, ge=0, lt=360, description="Heading in degrees")
    odometerKM: float = Field(0.0, ge=0)
    distanceKM: float = Field(0.0, ge=0)

    address: Optional[str] = Field(None, max_length=256)
    properties: Optional[Dict[str, Any]] = Field(None, description="Extra device-reported values")


"""
Schema for writing an event. Writing an existing
(accountID, deviceID, timestamp, statusCode) key overwrites it.
"""
class EventData_create(EventData_base):
    pass


"""
Schema for events read back from the database.
"""
class EventData_get(EventData_base):
    model_config = ConfigDict(from_attributes=True)


"""
Range query response.
"""
class EventRange_response(BaseModel):
    accountID: str
    deviceID: str
    count: int
    events: List[EventData_get]


"""
Count response. count is None when the store cannot count the range.
"""
class EventCount_response(BaseModel):
    accountID: str
    deviceID: str
    count: Optional[int] = None
    countSupported: bool = True


"""
Accumulated great-circle distance over a time window.
"""
class EventDistance_response(BaseModel):
    accountID: str
    deviceID: str
    timeStart: int
    timeEnd: int
    distanceKM: float
