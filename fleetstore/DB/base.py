"""
fleetstore/DB/base.py
==========================
SQLAlchemy Model Registry
==========================

Imports every model class so that they are registered with the metadata
before create_all() or Alembic autogeneration runs.

Models Registered:
-----------------
- Account: owner of devices, supplies the retained-event-age policy
- Device: tracking unit, owns a timeline of events
- DeviceGroup: named set of devices within an account
- DeviceList: group membership rows
- DeviceUList: universal group membership rows (devices of other accounts)
- Resource: named values owned by an account
- EventData: timestamped telemetry records keyed by
  (accountID, deviceID, timestamp, statusCode)

Important:
----------
Any new model classes MUST be imported here.
"""

from fleetstore.DB.base_class import Base

# ============================================================
# MODEL IMPORTS - DO NOT REMOVE
# ============================================================
from fleetstore.Models.account import Account
from fleetstore.Models.device import Device
from fleetstore.Models.device_group import DeviceGroup, DeviceList
from fleetstore.Models.device_ulist import DeviceUList
from fleetstore.Models.event_data import EventData
from fleetstore.Models.resource import Resource
