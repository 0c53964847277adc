# fleetstore/Repositories/device_group.py

"""
DeviceGroup Repository Module

Group lookup, creation and membership management.

The reserved group "all" is never stored. It always exists, every device
of the account is a member, and membership in it cannot be edited.

Usage:
    from fleetstore.Repositories import device_group as group_repo

    device_ids = group_repo.get_device_ids_for_group(db, "acme", "north-fleet")
"""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from fleetstore.Core.errors import NotFound
from fleetstore.DB.transaction import store_errors, transaction
from fleetstore.Models.device import Device
from fleetstore.Models.device_group import (
    DEVICE_GROUP_ALL, DeviceGroup, DeviceList, is_group_all
)
from fleetstore.Repositories import account as account_repo
from fleetstore.Schemas.device_group import DeviceGroup_create


def _norm(value: Optional[str]) -> str:
    return (value or "").strip().lower()


# ==========================================================
# 📌 GROUP LOOKUP
# ==========================================================

def group_exists(db: Session, account_id: str, group_id: str) -> bool:
    account_id, group_id = _norm(account_id), _norm(group_id)
    if not account_id or not group_id:
        return False
    if is_group_all(group_id):
        return True
    with store_errors("get device group"):
        return db.get(DeviceGroup, (account_id, group_id)) is not None


def get_device_group(db: Session, account_id: str, group_id: str) -> Optional[DeviceGroup]:
    """Stored group, or None (also None for the virtual "all" group)."""
    account_id, group_id = _norm(account_id), _norm(group_id)
    if not account_id or not group_id or is_group_all(group_id):
        return None
    with store_errors("get device group"):
        return db.get(DeviceGroup, (account_id, group_id))


def create_device_group(db: Session, account_id: str, group: DeviceGroup_create) -> DeviceGroup:
    """
    Create a new group in an existing account.

    Raises:
        NotFound: if the account does not exist
        ValueError: for a blank or reserved group id
    """
    account = account_repo.require_account(db, account_id)
    group_id = _norm(group.groupID)
    if not group_id or is_group_all(group_id):
        raise ValueError(f"Invalid device group id: {group.groupID!r}")
    if group_exists(db, account.accountID, group_id):
        raise ValueError(f"Device group already exists: {account.accountID}/{group_id}")

    new_group = DeviceGroup(
        accountID=account.accountID,
        groupID=group_id,
        displayName=group.displayName,
        description=group.description
    )
    with transaction(db, "create device group"):
        with store_errors("create device group"):
            db.add(new_group)
            db.flush()
    return new_group


def get_device_groups_for_account(
    db: Session,
    account_id: str,
    include_all: bool = False
) -> List[str]:
    """
    Group ids of an account ordered by id, optionally led by "all".
    """
    groups = [DEVICE_GROUP_ALL] if include_all else []
    account_id = _norm(account_id)
    if not account_id:
        return groups
    stmt = (
        select(DeviceGroup.groupID)
        .where(DeviceGroup.accountID == account_id)
        .order_by(DeviceGroup.groupID.asc())
    )
    with store_errors("list device groups"):
        groups.extend(db.execute(stmt).scalars().all())
    return groups


def get_device_groups_for_device(
    db: Session,
    account_id: str,
    device_id: str,
    include_all: bool = True
) -> Optional[List[str]]:
    """
    Groups the device belongs to, or None if the device does not exist.
    """
    if not account_repo.device_exists(db, account_id, device_id):
        return None
    groups = [DEVICE_GROUP_ALL] if include_all else []
    stmt = (
        select(DeviceList.groupID)
        .where(
            DeviceList.accountID == _norm(account_id),
            DeviceList.deviceID == _norm(device_id)
        )
        .order_by(DeviceList.groupID.asc())
    )
    with store_errors("list device memberships"):
        groups.extend(db.execute(stmt).scalars().all())
    return groups


# ==========================================================
# 📌 MEMBERSHIP
# ==========================================================

def get_device_ids_for_group(
    db: Session,
    account_id: str,
    group_id: str,
    include_inactive: bool = True,
    limit: int = -1
) -> List[str]:
    """
    Device ids in a group, ordered by id.

    "all" resolves to every device of the account. Blank ids, unknown
    accounts and unknown groups all yield an empty list.
    """
    account_id, group_id = _norm(account_id), _norm(group_id)
    if not account_id or not group_id:
        return []
    if is_group_all(group_id):
        device_ids = account_repo.get_device_ids_for_account(db, account_id, include_inactive)
        return device_ids[:limit] if limit > 0 else device_ids

    stmt = (
        select(DeviceList.deviceID)
        .where(DeviceList.accountID == account_id, DeviceList.groupID == group_id)
        .order_by(DeviceList.deviceID.asc())
    )
    if not include_inactive:
        stmt = stmt.join(
            Device,
            (Device.accountID == DeviceList.accountID) & (Device.deviceID == DeviceList.deviceID)
        ).where(Device.isActive == True)  # noqa: E712
    if limit > 0:
        stmt = stmt.limit(limit)
    with store_errors("list group devices"):
        return list(db.execute(stmt).scalars().all())


def count_devices_in_group(db: Session, account_id: str, group_id: str) -> int:
    return len(get_device_ids_for_group(db, account_id, group_id))


def is_device_in_group(db: Session, account_id: str, group_id: str, device_id: str) -> bool:
    account_id, group_id, device_id = _norm(account_id), _norm(group_id), _norm(device_id)
    if not account_id or not group_id or not device_id:
        return False
    if is_group_all(group_id):
        return account_repo.device_exists(db, account_id, device_id)
    with store_errors("get device membership"):
        return db.get(DeviceList, (account_id, group_id, device_id)) is not None


def add_device_to_group(db: Session, account_id: str, group_id: str, device_id: str) -> bool:
    """
    Add a device to a stored group.

    Returns:
        True if a membership row was created, False if it already existed

    Raises:
        NotFound: if the device or the group does not exist
        ValueError: for the reserved "all" group
    """
    if is_group_all(group_id):
        raise ValueError("Membership of the 'all' group cannot be edited")
    account_repo.require_device(db, account_id, device_id)
    if not group_exists(db, account_id, group_id):
        raise NotFound("DeviceGroup", f"{account_id}/{group_id}")
    if is_device_in_group(db, account_id, group_id, device_id):
        return False

    with transaction(db, "add device to group"):
        db.add(DeviceList(
            accountID=_norm(account_id),
            groupID=_norm(group_id),
            deviceID=_norm(device_id)
        ))
    return True


def remove_device_from_group(db: Session, account_id: str, group_id: str, device_id: str) -> bool:
    """
    Remove a device from a stored group.

    Returns:
        True if a membership row was deleted, False if there was none

    Raises:
        NotFound: if the device does not exist
    """
    if is_group_all(group_id):
        raise ValueError("Membership of the 'all' group cannot be edited")
    account_repo.require_device(db, account_id, device_id)
    with store_errors("get device membership"):
        row = db.get(DeviceList, (_norm(account_id), _norm(group_id), _norm(device_id)))
    if row is None:
        return False
    with transaction(db, "remove device from group"):
        db.delete(row)
    return True
