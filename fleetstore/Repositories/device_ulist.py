# fleetstore/Repositories/device_ulist.py

"""
Universal Group Membership Repository

A stored DeviceGroup may also list devices owned by other accounts.
These memberships live in DeviceUList rows and are kept apart from the
ordinary DeviceList rows, so retention sweeps of a group never touch
another account's devices.

Usage:
    from fleetstore.Repositories import device_ulist as ulist_repo

    ulist_repo.add_device_to_universal_group(db, "acme", "partners", "globex", "van-7")
    members = ulist_repo.get_universal_group_members(db, "acme", "partners")
    # [("globex", "van-7")]
"""

from typing import List, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.orm import Session
from fleetstore.Core.errors import NotFound
from fleetstore.DB.transaction import store_errors, transaction
from fleetstore.Models.device_group import is_group_all
from fleetstore.Models.device_ulist import DeviceUList
from fleetstore.Repositories import account as account_repo
from fleetstore.Repositories import device_group as group_repo


def _norm(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _key(account_id, group_id, devacc_id, device_id):
    return _norm(account_id), _norm(group_id), _norm(devacc_id), _norm(device_id)


# ==========================================================
# 📌 LOOKUP
# ==========================================================

def is_device_in_universal_group(
    db: Session,
    account_id: str,
    group_id: str,
    devacc_id: str,
    device_id: str
) -> bool:
    key = _key(account_id, group_id, devacc_id, device_id)
    if not all(key):
        return False
    with store_errors("get universal membership"):
        return db.get(DeviceUList, key) is not None


def get_universal_group_members(db: Session, account_id: str, group_id: str) -> List[Tuple[str, str]]:
    """
    (devaccID, deviceID) pairs listed in a group, ordered by owner then device.
    """
    account_id, group_id = _norm(account_id), _norm(group_id)
    if not account_id or not group_id:
        return []
    stmt = (
        select(DeviceUList.devaccID, DeviceUList.deviceID)
        .where(DeviceUList.accountID == account_id, DeviceUList.groupID == group_id)
        .order_by(DeviceUList.devaccID.asc(), DeviceUList.deviceID.asc())
    )
    with store_errors("list universal group devices"):
        return [(row.devaccID, row.deviceID) for row in db.execute(stmt).all()]


def get_universal_groups_for_device(db: Session, devacc_id: str, device_id: str) -> List[Tuple[str, str]]:
    """(accountID, groupID) pairs of every group that lists the device."""
    devacc_id, device_id = _norm(devacc_id), _norm(device_id)
    if not devacc_id or not device_id:
        return []
    stmt = (
        select(DeviceUList.accountID, DeviceUList.groupID)
        .where(DeviceUList.devaccID == devacc_id, DeviceUList.deviceID == device_id)
        .order_by(DeviceUList.accountID.asc(), DeviceUList.groupID.asc())
    )
    with store_errors("list universal memberships"):
        return [(row.accountID, row.groupID) for row in db.execute(stmt).all()]


# ==========================================================
# 📌 MEMBERSHIP
# ==========================================================

def add_device_to_universal_group(
    db: Session,
    account_id: str,
    group_id: str,
    devacc_id: str,
    device_id: str
) -> bool:
    """
    List a device (of any account) in a stored group.

    Returns:
        True if a membership row was created, False if it already existed

    Raises:
        NotFound: if the device or the group does not exist
        ValueError: for the reserved "all" group
    """
    if is_group_all(group_id):
        raise ValueError("Membership of the 'all' group cannot be edited")
    account_repo.require_device(db, devacc_id, device_id)
    if not group_repo.group_exists(db, account_id, group_id):
        raise NotFound("DeviceGroup", f"{account_id}/{group_id}")
    if is_device_in_universal_group(db, account_id, group_id, devacc_id, device_id):
        return False

    account_id, group_id, devacc_id, device_id = _key(account_id, group_id, devacc_id, device_id)
    with transaction(db, "add device to universal group"):
        db.add(DeviceUList(
            accountID=account_id,
            groupID=group_id,
            devaccID=devacc_id,
            deviceID=device_id
        ))
    return True


def remove_device_from_universal_group(
    db: Session,
    account_id: str,
    group_id: str,
    devacc_id: str,
    device_id: str
) -> bool:
    """
    Returns:
        True if a membership row was deleted, False if there was none
    """
    key = _key(account_id, group_id, devacc_id, device_id)
    if not all(key):
        return False
    with store_errors("get universal membership"):
        row = db.get(DeviceUList, key)
    if row is None:
        return False
    with transaction(db, "remove device from universal group"):
        db.delete(row)
    return True
