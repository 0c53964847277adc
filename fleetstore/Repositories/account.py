# fleetstore/Repositories/account.py

"""
Account Repository Module

Lookups for Account and Device records used by retention and range
operations.
"""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from fleetstore.Core.errors import NotFound
from fleetstore.DB.transaction import store_errors
from fleetstore.Models.account import Account
from fleetstore.Models.device import Device


# ==========================================================
# 📌 ACCOUNTS
# ==========================================================

def get_account(db: Session, account_id: str) -> Optional[Account]:
    """
    Get an account by id (ids are stored lower-case).

    Returns:
        Account or None if not found / blank id
    """
    if not account_id or not account_id.strip():
        return None
    with store_errors("get account"):
        return db.get(Account, account_id.strip().lower())


def require_account(db: Session, account_id: str) -> Account:
    """
    Like get_account, but raises NotFound.

    Used by destructive operations, where a missing account must not be
    mistaken for "nothing to delete".
    """
    account = get_account(db, account_id)
    if account is None:
        raise NotFound("Account", str(account_id))
    return account


# ==========================================================
# 📌 DEVICES
# ==========================================================

def get_device(db: Session, account_id: str, device_id: str) -> Optional[Device]:
    if not account_id or not device_id:
        return None
    with store_errors("get device"):
        return db.get(Device, (account_id.strip().lower(), device_id.strip().lower()))


def require_device(db: Session, account_id: str, device_id: str) -> Device:
    device = get_device(db, account_id, device_id)
    if device is None:
        raise NotFound("Device", f"{account_id}/{device_id}")
    return device


def device_exists(db: Session, account_id: str, device_id: str) -> bool:
    return get_device(db, account_id, device_id) is not None


def get_device_ids_for_account(
    db: Session,
    account_id: str,
    include_inactive: bool = True
) -> List[str]:
    """
    Device ids of an account, ordered by id.

    Example:
        >>> get_device_ids_for_account(db, "acme")
        ['truck-01', 'truck-02']
    """
    if not account_id or not account_id.strip():
        return []
    stmt = select(Device.deviceID).where(Device.accountID == account_id.strip().lower())
    if not include_inactive:
        stmt = stmt.where(Device.isActive == True)  # noqa: E712
    stmt = stmt.order_by(Device.deviceID.asc())
    with store_errors("list account devices"):
        return list(db.execute(stmt).scalars().all())
