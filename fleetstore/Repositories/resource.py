# fleetstore/Repositories/resource.py

"""
Resource Repository Module

Create, read, list and delete account-owned resources.

Account ids are compared lower-case; resource ids keep their case.

Usage:
    from fleetstore.Repositories import resource as resource_repo

    resource_repo.set_resource(db, "acme", "report.logo", type="image/png", value=png_bytes)
    logo = resource_repo.get_resource(db, "acme", "report.logo").get_value()
"""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from fleetstore.DB.transaction import store_errors, transaction
from fleetstore.Models.resource import Resource
from fleetstore.Repositories import account as account_repo


def _key(account_id: Optional[str], resource_id: Optional[str]):
    return (account_id or "").strip().lower(), (resource_id or "").strip()


# ==========================================================
# 📌 LOOKUP
# ==========================================================

def get_resource(db: Session, account_id: str, resource_id: str) -> Optional[Resource]:
    account_id, resource_id = _key(account_id, resource_id)
    if not account_id or not resource_id:
        return None
    with store_errors("get resource"):
        return db.get(Resource, (account_id, resource_id))


def resource_exists(db: Session, account_id: str, resource_id: str) -> bool:
    return get_resource(db, account_id, resource_id) is not None


def get_resource_ids_for_account(
    db: Session,
    account_id: str,
    starts_with: Optional[str] = None
) -> List[str]:
    """
    Resource ids of an account ordered by id, optionally filtered by prefix.
    """
    account_id = (account_id or "").strip().lower()
    if not account_id:
        return []
    stmt = (
        select(Resource.resourceID)
        .where(Resource.accountID == account_id)
        .order_by(Resource.resourceID.asc())
    )
    if starts_with:
        stmt = stmt.where(Resource.resourceID.startswith(starts_with, autoescape=True))
    with store_errors("list resources"):
        return list(db.execute(stmt).scalars().all())


# ==========================================================
# 📌 WRITES
# ==========================================================

def set_resource(
    db: Session,
    account_id: str,
    resource_id: str,
    type: Optional[str] = None,
    title: Optional[str] = None,
    value=None
) -> bool:
    """
    Create the resource or overwrite an existing one.

    type and title are only changed when given. value may be str, bytes,
    or a dict (stored as the property set).

    Returns:
        True if an existing resource was overwritten, False if created

    Raises:
        NotFound: if the account does not exist
        ValueError: for a blank resource id
    """
    account = account_repo.require_account(db, account_id)
    account_id, resource_id = _key(account.accountID, resource_id)
    if not resource_id:
        raise ValueError(f"Invalid resource id for account {account_id}: {resource_id!r}")

    resource = get_resource(db, account_id, resource_id)
    existed = resource is not None
    with transaction(db, "save resource"):
        if resource is None:
            resource = Resource(accountID=account_id, resourceID=resource_id)
            db.add(resource)
        if type is not None:
            resource.type = type
        if title is not None:
            resource.title = title
        resource.set_value(value)
    return existed


def delete_resource(db: Session, account_id: str, resource_id: str) -> bool:
    """
    Returns:
        True if a resource was deleted, False if there was none
    """
    resource = get_resource(db, account_id, resource_id)
    if resource is None:
        return False
    with transaction(db, "delete resource"):
        db.delete(resource)
    return True
