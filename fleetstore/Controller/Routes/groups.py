# fleetstore/Controller/Routes/groups.py

"""
Device Group REST API

Group listing, membership management and retention sweeps.

Endpoints:
- GET    /groups/{account_id}                                List groups
- POST   /groups/{account_id}                                Create group
- GET    /groups/{account_id}/by-device/{device_id}          Groups of a device
- GET    /groups/{account_id}/{group_id}/devices             Group members
- PUT    /groups/{account_id}/{group_id}/devices/{device_id} Add member
- DELETE /groups/{account_id}/{group_id}/devices/{device_id} Remove member
- GET    /groups/{account_id}/{group_id}/old-events          Count old events
- DELETE /groups/{account_id}/{group_id}/old-events          Delete old events

The reserved group "all" always exists and contains every device of the
account; its membership cannot be edited.

Retention sweeps run synchronously and pause between devices, so a
DELETE on a large group can take a while to answer.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from fleetstore.Controller.deps import get_DB, get_retention_sweeper
from fleetstore.Repositories import account as account_repo
from fleetstore.Repositories import device_group as group_repo
from fleetstore.Schemas import device_group as group_schema
from fleetstore.Schemas.retention import RetentionSweep_get
from fleetstore.Services.retention import RetentionSweeper

router = APIRouter()


def _require_group(DB: Session, account_id: str, group_id: str):
    account = account_repo.require_account(DB, account_id)
    if not group_repo.group_exists(DB, account.accountID, group_id):
        raise HTTPException(
            status_code=404,
            detail=f"Device group '{account.accountID}/{group_id}' not found"
        )
    return account


# ==========================================================
# 📌 Groups
# ==========================================================

@router.get("/{account_id}", response_model=group_schema.DeviceGroupList_response)
def list_groups(
    account_id: str,
    include_all: bool = Query(False, description="Lead the list with the reserved 'all' group"),
    DB: Session = Depends(get_DB)
):
    account = account_repo.require_account(DB, account_id)
    return {
        "accountID": account.accountID,
        "groups": group_repo.get_device_groups_for_account(DB, account.accountID, include_all=include_all)
    }


@router.post("/{account_id}", response_model=group_schema.DeviceGroup_get, status_code=201)
def create_group(
    account_id: str,
    group: group_schema.DeviceGroup_create,
    DB: Session = Depends(get_DB)
):
    """
    Raises:
        404: Unknown account
        409: Reserved or existing group id
    """
    try:
        return group_repo.create_device_group(DB, account_id, group)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/{account_id}/by-device/{device_id}", response_model=group_schema.DeviceGroupList_response)
def list_groups_for_device(
    account_id: str,
    device_id: str,
    include_all: bool = Query(True),
    DB: Session = Depends(get_DB)
):
    groups = group_repo.get_device_groups_for_device(DB, account_id, device_id, include_all=include_all)
    if groups is None:
        raise HTTPException(status_code=404, detail=f"Device '{account_id}/{device_id}' not found")
    return {"accountID": account_id.lower(), "groups": groups}


# ==========================================================
# 📌 Membership
# ==========================================================

@router.get("/{account_id}/{group_id}/devices", response_model=group_schema.GroupDevices_response)
def list_group_devices(
    account_id: str,
    group_id: str,
    include_inactive: bool = Query(True),
    DB: Session = Depends(get_DB)
):
    account = _require_group(DB, account_id, group_id)
    return {
        "accountID": account.accountID,
        "groupID": group_id.lower(),
        "devices": group_repo.get_device_ids_for_group(
            DB, account.accountID, group_id, include_inactive=include_inactive
        )
    }


@router.put("/{account_id}/{group_id}/devices/{device_id}", response_model=dict)
def add_group_device(account_id: str, group_id: str, device_id: str, DB: Session = Depends(get_DB)):
    """
    Returns:
        {"added": true} when a membership was created, false if it existed
    """
    try:
        added = group_repo.add_device_to_group(DB, account_id, group_id, device_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"added": added}


@router.delete("/{account_id}/{group_id}/devices/{device_id}", response_model=dict)
def remove_group_device(account_id: str, group_id: str, device_id: str, DB: Session = Depends(get_DB)):
    try:
        removed = group_repo.remove_device_from_group(DB, account_id, group_id, device_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"removed": removed}


# ==========================================================
# 📌 Retention
# ==========================================================

@router.get("/{account_id}/{group_id}/old-events", response_model=RetentionSweep_get)
def count_old_events(
    account_id: str,
    group_id: str,
    before: int = Query(..., description="Cutoff (Unix seconds), exclusive"),
    DB: Session = Depends(get_DB),
    sweeper: RetentionSweeper = Depends(get_retention_sweeper)
):
    """
    Count what a delete with the same cutoff would remove.

    Example:
        GET /groups/acme/all/old-events?before=1700000000
    """
    account = _require_group(DB, account_id, group_id)
    return sweeper.count_old_events(DB, account, group_id.lower(), before).to_schema()


@router.delete("/{account_id}/{group_id}/old-events", response_model=RetentionSweep_get)
def delete_old_events(
    account_id: str,
    group_id: str,
    before: int = Query(..., description="Cutoff (Unix seconds), exclusive"),
    DB: Session = Depends(get_DB),
    sweeper: RetentionSweeper = Depends(get_retention_sweeper)
):
    """
    Delete events older than the cutoff for every device of the group.

    The most recent event of each device is always kept, and the
    account/device retained-event-age may move the cutoff earlier.
    """
    account = _require_group(DB, account_id, group_id)
    return sweeper.delete_old_events(DB, account, group_id.lower(), before).to_schema()
