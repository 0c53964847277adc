# tests/test_device_ulist.py

import pytest
from fleetstore.Core.errors import NotFound
from fleetstore.Models.account import Account
from fleetstore.Models.device import Device
from fleetstore.Repositories import device_group as group_repo
from fleetstore.Repositories import device_ulist as ulist_repo
from fleetstore.Schemas.device_group import DeviceGroup_create


@pytest.fixture
def partners(db, account):
    db.add(Account(accountID="globex"))
    db.add(Device(accountID="globex", deviceID="van-7"))
    db.add(Device(accountID="globex", deviceID="van-8"))
    db.commit()
    group_repo.create_device_group(db, "acme", DeviceGroup_create(groupID="partners"))


def test_add_and_list_foreign_devices(db, partners):
    assert ulist_repo.add_device_to_universal_group(db, "ACME", "Partners", "GLOBEX", "Van-8") is True
    assert ulist_repo.add_device_to_universal_group(db, "acme", "partners", "globex", "van-7") is True
    assert ulist_repo.add_device_to_universal_group(db, "acme", "partners", "globex", "van-7") is False
    assert ulist_repo.add_device_to_universal_group(db, "acme", "partners", "acme", "d1") is True

    assert ulist_repo.get_universal_group_members(db, "acme", "partners") == [
        ("acme", "d1"), ("globex", "van-7"), ("globex", "van-8")
    ]
    assert ulist_repo.is_device_in_universal_group(db, "acme", "partners", "globex", "VAN-8")
    assert ulist_repo.get_universal_groups_for_device(db, "globex", "van-7") == [("acme", "partners")]


def test_universal_members_stay_out_of_ordinary_membership(db, partners):
    ulist_repo.add_device_to_universal_group(db, "acme", "partners", "globex", "van-7")
    assert group_repo.get_device_ids_for_group(db, "acme", "partners") == []


def test_remove(db, partners):
    ulist_repo.add_device_to_universal_group(db, "acme", "partners", "globex", "van-7")
    assert ulist_repo.remove_device_from_universal_group(db, "acme", "partners", "globex", "van-7") is True
    assert ulist_repo.remove_device_from_universal_group(db, "acme", "partners", "globex", "van-7") is False
    assert ulist_repo.get_universal_group_members(db, "acme", "partners") == []


def test_errors(db, partners):
    with pytest.raises(ValueError):
        ulist_repo.add_device_to_universal_group(db, "acme", "all", "globex", "van-7")
    with pytest.raises(NotFound):
        ulist_repo.add_device_to_universal_group(db, "acme", "partners", "globex", "ghost")
    with pytest.raises(NotFound):
        ulist_repo.add_device_to_universal_group(db, "acme", "south", "globex", "van-7")
    assert ulist_repo.get_universal_group_members(db, "", "partners") == []
    assert not ulist_repo.is_device_in_universal_group(db, "acme", "partners", "", "van-7")
