# tests/test_resource.py

import pytest
from fleetstore.Core.errors import NotFound
from fleetstore.Models.resource import is_string_type
from fleetstore.Repositories import resource as resource_repo


def test_create_then_overwrite(db, account):
    assert resource_repo.set_resource(db, "ACME", "report.title", type="text", title="Title", value="Fleet Report") is False
    assert resource_repo.set_resource(db, "acme", "report.title", value="Daily Fleet Report") is True

    resource = resource_repo.get_resource(db, "acme", "report.title")
    assert resource.accountID == "acme"
    assert resource.type == "text"
    assert resource.title == "Title"
    assert resource.get_value() == "Daily Fleet Report"


def test_binary_and_property_values(db, account):
    png = b"\x89PNG\r\n\x1a\n"
    resource_repo.set_resource(db, "acme", "logo", type="image/png", value=png)
    assert resource_repo.get_resource(db, "acme", "logo").get_value() == png

    resource_repo.set_resource(db, "acme", "map.colors", type="rtprops", value={"stop": "red"})
    colors = resource_repo.get_resource(db, "acme", "map.colors")
    assert colors.get_property("stop") == "red"
    assert colors.get_value() is None

    colors.set_property("moving", "green")
    db.commit()
    db.expire_all()
    assert resource_repo.get_resource(db, "acme", "map.colors").properties == {"stop": "red", "moving": "green"}


def test_resource_ids_keep_case(db, account):
    resource_repo.set_resource(db, "acme", "Report.Logo", value=b"x")
    assert resource_repo.resource_exists(db, "acme", "Report.Logo")
    assert not resource_repo.resource_exists(db, "acme", "report.logo")


def test_list_with_prefix(db, account):
    for resource_id in ("report.title", "map.colors", "report.logo", "report_x"):
        resource_repo.set_resource(db, "acme", resource_id, value="v")

    assert resource_repo.get_resource_ids_for_account(db, "acme") == [
        "map.colors", "report.logo", "report.title", "report_x"
    ]
    assert resource_repo.get_resource_ids_for_account(db, "acme", starts_with="report.") == [
        "report.logo", "report.title"
    ]
    assert resource_repo.get_resource_ids_for_account(db, "") == []


def test_delete(db, account):
    resource_repo.set_resource(db, "acme", "logo", value=b"x")
    assert resource_repo.delete_resource(db, "acme", "logo") is True
    assert resource_repo.delete_resource(db, "acme", "logo") is False
    assert resource_repo.get_resource(db, "acme", "logo") is None


def test_errors(db, account):
    with pytest.raises(NotFound):
        resource_repo.set_resource(db, "ghost", "logo", value=b"x")
    with pytest.raises(ValueError):
        resource_repo.set_resource(db, "acme", "  ", value=b"x")
    with pytest.raises(TypeError):
        resource_repo.set_resource(db, "acme", "logo", value=3.5)
    assert resource_repo.get_resource(db, "acme", "logo") is None


def test_string_types():
    assert is_string_type("text")
    assert is_string_type("URL/image")
    assert not is_string_type("image/png")
    assert not is_string_type("")
