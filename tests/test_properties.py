"""Tests for property registries and field selection."""

import pytest

from sync.properties import Property, PropertyRegistry
from entities import ActionContext, AttachmentContext, AttachmentFields, ActionFields, all_fields
from entities.models import AttachmentJson

from conftest import WidgetJson


def test_registry_is_read_only():
    registry = PropertyRegistry(WidgetJson, {"a": Property.attribute("a")})

    with pytest.raises(TypeError):
        registry["b"] = Property.attribute("b")
    assert list(registry) == ["a"]
    assert len(registry) == 1


def test_registry_rejects_unknown_source():
    with pytest.raises(ValueError, match="no field 'missing'"):
        PropertyRegistry(WidgetJson, {"missing": Property.attribute("missing")})


def test_attribute_property_reads_and_writes():
    prop = Property.attribute("a")
    snapshot = WidgetJson()

    prop.setter(snapshot, 4)

    assert prop.getter(snapshot) == 4
    assert prop.is_present(snapshot)
    assert not prop.is_present(WidgetJson(b=1))


def test_custom_equality():
    registry = PropertyRegistry(WidgetJson, {
        "name": Property.attribute("name", equals=lambda old, new: (old or "").lower() == (new or "").lower()),
    })
    snapshot = WidgetJson(name="Widget")

    assert registry["name"].equals(snapshot.name, "WIDGET")


def test_wire_name_uses_alias():
    registry = AttachmentContext.properties

    assert registry.wire_name("mime_type") == "mimeType"
    assert registry.wire_name("position") == "pos"
    assert registry.wire_name("name") == "name"


def test_fetch_params_for_full_selection():
    params = AttachmentContext.properties.fetch_params(all_fields(AttachmentFields))

    assert params["fields"].split(",") == [
        "bytes", "date", "edgeColor", "isUpload", "idMember",
        "mimeType", "name", "previews", "url", "pos",
    ]


def test_fetch_params_for_partial_selection():
    params = AttachmentContext.properties.fetch_params(AttachmentFields.NAME | AttachmentFields.URL)

    assert params == {"fields": "name,url"}


def test_sub_resources_are_switched_explicitly():
    registry = ActionContext.properties

    assert registry.fetch_params(ActionFields.CREATOR)["memberCreator"] == "true"
    without = registry.fetch_params(ActionFields.DATE)
    assert without == {"memberCreator": "false", "fields": "date"}


def test_names_for_selection():
    names = AttachmentContext.properties.names_for(AttachmentFields.MEMBER | AttachmentFields.POSITION)

    assert names == ["member", "position"]


def test_snapshot_type():
    assert AttachmentContext.properties.snapshot_type is AttachmentJson
