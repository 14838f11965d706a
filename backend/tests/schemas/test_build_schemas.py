"""Tests for build input/output shapes — camelCase wire names, file naming."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from buildshare.schemas.build import (
    BuildRecordView, CreateInput, FileData, UpdateInput, to_iso8601,
)


def test_create_input_accepts_camel_case():
    body = CreateInput.model_validate({
        "archetype": " Blaster ", "primary": "Fire Blast",
        "secondary": "Energy Manipulation", "buildData": "AAA", "imageData": "BBB",
    })
    assert body.archetype == "Blaster"
    assert body.build_data == "AAA"
    assert body.name is None


def test_create_input_requires_payloads():
    with pytest.raises(ValidationError):
        CreateInput.model_validate({
            "archetype": "Blaster", "primary": "a", "secondary": "b",
        })


def test_update_input_optional_changes_only_supplied_fields():
    body = UpdateInput(build_data="A", image_data="B", name="New", primary=None)
    assert body.optional_changes() == {"name": "New"}


def test_to_iso8601_uses_z_suffix():
    value = datetime(2026, 11, 17, 8, 30, tzinfo=timezone.utc)
    assert to_iso8601(value) == "2026-11-17T08:30:00Z"


def test_record_view_from_attributes_and_legacy_flag():
    class Row:
        shortcode = "abc"
        name = None
        description = None
        archetype = None
        primary = None
        secondary = None
        build_data = "x"
        image_data = None
        page_data = "y"
        expires_at = datetime(2026, 1, 1, tzinfo=timezone.utc)

    view = BuildRecordView.model_validate(Row())
    assert view.is_legacy
    dumped = view.model_dump(by_alias=True)
    assert "pageData" in dumped and "expiresAt" in dumped


@pytest.mark.parametrize(
    ("name", "archetype", "expected"),
    [
        ("Blasty", "Blaster", "Blasty [Blaster] (Fire Blast - Energy Manipulation).mbd"),
        (None, "Blaster", "Blaster (Fire Blast - Energy Manipulation).mbd"),
        ("Blasty", None, "abc.mbd"),
    ],
)
def test_file_name(name, archetype, expected):
    file = FileData(
        shortcode="abc", character_name=name, archetype=archetype,
        primary="Fire Blast", secondary="Energy Manipulation", data_bytes=b"{}",
    )
    assert file.file_name == expected
