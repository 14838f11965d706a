"""Sample payloads for store and route tests, encoded the way clients upload them."""

import json

from buildshare.core.payload_codec import compress_and_encode
from buildshare.schemas.build import CreateInput

BUILD_JSON = {
    "BuiltWith": {
        "App": "Mids Reborn", "Version": "3.7.11.8",
        "Database": "Homecoming", "DatabaseVersion": "2025.7.1111",
    },
    "Level": "50",
    "Class": "Class_Blaster",
    "Origin": "Science",
    "Alignment": "Hero",
    "Name": "Blasty",
    "PowerSets": ["Blaster_Ranged.Fire_Blast", "Blaster_Support.Energy_Manipulation"],
    "LastPower": 1,
    "PowerEntries": [
        {"PowerName": "Blaster_Ranged.Fire_Blast.Flares", "Level": 0},
    ],
}

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32

BUILD_DATA = compress_and_encode(json.dumps(BUILD_JSON).encode("utf-8"))
IMAGE_DATA = compress_and_encode(PNG_BYTES)


def create_input(**overrides) -> CreateInput:
    fields = {
        "name": "Blasty",
        "description": "Fire/Energy",
        "archetype": "Blaster",
        "primary": "Fire Blast",
        "secondary": "Energy Manipulation",
        "build_data": BUILD_DATA,
        "image_data": IMAGE_DATA,
    }
    fields.update(overrides)
    return CreateInput(**fields)


def create_body(**overrides) -> dict:
    """camelCase JSON body for POST /build/submit."""
    return create_input(**overrides).model_dump(by_alias=True)
