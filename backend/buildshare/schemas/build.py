"""Build Schemas — input shapes, transaction results, and record views.

Invariants:
    - CreateInput: archetype, primary, secondary, buildData, imageData are required
    - UpdateInput: buildData, imageData are required; name/description/primary/
      secondary are optional and None means "leave unchanged"
    - Wire format uses camelCase aliases; Python code uses snake_case names
    - expiresAt is ISO 8601 UTC with a trailing "Z"
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def to_iso8601(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True,
    )


class CreateInput(_CamelModel):
    """Submission of a new build."""
    name: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)
    archetype: str = Field(max_length=100)
    primary: str = Field(max_length=100)
    secondary: str = Field(max_length=100)
    build_data: str
    image_data: str

    @field_validator("archetype", "primary", "secondary", "name")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v


class UpdateInput(_CamelModel):
    """Replacement payloads plus optional metadata changes for an existing build."""
    name: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)
    primary: str | None = Field(None, max_length=100)
    secondary: str | None = Field(None, max_length=100)
    build_data: str
    image_data: str

    @field_validator("primary", "secondary", "name")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v

    def optional_changes(self) -> dict[str, str]:
        """Optional fields that were supplied."""
        fields = {
            "name": self.name,
            "description": self.description,
            "primary": self.primary,
            "secondary": self.secondary,
        }
        return {key: value for key, value in fields.items() if value is not None}


class TransactionResult(_CamelModel):
    """Links and expiry returned after a create or update."""
    shortcode: str
    download_url: str
    image_url: str
    schema_url: str
    expires_at: str


class BuildRecordView(_CamelModel):
    """Read-only view of a stored build record (current or legacy shape)."""
    model_config = ConfigDict(from_attributes=True)

    shortcode: str
    name: str | None = None
    description: str | None = None
    archetype: str | None = None
    primary: str | None = None
    secondary: str | None = None
    build_data: str | None = None
    image_data: str | None = None
    page_data: str | None = None
    expires_at: datetime

    @property
    def is_legacy(self) -> bool:
        return self.archetype is None and self.page_data is not None


class SchemaData(BaseModel):
    """Raw compressed build payload handed to the desktop client."""
    data: str | None = None


class FileData(BaseModel):
    """Regenerated build file ready for download."""
    shortcode: str
    character_name: str | None = None
    archetype: str | None = None
    primary: str | None = None
    secondary: str | None = None
    data_bytes: bytes

    @property
    def file_name(self) -> str:
        if self.archetype is None:
            return f"{self.shortcode}.mbd"
        powersets = f"({self.primary} - {self.secondary})"
        if self.character_name:
            return f"{self.character_name} [{self.archetype}] {powersets}.mbd"
        return f"{self.archetype} {powersets}.mbd"
