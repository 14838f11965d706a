"""Build File — typed structure of the .mbd character build file.

Invariants:
    - Wire names are PascalCase (desktop client format); snake_case accepted too
    - Unknown keys are dropped on re-serialization
    - parse_build_file raises DataCorruptionError for anything that is not a
      JSON object of this shape
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_pascal

from buildshare.core.errors import DataCorruptionError, ErrorContext


class _PascalModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_pascal, populate_by_name=True, extra="ignore",
    )


class MetaData(_PascalModel):
    """Application and database versions the build was made with."""
    app: str
    # Serialized either as "1.2.3.4" or as a {Major, Minor, ...} object
    version: str | dict[str, int]
    database: str
    database_version: str | dict[str, int]


class EnhancementData(_PascalModel):
    uid: str = ""
    grade: str = "None"
    io_level: int = 1
    relative_level: str = "Even"
    obtained: bool = False


class SlotData(_PascalModel):
    level: int = 0
    is_inherent: bool = False
    enhancement: EnhancementData | None = None
    flipped_enhancement: EnhancementData | None = None


class SubPowerData(_PascalModel):
    power_name: str = ""
    stat_include: bool = False


class PowerData(_PascalModel):
    """One power pick with its slots and sub-powers; Level -1 means unset."""
    power_name: str = ""
    level: int = -1
    stat_include: bool = False
    proc_include: bool = False
    variable_value: int = 0
    inherent_slots_used: int = 0
    sub_power_entries: list[SubPowerData] = Field(default_factory=list)
    slot_entries: list[SlotData] = Field(default_factory=list)


class BuildFile(_PascalModel):
    """A complete character build as exchanged with the desktop client."""
    built_with: MetaData | None = None
    level: str = ""
    class_: str = Field("", alias="Class")
    origin: str = ""
    alignment: str = ""
    name: str = ""
    comment: str | None = None
    power_sets: list[str] = Field(default_factory=list)
    last_power: int = 0
    power_entries: list[PowerData | None] = Field(default_factory=list)


def parse_build_file(raw: bytes, context: ErrorContext | None = None) -> BuildFile:
    """Parse decompressed build bytes (UTF-8 JSON) into a BuildFile."""
    try:
        return BuildFile.model_validate_json(raw)
    except ValidationError as e:
        raise DataCorruptionError(
            f"Build data failed to deserialize: {e.error_count()} error(s)", context,
        ) from e


def serialize_build_file(build: BuildFile) -> bytes:
    """Indented PascalCase JSON, UTF-8 encoded."""
    return build.model_dump_json(by_alias=True, indent=2).encode("utf-8")
