"""Pydantic models for taxonomy definitions, reference data and session values."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

MAX_LEVELS = 6


class TaxonomyFormat(str, Enum):
    """Output formats a token may request."""

    CODE = "code"
    DISPLAY_FR = "display_fr"
    DISPLAY_EN = "display_en"
    UTM = "utm"
    CUSTOM_UTM = "custom_utm"
    CUSTOM_CODE = "custom_code"
    OPEN = "open"

    @property
    def requires_catalog(self) -> bool:
        return self is not TaxonomyFormat.OPEN


class FieldSource(str, Enum):
    """Where a variable's raw value comes from."""

    CAMPAIGN = "campaign"
    TACTIQUE = "tactique"
    PLACEMENT = "placement"
    CREATIF = "creatif"
    MANUAL = "manual"

    @property
    def inherited(self) -> bool:
        return self in (FieldSource.CAMPAIGN, FieldSource.TACTIQUE)


class ConsumerType(str, Enum):
    """Kind of item consuming a taxonomy; decides which levels are visible."""

    PLACEMENT = "placement"
    CREATIF = "creatif"

    @property
    def levels(self) -> tuple[int, ...]:
        if self is ConsumerType.PLACEMENT:
            return (1, 2, 3, 4)
        return (5, 6)


class TaxonomyGroup(str, Enum):
    """The three taxonomies a placement or creatif can select."""

    TAGS = "tags"
    PLATFORM = "platform"
    MEDIAOCEAN = "mediaocean"


class Level(BaseModel):
    """One level slot of a taxonomy definition."""

    number: int = Field(..., ge=1, le=MAX_LEVELS)
    title: str = ""
    template: str = ""

    @property
    def display_title(self) -> str:
        return self.title.strip() or f"Level {self.number}"


class TaxonomyDefinition(BaseModel):
    """A named set of up to six level templates."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str = ""
    levels: list[Level] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate(self) -> "TaxonomyDefinition":
        numbers = [lvl.number for lvl in self.levels]
        if len(numbers) > MAX_LEVELS:
            raise ValueError(f"Taxonomy {self.id!r} has {len(numbers)} levels; at most {MAX_LEVELS} allowed")
        duplicates = sorted({n for n in numbers if numbers.count(n) > 1})
        if duplicates:
            raise ValueError(f"Taxonomy {self.id!r} has duplicate level numbers: {duplicates}")
        return self

    def level(self, number: int) -> Level | None:
        for lvl in self.levels:
            if lvl.number == number:
                return lvl
        return None

    def levels_for(self, consumer: ConsumerType) -> list[Level]:
        """Non-empty levels visible to the consumer, in level order."""
        visible = [lvl for lvl in self.levels if lvl.number in consumer.levels and lvl.template]
        return sorted(visible, key=lambda lvl: lvl.number)


class ReferenceEntity(BaseModel):
    """Coded catalog entry with several textual projections."""

    model_config = ConfigDict(frozen=True)

    id: str
    code: str = Field(default="", validation_alias=AliasChoices("code", "SH_Code"))
    display_name_fr: str = Field(
        default="",
        validation_alias=AliasChoices("display_name_fr", "SH_Display_Name_FR"),
    )
    display_name_en: str | None = Field(
        default=None,
        validation_alias=AliasChoices("display_name_en", "SH_Display_Name_EN"),
    )
    default_utm: str | None = Field(
        default=None,
        validation_alias=AliasChoices("default_utm", "SH_Default_UTM"),
    )

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        ref_id = data.get("id")
        if not (data.get("code") or data.get("SH_Code")):
            data["code"] = ref_id
            data.pop("SH_Code", None)
        if not (data.get("display_name_fr") or data.get("SH_Display_Name_FR")):
            data["display_name_fr"] = data.get("code") or data.get("SH_Code") or ref_id
            data.pop("SH_Display_Name_FR", None)
        return data


class CustomOverride(BaseModel):
    """Client-specific replacement for a reference entity's code or UTM."""

    model_config = ConfigDict(frozen=True)

    reference_id: str = Field(validation_alias=AliasChoices("reference_id", "CC_Shortcode_ID", "shortcodeId"))
    custom_utm: str | None = Field(default=None, validation_alias=AliasChoices("custom_utm", "CC_Custom_UTM"))
    custom_code: str | None = Field(
        default=None,
        validation_alias=AliasChoices("custom_code", "CC_Custom_Code", "customCode"),
    )


class ManualValue(BaseModel):
    """A value the user supplied for a variable during the editing session."""

    model_config = ConfigDict(frozen=True)

    raw_value: str = Field(default="", validation_alias=AliasChoices("raw_value", "value"))
    format: TaxonomyFormat = TaxonomyFormat.OPEN
    open_text: str | None = Field(default=None, validation_alias=AliasChoices("open_text", "openValue"))
    reference_id: str | None = Field(default=None, validation_alias=AliasChoices("reference_id", "shortcodeId"))

    @property
    def value_of_record(self) -> str:
        return self.reference_id or self.raw_value


class ResolutionContext(BaseModel):
    """Layered data a variable is resolved against."""

    model_config = ConfigDict(frozen=True)

    campaign_record: dict[str, Any] = Field(default_factory=dict)
    tactique_record: dict[str, Any] = Field(default_factory=dict)
    placement_record: dict[str, Any] | None = None
    form_data: dict[str, Any] = Field(default_factory=dict)
    manual_overlay: dict[str, ManualValue] = Field(default_factory=dict)

    def with_overlay(self, overlay: dict[str, ManualValue]) -> "ResolutionContext":
        return self.model_copy(update={"manual_overlay": dict(overlay)})


class VariableToken(BaseModel):
    """A distinct variable of one consuming scope, with every format it is requested in."""

    name: str
    formats: list[TaxonomyFormat] = Field(default_factory=list)
    source: FieldSource = FieldSource.MANUAL
    scope: ConsumerType = ConsumerType.PLACEMENT
    levels: list[int] = Field(default_factory=list)
    groups: list[TaxonomyGroup] = Field(default_factory=list)

    @property
    def inherited(self) -> bool:
        return self.source.inherited


class HighlightState(BaseModel):
    """Ephemeral highlight of the variable the user is hovering."""

    model_config = ConfigDict(frozen=True)

    active_variable: str | None = None
