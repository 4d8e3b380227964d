from datetime import datetime
from types import MappingProxyType
from typing import Dict, List, Literal, Mapping, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

Number = Union[int, float]

TIERS = ("simple", "standard", "advanced")
MODIFIERS = ("animation", "api", "long_page", "reused_component")
OPTIONAL_FEATURES = ("seo_optimization", "cms_support", "admin_panel", "hosting_support")

Tier = Literal["simple", "standard", "advanced"]
Source = Literal["manual", "figma_analysis"]


class PricingConfig(BaseModel):
    """Rate table: tier base prices, per-unit modifiers, flat optional-feature fees.

    Read-only once validated. Sections are exposed as mapping proxies, so a
    table is replaced whole or not at all.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    tiers: Dict[str, Number]
    modifiers: Dict[str, Number]
    optional_features: Dict[str, Number]

    @field_validator("tiers", "modifiers", "optional_features")
    @classmethod
    def _read_only(cls, section: Dict[str, Number]) -> Mapping[str, Number]:
        return MappingProxyType(dict(section))

    @field_serializer("tiers", "modifiers", "optional_features")
    def _as_dict(self, section: Mapping[str, Number]) -> Dict[str, Number]:
        return dict(section)


class Page(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int
    name: str = ""
    tier: Tier = "simple"
    is_long_page: bool = Field(False, alias="isLongPage")
    animations: int = Field(0, ge=0)
    api_integrations: int = Field(0, alias="apiIntegrations", ge=0)
    reused_components: int = Field(0, alias="reusedComponents", ge=0)

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data):
        if isinstance(data, dict) and not data.get("name") and "id" in data:
            data = dict(data, name=f"Page {data['id']}")
        return data


class OptionalFeatures(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    seo_optimization: bool = False
    cms_support: bool = False
    admin_panel: bool = False
    hosting_support: bool = False


class Quotation(BaseModel):
    """A priced, timestamped quote.

    `pricing` is an embedded snapshot, so later configuration edits never
    change a saved quote. `total_price` is a cache of the calculator result;
    the record is frozen so the two cannot drift apart.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    pages: Tuple[Page, ...]
    optional_features: OptionalFeatures = Field(alias="optionalFeatures")
    pricing: PricingConfig
    total_price: Number = Field(alias="totalPrice")
    created_at: datetime = Field(alias="createdAt")
    source: Source = "manual"

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class AnalysisCandidate(BaseModel):
    """One page detected by design analysis; confidence and features are display-only."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    suggested_tier: Tier = Field(alias="suggestedTier")
    confidence: int = Field(ge=0, le=100)
    detected_features: List[str] = Field(default_factory=list, alias="detectedFeatures")
    estimated_animations: int = Field(0, alias="estimatedAnimations", ge=0)
    estimated_apis: int = Field(0, alias="estimatedApis", ge=0)
    is_long_page: bool = Field(False, alias="isLongPage")
