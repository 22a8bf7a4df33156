from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal, Optional

Confidence = Literal["low", "medium", "high"]


class LocationSample(BaseModel):
    """One position fix. Accepts both snake_case and the browser's camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: float = Field(ge=0)
    altitude: Optional[float] = None
    altitude_accuracy: Optional[float] = None
    heading: Optional[float] = None
    speed: Optional[float] = None
    timestamp: int  # epoch millis
    address: Optional[str] = None
    is_mocked: Optional[bool] = None


class SpoofingVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_suspicious: bool
    reasons: List[str]
    confidence: Confidence


class AnalyzePayload(BaseModel):
    current: LocationSample
    history: List[LocationSample] = Field(default_factory=list)
    platform_is_mobile: Optional[bool] = None


class AnalyzeOut(BaseModel):
    verdict: SpoofingVerdict
    label: List[str]


class AddressOut(BaseModel):
    address: Optional[str] = None
