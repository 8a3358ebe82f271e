from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field


class ArtifactType(str, Enum):
    TRIP_PLAN = "trip_plan"
    PACKING_LIST = "packing_list"


class PromptVariant(str, Enum):
    FULL = "full"
    COMPACT = "compact"
    REPAIR = "repair"


class Tier(str, Enum):
    PRIMARY = "primary"
    COMPACT_RETRY = "compact_retry"
    REPAIR = "repair"


class _InputModel(BaseModel):
    # Inputs arrive as camelCase JSON from the client apps.
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Child(_InputModel):
    age: int
    weight_lb: Optional[float] = Field(default=None, alias="weightLb")
    height_in: Optional[float] = Field(default=None, alias="heightIn")


class TripContext(_InputModel):
    destination: str
    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    activities: List[str] = Field(default_factory=list)
    children: List[Child] = Field(default_factory=list)


class ForecastDay(_InputModel):
    name: str
    high: float
    low: float
    condition: str
    precipitation: float


class WeatherForecast(_InputModel):
    summary: str
    forecast: List[ForecastDay] = Field(default_factory=list)


class GenerationRequest(_InputModel):
    artifact_type: ArtifactType = Field(alias="artifactType")
    trip_context: TripContext = Field(alias="tripContext")
    weather_forecast: WeatherForecast = Field(alias="weatherForecast")


class TripRequest(TripContext):
    """
    HTTP payload: trip facts plus the forecast already resolved by the weather service.
    """

    weather_forecast: WeatherForecast = Field(alias="weatherForecast")

    def trip_context(self) -> TripContext:
        return TripContext(
            destination=self.destination,
            start_date=self.start_date,
            end_date=self.end_date,
            activities=self.activities,
            children=self.children,
        )


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str
    variant: PromptVariant


@dataclass(frozen=True)
class ModelResponse:
    text: str
    stop_reason: Optional[str] = None


@dataclass(frozen=True)
class ModelInvocation:
    provider: str
    model_id: str
    max_tokens: int
    prompt: PromptPair
    temperature: float = 0


@dataclass
class AttemptRecord:
    tier: Tier
    invocation: Optional[ModelInvocation] = None
    parse_outcome: str = "not_attempted"
    stop_reason: Optional[str] = None
    response_text: str = ""
    calls: int = 0

    @property
    def succeeded(self) -> bool:
        return self.parse_outcome == "ok"


@dataclass
class GenerationOutcome:
    artifact_type: ArtifactType
    artifact: dict[str, Any]
    attempts: List[AttemptRecord] = field(default_factory=list)


# Output shapes. Only the top-level arrays are enforced at runtime.

class SuggestedActivity(TypedDict, total=False):
    id: str
    name: str
    category: str
    description: str
    duration: str
    kidFriendly: bool
    weatherDependent: bool
    bestDays: List[str]
    reason: str


class DayItinerary(TypedDict, total=False):
    day: str
    activities: List[str]
    meals: str
    notes: str


class TripPlan(TypedDict, total=False):
    overview: str
    suggestedActivities: List[SuggestedActivity]
    dailyItinerary: List[DayItinerary]
    tips: List[str]


class PackingItem(TypedDict, total=False):
    name: str
    quantity: str
    reason: str


class PackingCategory(TypedDict, total=False):
    name: str
    items: List[PackingItem]


class PackingList(TypedDict, total=False):
    categories: List[PackingCategory]
