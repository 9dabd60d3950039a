"""Domain vocabulary and strict schemas for clothing recommendations.

This module defines the stable contract between the recommendation engine and
its callers (HTTP API, voice skill, display renderer): enums, the threshold
table, and Pydantic models for the payloads that flow out of the engine. No
interpretation logic lives here.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling; results are immutable."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class TemperatureCategory(str, Enum):
    """Comfort category for an effective temperature, coldest first."""
    EXTREME_COLD = "extreme_cold"
    VERY_COLD = "very_cold"
    COLD = "cold"
    COOL = "cool"
    MILD = "mild"
    WARM = "warm"
    HOT = "hot"
    VERY_HOT = "very_hot"

    @property
    def rank(self) -> int:
        """Position in the cold-to-hot ordering (0-7)."""
        return _CATEGORY_ORDER.index(self)

    @property
    def words(self) -> str:
        """Spoken form, e.g. "very cold"."""
        return self.value.replace("_", " ")


_CATEGORY_ORDER: Tuple[TemperatureCategory, ...] = tuple(TemperatureCategory)


class ChangeKind(str, Enum):
    """Kinds of notable change reported for the rest of the day."""
    TEMP_SWING = "temp_swing"
    PRECIPITATION = "precipitation"
    WIND = "wind"


class Background(str, Enum):
    """Background mood tag for the display."""
    SUNNY = "sunny"
    RAINY = "rainy"
    SNOWY = "snowy"
    OVERCAST = "overcast"
    FOGGY = "foggy"
    STORMY = "stormy"
    NIGHT = "night"


class WindBand(_StrictBaseModel):
    """Wind speeds at or above `min_mph` feel `reduction_f` degrees colder."""
    min_mph: float
    reduction_f: float


class Thresholds(_StrictBaseModel):
    """Fixed tuning table for the recommendation engine (°F, mph, inches, %)."""

    # exclusive upper bounds, coldest first; anything above the last is very hot
    category_upper_bounds_f: Tuple[float, ...] = (0.0, 20.0, 35.0, 50.0, 65.0, 80.0, 90.0)

    # highest band first; the first band whose minimum is reached applies
    wind_bands: Tuple[WindBand, ...] = (
        WindBand(min_mph=31.0, reduction_f=18.0),
        WindBand(min_mph=21.0, reduction_f=12.0),
        WindBand(min_mph=11.0, reduction_f=8.0),
        WindBand(min_mph=5.0, reduction_f=4.0),
    )

    humid_temp_f: float = 70.0
    humid_percent: float = 70.0
    humid_adjustment_f: float = 8.0
    dry_temp_f: float = 50.0
    dry_percent: float = 30.0
    dry_adjustment_f: float = 3.0

    significant_precipitation_in: float = 0.25
    minimal_precipitation_in: float = 0.0

    windproof_wind_mph: float = 10.0
    windproof_below_f: float = 50.0
    moisture_wicking_humidity: float = 70.0
    moisture_wicking_above_f: float = 70.0

    uv_moderate: float = 3.0
    uv_high: float = 6.0

    temp_category_swing: int = 2
    high_wind_mph: float = 25.0
    wind_forecast_hours: int = 8
    max_later_statements: int = 2

    wind_protection_mph: float = 15.0

    @field_validator("wind_bands", mode="after")
    @classmethod
    def bands_highest_first(cls, v: Tuple[WindBand, ...]) -> Tuple[WindBand, ...]:
        """The first band reached wins, so minimums must strictly decrease."""
        minimums = [band.min_mph for band in v]
        if any(later >= earlier for earlier, later in zip(minimums, minimums[1:])):
            raise ValueError(f"wind_bands must be ordered by min_mph, highest first; got {minimums}")
        return v


DEFAULT_THRESHOLDS = Thresholds()


class ClothingItem(_StrictBaseModel):
    """One garment/accessory with its display icon."""
    item: str
    icon: str


class VisualPayload(_StrictBaseModel):
    """Structured display data handed to the device-markup renderer."""
    background: Background
    time_of_day: str
    clothing_items: Tuple[ClothingItem, ...] = ()
    temperature: int
    temperature_category: TemperatureCategory
    weather_condition: str
    uv_index: float | None = None
    humidity: float | None = None
    wind_speed: float | None = None


class ChangeStatement(_StrictBaseModel):
    """A single "later today" alert."""
    hour_label: str
    kind: ChangeKind
    message: str


class LaterToday(_StrictBaseModel):
    """Outcome of scanning the rest of the day."""
    statements: Tuple[ChangeStatement, ...] = ()
    summary: str = ""


class HourAnalysis(_StrictBaseModel):
    """Per-hour diagnostics row from the later-today scan."""
    time: datetime
    formatted_time: str
    raw_temperature: float | None = None
    effective_temperature: float | None = None
    category: TemperatureCategory | None = None
    category_rank: int | None = None
    category_difference: int | None = None
    wind_speed: float
    humidity: float
    precipitation: float
    weather_code: int | None = None
    weather_description: str
    triggers: Dict[ChangeKind, bool] = Field(default_factory=dict)


class Diagnostics(_StrictBaseModel):
    """How the engine read the dataset; useful when tuning thresholds."""
    current_effective_temperature: float
    current_category: TemperatureCategory
    current_category_rank: int
    current_time: datetime
    hourly_count: int
    locator_index: int | None = None
    hourly_start: datetime | None = None
    hourly_end: datetime | None = None
    later_analysis: Tuple[HourAnalysis, ...] = ()


class RecommendationResult(_StrictBaseModel):
    """Full engine output for a single request."""
    spoken_text: str
    recommendation: str
    temperature: int
    weather_description: str
    effective_temperature: float
    temperature_category: TemperatureCategory
    later_today_summary: str = ""
    later_statements: Tuple[ChangeStatement, ...] = ()
    visual_payload: VisualPayload
    diagnostics: Diagnostics
