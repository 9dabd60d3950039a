"""Deterministic clothing recommendation logic.

This module converts a `ForecastDataset` into a `RecommendationResult`:
locate the hour that represents "now", derive the effective temperature and
its comfort category, compose spoken advice, scan the rest of the day for
notable changes, and build the display payload. Every function here is pure;
no I/O and no shared state.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Sequence

from layers.domain import (
    Background,
    ChangeKind,
    ChangeStatement,
    ClothingItem,
    DEFAULT_THRESHOLDS,
    Diagnostics,
    HourAnalysis,
    LaterToday,
    RecommendationResult,
    TemperatureCategory,
    Thresholds,
    VisualPayload,
)
from layers.forecast import ForecastDataset, describe_weather_code
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="recommendation_engine")


BASE_ADVICE: dict[TemperatureCategory, str] = {
    TemperatureCategory.EXTREME_COLD: "Wear heavy layers, insulated boots, and cover exposed skin.",
    TemperatureCategory.VERY_COLD: "Thermal base layers, heavy coat, gloves, and a warm hat.",
    TemperatureCategory.COLD: "Layers plus a warm sweater and winter jacket.",
    TemperatureCategory.COOL: "Long sleeves and a jacket or hoodie.",
    TemperatureCategory.MILD: "A light jacket or long-sleeve shirt.",
    TemperatureCategory.WARM: "Short sleeves or thin layers; maybe sunglasses.",
    TemperatureCategory.HOT: "Lightweight clothes; stay hydrated.",
    TemperatureCategory.VERY_HOT: "Minimal, breathable clothing and strong sun protection.",
}

SHORT_ADVICE: dict[TemperatureCategory, str] = {
    TemperatureCategory.EXTREME_COLD: "Bundle up with multiple insulating layers.",
    TemperatureCategory.VERY_COLD: "Heavy coat, thermal layers, winter gear.",
    TemperatureCategory.COLD: "Wear a warm jacket and layers.",
    TemperatureCategory.COOL: "A light jacket or hoodie should help.",
    TemperatureCategory.MILD: "Light layers are likely enough.",
    TemperatureCategory.WARM: "Short sleeves or light clothing.",
    TemperatureCategory.HOT: "Thin, breathable clothes, stay hydrated.",
    TemperatureCategory.VERY_HOT: "Minimal clothing and strong sun protection.",
}

_HEAVY = (
    ClothingItem(item="Heavy Coat", icon="🧥"),
    ClothingItem(item="Winter Hat", icon="🧢"),
    ClothingItem(item="Gloves", icon="🧤"),
    ClothingItem(item="Long Pants", icon="👖"),
)
_SUMMER = (
    ClothingItem(item="T-Shirt", icon="👕"),
    ClothingItem(item="Shorts", icon="🩳"),
)

CATEGORY_CLOTHING: dict[TemperatureCategory, tuple[ClothingItem, ...]] = {
    TemperatureCategory.EXTREME_COLD: _HEAVY,
    TemperatureCategory.VERY_COLD: _HEAVY,
    TemperatureCategory.COLD: _HEAVY,
    TemperatureCategory.COOL: (
        ClothingItem(item="Light Jacket", icon="🧥"),
        ClothingItem(item="Long Pants", icon="👖"),
    ),
    TemperatureCategory.MILD: (
        ClothingItem(item="Long Sleeve", icon="👕"),
        ClothingItem(item="Long Pants", icon="👖"),
    ),
    TemperatureCategory.WARM: _SUMMER,
    TemperatureCategory.HOT: _SUMMER,
    TemperatureCategory.VERY_HOT: (
        ClothingItem(item="Light Clothes", icon="👕"),
        ClothingItem(item="Shorts", icon="🩳"),
        ClothingItem(item="Hydration", icon="💧"),
    ),
}

RAIN_GEAR = (
    ClothingItem(item="Umbrella", icon="☂️"),
    ClothingItem(item="Rain Jacket", icon="🧥"),
)
SNOW_BOOTS = ClothingItem(item="Snow Boots", icon="👢")
SUNGLASSES = ClothingItem(item="Sunglasses", icon="🕶️")
SUN_PROTECTION = (
    ClothingItem(item="Sunscreen", icon="🧴"),
    ClothingItem(item="Hat", icon="👒"),
)
WIND_PROTECTION = ClothingItem(item="Wind Protection", icon="💨")

# first match wins
BACKGROUND_KEYWORDS: tuple[tuple[tuple[str, ...], Background], ...] = (
    (("rain", "drizzle"), Background.RAINY),
    (("snow",), Background.SNOWY),
    (("cloud", "overcast"), Background.OVERCAST),
    (("fog",), Background.FOGGY),
    (("thunder",), Background.STORMY),
)

LATER_TODAY_LEAD_IN = "Later today, watch for changes."


# ---------------------------------------------------------------------------
# Hour locator
# ---------------------------------------------------------------------------


def locate_current_hour(now: dt.datetime, times: Sequence[dt.datetime]) -> int | None:
    """
    Return the index of the hourly entry that best represents `now`, or None.

    Same-day entries at or before the current hour are preferred, stopping at
    an exact hour match. When nothing on the same day qualifies, fall back to
    the last entry at or before `now`.
    """
    same_day: int | None = None
    fallback: int | None = None
    today = now.date()

    for i, t in enumerate(times):
        if t <= now:
            fallback = i
        if t.date() == today and t.hour <= now.hour:
            same_day = i
            if t.hour == now.hour:
                break

    index = same_day if same_day is not None else fallback
    logger.debug(
        "Located current hour",
        extra={"now": now.isoformat(), "index": index, "hourly_count": len(times)},
    )
    return index


# ---------------------------------------------------------------------------
# Effective temperature + categories
# ---------------------------------------------------------------------------


def effective_temperature(temp_f: float, wind_mph: float, humidity: float,
                          thresholds: Thresholds = DEFAULT_THRESHOLDS) -> float:
    """Approximate perceived temperature from a simplified wind/humidity table."""
    eff = temp_f

    for band in thresholds.wind_bands:
        if wind_mph >= band.min_mph:
            eff -= band.reduction_f
            break

    # humid heat feels hotter, dry cold feels colder; keyed on the raw temperature
    if temp_f > thresholds.humid_temp_f and humidity > thresholds.humid_percent:
        eff += thresholds.humid_adjustment_f
    elif temp_f < thresholds.dry_temp_f and humidity < thresholds.dry_percent:
        eff -= thresholds.dry_adjustment_f

    return eff


def categorize(effective_f: float, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> TemperatureCategory:
    """Map an effective temperature onto one of the eight comfort categories."""
    categories = list(TemperatureCategory)
    for category, upper in zip(categories, thresholds.category_upper_bounds_f):
        if effective_f < upper:
            return category
    return categories[-1]


def category_distance(a: TemperatureCategory, b: TemperatureCategory) -> int:
    """How many steps apart two categories are."""
    return abs(a.rank - b.rank)


def format_hour(value: dt.datetime) -> str:
    """12-hour clock label, e.g. "3 PM"."""
    hour = value.hour
    suffix = "PM" if hour >= 12 else "AM"
    if hour == 0:
        hour = 12
    elif hour > 12:
        hour -= 12
    return f"{hour} {suffix}"


def round_half_up(value: float) -> int:
    """Round to the nearest degree with .5 going up (72.5 -> 73, -0.5 -> 0)."""
    return math.floor(value + 0.5)


# ---------------------------------------------------------------------------
# Spoken advice
# ---------------------------------------------------------------------------


def compose_recommendation(
    effective_f: float,
    precipitation_in: float,
    wind_mph: float,
    humidity: float,
    uv_index: float,
    weather_description: str,
    is_daytime: bool,
    *,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> str:
    """Build the spoken clothing advice for the current conditions."""
    category = categorize(effective_f, thresholds)
    clauses = [BASE_ADVICE.get(category, "Dress comfortably.")]

    if precipitation_in > thresholds.significant_precipitation_in:
        clauses.append("Bring a waterproof layer.")
    elif precipitation_in > thresholds.minimal_precipitation_in:
        clauses.append("Consider a light rain jacket.")

    desc = weather_description.lower()
    if "snow" in desc:
        clauses.append("Waterproof boots are recommended.")
    elif "thunderstorm" in desc:
        clauses.append("Stay safe and avoid open areas.")
    elif "fog" in desc:
        clauses.append("Wear bright clothing for visibility.")

    if wind_mph > thresholds.windproof_wind_mph and effective_f < thresholds.windproof_below_f:
        clauses.append("A windproof coat helps.")

    if humidity > thresholds.moisture_wicking_humidity and effective_f > thresholds.moisture_wicking_above_f:
        clauses.append("Moisture-wicking fabric is good in humidity.")

    if is_daytime:
        if uv_index >= thresholds.uv_high:
            clauses.append("UV is high, wear sunscreen and a hat.")
        elif uv_index >= thresholds.uv_moderate:
            clauses.append("Moderate UV, consider sun protection.")

    return f"It feels {category.words}. " + " ".join(clauses)


# ---------------------------------------------------------------------------
# Later today
# ---------------------------------------------------------------------------


def _hour_triggers(dataset: ForecastDataset, index: int, start_index: int,
                   current_category: TemperatureCategory,
                   thresholds: Thresholds) -> HourAnalysis:
    """Evaluate a single later hour without any deduplication."""
    hourly = dataset.hourly
    t = hourly.time[index]
    raw_temp = hourly.temperature[index]
    wind = hourly.wind_speed_at(index)
    humidity = hourly.humidity_at(index)
    precip = hourly.precipitation_at(index)
    code = hourly.weather_code[index]

    eff = category = difference = None
    if raw_temp is not None:
        eff = effective_temperature(raw_temp, wind, humidity, thresholds)
        category = categorize(eff, thresholds)
        difference = category_distance(category, current_category)

    triggers = {
        ChangeKind.TEMP_SWING: difference is not None and difference >= thresholds.temp_category_swing,
        ChangeKind.PRECIPITATION: precip > thresholds.significant_precipitation_in,
        ChangeKind.WIND: wind > thresholds.high_wind_mph and index <= start_index + thresholds.wind_forecast_hours,
    }
    logger.debug(
        "Later hour analysis",
        extra={
            "hour": format_hour(t),
            "effective_temperature": eff,
            "category": category.value if category is not None else None,
            "category_difference": difference,
            "triggers": {k.value: v for k, v in triggers.items()},
        },
    )

    return HourAnalysis(
        time=t,
        formatted_time=format_hour(t),
        raw_temperature=raw_temp,
        effective_temperature=eff,
        category=category,
        category_rank=category.rank if category is not None else None,
        category_difference=difference,
        wind_speed=wind,
        humidity=humidity,
        precipitation=precip,
        weather_code=code,
        weather_description=describe_weather_code(code),
        triggers=triggers,
    )


def _same_day_indices(dataset: ForecastDataset, start_index: int) -> range:
    """Indices after `start_index` that fall on the same calendar day."""
    times = dataset.hourly.time
    today = times[start_index].date()
    end = start_index + 1
    while end < len(times) and times[end].date() == today:
        end += 1
    return range(start_index + 1, end)


def analyze_later_hours(start_index: int | None, current_effective_f: float, dataset: ForecastDataset,
                        *, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> list[HourAnalysis]:
    """Per-hour analysis for the remainder of the located hour's day."""
    if start_index is None or not len(dataset.hourly) or start_index >= len(dataset.hourly):
        return []
    current_category = categorize(current_effective_f, thresholds)
    return [
        _hour_triggers(dataset, i, start_index, current_category, thresholds)
        for i in _same_day_indices(dataset, start_index)
    ]


def _statement_for(kind: ChangeKind, hour: HourAnalysis) -> str:
    """Spoken sentence for a fired trigger."""
    label = hour.formatted_time
    if kind == ChangeKind.TEMP_SWING:
        return f"Around {label}, it may feel {hour.category.words}. {SHORT_ADVICE.get(hour.category, '')}".rstrip()
    if kind == ChangeKind.PRECIPITATION:
        return f"Expect {hour.weather_description.lower()} near {label}, so bring rain gear."
    return f"Strong winds expected around {label}, consider wind protection."


def scan_later_today(start_index: int | None, current_effective_f: float, dataset: ForecastDataset,
                     *, thresholds: Thresholds = DEFAULT_THRESHOLDS,
                     hours: list[HourAnalysis] | None = None) -> LaterToday:
    """
    Report notable changes for the rest of today.

    - Each change kind fires at most once, at its first qualifying hour.
    - Wind alerts only consider the next `wind_forecast_hours` hours.
    - At most `max_later_statements` statements are kept, in scan order.
    """
    if hours is None:
        hours = analyze_later_hours(start_index, current_effective_f, dataset, thresholds=thresholds)
    if not hours:
        logger.debug("No later hours left today", extra={"start_index": start_index})
        return LaterToday()

    fired: set[ChangeKind] = set()
    statements: list[ChangeStatement] = []
    for hour in hours:
        for kind in (ChangeKind.TEMP_SWING, ChangeKind.PRECIPITATION, ChangeKind.WIND):
            if kind in fired or not hour.triggers.get(kind):
                continue
            fired.add(kind)
            statements.append(
                ChangeStatement(hour_label=hour.formatted_time, kind=kind, message=_statement_for(kind, hour))
            )
            logger.debug("Later-today trigger fired", extra={"kind": kind.value, "hour": hour.formatted_time})

    if not statements:
        logger.debug("No significant weather changes detected for today")
        return LaterToday()

    if len(statements) > thresholds.max_later_statements:
        logger.debug(
            "Limiting later-today statements",
            extra={"found": len(statements), "limit": thresholds.max_later_statements},
        )
        statements = statements[: thresholds.max_later_statements]

    summary = " ".join([LATER_TODAY_LEAD_IN, *(s.message for s in statements)])
    return LaterToday(statements=tuple(statements), summary=summary)


# ---------------------------------------------------------------------------
# Display payload
# ---------------------------------------------------------------------------


def pick_background(weather_description: str, is_daytime: bool) -> Background:
    """Background mood from the condition text, falling back to night/sunny."""
    desc = weather_description.lower()
    for keywords, background in BACKGROUND_KEYWORDS:
        if any(k in desc for k in keywords):
            return background
    return Background.SUNNY if is_daytime else Background.NIGHT


def build_visual_payload(
    weather_description: str,
    effective_f: float,
    precipitation_in: float,
    wind_mph: float,
    humidity: float,
    uv_index: float,
    is_daytime: bool,
    *,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
) -> VisualPayload:
    """
    Build background + clothing icons for the display.

    Items are appended group by group and never deduplicated, so a cold, wet
    day lists both the heavy coat and the rain jacket.
    """
    category = categorize(effective_f, thresholds)
    items: list[ClothingItem] = list(CATEGORY_CLOTHING.get(category, ()))

    if precipitation_in > thresholds.minimal_precipitation_in:
        items.extend(RAIN_GEAR)

    if "snow" in weather_description.lower():
        items.append(SNOW_BOOTS)

    if is_daytime and uv_index >= thresholds.uv_moderate:
        items.append(SUNGLASSES)
        if uv_index >= thresholds.uv_high:
            items.extend(SUN_PROTECTION)

    if wind_mph > thresholds.wind_protection_mph:
        items.append(WIND_PROTECTION)

    return VisualPayload(
        background=pick_background(weather_description, is_daytime),
        time_of_day="day" if is_daytime else "night",
        clothing_items=tuple(items),
        temperature=round_half_up(effective_f),
        temperature_category=category,
        weather_condition=weather_description,
        uv_index=uv_index,
        humidity=humidity,
        wind_speed=wind_mph,
    )


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


def analyze_forecast(dataset: ForecastDataset, *, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> RecommendationResult:
    """Pure function: run the full pipeline over one forecast dataset."""
    current = dataset.current
    hourly = dataset.hourly

    index = locate_current_hour(current.time, hourly.time)
    humidity = hourly.humidity_at(index)
    precipitation = hourly.precipitation_at(index)
    uv_index = dataset.uv_index
    is_daytime = dataset.is_daytime
    description = describe_weather_code(current.weather_code)

    eff = effective_temperature(current.temperature, current.wind_speed, humidity, thresholds)
    category = categorize(eff, thresholds)

    recommendation = compose_recommendation(
        eff, precipitation, current.wind_speed, humidity, uv_index, description, is_daytime,
        thresholds=thresholds,
    )
    later_hours = analyze_later_hours(index, eff, dataset, thresholds=thresholds)
    later = scan_later_today(index, eff, dataset, thresholds=thresholds, hours=later_hours)
    visual = build_visual_payload(
        description, eff, precipitation, current.wind_speed, humidity, uv_index, is_daytime,
        thresholds=thresholds,
    )

    temperature = round_half_up(current.temperature)
    spoken = f"It's about {temperature} degrees right now with {description.lower()} conditions. {recommendation}"
    if later.summary:
        spoken = f"{spoken} {later.summary}"

    diagnostics = Diagnostics(
        current_effective_temperature=eff,
        current_category=category,
        current_category_rank=category.rank,
        current_time=current.time,
        hourly_count=len(hourly),
        locator_index=index,
        hourly_start=hourly.time[0] if len(hourly) else None,
        hourly_end=hourly.time[-1] if len(hourly) else None,
        later_analysis=tuple(later_hours),
    )

    logger.info(
        "Computed recommendation",
        extra={
            "effective_temperature": eff,
            "category": category.value,
            "locator_index": index,
            "later_statements": len(later.statements),
        },
    )

    return RecommendationResult(
        spoken_text=spoken,
        recommendation=recommendation,
        temperature=temperature,
        weather_description=description,
        effective_temperature=eff,
        temperature_category=category,
        later_today_summary=later.summary,
        later_statements=later.statements,
        visual_payload=visual,
        diagnostics=diagnostics,
    )
