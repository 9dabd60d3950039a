import pytest

from layers.domain import Background, ClothingItem, TemperatureCategory
from layers.recommendation_engine import (
    BASE_ADVICE,
    CATEGORY_CLOTHING,
    SHORT_ADVICE,
    build_visual_payload,
    compose_recommendation,
    pick_background,
)


def _advice(eff=60.0, precip=0.0, wind=0.0, humidity=50.0, uv=0.0, desc="Clear Sky", day=True):
    return compose_recommendation(eff, precip, wind, humidity, uv, desc, day)


def _items(payload):
    return [c.item for c in payload.clothing_items]


def test_lookup_tables_cover_every_category():
    for table in (BASE_ADVICE, SHORT_ADVICE, CATEGORY_CLOTHING):
        assert set(table) == set(TemperatureCategory)


def test_prefix_and_base_clause():
    text = _advice(eff=55.0)
    assert text.startswith("It feels mild. ")
    assert BASE_ADVICE[TemperatureCategory.MILD] in text


def test_precipitation_clauses():
    assert "Bring a waterproof layer." in _advice(precip=0.3)
    assert "Consider a light rain jacket." not in _advice(precip=0.3)
    assert "Consider a light rain jacket." in _advice(precip=0.25)
    assert "Consider a light rain jacket." in _advice(precip=0.01)
    text = _advice(precip=0.0)
    assert "waterproof layer" not in text and "rain jacket" not in text


def test_condition_clause_first_match_wins():
    assert "Waterproof boots are recommended." in _advice(desc="Light Snow Showers")
    assert "Stay safe and avoid open areas." in _advice(desc="thunderstorm with light hail")
    assert "Wear bright clothing for visibility." in _advice(desc="Foggy with Rime")
    # "snow" outranks "fog" when both appear
    text = _advice(desc="Snow and Fog")
    assert "Waterproof boots" in text
    assert "bright clothing" not in text


def test_wind_cold_clause_needs_both_conditions():
    assert "A windproof coat helps." in _advice(eff=40.0, wind=12.0)
    assert "A windproof coat helps." not in _advice(eff=40.0, wind=10.0)
    assert "A windproof coat helps." not in _advice(eff=50.0, wind=20.0)


def test_humid_warm_clause():
    assert "Moisture-wicking fabric is good in humidity." in _advice(eff=75.0, humidity=80.0)
    assert "Moisture-wicking" not in _advice(eff=70.0, humidity=80.0)
    assert "Moisture-wicking" not in _advice(eff=75.0, humidity=70.0)


def test_uv_clauses_only_in_daytime():
    assert "UV is high, wear sunscreen and a hat." in _advice(uv=6.0)
    assert "Moderate UV, consider sun protection." in _advice(uv=3.0)
    assert "UV" not in _advice(uv=2.9)
    assert "UV" not in _advice(uv=9.0, day=False)


def test_clause_order():
    text = _advice(eff=30.0, precip=0.5, wind=15.0, uv=7.0, desc="Heavy Snow")
    order = [
        text.index("It feels cold."),
        text.index("Layers plus"),
        text.index("Bring a waterproof layer."),
        text.index("Waterproof boots"),
        text.index("A windproof coat helps."),
        text.index("UV is high"),
    ]
    assert order == sorted(order)


def test_background_priority():
    assert pick_background("Light Rain", True) == Background.RAINY
    assert pick_background("light rain showers", False) == Background.RAINY
    assert pick_background("RAIN", False) == Background.RAINY
    assert pick_background("Moderate Drizzle", True) == Background.RAINY
    assert pick_background("Heavy Snow", True) == Background.SNOWY
    assert pick_background("Partly Cloudy", False) == Background.OVERCAST
    assert pick_background("Overcast", True) == Background.OVERCAST
    assert pick_background("Foggy", True) == Background.FOGGY
    assert pick_background("Thunderstorm", True) == Background.STORMY
    assert pick_background("Clear Sky", False) == Background.NIGHT
    assert pick_background("Clear Sky", True) == Background.SUNNY


def test_clothing_groups_per_category():
    assert _items(build_visual_payload("Clear Sky", -5.0, 0.0, 0.0, 50.0, 0.0, False)) == [
        "Heavy Coat", "Winter Hat", "Gloves", "Long Pants",
    ]
    assert _items(build_visual_payload("Clear Sky", 40.0, 0.0, 0.0, 50.0, 0.0, False)) == ["Light Jacket", "Long Pants"]
    assert _items(build_visual_payload("Clear Sky", 60.0, 0.0, 0.0, 50.0, 0.0, False)) == ["Long Sleeve", "Long Pants"]
    assert _items(build_visual_payload("Clear Sky", 85.0, 0.0, 0.0, 50.0, 0.0, False)) == ["T-Shirt", "Shorts"]
    assert _items(build_visual_payload("Clear Sky", 95.0, 0.0, 0.0, 50.0, 0.0, False)) == [
        "Light Clothes", "Shorts", "Hydration",
    ]


def test_weather_groups_append_in_order():
    payload = build_visual_payload("Light Snow", 25.0, 0.1, 20.0, 50.0, 7.0, True)
    assert _items(payload) == [
        "Heavy Coat", "Winter Hat", "Gloves", "Long Pants",
        "Umbrella", "Rain Jacket",
        "Snow Boots",
        "Sunglasses", "Sunscreen", "Hat",
        "Wind Protection",
    ]
    assert payload.background == Background.SNOWY
    assert payload.time_of_day == "day"


def test_uv_items_need_daylight_and_moderate_uv():
    assert "Sunglasses" in _items(build_visual_payload("Clear Sky", 70.0, 0.0, 0.0, 50.0, 3.0, True))
    assert "Sunscreen" not in _items(build_visual_payload("Clear Sky", 70.0, 0.0, 0.0, 50.0, 3.0, True))
    assert "Sunglasses" not in _items(build_visual_payload("Clear Sky", 70.0, 0.0, 0.0, 50.0, 9.0, False))


def test_wind_protection_threshold():
    assert "Wind Protection" not in _items(build_visual_payload("Clear Sky", 60.0, 0.0, 15.0, 50.0, 0.0, True))
    assert "Wind Protection" in _items(build_visual_payload("Clear Sky", 60.0, 0.0, 15.1, 50.0, 0.0, True))


def test_duplicate_items_are_kept():
    # A very cold, wet, sunny hour lists two coats (heavy + rain jacket)
    # and two hats (winter + sun).
    payload = build_visual_payload("Light Rain", 10.0, 0.2, 0.0, 50.0, 8.0, True)
    items = _items(payload)
    assert items.count("Long Pants") == 1
    assert "Winter Hat" in items and "Hat" in items
    icons = [c.icon for c in payload.clothing_items]
    assert icons.count("🧥") == 2


def test_visual_payload_fields():
    payload = build_visual_payload("Partly Cloudy", 64.6, 0.0, 4.0, 55.0, 2.0, False)
    assert payload.temperature == 65
    assert payload.temperature_category == TemperatureCategory.MILD
    assert payload.weather_condition == "Partly Cloudy"
    assert payload.time_of_day == "night"
    assert payload.uv_index == 2.0
    assert payload.humidity == 55.0
    assert payload.wind_speed == 4.0


def test_result_collections_cannot_be_changed_in_place():
    payload = build_visual_payload("Light Rain", 40.0, 0.2, 20.0, 50.0, 1.0, True)
    assert isinstance(payload.clothing_items, tuple)
    with pytest.raises(AttributeError):
        payload.clothing_items.append(ClothingItem(item="Scarf", icon="🧣"))
