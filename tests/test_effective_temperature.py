import pytest

from layers.domain import TemperatureCategory, Thresholds, WindBand
from layers.recommendation_engine import categorize, category_distance, effective_temperature


@pytest.mark.parametrize(
    "wind, reduction",
    [
        (0.0, 0),
        (4.9, 0),
        (5.0, 4),
        (10.9, 4),
        (11.0, 8),
        (20.9, 8),
        (21.0, 12),
        (30.9, 12),
        (31.0, 18),
        (60.0, 18),
    ],
)
def test_wind_bands_do_not_overlap(wind, reduction):
    assert effective_temperature(60.0, wind, 50.0) == 60.0 - reduction


def test_humid_heat_feels_hotter():
    assert effective_temperature(75.0, 0.0, 80.0) == 83.0
    # both thresholds are strict
    assert effective_temperature(70.0, 0.0, 80.0) == 70.0
    assert effective_temperature(75.0, 0.0, 70.0) == 75.0


def test_dry_cold_feels_colder():
    assert effective_temperature(40.0, 0.0, 20.0) == 37.0
    assert effective_temperature(50.0, 0.0, 20.0) == 50.0
    assert effective_temperature(40.0, 0.0, 30.0) == 40.0


def test_wind_and_humidity_adjustments_both_apply():
    # -8 for 15 mph, +8 for humid heat
    assert effective_temperature(80.0, 15.0, 90.0) == 80.0
    # -18 for 35 mph, -3 for dry cold
    assert effective_temperature(10.0, 35.0, 10.0) == -11.0


def test_no_clamping():
    assert effective_temperature(-30.0, 40.0, 50.0) == -48.0
    assert effective_temperature(110.0, 0.0, 90.0) == 118.0


def test_effective_temperature_is_deterministic():
    first = effective_temperature(42.5, 12.3, 27.0)
    assert all(effective_temperature(42.5, 12.3, 27.0) == first for _ in range(5))


def test_custom_wind_bands():
    thresholds = Thresholds(wind_bands=(WindBand(min_mph=10.0, reduction_f=5.0),))
    assert effective_temperature(60.0, 9.0, 50.0, thresholds) == 60.0
    assert effective_temperature(60.0, 40.0, 50.0, thresholds) == 55.0


@pytest.mark.parametrize(
    "temp, expected",
    [
        (-1.0, TemperatureCategory.EXTREME_COLD),
        (-0.01, TemperatureCategory.EXTREME_COLD),
        (0.0, TemperatureCategory.VERY_COLD),
        (19.9, TemperatureCategory.VERY_COLD),
        (20.0, TemperatureCategory.COLD),
        (34.9, TemperatureCategory.COLD),
        (35.0, TemperatureCategory.COOL),
        (50.0, TemperatureCategory.MILD),
        (65.0, TemperatureCategory.WARM),
        (79.9, TemperatureCategory.WARM),
        (80.0, TemperatureCategory.HOT),
        (90.0, TemperatureCategory.VERY_HOT),
        (130.0, TemperatureCategory.VERY_HOT),
    ],
)
def test_category_boundaries(temp, expected):
    assert categorize(temp) == expected


def test_category_is_monotonic_and_covers_all_eight():
    temps = [t / 2 for t in range(-40, 220)]
    ranks = [categorize(t).rank for t in temps]
    assert ranks == sorted(ranks)
    assert set(ranks) == set(range(8))


def test_category_rank_and_words():
    assert TemperatureCategory.EXTREME_COLD.rank == 0
    assert TemperatureCategory.VERY_HOT.rank == 7
    assert TemperatureCategory.VERY_COLD.words == "very cold"
    assert TemperatureCategory.MILD.words == "mild"


def test_category_distance_is_symmetric():
    assert category_distance(TemperatureCategory.MILD, TemperatureCategory.COLD) == 2
    assert category_distance(TemperatureCategory.COLD, TemperatureCategory.MILD) == 2
    assert category_distance(TemperatureCategory.HOT, TemperatureCategory.HOT) == 0


def test_wind_bands_must_be_ordered_highest_first():
    with pytest.raises(ValueError):
        Thresholds(wind_bands=(
            WindBand(min_mph=5.0, reduction_f=4.0),
            WindBand(min_mph=31.0, reduction_f=18.0),
        ))
    with pytest.raises(ValueError):
        Thresholds(wind_bands=(
            WindBand(min_mph=20.0, reduction_f=8.0),
            WindBand(min_mph=20.0, reduction_f=4.0),
        ))
