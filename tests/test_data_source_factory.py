import json
import tempfile
import unittest
from pathlib import Path

from layers.data_sources.factory import build_data_source, DEFAULT_SOURCE_NAME
from layers.data_sources.base import CallableForecastDataSource
from layers.data_sources.file_source import JsonFileForecastDataSource


class DummySettings:
    def __init__(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)
        # provide defaults if not passed
        self.forecast_source = getattr(self, "forecast_source", DEFAULT_SOURCE_NAME)
        self.forecast_file_path = getattr(self, "forecast_file_path", None)


class TestDataSourceFactory(unittest.TestCase):
    def test_build_open_meteo_default(self):
        settings = DummySettings(forecast_source="open_meteo")
        ds = build_data_source(settings)
        self.assertIsInstance(ds, CallableForecastDataSource)

    def test_source_name_is_case_insensitive(self):
        ds = build_data_source(DummySettings(forecast_source="Open_Meteo"))
        self.assertIsInstance(ds, CallableForecastDataSource)

    def test_unknown_source_raises(self):
        settings = DummySettings(forecast_source="unknown-source")
        with self.assertRaises(ValueError):
            build_data_source(settings)

    def test_file_branch(self):
        settings = DummySettings(forecast_source="file", forecast_file_path="/tmp/forecast.json")
        ds = build_data_source(settings)
        self.assertIsInstance(ds, JsonFileForecastDataSource)
        self.assertEqual(ds.path, Path("/tmp/forecast.json"))

    def test_file_missing_path_raises(self):
        settings = DummySettings(forecast_source="file", forecast_file_path=None)
        with self.assertRaises(ValueError):
            build_data_source(settings)


class TestJsonFileForecastDataSource(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "forecast.json"

    def tearDown(self):
        self._tmp.cleanup()

    def _write(self, data):
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def test_wrapped_capture(self):
        forecast = {"current_weather": {"time": "2025-03-10T09:00", "temperature": 50.0}}
        self._write({"location": {"latitude": 40.7, "longitude": -74.0, "name": "New York"}, "forecast": forecast})
        ds = JsonFileForecastDataSource(self.path)

        location = ds.geocode("10001")
        self.assertEqual(location.name, "New York")
        self.assertEqual(location.latitude, 40.7)
        self.assertEqual(ds.fetch_forecast(location.latitude, location.longitude, timezone="auto"), forecast)

    def test_bare_capture_uses_zip_as_name(self):
        forecast = {"current_weather": {"time": "2025-03-10T09:00", "temperature": 50.0}}
        self._write(forecast)
        ds = JsonFileForecastDataSource(self.path)

        self.assertEqual(ds.geocode("98102").name, "98102")
        self.assertEqual(ds.fetch_forecast(0.0, 0.0), forecast)

    def test_missing_file_raises_os_error(self):
        ds = JsonFileForecastDataSource(self.path)
        with self.assertRaises(OSError):
            ds.fetch_forecast(0.0, 0.0)


if __name__ == "__main__":
    unittest.main()
