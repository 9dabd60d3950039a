"""Error types raised at the edges of the recommendation pipeline."""


class InvalidDataset(ValueError):
    """The parsed forecast violates the index-aligned hourly contract."""


class UpstreamUnavailable(RuntimeError):
    """Geocoding or forecast data could not be obtained from the provider."""
