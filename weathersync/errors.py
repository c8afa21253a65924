"""Error types shared by the remote client, payload parsing and the coordinator."""


class WeatherSyncError(Exception):
    """Base class for weathersync errors."""


class FetchError(WeatherSyncError):
    """Raised when the remote weather source fails or returns a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidLocationQuery(FetchError):
    """Raised before any request when a location query matches no lookup form."""


class PayloadParseError(WeatherSyncError):
    """Raised when a payload does not have the expected shape."""
