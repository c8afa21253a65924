"""Default locations and user-selectable options."""

DEFAULT_LOCATION = "London"

# Auto-refresh choices offered to the user, in minutes. 0 disables auto-refresh.
REFRESH_INTERVAL_OPTIONS: list[int] = [0, 15, 30, 60]

API_KEY_ENV = "OPENWEATHER_API_KEY"
